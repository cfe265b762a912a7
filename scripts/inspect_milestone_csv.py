"""
Inspect how a milestone CSV export would be read, without touching the database.
"""

from __future__ import annotations

import argparse
import csv
import json
from typing import Any

from app.config import get_milestone_import_settings, normalize_delimiter
from app.logging_utils import configure_logging
from app.parsers.field_parsers import parse_deadline, parse_percentage, parse_status, parse_text
from app.services.milestone_import_service import open_source_lines, read_source


def _parsed_values(canonical_row: dict[str, str | None]) -> dict[str, Any]:
    deadline = parse_deadline(canonical_row.get("deadline"))
    status = parse_status(canonical_row.get("status"))
    return {
        "project": parse_text(canonical_row.get("project")),
        "milestone": parse_text(canonical_row.get("milestone")),
        "deadline": deadline.isoformat() if deadline is not None else None,
        "completion_percentage": parse_percentage(canonical_row.get("progress")),
        "status": status.status.value,
        "status_recognized": status.recognized,
    }


def inspect_source(path: str, *, delimiter: str, encoding: str, rows: int) -> dict[str, Any]:
    with open_source_lines(path, encoding=encoding) as lines:
        parsed = read_source(lines, delimiter=delimiter)
        if parsed is None:
            return {"path": path, "error": "No header line found."}

        sample: list[dict[str, Any]] = []
        for row_number, cells in parsed.rows:
            if len(sample) >= rows:
                break
            canonical_row = parsed.mapping.map_row(parsed.mapping.build_raw_row(cells))
            sample.append(
                {
                    "row_number": row_number,
                    "raw": canonical_row,
                    "parsed": _parsed_values(canonical_row),
                }
            )

    return {
        "path": path,
        "delimiter": parsed.delimiter,
        "headers": [
            {"raw": raw, "field": field}
            for raw, field in zip(parsed.mapping.raw_headers, parsed.mapping.fields)
        ],
        "recognized_fields": list(parsed.mapping.recognized_fields),
        "unrecognized_headers": list(parsed.mapping.unrecognized),
        "rows": sample,
    }


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    parser = argparse.ArgumentParser(description="Show the header mapping and parsed sample rows of a milestone CSV.")
    parser.add_argument("path", help="Path to the milestone CSV file.")
    parser.add_argument("--rows", dest="rows", type=int, default=5, help="Number of data rows to show.")
    parser.add_argument("--delimiter", dest="delimiter", default=None)
    parser.add_argument("--encoding", dest="encoding", default=None)
    args = parser.parse_args(argv)

    settings = get_milestone_import_settings()
    try:
        report = inspect_source(
            args.path,
            delimiter=normalize_delimiter(args.delimiter, settings.delimiter),
            encoding=args.encoding or settings.encoding,
            rows=max(0, args.rows),
        )
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        report = {"path": args.path, "error": str(exc)}

    print(json.dumps(report, indent=2, ensure_ascii=False))
    if "error" in report or not report["recognized_fields"]:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
