"""
app/parsers package marker.
"""

from app.parsers.field_parsers import (
    StatusParseResult,
    extract_contract_number,
    parse_deadline,
    parse_percentage,
    parse_status,
    parse_text,
)

__all__ = [
    "StatusParseResult",
    "extract_contract_number",
    "parse_deadline",
    "parse_percentage",
    "parse_status",
    "parse_text",
]
