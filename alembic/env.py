"""
alembic/env.py

Migration environment for the milestone import schema.

The URL comes from ``-x db_url=...``, then ``sqlalchemy.url`` in alembic.ini,
then the same environment lookup the importer uses (db.config). Autogenerate
only compares tables registered on Base.metadata, so tables the host
application keeps in the same database are never proposed for dropping.
"""

from __future__ import annotations

from logging.config import fileConfig
from typing import Any

from alembic import context
from sqlalchemy import engine_from_config, pool

from db.base import Base
from db.config import normalize_postgres_url, resolve_database_url
from db.models import (  # noqa: F401  registers milestone tables on Base.metadata
    AuditLog,
    Department,
    IngestionJob,
    Milestone,
    Project,
    User,
)

SUPPORTED_URL_PREFIXES = ("postgresql", "sqlite")

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _migration_url() -> str:
    override = context.get_x_argument(as_dictionary=True).get("db_url", "").strip()
    ini_url = (config.get_main_option("sqlalchemy.url") or "").strip()
    url = normalize_postgres_url(override or ini_url) if (override or ini_url) else resolve_database_url()

    if not url.startswith(SUPPORTED_URL_PREFIXES):
        raise RuntimeError(f"Unsupported migration URL scheme: {url.split(':', 1)[0]}")
    return url


def _include_object(obj: Any, name: str | None, type_: str, reflected: bool, compare_to: Any) -> bool:
    if type_ == "table" and reflected and name not in target_metadata.tables:
        return False
    return True


def _configure(url: str, **kwargs: Any) -> None:
    context.configure(
        target_metadata=target_metadata,
        include_object=_include_object,
        compare_type=True,
        render_as_batch=url.startswith("sqlite"),
        **kwargs,
    )


def run_migrations_offline() -> None:
    url = _migration_url()
    _configure(url, url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    url = _migration_url()
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = url
    engine = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with engine.connect() as connection:
        _configure(url, connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
