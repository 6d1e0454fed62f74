"""Idempotent schema bootstrap for SQLite databases."""

from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import Table, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from .session import Base

logger = logging.getLogger(__name__)

# Only ADD columns and indexes. Databases created by older tooling may lack
# some of what the models expect; nothing is ever dropped or renamed.

METRICS_INTAKE_INDEX = "ux_metrics_intake_id"


def _quote(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _table_columns(engine: Engine, table: str) -> list[dict[str, object]]:
    """SQLite's description of ``table``; empty when the table is absent."""

    with engine.connect() as conn:
        return conn.execute(text(f"PRAGMA table_info({_quote(table)})")).mappings().all()


def _add_column_sqlite(engine: Engine, table: str, col_def: str) -> None:
    """ALTER TABLE ADD COLUMN helper."""
    with engine.begin() as conn:
        conn.execute(text(f"ALTER TABLE {_quote(table)} ADD COLUMN {col_def}"))


def _create_index_if_not_exists(engine: Engine, table: str, name: str, cols: Iterable[str], unique: bool = False) -> None:
    cols_sql = ", ".join(_quote(col) for col in cols)
    unique_sql = "UNIQUE " if unique else ""
    with engine.begin() as conn:
        conn.execute(text(f"CREATE {unique_sql}INDEX IF NOT EXISTS {name} ON {_quote(table)} ({cols_sql})"))


def _add_missing_columns(engine: Engine, table: Table) -> list[str]:
    existing = {row["name"] for row in _table_columns(engine, table.name)}
    added: list[str] = []
    for column in table.columns:
        if column.name in existing:
            continue
        col_type = column.type.compile(dialect=engine.dialect)
        _add_column_sqlite(engine, table.name, f"{_quote(column.name)} {col_type}")
        added.append(column.name)
    return added


def _ensure_one_metric_per_intake(engine: Engine) -> None:
    """Give a legacy ``metrics`` table (no primary key) a unique index on Intake ID."""

    columns = {row["name"]: row for row in _table_columns(engine, "metrics")}
    intake_col = columns.get("Intake ID")
    if intake_col is None or intake_col["pk"]:
        return
    try:
        _create_index_if_not_exists(engine, "metrics", METRICS_INTAKE_INDEX, ["Intake ID"], unique=True)
    except IntegrityError as exc:
        # Existing duplicate rows: the service still runs, guarded by the
        # application check alone, until the rows are cleaned up.
        logger.warning(
            "schema.unique_index_skipped",
            extra={"extra_data": {"table": "metrics", "index": METRICS_INTAKE_INDEX, "error": str(exc.orig)}},
        )


def run_migrations(engine: Engine) -> None:
    """Create missing tables, then add any columns an older schema lacks."""

    # Importing the models registers their tables on ``Base.metadata``.
    from ..models import intake as _intake  # noqa: F401
    from ..models import metric as _metric  # noqa: F401

    Base.metadata.create_all(bind=engine)
    if engine.dialect.name != "sqlite":
        return
    for table in Base.metadata.sorted_tables:
        added = _add_missing_columns(engine, table)
        if added:
            logger.info(
                "schema.columns_added",
                extra={"extra_data": {"table": table.name, "columns": added}},
            )
    _ensure_one_metric_per_intake(engine)
