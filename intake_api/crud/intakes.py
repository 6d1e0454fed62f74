"""CRUD helpers for intakes stored in the ``jrm`` table.

Every helper issues exactly one statement. Path ids are used as given and a
missing row is reported as a zero count, never as an error.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import delete, insert, text, update
from sqlalchemy.orm import Session

from ..models.intake import Intake

logger = logging.getLogger(__name__)

_MUTABLE_FIELDS = (
    "intake_name",
    "intake_comments",
    "intake_tags",
    "status",
    "attachment",
    "date",
    "approved_date",
)


def _read_all(db: Session, table: str) -> list[dict[str, Any]]:
    # SELECT * keeps columns that older databases carry beyond the models.
    return [dict(row) for row in db.execute(text(f"SELECT * FROM {table}")).mappings().all()]


def list_data(db: Session) -> dict[str, list[dict[str, Any]]]:
    """Return every intake and every metric; the client joins on ``Intake ID``."""

    return {"jrm": _read_all(db, "jrm"), "metrics": _read_all(db, "metrics")}


def get_intake(db: Session, intake_id: str) -> Intake | None:
    return db.get(Intake, intake_id)


def create_intake(db: Session, payload: dict) -> int | None:
    """Insert one intake and return the SQLite rowid of the new row."""

    values = {"intake_id": payload.get("intake_id")}
    values.update({field: payload.get(field) for field in _MUTABLE_FIELDS})
    result = db.execute(insert(Intake.__table__).values(**values))
    db.commit()
    logger.info("intake.created", extra={"extra_data": {"intake_id": values["intake_id"]}})
    return result.lastrowid


def update_intake(db: Session, intake_id: str, payload: dict) -> int:
    """Overwrite every mutable column; keys missing from ``payload`` become NULL."""

    values = {field: payload.get(field) for field in _MUTABLE_FIELDS}
    stmt = update(Intake.__table__).where(Intake.__table__.c.intake_id == intake_id).values(**values)
    result = db.execute(stmt)
    db.commit()
    return result.rowcount


def set_intake_status(db: Session, intake_id: str, status: str | None) -> int:
    return _set_column(db, intake_id, status=status)


def set_intake_attachment(db: Session, intake_id: str, attachment: str | None) -> int:
    return _set_column(db, intake_id, attachment=attachment)


def set_approved_date(db: Session, intake_id: str, approved_date: Any) -> int:
    """Write ``Approved Date`` on one intake. Caller owns the transaction."""

    stmt = (
        update(Intake.__table__)
        .where(Intake.__table__.c.intake_id == intake_id)
        .values(approved_date=approved_date)
    )
    return db.execute(stmt).rowcount


def _set_column(db: Session, intake_id: str, **values: Any) -> int:
    stmt = update(Intake.__table__).where(Intake.__table__.c.intake_id == intake_id).values(**values)
    result = db.execute(stmt)
    db.commit()
    return result.rowcount


def delete_intake(db: Session, intake_id: str) -> int:
    # Metrics for the intake are left in place.
    result = db.execute(delete(Intake.__table__).where(Intake.__table__.c.intake_id == intake_id))
    db.commit()
    logger.info(
        "intake.deleted",
        extra={"extra_data": {"intake_id": intake_id, "deleted": result.rowcount}},
    )
    return result.rowcount
