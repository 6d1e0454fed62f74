"""CRUD helpers for metric rows and their consistency rules with ``jrm``.

A metric may only be created for an intake that exists, and only once per
intake. Creating or editing a metric can also write ``Approved Date`` back to
the intake; that write runs in its own transaction so a failure there never
undoes the metric write, it only downgrades the outcome to a warning.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.errors import DuplicateMetricError, IntakeNotFoundError, MetricNotFoundError, store_error_message
from ..core.metric_fields import KEY_TO_COLUMN, METRIC_FIELDS, normalize_intake_id
from ..models.metric import Metric
from .intakes import get_intake, set_approved_date

logger = logging.getLogger(__name__)

APPROVED_DATE_KEY = "approvedDate"
CREATE_WARNING = "Metrics inserted, but failed to update Approved Date on JRM"
UPDATE_WARNING = "Metrics updated but failed to update JRM approved date"

_metrics = Metric.__table__


@dataclass
class MetricWriteResult:
    intake_id: str
    row_id: int | None = None
    changes: int = 0
    approved_date: Any = None
    approved_date_propagated: bool = False
    warning: str | None = None


def metric_exists(db: Session, intake_id: str) -> bool:
    stmt = select(Metric.intake_id).where(Metric.intake_id == intake_id).limit(1)
    return db.execute(stmt).first() is not None


def get_metric(db: Session, intake_id: Any) -> Metric | None:
    return db.get(Metric, normalize_intake_id(intake_id))


def _propagate_approved_date(db: Session, intake_id: str, approved_date: Any) -> str | None:
    """Copy ``approved_date`` onto the intake. Returns the store error, if any."""

    try:
        set_approved_date(db, intake_id, approved_date)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning(
            "metrics.approved_date_not_propagated",
            exc_info=exc,
            extra={"extra_data": {"intake_id": intake_id}},
        )
        return store_error_message(exc)
    return None


def create_metric(
    db: Session,
    raw_intake_id: Any,
    values: Mapping[str, Any],
    approved_date: Any = None,
) -> MetricWriteResult:
    """Insert the metric row for an intake, then stamp the intake's approved date.

    ``values`` maps ``Metric`` attribute names to values; attributes it does
    not mention are stored as NULL.
    """

    intake_id = normalize_intake_id(raw_intake_id)
    if get_intake(db, intake_id) is None:
        raise IntakeNotFoundError(f"Intake ID {intake_id} does not exist")
    if metric_exists(db, intake_id):
        raise DuplicateMetricError(f"Metrics for {intake_id} already exist")

    row = {field.attribute: values.get(field.attribute) for field in METRIC_FIELDS}
    try:
        result = db.execute(insert(_metrics).values(intake_id=intake_id, **row))
        db.commit()
    except IntegrityError:
        # Another request inserted the same intake between the check and here.
        db.rollback()
        if metric_exists(db, intake_id):
            raise DuplicateMetricError(f"Metrics for {intake_id} already exist") from None
        raise
    logger.info("metrics.created", extra={"extra_data": {"intake_id": intake_id}})

    outcome = MetricWriteResult(intake_id=intake_id, row_id=result.lastrowid, approved_date=approved_date)
    if _propagate_approved_date(db, intake_id, approved_date) is not None:
        outcome.warning = CREATE_WARNING
    else:
        outcome.approved_date_propagated = True
    return outcome


def merge_metric_values(existing: Metric, updates: Mapping[str, Any]) -> dict[str, Any]:
    """Stored values overlaid with every recognised key present in ``updates``.

    A key that is present with a ``None`` value clears the column.
    """

    merged: dict[str, Any] = {}
    for field in METRIC_FIELDS:
        if field.payload_key in updates:
            merged[field.attribute] = updates[field.payload_key]
        else:
            merged[field.attribute] = getattr(existing, field.attribute)
    return merged


def update_metric(db: Session, raw_intake_id: Any, updates: Mapping[str, Any]) -> MetricWriteResult:
    """Merge ``updates`` (payload keys) into the stored metric row.

    All columns are rewritten even when ``updates`` carries no recognised key.
    """

    intake_id = normalize_intake_id(raw_intake_id)
    existing = get_metric(db, intake_id)
    if existing is None:
        raise MetricNotFoundError(f"Metrics for {intake_id} not found")

    ignored = sorted(key for key in updates if key not in KEY_TO_COLUMN and key != APPROVED_DATE_KEY)
    if ignored:
        logger.debug("metrics.update_ignored_keys", extra={"extra_data": {"keys": ignored}})

    merged = merge_metric_values(existing, updates)
    result = db.execute(update(_metrics).where(_metrics.c.intake_id == intake_id).values(**merged))
    db.commit()
    outcome = MetricWriteResult(intake_id=intake_id, changes=result.rowcount)

    if APPROVED_DATE_KEY in updates:
        outcome.approved_date = updates[APPROVED_DATE_KEY]
        if _propagate_approved_date(db, intake_id, outcome.approved_date) is not None:
            outcome.warning = UPDATE_WARNING
        else:
            outcome.approved_date_propagated = True
    return outcome


def delete_metric(db: Session, raw_intake_id: Any) -> str:
    """Delete the metric for an intake and return the normalised id."""

    intake_id = normalize_intake_id(raw_intake_id)
    result = db.execute(delete(_metrics).where(_metrics.c.intake_id == intake_id))
    db.commit()
    if result.rowcount == 0:
        raise MetricNotFoundError("Not found")
    logger.info("metrics.deleted", extra={"extra_data": {"intake_id": intake_id}})
    return intake_id
