from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from ..crud.metrics import create_metric, delete_metric, update_metric
from ..db.session import get_db
from ..schemas.metric import MetricCreate

router = APIRouter(prefix="/metrics", tags=["metrics"])


@router.post("")
def api_create_metric(payload: MetricCreate, db: Session = Depends(get_db)):
    outcome = create_metric(
        db,
        payload.intake_id,
        payload.column_values(),
        approved_date=payload.approved_date,
    )
    if outcome.warning:
        return {"success": True, "warning": outcome.warning}
    return {
        "success": True,
        "metricRowId": outcome.row_id,
        "updatedApprovedDate": outcome.approved_date,
    }


@router.put("/{intake_id}")
def api_update_metric(
    intake_id: str,
    updates: dict[str, Any] | None = Body(default=None),
    db: Session = Depends(get_db),
):
    outcome = update_metric(db, intake_id, updates or {})
    body: dict[str, Any] = {"success": True, "changes": outcome.changes}
    if outcome.warning:
        body["warning"] = outcome.warning
    elif outcome.approved_date_propagated:
        body["approvedDate"] = outcome.approved_date
    return body


@router.delete("/{intake_id}")
def api_delete_metric(intake_id: str, db: Session = Depends(get_db)):
    return {"deleted": delete_metric(db, intake_id)}
