from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..crud.intakes import (
    create_intake,
    delete_intake,
    set_intake_attachment,
    set_intake_status,
    update_intake,
)
from ..db.session import get_db
from ..schemas.intake import AttachmentUpdate, IntakeCreate, IntakeUpdate, StatusUpdate

router = APIRouter(prefix="/jrm", tags=["jrm"])


@router.post("")
def api_create_intake(payload: IntakeCreate, db: Session = Depends(get_db)):
    rowid = create_intake(db, payload.model_dump())
    return {"success": True, "rowid": rowid}


@router.put("/{intake_id}")
def api_update_intake(intake_id: str, payload: IntakeUpdate, db: Session = Depends(get_db)):
    changes = update_intake(db, intake_id, payload.model_dump())
    return {"success": True, "changes": changes}


@router.patch("/{intake_id}/status")
def api_move_intake(intake_id: str, payload: StatusUpdate, db: Session = Depends(get_db)):
    changes = set_intake_status(db, intake_id, payload.status)
    return {"success": True, "changes": changes}


@router.patch("/{intake_id}/attachment")
def api_attach_to_intake(intake_id: str, payload: AttachmentUpdate, db: Session = Depends(get_db)):
    changes = set_intake_attachment(db, intake_id, payload.attachment)
    return {"success": True, "changes": changes}


@router.delete("/{intake_id}")
def api_delete_intake(intake_id: str, db: Session = Depends(get_db)):
    # Absent ids report ``deleted: 0`` rather than a 404.
    deleted = delete_intake(db, intake_id)
    return {"success": True, "deleted": deleted}
