from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..crud.intakes import list_data
from ..db.session import get_db

router = APIRouter(tags=["data"])


@router.get("/data")
def api_list_data(db: Session = Depends(get_db)):
    return list_data(db)
