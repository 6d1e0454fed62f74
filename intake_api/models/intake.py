"""SQLAlchemy model for the ``jrm`` intake table."""

from __future__ import annotations

from sqlalchemy import Column, Text

from ..db.session import Base


class Intake(Base):
    """A tracked work item. Column names keep the spaces of the legacy sheet."""

    __tablename__ = "jrm"

    intake_id = Column("Intake ID", Text, key="intake_id", primary_key=True)
    intake_name = Column("Intake Name", Text, key="intake_name", nullable=True)
    intake_comments = Column("Intake Comments", Text, key="intake_comments", nullable=True)
    intake_tags = Column("Intake Tags", Text, key="intake_tags", nullable=True)
    status = Column("Status", Text, key="status", nullable=True)
    attachment = Column("Attachment", Text, key="attachment", nullable=True)
    date = Column("Date", Text, key="date", nullable=True)
    approved_date = Column("Approved Date", Text, key="approved_date", nullable=True)


__all__ = ["Intake"]
