"""SQLAlchemy model for the ``metrics`` cost/effort table.

Attribute keys line up with ``core.metric_fields.METRIC_FIELDS``; numeric
columns use REAL affinity so SQLite keeps free text where the sheet had it.
"""

from __future__ import annotations

from sqlalchemy import Column, Text
from sqlalchemy.types import UserDefinedType

from ..db.session import Base


class SheetValue(UserDefinedType):
    """REAL column whose values are bound and returned without conversion."""

    cache_ok = True

    def get_col_spec(self, **kw) -> str:
        return "REAL"


class Metric(Base):
    __tablename__ = "metrics"

    # Primary key doubles as the one-metric-per-intake guard.
    intake_id = Column("Intake ID", Text, key="intake_id", primary_key=True)
    intake_name = Column("Intake Name", Text, key="intake_name", nullable=True)
    total_ongoing_costs = Column("Total Ongoing Costs", SheetValue(), key="total_ongoing_costs")
    lob_sub_total = Column("LOB Sub-Total", SheetValue(), key="lob_sub_total")
    contingency = Column("Contingency", SheetValue(), key="contingency")

    et_ba_total_effort_days = Column("ET-BA Total Effort Days", SheetValue(), key="et_ba_total_effort_days")
    et_ba_tc = Column("ET-BA TC", SheetValue(), key="et_ba_tc")
    et_ba_e_percent = Column("ET-BA E%", SheetValue(), key="et_ba_e_percent")
    et_ba_c_percent = Column("ET-BA C%", SheetValue(), key="et_ba_c_percent")

    et_dev_total_effort_days = Column("ET-Dev Total Effort Days", SheetValue(), key="et_dev_total_effort_days")
    et_dev_tc = Column("ET-Dev TC", SheetValue(), key="et_dev_tc")
    et_dev_e_percent = Column("ET-Dev E%", SheetValue(), key="et_dev_e_percent")
    et_dev_c_percent = Column("ET-Dev C%", SheetValue(), key="et_dev_c_percent")

    et_qa_total_effort_days = Column("ET-QA Total Effort Days", SheetValue(), key="et_qa_total_effort_days")
    et_qa_tc = Column("ET-QA TC", SheetValue(), key="et_qa_tc")
    et_qa_e_percent = Column("ET-QA E%", SheetValue(), key="et_qa_e_percent")
    et_qa_c_percent = Column("ET-QA C%", SheetValue(), key="et_qa_c_percent")

    aoto_total_effort_days = Column("AO/TO Total Effort Days", SheetValue(), key="aoto_total_effort_days")
    aoto_tc = Column("AO/TO TC", SheetValue(), key="aoto_tc")
    aoto_e_percent = Column("AO/TO E%", SheetValue(), key="aoto_e_percent")
    aoto_c_percent = Column("AO/TO C%", SheetValue(), key="aoto_c_percent")

    pmo_total_effort_days = Column("PMO Total Effort Days", SheetValue(), key="pmo_total_effort_days")
    pmo_tc = Column("PMO TC", SheetValue(), key="pmo_tc")
    pmo_e_percent = Column("PMO E%", SheetValue(), key="pmo_e_percent")
    pmo_c_percent = Column("PMO C%", SheetValue(), key="pmo_c_percent")


__all__ = ["Metric"]
