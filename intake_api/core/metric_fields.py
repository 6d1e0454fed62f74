"""Column names, payload keys and intake id normalisation for metrics.

The ``metrics`` table keeps the spreadsheet-style column names the data was
imported with (``"AO/TO E%"``, ``"LOB Sub-Total"`` ...) while the front end
posts camelCase keys (``aotoEPercent``, ``lobSubTotal``). The spellings do not
follow one rule, so every pair is listed by hand in ``METRIC_FIELDS`` and both
lookup directions are derived from that single table.
"""

from __future__ import annotations

import re
from typing import Any, NamedTuple

from .errors import InvalidIntakeIdError

__all__ = [
    "INTAKE_ID_PREFIX",
    "METRIC_FIELDS",
    "COLUMN_TO_KEY",
    "KEY_TO_COLUMN",
    "ATTRIBUTE_BY_KEY",
    "MetricField",
    "normalize_intake_id",
]


class MetricField(NamedTuple):
    column: str
    payload_key: str
    attribute: str


# Order matches the INSERT column order of the metrics table.
METRIC_FIELDS: tuple[MetricField, ...] = (
    MetricField("Intake Name", "intakeName", "intake_name"),
    MetricField("Total Ongoing Costs", "totalOngoingCosts", "total_ongoing_costs"),
    MetricField("LOB Sub-Total", "lobSubTotal", "lob_sub_total"),
    MetricField("Contingency", "contingency", "contingency"),
    MetricField("ET-BA Total Effort Days", "etBATotalEffortDays", "et_ba_total_effort_days"),
    MetricField("ET-BA TC", "etBATC", "et_ba_tc"),
    MetricField("ET-BA E%", "etBAEPercent", "et_ba_e_percent"),
    MetricField("ET-BA C%", "etBACPercent", "et_ba_c_percent"),
    MetricField("ET-Dev Total Effort Days", "etDevTotalEffortDays", "et_dev_total_effort_days"),
    MetricField("ET-Dev TC", "etDevTC", "et_dev_tc"),
    MetricField("ET-Dev E%", "etDevEPercent", "et_dev_e_percent"),
    MetricField("ET-Dev C%", "etDevCPercent", "et_dev_c_percent"),
    MetricField("ET-QA Total Effort Days", "etQATotalEffortDays", "et_qa_total_effort_days"),
    MetricField("ET-QA TC", "etQATC", "et_qa_tc"),
    MetricField("ET-QA E%", "etQAEPercent", "et_qa_e_percent"),
    MetricField("ET-QA C%", "etQACPercent", "et_qa_c_percent"),
    MetricField("AO/TO Total Effort Days", "aotoTotalEffortDays", "aoto_total_effort_days"),
    MetricField("AO/TO TC", "aotoTC", "aoto_tc"),
    MetricField("AO/TO E%", "aotoEPercent", "aoto_e_percent"),
    MetricField("AO/TO C%", "aotoCPercent", "aoto_c_percent"),
    MetricField("PMO Total Effort Days", "pmoTotalEffortDays", "pmo_total_effort_days"),
    MetricField("PMO TC", "pmoTC", "pmo_tc"),
    MetricField("PMO E%", "pmoEPercent", "pmo_e_percent"),
    MetricField("PMO C%", "pmoCPercent", "pmo_c_percent"),
)

COLUMN_TO_KEY: dict[str, str] = {field.column: field.payload_key for field in METRIC_FIELDS}
KEY_TO_COLUMN: dict[str, str] = {field.payload_key: field.column for field in METRIC_FIELDS}
ATTRIBUTE_BY_KEY: dict[str, str] = {field.payload_key: field.attribute for field in METRIC_FIELDS}

if not (
    len(COLUMN_TO_KEY) == len(KEY_TO_COLUMN) == len(ATTRIBUTE_BY_KEY) == len(METRIC_FIELDS)
):
    raise RuntimeError("METRIC_FIELDS must map columns and payload keys one-to-one")


INTAKE_ID_PREFIX = "ENT-"
_PREFIX_RE = re.compile(r"^ENT-", re.IGNORECASE)


def normalize_intake_id(raw: Any) -> str:
    """Return the canonical ``ENT-<digits>`` key for an intake identifier.

    ``"123"``, ``"ENT-123"``, ``"ent-123"`` and ``" ENT-123 "`` all resolve to
    ``"ENT-123"``; feeding the result back in returns it unchanged.
    """

    if raw is None:
        raise InvalidIntakeIdError("Intake ID is required")
    bare = _PREFIX_RE.sub("", str(raw).strip()).strip()
    if not bare:
        raise InvalidIntakeIdError("Intake ID is required")
    return f"{INTAKE_ID_PREFIX}{bare}"
