"""Pydantic schemas for metric payloads.

The 24 metric fields are generated from ``METRIC_FIELDS`` so the schema, the
model and the column names cannot drift apart.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import ConfigDict, Field, create_model

from ..core.metric_fields import METRIC_FIELDS

# Values are bound as sent, like the edit endpoint does.
MetricValue = Optional[Union[int, float, str]]


MetricFields = create_model(
    "MetricFields",
    __config__=ConfigDict(populate_by_name=True),
    **{
        field.attribute: (MetricValue, Field(default=None, alias=field.payload_key))
        for field in METRIC_FIELDS
    },
)


class MetricCreate(MetricFields):
    # Accepts "ENT-123", "ent-123" or "123"; normalised before use.
    intake_id: Union[str, int] = Field(alias="intakeId")
    approved_date: MetricValue = Field(default=None, alias="approvedDate")

    def column_values(self) -> dict[str, Any]:
        """Metric attribute -> value, in ``METRIC_FIELDS`` order."""
        return {field.attribute: getattr(self, field.attribute) for field in METRIC_FIELDS}
