"""Pydantic schemas for intake (``jrm``) payloads.

Request bodies use the camelCase keys of the existing front end; attribute
names match the ``Intake`` model.
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# Values are bound as sent; SQLite stores numbers in TEXT columns as text.
IntakeValue = Optional[Union[str, int, float]]


class IntakeFields(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    intake_name: IntakeValue = Field(default=None, alias="intakeName")
    intake_comments: IntakeValue = Field(default=None, alias="intakeComments")
    intake_tags: IntakeValue = Field(default=None, alias="intakeTags")
    status: IntakeValue = None
    attachment: IntakeValue = None
    date: IntakeValue = None
    approved_date: IntakeValue = Field(default=None, alias="approvedDate")


class IntakeCreate(IntakeFields):
    intake_id: str = Field(alias="intakeId")


class IntakeUpdate(IntakeFields):
    """Full replacement: omitted fields are written as NULL."""


class StatusUpdate(BaseModel):
    status: IntakeValue = None


class AttachmentUpdate(BaseModel):
    attachment: IntakeValue = None
