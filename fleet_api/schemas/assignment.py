from datetime import date
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


# Request bodies accept both snake_case and camelCase keys; responses are snake_case.
class _AssignmentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    notes: Optional[str] = None

    @field_validator("notes")
    @classmethod
    def clean_notes(cls, v):
        if v is None: return None
        v = v.strip()
        return v or None


class AssignOperatorRequest(_AssignmentRequest):
    operator_id: int  = Field(validation_alias=AliasChoices("operator_id", "operatorId"))
    start_date:  date = Field(validation_alias=AliasChoices("start_date", "startDate"))

    @field_validator("operator_id")
    @classmethod
    def check_operator(cls, v):
        if v < 1: raise ValueError("Operator ID must be a positive integer")
        return v


class UnassignOperatorRequest(_AssignmentRequest):
    end_date: date = Field(validation_alias=AliasChoices("end_date", "endDate"))


class AssignmentOut(BaseModel):
    id:          int
    car_id:      int
    operator_id: int
    start_date:  date
    end_date:    Optional[date] = None
    notes:       Optional[str]  = None
    created_at:  str
    is_active:   bool
