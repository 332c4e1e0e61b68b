from datetime import date
from typing import Optional

from pydantic import BaseModel

from fleet_api.schemas.assignment import AssignmentOut


class CurrentCarOut(BaseModel):
    id:            int
    license_plate: str
    brand:         str
    model:         str
    assignment_id: int
    since:         date


class CurrentOperatorOut(BaseModel):
    id:              int
    employee_number: str
    name:            str
    assignment_id:   int
    since:           date


class OperatorOut(BaseModel):
    id:              int
    employee_number: str
    first_name:      str
    last_name:       str
    email:           Optional[str] = None
    phone:           Optional[str] = None
    department:      Optional[str] = None
    is_active:       bool
    current_car:     Optional[CurrentCarOut] = None


class OperatorDetailOut(OperatorOut):
    current_assignment: Optional[AssignmentOut] = None
    assignment_history: list[AssignmentOut] = []


class CarDetailOut(BaseModel):
    id:               int
    license_plate:    str
    brand:            str
    model:            str
    status:           str
    current_operator: Optional[CurrentOperatorOut] = None
