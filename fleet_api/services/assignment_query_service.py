from sqlalchemy import or_
from sqlalchemy.orm import Session

from fleet_api.models.car import Car
from fleet_api.models.car_operator import CarOperator
from fleet_api.models.car_operator_assignment import CarOperatorAssignment
from fleet_api.services.assignment_service import AssignmentService, assignment_service, serialize_assignment
from fleet_api.utils.exceptions import NotFoundException


# Read-only projections: assignments joined with car/operator summaries for display.

def _current_car(a: CarOperatorAssignment | None) -> dict | None:
    if not a:
        return None
    return {
        "id":            a.car.id,
        "license_plate": a.car.licensePlate,
        "brand":         a.car.brand,
        "model":         a.car.model,
        "assignment_id": a.id,
        "since":         a.startDate.isoformat(),
    }


def _current_operator(a: CarOperatorAssignment | None) -> dict | None:
    if not a:
        return None
    return {
        "id":              a.operator.id,
        "employee_number": a.operator.employeeNumber,
        "name":            a.operator.fullName,
        "assignment_id":   a.id,
        "since":           a.startDate.isoformat(),
    }


def _serialize_operator(o: CarOperator, active: CarOperatorAssignment | None) -> dict:
    return {
        "id":              o.id,
        "employee_number": o.employeeNumber,
        "first_name":      o.firstName,
        "last_name":       o.lastName,
        "email":           o.email,
        "phone":           o.phone,
        "department":      o.department,
        "is_active":       o.isActive,
        "current_car":     _current_car(active),
    }


class AssignmentQueryService:

    def __init__(self, assignments: AssignmentService = assignment_service):
        self.assignments = assignments

    def car_detail(self, db: Session, car_id: int) -> dict:
        return self.assignments.read(db, self._car_detail, car_id)

    def operator_detail(self, db: Session, operator_id: int) -> dict:
        return self.assignments.read(db, self._operator_detail, operator_id)

    def list_operators(
        self, db: Session, page: int, limit: int,
        search: str | None, department: str | None, is_active: bool | None,
    ) -> tuple[list[dict], int]:
        return self.assignments.read(db, self._list_operators, page, limit, search, department, is_active)

    # ─── Projections (idempotent, retried by read) ────────────────────────────
    def _car_detail(self, db: Session, car_id: int) -> dict:
        car = db.query(Car).filter(Car.id == car_id).first()
        if not car: raise NotFoundException("Car")
        active = self.assignments.repo.find_active_by_car(db, car_id)
        return {
            "id":               car.id,
            "license_plate":    car.licensePlate,
            "brand":            car.brand,
            "model":            car.model,
            "status":           car.status.value,
            "current_operator": _current_operator(active),
        }

    def _operator_detail(self, db: Session, operator_id: int) -> dict:
        o = db.query(CarOperator).filter(CarOperator.id == operator_id).first()
        if not o: raise NotFoundException("Operator")
        active = self.assignments.repo.find_active_by_operator(db, operator_id)
        result = _serialize_operator(o, active)
        result["current_assignment"] = serialize_assignment(active) if active else None
        result["assignment_history"] = [
            serialize_assignment(a) for a in self.assignments.repo.list_by_operator(db, operator_id)
        ]
        return result

    def _list_operators(
        self, db: Session, page: int, limit: int,
        search: str | None, department: str | None, is_active: bool | None,
    ) -> tuple[list[dict], int]:
        q = db.query(CarOperator)
        if search:
            kw = f"%{search}%"
            q = q.filter(or_(
                CarOperator.firstName.ilike(kw),
                CarOperator.lastName.ilike(kw),
                CarOperator.employeeNumber.ilike(kw),
                CarOperator.email.ilike(kw),
            ))
        if department:
            q = q.filter(CarOperator.department == department)
        if is_active is not None:
            q = q.filter(CarOperator.isActive == is_active)

        total = q.count()
        operators = q.order_by(CarOperator.lastName, CarOperator.firstName, CarOperator.id)\
                     .offset((page - 1) * limit).limit(limit).all()

        # One query for the open assignments of the whole page
        ids = [o.id for o in operators]
        active_by_operator = {
            a.operatorId: a for a in db.query(CarOperatorAssignment).filter(
                CarOperatorAssignment.operatorId.in_(ids),
                CarOperatorAssignment.endDate == None,
            ).all()
        } if ids else {}
        return [_serialize_operator(o, active_by_operator.get(o.id)) for o in operators], total


assignment_query_service = AssignmentQueryService()
