from datetime import date

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from fleet_api.models.car import Car
from fleet_api.models.car_operator import CarOperator
from fleet_api.models.car_operator_assignment import CarOperatorAssignment
from fleet_api.utils.exceptions import NoActiveAssignmentException


_HISTORY_ORDER = (
    CarOperatorAssignment.startDate.desc(),
    CarOperatorAssignment.createdAt.desc(),
    CarOperatorAssignment.id.desc(),
)


class AssignmentRepository:
    """
    Storage access for car/operator assignment rows.

    Never commits: the caller owns the transaction. Locking helpers take
    row locks on the parent car/operator so that check-then-insert sequences
    for the same key run one at a time (no-op on SQLite, where the partial
    unique indexes settle the race instead).
    """

    # ─── Locks ────────────────────────────────────────────────────────────────
    def lock_car(self, db: Session, car_id: int) -> Car | None:
        return db.query(Car).filter(Car.id == car_id).with_for_update().first()

    def lock_operator(self, db: Session, operator_id: int) -> CarOperator | None:
        return db.query(CarOperator).filter(CarOperator.id == operator_id).with_for_update().first()

    # ─── Active lookups ───────────────────────────────────────────────────────
    def find_active_by_car(self, db: Session, car_id: int) -> CarOperatorAssignment | None:
        return db.query(CarOperatorAssignment).filter(
            CarOperatorAssignment.carId == car_id,
            CarOperatorAssignment.endDate == None,
        ).first()

    def find_active_by_operator(self, db: Session, operator_id: int) -> CarOperatorAssignment | None:
        return db.query(CarOperatorAssignment).filter(
            CarOperatorAssignment.operatorId == operator_id,
            CarOperatorAssignment.endDate == None,
        ).first()

    # ─── Writes ───────────────────────────────────────────────────────────────
    def insert(self, db: Session, assignment: CarOperatorAssignment) -> CarOperatorAssignment:
        db.add(assignment)
        db.flush()
        return assignment

    def close_assignment(
        self, db: Session, assignment_id: int, end_date: date, notes: str | None,
    ) -> CarOperatorAssignment:
        """Set end date (and notes) on an open row; the only mutation a row ever gets."""
        result = db.execute(
            update(CarOperatorAssignment)
            .where(
                CarOperatorAssignment.id == assignment_id,
                CarOperatorAssignment.endDate == None,
            )
            .values(endDate=end_date, notes=notes)
        )
        if result.rowcount == 0:
            raise NoActiveAssignmentException()
        assignment = db.get(CarOperatorAssignment, assignment_id)
        db.refresh(assignment)
        return assignment

    # ─── History ──────────────────────────────────────────────────────────────
    def list_by_car(self, db: Session, car_id: int) -> list[CarOperatorAssignment]:
        return db.query(CarOperatorAssignment)\
                 .filter(CarOperatorAssignment.carId == car_id)\
                 .order_by(*_HISTORY_ORDER).all()

    def list_by_operator(self, db: Session, operator_id: int) -> list[CarOperatorAssignment]:
        return db.query(CarOperatorAssignment)\
                 .filter(CarOperatorAssignment.operatorId == operator_id)\
                 .order_by(*_HISTORY_ORDER).all()

    def search(
        self, db: Session, page: int, limit: int,
        car_id: int | None = None, operator_id: int | None = None, active: bool | None = None,
        start_from: date | None = None, start_to: date | None = None, end_to: date | None = None,
    ) -> tuple[list[CarOperatorAssignment], int]:
        q = db.query(CarOperatorAssignment)

        if car_id is not None:      q = q.filter(CarOperatorAssignment.carId == car_id)
        if operator_id is not None: q = q.filter(CarOperatorAssignment.operatorId == operator_id)
        if active is True:          q = q.filter(CarOperatorAssignment.endDate == None)
        if active is False:         q = q.filter(CarOperatorAssignment.endDate != None)
        if start_from:              q = q.filter(CarOperatorAssignment.startDate >= start_from)
        if start_to:                q = q.filter(CarOperatorAssignment.startDate <= start_to)
        # Open rows have not ended yet, so they match any end bound
        if end_to:
            q = q.filter(or_(CarOperatorAssignment.endDate == None, CarOperatorAssignment.endDate <= end_to))

        total = q.count()
        items = q.order_by(*_HISTORY_ORDER).offset((page - 1) * limit).limit(limit).all()
        return items, total


assignment_repository = AssignmentRepository()
