import logging
from contextlib import contextmanager
from datetime import date, datetime, timezone

from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.orm import Session

from fleet_api.config import settings
from fleet_api.models.car import Car, CarStatus
from fleet_api.models.car_operator import CarOperator
from fleet_api.models.car_operator_assignment import CarOperatorAssignment
from fleet_api.repositories.assignment_repository import AssignmentRepository, assignment_repository
from fleet_api.schemas.assignment import AssignOperatorRequest, UnassignOperatorRequest
from fleet_api.utils.audit import log_action
from fleet_api.utils.exceptions import (
    NotFoundException,
    CarAlreadyAssignedException,
    OperatorAlreadyAssignedException,
    NoActiveAssignmentException,
    InvalidEndDateException,
    InvalidStartDateException,
    conflict_from_integrity,
)

logger = logging.getLogger(__name__)


def serialize_assignment(a: CarOperatorAssignment) -> dict:
    return {
        "id":          a.id,
        "car_id":      a.carId,
        "operator_id": a.operatorId,
        "start_date":  a.startDate.isoformat(),
        "end_date":    a.endDate.isoformat() if a.endDate else None,
        "notes":       a.notes,
        "created_at":  _as_utc(a.createdAt).isoformat(),
        "is_active":   a.endDate is None,
    }


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back naive; they are stored in UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def merge_notes(existing: str | None, new: str | None) -> str | None:
    if not new:
        return existing
    if not existing:
        return new
    return f"{existing}\n{new}"


def today() -> date:
    return datetime.now(timezone.utc).date()


@contextmanager
def transaction(db: Session):
    """Commit on success; roll back and re-raise on any failure."""
    try:
        yield
        db.commit()
    except Exception:
        db.rollback()
        raise


class AssignmentService:
    """
    The only writer of CarOperatorAssignment rows.

    assign/unassign lock the car row, then the operator row, before checking
    for open assignments, so concurrent calls on the same key are serialized.
    An insert that still loses a race trips a partial unique index and is
    reported as the matching conflict.
    """

    def __init__(self, repository: AssignmentRepository = assignment_repository):
        self.repo = repository

    # ─── Reads ────────────────────────────────────────────────────────────────
    def read(self, db: Session, fn, *args):
        """Run an idempotent read, retrying once on a dropped connection. Writes never retry."""
        try:
            return fn(db, *args)
        except DBAPIError as e:
            if not (e.connection_invalidated or isinstance(e, OperationalError)):
                raise
            logger.warning(f"Retrying read {fn.__name__}{args} after storage error: {e.orig}")
            db.rollback()
            return fn(db, *args)

    def _require_car(self, db: Session, car_id: int) -> Car:
        car = self.read(db, lambda s, cid: s.get(Car, cid), car_id)
        if not car: raise NotFoundException("Car")
        return car

    def _require_operator(self, db: Session, operator_id: int) -> CarOperator:
        operator = self.read(db, lambda s, oid: s.get(CarOperator, oid), operator_id)
        if not operator: raise NotFoundException("Operator")
        return operator

    def get_current_for_car(self, db: Session, car_id: int) -> dict | None:
        a = self.read(db, self.repo.find_active_by_car, car_id)
        return serialize_assignment(a) if a else None

    def get_current_for_operator(self, db: Session, operator_id: int) -> dict | None:
        a = self.read(db, self.repo.find_active_by_operator, operator_id)
        return serialize_assignment(a) if a else None

    def get_car_history(self, db: Session, car_id: int) -> list[dict]:
        self._require_car(db, car_id)
        return [serialize_assignment(a) for a in self.read(db, self.repo.list_by_car, car_id)]

    def get_operator_history(self, db: Session, operator_id: int) -> list[dict]:
        self._require_operator(db, operator_id)
        return [serialize_assignment(a) for a in self.read(db, self.repo.list_by_operator, operator_id)]

    def search(
        self, db: Session, page: int, limit: int,
        car_id: int | None, operator_id: int | None, active: bool | None,
        start_from: date | None, start_to: date | None, end_to: date | None = None,
    ) -> tuple[list[dict], int]:
        items, total = self.read(
            db, lambda s: self.repo.search(
                s, page, limit, car_id, operator_id, active, start_from, start_to, end_to,
            ),
        )
        return [serialize_assignment(a) for a in items], total

    # ─── Assign ───────────────────────────────────────────────────────────────
    def assign(self, db: Session, car_id: int, data: AssignOperatorRequest, actor_id: int | None) -> dict:
        max_days = settings.ASSIGNMENT_MAX_BACKDATE_DAYS
        if max_days is not None and (today() - data.start_date).days > max_days:
            raise InvalidStartDateException(max_days)

        try:
            with transaction(db):
                car = self.repo.lock_car(db, car_id)
                if not car or car.status != CarStatus.ACTIVE:
                    raise NotFoundException("Active car")
                operator = self.repo.lock_operator(db, data.operator_id)
                if not operator or not operator.isActive:
                    raise NotFoundException("Active operator")

                if self.repo.find_active_by_car(db, car_id):
                    logger.warning(f"Assign rejected: car {car_id} already has an active operator")
                    raise CarAlreadyAssignedException()
                if self.repo.find_active_by_operator(db, data.operator_id):
                    logger.warning(f"Assign rejected: operator {data.operator_id} already drives another car")
                    raise OperatorAlreadyAssignedException()

                assignment = self.repo.insert(db, CarOperatorAssignment(
                    carId=car_id,
                    operatorId=data.operator_id,
                    startDate=data.start_date,
                    endDate=None,
                    notes=data.notes,
                    createdById=actor_id,
                ))
                log_action(db, actor_id, "ASSIGN", "Car", car_id,
                           f"Operator {operator.fullName} assigned to {car.licensePlate} "
                           f"from {data.start_date.isoformat()}")
                log_action(db, actor_id, "ASSIGN", "CarOperator", operator.id,
                           f"Assigned to car {car.licensePlate} from {data.start_date.isoformat()}")
        except IntegrityError as e:
            conflict = conflict_from_integrity(str(e.orig))
            if conflict is None:
                raise
            logger.warning(f"Assign lost a race on an active-assignment index: {e.orig}")
            raise conflict from e

        logger.info(f"Assignment {assignment.id}: operator {data.operator_id} -> car {car_id}")
        return serialize_assignment(assignment)

    # ─── Unassign ─────────────────────────────────────────────────────────────
    def unassign(self, db: Session, car_id: int, data: UnassignOperatorRequest, actor_id: int | None) -> dict:
        with transaction(db):
            car = self.repo.lock_car(db, car_id)
            if not car: raise NotFoundException("Car")

            active = self.repo.find_active_by_car(db, car_id)
            if not active:
                raise NoActiveAssignmentException()
            if data.end_date < active.startDate:
                raise InvalidEndDateException()

            operator = self.repo.lock_operator(db, active.operatorId)
            closed = self.repo.close_assignment(
                db, active.id, data.end_date, merge_notes(active.notes, data.notes),
            )
            log_action(db, actor_id, "UNASSIGN", "Car", car_id,
                       f"Operator #{closed.operatorId} unassigned from {car.licensePlate} "
                       f"on {data.end_date.isoformat()}")
            log_action(db, actor_id, "UNASSIGN", "CarOperator", closed.operatorId,
                       f"Unassigned from car {car.licensePlate} on {data.end_date.isoformat()}"
                       + (f" ({operator.fullName})" if operator else ""))

        logger.info(f"Assignment {closed.id} closed on {closed.endDate.isoformat()}")
        return serialize_assignment(closed)


assignment_service = AssignmentService()
