from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, Date, Text, ForeignKey, TIMESTAMP, CheckConstraint, Index, event, inspect, text,
)
from sqlalchemy.orm import relationship
from fleet_api.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ClosedAssignmentError(Exception):
    """Raised when a flush would modify an assignment that has already ended."""


class CarOperatorAssignment(Base):
    __tablename__ = "car_operator_assignments"

    id          = Column(Integer, primary_key=True, index=True)
    carId       = Column(Integer, ForeignKey("cars.id"), nullable=False, index=True)
    operatorId  = Column(Integer, ForeignKey("car_operators.id"), nullable=False, index=True)
    startDate   = Column(Date, nullable=False)
    endDate     = Column(Date, nullable=True)  # NULL = still assigned
    notes       = Column(Text, nullable=True)
    # Python-side default keeps sub-second precision for ordering equal start dates
    createdAt   = Column(TIMESTAMP(timezone=True), default=_utcnow, nullable=False)
    createdById = Column(Integer, ForeignKey("users.id"), nullable=True)

    # At most one open row per car and per operator; a closed row never ends before it starts
    __table_args__ = (
        CheckConstraint('"endDate" IS NULL OR "endDate" >= "startDate"', name="ck_assignment_dates"),
        Index(
            "uq_active_car_assignment", "carId", unique=True,
            postgresql_where=text('"endDate" IS NULL'),
            sqlite_where=text('"endDate" IS NULL'),
        ),
        Index(
            "uq_active_operator_assignment", "operatorId", unique=True,
            postgresql_where=text('"endDate" IS NULL'),
            sqlite_where=text('"endDate" IS NULL'),
        ),
    )

    # ─── Relationships ─────────────────────────────────────────────────────────
    car        = relationship("Car", back_populates="assignments")
    operator   = relationship("CarOperator", back_populates="assignments")
    created_by = relationship("User")

    @property
    def isActive(self) -> bool:
        return self.endDate is None

    def __repr__(self):
        return (f"<CarOperatorAssignment id={self.id} carId={self.carId} "
                f"operatorId={self.operatorId} endDate={self.endDate}>")


@event.listens_for(CarOperatorAssignment, "before_update")
def _reject_closed_row_changes(mapper, connection, target):
    history = inspect(target).attrs.endDate.history
    if history.deleted:
        previous = history.deleted[0]
    elif history.unchanged:
        previous = history.unchanged[0]
    else:
        previous = None
    if previous is not None:
        raise ClosedAssignmentError(f"Assignment {target.id} is closed and cannot be modified")
