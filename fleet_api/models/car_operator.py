from sqlalchemy import Column, Integer, String, Boolean, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from fleet_api.database import Base


class CarOperator(Base):
    """An employee who is allowed to drive company cars."""
    __tablename__ = "car_operators"

    id             = Column(Integer, primary_key=True, index=True)
    employeeNumber = Column(String(50), unique=True, nullable=False, index=True)
    firstName      = Column(String(100), nullable=False)
    lastName       = Column(String(100), nullable=False)
    email          = Column(String(255), nullable=True)
    phone          = Column(String(20), nullable=True)
    department     = Column(String(100), nullable=True)
    isActive       = Column(Boolean, default=True, nullable=False)
    createdAt      = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    assignments = relationship("CarOperatorAssignment", back_populates="operator")

    @property
    def fullName(self) -> str:
        return f"{self.firstName} {self.lastName}"

    def __repr__(self):
        return f"<CarOperator id={self.id} employeeNumber={self.employeeNumber} isActive={self.isActive}>"
