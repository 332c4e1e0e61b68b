import enum
from sqlalchemy import Column, Integer, String, Enum, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from fleet_api.database import Base


class CarStatus(str, enum.Enum):
    ACTIVE      = "active"
    MAINTENANCE = "maintenance"
    RETIRED     = "retired"


class Car(Base):
    __tablename__ = "cars"

    id           = Column(Integer, primary_key=True, index=True)
    licensePlate = Column(String(20), unique=True, nullable=False, index=True)
    brand        = Column(String(100), nullable=False)
    model        = Column(String(100), nullable=False)
    status       = Column(Enum(CarStatus, values_callable=lambda e: [m.value for m in e]),
                          default=CarStatus.ACTIVE, nullable=False)
    createdAt    = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    assignments = relationship("CarOperatorAssignment", back_populates="car")

    def __repr__(self):
        return f"<Car id={self.id} plate={self.licensePlate} status={self.status}>"
