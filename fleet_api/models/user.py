import enum
from sqlalchemy import Column, Integer, String, Boolean, Enum, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from fleet_api.database import Base


class RoleName(str, enum.Enum):
    ADMIN    = "ADMIN"
    EMPLOYEE = "EMPLOYEE"


class User(Base):
    """Administrative employee authenticated by a bearer token."""
    __tablename__ = "users"

    id        = Column(Integer, primary_key=True, index=True)
    email     = Column(String(255), unique=True, nullable=False, index=True)
    name      = Column(String(150), nullable=False)
    role      = Column(Enum(RoleName), default=RoleName.EMPLOYEE, nullable=False)
    isActive  = Column(Boolean, default=True, nullable=False)
    createdAt = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    audit_logs = relationship("AuditLog", back_populates="user")

    def __repr__(self):
        return f"<User id={self.id} email={self.email} role={self.role}>"
