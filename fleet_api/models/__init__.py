"""
Import all models here so that:
1. Alembic can auto-detect them when generating migrations
2. Relationships between models resolve correctly

Order matters: import parent tables before child tables.
"""

from fleet_api.models.user import User, RoleName
from fleet_api.models.car import Car, CarStatus
from fleet_api.models.car_operator import CarOperator
from fleet_api.models.car_operator_assignment import CarOperatorAssignment, ClosedAssignmentError
from fleet_api.models.audit_log import AuditLog

__all__ = [
    "User",
    "RoleName",
    "Car",
    "CarStatus",
    "CarOperator",
    "CarOperatorAssignment",
    "ClosedAssignmentError",
    "AuditLog",
]
