"""Shared fixtures for the unittest-style test modules. The database URL comes from the root conftest.py."""
import itertools
import unittest

from fleet_api.database import Base, engine, SessionLocal
from fleet_api.models import Car, CarStatus, CarOperator, User, RoleName
from fleet_api.utils.security import create_access_token

_seq = itertools.count(1)


class DatabaseTestCase(unittest.TestCase):
    """Fresh schema per test on the configured SQLite database."""

    def setUp(self):
        Base.metadata.drop_all(bind=engine)
        Base.metadata.create_all(bind=engine)
        self.db = SessionLocal()

    def tearDown(self):
        self.db.close()

    # ─── Factories ────────────────────────────────────────────────────────────
    def make_user(self, role: RoleName = RoleName.ADMIN, active: bool = True) -> User:
        n = next(_seq)
        user = User(email=f"user{n}@fleet.test", name=f"User {n}", role=role, isActive=active)
        self.db.add(user)
        self.db.commit()
        return user

    def make_car(self, status: CarStatus = CarStatus.ACTIVE) -> Car:
        n = next(_seq)
        car = Car(licensePlate=f"AB-{n:03d}-CD", brand="Renault", model="Clio", status=status)
        self.db.add(car)
        self.db.commit()
        return car

    def make_operator(self, active: bool = True, department: str | None = "Sales") -> CarOperator:
        n = next(_seq)
        operator = CarOperator(
            employeeNumber=f"EMP{n:04d}",
            firstName=f"First{n}",
            lastName=f"Last{n}",
            email=f"op{n}@fleet.test",
            department=department,
            isActive=active,
        )
        self.db.add(operator)
        self.db.commit()
        return operator

    def auth_headers(self, user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.role.value)}"}
