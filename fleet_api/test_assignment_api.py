import unittest

from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError, OperationalError

from fleet_api.testing import DatabaseTestCase
from fleet_api.main import app, create_app
from fleet_api.models import ClosedAssignmentError, RoleName
from fleet_api.utils.security import create_access_token

PREFIX = "/api/v1"


class ApiTestCase(DatabaseTestCase):

    def setUp(self):
        super().setUp()
        self.client = TestClient(app)
        self.admin = self.make_user(RoleName.ADMIN)
        self.headers = self.auth_headers(self.admin)

    def assign(self, car_id, body):
        return self.client.post(f"{PREFIX}/cars/{car_id}/assign", json=body, headers=self.headers)

    def unassign(self, car_id, body):
        return self.client.post(f"{PREFIX}/cars/{car_id}/unassign", json=body, headers=self.headers)


class TestAssignEndpoints(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.car = self.make_car()
        self.operator = self.make_operator()

    def test_assign_returns_201_and_assignment(self):
        res = self.assign(self.car.id, {"operator_id": self.operator.id, "start_date": "2024-01-01",
                                        "notes": "  pool car  "})
        self.assertEqual(res.status_code, 201)
        body = res.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["data"]["car_id"], self.car.id)
        self.assertEqual(body["data"]["operator_id"], self.operator.id)
        self.assertEqual(body["data"]["start_date"], "2024-01-01")
        self.assertIsNone(body["data"]["end_date"])
        self.assertEqual(body["data"]["notes"], "pool car")

    def test_assign_accepts_camel_case_body(self):
        res = self.assign(self.car.id, {"operatorId": self.operator.id, "startDate": "2024-01-01"})
        self.assertEqual(res.status_code, 201)

    def test_assign_conflicts(self):
        other_car = self.make_car()
        other_operator = self.make_operator()
        self.assign(self.car.id, {"operator_id": self.operator.id, "start_date": "2024-01-01"})

        res = self.assign(self.car.id, {"operator_id": other_operator.id, "start_date": "2024-02-01"})
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.json()["error"]["code"], "CAR_ALREADY_ASSIGNED")

        res = self.assign(other_car.id, {"operator_id": self.operator.id, "start_date": "2024-02-01"})
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.json()["error"]["code"], "OPERATOR_ALREADY_ASSIGNED")

    def test_assign_unknown_entities(self):
        res = self.assign(9999, {"operator_id": self.operator.id, "start_date": "2024-01-01"})
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.json()["error"]["code"], "NOT_FOUND")

        res = self.assign(self.car.id, {"operator_id": 9999, "start_date": "2024-01-01"})
        self.assertEqual(res.status_code, 404)

    def test_assign_validation_error(self):
        res = self.assign(self.car.id, {"operator_id": self.operator.id, "start_date": "01/02/2024"})
        self.assertEqual(res.status_code, 422)
        body = res.json()
        self.assertEqual(body["error"]["code"], "VALIDATION_ERROR")
        self.assertTrue(any("start_date" in d["field"] for d in body["error"]["details"]))

    def test_unassign_flow(self):
        self.assign(self.car.id, {"operator_id": self.operator.id, "start_date": "2024-01-01"})

        res = self.unassign(self.car.id, {"end_date": "2023-12-31"})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["error"]["code"], "INVALID_END_DATE")

        res = self.unassign(self.car.id, {"endDate": "2024-06-01", "notes": "returned"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["data"]["end_date"], "2024-06-01")
        self.assertEqual(res.json()["data"]["notes"], "returned")

        res = self.unassign(self.car.id, {"end_date": "2024-07-01"})
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.json()["error"]["code"], "NO_ACTIVE_ASSIGNMENT")


class TestHistoryAndProjections(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.car = self.make_car()
        self.first = self.make_operator()
        self.second = self.make_operator()
        self.assign(self.car.id, {"operator_id": self.first.id, "start_date": "2024-01-01"})
        self.unassign(self.car.id, {"end_date": "2024-03-01"})
        self.assign(self.car.id, {"operator_id": self.second.id, "start_date": "2024-03-02"})

    def test_car_history(self):
        res = self.client.get(f"{PREFIX}/cars/{self.car.id}/assignment-history", headers=self.headers)
        self.assertEqual(res.status_code, 200)
        history = res.json()["data"]
        self.assertEqual([h["operator_id"] for h in history], [self.second.id, self.first.id])
        self.assertEqual(history[1]["end_date"], "2024-03-01")

    def test_operator_history(self):
        res = self.client.get(f"{PREFIX}/operators/{self.first.id}/assignment-history", headers=self.headers)
        self.assertEqual(res.status_code, 200)
        self.assertEqual(len(res.json()["data"]), 1)

    def test_history_of_unknown_entities(self):
        res = self.client.get(f"{PREFIX}/cars/9999/assignment-history", headers=self.headers)
        self.assertEqual(res.status_code, 404)
        res = self.client.get(f"{PREFIX}/operators/9999/assignment-history", headers=self.headers)
        self.assertEqual(res.status_code, 404)

    def test_car_detail_includes_current_operator(self):
        res = self.client.get(f"{PREFIX}/cars/{self.car.id}", headers=self.headers)
        self.assertEqual(res.status_code, 200)
        current = res.json()["data"]["current_operator"]
        self.assertEqual(current["id"], self.second.id)
        self.assertEqual(current["name"], f"{self.second.firstName} {self.second.lastName}")
        self.assertEqual(current["since"], "2024-03-02")

    def test_operator_detail_includes_current_car(self):
        res = self.client.get(f"{PREFIX}/operators/{self.second.id}", headers=self.headers)
        self.assertEqual(res.status_code, 200)
        data = res.json()["data"]
        self.assertEqual(data["current_car"]["id"], self.car.id)
        self.assertEqual(data["current_car"]["license_plate"], self.car.licensePlate)
        self.assertEqual(data["current_assignment"]["operator_id"], self.second.id)
        self.assertEqual(len(data["assignment_history"]), 1)

        res = self.client.get(f"{PREFIX}/operators/{self.first.id}", headers=self.headers)
        self.assertIsNone(res.json()["data"]["current_car"])

    def test_list_operators(self):
        res = self.client.get(f"{PREFIX}/operators", params={"isActive": "true"}, headers=self.headers)
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertEqual(body["meta"]["total"], 2)
        current_cars = {o["id"]: o["current_car"] for o in body["data"]}
        self.assertIsNone(current_cars[self.first.id])
        self.assertEqual(current_cars[self.second.id]["id"], self.car.id)

    def test_search_assignments(self):
        res = self.client.get(f"{PREFIX}/assignments", params={"car_id": self.car.id, "active": "false"},
                              headers=self.headers)
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertEqual(body["meta"]["total"], 1)
        self.assertEqual(body["data"][0]["operator_id"], self.first.id)

        res = self.client.get(f"{PREFIX}/assignments",
                              params={"start_from": "2024-03-01", "start_to": "2024-12-31"}, headers=self.headers)
        self.assertEqual([a["operator_id"] for a in res.json()["data"]], [self.second.id])

        res = self.client.get(f"{PREFIX}/assignments",
                              params={"start_from": "2024-03-01", "start_to": "2024-01-01"}, headers=self.headers)
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["error"]["code"], "INVALID_DATE_RANGE")

    def test_deactivate_operator(self):
        res = self.client.delete(f"{PREFIX}/operators/{self.second.id}", headers=self.headers)
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.json()["error"]["code"], "OPERATOR_HAS_ACTIVE_ASSIGNMENT")

        res = self.client.get(f"{PREFIX}/cars/{self.car.id}", headers=self.headers)
        self.assertEqual(res.json()["data"]["current_operator"]["id"], self.second.id)

        res = self.client.delete(f"{PREFIX}/operators/{self.first.id}", headers=self.headers)
        self.assertEqual(res.status_code, 200)
        self.assertFalse(res.json()["data"]["is_active"])

        res = self.client.delete(f"{PREFIX}/operators/{self.first.id}", headers=self.headers)
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.json()["error"]["code"], "OPERATOR_INACTIVE")

    def test_search_by_end_bound_keeps_open_rows(self):
        res = self.client.get(f"{PREFIX}/assignments", params={"end_to": "2024-02-15"}, headers=self.headers)
        self.assertEqual([a["operator_id"] for a in res.json()["data"]], [self.second.id])

        res = self.client.get(f"{PREFIX}/assignments", params={"end_to": "2024-03-01"}, headers=self.headers)
        self.assertEqual([a["operator_id"] for a in res.json()["data"]], [self.second.id, self.first.id])

        res = self.client.get(f"{PREFIX}/assignments",
                              params={"start_from": "2024-03-01", "end_to": "2024-01-01"}, headers=self.headers)
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["error"]["code"], "INVALID_DATE_RANGE")


class TestErrorHandlers(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.app = create_app()

        @cls.app.get("/closed")
        def closed():
            raise ClosedAssignmentError("Assignment 1 is closed and cannot be modified")

        @cls.app.get("/db-down")
        def db_down():
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

        @cls.app.get("/index-race")
        def index_race():
            raise IntegrityError("INSERT", {}, Exception(
                "UNIQUE constraint failed: car_operator_assignments.operatorId"))

        @cls.app.get("/other-integrity")
        def other_integrity():
            raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: cars.licensePlate"))

        cls.client = TestClient(cls.app, raise_server_exceptions=False)

    def assertError(self, path, status_code, code):
        res = self.client.get(path)
        self.assertEqual(res.status_code, status_code)
        body = res.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["error"]["code"], code)

    def test_closed_assignment_is_conflict(self):
        self.assertError("/closed", 409, "ASSIGNMENT_CLOSED")

    def test_lost_connection_is_unavailable(self):
        self.assertError("/db-down", 503, "DATABASE_UNAVAILABLE")

    def test_active_index_violation_keeps_its_code(self):
        self.assertError("/index-race", 409, "OPERATOR_ALREADY_ASSIGNED")

    def test_other_integrity_error_is_generic_conflict(self):
        self.assertError("/other-integrity", 409, "DUPLICATE_ENTRY")



class TestAuth(ApiTestCase):

    def test_missing_token(self):
        car = self.make_car()
        res = self.client.get(f"{PREFIX}/cars/{car.id}")
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.json()["error"]["code"], "UNAUTHORIZED")

    def test_invalid_token(self):
        car = self.make_car()
        res = self.client.get(f"{PREFIX}/cars/{car.id}", headers={"Authorization": "Bearer not-a-jwt"})
        self.assertEqual(res.status_code, 401)

    def test_expired_token(self):
        car = self.make_car()
        token = create_access_token(self.admin.id, "ADMIN", expires_minutes=-1)
        res = self.client.get(f"{PREFIX}/cars/{car.id}", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.json()["error"]["code"], "TOKEN_EXPIRED")

    def test_employee_can_read_but_not_assign(self):
        car = self.make_car()
        operator = self.make_operator()
        employee = self.make_user(RoleName.EMPLOYEE)
        headers = self.auth_headers(employee)

        res = self.client.get(f"{PREFIX}/cars/{car.id}", headers=headers)
        self.assertEqual(res.status_code, 200)

        res = self.client.post(f"{PREFIX}/cars/{car.id}/assign",
                               json={"operator_id": operator.id, "start_date": "2024-01-01"}, headers=headers)
        self.assertEqual(res.status_code, 403)
        self.assertEqual(res.json()["error"]["code"], "FORBIDDEN")

    def test_inactive_user(self):
        car = self.make_car()
        inactive = self.make_user(active=False)
        res = self.client.get(f"{PREFIX}/cars/{car.id}", headers=self.auth_headers(inactive))
        self.assertEqual(res.status_code, 403)
        self.assertEqual(res.json()["error"]["code"], "ACCOUNT_INACTIVE")


if __name__ == "__main__":
    unittest.main()
