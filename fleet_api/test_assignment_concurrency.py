import threading
import unittest
from datetime import date

from fleet_api.testing import DatabaseTestCase
from fleet_api.database import SessionLocal
from fleet_api.models import CarOperatorAssignment
from fleet_api.schemas.assignment import AssignOperatorRequest
from fleet_api.services.assignment_service import assignment_service
from fleet_api.utils.exceptions import CarAlreadyAssignedException, OperatorAlreadyAssignedException

WORKERS = 6


def run_concurrently(calls):
    """Run each (car_id, operator_id) assign on its own session, released together."""
    barrier = threading.Barrier(len(calls))
    results = [None] * len(calls)

    def worker(i, car_id, operator_id):
        db = SessionLocal()
        try:
            barrier.wait()
            body = AssignOperatorRequest(operator_id=operator_id, start_date=date(2024, 1, 1))
            results[i] = assignment_service.assign(db, car_id, body, None)
        except Exception as e:  # collected and asserted on by the test
            results[i] = e
        finally:
            db.close()

    threads = [threading.Thread(target=worker, args=(i, c, o)) for i, (c, o) in enumerate(calls)]
    for t in threads: t.start()
    for t in threads: t.join(timeout=60)
    return results


class TestConcurrentAssign(DatabaseTestCase):

    def test_same_car_only_one_wins(self):
        car = self.make_car()
        operators = [self.make_operator() for _ in range(WORKERS)]

        results = run_concurrently([(car.id, o.id) for o in operators])

        successes = [r for r in results if isinstance(r, dict)]
        failures = [r for r in results if not isinstance(r, dict)]
        self.assertEqual(len(successes), 1)
        self.assertTrue(all(isinstance(f, CarAlreadyAssignedException) for f in failures), failures)

        self.db.expire_all()
        active = self.db.query(CarOperatorAssignment).filter(
            CarOperatorAssignment.carId == car.id,
            CarOperatorAssignment.endDate == None,
        ).count()
        self.assertEqual(active, 1)

    def test_same_operator_only_one_wins(self):
        operator = self.make_operator()
        cars = [self.make_car() for _ in range(WORKERS)]

        results = run_concurrently([(c.id, operator.id) for c in cars])

        successes = [r for r in results if isinstance(r, dict)]
        failures = [r for r in results if not isinstance(r, dict)]
        self.assertEqual(len(successes), 1)
        self.assertTrue(all(isinstance(f, OperatorAlreadyAssignedException) for f in failures), failures)

        self.db.expire_all()
        self.assertEqual(self.db.query(CarOperatorAssignment).count(), 1)


if __name__ == "__main__":
    unittest.main()
