import unittest

from fleet_api.testing import DatabaseTestCase
from fleet_api.database import check_db_connection, engine


class TestDatabaseConnection(DatabaseTestCase):

    def test_database_connection_success(self):
        """The configured database answers SELECT 1."""
        self.assertTrue(check_db_connection())

    def test_partial_unique_indexes_created(self):
        """Both active-assignment indexes exist on the assignment table."""
        from sqlalchemy import inspect
        names = {ix["name"] for ix in inspect(engine).get_indexes("car_operator_assignments")}
        self.assertIn("uq_active_car_assignment", names)
        self.assertIn("uq_active_operator_assignment", names)


if __name__ == '__main__':
    unittest.main()
