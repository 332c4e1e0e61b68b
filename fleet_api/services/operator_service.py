import logging

from sqlalchemy.orm import Session

from fleet_api.services.assignment_service import AssignmentService, assignment_service, transaction
from fleet_api.utils.audit import log_action
from fleet_api.utils.exceptions import (
    NotFoundException,
    OperatorHasActiveAssignmentException,
    OperatorInactiveException,
)

logger = logging.getLogger(__name__)


class OperatorService:

    def __init__(self, assignments: AssignmentService = assignment_service):
        self.assignments = assignments

    def deactivate_operator(self, db: Session, operator_id: int, actor_id: int | None) -> dict:
        """
        Soft-delete an operator. Refused while the operator still drives a car:
        the assignment has to be ended through unassign first.
        """
        with transaction(db):
            operator = self.assignments.repo.lock_operator(db, operator_id)
            if not operator: raise NotFoundException("Operator")
            if not operator.isActive: raise OperatorInactiveException()

            active = self.assignments.repo.find_active_by_operator(db, operator_id)
            if active:
                logger.warning(f"Deactivate rejected: operator {operator_id} holds assignment {active.id}")
                raise OperatorHasActiveAssignmentException()

            operator.isActive = False
            log_action(db, actor_id, "DEACTIVATE", "CarOperator", operator.id,
                       f"Deactivated operator {operator.fullName}")

        logger.info(f"Operator {operator_id} deactivated")
        return {"id": operator.id, "is_active": operator.isActive}


operator_service = OperatorService()
