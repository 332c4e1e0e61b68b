from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from fleet_api.database import get_db
from fleet_api.dependencies import get_admin_user, get_any_authenticated
from fleet_api.models.user import User
from fleet_api.schemas.assignment import AssignOperatorRequest, UnassignOperatorRequest, AssignmentOut
from fleet_api.schemas.common import ERROR_RESPONSES, SuccessResponse, success_response
from fleet_api.schemas.operator import CarDetailOut
from fleet_api.services.assignment_service import assignment_service
from fleet_api.services.assignment_query_service import assignment_query_service

router = APIRouter(prefix="/cars")


@router.get("/{car_id}", summary="Get car with its current operator",
            response_model=SuccessResponse[CarDetailOut])
def get_car(car_id: int, db: Session = Depends(get_db), _: User = Depends(get_any_authenticated)):
    return success_response("Car retrieved", assignment_query_service.car_detail(db, car_id))


@router.post("/{car_id}/assign", status_code=status.HTTP_201_CREATED,
             summary="Assign an operator to a car (Admin)",
             responses=ERROR_RESPONSES,
             response_model=SuccessResponse[AssignmentOut])
def assign_operator(
    car_id: int,
    body:   AssignOperatorRequest,
    db:     Session = Depends(get_db),
    current_user: User = Depends(get_admin_user),
):
    """
    Start a new assignment.
    - 404 if the car or operator does not exist or is not active.
    - 409 CAR_ALREADY_ASSIGNED / OPERATOR_ALREADY_ASSIGNED if either side is taken.
    """
    data = assignment_service.assign(db, car_id, body, current_user.id)
    return success_response("Operator assigned to car", data)


@router.post("/{car_id}/unassign", summary="End the car's current assignment (Admin)",
             responses=ERROR_RESPONSES,
             response_model=SuccessResponse[AssignmentOut])
def unassign_operator(
    car_id: int,
    body:   UnassignOperatorRequest,
    db:     Session = Depends(get_db),
    current_user: User = Depends(get_admin_user),
):
    """
    Close the active assignment of a car.
    - 404 NO_ACTIVE_ASSIGNMENT if the car has no operator.
    - 400 INVALID_END_DATE if end_date is before the assignment's start_date.
    """
    data = assignment_service.unassign(db, car_id, body, current_user.id)
    return success_response("Operator unassigned successfully", data)


@router.get("/{car_id}/assignment-history", summary="Get car assignment history",
            response_model=SuccessResponse[list[AssignmentOut]])
def get_assignment_history(car_id: int, db: Session = Depends(get_db), _: User = Depends(get_any_authenticated)):
    return success_response("Assignment history retrieved", assignment_service.get_car_history(db, car_id))
