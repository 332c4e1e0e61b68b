from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from fleet_api.database import get_db
from fleet_api.dependencies import get_admin_user, get_any_authenticated
from fleet_api.models.user import User
from fleet_api.schemas.assignment import AssignmentOut
from fleet_api.schemas.common import PaginatedResponse, SuccessResponse, success_response, paginated_response
from fleet_api.schemas.operator import OperatorDetailOut, OperatorOut
from fleet_api.services.assignment_service import assignment_service
from fleet_api.services.assignment_query_service import assignment_query_service
from fleet_api.services.operator_service import operator_service

router = APIRouter(prefix="/operators")


@router.get("", summary="List operators with their current car",
            response_model=PaginatedResponse[OperatorOut])
def list_operators(
    page:       int            = Query(1, ge=1),
    limit:      int            = Query(20, ge=1, le=100),
    search:     Optional[str]  = Query(None),
    department: Optional[str]  = Query(None),
    isActive:   Optional[bool] = Query(None),
    db:         Session        = Depends(get_db),
    _:          User           = Depends(get_any_authenticated),
):
    data, total = assignment_query_service.list_operators(db, page, limit, search, department, isActive)
    return paginated_response("Operators retrieved successfully", data, total, page, limit)


@router.get("/{operator_id}", summary="Get operator with current car and history",
            response_model=SuccessResponse[OperatorDetailOut])
def get_operator(operator_id: int, db: Session = Depends(get_db), _: User = Depends(get_any_authenticated)):
    return success_response("Operator retrieved", assignment_query_service.operator_detail(db, operator_id))


@router.get("/{operator_id}/assignment-history", summary="Get operator assignment history",
            response_model=SuccessResponse[list[AssignmentOut]])
def get_assignment_history(
    operator_id: int, db: Session = Depends(get_db), _: User = Depends(get_any_authenticated),
):
    return success_response("Assignment history retrieved",
                            assignment_service.get_operator_history(db, operator_id))


@router.delete("/{operator_id}", summary="Deactivate an operator without an active assignment (Admin)")
def deactivate_operator(
    operator_id: int,
    db:          Session = Depends(get_db),
    current_user: User   = Depends(get_admin_user),
):
    data = operator_service.deactivate_operator(db, operator_id, current_user.id)
    return success_response("Operator deactivated successfully", data)
