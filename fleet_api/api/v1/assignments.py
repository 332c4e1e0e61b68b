from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from fleet_api.database import get_db
from fleet_api.dependencies import get_any_authenticated
from fleet_api.models.user import User
from fleet_api.schemas.common import PaginatedResponse, paginated_response
from fleet_api.schemas.assignment import AssignmentOut
from fleet_api.services.assignment_service import assignment_service
from fleet_api.utils.exceptions import InvalidDateRangeException

router = APIRouter(prefix="/assignments")


@router.get("", summary="Search assignments", response_model=PaginatedResponse[AssignmentOut])
def list_assignments(
    page:       int            = Query(1, ge=1),
    limit:      int            = Query(20, ge=1, le=100),
    carId:      Optional[int]  = Query(None, alias="car_id"),
    operatorId: Optional[int]  = Query(None, alias="operator_id"),
    active:     Optional[bool] = Query(None, description="True=active only, False=closed only"),
    startFrom:  Optional[date] = Query(None, alias="start_from"),
    startTo:    Optional[date] = Query(None, alias="start_to"),
    endTo:      Optional[date] = Query(None, alias="end_to", description="Closed on or before; open rows always match"),
    db:         Session        = Depends(get_db),
    _:          User           = Depends(get_any_authenticated),
):
    if startFrom and startTo and startTo < startFrom:
        raise InvalidDateRangeException()
    if startFrom and endTo and endTo < startFrom:
        raise InvalidDateRangeException()
    data, total = assignment_service.search(db, page, limit, carId, operatorId, active, startFrom, startTo, endTo)
    return paginated_response("Assignments retrieved", data, total, page, limit)
