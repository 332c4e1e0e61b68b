from pydantic import BaseModel
from typing import TypeVar, Generic, Any

T = TypeVar("T")


# ─── Pagination Meta ───────────────────────────────────────────────────────────
class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


# ─── Error Detail (per field) ──────────────────────────────────────────────────
class ErrorDetail(BaseModel):
    field: str
    message: str


# ─── Error Body ───────────────────────────────────────────────────────────────
class ErrorBody(BaseModel):
    code: str
    details: list[ErrorDetail] | None = None
    field: str | None = None


# ─── Standard Success Response ────────────────────────────────────────────────
class SuccessResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: T | None = None


# ─── Paginated Success Response ───────────────────────────────────────────────
class PaginatedResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: list[T]
    meta: PaginationMeta


# ─── Error Response ───────────────────────────────────────────────────────────
class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: ErrorBody


# Documented error shapes for route decorators
ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid dates"},
    404: {"model": ErrorResponse, "description": "Car, operator or active assignment not found"},
    409: {"model": ErrorResponse, "description": "Exclusivity conflict"},
}


# ─── Helper Functions ─────────────────────────────────────────────────────────
def success_response(message: str, data: Any = None) -> dict:
    """Return a standardized success dict (used in route handlers)."""
    return {"success": True, "message": message, "data": data}


def paginated_response(
    message: str,
    data: list,
    total: int,
    page: int,
    limit: int,
) -> dict:
    """Return a standardized paginated dict."""
    total_pages = (total + limit - 1) // limit if limit > 0 else 0
    return {
        "success": True,
        "message": message,
        "data": data,
        "meta": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        }
    }
