from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.deps import get_user_filters
from app.config import settings
from app.queries.base import InvalidFilterError
from app.queries.users import UserFilters
from app.schemas.common import ListResponse
from app.schemas.users import UserRead

router = APIRouter()


@router.get(
    "/users",
    response_model=ListResponse[UserRead],
    tags=["users"],
)
def list_users(
    filter: str | None = None,
    status: str | None = None,
    sort: str = Query(default="last_name|asc"),
    limit: int = Query(
        default=settings.client_list_default_limit, ge=1, le=settings.client_list_max_limit
    ),
    offset: int = Query(default=0, ge=0),
    filters: UserFilters = Depends(get_user_filters),
):
    try:
        filters.apply({"filter": filter, "status": status, "sort": sort})
    except InvalidFilterError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    count = filters.count()
    items = filters.paginate(limit, offset).all()
    return {"items": items, "count": count, "limit": limit, "offset": offset}
