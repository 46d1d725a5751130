from fastapi import APIRouter, Depends, HTTPException, Query
from prometheus_client import Counter
from sqlalchemy.orm import Session

from app.api.deps import get_clients_service, get_db
from app.config import settings
from app.queries.base import InvalidFilterError
from app.schemas.clients import ClientListRead
from app.schemas.common import ListResponse

router = APIRouter()

CLIENT_LIST_REQUESTS = Counter(
    "client_list_requests_total",
    "Client list requests by outcome",
    ["outcome"],
)


@router.get(
    "/companies/{company_id}/clients",
    response_model=ListResponse[ClientListRead],
    tags=["clients"],
)
def list_clients(
    company_id: int,
    filter: str | None = None,
    status: str | None = None,
    balance: str | None = None,
    between_balance: str | None = None,
    sort: str | None = None,
    limit: int = Query(
        default=settings.client_list_default_limit, ge=1, le=settings.client_list_max_limit
    ),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    service=Depends(get_clients_service),
):
    params = {
        "filter": filter,
        "status": status,
        "balance": balance,
        "between_balance": between_balance,
        "sort": sort,
    }
    try:
        response = service.list_response(db, company_id, params, limit, offset)
    except InvalidFilterError as exc:
        CLIENT_LIST_REQUESTS.labels(outcome="invalid").inc()
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except HTTPException as exc:
        outcome = "not_found" if exc.status_code == 404 else "error"
        CLIENT_LIST_REQUESTS.labels(outcome=outcome).inc()
        raise
    CLIENT_LIST_REQUESTS.labels(outcome="ok").inc()
    return response
