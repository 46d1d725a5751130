import logging
from collections.abc import Mapping

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.config import settings
from app.models.company import Company
from app.queries.clients import ClientFilters
from app.telemetry import get_tracer

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


def _ensure_company(db: Session, company_id: int) -> Company:
    company = db.get(Company, company_id)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")
    return company


def _clamp_limit(limit: int | None) -> int:
    if not limit or limit < 1:
        return settings.client_list_default_limit
    return min(limit, settings.client_list_max_limit)


class Clients:
    @staticmethod
    def filters(db: Session, company_id: int, params: Mapping[str, str | None]) -> ClientFilters:
        """Build the tenant's client filters from request parameters.

        Falls back to the configured default sort when none is given.
        """
        _ensure_company(db, company_id)
        params = dict(params)
        if not params.get("sort"):
            params["sort"] = settings.client_list_default_sort
        return ClientFilters(db, company_id).apply(params)

    @staticmethod
    def list(
        db: Session,
        company_id: int,
        params: Mapping[str, str | None],
        limit: int | None = None,
        offset: int = 0,
    ):
        with tracer.start_as_current_span("clients.list") as span:
            span.set_attribute("company_id", company_id)
            rows = (
                Clients.filters(db, company_id, params)
                .paginate(_clamp_limit(limit), offset)
                .all()
            )
            span.set_attribute("result_count", len(rows))
        return rows

    @staticmethod
    def list_response(
        db: Session,
        company_id: int,
        params: Mapping[str, str | None],
        limit: int | None = None,
        offset: int = 0,
    ) -> dict:
        limit = _clamp_limit(limit)
        with tracer.start_as_current_span("clients.list_response") as span:
            span.set_attribute("company_id", company_id)
            filters = Clients.filters(db, company_id, params)
            count = filters.count()
            rows = filters.paginate(limit, offset).all()
            span.set_attribute("result_count", count)
        logger.debug(
            "Listed %d of %d clients for company %s with %s",
            len(rows),
            count,
            company_id,
            {key: value for key, value in params.items() if value},
        )
        return {
            "items": [dict(row._mapping) for row in rows],
            "count": count,
            "limit": limit,
            "offset": offset,
        }


clients = Clients()
