from fastapi import Depends
from sqlalchemy.orm import Session

from app.db import get_db

__all__ = ["get_clients_service", "get_db", "get_user_filters"]


# -------------------------------------------------------------------------
# Container-based Dependencies
# -------------------------------------------------------------------------
# These provide services from the DI container for use in route handlers.
# They can be easily mocked in tests by overriding the container providers.


def get_clients_service():
    """Get client listing service from container."""
    from app.container import container
    return container.clients_service()


# Query filter factories
def get_user_filters(db: Session = Depends(get_db)):
    """Get UserFilters with injected session."""
    from app.container import container
    return container.user_filters(db)
