"""Dependency injection container.

This module provides a centralized container for managing service dependencies,
enabling proper testing through dependency mocking and ensuring explicit
dependency graphs.

Usage:
    from app.container import container

    # In route handlers
    filters = container.user_filters(db)

    # In tests
    with container.clients_service.override(MockClients()):
        response = client.get("/companies/1/clients")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from dependency_injector import containers, providers  # type: ignore[import-not-found]

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


def _user_filters_factory(db: "Session"):
    from app.queries.users import UserFilters
    return UserFilters(db)


def _get_clients_service():
    from app.services.clients import clients
    return clients


class Container(containers.DeclarativeContainer):
    """Application dependency injection container.

    Provides:
    - Query filter factories
    - Service instances
    """

    # -------------------------------------------------------------------------
    # Query Filter Factories
    # -------------------------------------------------------------------------
    # A new filters instance per request; they are mutable and not shareable.

    user_filters = providers.Factory(_user_filters_factory)

    # -------------------------------------------------------------------------
    # Service Providers
    # -------------------------------------------------------------------------
    # Services are stateless managers, provided as singletons

    clients_service = providers.Singleton(_get_clients_service)


# Global container instance
container = Container()

