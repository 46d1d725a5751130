from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class ClientListRead(BaseModel):
    """One row of the client list, with currency and country already resolved."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str | None = None
    id_number: str | None = None
    private_notes: str | None = None
    contact: str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    balance: Decimal
    currency_id: int | None = None
    country_id: int | None = None
    user_id: int | None = None
    last_login: datetime | None = None
    created_at: datetime
    client_created_at: datetime
    deleted_at: datetime | None = None
    is_deleted: bool
