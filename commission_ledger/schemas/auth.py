"""Authentication schemas."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from commission_ledger.models import ActorRole


class LoginRequest(BaseModel):
    """Login request body."""

    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    """Login response."""

    success: bool
    message: str
    role: str = Field(default="")


class ActorResponse(BaseModel):
    """Public view of an actor."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    display_name: str
    role: ActorRole
    parent_id: Optional[int]
    pincode: Optional[str]
    taluk: Optional[str]
    district: Optional[str]
    wallet_balance: Decimal
