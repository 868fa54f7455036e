"""Auth Schemas — public-facing identity shapes.

Invariants:
    - UserResponse mirrors core.domain_types.User field-for-field
    - Session tokens never appear in response bodies (cookie only)
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from app.core.domain_types import Role


class UserResponse(BaseModel):
    """Current identity as returned by auth.me."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    open_id: str
    name: str | None = None
    email: str | None = None
    login_method: str | None = None
    role: Role
    created_at: datetime
    updated_at: datetime
    last_signed_in: datetime


class SuccessResponse(BaseModel):
    success: bool = True
