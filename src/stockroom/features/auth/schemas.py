"""Pydantic schemas for authentication, defining the structure for request and response data."""

from pydantic import BaseModel, ConfigDict, Field, EmailStr
from typing import List, Literal, Optional
import datetime

Role = Literal["admin", "manager", "user"]


class UserBase(BaseModel):
    email: EmailStr = Field(..., description="User email address, also used to log in")
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)


class UserCreate(UserBase):
    password: str = Field(..., min_length=8, description="User password")
    role: Role = Field("user", description="User role")


class UserResponse(UserBase):
    id: str = Field(..., description="Unique identifier for the user (KSUID)")
    role: str = Field(..., description="User role (admin, manager or user)")
    is_active: bool = Field(..., description="Whether the user account is active")
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = ConfigDict(
        from_attributes=True,
        protected_namespaces=(),
    )


class UserUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    role: Optional[Role] = None


class UserStatusUpdate(BaseModel):
    is_active: bool = Field(..., description="Activate (true) or deactivate (false) the account")


class PaginatedUserResponse(BaseModel):
    users: List[UserResponse]
    total: int
    limit: int
    offset: int
    has_more: bool


class UserRow(BaseModel):
    """Read-only snapshot of a user as seen by reports."""

    id: str
    first_name: str
    last_name: str
    role: str

    model_config = ConfigDict(from_attributes=True, frozen=True)


class Token(BaseModel):
    access_token: str
    token_type: str
