"""Pydantic models for API request/response."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from domain.model.user import User, UserCreateData, UserUpdateData


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case accepted on input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserCreateRequest(CamelModel):
    """Request model for user creation. Every field is required; values are stored as sent."""
    first_name: str
    last_name: str
    nickname: str
    email: str
    country: str
    password: str

    def to_domain(self, password_hash: str) -> UserCreateData:
        return UserCreateData(
            first_name=self.first_name,
            last_name=self.last_name,
            nickname=self.nickname,
            email=self.email,
            country=self.country,
            password=password_hash,
        )


class UserUpdateRequest(CamelModel):
    """Request model for partial update. Omitted or null fields stay unchanged."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    nickname: Optional[str] = None
    email: Optional[str] = None
    country: Optional[str] = None
    password: Optional[str] = None

    def to_domain(self) -> UserUpdateData:
        """Convert to a patch carrying only the supplied, non-null fields."""
        supplied = {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None
        }
        return UserUpdateData(**supplied)


class UserResponse(CamelModel):
    """Response model for a user. Never carries the password."""
    id: str = Field(..., description="User ID (24-character hex)")
    first_name: str
    last_name: str
    nickname: str
    email: str
    country: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, user: User) -> 'UserResponse':
        return cls(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            nickname=user.nickname,
            email=user.email,
            country=user.country,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class UserListResponse(BaseModel):
    """Response model for user listing."""
    users: list[UserResponse]


class CreateUserResponse(BaseModel):
    """Response model for user creation: the new identifier only."""
    id: str


class ErrorResponse(BaseModel):
    """Error envelope returned on every failure."""
    message: str
