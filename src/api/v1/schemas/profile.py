"""Pydantic schemas for the Profile API."""

from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ProfileUserResponse(BaseModel):
    """The persisted user as seen by the form."""

    id: UUID
    name: str
    email: str
    avatar: str | None = None
    avatar_url: str | None = None


class ProfileStateResponse(BaseModel):
    """Form state after a hook ran."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "user": {
                    "id": "123e4567-e89b-12d3-a456-426614174000",
                    "name": "Jane Doe",
                    "email": "jane@example.com",
                    "avatar": "avatars/3f2c9e1b7a.png",
                    "avatar_url": "/storage/avatars/3f2c9e1b7a.png",
                },
                "avatar": None,
                "password_set": False,
            }
        },
    )

    user: ProfileUserResponse
    avatar: str | None = Field(None, description="Filename of a staged, unsaved avatar")
    password_set: bool = False


class ProfileStateEnvelope(BaseModel):
    """Form state plus the flash messages raised by the action."""

    data: ProfileStateResponse
    notifications: list[str] = Field(default_factory=list)


class ProfileViewResponse(BaseModel):
    """View handle for the UI shell."""

    template: str
    layout: str
    title: str
    fields: list[dict[str, Any]]
    data: ProfileStateResponse


class ProfileViewEnvelope(BaseModel):
    """Schema for the rendered profile form."""

    data: ProfileViewResponse
