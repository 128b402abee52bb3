"""Common Pydantic schemas shared across the API."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class ErrorResponse(BaseModel):
    """Standardized error response.

    For validation failures ``details`` maps each field key to its messages.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error_code": "VALIDATION_ERROR",
                "message": "The given data was invalid",
                "details": {"user.email": ["The email has already been taken."]},
            }
        },
    )

    error_code: str
    message: str
    details: Any | None = None
