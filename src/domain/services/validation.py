"""Field-keyed validation rules for form components.

Rules are small objects evaluated against a flat mapping of field keys to
values (``{"user.email": "a@b.c", "avatar": StagedUpload(...)}``). Each field
stops at its first failing rule; every field is checked before the
collected failures are raised together as a ``ValidationFailedError``.
"""

import io
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

import structlog
from email_validator import EmailNotValidError, validate_email
from PIL import Image as PillowImage
from PIL import UnidentifiedImageError
from starlette.concurrency import run_in_threadpool

from core.exceptions import ValidationFailedError
from domain.entities.upload import StagedUpload

logger = structlog.get_logger()

# Formats Pillow must identify for a raster upload to count as an image
IMAGE_FORMATS = {"JPEG", "PNG", "GIF", "BMP", "WEBP"}


def label_for(field: str) -> str:
    """Human label for a field key: ``user.password_confirmation`` -> ``password confirmation``."""
    return field.rsplit(".", 1)[-1].replace("_", " ")


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


class Rule:
    """Base class for a validation rule.

    ``implicit`` rules run even when the value is empty; all others are
    skipped for empty values.
    """

    implicit = False

    async def check(self, field: str, value: Any, data: Mapping[str, Any]) -> str | None:
        """Return an error message, or None when the value passes."""
        raise NotImplementedError


class Required(Rule):
    implicit = True

    async def check(self, field: str, value: Any, data: Mapping[str, Any]) -> str | None:
        if is_empty(value):
            return f"The {label_for(field)} field is required."
        return None


class RequiredWith(Rule):
    """Required when ``other`` has a non-empty value."""

    implicit = True

    def __init__(self, other: str) -> None:
        self.other = other

    async def check(self, field: str, value: Any, data: Mapping[str, Any]) -> str | None:
        if is_empty(value) and not is_empty(data.get(self.other)):
            return (
                f"The {label_for(field)} field is required when "
                f"{label_for(self.other)} is present."
            )
        return None


class Nullable(Rule):
    """Marks a field as optional. Never fails."""

    async def check(self, field: str, value: Any, data: Mapping[str, Any]) -> str | None:
        return None


class String(Rule):
    async def check(self, field: str, value: Any, data: Mapping[str, Any]) -> str | None:
        if not isinstance(value, str):
            return f"The {label_for(field)} must be a string."
        return None


class Min(Rule):
    """Minimum length in characters."""

    def __init__(self, length: int) -> None:
        self.length = length

    async def check(self, field: str, value: Any, data: Mapping[str, Any]) -> str | None:
        if len(str(value)) < self.length:
            return f"The {label_for(field)} must be at least {self.length} characters."
        return None


class Max(Rule):
    """Maximum length in characters."""

    def __init__(self, length: int) -> None:
        self.length = length

    async def check(self, field: str, value: Any, data: Mapping[str, Any]) -> str | None:
        if len(str(value)) > self.length:
            return f"The {label_for(field)} must not be greater than {self.length} characters."
        return None


class Email(Rule):
    """RFC 5322 address syntax, checked without DNS lookups."""

    async def check(self, field: str, value: Any, data: Mapping[str, Any]) -> str | None:
        try:
            validate_email(str(value), check_deliverability=False)
        except EmailNotValidError:
            return f"The {label_for(field)} must be a valid email address."
        return None


class Image(Rule):
    """The value must be an uploaded raster image or SVG document."""

    async def check(self, field: str, value: Any, data: Mapping[str, Any]) -> str | None:
        message = f"The {label_for(field)} must be an image."
        if not isinstance(value, StagedUpload):
            return message
        if _looks_like_svg(value):
            return None
        image_format = await run_in_threadpool(_image_format, value.content)
        if image_format not in IMAGE_FORMATS:
            return message
        return None


class MaxKilobytes(Rule):
    """Maximum upload size in kilobytes."""

    def __init__(self, kilobytes: int) -> None:
        self.kilobytes = kilobytes

    async def check(self, field: str, value: Any, data: Mapping[str, Any]) -> str | None:
        if isinstance(value, StagedUpload) and value.size_kilobytes > self.kilobytes:
            return f"The {label_for(field)} must not be greater than {self.kilobytes} kilobytes."
        return None


class Confirmed(Rule):
    """The value must equal ``<field>_confirmation``."""

    async def check(self, field: str, value: Any, data: Mapping[str, Any]) -> str | None:
        if data.get(f"{field}_confirmation") != value:
            return f"The {label_for(field)} confirmation does not match."
        return None


class Same(Rule):
    def __init__(self, other: str) -> None:
        self.other = other

    async def check(self, field: str, value: Any, data: Mapping[str, Any]) -> str | None:
        if data.get(self.other) != value:
            return f"The {label_for(field)} and {label_for(self.other)} must match."
        return None


class Unique(Rule):
    """The value must not be taken by another record.

    ``taken`` is an async predicate supplied by the caller, typically a
    repository lookup that already excludes the record being edited.
    """

    def __init__(self, taken: Callable[[Any], Awaitable[bool]]) -> None:
        self.taken = taken

    async def check(self, field: str, value: Any, data: Mapping[str, Any]) -> str | None:
        if await self.taken(value):
            return f"The {label_for(field)} has already been taken."
        return None


RuleSet = Mapping[str, Sequence[Rule]]


async def validate(data: Mapping[str, Any], rules: RuleSet) -> None:
    """Validate ``data`` against ``rules``.

    Raises:
        ValidationFailedError: with every failing field and its message
    """
    errors: dict[str, list[str]] = {}

    for field, field_rules in rules.items():
        value = data.get(field)
        empty = is_empty(value)
        for rule in field_rules:
            if empty and not rule.implicit:
                continue
            message = await rule.check(field, value, data)
            if message:
                errors[field] = [message]
                break

    if errors:
        logger.info("validation_failed", fields=sorted(errors))
        raise ValidationFailedError(errors)


def _looks_like_svg(upload: StagedUpload) -> bool:
    if upload.content_type != "image/svg+xml":
        return False
    head = upload.content[:1024].lstrip().lower()
    return head.startswith(b"<svg") or (head.startswith(b"<?xml") and b"<svg" in head)


def _image_format(content: bytes) -> str | None:
    """Pillow's format name for verified image bytes, or None."""
    try:
        with PillowImage.open(io.BytesIO(content)) as img:
            image_format = img.format
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
        return None
    return image_format
