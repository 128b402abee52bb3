"""Unit tests for the validation rules."""

import io

import pytest
from PIL import Image as PillowImage

from core.exceptions import ValidationFailedError
from domain.entities.upload import StagedUpload
from domain.services.validation import (
    Confirmed,
    Email,
    Image,
    Max,
    MaxKilobytes,
    Min,
    Nullable,
    Required,
    RequiredWith,
    Same,
    String,
    Unique,
    label_for,
    validate,
)


def _upload(content: bytes, content_type: str = "image/png") -> StagedUpload:
    return StagedUpload(filename="file", content_type=content_type, content=content)


def _encoded(fmt: str) -> bytes:
    buffer = io.BytesIO()
    PillowImage.new("RGB", (4, 4)).save(buffer, format=fmt)
    return buffer.getvalue()


class TestLabels:
    def test_uses_last_segment(self):
        assert label_for("user.email") == "email"

    def test_replaces_underscores(self):
        assert label_for("password_confirmation") == "password confirmation"


class TestValidate:
    async def test_passes_silently(self):
        await validate({"name": "Jane"}, {"name": [Required(), String(), Min(2)]})

    async def test_collects_errors_from_every_field(self):
        with pytest.raises(ValidationFailedError) as exc_info:
            await validate(
                {"user.name": "", "user.email": "nope"},
                {"user.name": [Required()], "user.email": [Required(), Email()]},
            )

        assert exc_info.value.errors == {
            "user.name": ["The name field is required."],
            "user.email": ["The email must be a valid email address."],
        }
        assert exc_info.value.status_code == 422

    async def test_stops_at_first_failure_per_field(self):
        with pytest.raises(ValidationFailedError) as exc_info:
            await validate({"password": "abc"}, {"password": [Min(6), Confirmed()]})

        assert exc_info.value.errors["password"] == [
            "The password must be at least 6 characters."
        ]

    async def test_empty_optional_value_skips_rules(self):
        await validate(
            {"password": "", "avatar": None},
            {
                "password": [Nullable(), String(), Min(6), Confirmed()],
                "avatar": [Nullable(), Image(), MaxKilobytes(1)],
            },
        )

    async def test_whitespace_counts_as_empty(self):
        with pytest.raises(ValidationFailedError):
            await validate({"name": "   "}, {"name": [Required()]})


class TestRules:
    async def test_required_with(self):
        rule = RequiredWith("password_confirmation")
        assert await rule.check("password", None, {"password_confirmation": "x"})
        assert await rule.check("password", None, {}) is None

    async def test_string(self):
        assert await String().check("name", 42, {})
        assert await String().check("name", "ok", {}) is None

    async def test_max_characters(self):
        assert await Max(3).check("name", "abcd", {}) == (
            "The name must not be greater than 3 characters."
        )
        assert await Max(3).check("name", "abc", {}) is None

    @pytest.mark.parametrize(
        "value,valid",
        [
            ("jane@example.com", True),
            ("jane.doe+tag@mail.example.org", True),
            ("jane@localhost", False),
            ("jane.example.com", False),
            ("ja ne@example.com", False),
            ("a@b..c", False),
            ("<x>@y.z", False),
            ("a@b.c.", False),
        ],
    )
    async def test_email(self, value: str, valid: bool):
        assert (await Email().check("email", value, {}) is None) is valid

    async def test_confirmed(self):
        data = {"password": "secret1", "password_confirmation": "secret2"}
        assert await Confirmed().check("password", "secret1", data) == (
            "The password confirmation does not match."
        )
        data["password_confirmation"] = "secret1"
        assert await Confirmed().check("password", "secret1", data) is None

    async def test_same(self):
        assert await Same("password").check("password_confirmation", "a", {"password": "b"})
        assert await Same("password").check("password_confirmation", "a", {"password": "a"}) is None

    async def test_unique_uses_predicate(self):
        seen: list[str] = []

        async def taken(value: str) -> bool:
            seen.append(value)
            return value == "taken@example.com"

        rule = Unique(taken)
        assert await rule.check("user.email", "taken@example.com", {}) == (
            "The email has already been taken."
        )
        assert await rule.check("user.email", "free@example.com", {}) is None
        assert seen == ["taken@example.com", "free@example.com"]


class TestImageRules:
    @pytest.mark.parametrize("fmt", ["PNG", "JPEG", "GIF", "BMP", "WEBP"])
    async def test_accepts_common_formats(self, fmt: str):
        assert await Image().check("avatar", _upload(_encoded(fmt)), {}) is None

    async def test_rejects_plain_text(self):
        message = await Image().check("avatar", _upload(b"hello", "text/plain"), {})
        assert message == "The avatar must be an image."

    async def test_rejects_truncated_png(self):
        assert await Image().check("avatar", _upload(_encoded("PNG")[:20]), {})

    async def test_rejects_non_upload_values(self):
        assert await Image().check("avatar", "avatars/a.png", {})

    async def test_accepts_svg(self):
        svg = b'<?xml version="1.0"?><svg xmlns="http://www.w3.org/2000/svg"></svg>'
        assert await Image().check("avatar", _upload(svg, "image/svg+xml"), {}) is None

    async def test_rejects_svg_content_type_with_other_content(self):
        assert await Image().check("avatar", _upload(b"<html></html>", "image/svg+xml"), {})

    async def test_max_kilobytes(self):
        rule = MaxKilobytes(1)
        assert await rule.check("avatar", _upload(b"x" * 1025), {}) == (
            "The avatar must not be greater than 1 kilobytes."
        )
        assert await rule.check("avatar", _upload(b"x" * 1024), {}) is None

    async def test_image_decoding_runs_off_the_event_loop(self, monkeypatch: pytest.MonkeyPatch):
        import threading

        from domain.services import validation

        loop_thread = threading.get_ident()
        seen: list[int] = []
        original = validation._image_format

        def recording(content: bytes) -> str | None:
            seen.append(threading.get_ident())
            return original(content)

        monkeypatch.setattr(validation, "_image_format", recording)

        assert await Image().check("avatar", _upload(_encoded("PNG")), {}) is None
        assert seen and seen[0] != loop_thread
