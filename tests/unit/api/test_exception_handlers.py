"""Unit tests for exception handlers."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from api.exception_handlers import setup_exception_handlers
from core.exceptions import UnknownFieldError, UserNotFoundError, ValidationFailedError


def _create_test_app() -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)
    return app


async def _call(app: FastAPI, path: str):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        return await c.get(path)


class TestExceptionHandlers:
    @pytest.mark.asyncio
    async def test_app_exception_returns_error_code_and_message(self) -> None:
        app = _create_test_app()

        @app.get("/raise-app")
        async def _() -> None:
            raise UserNotFoundError("some-id")

        response = await _call(app, "/raise-app")

        assert response.status_code == 404
        body = response.json()
        assert body["error_code"] == "USER_NOT_FOUND"
        assert "some-id" in body["message"]
        assert body["details"]["user_id"] == "some-id"

    @pytest.mark.asyncio
    async def test_validation_failure_is_keyed_by_field(self) -> None:
        app = _create_test_app()

        @app.get("/raise-validation")
        async def _() -> None:
            raise ValidationFailedError({"user.email": ["The email has already been taken."]})

        response = await _call(app, "/raise-validation")

        assert response.status_code == 422
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert body["details"] == {"user.email": ["The email has already been taken."]}

    @pytest.mark.asyncio
    async def test_unknown_field_is_bad_request(self) -> None:
        app = _create_test_app()

        @app.get("/raise-field")
        async def _() -> None:
            raise UnknownFieldError("user.is_admin")

        response = await _call(app, "/raise-field")

        assert response.status_code == 400
        assert response.json()["error_code"] == "UNKNOWN_FIELD"

    @pytest.mark.asyncio
    async def test_http_exception_returns_standard_format(self) -> None:
        from starlette.exceptions import HTTPException

        app = _create_test_app()

        @app.get("/raise-http")
        async def _() -> None:
            raise HTTPException(status_code=403, detail="Forbidden")

        response = await _call(app, "/raise-http")

        assert response.status_code == 403
        assert response.json() == {
            "error_code": "HTTP_ERROR",
            "message": "Forbidden",
            "details": None,
        }

    @pytest.mark.asyncio
    async def test_unhandled_exception_returns_500(self) -> None:
        import json
        from unittest.mock import MagicMock

        app = _create_test_app()
        request = MagicMock()
        request.state.request_id = "test-req-id"

        handler = app.exception_handlers[Exception]
        response = await handler(request, RuntimeError("boom"))  # type: ignore[misc]

        assert response.status_code == 500
        body = json.loads(response.body)
        assert body["error_code"] == "INTERNAL_ERROR"
        assert body["details"]["request_id"] == "test-req-id"

    @pytest.mark.asyncio
    async def test_database_error_returns_503(self) -> None:
        from sqlalchemy.exc import OperationalError

        app = _create_test_app()

        @app.get("/raise-db")
        async def _() -> None:
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

        response = await _call(app, "/raise-db")

        assert response.status_code == 503
        body = response.json()
        assert body["error_code"] == "DATABASE_ERROR"
        assert "SELECT" not in body["message"]
