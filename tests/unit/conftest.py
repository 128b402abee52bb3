"""Shared fixtures for unit tests."""

import threading
from typing import Any
from unittest.mock import AsyncMock

import pytest

from domain.entities.upload import StagedUpload
from domain.entities.user import User


class FakeUnitOfWork:
    """Fake Unit of Work with a mocked user repository."""

    def __init__(self) -> None:
        self.users = AsyncMock()
        self.users.email_taken.return_value = False
        self.committed = False
        self.rolled_back = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, exc_type: Any, *args: Any) -> None:
        if exc_type:
            await self.rollback()


class FakeStorage:
    """In-memory storage disk that records every call."""

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.put_calls: list[str] = []
        self.deleted: list[str] = []

    def put(self, directory: str, upload: StagedUpload) -> str:
        path = f"{directory}/{upload.filename}"
        self.files[path] = upload.content
        self.put_calls.append(path)
        return path

    def delete(self, path: str) -> bool:
        self.deleted.append(path)
        return self.files.pop(path, None) is not None

    def exists(self, path: str) -> bool:
        return path in self.files

    def url(self, path: str) -> str:
        return f"/storage/{path}"


class FakeHasher:
    def __init__(self) -> None:
        self.hashed: list[str] = []
        self.threads: list[int] = []

    def hash(self, password: str) -> str:
        self.hashed.append(password)
        self.threads.append(threading.get_ident())
        return f"hashed:{password[::-1]}"

    def verify(self, password: str, hashed: str) -> bool:
        return hashed == f"hashed:{password[::-1]}"


class FakeNotifier:
    def __init__(self) -> None:
        self.messages: list[str] = []

    def notify(self, message: str) -> None:
        self.messages.append(message)


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def fake_hasher() -> FakeHasher:
    return FakeHasher()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def user() -> User:
    """A persisted user with no avatar."""
    return User(name="Jane Doe", email="jane@example.com", password="hashed:old-hash")
