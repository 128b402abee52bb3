"""Protocols for the collaborators a form component talks to."""

from typing import Protocol

from domain.entities.upload import StagedUpload


class IFileStorage(Protocol):
    """A named storage disk addressed by relative paths."""

    def put(self, directory: str, upload: StagedUpload) -> str:
        """Store the upload under ``directory`` and return its path."""
        ...

    def delete(self, path: str) -> bool:
        """Delete a stored file. Returns False if nothing was there."""
        ...

    def exists(self, path: str) -> bool:
        ...

    def url(self, path: str) -> str:
        """Public URL for a stored path."""
        ...


class IPasswordHasher(Protocol):
    """One-way password hashing."""

    def hash(self, password: str) -> str:
        ...

    def verify(self, password: str, hashed: str) -> bool:
        ...


class INotifier(Protocol):
    """Sink for user-visible flash messages."""

    def notify(self, message: str) -> None:
        ...
