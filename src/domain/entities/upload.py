"""Staged file upload held in form state."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class StagedUpload:
    """An uploaded file that has not been written to a storage disk yet."""

    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        """Size in bytes."""
        return len(self.content)

    @property
    def size_kilobytes(self) -> float:
        return self.size / 1024
