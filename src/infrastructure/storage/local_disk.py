"""Filesystem storage disk."""

from pathlib import Path

import structlog

from domain.entities.upload import StagedUpload
from infrastructure.storage.naming import hash_name, join_path

logger = structlog.get_logger()


class LocalDisk:
    """Stores files under a root directory served from ``base_url``."""

    def __init__(self, root: str | Path, base_url: str = "/storage") -> None:
        self._root = Path(root).resolve()
        self._base_url = base_url.rstrip("/")

    def put(self, directory: str, upload: StagedUpload) -> str:
        path = join_path(directory, hash_name(upload))
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(upload.content)
        logger.debug("file_stored", disk="local", path=path, size=upload.size)
        return path

    def delete(self, path: str) -> bool:
        target = self._resolve(path)
        if not target.is_file():
            return False
        target.unlink()
        logger.debug("file_deleted", disk="local", path=path)
        return True

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    def _resolve(self, path: str) -> Path:
        target = (self._root / path).resolve()
        if not target.is_relative_to(self._root):
            raise ValueError(f"Path escapes storage root: {path}")
        return target
