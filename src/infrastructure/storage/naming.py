"""Stored file naming."""

import mimetypes
import secrets
from pathlib import PurePosixPath

from domain.entities.upload import StagedUpload

# mimetypes returns odd picks for a few common types
_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/bmp": ".bmp",
    "image/svg+xml": ".svg",
}


def hash_name(upload: StagedUpload) -> str:
    """Random 40-character file name keeping a sensible extension."""
    extension = _EXTENSIONS.get(upload.content_type)
    if extension is None:
        extension = mimetypes.guess_extension(upload.content_type) or PurePosixPath(
            upload.filename
        ).suffix.lower()
    return f"{secrets.token_hex(20)}{extension}"


def join_path(directory: str, name: str) -> str:
    directory = directory.strip("/")
    return f"{directory}/{name}" if directory else name
