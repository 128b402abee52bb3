"""Storage disk lookup by name."""

from core.config import Settings, settings as default_settings
from domain.services.contracts import IFileStorage
from infrastructure.storage.local_disk import LocalDisk
from infrastructure.storage.s3_disk import S3Disk


def get_disk(name: str, config: Settings = default_settings) -> IFileStorage:
    """Build the storage disk registered under ``name``."""
    if name == "local":
        return LocalDisk(config.storage_root, config.storage_url)
    if name == "s3":
        return S3Disk(
            bucket_name=config.s3_bucket_name,
            region=config.s3_region,
            aws_access_key_id=config.aws_access_key_id,
            aws_secret_access_key=config.aws_secret_access_key,
        )
    raise ValueError(f"Unknown storage disk: {name}")
