"""Amazon S3 storage disk."""

from typing import Any, Optional

import boto3
import structlog
from botocore.exceptions import ClientError

from domain.entities.upload import StagedUpload
from infrastructure.storage.naming import hash_name, join_path

logger = structlog.get_logger()


class S3Disk:
    """Stores files as objects in a single S3 bucket."""

    def __init__(
        self,
        bucket_name: str,
        region: str = "us-east-1",
        aws_access_key_id: str = "",
        aws_secret_access_key: str = "",
        client: Optional[Any] = None,
    ) -> None:
        if not bucket_name:
            raise ValueError("S3 bucket name must be configured")

        self.bucket_name = bucket_name
        self.region = region
        self.s3_client = client or boto3.client(
            "s3",
            aws_access_key_id=aws_access_key_id or None,
            aws_secret_access_key=aws_secret_access_key or None,
            region_name=region,
        )

    def put(self, directory: str, upload: StagedUpload) -> str:
        key = join_path(directory, hash_name(upload))
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=upload.content,
                ContentType=upload.content_type,
            )
        except ClientError as e:
            logger.error("s3_put_failed", key=key, error=str(e))
            raise
        return key

    def delete(self, path: str) -> bool:
        if not self.exists(path):
            return False
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=path)
        except ClientError as e:
            logger.error("s3_delete_failed", key=path, error=str(e))
            raise
        return True

    def exists(self, path: str) -> bool:
        try:
            self.s3_client.head_object(Bucket=self.bucket_name, Key=path)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise
        return True

    def url(self, path: str) -> str:
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{path.lstrip('/')}"
