"""Durable object storage on an S3-compatible bucket."""

import logging

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from src.config import get_settings
from src.services.errors import ArtifactError

logger = logging.getLogger(__name__)


class StorageService:
    """Uploads recipe artifacts and hands back their public URLs.

    Every public URL contains the bucket name, which is how durable URLs are
    told apart from third-party ones.
    """

    def __init__(self, client=None) -> None:
        self.settings = get_settings()
        self._client = client

    @property
    def client(self):
        """Lazily created boto3 S3 client."""
        if self._client is None:
            self._client = boto3.client(
                "s3",
                endpoint_url=self.settings.storage_endpoint_url,
                aws_access_key_id=self.settings.storage_access_key_id,
                aws_secret_access_key=self.settings.storage_secret_access_key,
                region_name=self.settings.storage_region,
                config=Config(
                    signature_version="s3v4",
                    retries={"max_attempts": 3, "mode": "adaptive"},
                ),
            )
        return self._client

    @property
    def default_bucket(self) -> str:
        return self.settings.thumbnail_bucket

    def public_url(self, bucket: str, name: str) -> str:
        """Build the public URL of an object."""
        base = self.settings.storage_public_base_url or self.settings.storage_endpoint_url
        if base:
            return f"{base.rstrip('/')}/{bucket}/{name}"
        return f"https://{bucket}.s3.amazonaws.com/{name}"

    def upload(self, bucket: str, name: str, data: bytes, content_type: str) -> str:
        """Upload bytes and return the object's public URL.

        Raises:
            ArtifactError: if the upload fails
        """
        try:
            self.client.put_object(
                Bucket=bucket,
                Key=name,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to upload {name} to {bucket}: {e}")
            raise ArtifactError(f"Upload of {name} failed: {e}") from e

        logger.info(f"Uploaded {name} ({len(data)} bytes) to {bucket}")
        return self.public_url(bucket, name)

    def is_durable_url(self, url: str | None) -> bool:
        """Check if a URL already points into the durable bucket."""
        return bool(url) and self.default_bucket in url


def get_storage_service() -> StorageService:
    """Get a storage service instance."""
    return StorageService()
