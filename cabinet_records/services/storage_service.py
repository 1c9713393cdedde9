"""Object storage for uploaded record files.

Two backends share one contract: ``upload(data, key, content_type)`` returns
the stored location and ``delete(location)`` removes it. Provider failures surface
as StorageError. A completed call means the object is stored; nothing more
is assumed about durability.
"""

import logging
import re
import time
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..core.config import Settings, StorageBackend, settings as default_settings
from ..exceptions import StorageError

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[\\/]+")
_WHITESPACE = re.compile(r"\s+")


def build_upload_key(original_name: str) -> str:
    """Key for a new upload: ``<epoch-ms>-<random>-<sanitized name>``.

    The random segment keeps keys distinct when the same file name is
    uploaded twice within one millisecond.
    """
    sanitized = _WHITESPACE.sub("_", _UNSAFE_CHARS.sub("_", original_name.strip())) or "file"
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{sanitized}"


class StorageBase(ABC):
    """Abstract base class for storage backends."""

    @abstractmethod
    def initialize(self) -> None:
        """Prepare the storage location. Called once at startup."""

    @abstractmethod
    def upload(self, data: bytes, key: str, content_type: str = "application/octet-stream") -> str:
        """Store *data* under *key* and return its location."""

    @abstractmethod
    def delete(self, location: str) -> None:
        """Remove the object at *location*, as returned by upload()."""


class LocalFileStorage(StorageBase):
    """Stores uploads in a local directory."""

    def __init__(self, upload_dir: str):
        self.upload_dir = Path(upload_dir)

    def initialize(self) -> None:
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def upload(self, data: bytes, key: str, content_type: str = "application/octet-stream") -> str:
        path = self.upload_dir / key
        try:
            path.write_bytes(data)
        except OSError as e:
            logger.error("Error writing upload %s: %s", key, e)
            raise StorageError("Failed to store file", key=key) from e
        return str(path)

    def delete(self, location: str) -> None:
        try:
            Path(location).unlink()
        except OSError as e:
            logger.error("Error deleting upload %s: %s", location, e)
            raise StorageError("Failed to delete file", key=location) from e


class R2Storage(StorageBase):
    """Cloudflare R2 through its S3-compatible API."""

    def __init__(self, config: Settings, client=None):
        self.bucket_name = config.r2_bucket_name
        self.folder = config.r2_folder.strip("/")
        self.s3 = client or boto3.client(
            "s3",
            region_name="auto",
            endpoint_url=config.r2_endpoint_url,
            aws_access_key_id=config.r2_access_key_id,
            aws_secret_access_key=config.r2_secret_access_key,
        )

    def initialize(self) -> None:
        # Buckets are provisioned outside the application.
        pass

    def _object_key(self, key: str) -> str:
        return f"{self.folder}/{key}" if self.folder else key

    def upload(self, data: bytes, key: str, content_type: str = "application/octet-stream") -> str:
        object_key = self._object_key(key)
        try:
            self.s3.put_object(
                Bucket=self.bucket_name,
                Key=object_key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("Error uploading to R2: %s", e)
            raise StorageError("Failed to upload file to R2", key=object_key) from e
        return object_key

    def delete(self, location: str) -> None:
        try:
            self.s3.delete_object(Bucket=self.bucket_name, Key=location)
        except (BotoCoreError, ClientError) as e:
            logger.error("Error deleting from R2: %s", e)
            raise StorageError("Failed to delete file from R2", key=location) from e


def get_storage(config: Optional[Settings] = None) -> StorageBase:
    """Return the storage backend selected by STORAGE_BACKEND."""
    config = config or default_settings
    if config.storage_backend == StorageBackend.R2:
        config.validate_storage_config()
        return R2Storage(config)
    return LocalFileStorage(config.upload_dir)
