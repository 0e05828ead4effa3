"""
File storage for uploaded documents (licenses, claim proofs, ad images).

Two implementations share the same ``upload`` / ``delete`` interface:

- S3FileStorage: objects under ``<uploads_prefix>/<folder>/`` in the bucket
  from ``get_api_config('s3')``
- LocalFileStorage: files on disk, used when S3 is not configured

Usage:
    from src.utils.storage import get_file_storage

    storage = get_file_storage()
    key = storage.upload('licenses/user-1', 'license.pdf', pdf_bytes, 'application/pdf')
"""

import logging
import re
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)


def safe_object_name(filename: str) -> str:
    """Timestamp-prefixed file name with anything but letters, digits, dot, dash and underscore removed."""
    stem = re.sub(r"[^A-Za-z0-9._-]", "", (filename or "").replace(" ", "_")) or "file"
    return f"{int(time.time() * 1000)}_{stem}"


class FileStorage(ABC):
    @abstractmethod
    def upload(self, folder: str, filename: str, data: bytes, content_type: Optional[str] = None) -> str:
        """Store ``data`` under ``folder`` and return a key that ``delete`` accepts."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a stored file."""


class S3FileStorage(FileStorage):
    """Uploaded files stored in S3."""

    def __init__(self, config: Optional[Dict[str, Any]] = None, client=None):
        from src.utils.config import get_api_config

        self.config = config if config is not None else get_api_config("s3")
        has_credentials = bool(self.config.get("aws_access_key_id")) and bool(
            self.config.get("aws_secret_access_key")
        )
        self.enabled = bool(self.config.get("bucket_name")) and (client is not None or has_credentials)
        self.prefix = (self.config.get("uploads_prefix") or "uploads").strip("/")
        self._client = client

    def is_configured(self) -> bool:
        """Check if S3 is properly configured."""
        return self.enabled

    def _get_client(self):
        """Lazy initialization of boto3 client."""
        if self._client is None and self.enabled:
            import boto3

            self._client = boto3.client(
                "s3",
                aws_access_key_id=self.config["aws_access_key_id"],
                aws_secret_access_key=self.config["aws_secret_access_key"],
                region_name=self.config.get("region_name", "us-east-1"),
            )
        if self._client is None:
            raise RuntimeError("File storage is not configured")
        return self._client

    def upload(self, folder: str, filename: str, data: bytes, content_type: Optional[str] = None) -> str:
        """
        Upload a file and return its S3 URI.

        Args:
            folder: Sub-folder under the uploads prefix (e.g. 'claims/<user id>')
            filename: Original file name
            data: File contents
            content_type: Optional MIME type stored with the object

        Returns:
            ``s3://<bucket>/<key>``
        """
        client = self._get_client()
        key = f"{self.prefix}/{folder.strip('/')}/{safe_object_name(filename)}"
        extra = {"ContentType": content_type} if content_type else {}
        try:
            client.put_object(Bucket=self.config["bucket_name"], Key=key, Body=data, **extra)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to upload '{filename}' to S3: {e}")
            raise
        logger.info(f"Uploaded {filename} to s3://{self.config['bucket_name']}/{key}")
        return f"s3://{self.config['bucket_name']}/{key}"

    def delete(self, key: str) -> None:
        client = self._get_client()
        prefix = f"s3://{self.config['bucket_name']}/"
        if key.startswith(prefix):
            key = key[len(prefix) :]
        try:
            client.delete_object(Bucket=self.config["bucket_name"], Key=key)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to delete '{key}' from S3: {e}")
            raise


class LocalFileStorage(FileStorage):
    """Uploaded files written under a local directory."""

    def __init__(self, root):
        self.root = Path(root)

    def upload(self, folder: str, filename: str, data: bytes, content_type: Optional[str] = None) -> str:
        target_dir = self.root / folder.strip("/")
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / safe_object_name(filename)
        target.write_bytes(data)
        logger.info(f"Stored {filename} at {target}")
        return str(target)

    def delete(self, key: str) -> None:
        Path(key).unlink(missing_ok=True)


def get_file_storage() -> FileStorage:
    """S3 storage when configured, local files otherwise."""
    from src.utils.config import get_backend_config

    s3_storage = S3FileStorage()
    if s3_storage.is_configured():
        return s3_storage
    return LocalFileStorage(get_backend_config()["uploads_dir"])
