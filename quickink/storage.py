"""
Google Cloud Storage client module.
Uploads generated signed documents and builds their object paths.
"""
import logging
import re
from datetime import datetime
from typing import Optional
from urllib.parse import quote

from google.cloud import storage

from quickink.config import get_settings, Settings
from quickink.utils.datetime_utils import epoch_millis, utc_now

logger = logging.getLogger(__name__)

SAFE_FILENAME_MAX_LENGTH = 50


def safe_filename(title: str, max_length: int = SAFE_FILENAME_MAX_LENGTH) -> str:
    """
    Turn a document title into a storage-safe filename stem.

    Non-alphanumeric characters are stripped, whitespace runs become a single
    underscore, and the result is truncated.

    Example:
        "Bob's Agreement #1!" -> "Bobs_Agreement_1"
    """
    cleaned = re.sub(r"[^A-Za-z0-9\s]", "", title or "")
    cleaned = re.sub(r"\s+", "_", cleaned.strip())
    cleaned = cleaned[:max_length].strip("_")
    return cleaned or "document"


def normalize_storage_path(path: str) -> str:
    """
    Validate an object path before it reaches the bucket.

    Raises ValueError for empty paths, path traversal attempts or absolute paths.
    """
    if not path:
        raise ValueError("Storage path cannot be empty")
    if ".." in path:
        raise ValueError("Path traversal not allowed")
    if path.startswith("/"):
        raise ValueError("Absolute paths not allowed")
    return path


def build_signed_document_path(
    document_id: str,
    title: str,
    folder: str = "signed-documents",
    now: Optional[datetime] = None,
) -> str:
    """Object path: <folder>/<document_id>/<safe_title>_signed_<epoch ms>.pdf"""
    stamp = epoch_millis(now or utc_now())
    path = f"{folder.strip('/')}/{document_id}/{safe_filename(title)}_signed_{stamp}.pdf"
    return normalize_storage_path(path)


class StorageClient:
    """Google Cloud Storage client wrapper."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._client: Optional[storage.Client] = None
        self._bucket: Optional[storage.Bucket] = None

    @property
    def client(self) -> storage.Client:
        if self._client is None:
            self._client = storage.Client()
        return self._client

    @property
    def bucket(self) -> storage.Bucket:
        if self._bucket is None:
            self._bucket = self.client.bucket(self.settings.gcs_bucket)
        return self._bucket

    def public_url(self, path: str) -> str:
        """Public retrieval URL of an object."""
        base = self.settings.gcs_public_base_url.rstrip("/")
        return f"{base}/{self.settings.gcs_bucket}/{quote(path)}"

    def upload_bytes(
        self,
        data: bytes,
        path: str,
        content_type: str = "application/pdf",
    ) -> str:
        """
        Upload bytes to the bucket.

        Returns:
            Public URL of the uploaded object
        """
        path = normalize_storage_path(path)
        blob = self.bucket.blob(path)
        blob.upload_from_string(data, content_type=content_type)
        logger.info(f"Uploaded {len(data)} bytes to {path}")
        return self.public_url(path)


# Singleton instance
_storage_client: Optional[StorageClient] = None


def get_storage_client() -> StorageClient:
    """Get the storage client singleton."""
    global _storage_client
    if _storage_client is None:
        _storage_client = StorageClient()
    return _storage_client
