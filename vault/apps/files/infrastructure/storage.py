"""Blob store over Django storage backends."""

import logging
from collections.abc import Iterator
from typing import Any, BinaryIO, Protocol, final, override

from django.conf import settings
from django.core.files.storage import Storage, storages
from storages.backends.s3 import S3Storage

from vault.apps.files.exceptions import NotFoundOnStorageError, StorageError

logger = logging.getLogger(__name__)


class BlobStore(Protocol):
    """Byte storage keyed by opaque storage keys."""

    def put(self, key: str, content: BinaryIO) -> None:
        """Store ``content`` under ``key``."""

    def open(self, key: str) -> BinaryIO:
        """Open the blob for streaming reads."""

    def delete(self, key: str) -> None:
        """Remove the blob under ``key``."""

    def exists(self, key: str) -> bool:
        """Check whether a blob exists under ``key``."""

    def keys(self) -> Iterator[str]:
        """Iterate over every stored key."""


@final
class FileStorage(S3Storage):
    """S3 storage backend for user blobs.

    Extends django-storages S3Storage with upload and delete logging.
    Works with any S3-compatible service (AWS, MinIO, R2).
    """

    @override
    def save(  # noqa: WPS211
        self,
        name: str,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Save blob to S3 with logging.

        Args:
            name: Storage key for the blob.
            content: Blob content (file-like object).
            max_length: Optional maximum length for the key.

        Returns:
            Actual storage key used.

        Raises:
            Exception: If S3 upload fails.
        """
        try:
            logger.info('Uploading blob to storage: %s', name)
            saved_name = super().save(name, content, max_length)
        except Exception:
            logger.exception('Failed to upload blob to storage: %s', name)
            raise
        else:
            logger.info('Successfully uploaded blob: %s', saved_name)
            return saved_name

    @override
    def delete(self, name: str) -> None:
        """Delete blob from S3 with logging.

        Args:
            name: Storage key of blob to delete.

        Raises:
            Exception: If S3 delete fails.
        """
        try:
            logger.info('Deleting blob from storage: %s', name)
            super().delete(name)
        except Exception:
            logger.exception('Failed to delete blob from storage: %s', name)
            raise
        else:
            logger.info('Successfully deleted blob: %s', name)


@final
class StorageBlobStore:
    """Blob store backed by any Django ``Storage``.

    Backend exceptions are translated into ``StorageError`` so callers
    only deal with the files app error taxonomy.
    """

    def __init__(self, storage: Storage) -> None:
        """Initialize blob store.

        Args:
            storage: Django storage backend holding the blobs.
        """
        self._storage = storage

    def put(self, key: str, content: BinaryIO) -> None:
        """Write blob under exactly ``key``.

        Args:
            key: Storage key.
            content: File-like payload, read from its start.

        Raises:
            StorageError: If the backend fails or picks another name.
        """
        if hasattr(content, 'seek'):
            content.seek(0)

        try:
            saved_name = self._storage.save(key, content)
        except Exception as exc:
            raise StorageError(f'Failed to write blob {key}') from exc

        if saved_name != key:
            # Backend refused to overwrite and renamed the blob
            self._storage.delete(saved_name)
            raise StorageError(f'Storage key already taken: {key}')

    def open(self, key: str) -> BinaryIO:
        """Open blob for reading.

        Args:
            key: Storage key.

        Returns:
            File-like object read lazily from the backend.

        Raises:
            NotFoundOnStorageError: If the blob does not exist.
            StorageError: If the backend fails.
        """
        try:
            return self._storage.open(key, 'rb')
        except FileNotFoundError as exc:
            raise NotFoundOnStorageError() from exc
        except Exception as exc:
            raise StorageError(f'Failed to read blob {key}') from exc

    def delete(self, key: str) -> None:
        """Delete blob.

        Args:
            key: Storage key.

        Raises:
            StorageError: If the backend fails.
        """
        try:
            self._storage.delete(key)
        except Exception as exc:
            raise StorageError(f'Failed to delete blob {key}') from exc

    def exists(self, key: str) -> bool:
        """Check if a blob exists.

        Args:
            key: Storage key.

        Returns:
            True if the blob exists.

        Raises:
            StorageError: If the backend fails.
        """
        try:
            return self._storage.exists(key)
        except Exception as exc:
            raise StorageError(f'Failed to check blob {key}') from exc

    def keys(self) -> Iterator[str]:
        """List stored keys.

        Keys are flat, so only the top level of the storage is listed.

        Yields:
            Storage keys.

        Raises:
            StorageError: If the backend fails.
        """
        try:
            _, filenames = self._storage.listdir('')
        except Exception as exc:
            raise StorageError('Failed to list blobs') from exc
        yield from filenames


def get_blob_store() -> StorageBlobStore:
    """Get the configured blob store.

    Returns:
        Blob store over the ``FILES_BLOB_STORAGE`` storage alias.
    """
    return StorageBlobStore(storages[settings.FILES_BLOB_STORAGE])
