"""Business logic for upload, info and download."""

import dataclasses
import logging
from typing import BinaryIO

from django.conf import settings
from django.utils import timezone

from vault.apps.files.exceptions import (
    NotFoundError,
    NotFoundOnStorageError,
    PayloadTooLargeError,
    UploadError,
    ValidationError,
)
from vault.apps.files.infrastructure.metadata import (
    clean_original_name,
    detect_mime_type,
    generate_storage_key,
    get_payload_size,
)
from vault.apps.files.infrastructure.records import (
    FileRecord,
    MetadataStore,
    get_metadata_store,
)
from vault.apps.files.infrastructure.storage import BlobStore, get_blob_store

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class FileDownload:
    """Open blob stream plus the metadata to label it with."""

    record: FileRecord
    stream: BinaryIO


def upload_file(  # noqa: WPS211
    owner_id: int,
    file_obj: BinaryIO | None,
    *,
    original_name: str | None = None,
    mime_type: str | None = None,
    blobs: BlobStore | None = None,
    records: MetadataStore | None = None,
) -> FileRecord:
    """Store a payload and create its record.

    Transaction safety: write the blob first, then create the record.
    If the record cannot be created the blob is deleted again (rollback).
    A failed rollback leaves an orphaned blob, which is logged with its
    key and picked up by ``reconcile_storage``.

    Args:
        owner_id: Owner's user ID.
        file_obj: Payload. Django uploaded files also supply name and type.
        original_name: Declared filename, defaults to ``file_obj.name``.
        mime_type: Declared MIME type, defaults to the upload's
            ``content_type`` or a guess from the filename.
        blobs: Blob store, defaults to the configured one.
        records: Metadata store, defaults to the configured one.

    Returns:
        Created record.

    Raises:
        ValidationError: If no payload is attached or the name is empty
            or too long.
        PayloadTooLargeError: If the payload exceeds the upload ceiling.
        UploadError: If the blob or the record cannot be written.
    """
    if file_obj is None:
        raise ValidationError('No file uploaded')

    if blobs is None:
        blobs = get_blob_store()
    if records is None:
        records = get_metadata_store()

    filename = clean_original_name(
        original_name or getattr(file_obj, 'name', None),
    )
    declared_type = mime_type or getattr(file_obj, 'content_type', None)
    file_size = get_payload_size(file_obj)

    max_bytes = settings.FILES_MAX_UPLOAD_BYTES
    if file_size > max_bytes:
        logger.warning(
            'Rejected upload of %d bytes for user %d (limit %d)',
            file_size,
            owner_id,
            max_bytes,
        )
        raise PayloadTooLargeError(file_size, max_bytes)

    storage_key = generate_storage_key()

    # Step 1: Upload to storage first
    try:
        logger.info('Uploading blob: %s (%s)', storage_key, filename)
        blobs.put(storage_key, file_obj)
    except Exception as exc:
        logger.exception('Failed to upload blob: %s', storage_key)
        raise UploadError() from exc

    # Step 2: Create the record
    record = FileRecord(
        storage_key=storage_key,
        original_name=filename,
        mime_type=declared_type or detect_mime_type(filename),
        size_bytes=file_size,
        owner_id=owner_id,
        uploaded_at=timezone.now(),
    )
    try:
        created = records.create(record)
    except Exception as exc:
        # Rollback: Delete blob since the record could not be saved
        logger.exception(
            'Failed to create record, rolling back blob: %s',
            storage_key,
        )
        _rollback_upload(blobs, storage_key)
        raise UploadError() from exc

    logger.info(
        'File uploaded: %s (%s, %d bytes, user %d)',
        storage_key,
        filename,
        file_size,
        owner_id,
    )
    return created


def _rollback_upload(blobs: BlobStore, storage_key: str) -> None:
    """Delete a blob whose record was never created.

    Best effort: a failure is logged as an orphan and swallowed so the
    caller still sees the original upload error.

    Args:
        blobs: Blob store.
        storage_key: Key of the orphaned blob.
    """
    try:
        blobs.delete(storage_key)
    except Exception:
        logger.exception(
            'Failed to rollback upload, orphaned blob: %s',
            storage_key,
        )
    else:
        logger.info('Rolled back blob upload: %s', storage_key)


def get_file_info(
    owner_id: int,
    storage_key: str,
    *,
    records: MetadataStore | None = None,
) -> FileRecord:
    """Get a record by storage key.

    Works for both active and trashed files.

    Args:
        owner_id: Owner's user ID.
        storage_key: Storage key.
        records: Metadata store, defaults to the configured one.

    Returns:
        Record.

    Raises:
        NotFoundError: If absent or owned by someone else.
    """
    if records is None:
        records = get_metadata_store()

    record = records.find(owner_id, storage_key)
    if record is None:
        raise NotFoundError()
    return record


def open_file(
    owner_id: int,
    storage_key: str,
    *,
    blobs: BlobStore | None = None,
    records: MetadataStore | None = None,
) -> FileDownload:
    """Open a file for streaming download.

    Trashed files can still be downloaded; trash only hides them from
    the default listing.

    Args:
        owner_id: Owner's user ID.
        storage_key: Storage key.
        blobs: Blob store, defaults to the configured one.
        records: Metadata store, defaults to the configured one.

    Returns:
        Record and open blob stream. The caller closes the stream.

    Raises:
        NotFoundError: If no record exists for this owner.
        NotFoundOnStorageError: If the record exists but the blob is gone.
        StorageError: If the blob cannot be read.
    """
    if blobs is None:
        blobs = get_blob_store()

    record = get_file_info(owner_id, storage_key, records=records)

    if not blobs.exists(storage_key):
        logger.error('Record without blob: %s', storage_key)
        raise NotFoundOnStorageError()

    logger.debug('Opening blob for download: %s', storage_key)
    return FileDownload(record=record, stream=blobs.open(storage_key))
