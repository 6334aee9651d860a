"""Business logic for trash (soft delete) operations."""

import logging
from datetime import datetime
from typing import Final

from django.utils import timezone

from vault.apps.files.exceptions import NotFoundError, StorageError
from vault.apps.files.infrastructure.records import (
    FileRecord,
    MetadataStore,
    RecordQuery,
    get_metadata_store,
)
from vault.apps.files.infrastructure.storage import BlobStore, get_blob_store

_PURGE_BATCH_SIZE: Final = 100

logger = logging.getLogger(__name__)


def move_to_trash(
    owner_id: int,
    storage_key: str,
    *,
    records: MetadataStore | None = None,
) -> FileRecord:
    """Move file to trash (soft delete).

    The blob is left untouched, so the file can still be downloaded.

    Args:
        owner_id: Owner's user ID.
        storage_key: Storage key.
        records: Metadata store, defaults to the configured one.

    Returns:
        Updated record.

    Raises:
        NotFoundError: If absent, not owned, or already in trash.
    """
    if records is None:
        records = get_metadata_store()

    record = records.set_trashed(
        owner_id,
        storage_key,
        trashed=True,
        at=timezone.now(),
    )
    if record is None:
        raise NotFoundError()

    logger.info('File moved to trash: %s (user %d)', storage_key, owner_id)
    return record


def restore_file(
    owner_id: int,
    storage_key: str,
    *,
    records: MetadataStore | None = None,
) -> FileRecord:
    """Restore file from trash.

    Args:
        owner_id: Owner's user ID.
        storage_key: Storage key.
        records: Metadata store, defaults to the configured one.

    Returns:
        Updated record.

    Raises:
        NotFoundError: If absent, not owned, or not in trash.
    """
    if records is None:
        records = get_metadata_store()

    record = records.set_trashed(
        owner_id,
        storage_key,
        trashed=False,
        at=None,
    )
    if record is None:
        raise NotFoundError()

    logger.info('File restored: %s (user %d)', storage_key, owner_id)
    return record


def permanent_delete_file(
    owner_id: int,
    storage_key: str,
    *,
    trashed_only: bool = False,
    blobs: BlobStore | None = None,
    records: MetadataStore | None = None,
) -> FileRecord:
    """Permanently delete an active or trashed file.

    Deletes the blob, then the record. The record is authoritative for
    whether the file exists, so a blob that is already gone or cannot be
    deleted is logged for reconciliation and the record is removed anyway.

    Args:
        owner_id: Owner's user ID.
        storage_key: Storage key.
        trashed_only: Only purge the file while it is in trash. Trash
            sweeps set this so a file restored mid-sweep survives.
        blobs: Blob store, defaults to the configured one.
        records: Metadata store, defaults to the configured one.

    Returns:
        The record as it was before deletion.

    Raises:
        NotFoundError: If absent or not owned, including when a concurrent
            call removed the record first. With ``trashed_only``, also
            when the file is not in trash.
    """
    if blobs is None:
        blobs = get_blob_store()
    if records is None:
        records = get_metadata_store()

    record = records.find(owner_id, storage_key)
    if record is None or (trashed_only and not record.is_deleted):
        raise NotFoundError()

    _delete_blob(blobs, storage_key)

    if not records.delete(owner_id, storage_key, trashed_only=trashed_only):
        if trashed_only and records.find(owner_id, storage_key) is not None:
            logger.error(
                'File left in place after its blob was purged: %s',
                storage_key,
            )
        # Lost the race against another delete or a restore
        raise NotFoundError()

    logger.info(
        'File permanently deleted: %s (user %d, size: %d)',
        storage_key,
        owner_id,
        record.size_bytes,
    )
    return record


def _delete_blob(blobs: BlobStore, storage_key: str) -> None:
    """Delete a blob, tolerating absence and storage failures.

    Args:
        blobs: Blob store.
        storage_key: Key of the blob to delete.
    """
    try:
        if not blobs.exists(storage_key):
            logger.warning(
                'Blob not found in storage (already deleted?): %s',
                storage_key,
            )
            return
        blobs.delete(storage_key)
    except StorageError:
        # Record delete still goes ahead, blob is left for reconciliation
        logger.exception(
            'Failed to delete blob from storage (orphaned): %s',
            storage_key,
        )


def _purge_matching(
    query: RecordQuery,
    *,
    trashed_only: bool,
    blobs: BlobStore,
    records: MetadataStore,
) -> int:
    count = 0
    while batch := records.search(query, offset=0, limit=_PURGE_BATCH_SIZE):
        purged_in_batch = 0
        for record in batch:
            try:
                permanent_delete_file(
                    query.owner_id,
                    record.storage_key,
                    trashed_only=trashed_only,
                    blobs=blobs,
                    records=records,
                )
            except NotFoundError:
                logger.debug(
                    'File already purged or restored: %s',
                    record.storage_key,
                )
            else:
                purged_in_batch += 1
        if not purged_in_batch:
            logger.warning(
                'Stopped purging files of user %d: %d files left undeleted',
                query.owner_id,
                len(batch),
            )
            break
        count += purged_in_batch
    return count


def empty_trash(
    owner_id: int,
    *,
    blobs: BlobStore | None = None,
    records: MetadataStore | None = None,
) -> int:
    """Permanently delete all files in the owner's trash.

    Files restored while the trash is being emptied are kept.

    Args:
        owner_id: Owner's user ID.
        blobs: Blob store, defaults to the configured one.
        records: Metadata store, defaults to the configured one.

    Returns:
        Number of files deleted.
    """
    if blobs is None:
        blobs = get_blob_store()
    if records is None:
        records = get_metadata_store()

    count = _purge_matching(
        RecordQuery(owner_id=owner_id, trashed=True),
        trashed_only=True,
        blobs=blobs,
        records=records,
    )

    logger.info('Trash emptied for user %d: %d files deleted', owner_id, count)
    return count


def purge_owner_files(
    owner_id: int,
    *,
    blobs: BlobStore | None = None,
    records: MetadataStore | None = None,
) -> int:
    """Permanently delete every active and trashed file of an owner.

    Args:
        owner_id: Owner's user ID.
        blobs: Blob store, defaults to the configured one.
        records: Metadata store, defaults to the configured one.

    Returns:
        Number of files deleted.
    """
    if blobs is None:
        blobs = get_blob_store()
    if records is None:
        records = get_metadata_store()

    count = 0
    for trashed in (False, True):
        count += _purge_matching(
            RecordQuery(owner_id=owner_id, trashed=trashed),
            trashed_only=False,
            blobs=blobs,
            records=records,
        )

    logger.info(
        'Purged all files of user %d: %d files deleted',
        owner_id,
        count,
    )
    return count


def purge_expired_trash(
    cutoff: datetime,
    *,
    limit: int,
    blobs: BlobStore | None = None,
    records: MetadataStore | None = None,
) -> list[FileRecord]:
    """Permanently delete files trashed at or before ``cutoff``.

    Covers every owner. A file that disappears or is restored mid-sweep
    is skipped.

    Args:
        cutoff: Latest trash timestamp to purge.
        limit: Maximum number of files to purge.
        blobs: Blob store, defaults to the configured one.
        records: Metadata store, defaults to the configured one.

    Returns:
        Purged records.
    """
    if blobs is None:
        blobs = get_blob_store()
    if records is None:
        records = get_metadata_store()

    purged = []
    for record in records.expired(cutoff, limit):
        try:
            permanent_delete_file(
                record.owner_id,
                record.storage_key,
                trashed_only=True,
                blobs=blobs,
                records=records,
            )
        except NotFoundError:
            logger.debug(
                'File already purged or restored: %s',
                record.storage_key,
            )
            continue
        purged.append(record)

    logger.info('Purged %d expired files from trash', len(purged))
    return purged
