"""Consistency checks between the blob store and the metadata store."""

import dataclasses
import logging

from vault.apps.files.infrastructure.records import (
    MetadataStore,
    get_metadata_store,
)
from vault.apps.files.infrastructure.storage import BlobStore, get_blob_store

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class StorageReport:
    """Keys present in only one of the two stores."""

    missing_blobs: list[str]
    orphaned_blobs: list[str]

    @property
    def is_consistent(self) -> bool:
        """Check whether both stores agree."""
        return not self.missing_blobs and not self.orphaned_blobs


def check_storage(
    *,
    blobs: BlobStore | None = None,
    records: MetadataStore | None = None,
) -> StorageReport:
    """Compare storage keys of both stores.

    Missing blobs come from external deletes; orphaned blobs come from
    uploads whose rollback failed. Uploads in flight can show up as
    orphans, so run this when the system is quiet.

    Args:
        blobs: Blob store, defaults to the configured one.
        records: Metadata store, defaults to the configured one.

    Returns:
        Sorted lists of inconsistent keys.
    """
    if blobs is None:
        blobs = get_blob_store()
    if records is None:
        records = get_metadata_store()

    record_keys = set(records.keys())
    blob_keys = set(blobs.keys())

    report = StorageReport(
        missing_blobs=sorted(record_keys - blob_keys),
        orphaned_blobs=sorted(blob_keys - record_keys),
    )
    logger.info(
        'Storage check: %d records, %d blobs, %d missing, %d orphaned',
        len(record_keys),
        len(blob_keys),
        len(report.missing_blobs),
        len(report.orphaned_blobs),
    )
    return report


def delete_orphaned_blobs(
    report: StorageReport,
    *,
    blobs: BlobStore | None = None,
) -> int:
    """Delete blobs listed as orphaned in a report.

    Args:
        report: Result of ``check_storage``.
        blobs: Blob store, defaults to the configured one.

    Returns:
        Number of blobs deleted.
    """
    if blobs is None:
        blobs = get_blob_store()

    for storage_key in report.orphaned_blobs:
        blobs.delete(storage_key)
        logger.info('Deleted orphaned blob: %s', storage_key)
    return len(report.orphaned_blobs)
