"""Tests for storage consistency checks."""

from django.core.files.base import ContentFile

from vault.apps.files.logic.reconcile_operations import (
    check_storage,
    delete_orphaned_blobs,
)


def test_consistent_stores(user, blob_store, metadata_store, make_record):
    """Test matching stores produce an empty report."""
    record = make_record(user.id)
    blob_store.put(record.storage_key, ContentFile(b'data'))

    report = check_storage(blobs=blob_store, records=metadata_store)

    assert report.is_consistent
    assert report.missing_blobs == []
    assert report.orphaned_blobs == []


def test_missing_and_orphaned(user, blob_store, metadata_store, make_record):
    """Test both kinds of mismatch are reported."""
    without_blob = make_record(user.id)
    blob_store.put('orphan', ContentFile(b'data'))

    report = check_storage(blobs=blob_store, records=metadata_store)

    assert not report.is_consistent
    assert report.missing_blobs == [without_blob.storage_key]
    assert report.orphaned_blobs == ['orphan']


def test_delete_orphaned_blobs(user, blob_store, metadata_store, make_record):
    """Test orphan cleanup leaves blobs with records alone."""
    record = make_record(user.id)
    blob_store.put(record.storage_key, ContentFile(b'data'))
    blob_store.put('orphan', ContentFile(b'data'))
    report = check_storage(blobs=blob_store, records=metadata_store)

    deleted = delete_orphaned_blobs(report, blobs=blob_store)

    assert deleted == 1
    assert list(blob_store.keys()) == [record.storage_key]
