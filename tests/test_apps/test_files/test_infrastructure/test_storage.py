"""Tests for blob store adapters."""

from typing import Any

import pytest
from django.core.files.base import ContentFile
from django.core.files.storage import InMemoryStorage

from vault.apps.files.exceptions import NotFoundOnStorageError, StorageError
from vault.apps.files.infrastructure.storage import (
    FileStorage,
    StorageBlobStore,
)

_TEST_BUCKET = 'vault-files'


class _BrokenStorage(InMemoryStorage):
    """In-memory storage whose every operation fails."""

    def _save(self, name: str, content: Any) -> str:
        raise OSError('disk full')

    def _open(self, name: str, mode: str = 'rb') -> Any:
        raise OSError('io error')

    def delete(self, name: str) -> None:
        raise OSError('io error')

    def exists(self, name: str) -> bool:
        raise OSError('io error')

    def listdir(self, path: str) -> tuple[list[str], list[str]]:
        raise OSError('io error')


@pytest.fixture
def store():
    """Blob store over a fresh in-memory storage.

    Returns:
        StorageBlobStore instance.
    """
    return StorageBlobStore(InMemoryStorage())


class TestStorageBlobStore:
    """Tests for StorageBlobStore over a working storage."""

    def test_put_then_open(self, store):
        """Test blob content round trip under the exact key."""
        store.put('abc123', ContentFile(b'hello'))

        with store.open('abc123') as stream:
            assert stream.read() == b'hello'

    def test_put_reads_from_start(self, store):
        """Test a partially read payload is stored in full."""
        payload = ContentFile(b'0123456789')
        payload.read(4)

        store.put('abc123', payload)

        with store.open('abc123') as stream:
            assert stream.read() == b'0123456789'

    def test_exists_and_delete(self, store):
        """Test exists reflects deletes."""
        store.put('abc123', ContentFile(b'hello'))
        assert store.exists('abc123') is True

        store.delete('abc123')

        assert store.exists('abc123') is False

    def test_open_missing_blob(self, store):
        """Test opening a missing blob raises NotFoundOnStorageError."""
        with pytest.raises(NotFoundOnStorageError):
            store.open('missing')

    def test_put_refuses_taken_key(self, store):
        """Test a taken key is an error, not a silent rename."""
        store.put('abc123', ContentFile(b'first'))

        with pytest.raises(StorageError):
            store.put('abc123', ContentFile(b'second'))

        with store.open('abc123') as stream:
            assert stream.read() == b'first'
        assert list(store.keys()) == ['abc123']

    def test_keys(self, store):
        """Test keys lists every stored blob."""
        store.put('one', ContentFile(b'1'))
        store.put('two', ContentFile(b'2'))

        assert sorted(store.keys()) == ['one', 'two']


class TestStorageBlobStoreErrors:
    """Tests for backend error translation."""

    def test_put_failure(self):
        """Test write failures become StorageError."""
        store = StorageBlobStore(_BrokenStorage())

        with pytest.raises(StorageError):
            store.put('abc123', ContentFile(b'hello'))

    @pytest.mark.parametrize('operation', ['open', 'delete', 'exists'])
    def test_key_operation_failure(self, operation):
        """Test read, delete and exists failures become StorageError."""
        store = StorageBlobStore(_BrokenStorage())

        with pytest.raises(StorageError):
            getattr(store, operation)('abc123')

    def test_keys_failure(self):
        """Test listing failures become StorageError."""
        store = StorageBlobStore(_BrokenStorage())

        with pytest.raises(StorageError):
            list(store.keys())


class TestFileStorage:
    """Tests for the S3 backend through the blob store."""

    @pytest.fixture
    def s3_store(self, mock_s3):
        """Blob store over FileStorage on mocked S3.

        Returns:
            StorageBlobStore instance.
        """
        storage = FileStorage(
            bucket_name=_TEST_BUCKET,
            region_name='us-east-1',
            file_overwrite=False,
        )
        return StorageBlobStore(storage)

    def test_put_writes_object(self, s3_store, mock_s3):
        """Test upload lands in the bucket under the storage key."""
        s3_store.put('abc123', ContentFile(b'hello'))

        bucket = mock_s3.Bucket(_TEST_BUCKET)
        body = bucket.Object('abc123').get()['Body'].read()
        assert body == b'hello'

    def test_open_streams_object(self, s3_store):
        """Test stored objects can be read back."""
        s3_store.put('abc123', ContentFile(b'hello'))

        with s3_store.open('abc123') as stream:
            assert stream.read() == b'hello'

    def test_delete_removes_object(self, s3_store, mock_s3):
        """Test delete removes the object from the bucket."""
        s3_store.put('abc123', ContentFile(b'hello'))

        s3_store.delete('abc123')

        assert s3_store.exists('abc123') is False
        bucket = mock_s3.Bucket(_TEST_BUCKET)
        assert not list(bucket.objects.filter(Prefix='abc123'))

    def test_keys_lists_objects(self, s3_store):
        """Test keys lists objects at the bucket root."""
        s3_store.put('one', ContentFile(b'1'))
        s3_store.put('two', ContentFile(b'2'))

        assert sorted(s3_store.keys()) == ['one', 'two']
