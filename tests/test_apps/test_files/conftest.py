"""Shared fixtures for files app tests."""

from datetime import datetime, timedelta

import boto3
import pytest
from django.contrib.auth import get_user_model
from django.core.files.base import ContentFile
from django.utils import timezone
from moto import mock_aws

from vault.apps.files.infrastructure.records import (
    DatabaseMetadataStore,
    FileRecord,
    InMemoryMetadataStore,
)
from vault.apps.files.infrastructure.storage import get_blob_store

User = get_user_model()

TEST_BUCKET = 'vault-files'


@pytest.fixture
def user(db):
    """Create test user.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='testuser',
        password='testpass123',
        email='test@example.com',
    )


@pytest.fixture
def other_user(db):
    """Create second test user for isolation tests.

    Returns:
        Second user instance.
    """
    return User.objects.create_user(
        username='otheruser',
        password='testpass123',
        email='other@example.com',
    )


@pytest.fixture(autouse=True)
def in_memory_storage(settings):
    """Give every test its own empty in-memory blob storage."""
    settings.STORAGES = {
        **settings.STORAGES,
        'default': {
            'BACKEND': 'django.core.files.storage.InMemoryStorage',
        },
    }


@pytest.fixture
def blob_store(in_memory_storage):
    """Blob store over the test's in-memory storage.

    Returns:
        The same blob store the views and commands use.
    """
    return get_blob_store()


@pytest.fixture(params=['database', 'memory'])
def metadata_store(request):
    """Metadata store, once per implementation.

    Returns:
        Database-backed or in-memory metadata store.
    """
    if request.param == 'database':
        request.getfixturevalue('db')
        return DatabaseMetadataStore()
    return InMemoryMetadataStore()


@pytest.fixture
def make_record(metadata_store):
    """Factory inserting records straight into the metadata store.

    Returns:
        Callable creating a record with the given fields.
    """
    counter = iter(range(1, 10_000))
    base_time = timezone.now() - timedelta(days=1)

    def factory(
        owner_id: int,
        original_name: str = 'test.txt',
        *,
        uploaded_at: datetime | None = None,
        deleted_at: datetime | None = None,
        size_bytes: int = 100,
    ) -> FileRecord:
        index = next(counter)
        return metadata_store.create(FileRecord(
            storage_key=f'key{index:04d}',
            original_name=original_name,
            mime_type='text/plain',
            size_bytes=size_bytes,
            owner_id=owner_id,
            uploaded_at=uploaded_at or base_time + timedelta(seconds=index),
            is_deleted=deleted_at is not None,
            deleted_at=deleted_at,
        ))

    return factory


@pytest.fixture
def mock_s3():
    """Mock S3 service with the vault bucket.

    Yields:
        boto3 S3 resource with the bucket created.
    """
    with mock_aws():
        conn = boto3.resource('s3', region_name='us-east-1')
        conn.create_bucket(Bucket=TEST_BUCKET)
        yield conn


@pytest.fixture
def sample_file_content():
    """Sample 10-byte payload for testing.

    Returns:
        ContentFile with test data.
    """
    return ContentFile(b'0123456789', name='a.txt')
