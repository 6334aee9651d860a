"""Tests for reconcile_storage management command."""

from io import StringIO

import pytest
from django.core.files.base import ContentFile
from django.core.management import call_command

from vault.apps.files.logic.file_operations import upload_file


@pytest.mark.django_db
class TestReconcileStorageCommand:
    """Tests for reconcile_storage management command."""

    def test_consistent(self, user):
        """Test a clean system reports consistency."""
        upload_file(user.id, ContentFile(b'data', name='a.txt'))

        out = StringIO()
        call_command('reconcile_storage', stdout=out)

        assert 'Storage is consistent' in out.getvalue()

    def test_reports_mismatches(self, user, blob_store):
        """Test missing and orphaned blobs are listed."""
        record = upload_file(user.id, ContentFile(b'data', name='a.txt'))
        blob_store.delete(record.storage_key)
        blob_store.put('orphan', ContentFile(b'data'))

        out = StringIO()
        call_command('reconcile_storage', stdout=out)

        output = out.getvalue()
        assert f'Missing blob: {record.storage_key}' in output
        assert 'Orphaned blob: orphan' in output
        assert blob_store.exists('orphan')

    def test_delete_orphans(self, user, blob_store):
        """Test --delete-orphans removes blobs without records."""
        record = upload_file(user.id, ContentFile(b'data', name='a.txt'))
        blob_store.put('orphan', ContentFile(b'data'))

        out = StringIO()
        call_command('reconcile_storage', '--delete-orphans', stdout=out)

        assert not blob_store.exists('orphan')
        assert blob_store.exists(record.storage_key)
        assert 'Deleted 1 orphaned blobs' in out.getvalue()
