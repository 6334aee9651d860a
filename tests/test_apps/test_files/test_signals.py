"""Tests for files app signal handlers."""

from django.core.files.base import ContentFile

from vault.apps.files.logic.file_operations import upload_file
from vault.apps.files.logic.trash_operations import move_to_trash
from vault.apps.files.models import File


def test_user_delete_purges_blobs(user, other_user, blob_store):
    """Test deleting a user removes their blobs along with the rows."""
    active = upload_file(user.pk, ContentFile(b'0123456789', name='a.txt'))
    trashed = upload_file(user.pk, ContentFile(b'abc', name='b.txt'))
    move_to_trash(user.pk, trashed.storage_key)
    theirs = upload_file(other_user.pk, ContentFile(b'xyz', name='c.txt'))

    user.delete()

    assert not blob_store.exists(active.storage_key)
    assert not blob_store.exists(trashed.storage_key)
    assert blob_store.exists(theirs.storage_key)
    assert list(
        File.objects.values_list('storage_key', flat=True),
    ) == [theirs.storage_key]


def test_user_delete_without_files(user, other_user):
    """Test deleting a user with no files leaves other files alone."""
    theirs = upload_file(other_user.pk, ContentFile(b'xyz', name='c.txt'))

    user.delete()

    assert File.objects.get().storage_key == theirs.storage_key
