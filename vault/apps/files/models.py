"""Database models for files app."""

from typing import Final, final, override

from django.contrib.auth import get_user_model
from django.db import models
from django.utils import timezone

User = get_user_model()

# Constants for field max lengths
_STORAGE_KEY_MAX_LENGTH: Final = 64
ORIGINAL_NAME_MAX_LENGTH: Final = 255
_MIME_TYPE_MAX_LENGTH: Final = 255


@final
class File(models.Model):
    """Metadata row for a blob held in the blob store.

    ``storage_key`` is generated by the server at upload time and is the
    only link to the blob. ``original_name`` is whatever the uploader
    sent and is used for display and search only.

    A row is in trash exactly when ``is_deleted`` is set, and then
    ``deleted_at`` holds the moment it was trashed.
    """

    # Owner relationship
    owner = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='files',
        db_index=True,
    )

    storage_key = models.CharField(
        max_length=_STORAGE_KEY_MAX_LENGTH,
        unique=True,
        editable=False,
        help_text='Server-generated blob key',
    )

    original_name = models.CharField(
        max_length=ORIGINAL_NAME_MAX_LENGTH,
        help_text='Filename declared by the uploader',
    )

    mime_type = models.CharField(
        max_length=_MIME_TYPE_MAX_LENGTH,
        help_text='MIME type declared by the uploader',
    )

    size_bytes = models.BigIntegerField(
        help_text='File size in bytes',
    )

    # Timestamps
    uploaded_at = models.DateTimeField(default=timezone.now)

    # Trash state
    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'File'  # type: ignore[mutable-override]
        verbose_name_plural = 'Files'  # type: ignore[mutable-override]
        ordering = ['-uploaded_at']

        indexes = [
            # Optimize listing queries (owner + trash state, newest first)
            models.Index(
                fields=['owner', 'is_deleted', '-uploaded_at'],
                name='files_owner_listing_idx',
            ),
            # Optimize trash retention sweeps
            models.Index(
                fields=['is_deleted', 'deleted_at'],
                name='files_trash_sweep_idx',
            ),
        ]

        constraints = [
            models.CheckConstraint(
                condition=models.Q(size_bytes__gte=0),
                name='files_size_non_negative',
            ),
            # is_deleted <=> deleted_at is set
            models.CheckConstraint(
                condition=(
                    models.Q(is_deleted=True, deleted_at__isnull=False) |
                    models.Q(is_deleted=False, deleted_at__isnull=True)
                ),
                name='files_deleted_at_matches_flag',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.owner.username}:{self.original_name}'
