"""Django admin configuration for files app."""

from django.contrib import admin, messages
from django.db.models import QuerySet
from django.http import HttpRequest

from vault.apps.files.exceptions import NotFoundError
from vault.apps.files.logic.trash_operations import permanent_delete_file
from vault.apps.files.models import File


def _format_bytes(size_bytes: int) -> str:
    """Format bytes in human-readable format.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Formatted size string (e.g., '1.5 MB', '234 KB').
    """
    if size_bytes < 1024:
        return f'{size_bytes} B'
    if size_bytes < 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / 1024:.1f} KB'
    if size_bytes < 1024 * 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / (1024 * 1024):.1f} MB'
    return f'{size_bytes / (1024 * 1024 * 1024):.1f} GB'


@admin.register(File)
class FileAdmin(admin.ModelAdmin):
    """Admin interface for File model.

    Records are read-only here. Deleting goes through the purge action so
    the blob is removed together with the row.
    """

    list_display = [
        'original_name',
        'owner',
        'size_display',
        'mime_type',
        'uploaded_at',
        'is_deleted',
        'deleted_at',
    ]

    list_filter = [
        'is_deleted',
        'mime_type',
        'uploaded_at',
    ]

    search_fields = [
        'original_name',
        'storage_key',
        'owner__username',
    ]

    readonly_fields = [
        'owner',
        'storage_key',
        'original_name',
        'mime_type',
        'size_bytes',
        'uploaded_at',
        'is_deleted',
        'deleted_at',
    ]

    actions = ['purge_files']

    fieldsets = (
        ('File Information', {
            'fields': ('original_name', 'owner', 'storage_key'),
        }),
        ('Metadata', {
            'fields': ('size_bytes', 'mime_type'),
        }),
        ('Timestamps', {
            'fields': ('uploaded_at', 'is_deleted', 'deleted_at'),
        }),
    )

    def size_display(self, obj: File) -> str:
        """Display file size in human-readable format.

        Args:
            obj: File instance.

        Returns:
            Formatted size string.
        """
        return _format_bytes(obj.size_bytes)
    size_display.short_description = 'Size'  # type: ignore[attr-defined]

    @admin.action(description='Permanently delete selected files')
    def purge_files(
        self,
        request: HttpRequest,
        queryset: QuerySet[File],
    ) -> None:
        """Permanently delete files and their blobs.

        Args:
            request: HTTP request.
            queryset: Selected files.
        """
        purged = 0
        for file_instance in queryset:
            try:
                permanent_delete_file(
                    file_instance.owner_id,
                    file_instance.storage_key,
                )
            except NotFoundError:
                continue
            purged += 1
        self.message_user(
            request,
            f'Permanently deleted {purged} files',
            messages.SUCCESS,
        )

    def has_add_permission(self, request: HttpRequest) -> bool:
        """Files are only created by uploads."""
        return False

    def has_delete_permission(
        self,
        request: HttpRequest,
        obj: File | None = None,
    ) -> bool:
        """Disable plain row deletes, which would orphan the blob."""
        return False

    def get_queryset(self, request: HttpRequest) -> QuerySet[File]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('owner')
