"""Management command to clean up old files from trash."""

import logging
from datetime import timedelta
from typing import Any, Final

from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone

from vault.apps.files.infrastructure.records import get_metadata_store
from vault.apps.files.logic.trash_operations import purge_expired_trash

_DEFAULT_BATCH_SIZE: Final = 1000

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Permanently delete files that have been in trash too long."""

    help = 'Clean up old files from trash'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be deleted without deleting',
        )
        parser.add_argument(
            '--batch-size',
            type=int,
            default=_DEFAULT_BATCH_SIZE,
            help=f'Max files to process (default: {_DEFAULT_BATCH_SIZE})',
        )
        parser.add_argument(
            '--days',
            type=int,
            default=None,
            help='Retention in days (default: FILES_TRASH_RETENTION_DAYS)',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the cleanup command.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        dry_run = options['dry_run']
        batch_size = options['batch_size']
        retention_days = options['days']
        if retention_days is None:
            retention_days = settings.FILES_TRASH_RETENTION_DAYS

        cutoff = timezone.now() - timedelta(days=retention_days)

        self.stdout.write(
            f'Looking for files deleted before {cutoff} '
            f'(older than {retention_days} days)',
        )

        if dry_run:
            expired = get_metadata_store().expired(cutoff, batch_size)
            for record in expired:
                self.stdout.write(
                    f'Would delete: {record.storage_key} '
                    f'({record.original_name}, user: {record.owner_id}, '
                    f'deleted: {record.deleted_at})',
                )
            self.stdout.write(
                self.style.SUCCESS(
                    f'Would purge {len(expired)} files from trash',
                ),
            )
            return

        purged = purge_expired_trash(cutoff, limit=batch_size)
        logger.info('Trash cleanup finished: %d files purged', len(purged))
        self.stdout.write(
            self.style.SUCCESS(f'Purged {len(purged)} files from trash'),
        )
