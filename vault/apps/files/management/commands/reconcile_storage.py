"""Management command to report blob/record mismatches."""

from typing import Any

from django.core.management.base import BaseCommand

from vault.apps.files.logic.reconcile_operations import (
    check_storage,
    delete_orphaned_blobs,
)


class Command(BaseCommand):
    """Compare blob storage against file records."""

    help = 'Report records without blobs and blobs without records'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--delete-orphans',
            action='store_true',
            help='Delete blobs that have no record',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the reconciliation command.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        report = check_storage()

        for storage_key in report.missing_blobs:
            self.stdout.write(f'Missing blob: {storage_key}')
        for storage_key in report.orphaned_blobs:
            self.stdout.write(f'Orphaned blob: {storage_key}')

        if report.is_consistent:
            self.stdout.write(self.style.SUCCESS('Storage is consistent'))
            return

        if options['delete_orphans'] and report.orphaned_blobs:
            deleted = delete_orphaned_blobs(report)
            self.stdout.write(
                self.style.SUCCESS(f'Deleted {deleted} orphaned blobs'),
            )

        self.stdout.write(
            self.style.WARNING(
                f'{len(report.missing_blobs)} missing, '
                f'{len(report.orphaned_blobs)} orphaned',
            ),
        )
