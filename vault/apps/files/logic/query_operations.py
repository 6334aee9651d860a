"""Business logic for listing and searching files."""

import dataclasses
import logging
import math
from typing import Any

from django.conf import settings

from vault.apps.files.exceptions import ValidationError
from vault.apps.files.infrastructure.records import (
    FileRecord,
    MetadataStore,
    RecordQuery,
    get_metadata_store,
)

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class FilePage:
    """One page of a file listing."""

    records: list[FileRecord]
    current_page: int
    total_pages: int
    total_matches: int
    has_next_page: bool
    has_prev_page: bool

    def pagination(self) -> dict[str, Any]:
        """Pagination block for API responses.

        Returns:
            Page counters and navigation flags.
        """
        return {
            'current_page': self.current_page,
            'total_pages': self.total_pages,
            'total_files': self.total_matches,
            'has_next_page': self.has_next_page,
            'has_prev_page': self.has_prev_page,
        }


def list_files(  # noqa: WPS211
    owner_id: int,
    *,
    page: int = 1,
    limit: int | None = None,
    search: str = '',
    trashed: bool = False,
    records: MetadataStore | None = None,
) -> FilePage:
    """List one page of an owner's files, newest first.

    Pages past the end are empty rather than an error.

    Args:
        owner_id: Owner's user ID. Every match belongs to this owner.
        page: 1-based page number.
        limit: Page size, defaults to ``FILES_PAGE_SIZE`` and is capped at
            ``FILES_MAX_PAGE_SIZE``.
        search: Case-insensitive substring of the original filename, used
            as given. Empty means no filter.
        trashed: List trash instead of active files.
        records: Metadata store, defaults to the configured one.

    Returns:
        Page of records with pagination metadata.

    Raises:
        ValidationError: If page or limit is below 1.
    """
    if page < 1:
        raise ValidationError('Page must be a positive integer')
    if limit is None:
        limit = settings.FILES_PAGE_SIZE
    if limit < 1:
        raise ValidationError('Limit must be a positive integer')
    limit = min(limit, settings.FILES_MAX_PAGE_SIZE)

    if records is None:
        records = get_metadata_store()

    query = RecordQuery(
        owner_id=owner_id,
        trashed=trashed,
        name_contains=search,
    )
    total = records.count(query)
    total_pages = math.ceil(total / limit)
    if page > total_pages:
        page_records = []
    else:
        page_records = records.search(
            query,
            offset=(page - 1) * limit,
            limit=limit,
        )

    logger.debug(
        'Listed files for user %d: page %d/%d, %d matches (trash=%s)',
        owner_id,
        page,
        total_pages,
        total,
        trashed,
    )

    return FilePage(
        records=page_records,
        current_page=page,
        total_pages=total_pages,
        total_matches=total,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )
