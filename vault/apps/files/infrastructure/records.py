"""Metadata store for file records.

Two implementations share the ``MetadataStore`` protocol: the Django
ORM store used in production and a dict-backed store for tests and
tooling. Every lookup that a caller can reach is scoped by owner.
"""

import dataclasses
import threading
from collections.abc import Iterator
from datetime import datetime
from typing import Any, Protocol, final

from django.conf import settings
from django.db import transaction
from django.db.models import QuerySet
from django.utils.module_loading import import_string

from vault.apps.files.models import File


@dataclasses.dataclass(frozen=True, slots=True)
class FileRecord:
    """Metadata for one stored file."""

    storage_key: str
    original_name: str
    mime_type: str
    size_bytes: int
    owner_id: int
    uploaded_at: datetime
    is_deleted: bool = False
    deleted_at: datetime | None = None

    def summary(self) -> dict[str, Any]:
        """Public view of the record returned after upload and by info.

        Returns:
            Dictionary without trash state or owner.
        """
        return {
            'storage_key': self.storage_key,
            'original_name': self.original_name,
            'mime_type': self.mime_type,
            'size': self.size_bytes,
            'uploaded_at': self.uploaded_at,
        }

    def as_listing(self) -> dict[str, Any]:
        """Public view of the record used in listings.

        Returns:
            Summary plus trash state.
        """
        return {
            **self.summary(),
            'deleted': self.is_deleted,
            'deleted_at': self.deleted_at,
        }


@dataclasses.dataclass(frozen=True, slots=True)
class RecordQuery:
    """Owner-scoped filter over file records."""

    owner_id: int
    trashed: bool = False
    name_contains: str = ''


class MetadataStore(Protocol):
    """Persistence for file records."""

    def create(self, record: FileRecord) -> FileRecord:
        """Persist a new record."""

    def find(self, owner_id: int, storage_key: str) -> FileRecord | None:
        """Get the owner's record for ``storage_key``."""

    def search(
        self,
        query: RecordQuery,
        offset: int,
        limit: int,
    ) -> list[FileRecord]:
        """Get matching records, newest first."""

    def count(self, query: RecordQuery) -> int:
        """Count matching records."""

    def set_trashed(
        self,
        owner_id: int,
        storage_key: str,
        *,
        trashed: bool,
        at: datetime | None,
    ) -> FileRecord | None:
        """Flip trash state if the record is currently in the other state."""

    def delete(
        self,
        owner_id: int,
        storage_key: str,
        *,
        trashed_only: bool = False,
    ) -> bool:
        """Remove the record, returning whether it existed."""

    def expired(self, cutoff: datetime, limit: int) -> list[FileRecord]:
        """Get records trashed at or before ``cutoff``, any owner."""

    def keys(self) -> Iterator[str]:
        """Iterate over every storage key, any owner."""


def _to_record(instance: File) -> FileRecord:
    return FileRecord(
        storage_key=instance.storage_key,
        original_name=instance.original_name,
        mime_type=instance.mime_type,
        size_bytes=instance.size_bytes,
        owner_id=instance.owner_id,
        uploaded_at=instance.uploaded_at,
        is_deleted=instance.is_deleted,
        deleted_at=instance.deleted_at,
    )


@final
class DatabaseMetadataStore:
    """Metadata store backed by the ``File`` model."""

    def create(self, record: FileRecord) -> FileRecord:
        """Insert a new row.

        Args:
            record: Record to persist.

        Returns:
            Persisted record.
        """
        with transaction.atomic():
            instance = File.objects.create(
                owner_id=record.owner_id,
                storage_key=record.storage_key,
                original_name=record.original_name,
                mime_type=record.mime_type,
                size_bytes=record.size_bytes,
                uploaded_at=record.uploaded_at,
                is_deleted=record.is_deleted,
                deleted_at=record.deleted_at,
            )
        return _to_record(instance)

    def find(self, owner_id: int, storage_key: str) -> FileRecord | None:
        """Get the owner's record.

        Args:
            owner_id: Owner's user ID.
            storage_key: Storage key.

        Returns:
            Record, or None if absent or owned by someone else.
        """
        instance = File.objects.filter(
            owner_id=owner_id,
            storage_key=storage_key,
        ).first()
        if instance is None:
            return None
        return _to_record(instance)

    def search(
        self,
        query: RecordQuery,
        offset: int,
        limit: int,
    ) -> list[FileRecord]:
        """Get one slice of matching records, newest first.

        Args:
            query: Owner-scoped filter.
            offset: Number of matches to skip.
            limit: Maximum number of records.

        Returns:
            Matching records.
        """
        rows = self._filter(query).order_by('-uploaded_at', '-id')
        return [_to_record(row) for row in rows[offset:offset + limit]]

    def count(self, query: RecordQuery) -> int:
        """Count matching records.

        Args:
            query: Owner-scoped filter.

        Returns:
            Number of matches.
        """
        return self._filter(query).count()

    def set_trashed(
        self,
        owner_id: int,
        storage_key: str,
        *,
        trashed: bool,
        at: datetime | None,
    ) -> FileRecord | None:
        """Flip trash state with a single conditional UPDATE.

        Args:
            owner_id: Owner's user ID.
            storage_key: Storage key.
            trashed: Target state.
            at: Trash timestamp, ignored when restoring.

        Returns:
            Updated record, or None if no row in the opposite state matched.
        """
        updated = File.objects.filter(
            owner_id=owner_id,
            storage_key=storage_key,
            is_deleted=not trashed,
        ).update(
            is_deleted=trashed,
            deleted_at=at if trashed else None,
        )
        if not updated:
            return None
        return self.find(owner_id, storage_key)

    def delete(
        self,
        owner_id: int,
        storage_key: str,
        *,
        trashed_only: bool = False,
    ) -> bool:
        """Delete the owner's row.

        Args:
            owner_id: Owner's user ID.
            storage_key: Storage key.
            trashed_only: Only delete the row if it is in trash.

        Returns:
            True if a row was deleted.
        """
        rows = File.objects.filter(owner_id=owner_id, storage_key=storage_key)
        if trashed_only:
            rows = rows.filter(is_deleted=True)
        deleted, _ = rows.delete()
        return deleted > 0

    def expired(self, cutoff: datetime, limit: int) -> list[FileRecord]:
        """Get records trashed at or before ``cutoff``, oldest first.

        Args:
            cutoff: Latest trash timestamp to include.
            limit: Maximum number of records.

        Returns:
            Expired trash records of every owner.
        """
        rows = File.objects.filter(
            is_deleted=True,
            deleted_at__lte=cutoff,
        ).order_by('deleted_at')[:limit]
        return [_to_record(row) for row in rows]

    def keys(self) -> Iterator[str]:
        """Iterate over every storage key.

        Yields:
            Storage keys.
        """
        yield from File.objects.values_list(
            'storage_key',
            flat=True,
        ).iterator()

    def _filter(self, query: RecordQuery) -> QuerySet[File]:
        rows = File.objects.filter(
            owner_id=query.owner_id,
            is_deleted=query.trashed,
        )
        if query.name_contains:
            rows = rows.filter(original_name__icontains=query.name_contains)
        return rows


@final
class InMemoryMetadataStore:
    """Metadata store kept in a dict, for tests and tooling."""

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._records: dict[str, FileRecord] = {}
        self._lock = threading.Lock()

    def create(self, record: FileRecord) -> FileRecord:
        """Add a record.

        Raises:
            ValueError: If the storage key is already taken.
        """
        with self._lock:
            if record.storage_key in self._records:
                raise ValueError(
                    f'Duplicate storage key: {record.storage_key}',
                )
            self._records[record.storage_key] = record
        return record

    def find(self, owner_id: int, storage_key: str) -> FileRecord | None:
        """Get the owner's record."""
        record = self._records.get(storage_key)
        if record is None or record.owner_id != owner_id:
            return None
        return record

    def search(
        self,
        query: RecordQuery,
        offset: int,
        limit: int,
    ) -> list[FileRecord]:
        """Get one slice of matching records, newest first."""
        return self._matching(query)[offset:offset + limit]

    def count(self, query: RecordQuery) -> int:
        """Count matching records."""
        return len(self._matching(query))

    def set_trashed(
        self,
        owner_id: int,
        storage_key: str,
        *,
        trashed: bool,
        at: datetime | None,
    ) -> FileRecord | None:
        """Flip trash state under the store lock."""
        with self._lock:
            record = self.find(owner_id, storage_key)
            if record is None or record.is_deleted == trashed:
                return None
            updated = dataclasses.replace(
                record,
                is_deleted=trashed,
                deleted_at=at if trashed else None,
            )
            self._records[storage_key] = updated
        return updated

    def delete(
        self,
        owner_id: int,
        storage_key: str,
        *,
        trashed_only: bool = False,
    ) -> bool:
        """Remove the owner's record under the store lock."""
        with self._lock:
            record = self.find(owner_id, storage_key)
            if record is None:
                return False
            if trashed_only and not record.is_deleted:
                return False
            del self._records[storage_key]
        return True

    def expired(self, cutoff: datetime, limit: int) -> list[FileRecord]:
        """Get records trashed at or before ``cutoff``, oldest first."""
        trashed = [
            record
            for record in self._snapshot()
            if record.deleted_at is not None and record.deleted_at <= cutoff
        ]
        trashed.sort(key=lambda record: record.deleted_at)
        return trashed[:limit]

    def keys(self) -> Iterator[str]:
        """Iterate over every storage key."""
        yield from [record.storage_key for record in self._snapshot()]

    def _snapshot(self) -> list[FileRecord]:
        with self._lock:
            return list(self._records.values())

    def _matching(self, query: RecordQuery) -> list[FileRecord]:
        needle = query.name_contains.casefold()
        matches = [
            record
            for record in self._snapshot()
            if record.owner_id == query.owner_id
            and record.is_deleted == query.trashed
            and needle in record.original_name.casefold()
        ]
        # Newest first; later inserts win ties, like the id tiebreak in SQL
        matches.reverse()
        matches.sort(key=lambda record: record.uploaded_at, reverse=True)
        return matches


def get_metadata_store() -> MetadataStore:
    """Get the configured metadata store.

    Returns:
        Instance of the ``FILES_METADATA_STORE`` class.
    """
    store_class = import_string(settings.FILES_METADATA_STORE)
    return store_class()
