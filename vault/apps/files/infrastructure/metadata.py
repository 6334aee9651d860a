"""Metadata helpers for uploaded payloads."""

import mimetypes
import os
import uuid
from pathlib import PurePosixPath, PureWindowsPath
from typing import BinaryIO

from vault.apps.files.exceptions import ValidationError
from vault.apps.files.models import ORIGINAL_NAME_MAX_LENGTH

_DEFAULT_MIME_TYPE = 'application/octet-stream'


def generate_storage_key() -> str:
    """Generate a new blob key.

    The key never contains any part of the uploaded filename, so user
    input cannot steer where a blob lands or collide with another blob.

    Returns:
        32-character hex string.
    """
    return uuid.uuid4().hex


def detect_mime_type(filename: str) -> str:
    """Guess MIME type from the filename extension.

    Args:
        filename: Filename with extension.

    Returns:
        MIME type string (e.g., 'image/jpeg', 'application/pdf').
        Returns 'application/octet-stream' if type cannot be determined.
    """
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type is None:
        return _DEFAULT_MIME_TYPE
    return mime_type


def clean_original_name(name: str | None) -> str:
    """Strip any directory components from an uploaded filename.

    Browsers on Windows may send full paths, so both separators are
    handled.

    Args:
        name: Filename as declared by the client.

    Returns:
        Bare filename.

    Raises:
        ValidationError: If nothing usable is left or the name is too
            long to store.
    """
    if not name:
        raise ValidationError('Filename is required')

    cleaned = PurePosixPath(PureWindowsPath(name).name).name.strip()
    if cleaned in {'', '.', '..'}:
        raise ValidationError('Filename is required')
    if len(cleaned) > ORIGINAL_NAME_MAX_LENGTH:
        raise ValidationError(
            f'Filename must be at most {ORIGINAL_NAME_MAX_LENGTH} characters',
        )
    return cleaned


def get_payload_size(file_obj: BinaryIO) -> int:
    """Get payload size in bytes without reading it into memory.

    Args:
        file_obj: File-like object, Django ``File`` objects expose ``size``.

    Returns:
        Size in bytes.
    """
    size = getattr(file_obj, 'size', None)
    if size is not None:
        return int(size)

    position = file_obj.tell()
    file_obj.seek(0, os.SEEK_END)
    size = file_obj.tell()
    file_obj.seek(position)
    return size
