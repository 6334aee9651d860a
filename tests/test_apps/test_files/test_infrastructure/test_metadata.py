"""Tests for metadata utilities."""

from io import BytesIO

import pytest
from django.core.files.base import ContentFile

from vault.apps.files.exceptions import ValidationError
from vault.apps.files.infrastructure.metadata import (
    clean_original_name,
    detect_mime_type,
    generate_storage_key,
    get_payload_size,
)


def test_detect_mime_type():
    """Test MIME type detection from filename."""
    assert detect_mime_type('test.pdf') == 'application/pdf'
    assert detect_mime_type('test.txt') == 'text/plain'
    assert detect_mime_type('test.jpg') == 'image/jpeg'
    assert detect_mime_type('test.png') == 'image/png'


def test_detect_mime_type_unknown():
    """Test MIME type detection for unknown extension."""
    assert detect_mime_type('test.unknown') == 'application/octet-stream'


def test_generate_storage_key_is_unique_hex():
    """Test storage keys are 32-char hex strings that never repeat."""
    keys = {generate_storage_key() for _ in range(100)}

    assert len(keys) == 100
    assert all(len(key) == 32 for key in keys)
    assert all(c in '0123456789abcdef' for key in keys for c in key)


def test_clean_original_name():
    """Test directory components are stripped from uploaded names."""
    assert clean_original_name('report.pdf') == 'report.pdf'
    assert clean_original_name('../../etc/passwd') == 'passwd'
    assert clean_original_name('C:\\Users\\me\\photo.jpg') == 'photo.jpg'
    assert clean_original_name('  Report.PDF ') == 'Report.PDF'


@pytest.mark.parametrize('name', [None, '', '..', '   '])
def test_clean_original_name_rejects_empty(name):
    """Test names with nothing left after cleaning are rejected."""
    with pytest.raises(ValidationError):
        clean_original_name(name)


def test_clean_original_name_length_limit():
    """Test names longer than the original_name column are rejected."""
    assert clean_original_name(f'{"a" * 251}.txt') == f'{"a" * 251}.txt'

    with pytest.raises(ValidationError):
        clean_original_name(f'{"a" * 252}.txt')


def test_get_payload_size_uses_size_attribute():
    """Test Django files report their size without reading."""
    assert get_payload_size(ContentFile(b'x' * 42)) == 42


def test_get_payload_size_seeks_plain_streams():
    """Test plain streams are measured and the position is kept."""
    stream = BytesIO(b'0123456789')
    stream.seek(3)

    assert get_payload_size(stream) == 10
    assert stream.tell() == 3
