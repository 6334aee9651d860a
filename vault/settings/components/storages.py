"""Django storage configuration for S3-compatible backends.

Blobs live in an S3-compatible bucket (MinIO locally, R2 or AWS in
production) through django-storages. File records live in the database.
"""

from typing import Any, Final

from vault.settings.components import config

# Storage configuration dictionary
# Uses S3-compatible storage for blobs, local storage for static files
STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': {
        'BACKEND': 'vault.apps.files.infrastructure.storage.FileStorage',
        'OPTIONS': {
            'bucket_name': config(
                'AWS_STORAGE_BUCKET_NAME',
                default='vault-files',
            ),
            'access_key': config('AWS_ACCESS_KEY_ID', default=None),
            'secret_key': config('AWS_SECRET_ACCESS_KEY', default=None),
            'endpoint_url': config(
                'AWS_S3_ENDPOINT_URL',
                default=None,
            ),
            'region_name': config(
                'AWS_S3_REGION_NAME',
                default='auto',
            ),
            'file_overwrite': False,  # Prevent accidental overwrites
            'default_acl': None,  # Inherit bucket ACL
        },
    },
    'staticfiles': {
        # Keep static files separate from user files
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}

# Storage alias holding file blobs
FILES_BLOB_STORAGE = config('FILES_BLOB_STORAGE', default='default')

# Metadata store implementation
FILES_METADATA_STORE = config(
    'FILES_METADATA_STORE',
    default='vault.apps.files.infrastructure.records.DatabaseMetadataStore',
)

# Upload ceiling, 100 MiB by default
FILES_MAX_UPLOAD_BYTES = config(
    'FILES_MAX_UPLOAD_BYTES',
    cast=int,
    default=100 * 1024 * 1024,
)

# Listing page sizes
FILES_PAGE_SIZE = config('FILES_PAGE_SIZE', cast=int, default=20)
FILES_MAX_PAGE_SIZE = config('FILES_MAX_PAGE_SIZE', cast=int, default=100)

# Days a file stays in trash before cleanup_trash purges it
FILES_TRASH_RETENTION_DAYS = config(
    'FILES_TRASH_RETENTION_DAYS',
    cast=int,
    default=30,
)
