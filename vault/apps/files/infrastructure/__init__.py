"""Infrastructure layer for files app.

This package contains integrations with external systems:
- Blob store adapters over Django storage backends (S3/MinIO/in-memory)
- Metadata store implementations (Django ORM, in-memory)
- Upload metadata helpers (storage keys, MIME types, sizes)

Keep infrastructure concerns separate from business logic.
"""
