"""Business logic layer for files app.

This package contains all business logic for file operations:
- Upload, info and download
- Owner-scoped listing, search and pagination
- Trash, restore and permanent delete
- Consistency checks between blob and metadata stores

All business logic should be implemented here, separate from
models (data layer) and infrastructure (external systems).
"""
