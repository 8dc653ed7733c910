"""ORM models backing the SQL blob store."""

from factory_kernel.models.stored_blob import StoredBlob

__all__ = ["StoredBlob"]
