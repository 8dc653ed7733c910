"""
factory_services.blob_store -- the external key-value blob store.

Responsibility:
    Moves the named JSON documents of a snapshot in and out of storage with
    load-all / save-all semantics.  Knows nothing about records; shaping the
    documents is ``factory_kernel.domain.codec``'s job.

Architecture position:
    Services -- imperative shell.  The only module that touches a database.

Invariants enforced:
    - ``save_all`` is atomic for the SQL store: every blob is written in one
      ``session_scope()`` transaction, so a failure leaves the previous
      documents in place.
    - ``load_all`` returns only blobs that exist; absence means "empty".
    - The memory store deep-copies on the way in and out, so callers can
      never alias stored documents.

Failure modes:
    - PersistenceError wrapping any SQLAlchemy or JSON error.
"""

from __future__ import annotations

import copy
import json
from abc import ABC, abstractmethod
from typing import Any, Mapping

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from factory_config.schema import MEMORY_URL
from factory_kernel.db.engine import (
    create_tables,
    init_engine_from_url,
    make_session_factory,
    session_scope,
)
from factory_kernel.domain.codec import META_BLOB
from factory_kernel.exceptions import PersistenceError
from factory_kernel.logging_config import get_logger
from factory_kernel.models.stored_blob import StoredBlob

logger = get_logger("services.blob_store")


class BlobStore(ABC):
    """Load-all / save-all store of named JSON documents."""

    @abstractmethod
    def load_all(self) -> dict[str, Any]:
        ...

    @abstractmethod
    def save_all(self, documents: Mapping[str, Any]) -> None:
        ...

    def close(self) -> None:
        """Release any resources held by the store."""


class MemoryBlobStore(BlobStore):
    """In-process store, used by tests and the ``memory://`` URL."""

    def __init__(self, documents: Mapping[str, Any] | None = None):
        self._documents: dict[str, Any] = copy.deepcopy(dict(documents or {}))
        self.save_count = 0

    def load_all(self) -> dict[str, Any]:
        return copy.deepcopy(self._documents)

    def save_all(self, documents: Mapping[str, Any]) -> None:
        self._documents.update(copy.deepcopy(dict(documents)))
        self.save_count += 1


class SqlBlobStore(BlobStore):
    """
    One ``stored_blobs`` row per document, JSON text, SQLAlchemy 2.0 ORM.

    The store owns its engine; ``close()`` disposes it.
    """

    def __init__(self, engine: Engine):
        self._engine = engine
        self._session_factory = make_session_factory(engine)
        create_tables(engine)

    @classmethod
    def from_url(cls, url: str, echo: bool = False) -> SqlBlobStore:
        return cls(init_engine_from_url(url, echo=echo))

    def load_all(self) -> dict[str, Any]:
        try:
            with session_scope(self._session_factory) as session:
                rows = session.execute(select(StoredBlob)).scalars().all()
                return {row.name: json.loads(row.document) for row in rows}
        except (SQLAlchemyError, json.JSONDecodeError) as exc:
            raise PersistenceError(f"Failed to load documents: {exc}") from exc

    def save_all(self, documents: Mapping[str, Any]) -> None:
        schema_version = int((documents.get(META_BLOB) or {}).get("schemaVersion", 0))
        try:
            with session_scope(self._session_factory) as session:
                for name, document in documents.items():
                    text = json.dumps(document, ensure_ascii=False)
                    row = session.get(StoredBlob, name)
                    if row is None:
                        session.add(
                            StoredBlob(name=name, document=text, schema_version=schema_version)
                        )
                    else:
                        row.document = text
                        row.schema_version = schema_version
        except (SQLAlchemyError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Failed to save documents: {exc}") from exc
        logger.debug("documents_saved", extra={"blob_count": len(documents)})

    def close(self) -> None:
        self._engine.dispose()


def blob_store_from_url(url: str, echo: bool = False) -> BlobStore:
    if url == MEMORY_URL:
        return MemoryBlobStore()
    return SqlBlobStore.from_url(url, echo=echo)
