"""
factory_services.state_store -- owner of the current DomainState.

Responsibility:
    Loads every blob once at start-up, hands out the current immutable
    snapshot, and commits a new snapshot by persisting it and then swapping
    it in.

Architecture position:
    Services -- imperative shell.  One store per orchestrator; there is no
    module-level state.

Invariants enforced:
    - Single commit point: the in-memory snapshot changes only in
      ``commit()``, and only after ``save_all`` succeeded.  A save failure
      propagates as PersistenceError with the previous snapshot intact.
    - Every collection is written on every commit (save-all).

Failure modes:
    - PersistenceError (and its UnsupportedSchemaVersionError /
      CorruptDocumentError subclasses) from ``load()`` and ``commit()``.
"""

from __future__ import annotations

from factory_kernel.domain.codec import decode_state, encode_state
from factory_kernel.domain.state import DomainState
from factory_kernel.exceptions import PersistenceError
from factory_kernel.logging_config import get_logger
from factory_services.blob_store import BlobStore

logger = get_logger("services.state_store")


class DomainStateStore:
    def __init__(self, blob_store: BlobStore):
        self._blob_store = blob_store
        self._state = DomainState()

    @property
    def state(self) -> DomainState:
        return self._state

    @property
    def blob_store(self) -> BlobStore:
        return self._blob_store

    def load(self) -> DomainState:
        """Decode every stored blob; absent blobs are empty collections."""
        self._state = decode_state(self._blob_store.load_all())
        logger.info(
            "state_loaded",
            extra={
                "model_count": len(self._state.models),
                "stock_rows": len(self._state.raw_stock),
                "machine_work_count": len(self._state.machine_works),
                "processing_work_count": len(self._state.processing_works),
            },
        )
        return self._state

    def commit(self, new_state: DomainState, operation: str) -> DomainState:
        """Persist ``new_state`` and make it current."""
        if new_state is self._state:
            return self._state
        documents = encode_state(new_state)
        try:
            self._blob_store.save_all(documents)
        except PersistenceError:
            logger.error("state_commit_failed", extra={"operation": operation}, exc_info=True)
            raise
        self._state = new_state
        logger.debug("state_committed", extra={"operation": operation})
        return new_state
