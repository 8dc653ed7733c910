"""
BaseService -- common wiring for the factory services.

Responsibility:
    Every service shares one DomainStateStore, one Clock, the ledger
    configuration and an id factory.  BaseService holds them and provides
    the commit helper that turns a computed snapshot into the current one.

Architecture position:
    Services -- imperative shell.  The only layer that reads the clock or
    mints ids; engines receive both as plain values.

Invariants enforced:
    - Services never swap snapshots themselves: they compute the next
      DomainState from ``self.state`` and hand it to ``_commit``.  An
      exception raised before ``_commit`` leaves the store untouched.
"""

from __future__ import annotations

from typing import Callable
from uuid import uuid4

from factory_config.schema import LedgerConfig
from factory_kernel.domain.clock import Clock, SystemClock
from factory_kernel.domain.state import DomainState
from factory_kernel.domain.values import require_text
from factory_kernel.logging_config import LogContext
from factory_services.state_store import DomainStateStore


def new_id() -> str:
    return uuid4().hex


class BaseService:
    def __init__(
        self,
        store: DomainStateStore,
        clock: Clock | None = None,
        ledger_config: LedgerConfig | None = None,
        id_factory: Callable[[], str] | None = None,
    ):
        self._store = store
        self._clock = clock or SystemClock()
        self._ledger = ledger_config or LedgerConfig()
        self._new_id = id_factory or new_id

    @property
    def state(self) -> DomainState:
        return self._store.state

    def _date(self, value: str | None) -> str:
        if value is None:
            return self._clock.today()
        return require_text(value, "date")

    def _operation(self, name: str, **fields: str | None):
        return LogContext.bind(operation=name, **fields)

    def _commit(self, new_state: DomainState, operation: str) -> DomainState:
        return self._store.commit(new_state, operation)
