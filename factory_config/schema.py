"""
Factory configuration schema.

Frozen dataclasses that the YAML loader fills in.  A ``FactoryConfig`` is
the only configuration object the rest of the system sees; it is obtained
through ``factory_config.get_active_config()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from factory_kernel.domain.values import CustomerRole, ReversalPolicy

MEMORY_URL = "memory://"


@dataclass(frozen=True)
class StorageConfig:
    """Where the blob documents live."""

    url: str = MEMORY_URL
    echo: bool = False

    @property
    def is_memory(self) -> bool:
        return self.url == MEMORY_URL


@dataclass(frozen=True)
class LedgerConfig:
    """Inventory ledger policies."""

    reversal_policy: ReversalPolicy = ReversalPolicy.REJECT
    # Whether deleting a customer undoes the inventory effects of its records.
    # Held as (role, flag) pairs so the config stays hashable.
    reverse_inventory_on_customer_delete: tuple[tuple[CustomerRole, bool], ...] = (
        (CustomerRole.PRODUCER, False),
        (CustomerRole.PROCESSOR, False),
        (CustomerRole.SALES, True),
    )

    def reverses_on_delete(self, role: CustomerRole) -> bool:
        return dict(self.reverse_inventory_on_customer_delete).get(role, False)


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class FactoryConfig:
    name: str
    version: int = 1
    storage: StorageConfig = field(default_factory=StorageConfig)
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    checksum: str = ""
