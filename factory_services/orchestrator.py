"""
factory_services.orchestrator -- the single owner of the factory state.

Responsibility:
    Creates the DomainStateStore and every service exactly once and wires
    them together.  Callers reach every operation through the service
    attributes; no service constructs another.

Architecture position:
    Services -- top of the service layer.  The only place where the blob
    store, the state store and the services are composed.

Invariants enforced:
    - One store per orchestrator, shared by every service, so all services
      see the same snapshot and commit through the same point.
    - All services share one Clock, one LedgerConfig and one id factory.

Failure modes:
    - PersistenceError from ``load()`` when stored documents are unreadable
      or from a newer schema.

Usage:
    orchestrator = FactoryOrchestrator.from_config(get_active_config())
    orchestrator.warehouse.receive_stock("DOUGH", 24, "white", 10)
    orchestrator.production.record_machine_work(producer.id, "M1", lines)
    orchestrator.reporting.conservation_report()
"""

from __future__ import annotations

from typing import Callable

from factory_config.schema import FactoryConfig, LedgerConfig
from factory_kernel.domain.clock import Clock, SystemClock
from factory_kernel.domain.state import DomainState
from factory_kernel.logging_config import configure_logging, get_logger
from factory_services.blob_store import BlobStore, MemoryBlobStore, blob_store_from_url
from factory_services.catalog_service import CatalogService
from factory_services.customer_service import CustomerService
from factory_services.expense_service import ExpenseService
from factory_services.processing_service import ProcessingService
from factory_services.production_service import ProductionService
from factory_services.reporting_service import ReportingService
from factory_services.sales_service import SalesService
from factory_services.state_store import DomainStateStore
from factory_services.warehouse_service import WarehouseService

logger = get_logger("services.orchestrator")


class FactoryOrchestrator:
    """Central factory for the factory services.

    Contract:
        Receives a BlobStore and optional Clock / LedgerConfig / id factory.
        Loads the stored documents once and exposes every service as a
        public attribute.

    Non-goals:
        - No concurrency control: operations run one at a time, each to
          completion, on the calling thread.
    """

    def __init__(
        self,
        blob_store: BlobStore | None = None,
        clock: Clock | None = None,
        ledger_config: LedgerConfig | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._clock = clock or SystemClock()
        self.ledger_config = ledger_config or LedgerConfig()
        self.store = DomainStateStore(blob_store or MemoryBlobStore())
        self.store.load()

        wiring = dict(
            store=self.store,
            clock=self._clock,
            ledger_config=self.ledger_config,
            id_factory=id_factory,
        )
        self.warehouse = WarehouseService(**wiring)
        self.catalog = CatalogService(**wiring)
        self.production = ProductionService(**wiring)
        self.processing = ProcessingService(**wiring)
        self.sales = SalesService(**wiring)
        self.customers = CustomerService(**wiring)
        self.expenses = ExpenseService(**wiring)
        self.reporting = ReportingService(**wiring)

        logger.info(
            "orchestrator_ready",
            extra={"reversal_policy": self.ledger_config.reversal_policy},
        )

    @classmethod
    def from_config(
        cls,
        config: FactoryConfig,
        clock: Clock | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> FactoryOrchestrator:
        """Build from a loaded configuration set; also configures logging once."""
        configure_logging(level=config.logging.level)
        blob_store = blob_store_from_url(config.storage.url, echo=config.storage.echo)
        return cls(
            blob_store=blob_store,
            clock=clock,
            ledger_config=config.ledger,
            id_factory=id_factory,
        )

    @property
    def state(self) -> DomainState:
        return self.store.state

    def reload(self) -> DomainState:
        """Discard the in-memory snapshot and decode the stored documents again."""
        return self.store.load()

    def close(self) -> None:
        self.store.blob_store.close()
