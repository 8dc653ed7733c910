"""
Pytest fixtures for the factory ledger test suite.

Provides:
- Structured logging configured for the whole session, plus a capture helper
- A deterministic clock and sequential ids
- In-memory orchestrators, empty or seeded with accounts, models and stock
- Small builders for DomainState snapshots used by the engine tests
"""

import itertools
import json
import logging
from dataclasses import dataclass
from decimal import Decimal
from io import StringIO

import pytest

from factory_config.schema import LedgerConfig
from factory_kernel.domain.clock import DeterministicClock
from factory_kernel.domain.records import FabricModel, RawStockEntry, WarehouseLog
from factory_kernel.domain.state import DomainState
from factory_kernel.domain.values import (
    CustomerRole,
    MaterialSize,
    MaterialType,
    ReversalPolicy,
)
from factory_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from factory_services.blob_store import MemoryBlobStore
from factory_services.orchestrator import FactoryOrchestrator

DOUGH = MaterialType.DOUGH
ANDY = MaterialType.ANDY
S18 = MaterialSize.SIZE_18
S24 = MaterialSize.SIZE_24


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture factory_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, orchestrator):
            orchestrator.warehouse.receive_stock("DOUGH", 24, "white", 5)
            assert any(r["message"] == "stock_received" for r in captured_logs())
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("factory_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Clock and ids
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """Provide a deterministic clock for testing (2024-01-01 12:00 UTC)."""
    return DeterministicClock()


@pytest.fixture
def id_factory():
    """Sequential ids: id-0001, id-0002, ..."""
    counter = itertools.count(1)
    return lambda: f"id-{next(counter):04d}"


# =============================================================================
# Orchestrators
# =============================================================================


def make_orchestrator(
    clock,
    id_factory,
    blob_store=None,
    reversal_policy: ReversalPolicy = ReversalPolicy.REJECT,
) -> FactoryOrchestrator:
    return FactoryOrchestrator(
        blob_store=blob_store or MemoryBlobStore(),
        clock=clock,
        ledger_config=LedgerConfig(reversal_policy=reversal_policy),
        id_factory=id_factory,
    )


@pytest.fixture
def blob_store():
    return MemoryBlobStore()


@pytest.fixture
def orchestrator(deterministic_clock, id_factory, blob_store):
    return make_orchestrator(deterministic_clock, id_factory, blob_store)


@dataclass
class Seed:
    """Ids of the records created by the ``seeded`` fixture."""

    orchestrator: FactoryOrchestrator
    producer_id: str
    processor_id: str
    buyer_id: str
    model_id: str
    other_model_id: str


def seed_factory(orch: FactoryOrchestrator) -> Seed:
    """One account per role, two models, 10 bags of DOUGH/24/white and 8 of ANDY/18/red."""
    producer = orch.customers.create_customer(CustomerRole.PRODUCER, "Abu Ali", "0100")
    processor = orch.customers.create_customer(CustomerRole.PROCESSOR, "Finishing Co", "0111")
    buyer = orch.customers.create_customer(CustomerRole.SALES, "Shop One", "0122")
    model = orch.catalog.create_model("Polo", "P-1", length=70, width=50)
    other = orch.catalog.create_model("Cardigan", "C-2", length=65, width=48)
    orch.warehouse.receive_stock(DOUGH, S24, "white", 10)
    orch.warehouse.receive_stock(ANDY, S18, "red", 8)
    return Seed(orch, producer.id, processor.id, buyer.id, model.id, other.id)


@pytest.fixture
def seeded(orchestrator):
    return seed_factory(orchestrator)


# =============================================================================
# Snapshot builders (engine tests)
# =============================================================================


def model(model_id: str, in_production: int = 0, finished: int = 0) -> FabricModel:
    return FabricModel(
        id=model_id,
        name=f"Model {model_id}",
        code=model_id.upper(),
        length=Decimal("70"),
        width=Decimal("50"),
        finished_count=finished,
        in_production_count=in_production,
    )


def snapshot(
    stock: dict | None = None,
    models: tuple[FabricModel, ...] = (),
) -> DomainState:
    """Snapshot with ``{(type, size, color): count}`` stock and matching receipt logs."""
    rows = []
    logs = []
    for i, ((mt, size, color), count) in enumerate((stock or {}).items()):
        rows.append(RawStockEntry(mt, size, color, count))
        if count:
            logs.append(WarehouseLog(f"log-{i}", "2024-01-01", mt, size, color, count))
    return DomainState(raw_stock=tuple(rows), warehouse_logs=tuple(logs), models=models)
