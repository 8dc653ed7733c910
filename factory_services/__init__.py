"""
factory_services -- Package init and public API.

Responsibility:
    Stateful services that compose the pure engines (factory_engines/) with
    the blob store, the clock and id generation.  This is the only layer
    that performs I/O or reads wall-clock time.

Architecture position:
    Services -- imperative shell over engines + kernel.

    Dependency direction:
        factory_services/ -> factory_engines/  (allowed)
        factory_services/ -> factory_kernel/   (allowed)
        factory_services/ -> factory_config/   (allowed)
        factory_engines/  -> factory_services/ (FORBIDDEN)
        factory_kernel/   -> factory_services/ (FORBIDDEN)

Invariants enforced:
    - All service wiring is centralised in FactoryOrchestrator.
"""

from factory_services.blob_store import (
    BlobStore,
    MemoryBlobStore,
    SqlBlobStore,
    blob_store_from_url,
)
from factory_services.catalog_service import CatalogService
from factory_services.customer_service import CustomerService
from factory_services.drafts import InvoiceLine, ProcessingLine, ProductionLine
from factory_services.expense_service import ExpenseService
from factory_services.orchestrator import FactoryOrchestrator
from factory_services.processing_service import ProcessingService
from factory_services.production_service import ProductionService
from factory_services.reporting_service import ReportingService
from factory_services.sales_service import SalesService
from factory_services.state_store import DomainStateStore
from factory_services.warehouse_service import WarehouseService

__all__ = [
    "BlobStore",
    "CatalogService",
    "CustomerService",
    "DomainStateStore",
    "ExpenseService",
    "FactoryOrchestrator",
    "InvoiceLine",
    "MemoryBlobStore",
    "ProcessingLine",
    "ProcessingService",
    "ProductionLine",
    "ProductionService",
    "ReportingService",
    "SalesService",
    "SqlBlobStore",
    "WarehouseService",
    "blob_store_from_url",
]
