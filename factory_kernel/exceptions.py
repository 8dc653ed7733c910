"""
Typed Exception Hierarchy for the Factory Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Every ledger failure has to be shown to the operator inline, naming the
offending material or model and the numeric shortfall.  Callers therefore
catch by TYPE and read structured attributes; they never parse messages.

    try:
        orchestrator.production.create_machine_work(...)
    except InsufficientStockError as e:
        show_inline(f"{e.key}: need {e.required}, have {e.available}")

Every class carries:
  1. a ``code`` class attribute (machine-readable, stable)
  2. structured attributes describing the failure

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    FactoryLedgerError (base)
    |
    +-- ValidationError
    |
    +-- InsufficientStockError
    |   +-- ReversalConflictError
    |
    +-- NotFoundError
    |   +-- ModelNotFoundError
    |   +-- CustomerNotFoundError
    |   +-- MachineWorkNotFoundError
    |   +-- ProcessingWorkNotFoundError
    |   +-- InvoiceNotFoundError
    |   +-- PaymentNotFoundError
    |   +-- ExpenseNotFoundError
    |   +-- WarehouseLogNotFoundError
    |
    +-- ModelReferencedError
    |
    +-- PersistenceError
        +-- UnsupportedSchemaVersionError
        +-- CorruptDocumentError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code                        | When Raised
----------------------------|------------------------------------------------
VALIDATION_ERROR            | Missing/invalid field on a draft (no model, ...)
INSUFFICIENT_STOCK          | required > available (raw, in-production, finished)
REVERSAL_CONFLICT           | Undoing a record would drive a counter negative
NOT_FOUND                   | Record id vanished before edit/delete
MODEL_REFERENCED            | Deleting a model that work records still use
PERSISTENCE_ERROR           | Blob store could not save the snapshot
UNSUPPORTED_SCHEMA_VERSION  | Stored documents are newer than this code
CORRUPT_DOCUMENT            | Stored document is not shaped as expected

All errors are local to a single user action.  None is retried.  A raised
error guarantees the in-memory snapshot is unchanged.
"""


class FactoryLedgerError(Exception):
    """
    Base exception for all factory kernel errors.

    All subclasses must have a ``code`` class attribute.
    """

    code: str = "FACTORY_LEDGER_ERROR"


class ValidationError(FactoryLedgerError):
    """A draft is missing a required field or carries an invalid value."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


class InsufficientStockError(FactoryLedgerError):
    """
    A bounded counter cannot cover the requested quantity.

    ``resource`` is one of ``raw_stock``, ``in_production`` or ``finished``;
    ``key`` names the stock key or model id.
    """

    code: str = "INSUFFICIENT_STOCK"

    def __init__(self, resource: str, key: str, required: int, available: int):
        self.resource = resource
        self.key = key
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient {resource} for {key}: "
            f"required={required}, available={available}"
        )

    @property
    def shortfall(self) -> int:
        return self.required - self.available


class ReversalConflictError(InsufficientStockError):
    """
    Undoing a record's prior effect would drive a counter below zero.

    Raised under the ``reject`` reversal policy, e.g. deleting a machine
    work whose output was already sent to processing.
    """

    code: str = "REVERSAL_CONFLICT"


# Lookup failures


class NotFoundError(FactoryLedgerError):
    """A record referenced by id does not exist."""

    code: str = "NOT_FOUND"
    entity: str = "record"

    def __init__(self, entity_id: str):
        self.entity_id = entity_id
        super().__init__(f"{self.entity.capitalize()} not found: {entity_id}")


class ModelNotFoundError(NotFoundError):
    code: str = "MODEL_NOT_FOUND"
    entity: str = "model"


class CustomerNotFoundError(NotFoundError):
    code: str = "CUSTOMER_NOT_FOUND"
    entity: str = "customer"


class MachineWorkNotFoundError(NotFoundError):
    code: str = "MACHINE_WORK_NOT_FOUND"
    entity: str = "machine work"


class ProcessingWorkNotFoundError(NotFoundError):
    code: str = "PROCESSING_WORK_NOT_FOUND"
    entity: str = "processing work"


class InvoiceNotFoundError(NotFoundError):
    code: str = "INVOICE_NOT_FOUND"
    entity: str = "invoice"


class PaymentNotFoundError(NotFoundError):
    code: str = "PAYMENT_NOT_FOUND"
    entity: str = "payment"


class ExpenseNotFoundError(NotFoundError):
    code: str = "EXPENSE_NOT_FOUND"
    entity: str = "expense"


class WarehouseLogNotFoundError(NotFoundError):
    code: str = "WAREHOUSE_LOG_NOT_FOUND"
    entity: str = "warehouse log"


class ModelReferencedError(FactoryLedgerError):
    """Model cannot be deleted - work or invoice entries still reference it."""

    code: str = "MODEL_REFERENCED"

    def __init__(self, model_id: str, referenced_by: list[str]):
        self.model_id = model_id
        self.referenced_by = referenced_by
        super().__init__(
            f"Model {model_id} is referenced by {len(referenced_by)} record(s)"
        )


# Persistence


class PersistenceError(FactoryLedgerError):
    """The blob store failed to load or save the snapshot."""

    code: str = "PERSISTENCE_ERROR"


class UnsupportedSchemaVersionError(PersistenceError):
    """Stored documents were written by a newer schema."""

    code: str = "UNSUPPORTED_SCHEMA_VERSION"

    def __init__(self, schema_version: int, supported_version: int):
        self.schema_version = schema_version
        self.supported_version = supported_version
        super().__init__(
            f"Unsupported schema version {schema_version} "
            f"(this build reads up to {supported_version})"
        )


class CorruptDocumentError(PersistenceError):
    """A stored blob does not decode into the expected record shape."""

    code: str = "CORRUPT_DOCUMENT"

    def __init__(self, blob: str, reason: str):
        self.blob = blob
        self.reason = reason
        super().__init__(f"Corrupt document in {blob}: {reason}")
