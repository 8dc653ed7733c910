"""
Document codec -- DomainState <-> named JSON-compatible blobs.

Responsibility:
    Encodes each top-level collection as one named document and decodes the
    documents back into frozen records, field for field compatible with the
    documents the factory has always stored (camelCase keys, Arabic enum
    labels, plain JSON numbers).

Architecture position:
    Kernel > Domain -- pure transformation, no I/O.  The blob stores in
    ``factory_services`` move the documents; this module only shapes them.

Invariants enforced:
    - An absent blob decodes to an empty collection, never an error.
    - ``factory_meta.schemaVersion`` is always written.  A missing meta blob
      is legacy version 0 and is upgraded on read; a version newer than
      ``SCHEMA_VERSION`` is refused.
    - Money is Decimal in memory; on disk it is an int when integral,
      otherwise a float, matching existing documents.  A fractional amount
      therefore keeps only about 15 significant digits across a save;
      factory prices and payments stay well inside that.

Failure modes:
    - UnsupportedSchemaVersionError for documents from a newer build.
    - CorruptDocumentError (naming the blob) for any shape mismatch.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Callable, Mapping

from factory_kernel.domain.records import (
    Customer,
    Expense,
    FabricModel,
    Invoice,
    InvoiceItem,
    MachineWork,
    Payment,
    ProcessingEntry,
    ProcessingWork,
    ProducedOutput,
    ProductionEntry,
    RawConsumption,
    RawStockEntry,
    WarehouseLog,
)
from factory_kernel.domain.state import DomainState
from factory_kernel.domain.values import (
    CustomerRole,
    ExpenseCategory,
    MaterialSize,
    MaterialType,
)
from factory_kernel.exceptions import (
    CorruptDocumentError,
    FactoryLedgerError,
    UnsupportedSchemaVersionError,
)
from factory_kernel.logging_config import get_logger

logger = get_logger("domain.codec")

SCHEMA_VERSION = 1

META_BLOB = "factory_meta"
STOCKS_BLOB = "factory_stocks"
WAREHOUSE_LOGS_BLOB = "factory_warehouse_logs"
MODELS_BLOB = "factory_models"
MACHINES_BLOB = "factory_machines"
PROCESSING_BLOB = "factory_processing"
EXPENSES_BLOB = "factory_expenses"

CUSTOMER_BLOBS: dict[CustomerRole, str] = {
    CustomerRole.PRODUCER: "factory_producers",
    CustomerRole.PROCESSOR: "factory_processors",
    CustomerRole.SALES: "factory_customers",
}

ALL_BLOBS: tuple[str, ...] = (
    META_BLOB,
    STOCKS_BLOB,
    WAREHOUSE_LOGS_BLOB,
    MODELS_BLOB,
    MACHINES_BLOB,
    PROCESSING_BLOB,
    *CUSTOMER_BLOBS.values(),
    EXPENSES_BLOB,
)


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------


def _number(value: Decimal) -> int | float:
    """JSON number for a money value; fractional amounts go through float."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def _decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    return Decimal(str(value))


def _count(value: Any, field: str, blob: str) -> int:
    """Legacy documents may hold negative or missing counters; repair to >= 0."""
    count = int(value or 0)
    if count < 0:
        logger.warning(
            "legacy_negative_counter_clamped",
            extra={"blob": blob, "field": field, "stored": count},
        )
        return 0
    return count


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _encode_raw(material_type: MaterialType, size: MaterialSize, color: str) -> dict[str, Any]:
    return {"type": material_type.value, "size": size.value, "color": color}


def _encode_customer(c: Customer) -> dict[str, Any]:
    return {
        "id": c.id,
        "name": c.name,
        "phone": c.phone,
        "invoices": [
            {
                "id": inv.id,
                "date": inv.date,
                "items": [
                    {
                        "modelId": item.model_id,
                        "machineName": item.machine_name,
                        "quantity": item.quantity,
                        "price": _number(item.price),
                    }
                    for item in inv.items
                ],
                "total": _number(inv.total),
            }
            for inv in c.invoices
        ],
        "payments": [
            {"id": p.id, "date": p.date, "amount": _number(p.amount)}
            for p in c.payments
        ],
    }


def _encode_model(m: FabricModel) -> dict[str, Any]:
    doc = {
        "id": m.id,
        "name": m.name,
        "code": m.code,
        "length": _number(m.length),
        "width": _number(m.width),
        "sleeveLength": _number(m.sleeve_length),
        "sleeveWidth": _number(m.sleeve_width),
        "neckType": m.neck_type,
        "stockCount": m.finished_count,
        "producedCount": m.in_production_count,
    }
    if m.image_url is not None:
        doc["imageUrl"] = m.image_url
    return doc


def encode_state(state: DomainState) -> dict[str, Any]:
    """Encode a snapshot as ``{blob_name: document}`` for every blob."""
    docs: dict[str, Any] = {
        META_BLOB: {"schemaVersion": SCHEMA_VERSION},
        STOCKS_BLOB: [
            {**_encode_raw(r.material_type, r.size, r.color), "count": r.count}
            for r in state.raw_stock
        ],
        WAREHOUSE_LOGS_BLOB: [
            {
                "id": log.id,
                "date": log.date,
                **_encode_raw(log.material_type, log.size, log.color),
                "quantity": log.quantity,
            }
            for log in state.warehouse_logs
        ],
        MODELS_BLOB: [_encode_model(m) for m in state.models],
        MACHINES_BLOB: [
            {
                "id": w.id,
                "customerId": w.customer_id,
                "machineName": w.machine_name,
                "date": w.date,
                "entries": [
                    {
                        "raw": {
                            **_encode_raw(e.raw.material_type, e.raw.size, e.raw.color),
                            "quantity": e.raw.quantity,
                        },
                        "produced": {
                            "modelId": e.produced.model_id,
                            "quantity": e.produced.quantity,
                            "price": _number(e.produced.price),
                        },
                    }
                    for e in w.entries
                ],
            }
            for w in state.machine_works
        ],
        PROCESSING_BLOB: [
            {
                "id": w.id,
                "customerId": w.customer_id,
                "machineName": w.machine_name,
                "date": w.date,
                "entries": [
                    {
                        "modelId": e.model_id,
                        "quantitySent": e.quantity_sent,
                        "quantityReceived": e.quantity_received,
                        "price": _number(e.price),
                    }
                    for e in w.entries
                ],
            }
            for w in state.processing_works
        ],
        EXPENSES_BLOB: [
            {
                "id": x.id,
                "date": x.date,
                "category": x.category.value,
                "description": x.description,
                "amount": _number(x.amount),
            }
            for x in state.expenses
        ],
    }
    for role, blob in CUSTOMER_BLOBS.items():
        docs[blob] = [_encode_customer(c) for c in state.customers(role)]
    return docs


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _decode_stock(doc: dict[str, Any]) -> RawStockEntry:
    return RawStockEntry(
        material_type=MaterialType(doc["type"]),
        size=MaterialSize(int(doc["size"])),
        color=doc.get("color", "") or "",
        count=_count(doc.get("count"), "count", STOCKS_BLOB),
    )


def _decode_log(doc: dict[str, Any]) -> WarehouseLog:
    return WarehouseLog(
        id=str(doc["id"]),
        date=doc.get("date", ""),
        material_type=MaterialType(doc["type"]),
        size=MaterialSize(int(doc["size"])),
        color=doc.get("color", "") or "",
        quantity=int(doc["quantity"]),
    )


def _decode_model(doc: dict[str, Any]) -> FabricModel:
    return FabricModel(
        id=str(doc["id"]),
        name=doc["name"],
        code=doc.get("code", ""),
        length=_decimal(doc.get("length")),
        width=_decimal(doc.get("width")),
        sleeve_length=_decimal(doc.get("sleeveLength")),
        sleeve_width=_decimal(doc.get("sleeveWidth")),
        neck_type=doc.get("neckType", ""),
        finished_count=_count(doc.get("stockCount"), "stockCount", MODELS_BLOB),
        in_production_count=_count(doc.get("producedCount"), "producedCount", MODELS_BLOB),
        image_url=doc.get("imageUrl"),
    )


def _decode_machine_work(doc: dict[str, Any]) -> MachineWork:
    entries = []
    for e in doc["entries"]:
        raw, produced = e["raw"], e["produced"]
        entries.append(
            ProductionEntry(
                raw=RawConsumption(
                    material_type=MaterialType(raw["type"]),
                    size=MaterialSize(int(raw["size"])),
                    color=raw.get("color", "") or "",
                    quantity=int(raw["quantity"]),
                ),
                produced=ProducedOutput(
                    model_id=str(produced["modelId"]),
                    quantity=int(produced["quantity"]),
                    price=_decimal(produced.get("price")),
                ),
            )
        )
    return MachineWork(
        id=str(doc["id"]),
        customer_id=str(doc.get("customerId", "")),
        machine_name=doc["machineName"],
        date=doc.get("date", ""),
        entries=tuple(entries),
    )


def _decode_processing_work(doc: dict[str, Any]) -> ProcessingWork:
    return ProcessingWork(
        id=str(doc["id"]),
        customer_id=str(doc.get("customerId", "")),
        machine_name=doc["machineName"],
        date=doc.get("date", ""),
        entries=tuple(
            ProcessingEntry(
                model_id=str(e["modelId"]),
                quantity_sent=int(e.get("quantitySent", 0)),
                quantity_received=int(e.get("quantityReceived", 0)),
                price=_decimal(e.get("price")),
            )
            for e in doc["entries"]
        ),
    )


def _decode_customer(doc: dict[str, Any]) -> Customer:
    return Customer(
        id=str(doc["id"]),
        name=doc["name"],
        phone=doc.get("phone", "") or "",
        invoices=tuple(
            Invoice(
                id=str(inv["id"]),
                date=inv.get("date", ""),
                items=tuple(
                    InvoiceItem(
                        model_id=str(item["modelId"]),
                        machine_name=item.get("machineName", ""),
                        quantity=int(item["quantity"]),
                        price=_decimal(item.get("price")),
                    )
                    for item in inv.get("items", [])
                ),
                total=_decimal(inv.get("total")),
            )
            for inv in doc.get("invoices", [])
        ),
        payments=tuple(
            Payment(id=str(p["id"]), date=p.get("date", ""), amount=_decimal(p["amount"]))
            for p in doc.get("payments", [])
        ),
    )


def _decode_expense(doc: dict[str, Any]) -> Expense:
    return Expense(
        id=str(doc["id"]),
        date=doc.get("date", ""),
        category=ExpenseCategory(doc.get("category", ExpenseCategory.GENERAL.value)),
        description=doc.get("description", ""),
        amount=_decimal(doc["amount"]),
    )


def _decode_list(
    blobs: Mapping[str, Any], blob: str, decode: Callable[[dict[str, Any]], Any]
) -> tuple:
    docs = blobs.get(blob)
    if docs is None:
        return ()
    if not isinstance(docs, list):
        raise CorruptDocumentError(blob, f"expected a list, got {type(docs).__name__}")
    try:
        return tuple(decode(d) for d in docs)
    except (KeyError, TypeError, ValueError, ArithmeticError, FactoryLedgerError) as exc:
        raise CorruptDocumentError(blob, f"{type(exc).__name__}: {exc}") from exc


def stored_schema_version(blobs: Mapping[str, Any]) -> int:
    meta = blobs.get(META_BLOB) or {}
    if not isinstance(meta, dict):
        raise CorruptDocumentError(META_BLOB, "expected an object")
    return int(meta.get("schemaVersion", 0))


def decode_state(blobs: Mapping[str, Any]) -> DomainState:
    """
    Decode ``{blob_name: document}`` into a snapshot.

    Raises:
        UnsupportedSchemaVersionError: documents newer than this build.
        CorruptDocumentError: a document does not match its record shape.
    """
    version = stored_schema_version(blobs)
    if version > SCHEMA_VERSION:
        raise UnsupportedSchemaVersionError(version, SCHEMA_VERSION)
    if version < SCHEMA_VERSION and blobs:
        logger.info(
            "legacy_documents_upgraded",
            extra={"from_version": version, "to_version": SCHEMA_VERSION},
        )

    state = DomainState(
        raw_stock=_decode_list(blobs, STOCKS_BLOB, _decode_stock),
        warehouse_logs=_decode_list(blobs, WAREHOUSE_LOGS_BLOB, _decode_log),
        models=_decode_list(blobs, MODELS_BLOB, _decode_model),
        machine_works=_decode_list(blobs, MACHINES_BLOB, _decode_machine_work),
        processing_works=_decode_list(blobs, PROCESSING_BLOB, _decode_processing_work),
        expenses=_decode_list(blobs, EXPENSES_BLOB, _decode_expense),
    )
    for role, blob in CUSTOMER_BLOBS.items():
        state = state.with_customers(role, _decode_list(blobs, blob, _decode_customer))
    return state
