"""Tests for the document codec (factory_kernel/domain/codec.py)."""

import json
from decimal import Decimal

import pytest

from factory_kernel.domain.codec import (
    ALL_BLOBS,
    CUSTOMER_BLOBS,
    MACHINES_BLOB,
    META_BLOB,
    MODELS_BLOB,
    SCHEMA_VERSION,
    STOCKS_BLOB,
    decode_state,
    encode_state,
    stored_schema_version,
)
from factory_kernel.domain.records import (
    Customer,
    Invoice,
    InvoiceItem,
    MachineWork,
    Payment,
    ProducedOutput,
    ProductionEntry,
    RawConsumption,
)
from factory_kernel.domain.state import DomainState
from factory_kernel.domain.values import CustomerRole, MaterialSize, MaterialType
from factory_kernel.exceptions import CorruptDocumentError, UnsupportedSchemaVersionError

from conftest import model, snapshot


def _populated_state() -> DomainState:
    state = snapshot(
        {(MaterialType.DOUGH, MaterialSize.SIZE_24, "white"): 6},
        models=(model("m1", in_production=4, finished=2),),
    )
    work = MachineWork(
        id="w1",
        customer_id="p1",
        machine_name="M1",
        date="2024-01-02",
        entries=(
            ProductionEntry(
                RawConsumption(MaterialType.DOUGH, MaterialSize.SIZE_24, "white", 4),
                ProducedOutput("m1", 4, Decimal("2.5")),
            ),
        ),
    )
    buyer = Customer(
        id="c1",
        name="Shop",
        phone="0100",
        invoices=(
            Invoice.build("i1", "2024-01-03", (InvoiceItem("m1", "M1", 2, Decimal("30")),)),
        ),
        payments=(Payment("pay1", "2024-01-04", Decimal("20")),),
    )
    state = state.evolve(machine_works=(work,))
    state = state.with_customers(CustomerRole.PRODUCER, (Customer("p1", "Producer"),))
    return state.with_customers(CustomerRole.SALES, (buyer,))


class TestEncode:
    """Snapshot -> documents."""

    def test_every_blob_written_with_schema_version(self):
        docs = encode_state(DomainState())
        assert set(docs) == set(ALL_BLOBS)
        assert docs[META_BLOB] == {"schemaVersion": SCHEMA_VERSION}

    def test_documents_are_json_compatible(self):
        docs = encode_state(_populated_state())
        text = json.dumps(docs, ensure_ascii=False)
        assert "عجينة" in text

    def test_model_field_names(self):
        doc = encode_state(_populated_state())[MODELS_BLOB][0]
        assert doc["stockCount"] == 2
        assert doc["producedCount"] == 4
        assert "imageUrl" not in doc

    def test_money_integral_vs_fractional(self):
        docs = encode_state(_populated_state())
        produced = docs[MACHINES_BLOB][0]["entries"][0]["produced"]
        assert produced["price"] == 2.5
        invoice = docs[CUSTOMER_BLOBS[CustomerRole.SALES]][0]["invoices"][0]
        assert invoice["total"] == 60
        assert isinstance(invoice["total"], int)


class TestDecode:
    """Documents -> snapshot."""

    def test_round_trip_preserves_state(self):
        state = _populated_state()
        restored = decode_state(json.loads(json.dumps(encode_state(state))))
        assert restored == state

    @pytest.mark.parametrize(
        "amount, exact",
        [(Decimal("12.75"), True), (Decimal("1234567890.123456789"), False)],
    )
    def test_fractional_money_keeps_float_precision(self, amount, exact):
        buyer = Customer("c1", "Shop", payments=(Payment("pay1", "2024-01-04", amount),))
        state = DomainState().with_customers(CustomerRole.SALES, (buyer,))
        restored = decode_state(json.loads(json.dumps(encode_state(state))))
        stored = restored.customers(CustomerRole.SALES)[0].payments[0].amount
        assert (stored == amount) is exact
        assert stored == Decimal(str(float(amount)))

    def test_absent_blobs_are_empty(self):
        state = decode_state({META_BLOB: {"schemaVersion": 1}})
        assert state == DomainState()

    def test_newer_schema_refused(self):
        with pytest.raises(UnsupportedSchemaVersionError) as exc_info:
            decode_state({META_BLOB: {"schemaVersion": SCHEMA_VERSION + 1}})
        assert exc_info.value.schema_version == SCHEMA_VERSION + 1

    def test_corrupt_blob_named(self):
        with pytest.raises(CorruptDocumentError) as exc_info:
            decode_state({MODELS_BLOB: [{"id": "m1"}]})
        assert exc_info.value.blob == MODELS_BLOB

    def test_non_list_blob_is_corrupt(self):
        with pytest.raises(CorruptDocumentError):
            decode_state({STOCKS_BLOB: {"type": "عجينة"}})


class TestLegacyUpgrade:
    """Documents without factory_meta are schema version 0."""

    def test_missing_meta_is_version_zero(self):
        assert stored_schema_version({}) == 0

    def test_missing_produced_count_and_color(self):
        blobs = {
            MODELS_BLOB: [{"id": "m1", "name": "Polo", "code": "P", "stockCount": 3}],
            STOCKS_BLOB: [{"type": "أندي", "size": 18, "count": 5}],
        }
        state = decode_state(blobs)
        assert state.models[0].in_production_count == 0
        assert state.models[0].finished_count == 3
        assert state.raw_stock[0].color == ""
        assert state.raw_stock[0].material_type is MaterialType.ANDY

    def test_negative_counter_clamped_with_warning(self, captured_logs):
        blobs = {MODELS_BLOB: [{"id": "m1", "name": "Polo", "code": "P", "stockCount": -2}]}
        state = decode_state(blobs)
        assert state.models[0].finished_count == 0
        assert any(r["message"] == "legacy_negative_counter_clamped" for r in captured_logs())

    def test_upgrade_logged(self, captured_logs):
        decode_state({STOCKS_BLOB: []})
        assert any(r["message"] == "legacy_documents_upgraded" for r in captured_logs())
