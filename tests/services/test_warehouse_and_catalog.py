"""Tests for WarehouseService and CatalogService."""

from decimal import Decimal

import pytest

from factory_kernel.domain.values import MaterialType
from factory_kernel.exceptions import (
    InsufficientStockError,
    ModelNotFoundError,
    ModelReferencedError,
    ValidationError,
    WarehouseLogNotFoundError,
)
from factory_services.drafts import ProductionLine


class TestWarehouse:
    """Receipts, reconciliation and log deletion."""

    def test_receive_logs_positive_entry(self, orchestrator, captured_logs):
        log = orchestrator.warehouse.receive_stock("DOUGH", 24, "white", 10)
        assert log.quantity == 10
        assert log.date == "2024-01-01"
        assert orchestrator.warehouse.count("DOUGH", 24, "white") == 10
        assert any(r["message"] == "stock_received" for r in captured_logs())

    def test_receive_zero_rejected(self, orchestrator):
        with pytest.raises(ValidationError):
            orchestrator.warehouse.receive_stock("DOUGH", 24, "white", 0)

    def test_receive_requires_color(self, orchestrator):
        with pytest.raises(ValidationError) as exc_info:
            orchestrator.warehouse.receive_stock("DOUGH", 24, " ", 3)
        assert exc_info.value.field == "color"

    def test_stock_filters_and_colors(self, seeded):
        wh = seeded.orchestrator.warehouse
        wh.add_stock_row("DOUGH", 24, "black")
        assert [r.color for r in wh.stock("DOUGH")] == ["white", "black"]
        assert [r.color for r in wh.stock(size=18)] == ["red"]
        assert wh.available_colors("DOUGH", 24) == ["white"]

    def test_set_count_unchanged_returns_none(self, seeded):
        wh = seeded.orchestrator.warehouse
        logs_before = wh.warehouse_logs()
        assert wh.set_count("DOUGH", 24, "white", 10) is None
        assert wh.warehouse_logs() == logs_before

    def test_delete_log_reverses_quantity(self, seeded):
        wh = seeded.orchestrator.warehouse
        log = wh.receive_stock("DOUGH", 24, "white", 5)
        wh.delete_warehouse_log(log.id)
        assert wh.count("DOUGH", 24, "white") == 10
        assert log not in wh.warehouse_logs()

    def test_delete_consumed_receipt_refused(self, seeded):
        orch = seeded.orchestrator
        (receipt,) = [
            log for log in orch.warehouse.warehouse_logs() if log.material_type is MaterialType.DOUGH
        ]
        orch.production.record_machine_work(
            seeded.producer_id, "M1", [ProductionLine("DOUGH", 24, "white", 4, seeded.model_id, 1)]
        )
        with pytest.raises(InsufficientStockError):
            orch.warehouse.delete_warehouse_log(receipt.id)
        assert orch.warehouse.count("DOUGH", 24, "white") == 6

    def test_delete_unknown_log(self, orchestrator):
        with pytest.raises(WarehouseLogNotFoundError):
            orchestrator.warehouse.delete_warehouse_log("nope")


class TestCatalog:
    """Model CRUD; counters are ledger-owned."""

    def test_create_model_starts_at_zero(self, orchestrator):
        m = orchestrator.catalog.create_model("Polo", "P-1", length="70.5", neck_type=" V ")
        assert (m.in_production_count, m.finished_count) == (0, 0)
        assert m.length == Decimal("70.5")
        assert m.neck_type == "V"

    def test_name_and_code_required(self, orchestrator):
        with pytest.raises(ValidationError):
            orchestrator.catalog.create_model("", "P-1")
        with pytest.raises(ValidationError):
            orchestrator.catalog.create_model("Polo", None)

    def test_update_descriptive_fields(self, seeded):
        updated = seeded.orchestrator.catalog.update_model(seeded.model_id, name="Polo II", width=52)
        assert updated.name == "Polo II"
        assert updated.width == Decimal("52")

    def test_update_cannot_touch_counters(self, seeded):
        with pytest.raises(ValidationError) as exc_info:
            seeded.orchestrator.catalog.update_model(seeded.model_id, finished_count=99)
        assert exc_info.value.field == "finished_count"

    def test_delete_unreferenced(self, seeded):
        catalog = seeded.orchestrator.catalog
        catalog.delete_model(seeded.other_model_id)
        with pytest.raises(ModelNotFoundError):
            catalog.model(seeded.other_model_id)

    def test_delete_referenced_refused(self, seeded):
        orch = seeded.orchestrator
        work = orch.production.record_machine_work(
            seeded.producer_id, "M1", [ProductionLine("DOUGH", 24, "white", 1, seeded.model_id, 1)]
        )
        with pytest.raises(ModelReferencedError) as exc_info:
            orch.catalog.delete_model(seeded.model_id)
        assert exc_info.value.referenced_by == [work.id]

    def test_bulk_delete_in_one_commit(self, seeded, blob_store):
        catalog = seeded.orchestrator.catalog
        extra = catalog.create_model("Hoodie", "H-3")
        saves = blob_store.save_count
        catalog.delete_models([seeded.other_model_id, extra.id])
        assert blob_store.save_count == saves + 1
        assert [m.id for m in catalog.models()] == [seeded.model_id]

    def test_bulk_delete_refused_as_a_whole(self, seeded, blob_store):
        orch = seeded.orchestrator
        work = orch.production.record_machine_work(
            seeded.producer_id, "M1", [ProductionLine("DOUGH", 24, "white", 1, seeded.model_id, 1)]
        )
        before = orch.state
        saves = blob_store.save_count
        with pytest.raises(ModelReferencedError) as exc_info:
            orch.catalog.delete_models([seeded.other_model_id, seeded.model_id])
        assert exc_info.value.referenced_by == [work.id]
        with pytest.raises(ModelNotFoundError):
            orch.catalog.delete_models([seeded.other_model_id, "ghost"])
        assert orch.state is before
        assert blob_store.save_count == saves
        assert len(orch.catalog.models()) == 2

    def test_model_history(self, seeded):
        orch = seeded.orchestrator
        orch.production.record_machine_work(
            seeded.producer_id, "M1", [ProductionLine("DOUGH", 24, "white", 1, seeded.model_id, 3)],
            date="2024-01-02",
        )
        orch.production.record_machine_work(
            seeded.producer_id, "M2", [ProductionLine("ANDY", 18, "red", 2, seeded.model_id, 6)],
            date="2024-01-05",
        )
        history = orch.catalog.model_history(seeded.model_id)
        assert [(h.machine_name, h.quantity) for h in history] == [("M2", 6), ("M1", 3)]
