"""
End-to-end scenarios through FactoryOrchestrator.

A: raw stock consumed by machine work, over-consumption refused
B: processing send/receive and edit
C: sales invoice issued and deleted
D: manual stock reconciliation logs signed deltas
"""

import pytest

from factory_kernel.domain.values import MaterialSize, MaterialType, StockKey
from factory_kernel.exceptions import InsufficientStockError
from factory_services.drafts import InvoiceLine, ProcessingLine, ProductionLine

WHITE = StockKey(MaterialType.DOUGH, MaterialSize.SIZE_24, "white")


class TestScenarioA:
    def test_consume_then_refuse(self, seeded):
        orch = seeded.orchestrator
        orch.production.record_machine_work(
            seeded.producer_id,
            "M1",
            [ProductionLine("DOUGH", 24, "white", 4, seeded.model_id, 20, 3)],
        )
        assert orch.warehouse.count("DOUGH", 24, "white") == 6
        assert orch.catalog.model(seeded.model_id).in_production_count == 20

        before = orch.state
        with pytest.raises(InsufficientStockError) as exc_info:
            orch.production.record_machine_work(
                seeded.producer_id,
                "M1",
                [ProductionLine("DOUGH", 24, "white", 7, seeded.model_id, 5)],
            )
        assert exc_info.value.available == 6
        assert orch.state is before
        assert orch.warehouse.count("DOUGH", 24, "white") == 6
        assert len(orch.production.machine_works()) == 1


class TestScenarioB:
    def test_send_receive_then_edit(self, seeded):
        orch = seeded.orchestrator
        orch.production.record_machine_work(
            seeded.producer_id,
            "M1",
            [ProductionLine("DOUGH", 24, "white", 5, seeded.model_id, 20)],
        )
        work = orch.processing.record_processing_work(
            seeded.processor_id, "F1", [ProcessingLine(seeded.model_id, 15, 12, 2)]
        )
        m = orch.catalog.model(seeded.model_id)
        assert (m.in_production_count, m.finished_count) == (5, 12)

        orch.processing.edit_processing_work(
            work.id, [ProcessingLine(seeded.model_id, 10, 12, 2)]
        )
        m = orch.catalog.model(seeded.model_id)
        assert (m.in_production_count, m.finished_count) == (10, 12)


class TestScenarioC:
    def test_invoice_and_delete(self, seeded):
        orch = seeded.orchestrator
        orch.production.record_machine_work(
            seeded.producer_id,
            "M1",
            [ProductionLine("DOUGH", 24, "white", 5, seeded.model_id, 12)],
        )
        orch.processing.record_processing_work(
            seeded.processor_id, "F1", [ProcessingLine(seeded.model_id, 12, 12)]
        )
        assert orch.catalog.model(seeded.model_id).finished_count == 12

        invoice = orch.sales.issue_invoice(
            seeded.buyer_id, [InvoiceLine(seeded.model_id, "M1", 5, 40)]
        )
        assert orch.catalog.model(seeded.model_id).finished_count == 7
        assert invoice.total == 200

        orch.sales.delete_invoice(seeded.buyer_id, invoice.id)
        assert orch.catalog.model(seeded.model_id).finished_count == 12
        assert orch.sales.invoices(seeded.buyer_id) == ()


class TestScenarioD:
    def test_reconciliation_logs(self, seeded):
        orch = seeded.orchestrator
        orch.production.record_machine_work(
            seeded.producer_id,
            "M1",
            [ProductionLine("DOUGH", 24, "white", 4, seeded.model_id, 1)],
        )
        up = orch.warehouse.set_count("DOUGH", 24, "white", 20)
        assert up.quantity == 14
        down = orch.warehouse.set_count("DOUGH", 24, "white", 3)
        assert down.quantity == -17
        assert orch.warehouse.warehouse_logs()[:2] == (down, up)
        assert all(line.balanced for line in orch.reporting.conservation_report())
