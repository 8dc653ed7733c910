"""
Metamorphic and equivalence tests for the inventory ledger.

1. Create + delete returns every counter to baseline
2. Editing a record equals deleting it and creating the edited one
3. Splitting one record into two leaves the same counters
"""

from factory_services.drafts import InvoiceLine, ProcessingLine, ProductionLine

from conftest import make_orchestrator, seed_factory


def _counters(orch):
    """Every quantity the ledger owns."""
    stock = {str(r.key): r.count for r in orch.state.raw_stock}
    models = {m.code: (m.in_production_count, m.finished_count) for m in orch.state.models}
    return stock, models


def _stocked(seeded, made=20, received=12):
    orch = seeded.orchestrator
    orch.production.record_machine_work(
        seeded.producer_id, "M1", [ProductionLine("DOUGH", 24, "white", 5, seeded.model_id, made)]
    )
    orch.processing.record_processing_work(
        seeded.processor_id, "F1", [ProcessingLine(seeded.model_id, received, received)]
    )


class TestCreateDeleteIsIdentity:
    def test_machine_work(self, seeded):
        orch = seeded.orchestrator
        baseline = _counters(orch)
        work = orch.production.record_machine_work(
            seeded.producer_id,
            "M2",
            [
                ProductionLine("DOUGH", 24, "white", 3, seeded.model_id, 7),
                ProductionLine("ANDY", 18, "red", 8, seeded.other_model_id, 4),
            ],
        )
        orch.production.delete_machine_work(work.id)
        assert _counters(orch) == baseline

    def test_processing_work(self, seeded):
        _stocked(seeded)
        orch = seeded.orchestrator
        baseline = _counters(orch)
        work = orch.processing.record_processing_work(
            seeded.processor_id, "F2", [ProcessingLine(seeded.model_id, 8, 3)]
        )
        orch.processing.delete_processing_work(work.id)
        assert _counters(orch) == baseline

    def test_invoice(self, seeded):
        _stocked(seeded)
        orch = seeded.orchestrator
        baseline = _counters(orch)
        invoice = orch.sales.issue_invoice(
            seeded.buyer_id, [InvoiceLine(seeded.model_id, "M1", 12, 10)]
        )
        orch.sales.delete_invoice(seeded.buyer_id, invoice.id)
        assert _counters(orch) == baseline


class TestEditEqualsDeleteThenCreate:
    def _pair(self, deterministic_clock, id_factory):
        return (
            seed_factory(make_orchestrator(deterministic_clock, id_factory)),
            seed_factory(make_orchestrator(deterministic_clock, id_factory)),
        )

    def test_machine_work(self, deterministic_clock, id_factory):
        edited, recreated = self._pair(deterministic_clock, id_factory)

        def old(s):
            return [ProductionLine("DOUGH", 24, "white", 6, s.model_id, 10)]

        def new(s):
            return [ProductionLine("ANDY", 18, "red", 2, s.other_model_id, 3)]

        production = edited.orchestrator.production
        work = production.record_machine_work(edited.producer_id, "M1", old(edited))
        production.edit_machine_work(work.id, new(edited))

        production = recreated.orchestrator.production
        work = production.record_machine_work(recreated.producer_id, "M1", old(recreated))
        production.delete_machine_work(work.id)
        production.record_machine_work(recreated.producer_id, "M1", new(recreated))

        assert _counters(edited.orchestrator) == _counters(recreated.orchestrator)

    def test_invoice(self, deterministic_clock, id_factory):
        edited, recreated = self._pair(deterministic_clock, id_factory)
        for seeded in (edited, recreated):
            _stocked(seeded)
        sales = edited.orchestrator.sales
        invoice = sales.issue_invoice(edited.buyer_id, [InvoiceLine(edited.model_id, "M1", 10)])
        sales.edit_invoice(edited.buyer_id, invoice.id, [InvoiceLine(edited.model_id, "M1", 4)])

        sales = recreated.orchestrator.sales
        invoice = sales.issue_invoice(recreated.buyer_id, [InvoiceLine(recreated.model_id, "M1", 10)])
        sales.delete_invoice(recreated.buyer_id, invoice.id)
        sales.issue_invoice(recreated.buyer_id, [InvoiceLine(recreated.model_id, "M1", 4)])

        assert _counters(edited.orchestrator) == _counters(recreated.orchestrator)

    def test_edit_may_reuse_its_own_consumption(self, seeded):
        """An edit can consume up to stock + what the old version consumed."""
        orch = seeded.orchestrator
        work = orch.production.record_machine_work(
            seeded.producer_id, "M1", [ProductionLine("DOUGH", 24, "white", 10, seeded.model_id, 5)]
        )
        assert orch.warehouse.count("DOUGH", 24, "white") == 0
        orch.production.edit_machine_work(
            work.id, [ProductionLine("DOUGH", 24, "white", 9, seeded.model_id, 5)]
        )
        assert orch.warehouse.count("DOUGH", 24, "white") == 1


class TestSplitEquivalence:
    def test_two_runs_equal_one(self, deterministic_clock, id_factory):
        one = seed_factory(make_orchestrator(deterministic_clock, id_factory))
        two = seed_factory(make_orchestrator(deterministic_clock, id_factory))

        one.orchestrator.production.record_machine_work(
            one.producer_id, "M1", [ProductionLine("DOUGH", 24, "white", 6, one.model_id, 12)]
        )
        for _ in range(2):
            two.orchestrator.production.record_machine_work(
                two.producer_id, "M1", [ProductionLine("DOUGH", 24, "white", 3, two.model_id, 6)]
            )
        assert _counters(one.orchestrator) == _counters(two.orchestrator)
