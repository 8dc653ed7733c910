"""
Module: factory_engines.inventory_ledger
Responsibility:
    The single place where production, processing and sales records move
    inventory.  Given a record's OLD entries (empty on create) and NEW entries
    (empty on delete) it validates availability and derives the minimal set of
    counter deltas, then applies them to a DomainState.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Services call ``apply_*`` while building the next snapshot; nothing is
    persisted here.

Invariants enforced:
    - All-or-nothing: every check runs before any delta is applied, and the
      input snapshot is never mutated.
    - Reversibility: ``apply(apply(s, [], E), E, [])`` restores ``s``.
    - Edit equivalence: ``apply(s, old, new)`` equals delete-then-create.
    - Non-negativity: raw stock, in-production and finished never go below
      zero.  Forward consumption is validated; a reversal that would go
      negative is rejected or clamped according to ``ReversalPolicy``.

Failure modes:
    - InsufficientStockError(resource, key, required, available) when NEW
      entries need more than is available (current + what OLD consumed).
    - ReversalConflictError when undoing OLD would drive a counter below
      zero under ``ReversalPolicy.REJECT``.
    - ModelNotFoundError when an entry names an unknown model.

Audit relevance:
    Clamped counters are returned on the plan and logged as
    ``counter_clamped`` warnings with the written-off amount, so a clamp is
    never silent.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TypeVar

from factory_engines.model_counters import (
    FINISHED,
    IN_PRODUCTION,
    apply_model_deltas,
    counters_of,
)
from factory_engines.raw_stock import RAW_STOCK, RawStockTable
from factory_engines.tracer import traced_engine
from factory_kernel.domain.records import InvoiceItem, ProcessingEntry, ProductionEntry
from factory_kernel.domain.state import DomainState
from factory_kernel.domain.values import ReversalPolicy, StockKey
from factory_kernel.exceptions import (
    InsufficientStockError,
    ModelNotFoundError,
    ReversalConflictError,
)
from factory_kernel.logging_config import get_logger

logger = get_logger("engines.inventory_ledger")

K = TypeVar("K")
E = TypeVar("E")

ENGINE_VERSION = "1.0"


@dataclass(frozen=True)
class ClampedCounter:
    """A reversal that was cut short at zero under the clamp policy."""

    resource: str
    key: str
    requested_delta: int
    applied_delta: int

    @property
    def written_off(self) -> int:
        return self.applied_delta - self.requested_delta


@dataclass(frozen=True)
class LedgerPlan:
    """
    Resolved counter deltas for one record mutation.

    Deltas are signed and already checked against the snapshot the plan was
    computed from; zero deltas are omitted.
    """

    raw_deltas: dict[StockKey, int] = field(default_factory=dict)
    in_production_deltas: dict[str, int] = field(default_factory=dict)
    finished_deltas: dict[str, int] = field(default_factory=dict)
    clamped: tuple[ClampedCounter, ...] = ()

    @property
    def is_noop(self) -> bool:
        return not (self.raw_deltas or self.in_production_deltas or self.finished_deltas)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _totals(
    entries: Iterable[E],
    key: Callable[[E], K],
    quantity: Callable[[E], int],
) -> dict[K, int]:
    totals: dict[K, int] = {}
    for entry in entries:
        k = key(entry)
        totals[k] = totals.get(k, 0) + quantity(entry)
    return totals


def _difference(minuend: Mapping[K, int], subtrahend: Mapping[K, int]) -> dict[K, int]:
    """``minuend - subtrahend`` per key, zero results dropped, first-seen order."""
    keys = list(dict.fromkeys([*minuend, *subtrahend]))
    diff = {k: minuend.get(k, 0) - subtrahend.get(k, 0) for k in keys}
    return {k: d for k, d in diff.items() if d}


def _require_models(state: DomainState, model_ids: Iterable[str]) -> None:
    known = {m.id for m in state.models}
    for model_id in model_ids:
        if model_id not in known:
            raise ModelNotFoundError(model_id)


def _check_available(
    resource: str,
    required: Mapping[K, int],
    current: Callable[[K], int],
    released: Mapping[K, int],
) -> None:
    """Raise if any key needs more than current stock plus what OLD held."""
    for k in sorted(required, key=str):
        available = current(k) + released.get(k, 0)
        if required[k] > available:
            raise InsufficientStockError(resource, str(k), required[k], available)


def _resolve_reversals(
    resource: str,
    deltas: Mapping[str, int],
    current: Callable[[str], int],
    policy: ReversalPolicy,
) -> tuple[dict[str, int], list[ClampedCounter]]:
    """Apply the reversal policy to deltas that would drive a counter negative."""
    resolved: dict[str, int] = {}
    clamped: list[ClampedCounter] = []
    for k, delta in deltas.items():
        have = current(k)
        if have + delta >= 0:
            resolved[k] = delta
            continue
        if policy is ReversalPolicy.REJECT:
            raise ReversalConflictError(resource, k, required=-delta, available=have)
        applied = -have
        clamped.append(ClampedCounter(resource, k, delta, applied))
        if applied:
            resolved[k] = applied
    return resolved, clamped


def _in_production_of(state: DomainState) -> Callable[[str], int]:
    counters = counters_of(state.models)
    return lambda model_id: counters[model_id].in_production if model_id in counters else 0


def _finished_of(state: DomainState) -> Callable[[str], int]:
    counters = counters_of(state.models)
    return lambda model_id: counters[model_id].finished if model_id in counters else 0


# ---------------------------------------------------------------------------
# Plans
# ---------------------------------------------------------------------------


@traced_engine("inventory_ledger.machine_work", ENGINE_VERSION, ("old", "new", "policy"))
def plan_machine_work(
    state: DomainState,
    old: Sequence[ProductionEntry],
    new: Sequence[ProductionEntry],
    policy: ReversalPolicy = ReversalPolicy.REJECT,
) -> LedgerPlan:
    """
    Machine work consumes raw bags and adds units to "in production".

    requiredRaw[key] = sum of NEW raw quantities; it must not exceed the
    current stock plus what OLD consumed.  Raw stock moves by OLD - NEW and
    in-production moves by NEW - OLD produced units, per model.
    """
    _require_models(state, (e.produced.model_id for e in new))
    _require_models(state, (e.produced.model_id for e in old))

    table = RawStockTable.from_entries(state.raw_stock)
    old_raw = _totals(old, lambda e: e.raw.key, lambda e: e.raw.quantity)
    new_raw = _totals(new, lambda e: e.raw.key, lambda e: e.raw.quantity)
    _check_available(RAW_STOCK, new_raw, table.count, old_raw)

    old_made = _totals(old, lambda e: e.produced.model_id, lambda e: e.produced.quantity)
    new_made = _totals(new, lambda e: e.produced.model_id, lambda e: e.produced.quantity)
    in_production, clamped = _resolve_reversals(
        IN_PRODUCTION, _difference(new_made, old_made), _in_production_of(state), policy
    )
    return LedgerPlan(
        raw_deltas=_difference(old_raw, new_raw),
        in_production_deltas=in_production,
        clamped=tuple(clamped),
    )


@traced_engine("inventory_ledger.processing_work", ENGINE_VERSION, ("old", "new", "policy"))
def plan_processing_work(
    state: DomainState,
    old: Sequence[ProcessingEntry],
    new: Sequence[ProcessingEntry],
    policy: ReversalPolicy = ReversalPolicy.REJECT,
) -> LedgerPlan:
    """
    Processing takes units out of "in production" and returns finished ones.

    Sent units are bounded by in-production plus what OLD sent.  Received
    units are not bounded by any resource; sent and received are independent
    so lossy or partial processing is allowed.
    """
    _require_models(state, (e.model_id for e in new))
    _require_models(state, (e.model_id for e in old))

    old_sent = _totals(old, lambda e: e.model_id, lambda e: e.quantity_sent)
    new_sent = _totals(new, lambda e: e.model_id, lambda e: e.quantity_sent)
    _check_available(IN_PRODUCTION, new_sent, _in_production_of(state), old_sent)

    old_received = _totals(old, lambda e: e.model_id, lambda e: e.quantity_received)
    new_received = _totals(new, lambda e: e.model_id, lambda e: e.quantity_received)
    finished, clamped = _resolve_reversals(
        FINISHED, _difference(new_received, old_received), _finished_of(state), policy
    )
    return LedgerPlan(
        in_production_deltas=_difference(old_sent, new_sent),
        finished_deltas=finished,
        clamped=tuple(clamped),
    )


@traced_engine("inventory_ledger.sales_invoice", ENGINE_VERSION, ("old", "new"))
def plan_sales_invoice(
    state: DomainState,
    old: Sequence[InvoiceItem],
    new: Sequence[InvoiceItem],
) -> LedgerPlan:
    """
    Sales draw on finished units: NEW quantity <= finished + OLD quantity.

    Undoing a sale only ever adds back to "finished", so no reversal policy
    applies here.
    """
    _require_models(state, (i.model_id for i in new))
    _require_models(state, (i.model_id for i in old))

    old_sold = _totals(old, lambda i: i.model_id, lambda i: i.quantity)
    new_sold = _totals(new, lambda i: i.model_id, lambda i: i.quantity)
    _check_available(FINISHED, new_sold, _finished_of(state), old_sold)
    return LedgerPlan(finished_deltas=_difference(old_sold, new_sold))


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


def apply_plan(state: DomainState, plan: LedgerPlan) -> DomainState:
    """Return ``state`` with the plan's deltas applied to every counter."""
    for c in plan.clamped:
        logger.warning(
            "counter_clamped",
            extra={
                "resource": c.resource,
                "key": c.key,
                "requested_delta": c.requested_delta,
                "applied_delta": c.applied_delta,
                "written_off": c.written_off,
            },
        )
    if plan.is_noop:
        return state
    raw_stock = state.raw_stock
    if plan.raw_deltas:
        raw_stock = (
            RawStockTable.from_entries(state.raw_stock)
            .apply_deltas(plan.raw_deltas)
            .to_entries()
        )
    models = apply_model_deltas(
        state.models, plan.in_production_deltas, plan.finished_deltas
    )
    return state.evolve(raw_stock=raw_stock, models=models)


def apply_machine_work(
    state: DomainState,
    old: Sequence[ProductionEntry],
    new: Sequence[ProductionEntry],
    policy: ReversalPolicy = ReversalPolicy.REJECT,
) -> DomainState:
    return apply_plan(state, plan_machine_work(state, old, new, policy))


def apply_processing_work(
    state: DomainState,
    old: Sequence[ProcessingEntry],
    new: Sequence[ProcessingEntry],
    policy: ReversalPolicy = ReversalPolicy.REJECT,
) -> DomainState:
    return apply_plan(state, plan_processing_work(state, old, new, policy))


def apply_sales_invoice(
    state: DomainState,
    old: Sequence[InvoiceItem],
    new: Sequence[InvoiceItem],
) -> DomainState:
    return apply_plan(state, plan_sales_invoice(state, old, new))
