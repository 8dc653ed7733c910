"""
Module: factory_engines.model_counters
Responsibility:
    Per-model "in production" and "finished" counters: read them out of the
    catalog and write resolved deltas back into new FabricModel records.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Deltas arrive already
    validated (and, under the clamp policy, already clamped) by the
    Inventory Ledger; this module only refuses anything that would still
    go negative.

Invariants enforced:
    - Neither counter is ever written below zero.
    - Models not named in a delta map are returned unchanged (same object).

Failure modes:
    - ModelNotFoundError when a delta names an unknown model.
    - InsufficientStockError if a caller passes an unresolved negative delta.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Mapping

from factory_kernel.domain.records import FabricModel
from factory_kernel.exceptions import InsufficientStockError, ModelNotFoundError

IN_PRODUCTION = "in_production"
FINISHED = "finished"


@dataclass(frozen=True)
class ModelCounters:
    in_production: int
    finished: int


def counters_of(models: Iterable[FabricModel]) -> dict[str, ModelCounters]:
    return {
        m.id: ModelCounters(in_production=m.in_production_count, finished=m.finished_count)
        for m in models
    }


def apply_model_deltas(
    models: tuple[FabricModel, ...],
    in_production_deltas: Mapping[str, int],
    finished_deltas: Mapping[str, int],
) -> tuple[FabricModel, ...]:
    """Return the catalog with both delta maps applied."""
    known = {m.id for m in models}
    for model_id in (*in_production_deltas, *finished_deltas):
        if model_id not in known:
            raise ModelNotFoundError(model_id)

    updated: list[FabricModel] = []
    for model in models:
        d_prod = in_production_deltas.get(model.id, 0)
        d_fin = finished_deltas.get(model.id, 0)
        if not d_prod and not d_fin:
            updated.append(model)
            continue
        if model.in_production_count + d_prod < 0:
            raise InsufficientStockError(
                IN_PRODUCTION, model.id, required=-d_prod, available=model.in_production_count
            )
        if model.finished_count + d_fin < 0:
            raise InsufficientStockError(
                FINISHED, model.id, required=-d_fin, available=model.finished_count
            )
        updated.append(
            replace(
                model,
                in_production_count=model.in_production_count + d_prod,
                finished_count=model.finished_count + d_fin,
            )
        )
    return tuple(updated)
