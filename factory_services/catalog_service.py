"""
CatalogService -- the fabric model catalog.

Descriptive fields are edited freely; the two stock counters are owned by
the Inventory Ledger and can never be set through this service.  A model
that any machine work, processing work or sales invoice refers to cannot be
deleted.
"""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import Any, Sequence

from factory_engines.reports import ModelHistoryLine, model_history
from factory_kernel.domain.records import FabricModel
from factory_kernel.domain.state import DomainState, remove_by_id, replace_by_id
from factory_kernel.domain.values import parse_money, require_text
from factory_kernel.exceptions import ModelReferencedError, ValidationError
from factory_kernel.logging_config import get_logger
from factory_services.base import BaseService

logger = get_logger("services.catalog")

_DIMENSIONS = ("length", "width", "sleeve_length", "sleeve_width")
_EDITABLE = ("name", "code", *_DIMENSIONS, "neck_type", "image_url")


def _dimension(value: Any, field: str) -> Decimal:
    return parse_money(0 if value in (None, "") else value, field)


def references_to(state: DomainState, model_id: str) -> list[str]:
    """Ids of every record whose entries name ``model_id``."""
    refs = [
        w.id for w in state.machine_works
        if any(e.produced.model_id == model_id for e in w.entries)
    ]
    refs += [
        w.id for w in state.processing_works
        if any(e.model_id == model_id for e in w.entries)
    ]
    refs += [
        inv.id
        for c in state.sales_customers
        for inv in c.invoices
        if any(i.model_id == model_id for i in inv.items)
    ]
    return refs


class CatalogService(BaseService):
    def models(self) -> tuple[FabricModel, ...]:
        return self.state.models

    def model(self, model_id: str) -> FabricModel:
        return self.state.model(model_id)

    def model_history(self, model_id: str) -> list[ModelHistoryLine]:
        return model_history(self.state, model_id)

    def create_model(
        self,
        name: Any,
        code: Any,
        length: Any = 0,
        width: Any = 0,
        sleeve_length: Any = 0,
        sleeve_width: Any = 0,
        neck_type: Any = "",
        image_url: str | None = None,
    ) -> FabricModel:
        """New model with both counters at zero."""
        model = FabricModel(
            id=self._new_id(),
            name=require_text(name, "name"),
            code=require_text(code, "code"),
            length=_dimension(length, "length"),
            width=_dimension(width, "width"),
            sleeve_length=_dimension(sleeve_length, "sleeve_length"),
            sleeve_width=_dimension(sleeve_width, "sleeve_width"),
            neck_type=(neck_type or "").strip(),
            image_url=image_url or None,
        )
        state = self.state
        with self._operation("catalog.create_model", record_id=model.id):
            self._commit(state.evolve(models=(*state.models, model)), "catalog.create_model")
            logger.info("model_created", extra={"model_code": model.code})
        return model

    def update_model(self, model_id: str, **changes: Any) -> FabricModel:
        """Edit descriptive fields only; counters are not editable here."""
        unknown = sorted(set(changes) - set(_EDITABLE))
        if unknown:
            raise ValidationError(unknown[0], "is not an editable model field")
        state = self.state
        current = state.model(model_id)
        fields: dict[str, Any] = {}
        for name, value in changes.items():
            if name in ("name", "code"):
                fields[name] = require_text(value, name)
            elif name in _DIMENSIONS:
                fields[name] = _dimension(value, name)
            elif name == "neck_type":
                fields[name] = (value or "").strip()
            else:
                fields[name] = value or None
        updated = replace(current, **fields)
        with self._operation("catalog.update_model", record_id=model_id):
            self._commit(
                state.evolve(models=replace_by_id(state.models, model_id, updated)),
                "catalog.update_model",
            )
            logger.info("model_updated", extra={"fields": sorted(fields)})
        return updated

    def delete_model(self, model_id: str) -> None:
        state = self.state
        state.model(model_id)
        refs = references_to(state, model_id)
        if refs:
            raise ModelReferencedError(model_id, refs)
        with self._operation("catalog.delete_model", record_id=model_id):
            self._commit(
                state.evolve(models=remove_by_id(state.models, model_id)),
                "catalog.delete_model",
            )
            logger.info("model_deleted")

    def delete_models(self, model_ids: Sequence[str]) -> None:
        """Delete several models in one commit, or none if any is unknown or referenced."""
        ids = list(dict.fromkeys(model_ids))
        if not ids:
            raise ValidationError("model_ids", "at least one model is required")
        state = self.state
        for model_id in ids:
            state.model(model_id)
        for model_id in ids:
            refs = references_to(state, model_id)
            if refs:
                raise ModelReferencedError(model_id, refs)
        removed = set(ids)
        with self._operation("catalog.bulk_delete_models"):
            self._commit(
                state.evolve(models=tuple(m for m in state.models if m.id not in removed)),
                "catalog.bulk_delete_models",
            )
            logger.info("models_deleted", extra={"model_count": len(ids)})
