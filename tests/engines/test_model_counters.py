"""Tests for Model Counters (factory_engines/model_counters.py)."""

import pytest

from factory_engines.model_counters import ModelCounters, apply_model_deltas, counters_of
from factory_kernel.exceptions import InsufficientStockError, ModelNotFoundError

from conftest import model


class TestModelCounters:
    def setup_method(self):
        self.models = (model("m1", in_production=5, finished=2), model("m2"))

    def test_counters_of(self):
        assert counters_of(self.models)["m1"] == ModelCounters(in_production=5, finished=2)

    def test_apply_deltas(self):
        updated = apply_model_deltas(self.models, {"m1": -5}, {"m1": 3})
        assert counters_of(updated)["m1"] == ModelCounters(0, 5)

    def test_untouched_models_are_same_objects(self):
        updated = apply_model_deltas(self.models, {"m1": 1}, {})
        assert updated[1] is self.models[1]

    def test_negative_result_refused(self):
        with pytest.raises(InsufficientStockError) as exc_info:
            apply_model_deltas(self.models, {}, {"m1": -3})
        assert exc_info.value.resource == "finished"

    def test_unknown_model(self):
        with pytest.raises(ModelNotFoundError):
            apply_model_deltas(self.models, {"zz": 1}, {})
