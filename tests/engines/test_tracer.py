"""Tests for the engine tracer (factory_engines/tracer.py)."""

import pytest

from factory_engines.tracer import compute_input_fingerprint, traced_engine
from factory_kernel.domain.values import ReversalPolicy


class TestFingerprint:
    def test_dict_order_does_not_matter(self):
        a = compute_input_fingerprint(("x",), {"x": {"a": 1, "b": 2}})
        b = compute_input_fingerprint(("x",), {"x": {"b": 2, "a": 1}})
        assert a == b
        assert len(a) == 16

    def test_only_named_fields_count(self):
        a = compute_input_fingerprint(("x",), {"x": 1, "y": 2})
        b = compute_input_fingerprint(("x",), {"x": 1, "y": 3})
        assert a == b

    def test_enum_by_value(self):
        a = compute_input_fingerprint(("p",), {"p": ReversalPolicy.CLAMP})
        b = compute_input_fingerprint(("p",), {"p": "clamp"})
        assert a == b


class TestTracedEngine:
    def test_wraps_and_traces(self, captured_logs):
        @traced_engine("demo.add", "2.1", ("a",))
        def add(a, b=1):
            return a + b

        assert add(2, b=3) == 5
        (trace,) = [r for r in captured_logs() if r["message"] == "FACTORY_ENGINE_TRACE"]
        assert trace["engine_version"] == "2.1"
        assert trace["input_fingerprint"] == compute_input_fingerprint(("a",), {"a": 2})
        assert add.__name__ == "add"

    def test_plain_exception_code(self, captured_logs):
        @traced_engine("demo.fail", "1.0")
        def fail():
            raise KeyError("k")

        with pytest.raises(KeyError):
            fail()
        (trace,) = [r for r in captured_logs() if r["message"] == "FACTORY_ENGINE_TRACE"]
        assert trace["error_code"] == "KeyError"
        assert trace["input_fingerprint"] == ""
