"""
factory_engines.tracer -- engine invocation tracer emitting FACTORY_ENGINE_TRACE.

Responsibility:
    ``@traced_engine`` wraps a pure engine function with one structured log
    record: engine name, version, a deterministic fingerprint of selected
    arguments, duration, and whether the call was accepted or rejected.

Architecture position:
    Engines -- support for the pure calculation layer.  Emits a log record
    only; never mutates inputs.

Invariants enforced:
    - Fingerprints are deterministic: dict keys sorted, dataclass records
      rendered through their (stable) repr, SHA-256 truncated to 16 hex chars.
    - A rejected call (an exception from the engine) is traced and then
      re-raised unchanged.

Usage:
    @traced_engine("inventory_ledger.machine_work", "1.0", ("old", "new"))
    def plan_machine_work(state, old, new, policy): ...
"""

from __future__ import annotations

import functools
import hashlib
import inspect
import time
from collections.abc import Callable
from enum import Enum
from typing import Any

from factory_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")


def _canonicalize(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (int, float, str)):
        return str(value)
    if isinstance(value, dict):
        items = sorted(value.items(), key=lambda kv: str(kv[0]))
        return "{" + ",".join(f"{k}:{_canonicalize(v)}" for k, v in items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonicalize(v) for v in value) + "]"
    return repr(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: dict[str, Any],
) -> str:
    """SHA-256 prefix over the named arguments; missing ones count as null."""
    canonical = "|".join(
        f"{name}={_canonicalize(arguments.get(name))}" for name in fingerprint_fields
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorator that emits FACTORY_ENGINE_TRACE for pure engine invocations."""

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fp = ""
            if fingerprint_fields:
                bound = signature.bind_partial(*args, **kwargs)
                fp = compute_input_fingerprint(fingerprint_fields, dict(bound.arguments))

            t0 = time.monotonic()
            outcome = "accepted"
            error_code = None
            try:
                return func(*args, **kwargs)
            except Exception as exc:
                outcome = "rejected"
                error_code = getattr(exc, "code", type(exc).__name__)
                raise
            finally:
                _logger.debug(
                    "FACTORY_ENGINE_TRACE",
                    extra={
                        "trace_type": "FACTORY_ENGINE_TRACE",
                        "engine_name": engine_name,
                        "engine_version": engine_version,
                        "input_fingerprint": fp,
                        "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                        "outcome": outcome,
                        "error_code": error_code,
                        "function": func.__qualname__,
                    },
                )

        return wrapper

    return decorator
