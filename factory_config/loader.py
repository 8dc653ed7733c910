"""
Configuration Loader (``factory_config.loader``).

Responsibility
--------------
Loads a YAML configuration set and parses it into the frozen
``factory_config.schema`` dataclasses.  Runtime callers go through
``factory_config.get_active_config()`` instead of calling this directly.

Invariants enforced
-------------------
* Parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; ``name`` is required, every other section has a default.
* ``compute_checksum`` is deterministic for identical input.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown policy / role / level  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from factory_config.schema import (
    FactoryConfig,
    LedgerConfig,
    LoggingConfig,
    StorageConfig,
)
from factory_kernel.domain.values import CustomerRole, ReversalPolicy

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration {path} must be a mapping, got {type(data).__name__}")
    return data


def compute_checksum(data: dict[str, Any]) -> str:
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def parse_storage(data: dict[str, Any]) -> StorageConfig:
    url = data.get("url", StorageConfig.url)
    if not isinstance(url, str) or not url:
        raise ValueError(f"storage.url must be a non-empty string, got {url!r}")
    return StorageConfig(url=url, echo=bool(data.get("echo", False)))


def parse_reversal_policy(value: Any) -> ReversalPolicy:
    try:
        return ReversalPolicy(str(value).lower())
    except ValueError:
        allowed = ", ".join(p.value for p in ReversalPolicy)
        raise ValueError(
            f"ledger.reversal_policy must be one of {allowed}, got {value!r}"
        ) from None


def parse_ledger(data: dict[str, Any]) -> LedgerConfig:
    defaults = LedgerConfig()
    reverse = dict(defaults.reverse_inventory_on_customer_delete)
    for role_name, flag in (data.get("reverse_inventory_on_customer_delete") or {}).items():
        try:
            role = CustomerRole(role_name)
        except ValueError:
            raise ValueError(f"Unknown customer role {role_name!r}") from None
        if not isinstance(flag, bool):
            raise ValueError(
                f"reverse_inventory_on_customer_delete.{role_name} must be true/false, got {flag!r}"
            )
        reverse[role] = flag
    return LedgerConfig(
        reversal_policy=parse_reversal_policy(
            data.get("reversal_policy", defaults.reversal_policy.value)
        ),
        reverse_inventory_on_customer_delete=tuple(reverse.items()),
    )


def parse_logging(data: dict[str, Any]) -> LoggingConfig:
    level = str(data.get("level", "INFO")).upper()
    if level not in _LEVELS:
        raise ValueError(f"logging.level must be one of {', '.join(_LEVELS)}, got {level!r}")
    return LoggingConfig(level=level)


def parse_config(data: dict[str, Any]) -> FactoryConfig:
    """
    Parse a ``FactoryConfig`` from a dict.

    Raises:
        KeyError: if ``name`` is missing.
        ValueError: for any invalid value.
    """
    return FactoryConfig(
        name=data["name"],
        version=int(data.get("version", 1)),
        storage=parse_storage(data.get("storage") or {}),
        ledger=parse_ledger(data.get("ledger") or {}),
        logging=parse_logging(data.get("logging") or {}),
        checksum=compute_checksum(data),
    )


def load_config(path: Path) -> FactoryConfig:
    return parse_config(load_yaml_file(path))
