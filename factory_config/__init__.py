"""
factory_config -- single public entrypoint for factory configuration.

Responsibility:
    Provides the only way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads configuration files
    or environment variables directly.

Architecture position:
    Configuration -- sits above ``factory_kernel`` and below
    ``factory_services``.  The kernel and engines never import from here.

Failure modes:
    - ``FileNotFoundError`` -- no configuration set with the requested name.
    - ``ValueError`` / ``KeyError`` -- invalid or incomplete YAML.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``FACTORY_CONFIG_TRACE`` log entry with the set name, version, checksum
    and the ledger policies in force.
"""

from __future__ import annotations

import os
from pathlib import Path

from factory_config.loader import load_config
from factory_config.schema import (
    MEMORY_URL,
    FactoryConfig,
    LedgerConfig,
    LoggingConfig,
    StorageConfig,
)
from factory_kernel.logging_config import get_logger

_logger = get_logger("config")

_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"

CONFIG_ENV_VAR = "FACTORY_LEDGER_CONFIG"


def get_active_config(
    name: str = "default",
    config_dir: Path | None = None,
) -> FactoryConfig:
    """The only public configuration entrypoint.

    Resolution order:
        1. ``$FACTORY_LEDGER_CONFIG`` naming a YAML file, if set.
        2. ``<config_dir>/<name>.yaml`` (``config_dir`` defaults to
           ``factory_config/sets/``).

    Raises:
        FileNotFoundError: If the resolved file does not exist.
        ValueError: If a value is invalid.
        KeyError: If a required key is missing.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        path = Path(override)
    else:
        path = (config_dir or _DEFAULT_CONFIG_DIR) / f"{name}.yaml"
    if not path.is_file():
        raise FileNotFoundError(f"Configuration set not found: {path}")

    config = load_config(path)

    _logger.info(
        "FACTORY_CONFIG_TRACE",
        extra={
            "trace_type": "FACTORY_CONFIG_TRACE",
            "config_name": config.name,
            "config_version": config.version,
            "checksum": config.checksum,
            "source": str(path),
            "storage_url": config.storage.url,
            "reversal_policy": config.ledger.reversal_policy.value,
        },
    )
    return config


__all__ = [
    "CONFIG_ENV_VAR",
    "MEMORY_URL",
    "FactoryConfig",
    "LedgerConfig",
    "LoggingConfig",
    "StorageConfig",
    "get_active_config",
]
