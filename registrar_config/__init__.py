"""
registrar_config -- single public entrypoint for registrar configuration.

Responsibility:
    Provides the runtime way to obtain configuration through
    ``get_active_config()``.  Services receive the returned
    ``RegistrarConfig`` instead of reading files or environment variables.

Architecture position:
    Sits above ``registrar_kernel`` and below ``registrar_ingestion``.
    The kernel MUST NEVER import from ``registrar_config``.

Failure modes:
    - ``FileNotFoundError`` -- the selected configuration file is missing.
    - ``KeyError`` / ``ValueError`` -- structural validation failures.
"""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path

from registrar_config.loader import compute_checksum, load_config
from registrar_config.schema import (
    RegistrarConfig,
    SourceConfig,
    ValidationPolicyConfig,
)
from registrar_kernel.logging_config import get_logger

logger = get_logger("config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"

CONFIG_ENV_VAR = "REGISTRAR_CONFIG"
DATABASE_URL_ENV_VAR = "DATABASE_URL"


def get_active_config(config_path: Path | str | None = None) -> RegistrarConfig:
    """
    Load the active configuration.

    Resolution order for the file: ``config_path``, then the
    ``REGISTRAR_CONFIG`` environment variable, then the bundled
    ``sets/default.yaml``.  ``DATABASE_URL``, when set, replaces the
    file's ``database_url``.

    Emits a ``config_loaded`` log entry on every successful call.
    """
    path = Path(config_path or os.environ.get(CONFIG_ENV_VAR) or _DEFAULT_CONFIG_PATH)
    config = load_config(path)

    database_url = os.environ.get(DATABASE_URL_ENV_VAR)
    if database_url:
        config = dataclasses.replace(config, database_url=database_url)

    logger.info(
        "config_loaded",
        extra={
            "config_id": config.config_id,
            "config_path": str(path),
            "checksum": config.checksum,
            "departments": list(config.departments),
            "phone_policy": config.validation.phone_policy,
            "database_url_overridden": bool(database_url),
        },
    )
    return config


__all__ = [
    "RegistrarConfig",
    "SourceConfig",
    "ValidationPolicyConfig",
    "compute_checksum",
    "get_active_config",
    "load_config",
]
