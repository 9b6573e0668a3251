"""
Configuration Loader (``registrar_config.loader``).

Responsibility
--------------
Loads a YAML configuration set and parses it into a frozen
``RegistrarConfig``.  Runtime callers go through
``registrar_config.get_active_config()``; tests may call ``load_config``
directly with a temporary file.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Malformed values (non-positive age, alias pointing at two departments,
  head for an unknown department)  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from registrar_config.schema import (
    RegistrarConfig,
    SourceConfig,
    ValidationPolicyConfig,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_department_aliases(data: dict[str, Any]) -> dict[str, str]:
    """
    Flatten ``{canonical: [alias, ...]}`` into ``{alias: canonical}``.

    Aliases are trimmed and lower-cased.  The canonical name is always
    registered as an alias of itself.
    """
    aliases: dict[str, str] = {}
    for canonical, names in data.items():
        canonical = str(canonical).strip()
        if not canonical:
            raise ValueError("Department name must not be empty")
        for alias in [canonical, *(names or [])]:
            key = str(alias).strip().lower()
            existing = aliases.get(key)
            if existing is not None and existing != canonical:
                raise ValueError(
                    f"Alias {alias!r} maps to both {existing!r} and {canonical!r}"
                )
            aliases[key] = canonical
    return aliases


def parse_department_heads(
    data: dict[str, Any],
    canonical_names: set[str],
) -> dict[str, str]:
    """Parse the canonical-name to head table."""
    heads: dict[str, str] = {}
    for name, head in data.items():
        if name not in canonical_names:
            raise ValueError(f"Head given for unknown department {name!r}")
        heads[name] = str(head).strip()
    return heads


def parse_validation(data: dict[str, Any]) -> ValidationPolicyConfig:
    """Parse a ValidationPolicyConfig from a dict."""
    minimum_age = int(data.get("minimum_age", 16))
    if minimum_age < 0:
        raise ValueError(f"minimum_age must be non-negative, got {minimum_age}")
    phone_policy = str(data.get("phone_policy", "in_mobile")).strip()
    if not phone_policy:
        raise ValueError("phone_policy must not be empty")
    return ValidationPolicyConfig(minimum_age=minimum_age, phone_policy=phone_policy)


def parse_source(data: dict[str, Any]) -> SourceConfig:
    """Parse a SourceConfig from a dict."""
    header_row = int(data.get("header_row", 1))
    if header_row < 1:
        raise ValueError(f"header_row must be >= 1, got {header_row}")
    return SourceConfig(
        sheet=data.get("sheet"),
        header_row=header_row,
        skip_rows=int(data.get("skip_rows", 0)),
        delimiter=data.get("delimiter", ","),
        encoding=data.get("encoding", "utf-8"),
    )


def parse_config(data: dict[str, Any]) -> RegistrarConfig:
    """
    Parse a ``RegistrarConfig`` from a YAML dict.

    Required keys: ``config_id``, ``departments``.
    """
    aliases = parse_department_aliases(data["departments"])
    heads = parse_department_heads(
        data.get("department_heads") or {},
        set(aliases.values()),
    )
    return RegistrarConfig(
        config_id=data["config_id"],
        department_aliases=aliases,
        department_heads=heads,
        validation=parse_validation(data.get("validation") or {}),
        source=parse_source(data.get("source") or {}),
        database_url=data.get("database_url"),
        report_dir=data.get("report_dir"),
        checksum=compute_checksum(data),
    )


def load_config(path: Path | str) -> RegistrarConfig:
    """Load and parse a configuration file."""
    return parse_config(load_yaml_file(Path(path)))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
