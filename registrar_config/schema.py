"""
Registrar configuration schema.

Frozen dataclasses parsed from the YAML configuration set by the loader.
Nothing in here reads files or the environment.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Validation policy
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValidationPolicyConfig:
    """Tunable parts of the per-record business rules."""

    minimum_age: int = 16
    phone_policy: str = "in_mobile"  # key into PHONE_POLICIES


# ---------------------------------------------------------------------------
# Source
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SourceConfig:
    """How the tabular source file is read."""

    sheet: str | None = None  # XLSX only; None = active sheet
    header_row: int = 1
    skip_rows: int = 0
    delimiter: str = ","  # CSV only
    encoding: str = "utf-8"

    def adapter_options(self) -> dict[str, object]:
        """Options dict understood by the source adapters."""
        options: dict[str, object] = {
            "header_row": self.header_row,
            "skip_rows": self.skip_rows,
            "delimiter": self.delimiter,
            "encoding": self.encoding,
        }
        if self.sheet:
            options["sheet"] = self.sheet
        return options


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RegistrarConfig:
    """
    Complete runtime configuration for the registrar.

    ``department_aliases`` maps a trimmed, lower-cased alias to its
    canonical department name; every canonical name is also an alias of
    itself.  ``department_heads`` maps canonical names to heads.
    """

    config_id: str
    department_aliases: dict[str, str] = field(default_factory=dict)
    department_heads: dict[str, str] = field(default_factory=dict)
    validation: ValidationPolicyConfig = field(default_factory=ValidationPolicyConfig)
    source: SourceConfig = field(default_factory=SourceConfig)
    database_url: str | None = None
    report_dir: str | None = None
    checksum: str = ""

    @property
    def departments(self) -> tuple[str, ...]:
        """Canonical department names, sorted."""
        return tuple(sorted(set(self.department_aliases.values())))
