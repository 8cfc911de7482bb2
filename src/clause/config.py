"""Configuration for Clause.

A ``LocalizationConfig`` is an immutable value passed explicitly to the
builder, resolver and substitution engine. When a call does not pass one,
the process-wide default returned by ``get_config()`` is used. Changing
the default is an administrative, start-of-process operation; it is
guarded by a lock but is not meant to be toggled per request.

Configuration sources:
    - Keyword arguments: ``LocalizationConfig(escape="#", locale="de")``
    - Environment variables: ``LocalizationConfig.from_env()``
      (CLAUSE_ESCAPE, CLAUSE_TABLE, CLAUSE_LOCALE, CLAUSE_FALLBACK_LOCALE,
      CLAUSE_MISSING_KEY_POLICY, CLAUSE_UNMATCHED_POLICY, CLAUSE_STRICT)
    - Files: ``LocalizationConfig.from_file("clause.yaml")`` (YAML, JSON, TOML)

Usage:
    >>> from clause.config import configure, config_context
    >>> configure(locale="de", escape="#")
    >>> with config_context(strict=True):
    ...     ...  # diagnostics raise inside this block
"""

from __future__ import annotations

import json
import os
import threading
import tomllib
from contextlib import contextmanager
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Iterator, Mapping

import yaml

from clause.diagnostics import DiagnosticSink, LoggingSink
from clause.errors import ConfigurationError
from clause.naming import DEFAULT_TABLE_NAME

DEFAULT_ESCAPE = "@"
DEFAULT_LOCALE = "en"

_ENV_PREFIX = "CLAUSE_"
_FORBIDDEN_ESCAPES = frozenset("%()\\")


class MissingKeyPolicy(str, Enum):
    """How a missing strings-table entry is detected.

    FALLBACK: the table answers ``None`` for unknown keys.
    SENTINEL: the table is asked with the key as default value and an
        answer equal to the key counts as missing.
    """

    FALLBACK = "fallback"
    SENTINEL = "sentinel"


class UnmatchedMarkerPolicy(str, Enum):
    """What happens to a marker whose name has no recorded argument.

    ABORT: substitution is abandoned and the resolved template returned.
    EMPTY: the marker is replaced by empty text.
    """

    ABORT = "abort"
    EMPTY = "empty"


@dataclass(frozen=True)
class LocalizationConfig:
    """Settings shared by the localization pipeline.

    Attributes:
        escape: Single character introducing a marker, ``@`` in ``@(name)``
        table: Default strings table name
        locale: Locale used for lookups and styled values
        fallback_locale: Last locale tried by file-backed tables
        missing_key_policy: How missing keys are detected
        unmatched_policy: How unknown marker names are handled
        strict: Raise ``LocalizationAssertionError`` on every diagnostic
        sink: Receiver for diagnostics
    """

    escape: str = DEFAULT_ESCAPE
    table: str = DEFAULT_TABLE_NAME
    locale: str = DEFAULT_LOCALE
    fallback_locale: str = DEFAULT_LOCALE
    missing_key_policy: MissingKeyPolicy = MissingKeyPolicy.FALLBACK
    unmatched_policy: UnmatchedMarkerPolicy = UnmatchedMarkerPolicy.ABORT
    strict: bool = False
    sink: DiagnosticSink = field(default_factory=LoggingSink, compare=False)

    def __post_init__(self) -> None:
        if len(self.escape) != 1 or self.escape.isalnum() or self.escape.isspace():
            raise ConfigurationError(
                f"Escape must be a single punctuation character, got {self.escape!r}",
                hint="Use a character such as '@', '#' or '$'.",
            )
        if self.escape in _FORBIDDEN_ESCAPES:
            raise ConfigurationError(
                f"Escape {self.escape!r} clashes with marker or format syntax",
            )
        if not self.table:
            raise ConfigurationError("Table name must not be empty")
        # Accept plain strings for the policies.
        object.__setattr__(self, "missing_key_policy", _coerce(MissingKeyPolicy, self.missing_key_policy))
        object.__setattr__(self, "unmatched_policy", _coerce(UnmatchedMarkerPolicy, self.unmatched_policy))

    def with_options(self, **changes: Any) -> "LocalizationConfig":
        """Return a copy with the given fields replaced."""
        unknown = set(changes) - {f.name for f in fields(self)}
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
        return replace(self, **changes)

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        base: "LocalizationConfig | None" = None,
    ) -> "LocalizationConfig":
        """Build a config from a mapping, ignoring ``None`` values."""
        base = base or cls()
        changes = {k: v for k, v in data.items() if v is not None}
        if "strict" in changes:
            changes["strict"] = _parse_bool(changes["strict"])
        return base.with_options(**changes)

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        base: "LocalizationConfig | None" = None,
    ) -> "LocalizationConfig":
        """Build a config from ``CLAUSE_*`` environment variables."""
        environ = os.environ if environ is None else environ
        data = {}
        for f in fields(cls):
            if f.name == "sink":
                continue
            value = environ.get(f"{_ENV_PREFIX}{f.name.upper()}")
            if value is not None:
                data[f.name] = value
        return cls.from_mapping(data, base=base)

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        base: "LocalizationConfig | None" = None,
    ) -> "LocalizationConfig":
        """Load a config from a YAML, JSON or TOML file.

        The settings may live at the top level or under a ``clause`` section.
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}", config_path=path)

        try:
            if path.suffix in (".yaml", ".yml"):
                with open(path, "r", encoding="utf-8") as f:
                    data = yaml.safe_load(f) or {}
            elif path.suffix == ".json":
                with open(path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            elif path.suffix == ".toml":
                with open(path, "rb") as f:
                    data = tomllib.load(f)
            else:
                raise ConfigurationError(f"Unsupported config format: {path.suffix}", config_path=path)
        except (yaml.YAMLError, json.JSONDecodeError, tomllib.TOMLDecodeError) as e:
            raise ConfigurationError(f"Invalid config file {path}: {e}", config_path=path) from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping", config_path=path)
        section = data.get("clause", data)
        return cls.from_mapping(section, base=base)


def _coerce(enum_type: type[Enum], value: Any) -> Any:
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(str(value).lower())
    except ValueError:
        valid = ", ".join(m.value for m in enum_type)  # type: ignore[attr-defined]
        raise ConfigurationError(
            f"Invalid {enum_type.__name__} {value!r}. Valid values are: {valid}"
        ) from None


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


# =============================================================================
# Process-wide default
# =============================================================================


_config = LocalizationConfig()
_config_lock = threading.Lock()


def get_config() -> LocalizationConfig:
    """Get the process-wide default configuration."""
    return _config


def set_config(config: LocalizationConfig) -> None:
    """Replace the process-wide default configuration."""
    global _config
    with _config_lock:
        _config = config


def configure(**changes: Any) -> LocalizationConfig:
    """Update fields of the process-wide default configuration.

    Returns:
        The new default configuration
    """
    global _config
    with _config_lock:
        _config = _config.with_options(**changes)
        return _config


def reset_config() -> None:
    """Restore the built-in defaults (for testing)."""
    set_config(LocalizationConfig())


def resolve_config(config: LocalizationConfig | None) -> LocalizationConfig:
    """Return ``config`` or the process-wide default."""
    return config if config is not None else get_config()


@contextmanager
def config_context(**changes: Any) -> Iterator[LocalizationConfig]:
    """Temporarily override the process-wide default configuration."""
    previous = get_config()
    updated = previous.with_options(**changes)
    set_config(updated)
    try:
        yield updated
    finally:
        set_config(previous)
