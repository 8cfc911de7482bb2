"""Diagnostics for the localization pipeline.

Every recoverable problem (missing key, duplicate parameter, unknown
marker, ...) is turned into a ``Diagnostic`` and handed to a sink. The
default sink forwards to the standard ``logging`` module; tests and the
CLI collect diagnostics in memory instead.

Example:
    from clause import CollectingSink, LocalizationConfig, make_template

    sink = CollectingSink()
    config = LocalizationConfig(sink=sink)
    make_template("{a} {a}", config=config, a=1)
    sink.codes()  # [DiagnosticCode.DUPLICATE_PARAMETER]
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterator, Protocol, runtime_checkable

from clause.errors import LocalizationAssertionError

if TYPE_CHECKING:
    from clause.config import LocalizationConfig

logger = logging.getLogger("clause.diagnostics")


class Severity(str, Enum):
    """Diagnostic severity."""

    WARNING = "warning"
    ERROR = "error"

    @property
    def log_level(self) -> int:
        return logging.ERROR if self is Severity.ERROR else logging.WARNING


class DiagnosticCode(str, Enum):
    """Codes for every recoverable condition."""

    KEY_NOT_FOUND = "key_not_found"
    EMPTY_VALUE = "empty_value"
    DUPLICATE_PARAMETER = "duplicate_parameter"
    INVALID_PLACEHOLDER = "invalid_placeholder"
    PLACEHOLDER_COUNT_MISMATCH = "placeholder_count_mismatch"
    UNSUPPORTED_STYLE = "unsupported_style"
    MISSING_VALUE = "missing_value"
    FORMAT_FAILED = "format_failed"
    TABLE_LOAD_FAILED = "table_load_failed"

    @property
    def severity(self) -> Severity:
        return _SEVERITIES[self]


_SEVERITIES = {
    DiagnosticCode.KEY_NOT_FOUND: Severity.WARNING,
    DiagnosticCode.EMPTY_VALUE: Severity.WARNING,
    DiagnosticCode.DUPLICATE_PARAMETER: Severity.ERROR,
    DiagnosticCode.INVALID_PLACEHOLDER: Severity.ERROR,
    DiagnosticCode.PLACEHOLDER_COUNT_MISMATCH: Severity.WARNING,
    DiagnosticCode.UNSUPPORTED_STYLE: Severity.ERROR,
    DiagnosticCode.MISSING_VALUE: Severity.ERROR,
    DiagnosticCode.FORMAT_FAILED: Severity.ERROR,
    DiagnosticCode.TABLE_LOAD_FAILED: Severity.WARNING,
}


@dataclass(frozen=True)
class Diagnostic:
    """A single diagnostic record.

    Attributes:
        code: What went wrong
        message: Human readable description
        context: Explicit call context (key, table, locale, ...)
    """

    code: DiagnosticCode
    message: str
    context: dict[str, Any] = field(default_factory=dict)

    @property
    def severity(self) -> Severity:
        return self.code.severity

    def __str__(self) -> str:
        return self.message


@runtime_checkable
class DiagnosticSink(Protocol):
    """Receives diagnostics. Must not raise."""

    def __call__(self, diagnostic: Diagnostic) -> None:
        ...


class LoggingSink:
    """Writes diagnostics to a ``logging`` logger."""

    def __init__(self, logger_name: str = "clause") -> None:
        self.logger_name = logger_name

    def __call__(self, diagnostic: Diagnostic) -> None:
        logging.getLogger(self.logger_name).log(
            diagnostic.severity.log_level,
            diagnostic.message,
            extra={"clause_code": diagnostic.code.value, "clause_context": diagnostic.context},
        )

    def __repr__(self) -> str:
        return f"LoggingSink({self.logger_name!r})"


class CollectingSink:
    """Keeps diagnostics in memory, optionally forwarding them."""

    def __init__(self, forward: DiagnosticSink | None = None) -> None:
        self._forward = forward
        self._items: list[Diagnostic] = []
        self._lock = threading.Lock()

    def __call__(self, diagnostic: Diagnostic) -> None:
        with self._lock:
            self._items.append(diagnostic)
        if self._forward is not None:
            self._forward(diagnostic)

    @property
    def diagnostics(self) -> list[Diagnostic]:
        with self._lock:
            return list(self._items)

    def codes(self) -> list[DiagnosticCode]:
        return [d.code for d in self.diagnostics]

    def by_severity(self, severity: Severity) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is severity]

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.diagnostics)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


def report(
    config: "LocalizationConfig",
    code: DiagnosticCode,
    message: str,
    **context: Any,
) -> Diagnostic:
    """Emit a diagnostic through the configured sink.

    In strict mode a ``LocalizationAssertionError`` is raised after the
    sink has seen the diagnostic.

    Args:
        config: Active configuration
        code: Diagnostic code
        message: Human readable message
        **context: Call context attached to the diagnostic

    Returns:
        The emitted diagnostic
    """
    diagnostic = Diagnostic(code=code, message=message, context=context)
    try:
        config.sink(diagnostic)
    except Exception as e:
        logger.debug(f"Diagnostic sink failed for {code.value}: {e}")
    if config.strict:
        raise LocalizationAssertionError(diagnostic)
    return diagnostic
