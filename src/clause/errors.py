"""Exception hierarchy for Clause.

Localization calls never raise for malformed keys or templates: those
conditions are reported as diagnostics. The exceptions below cover
configuration problems, unreadable strings files and the opt-in strict
mode.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from clause.diagnostics import Diagnostic


class ClauseError(Exception):
    """Base exception for Clause errors.

    Attributes:
        message: Error message
        details: Additional error details
        hint: Helpful hint for resolution
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.hint = hint

    def __str__(self) -> str:
        parts = [self.message]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        return "\n".join(parts)


class ConfigurationError(ClauseError, ValueError):
    """Invalid configuration value or configuration file."""

    def __init__(
        self,
        message: str,
        config_path: Path | str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(
            message=message,
            details={"config_path": str(config_path) if config_path else None},
            hint=hint,
        )
        self.config_path = config_path


class StringsFileError(ClauseError):
    """A strings file could not be parsed."""

    def __init__(
        self,
        message: str,
        path: Path | str | None = None,
        line: int | None = None,
    ) -> None:
        location = ""
        if path is not None:
            location = f"{path}:{line}: " if line is not None else f"{path}: "
        super().__init__(
            message=f"{location}{message}",
            details={"path": str(path) if path else None, "line": line},
            hint="Entries must look like: \"key\" = \"value\";",
        )
        self.path = path
        self.line = line


class LocalizationAssertionError(ClauseError, AssertionError):
    """Raised in strict mode whenever a diagnostic is emitted."""

    def __init__(self, diagnostic: "Diagnostic") -> None:
        super().__init__(
            message=diagnostic.message,
            details={"code": diagnostic.code.value, **diagnostic.context},
        )
        self.diagnostic = diagnostic
