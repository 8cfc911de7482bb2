"""Marker substitution.

A resolved localization such as ``"Hallo, @(name)! Du hast @(count) Nachrichten."``
is turned into the printf-style format string
``"Hallo, %s! Du hast %d Nachrichten."`` by replacing every marker with
the placeholder of its argument. The argument values are collected in
the order the markers appear, so translators are free to reorder them,
and the format string is applied once at the end.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Any, Mapping, NamedTuple

from clause.config import DEFAULT_ESCAPE, LocalizationConfig, UnmatchedMarkerPolicy, resolve_config
from clause.diagnostics import DiagnosticCode, report
from clause.pairing import ValuePairing


class Match(NamedTuple):
    """A marker found in a resolved localization."""

    name: str
    matched_pattern: str


@lru_cache(maxsize=16)
def marker_pattern(escape: str = DEFAULT_ESCAPE) -> re.Pattern[str]:
    """Compiled pattern for markers such as ``@(name)``."""
    return re.compile(re.escape(escape) + r"\((.+?)\)")


def find_markers(text: str, escape: str = DEFAULT_ESCAPE) -> list[Match]:
    """Find all markers in ``text``, in order of appearance."""
    return [Match(m.group(1), m.group(0)) for m in marker_pattern(escape).finditer(text)]


def substitute(
    resolved: str,
    arguments: Mapping[str, ValuePairing],
    config: LocalizationConfig | None = None,
    **context: Any,
) -> str:
    """Replace markers with argument values.

    Args:
        resolved: Localized template containing markers
        arguments: Pairings by parameter name
        config: Configuration (default: process-wide)
        **context: Extra context attached to diagnostics

    Returns:
        The final string; ``resolved`` unchanged when substitution fails
    """
    config = resolve_config(config)
    matches = find_markers(resolved, config.escape)
    if not matches:
        return resolved

    format_string = resolved
    values: list[Any] = []
    expected = len(matches)

    for match in matches:
        pairing = arguments.get(match.name)
        if pairing is None:
            valid = ", ".join(f"'{name}'" for name in arguments)
            report(
                config,
                DiagnosticCode.INVALID_PLACEHOLDER,
                f"Invalid placeholder name '{match.name}'. Valid names are: {valid}",
                name=match.name,
                **context,
            )
            if config.unmatched_policy is UnmatchedMarkerPolicy.EMPTY:
                format_string = format_string.replace(match.matched_pattern, "")
                expected -= 1
            continue
        try:
            value = pairing.value
        except (ArithmeticError, TypeError, ValueError) as e:
            report(
                config,
                DiagnosticCode.FORMAT_FAILED,
                f"Failed to format value of '{match.name}': {e}",
                name=match.name,
                **context,
            )
            return resolved
        format_string = format_string.replace(match.matched_pattern, pairing.placeholder)
        values.append(value)

    if expected != len(values):
        report(
            config,
            DiagnosticCode.PLACEHOLDER_COUNT_MISMATCH,
            f"Unmatched number of placeholders and values. Expected '{expected}' got '{len(values)}'",
            **context,
        )
        return resolved

    try:
        return format_string % tuple(values)
    except (TypeError, ValueError) as e:
        report(
            config,
            DiagnosticCode.FORMAT_FAILED,
            f"Failed to format {format_string!r}: {e}",
            **context,
        )
        return resolved
