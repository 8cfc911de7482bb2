"""Value-placeholder pairings.

A pairing couples an interpolated value with the printf-style conversion
used for it in the final format string:

    =========================  ===========  =====================
    value                      placeholder  argument
    =========================  ===========  =====================
    str                        %s           the text
    date / datetime / time     %s           str(value)
    int, numpy integers        %d           the integer
    numpy.float32              %f           the float
    float, numpy.float64       %lf          the float
    None                       %s           "nil"
    =========================  ===========  =====================

Dates and numbers are also *formattable*: given a style they render a
locale-aware string and switch their placeholder to ``%s``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Protocol, runtime_checkable

import numpy as np

from clause.formatting import DateStyle, LocaleInfo, NumberStyle, format_date, format_number

NIL_TEXT = "nil"


@runtime_checkable
class ValuePairing(Protocol):
    """A placeholder such as ``%d`` combined with its argument."""

    @property
    def placeholder(self) -> str:
        ...

    @property
    def value(self) -> Any:
        ...


@runtime_checkable
class FormattablePairing(ValuePairing, Protocol):
    """A pairing whose value can be rendered in a style."""

    style_type: ClassVar[type[Enum]]

    @property
    def formatted_placeholder(self) -> str:
        ...

    def formatted_value(self, style: Any, locale: LocaleInfo) -> Any:
        ...


# =============================================================================
# Plain pairings
# =============================================================================


@dataclass(frozen=True)
class TextPairing:
    text: str

    @property
    def placeholder(self) -> str:
        return "%s"

    @property
    def value(self) -> str:
        return self.text


@dataclass(frozen=True)
class NilPairing:
    """Pairing for an absent optional value."""

    @property
    def placeholder(self) -> str:
        return "%s"

    @property
    def value(self) -> str:
        return NIL_TEXT


class _NumberFormatting:
    """Shared styled behavior of the numeric pairings."""

    style_type: ClassVar[type[Enum]] = NumberStyle
    number: Any

    @property
    def formatted_placeholder(self) -> str:
        # The styled output is text, not a numeric literal.
        return "%s"

    def formatted_value(self, style: NumberStyle, locale: LocaleInfo) -> str:
        return format_number(self.number, locale, style)


@dataclass(frozen=True)
class IntegerPairing(_NumberFormatting):
    number: int

    @property
    def placeholder(self) -> str:
        return "%d"

    @property
    def value(self) -> int:
        return self.number


@dataclass(frozen=True)
class Float32Pairing(_NumberFormatting):
    """Single precision float."""

    number: Any

    @property
    def placeholder(self) -> str:
        return "%f"

    @property
    def value(self) -> Any:
        return self.number


@dataclass(frozen=True)
class Float64Pairing(_NumberFormatting):
    """Double precision float."""

    number: Any

    @property
    def placeholder(self) -> str:
        return "%lf"

    @property
    def value(self) -> Any:
        return self.number


@dataclass(frozen=True)
class DatePairing:
    moment: date | datetime | time

    style_type: ClassVar[type[Enum]] = DateStyle

    @property
    def placeholder(self) -> str:
        return "%s"

    @property
    def value(self) -> str:
        return str(self.moment)

    @property
    def formatted_placeholder(self) -> str:
        return self.placeholder

    def formatted_value(self, style: DateStyle, locale: LocaleInfo) -> str:
        return format_date(self.moment, locale, style)


# =============================================================================
# Styled pairing
# =============================================================================


@dataclass(frozen=True)
class StyledPairing:
    """Wraps a formattable pairing together with the requested style.

    Attributes:
        wrapped: The plain pairing
        style: Style member of ``wrapped.style_type``
        locale: Locale used to render the value
    """

    wrapped: FormattablePairing
    style: Enum
    locale: LocaleInfo

    @property
    def placeholder(self) -> str:
        return self.wrapped.formatted_placeholder

    @property
    def value(self) -> Any:
        return self.wrapped.formatted_value(self.style, self.locale)


def style_pairing(
    pairing: ValuePairing,
    style: Any,
    locale: str | LocaleInfo,
) -> StyledPairing:
    """Attach a style to a pairing.

    Args:
        pairing: Plain pairing
        style: Style enum member or its string value ("currency", "long")
        locale: Locale for rendering

    Returns:
        Styled pairing

    Raises:
        TypeError: If the pairing cannot be formatted
        ValueError: If the style is not valid for the pairing
    """
    if not isinstance(pairing, FormattablePairing):
        raise TypeError(f"{type(pairing).__name__} does not support styles")
    style_type = pairing.style_type
    if not isinstance(style, style_type):
        try:
            style = style_type(str(style).lower())
        except ValueError:
            valid = ", ".join(m.value for m in style_type)
            raise ValueError(f"Invalid style {style!r}. Valid styles are: {valid}") from None
    return StyledPairing(pairing, style, LocaleInfo.parse(locale))


def pairing_for(value: Any) -> ValuePairing:
    """Return the default pairing for a value.

    Objects that already are pairings are returned unchanged. Unknown
    types are paired as text.
    """
    if isinstance(value, ValuePairing):
        return value
    if value is None:
        return NilPairing()
    if isinstance(value, (str, bool)):
        return TextPairing(str(value))
    if isinstance(value, (date, time)):
        return DatePairing(value)
    if isinstance(value, (int, np.integer)):
        return IntegerPairing(value)
    if isinstance(value, np.floating) and value.dtype.itemsize <= 4:
        return Float32Pairing(value)
    if isinstance(value, (float, np.floating, Decimal)):
        return Float64Pairing(value)
    return TextPairing(str(value))
