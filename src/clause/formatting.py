"""Locale-Aware Number and Date Formatting.

Styled interpolations (``("total", 1234.5, "currency")``) are rendered
through the formatters in this module. They cover the styles a strings
file usually needs:

- Numbers: decimal, percent, scientific, currency, ordinal
- Dates: short, medium, long, full, iso (datetimes include the time)

Locale data is a compact CLDR subset; unknown locales fall back to their
language and then to English.

Usage:
    from clause.formatting import format_number, format_date, NumberStyle

    format_number(1234567.891, "de")                     # "1.234.567,891"
    format_number(0.25, "en", NumberStyle.PERCENT)       # "25%"
    format_number(1234.5, "en", NumberStyle.CURRENCY)    # "$1,234.50"
    format_date(date(2024, 12, 31), "de", DateStyle.LONG)  # "31. Dezember 2024"
"""

from __future__ import annotations

import math
import numbers
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation, localcontext
from enum import Enum
from typing import Any, TypeVar

T = TypeVar("T")


# ==============================================================================
# Styles and Locales
# ==============================================================================


class NumberStyle(str, Enum):
    """Number formatting style."""

    DECIMAL = "decimal"        # 1,234.5
    PERCENT = "percent"        # 25%
    SCIENTIFIC = "scientific"  # 1.2345E3
    CURRENCY = "currency"      # $1,234.50
    ORDINAL = "ordinal"        # 21st


class DateStyle(str, Enum):
    """Date formatting style."""

    SHORT = "short"    # 12/31/24
    MEDIUM = "medium"  # Dec 31, 2024
    LONG = "long"      # December 31, 2024
    FULL = "full"      # Tuesday, December 31, 2024
    ISO = "iso"        # 2024-12-31


@dataclass(frozen=True)
class LocaleInfo:
    """Parsed locale tag.

    Attributes:
        language: ISO 639-1 language code (e.g., "en", "ko")
        region: ISO 3166-1 region code (e.g., "US", "GB")
        script: ISO 15924 script code (e.g., "Hans")
    """

    language: str
    region: str | None = None
    script: str | None = None

    @property
    def key(self) -> str:
        """Underscore form used by the locale tables ("de_AT")."""
        return f"{self.language}_{self.region}" if self.region else self.language

    @property
    def tag(self) -> str:
        """BCP 47 language tag ("zh-Hans-CN")."""
        return "-".join(p for p in (self.language, self.script, self.region) if p)

    @classmethod
    def parse(cls, tag: str | "LocaleInfo") -> "LocaleInfo":
        """Parse "en", "en-US", "en_US", "zh-Hans-CN" or "de_AT.UTF-8"."""
        if isinstance(tag, LocaleInfo):
            return tag
        parts = tag.split(".")[0].replace("_", "-").split("-")
        language = parts[0].lower() or "en"
        region = None
        script = None
        for part in parts[1:]:
            if len(part) == 4 and part.isalpha():
                script = part.capitalize()
            elif (len(part) == 2 and part.isalpha()) or (len(part) == 3 and part.isdigit()):
                region = part.upper()
        return cls(language=language, region=region, script=script)


def _for_locale(table: dict[str, T], locale: LocaleInfo) -> T:
    if locale.region and locale.key in table:
        return table[locale.key]
    return table.get(locale.language, table["en"])


# ==============================================================================
# Locale Data: Numbers
# ==============================================================================


@dataclass(frozen=True)
class NumberSymbols:
    """Locale-specific number symbols."""

    decimal: str = "."
    group: str = ","
    minus: str = "-"
    percent: str = "%"
    exponential: str = "E"
    infinity: str = "∞"
    nan: str = "NaN"
    percent_spacing: str = ""
    currency_after: bool = False


_NUMBER_SYMBOLS: dict[str, NumberSymbols] = {
    "en": NumberSymbols(),
    "en_IN": NumberSymbols(),
    "de": NumberSymbols(decimal=",", group=".", percent_spacing=" ", currency_after=True),
    "de_CH": NumberSymbols(decimal=".", group="'"),
    "de_AT": NumberSymbols(decimal=",", group=" ", percent_spacing=" ", currency_after=True),
    "fr": NumberSymbols(decimal=",", group=" ", percent_spacing=" ", currency_after=True),
    "es": NumberSymbols(decimal=",", group=".", percent_spacing=" ", currency_after=True),
    "es_MX": NumberSymbols(),
    "it": NumberSymbols(decimal=",", group=".", currency_after=True),
    "pt": NumberSymbols(decimal=",", group=".", currency_after=True),
    "nl": NumberSymbols(decimal=",", group="."),
    "ru": NumberSymbols(decimal=",", group=" ", percent_spacing=" ", currency_after=True),
    "pl": NumberSymbols(decimal=",", group=" ", currency_after=True),
    "sv": NumberSymbols(decimal=",", group=" ", percent_spacing=" ", currency_after=True),
    "ja": NumberSymbols(),
    "ko": NumberSymbols(),
    "zh": NumberSymbols(),
}


@dataclass(frozen=True)
class CurrencyInfo:
    """Currency display information."""

    code: str
    symbol: str
    decimal_digits: int = 2


_CURRENCIES: dict[str, CurrencyInfo] = {
    "USD": CurrencyInfo("USD", "$"),
    "EUR": CurrencyInfo("EUR", "€"),
    "GBP": CurrencyInfo("GBP", "£"),
    "CHF": CurrencyInfo("CHF", "CHF"),
    "JPY": CurrencyInfo("JPY", "¥", 0),
    "KRW": CurrencyInfo("KRW", "₩", 0),
    "CNY": CurrencyInfo("CNY", "¥"),
    "INR": CurrencyInfo("INR", "₹"),
    "MXN": CurrencyInfo("MXN", "$"),
    "PLN": CurrencyInfo("PLN", "zł"),
    "SEK": CurrencyInfo("SEK", "kr"),
    "RUB": CurrencyInfo("RUB", "₽"),
}

_LOCALE_CURRENCIES: dict[str, str] = {
    "en": "USD",
    "en_GB": "GBP",
    "en_IN": "INR",
    "de": "EUR",
    "de_CH": "CHF",
    "fr": "EUR",
    "fr_CH": "CHF",
    "es": "EUR",
    "es_MX": "MXN",
    "it": "EUR",
    "pt": "EUR",
    "nl": "EUR",
    "ru": "RUB",
    "pl": "PLN",
    "sv": "SEK",
    "ja": "JPY",
    "ko": "KRW",
    "zh": "CNY",
}


def get_number_symbols(locale: LocaleInfo) -> NumberSymbols:
    return _for_locale(_NUMBER_SYMBOLS, locale)


def get_currency_info(code: str) -> CurrencyInfo:
    """Get currency information, inventing a plain entry for unknown codes."""
    code = code.upper()
    return _CURRENCIES.get(code, CurrencyInfo(code, code))


def get_locale_currency(locale: LocaleInfo) -> CurrencyInfo:
    return get_currency_info(_for_locale(_LOCALE_CURRENCIES, locale))


# ==============================================================================
# Locale Data: Dates
# ==============================================================================


@dataclass(frozen=True)
class DateTimePatterns:
    """Locale-specific CLDR-style date/time patterns."""

    date_short: str = "M/d/yy"
    date_medium: str = "MMM d, y"
    date_long: str = "MMMM d, y"
    date_full: str = "EEEE, MMMM d, y"

    time_short: str = "h:mm a"
    time_medium: str = "h:mm:ss a"
    time_long: str = "h:mm:ss a z"
    time_full: str = "h:mm:ss a zzzz"

    datetime_pattern: str = "{date}, {time}"

    months_wide: tuple[str, ...] = (
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    )
    months_abbreviated: tuple[str, ...] = (
        "Jan", "Feb", "Mar", "Apr", "May", "Jun",
        "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
    )
    # Monday first, matching datetime.weekday()
    days_wide: tuple[str, ...] = (
        "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
    )
    days_abbreviated: tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

    am: str = "AM"
    pm: str = "PM"

    def date_pattern(self, style: DateStyle) -> str:
        return getattr(self, f"date_{style.value}")

    def time_pattern(self, style: DateStyle) -> str:
        return getattr(self, f"time_{style.value}")


_DATE_PATTERNS: dict[str, DateTimePatterns] = {
    "en": DateTimePatterns(),
    "en_GB": DateTimePatterns(
        date_short="dd/MM/y",
        date_medium="d MMM y",
        date_long="d MMMM y",
        date_full="EEEE, d MMMM y",
        time_short="HH:mm",
        time_medium="HH:mm:ss",
        time_long="HH:mm:ss z",
        time_full="HH:mm:ss zzzz",
    ),
    "de": DateTimePatterns(
        date_short="dd.MM.yy",
        date_medium="dd.MM.y",
        date_long="d. MMMM y",
        date_full="EEEE, d. MMMM y",
        time_short="HH:mm",
        time_medium="HH:mm:ss",
        time_long="HH:mm:ss z",
        time_full="HH:mm:ss zzzz",
        months_wide=(
            "Januar", "Februar", "März", "April", "Mai", "Juni",
            "Juli", "August", "September", "Oktober", "November", "Dezember",
        ),
        months_abbreviated=(
            "Jan.", "Feb.", "März", "Apr.", "Mai", "Juni",
            "Juli", "Aug.", "Sept.", "Okt.", "Nov.", "Dez.",
        ),
        days_wide=("Montag", "Dienstag", "Mittwoch", "Donnerstag", "Freitag", "Samstag", "Sonntag"),
        days_abbreviated=("Mo.", "Di.", "Mi.", "Do.", "Fr.", "Sa.", "So."),
    ),
    "fr": DateTimePatterns(
        date_short="dd/MM/y",
        date_medium="d MMM y",
        date_long="d MMMM y",
        date_full="EEEE d MMMM y",
        time_short="HH:mm",
        time_medium="HH:mm:ss",
        time_long="HH:mm:ss z",
        time_full="HH:mm:ss zzzz",
        datetime_pattern="{date} {time}",
        months_wide=(
            "janvier", "février", "mars", "avril", "mai", "juin",
            "juillet", "août", "septembre", "octobre", "novembre", "décembre",
        ),
        months_abbreviated=(
            "janv.", "févr.", "mars", "avr.", "mai", "juin",
            "juil.", "août", "sept.", "oct.", "nov.", "déc.",
        ),
        days_wide=("lundi", "mardi", "mercredi", "jeudi", "vendredi", "samedi", "dimanche"),
        days_abbreviated=("lun.", "mar.", "mer.", "jeu.", "ven.", "sam.", "dim."),
    ),
    "es": DateTimePatterns(
        date_short="d/M/yy",
        date_medium="d MMM y",
        date_long="d 'de' MMMM 'de' y",
        date_full="EEEE, d 'de' MMMM 'de' y",
        time_short="H:mm",
        time_medium="H:mm:ss",
        time_long="H:mm:ss z",
        time_full="H:mm:ss zzzz",
        months_wide=(
            "enero", "febrero", "marzo", "abril", "mayo", "junio",
            "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
        ),
        months_abbreviated=(
            "ene", "feb", "mar", "abr", "may", "jun",
            "jul", "ago", "sept", "oct", "nov", "dic",
        ),
        days_wide=("lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo"),
        days_abbreviated=("lun", "mar", "mié", "jue", "vie", "sáb", "dom"),
    ),
    "ja": DateTimePatterns(
        date_short="y/MM/dd",
        date_medium="y/MM/dd",
        date_long="y年M月d日",
        date_full="y年M月d日EEEE",
        time_short="H:mm",
        time_medium="H:mm:ss",
        time_long="H:mm:ss z",
        time_full="H時mm分ss秒 zzzz",
        datetime_pattern="{date} {time}",
        days_wide=("月曜日", "火曜日", "水曜日", "木曜日", "金曜日", "土曜日", "日曜日"),
        days_abbreviated=("月", "火", "水", "木", "金", "土", "日"),
    ),
    "ko": DateTimePatterns(
        date_short="yy. M. d.",
        date_medium="y. M. d.",
        date_long="y년 M월 d일",
        date_full="y년 M월 d일 EEEE",
        time_short="a h:mm",
        time_medium="a h:mm:ss",
        time_long="a h시 m분 s초 z",
        time_full="a h시 m분 s초 zzzz",
        datetime_pattern="{date} {time}",
        days_wide=("월요일", "화요일", "수요일", "목요일", "금요일", "토요일", "일요일"),
        days_abbreviated=("월", "화", "수", "목", "금", "토", "일"),
        am="오전",
        pm="오후",
    ),
}


def get_date_patterns(locale: LocaleInfo) -> DateTimePatterns:
    return _for_locale(_DATE_PATTERNS, locale)


# ==============================================================================
# Formatters
# ==============================================================================


class LocaleNumberFormatter:
    """Locale-aware number formatter.

    Example:
        formatter = LocaleNumberFormatter()
        formatter.format(1234567.89, LocaleInfo.parse("de"))           # "1.234.567,89"
        formatter.format(0.1234, LocaleInfo.parse("en"), NumberStyle.PERCENT)  # "12%"
    """

    def __init__(self, max_fraction_digits: int = 3) -> None:
        self.max_fraction_digits = max_fraction_digits

    def format(
        self,
        value: float | int | Decimal,
        locale: LocaleInfo,
        style: NumberStyle = NumberStyle.DECIMAL,
        **options: Any,
    ) -> str:
        """Format a number according to locale rules.

        Args:
            value: Number to format
            locale: Target locale
            style: Formatting style
            **options: Additional options:
                - max_fraction_digits: Fraction digits kept (decimal, percent)
                - currency: ISO 4217 code overriding the locale currency
                - use_grouping: Whether to use grouping separators

        Returns:
            Formatted number
        """
        symbols = get_number_symbols(locale)
        number = _to_decimal(value)
        if number is None:
            return self._format_special(float(value), symbols)

        if style == NumberStyle.PERCENT:
            digits = options.get("max_fraction_digits", 0)
            body = self._format_decimal(number * 100, symbols, locale, digits, options.get("use_grouping", True))
            return f"{body}{symbols.percent_spacing}{symbols.percent}"
        if style == NumberStyle.SCIENTIFIC:
            return self._format_scientific(number, symbols)
        if style == NumberStyle.CURRENCY:
            return self._format_currency(number, symbols, locale, options.get("currency"))
        if style == NumberStyle.ORDINAL:
            return format_ordinal(int(number), locale)

        digits = options.get("max_fraction_digits", self.max_fraction_digits)
        return self._format_decimal(number, symbols, locale, digits, options.get("use_grouping", True))

    def _format_special(self, value: float, symbols: NumberSymbols) -> str:
        if math.isnan(value):
            return symbols.nan
        return symbols.infinity if value > 0 else f"{symbols.minus}{symbols.infinity}"

    def _format_decimal(
        self,
        value: Decimal,
        symbols: NumberSymbols,
        locale: LocaleInfo,
        max_fraction_digits: int,
        use_grouping: bool,
        min_fraction_digits: int = 0,
    ) -> str:
        with localcontext() as ctx:
            ctx.prec = max(28, value.adjusted() + max_fraction_digits + 2)
            rounded = value.quantize(Decimal(1).scaleb(-max_fraction_digits), rounding=ROUND_HALF_EVEN)
        int_part, _, frac_part = f"{abs(rounded):f}".partition(".")
        frac_part = frac_part.rstrip("0").ljust(min_fraction_digits, "0")

        if use_grouping:
            int_part = self._apply_grouping(int_part, symbols.group, locale)

        formatted = f"{int_part}{symbols.decimal}{frac_part}" if frac_part else int_part
        if rounded < 0:
            formatted = f"{symbols.minus}{formatted}"
        return formatted

    def _apply_grouping(self, int_part: str, group_sep: str, locale: LocaleInfo) -> str:
        if len(int_part) <= 3:
            return int_part
        head, tail = int_part[:-3], int_part[-3:]
        # Indian numbering groups by two after the first three digits
        size = 2 if locale.key == "en_IN" or locale.language == "hi" else 3
        groups = []
        while head:
            groups.insert(0, head[-size:])
            head = head[:-size]
        return group_sep.join([*groups, tail])

    def _format_scientific(self, value: Decimal, symbols: NumberSymbols) -> str:
        mantissa, _, exponent = format(value, "E").partition("E")
        if "." in mantissa:
            mantissa = mantissa.rstrip("0").rstrip(".")
        mantissa = mantissa.replace(".", symbols.decimal)
        if mantissa.startswith("-"):
            mantissa = f"{symbols.minus}{mantissa[1:]}"
        return f"{mantissa}{symbols.exponential}{int(exponent)}"

    def _format_currency(
        self,
        value: Decimal,
        symbols: NumberSymbols,
        locale: LocaleInfo,
        currency: str | None,
    ) -> str:
        info = get_currency_info(currency) if currency else get_locale_currency(locale)
        amount = self._format_decimal(
            abs(value), symbols, locale, info.decimal_digits, True, info.decimal_digits
        )
        formatted = f"{amount} {info.symbol}" if symbols.currency_after else f"{info.symbol}{amount}"
        if value < 0 and any(c in "123456789" for c in amount):
            formatted = f"{symbols.minus}{formatted}"
        return formatted


def format_ordinal(n: int, locale: LocaleInfo) -> str:
    """Format an integer as an ordinal ("21st", "21.", "1er")."""
    if locale.language == "en":
        if 10 <= abs(n) % 100 <= 20:
            suffix = "th"
        else:
            suffix = {1: "st", 2: "nd", 3: "rd"}.get(abs(n) % 10, "th")
        return f"{n}{suffix}"
    if locale.language == "fr":
        return f"{n}er" if n == 1 else f"{n}e"
    if locale.language in ("es", "it", "pt"):
        return f"{n}.º"
    if locale.language == "ja":
        return f"{n}番目"
    if locale.language == "ko":
        return f"{n}번째"
    return f"{n}."


_PATTERN_TOKEN = re.compile(r"'([^']*)'|([A-Za-z])\2*")


class LocaleDateFormatter:
    """Locale-aware date/time formatter.

    A ``datetime`` is rendered with date and time in the same style,
    a ``date`` with the date only and a ``time`` with the time only.
    """

    def format(
        self,
        value: datetime | date | time,
        locale: LocaleInfo,
        style: DateStyle = DateStyle.MEDIUM,
    ) -> str:
        if style == DateStyle.ISO:
            return value.isoformat()

        patterns = get_date_patterns(locale)
        if isinstance(value, datetime):
            return patterns.datetime_pattern.format(
                date=self.apply_pattern(value, patterns.date_pattern(style), patterns),
                time=self.apply_pattern(value, patterns.time_pattern(style), patterns),
            )
        if isinstance(value, time):
            moment = datetime.combine(date(2000, 1, 1), value)
            return self.apply_pattern(moment, patterns.time_pattern(style), patterns)
        return self.apply_pattern(value, patterns.date_pattern(style), patterns)

    def apply_pattern(
        self,
        value: datetime | date,
        pattern: str,
        patterns: DateTimePatterns,
    ) -> str:
        """Render a CLDR pattern such as ``"EEEE, d. MMMM y"``."""
        if not isinstance(value, datetime):
            value = datetime.combine(value, time.min)

        def render(match: re.Match[str]) -> str:
            if match.group(2) is None:
                return match.group(1)
            token = match.group(0)
            return self._render_token(token[0], len(token), value, patterns)

        return _PATTERN_TOKEN.sub(render, pattern).strip()

    def _render_token(
        self,
        letter: str,
        width: int,
        value: datetime,
        patterns: DateTimePatterns,
    ) -> str:
        if letter == "y":
            return f"{value.year % 100:02d}" if width == 2 else str(value.year)
        if letter == "M":
            if width >= 4:
                return patterns.months_wide[value.month - 1]
            if width == 3:
                return patterns.months_abbreviated[value.month - 1]
            return f"{value.month:0{width}d}"
        if letter == "d":
            return f"{value.day:0{width}d}"
        if letter == "E":
            names = patterns.days_wide if width >= 4 else patterns.days_abbreviated
            return names[value.weekday()]
        if letter == "H":
            return f"{value.hour:0{width}d}"
        if letter == "h":
            return f"{value.hour % 12 or 12:0{width}d}"
        if letter == "m":
            return f"{value.minute:0{width}d}"
        if letter == "s":
            return f"{value.second:0{width}d}"
        if letter == "a":
            return patterns.am if value.hour < 12 else patterns.pm
        if letter == "z":
            return value.tzname() or ""
        return letter * width


def _to_decimal(value: Any) -> Decimal | None:
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, numbers.Integral):
        # includes numpy integer scalars
        return Decimal(int(value))
    number = float(value)
    if math.isnan(number) or math.isinf(number):
        return None
    try:
        return Decimal(repr(number))
    except InvalidOperation:
        return None


# ==============================================================================
# Convenience Functions
# ==============================================================================

_number_formatter = LocaleNumberFormatter()
_date_formatter = LocaleDateFormatter()


def format_number(
    value: float | int | Decimal,
    locale: str | LocaleInfo,
    style: NumberStyle | str = NumberStyle.DECIMAL,
    **options: Any,
) -> str:
    """Format a number for a locale.

    Example:
        format_number(1234567.89, "de")               # "1.234.567,89"
        format_number(0.15, "en", NumberStyle.PERCENT)  # "15%"
    """
    return _number_formatter.format(value, LocaleInfo.parse(locale), NumberStyle(style), **options)


def format_date(
    value: datetime | date | time,
    locale: str | LocaleInfo,
    style: DateStyle | str = DateStyle.MEDIUM,
) -> str:
    """Format a date, datetime or time for a locale.

    Example:
        format_date(date(2024, 12, 31), "en", DateStyle.LONG)  # "December 31, 2024"
    """
    return _date_formatter.format(value, LocaleInfo.parse(locale), DateStyle(style))
