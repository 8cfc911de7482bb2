"""Template construction.

A ``Template`` is the lookup key of a localized string together with the
named values interpolated into it. The key keeps every interpolation as
a marker, so ``"Hello, " + ("name:", user) + "!"`` becomes the key
``"Hello, @(name)!"`` with ``name`` bound to ``user``.

Three front-ends build templates:

    # Parts: strings are literals, tuples are interpolations
    clause("Total: ", ("amount", 12.5, "currency"))

    # A Python format string
    make_template("Hello, {name}!", name="World")

    # No interpolation at all
    Template.literal("Greeting")

``TemplateBuilder`` is the incremental API underneath them.
"""

from __future__ import annotations

import string
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Mapping

from clause.config import LocalizationConfig, resolve_config
from clause.diagnostics import DiagnosticCode, report
from clause.pairing import ValuePairing, pairing_for, style_pairing

if TYPE_CHECKING:
    from clause.tables import StringsTable

KeyPrefix = Callable[[str], "str | None"]

_CONVERSIONS: dict[str, Callable[[Any], str]] = {"r": repr, "s": str, "a": ascii}


@dataclass(frozen=True)
class Template:
    """Raw lookup key plus its named arguments.

    Attributes:
        raw_key: Key text with markers such as ``@(name)``
        arguments: Pairings by parameter name, in interpolation order
    """

    raw_key: str
    arguments: Mapping[str, ValuePairing] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "arguments", MappingProxyType(dict(self.arguments)))

    @classmethod
    def literal(cls, text: str) -> "Template":
        """Template without interpolations; the text is used as key verbatim."""
        return cls(raw_key=text)

    @property
    def parameter_names(self) -> tuple[str, ...]:
        return tuple(self.arguments)

    def localization(
        self,
        table: str | None = None,
        bundle: "StringsTable | None" = None,
        prefix: KeyPrefix | None = None,
        config: LocalizationConfig | None = None,
    ) -> str:
        """Resolve this template. See ``clause.resolver.resolve``."""
        from clause.resolver import resolve

        return resolve(self, table=table, bundle=bundle, prefix=prefix, config=config)


class TemplateBuilder:
    """Collects literals and interpolations into a ``Template``.

    Literal ``%`` characters are doubled so they survive the final
    printf-style formatting. Parameter names must be unique; a repeated
    name is reported and the later interpolation dropped.
    """

    def __init__(
        self,
        literal_capacity: int = 0,
        interpolation_count: int = 0,
        config: LocalizationConfig | None = None,
    ) -> None:
        """Initialize builder.

        Args:
            literal_capacity: Expected amount of literal text
            interpolation_count: Expected number of interpolations
            config: Configuration (default: process-wide)
        """
        self.config = resolve_config(config)
        # Escaping can double the literal text.
        self.capacity_hint = literal_capacity * 2
        self.interpolation_count = interpolation_count
        self._escaped: list[str] = []
        self._plain: list[str] = []
        self._arguments: dict[str, ValuePairing] = {}

    @property
    def literal(self) -> str:
        """The escaped key text accumulated so far."""
        return "".join(self._escaped)

    @property
    def arguments(self) -> Mapping[str, ValuePairing]:
        return MappingProxyType(self._arguments)

    def append_literal(self, text: str) -> None:
        self._escaped.append(text.replace("%", "%%"))
        self._plain.append(text)

    def append_interpolation(self, name: str, value: Any, style: Any = None) -> bool:
        """Append a named interpolation.

        Args:
            name: Parameter name; a trailing ``:`` is removed
            value: Interpolated value or a ready-made ``ValuePairing``
            style: Optional number or date style for the value

        Returns:
            True if the interpolation was recorded
        """
        name = name[:-1] if name.endswith(":") else name
        if not name:
            report(
                self.config,
                DiagnosticCode.INVALID_PLACEHOLDER,
                "Placeholder names must not be empty.",
                key=self.literal,
            )
            return False
        if name in self._arguments:
            report(
                self.config,
                DiagnosticCode.DUPLICATE_PARAMETER,
                f"Placeholder names must be unique. Found '{name}' more than once.",
                key=self.literal,
                name=name,
            )
            return False

        pairing = pairing_for(value)
        if style is not None:
            try:
                pairing = style_pairing(pairing, style, self.config.locale)
            except (TypeError, ValueError) as e:
                report(
                    self.config,
                    DiagnosticCode.UNSUPPORTED_STYLE,
                    f"Cannot apply style {style!r} to '{name}': {e}",
                    key=self.literal,
                    name=name,
                )

        marker = f"{self.config.escape}({name})"
        self._escaped.append(marker)
        self._plain.append(marker)
        self._arguments[name] = pairing
        return True

    def build(self) -> Template:
        """Create the template.

        Without any interpolation the key is the unescaped literal text,
        because it will never go through printf-style formatting.
        """
        raw_key = "".join(self._escaped if self._arguments else self._plain)
        return Template(raw_key=raw_key, arguments=self._arguments)


def clause(*parts: str | tuple[Any, ...], config: LocalizationConfig | None = None) -> Template:
    """Build a template from literal and interpolation parts.

    Example:
        clause("Hello, ", ("name:", "World"), "!")
        # Template(raw_key="Hello, @(name)!", arguments={"name": TextPairing("World")})

    Args:
        *parts: ``str`` literals and ``(name, value)`` or
            ``(name, value, style)`` tuples
        config: Configuration (default: process-wide)

    Raises:
        TypeError: If a part has an unsupported shape
    """
    literals = [p for p in parts if isinstance(p, str)]
    builder = TemplateBuilder(
        literal_capacity=sum(len(p) for p in literals),
        interpolation_count=len(parts) - len(literals),
        config=config,
    )
    for part in parts:
        if isinstance(part, str):
            builder.append_literal(part)
        elif isinstance(part, tuple) and len(part) in (2, 3):
            builder.append_interpolation(*part)
        else:
            raise TypeError(
                f"Template parts must be str or (name, value[, style]) tuples, got {part!r}"
            )
    return builder.build()


def make_template(
    text: str,
    /,
    config: LocalizationConfig | None = None,
    **values: Any,
) -> Template:
    """Build a template from a Python format string.

    Each replacement field becomes an interpolation; a format spec is used
    as the style of the value.

    Example:
        make_template("Paid {total:currency} on {day:long}", total=9.5, day=date.today())

    Args:
        text: Format string such as ``"Hello, {name}!"``
        config: Configuration (default: process-wide)
        **values: Values for the replacement fields

    Raises:
        ValueError: If ``text`` is not a valid format string
    """
    fields = list(string.Formatter().parse(text))
    builder = TemplateBuilder(
        literal_capacity=sum(len(literal) for literal, *_ in fields),
        interpolation_count=sum(1 for _, name, *_ in fields if name is not None),
        config=config,
    )
    for literal, name, format_spec, conversion in fields:
        if literal:
            builder.append_literal(literal)
        if name is None:
            continue
        if name not in values:
            report(
                builder.config,
                DiagnosticCode.MISSING_VALUE,
                f"No value given for '{name}'.",
                key=text,
                name=name,
            )
        value = values.get(name)
        if conversion:
            if conversion not in _CONVERSIONS:
                raise ValueError(f"Unknown conversion specifier {conversion}")
            value = _CONVERSIONS[conversion](value)
        builder.append_interpolation(name, value, format_spec or None)
    return builder.build()
