"""Clause: interpolation-based localization.

Write the string once, with named interpolations, and let Clause turn it
into a lookup key, fetch the translation and put the values back in:

    from clause import DictStringsTable, LocalizationConfig, make_template

    bundle = DictStringsTable({
        "de": {"Localizable": {
            "@(count) new messages for @(name)": "@(name) hat @(count) neue Nachrichten",
        }},
    })
    config = LocalizationConfig(locale="de")

    template = make_template("{count} new messages for {name}", count=3, name="Ada")
    template.raw_key                                  # "@(count) new messages for @(name)"
    template.localization(bundle=bundle, config=config)
    # -> "Ada hat 3 neue Nachrichten"

Missing keys, duplicate names and unknown markers never raise: they are
reported to the configured diagnostics sink and a fallback is returned.
"""

from clause.config import (
    LocalizationConfig,
    MissingKeyPolicy,
    UnmatchedMarkerPolicy,
    config_context,
    configure,
    get_config,
    reset_config,
    set_config,
)
from clause.diagnostics import (
    CollectingSink,
    Diagnostic,
    DiagnosticCode,
    DiagnosticSink,
    LoggingSink,
    Severity,
)
from clause.errors import (
    ClauseError,
    ConfigurationError,
    LocalizationAssertionError,
    StringsFileError,
)
from clause.formatting import DateStyle, LocaleInfo, NumberStyle, format_date, format_number
from clause.interpolation import KeyPrefix, Template, TemplateBuilder, clause, make_template
from clause.naming import DEFAULT_TABLE_NAME, BundleProvider, StringsFileNameProvider
from clause.pairing import (
    DatePairing,
    Float32Pairing,
    Float64Pairing,
    FormattablePairing,
    IntegerPairing,
    NilPairing,
    StyledPairing,
    TextPairing,
    ValuePairing,
    pairing_for,
)
from clause.resolver import localize, resolve, resolve_localization
from clause.substitution import Match, find_markers, substitute
from clause.tables import (
    DictStringsTable,
    FileStringsTable,
    StringsCatalog,
    StringsTable,
    get_default_bundle,
    parse_strings,
    set_default_bundle,
)

__version__ = "0.3.0"

__all__ = [
    # Building templates
    "Template",
    "TemplateBuilder",
    "clause",
    "make_template",
    "KeyPrefix",
    # Resolving
    "resolve",
    "resolve_localization",
    "localize",
    "substitute",
    "find_markers",
    "Match",
    # Pairings
    "ValuePairing",
    "FormattablePairing",
    "TextPairing",
    "DatePairing",
    "IntegerPairing",
    "Float32Pairing",
    "Float64Pairing",
    "NilPairing",
    "StyledPairing",
    "pairing_for",
    # Formatting
    "NumberStyle",
    "DateStyle",
    "LocaleInfo",
    "format_number",
    "format_date",
    # Tables
    "StringsTable",
    "StringsCatalog",
    "DictStringsTable",
    "FileStringsTable",
    "parse_strings",
    "get_default_bundle",
    "set_default_bundle",
    # Naming
    "DEFAULT_TABLE_NAME",
    "StringsFileNameProvider",
    "BundleProvider",
    # Configuration
    "LocalizationConfig",
    "MissingKeyPolicy",
    "UnmatchedMarkerPolicy",
    "get_config",
    "set_config",
    "configure",
    "reset_config",
    "config_context",
    # Diagnostics
    "Diagnostic",
    "DiagnosticCode",
    "DiagnosticSink",
    "Severity",
    "LoggingSink",
    "CollectingSink",
    # Errors
    "ClauseError",
    "ConfigurationError",
    "StringsFileError",
    "LocalizationAssertionError",
    "__version__",
]
