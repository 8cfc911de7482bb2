"""Key resolution.

Turns a template key into its localized string and hands the result to
the substitution engine:

    template = make_template("Hello, {name}!", name="World")
    resolve(template, bundle=bundle)          # "Hallo, World!"
    template.localization(table="Greetings")  # same, method form

A missing key resolves to the key itself and an empty entry to the empty
string; both are reported as warnings.
"""

from __future__ import annotations

from typing import Any

from clause.config import LocalizationConfig, MissingKeyPolicy, resolve_config
from clause.diagnostics import DiagnosticCode, report
from clause.interpolation import KeyPrefix, Template, make_template
from clause.substitution import substitute
from clause.tables import StringsTable, fallback_chain, get_default_bundle


def effective_key(raw_key: str, prefix: KeyPrefix | None = None) -> str:
    """Apply the optional key prefix: ``"Settings" + "." + raw_key``."""
    if prefix is not None:
        value = prefix(raw_key)
        if value:
            return f"{value}.{raw_key}"
    return raw_key


def _lookup(
    bundle: StringsTable,
    key: str,
    table: str,
    config: LocalizationConfig,
) -> str | None:
    for locale in fallback_chain(config.locale, config.fallback_locale):
        if config.missing_key_policy is MissingKeyPolicy.SENTINEL:
            value = bundle.lookup(key, table, locale, default=key)
            if value is not None and value != key:
                return value
        else:
            value = bundle.lookup(key, table, locale)
            if value is not None:
                return value
    return None


def resolve_localization(
    raw_key: str,
    table: str | None = None,
    bundle: StringsTable | None = None,
    prefix: KeyPrefix | None = None,
    config: LocalizationConfig | None = None,
) -> str:
    """Fetch the localized string for a key.

    Args:
        raw_key: Template key
        table: Table name (default: ``config.table``)
        bundle: Strings bundle (default: process default bundle)
        prefix: Optional function returning a key prefix for ``raw_key``
        config: Configuration (default: process-wide)

    Returns:
        The localized string, or the effective key when it is missing
    """
    config = resolve_config(config)
    table = table or config.table
    bundle = bundle if bundle is not None else get_default_bundle()
    key = effective_key(raw_key, prefix)

    value = _lookup(bundle, key, table, config)
    if value is None:
        report(
            config,
            DiagnosticCode.KEY_NOT_FOUND,
            f"Key '{key}' not found in strings file with name '{table}'.",
            key=key,
            table=table,
            locale=config.locale,
        )
        return key
    if not value:
        report(
            config,
            DiagnosticCode.EMPTY_VALUE,
            f"Value for key '{key}' is empty in strings file with name '{table}'.",
            key=key,
            table=table,
            locale=config.locale,
        )
    return value


def resolve(
    template: Template,
    table: str | None = None,
    bundle: StringsTable | None = None,
    prefix: KeyPrefix | None = None,
    config: LocalizationConfig | None = None,
) -> str:
    """Localize a template.

    Templates without arguments return the looked-up string unchanged;
    otherwise markers are substituted with the argument values.
    """
    config = resolve_config(config)
    resolved = resolve_localization(template.raw_key, table, bundle, prefix, config)
    if not template.arguments:
        return resolved
    return substitute(
        resolved,
        template.arguments,
        config,
        key=template.raw_key,
        table=table or config.table,
        locale=config.locale,
    )


def localize(
    text: str,
    /,
    table: str | None = None,
    bundle: StringsTable | None = None,
    prefix: KeyPrefix | None = None,
    config: LocalizationConfig | None = None,
    **values: Any,
) -> str:
    """Build a template from a format string and resolve it in one call.

    Example:
        localize("You have {count} new messages", count=3)
    """
    return resolve(make_template(text, config=config, **values), table, bundle, prefix, config)
