"""Tests for key resolution and end-to-end localization."""

from __future__ import annotations

import pytest

from clause.config import LocalizationConfig, MissingKeyPolicy, config_context
from clause.diagnostics import DiagnosticCode, Severity
from clause.errors import LocalizationAssertionError
from clause.interpolation import Template, clause, make_template
from clause.naming import BundleProvider, StringsFileNameProvider
from clause.resolver import effective_key, localize, resolve, resolve_localization
from clause.tables import DictStringsTable, set_default_bundle


class TestEffectiveKey:
    """Test key prefixing."""

    def test_no_prefix(self):
        assert effective_key("Title") == "Title"

    def test_prefix(self):
        assert effective_key("Title", lambda key: "Settings") == "Settings.Title"

    def test_empty_prefix_is_ignored(self):
        assert effective_key("Title", lambda key: None) == "Title"
        assert effective_key("Title", lambda key: "") == "Title"


class TestResolveLocalization:
    """Test lookups."""

    def test_found(self, bundle, config, sink):
        assert resolve_localization("Greeting", bundle=bundle, config=config) == "Hello!"
        assert len(sink) == 0

    def test_missing_key_returns_key(self, config, sink):
        empty = DictStringsTable()
        assert resolve_localization("Greeting", bundle=empty, config=config) == "Greeting"

        (diagnostic,) = sink.diagnostics
        assert diagnostic.code is DiagnosticCode.KEY_NOT_FOUND
        assert diagnostic.severity is Severity.WARNING
        assert diagnostic.message == "Key 'Greeting' not found in strings file with name 'Localizable'."
        assert diagnostic.context["table"] == "Localizable"

    def test_empty_value(self, bundle, config, sink):
        assert resolve_localization("Blank", bundle=bundle, config=config) == ""
        assert sink.codes() == [DiagnosticCode.EMPTY_VALUE]

    def test_table(self, bundle, config):
        assert resolve_localization("Settings.Title", table="Settings", bundle=bundle, config=config) == "Settings"

    def test_prefix(self, bundle, config):
        result = resolve_localization("Title", table="Settings", bundle=bundle, prefix=lambda key: "Settings", config=config)
        assert result == "Settings"

    def test_missing_prefixed_key_returns_effective_key(self, bundle, config):
        result = resolve_localization("Nope", bundle=bundle, prefix=lambda key: "Home", config=config)
        assert result == "Home.Nope"

    def test_locale(self, bundle, config):
        german = config.with_options(locale="de")
        assert resolve_localization("Greeting", bundle=bundle, config=german) == "Hallo!"

    def test_fallback_locale(self, bundle, config, sink):
        austrian = config.with_options(locale="de-AT")
        assert resolve_localization("Greeting", bundle=bundle, config=austrian) == "Hallo!"
        french = config.with_options(locale="fr")
        assert resolve_localization("Greeting", bundle=bundle, config=french) == "Hello!"
        assert len(sink) == 0

    def test_sentinel_policy(self, bundle, sink):
        config = LocalizationConfig(missing_key_policy=MissingKeyPolicy.SENTINEL, sink=sink)
        assert resolve_localization("Greeting", bundle=bundle, config=config) == "Hello!"
        assert resolve_localization("Unknown", bundle=bundle, config=config) == "Unknown"
        assert sink.codes() == [DiagnosticCode.KEY_NOT_FOUND]

    def test_sentinel_policy_value_equal_to_key(self, bundle, sink):
        config = LocalizationConfig(missing_key_policy="sentinel", sink=sink)
        assert resolve_localization("Hello, @(name)", bundle=bundle, config=config) == "Hello, @(name)"
        assert sink.codes() == [DiagnosticCode.KEY_NOT_FOUND]

    def test_default_bundle(self, config):
        set_default_bundle(DictStringsTable.single({"Greeting": "Hi"}))
        assert resolve_localization("Greeting", config=config) == "Hi"

    def test_strict_mode(self, sink):
        config = LocalizationConfig(strict=True, sink=sink)
        with pytest.raises(LocalizationAssertionError, match="Key 'Greeting' not found"):
            resolve_localization("Greeting", bundle=DictStringsTable(), config=config)


class TestResolve:
    """Test resolve() and the template method."""

    def test_round_trip(self, bundle, config, sink):
        template = clause("Hello, ", ("name", "World"), config=config)
        assert resolve(template, bundle=bundle, config=config) == "Hello, World"
        assert len(sink) == 0

    def test_translated(self, bundle, config):
        german = config.with_options(locale="de")
        template = make_template("{count} new messages for {name}", config=german, count=3, name="Ada")
        assert template.localization(bundle=bundle, config=german) == "Ada hat 3 neue Nachrichten"

    def test_zero_interpolations(self, bundle, config):
        assert resolve(Template.literal("Greeting"), bundle=bundle, config=config) == "Hello!"

    def test_zero_interpolations_skip_substitution(self, config, sink):
        bundle = DictStringsTable.single({"Discount": "50% @(off)"})
        assert resolve(Template.literal("Discount"), bundle=bundle, config=config) == "50% @(off)"
        assert len(sink) == 0

    def test_missing_key_substitutes_into_key(self, config, sink):
        template = make_template("Welcome back, {name}", config=config, name="Ada")
        assert resolve(template, bundle=DictStringsTable(), config=config) == "Welcome back, Ada"
        assert sink.codes() == [DiagnosticCode.KEY_NOT_FOUND]

    def test_missing_key_with_percent(self, config):
        template = make_template("{n}% done", config=config, n=40)
        assert resolve(template, bundle=DictStringsTable(), config=config) == "40% done"

    def test_translation_with_unknown_marker(self, config, sink):
        bundle = DictStringsTable.single({"Hi @(name)": "Hi @(name), @(extra)"})
        template = make_template("Hi {name}", config=config, name="Ada")
        assert resolve(template, bundle=bundle, config=config) == "Hi @(name), @(extra)"
        assert sink.codes() == [DiagnosticCode.INVALID_PLACEHOLDER, DiagnosticCode.PLACEHOLDER_COUNT_MISMATCH]
        assert sink.diagnostics[0].context["key"] == "Hi @(name)"

    def test_styled_value(self, config):
        bundle = DictStringsTable.single({"Total: @(amount)": "Summe: @(amount)"}, locale="de")
        german = config.with_options(locale="de")
        template = clause("Total: ", ("amount", 1234.5, "currency"), config=german)
        assert resolve(template, bundle=bundle, config=german) == "Summe: 1.234,50 €"

    def test_providers(self, config):
        class Checkout(StringsFileNameProvider, BundleProvider):
            base_strings_file_name = "Checkout"
            default_bundle = DictStringsTable.single({"Pay": "Bezahlen"}, locale="en", table="Checkout")

        result = resolve(
            Template.literal("Pay"),
            table=Checkout.base_strings_file_name,
            bundle=Checkout.bundle(),
            config=config,
        )
        assert result == "Bezahlen"

    def test_default_providers(self):
        assert StringsFileNameProvider.base_strings_file_name == "Localizable"
        set_default_bundle(DictStringsTable.single({"a": "b"}))
        assert BundleProvider.bundle().lookup("a", "Localizable", "en") == "b"


class TestLocalize:
    """Test the one-call helper."""

    def test_localize(self, bundle, sink):
        with config_context(locale="de", sink=sink):
            assert localize("Hello, {name}", bundle=bundle, name="Welt") == "Hallo, Welt"
        assert len(sink) == 0

    def test_localize_uses_default_bundle(self, config):
        set_default_bundle(DictStringsTable.single({"@(n) files": "@(n) Dateien"}))
        assert localize("{n} files", config=config, n=2) == "2 Dateien"

    def test_scientific_beyond_float_range(self, config, sink):
        template = clause("N: ", ("n", 10**400, "scientific"), config=config)
        assert resolve(template, bundle=DictStringsTable(), config=config) == "N: 1E400"
        assert sink.codes() == [DiagnosticCode.KEY_NOT_FOUND]
