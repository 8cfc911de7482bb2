"""Tests for configuration, diagnostics and errors."""

from __future__ import annotations

import json
import logging

import pytest

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
from clause.diagnostics import CollectingSink, Diagnostic, DiagnosticCode, LoggingSink, Severity, report
from clause.errors import ClauseError, ConfigurationError, LocalizationAssertionError


class TestLocalizationConfig:
    """Test LocalizationConfig validation."""

    def test_defaults(self):
        config = LocalizationConfig()
        assert config.escape == "@"
        assert config.table == "Localizable"
        assert config.locale == "en"
        assert config.missing_key_policy is MissingKeyPolicy.FALLBACK
        assert config.unmatched_policy is UnmatchedMarkerPolicy.ABORT
        assert config.strict is False
        assert isinstance(config.sink, LoggingSink)

    @pytest.mark.parametrize("escape", ["", "@@", "a", "1", " ", "%", "(", ")", "\\"])
    def test_invalid_escape(self, escape):
        with pytest.raises(ConfigurationError):
            LocalizationConfig(escape=escape)

    @pytest.mark.parametrize("escape", ["#", "$", "~", "§"])
    def test_valid_escape(self, escape):
        assert LocalizationConfig(escape=escape).escape == escape

    def test_empty_table(self):
        with pytest.raises(ConfigurationError):
            LocalizationConfig(table="")

    def test_policies_from_strings(self):
        config = LocalizationConfig(missing_key_policy="SENTINEL", unmatched_policy="empty")
        assert config.missing_key_policy is MissingKeyPolicy.SENTINEL
        assert config.unmatched_policy is UnmatchedMarkerPolicy.EMPTY

    def test_invalid_policy(self):
        with pytest.raises(ConfigurationError, match="Valid values are"):
            LocalizationConfig(unmatched_policy="ignore")

    def test_with_options(self):
        config = LocalizationConfig().with_options(locale="de")
        assert config.locale == "de"
        with pytest.raises(ConfigurationError, match="Unknown configuration keys"):
            config.with_options(colour="blue")

    def test_sink_is_not_compared(self):
        assert LocalizationConfig(sink=CollectingSink()) == LocalizationConfig()


class TestConfigSources:
    """Test environment and file sources."""

    def test_from_env(self):
        environ = {
            "CLAUSE_ESCAPE": "#",
            "CLAUSE_LOCALE": "de",
            "CLAUSE_STRICT": "true",
            "CLAUSE_MISSING_KEY_POLICY": "sentinel",
            "OTHER": "ignored",
        }
        config = LocalizationConfig.from_env(environ)
        assert config.escape == "#"
        assert config.locale == "de"
        assert config.strict is True
        assert config.missing_key_policy is MissingKeyPolicy.SENTINEL

    def test_from_env_keeps_base(self):
        sink = CollectingSink()
        config = LocalizationConfig.from_env({}, base=LocalizationConfig(sink=sink, table="App"))
        assert config.table == "App"
        assert config.sink is sink

    def test_from_env_uses_os_environ(self, monkeypatch):
        monkeypatch.setenv("CLAUSE_TABLE", "Main")
        assert LocalizationConfig.from_env().table == "Main"

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "clause.yaml"
        path.write_text("clause:\n  locale: fr\n  strict: no\n", encoding="utf-8")
        config = LocalizationConfig.from_file(path)
        assert config.locale == "fr"
        assert config.strict is False

    def test_from_json(self, tmp_path):
        path = tmp_path / "clause.json"
        path.write_text(json.dumps({"escape": "$", "table": "App"}), encoding="utf-8")
        config = LocalizationConfig.from_file(path)
        assert config.escape == "$"
        assert config.table == "App"

    def test_from_toml(self, tmp_path):
        path = tmp_path / "clause.toml"
        path.write_text('[clause]\nunmatched_policy = "empty"\n', encoding="utf-8")
        assert LocalizationConfig.from_file(path).unmatched_policy is UnmatchedMarkerPolicy.EMPTY

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found") as exc_info:
            LocalizationConfig.from_file(tmp_path / "missing.yaml")
        assert exc_info.value.config_path == tmp_path / "missing.yaml"

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "clause.ini"
        path.write_text("[clause]", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Unsupported"):
            LocalizationConfig.from_file(path)

    def test_invalid_file(self, tmp_path):
        path = tmp_path / "clause.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Invalid config file"):
            LocalizationConfig.from_file(path)

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "clause.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="mapping"):
            LocalizationConfig.from_file(path)


class TestProcessConfig:
    """Test the process-wide default."""

    def test_configure(self):
        updated = configure(locale="ko")
        assert get_config() is updated
        assert get_config().locale == "ko"
        reset_config()
        assert get_config().locale == "en"

    def test_set_config(self):
        config = LocalizationConfig(escape="#")
        set_config(config)
        assert get_config() is config

    def test_config_context(self):
        with config_context(strict=True) as config:
            assert config.strict is True
            assert get_config() is config
        assert get_config().strict is False

    def test_config_context_restores_on_error(self):
        with pytest.raises(RuntimeError):
            with config_context(locale="de"):
                raise RuntimeError("boom")
        assert get_config().locale == "en"


class TestDiagnostics:
    """Test diagnostics and sinks."""

    def test_severity(self):
        assert DiagnosticCode.KEY_NOT_FOUND.severity is Severity.WARNING
        assert DiagnosticCode.DUPLICATE_PARAMETER.severity is Severity.ERROR
        assert Severity.ERROR.log_level == logging.ERROR
        assert all(code.severity in Severity for code in DiagnosticCode)

    def test_report(self, config, sink):
        diagnostic = report(config, DiagnosticCode.EMPTY_VALUE, "empty", key="k")
        assert sink.diagnostics == [diagnostic]
        assert diagnostic.context == {"key": "k"}
        assert str(diagnostic) == "empty"

    def test_logging_sink(self, caplog):
        config = LocalizationConfig()
        with caplog.at_level(logging.WARNING, logger="clause"):
            report(config, DiagnosticCode.KEY_NOT_FOUND, "Key 'x' not found", key="x")
            report(config, DiagnosticCode.FORMAT_FAILED, "Failed")
        levels = [(r.levelno, r.getMessage()) for r in caplog.records]
        assert levels == [(logging.WARNING, "Key 'x' not found"), (logging.ERROR, "Failed")]
        assert caplog.records[0].clause_code == "key_not_found"

    def test_failing_sink_does_not_raise(self):
        def broken(diagnostic: Diagnostic) -> None:
            raise RuntimeError("sink down")

        config = LocalizationConfig(sink=broken)
        assert report(config, DiagnosticCode.EMPTY_VALUE, "empty").code is DiagnosticCode.EMPTY_VALUE

    def test_strict_report(self, sink):
        config = LocalizationConfig(strict=True, sink=sink)
        with pytest.raises(LocalizationAssertionError) as exc_info:
            report(config, DiagnosticCode.KEY_NOT_FOUND, "missing", key="k")
        error = exc_info.value
        assert isinstance(error, AssertionError)
        assert error.details == {"code": "key_not_found", "key": "k"}
        assert len(sink) == 1

    def test_collecting_sink(self):
        forwarded = []
        sink = CollectingSink(forward=forwarded.append)
        config = LocalizationConfig(sink=sink)
        report(config, DiagnosticCode.EMPTY_VALUE, "a")
        report(config, DiagnosticCode.MISSING_VALUE, "b")

        assert [d.message for d in sink] == ["a", "b"]
        assert [d.message for d in sink.by_severity(Severity.ERROR)] == ["b"]
        assert len(forwarded) == 2
        sink.clear()
        assert len(sink) == 0


class TestErrors:
    """Test the exception hierarchy."""

    def test_hint_in_str(self):
        error = ClauseError("Bad thing", hint="Do this")
        assert str(error) == "Bad thing\nHint: Do this"

    def test_configuration_error_is_value_error(self):
        assert issubclass(ConfigurationError, ValueError)
        assert issubclass(ConfigurationError, ClauseError)
