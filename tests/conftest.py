"""Shared fixtures for Clause tests."""

from __future__ import annotations

import pytest

from clause.config import LocalizationConfig, reset_config
from clause.diagnostics import CollectingSink
from clause.tables import DictStringsTable, reset_default_bundle


@pytest.fixture(autouse=True)
def reset_globals():
    """Restore the process-wide config and bundle around each test."""
    reset_config()
    reset_default_bundle()
    yield
    reset_config()
    reset_default_bundle()


@pytest.fixture
def sink() -> CollectingSink:
    """Sink recording every diagnostic."""
    return CollectingSink()


@pytest.fixture
def config(sink: CollectingSink) -> LocalizationConfig:
    """Default configuration reporting to ``sink``."""
    return LocalizationConfig(sink=sink)


@pytest.fixture
def bundle() -> DictStringsTable:
    """Bundle with English and German tables."""
    return DictStringsTable({
        "en": {
            "Localizable": {
                "Greeting": "Hello!",
                "Hello, @(name)": "Hello, @(name)",
                "@(count) new messages for @(name)": "@(name) has @(count) new messages",
                "Blank": "",
            },
            "Settings": {
                "Settings.Title": "Settings",
            },
        },
        "de": {
            "Localizable": {
                "Greeting": "Hallo!",
                "Hello, @(name)": "Hallo, @(name)",
                "@(count) new messages for @(name)": "@(name) hat @(count) neue Nachrichten",
            },
        },
    })
