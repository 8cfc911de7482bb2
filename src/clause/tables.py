"""Localized strings tables.

A *bundle* answers ``lookup(key, table, locale)`` for one or more named
tables ("Localizable", "Settings", ...) in one or more locales. Two
bundles are provided:

- ``DictStringsTable``: in-memory tables, handy for tests and for
  applications that keep their strings in code.
- ``FileStringsTable``: tables read from a directory, lazily and cached.

File layout for ``FileStringsTable("locales")``:

    locales/
    ├── en/
    │   ├── Localizable.strings
    │   └── Settings.yaml
    ├── de.lproj/               # Apple bundle layout is accepted as well
    │   └── Localizable.strings
    └── ko/
        └── Localizable.json

``.strings`` files use the Apple format:

    /* Greeting on the start screen */
    "Hello, @(name)!" = "Hallo, @(name)!";

JSON and YAML files hold (possibly nested) mappings; nested keys are
joined with dots.
"""

from __future__ import annotations

import json
import logging
import re
import threading
from pathlib import Path
from typing import Any, Iterator, Mapping, Protocol, runtime_checkable

import yaml

from clause.config import LocalizationConfig, resolve_config
from clause.diagnostics import DiagnosticCode, report
from clause.errors import StringsFileError
from clause.formatting import LocaleInfo

logger = logging.getLogger(__name__)

BASE_LOCALE = "Base"
STRINGS_EXTENSIONS = (".strings", ".json", ".yaml", ".yml")


# =============================================================================
# Catalog
# =============================================================================


class StringsCatalog:
    """Entries of one table in one locale."""

    def __init__(self, locale: str, table: str, entries: Mapping[str, Any] | None = None):
        self.locale = locale
        self.table = table
        self._entries: dict[str, str] = {}
        if entries:
            self._load_dict(entries)

    def _load_dict(self, data: Mapping[str, Any], prefix: str = "") -> None:
        for key, value in data.items():
            full_key = f"{prefix}.{key}" if prefix else str(key)
            if isinstance(value, Mapping):
                self._load_dict(value, full_key)
            else:
                self._entries[full_key] = "" if value is None else str(value)

    def get(self, key: str) -> str | None:
        return self._entries.get(key)

    def keys(self) -> list[str]:
        return list(self._entries)

    def items(self) -> Iterator[tuple[str, str]]:
        return iter(self._entries.items())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __repr__(self) -> str:
        return f"StringsCatalog({self.locale!r}, {self.table!r}, {len(self)} entries)"


# =============================================================================
# Bundle protocol
# =============================================================================


@runtime_checkable
class StringsTable(Protocol):
    """Read access to localized strings."""

    def lookup(
        self,
        key: str,
        table: str,
        locale: str,
        default: str | None = None,
    ) -> str | None:
        """Look up a key.

        Args:
            key: Effective lookup key
            table: Table name
            locale: Locale code, looked up exactly (no fallback)
            default: Returned when the key is missing

        Returns:
            The entry, or ``default``
        """
        ...


def fallback_chain(locale: str, fallback_locale: str | None = None) -> list[str]:
    """Locales to try for a lookup, most specific first.

    Example:
        fallback_chain("de-AT", "en")  # ["de-AT", "de_AT", "de", "en", "Base"]
    """
    info = LocaleInfo.parse(locale)
    chain = [locale, info.key, info.language]
    if fallback_locale:
        chain.append(fallback_locale)
    chain.append(BASE_LOCALE)
    return list(dict.fromkeys(c for c in chain if c))


class DictStringsTable:
    """In-memory bundle.

    Example:
        bundle = DictStringsTable({
            "de": {"Localizable": {"Hello, @(name)!": "Hallo, @(name)!"}},
        })
        bundle.lookup("Hello, @(name)!", "Localizable", "de")  # "Hallo, @(name)!"
    """

    def __init__(self, data: Mapping[str, Mapping[str, Mapping[str, Any]]] | None = None):
        """Initialize with tables.

        Args:
            data: locale -> table name -> entries
        """
        self._catalogs: dict[tuple[str, str], StringsCatalog] = {}
        self._lock = threading.RLock()
        for locale, tables in (data or {}).items():
            for table, entries in tables.items():
                self.register(locale, table, entries)

    @classmethod
    def single(
        cls,
        entries: Mapping[str, Any],
        locale: str = "en",
        table: str = "Localizable",
    ) -> "DictStringsTable":
        """Bundle holding one table in one locale."""
        return cls({locale: {table: entries}})

    def register(self, locale: str, table: str, entries: Mapping[str, Any]) -> StringsCatalog:
        """Add or replace a table."""
        catalog = StringsCatalog(locale, table, entries)
        with self._lock:
            self._catalogs[(locale, table)] = catalog
        return catalog

    def catalog(self, locale: str, table: str) -> StringsCatalog | None:
        with self._lock:
            return self._catalogs.get((locale, table))

    def list_locales(self) -> list[str]:
        with self._lock:
            return sorted({locale for locale, _ in self._catalogs})

    def list_tables(self, locale: str) -> list[str]:
        with self._lock:
            return sorted(table for loc, table in self._catalogs if loc == locale)

    def lookup(
        self,
        key: str,
        table: str,
        locale: str,
        default: str | None = None,
    ) -> str | None:
        catalog = self.catalog(locale, table)
        if catalog is None:
            return default
        value = catalog.get(key)
        return default if value is None else value


class FileStringsTable:
    """Bundle backed by a directory of strings files.

    Files are parsed on first use and cached. A file that cannot be read
    or parsed is reported as ``TABLE_LOAD_FAILED`` and treated as empty.
    """

    def __init__(
        self,
        directory: str | Path,
        extensions: tuple[str, ...] = STRINGS_EXTENSIONS,
        config: LocalizationConfig | None = None,
    ):
        """Initialize file bundle.

        Args:
            directory: Root directory holding one folder per locale
            extensions: File extensions to try, in order
            config: Configuration used for load diagnostics
        """
        self.directory = Path(directory)
        self.extensions = extensions
        self._config = config
        self._cache: dict[tuple[str, str], StringsCatalog | None] = {}
        self._lock = threading.RLock()

    def _locale_dirs(self, locale: str) -> list[Path]:
        return [self.directory / locale, self.directory / f"{locale}.lproj"]

    def _get_file_path(self, locale: str, table: str) -> Path | None:
        for locale_dir in self._locale_dirs(locale):
            for ext in self.extensions:
                path = locale_dir / f"{table}{ext}"
                if path.is_file():
                    return path
        return None

    def catalog(self, locale: str, table: str) -> StringsCatalog | None:
        """Get (loading if needed) the catalog of a table."""
        with self._lock:
            cache_key = (locale, table)
            if cache_key in self._cache:
                return self._cache[cache_key]

            path = self._get_file_path(locale, table)
            catalog = None
            if path is not None:
                try:
                    catalog = StringsCatalog(locale, table, load_strings_file(path))
                    logger.debug(f"Loaded {len(catalog)} entries from {path}")
                except (OSError, UnicodeDecodeError, StringsFileError, yaml.YAMLError, json.JSONDecodeError) as e:
                    report(
                        resolve_config(self._config),
                        DiagnosticCode.TABLE_LOAD_FAILED,
                        f"Failed to load strings file {path}: {e}",
                        table=table,
                        locale=locale,
                        path=str(path),
                    )
                    catalog = StringsCatalog(locale, table)
            self._cache[cache_key] = catalog
            return catalog

    def lookup(
        self,
        key: str,
        table: str,
        locale: str,
        default: str | None = None,
    ) -> str | None:
        catalog = self.catalog(locale, table)
        if catalog is None:
            return default
        value = catalog.get(key)
        return default if value is None else value

    def list_locales(self) -> list[str]:
        """Locales that have at least one strings file."""
        if not self.directory.is_dir():
            return []
        locales = set()
        for child in self.directory.iterdir():
            if child.is_dir() and not child.name.startswith((".", "_")):
                name = child.name.removesuffix(".lproj")
                if self.list_tables(name):
                    locales.add(name)
        return sorted(locales)

    def list_tables(self, locale: str) -> list[str]:
        tables = set()
        for locale_dir in self._locale_dirs(locale):
            if locale_dir.is_dir():
                tables.update(p.stem for p in locale_dir.iterdir() if p.suffix in self.extensions)
        return sorted(tables)

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()


# =============================================================================
# File parsing
# =============================================================================


_STRINGS_TOKEN = re.compile(
    r"""
    (?P<ws>\s+)
    |(?P<comment>/\*.*?\*/|//[^\n]*)
    |(?P<string>"(?:[^"\\]|\\.)*")
    |(?P<word>[A-Za-z0-9_.$:/\-]+)
    |(?P<punct>[=;])
    """,
    re.DOTALL | re.VERBOSE,
)

_STRINGS_ESCAPE = re.compile(r"\\(U[0-9a-fA-F]{4}|u[0-9a-fA-F]{4}|.)", re.DOTALL)
_SIMPLE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0"}


def _unescape(text: str) -> str:
    def replace(match: re.Match[str]) -> str:
        escape = match.group(1)
        if len(escape) == 5:
            return chr(int(escape[1:], 16))
        return _SIMPLE_ESCAPES.get(escape, escape)

    result = _STRINGS_ESCAPE.sub(replace, text)
    # \U escapes may spell UTF-16 surrogate pairs
    return result.encode("utf-16", "surrogatepass").decode("utf-16")


def parse_strings(text: str, path: str | Path | None = None) -> dict[str, str]:
    """Parse the contents of an Apple ``.strings`` file.

    Args:
        text: File contents
        path: File path for error messages

    Returns:
        Entries in file order

    Raises:
        StringsFileError: On malformed input
    """
    entries: dict[str, str] = {}
    pending: list[str] = []  # key, then "=", then value
    pos = 0

    while pos < len(text):
        match = _STRINGS_TOKEN.match(text, pos)
        if match is None:
            line = text.count("\n", 0, pos) + 1
            raise StringsFileError(f"Unexpected input {text[pos:pos + 10]!r}", path, line)
        pos = match.end()
        kind = match.lastgroup
        token = match.group()

        if kind in ("ws", "comment"):
            continue
        if kind in ("string", "word"):
            value = _unescape(token[1:-1]) if kind == "string" else token
            if len(pending) in (0, 2):
                pending.append(value)
                continue
        elif token == "=" and len(pending) == 1:
            pending.append(token)
            continue
        elif token == ";" and len(pending) in (1, 3):
            # A lone "key"; maps the key to itself.
            entries[pending[0]] = pending[-1]
            pending.clear()
            continue

        line = text.count("\n", 0, match.start()) + 1
        raise StringsFileError(f"Unexpected {token!r}", path, line)

    if pending:
        raise StringsFileError("Missing ';' at end of file", path, text.count("\n") + 1)
    return entries


def _read_text(path: Path) -> str:
    raw = path.read_bytes()
    # .strings files are frequently UTF-16
    if raw.startswith((b"\xff\xfe", b"\xfe\xff")):
        return raw.decode("utf-16")
    return raw.decode("utf-8-sig")


def load_strings_file(path: str | Path) -> dict[str, Any]:
    """Load a ``.strings``, JSON or YAML strings file.

    Raises:
        StringsFileError: If the file is malformed or has an unknown format
        OSError: If the file cannot be read
    """
    path = Path(path)
    if path.suffix == ".strings":
        return parse_strings(_read_text(path), path)

    if path.suffix == ".json":
        data = json.loads(_read_text(path))
    elif path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(_read_text(path))
    else:
        raise StringsFileError(f"Unsupported strings file format: {path.suffix}", path)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise StringsFileError("Strings file must contain a mapping", path)
    return data


# =============================================================================
# Default bundle
# =============================================================================


_default_bundle: StringsTable = DictStringsTable()
_bundle_lock = threading.Lock()


def get_default_bundle() -> StringsTable:
    """Bundle used when a call does not pass one."""
    return _default_bundle


def set_default_bundle(bundle: StringsTable) -> None:
    global _default_bundle
    with _bundle_lock:
        _default_bundle = bundle


def reset_default_bundle() -> None:
    """Restore an empty default bundle (for testing)."""
    set_default_bundle(DictStringsTable())
