"""Strings table consistency checks.

Compares every locale of a bundle with a base locale:

- keys of the base table missing in a translation
- keys present only in a translation
- empty values
- markers that a value drops or invents compared with its key

Usage:
    report = check_bundle(FileStringsTable("locales"), base_locale="en")
    for issue in report.issues:
        print(issue.locale, issue.kind.value, issue.key)
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Protocol

from clause.config import DEFAULT_ESCAPE
from clause.diagnostics import Severity
from clause.substitution import find_markers
from clause.tables import StringsCatalog


class IssueKind(str, Enum):
    MISSING_KEY = "missing_key"
    UNUSED_KEY = "unused_key"
    EMPTY_VALUE = "empty_value"
    DROPPED_MARKER = "dropped_marker"
    UNKNOWN_MARKER = "unknown_marker"
    MISSING_TABLE = "missing_table"

    @property
    def severity(self) -> Severity:
        if self in (IssueKind.UNKNOWN_MARKER, IssueKind.MISSING_TABLE):
            return Severity.ERROR
        return Severity.WARNING


@dataclass(frozen=True)
class Issue:
    kind: IssueKind
    locale: str
    table: str
    key: str = ""
    detail: str = ""

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind.value
        data["severity"] = self.kind.severity.value
        return data


@dataclass
class CheckReport:
    base_locale: str
    locales: list[str] = field(default_factory=list)
    issues: list[Issue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    def count(self, kind: IssueKind) -> int:
        return sum(1 for issue in self.issues if issue.kind is kind)

    def to_dict(self) -> dict[str, Any]:
        return {
            "base_locale": self.base_locale,
            "locales": self.locales,
            "ok": self.ok,
            "issues": [issue.to_dict() for issue in self.issues],
        }


class CatalogSource(Protocol):
    """Bundles that can enumerate their catalogs."""

    def catalog(self, locale: str, table: str) -> StringsCatalog | None:
        ...

    def list_locales(self) -> list[str]:
        ...

    def list_tables(self, locale: str) -> list[str]:
        ...


def check_markers(
    key: str,
    value: str,
    escape: str = DEFAULT_ESCAPE,
) -> tuple[set[str], set[str]]:
    """Return (dropped, unknown) marker names of a value compared with its key."""
    expected = {m.name for m in find_markers(key, escape)}
    found = {m.name for m in find_markers(value, escape)}
    return expected - found, found - expected


def _check_catalog(
    catalog: StringsCatalog,
    base: StringsCatalog | None,
    escape: str,
) -> list[Issue]:
    issues = []
    locale, table = catalog.locale, catalog.table

    for key, value in catalog.items():
        if not value:
            issues.append(Issue(IssueKind.EMPTY_VALUE, locale, table, key))
            continue
        dropped, unknown = check_markers(key, value, escape)
        if dropped:
            issues.append(Issue(IssueKind.DROPPED_MARKER, locale, table, key, ", ".join(sorted(dropped))))
        if unknown:
            issues.append(Issue(IssueKind.UNKNOWN_MARKER, locale, table, key, ", ".join(sorted(unknown))))

    if base is not None:
        for key in base.keys():
            if key not in catalog:
                issues.append(Issue(IssueKind.MISSING_KEY, locale, table, key))
        for key in catalog.keys():
            if key not in base:
                issues.append(Issue(IssueKind.UNUSED_KEY, locale, table, key))
    return issues


def check_bundle(
    bundle: CatalogSource,
    base_locale: str = "en",
    tables: list[str] | None = None,
    escape: str = DEFAULT_ESCAPE,
) -> CheckReport:
    """Check all locales of a bundle against the base locale.

    Args:
        bundle: Bundle to check
        base_locale: Locale every other locale is compared with
        tables: Table names to check (default: all tables of the base locale)
        escape: Marker escape character

    Returns:
        Report with all issues found
    """
    locales = bundle.list_locales()
    report = CheckReport(base_locale=base_locale, locales=locales)
    table_names = tables or bundle.list_tables(base_locale)

    for table in table_names:
        base = bundle.catalog(base_locale, table)
        if base is None:
            report.issues.append(Issue(IssueKind.MISSING_TABLE, base_locale, table))
            continue
        report.issues.extend(_check_catalog(base, None, escape))

        for locale in locales:
            if locale == base_locale:
                continue
            catalog = bundle.catalog(locale, table)
            if catalog is None:
                report.issues.append(Issue(IssueKind.MISSING_TABLE, locale, table))
                continue
            report.issues.extend(_check_catalog(catalog, base, escape))

    return report
