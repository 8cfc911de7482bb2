"""Default table and bundle naming.

Classes that own localized strings can mix these in to declare which
table and which bundle their templates are resolved against:

    class CheckoutScreen(StringsFileNameProvider, BundleProvider):
        base_strings_file_name = "Checkout"

    resolve(template, table=CheckoutScreen.base_strings_file_name,
            bundle=CheckoutScreen.bundle())
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from clause.tables import StringsTable

DEFAULT_TABLE_NAME = "Localizable"


class StringsFileNameProvider:
    """Supplies the strings table name, ``"Localizable"`` unless overridden."""

    base_strings_file_name: ClassVar[str] = DEFAULT_TABLE_NAME


class BundleProvider:
    """Supplies the bundle, the process default bundle unless overridden."""

    default_bundle: ClassVar["StringsTable | None"] = None

    @classmethod
    def bundle(cls) -> "StringsTable":
        if cls.default_bundle is not None:
            return cls.default_bundle
        from clause.tables import get_default_bundle

        return get_default_bundle()
