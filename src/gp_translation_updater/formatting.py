"""Turns translation server results into host-shaped translation update entries."""

import logging
from urllib.parse import urlencode, urlsplit, urlunsplit

from gp_translation_updater.types import ItemType, LanguagePackage, TranslationUpdateEntry, UpdateableItem

logger = logging.getLogger(__name__)

TEXT_DOMAIN_PARAM = "textdomain"


def prepare_download_url(package_url: str, text_domain: str) -> str:
    """
    Set the `textdomain` query parameter on a package download URL.

    An existing `textdomain` value is replaced. Every other query parameter is
    kept exactly as the server wrote it.

    Raises:
        ValueError: If the package URL cannot be split into its components.

    """
    parts = urlsplit(package_url)
    params = [param for param in parts.query.split("&") if param and param.split("=", 1)[0] != TEXT_DOMAIN_PARAM]
    params.append(urlencode({TEXT_DOMAIN_PARAM: text_domain}))
    return urlunsplit(parts._replace(query="&".join(params)))


class ResponseFormatter:
    """Builds TranslationUpdateEntry objects for one item type."""

    def __init__(self, item_type: ItemType) -> None:
        """
        Initialize the formatter.

        Args:
            item_type: The `type` written on every entry ('plugin' or 'theme').

        """
        self.item_type = item_type

    def format(self, item: UpdateableItem, text_domain: str, packages: list[LanguagePackage]) -> list[TranslationUpdateEntry]:
        """
        Build one entry per language package.

        The version comes from the installed item, not from the server. Every
        entry is marked for auto-update regardless of the host's policy.

        Args:
            item: The collected batch item.
            text_domain: The item's resolved text domain.
            packages: The language packages returned for the item.

        Returns:
            The entries, in the order the server returned the packages.

        """
        entries = []
        for package in packages:
            try:
                download_url = prepare_download_url(package.package, text_domain)
            except ValueError:
                logger.warning("Ignoring %s package for '%s' with invalid URL: %r", package.language, item.slug, package.package)
                continue

            entries.append(
                TranslationUpdateEntry(
                    type=self.item_type,
                    slug=item.slug,
                    language=package.language,
                    version=item.version,
                    updated=package.updated,
                    package=download_url,
                    autoupdate=True,
                ),
            )
        return entries
