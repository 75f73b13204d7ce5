"""Collector for the theme update-check batch."""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from gp_translation_updater.resolution import LEGACY_TEXT_DOMAIN_FIELD, TEXT_DOMAIN_FIELD, theme_slug
from gp_translation_updater.types import GLOTPRESS_API_PATH, GLOTPRESS_API_URI, UpdateableItem

from .base import ItemCollector, service_location

logger = logging.getLogger(__name__)

# Returns the file headers of every installed theme, keyed by stylesheet.
ThemeRegistry = Callable[[], Mapping[str, Mapping[str, Any]]]

_MERGED_HEADERS = (GLOTPRESS_API_URI, GLOTPRESS_API_PATH, TEXT_DOMAIN_FIELD, LEGACY_TEXT_DOMAIN_FIELD)


class ThemeCollector(ItemCollector):
    """
    Collects themes for translation checks.

    The host does not send the GlotPress headers in the theme batch, so they
    are looked up in the installed-theme registry and merged into each record.
    """

    item_type = "theme"
    batch_field = "themes"

    def __init__(self, endpoint: str, theme_registry: ThemeRegistry | None = None) -> None:
        """
        Initialize the collector.

        Args:
            endpoint: The host theme update-check URL.
            theme_registry: Callable returning installed theme headers by stylesheet.

        """
        super().__init__(endpoint)
        self.theme_registry = theme_registry

    def marked_themes(self) -> dict[str, dict[str, Any]]:
        """
        Return the installed themes that declare a translation service.

        Returns:
            A map of stylesheet to the headers to merge into the batch record.

        """
        if self.theme_registry is None:
            return {}

        try:
            installed = self.theme_registry()
        except Exception:
            logger.exception("Theme registry lookup failed; no themes will be checked.")
            return {}

        marked: dict[str, dict[str, Any]] = {}
        for stylesheet, headers in (installed or {}).items():
            if not isinstance(headers, Mapping) or service_location(headers) is None:
                continue
            marked[str(stylesheet)] = {key: headers[key] for key in _MERGED_HEADERS if headers.get(key)}
        return marked

    def select_items(self, records: dict[str, dict[str, Any]]) -> list[UpdateableItem]:
        """Keep the batch themes that the registry marks, with the registry headers merged in."""
        marked = self.marked_themes()
        if not marked:
            return []

        items = []
        for identifier, record in records.items():
            headers = marked.get(identifier)
            if headers is None:
                continue
            fields = {**record, **headers}
            location = service_location(fields)
            if location is None:
                continue
            uri, path = location
            items.append(
                UpdateableItem(
                    identifier=identifier,
                    slug=theme_slug(identifier),
                    service_uri=uri,
                    service_path=path,
                    fields=fields,
                ),
            )
        return items
