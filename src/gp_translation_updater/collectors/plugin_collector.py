"""Collector for the plugin update-check batch."""

from typing import Any

from gp_translation_updater.resolution import plugin_slug
from gp_translation_updater.types import UpdateableItem

from .base import ItemCollector, service_location


class PluginCollector(ItemCollector):
    """Plugin records already carry the GlotPress headers, so they are read directly."""

    item_type = "plugin"
    batch_field = "plugins"

    def select_items(self, records: dict[str, dict[str, Any]]) -> list[UpdateableItem]:
        """Keep the plugins that declare both a service URI and a service path."""
        items = []
        for identifier, record in records.items():
            location = service_location(record)
            if location is None:
                continue
            uri, path = location
            items.append(
                UpdateableItem(
                    identifier=identifier,
                    slug=plugin_slug(identifier),
                    service_uri=uri,
                    service_path=path,
                    fields=dict(record),
                ),
            )
        return items
