"""Slug and text domain resolution for batch items."""

from collections.abc import Mapping
from typing import Any

TEXT_DOMAIN_FIELD = "Text Domain"
LEGACY_TEXT_DOMAIN_FIELD = "TextDomain"


def resolve_text_domain(fields: Mapping[str, Any], slug: str) -> str:
    """
    Resolve the text domain under which an item's translations are registered.

    The explicit 'Text Domain' header wins, then the legacy 'TextDomain' key,
    then the slug itself. Empty values are treated as absent.

    Args:
        fields: The item's batch record.
        slug: The item's slug, used as the fallback.

    Returns:
        The resolved text domain.

    """
    for key in (TEXT_DOMAIN_FIELD, LEGACY_TEXT_DOMAIN_FIELD):
        value = fields.get(key)
        if isinstance(value, str) and value:
            return value
    return slug


def plugin_slug(identifier: str) -> str:
    """Return the slug of a plugin batch key ('slug/entry-file.php' -> 'slug')."""
    return identifier.split("/", 1)[0]


def theme_slug(identifier: str) -> str:
    """Theme batch keys are the stylesheet, which is already the slug."""
    return identifier
