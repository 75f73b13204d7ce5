"""Orchestrates one update-check cycle: collect on the way out, enrich on the way back."""

import json
import logging
from collections.abc import Mapping
from typing import Any

from .client import ApiUrlFilter, TranslationClient
from .collectors import ItemCollector, PluginCollector, ThemeCollector, ThemeRegistry, decode_field
from .config import UpdaterConfig
from .formatting import ResponseFormatter
from .resolution import resolve_text_domain
from .types import SessionState, TranslationUpdateEntry, UpdateableItem

logger = logging.getLogger(__name__)


class UpdateEngine:
    """
    Injects translation updates from GlotPress servers into host update-check responses.

    The engine holds no per-cycle state. `on_outbound_request` returns a
    SessionState that the caller hands back to `on_inbound_response` for the
    paired response, so concurrent cycles never share collected items.
    """

    def __init__(self, collector: ItemCollector, formatter: ResponseFormatter, client: TranslationClient) -> None:
        """
        Initialize the engine with its strategy pair and client.

        Args:
            collector: Extracts eligible items from the outbound batch.
            formatter: Builds host-shaped entries from server results.
            client: Queries the translation servers.

        """
        self.collector = collector
        self.formatter = formatter
        self.client = client

    @property
    def item_type(self) -> str:
        """Return the item type this engine handles."""
        return self.collector.item_type

    def on_outbound_request(self, url: str, body: Mapping[str, Any] | None) -> SessionState | None:
        """
        Observe an outbound request and collect its eligible items.

        The request itself is never modified.

        Args:
            url: The outbound request URL.
            body: The outbound request fields.

        Returns:
            None if the URL is not this engine's endpoint, otherwise a fresh SessionState.

        """
        if not self.collector.matches(url):
            return None

        try:
            return self.collector.collect(url, body)
        except Exception:
            logger.exception("Failed to collect %s items from %s; skipping translation checks.", self.item_type, url)
            return SessionState()

    def on_inbound_response(self, url: str, body: str | bytes, session: SessionState | None) -> str | bytes:
        """
        Enrich an inbound response body with translation updates.

        Args:
            url: The request URL the response belongs to.
            body: The raw JSON response body.
            session: The state returned by `on_outbound_request` for this cycle.

        Returns:
            The enriched JSON text, or `body` unchanged when nothing was added.

        """
        if session is None or not self.collector.matches(url):
            return body
        if session.consumed:
            logger.warning("Session for %s was already consumed; response passed through.", url)
            return body
        session.consumed = True
        if session.is_empty:
            return body

        try:
            payload = decode_field(body)
            if not isinstance(payload, dict):
                logger.warning("Response from %s is not a JSON object; translations not added.", url)
                return body

            enriched = self.enrich(payload, session)
            if enriched is payload:
                return body
            return json.dumps(enriched)
        except Exception:
            logger.exception("Failed to enrich %s response from %s; response passed through.", self.item_type, url)
            return body

    def enrich(self, payload: dict[str, Any], session: SessionState) -> dict[str, Any]:
        """
        Append translation update entries to a decoded response object.

        Host-authored fields are never replaced; if `translations` exists but
        is not a list the payload is returned as-is.

        Returns:
            A new dict with the entries appended, or `payload` itself when nothing was added.

        """
        existing = payload.get("translations", [])
        if not isinstance(existing, list):
            logger.warning("Response 'translations' field is not a list; translations not added.")
            return payload

        entries = self.collect_entries(session)
        if not entries:
            return payload

        logger.info("Adding %d translation update(s) for %d %s(s).", len(entries), len({e.slug for e in entries}), self.item_type)
        return {**payload, "translations": [*existing, *(entry.to_dict() for entry in entries)]}

    def collect_entries(self, session: SessionState) -> list[TranslationUpdateEntry]:
        """
        Query every collected item in insertion order and format the results.

        A failure for one item is logged and does not affect the others.
        """
        entries: list[TranslationUpdateEntry] = []
        for identifier, item in session.items.items():
            try:
                entries.extend(self._check_item(item, session))
            except Exception:
                logger.exception("Unexpected error while checking translations for %s '%s'.", self.item_type, identifier)
        return entries

    def _check_item(self, item: UpdateableItem, session: SessionState) -> list[TranslationUpdateEntry]:
        text_domain = resolve_text_domain(item.fields, item.slug)
        result = self.client.query(
            item.service_uri,
            item.service_path,
            session.locales,
            session.known_translations(text_domain),
        )
        if not result.ok:
            return []
        return self.formatter.format(item, text_domain, result.packages)


def _default_client(config: UpdaterConfig, api_url_filter: ApiUrlFilter | None) -> TranslationClient:
    return TranslationClient(config.client_settings(), api_url_filter=api_url_filter)


def plugins_updater(
    config: UpdaterConfig | None = None,
    *,
    client: TranslationClient | None = None,
    api_url_filter: ApiUrlFilter | None = None,
) -> UpdateEngine:
    """Build the engine for the plugin update-check endpoint."""
    config = config or UpdaterConfig()
    return UpdateEngine(
        collector=PluginCollector(config.endpoints.plugins),
        formatter=ResponseFormatter("plugin"),
        client=client or _default_client(config, api_url_filter),
    )


def themes_updater(
    config: UpdaterConfig | None = None,
    *,
    theme_registry: ThemeRegistry | None = None,
    client: TranslationClient | None = None,
    api_url_filter: ApiUrlFilter | None = None,
) -> UpdateEngine:
    """Build the engine for the theme update-check endpoint."""
    config = config or UpdaterConfig()
    return UpdateEngine(
        collector=ThemeCollector(config.endpoints.themes, theme_registry),
        formatter=ResponseFormatter("theme"),
        client=client or _default_client(config, api_url_filter),
    )
