"""Defines the base class for outbound batch collectors."""

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar

from gp_translation_updater.query_state import FailureReason, QueryFailure
from gp_translation_updater.types import GLOTPRESS_API_PATH, GLOTPRESS_API_URI, ItemType, SessionState, UpdateableItem
from gp_translation_updater.urls import is_absolute_url

logger = logging.getLogger(__name__)


def decode_field(value: Any) -> Any:  # noqa: ANN401
    """
    Decode a batch field that may arrive as JSON text or as an already-decoded value.

    Returns:
        The decoded value, or None if the text is not valid JSON.

    """
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return None
    return value


def service_location(record: Mapping[str, Any]) -> tuple[str, str] | None:
    """Return the (URI, path) pair a record declares, or None unless both are non-empty strings."""
    uri = record.get(GLOTPRESS_API_URI)
    path = record.get(GLOTPRESS_API_PATH)
    if not isinstance(uri, str) or not uri.strip():
        return None
    if not isinstance(path, str) or not path.strip():
        return None
    return uri.strip(), path.strip()


class ItemCollector(ABC):
    """
    Abstract base class for collecting eligible items from an outbound update-check batch.

    Subclasses declare which body field holds the batch and how a batch
    record becomes an UpdateableItem.
    """

    item_type: ClassVar[ItemType]
    batch_field: ClassVar[str]

    def __init__(self, endpoint: str) -> None:
        """
        Initialize the collector.

        Args:
            endpoint: The host update-check URL this collector responds to.

        """
        self.endpoint = endpoint

    def matches(self, url: str) -> bool:
        """Check if a URL is this collector's update-check endpoint."""
        return is_absolute_url(url) and self.endpoint in url

    def collect(self, url: str, body: Mapping[str, Any] | None) -> SessionState | None:
        """
        Extract eligible items, locales and known translations from an outbound request.

        Args:
            url: The outbound request URL.
            body: The outbound request fields.

        Returns:
            None if the URL is not this collector's endpoint, otherwise a fresh
            SessionState (empty when the batch is malformed).

        """
        if not self.matches(url):
            return None

        session = SessionState()
        if not isinstance(body, Mapping):
            logger.debug("Outbound %s batch has no readable body.", self.item_type)
            return session

        raw_batch = body.get(self.batch_field)
        batch = decode_field(raw_batch)
        if raw_batch is not None and not isinstance(batch, dict):
            reason = FailureReason(QueryFailure.MALFORMED_INPUT, f"Outbound '{self.batch_field}' field is not a JSON object", url=url)
            logger.warning("Skipping %s translation checks: %s", self.item_type, reason)
            return session

        records = self._item_records(batch)
        if not records:
            logger.debug("Outbound %s batch contains no items.", self.item_type)
            return session

        session.locales = self._locales(body, batch)
        session.translations = self._known_translations(body, batch)

        for item in self.select_items(records):
            session.items[item.identifier] = item

        logger.debug(
            "Collected %d of %d %s(s) with a translation service.",
            len(session.items),
            len(records),
            self.item_type,
        )
        return session

    @abstractmethod
    def select_items(self, records: dict[str, dict[str, Any]]) -> list[UpdateableItem]:
        """
        Turn batch records into the items that declare a translation service.

        Args:
            records: The batch's `{identifier: record}` map.

        Returns:
            The eligible items, in batch order.

        """
        raise NotImplementedError

    def _item_records(self, batch: Any) -> dict[str, dict[str, Any]]:  # noqa: ANN401
        """
        Return the `{identifier: record}` map of a batch.

        The map is either the batch itself or nested under the batch field name.
        Entries whose record is not an object are dropped.
        """
        if not isinstance(batch, dict):
            return {}
        nested = batch.get(self.batch_field)
        item_map = nested if isinstance(nested, dict) else batch
        return {str(key): record for key, record in item_map.items() if isinstance(record, dict)}

    def _locales(self, body: Mapping[str, Any], batch: Any) -> list[str]:  # noqa: ANN401
        """Read the requested locales, preferring the top-level body over the batch."""
        for source in (body, batch):
            if not isinstance(source, Mapping):
                continue
            locales = decode_field(source.get("locale"))
            if isinstance(locales, list):
                return [locale for locale in locales if isinstance(locale, str) and locale]
        return []

    def _known_translations(self, body: Mapping[str, Any], batch: Any) -> dict[str, Any]:  # noqa: ANN401
        """Read installed translation metadata keyed by text domain."""
        for source in (body, batch):
            if not isinstance(source, Mapping):
                continue
            translations = decode_field(source.get("translations"))
            if isinstance(translations, dict):
                return translations
        return {}
