"""Client for the GlotPress translation update-check endpoint."""

import json
import logging
from collections.abc import Callable, Sequence
from typing import Any

import httpx
from pydantic import ValidationError

from gp_translation_updater.config import ClientSettings
from gp_translation_updater.query_state import FailureReason, QueryFailure, preview_body
from gp_translation_updater.types import LanguagePackage, QueryResult, RemoteQueryPayload
from gp_translation_updater.urls import is_absolute_url, is_local_host

logger = logging.getLogger(__name__)

# (api_url, service_uri) -> api_url; returning None or "" disables the item.
ApiUrlFilter = Callable[[str, str], str | None]


class TranslationClient:
    """
    Queries one translation server per item for available language packages.

    Every failure is reported through the returned QueryResult and logged;
    nothing is raised to the caller.
    """

    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        api_url_filter: ApiUrlFilter | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            settings: Timeout, protocol version and transport safety settings.
            api_url_filter: Optional hook that may rewrite the per-item API URL.
            transport: Optional httpx transport, used to route requests in tests.

        """
        self.settings = settings or ClientSettings()
        self.api_url_filter = api_url_filter
        self.transport = transport
        if not self.settings.verify_ssl:
            logger.warning("TLS certificate verification is DISABLED for translation servers.")

    def get_api_url(self, service_uri: str) -> str | None:
        """
        Build the update-check URL for a service URI.

        Args:
            service_uri: The base URI declared by the package.

        Returns:
            The validated API URL, or None if the URI (or the filtered URL) is invalid.

        """
        if not is_absolute_url(service_uri):
            return None

        api_url = service_uri.rstrip("/") + "/" + self.settings.api_suffix
        if self.api_url_filter is not None:
            api_url = self.api_url_filter(api_url, service_uri)

        if not is_absolute_url(api_url):
            return None
        return api_url

    def query(
        self,
        service_uri: str,
        service_path: str,
        locales: Sequence[str],
        translations: dict[str, Any] | None = None,
    ) -> QueryResult:
        """
        POST one update-check query for a single item.

        Args:
            service_uri: The base URI of the translation server.
            service_path: The item's project path on that server.
            locales: The locales the host is interested in.
            translations: Installed translation metadata for the item's text domain.

        Returns:
            A QueryResult with the language packages, or the reason there are none.

        """
        api_url = self.get_api_url(service_uri)
        if api_url is None:
            return self._fail(FailureReason(QueryFailure.INVALID_SERVICE_URI, "Service URI is not a valid absolute URL", url=str(service_uri)))

        host = httpx.URL(api_url).host
        if not self.settings.allow_local_hosts and is_local_host(host):
            return self._fail(FailureReason(QueryFailure.LOCAL_DESTINATION, f"Refusing to query local host '{host}'", url=api_url))

        payload = RemoteQueryPayload(item=service_path, locale=list(locales), translations=translations or {})

        logger.debug("Checking translations at %s for '%s'", api_url, service_path)
        try:
            with httpx.Client(timeout=self.settings.timeout, verify=self.settings.verify_ssl, transport=self.transport) as client:
                response = client.post(api_url, json=payload.model_dump())
        except httpx.TimeoutException as e:
            return self._fail(FailureReason(QueryFailure.TRANSPORT_FAILURE, f"Request timed out: {e}", url=api_url))
        except httpx.HTTPError as e:
            return self._fail(FailureReason(QueryFailure.TRANSPORT_FAILURE, f"Request failed: {e}", url=api_url))

        if response.status_code != httpx.codes.OK:
            return self._fail(
                FailureReason(
                    QueryFailure.UNEXPECTED_STATUS,
                    "Unexpected response status",
                    url=api_url,
                    status=response.status_code,
                    body=preview_body(response.text),
                ),
            )

        packages = self._parse_packages(response, api_url)
        if not packages:
            return self._fail(
                FailureReason(
                    QueryFailure.EMPTY_RESPONSE,
                    "No language packages in response",
                    url=api_url,
                    status=response.status_code,
                    body=preview_body(response.text),
                ),
            )

        logger.debug("Received %d language package(s) from %s", len(packages), api_url)
        return QueryResult(packages=packages)

    def _parse_packages(self, response: httpx.Response, api_url: str) -> list[LanguagePackage]:
        """Decode the response body into language packages, dropping malformed descriptors."""
        try:
            body = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return []

        if isinstance(body, dict):
            # Objects keyed by language are accepted as well as plain lists
            body = list(body.values())
        if not isinstance(body, list):
            return []

        packages = []
        for descriptor in body:
            try:
                packages.append(LanguagePackage.model_validate(descriptor))
            except ValidationError:
                logger.warning("Ignoring malformed language package from %s: %r", api_url, descriptor)
        return packages

    def _fail(self, reason: FailureReason) -> QueryResult:
        if reason.failure in (QueryFailure.INVALID_SERVICE_URI, QueryFailure.LOCAL_DESTINATION):
            logger.warning("Skipping translation check: %s", reason)
        else:
            logger.error("Translation check failed: %s", reason)
        return QueryResult(failure=reason)
