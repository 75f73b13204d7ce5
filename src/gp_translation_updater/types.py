"""Defines shared data structures and types for the translation updater."""

from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gp_translation_updater.query_state import FailureReason
from gp_translation_updater.urls import is_absolute_url

# Package header names carrying the translation service location.
GLOTPRESS_API_URI = "GlotPress API URI"
GLOTPRESS_API_PATH = "GlotPress API Path"

ItemType = Literal["plugin", "theme"]


@dataclass
class UpdateableItem:
    """
    A package from the outbound batch that declares a translation service.

    Attributes:
        identifier: The key of the item in the host's batch (e.g. 'my-plugin/my-plugin.php').
        slug: The package slug derived from the identifier.
        service_uri: The base URI of the item's GlotPress translation server.
        service_path: The project path of the item on that server.
        fields: The raw batch record, used for version and text domain lookups.

    """

    identifier: str
    slug: str
    service_uri: str
    service_path: str
    fields: dict[str, Any] = field(default_factory=dict)

    @property
    def version(self) -> str:
        """Return the installed version reported in the batch record."""
        version = self.fields.get("Version")
        return str(version) if version is not None else ""


@dataclass
class SessionState:
    """
    Scratch state bridging one outbound request to its paired inbound response.

    A fresh instance is created for every request-phase call and handed back
    explicitly to the response phase, which consumes it exactly once.
    """

    items: dict[str, UpdateableItem] = field(default_factory=dict)
    locales: list[str] = field(default_factory=list)
    translations: dict[str, Any] = field(default_factory=dict)
    consumed: bool = False

    @property
    def is_empty(self) -> bool:
        """Check if no items were collected."""
        return not self.items

    def known_translations(self, text_domain: str) -> dict[str, Any]:
        """Return the installed translation metadata for one text domain."""
        known = self.translations.get(text_domain)
        return known if isinstance(known, dict) else {}


class RemoteQueryPayload(BaseModel):
    """The JSON body POSTed to a translation server for one item."""

    item: str
    locale: list[str] = Field(default_factory=list)
    translations: dict[str, Any] = Field(default_factory=dict)


class LanguagePackage(BaseModel):
    """A single language descriptor returned by a translation server."""

    model_config = ConfigDict(extra="ignore")

    language: str = Field(min_length=1)
    updated: Any = None
    package: str

    @field_validator("package")
    @classmethod
    def _require_absolute_package_url(cls, value: str) -> str:
        if not is_absolute_url(value):
            msg = f"Package must be an absolute http(s) URL, got {value!r}"
            raise ValueError(msg)
        return value


@dataclass
class QueryResult:
    """The outcome of one translation server query: packages, or why there are none."""

    packages: list[LanguagePackage] = field(default_factory=list)
    failure: FailureReason | None = None

    @property
    def ok(self) -> bool:
        """Check if the query produced at least one language package."""
        return self.failure is None and bool(self.packages)


class TranslationUpdateEntry(BaseModel):
    """A translation update in the shape the host expects in its response `translations` list."""

    type: ItemType
    slug: str
    language: str
    version: str
    updated: Any = None
    package: str
    autoupdate: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Convert the entry to a JSON-serializable dictionary."""
        return self.model_dump()
