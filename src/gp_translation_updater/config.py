"""Handles the parsing and validation of the translation updater configuration file."""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

logger = logging.getLogger(__name__)

DEFAULT_PLUGINS_ENDPOINT = "https://api.wordpress.org/plugins/update-check/1.1/"
DEFAULT_THEMES_ENDPOINT = "https://api.wordpress.org/themes/update-check/1.1/"
DEFAULT_TIMEOUT = 10.0
DEFAULT_API_VERSION = "1.1"


class EndpointSettings(BaseModel):
    """The host update-check endpoints, matched by substring against outbound URLs."""

    plugins: str = DEFAULT_PLUGINS_ENDPOINT
    themes: str = DEFAULT_THEMES_ENDPOINT


class DevelopmentSettings(BaseModel):
    """
    Development-only transport relaxations.

    Both relaxations are refused unless `enabled` is explicitly set, so a
    stray flag in a production config cannot weaken the client.
    """

    enabled: bool = False
    allow_local_hosts: bool = False
    disable_ssl_verification: bool = False

    @model_validator(mode="after")
    def _require_enabled(self) -> "DevelopmentSettings":
        if not self.enabled and (self.allow_local_hosts or self.disable_ssl_verification):
            msg = "'allow_local_hosts' and 'disable_ssl_verification' require 'development.enabled: true'."
            raise ValueError(msg)
        return self


class ClientSettings(BaseModel):
    """Settings for the translation server client."""

    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    api_version: str = DEFAULT_API_VERSION
    verify_ssl: bool = True
    allow_local_hosts: bool = False

    @property
    def api_suffix(self) -> str:
        """Return the protocol-versioned path appended to a service URI."""
        return f"wp-json/gp/translations/update-check/{self.api_version}/"


class UpdaterConfig(BaseModel):
    """The root configuration for the translation updater."""

    endpoints: EndpointSettings = Field(default_factory=EndpointSettings)
    client: ClientSettings = Field(default_factory=ClientSettings)
    development: DevelopmentSettings = Field(default_factory=DevelopmentSettings)

    def client_settings(self) -> ClientSettings:
        """
        Return the effective client settings.

        Development relaxations are folded in here and nowhere else.
        """
        if not self.development.enabled:
            return self.client.model_copy(update={"verify_ssl": True, "allow_local_hosts": False})
        logger.warning("Development mode is enabled for the translation client.")
        return self.client.model_copy(
            update={
                "verify_ssl": not self.development.disable_ssl_verification,
                "allow_local_hosts": self.development.allow_local_hosts,
            },
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UpdaterConfig":
        """
        Create an UpdaterConfig object from a dictionary.

        Raises:
            ValueError: If any section fails validation.

        """
        try:
            return cls(**{key: value for key, value in data.items() if value is not None})
        except ValidationError as e:
            msg = f"Invalid or missing configuration: {e}"
            raise ValueError(msg) from e


def load_config(config_path: str) -> UpdaterConfig:
    """
    Load, parse, and validate the YAML configuration file.

    Args:
        config_path: The path to the configuration file.

    Returns:
        An UpdaterConfig object representing the validated configuration.

    Raises:
        FileNotFoundError: If the config file does not exist.
        yaml.YAMLError: If there is a syntax error in the YAML file.
        ValueError: If the configuration is invalid.

    """
    path = Path(config_path)
    if not path.is_file():
        msg = f"Configuration file not found at: {config_path}"
        raise FileNotFoundError(msg)

    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        msg = f"Error parsing YAML config file: {e}"
        raise yaml.YAMLError(msg) from e

    if data is None:
        return UpdaterConfig()
    if not isinstance(data, dict):
        msg = "Invalid or missing configuration: config file must be a YAML mapping (dictionary)."
        raise ValueError(msg)

    try:
        return UpdaterConfig.from_dict(data)
    except TypeError as e:
        msg = f"Invalid or missing configuration: {e}"
        raise ValueError(msg) from e
