"""Tests for the plugin and theme batch collectors."""

import json
import unittest
from typing import Any

from gp_translation_updater.collectors import PluginCollector, ThemeCollector, decode_field
from gp_translation_updater.config import DEFAULT_PLUGINS_ENDPOINT, DEFAULT_THEMES_ENDPOINT

PLUGINS_URL = DEFAULT_PLUGINS_ENDPOINT
THEMES_URL = DEFAULT_THEMES_ENDPOINT

GP_HEADERS = {"GlotPress API URI": "https://example.com", "GlotPress API Path": "my-plugin"}


def _plugin(**extra: Any) -> dict[str, Any]:  # noqa: ANN401
    return {"Name": "My Plugin", "Version": "1.2.3", **GP_HEADERS, **extra}


class TestDecodeField(unittest.TestCase):
    """Test suite for decode_field."""

    def test_decodes_json_text(self) -> None:
        """1. Text: JSON strings and bytes are decoded."""
        assert decode_field('{"a": 1}') == {"a": 1}
        assert decode_field(b'["de_DE"]') == ["de_DE"]

    def test_passes_decoded_values_through(self) -> None:
        """2. Objects: Already-decoded values are returned unchanged."""
        value = {"a": 1}
        assert decode_field(value) is value
        assert decode_field(None) is None

    def test_invalid_json_is_none(self) -> None:
        """3. Failure: Invalid JSON text yields None."""
        assert decode_field("{not json") is None


class TestPluginCollector(unittest.TestCase):
    """Test suite for the PluginCollector."""

    def setUp(self) -> None:
        """Create a collector bound to the default plugin endpoint."""
        self.collector = PluginCollector(PLUGINS_URL)

    def test_flat_item_map(self) -> None:
        """1. Shape: The item list field may be the item map itself."""
        body = {"plugins": {"my-plugin/my-plugin.php": GP_HEADERS}}

        session = self.collector.collect(PLUGINS_URL, body)

        assert session is not None
        assert list(session.items) == ["my-plugin/my-plugin.php"]
        item = session.items["my-plugin/my-plugin.php"]
        assert item.slug == "my-plugin"
        assert item.service_uri == "https://example.com"
        assert item.service_path == "my-plugin"

    def test_nested_form_encoded_batch(self) -> None:
        """2. Shape: The host's form-encoded JSON batch with locale and translations at the top level."""
        body = {
            "plugins": json.dumps(
                {
                    "plugins": {
                        "my-plugin/my-plugin.php": _plugin(TextDomain="my-plugin"),
                        "akismet/akismet.php": {"Name": "Akismet", "Version": "5.0"},
                    },
                    "active": ["my-plugin/my-plugin.php"],
                },
            ),
            "translations": json.dumps({"my-plugin": {"de_DE": {"PO-Revision-Date": "2023-01-01"}}}),
            "locale": json.dumps(["de_DE", "fr_FR"]),
            "all": "true",
        }

        session = self.collector.collect(PLUGINS_URL + "?trace=1", body)

        assert session is not None
        assert list(session.items) == ["my-plugin/my-plugin.php"]
        assert session.items["my-plugin/my-plugin.php"].version == "1.2.3"
        assert session.locales == ["de_DE", "fr_FR"]
        assert session.known_translations("my-plugin") == {"de_DE": {"PO-Revision-Date": "2023-01-01"}}
        assert session.known_translations("other") == {}

    def test_locale_nested_in_batch(self) -> None:
        """3. Shape: Locale and translations may live inside the item list object."""
        body = {
            "plugins": {
                "plugins": {"my-plugin/my-plugin.php": GP_HEADERS},
                "locale": ["nl_NL"],
                "translations": {"my-plugin": {"nl_NL": {}}},
            },
        }

        session = self.collector.collect(PLUGINS_URL, body)

        assert session is not None
        assert session.locales == ["nl_NL"]
        assert session.translations == {"my-plugin": {"nl_NL": {}}}

    def test_items_without_service_are_excluded(self) -> None:
        """4. Filtering: Items lacking the URI, the path, or both never appear."""
        body = {
            "plugins": {
                "none/none.php": {"Name": "None"},
                "uri-only/uri-only.php": {"GlotPress API URI": "https://example.com"},
                "path-only/path-only.php": {"GlotPress API Path": "path-only"},
                "blank/blank.php": {"GlotPress API URI": " ", "GlotPress API Path": ""},
                "ok/ok.php": GP_HEADERS,
            },
        }

        session = self.collector.collect(PLUGINS_URL, body)

        assert session is not None
        assert list(session.items) == ["ok/ok.php"]

    def test_batch_order_is_preserved(self) -> None:
        """5. Ordering: Items are collected in batch order."""
        body = {"plugins": {f"p{i}/p{i}.php": GP_HEADERS for i in (3, 1, 2)}}

        session = self.collector.collect(PLUGINS_URL, body)

        assert session is not None
        assert [item.slug for item in session.items.values()] == ["p3", "p1", "p2"]

    def test_other_urls_pass_through(self) -> None:
        """6. Matching: Requests to other URLs are not collected."""
        body = {"plugins": {"my-plugin/my-plugin.php": GP_HEADERS}}
        assert self.collector.collect(THEMES_URL, body) is None
        assert self.collector.collect("https://example.com/", body) is None
        assert self.collector.collect("not a url " + PLUGINS_URL, body) is None

    def test_malformed_input_yields_empty_session(self) -> None:
        """7. Failure: Malformed bodies never raise and produce an empty session."""
        for body in (None, {}, {"plugins": "{not json"}, {"plugins": ["a", "b"]}, {"plugins": 42}, "garbage"):
            session = self.collector.collect(PLUGINS_URL, body)  # type: ignore[arg-type]
            assert session is not None, body
            assert session.is_empty, body
            assert session.locales == []
            assert session.translations == {}

    def test_malformed_locale_and_translations(self) -> None:
        """8. Failure: Non-list locales and non-object translations become empty."""
        body = {
            "plugins": {"my-plugin/my-plugin.php": GP_HEADERS},
            "locale": "de_DE",
            "translations": "[]",
        }

        session = self.collector.collect(PLUGINS_URL, body)

        assert session is not None
        assert len(session.items) == 1
        assert session.locales == []
        assert session.translations == {}

    def test_each_call_returns_fresh_state(self) -> None:
        """9. Isolation: Every collect call returns an independent session."""
        body = {"plugins": {"my-plugin/my-plugin.php": GP_HEADERS}}

        first = self.collector.collect(PLUGINS_URL, body)
        second = self.collector.collect(PLUGINS_URL, {"plugins": {}})

        assert first is not None
        assert second is not None
        assert first is not second
        assert len(first.items) == 1
        assert second.is_empty

    def test_undecodable_batch_is_logged_as_malformed(self) -> None:
        """10. Failure: A batch field that does not decode to an object is reported as malformed input."""
        with self.assertLogs("gp_translation_updater.collectors.base", level="WARNING") as logs:
            session = self.collector.collect(PLUGINS_URL, {"plugins": "{not json"})

        assert session is not None
        assert session.is_empty
        assert "malformed_input" in logs.output[0]
        assert PLUGINS_URL in logs.output[0]


class TestThemeCollector(unittest.TestCase):
    """Test suite for the ThemeCollector."""

    def setUp(self) -> None:
        """Build a registry with one marked and one unmarked theme."""
        self.installed = {
            "my-theme": {
                "Name": "My Theme",
                "GlotPress API URI": "https://translate.example.com",
                "GlotPress API Path": "themes/my-theme",
                "TextDomain": "my-theme-td",
            },
            "twentytwentyfour": {"Name": "Twenty Twenty-Four"},
        }
        self.collector = ThemeCollector(THEMES_URL, lambda: self.installed)
        self.body = {
            "themes": json.dumps(
                {
                    "active": "my-theme",
                    "themes": {
                        "my-theme": {"Name": "My Theme", "Version": "2.0", "Stylesheet": "my-theme"},
                        "twentytwentyfour": {"Name": "Twenty Twenty-Four", "Version": "1.0"},
                        "uninstalled": {"Name": "Gone", "Version": "0.1"},
                    },
                },
            ),
            "locale": json.dumps(["de_DE"]),
        }

    def test_registry_headers_are_merged(self) -> None:
        """1. Merge: Marked themes get the registry's service location and text domain."""
        session = self.collector.collect(THEMES_URL, self.body)

        assert session is not None
        assert list(session.items) == ["my-theme"]
        item = session.items["my-theme"]
        assert item.slug == "my-theme"
        assert item.service_uri == "https://translate.example.com"
        assert item.service_path == "themes/my-theme"
        assert item.version == "2.0"
        assert item.fields["TextDomain"] == "my-theme-td"
        assert session.locales == ["de_DE"]

    def test_flat_theme_map(self) -> None:
        """2. Shape: The theme list field may be the item map itself."""
        body = {"themes": {"my-theme": {"Version": "2.0"}}}

        session = self.collector.collect(THEMES_URL, body)

        assert session is not None
        assert list(session.items) == ["my-theme"]

    def test_registry_path_is_required(self) -> None:
        """3. Filtering: A theme with a URI but no path is not checked."""
        del self.installed["my-theme"]["GlotPress API Path"]

        session = self.collector.collect(THEMES_URL, self.body)

        assert session is not None
        assert session.is_empty

    def test_registry_failure_yields_empty_session(self) -> None:
        """4. Failure: A failing registry degrades to no themes."""

        def broken_registry() -> dict[str, Any]:
            msg = "registry unavailable"
            raise RuntimeError(msg)

        collector = ThemeCollector(THEMES_URL, broken_registry)

        session = collector.collect(THEMES_URL, self.body)

        assert session is not None
        assert session.is_empty

    def test_no_registry(self) -> None:
        """5. Default: Without a registry no theme is eligible."""
        session = ThemeCollector(THEMES_URL).collect(THEMES_URL, self.body)
        assert session is not None
        assert session.is_empty

    def test_plugin_endpoint_is_ignored(self) -> None:
        """6. Matching: The theme collector ignores the plugin endpoint."""
        assert self.collector.collect(PLUGINS_URL, self.body) is None


def test_collector_item_types() -> None:
    """Each collector names its item type and batch field."""
    assert (PluginCollector.item_type, PluginCollector.batch_field) == ("plugin", "plugins")
    assert (ThemeCollector.item_type, ThemeCollector.batch_field) == ("theme", "themes")


if __name__ == "__main__":
    unittest.main()
