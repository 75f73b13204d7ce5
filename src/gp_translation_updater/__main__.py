"""Main entry point for the GP Translation Updater command-line interface."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

import yaml

from . import __version__
from .config import UpdaterConfig, load_config
from .engine import UpdateEngine, plugins_updater, themes_updater
from .logging_utils import setup_logging

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        argparse.Namespace: An object containing the parsed command-line arguments.

    """
    parser = argparse.ArgumentParser(
        prog="gp-translation-updater",
        description="Replay a captured update-check cycle against GlotPress translation servers.",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"GP Translation Updater {__version__}",
        help="Show the version number and exit.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True, help="Available commands")

    check_parser = subparsers.add_parser("check", help="Enrich a captured update-check response with translation updates.")
    check_parser.add_argument("--type", dest="item_type", choices=("plugin", "theme"), required=True, help="Which update-check batch was captured.")
    check_parser.add_argument("--request", type=Path, required=True, help="JSON file with the outbound request fields.")
    check_parser.add_argument("--response", type=Path, required=True, help="File with the raw JSON response body.")
    check_parser.add_argument("--themes", type=Path, help="JSON file with installed theme headers keyed by stylesheet.")
    check_parser.add_argument("--config", type=Path, help="YAML configuration file.")
    check_parser.add_argument("--log-file", type=Path, help="Where to write the detailed debug log.")
    check_parser.add_argument("--debug", action="store_true", help="Enable debug level logging.")

    return parser.parse_args(argv)


def _read_json(path: Path) -> Any:  # noqa: ANN401
    with path.open(encoding="utf-8") as f:
        return json.load(f)


def _build_engine(args: argparse.Namespace, config: UpdaterConfig) -> UpdateEngine:
    if args.item_type == "plugin":
        return plugins_updater(config)

    installed: dict[str, Any] = _read_json(args.themes) if args.themes else {}
    return themes_updater(config, theme_registry=lambda: installed)


def _run_check(args: argparse.Namespace) -> int:
    """
    Run one update-check cycle from captured files and print the enriched response.

    Returns:
        The process exit code.

    """
    try:
        config = load_config(str(args.config)) if args.config else UpdaterConfig()
    except (FileNotFoundError, ValueError, yaml.YAMLError):
        logger.exception("Could not load the configuration.")
        return 1

    try:
        request_body = _read_json(args.request)
        response_body = args.response.read_text(encoding="utf-8")
        engine = _build_engine(args, config)
    except (OSError, json.JSONDecodeError):
        logger.exception("Could not read the captured request or response.")
        return 1

    url = config.endpoints.plugins if args.item_type == "plugin" else config.endpoints.themes
    session = engine.on_outbound_request(url, request_body)
    if session is not None:
        logger.info("Collected %d %s(s) with a translation service.", len(session.items), args.item_type)

    enriched = engine.on_inbound_response(url, response_body, session)
    sys.stdout.write(enriched if isinstance(enriched, str) else enriched.decode("utf-8"))
    sys.stdout.write("\n")
    return 0


def main(argv: list[str] | None = None) -> None:
    """Run the command-line interface."""
    args = _parse_args(argv)
    setup_logging(version=__version__, debug=args.debug, log_file=args.log_file)

    if args.command == "check":
        sys.exit(_run_check(args))


if __name__ == "__main__":
    main()
