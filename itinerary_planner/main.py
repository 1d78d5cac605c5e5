"""
Main entry point for the Itinerary Planner application.

This module provides a CLI for generating an itinerary straight to the
terminal and for running the HTTP service.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
import traceback
from typing import Any, TextIO

from itinerary_planner.config import ItineraryPlannerConfig, initialize_config
from itinerary_planner.data.itinerary_parser import parse_itinerary
from itinerary_planner.data.models import Hotel, ItineraryRequest
from itinerary_planner.presentation.hotels import EMPTY_MESSAGE, PANEL_TITLE, hotel_cards
from itinerary_planner.services.itinerary_service import ItineraryService
from itinerary_planner.utils.error_handling import ItineraryPlannerError
from itinerary_planner.utils.logging import get_logger, setup_logging
from itinerary_planner.utils.rate_limiting import (
    initialize_rate_limiting,
    rate_limit_manager,
    update_rate_limits_from_config,
)

logger = get_logger(__name__)


def setup_argparse() -> argparse.ArgumentParser:
    """
    Set up the argument parser for the CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        description="AI itinerary planner grounded in real travel data"
    )

    system_group = parser.add_argument_group("System Configuration")
    system_group.add_argument(
        "--config", type=str, help="Path to a custom .env configuration file"
    )
    system_group.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level",
    )
    system_group.add_argument("--log-file", type=str, help="Path to a log file")
    system_group.add_argument(
        "--disable-rate-limits",
        action="store_true",
        help="Disable upstream API rate limiting (not recommended)",
    )
    system_group.add_argument(
        "--rate-limit-config",
        type=str,
        help="Path to a JSON file with per-service rate limits",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    plan = subparsers.add_parser("plan", help="Generate an itinerary to stdout")
    plan.add_argument("--from", dest="origin", required=True, help="Origin location")
    plan.add_argument("--to", dest="destination", required=True, help="Destination")
    plan.add_argument("--start", required=True, help="Start date (YYYY-MM-DD)")
    plan.add_argument("--end", required=True, help="End date (YYYY-MM-DD)")
    plan.add_argument(
        "--budget",
        default="mid-range",
        help="Budget level: budget, mid-range or luxury",
    )
    plan.add_argument("--transport", default="Any", help="Preferred transport mode")
    plan.add_argument(
        "--interest",
        action="append",
        default=[],
        dest="interests",
        help="Traveller interest (repeatable)",
    )
    plan.add_argument(
        "--json",
        action="store_true",
        help="Print the parsed itinerary as formatted JSON instead of raw output",
    )

    serve = subparsers.add_parser("serve", help="Run the HTTP service")
    serve.add_argument("--host", type=str, help="Bind address")
    serve.add_argument("--port", type=int, help="Bind port")

    return parser


def build_request_from_args(args: argparse.Namespace) -> ItineraryRequest:
    """Create an itinerary request from CLI arguments."""
    return ItineraryRequest(
        from_location=args.origin,
        destination=args.destination,
        start_date=args.start,
        end_date=args.end,
        budget=args.budget,
        transport_mode=args.transport,
        interests=args.interests,
    )


def display_hotels(itinerary: dict[str, Any], out: TextIO = sys.stdout) -> None:
    """Print the hotel suggestions of a parsed itinerary."""
    summary = itinerary.get("destinationSummary") or {}
    hotels = [
        Hotel.model_validate(h)
        for h in summary.get("hotelSuggestions") or []
        if isinstance(h, dict) and h.get("name")
    ]

    print(f"\n=== {PANEL_TITLE} ===", file=out)
    cards = hotel_cards(hotels)
    if not cards:
        print(EMPTY_MESSAGE, file=out)
        return
    for card in cards:
        rating = f" ({card.rating})" if card.rating else ""
        print(f"- {card.name}{rating}", file=out)
        if card.address:
            print(f"  {card.address}", file=out)
        print(f"  {card.url}", file=out)


async def run_plan_mode(args: argparse.Namespace, out: TextIO = sys.stdout) -> int:
    """Generate an itinerary and write it to ``out``."""
    request = build_request_from_args(args)
    service = ItineraryService()
    stream = await service.plan(request)

    if not args.json:
        async for chunk in stream:
            out.write(chunk.decode("utf-8", errors="replace"))
            out.flush()
        out.write("\n")
        return 0

    text = await stream.read_text()
    itinerary = parse_itinerary(text)
    print(json.dumps(itinerary, indent=2, ensure_ascii=False), file=out)
    display_hotels(itinerary, out)
    return 0


def run_serve_mode(args: argparse.Namespace, system_config: ItineraryPlannerConfig) -> int:
    """
    Run the HTTP service with uvicorn.

    The app is built here, on top of the logging and rate limits the CLI
    flags already set up.
    """
    import uvicorn

    from itinerary_planner.api.app import create_app

    host = args.host or system_config.server.host
    port = args.port or system_config.server.port
    app = create_app(system_config, rate_limits=False)
    logger.info(f"Serving itinerary API on {host}:{port}")
    uvicorn.run(app, host=host, port=port)
    return 0


def _initialize_rate_limiting(args: argparse.Namespace) -> None:
    """Initialize rate limiting for external APIs."""
    if args.disable_rate_limits:
        logger.warning(
            "API rate limiting is disabled. This may cause API quota issues."
        )
        rate_limit_manager.enabled = False
        return

    initialize_rate_limiting()
    if args.rate_limit_config:
        if os.path.exists(args.rate_limit_config):
            _load_custom_rate_limits(args.rate_limit_config)
        else:
            logger.warning(
                f"Rate limit configuration {args.rate_limit_config} not found, using defaults"
            )


def _load_custom_rate_limits(config_path: str) -> None:
    """Load custom rate limits from configuration file."""
    try:
        with open(config_path) as f:
            update_rate_limits_from_config(json.load(f))
        logger.info(f"Loaded custom rate limit configuration from {config_path}")
    except (OSError, ValueError) as e:
        logger.error(f"Error loading rate limit configuration: {e}")
        print(f"\nError loading rate limit configuration: {e}")


def _initialize_system_configuration(args: argparse.Namespace) -> ItineraryPlannerConfig:
    """Load configuration and finish logging setup."""
    system_config = initialize_config(
        custom_config_path=args.config, validate=True, raise_on_error=False
    )
    setup_logging(
        log_level=args.log_level or system_config.system.log_level,
        log_file=args.log_file,
    )
    _initialize_rate_limiting(args)
    return system_config


async def main(argv: list[str] | None = None) -> int:
    """
    Main entry point function.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    try:
        parser = setup_argparse()
        args = parser.parse_args(argv)

        # Basic logging first to capture initialization errors
        setup_logging(log_level=args.log_level or "INFO", log_file=args.log_file)
        system_config = _initialize_system_configuration(args)

        if args.command == "serve":
            return run_serve_mode(args, system_config)
        return await run_plan_mode(args)

    except ItineraryPlannerError as e:
        return _handle_planner_error(e)
    except ItineraryPlannerConfig.ConfigurationError as e:
        return _handle_configuration_error(e)
    except KeyboardInterrupt:
        return _handle_keyboard_interrupt()
    except FileNotFoundError as e:
        return _handle_file_not_found_error(e)
    except Exception as e:
        return _handle_general_exception(e)


def _handle_planner_error(e: ItineraryPlannerError) -> int:
    logger.error(f"Itinerary planning failed: {e.message}")
    print(f"\nError: {e.message}", file=sys.stderr)
    return 1


def _handle_configuration_error(e: Exception) -> int:
    logger.error(f"Configuration error: {e}")
    print(f"\nConfiguration Error: {e}", file=sys.stderr)
    print("Please check your environment variables and configuration settings.", file=sys.stderr)
    return 1


def _handle_keyboard_interrupt() -> int:
    logger.info("Itinerary planning interrupted by user")
    print("\nInterrupted. Goodbye!", file=sys.stderr)
    return 0


def _handle_file_not_found_error(e: Exception) -> int:
    logger.error(f"File not found: {e}")
    print(f"\nError: {e}", file=sys.stderr)
    return 1


def _handle_general_exception(e: Exception) -> int:
    logger.error(f"Error in main function: {e!s}\n{traceback.format_exc()}")
    print(f"\nError: {e!s}", file=sys.stderr)
    print("An unexpected error occurred. Please check the logs for more details.", file=sys.stderr)
    return 1


def cli() -> None:
    """Console script entry point."""
    try:
        exit_code = asyncio.run(main())
    except KeyboardInterrupt:
        # asyncio.run cancels main() and re-raises Ctrl-C here
        exit_code = _handle_keyboard_interrupt()
    sys.exit(exit_code)


if __name__ == "__main__":
    cli()
