#!/usr/bin/env python3
"""
Sanctions Screening API - CLI Entry Point

Screen entities against multiple sanctions/watchlist sources.

Usage:
    python main.py serve                  # Start API server
    python main.py screen "<name>"        # Screen an entity
    python main.py thresholds             # Show match and risk thresholds
"""

import asyncio
import argparse
import sys

import structlog
import uvicorn

from sanctions_screening.config import get_settings
from sanctions_screening.exceptions import InvalidQueryError
from sanctions_screening.services import SanctionsScreener, build_query
from sanctions_screening.sources import build_sources, create_http_client

# Configure logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = structlog.get_logger()


async def cmd_serve(args):
    """Start the API server."""
    settings = get_settings()

    logger.info(
        "Starting Sanctions Screening API",
        host=settings.host,
        port=settings.port
    )

    config = uvicorn.Config(
        "sanctions_screening.api:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="info"
    )
    server = uvicorn.Server(config)
    await server.serve()


async def cmd_screen(args):
    """Screen an entity against all configured sources."""

    try:
        query = build_query(
            args.name,
            entity_type=args.type,
            country=args.country,
            date_of_birth=args.dob,
            nationality=args.nationality
        )
    except InvalidQueryError as e:
        print(f"Error: {e}")
        sys.exit(1)

    settings = get_settings()
    client = create_http_client(settings)
    screener = SanctionsScreener.from_settings(build_sources(settings, client), settings)

    try:
        print(f"\nScreening: {query.name}")
        print(f"Entity Type: {query.entity_type.value}")
        print("=" * 60)

        try:
            result = await screener.screen(query)
        except InvalidQueryError as e:
            print(f"Error: {e}")
            sys.exit(1)

        level_icons = {
            "LOW": "🟢",
            "MEDIUM": "🟡",
            "HIGH": "🟠",
            "CRITICAL": "🔴"
        }

        icon = level_icons.get(result.risk_level.value, "⚪")
        print(f"\n{icon} Risk Level: {result.risk_level.value}")
        print(f"🔎 Matches Found: {result.matches_found}")
        print(f"🆔 Request: {result.request_id}")

        if result.findings:
            print(f"\n🔍 Findings:")
            for finding in result.findings:
                print(f"   • {finding.representative_name} ({finding.best_score:.2f})")
                print(f"     Sources: {', '.join(sorted(finding.contributing_sources))}")
                if finding.aliases:
                    print(f"     Aliases: {', '.join(sorted(finding.aliases))}")

        print(f"\n📋 Sources:")
        for source_id, outcome in result.source_outcomes.items():
            detail = f" - {outcome.error_detail}" if outcome.error_detail else ""
            print(f"   {source_id}: {outcome.status.value} ({outcome.match_count} matches){detail}")

        print(f"\n💡 Recommendations:")
        for rec in result.recommendations:
            print(f"   → {rec}")

    finally:
        await client.aclose()


async def cmd_thresholds(args):
    """Show match admission and risk tier thresholds."""

    settings = get_settings()

    print("\n" + "=" * 60)
    print("Sanctions Screening - Thresholds")
    print("=" * 60)
    print(f"\n   Admission (score >):  {settings.admission_threshold}")
    print(f"   MEDIUM   (score >=):  {settings.medium_threshold}")
    print(f"   HIGH     (score >=):  {settings.high_threshold}")
    print(f"   CRITICAL (score >=):  {settings.critical_threshold}")
    print(f"\n   Per-source timeout:   {settings.per_source_timeout}s")


def main():
    parser = argparse.ArgumentParser(
        description="Sanctions Screening CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # serve
    subparsers.add_parser("serve", help="Start API server")

    # screen
    screen_parser = subparsers.add_parser("screen", help="Screen an entity")
    screen_parser.add_argument("name", help="Entity name to screen")
    screen_parser.add_argument("--type", "-t", default="INDIVIDUAL",
                               help="INDIVIDUAL, CORPORATE, VESSEL or AIRCRAFT")
    screen_parser.add_argument("--country", "-c")
    screen_parser.add_argument("--dob", help="Date of birth (YYYY-MM-DD)")
    screen_parser.add_argument("--nationality", "-n")

    # thresholds
    subparsers.add_parser("thresholds", help="Show thresholds")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    commands = {
        "serve": cmd_serve,
        "screen": cmd_screen,
        "thresholds": cmd_thresholds
    }

    asyncio.run(commands[args.command](args))


if __name__ == "__main__":
    main()
