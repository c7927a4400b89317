#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Main entry point for the Codeur Prospection Bot.

This module initializes the application, sets up logging, and provides
the command-line interface.
"""

import sys
import json
import logging
import argparse
from typing import Any, Dict, List, Optional

from codeur_prospection.config import config
from codeur_prospection.models import ProspectStatus
from codeur_prospection.pipeline import IngestionPipeline, run_ingestion
from codeur_prospection.scrapers import create_fetcher
from codeur_prospection.storage import SQLAlchemyStore
from codeur_prospection.templates import TemplateService
from codeur_prospection.utils.logger import LoggerConfig, configure_logger, get_logger, reset_loggers

COMMANDS = ["init-db", "scrape", "projects", "sessions", "prospects", "serve"]


def setup_argparse() -> argparse.ArgumentParser:
    """
    Set up command-line argument parsing.

    Returns:
        argparse.ArgumentParser: Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="prospection-bot",
        description="Codeur Prospection Bot",
        epilog="Scrape Codeur.com projects and track outreach to their clients.",
    )

    parser.add_argument(
        "command",
        choices=COMMANDS,
        help="Command to execute",
    )

    # Scrape options
    parser.add_argument("--keywords", type=str, help="Keywords searched in title and description")
    parser.add_argument("--budget-min", type=int, help="Minimum budget in euros")
    parser.add_argument("--budget-max", type=int, help="Maximum budget in euros")
    parser.add_argument("--skills", type=str, help="Comma-separated list of required skills")
    parser.add_argument(
        "--posted-days",
        type=int,
        help=f"Only keep projects posted within this many days (default: {config.default_posted_days})",
    )

    # Listing options
    parser.add_argument(
        "--limit",
        type=int,
        default=50,
        help="Maximum number of rows to list (default: 50)",
    )
    parser.add_argument(
        "--status",
        type=str,
        choices=[s.value for s in ProspectStatus],
        help="Only list prospects in this status",
    )

    # Server options
    parser.add_argument("--host", type=str, default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")

    # Common options
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set logging level",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_version()}",
    )

    return parser


def _version() -> str:
    import codeur_prospection
    return codeur_prospection.__version__


def _print_json(rows: Any) -> None:
    print(json.dumps(rows, indent=2, ensure_ascii=False))


def build_criteria(args: argparse.Namespace) -> Dict[str, Any]:
    """Raw criteria from command-line options; normalization happens in the pipeline."""
    criteria: Dict[str, Any] = {}
    if args.keywords:
        criteria["keywords"] = args.keywords
    if args.budget_min is not None:
        criteria["budget_min"] = args.budget_min
    if args.budget_max is not None:
        criteria["budget_max"] = args.budget_max
    if args.skills:
        criteria["skills"] = args.skills
    if args.posted_days is not None:
        criteria["posted_days"] = args.posted_days
    return criteria


def init_db(store: SQLAlchemyStore) -> bool:
    """Create the tables and the default message templates."""
    created = TemplateService(store).seed_defaults()
    get_logger(__name__).info(
        f"Database ready at {config.database_url} ({len(created)} templates seeded)"
    )
    return True


def scrape(store: SQLAlchemyStore, criteria: Dict[str, Any]) -> bool:
    """Run one ingestion cycle and print the scrape function's response body."""
    pipeline = IngestionPipeline(
        store,
        create_fetcher(config),
        fetch_timeout_seconds=config.fetch_timeout_seconds,
        dedupe_by_url=config.dedupe_by_url,
        default_posted_days=config.default_posted_days,
    )
    result = run_ingestion(pipeline, criteria)
    _print_json(result.to_response())
    return True


def list_rows(store: SQLAlchemyStore, command: str, limit: int, status: Optional[str]) -> bool:
    rows: List[Dict[str, Any]]
    if command == "projects":
        rows = [p.to_dict() for p in store.list_projects(limit=limit)]
    elif command == "sessions":
        rows = [s.to_dict() for s in store.list_sessions(limit=limit)]
    else:
        status_filter = ProspectStatus(status) if status else None
        rows = [p.to_dict() for p in store.list_prospects(status_filter)][:limit]
    _print_json(rows)
    return True


def serve(host: str, port: int) -> bool:
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run("codeur_prospection.api:app", host=host, port=port)
    return True


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the application.

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    parser = setup_argparse()
    args = parser.parse_args(argv)

    # Override log level if specified
    if args.log_level:
        config.log_level = getattr(logging, args.log_level)

    # Configure logging
    reset_loggers()
    logger = configure_logger(LoggerConfig(
        console_level=logging.DEBUG if args.verbose else config.log_level,
        log_file=str(config.log_file_path) if config.log_file_path else None,
    ))

    # Validate configuration
    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        return 1

    try:
        if args.command == "serve":
            success = serve(args.host, args.port)
        else:
            store = SQLAlchemyStore(config.database_url)
            if args.command == "init-db":
                success = init_db(store)
            elif args.command == "scrape":
                success = scrape(store, build_criteria(args))
            else:
                success = list_rows(store, args.command, args.limit, args.status)

        return 0 if success else 1

    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        return 130  # Standard exit code for SIGINT
    except Exception as e:
        logger.exception(f"Unhandled error: {str(e)}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
