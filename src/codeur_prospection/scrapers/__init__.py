"""
Listing sources for the Codeur Prospection Bot.

Every source implements ``BaseSourceFetcher.fetch(criteria)``; the ingestion
pipeline only knows that interface.
"""

from codeur_prospection.config import AppConfig
from .base_scraper import (
    BaseSourceFetcher,
    filter_candidates,
    matches_criteria,
    parse_budget_range,
)
from .codeur_html import CodeurHTMLFetcher
from .codeur_mock import MockCodeurFetcher


def create_fetcher(app_config: AppConfig) -> BaseSourceFetcher:
    """Build the source selected by ``app_config.source_type``."""
    filters = {
        "apply_budget_filter": app_config.apply_budget_filter,
        "apply_posted_days_filter": app_config.apply_posted_days_filter,
    }

    if app_config.source_type == "mock":
        return MockCodeurFetcher(
            latency_min_seconds=app_config.mock_latency_min_seconds,
            latency_max_seconds=app_config.mock_latency_max_seconds,
            **filters,
        )
    if app_config.source_type == "html":
        return CodeurHTMLFetcher(
            base_url=app_config.codeur_base_url,
            listing_path=app_config.codeur_listing_path,
            user_agent=app_config.http_user_agent,
            **filters,
        )
    raise ValueError(f"Unknown source type: {app_config.source_type}")


__all__ = [
    "BaseSourceFetcher",
    "CodeurHTMLFetcher",
    "MockCodeurFetcher",
    "create_fetcher",
    "filter_candidates",
    "matches_criteria",
    "parse_budget_range",
]
