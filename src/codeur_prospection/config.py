#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Configuration management for the Codeur Prospection Bot.

This module loads configuration from environment variables (optionally from a
.env file) and provides sensible defaults. It also validates configuration
values.
"""

import os
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Base directories
ROOT_DIR = Path(__file__).parent.parent.parent.absolute()
DATA_DIR = ROOT_DIR / "data"

DEFAULT_DATABASE_URL = f"sqlite:///{DATA_DIR / 'prospection.db'}"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)

SOURCE_TYPES = ("mock", "html")

# Log levels
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, separator: str = ",") -> List[str]:
    raw = os.getenv(name, "")
    return [item.strip() for item in raw.split(separator) if item.strip()]


def _env_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return int(raw)


@dataclass
class AppConfig:
    """Application configuration."""

    # Database
    database_url: str = field(
        default_factory=lambda: os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
    )

    # Logging
    log_level: int = field(
        default_factory=lambda: LOG_LEVELS.get(
            os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO
        )
    )
    log_file_path: Optional[Path] = field(
        default_factory=lambda: Path(os.environ["LOG_FILE_PATH"])
        if os.getenv("LOG_FILE_PATH") else None
    )

    # Ingestion
    fetch_timeout_seconds: float = field(
        default_factory=lambda: float(os.getenv("FETCH_TIMEOUT_SECONDS", "30"))
    )
    default_posted_days: int = field(
        default_factory=lambda: int(os.getenv("DEFAULT_POSTED_DAYS", "7"))
    )
    dedupe_by_url: bool = field(
        default_factory=lambda: _env_bool("DEDUPE_BY_URL", "true")
    )
    apply_budget_filter: bool = field(
        default_factory=lambda: _env_bool("APPLY_BUDGET_FILTER", "true")
    )
    apply_posted_days_filter: bool = field(
        default_factory=lambda: _env_bool("APPLY_POSTED_DAYS_FILTER", "true")
    )

    # Prospects
    unique_prospect_per_project: bool = field(
        default_factory=lambda: _env_bool("UNIQUE_PROSPECT_PER_PROJECT", "true")
    )

    # Source selection
    source_type: str = field(
        default_factory=lambda: os.getenv("SOURCE_TYPE", "mock").lower()
    )
    mock_latency_min_seconds: float = field(
        default_factory=lambda: float(os.getenv("MOCK_LATENCY_MIN_SECONDS", "2.0"))
    )
    mock_latency_max_seconds: float = field(
        default_factory=lambda: float(os.getenv("MOCK_LATENCY_MAX_SECONDS", "5.0"))
    )
    codeur_base_url: str = field(
        default_factory=lambda: os.getenv("CODEUR_BASE_URL", "https://www.codeur.com")
    )
    codeur_listing_path: str = field(
        default_factory=lambda: os.getenv("CODEUR_LISTING_PATH", "/projects")
    )
    http_user_agent: str = field(
        default_factory=lambda: os.getenv("HTTP_USER_AGENT") or DEFAULT_USER_AGENT
    )

    # API
    cors_allow_origins: List[str] = field(
        default_factory=lambda: _env_list("CORS_ALLOW_ORIGINS") or ["*"]
    )

    # Freelancer profile used to fill message templates
    profile_name: Optional[str] = field(
        default_factory=lambda: os.getenv("PROFILE_NAME")
    )
    profile_experience_years: Optional[int] = field(
        default_factory=lambda: _env_int("PROFILE_EXPERIENCE_YEARS")
    )
    profile_skills: List[str] = field(
        default_factory=lambda: _env_list("PROFILE_SKILLS")
    )
    profile_portfolio_url: Optional[str] = field(
        default_factory=lambda: os.getenv("PROFILE_PORTFOLIO_URL")
    )
    profile_strengths: List[str] = field(
        default_factory=lambda: _env_list("PROFILE_STRENGTHS", separator="|")
    )

    def validate(self) -> List[str]:
        """
        Validate configuration values.

        Returns:
            List[str]: List of validation errors, empty if valid
        """
        errors = []

        if not self.database_url:
            errors.append("DATABASE_URL must not be empty")

        if self.fetch_timeout_seconds <= 0:
            errors.append("FETCH_TIMEOUT_SECONDS must be positive")

        if self.default_posted_days <= 0:
            errors.append("DEFAULT_POSTED_DAYS must be positive")

        if self.mock_latency_min_seconds < 0 or self.mock_latency_max_seconds < 0:
            errors.append("Mock latency bounds must not be negative")
        elif self.mock_latency_min_seconds > self.mock_latency_max_seconds:
            errors.append(
                "MOCK_LATENCY_MIN_SECONDS must not exceed MOCK_LATENCY_MAX_SECONDS"
            )

        if self.source_type not in SOURCE_TYPES:
            errors.append(
                f"SOURCE_TYPE must be one of: {', '.join(SOURCE_TYPES)}"
            )

        return errors


# Create a global config instance
config = AppConfig()
