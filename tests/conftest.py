#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Pytest configuration file for the Codeur Prospection Bot test suite.
"""

import os
import sys
import random
import pytest
from pathlib import Path

# Add the src directory to Python path for accessing codeur_prospection
project_root = Path(__file__).parent.parent
src_path = os.path.join(project_root, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from codeur_prospection.models import Project
from codeur_prospection.pipeline import IngestionPipeline
from codeur_prospection.scrapers import MockCodeurFetcher
from codeur_prospection.storage import SQLAlchemyStore


@pytest.fixture(scope="function")
def temp_db_path(tmp_path: Path) -> Path:
    """Temporary database path for testing."""
    return tmp_path / "test.db"


@pytest.fixture(scope="function")
def temp_log_path(tmp_path: Path) -> Path:
    """Temporary log file path for testing."""
    return tmp_path / "test.log"


@pytest.fixture(scope="function")
def mock_env_vars(monkeypatch, temp_db_path: Path, temp_log_path: Path):
    """
    Set up environment variables for testing.

    Args:
        monkeypatch: Pytest monkeypatch fixture
        temp_db_path: Temporary database path
        temp_log_path: Temporary log file path
    """
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("LOG_FILE_PATH", str(temp_log_path))
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{temp_db_path}")
    monkeypatch.setenv("SOURCE_TYPE", "mock")
    monkeypatch.setenv("MOCK_LATENCY_MIN_SECONDS", "0")
    monkeypatch.setenv("MOCK_LATENCY_MAX_SECONDS", "0")
    monkeypatch.setenv("FETCH_TIMEOUT_SECONDS", "5")
    monkeypatch.setenv("DEFAULT_POSTED_DAYS", "7")
    monkeypatch.setenv("PROFILE_NAME", "Camille Martin")
    monkeypatch.setenv("PROFILE_EXPERIENCE_YEARS", "8")
    monkeypatch.setenv("PROFILE_SKILLS", "React, Node.js, TypeScript")
    monkeypatch.setenv("PROFILE_PORTFOLIO_URL", "https://camille.dev")
    monkeypatch.setenv("PROFILE_STRENGTHS", "Livraison rapide|Code testé|Communication claire")


@pytest.fixture(scope="function")
def store(temp_db_path: Path):
    """SQLite-backed store in a temporary directory."""
    sql_store = SQLAlchemyStore(f"sqlite:///{temp_db_path}")
    yield sql_store
    sql_store.dispose()


@pytest.fixture(scope="function")
def mock_fetcher() -> MockCodeurFetcher:
    """Mock source without simulated latency and with repeatable dates."""
    return MockCodeurFetcher(
        latency_min_seconds=0,
        latency_max_seconds=0,
        rng=random.Random(42),
    )


@pytest.fixture(scope="function")
def pipeline(store, mock_fetcher) -> IngestionPipeline:
    return IngestionPipeline(store, mock_fetcher, fetch_timeout_seconds=5)


@pytest.fixture(scope="function")
def sample_project(store) -> Project:
    """A stored project to attach prospects to."""
    project = Project(
        title="Création d'une API REST avec Node.js",
        description="API de gestion de stock",
        budget="3 000 € - 5 000 €",
        skills=["Node.js", "PostgreSQL"],
        url="https://codeur.com/projects/123458",
        client_info={"name": "LogiStock Pro", "verified": True},
    )
    return store.insert_projects([project])[0]
