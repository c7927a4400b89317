#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Ingestion Pipeline

Runs one fetch cycle: records a scraping session, fetches candidates from the
configured source, persists them as projects and closes the session as
completed or failed.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from codeur_prospection.criteria import DEFAULT_POSTED_DAYS, SearchCriteria, normalize_criteria
from codeur_prospection.models import CandidateProject, Project, ScrapingSession
from codeur_prospection.scrapers.base_scraper import BaseSourceFetcher
from codeur_prospection.storage.base import ProspectionStore
from codeur_prospection.utils.logger import get_logger
from codeur_prospection.utils.timeout import run_with_timeout

# Configure logger
logger = get_logger(__name__)

DEFAULT_FETCH_TIMEOUT_SECS = 30.0


@dataclass
class IngestionResult:
    """Outcome of a successful ingestion run."""
    session_id: str
    projects_found: int
    duplicates_skipped: int = 0
    project_ids: List[str] = field(default_factory=list)

    def to_response(self) -> Dict[str, Any]:
        """Body returned by the scrape endpoint."""
        return {
            "success": True,
            "projectsFound": self.projects_found,
            "sessionId": self.session_id,
        }


def describe_error(error: BaseException) -> str:
    """Non-empty message for a session's error_message column."""
    if isinstance(error, asyncio.CancelledError):
        return "Ingestion cancelled"
    message = str(error).strip()
    return message or error.__class__.__name__


class IngestionPipeline:
    """
    Pipeline turning one set of search criteria into stored projects.

    A session row is written before the source is contacted, so a crashed run
    is still visible as a running session. Any error raised after that point
    closes the session as failed before propagating.
    """

    def __init__(
        self,
        store: ProspectionStore,
        fetcher: BaseSourceFetcher,
        fetch_timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECS,
        dedupe_by_url: bool = True,
        default_posted_days: int = DEFAULT_POSTED_DAYS,
    ):
        """
        Initialize the ingestion pipeline.

        Args:
            store: Persistence backend
            fetcher: Listing source
            fetch_timeout_seconds: Upper bound on one fetch
            dedupe_by_url: Skip candidates whose URL is already stored
            default_posted_days: Window used when criteria omit posted_days
        """
        self.store = store
        self.fetcher = fetcher
        self.fetch_timeout_seconds = fetch_timeout_seconds
        self.dedupe_by_url = dedupe_by_url
        self.default_posted_days = default_posted_days

        # Statistics tracking
        self.stats = {
            "total_runs": 0,
            "total_succeeded": 0,
            "total_failed": 0,
            "total_projects": 0,
            "last_run_time": None,
        }

    async def run(self, criteria: Union[SearchCriteria, Mapping[str, Any], None]) -> IngestionResult:
        """
        Execute one fetch-and-ingest cycle.

        Args:
            criteria: Normalized criteria or raw form values

        Returns:
            IngestionResult: Session id and number of projects stored

        Raises:
            Whatever the fetch or the store raised, after the session has
            been marked failed.
        """
        criteria = normalize_criteria(criteria, self.default_posted_days)
        self.stats["total_runs"] += 1
        self.stats["last_run_time"] = datetime.now()

        session = self.store.create_session(criteria.to_dict())
        logger.info(f"Started scraping session {session.id} with criteria {criteria.to_dict()}")

        try:
            candidates = await run_with_timeout(
                self.fetcher.fetch(criteria),
                self.fetch_timeout_seconds,
                label=f"{self.fetcher.name} fetch",
            )
            stored, skipped = self._persist(candidates)
            self.store.complete_session(session.id, len(stored))
        except BaseException as e:
            self.stats["total_failed"] += 1
            self._mark_failed(session, e)
            raise

        self.stats["total_succeeded"] += 1
        self.stats["total_projects"] += len(stored)
        logger.info(
            f"Scraping session {session.id} completed: {len(stored)} projects stored, "
            f"{skipped} duplicates skipped"
        )

        return IngestionResult(
            session_id=session.id,
            projects_found=len(stored),
            duplicates_skipped=skipped,
            project_ids=[project.id for project in stored],
        )

    def _persist(self, candidates: List[CandidateProject]) -> Tuple[List[Project], int]:
        """Store candidates as projects; returns (stored, duplicates skipped)."""
        if self.dedupe_by_url:
            fresh = self._drop_known_urls(candidates)
        else:
            fresh = list(candidates)

        scraped_at = datetime.now()
        projects = [Project.from_candidate(candidate, scraped_at) for candidate in fresh]
        stored = self.store.insert_projects(projects)

        return stored, len(candidates) - len(fresh)

    def _drop_known_urls(self, candidates: List[CandidateProject]) -> List[CandidateProject]:
        known = self.store.find_existing_urls(c.url for c in candidates if c.url)

        fresh = []
        for candidate in candidates:
            if candidate.url:
                if candidate.url in known:
                    logger.debug(f"Skipping already stored listing {candidate.url}")
                    continue
                known.add(candidate.url)
            fresh.append(candidate)
        return fresh

    def _mark_failed(self, session: ScrapingSession, error: BaseException) -> None:
        message = describe_error(error)
        logger.error(f"Scraping session {session.id} failed: {message}", exc_info=error)
        try:
            self.store.fail_session(session.id, message)
        except Exception as e:
            # The original error is the one the caller needs to see
            logger.error(f"Could not mark scraping session {session.id} as failed: {str(e)}")

    def get_stats(self) -> Dict[str, Any]:
        stats = dict(self.stats)
        stats["source"] = self.fetcher.get_status()
        return stats


def run_ingestion(pipeline: IngestionPipeline, criteria: Optional[Mapping[str, Any]] = None) -> IngestionResult:
    """Synchronous entry point for scripts and the CLI."""
    return asyncio.run(pipeline.run(criteria))
