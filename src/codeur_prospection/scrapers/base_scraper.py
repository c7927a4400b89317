#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Base Scraper - Abstract base class for listing sources, plus the filtering
rules every source applies to its candidates.
"""

import abc
import re
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from codeur_prospection.criteria import SearchCriteria, parse_int
from codeur_prospection.models import CandidateProject
from codeur_prospection.utils.logger import get_logger, log_scraping_event

logger = get_logger(__name__)

_AMOUNT = re.compile(r"\d+(?:[\s.,]\d{3})*")
_UPPER_BOUND_HINTS = ("moins de", "less than", "under", "jusqu", "max", "<")
_LOWER_BOUND_HINTS = ("plus de", "more than", "over", "à partir de", "from", "min", ">")


def parse_budget_range(budget: Optional[str]) -> Optional[Tuple[int, Optional[int]]]:
    """
    Parse a free-text budget such as ``"5 000 € - 8 000 €"`` into a range.

    Args:
        budget: Budget text as shown on the listing

    Returns:
        Optional[Tuple[int, Optional[int]]]: (low, high) where high is None
        for open-ended budgets, or None when no amount can be read
    """
    if not budget:
        return None

    amounts = [parse_int(match.group(0)) for match in _AMOUNT.finditer(budget)]
    amounts = [amount for amount in amounts if amount is not None]
    if not amounts:
        return None

    if len(amounts) >= 2:
        return (min(amounts), max(amounts))

    amount = amounts[0]
    lowered = budget.lower()
    if any(hint in lowered for hint in _UPPER_BOUND_HINTS):
        return (0, amount)
    if any(hint in lowered for hint in _LOWER_BOUND_HINTS):
        return (amount, None)
    return (amount, amount)


def matches_keywords(candidate: CandidateProject, keywords: Optional[str]) -> bool:
    if not keywords:
        return True
    needle = keywords.lower()
    return (
        needle in (candidate.title or "").lower()
        or needle in (candidate.description or "").lower()
        or any(needle in skill.lower() for skill in candidate.skills)
    )


def matches_skills(candidate: CandidateProject, skills) -> bool:
    if not skills:
        return True
    return any(
        wanted.lower() in skill.lower()
        for wanted in skills
        for skill in candidate.skills
    )


def matches_budget(candidate: CandidateProject, budget_min: Optional[int], budget_max: Optional[int]) -> bool:
    if budget_min is None and budget_max is None:
        return True

    budget_range = parse_budget_range(candidate.budget)
    if budget_range is None:
        # Unreadable budgets are not grounds for rejection
        return True

    low, high = budget_range
    if budget_min is not None and high is not None and high < budget_min:
        return False
    if budget_max is not None and low > budget_max:
        return False
    return True


def matches_posted_days(candidate: CandidateProject, posted_days: Optional[int], now: datetime) -> bool:
    if not posted_days or candidate.posted_date is None:
        return True
    return candidate.posted_date >= now - timedelta(days=posted_days)


def matches_criteria(
    candidate: CandidateProject,
    criteria: SearchCriteria,
    now: Optional[datetime] = None,
    apply_budget: bool = True,
    apply_posted_days: bool = True,
) -> bool:
    """
    Check a candidate against the search criteria.

    Keywords match title, description or any skill; requested skills match
    when one of them is contained in one of the candidate's skills. Both
    comparisons are case-insensitive and the two groups are ANDed.

    Args:
        candidate: Listing to check
        criteria: Normalized search criteria
        now: Reference time for the posted_days window
        apply_budget: Whether budget_min/budget_max are enforced
        apply_posted_days: Whether posted_days is enforced

    Returns:
        bool: True if the candidate should be kept
    """
    if not matches_keywords(candidate, criteria.keywords):
        return False
    if not matches_skills(candidate, criteria.skills):
        return False
    if apply_budget and not matches_budget(candidate, criteria.budget_min, criteria.budget_max):
        return False
    if apply_posted_days and not matches_posted_days(candidate, criteria.posted_days, now or datetime.now()):
        return False
    return True


def filter_candidates(
    candidates: List[CandidateProject],
    criteria: SearchCriteria,
    now: Optional[datetime] = None,
    apply_budget: bool = True,
    apply_posted_days: bool = True,
) -> List[CandidateProject]:
    """Keep the candidates matching ``criteria``, preserving order."""
    now = now or datetime.now()
    return [
        candidate for candidate in candidates
        if matches_criteria(candidate, criteria, now, apply_budget, apply_posted_days)
    ]


class BaseSourceFetcher(abc.ABC):
    """
    Abstract base class for listing sources.

    Subclasses implement ``scrape``; callers use ``fetch``, which applies the
    criteria filter, keeps metrics and logs the outcome.
    """

    name = "source"

    def __init__(self, apply_budget_filter: bool = True, apply_posted_days_filter: bool = True):
        """
        Initialize the fetcher.

        Args:
            apply_budget_filter: Whether budget bounds are enforced
            apply_posted_days_filter: Whether the posted_days window is enforced
        """
        self.apply_budget_filter = apply_budget_filter
        self.apply_posted_days_filter = apply_posted_days_filter
        self.status: str = "initialized"
        self.error: Optional[str] = None
        self.last_fetch_time: Optional[datetime] = None
        self.metrics: Dict[str, Any] = {
            "fetch_count": 0,
            "failure_count": 0,
            "total_candidates": 0,
            "total_matches": 0,
        }

    @abc.abstractmethod
    async def scrape(self, criteria: SearchCriteria, now: datetime) -> List[CandidateProject]:
        """
        Produce raw candidates from the source.

        Args:
            criteria: Normalized search criteria (sources may use it to narrow
                their query; the final filter is applied by ``fetch``)
            now: Reference time for this fetch

        Returns:
            List[CandidateProject]: Unfiltered candidates
        """

    async def fetch(self, criteria: SearchCriteria) -> List[CandidateProject]:
        """
        Fetch candidates matching ``criteria``.

        Errors are recorded and re-raised so the caller can fail its session.
        """
        now = datetime.now()
        self.status = "running"
        self.error = None
        log_scraping_event(self.name, "start", f"Fetching with criteria {criteria.to_dict()}")

        try:
            raw = await self.scrape(criteria, now)
        except BaseException as e:
            self.status = "failed"
            self.error = str(e) or e.__class__.__name__
            self.metrics["failure_count"] += 1
            self.metrics["last_error"] = self.error
            raise

        matches = filter_candidates(
            raw,
            criteria,
            now=now,
            apply_budget=self.apply_budget_filter,
            apply_posted_days=self.apply_posted_days_filter,
        )

        self.status = "completed"
        self.last_fetch_time = now
        self.metrics["fetch_count"] += 1
        self.metrics["total_candidates"] += len(raw)
        self.metrics["total_matches"] += len(matches)

        log_scraping_event(self.name, "complete", f"{len(matches)} of {len(raw)} listings matched")
        return matches

    def get_status(self) -> Dict[str, Any]:
        """
        Get the status of the fetcher.

        Returns:
            Dict[str, Any]: Status information
        """
        return {
            "source": self.name,
            "status": self.status,
            "last_fetch": self.last_fetch_time.isoformat() if self.last_fetch_time else None,
            "error": self.error,
            "metrics": dict(self.metrics),
        }
