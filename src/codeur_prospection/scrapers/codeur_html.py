#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Codeur.com listing scraper.

Downloads the public project listing with requests and extracts project cards
with BeautifulSoup. Every selector is configurable so markup changes only
need a configuration update.
"""

import asyncio
from datetime import datetime
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup

from codeur_prospection.criteria import SearchCriteria
from codeur_prospection.errors import SourceFetchError
from codeur_prospection.models import CandidateProject
from codeur_prospection.models.entities import parse_datetime
from codeur_prospection.scrapers.base_scraper import BaseSourceFetcher
from codeur_prospection.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_SELECTORS: Dict[str, str] = {
    "card": "div.project, article.project, li.project",
    "title": "h3 a, h2 a, .project-title a, .project-title",
    "description": ".project-description, .description, p",
    "budget": ".project-budget, .budget",
    "skills": ".project-skills a, .project-skills li, .tags a, .skills li",
    "date": "time",
    "client": ".project-client, .client-name",
}


class CodeurHTMLFetcher(BaseSourceFetcher):
    """Scrapes project cards from the Codeur.com listing page."""

    name = "codeur-html"

    def __init__(
        self,
        base_url: str = "https://www.codeur.com",
        listing_path: str = "/projects",
        search_param: str = "q",
        user_agent: Optional[str] = None,
        request_timeout: float = 15.0,
        selectors: Optional[Dict[str, str]] = None,
        session: Optional[requests.Session] = None,
        **kwargs: Any,
    ):
        """
        Initialize the scraper.

        Args:
            base_url: Site root, used to resolve relative project links
            listing_path: Path of the listing page
            search_param: Query parameter carrying the keywords
            user_agent: User-Agent header sent with requests
            request_timeout: Per-request timeout in seconds
            selectors: Overrides for DEFAULT_SELECTORS
            session: Preconfigured requests session
        """
        super().__init__(**kwargs)
        self.base_url = base_url.rstrip("/") + "/"
        self.listing_url = urljoin(self.base_url, listing_path.lstrip("/"))
        self.search_param = search_param
        self.request_timeout = request_timeout
        self.selectors = {**DEFAULT_SELECTORS, **(selectors or {})}

        # Initialize session for requests
        self.session = session or requests.Session()
        if user_agent:
            self.session.headers.update({"User-Agent": user_agent})

    def download(self, criteria: SearchCriteria) -> str:
        """Fetch the listing page HTML."""
        params = {}
        if criteria.keywords:
            params[self.search_param] = criteria.keywords

        try:
            response = self.session.get(self.listing_url, params=params, timeout=self.request_timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Error fetching {self.listing_url}: {str(e)}")
            raise SourceFetchError(f"Could not fetch {self.listing_url}: {str(e)}") from e

        return response.text

    def parse(self, html: str) -> List[CandidateProject]:
        """
        Extract project cards from listing HTML.

        Cards without a title are skipped.
        """
        try:
            soup = BeautifulSoup(html, "html.parser")
        except Exception as e:
            raise SourceFetchError(f"Could not parse listing page: {str(e)}") from e

        candidates = []
        for card in soup.select(self.selectors["card"]):
            title_element = card.select_one(self.selectors["title"])
            if title_element is None:
                continue

            title = title_element.get_text(" ", strip=True)
            if not title:
                continue

            link_element = title_element if title_element.name == "a" else title_element.find("a")
            href = link_element.get("href") if link_element is not None else None

            description_element = card.select_one(self.selectors["description"])
            budget_element = card.select_one(self.selectors["budget"])
            client_element = card.select_one(self.selectors["client"])

            skills = []
            for skill_element in card.select(self.selectors["skills"]):
                skill = skill_element.get_text(" ", strip=True)
                if skill and skill not in skills:
                    skills.append(skill)

            candidates.append(CandidateProject(
                title=title,
                description=description_element.get_text(" ", strip=True) if description_element else None,
                budget=budget_element.get_text(" ", strip=True) if budget_element else None,
                skills=skills,
                posted_date=self._extract_date(card),
                url=urljoin(self.base_url, href) if href else None,
                client_info={"name": client_element.get_text(" ", strip=True)} if client_element else None,
            ))

        logger.debug(f"Parsed {len(candidates)} project cards from listing page")
        return candidates

    def _extract_date(self, card) -> Optional[datetime]:
        date_element = card.select_one(self.selectors["date"])
        if date_element is None:
            return None
        return parse_datetime(date_element.get("datetime") or date_element.get_text(strip=True))

    async def scrape(self, criteria: SearchCriteria, now: datetime) -> List[CandidateProject]:
        # requests is blocking; keep the event loop free while it runs
        html = await asyncio.to_thread(self.download, criteria)
        return self.parse(html)
