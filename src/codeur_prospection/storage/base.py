#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Store interface.

Every component receives a ProspectionStore instead of reaching for a global
database handle, so the core can run against any backend (or a fake in tests).
"""

import abc
from typing import Any, Dict, Iterable, List, Optional, Set

from codeur_prospection.models import (
    MessageTemplate,
    Project,
    Prospect,
    ProspectStatus,
    ScrapingSession,
)


class ProspectionStore(abc.ABC):
    """Persistence operations used by the prospection core."""

    # Scraping sessions

    @abc.abstractmethod
    def create_session(self, search_criteria: Dict[str, Any]) -> ScrapingSession:
        """Insert a session in the running state."""

    @abc.abstractmethod
    def complete_session(self, session_id: str, projects_found: int) -> ScrapingSession:
        """Move a running session to completed."""

    @abc.abstractmethod
    def fail_session(self, session_id: str, error_message: str) -> ScrapingSession:
        """Move a running session to failed."""

    @abc.abstractmethod
    def get_session(self, session_id: str) -> Optional[ScrapingSession]:
        pass

    @abc.abstractmethod
    def list_sessions(self, limit: int = 50) -> List[ScrapingSession]:
        pass

    # Projects

    @abc.abstractmethod
    def insert_projects(self, projects: List[Project]) -> List[Project]:
        """Insert all projects in one transaction."""

    @abc.abstractmethod
    def find_existing_urls(self, urls: Iterable[str]) -> Set[str]:
        """Return the subset of ``urls`` already stored on some project."""

    @abc.abstractmethod
    def get_project(self, project_id: str) -> Optional[Project]:
        pass

    @abc.abstractmethod
    def list_projects(self, limit: int = 100, offset: int = 0) -> List[Project]:
        pass

    @abc.abstractmethod
    def delete_project(self, project_id: str) -> bool:
        """Delete a project, detaching any prospect that referenced it."""

    # Prospects

    @abc.abstractmethod
    def create_prospect(self, prospect: Prospect) -> Prospect:
        pass

    @abc.abstractmethod
    def get_prospect(self, prospect_id: str) -> Optional[Prospect]:
        pass

    @abc.abstractmethod
    def find_prospect_by_project(self, project_id: str) -> Optional[Prospect]:
        pass

    @abc.abstractmethod
    def list_prospects(self, status: Optional[ProspectStatus] = None) -> List[Prospect]:
        pass

    @abc.abstractmethod
    def update_prospect(self, prospect_id: str, **fields: Any) -> Prospect:
        """Apply ``fields`` to one prospect in a single update."""

    # Message templates

    @abc.abstractmethod
    def create_template(self, template: MessageTemplate) -> MessageTemplate:
        pass

    @abc.abstractmethod
    def get_template(self, template_id: str) -> Optional[MessageTemplate]:
        pass

    @abc.abstractmethod
    def list_templates(self, category: Optional[str] = None) -> List[MessageTemplate]:
        pass

    @abc.abstractmethod
    def update_template(self, template_id: str, **fields: Any) -> MessageTemplate:
        pass

    @abc.abstractmethod
    def delete_template(self, template_id: str) -> bool:
        pass

    @abc.abstractmethod
    def count_templates(self) -> int:
        pass

    def is_connected(self) -> bool:
        """Whether the backend answers; used by the health endpoint."""
        return True
