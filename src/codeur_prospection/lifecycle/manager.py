#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Lead Lifecycle Manager

Creates prospects from stored projects and moves them through their contact
statuses: new -> contacted -> responded | rejected.
"""

from datetime import datetime
from typing import Dict, FrozenSet, List, Optional

from codeur_prospection.errors import DuplicateProspectError, InvalidTransitionError, NotFoundError
from codeur_prospection.models import Prospect, ProspectStatus
from codeur_prospection.storage.base import ProspectionStore
from codeur_prospection.utils.logger import get_logger, log_lifecycle_event

logger = get_logger(__name__)

# Reachable statuses from each status. Responded and rejected are terminal.
ALLOWED_TRANSITIONS: Dict[ProspectStatus, FrozenSet[ProspectStatus]] = {
    ProspectStatus.NEW: frozenset({ProspectStatus.CONTACTED}),
    ProspectStatus.CONTACTED: frozenset({ProspectStatus.RESPONDED, ProspectStatus.REJECTED}),
    ProspectStatus.RESPONDED: frozenset(),
    ProspectStatus.REJECTED: frozenset(),
}


def can_transition(current: ProspectStatus, target: ProspectStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


class LeadLifecycleManager:
    """
    Manager for the prospect contact lifecycle.

    Each transition is a single update keyed by prospect id; concurrent
    writers are not detected and the last one wins.
    """

    def __init__(self, store: ProspectionStore, unique_per_project: bool = True):
        """
        Initialize the manager.

        Args:
            store: Persistence backend
            unique_per_project: Refuse a second prospect for the same project
        """
        self.store = store
        self.unique_per_project = unique_per_project

    def create_prospect(self, project_id: str, notes: Optional[str] = None) -> Prospect:
        """
        Start tracking a project as a prospect in the ``new`` status.

        Raises:
            NotFoundError: The project does not exist
            DuplicateProspectError: The project already has a prospect
        """
        if self.store.get_project(project_id) is None:
            raise NotFoundError("Project", project_id)

        if self.unique_per_project:
            existing = self.store.find_prospect_by_project(project_id)
            if existing is not None:
                raise DuplicateProspectError(project_id, existing.id)

        prospect = self.store.create_prospect(Prospect(project_id=project_id, notes=notes))
        log_lifecycle_event(prospect.id, "created", f"Tracking project {project_id}")
        return prospect

    def get_prospect(self, prospect_id: str) -> Prospect:
        prospect = self.store.get_prospect(prospect_id)
        if prospect is None:
            raise NotFoundError("Prospect", prospect_id)
        return prospect

    def list_prospects(self, status: Optional[ProspectStatus] = None) -> List[Prospect]:
        return self.store.list_prospects(status)

    def mark_contacted(self, prospect_id: str, message_sent: Optional[str] = None) -> Prospect:
        """Move a new prospect to contacted and stamp the contact date."""
        fields = {"contact_date": datetime.now()}
        if message_sent is not None:
            fields["message_sent"] = message_sent
        return self._transition(prospect_id, ProspectStatus.CONTACTED, **fields)

    def mark_responded(self, prospect_id: str, response: Optional[str] = None) -> Prospect:
        """Record that a contacted client answered."""
        fields = {}
        if response is not None:
            fields["response_received"] = response
        return self._transition(prospect_id, ProspectStatus.RESPONDED, **fields)

    def mark_rejected(self, prospect_id: str) -> Prospect:
        """Record that a contacted client declined."""
        return self._transition(prospect_id, ProspectStatus.REJECTED)

    def update_notes(self, prospect_id: str, notes: Optional[str]) -> Prospect:
        """Replace the free-form notes; allowed in any status."""
        self.get_prospect(prospect_id)
        prospect = self.store.update_prospect(prospect_id, notes=notes)
        log_lifecycle_event(prospect_id, "notes", "Notes updated")
        return prospect

    def _transition(self, prospect_id: str, target: ProspectStatus, **fields) -> Prospect:
        prospect = self.get_prospect(prospect_id)

        if not can_transition(prospect.status, target):
            logger.warning(
                f"Rejected transition of prospect {prospect_id} "
                f"from {prospect.status.value} to {target.value}"
            )
            raise InvalidTransitionError(prospect_id, prospect.status.value, target.value)

        updated = self.store.update_prospect(prospect_id, status=target, **fields)
        log_lifecycle_event(
            prospect_id, target.value, f"{prospect.status.value} -> {target.value}"
        )
        return updated
