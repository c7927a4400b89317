#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Unit tests for the prospect lifecycle manager.
"""

import pytest

from codeur_prospection.errors import DuplicateProspectError, InvalidTransitionError, NotFoundError
from codeur_prospection.lifecycle import LeadLifecycleManager, can_transition
from codeur_prospection.models import ProspectStatus


@pytest.fixture
def manager(store):
    return LeadLifecycleManager(store)


class TestTransitions:
    @pytest.mark.parametrize("current,target,allowed", [
        (ProspectStatus.NEW, ProspectStatus.CONTACTED, True),
        (ProspectStatus.NEW, ProspectStatus.RESPONDED, False),
        (ProspectStatus.NEW, ProspectStatus.REJECTED, False),
        (ProspectStatus.CONTACTED, ProspectStatus.RESPONDED, True),
        (ProspectStatus.CONTACTED, ProspectStatus.REJECTED, True),
        (ProspectStatus.RESPONDED, ProspectStatus.REJECTED, False),
        (ProspectStatus.REJECTED, ProspectStatus.CONTACTED, False),
    ])
    def test_can_transition(self, current, target, allowed):
        assert can_transition(current, target) is allowed


class TestLeadLifecycleManager:
    """Tests for LeadLifecycleManager."""

    def test_create_prospect(self, manager, sample_project):
        prospect = manager.create_prospect(sample_project.id, notes="Client sérieux")

        assert prospect.status == ProspectStatus.NEW
        assert prospect.project_id == sample_project.id
        assert prospect.contact_date is None
        assert prospect.notes == "Client sérieux"

    def test_create_for_unknown_project(self, manager):
        with pytest.raises(NotFoundError):
            manager.create_prospect("missing-project")

    def test_duplicate_prospect_rejected(self, manager, sample_project, store):
        first = manager.create_prospect(sample_project.id)

        with pytest.raises(DuplicateProspectError) as exc_info:
            manager.create_prospect(sample_project.id)

        assert exc_info.value.existing_id == first.id
        assert len(store.list_prospects()) == 1

    def test_duplicates_allowed_when_not_unique(self, store, sample_project):
        manager = LeadLifecycleManager(store, unique_per_project=False)

        manager.create_prospect(sample_project.id)
        manager.create_prospect(sample_project.id)

        assert len(store.list_prospects()) == 2

    def test_mark_contacted(self, manager, sample_project):
        prospect = manager.create_prospect(sample_project.id)

        contacted = manager.mark_contacted(prospect.id, message_sent="Bonjour, ...")

        assert contacted.status == ProspectStatus.CONTACTED
        assert contacted.contact_date is not None
        assert contacted.message_sent == "Bonjour, ..."

        reread = manager.get_prospect(prospect.id)
        assert reread.status == ProspectStatus.CONTACTED
        assert reread.contact_date == contacted.contact_date

    def test_new_cannot_become_responded(self, manager, sample_project):
        prospect = manager.create_prospect(sample_project.id)

        with pytest.raises(InvalidTransitionError):
            manager.mark_responded(prospect.id)

        assert manager.get_prospect(prospect.id).status == ProspectStatus.NEW

    def test_responded_after_contact(self, manager, sample_project):
        prospect = manager.create_prospect(sample_project.id)
        manager.mark_contacted(prospect.id)

        responded = manager.mark_responded(prospect.id, response="Intéressé, appelons-nous")

        assert responded.status == ProspectStatus.RESPONDED
        assert responded.response_received == "Intéressé, appelons-nous"

    def test_rejected_is_terminal(self, manager, sample_project):
        prospect = manager.create_prospect(sample_project.id)
        manager.mark_contacted(prospect.id)
        manager.mark_rejected(prospect.id)

        with pytest.raises(InvalidTransitionError):
            manager.mark_contacted(prospect.id)
        with pytest.raises(InvalidTransitionError):
            manager.mark_responded(prospect.id)

    def test_update_notes_in_any_status(self, manager, sample_project):
        prospect = manager.create_prospect(sample_project.id)
        manager.mark_contacted(prospect.id)
        manager.mark_rejected(prospect.id)

        updated = manager.update_notes(prospect.id, "Budget trop serré")

        assert updated.notes == "Budget trop serré"
        assert updated.status == ProspectStatus.REJECTED

    def test_unknown_prospect(self, manager):
        with pytest.raises(NotFoundError):
            manager.mark_contacted("missing")
        with pytest.raises(NotFoundError):
            manager.update_notes("missing", "x")

    def test_list_by_status(self, manager, store):
        from codeur_prospection.models import Project

        projects = store.insert_projects([Project(title="A"), Project(title="B")])
        first = manager.create_prospect(projects[0].id)
        manager.create_prospect(projects[1].id)
        manager.mark_contacted(first.id)

        assert [p.id for p in manager.list_prospects(ProspectStatus.CONTACTED)] == [first.id]
        assert len(manager.list_prospects(ProspectStatus.NEW)) == 1
        assert len(manager.list_prospects()) == 2
