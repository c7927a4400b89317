#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Unit tests for the SQLAlchemy store.
"""

from datetime import datetime

import pytest

from codeur_prospection.errors import NotFoundError, SessionStateError
from codeur_prospection.models import (
    MessageTemplate,
    Project,
    Prospect,
    ProspectStatus,
    SessionStatus,
)
from codeur_prospection.storage import SQLAlchemyStore


class TestSessions:
    """Tests for scraping session persistence."""

    def test_create_running_session(self, store):
        session = store.create_session({"keywords": "react"})

        assert session.status == SessionStatus.RUNNING
        assert session.completed_at is None
        assert store.get_session(session.id).search_criteria == {"keywords": "react"}

    def test_complete_session(self, store):
        session = store.create_session({})

        completed = store.complete_session(session.id, 4)

        assert completed.status == SessionStatus.COMPLETED
        assert completed.projects_found == 4
        assert completed.completed_at is not None

    def test_terminal_session_cannot_change(self, store):
        session = store.create_session({})
        store.fail_session(session.id, "boom")

        with pytest.raises(SessionStateError):
            store.complete_session(session.id, 3)

        reread = store.get_session(session.id)
        assert reread.status == SessionStatus.FAILED
        assert reread.error_message == "boom"
        assert reread.projects_found is None

    def test_unknown_session(self, store):
        assert store.get_session("missing") is None
        with pytest.raises(NotFoundError):
            store.fail_session("missing", "boom")

    def test_list_sessions_newest_first(self, store):
        first = store.create_session({"keywords": "a"})
        second = store.create_session({"keywords": "b"})

        ids = [s.id for s in store.list_sessions()]

        assert ids.index(second.id) < ids.index(first.id)


class TestProjects:
    """Tests for project persistence."""

    def test_insert_round_trip(self, store):
        posted = datetime(2026, 10, 17, 9, 30)
        project = Project(
            title="Refonte WordPress",
            skills=["WordPress", "PHP"],
            posted_date=posted,
            url="https://codeur.com/projects/123457",
            client_info={"name": "Marketing Plus", "verified": False},
        )

        stored = store.insert_projects([project])[0]
        reread = store.get_project(stored.id)

        assert reread.title == "Refonte WordPress"
        assert reread.skills == ["WordPress", "PHP"]
        assert reread.posted_date == posted
        assert reread.client_info == {"name": "Marketing Plus", "verified": False}
        assert reread.client_name == "Marketing Plus"

    def test_find_existing_urls(self, store):
        store.insert_projects([
            Project(title="A", url="https://codeur.com/projects/1"),
            Project(title="B"),
        ])

        found = store.find_existing_urls([
            "https://codeur.com/projects/1",
            "https://codeur.com/projects/2",
            None,
        ])

        assert found == {"https://codeur.com/projects/1"}

    def test_list_and_count(self, store):
        store.insert_projects([Project(title=str(i)) for i in range(5)])

        assert store.count_projects() == 5
        assert len(store.list_projects(limit=2)) == 2
        assert len(store.list_projects(limit=10, offset=3)) == 2

    def test_delete_project_detaches_prospects(self, store, sample_project):
        prospect = store.create_prospect(Prospect(project_id=sample_project.id))

        assert store.delete_project(sample_project.id) is True
        assert store.get_project(sample_project.id) is None
        assert store.get_prospect(prospect.id).project_id is None
        assert store.delete_project(sample_project.id) is False


class TestProspects:
    def test_update_prospect(self, store, sample_project):
        prospect = store.create_prospect(Prospect(project_id=sample_project.id))

        updated = store.update_prospect(prospect.id, status=ProspectStatus.CONTACTED, notes="Appel prévu")

        assert updated.status == ProspectStatus.CONTACTED
        assert updated.notes == "Appel prévu"
        assert updated.updated_at >= prospect.updated_at

    def test_update_rejects_unknown_fields(self, store, sample_project):
        prospect = store.create_prospect(Prospect(project_id=sample_project.id))

        with pytest.raises(ValueError):
            store.update_prospect(prospect.id, project_id="other")

    def test_update_unknown_prospect(self, store):
        with pytest.raises(NotFoundError):
            store.update_prospect("missing", notes="x")

    def test_find_prospect_by_project(self, store, sample_project):
        assert store.find_prospect_by_project(sample_project.id) is None

        prospect = store.create_prospect(Prospect(project_id=sample_project.id))

        assert store.find_prospect_by_project(sample_project.id).id == prospect.id


class TestTemplates:
    def test_template_crud(self, store):
        template = store.create_template(MessageTemplate(name="Relance", content="Bonjour"))

        assert store.count_templates() == 1
        assert store.update_template(template.id, subject="Suivi").subject == "Suivi"
        assert store.delete_template(template.id) is True
        assert store.get_template(template.id) is None

    def test_update_unknown_template(self, store):
        with pytest.raises(NotFoundError):
            store.update_template("missing", name="x")


class TestEngine:
    def test_in_memory_database_is_shared(self):
        store = SQLAlchemyStore("sqlite:///:memory:")
        try:
            store.insert_projects([Project(title="A")])
            assert store.count_projects() == 1
        finally:
            store.dispose()

    def test_is_connected(self, store):
        assert store.is_connected() is True

    def test_creates_missing_directory(self, tmp_path):
        db_path = tmp_path / "nested" / "dir" / "prospection.db"

        store = SQLAlchemyStore(f"sqlite:///{db_path}")
        try:
            assert db_path.parent.exists()
        finally:
            store.dispose()
