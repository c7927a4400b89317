#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Unit tests for the HTTP API.
"""

from datetime import datetime
from typing import List

import pytest
from fastapi.testclient import TestClient

from codeur_prospection.api import app
from codeur_prospection.api.api import get_config, get_fetcher, get_store
from codeur_prospection.config import AppConfig
from codeur_prospection.criteria import SearchCriteria
from codeur_prospection.errors import SourceFetchError
from codeur_prospection.models import CandidateProject, SessionStatus
from codeur_prospection.scrapers.base_scraper import BaseSourceFetcher


class BrokenFetcher(BaseSourceFetcher):
    name = "broken"

    async def scrape(self, criteria: SearchCriteria, now: datetime) -> List[CandidateProject]:
        raise SourceFetchError("codeur.com unreachable")


@pytest.fixture
def client(mock_env_vars, store, mock_fetcher):
    app_config = AppConfig()
    app.dependency_overrides[get_config] = lambda: app_config
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_fetcher] = lambda: mock_fetcher
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class TestScrapeFunction:
    """Tests for /functions/scrape-codeur."""

    def test_options_returns_cors_headers(self, client):
        response = client.options("/functions/scrape-codeur")

        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-allow-headers"] == (
            "authorization, x-client-info, apikey, content-type"
        )

    def test_browser_preflight(self, client):
        response = client.options(
            "/functions/scrape-codeur",
            headers={
                "Origin": "https://dashboard.example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "content-type",
            },
        )

        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-allow-headers"] == (
            "authorization, x-client-info, apikey, content-type"
        )

    def test_other_routes_keep_middleware_preflight(self, client):
        response = client.options(
            "/api/prospects",
            headers={
                "Origin": "https://dashboard.example.com",
                "Access-Control-Request-Method": "GET",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"

    def test_scrape_success(self, client, store):
        response = client.post("/functions/scrape-codeur", json={"searchCriteria": {"keywords": "react"}})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["projectsFound"] == 2
        assert store.get_session(body["sessionId"]).status == SessionStatus.COMPLETED
        assert response.headers["access-control-allow-origin"] == "*"

    @pytest.mark.parametrize("kwargs", [
        {"content": b"not json", "headers": {"content-type": "application/json"}},
        {"json": ["react"]},
        {"json": {"searchCriteria": "react"}},
        {},
    ])
    def test_unusable_body_means_no_criteria(self, client, kwargs):
        response = client.post("/functions/scrape-codeur", **kwargs)

        assert response.status_code == 200
        assert response.json()["projectsFound"] == 5

    def test_scrape_failure(self, client, store):
        app.dependency_overrides[get_fetcher] = lambda: BrokenFetcher()

        response = client.post("/functions/scrape-codeur", json={"searchCriteria": {}})

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "codeur.com unreachable"}
        session = store.list_sessions()[0]
        assert session.status == SessionStatus.FAILED
        assert session.error_message == "codeur.com unreachable"


class TestDashboardRoutes:
    """Tests for the /api routes."""

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "operational"
        assert body["components"]["storage"]["status"] == "healthy"
        assert body["components"]["source"]["source"] == "codeur-mock"

    def test_projects_and_sessions(self, client):
        scrape = client.post("/functions/scrape-codeur", json={"searchCriteria": {}}).json()

        projects = client.get("/api/projects", params={"limit": 3})
        assert projects.status_code == 200
        assert len(projects.json()) == 3

        sessions = client.get("/api/sessions").json()
        assert sessions[0]["id"] == scrape["sessionId"]
        assert sessions[0]["status"] == "completed"

        session = client.get(f"/api/sessions/{scrape['sessionId']}")
        assert session.json()["projects_found"] == 5

        assert client.get("/api/sessions/missing").status_code == 404
        assert client.get("/api/projects", params={"limit": 0}).status_code == 400

    def test_prospect_lifecycle(self, client, sample_project):
        created = client.post("/api/prospects", json={"project_id": sample_project.id})
        assert created.status_code == 201
        prospect_id = created.json()["id"]
        assert created.json()["status"] == "new"

        duplicate = client.post("/api/prospects", json={"project_id": sample_project.id})
        assert duplicate.status_code == 409

        too_early = client.post(f"/api/prospects/{prospect_id}/responded", json={})
        assert too_early.status_code == 409

        contacted = client.post(
            f"/api/prospects/{prospect_id}/contacted",
            json={"message_sent": "Bonjour"},
        )
        assert contacted.status_code == 200
        assert contacted.json()["status"] == "contacted"
        assert contacted.json()["contact_date"] is not None

        rejected = client.post(f"/api/prospects/{prospect_id}/rejected")
        assert rejected.json()["status"] == "rejected"

        notes = client.patch(f"/api/prospects/{prospect_id}/notes", json={"notes": "A relancer en mars"})
        assert notes.json()["notes"] == "A relancer en mars"

        listed = client.get("/api/prospects", params={"status": "rejected"}).json()
        assert [p["id"] for p in listed] == [prospect_id]
        assert client.get("/api/prospects", params={"status": "contacted"}).json() == []

    def test_prospect_errors(self, client):
        assert client.post("/api/prospects", json={"project_id": "missing"}).status_code == 404
        assert client.post("/api/prospects", json={"project_id": "  "}).status_code == 400
        assert client.post("/api/prospects", json={}).status_code == 400
        assert client.post("/api/prospects/missing/contacted").status_code == 404
        assert client.get("/api/prospects", params={"status": "archived"}).status_code == 400

    def test_templates(self, client, sample_project):
        invalid = client.post("/api/templates", json={"name": "Relance"})
        assert invalid.status_code == 400
        assert client.get("/api/templates").json() == []

        created = client.post(
            "/api/templates",
            json={
                "name": "Relance",
                "subject": "Suite à votre projet {PROJECT_TITLE}",
                "content": "Bonjour {CLIENT_NAME}, je reviens vers vous. {YOUR_NAME}",
            },
        )
        assert created.status_code == 201
        template = created.json()
        assert template["category"] == "général"

        rendered = client.post(
            f"/api/templates/{template['id']}/render",
            json={"project_id": sample_project.id},
        )
        assert rendered.status_code == 200
        assert rendered.json() == {
            "subject": f"Suite à votre projet {sample_project.title}",
            "content": "Bonjour LogiStock Pro, je reviens vers vous. Camille Martin",
        }

        assert client.get("/api/templates", params={"category": "général"}).json()[0]["id"] == template["id"]
        assert client.delete(f"/api/templates/{template['id']}").status_code == 204
        assert client.delete(f"/api/templates/{template['id']}").status_code == 404
        assert client.post(f"/api/templates/{template['id']}/render", json={}).status_code == 404
