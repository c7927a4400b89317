#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Unit tests for message template rendering and management.
"""

import pytest

from codeur_prospection.errors import NotFoundError, TemplateValidationError
from codeur_prospection.models import MessageTemplate, Project, UserProfile
from codeur_prospection.templates import (
    DEFAULT_TEMPLATES,
    TemplateService,
    build_context,
    find_placeholders,
    render_message,
    render_template,
)


@pytest.fixture
def service(store):
    return TemplateService(store)


@pytest.fixture
def profile():
    return UserProfile(
        name="Camille Martin",
        experience_years=8,
        skills=["React", "Node.js"],
        portfolio_url="https://camille.dev",
        strengths=["Livraison rapide", "Code testé", "Communication claire"],
    )


class TestRenderTemplate:
    """Tests for placeholder substitution."""

    def test_substitutes_known_placeholder(self):
        assert render_template("Hi {NAME}", {"NAME": "Ana"}) == "Hi Ana"

    def test_unknown_placeholder_left_unchanged(self):
        assert render_template("Hi {NAME}", {}) == "Hi {NAME}"

    def test_repeated_placeholder(self):
        assert render_template("{X} et {X}", {"X": "1"}) == "1 et 1"

    def test_only_uppercase_tokens(self):
        assert render_template("{name} {NAME}", {"name": "a", "NAME": "b"}) == "{name} b"

    def test_non_string_values(self):
        assert render_template("{EXPERIENCE} ans", {"EXPERIENCE": 8}) == "8 ans"

    def test_empty_text(self):
        assert render_template(None, {"X": "1"}) == ""

    def test_find_placeholders(self):
        text = "Bonjour {CLIENT_NAME}, {PROJECT_TITLE} / {CLIENT_NAME} {lower}"

        assert find_placeholders(text) == ["CLIENT_NAME", "PROJECT_TITLE"]


class TestBuildContext:
    def test_project_and_profile(self, profile):
        project = Project(
            title="API Node.js",
            budget="3 000 €",
            skills=["Node.js", "Docker"],
            client_info={"name": "LogiStock Pro"},
        )

        context = build_context(project, profile)

        assert context["PROJECT_TITLE"] == "API Node.js"
        assert context["PROJECT_SKILLS"] == "Node.js, Docker"
        assert context["CLIENT_NAME"] == "LogiStock Pro"
        assert context["EXPERIENCE"] == "8"
        assert context["SKILLS"] == "React, Node.js"
        assert context["STRENGTH_3"] == "Communication claire"
        assert "PROJECT_URL" not in context

    def test_extra_overrides(self, profile):
        context = build_context(None, profile, extra={"YOUR_NAME": "Camille"})

        assert context["YOUR_NAME"] == "Camille"

    def test_render_message(self):
        template = MessageTemplate(name="t", subject="Re: {PROJECT_TITLE}", content="Bonjour {CLIENT_NAME}")

        rendered = render_message(template, {"PROJECT_TITLE": "Logo"})

        assert rendered.subject == "Re: Logo"
        assert rendered.content == "Bonjour {CLIENT_NAME}"


class TestTemplateService:
    """Tests for TemplateService."""

    def test_create_template(self, service):
        template = service.create_template(
            name="  Relance  ",
            content="Bonjour, avez-vous pu lire ma proposition ?",
            subject="Relance {PROJECT_TITLE}",
        )

        assert template.name == "Relance"
        assert template.category == "général"
        assert service.get_template(template.id).subject == "Relance {PROJECT_TITLE}"

    @pytest.mark.parametrize("name,content,missing", [
        ("", "Bonjour", ["name"]),
        ("Relance", "   ", ["content"]),
        (None, None, ["name", "content"]),
    ])
    def test_validation_leaves_no_partial_write(self, service, store, name, content, missing):
        with pytest.raises(TemplateValidationError) as exc_info:
            service.create_template(name=name, content=content)

        assert exc_info.value.missing_fields == missing
        assert store.count_templates() == 0

    def test_update_template(self, service):
        template = service.create_template(name="Relance", content="Bonjour")

        updated = service.update_template(template.id, content="Bonsoir", category="")

        assert updated.content == "Bonsoir"
        assert updated.category == "général"
        assert updated.name == "Relance"

    def test_update_rejects_blank_name(self, service):
        template = service.create_template(name="Relance", content="Bonjour")

        with pytest.raises(TemplateValidationError):
            service.update_template(template.id, name=" ")

    def test_delete_template(self, service, store):
        template = service.create_template(name="Relance", content="Bonjour")

        service.delete_template(template.id)

        assert store.count_templates() == 0
        with pytest.raises(NotFoundError):
            service.delete_template(template.id)

    def test_list_by_category(self, service):
        service.create_template(name="A", content="a", category="relance")
        service.create_template(name="B", content="b")

        assert [t.name for t in service.list_templates("relance")] == ["A"]
        assert len(service.list_templates()) == 2

    def test_seed_defaults_once(self, service):
        created = service.seed_defaults()

        assert [t.name for t in created] == [t["name"] for t in DEFAULT_TEMPLATES]
        assert service.seed_defaults() == []
        assert len(service.list_templates()) == len(DEFAULT_TEMPLATES)

    def test_render_default_template_for_project(self, service, sample_project, profile):
        template = service.seed_defaults()[0]

        rendered = service.render_for_project(template.id, sample_project.id, profile)

        assert rendered.subject == f"Proposition pour votre projet {sample_project.title}"
        assert "Camille Martin" in rendered.content
        assert "8 années d'expérience en React, Node.js" in rendered.content
        assert find_placeholders(rendered.content) == []

    def test_render_without_profile_keeps_placeholders(self, service, sample_project):
        template = service.seed_defaults()[0]

        rendered = service.render_for_project(template.id, sample_project.id)

        assert "{YOUR_NAME}" in rendered.content
        assert sample_project.title in rendered.content

    def test_render_unknown_ids(self, service, sample_project):
        template = service.seed_defaults()[0]

        with pytest.raises(NotFoundError):
            service.render_for_project("missing", sample_project.id)
        with pytest.raises(NotFoundError):
            service.render_for_project(template.id, "missing")
