#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Message template management.

CRUD over the template table plus rendering a template for a stored project.
"""

from typing import Any, Dict, List, Mapping, Optional

from codeur_prospection.errors import NotFoundError, TemplateValidationError
from codeur_prospection.models import MessageTemplate, UserProfile
from codeur_prospection.storage.base import ProspectionStore
from codeur_prospection.templates.renderer import RenderedMessage, build_context, render_message
from codeur_prospection.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CATEGORY = "général"

DEFAULT_TEMPLATES: List[Dict[str, str]] = [
    {
        "name": "Présentation générale",
        "subject": "Proposition pour votre projet {PROJECT_TITLE}",
        "content": (
            "Bonjour,\n"
            "\n"
            "J'ai consulté votre projet \"{PROJECT_TITLE}\" et je suis très intéressé(e) "
            "par cette opportunité.\n"
            "\n"
            "Avec {EXPERIENCE} années d'expérience en {SKILLS}, je peux vous proposer "
            "une solution adaptée à vos besoins spécifiques.\n"
            "\n"
            "Mes points forts :\n"
            "- {STRENGTH_1}\n"
            "- {STRENGTH_2}\n"
            "- {STRENGTH_3}\n"
            "\n"
            "Je serais ravi(e) de discuter plus en détail de votre projet.\n"
            "\n"
            "Cordialement,\n"
            "{YOUR_NAME}"
        ),
        "category": DEFAULT_CATEGORY,
    },
]


def _clean(value: Optional[str]) -> str:
    return value.strip() if isinstance(value, str) else ""


class TemplateService:
    """Manages outreach message templates."""

    def __init__(self, store: ProspectionStore):
        self.store = store

    def create_template(
        self,
        name: Optional[str],
        content: Optional[str],
        subject: Optional[str] = None,
        category: Optional[str] = None,
    ) -> MessageTemplate:
        """
        Create a template.

        Name and content are required; nothing is written when either is
        missing or blank.

        Raises:
            TemplateValidationError: A required field is missing
        """
        name = _clean(name)
        content = content if isinstance(content, str) else ""

        missing = []
        if not name:
            missing.append("name")
        if not content.strip():
            missing.append("content")
        if missing:
            raise TemplateValidationError(missing)

        template = self.store.create_template(MessageTemplate(
            name=name,
            subject=_clean(subject),
            content=content,
            category=_clean(category) or DEFAULT_CATEGORY,
        ))
        logger.info(f"Created message template {template.id} ({template.name})")
        return template

    def update_template(self, template_id: str, **fields: Any) -> MessageTemplate:
        """Update some template fields; name and content may not become blank."""
        updates = {key: value for key, value in fields.items() if value is not None}

        missing = []
        if "name" in updates:
            updates["name"] = _clean(updates["name"])
            if not updates["name"]:
                missing.append("name")
        if "content" in updates and not str(updates["content"]).strip():
            missing.append("content")
        if missing:
            raise TemplateValidationError(missing)

        if "subject" in updates:
            updates["subject"] = _clean(updates["subject"])
        if "category" in updates:
            updates["category"] = _clean(updates["category"]) or DEFAULT_CATEGORY

        return self.store.update_template(template_id, **updates)

    def delete_template(self, template_id: str) -> None:
        if not self.store.delete_template(template_id):
            raise NotFoundError("Message template", template_id)
        logger.info(f"Deleted message template {template_id}")

    def get_template(self, template_id: str) -> MessageTemplate:
        template = self.store.get_template(template_id)
        if template is None:
            raise NotFoundError("Message template", template_id)
        return template

    def list_templates(self, category: Optional[str] = None) -> List[MessageTemplate]:
        return self.store.list_templates(category)

    def seed_defaults(self) -> List[MessageTemplate]:
        """Insert the default templates when no template exists yet."""
        if self.store.count_templates() > 0:
            return []

        created = [self.create_template(**template) for template in DEFAULT_TEMPLATES]
        logger.info(f"Seeded {len(created)} default message templates")
        return created

    def render_for_project(
        self,
        template_id: str,
        project_id: Optional[str] = None,
        profile: Optional[UserProfile] = None,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> RenderedMessage:
        """
        Render a stored template for a stored project.

        Raises:
            NotFoundError: Unknown template or project
        """
        template = self.get_template(template_id)

        project = None
        if project_id is not None:
            project = self.store.get_project(project_id)
            if project is None:
                raise NotFoundError("Project", project_id)

        return render_message(template, build_context(project, profile, extra))
