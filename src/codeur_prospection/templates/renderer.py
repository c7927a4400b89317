#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Template Renderer - fills {PLACEHOLDER} tokens in outreach messages.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from codeur_prospection.models import MessageTemplate, Project, UserProfile

PLACEHOLDER_PATTERN = re.compile(r"\{([A-Z0-9_]+)\}")


@dataclass
class RenderedMessage:
    subject: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"subject": self.subject, "content": self.content}


def render_template(text: Optional[str], context: Mapping[str, Any]) -> str:
    """
    Substitute ``{TOKEN}`` placeholders with values from ``context``.

    Tokens with no entry in the context are left as they are.

    Args:
        text: Template text
        context: Token name to value

    Returns:
        str: Rendered text
    """
    if not text:
        return ""

    def replace(match: "re.Match[str]") -> str:
        token = match.group(1)
        if token in context and context[token] is not None:
            return str(context[token])
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(replace, text)


def find_placeholders(text: Optional[str]) -> List[str]:
    """Placeholder names in order of first appearance."""
    if not text:
        return []
    seen: List[str] = []
    for token in PLACEHOLDER_PATTERN.findall(text):
        if token not in seen:
            seen.append(token)
    return seen


def render_message(template: MessageTemplate, context: Mapping[str, Any]) -> RenderedMessage:
    return RenderedMessage(
        subject=render_template(template.subject, context),
        content=render_template(template.content, context),
    )


def build_context(
    project: Optional[Project] = None,
    profile: Optional[UserProfile] = None,
    extra: Optional[Mapping[str, Any]] = None,
) -> Dict[str, str]:
    """
    Build the placeholder values for a project and the freelancer profile.

    Missing values are omitted so their placeholders stay visible in the
    rendered text. ``extra`` entries override computed ones.
    """
    context: Dict[str, str] = {}

    if project is not None:
        context["PROJECT_TITLE"] = project.title
        if project.description:
            context["PROJECT_DESCRIPTION"] = project.description
        if project.budget:
            context["PROJECT_BUDGET"] = project.budget
        if project.url:
            context["PROJECT_URL"] = project.url
        if project.skills:
            context["PROJECT_SKILLS"] = ", ".join(project.skills)
        if project.client_name:
            context["CLIENT_NAME"] = project.client_name

    if profile is not None:
        if profile.name:
            context["YOUR_NAME"] = profile.name
        if profile.experience_years is not None:
            context["EXPERIENCE"] = str(profile.experience_years)
        if profile.skills:
            context["SKILLS"] = ", ".join(profile.skills)
        if profile.portfolio_url:
            context["PORTFOLIO"] = profile.portfolio_url
        for index, strength in enumerate(profile.strengths, start=1):
            context[f"STRENGTH_{index}"] = strength

    if extra:
        context.update({key: str(value) for key, value in extra.items() if value is not None})

    return context
