"""
Message templates: placeholder rendering and template management.
"""

from .renderer import (
    RenderedMessage,
    build_context,
    find_placeholders,
    render_message,
    render_template,
)
from .service import DEFAULT_TEMPLATES, TemplateService

__all__ = [
    "DEFAULT_TEMPLATES",
    "RenderedMessage",
    "TemplateService",
    "build_context",
    "find_placeholders",
    "render_message",
    "render_template",
]
