"""
Domain entities for the Codeur Prospection Bot.
"""

from .entities import (
    CandidateProject,
    MessageTemplate,
    Project,
    Prospect,
    ProspectStatus,
    ScrapingSession,
    SessionStatus,
    UserProfile,
)

__all__ = [
    "CandidateProject",
    "MessageTemplate",
    "Project",
    "Prospect",
    "ProspectStatus",
    "ScrapingSession",
    "SessionStatus",
    "UserProfile",
]
