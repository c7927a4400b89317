#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Entities - Projects, scraping sessions, prospects and message templates.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Any, Optional


def _new_id() -> str:
    return str(uuid.uuid4())


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO timestamp, returning None for anything unusable."""
    if value is None or isinstance(value, datetime):
        return value
    try:
        text = str(value)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    except (ValueError, TypeError):
        return None
    # Stored timestamps are naive local time
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


class SessionStatus(str, Enum):
    """Status of a scraping session."""
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class ProspectStatus(str, Enum):
    """Contact status of a prospect."""
    NEW = "new"
    CONTACTED = "contacted"
    RESPONDED = "responded"
    REJECTED = "rejected"


@dataclass
class CandidateProject:
    """A listing produced by a source fetcher, not yet persisted."""
    title: str
    description: Optional[str] = None
    budget: Optional[str] = None
    skills: List[str] = field(default_factory=list)
    posted_date: Optional[datetime] = None
    url: Optional[str] = None
    client_info: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "budget": self.budget,
            "skills": list(self.skills),
            "posted_date": _isoformat(self.posted_date),
            "url": self.url,
            "client_info": self.client_info,
        }


@dataclass
class Project:
    """
    A scraped freelance project listing.

    Written once by ingestion; only the timestamps change afterwards.
    """

    title: str
    id: str = field(default_factory=_new_id)
    description: Optional[str] = None
    budget: Optional[str] = None
    skills: List[str] = field(default_factory=list)
    posted_date: Optional[datetime] = None
    url: Optional[str] = None
    client_info: Optional[Dict[str, Any]] = None
    scraped_at: datetime = field(default_factory=datetime.now)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_candidate(cls, candidate: CandidateProject, scraped_at: Optional[datetime] = None) -> "Project":
        """Build a new project from a fetched candidate."""
        now = scraped_at or datetime.now()
        return cls(
            title=candidate.title,
            description=candidate.description,
            budget=candidate.budget,
            skills=list(candidate.skills),
            posted_date=candidate.posted_date,
            url=candidate.url,
            client_info=candidate.client_info,
            scraped_at=now,
            created_at=now,
            updated_at=now,
        )

    @property
    def client_name(self) -> Optional[str]:
        if isinstance(self.client_info, dict):
            return self.client_info.get("name")
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert project to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "budget": self.budget,
            "skills": list(self.skills),
            "posted_date": _isoformat(self.posted_date),
            "url": self.url,
            "client_info": self.client_info,
            "scraped_at": _isoformat(self.scraped_at),
            "created_at": _isoformat(self.created_at),
            "updated_at": _isoformat(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        """Create a project from dictionary data."""
        now = datetime.now()
        return cls(
            id=data.get("id") or _new_id(),
            title=data.get("title", ""),
            description=data.get("description"),
            budget=data.get("budget"),
            skills=list(data.get("skills") or []),
            posted_date=parse_datetime(data.get("posted_date")),
            url=data.get("url"),
            client_info=data.get("client_info"),
            scraped_at=parse_datetime(data.get("scraped_at")) or now,
            created_at=parse_datetime(data.get("created_at")) or now,
            updated_at=parse_datetime(data.get("updated_at")) or now,
        )


@dataclass
class ScrapingSession:
    """One execution record of a fetch-and-ingest cycle."""

    id: str = field(default_factory=_new_id)
    search_criteria: Dict[str, Any] = field(default_factory=dict)
    status: SessionStatus = SessionStatus.RUNNING
    projects_found: Optional[int] = None
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None
    error_message: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in (SessionStatus.COMPLETED, SessionStatus.FAILED)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "search_criteria": self.search_criteria,
            "status": self.status.value,
            "projects_found": self.projects_found,
            "started_at": _isoformat(self.started_at),
            "completed_at": _isoformat(self.completed_at),
            "error_message": self.error_message,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScrapingSession":
        """Create a session from dictionary data."""
        return cls(
            id=data.get("id") or _new_id(),
            search_criteria=dict(data.get("search_criteria") or {}),
            status=SessionStatus(data.get("status") or SessionStatus.RUNNING.value),
            projects_found=data.get("projects_found"),
            started_at=parse_datetime(data.get("started_at")) or datetime.now(),
            completed_at=parse_datetime(data.get("completed_at")),
            error_message=data.get("error_message"),
        )


@dataclass
class Prospect:
    """A project the user decided to pursue."""

    project_id: Optional[str]
    id: str = field(default_factory=_new_id)
    status: ProspectStatus = ProspectStatus.NEW
    contact_date: Optional[datetime] = None
    message_sent: Optional[str] = None
    response_received: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "status": self.status.value,
            "contact_date": _isoformat(self.contact_date),
            "message_sent": self.message_sent,
            "response_received": self.response_received,
            "notes": self.notes,
            "created_at": _isoformat(self.created_at),
            "updated_at": _isoformat(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Prospect":
        now = datetime.now()
        return cls(
            id=data.get("id") or _new_id(),
            project_id=data.get("project_id"),
            status=ProspectStatus(data.get("status") or ProspectStatus.NEW.value),
            contact_date=parse_datetime(data.get("contact_date")),
            message_sent=data.get("message_sent"),
            response_received=data.get("response_received"),
            notes=data.get("notes"),
            created_at=parse_datetime(data.get("created_at")) or now,
            updated_at=parse_datetime(data.get("updated_at")) or now,
        )


@dataclass
class MessageTemplate:
    """A reusable outreach message with {PLACEHOLDER} tokens."""

    name: str
    content: str
    subject: str = ""
    category: str = "général"
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "subject": self.subject,
            "content": self.content,
            "category": self.category,
            "created_at": _isoformat(self.created_at),
            "updated_at": _isoformat(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MessageTemplate":
        now = datetime.now()
        return cls(
            id=data.get("id") or _new_id(),
            name=data.get("name", ""),
            subject=data.get("subject") or "",
            content=data.get("content", ""),
            category=data.get("category") or "général",
            created_at=parse_datetime(data.get("created_at")) or now,
            updated_at=parse_datetime(data.get("updated_at")) or now,
        )


@dataclass
class UserProfile:
    """Freelancer profile used when filling message templates."""
    name: Optional[str] = None
    experience_years: Optional[int] = None
    skills: List[str] = field(default_factory=list)
    portfolio_url: Optional[str] = None
    strengths: List[str] = field(default_factory=list)

    @classmethod
    def from_config(cls, app_config) -> "UserProfile":
        return cls(
            name=app_config.profile_name,
            experience_years=app_config.profile_experience_years,
            skills=list(app_config.profile_skills),
            portfolio_url=app_config.profile_portfolio_url,
            strengths=list(app_config.profile_strengths),
        )
