#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
SQLAlchemy storage for projects, scraping sessions, prospects and templates.

Implements the ProspectionStore interface with the SQLAlchemy ORM and proper
session management. Table and column names match the hosted schema the
dashboard was first built against.
"""

import os
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    create_engine,
    func,
    text,
)
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from codeur_prospection.errors import NotFoundError, SessionStateError, StoreError
from codeur_prospection.models import (
    MessageTemplate,
    Project,
    Prospect,
    ProspectStatus,
    ScrapingSession,
    SessionStatus,
)
from codeur_prospection.storage.base import ProspectionStore
from codeur_prospection.utils.logger import get_logger

# Configure logger
logger = get_logger(__name__)

# Create base class for ORM models
Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class ProjectModel(Base):
    """SQLAlchemy ORM model for scraped projects."""

    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=_new_id)
    title = Column(String(512), nullable=False)
    description = Column(Text)
    budget = Column(String(255))
    skills = Column(JSON)
    posted_date = Column(DateTime)
    url = Column(String(1024))
    client_info = Column(JSON)
    scraped_at = Column(DateTime, nullable=False, default=datetime.now)

    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    __table_args__ = (
        Index("idx_projects_url", "url"),
        Index("idx_projects_scraped_at", "scraped_at"),
    )

    @classmethod
    def from_entity(cls, project: Project) -> "ProjectModel":
        return cls(
            id=project.id,
            title=project.title,
            description=project.description,
            budget=project.budget,
            skills=list(project.skills),
            posted_date=project.posted_date,
            url=project.url,
            client_info=project.client_info,
            scraped_at=project.scraped_at,
            created_at=project.created_at,
            updated_at=project.updated_at,
        )

    def to_entity(self) -> Project:
        return Project(
            id=self.id,
            title=self.title,
            description=self.description,
            budget=self.budget,
            skills=list(self.skills or []),
            posted_date=self.posted_date,
            url=self.url,
            client_info=self.client_info,
            scraped_at=self.scraped_at,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class ScrapingSessionModel(Base):
    """SQLAlchemy ORM model for scraping sessions."""

    __tablename__ = "scraping_sessions"

    id = Column(String(36), primary_key=True, default=_new_id)
    search_criteria = Column(JSON)
    status = Column(String(20), nullable=False, default=SessionStatus.RUNNING.value, index=True)
    projects_found = Column(Integer)
    started_at = Column(DateTime, nullable=False, default=datetime.now, index=True)
    completed_at = Column(DateTime)
    error_message = Column(Text)

    def to_entity(self) -> ScrapingSession:
        return ScrapingSession(
            id=self.id,
            search_criteria=dict(self.search_criteria or {}),
            status=SessionStatus(self.status),
            projects_found=self.projects_found,
            started_at=self.started_at,
            completed_at=self.completed_at,
            error_message=self.error_message,
        )


class ProspectModel(Base):
    """SQLAlchemy ORM model for prospects."""

    __tablename__ = "prospects"

    id = Column(String(36), primary_key=True, default=_new_id)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="SET NULL"), nullable=True)
    status = Column(String(20), nullable=False, default=ProspectStatus.NEW.value, index=True)
    contact_date = Column(DateTime)
    message_sent = Column(Text)
    response_received = Column(Text)
    notes = Column(Text)

    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    __table_args__ = (
        Index("idx_prospects_project_id", "project_id"),
    )

    @classmethod
    def from_entity(cls, prospect: Prospect) -> "ProspectModel":
        return cls(
            id=prospect.id,
            project_id=prospect.project_id,
            status=prospect.status.value,
            contact_date=prospect.contact_date,
            message_sent=prospect.message_sent,
            response_received=prospect.response_received,
            notes=prospect.notes,
            created_at=prospect.created_at,
            updated_at=prospect.updated_at,
        )

    def to_entity(self) -> Prospect:
        return Prospect(
            id=self.id,
            project_id=self.project_id,
            status=ProspectStatus(self.status),
            contact_date=self.contact_date,
            message_sent=self.message_sent,
            response_received=self.response_received,
            notes=self.notes,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class MessageTemplateModel(Base):
    """SQLAlchemy ORM model for message templates."""

    __tablename__ = "message_templates"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False)
    subject = Column(String(512), nullable=False, default="")
    content = Column(Text, nullable=False)
    category = Column(String(100), nullable=False, default="général", index=True)

    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    @classmethod
    def from_entity(cls, template: MessageTemplate) -> "MessageTemplateModel":
        return cls(
            id=template.id,
            name=template.name,
            subject=template.subject,
            content=template.content,
            category=template.category,
            created_at=template.created_at,
            updated_at=template.updated_at,
        )

    def to_entity(self) -> MessageTemplate:
        return MessageTemplate(
            id=self.id,
            name=self.name,
            subject=self.subject,
            content=self.content,
            category=self.category,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


PROSPECT_FIELDS = {"status", "contact_date", "message_sent", "response_received", "notes"}
TEMPLATE_FIELDS = {"name", "subject", "content", "category"}


def _build_engine(database_url: str):
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return create_engine(database_url, pool_pre_ping=True)

    if url.database and url.database != ":memory:":
        # Ensure data directory exists
        os.makedirs(os.path.dirname(os.path.abspath(url.database)), exist_ok=True)
        return create_engine(database_url, connect_args={"check_same_thread": False})

    # One shared connection, otherwise every session sees its own empty database
    return create_engine(
        database_url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


class SQLAlchemyStore(ProspectionStore):
    """
    Storage manager backed by a SQLAlchemy engine.

    Provides transactional methods for every entity the prospection core uses.
    """

    def __init__(self, database_url: str):
        """
        Initialize the store and create missing tables.

        Args:
            database_url: SQLAlchemy database URL
        """
        self.database_url = database_url
        self.engine = _build_engine(database_url)
        self.SessionFactory = sessionmaker(bind=self.engine)
        Base.metadata.create_all(self.engine)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """
        Provide a transactional scope around a series of operations.

        Yields:
            Session: SQLAlchemy session
        """
        session = self.SessionFactory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database error: {str(e)}")
            raise StoreError(str(e)) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def is_connected(self) -> bool:
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning(f"Database health check failed: {str(e)}")
            return False

    def dispose(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()

    # ------------------------------------------------------------------
    # Scraping sessions
    # ------------------------------------------------------------------

    def create_session(self, search_criteria: Dict[str, Any]) -> ScrapingSession:
        session_entity = ScrapingSession(search_criteria=dict(search_criteria or {}))
        with self.session_scope() as session:
            model = ScrapingSessionModel(
                id=session_entity.id,
                search_criteria=session_entity.search_criteria,
                status=session_entity.status.value,
                started_at=session_entity.started_at,
            )
            session.add(model)
            session.flush()
            return model.to_entity()

    def _finish_session(self, session_id: str, values: Dict[str, Any]) -> ScrapingSession:
        with self.session_scope() as session:
            # Conditional update keeps the running -> terminal move one-shot
            updated = (
                session.query(ScrapingSessionModel)
                .filter(
                    ScrapingSessionModel.id == session_id,
                    ScrapingSessionModel.status == SessionStatus.RUNNING.value,
                )
                .update(values, synchronize_session=False)
            )

            model = session.get(ScrapingSessionModel, session_id)
            if model is None:
                raise NotFoundError("Scraping session", session_id)
            if not updated:
                raise SessionStateError(session_id, model.status)

            session.refresh(model)
            return model.to_entity()

    def complete_session(self, session_id: str, projects_found: int) -> ScrapingSession:
        return self._finish_session(session_id, {
            "status": SessionStatus.COMPLETED.value,
            "projects_found": projects_found,
            "completed_at": datetime.now(),
        })

    def fail_session(self, session_id: str, error_message: str) -> ScrapingSession:
        return self._finish_session(session_id, {
            "status": SessionStatus.FAILED.value,
            "error_message": error_message,
            "completed_at": datetime.now(),
        })

    def get_session(self, session_id: str) -> Optional[ScrapingSession]:
        with self.session_scope() as session:
            model = session.get(ScrapingSessionModel, session_id)
            return model.to_entity() if model else None

    def list_sessions(self, limit: int = 50) -> List[ScrapingSession]:
        with self.session_scope() as session:
            models = (
                session.query(ScrapingSessionModel)
                .order_by(ScrapingSessionModel.started_at.desc())
                .limit(limit)
                .all()
            )
            return [model.to_entity() for model in models]

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def insert_projects(self, projects: List[Project]) -> List[Project]:
        if not projects:
            return []

        with self.session_scope() as session:
            models = [ProjectModel.from_entity(project) for project in projects]
            session.add_all(models)
            session.flush()
            return [model.to_entity() for model in models]

    def find_existing_urls(self, urls: Iterable[str]) -> Set[str]:
        wanted = {url for url in urls if url}
        if not wanted:
            return set()

        with self.session_scope() as session:
            rows = (
                session.query(ProjectModel.url)
                .filter(ProjectModel.url.in_(wanted))
                .distinct()
                .all()
            )
            return {row[0] for row in rows}

    def get_project(self, project_id: str) -> Optional[Project]:
        with self.session_scope() as session:
            model = session.get(ProjectModel, project_id)
            return model.to_entity() if model else None

    def list_projects(self, limit: int = 100, offset: int = 0) -> List[Project]:
        with self.session_scope() as session:
            models = (
                session.query(ProjectModel)
                .order_by(ProjectModel.scraped_at.desc(), ProjectModel.created_at.desc())
                .limit(limit)
                .offset(offset)
                .all()
            )
            return [model.to_entity() for model in models]

    def count_projects(self) -> int:
        with self.session_scope() as session:
            return session.query(func.count(ProjectModel.id)).scalar() or 0

    def delete_project(self, project_id: str) -> bool:
        with self.session_scope() as session:
            model = session.get(ProjectModel, project_id)
            if model is None:
                return False

            session.query(ProspectModel).filter(
                ProspectModel.project_id == project_id
            ).update({"project_id": None}, synchronize_session=False)
            session.delete(model)
            return True

    # ------------------------------------------------------------------
    # Prospects
    # ------------------------------------------------------------------

    def create_prospect(self, prospect: Prospect) -> Prospect:
        with self.session_scope() as session:
            model = ProspectModel.from_entity(prospect)
            session.add(model)
            session.flush()
            return model.to_entity()

    def get_prospect(self, prospect_id: str) -> Optional[Prospect]:
        with self.session_scope() as session:
            model = session.get(ProspectModel, prospect_id)
            return model.to_entity() if model else None

    def find_prospect_by_project(self, project_id: str) -> Optional[Prospect]:
        with self.session_scope() as session:
            model = (
                session.query(ProspectModel)
                .filter(ProspectModel.project_id == project_id)
                .order_by(ProspectModel.created_at.asc())
                .first()
            )
            return model.to_entity() if model else None

    def list_prospects(self, status: Optional[ProspectStatus] = None) -> List[Prospect]:
        with self.session_scope() as session:
            query = session.query(ProspectModel)
            if status is not None:
                query = query.filter(ProspectModel.status == ProspectStatus(status).value)
            models = query.order_by(ProspectModel.updated_at.desc()).all()
            return [model.to_entity() for model in models]

    def update_prospect(self, prospect_id: str, **fields: Any) -> Prospect:
        unknown = set(fields) - PROSPECT_FIELDS
        if unknown:
            raise ValueError(f"Unknown prospect fields: {', '.join(sorted(unknown))}")

        with self.session_scope() as session:
            model = session.get(ProspectModel, prospect_id)
            if model is None:
                raise NotFoundError("Prospect", prospect_id)

            for key, value in fields.items():
                if key == "status":
                    value = ProspectStatus(value).value
                setattr(model, key, value)
            model.updated_at = datetime.now()

            session.flush()
            return model.to_entity()

    # ------------------------------------------------------------------
    # Message templates
    # ------------------------------------------------------------------

    def create_template(self, template: MessageTemplate) -> MessageTemplate:
        with self.session_scope() as session:
            model = MessageTemplateModel.from_entity(template)
            session.add(model)
            session.flush()
            return model.to_entity()

    def get_template(self, template_id: str) -> Optional[MessageTemplate]:
        with self.session_scope() as session:
            model = session.get(MessageTemplateModel, template_id)
            return model.to_entity() if model else None

    def list_templates(self, category: Optional[str] = None) -> List[MessageTemplate]:
        with self.session_scope() as session:
            query = session.query(MessageTemplateModel)
            if category:
                query = query.filter(MessageTemplateModel.category == category)
            models = query.order_by(MessageTemplateModel.created_at.asc()).all()
            return [model.to_entity() for model in models]

    def update_template(self, template_id: str, **fields: Any) -> MessageTemplate:
        unknown = set(fields) - TEMPLATE_FIELDS
        if unknown:
            raise ValueError(f"Unknown template fields: {', '.join(sorted(unknown))}")

        with self.session_scope() as session:
            model = session.get(MessageTemplateModel, template_id)
            if model is None:
                raise NotFoundError("Message template", template_id)

            for key, value in fields.items():
                setattr(model, key, value)
            model.updated_at = datetime.now()

            session.flush()
            return model.to_entity()

    def delete_template(self, template_id: str) -> bool:
        with self.session_scope() as session:
            model = session.get(MessageTemplateModel, template_id)
            if model is None:
                return False
            session.delete(model)
            return True

    def count_templates(self) -> int:
        with self.session_scope() as session:
            return session.query(func.count(MessageTemplateModel.id)).scalar() or 0
