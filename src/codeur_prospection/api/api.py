#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
API Backend for the Codeur Prospection Bot.

Exposes the scrape function called by the dashboard plus the project,
session, prospect and message template routes it reads and writes.
"""

import json
import time
from datetime import datetime
from functools import lru_cache
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field, field_validator

from codeur_prospection import __version__
from codeur_prospection.config import AppConfig, config
from codeur_prospection.errors import (
    DuplicateProspectError,
    InvalidTransitionError,
    NotFoundError,
    ProspectionError,
    SessionStateError,
    TemplateValidationError,
)
from codeur_prospection.lifecycle import LeadLifecycleManager
from codeur_prospection.models import ProspectStatus, UserProfile
from codeur_prospection.pipeline import IngestionPipeline, describe_error
from codeur_prospection.scrapers import BaseSourceFetcher, create_fetcher
from codeur_prospection.storage import ProspectionStore, SQLAlchemyStore
from codeur_prospection.templates import TemplateService
from codeur_prospection.utils.logger import get_logger

logger = get_logger(__name__)

SCRAPE_FUNCTION_PATH = "/functions/scrape-codeur"

SCRAPE_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

# Initialize FastAPI application
app = FastAPI(
    title="Codeur Prospection Bot API",
    description="Scrape Codeur.com projects and track outreach to their clients",
    version=__version__,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_allow_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Registered after CORSMiddleware so it wraps it
@app.middleware("http")
async def scrape_codeur_preflight(request: Request, call_next):
    """Answer preflight requests for the scrape function."""
    if request.method == "OPTIONS" and request.url.path == SCRAPE_FUNCTION_PATH:
        return Response(status_code=status.HTTP_200_OK, headers=SCRAPE_CORS_HEADERS)
    return await call_next(request)


#----------------
# Pydantic Models
#----------------

class HealthStatus(BaseModel):
    status: str
    version: str
    uptime: float
    timestamp: datetime
    components: Dict[str, Dict[str, Any]]


class ProspectCreate(BaseModel):
    project_id: str
    notes: Optional[str] = None

    @field_validator("project_id")
    @classmethod
    def check_project_id(cls, v):
        if not v.strip():
            raise ValueError("project_id must not be empty")
        return v.strip()


class ContactedRequest(BaseModel):
    message_sent: Optional[str] = None


class RespondedRequest(BaseModel):
    response: Optional[str] = None


class NotesUpdate(BaseModel):
    notes: Optional[str] = None


class TemplateCreate(BaseModel):
    # Required-field checks happen in TemplateService so the error names them
    name: Optional[str] = None
    content: Optional[str] = None
    subject: Optional[str] = None
    category: Optional[str] = None


class RenderRequest(BaseModel):
    project_id: Optional[str] = None
    extra: Dict[str, str] = Field(default_factory=dict)


#---------------------
# Dependency Injection
#---------------------

@lru_cache
def get_config() -> AppConfig:
    """Get the application configuration."""
    return config


@lru_cache
def get_store() -> ProspectionStore:
    """Get or create the store, seeding the default templates on first use."""
    store = SQLAlchemyStore(get_config().database_url)
    TemplateService(store).seed_defaults()
    return store


@lru_cache
def get_fetcher() -> BaseSourceFetcher:
    """Get or create the configured listing source."""
    return create_fetcher(get_config())


def get_pipeline(
    store: ProspectionStore = Depends(get_store),
    fetcher: BaseSourceFetcher = Depends(get_fetcher),
    app_config: AppConfig = Depends(get_config),
) -> IngestionPipeline:
    return IngestionPipeline(
        store,
        fetcher,
        fetch_timeout_seconds=app_config.fetch_timeout_seconds,
        dedupe_by_url=app_config.dedupe_by_url,
        default_posted_days=app_config.default_posted_days,
    )


def get_lifecycle(
    store: ProspectionStore = Depends(get_store),
    app_config: AppConfig = Depends(get_config),
) -> LeadLifecycleManager:
    return LeadLifecycleManager(store, unique_per_project=app_config.unique_prospect_per_project)


def get_template_service(store: ProspectionStore = Depends(get_store)) -> TemplateService:
    return TemplateService(store)


def get_start_time():
    """Get the server start time."""
    if not hasattr(get_start_time, "start_time"):
        get_start_time.start_time = time.time()
    return get_start_time.start_time


#-----------------
# Helper Functions
#-----------------

def to_http_error(error: Exception) -> HTTPException:
    """Map a core error to the HTTP status the dashboard expects."""
    if isinstance(error, (TemplateValidationError, ValueError)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, (DuplicateProspectError, InvalidTransitionError, SessionStateError)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))

    logger.error(f"Unexpected API error: {str(error)}", exc_info=error)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Internal error: {str(error)}",
    )


async def read_search_criteria(request: Request) -> Dict[str, Any]:
    """Extract ``searchCriteria`` from the body; anything unusable means no criteria."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}

    if not isinstance(body, dict):
        return {}
    criteria = body.get("searchCriteria")
    return criteria if isinstance(criteria, dict) else {}


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


#---------
# Endpoints
#---------

@app.post(SCRAPE_FUNCTION_PATH)
async def scrape_codeur(
    request: Request,
    pipeline: IngestionPipeline = Depends(get_pipeline),
):
    """
    Run one scraping cycle for the posted ``searchCriteria``.

    Any failure is reported as ``{"success": false, "error": ...}`` with a 500
    status; the scraping session is already marked failed at that point.
    """
    criteria = await read_search_criteria(request)

    try:
        result = await pipeline.run(criteria)
    except Exception as e:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": describe_error(e)},
            headers=SCRAPE_CORS_HEADERS,
        )

    return JSONResponse(content=result.to_response(), headers=SCRAPE_CORS_HEADERS)


@app.get("/api/health", response_model=HealthStatus)
async def health_check(
    store: ProspectionStore = Depends(get_store),
    fetcher: BaseSourceFetcher = Depends(get_fetcher),
):
    """System health check endpoint."""
    storage_status = "healthy" if store.is_connected() else "unhealthy"

    return HealthStatus(
        status="operational" if storage_status == "healthy" else "degraded",
        version=__version__,
        uptime=time.time() - get_start_time(),
        timestamp=datetime.now(),
        components={
            "storage": {"status": storage_status},
            "source": fetcher.get_status(),
        },
    )


@app.get("/api/projects")
async def list_projects(
    limit: int = 100,
    offset: int = 0,
    store: ProspectionStore = Depends(get_store),
) -> List[Dict[str, Any]]:
    """Most recently scraped projects first."""
    if limit < 1 or offset < 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="limit must be positive and offset must not be negative",
        )
    return [project.to_dict() for project in store.list_projects(limit=limit, offset=offset)]


@app.get("/api/sessions")
async def list_sessions(
    limit: int = 50,
    store: ProspectionStore = Depends(get_store),
) -> List[Dict[str, Any]]:
    return [session.to_dict() for session in store.list_sessions(limit=limit)]


@app.get("/api/sessions/{session_id}")
async def get_session(session_id: str, store: ProspectionStore = Depends(get_store)):
    session = store.get_session(session_id)
    if session is None:
        raise to_http_error(NotFoundError("Scraping session", session_id))
    return session.to_dict()


@app.get("/api/prospects")
async def list_prospects(
    status_value: Optional[str] = Query(None, alias="status"),
    lifecycle: LeadLifecycleManager = Depends(get_lifecycle),
) -> List[Dict[str, Any]]:
    """List prospects, optionally restricted to one ``?status=``."""
    status_filter = None
    if status_value:
        try:
            status_filter = ProspectStatus(status_value)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unknown prospect status: {status_value}",
            )
    return [prospect.to_dict() for prospect in lifecycle.list_prospects(status_filter)]


@app.post("/api/prospects", status_code=status.HTTP_201_CREATED)
async def create_prospect(
    body: ProspectCreate,
    lifecycle: LeadLifecycleManager = Depends(get_lifecycle),
):
    try:
        return lifecycle.create_prospect(body.project_id, notes=body.notes).to_dict()
    except ProspectionError as e:
        raise to_http_error(e)


@app.post("/api/prospects/{prospect_id}/contacted")
async def mark_contacted(
    prospect_id: str,
    body: Optional[ContactedRequest] = None,
    lifecycle: LeadLifecycleManager = Depends(get_lifecycle),
):
    message = body.message_sent if body is not None else None
    try:
        return lifecycle.mark_contacted(prospect_id, message_sent=message).to_dict()
    except ProspectionError as e:
        raise to_http_error(e)


@app.post("/api/prospects/{prospect_id}/responded")
async def mark_responded(
    prospect_id: str,
    body: Optional[RespondedRequest] = None,
    lifecycle: LeadLifecycleManager = Depends(get_lifecycle),
):
    response = body.response if body is not None else None
    try:
        return lifecycle.mark_responded(prospect_id, response=response).to_dict()
    except ProspectionError as e:
        raise to_http_error(e)


@app.post("/api/prospects/{prospect_id}/rejected")
async def mark_rejected(
    prospect_id: str,
    lifecycle: LeadLifecycleManager = Depends(get_lifecycle),
):
    try:
        return lifecycle.mark_rejected(prospect_id).to_dict()
    except ProspectionError as e:
        raise to_http_error(e)


@app.patch("/api/prospects/{prospect_id}/notes")
async def update_notes(
    prospect_id: str,
    body: NotesUpdate,
    lifecycle: LeadLifecycleManager = Depends(get_lifecycle),
):
    try:
        return lifecycle.update_notes(prospect_id, body.notes).to_dict()
    except ProspectionError as e:
        raise to_http_error(e)


@app.get("/api/templates")
async def list_templates(
    category: Optional[str] = None,
    templates: TemplateService = Depends(get_template_service),
) -> List[Dict[str, Any]]:
    return [template.to_dict() for template in templates.list_templates(category)]


@app.post("/api/templates", status_code=status.HTTP_201_CREATED)
async def create_template(
    body: TemplateCreate,
    templates: TemplateService = Depends(get_template_service),
):
    try:
        template = templates.create_template(
            name=body.name,
            content=body.content,
            subject=body.subject,
            category=body.category,
        )
    except ProspectionError as e:
        raise to_http_error(e)
    return template.to_dict()


@app.delete("/api/templates/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_template(
    template_id: str,
    templates: TemplateService = Depends(get_template_service),
):
    try:
        templates.delete_template(template_id)
    except ProspectionError as e:
        raise to_http_error(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.post("/api/templates/{template_id}/render")
async def render_template_for_project(
    template_id: str,
    body: Optional[RenderRequest] = None,
    templates: TemplateService = Depends(get_template_service),
    app_config: AppConfig = Depends(get_config),
):
    """Fill a template with a project's details and the configured profile."""
    body = body or RenderRequest()
    try:
        rendered = templates.render_for_project(
            template_id,
            project_id=body.project_id,
            profile=UserProfile.from_config(app_config),
            extra=body.extra,
        )
    except ProspectionError as e:
        raise to_http_error(e)
    return rendered.to_dict()
