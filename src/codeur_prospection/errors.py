#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Exception hierarchy shared by the prospection components.
"""


class ProspectionError(Exception):
    """Base class for all prospection errors."""
    pass


class StoreError(ProspectionError):
    """Raised when the backing store cannot be read or written."""
    pass


class NotFoundError(ProspectionError):
    """Raised when an entity id does not exist in the store."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} with ID {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class TemplateValidationError(ProspectionError):
    """Raised when a message template is missing required fields."""

    def __init__(self, missing_fields):
        self.missing_fields = list(missing_fields)
        super().__init__(
            f"Missing required template fields: {', '.join(self.missing_fields)}"
        )


class InvalidTransitionError(ProspectionError):
    """Raised when a prospect status change is not allowed."""

    def __init__(self, prospect_id: str, current: str, requested: str):
        super().__init__(
            f"Prospect {prospect_id} cannot move from '{current}' to '{requested}'"
        )
        self.prospect_id = prospect_id
        self.current = current
        self.requested = requested


class DuplicateProspectError(ProspectionError):
    """Raised when a project already has a prospect."""

    def __init__(self, project_id: str, existing_id: str):
        super().__init__(
            f"Project {project_id} already has prospect {existing_id}"
        )
        self.project_id = project_id
        self.existing_id = existing_id


class SourceFetchError(ProspectionError):
    """Raised when a listing source cannot be fetched or parsed."""
    pass


class SessionStateError(ProspectionError):
    """Raised when a scraping session that already finished is finished again."""

    def __init__(self, session_id: str, status: str):
        super().__init__(f"Scraping session {session_id} is already {status}")
        self.session_id = session_id
        self.status = status
