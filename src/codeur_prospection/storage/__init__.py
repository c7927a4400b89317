"""
Storage package for the Codeur Prospection Bot.

``ProspectionStore`` is the interface the core depends on;
``SQLAlchemyStore`` is the database-backed implementation.
"""

from .base import ProspectionStore
from .sql_storage import SQLAlchemyStore

__all__ = ["ProspectionStore", "SQLAlchemyStore"]
