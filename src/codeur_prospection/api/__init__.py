"""
API package for the Codeur Prospection Bot.

This package contains the FastAPI application serving the scrape function
and the dashboard routes.
"""

from .api import app

__all__ = ["app"]
