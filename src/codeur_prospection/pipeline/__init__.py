"""
Ingestion pipeline package.

This package contains the fetch-and-ingest cycle that turns search criteria
into stored projects and a scraping session record.
"""

from .ingestion import IngestionPipeline, IngestionResult, describe_error, run_ingestion

__all__ = ["IngestionPipeline", "IngestionResult", "describe_error", "run_ingestion"]
