"""
NewsHippo Article Ingestion Package

This package ingests article URLs, deduplicates them against known articles and
news sources, and drives asynchronous enrichment through RabbitMQ.

Main components:
- ingestion: Validate, dedup and fan out submitted articles
- sources: News source registry
- fanout: One enrichment request per capability
- workers: Concepts, language, sentiment and statistics workers
- queries: Get, delete and list operations
- store: Redis record store
- bus: RabbitMQ message bus
- analysis: Text analysis capabilities
- schemas: Pydantic models for type safety
- config: Configuration management
"""

from .config import settings
from .errors import (
    AnalysisError,
    NewsHippoError,
    NotFoundError,
    PublishError,
    StoreError,
    ValidationError,
)
from .fanout import FanOutPublisher
from .ingestion import IngestionCoordinator
from .queries import ArticleQueries
from .schemas import Article, EnrichmentKind, NewsSource, OperationResult
from .sources import SourceRegistry
from .workers import build_workers

__version__ = "1.0.0"

__all__ = [
    "settings",
    "Article",
    "NewsSource",
    "EnrichmentKind",
    "OperationResult",
    "NewsHippoError",
    "ValidationError",
    "NotFoundError",
    "StoreError",
    "PublishError",
    "AnalysisError",
    "SourceRegistry",
    "FanOutPublisher",
    "IngestionCoordinator",
    "ArticleQueries",
    "build_workers",
]
