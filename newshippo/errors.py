"""Error taxonomy shared by the ingestion pipeline and its adapters."""


class NewsHippoError(Exception):
    """Base class for every failure an operation can report."""

    error_type = "NewsHippoError"


class ValidationError(NewsHippoError):
    """Input is missing or malformed. Raised before any write."""

    error_type = "ValidationError"


class NotFoundError(NewsHippoError):
    """A record was read but does not exist."""

    error_type = "NotFoundError"


class StoreError(NewsHippoError):
    """The record store failed or timed out."""

    error_type = "StoreError"


class PublishError(NewsHippoError):
    """The message bus rejected or timed out a publish."""

    error_type = "PublishError"


class AnalysisError(NewsHippoError):
    """The text analysis service returned no usable result."""

    error_type = "AnalysisError"
