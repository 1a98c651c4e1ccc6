"""API routes for NewsHippo."""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse

from newshippo.ingestion import IngestionCoordinator
from newshippo.queries import ArticleQueries
from newshippo.schemas import ArticleRequest, OperationResult

router = APIRouter()

STATUS_CODES = {
    "ValidationError": 400,
    "NotFoundError": 404,
    "StoreError": 502,
    "PublishError": 502,
    "AnalysisError": 502,
}


def get_ingestion_coordinator() -> IngestionCoordinator:
    """Get ingestion coordinator dependency."""
    from newshippo.api.main import services
    return services.coordinator


def get_article_queries() -> ArticleQueries:
    """Get query service dependency."""
    from newshippo.api.main import services
    return services.queries


def merge_url(body: Optional[ArticleRequest], url: Optional[str]) -> Optional[str]:
    """The url may come in the body or the query string; the query string wins."""
    if url is not None:
        return url
    return body.url if body is not None else None


def to_response(result: OperationResult) -> JSONResponse:
    status_code = 200 if result.ok else STATUS_CODES.get(result.error_type, 500)
    return JSONResponse(status_code=status_code, content=result.model_dump(mode="json"))


@router.post("/articles")
def create_article(
    body: Optional[ArticleRequest] = Body(None),
    url: Optional[str] = Query(None),
    coordinator: IngestionCoordinator = Depends(get_ingestion_coordinator),
):
    """Ingest an article and queue its enrichment."""
    return to_response(coordinator.submit_article(merge_url(body, url)))


@router.get("/articles")
def get_article(
    url: Optional[str] = Query(None),
    queries: ArticleQueries = Depends(get_article_queries),
):
    """Get one article with whatever enrichment it has so far."""
    return to_response(queries.get_article(url))


@router.delete("/articles")
def delete_article(
    body: Optional[ArticleRequest] = Body(None),
    url: Optional[str] = Query(None),
    queries: ArticleQueries = Depends(get_article_queries),
):
    """Delete an article. Its news source is kept."""
    return to_response(queries.delete_article(merge_url(body, url)))


@router.get("/news-sources")
def list_news_sources(
    cursor: Optional[int] = Query(None, ge=0),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    queries: ArticleQueries = Depends(get_article_queries),
):
    """List news sources: all of them, or one page when cursor or limit is given."""
    if cursor is None and limit is None:
        return to_response(queries.list_sources())
    return to_response(queries.list_sources_page(cursor or 0, limit))
