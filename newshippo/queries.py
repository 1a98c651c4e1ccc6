"""Read, list and delete operations over article and news source records."""
import logging
import time
from typing import Optional

import pydantic

from .config import settings
from .errors import NewsHippoError, NotFoundError, StoreError
from .reporting import LoggingReporter, Reporter, finish
from .schemas import Article, NewsSource, NewsSourcePage, OperationResult
from .store import RecordStore
from .urls import parse_article_url

logger = logging.getLogger(__name__)


class ArticleQueries:
    """Query and delete surface. Every call returns a reported OperationResult."""

    def __init__(
        self,
        store: RecordStore,
        reporter: Optional[Reporter] = None,
        article_table: Optional[str] = None,
        news_source_table: Optional[str] = None,
    ):
        self.store = store
        self.reporter = reporter or LoggingReporter()
        self.article_table = article_table or settings.article_table
        self.news_source_table = news_source_table or settings.news_source_table

    def get_article(self, url: Optional[str]) -> OperationResult:
        """Return the article, or a NotFoundError result when there is none."""
        started = time.monotonic()
        request = {"url": url}
        try:
            key = parse_article_url(url).url
            record = self.store.get(self.article_table, key)
            if record is None:
                raise NotFoundError(f"No article found for {key}")
            try:
                article = Article.model_validate(record)
            except pydantic.ValidationError as e:
                # e.g. a late enrichment write landed after the article was deleted
                raise StoreError(f"Incomplete article record for {key}") from e
            return finish(self.reporter, "articleGet", started, data=article.to_record(), request=request)
        except NewsHippoError as e:
            return finish(self.reporter, "articleGet", started, error=e, request=request)
        except Exception as e:
            logger.error(f"💥 articleGet crashed for {url}: {e}", exc_info=True)
            return finish(self.reporter, "articleGet", started, error=e, request=request)

    def delete_article(self, url: Optional[str]) -> OperationResult:
        """Hard-delete the article. Succeeds whether or not it existed; never touches its news source."""
        started = time.monotonic()
        request = {"url": url}
        try:
            key = parse_article_url(url).url
            self.store.delete(self.article_table, key)
            logger.info(f"🗑️  Deleted article {key}")
            return finish(self.reporter, "articleDelete", started, data={"url": key}, request=request)
        except NewsHippoError as e:
            return finish(self.reporter, "articleDelete", started, error=e, request=request)
        except Exception as e:
            logger.error(f"💥 articleDelete crashed for {url}: {e}", exc_info=True)
            return finish(self.reporter, "articleDelete", started, error=e, request=request)

    def list_sources(self) -> OperationResult:
        """Return every news source. Unbounded: scans the whole table."""
        started = time.monotonic()
        try:
            records = self.store.scan(self.news_source_table)
            sources = [NewsSource.model_validate(record).model_dump() for record in records]
            return finish(self.reporter, "newsSourceList", started, data=sources)
        except NewsHippoError as e:
            return finish(self.reporter, "newsSourceList", started, error=e)
        except Exception as e:
            logger.error(f"💥 newsSourceList crashed: {e}", exc_info=True)
            return finish(self.reporter, "newsSourceList", started, error=e)

    def list_sources_page(self, cursor: int = 0, limit: Optional[int] = None) -> OperationResult:
        """
        Return one page of news sources.

        Args:
            cursor: ``next_cursor`` from the previous page, 0 to start
            limit: Page size hint, defaults to LIST_PAGE_SIZE

        Returns:
            A NewsSourcePage; ``next_cursor`` is 0 once the table is exhausted
        """
        started = time.monotonic()
        count = limit or settings.list_page_size
        request = {"cursor": cursor, "limit": count}
        try:
            next_cursor, records = self.store.scan_page(self.news_source_table, cursor, count)
            page = NewsSourcePage(
                items=[NewsSource.model_validate(record) for record in records],
                next_cursor=next_cursor,
            )
            return finish(self.reporter, "newsSourceList", started, data=page.model_dump(), request=request)
        except NewsHippoError as e:
            return finish(self.reporter, "newsSourceList", started, error=e, request=request)
        except Exception as e:
            logger.error(f"💥 newsSourceList crashed: {e}", exc_info=True)
            return finish(self.reporter, "newsSourceList", started, error=e, request=request)
