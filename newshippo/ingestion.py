"""
Article ingestion coordinator.

Handles one submission as a single sequential flow:
1. Validate the url (no writes before this)
2. Create the article unless it already exists
3. Register the article's news source unless it already exists
4. Fan out one enrichment request per capability

The first failing step aborts the rest. Completed writes are not rolled back:
article and news source are two independent records.
"""

import logging
import time
from typing import Any, Dict, Optional

from .config import settings
from .errors import NewsHippoError
from .fanout import FanOutPublisher
from .reporting import LoggingReporter, Reporter, finish
from .schemas import Article, OperationResult, SubmissionOutcome
from .sources import SourceRegistry
from .store import RecordStore
from .urls import parse_article_url

logger = logging.getLogger(__name__)


class IngestionCoordinator:
    """Validates, dedups and fans out submitted article urls."""

    operation = "articleCreate"

    def __init__(
        self,
        store: RecordStore,
        sources: SourceRegistry,
        publisher: FanOutPublisher,
        reporter: Optional[Reporter] = None,
        table: Optional[str] = None,
    ):
        self.store = store
        self.sources = sources
        self.publisher = publisher
        self.reporter = reporter or LoggingReporter()
        self.table = table or settings.article_table

    def submit_article(self, url: Optional[str]) -> OperationResult:
        """
        Ingest an article url.

        Args:
            url: The candidate article URL

        Returns:
            Success with a SubmissionOutcome, or the first error encountered
        """
        started = time.monotonic()
        request: Dict[str, Any] = {"url": url}
        try:
            parsed = parse_article_url(url)

            article_created = self._ensure_article(parsed.url, parsed.hostname)
            source_created = self.sources.ensure_source(parsed.hostname)
            channels = self.publisher.publish_enrichment_requests(parsed.url)

            outcome = SubmissionOutcome(
                url=parsed.url,
                article_created=article_created,
                source_created=source_created,
                published_channels=channels,
            )
            logger.info(f"📥 Ingested {parsed.url} (new article: {article_created}, new source: {source_created})")
            return finish(self.reporter, self.operation, started, data=outcome.model_dump(), request=request)

        except NewsHippoError as e:
            logger.warning(f"⚠️ Ingestion failed for {url}: {e}")
            return finish(self.reporter, self.operation, started, error=e, request=request)
        except Exception as e:
            logger.error(f"💥 Ingestion crashed for {url}: {e}", exc_info=True)
            return finish(self.reporter, self.operation, started, error=e, request=request)

    def _ensure_article(self, url: str, hostname: str) -> bool:
        """
        Create the article unless it exists. Returns True if it was created.

        A record without url or newsSource was left by an enrichment write that
        landed after a delete; it counts as absent and gets its base fields back.
        Enrichment fields already on it are kept, since put only sets the fields given.
        """
        record = self.store.get(self.table, url)
        if record is not None and record.get("url") and record.get("newsSource"):
            logger.info(f"⏭️  Article already known: {url}")
            return False
        article = Article(url=url, news_source=hostname)
        self.store.put(self.table, url, article.to_record())
        return True
