"""
Enrichment workers, one per capability.

Each worker handles deliveries from exactly one channel:
1. Parse the message and validate its url
2. Call the matching text analysis capability
3. Validate the response into the capability's tagged result
4. Patch exactly one article field with it

Failures end the invocation. The delivery is consumed either way; redelivery
is up to the bus.
"""

import logging
import time
from typing import Any, Dict, Optional, Type, Union

import pydantic

from .analysis import TextAnalysisClient
from .config import settings
from .errors import AnalysisError, NewsHippoError, ValidationError
from .reporting import LoggingReporter, Reporter, finish
from .schemas import EnrichmentKind, EnrichmentRequest, OperationResult, parse_enrichment_result
from .store import RecordStore
from .urls import parse_article_url

logger = logging.getLogger(__name__)

Message = Union[bytes, str, Dict[str, Any]]


def parse_enrichment_request(message: Message) -> str:
    """
    Extract and normalize the url carried by an enrichment message.

    Raises:
        ValidationError: If the message is not valid JSON, has no url, or the url is malformed
    """
    try:
        if isinstance(message, (bytes, str)):
            request = EnrichmentRequest.model_validate_json(message)
        else:
            request = EnrichmentRequest.model_validate(message)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Bad input: {e.error_count()} invalid field(s) in message") from e
    return parse_article_url(request.url).url


class EnrichmentWorker:
    """Base worker: subclasses pick the capability and the operation name."""

    kind: EnrichmentKind
    operation: str
    capability: str

    def __init__(
        self,
        store: RecordStore,
        analysis: TextAnalysisClient,
        reporter: Optional[Reporter] = None,
        table: Optional[str] = None,
    ):
        self.store = store
        self.analysis = analysis
        self.reporter = reporter or LoggingReporter()
        self.table = table or settings.article_table

    def handle(self, message: Message) -> OperationResult:
        """Process one delivery. Never raises; the outcome is in the result."""
        started = time.monotonic()
        url = None
        try:
            url = parse_enrichment_request(message)

            raw = getattr(self.analysis, self.capability)(url)
            result = self._validate_response(url, raw)

            self.store.update(self.table, url, result.article_field, result.field_value())
            logger.info(f"{self.kind.value} stored for {url}")
            return finish(
                self.reporter,
                self.operation,
                started,
                data={"url": url, "field": result.article_field},
                request={"url": url},
            )

        except NewsHippoError as e:
            logger.warning(f"⚠️ {self.operation} failed for {url or 'unknown'}: {e}")
            return finish(self.reporter, self.operation, started, error=e, request={"url": url})
        except Exception as e:
            logger.error(f"💥 {self.operation} crashed for {url or 'unknown'}: {e}", exc_info=True)
            return finish(self.reporter, self.operation, started, error=e, request={"url": url})

    def _validate_response(self, url: str, raw: Any):
        if not isinstance(raw, dict) or not raw:
            raise AnalysisError(f"No {self.kind.value} found for {url}")
        try:
            return parse_enrichment_result(self.kind, raw)
        except pydantic.ValidationError as e:
            raise AnalysisError(f"No {self.kind.value} found for {url}: {e.error_count()} invalid field(s)") from e


class ConceptsWorker(EnrichmentWorker):
    kind = EnrichmentKind.CONCEPTS
    operation = "getTextConcepts"
    capability = "extract_concepts"


class LanguageWorker(EnrichmentWorker):
    kind = EnrichmentKind.LANGUAGE
    operation = "getTextLanguage"
    capability = "identify_language"


class SentimentWorker(EnrichmentWorker):
    kind = EnrichmentKind.SENTIMENT
    operation = "getTextSentiment"
    capability = "analyze_sentiment"


class StatisticsWorker(EnrichmentWorker):
    kind = EnrichmentKind.STATISTICS
    operation = "getTextStats"
    capability = "get_text_statistics"


WORKER_CLASSES: Dict[EnrichmentKind, Type[EnrichmentWorker]] = {
    worker.kind: worker
    for worker in (ConceptsWorker, LanguageWorker, SentimentWorker, StatisticsWorker)
}


def build_workers(
    store: RecordStore,
    analysis: TextAnalysisClient,
    reporter: Optional[Reporter] = None,
    table: Optional[str] = None,
) -> Dict[EnrichmentKind, EnrichmentWorker]:
    """One worker instance per enrichment kind, sharing the given adapters."""
    return {
        kind: worker_class(store, analysis, reporter=reporter, table=table)
        for kind, worker_class in WORKER_CLASSES.items()
    }
