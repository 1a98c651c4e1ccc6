import json

import pytest

from newshippo.config import settings
from newshippo.errors import AnalysisError
from newshippo.schemas import EnrichmentKind
from newshippo.workers import build_workers, parse_enrichment_request

from .conftest import StubAnalysisClient

URL = "http://example.com/a"


def _message(url=URL) -> bytes:
    return json.dumps({"url": url}).encode()


@pytest.fixture
def seeded_store(store):
    store.put(settings.article_table, URL, {"url": URL, "newsSource": "example.com"})
    store.writes.clear()
    return store


def _workers(store, analysis, reporter):
    return build_workers(store, analysis, reporter=reporter)


def test_concepts_worker_sets_only_concepts(seeded_store, analysis, reporter):
    workers = _workers(seeded_store, analysis, reporter)

    result = workers[EnrichmentKind.CONCEPTS].handle(_message())

    assert result.ok
    assert result.operation == "getTextConcepts"
    assert seeded_store.get(settings.article_table, URL) == {
        "url": URL,
        "newsSource": "example.com",
        "concepts": ["x", "y"],
    }
    assert analysis.calls == [("extract_concepts", URL)]


def test_sentiment_without_aggregate_sentiment_fails_without_update(seeded_store, reporter):
    analysis = StubAnalysisClient({"analyze_sentiment": {"aggregate": {"score": 0.3}}})
    workers = _workers(seeded_store, analysis, reporter)

    result = workers[EnrichmentKind.SENTIMENT].handle(_message())

    assert result.error_type == "AnalysisError"
    assert seeded_store.writes == []


@pytest.mark.parametrize("order", [
    (EnrichmentKind.LANGUAGE, EnrichmentKind.SENTIMENT),
    (EnrichmentKind.SENTIMENT, EnrichmentKind.LANGUAGE),
])
def test_language_and_sentiment_are_order_independent(seeded_store, analysis, reporter, order):
    workers = _workers(seeded_store, analysis, reporter)

    for kind in order:
        assert workers[kind].handle(_message()).ok

    article = seeded_store.get(settings.article_table, URL)
    assert article["lang"] == "en"
    assert article["sentiment"] == {"sentiment": "positive", "score": 0.6}
    assert "concepts" not in article
    assert "statistics" not in article


def test_statistics_worker_stores_metrics_without_tag(seeded_store, analysis, reporter):
    workers = _workers(seeded_store, analysis, reporter)

    assert workers[EnrichmentKind.STATISTICS].handle(_message()).ok

    statistics = seeded_store.get(settings.article_table, URL)["statistics"]
    assert statistics["sentences"] == 3
    assert statistics["words"] == 42
    assert "kind" not in statistics


@pytest.mark.parametrize("body", [b"{}", b"not json", b'{"url": ""}', b'{"url": "nope"}', b'{"url": 12}'])
def test_bad_message_fails_validation_without_update(seeded_store, analysis, reporter, body):
    workers = _workers(seeded_store, analysis, reporter)

    result = workers[EnrichmentKind.LANGUAGE].handle(body)

    assert result.error_type == "ValidationError"
    assert seeded_store.writes == []
    assert analysis.calls == []


@pytest.mark.parametrize("capability,response", [
    ("extract_concepts", {"concepts": []}),
    ("extract_concepts", {}),
    ("extract_concepts", None),
])
def test_empty_concepts_is_analysis_error(seeded_store, reporter, capability, response):
    analysis = StubAnalysisClient({capability: response})
    workers = _workers(seeded_store, analysis, reporter)

    result = workers[EnrichmentKind.CONCEPTS].handle(_message())

    assert result.error_type == "AnalysisError"
    assert seeded_store.writes == []


def test_missing_language_and_statistics_are_analysis_errors(seeded_store, reporter):
    analysis = StubAnalysisClient({
        "identify_language": {"language": ""},
        "get_text_statistics": {"words": 10},
    })
    workers = _workers(seeded_store, analysis, reporter)

    assert workers[EnrichmentKind.LANGUAGE].handle(_message()).error_type == "AnalysisError"
    assert workers[EnrichmentKind.STATISTICS].handle(_message()).error_type == "AnalysisError"
    assert seeded_store.writes == []


def test_analysis_failure_is_terminal(seeded_store, reporter):
    analysis = StubAnalysisClient({"identify_language": AnalysisError("fetch timed out")})
    workers = _workers(seeded_store, analysis, reporter)

    result = workers[EnrichmentKind.LANGUAGE].handle(_message())

    assert result.error_type == "AnalysisError"
    assert "fetch timed out" in result.error
    assert len(analysis.calls) == 1


def test_unexpected_analysis_crash_is_internal_error(seeded_store, reporter):
    analysis = StubAnalysisClient({"identify_language": RuntimeError("boom")})
    workers = _workers(seeded_store, analysis, reporter)

    result = workers[EnrichmentKind.LANGUAGE].handle(_message())

    assert result.error_type == "InternalError"
    assert len(reporter.reports) == 1


def test_store_failure_is_reported_as_store_error(seeded_store, analysis, reporter):
    seeded_store.fail_on = ("update", settings.article_table)
    workers = _workers(seeded_store, analysis, reporter)

    result = workers[EnrichmentKind.CONCEPTS].handle(_message())

    assert result.error_type == "StoreError"
    assert reporter.reports[-1][0] == "error"


def test_message_url_is_normalized_before_use():
    assert parse_enrichment_request({"url": "  http://example.com/a  "}) == URL
    assert parse_enrichment_request(_message()) == URL
