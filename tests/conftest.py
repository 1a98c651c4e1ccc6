import copy
from typing import Any, Dict, List, Optional, Tuple

import pytest

from newshippo.errors import PublishError, StoreError
from newshippo.services import Services


class InMemoryRecordStore:
    """Dict-backed record store with the same merge-on-put semantics as Redis hashes."""

    def __init__(self):
        self.tables: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.writes: List[Tuple[str, str, str]] = []
        self.fail_on: Optional[Tuple[str, str]] = None

    def _check(self, action: str, table: str):
        if self.fail_on == (action, table):
            raise StoreError(f"{action} failed for {table}")

    def get(self, table, key):
        self._check("get", table)
        record = self.tables.get(table, {}).get(key)
        return copy.deepcopy(record) if record is not None else None

    def put(self, table, key, item):
        self._check("put", table)
        self.tables.setdefault(table, {}).setdefault(key, {}).update(copy.deepcopy(item))
        self.writes.append(("put", table, key))

    def update(self, table, key, field, value):
        self._check("update", table)
        self.tables.setdefault(table, {}).setdefault(key, {})[field] = copy.deepcopy(value)
        self.writes.append(("update", table, key))

    def delete(self, table, key):
        self._check("delete", table)
        self.tables.get(table, {}).pop(key, None)
        self.writes.append(("delete", table, key))

    def scan(self, table):
        self._check("scan", table)
        return [copy.deepcopy(r) for r in self.tables.get(table, {}).values()]

    def scan_page(self, table, cursor=0, count=100):
        self._check("scan", table)
        records = list(self.tables.get(table, {}).values())
        page = records[cursor:cursor + count]
        next_cursor = cursor + count if cursor + count < len(records) else 0
        return next_cursor, [copy.deepcopy(r) for r in page]

    def count(self, table):
        return len(self.tables.get(table, {}))


class RecordingBus:
    """Records publishes; can reject publishes to one channel."""

    def __init__(self):
        self.published: List[Tuple[str, Dict[str, Any]]] = []
        self.fail_on_channel: Optional[str] = None

    def publish(self, channel, payload):
        if channel == self.fail_on_channel:
            raise PublishError(f"Publish to {channel} failed")
        self.published.append((channel, dict(payload)))

    def subscribe(self, channel, handler):
        raise NotImplementedError


class StubAnalysisClient:
    """Returns canned responses per capability and records the urls it was called with."""

    def __init__(self, responses: Optional[Dict[str, Any]] = None):
        self.responses = {
            "extract_concepts": {"concepts": ["x", "y"]},
            "identify_language": {"language": "en"},
            "analyze_sentiment": {"aggregate": {"sentiment": "positive", "score": 0.6}},
            "get_text_statistics": {"sentences": 3, "words": 42, "characters": 250},
        }
        self.responses.update(responses or {})
        self.calls: List[Tuple[str, str]] = []

    def _respond(self, capability, url):
        self.calls.append((capability, url))
        response = self.responses[capability]
        if isinstance(response, Exception):
            raise response
        return copy.deepcopy(response)

    def extract_concepts(self, url):
        return self._respond("extract_concepts", url)

    def identify_language(self, url):
        return self._respond("identify_language", url)

    def analyze_sentiment(self, url):
        return self._respond("analyze_sentiment", url)

    def get_text_statistics(self, url):
        return self._respond("get_text_statistics", url)


class RecordingReporter:
    def __init__(self, fail: bool = False):
        self.reports: List[Tuple[str, str, Dict[str, Any]]] = []
        self.fail = fail

    def report(self, level, message, context):
        self.reports.append((level, message, context))
        if self.fail:
            raise RuntimeError("reporting backend down")


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def bus():
    return RecordingBus()


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def analysis():
    return StubAnalysisClient()


@pytest.fixture
def services(store, bus, reporter):
    return Services(store=store, bus=bus, reporter=reporter)
