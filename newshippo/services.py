"""Wiring of the pipeline components around explicit store, bus and reporter."""
from typing import Optional

from .bus import MessageBus
from .fanout import FanOutPublisher
from .ingestion import IngestionCoordinator
from .queries import ArticleQueries
from .reporting import LoggingReporter, Reporter
from .sources import SourceRegistry
from .store import RecordStore


class Services:
    """Ingestion-side components sharing one store, bus and reporter."""

    def __init__(self, store: RecordStore, bus: MessageBus, reporter: Optional[Reporter] = None):
        self.store = store
        self.bus = bus
        self.reporter = reporter or LoggingReporter()
        self.sources = SourceRegistry(store)
        self.publisher = FanOutPublisher(bus)
        self.coordinator = IngestionCoordinator(store, self.sources, self.publisher, reporter=self.reporter)
        self.queries = ArticleQueries(store, reporter=self.reporter)
