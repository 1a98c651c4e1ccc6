"""News source registry: one record per distinct hostname."""
import logging
from typing import Optional

from .config import settings
from .schemas import NewsSource
from .store import RecordStore

logger = logging.getLogger(__name__)


class SourceRegistry:
    """Creates news source records on first sighting of a hostname."""

    def __init__(self, store: RecordStore, table: Optional[str] = None):
        self.store = store
        self.table = table or settings.news_source_table

    def ensure_source(self, hostname: str) -> bool:
        """
        Create the news source for ``hostname`` unless it already exists.

        Returns:
            True if a record was created, False if it already existed

        Raises:
            StoreError: If the backing store fails
        """
        if self.store.get(self.table, hostname) is not None:
            return False
        source = NewsSource(url=hostname)
        self.store.put(self.table, hostname, source.model_dump())
        logger.info(f"Registered news source {hostname}")
        return True
