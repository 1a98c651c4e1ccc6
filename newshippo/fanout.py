"""Fan-out of one submitted article into one enrichment request per capability."""
import logging
from typing import Dict, List, Optional

from .bus import MessageBus
from .config import settings
from .schemas import EnrichmentKind, EnrichmentRequest

logger = logging.getLogger(__name__)


def default_channels() -> Dict[EnrichmentKind, str]:
    """Channel name per enrichment kind, in publish order."""
    return {
        EnrichmentKind.CONCEPTS: settings.concepts_channel,
        EnrichmentKind.LANGUAGE: settings.language_channel,
        EnrichmentKind.SENTIMENT: settings.sentiment_channel,
        EnrichmentKind.STATISTICS: settings.statistics_channel,
    }


class FanOutPublisher:
    """
    Publishes the four enrichment requests for an article, sequentially.

    The first failed publish aborts the rest. Messages already sent stay sent,
    so a failure can leave only part of the enrichment triggered.
    """

    def __init__(self, bus: MessageBus, channels: Optional[Dict[EnrichmentKind, str]] = None):
        self.bus = bus
        self.channels = channels or default_channels()
        missing = set(EnrichmentKind) - set(self.channels)
        if missing:
            raise ValueError(f"No channel configured for: {sorted(k.value for k in missing)}")

    def publish_enrichment_requests(self, url: str) -> List[str]:
        """
        Publish one request per enrichment kind carrying only ``url``.

        Returns:
            The channels published to, in order

        Raises:
            PublishError: On the first publish the bus rejects
        """
        message = EnrichmentRequest(url=url).model_dump()
        published = []
        for kind in EnrichmentKind:
            channel = self.channels[kind]
            self.bus.publish(channel, message)
            published.append(channel)
        logger.info(f"📤 Published {len(published)} enrichment requests for {url}")
        return published
