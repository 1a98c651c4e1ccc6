"""NewsHippo enrichment worker process: consumes the four enrichment channels."""
import logging
import sys

from dotenv import load_dotenv

from .analysis import LocalTextAnalysisClient
from .bus import RabbitMQBus
from .config import settings
from .fanout import default_channels
from .health import health_status, start_health_server
from .store import RedisRecordStore
from .workers import build_workers

logger = logging.getLogger(__name__)


def verify_environment(store: RedisRecordStore) -> bool:
    """Check that required services and config are available."""
    logger.info("Verifying environment...")

    if not settings.rabbitmq_uri.strip():
        logger.error("ERROR: RABBITMQ_URI is empty")
        return False

    if not settings.redis_url.strip():
        logger.error("ERROR: REDIS_URL is empty")
        return False

    if not store.health_check():
        logger.error("ERROR: Record store health check failed")
        return False

    logger.info("Environment verification passed")
    return True


def subscribe_workers(bus, workers, channels) -> None:
    """Route each channel's deliveries to the worker for its enrichment kind."""
    for kind, worker in workers.items():
        bus.subscribe(channels[kind], worker.handle)


def main() -> None:
    """Run the RabbitMQ consumer for all enrichment workers."""
    load_dotenv()
    logging.basicConfig(
        level=settings.log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logger.info("Starting NewsHippo enrichment worker...")

    store = RedisRecordStore()
    channels = default_channels()
    bus = RabbitMQBus(channels=channels.values())

    start_health_server(port=settings.health_port)
    health_status.register_check("redis", store.health_check)
    health_status.register_check("rabbitmq", bus.health_check)

    if not verify_environment(store):
        logger.error("💥 Environment verification failed")
        sys.exit(1)

    try:
        bus.connect(max_retries=10, retry_delay=5)
        workers = build_workers(store, LocalTextAnalysisClient())
        subscribe_workers(bus, workers, channels)
        health_status.update_worker_status(True)

        logger.info(f"Worker ready - waiting for messages on: {', '.join(channels.values())}")
        try:
            bus.start_consuming()
        except KeyboardInterrupt:
            logger.info("Stopping worker...")
            health_status.update_worker_status(False)
            bus.stop_consuming()
            bus.close()
            logger.info("Worker stopped gracefully")

    except Exception as e:
        logger.error(f"FATAL: {e}", exc_info=True)
        health_status.update_worker_status(False)
        sys.exit(1)


if __name__ == '__main__':
    main()
