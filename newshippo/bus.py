"""RabbitMQ message bus: one durable queue per enrichment channel."""
import json
import logging
import threading
import time
from typing import Any, Callable, Dict, Iterable, Optional, Protocol

import pika
import pika.exceptions

from .config import settings
from .errors import PublishError

logger = logging.getLogger(__name__)

MessageHandler = Callable[[bytes], Any]


class MessageBus(Protocol):
    """Publish/subscribe primitives the pipeline needs from a message bus."""

    def publish(self, channel: str, payload: Dict[str, Any]) -> None: ...

    def subscribe(self, channel: str, handler: MessageHandler) -> None: ...


class RabbitMQBus:
    """
    Blocking pika bus.

    Publishes go to the default exchange with the channel name as routing key,
    with publisher confirms on, so a broker nack or an unroutable message
    surfaces as PublishError.
    """

    def __init__(self, uri: Optional[str] = None, channels: Iterable[str] = (), timeout_seconds: Optional[float] = None):
        self.uri = uri or settings.rabbitmq_uri
        self.channels = list(channels)
        self.timeout_seconds = timeout_seconds or settings.bus_timeout_seconds
        self._connection: Optional[pika.BlockingConnection] = None
        self._channel = None
        self._lock = threading.Lock()

    def _parameters(self) -> pika.URLParameters:
        parameters = pika.URLParameters(self.uri)
        parameters.heartbeat = 600  # 10 minutes heartbeat
        parameters.blocked_connection_timeout = self.timeout_seconds
        parameters.socket_timeout = self.timeout_seconds
        return parameters

    def connect(self, max_retries: int = 1, retry_delay: float = 5) -> None:
        """Open the connection and declare every channel queue as durable."""
        for attempt in range(max_retries):
            try:
                self._connection = pika.BlockingConnection(self._parameters())
                self._channel = self._connection.channel()
                self._channel.confirm_delivery()
                for channel in self.channels:
                    self._channel.queue_declare(queue=channel, durable=True)
                # Prefetch 1 keeps deliveries fairly spread across worker processes
                self._channel.basic_qos(prefetch_count=1)
                logger.info("Connected to RabbitMQ")
                return
            except pika.exceptions.AMQPConnectionError as e:
                logger.warning(f"RabbitMQ attempt {attempt + 1}/{max_retries} failed: {e}")
                if attempt < max_retries - 1:
                    time.sleep(retry_delay)

        raise ConnectionError(f"Failed to connect to RabbitMQ after {max_retries} attempts")

    def _ensure_channel(self):
        if self._channel is None or self._channel.is_closed:
            self.connect()
        return self._channel

    def publish(self, channel: str, payload: Dict[str, Any]) -> None:
        """Publish one persistent JSON message to ``channel``."""
        body = json.dumps(payload).encode()
        with self._lock:
            try:
                amqp_channel = self._ensure_channel()
                amqp_channel.basic_publish(
                    exchange="",
                    routing_key=channel,
                    body=body,
                    properties=pika.BasicProperties(
                        content_type="application/json",
                        delivery_mode=pika.DeliveryMode.Persistent,
                    ),
                    mandatory=True,
                )
            except (pika.exceptions.AMQPError, ConnectionError) as e:
                logger.error(f"ERROR: Publish to {channel} failed: {e!r}")
                self._discard_connection()
                raise PublishError(f"Publish to {channel} failed: {e!r}") from e
        logger.debug(f"Published to {channel}: {payload}")

    def subscribe(self, channel: str, handler: MessageHandler) -> None:
        """
        Register ``handler`` for deliveries on ``channel``.

        Every delivery is acked once the handler returns, whatever the outcome.
        A handler that raises is nacked without requeue.
        """
        def on_message(ch: Any, method: Any, properties: Any, body: bytes) -> None:
            delivery_tag = method.delivery_tag
            try:
                handler(body)
                ch.basic_ack(delivery_tag=delivery_tag)
            except Exception as e:
                logger.error(f"ERROR: Delivery {delivery_tag} on {channel} crashed: {e}", exc_info=True)
                ch.basic_nack(delivery_tag=delivery_tag, requeue=False)

        self._ensure_channel().basic_consume(queue=channel, on_message_callback=on_message)
        logger.info(f"Subscribed to {channel}")

    def start_consuming(self) -> None:
        self._ensure_channel().start_consuming()

    def stop_consuming(self) -> None:
        if self._channel is not None and self._channel.is_open:
            self._channel.stop_consuming()

    def health_check(self) -> bool:
        return self._connection is not None and self._connection.is_open

    def _discard_connection(self) -> None:
        """Close a connection left in an unknown state and drop both references."""
        try:
            self.close()
        except pika.exceptions.AMQPError as e:
            logger.warning(f"⚠️ Closing RabbitMQ connection failed: {e!r}")
            self._connection = None
            self._channel = None

    def close(self) -> None:
        """Close the connection."""
        if self._connection is not None and self._connection.is_open:
            self._connection.close()
        self._connection = None
        self._channel = None
