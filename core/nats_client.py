"""
NATS JetStream Client for Python Microservices
Provides event-driven communication between services

Wraps a nats-py connection and its JetStream context. The bus is an owned
object: the service factory constructs it once, connects it at startup,
hands it to the publishers that need it and closes it at shutdown.
"""

import logging
from typing import TYPE_CHECKING, List, Optional

import nats
from nats.aio.client import Client as NATS
from nats.js import JetStreamContext

if TYPE_CHECKING:
    from core.config_manager import ConfigManager

logger = logging.getLogger(__name__)


class EventBusStartupError(Exception):
    """Raised when the event bus cannot connect or prepare its stream"""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class NATSEventBus:
    """
    NATS JetStream event bus.

    Publishes opaque payloads under a subject (routing key). JetStream
    acknowledges every publish, which gives at-least-once delivery once the
    call returns. No ordering is promised across subjects.
    """

    def __init__(
        self,
        service_name: str,
        config: Optional["ConfigManager"] = None,
        url: Optional[str] = None,
        publish_timeout: Optional[float] = None,
    ):
        """
        Initialize NATS Event Bus.

        Args:
            service_name: Name of the service (used as the connection name)
            config: Optional ConfigManager instance for endpoint resolution
            url: Explicit NATS URL, overrides config
            publish_timeout: Seconds to wait for a JetStream ack
        """
        from core.config_manager import ConfigManager

        self.service_name = service_name

        if config is None:
            config = ConfigManager(service_name)
        infra = config.get_infra_config()
        service = config.get_service_config()

        if url:
            self.url = url
        elif infra.nats_url:
            self.url = infra.nats_url
        else:
            host, port = config.discover_service(
                service_name="nats_service",
                default_host=infra.nats_host,
                default_port=infra.nats_port,
                env_host_key="NATS_HOST",
                env_port_key="NATS_PORT",
            )
            self.url = f"nats://{host}:{port}"

        self.publish_timeout = publish_timeout or service.event_publish_timeout

        self._nc: Optional[NATS] = None
        self._js: Optional[JetStreamContext] = None

        logger.info(f"NATS EventBus initialized: {self.url}")

    @property
    def is_connected(self) -> bool:
        return self._nc is not None and self._nc.is_connected

    async def connect(self) -> None:
        """
        Connect to NATS and open the JetStream context.

        Raises:
            EventBusStartupError: if the server is unreachable
        """
        try:
            self._nc = await nats.connect(
                servers=[self.url],
                name=self.service_name,
                connect_timeout=self.publish_timeout,
                max_reconnect_attempts=5,
            )
            self._js = self._nc.jetstream()
            logger.info(f"Connected to NATS at {self.url} as {self.service_name}")
        except Exception as e:
            self._nc = None
            self._js = None
            raise EventBusStartupError(f"Cannot connect to NATS at {self.url}: {e}", url=self.url) from e

    async def ensure_stream(self, name: str, subjects: List[str]) -> None:
        """
        Create the JetStream stream if it does not exist.

        Raises:
            EventBusStartupError: if the stream cannot be created
        """
        if not self._js:
            raise EventBusStartupError("Not connected to NATS", url=self.url)

        try:
            await self._js.stream_info(name)
            logger.debug(f"Stream {name} already exists")
            return
        except nats.js.errors.NotFoundError:
            pass
        except Exception as e:
            raise EventBusStartupError(f"Cannot look up stream {name}: {e}", url=self.url) from e

        try:
            await self._js.add_stream(name=name, subjects=subjects)
            logger.info(f"Created stream {name} for subjects {subjects}")
        except Exception as e:
            raise EventBusStartupError(f"Cannot create stream {name}: {e}", url=self.url) from e

    async def publish(self, subject: str, payload: bytes) -> None:
        """
        Publish a payload under a subject and wait for the JetStream ack.

        Raises:
            ConnectionError: if the bus is not connected
            nats.errors.Error: on publish failure or ack timeout
        """
        if not self._js or not self.is_connected:
            raise ConnectionError("Not connected to NATS")

        ack = await self._js.publish(subject, payload, timeout=self.publish_timeout)
        logger.debug(f"Published {subject} to stream {ack.stream}, seq={ack.seq}")

    async def close(self) -> None:
        """Flush pending messages and close the connection"""
        if self._nc is None:
            return
        try:
            await self._nc.drain()
            logger.info("NATS connection drained")
        finally:
            self._nc = None
            self._js = None


__all__ = ["NATSEventBus", "EventBusStartupError"]
