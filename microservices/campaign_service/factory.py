"""
Campaign Service Factory

Factory for creating campaign service instances with proper dependency injection.
"""

import logging
from typing import Optional

from core.config_manager import ConfigManager
from core.nats_client import EventBusStartupError, NATSEventBus

from .campaign_repository import CampaignRepository
from .campaign_service import CampaignService
from .events.models import CampaignStreamConfig
from .scheduler import CompletionScheduler

logger = logging.getLogger(__name__)


class CampaignServiceFactory:
    """Factory for creating campaign service components"""

    def __init__(self, config: Optional[ConfigManager] = None):
        self.config = config or ConfigManager("campaign_service")
        self._repository: Optional[CampaignRepository] = None
        self._service: Optional[CampaignService] = None
        self._nats_client: Optional[NATSEventBus] = None
        self._scheduler: Optional[CompletionScheduler] = None

    async def initialize(self) -> None:
        """
        Initialize all components

        Raises:
            EventBusStartupError: when NATS is unreachable and NATS_REQUIRED is set
        """
        logger.info("Initializing Campaign Service components...")
        service_config = self.config.get_service_config()
        infra_config = self.config.get_infra_config()

        # Initialize repository
        self._repository = CampaignRepository(self.config)
        await self._repository.initialize()

        # Initialize NATS client
        if infra_config.nats_enabled:
            self._nats_client = await self._connect_event_bus()
        else:
            logger.info("NATS disabled, campaign events will not be published")

        # Initialize main service
        self._service = CampaignService(
            repository=self._repository,
            event_bus=self._nats_client,
            publish_timeout=service_config.event_publish_timeout,
        )

        # Initialize completion scheduler
        if service_config.completion_enabled:
            try:
                scheduler = CompletionScheduler(
                    self._service,
                    cron=service_config.completion_cron,
                    timezone=service_config.completion_timezone,
                )
                scheduler.start()
                self._scheduler = scheduler
            except Exception as e:
                logger.warning(f"Failed to start completion scheduler: {e}")
                self._scheduler = None

        logger.info("Campaign Service components initialized")

    async def _connect_event_bus(self) -> Optional[NATSEventBus]:
        service_config = self.config.get_service_config()
        nats_client = NATSEventBus(
            service_name="campaign_service",
            config=self.config,
            publish_timeout=service_config.event_publish_timeout,
        )
        try:
            await nats_client.connect()
            await nats_client.ensure_stream(
                service_config.events_stream or CampaignStreamConfig.STREAM_NAME,
                CampaignStreamConfig.SUBJECTS,
            )
            logger.info("NATS client connected")
            return nats_client
        except Exception as e:
            await nats_client.close()
            if service_config.nats_required:
                logger.error(f"NATS client initialization failed: {e}")
                if isinstance(e, EventBusStartupError):
                    raise
                raise EventBusStartupError(str(e), url=nats_client.url) from e
            logger.warning(f"NATS client initialization failed: {e}. Continuing without events.")
            return None

    async def close(self) -> None:
        """Close all components"""
        logger.info("Closing Campaign Service components...")

        if self._scheduler:
            await self._scheduler.shutdown()
            self._scheduler = None

        if self._nats_client:
            await self._nats_client.close()
            self._nats_client = None

        if self._repository:
            await self._repository.close()

        logger.info("Campaign Service components closed")

    @property
    def repository(self) -> CampaignRepository:
        """Get campaign repository"""
        if not self._repository:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._repository

    @property
    def service(self) -> CampaignService:
        """Get campaign service"""
        if not self._service:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._service

    @property
    def nats_client(self) -> Optional[NATSEventBus]:
        """Get NATS client"""
        return self._nats_client

    @property
    def scheduler(self) -> Optional[CompletionScheduler]:
        """Get completion scheduler"""
        return self._scheduler


__all__ = ["CampaignServiceFactory"]
