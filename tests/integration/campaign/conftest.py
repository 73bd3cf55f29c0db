"""
Integration Test Fixtures for Campaign Service

Provides fixtures for integration testing with real infrastructure.
Requires: PostgreSQL (and NATS for the event bus tests) to be running.
"""

import os
import sys
from typing import AsyncGenerator, List

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from core.nats_client import EventBusStartupError, NATSEventBus
from microservices.campaign_service.campaign_repository import CampaignRepository
from microservices.campaign_service.protocols import CampaignRepositoryError
from tests.contracts.campaign.data_contract import CampaignTestDataFactory


# ====================
# Test Configuration
# ====================


class IntegrationTestConfig:
    """Configuration for integration tests"""

    POSTGRES_HOST = os.getenv("POSTGRES_HOST", "localhost")
    POSTGRES_PORT = int(os.getenv("POSTGRES_PORT", "5432"))
    NATS_URL = os.getenv("NATS_URL", "nats://localhost:4222")

    # Timeouts
    DB_TIMEOUT = 10
    NATS_TIMEOUT = 5


@pytest.fixture(scope="session")
def integration_config():
    """Provide integration test configuration"""
    return IntegrationTestConfig()


# ====================
# Factory Fixture
# ====================


@pytest.fixture
def factory():
    """Provide CampaignTestDataFactory"""
    return CampaignTestDataFactory


# ====================
# Cleanup Utilities
# ====================


class TestDataCleaner:
    """Utility for cleaning up test data"""

    def __init__(self):
        self.created_campaign_ids: List[str] = []

    def track_campaign(self, campaign_id: str):
        """Track campaign for cleanup"""
        self.created_campaign_ids.append(campaign_id)

    async def cleanup(self, repository: CampaignRepository):
        """Delete tracked campaigns that are still present"""
        for campaign_id in self.created_campaign_ids:
            await repository.delete_campaign(campaign_id)
        self.created_campaign_ids.clear()


# ====================
# Infrastructure Fixtures
# ====================


@pytest.fixture
async def campaign_repository() -> AsyncGenerator[CampaignRepository, None]:
    """Repository on the real database, schema created on first use"""
    repository = CampaignRepository()
    try:
        await repository.initialize()
    except CampaignRepositoryError as e:
        await repository.close()
        pytest.skip(f"PostgreSQL not available: {e}")

    yield repository

    await repository.close()


@pytest.fixture
async def data_cleaner(campaign_repository) -> AsyncGenerator[TestDataCleaner, None]:
    """Provide test data cleaner, runs after each test"""
    cleaner = TestDataCleaner()
    yield cleaner
    await cleaner.cleanup(campaign_repository)


@pytest.fixture
async def nats_event_bus(integration_config) -> AsyncGenerator[NATSEventBus, None]:
    """Connected event bus, skips when NATS is unreachable"""
    bus = NATSEventBus(
        service_name="campaign_service_test",
        url=integration_config.NATS_URL,
        publish_timeout=integration_config.NATS_TIMEOUT,
    )
    try:
        await bus.connect()
    except EventBusStartupError as e:
        pytest.skip(f"NATS not available: {e}")

    yield bus

    await bus.close()
