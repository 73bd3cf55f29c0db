"""
Component Test Fixtures for Campaign Service

Provides fixtures for component testing with mocked dependencies:
an in-memory repository and an event bus that records what is published.
"""

import asyncio
import json
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from microservices.campaign_service.campaign_service import CampaignService
from microservices.campaign_service.models import (
    Campaign,
    CampaignPatch,
    CampaignStatus,
    as_utc,
)
from microservices.campaign_service.validation import check_donation_terms
from tests.contracts.campaign.data_contract import CampaignTestDataFactory


# ====================
# Mock Repository
# ====================


class MockCampaignRepository:
    """Mock repository for component testing"""

    UPDATABLE_FIELDS = ("title", "description", "category", "target_amount", "min_donation", "deadline")

    def __init__(self):
        self.campaigns: Dict[str, Campaign] = {}
        self.error: Optional[Exception] = None
        self.calls: List[str] = []

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if self.error:
            raise self.error

    async def initialize(self):
        pass

    async def close(self):
        pass

    async def health_check(self) -> bool:
        return True

    async def create_campaign(self, campaign: Campaign) -> Campaign:
        self._record("create_campaign")
        now = datetime.now(timezone.utc)
        stored = campaign.model_copy(update={"created_at": now, "updated_at": now})
        self.campaigns[stored.campaign_id] = stored
        return stored.model_copy()

    async def get_campaign(self, campaign_id: str) -> Optional[Campaign]:
        self._record("get_campaign")
        await asyncio.sleep(0)
        campaign = self.campaigns.get(campaign_id)
        return campaign.model_copy() if campaign else None

    async def list_campaigns_by_owner(self, owner_id: int) -> List[Campaign]:
        self._record("list_campaigns_by_owner")
        return [c.model_copy() for c in self.campaigns.values() if c.owner_id == owner_id]

    async def update_campaign(
        self, campaign_id: str, owner_id: int, patch: CampaignPatch
    ) -> Optional[Campaign]:
        self._record("update_campaign")
        # Yield like real I/O; the check and the write below run without awaiting
        await asyncio.sleep(0)
        campaign = self.campaigns.get(campaign_id)
        if not campaign or campaign.owner_id != owner_id:
            return None
        provided = patch.provided_fields()
        updates = {k: v for k, v in provided.items() if k in self.UPDATABLE_FIELDS}
        if "min_donation" in updates or "target_amount" in updates:
            check_donation_terms(
                updates.get("min_donation", campaign.min_donation),
                updates.get("target_amount", campaign.target_amount),
            )
        updates["updated_at"] = datetime.now(timezone.utc)
        updated = campaign.model_copy(update=updates)
        self.campaigns[campaign_id] = updated
        return updated.model_copy()

    async def delete_campaign(
        self, campaign_id: str, owner_id: Optional[int] = None
    ) -> Optional[int]:
        self._record("delete_campaign")
        campaign = self.campaigns.get(campaign_id)
        if not campaign or (owner_id is not None and campaign.owner_id != owner_id):
            return None
        del self.campaigns[campaign_id]
        return campaign.owner_id

    async def complete_expired_campaigns(self, now: Optional[datetime] = None) -> List[Campaign]:
        self._record("complete_expired_campaigns")
        now = as_utc(now) or datetime.now(timezone.utc)
        completed = []
        for campaign_id, campaign in list(self.campaigns.items()):
            if campaign.status == CampaignStatus.ACTIVE and campaign.deadline < now:
                updated = campaign.model_copy(
                    update={"status": CampaignStatus.COMPLETED, "updated_at": now}
                )
                self.campaigns[campaign_id] = updated
                completed.append(updated.model_copy())
        return completed

    async def save(self, campaign: Campaign) -> Campaign:
        """Seed a campaign directly, bypassing validation"""
        self.campaigns[campaign.campaign_id] = campaign
        return campaign


# ====================
# Mock Event Bus
# ====================


class MockEventBus:
    """Mock event bus for component testing"""

    def __init__(self):
        self.published_events: List[Dict[str, Any]] = []
        self.is_connected = True
        self.error: Optional[Exception] = None
        self.delay: float = 0.0

    async def publish(self, subject: str, payload: bytes) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        event = json.loads(payload.decode("utf-8"))
        self.published_events.append({"subject": subject, **event})

    async def close(self) -> None:
        self.is_connected = False

    def get_events_by_type(self, event_type: str) -> List[Dict]:
        return [e for e in self.published_events if e["event_type"] == event_type]

    def clear_events(self):
        self.published_events = []


# ====================
# Fixtures
# ====================


@pytest.fixture
def factory():
    """Provide CampaignTestDataFactory"""
    return CampaignTestDataFactory


@pytest.fixture
def mock_repository():
    """Get fresh mock repository for each test"""
    return MockCampaignRepository()


@pytest.fixture
def mock_event_bus():
    """Get fresh mock event bus for each test"""
    return MockEventBus()


@pytest.fixture
def campaign_service(mock_repository, mock_event_bus):
    """CampaignService wired to the mocks"""
    return CampaignService(
        repository=mock_repository,
        event_bus=mock_event_bus,
        publish_timeout=0.5,
    )


@pytest.fixture
async def active_campaign(mock_repository, factory):
    """Create and save an active campaign with a future deadline"""
    return await mock_repository.save(factory.make_campaign())


@pytest.fixture
async def expired_campaign(mock_repository, factory):
    """Create and save an active campaign past its deadline"""
    return await mock_repository.save(factory.make_expired_campaign())
