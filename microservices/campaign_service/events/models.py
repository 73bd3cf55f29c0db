"""
Campaign Event Data Models

Event type definitions and data structures for campaign service events.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from ..models import Campaign


# =============================================================================
# Event Type Definitions
# =============================================================================


class CampaignEventType(str, Enum):
    """
    Events published by campaign_service.

    The value doubles as the NATS subject (routing key). Other services
    should reference these when subscribing.
    """
    CREATED = "campaign.created"
    DELETED = "campaign.deleted"


class CampaignStreamConfig:
    """Stream configuration for campaign_service"""
    STREAM_NAME = "campaign-events"
    SUBJECTS = ["campaign.>"]


# =============================================================================
# Event Data Models - Published Events
# =============================================================================


class CampaignCreatedEventData(BaseModel):
    """campaign.created event data - full campaign snapshot"""
    campaign_id: str = Field(..., description="Campaign ID")
    owner_id: int = Field(..., description="Owner ID")
    title: str = Field(..., description="Campaign title")
    description: str = Field("", description="Campaign description")
    category: str = Field(..., description="Canonical category")
    target_amount: Decimal = Field(..., description="Fundraising target")
    collected_amount: Decimal = Field(..., description="Amount collected so far")
    min_donation: Decimal = Field(..., description="Minimum donation")
    deadline: Optional[datetime] = Field(None, description="Campaign deadline")
    status: str = Field(..., description="Canonical status (active)")
    created_at: Optional[datetime] = Field(None, description="Creation time")
    updated_at: Optional[datetime] = Field(None, description="Last update time")

    @classmethod
    def from_campaign(cls, campaign: Campaign) -> "CampaignCreatedEventData":
        return cls(
            campaign_id=campaign.campaign_id,
            owner_id=campaign.owner_id,
            title=campaign.title,
            description=campaign.description,
            category=campaign.category.value,
            target_amount=campaign.target_amount,
            collected_amount=campaign.collected_amount,
            min_donation=campaign.min_donation,
            deadline=campaign.deadline,
            status=campaign.status.value,
            created_at=campaign.created_at,
            updated_at=campaign.updated_at,
        )


class CampaignDeletedEventData(BaseModel):
    """campaign.deleted event data"""
    campaign_id: str = Field(..., description="Campaign ID")
    owner_id: int = Field(..., description="Former owner ID")


__all__ = [
    "CampaignEventType",
    "CampaignStreamConfig",
    "CampaignCreatedEventData",
    "CampaignDeletedEventData",
]
