"""
Campaign Service Protocols

Defines interfaces for dependency injection and testing.
Following the protocol-based architecture pattern.
"""

from datetime import datetime
from typing import List, Optional, Protocol

from core.nats_client import EventBusStartupError

from .models import Campaign, CampaignPatch


# ====================
# Repository Protocol
# ====================


class CampaignRepositoryProtocol(Protocol):
    """
    Protocol for campaign data repository.

    Lookups return None (never raise) when nothing matches; the service
    turns that into CampaignNotFoundError. Storage failures raise
    CampaignRepositoryError.
    """

    async def initialize(self) -> None:
        """Initialize repository connection"""
        ...

    async def close(self) -> None:
        """Close repository connection"""
        ...

    async def health_check(self) -> bool:
        """Check repository health"""
        ...

    async def create_campaign(self, campaign: Campaign) -> Campaign:
        """Persist a new campaign, returns the stored row with timestamps"""
        ...

    async def get_campaign(self, campaign_id: str) -> Optional[Campaign]:
        """Get campaign by ID"""
        ...

    async def list_campaigns_by_owner(self, owner_id: int) -> List[Campaign]:
        """List an owner's campaigns, possibly empty"""
        ...

    async def update_campaign(
        self, campaign_id: str, owner_id: int, patch: CampaignPatch
    ) -> Optional[Campaign]:
        """
        Apply the provided fields of a patch to the (campaign_id, owner_id)
        row and bump updated_at. Status is never written here.

        The write must keep min_donation <= target_amount for the merged row,
        checked atomically with the update; a violation raises
        CampaignValidationError.
        """
        ...

    async def delete_campaign(
        self, campaign_id: str, owner_id: Optional[int] = None
    ) -> Optional[int]:
        """Delete campaign, returns the former owner or None"""
        ...

    async def complete_expired_campaigns(
        self, now: Optional[datetime] = None
    ) -> List[Campaign]:
        """
        Atomically flip every active campaign whose deadline is before now
        to completed and return the flipped rows.
        """
        ...


# ====================
# Event Bus Protocol
# ====================


class EventBusProtocol(Protocol):
    """Protocol for the broker: publish an opaque payload under a routing key"""

    async def publish(self, subject: str, payload: bytes) -> None:
        """Publish payload, raises on failure"""
        ...

    async def close(self) -> None:
        """Close the connection"""
        ...


# ====================
# Custom Exceptions
# ====================


class CampaignServiceError(Exception):
    """Base exception for campaign service errors"""
    pass


class CampaignValidationError(CampaignServiceError):
    """Raised when campaign validation fails"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InvalidCampaignArgumentError(CampaignServiceError):
    """Raised when a request lacks the identifiers an operation needs"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class CampaignNotFoundError(CampaignServiceError):
    """Raised when campaign is not found (or not owned by the caller)"""
    pass


class CampaignPermissionError(CampaignServiceError):
    """Raised when the caller attempts a forbidden transition"""
    pass


class CampaignRepositoryError(CampaignServiceError):
    """Raised when the storage layer fails"""
    pass


class EventSerializationError(CampaignServiceError):
    """Raised when an event payload cannot be encoded"""
    pass


__all__ = [
    "CampaignRepositoryProtocol",
    "EventBusProtocol",
    "CampaignServiceError",
    "CampaignValidationError",
    "InvalidCampaignArgumentError",
    "CampaignNotFoundError",
    "CampaignPermissionError",
    "CampaignRepositoryError",
    "EventSerializationError",
    "EventBusStartupError",
]
