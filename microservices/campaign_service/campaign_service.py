"""
Campaign Service Business Logic

Implements the fundraising campaign lifecycle: validated creation,
owner-scoped updates, deletion, lookups and the scheduled completion of
expired campaigns. Storage is the source of truth; events are announced
only after the repository call has returned and never roll it back.
"""

import asyncio
import logging
import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from .codec import campaign_to_record, request_to_campaign, request_to_patch, status_from_code
from .events.models import CampaignCreatedEventData, CampaignDeletedEventData, CampaignEventType
from .events.publishers import CampaignEventPublisher
from .models import (
    CampaignCreateRequest,
    CampaignRecord,
    CampaignStatus,
    CampaignUpdateRequest,
    CompletionRunSummary,
    DeleteCampaignResponse,
    utc_now,
)
from .protocols import (
    CampaignNotFoundError,
    CampaignPermissionError,
    CampaignRepositoryProtocol,
    EventBusProtocol,
    EventSerializationError,
    InvalidCampaignArgumentError,
)
from .validation import validate_for_create, validate_for_update

logger = logging.getLogger(__name__)


class CampaignService:
    """Campaign service business logic layer"""

    DEFAULT_PUBLISH_TIMEOUT = 5.0

    def __init__(
        self,
        repository: CampaignRepositoryProtocol,
        event_bus: Optional[EventBusProtocol] = None,
        publish_timeout: float = DEFAULT_PUBLISH_TIMEOUT,
    ):
        self.repository = repository
        self.event_bus = event_bus
        self.event_publisher = CampaignEventPublisher(event_bus)
        self.publish_timeout = publish_timeout

    # ====================
    # Campaign CRUD
    # ====================

    async def create_campaign(self, request: CampaignCreateRequest) -> CampaignRecord:
        """
        Create a new campaign

        Assigns the identifier, validates, persists, then announces
        campaign.created with the stored snapshot.
        """
        campaign_id = str(uuid.uuid4())
        candidate = request_to_campaign(request, campaign_id)

        validate_for_create(candidate)

        campaign = await self.repository.create_campaign(candidate)
        logger.info(f"Created campaign {campaign.campaign_id} for owner {campaign.owner_id}")

        await self._publish_event(
            CampaignEventType.CREATED,
            CampaignCreatedEventData.from_campaign(campaign),
        )

        return campaign_to_record(campaign)

    async def get_campaign(self, campaign_id: str) -> CampaignRecord:
        """Get campaign by ID"""
        campaign = await self.repository.get_campaign(campaign_id)
        if not campaign:
            raise CampaignNotFoundError(f"Campaign {campaign_id} not found")
        return campaign_to_record(campaign)

    async def get_campaigns_by_owner(self, owner_id: int) -> List[CampaignRecord]:
        campaigns = await self.repository.list_campaigns_by_owner(owner_id)
        return [campaign_to_record(c) for c in campaigns]

    async def update_campaign(self, request: CampaignUpdateRequest) -> CampaignRecord:
        """
        Apply a partial update scoped to (campaign_id, owner_id)

        Manual completion is refused before any other check on the payload.
        A requested "active" status is accepted but not written: status only
        moves forward through the completion job. A patch carrying only one
        of min_donation / target_amount is checked against the stored other
        one inside the repository write. No event is published.
        """
        if not request.campaign_id:
            raise InvalidCampaignArgumentError("Campaign ID is required", field="campaign_id")
        if not request.owner_id:
            raise InvalidCampaignArgumentError("Owner ID is required", field="owner_id")

        if status_from_code(request.status) == CampaignStatus.COMPLETED:
            raise CampaignPermissionError("Campaigns cannot be marked completed manually")

        patch = request_to_patch(request)
        validate_for_update(patch)

        campaign = await self.repository.update_campaign(
            request.campaign_id, request.owner_id, patch
        )
        if not campaign:
            raise CampaignNotFoundError(f"Campaign {request.campaign_id} not found")

        logger.info(
            f"Updated campaign {campaign.campaign_id}: "
            f"{sorted(patch.provided_fields().keys())}"
        )
        return campaign_to_record(campaign)

    async def delete_campaign(
        self,
        campaign_id: str,
        owner_id: Optional[int] = None,
    ) -> DeleteCampaignResponse:
        """
        Delete campaign and announce campaign.deleted with the former owner

        When owner_id is given only that owner's campaign matches.
        """
        former_owner = await self.repository.delete_campaign(campaign_id, owner_id)
        if former_owner is None:
            raise CampaignNotFoundError(f"Campaign {campaign_id} not found")

        logger.info(f"Deleted campaign {campaign_id} (owner {former_owner})")

        await self._publish_event(
            CampaignEventType.DELETED,
            CampaignDeletedEventData(campaign_id=campaign_id, owner_id=former_owner),
        )

        return DeleteCampaignResponse(campaign_id=campaign_id)

    # ====================
    # Scheduled completion
    # ====================

    async def complete_expired_campaigns(
        self, now: Optional[datetime] = None
    ) -> CompletionRunSummary:
        """
        Flip every active campaign past its deadline to completed

        Invoked by the scheduler. Never raises: a failed run is logged and
        reported in the summary, the next tick tries again.
        """
        summary = CompletionRunSummary()

        try:
            completed = await self.repository.complete_expired_campaigns(now)
        except Exception as e:
            logger.error(f"Completion run failed: {e}")
            summary.success = False
            summary.error = str(e)
        else:
            for campaign in completed:
                logger.info(f"Campaign {campaign.campaign_id} status -> {campaign.status.value}")
            summary.completed_campaign_ids = [c.campaign_id for c in completed]
            summary.completed_count = len(completed)
            logger.info(f"Completion run finished: {summary.completed_count} campaign(s) completed")

        summary.finished_at = utc_now()
        return summary

    # ====================
    # Event Publishing
    # ====================

    async def _publish_event(self, event_type: CampaignEventType, data: BaseModel) -> None:
        """Publish event after commit; failures are logged, never raised"""
        try:
            await asyncio.wait_for(
                self.event_publisher.publish(event_type, data),
                timeout=self.publish_timeout,
            )
        except EventSerializationError as e:
            logger.error(f"Failed to serialize event {event_type.value}: {e}")
        except asyncio.TimeoutError:
            logger.error(f"Timed out publishing event {event_type.value} after {self.publish_timeout}s")
        except Exception as e:
            logger.error(f"Failed to publish event {event_type.value}: {e}")


__all__ = ["CampaignService"]
