"""
Campaign Service Client

Client library for other microservices to interact with campaign service
"""

import logging
from typing import List, Optional

import httpx

from core.config_manager import ConfigManager

from .models import (
    CampaignCreateRequest,
    CampaignListResponse,
    CampaignRecord,
    CampaignResponse,
    CampaignUpdateRequest,
    DeleteCampaignResponse,
)

logger = logging.getLogger(__name__)


class CampaignServiceClient:
    """Campaign Service HTTP client"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        config: Optional[ConfigManager] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Campaign Service client

        Args:
            base_url: Campaign service base URL, defaults to service discovery via ConfigManager
            config: Optional ConfigManager instance for service discovery
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        if not base_url:
            if config is None:
                config = ConfigManager("campaign_service_client")
            base_url = config.get_service_config().campaign_service_url

        if base_url:
            self.base_url = base_url.rstrip('/')
        else:
            host, port = config.discover_service(
                service_name='campaign_service',
                default_host='localhost',
                default_port=8240,
                env_host_key='CAMPAIGN_SERVICE_HOST',
                env_port_key='CAMPAIGN_SERVICE_PORT'
            )
            self.base_url = f"http://{host}:{port}"

        self.client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def close(self):
        """Close HTTP client"""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # =============================================================================
    # Campaigns
    # =============================================================================

    async def create_campaign(self, request: CampaignCreateRequest) -> CampaignRecord:
        """
        Create a campaign

        Raises:
            httpx.HTTPStatusError: 422 when a business rule rejects the request
        """
        try:
            response = await self.client.post(
                "/api/v1/campaigns",
                json=request.model_dump(mode="json"),
            )
            response.raise_for_status()
            return CampaignResponse.model_validate(response.json()).campaign

        except httpx.HTTPStatusError as e:
            logger.error(f"Failed to create campaign: {e.response.status_code} {e.response.text}")
            raise

    async def get_campaign(self, campaign_id: str) -> Optional[CampaignRecord]:
        """Get campaign by ID, None if not found"""
        try:
            response = await self.client.get(f"/api/v1/campaigns/{campaign_id}")
            response.raise_for_status()
            return CampaignResponse.model_validate(response.json()).campaign

        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            logger.error(f"Failed to get campaign {campaign_id}: {e.response.status_code}")
            raise

    async def get_campaigns_by_owner(self, owner_id: int) -> List[CampaignRecord]:
        """List an owner's campaigns"""
        try:
            response = await self.client.get(f"/api/v1/campaigns/owners/{owner_id}")
            response.raise_for_status()
            return CampaignListResponse.model_validate(response.json()).campaigns

        except httpx.HTTPStatusError as e:
            logger.error(f"Failed to list campaigns for owner {owner_id}: {e.response.status_code}")
            raise

    async def update_campaign(self, request: CampaignUpdateRequest) -> Optional[CampaignRecord]:
        """
        Partially update a campaign, None if (campaign_id, owner_id) matches nothing

        Raises:
            httpx.HTTPStatusError: 400 missing ids, 403 manual completion, 422 invalid fields
        """
        try:
            response = await self.client.patch(
                f"/api/v1/campaigns/{request.campaign_id}",
                json=request.model_dump(mode="json"),
            )
            response.raise_for_status()
            return CampaignResponse.model_validate(response.json()).campaign

        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            logger.error(f"Failed to update campaign {request.campaign_id}: {e.response.status_code}")
            raise

    async def delete_campaign(self, campaign_id: str, owner_id: Optional[int] = None) -> bool:
        """Delete a campaign, False if not found"""
        params = {"owner_id": owner_id} if owner_id is not None else None
        try:
            response = await self.client.delete(f"/api/v1/campaigns/{campaign_id}", params=params)
            response.raise_for_status()
            return DeleteCampaignResponse.model_validate(response.json()).success

        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return False
            logger.error(f"Failed to delete campaign {campaign_id}: {e.response.status_code}")
            raise

    async def health_check(self) -> bool:
        """Check if campaign_service is healthy"""
        try:
            response = await self.client.get("/health")
            return response.status_code == 200
        except Exception:
            return False


__all__ = ["CampaignServiceClient"]
