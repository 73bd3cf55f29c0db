"""
Campaign Service Data Models

Fundraising campaigns: canonical domain model, wire-level request/response
shapes and the result of the scheduled completion job.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a datetime to aware UTC; naive values are taken as UTC"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ====================
# Enumerations
# ====================

class CampaignStatus(str, Enum):
    """Canonical campaign status as stored"""
    ACTIVE = "active"
    COMPLETED = "completed"


class CampaignCategory(str, Enum):
    """Canonical campaign category as stored"""
    EDUCATION = "education"
    HEALTH = "health"
    DISASTER_RELIEF = "disaster_relief"
    ENVIRONMENT = "environment"
    ANIMALS = "animals"
    COMMUNITY = "community"
    OTHER = "other"


class CampaignStatusCode(IntEnum):
    """Caller-facing status ordinal, 0 means not provided"""
    UNSPECIFIED = 0
    ACTIVE = 1
    COMPLETED = 2


class CampaignCategoryCode(IntEnum):
    """Caller-facing category ordinal, 0 means not provided"""
    UNSPECIFIED = 0
    EDUCATION = 1
    HEALTH = 2
    DISASTER_RELIEF = 3
    ENVIRONMENT = 4
    ANIMALS = 5
    COMMUNITY = 6
    OTHER = 7


# ====================
# Core Data Models
# ====================

class Campaign(BaseModel):
    """
    Campaign model - the fundraising entity.

    Business rules are enforced by the validator, not by field constraints,
    so a stored row can always be loaded back.
    """
    campaign_id: str = Field(..., description="Opaque unique identifier")
    owner_id: int = Field(..., description="Owning user")

    title: str
    description: str = ""
    category: CampaignCategory = CampaignCategory.OTHER

    # Financial terms
    target_amount: Decimal
    collected_amount: Decimal = Decimal("0")
    min_donation: Decimal

    deadline: Optional[datetime] = None
    status: CampaignStatus = CampaignStatus.ACTIVE

    # Timestamps (assigned by the repository)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CampaignPatch(BaseModel):
    """Partial update - None means the field was not provided"""
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[CampaignCategory] = None
    target_amount: Optional[Decimal] = None
    min_donation: Optional[Decimal] = None
    deadline: Optional[datetime] = None
    status: Optional[CampaignStatus] = None

    def provided_fields(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)

    def is_empty(self) -> bool:
        return not self.provided_fields()


# ====================
# Request Models
# ====================

class CampaignCreateRequest(BaseModel):
    """
    Create request in wire form.

    Zero values (0, "", UNSPECIFIED) mean "not set"; the validator decides
    what is acceptable.
    """
    owner_id: int = 0
    title: str = ""
    description: str = ""
    target_amount: Decimal = Decimal("0")
    deadline: Optional[datetime] = None
    category: int = CampaignCategoryCode.UNSPECIFIED
    min_donation: Decimal = Decimal("0")


class CampaignUpdateRequest(BaseModel):
    """Partial update request in wire form, zero values mean "not provided" """
    campaign_id: str = ""
    owner_id: int = 0
    title: str = ""
    description: str = ""
    target_amount: Decimal = Decimal("0")
    deadline: Optional[datetime] = None
    status: int = CampaignStatusCode.UNSPECIFIED
    category: int = CampaignCategoryCode.UNSPECIFIED
    min_donation: Decimal = Decimal("0")


# ====================
# Response Models
# ====================

class CampaignRecord(BaseModel):
    """Campaign as returned to callers, enums as wire ordinals"""
    campaign_id: str
    owner_id: int
    title: str
    description: str
    target_amount: Decimal
    collected_amount: Decimal
    min_donation: Decimal
    deadline: Optional[datetime] = None
    status: CampaignStatusCode
    category: CampaignCategoryCode
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CampaignResponse(BaseModel):
    """Single campaign response"""
    campaign: CampaignRecord


class CampaignListResponse(BaseModel):
    """Campaign list response"""
    campaigns: List[CampaignRecord] = Field(default_factory=list)
    total: int = 0


class DeleteCampaignResponse(BaseModel):
    """Delete acknowledgement"""
    success: bool = True
    campaign_id: str
    message: str = "Campaign deleted"


class CompletionRunSummary(BaseModel):
    """Outcome of one scheduled completion run"""
    success: bool = True
    completed_count: int = 0
    completed_campaign_ids: List[str] = Field(default_factory=list)
    error: Optional[str] = None
    started_at: datetime = Field(default_factory=utc_now)
    finished_at: Optional[datetime] = None


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    service: str
    port: int
    version: str
    dependencies: Dict[str, str] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Standard error response"""
    detail: str
    error_code: Optional[str] = None
    field: Optional[str] = None


__all__ = [
    # Helpers
    "utc_now",
    "as_utc",
    # Enums
    "CampaignStatus",
    "CampaignCategory",
    "CampaignStatusCode",
    "CampaignCategoryCode",
    # Core Models
    "Campaign",
    "CampaignPatch",
    # Request/Response
    "CampaignCreateRequest",
    "CampaignUpdateRequest",
    "CampaignRecord",
    "CampaignResponse",
    "CampaignListResponse",
    "DeleteCampaignResponse",
    "CompletionRunSummary",
    "HealthResponse",
    "ErrorResponse",
]
