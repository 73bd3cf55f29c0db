"""
Campaign Codec

Maps between the caller-facing wire shapes (integer ordinals, zero values
meaning "not set") and the canonical domain models.

Wire -> canonical fails closed: an ordinal outside the enumeration raises
CampaignValidationError. UNSPECIFIED (0) maps to None. Canonical -> wire is
total: anything unrecognized becomes UNSPECIFIED.
"""

from decimal import Decimal
from typing import Optional, Union

from .models import (
    Campaign,
    CampaignCategory,
    CampaignCategoryCode,
    CampaignCreateRequest,
    CampaignPatch,
    CampaignRecord,
    CampaignStatus,
    CampaignStatusCode,
    CampaignUpdateRequest,
    as_utc,
)
from .protocols import CampaignValidationError

_STATUS_BY_CODE = {
    CampaignStatusCode.ACTIVE: CampaignStatus.ACTIVE,
    CampaignStatusCode.COMPLETED: CampaignStatus.COMPLETED,
}
_CODE_BY_STATUS = {status: code for code, status in _STATUS_BY_CODE.items()}

_CATEGORY_BY_CODE = {
    CampaignCategoryCode.EDUCATION: CampaignCategory.EDUCATION,
    CampaignCategoryCode.HEALTH: CampaignCategory.HEALTH,
    CampaignCategoryCode.DISASTER_RELIEF: CampaignCategory.DISASTER_RELIEF,
    CampaignCategoryCode.ENVIRONMENT: CampaignCategory.ENVIRONMENT,
    CampaignCategoryCode.ANIMALS: CampaignCategory.ANIMALS,
    CampaignCategoryCode.COMMUNITY: CampaignCategory.COMMUNITY,
    CampaignCategoryCode.OTHER: CampaignCategory.OTHER,
}
_CODE_BY_CATEGORY = {category: code for code, category in _CATEGORY_BY_CODE.items()}


# ====================
# Enumerations
# ====================

def status_from_code(code: int) -> Optional[CampaignStatus]:
    if code == CampaignStatusCode.UNSPECIFIED:
        return None
    try:
        return _STATUS_BY_CODE[CampaignStatusCode(code)]
    except ValueError:
        raise CampaignValidationError(f"Unknown campaign status: {code}", field="status")


def status_to_code(status: Union[CampaignStatus, str, None]) -> CampaignStatusCode:
    try:
        return _CODE_BY_STATUS[CampaignStatus(status)]
    except ValueError:
        return CampaignStatusCode.UNSPECIFIED


def category_from_code(code: int) -> Optional[CampaignCategory]:
    if code == CampaignCategoryCode.UNSPECIFIED:
        return None
    try:
        return _CATEGORY_BY_CODE[CampaignCategoryCode(code)]
    except ValueError:
        raise CampaignValidationError(f"Unknown campaign category: {code}", field="category")


def category_to_code(category: Union[CampaignCategory, str, None]) -> CampaignCategoryCode:
    try:
        return _CODE_BY_CATEGORY[CampaignCategory(category)]
    except ValueError:
        return CampaignCategoryCode.UNSPECIFIED


# ====================
# Requests and records
# ====================

def _provided_amount(value: Decimal) -> Optional[Decimal]:
    return None if value == 0 else value


def request_to_campaign(request: CampaignCreateRequest, campaign_id: str) -> Campaign:
    """Build the candidate campaign for a create request (not yet validated)"""
    return Campaign(
        campaign_id=campaign_id,
        owner_id=request.owner_id,
        title=request.title,
        description=request.description,
        category=category_from_code(request.category) or CampaignCategory.OTHER,
        target_amount=request.target_amount,
        collected_amount=Decimal("0"),
        min_donation=request.min_donation,
        deadline=as_utc(request.deadline),
        status=CampaignStatus.ACTIVE,
    )


def request_to_patch(request: CampaignUpdateRequest) -> CampaignPatch:
    """Map wire zero values of an update request to "not provided" """
    return CampaignPatch(
        title=request.title or None,
        description=request.description or None,
        category=category_from_code(request.category),
        target_amount=_provided_amount(request.target_amount),
        min_donation=_provided_amount(request.min_donation),
        deadline=as_utc(request.deadline),
        status=status_from_code(request.status),
    )


def campaign_to_record(campaign: Campaign) -> CampaignRecord:
    return CampaignRecord(
        campaign_id=campaign.campaign_id,
        owner_id=campaign.owner_id,
        title=campaign.title,
        description=campaign.description,
        target_amount=campaign.target_amount,
        collected_amount=campaign.collected_amount,
        min_donation=campaign.min_donation,
        deadline=campaign.deadline,
        status=status_to_code(campaign.status),
        category=category_to_code(campaign.category),
        created_at=campaign.created_at,
        updated_at=campaign.updated_at,
    )


__all__ = [
    "status_from_code",
    "status_to_code",
    "category_from_code",
    "category_to_code",
    "request_to_campaign",
    "request_to_patch",
    "campaign_to_record",
]
