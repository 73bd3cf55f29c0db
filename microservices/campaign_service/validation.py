"""
Campaign Validation Rules

Field and cross-field business rules for campaign creation and partial
updates. Pure functions: no storage access. The first failing rule raises
CampaignValidationError; errors are not aggregated.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from .models import Campaign, CampaignPatch, as_utc, utc_now
from .protocols import CampaignValidationError

TITLE_MIN_LENGTH = 5
TITLE_MAX_LENGTH = 100

# Money columns are NUMERIC(14, 2)
AMOUNT_DECIMAL_PLACES = 2
AMOUNT_INTEGER_DIGITS = 12
_AMOUNT_STEP = Decimal(1).scaleb(-AMOUNT_DECIMAL_PLACES)
_AMOUNT_LIMIT = Decimal(10) ** AMOUNT_INTEGER_DIGITS


def _check_title(title: str) -> None:
    if not TITLE_MIN_LENGTH <= len(title) <= TITLE_MAX_LENGTH:
        raise CampaignValidationError(
            f"Title must be between {TITLE_MIN_LENGTH} and {TITLE_MAX_LENGTH} characters",
            field="title",
        )


def _check_storable_amount(value: Decimal, label: str, field: str) -> None:
    if not value.is_finite() or value >= _AMOUNT_LIMIT:
        raise CampaignValidationError(
            f"{label} must have at most {AMOUNT_INTEGER_DIGITS} integer digits", field=field
        )
    if value != value.quantize(_AMOUNT_STEP):
        raise CampaignValidationError(
            f"{label} must have at most {AMOUNT_DECIMAL_PLACES} decimal places", field=field
        )


def _check_target_amount(target_amount: Decimal) -> None:
    _check_storable_amount(target_amount, "Target amount", "target_amount")
    if target_amount <= 0:
        raise CampaignValidationError("Target amount must be greater than zero", field="target_amount")


def _check_min_donation(min_donation: Decimal) -> None:
    _check_storable_amount(min_donation, "Minimum donation", "min_donation")
    if min_donation <= 0:
        raise CampaignValidationError("Minimum donation must be greater than zero", field="min_donation")


def _check_deadline(deadline: Optional[datetime], now: datetime) -> None:
    if deadline is None or as_utc(deadline) <= now:
        raise CampaignValidationError("Deadline must be in the future", field="deadline")


def check_donation_terms(min_donation: Decimal, target_amount: Decimal) -> None:
    """Minimum donation may not exceed the target amount"""
    if min_donation > target_amount:
        raise CampaignValidationError(
            "Minimum donation cannot exceed target amount", field="min_donation"
        )


def validate_for_create(campaign: Campaign, now: Optional[datetime] = None) -> None:
    """
    Validate a full candidate campaign.

    Rules, in order: owner set, title length, target > 0, min donation > 0,
    deadline strictly after now, min donation <= target.

    Raises:
        CampaignValidationError: on the first failing rule
    """
    now = as_utc(now) or utc_now()

    if not campaign.owner_id:
        raise CampaignValidationError("Owner ID is required", field="owner_id")
    _check_title(campaign.title)
    _check_target_amount(campaign.target_amount)
    _check_min_donation(campaign.min_donation)
    _check_deadline(campaign.deadline, now)
    check_donation_terms(campaign.min_donation, campaign.target_amount)


def validate_for_update(patch: CampaignPatch, now: Optional[datetime] = None) -> None:
    """
    Validate the provided fields of a partial update.

    An empty patch is valid. The min donation / target cross-check only
    applies here when both are in the same patch.

    Raises:
        CampaignValidationError: on the first failing rule
    """
    now = as_utc(now) or utc_now()

    if patch.title is not None:
        _check_title(patch.title)
    if patch.target_amount is not None:
        _check_target_amount(patch.target_amount)
    if patch.deadline is not None:
        _check_deadline(patch.deadline, now)
    if patch.min_donation is not None:
        _check_min_donation(patch.min_donation)
        if patch.target_amount is not None:
            check_donation_terms(patch.min_donation, patch.target_amount)


__all__ = [
    "TITLE_MIN_LENGTH",
    "TITLE_MAX_LENGTH",
    "AMOUNT_DECIMAL_PLACES",
    "AMOUNT_INTEGER_DIGITS",
    "validate_for_create",
    "validate_for_update",
    "check_donation_terms",
]
