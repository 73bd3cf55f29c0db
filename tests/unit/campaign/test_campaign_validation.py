"""
Unit Tests for Campaign Validation Rules

Create rules apply in order and the first failure wins; update rules only
look at provided fields.
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from microservices.campaign_service.models import CampaignPatch
from microservices.campaign_service.protocols import CampaignValidationError
from microservices.campaign_service.validation import (
    check_donation_terms,
    validate_for_create,
    validate_for_update,
)


def _candidate(factory, fixed_now, **overrides):
    overrides.setdefault("deadline", fixed_now + timedelta(days=1))
    return factory.make_campaign(**overrides)


class TestValidateForCreate:
    """Full candidate validation"""

    def test_valid_candidate_passes(self, factory, fixed_now):
        validate_for_create(_candidate(factory, fixed_now), now=fixed_now)

    def test_owner_required(self, factory, fixed_now):
        with pytest.raises(CampaignValidationError) as exc_info:
            validate_for_create(_candidate(factory, fixed_now, owner_id=0), now=fixed_now)
        assert exc_info.value.field == "owner_id"

    @pytest.mark.parametrize("length", [4, 101, 0])
    def test_title_length_out_of_range(self, factory, fixed_now, length):
        candidate = _candidate(factory, fixed_now, title=factory.make_title(length))
        with pytest.raises(CampaignValidationError) as exc_info:
            validate_for_create(candidate, now=fixed_now)
        assert exc_info.value.field == "title"

    @pytest.mark.parametrize("length", [5, 100])
    def test_title_length_bounds_accepted(self, factory, fixed_now, length):
        candidate = _candidate(factory, fixed_now, title=factory.make_title(length))
        validate_for_create(candidate, now=fixed_now)

    def test_title_length_counts_characters(self, factory, fixed_now):
        # 5 characters, 10 bytes in UTF-8
        validate_for_create(_candidate(factory, fixed_now, title="ééééé"), now=fixed_now)

    @pytest.mark.parametrize("target", [Decimal("0"), Decimal("-50")])
    def test_target_amount_must_be_positive(self, factory, fixed_now, target):
        candidate = _candidate(factory, fixed_now, target_amount=target)
        with pytest.raises(CampaignValidationError) as exc_info:
            validate_for_create(candidate, now=fixed_now)
        assert exc_info.value.field == "target_amount"

    def test_min_donation_must_be_positive(self, factory, fixed_now):
        candidate = _candidate(factory, fixed_now, min_donation=Decimal("0"))
        with pytest.raises(CampaignValidationError) as exc_info:
            validate_for_create(candidate, now=fixed_now)
        assert exc_info.value.field == "min_donation"

    def test_min_donation_above_target_rejected(self, factory, fixed_now):
        candidate = _candidate(
            factory, fixed_now, target_amount=Decimal("100"), min_donation=Decimal("100.01")
        )
        with pytest.raises(CampaignValidationError) as exc_info:
            validate_for_create(candidate, now=fixed_now)
        assert exc_info.value.field == "min_donation"
        assert "exceed" in str(exc_info.value)

    def test_min_donation_equal_to_target_accepted(self, factory, fixed_now):
        candidate = _candidate(
            factory, fixed_now, target_amount=Decimal("100"), min_donation=Decimal("100")
        )
        validate_for_create(candidate, now=fixed_now)

    @pytest.mark.parametrize("offset", [timedelta(0), timedelta(seconds=-1), timedelta(days=-30)])
    def test_deadline_must_be_strictly_after_now(self, factory, fixed_now, offset):
        candidate = _candidate(factory, fixed_now, deadline=fixed_now + offset)
        with pytest.raises(CampaignValidationError) as exc_info:
            validate_for_create(candidate, now=fixed_now)
        assert exc_info.value.field == "deadline"

    def test_missing_deadline_rejected(self, factory, fixed_now):
        candidate = factory.make_campaign(deadline=None)
        with pytest.raises(CampaignValidationError) as exc_info:
            validate_for_create(candidate, now=fixed_now)
        assert exc_info.value.field == "deadline"

    def test_naive_deadline_treated_as_utc(self, factory, fixed_now):
        naive = (fixed_now + timedelta(hours=1)).replace(tzinfo=None)
        validate_for_create(_candidate(factory, fixed_now, deadline=naive), now=fixed_now)

    def test_first_failing_rule_wins(self, factory, fixed_now):
        # Given: owner, title and target are all invalid
        candidate = _candidate(
            factory, fixed_now, owner_id=0, title="abc", target_amount=Decimal("0")
        )

        # Then: only the owner rule is reported
        with pytest.raises(CampaignValidationError) as exc_info:
            validate_for_create(candidate, now=fixed_now)
        assert exc_info.value.field == "owner_id"


class TestValidateForUpdate:
    """Partial update validation"""

    def test_empty_patch_is_valid(self, fixed_now):
        validate_for_update(CampaignPatch(), now=fixed_now)

    def test_five_character_title_is_valid(self, fixed_now):
        validate_for_update(CampaignPatch(title="Hello"), now=fixed_now)

    def test_short_title_rejected(self, fixed_now):
        with pytest.raises(CampaignValidationError) as exc_info:
            validate_for_update(CampaignPatch(title="Hey"), now=fixed_now)
        assert exc_info.value.field == "title"

    def test_negative_target_rejected(self, fixed_now):
        with pytest.raises(CampaignValidationError) as exc_info:
            validate_for_update(CampaignPatch(target_amount=Decimal("-1")), now=fixed_now)
        assert exc_info.value.field == "target_amount"

    def test_past_deadline_rejected(self, fixed_now):
        patch = CampaignPatch(deadline=fixed_now - timedelta(minutes=5))
        with pytest.raises(CampaignValidationError) as exc_info:
            validate_for_update(patch, now=fixed_now)
        assert exc_info.value.field == "deadline"

    def test_future_deadline_accepted(self, fixed_now):
        validate_for_update(CampaignPatch(deadline=fixed_now + timedelta(days=3)), now=fixed_now)

    def test_negative_min_donation_rejected(self, fixed_now):
        with pytest.raises(CampaignValidationError) as exc_info:
            validate_for_update(CampaignPatch(min_donation=Decimal("-5")), now=fixed_now)
        assert exc_info.value.field == "min_donation"

    def test_min_donation_above_target_in_same_patch_rejected(self, fixed_now):
        patch = CampaignPatch(target_amount=Decimal("50"), min_donation=Decimal("60"))
        with pytest.raises(CampaignValidationError):
            validate_for_update(patch, now=fixed_now)

    def test_min_donation_alone_not_cross_checked(self, fixed_now):
        # No target in the patch: the stored target is checked by the repository write
        validate_for_update(CampaignPatch(min_donation=Decimal("999999")), now=fixed_now)


class TestDonationTerms:

    def test_equal_amounts_allowed(self):
        check_donation_terms(Decimal("25"), Decimal("25"))

    def test_min_above_target_rejected(self):
        with pytest.raises(CampaignValidationError):
            check_donation_terms(Decimal("26"), Decimal("25"))


class TestStorableAmounts:
    """Amounts must fit NUMERIC(14, 2) without rounding"""

    @pytest.mark.parametrize("field", ["target_amount", "min_donation"])
    def test_sub_cent_amount_rejected(self, factory, fixed_now, field):
        # 0.001 would be stored as 0.00
        candidate = _candidate(factory, fixed_now, **{field: Decimal("0.001")})
        with pytest.raises(CampaignValidationError) as exc_info:
            validate_for_create(candidate, now=fixed_now)
        assert exc_info.value.field == field

    def test_trailing_zero_places_accepted(self, factory, fixed_now):
        candidate = _candidate(
            factory, fixed_now, target_amount=Decimal("1000.000"), min_donation=Decimal("0.010")
        )
        validate_for_create(candidate, now=fixed_now)

    def test_smallest_and_largest_storable_amounts_accepted(self, factory, fixed_now):
        candidate = _candidate(
            factory,
            fixed_now,
            target_amount=Decimal("999999999999.99"),
            min_donation=Decimal("0.01"),
        )
        validate_for_create(candidate, now=fixed_now)

    @pytest.mark.parametrize("target", [Decimal("1000000000000"), Decimal("1e13")])
    def test_target_beyond_column_precision_rejected(self, factory, fixed_now, target):
        candidate = _candidate(factory, fixed_now, target_amount=target)
        with pytest.raises(CampaignValidationError) as exc_info:
            validate_for_create(candidate, now=fixed_now)
        assert exc_info.value.field == "target_amount"

    def test_update_rejects_unstorable_amounts(self, fixed_now):
        with pytest.raises(CampaignValidationError) as exc_info:
            validate_for_update(CampaignPatch(min_donation=Decimal("0.005")), now=fixed_now)
        assert exc_info.value.field == "min_donation"

        with pytest.raises(CampaignValidationError) as exc_info:
            validate_for_update(CampaignPatch(target_amount=Decimal("1e12")), now=fixed_now)
        assert exc_info.value.field == "target_amount"
