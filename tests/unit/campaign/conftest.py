"""
Unit Test Fixtures for Campaign Service

Pure-function tests: no repository, no event bus.
Uses CampaignTestDataFactory from the data contract.
"""

import os
import sys
from datetime import datetime, timezone

import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from tests.contracts.campaign.data_contract import CampaignTestDataFactory


@pytest.fixture
def factory():
    """Provide CampaignTestDataFactory"""
    return CampaignTestDataFactory


@pytest.fixture
def fixed_now():
    """A fixed reference time for deadline rules"""
    return datetime(2030, 6, 1, 12, 0, 0, tzinfo=timezone.utc)
