"""
Pytest configuration and shared fixtures.
"""
import json

import pytest
from datetime import date
from typing import List
from unittest.mock import AsyncMock, MagicMock

from adalloc.events import EventBus
from adalloc.llm_client import RecommendationClient
from adalloc.models import Campaign, Channel, Customer
from adalloc.persistence import MemoryStore
from adalloc.seed import initial_customers
from adalloc.state import DashboardState, load_state

TODAY = date(2024, 6, 15)


@pytest.fixture
def today() -> date:
    """Fixed 'today' so goal deadlines are deterministic."""
    return TODAY


@pytest.fixture
def seed_customers() -> List[Customer]:
    """Fresh copy of the built-in seed dataset."""
    return initial_customers()


@pytest.fixture
def sample_channels() -> List[Channel]:
    """Two channels with round numbers."""
    return [
        Channel(id="search", name="Search", spend=10000, revenue=45000, roas=4.5,
                impressions=100000, clicks=5000, cpc=2.0, ctr=5.0),
        Channel(id="social", name="Social", spend=5000, revenue=10000, roas=2.0,
                impressions=200000, clicks=2500, cpc=2.0, ctr=1.25),
    ]


@pytest.fixture
def sample_campaign(sample_channels) -> Campaign:
    return Campaign(
        id="camp-x",
        name="Test Campaign",
        customer_id="cust-x",
        start_date=date(2024, 1, 1),
        budget=15000,
        channels=sample_channels,
    )


@pytest.fixture
def store() -> MemoryStore:
    """Empty in-memory store."""
    return MemoryStore()


@pytest.fixture
def state(store, today) -> DashboardState:
    """Seeded state with persistence attached to an in-memory store."""
    return load_state(store, today=lambda: today)


@pytest.fixture
def empty_state(today) -> DashboardState:
    """State with no customers and no persistence."""
    return DashboardState(customers=[], bus=EventBus(), today=lambda: today)


def make_client(reply=None, error=None, available=True) -> RecommendationClient:
    """Recommendation client double returning reply or raising error."""
    client = MagicMock(spec=RecommendationClient)
    client.is_available = available
    client.complete = AsyncMock(return_value=reply, side_effect=error)
    return client


@pytest.fixture
def valid_reply() -> str:
    """A reply for the seed campaign that sums to the 50000 budget."""
    return json.dumps({
        "recommendations": [
            {"channelId": "google", "suggestedSpend": 25000, "reasoning": "Best ROAS."},
            {"channelId": "meta", "suggestedSpend": 15000, "reasoning": "Solid volume."},
            {"channelId": "tiktok", "suggestedSpend": 4000, "reasoning": "Weak ROAS."},
            {"channelId": "linkedin", "suggestedSpend": 6000, "reasoning": "B2B reach."},
        ],
        "globalStrategy": "Shift budget toward search.",
    })


@pytest.fixture
def fake_client(valid_reply) -> RecommendationClient:
    return make_client(reply=valid_reply)


@pytest.fixture
def client_factory():
    """Factory for recommendation client doubles."""
    return make_client
