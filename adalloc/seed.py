"""
Built-in seed dataset and defaults.

Used when local storage has no saved documents yet.
"""
import copy
from datetime import date, datetime, timezone
from typing import List

from adalloc.models import (
    AppSettings,
    Campaign,
    CampaignStatus,
    Channel,
    Currency,
    Customer,
    CustomerStatus,
)

TOTAL_BUDGET = 50000

CURRENCIES = [
    {"code": c.value, "symbol": c.symbol, "name": c.display_name} for c in Currency
]

INITIAL_CHANNELS: List[Channel] = [
    Channel(
        id="google",
        name="Google Ads",
        spend=15000,
        revenue=67500,
        impressions=450000,
        clicks=12500,
        roas=4.5,
        cpc=1.20,
        ctr=2.78,
        allocation=30,
        color="#4285F4",
    ),
    Channel(
        id="meta",
        name="Meta (FB/Insta)",
        spend=20000,
        revenue=52000,
        impressions=1200000,
        clicks=18000,
        roas=2.6,
        cpc=1.11,
        ctr=1.5,
        allocation=40,
        color="#0668E1",
    ),
    Channel(
        id="tiktok",
        name="TikTok Ads",
        spend=10000,
        revenue=18000,
        impressions=2500000,
        clicks=25000,
        roas=1.8,
        cpc=0.40,
        ctr=1.0,
        allocation=20,
        color="#000000",
    ),
    Channel(
        id="linkedin",
        name="LinkedIn Ads",
        spend=5000,
        revenue=15000,
        impressions=150000,
        clicks=800,
        roas=3.0,
        cpc=6.25,
        ctr=0.53,
        allocation=10,
        color="#0a66c2",
    ),
]

DEFAULT_SETTINGS = AppSettings(
    currency=Currency.USD,
    default_campaign_budget=10000,
    default_channel_budget=2000,
    show_welcome=True,
)

_SEED_CREATED_AT = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _channels(*ids: str) -> List[Channel]:
    # Fresh copies so each campaign exclusively owns its channels
    return [copy.deepcopy(c) for c in INITIAL_CHANNELS if c.id in ids]


def initial_customers() -> List[Customer]:
    """A fresh copy of the seed tree."""
    return [
        Customer(
            id="cust-1",
            name="TechStyle Fashion",
            industry="E-commerce",
            contact_person="Ayse Yilmaz",
            email="ayse@techstyle.example",
            status=CustomerStatus.ACTIVE,
            total_budget=100000,
            color="#6366F1",
            created_at=_SEED_CREATED_AT,
            campaigns=[
                Campaign(
                    id="camp-1",
                    name="Summer Sale 2024",
                    customer_id="cust-1",
                    description="Seasonal clearance push across paid social and search",
                    status=CampaignStatus.ACTIVE,
                    start_date=date(2024, 6, 1),
                    end_date=date(2024, 8, 31),
                    budget=TOTAL_BUDGET,
                    channels=_channels("google", "meta", "tiktok", "linkedin"),
                    created_at=_SEED_CREATED_AT,
                ),
            ],
        ),
        Customer(
            id="cust-2",
            name="CloudBase SaaS",
            industry="Software",
            contact_person="Mehmet Kaya",
            email="mehmet@cloudbase.example",
            status=CustomerStatus.ACTIVE,
            total_budget=40000,
            color="#10B981",
            created_at=_SEED_CREATED_AT,
            campaigns=[
                Campaign(
                    id="camp-2",
                    name="B2B Lead Generation",
                    customer_id="cust-2",
                    status=CampaignStatus.PAUSED,
                    start_date=date(2024, 3, 1),
                    budget=20000,
                    channels=_channels("google", "linkedin"),
                    created_at=_SEED_CREATED_AT,
                ),
            ],
        ),
    ]


def default_settings() -> AppSettings:
    return copy.deepcopy(DEFAULT_SETTINGS)
