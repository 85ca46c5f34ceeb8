"""
Metric derivation and aggregation over channel records.

All functions are pure and never raise on arithmetic edge cases: every
division is guarded and yields 0. Input validation (negative values) happens
at the entry boundary, see adalloc.validators.

Aggregates are always recomputed from the live channels passed in; nothing
here caches totals.
"""
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional

from adalloc.models import Campaign, Channel, Customer, RevenueSource


# ═══════════════════════════════════════════════════════════════════════════════
# PER-CHANNEL METRICS
# ═══════════════════════════════════════════════════════════════════════════════

def compute_roas(revenue: float, spend: float) -> float:
    """Return on ad spend; 0 when spend is 0."""
    return revenue / spend if spend > 0 else 0.0


def compute_revenue(spend: float, roas: float) -> float:
    """Forecast revenue from spend at a given ROAS."""
    return spend * roas


def compute_cpc(spend: float, clicks: int) -> float:
    """Cost per click; 0 when there are no clicks."""
    return spend / clicks if clicks > 0 else 0.0


def compute_ctr(clicks: int, impressions: int) -> float:
    """Click-through rate as a percentage; 0 when there are no impressions."""
    return (clicks / impressions) * 100 if impressions > 0 else 0.0


@dataclass(frozen=True)
class DerivedMetrics:
    """Result of deriving a channel's dependent fields."""
    revenue: float
    roas: float
    cpc: float
    ctr: float


def derive_channel_metrics(
    spend: float,
    clicks: int = 0,
    impressions: int = 0,
    *,
    revenue: Optional[float] = None,
    roas: Optional[float] = None,
    source: Optional[RevenueSource] = None,
) -> DerivedMetrics:
    """
    Derive the missing half of revenue/roas plus cpc and ctr.

    The caller supplies spend and one of revenue or roas. ``source`` names
    which one is authoritative; when omitted it is inferred from which value
    was given (roas wins if both are given, matching the manual-ROAS entry
    mode). Missing values count as 0.
    """
    if source is None:
        source = RevenueSource.ROAS if roas is not None else RevenueSource.REVENUE

    if source is RevenueSource.ROAS:
        final_roas = roas or 0.0
        final_revenue = compute_revenue(spend, final_roas)
    else:
        final_revenue = revenue or 0.0
        final_roas = compute_roas(final_revenue, spend)

    return DerivedMetrics(
        revenue=final_revenue,
        roas=final_roas,
        cpc=compute_cpc(spend, clicks),
        ctr=compute_ctr(clicks, impressions),
    )


def build_channel(
    id: str,
    name: str,
    spend: float,
    clicks: int = 0,
    impressions: int = 0,
    *,
    revenue: Optional[float] = None,
    roas: Optional[float] = None,
    source: Optional[RevenueSource] = None,
    allocation: float = 0.0,
    color: str = "#6366F1",
) -> Channel:
    """Create a Channel with every derived field filled in."""
    derived = derive_channel_metrics(
        spend, clicks, impressions, revenue=revenue, roas=roas, source=source
    )
    return Channel(
        id=id,
        name=name,
        spend=spend,
        revenue=derived.revenue,
        impressions=impressions,
        clicks=clicks,
        roas=derived.roas,
        cpc=derived.cpc,
        ctr=derived.ctr,
        allocation=allocation,
        color=color,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# AGGREGATION
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Totals:
    """Summed metrics over a set of channels."""
    total_spend: float = 0.0
    total_revenue: float = 0.0
    total_impressions: int = 0
    total_clicks: int = 0
    channel_count: int = 0

    @property
    def blended_roas(self) -> float:
        """Summed revenue over summed spend, not an average of channel ROAS."""
        return compute_roas(self.total_revenue, self.total_spend)

    @property
    def blended_cpc(self) -> float:
        return compute_cpc(self.total_spend, self.total_clicks)

    @property
    def blended_ctr(self) -> float:
        return compute_ctr(self.total_clicks, self.total_impressions)

    def to_dict(self) -> Dict[str, float]:
        return {
            "totalSpend": self.total_spend,
            "totalRevenue": self.total_revenue,
            "blendedRoas": self.blended_roas,
            "totalImpressions": self.total_impressions,
            "totalClicks": self.total_clicks,
            "blendedCpc": self.blended_cpc,
            "blendedCtr": self.blended_ctr,
            "channelCount": self.channel_count,
        }


def aggregate(channels: Iterable[Channel]) -> Totals:
    """Sum spend, revenue, impressions and clicks over channels."""
    spend = revenue = 0.0
    impressions = clicks = count = 0
    for channel in channels:
        spend += channel.spend
        revenue += channel.revenue
        impressions += channel.impressions
        clicks += channel.clicks
        count += 1
    return Totals(
        total_spend=spend,
        total_revenue=revenue,
        total_impressions=impressions,
        total_clicks=clicks,
        channel_count=count,
    )


def iter_campaign_channels(campaigns: Iterable[Campaign]) -> Iterator[Channel]:
    for campaign in campaigns:
        yield from campaign.channels


def iter_channels(customers: Iterable[Customer]) -> Iterator[Channel]:
    """Every leaf channel under the given customers."""
    for customer in customers:
        yield from iter_campaign_channels(customer.campaigns)


def campaign_totals(campaign: Campaign) -> Totals:
    return aggregate(campaign.channels)


def customer_totals(customer: Customer) -> Totals:
    return aggregate(iter_campaign_channels(customer.campaigns))


def global_totals(customers: Iterable[Customer]) -> Totals:
    return aggregate(iter_channels(customers))


@dataclass(frozen=True)
class Overview:
    """Dashboard headline figures."""
    totals: Totals
    total_customers: int
    total_campaigns: int

    def to_dict(self) -> Dict[str, float]:
        return {
            **self.totals.to_dict(),
            "totalCustomers": self.total_customers,
            "totalCampaigns": self.total_campaigns,
        }


def global_overview(customers: List[Customer]) -> Overview:
    return Overview(
        totals=global_totals(customers),
        total_customers=len(customers),
        total_campaigns=sum(len(c.campaigns) for c in customers),
    )


def spend_distribution(channels: Iterable[Channel]) -> Dict[str, float]:
    """
    Each channel's share of total spend, in percent.

    Informational only; callers may store it in Channel.allocation.
    """
    channels = list(channels)
    total = sum(c.spend for c in channels)
    return {c.id: (c.spend / total) * 100 if total > 0 else 0.0 for c in channels}


# ═══════════════════════════════════════════════════════════════════════════════
# FLATTENED CHANNEL LISTING
# ═══════════════════════════════════════════════════════════════════════════════

SORT_KEYS = ("spend", "revenue", "roas")


@dataclass(frozen=True)
class ChannelRow:
    """A channel together with the names of its owners."""
    customer_id: str
    customer_name: str
    campaign_id: str
    campaign_name: str
    channel: Channel

    def to_dict(self) -> Dict[str, object]:
        return {
            "customerId": self.customer_id,
            "customerName": self.customer_name,
            "campaignId": self.campaign_id,
            "campaignName": self.campaign_name,
            **self.channel.to_dict(),
        }


def flatten_channels(customers: Iterable[Customer]) -> List[ChannelRow]:
    return [
        ChannelRow(
            customer_id=customer.id,
            customer_name=customer.name,
            campaign_id=campaign.id,
            campaign_name=campaign.name,
            channel=channel,
        )
        for customer in customers
        for campaign in customer.campaigns
        for channel in campaign.channels
    ]


def filter_channel_rows(rows: Iterable[ChannelRow], query: str) -> List[ChannelRow]:
    """Case-insensitive match on channel, customer or campaign name."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(rows)
    return [
        row for row in rows
        if needle in row.channel.name.lower()
        or needle in row.customer_name.lower()
        or needle in row.campaign_name.lower()
    ]


def sort_channel_rows(rows: Iterable[ChannelRow], key: str = "spend") -> List[ChannelRow]:
    """Sort rows descending by spend, revenue or roas. Unknown keys keep order."""
    if key not in SORT_KEYS:
        return list(rows)
    return sorted(rows, key=lambda row: getattr(row.channel, key), reverse=True)


def search_customers(customers: Iterable[Customer], query: str) -> List[Customer]:
    """Case-insensitive match on customer name or industry."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(customers)
    return [
        c for c in customers
        if needle in c.name.lower() or needle in (c.industry or "").lower()
    ]


def rows_totals(rows: Iterable[ChannelRow]) -> Totals:
    return aggregate(row.channel for row in rows)
