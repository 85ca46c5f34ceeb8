"""
Merging spend reallocations back into a campaign's channels.

ROAS is treated as constant under reallocation: a channel that moves from
spend S to S' keeps its roas and its revenue becomes S' × roas. There is no
diminishing-returns model.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Mapping

from adalloc.metrics import compute_cpc, compute_revenue
from adalloc.models import Campaign, Channel
from adalloc.observability import get_logger
from adalloc.schemas import RecommendationResponse

logger = get_logger(__name__)


@dataclass
class MergeResult:
    """Outcome of merging an allocation into a campaign."""
    campaign_id: str
    updated_ids: List[str] = field(default_factory=list)
    ignored_ids: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.updated_ids)


def _respend(channel: Channel, new_spend: float) -> None:
    channel.spend = new_spend
    channel.revenue = compute_revenue(new_spend, channel.roas)
    channel.cpc = compute_cpc(new_spend, channel.clicks)


def merge_allocation(campaign: Campaign, allocations: Mapping[str, float]) -> MergeResult:
    """
    Apply a channel id → new spend mapping to a campaign's channels.

    Channels not named in the mapping are left unchanged. Mapping entries
    that name no channel of this campaign are ignored and reported back.

    Args:
        campaign: Campaign whose channels are rewritten in place
        allocations: New spend per channel id

    Returns:
        MergeResult listing updated and ignored channel ids
    """
    result = MergeResult(campaign_id=campaign.id)
    known = set()

    for channel in campaign.channels:
        known.add(channel.id)
        if channel.id in allocations:
            _respend(channel, float(allocations[channel.id]))
            result.updated_ids.append(channel.id)

    result.ignored_ids = [cid for cid in allocations if cid not in known]
    if result.ignored_ids:
        logger.debug(
            "Ignoring allocation entries for unknown channels",
            extra={"campaign_id": campaign.id, "channel_ids": result.ignored_ids},
        )
    return result


def adjust_channel_spend(campaign: Campaign, channel_id: str, new_spend: float) -> MergeResult:
    """Set one channel's spend and re-forecast its revenue."""
    return merge_allocation(campaign, {channel_id: new_spend})


def allocations_from_recommendations(response: RecommendationResponse) -> Dict[str, float]:
    """Turn a recommendation reply into a channel id → suggested spend mapping."""
    return {r.channel_id: r.suggested_spend for r in response.recommendations}
