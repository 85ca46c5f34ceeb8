"""
Domain models for the budget-allocation tree.

Customers own Campaigns, Campaigns own Channels. Goals and AppSettings sit
beside the tree. Every model round-trips through the camelCase JSON documents
used for local persistence and export.
"""
import secrets
import time
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar

E = TypeVar("E", bound=Enum)


# ═══════════════════════════════════════════════════════════════════════════════
# ENUMS
# ═══════════════════════════════════════════════════════════════════════════════

class CampaignStatus(str, Enum):
    """Campaign lifecycle state."""
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"

    @property
    def is_running(self) -> bool:
        return self is CampaignStatus.ACTIVE


class CustomerStatus(str, Enum):
    """Customer account state."""
    ACTIVE = "active"
    INACTIVE = "inactive"


class GoalStatus(str, Enum):
    """Goal progress state."""
    ACTIVE = "active"
    COMPLETED = "completed"
    OVERDUE = "overdue"


class GoalType(str, Enum):
    """Which global aggregate a goal tracks."""
    REVENUE = "revenue"
    ROAS = "roas"
    SPEND = "spend"
    CUSTOMERS = "customers"

    @property
    def display_name(self) -> str:
        names = {
            GoalType.REVENUE: "Revenue",
            GoalType.ROAS: "ROAS",
            GoalType.SPEND: "Spend",
            GoalType.CUSTOMERS: "Customers",
        }
        return names[self]


class Currency(str, Enum):
    """Display currencies."""
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    TRY = "TRY"

    @property
    def symbol(self) -> str:
        symbols = {
            Currency.USD: "$",
            Currency.EUR: "€",
            Currency.GBP: "£",
            Currency.TRY: "₺",
        }
        return symbols[self]

    @property
    def display_name(self) -> str:
        names = {
            Currency.USD: "US Dollar",
            Currency.EUR: "Euro",
            Currency.GBP: "British Pound",
            Currency.TRY: "Turkish Lira",
        }
        return names[self]


class RevenueSource(str, Enum):
    """Which of revenue/roas the caller entered; the other one is derived."""
    ROAS = "roas"
    REVENUE = "revenue"


# ═══════════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════════

def generate_id(prefix: str) -> str:
    """Generate an id like ``camp-1717171717171-3f9a``."""
    return f"{prefix}-{int(time.time() * 1000)}-{secrets.token_hex(2)}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_enum(enum_cls: Type[E], value: Any, default: E) -> E:
    """Parse a stored enum value, falling back to default for unknown values."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return default


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except (ValueError, TypeError):
        return None


def parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except (ValueError, TypeError):
        return None


def _iso(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat().replace("+00:00", "Z")
    return value.isoformat()


def _float(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


# ═══════════════════════════════════════════════════════════════════════════════
# DATACLASSES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class Channel:
    """
    Advertising channel (line-item) within a campaign.

    roas/cpc/ctr are derived values, see adalloc.metrics.
    allocation is an informational percentage and is not kept summing to 100.
    """
    id: str
    name: str
    spend: float = 0.0
    revenue: float = 0.0
    impressions: int = 0
    clicks: int = 0
    roas: float = 0.0
    cpc: float = 0.0
    ctr: float = 0.0
    allocation: float = 0.0
    color: str = "#6366F1"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Channel":
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            spend=_float(data.get("spend")),
            revenue=_float(data.get("revenue")),
            impressions=_int(data.get("impressions")),
            clicks=_int(data.get("clicks")),
            roas=_float(data.get("roas")),
            cpc=_float(data.get("cpc")),
            ctr=_float(data.get("ctr")),
            allocation=_float(data.get("allocation")),
            color=data.get("color") or "#6366F1",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "spend": self.spend,
            "revenue": self.revenue,
            "impressions": self.impressions,
            "clicks": self.clicks,
            "roas": self.roas,
            "cpc": self.cpc,
            "ctr": self.ctr,
            "allocation": self.allocation,
            "color": self.color,
        }


@dataclass
class Campaign:
    """Campaign owned by exactly one customer."""
    id: str
    name: str
    customer_id: str
    start_date: Optional[date] = None
    budget: float = 0.0
    status: CampaignStatus = CampaignStatus.ACTIVE
    end_date: Optional[date] = None
    description: Optional[str] = None
    channels: List[Channel] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Campaign":
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            customer_id=str(data.get("customerId", "")),
            description=data.get("description") or None,
            status=parse_enum(CampaignStatus, data.get("status"), CampaignStatus.ACTIVE),
            start_date=parse_date(data.get("startDate")),
            end_date=parse_date(data.get("endDate")),
            budget=_float(data.get("budget")),
            channels=[Channel.from_dict(c) for c in data.get("channels") or []],
            created_at=parse_datetime(data.get("createdAt")) or utc_now(),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "id": self.id,
            "name": self.name,
            "customerId": self.customer_id,
            "status": self.status.value,
            "startDate": _iso(self.start_date),
            "budget": self.budget,
            "channels": [c.to_dict() for c in self.channels],
            "createdAt": _iso(self.created_at),
        }
        if self.description:
            result["description"] = self.description
        if self.end_date:
            result["endDate"] = _iso(self.end_date)
        return result

    def get_channel(self, channel_id: str) -> Optional[Channel]:
        return next((c for c in self.channels if c.id == channel_id), None)


@dataclass
class Customer:
    """Customer account; exclusively owns its campaigns."""
    id: str
    name: str
    total_budget: float = 0.0
    status: CustomerStatus = CustomerStatus.ACTIVE
    industry: Optional[str] = None
    contact_person: Optional[str] = None
    email: Optional[str] = None
    color: str = "#6366F1"
    campaigns: List[Campaign] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Customer":
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            industry=data.get("industry") or None,
            contact_person=data.get("contactPerson") or None,
            email=data.get("email") or None,
            status=parse_enum(CustomerStatus, data.get("status"), CustomerStatus.ACTIVE),
            total_budget=_float(data.get("totalBudget")),
            campaigns=[Campaign.from_dict(c) for c in data.get("campaigns") or []],
            created_at=parse_datetime(data.get("createdAt")) or utc_now(),
            color=data.get("color") or "#6366F1",
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "totalBudget": self.total_budget,
            "campaigns": [c.to_dict() for c in self.campaigns],
            "createdAt": _iso(self.created_at),
            "color": self.color,
        }
        for key, value in (
            ("industry", self.industry),
            ("contactPerson", self.contact_person),
            ("email", self.email),
        ):
            if value:
                result[key] = value
        return result

    def get_campaign(self, campaign_id: str) -> Optional[Campaign]:
        return next((c for c in self.campaigns if c.id == campaign_id), None)


@dataclass
class Goal:
    """
    Business goal tracked against a global aggregate.

    current_value is owned by goal sync (adalloc.goals), not by the user.
    """
    id: str
    name: str
    target_value: float
    type: GoalType = GoalType.REVENUE
    current_value: float = 0.0
    deadline: Optional[date] = None
    status: GoalStatus = GoalStatus.ACTIVE
    created_at: datetime = field(default_factory=utc_now)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Goal":
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            target_value=_float(data.get("targetValue")),
            current_value=_float(data.get("currentValue")),
            deadline=parse_date(data.get("deadline")),
            status=parse_enum(GoalStatus, data.get("status"), GoalStatus.ACTIVE),
            type=parse_enum(GoalType, data.get("type"), GoalType.REVENUE),
            created_at=parse_datetime(data.get("createdAt")) or utc_now(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "targetValue": self.target_value,
            "currentValue": self.current_value,
            "deadline": _iso(self.deadline) or "",
            "status": self.status.value,
            "type": self.type.value,
            "createdAt": _iso(self.created_at),
        }

    @property
    def progress_percent(self) -> float:
        """Progress toward target, capped at 100."""
        if self.target_value <= 0:
            return 0.0
        return min((self.current_value / self.target_value) * 100, 100.0)


@dataclass
class AppSettings:
    """User preferences."""
    currency: Currency = Currency.USD
    default_campaign_budget: float = 10000.0
    default_channel_budget: float = 2000.0
    show_welcome: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppSettings":
        defaults = cls()
        return cls(
            currency=parse_enum(Currency, data.get("currency"), defaults.currency),
            default_campaign_budget=_float(
                data.get("defaultCampaignBudget", defaults.default_campaign_budget)
            ),
            default_channel_budget=_float(
                data.get("defaultChannelBudget", defaults.default_channel_budget)
            ),
            show_welcome=bool(data.get("showWelcome", defaults.show_welcome)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currency": self.currency.value,
            "defaultCampaignBudget": self.default_campaign_budget,
            "defaultChannelBudget": self.default_channel_budget,
            "showWelcome": self.show_welcome,
        }
