"""
The dashboard's owned state container.

DashboardState holds the customer tree, the goals and the settings. Every
operation validates its input, rewrites the tree synchronously, and then
commits by emitting a StateEvent. Observers (persistence) react to the event;
they are never called from inside the mutation itself.

Usage:
    from adalloc.state import load_state
    from adalloc.persistence import JsonFileStore

    state = load_state(JsonFileStore("~/.adalloc"))
    state.update_channel_spend("cust-1", "camp-1", "google", 20000)
"""
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional

from adalloc.allocation import MergeResult, adjust_channel_spend, merge_allocation
from adalloc.config import StorageConfig
from adalloc.events import EventBus, StateEvent
from adalloc.exceptions import EntityNotFoundError, ValidationError
from adalloc.goals import sync_goals as refresh_goals
from adalloc.metrics import (
    Overview,
    Totals,
    build_channel,
    campaign_totals,
    customer_totals,
    global_overview,
)
from adalloc.models import (
    AppSettings,
    Campaign,
    CampaignStatus,
    Channel,
    Currency,
    Customer,
    CustomerStatus,
    Goal,
    GoalStatus,
    GoalType,
    RevenueSource,
    generate_id,
)
from adalloc.observability import get_logger
from adalloc.persistence import KeyValueStore, PersistenceObserver
from adalloc.seed import default_settings, initial_customers
from adalloc.validators import (
    validate_allocations,
    validate_clicks_impressions,
    validate_count,
    validate_date_order,
    validate_enum,
    validate_name,
    validate_non_negative,
    validate_optional_date,
)

logger = get_logger(__name__)


class DashboardState:
    """In-memory customers, goals and settings with commit notifications."""

    def __init__(
        self,
        customers: Optional[List[Customer]] = None,
        goals: Optional[List[Goal]] = None,
        settings: Optional[AppSettings] = None,
        bus: Optional[EventBus] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        self.customers: List[Customer] = customers if customers is not None else []
        self.goals: List[Goal] = goals if goals is not None else []
        self.settings: AppSettings = settings or default_settings()
        self.bus = bus or EventBus()
        self._today = today or date.today

    # ─── Lookups ──────────────────────────────────────────────────────────────

    def get_customer(self, customer_id: str) -> Customer:
        for customer in self.customers:
            if customer.id == customer_id:
                return customer
        raise EntityNotFoundError("Customer", customer_id)

    def get_campaign(self, customer_id: str, campaign_id: str) -> Campaign:
        campaign = self.get_customer(customer_id).get_campaign(campaign_id)
        if campaign is None:
            raise EntityNotFoundError("Campaign", campaign_id)
        return campaign

    def get_channel(self, customer_id: str, campaign_id: str, channel_id: str) -> Channel:
        channel = self.get_campaign(customer_id, campaign_id).get_channel(channel_id)
        if channel is None:
            raise EntityNotFoundError("Channel", channel_id)
        return channel

    def get_goal(self, goal_id: str) -> Goal:
        for goal in self.goals:
            if goal.id == goal_id:
                return goal
        raise EntityNotFoundError("Goal", goal_id)

    def today(self) -> date:
        return self._today()

    # ─── Aggregates (always recomputed) ───────────────────────────────────────

    def overview(self) -> Overview:
        return global_overview(self.customers)

    def customer_totals(self, customer_id: str) -> Totals:
        return customer_totals(self.get_customer(customer_id))

    def campaign_totals(self, customer_id: str, campaign_id: str) -> Totals:
        return campaign_totals(self.get_campaign(customer_id, campaign_id))

    # ─── Commits ──────────────────────────────────────────────────────────────

    def _commit_customers(self, reason: str, **data: Any) -> None:
        self.bus.emit(StateEvent.CUSTOMERS_CHANGED, {"reason": reason, **data})
        self.sync_goals()

    def _commit_goals(self, reason: str, **data: Any) -> None:
        self.bus.emit(StateEvent.GOALS_CHANGED, {"reason": reason, **data})

    # ─── Customers / campaigns / channels ─────────────────────────────────────

    def add_customer(
        self,
        name: str,
        total_budget: float = 0.0,
        industry: Optional[str] = None,
        contact_person: Optional[str] = None,
        email: Optional[str] = None,
        status: CustomerStatus = CustomerStatus.ACTIVE,
        color: str = "#6366F1",
    ) -> Customer:
        customer = Customer(
            id=generate_id("cust"),
            name=validate_name(name),
            total_budget=validate_non_negative(total_budget, "total_budget"),
            industry=industry or None,
            contact_person=contact_person or None,
            email=email or None,
            status=validate_enum(status, CustomerStatus, "status"),
            color=color,
        )
        self.customers.append(customer)
        logger.info("Customer added", extra={"customer_id": customer.id})
        self._commit_customers("customer_added", customer_id=customer.id)
        return customer

    def add_campaign(
        self,
        customer_id: str,
        name: str,
        budget: Optional[float] = None,
        start_date=None,
        end_date=None,
        status: CampaignStatus = CampaignStatus.ACTIVE,
        description: Optional[str] = None,
    ) -> Campaign:
        customer = self.get_customer(customer_id)
        if budget is None:
            budget = self.settings.default_campaign_budget
        start = validate_optional_date(start_date, "start_date") or self.today()
        end = validate_optional_date(end_date, "end_date")
        validate_date_order(start, end)

        campaign = Campaign(
            id=generate_id("camp"),
            name=validate_name(name),
            customer_id=customer.id,
            description=description or None,
            status=validate_enum(status, CampaignStatus, "status"),
            start_date=start,
            end_date=end,
            budget=validate_non_negative(budget, "budget"),
        )
        customer.campaigns.append(campaign)
        logger.info(
            "Campaign added",
            extra={"customer_id": customer.id, "campaign_id": campaign.id},
        )
        self._commit_customers("campaign_added", customer_id=customer.id, campaign_id=campaign.id)
        return campaign

    def add_channel(
        self,
        customer_id: str,
        campaign_id: str,
        name: str,
        spend: Optional[float] = None,
        impressions: int = 0,
        clicks: int = 0,
        revenue: Optional[float] = None,
        roas: Optional[float] = None,
        source: Optional[RevenueSource] = None,
        allocation: float = 0.0,
        color: str = "#6366F1",
        channel_id: Optional[str] = None,
    ) -> Channel:
        """
        Add a channel, deriving whichever of revenue/roas was not supplied.

        Spend defaults to the configured default channel budget.
        """
        campaign = self.get_campaign(customer_id, campaign_id)
        if channel_id and campaign.get_channel(channel_id) is not None:
            raise ValidationError("channel_id", "Channel already exists in this campaign", channel_id)
        if spend is None:
            spend = self.settings.default_channel_budget
        spend = validate_non_negative(spend, "spend")
        impressions = validate_count(impressions, "impressions")
        clicks = validate_count(clicks, "clicks")
        validate_clicks_impressions(clicks, impressions)
        if revenue is not None:
            revenue = validate_non_negative(revenue, "revenue")
        if roas is not None:
            roas = validate_non_negative(roas, "roas")
        if source is not None:
            source = validate_enum(source, RevenueSource, "source")

        channel = build_channel(
            id=channel_id or generate_id("ch"),
            name=validate_name(name),
            spend=spend,
            clicks=clicks,
            impressions=impressions,
            revenue=revenue,
            roas=roas,
            source=source,
            allocation=validate_non_negative(allocation, "allocation"),
            color=color,
        )
        campaign.channels.append(channel)
        self._commit_customers(
            "channel_added", customer_id=customer_id, campaign_id=campaign_id, channel_id=channel.id
        )
        return channel

    def update_channel_spend(
        self, customer_id: str, campaign_id: str, channel_id: str, new_spend: float
    ) -> Channel:
        """Manual spend edit; revenue is re-forecast at the channel's ROAS."""
        new_spend = validate_non_negative(new_spend, "spend")
        campaign = self.get_campaign(customer_id, campaign_id)
        channel = self.get_channel(customer_id, campaign_id, channel_id)
        adjust_channel_spend(campaign, channel_id, new_spend)
        self._commit_customers(
            "spend_changed", customer_id=customer_id, campaign_id=campaign_id, channel_id=channel_id
        )
        return channel

    def apply_optimization(
        self, customer_id: str, campaign_id: str, allocations: Mapping[str, float]
    ) -> MergeResult:
        """
        Merge a channel id → spend mapping into one campaign.

        Only that campaign's channels are touched; unknown ids are ignored.
        """
        allocations = validate_allocations(allocations)
        campaign = self.get_campaign(customer_id, campaign_id)
        result = merge_allocation(campaign, allocations)
        logger.info(
            "Allocation applied",
            extra={
                "customer_id": customer_id,
                "campaign_id": campaign_id,
                "updated": len(result.updated_ids),
                "ignored": len(result.ignored_ids),
            },
        )
        if result.changed:
            self._commit_customers(
                "allocation_applied",
                customer_id=customer_id,
                campaign_id=campaign_id,
                channel_ids=result.updated_ids,
            )
        return result

    # ─── Goals ────────────────────────────────────────────────────────────────

    def add_goal(
        self,
        name: str,
        target_value: float,
        goal_type: GoalType = GoalType.REVENUE,
        deadline=None,
    ) -> Goal:
        goal = Goal(
            id=generate_id("goal"),
            name=validate_name(name),
            target_value=validate_non_negative(target_value, "target_value"),
            type=validate_enum(goal_type, GoalType, "type"),
            deadline=validate_optional_date(deadline, "deadline"),
        )
        self.goals.append(goal)
        refresh_goals([goal], self.overview(), self.today())
        self._commit_goals("goal_added", goal_id=goal.id)
        return goal

    def update_goal(
        self,
        goal_id: str,
        name: Optional[str] = None,
        target_value: Optional[float] = None,
        deadline=None,
    ) -> Goal:
        """Edit a goal's descriptive fields; its current value stays derived."""
        goal = self.get_goal(goal_id)
        if name is not None:
            goal.name = validate_name(name)
        if target_value is not None:
            goal.target_value = validate_non_negative(target_value, "target_value")
        if deadline is not None:
            goal.deadline = validate_optional_date(deadline, "deadline")
            if goal.status is GoalStatus.OVERDUE:
                goal.status = GoalStatus.ACTIVE
        refresh_goals([goal], self.overview(), self.today())
        self._commit_goals("goal_updated", goal_id=goal.id)
        return goal

    def sync_goals(self) -> List[Goal]:
        """Overwrite every goal's current value from the live aggregates."""
        changed = refresh_goals(self.goals, self.overview(), self.today())
        if changed:
            self._commit_goals("goals_synced", goal_ids=[g.id for g in changed])
        return changed

    # ─── Settings ─────────────────────────────────────────────────────────────

    def update_settings(
        self,
        currency: Optional[Currency] = None,
        default_campaign_budget: Optional[float] = None,
        default_channel_budget: Optional[float] = None,
        show_welcome: Optional[bool] = None,
    ) -> AppSettings:
        if currency is not None:
            self.settings.currency = validate_enum(currency, Currency, "currency")
        if default_campaign_budget is not None:
            self.settings.default_campaign_budget = validate_non_negative(
                default_campaign_budget, "default_campaign_budget"
            )
        if default_channel_budget is not None:
            self.settings.default_channel_budget = validate_non_negative(
                default_channel_budget, "default_channel_budget"
            )
        if show_welcome is not None:
            self.settings.show_welcome = bool(show_welcome)
        self.bus.emit(StateEvent.SETTINGS_CHANGED, {"reason": "settings_updated"})
        return self.settings


# ═══════════════════════════════════════════════════════════════════════════════
# LOADING
# ═══════════════════════════════════════════════════════════════════════════════

def _load_list(store: KeyValueStore, key: str, factory) -> Optional[list]:
    raw = store.get(key)
    if raw is None:
        return None
    if not isinstance(raw, list):
        logger.warning(f"Ignoring stored {key}: expected a list, got {type(raw).__name__}")
        return None
    return [factory(item) for item in raw if isinstance(item, dict)]


def load_state(
    store: KeyValueStore,
    storage: Optional[StorageConfig] = None,
    bus: Optional[EventBus] = None,
    today: Optional[Callable[[], date]] = None,
) -> DashboardState:
    """
    Build the state from stored documents and attach persistence.

    Missing documents fall back to the seed customers, default settings and
    an empty goal list.
    """
    storage = storage or StorageConfig()

    customers = _load_list(store, storage.customers_key, Customer.from_dict)
    if customers is None:
        logger.info("No saved customers, using seed dataset")
        customers = initial_customers()

    goals = _load_list(store, storage.goals_key, Goal.from_dict) or []

    raw_settings: Dict[str, Any] = store.get(storage.settings_key)
    settings = (
        AppSettings.from_dict(raw_settings) if isinstance(raw_settings, dict) else default_settings()
    )

    state = DashboardState(customers=customers, goals=goals, settings=settings, bus=bus, today=today)
    PersistenceObserver(store, storage).attach(state.bus, state)
    logger.info(
        "State loaded",
        extra={"customers": len(customers), "goals": len(goals)},
    )
    return state
