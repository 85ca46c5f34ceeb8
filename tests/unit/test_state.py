"""
Tests for adalloc.state and adalloc.goals modules.
"""
from datetime import date

import pytest

from adalloc.events import StateEvent
from adalloc.exceptions import EntityNotFoundError, ValidationError
from adalloc.goals import actual_value, resolve_status, sync_goals
from adalloc.metrics import global_overview
from adalloc.models import (
    CampaignStatus,
    Currency,
    Goal,
    GoalStatus,
    GoalType,
    RevenueSource,
)
from adalloc.persistence import MemoryStore
from adalloc.state import load_state


class TestLoadState:
    """Startup loading and seed fallback."""

    def test_seed_when_store_empty(self, state):
        """An empty store loads the seed tree and no goals."""
        assert [c.id for c in state.customers] == ["cust-1", "cust-2"]
        assert state.goals == []
        assert state.settings.currency is Currency.USD

    def test_loads_saved_documents(self, today):
        """Saved customers, goals and settings replace the defaults."""
        store = MemoryStore({
            "adalloc-customers": [{"id": "cust-9", "name": "Saved", "campaigns": []}],
            "adalloc-goals": [{"id": "g-1", "name": "Revenue", "targetValue": 10}],
            "adalloc-settings": {"currency": "GBP"},
        })
        state = load_state(store, today=lambda: today)
        assert [c.id for c in state.customers] == ["cust-9"]
        assert state.goals[0].target_value == 10
        assert state.settings.currency is Currency.GBP

    def test_malformed_customers_document(self, today):
        """A malformed customers document falls back to the seed."""
        state = load_state(MemoryStore({"adalloc-customers": {"oops": 1}}), today=lambda: today)
        assert len(state.customers) == 2

    def test_changes_survive_reload(self, store, state, today):
        """A committed spend edit is visible after reloading."""
        state.update_channel_spend("cust-1", "camp-1", "google", 20000)
        reloaded = load_state(store, today=lambda: today)
        channel = reloaded.get_channel("cust-1", "camp-1", "google")
        assert channel.spend == 20000
        assert channel.revenue == 90000


class TestLookups:
    """Entity lookups and aggregates."""

    def test_not_found(self, state):
        """Lookups raise EntityNotFoundError naming the entity."""
        with pytest.raises(EntityNotFoundError):
            state.get_customer("cust-404")
        with pytest.raises(EntityNotFoundError):
            state.get_campaign("cust-1", "camp-2")
        with pytest.raises(EntityNotFoundError) as exc_info:
            state.get_channel("cust-1", "camp-1", "snapchat")
        assert exc_info.value.entity == "Channel"

    def test_totals(self, state):
        """Aggregates are recomputed from the tree."""
        assert state.customer_totals("cust-2").total_spend == 20000
        assert state.campaign_totals("cust-1", "camp-1").total_revenue == 152500
        assert state.overview().totals.total_spend == 70000


class TestTreeMutations:
    """Adding entities and editing spend."""

    def test_add_customer_commits(self, empty_state):
        """Adding a customer emits a customers event."""
        events = []
        empty_state.bus.subscribe(StateEvent.CUSTOMERS_CHANGED, events.append)
        customer = empty_state.add_customer("Acme", total_budget=5000, industry="Retail")
        assert customer.id.startswith("cust-")
        assert empty_state.customers == [customer]
        assert events[0]["reason"] == "customer_added"

    def test_add_customer_rejects_negative_budget(self, empty_state):
        """A rejected customer leaves the tree untouched."""
        with pytest.raises(ValidationError):
            empty_state.add_customer("Acme", total_budget=-1)
        assert empty_state.customers == []

    def test_add_campaign_defaults(self, state, today):
        """New campaigns take the default budget and today's date."""
        campaign = state.add_campaign("cust-1", "Winter Push")
        assert campaign.budget == state.settings.default_campaign_budget
        assert campaign.start_date == today
        assert campaign.status is CampaignStatus.ACTIVE
        assert state.get_campaign("cust-1", campaign.id) is campaign

    def test_add_campaign_bad_dates(self, state):
        """End dates before the start are rejected."""
        with pytest.raises(ValidationError):
            state.add_campaign("cust-1", "Backwards", start_date="2024-05-01", end_date="2024-04-01")

    def test_add_campaign_unknown_status(self, state):
        """Unknown campaign statuses are rejected."""
        with pytest.raises(ValidationError):
            state.add_campaign("cust-1", "X", status="archived")

    def test_add_channel_from_roas(self, state):
        """ROAS-entered channels derive revenue, CPC and CTR."""
        channel = state.add_channel(
            "cust-1", "camp-1", "Pinterest", spend=4000, roas=2.5,
            clicks=200, impressions=40000, source=RevenueSource.ROAS,
        )
        assert channel.revenue == 10000
        assert channel.cpc == 20.0
        assert channel.ctr == 0.5

    def test_add_channel_from_revenue(self, state):
        """Revenue-entered channels derive ROAS."""
        channel = state.add_channel("cust-1", "camp-1", "Snap", spend=2000, revenue=5000)
        assert channel.roas == 2.5

    def test_add_channel_default_spend(self, state):
        """Spend defaults to the configured channel budget."""
        channel = state.add_channel("cust-1", "camp-1", "Reddit", roas=1.0)
        assert channel.spend == 2000
        assert channel.revenue == 2000

    def test_add_channel_duplicate_id(self, state):
        """Channel ids are unique within a campaign."""
        with pytest.raises(ValidationError):
            state.add_channel("cust-1", "camp-1", "Google again", channel_id="google")

    def test_add_channel_negative_spend(self, state):
        """Negative channel spend is rejected."""
        with pytest.raises(ValidationError):
            state.add_channel("cust-1", "camp-1", "Bad", spend=-10)

    def test_update_spend_reforecasts(self, state):
        """Editing spend keeps ROAS and recomputes revenue."""
        channel = state.update_channel_spend("cust-1", "camp-1", "google", 20000)
        assert channel.revenue == 90000
        assert channel.roas == 4.5
        # Same id in another campaign is a different channel
        assert state.get_channel("cust-2", "camp-2", "google").spend == 15000

    def test_update_spend_negative(self, state):
        """A rejected spend edit keeps the old spend."""
        with pytest.raises(ValidationError):
            state.update_channel_spend("cust-1", "camp-1", "google", -1)
        assert state.get_channel("cust-1", "camp-1", "google").spend == 15000


class TestApplyOptimization:
    """Merging accepted allocations into a campaign."""

    def test_apply(self, store, state):
        """Applying an allocation updates every listed channel and saves."""
        allocation = {"google": 25000, "meta": 15000, "tiktok": 4000, "linkedin": 6000}
        result = state.apply_optimization("cust-1", "camp-1", allocation)
        assert sorted(result.updated_ids) == sorted(allocation)
        assert state.campaign_totals("cust-1", "camp-1").total_spend == 50000
        assert store.get("adalloc-customers") is not None

    def test_unknown_ids_do_not_commit(self, store, state):
        """An allocation matching nothing is not saved."""
        result = state.apply_optimization("cust-1", "camp-1", {"snapchat": 100})
        assert result.ignored_ids == ["snapchat"]
        assert "adalloc-customers" not in store

    def test_rejects_negative(self, state):
        """Negative allocations are rejected."""
        with pytest.raises(ValidationError):
            state.apply_optimization("cust-1", "camp-1", {"google": -100})

    def test_unknown_campaign(self, state):
        """Applying to an unknown campaign raises EntityNotFoundError."""
        with pytest.raises(EntityNotFoundError):
            state.apply_optimization("cust-1", "camp-404", {"google": 100})


class TestGoals:
    """Goals mirror the live aggregates."""

    def _revenue_state(self, empty_state):
        customer = empty_state.add_customer("Acme")
        campaign = empty_state.add_campaign(customer.id, "Launch", budget=10000)
        channel = empty_state.add_channel(
            customer.id, campaign.id, "Search", spend=10000, revenue=42000
        )
        return customer, campaign, channel

    def test_goal_completes_when_target_reached(self, empty_state):
        """Goals follow live revenue and complete at the target."""
        customer, campaign, channel = self._revenue_state(empty_state)
        goal = empty_state.add_goal("Q3 revenue", 100000, GoalType.REVENUE)
        assert goal.current_value == 42000
        assert goal.status is GoalStatus.ACTIVE

        empty_state.update_channel_spend(customer.id, campaign.id, channel.id, 30000)
        assert goal.current_value == pytest.approx(126000)
        assert goal.status is GoalStatus.COMPLETED

    def test_completed_is_sticky(self, empty_state):
        """A completed goal stays completed when revenue drops."""
        customer, campaign, channel = self._revenue_state(empty_state)
        goal = empty_state.add_goal("Small target", 1000)
        assert goal.status is GoalStatus.COMPLETED

        empty_state.update_channel_spend(customer.id, campaign.id, channel.id, 0)
        assert goal.current_value == 0
        assert goal.status is GoalStatus.COMPLETED

    def test_overdue(self, empty_state):
        """A goal past its deadline and short of target is overdue."""
        self._revenue_state(empty_state)
        goal = empty_state.add_goal("Late", 10**9, deadline="2024-06-01")
        assert goal.status is GoalStatus.OVERDUE

    def test_extending_deadline_reactivates(self, empty_state):
        """Moving the deadline out makes an overdue goal active again."""
        self._revenue_state(empty_state)
        goal = empty_state.add_goal("Late", 10**9, deadline="2024-06-01")
        empty_state.update_goal(goal.id, deadline="2024-12-31")
        assert goal.status is GoalStatus.ACTIVE

    def test_goal_types(self, state):
        """Each goal type reads its own overview figure."""
        overview = state.overview()
        assert actual_value(GoalType.SPEND, overview) == 70000
        assert actual_value(GoalType.CUSTOMERS, overview) == 2
        assert actual_value(GoalType.ROAS, overview) == pytest.approx(235000 / 70000)

    def test_update_goal_keeps_value_derived(self, state):
        """Editing a goal never sets its current value directly."""
        goal = state.add_goal("Spend", 100000, GoalType.SPEND)
        state.update_goal(goal.id, name="Spend target", target_value=80000)
        assert goal.name == "Spend target"
        assert goal.current_value == 70000

    def test_goals_persisted(self, store, state):
        """New goals are saved with their synced value."""
        goal = state.add_goal("Revenue", 500000)
        saved = store.get("adalloc-goals")
        assert saved[0]["id"] == goal.id
        assert saved[0]["currentValue"] == 235000

    def test_unknown_goal(self, state):
        """Updating an unknown goal raises EntityNotFoundError."""
        with pytest.raises(EntityNotFoundError):
            state.update_goal("goal-404", name="x")

    def test_sync_goals_function(self, seed_customers):
        """sync_goals reports only goals whose value or status changed."""
        goal = Goal(id="g", name="Revenue", target_value=300000)
        changed = sync_goals([goal], global_overview(seed_customers), date(2024, 1, 1))
        assert changed == [goal]
        assert goal.current_value == 235000
        assert sync_goals([goal], global_overview(seed_customers), date(2024, 1, 1)) == []

    def test_resolve_status_without_deadline(self):
        """Goals without a deadline never go overdue."""
        goal = Goal(id="g", name="n", target_value=10, current_value=5)
        assert resolve_status(goal, date(2030, 1, 1)) is GoalStatus.ACTIVE


class TestSettings:
    """Application settings."""

    def test_update(self, store, state):
        """Settings updates are applied and saved."""
        settings = state.update_settings(currency="EUR", default_channel_budget=3500)
        assert settings.currency is Currency.EUR
        assert settings.default_channel_budget == 3500
        assert store.get("adalloc-settings")["currency"] == "EUR"

    def test_new_defaults_apply(self, state):
        """New default budgets apply to campaigns added afterwards."""
        state.update_settings(default_campaign_budget=25000)
        assert state.add_campaign("cust-1", "New").budget == 25000

    def test_invalid_currency(self, state):
        """Unsupported currencies are rejected."""
        with pytest.raises(ValidationError):
            state.update_settings(currency="JPY")
