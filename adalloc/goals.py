"""
Keeping goals in step with live aggregates.

A goal's current value mirrors the global figure for its type and is never
user-entered. Reaching the target completes the goal for good; an unfinished
goal past its deadline becomes overdue.
"""
from datetime import date
from typing import Iterable, List, Optional

from adalloc.metrics import Overview
from adalloc.models import Goal, GoalStatus, GoalType


def actual_value(goal_type: GoalType, overview: Overview) -> float:
    """The live global figure a goal of this type tracks."""
    if goal_type is GoalType.REVENUE:
        return overview.totals.total_revenue
    if goal_type is GoalType.SPEND:
        return overview.totals.total_spend
    if goal_type is GoalType.CUSTOMERS:
        return float(overview.total_customers)
    if goal_type is GoalType.ROAS:
        return overview.totals.blended_roas
    raise ValueError(f"Unhandled goal type: {goal_type!r}")


def resolve_status(goal: Goal, today: date) -> GoalStatus:
    if goal.status is GoalStatus.COMPLETED:
        return GoalStatus.COMPLETED
    if goal.current_value >= goal.target_value:
        return GoalStatus.COMPLETED
    if goal.deadline is not None and goal.deadline < today:
        return GoalStatus.OVERDUE
    return goal.status


def sync_goal(goal: Goal, overview: Overview, today: Optional[date] = None) -> bool:
    """
    Refresh one goal from the overview.

    Returns:
        True if the goal's value or status changed
    """
    today = today or date.today()
    before = (goal.current_value, goal.status)
    goal.current_value = actual_value(goal.type, overview)
    goal.status = resolve_status(goal, today)
    return (goal.current_value, goal.status) != before


def sync_goals(goals: Iterable[Goal], overview: Overview, today: Optional[date] = None) -> List[Goal]:
    """Refresh every goal; returns the goals that changed."""
    return [goal for goal in goals if sync_goal(goal, overview, today)]
