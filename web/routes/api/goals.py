"""Goal tracking endpoints."""
from fastapi import APIRouter, Request

from web.schemas import GoalCreate, GoalUpdate
from ._deps import limiter, get_state, READ_LIMIT, WRITE_LIMIT

router = APIRouter()


@router.get("/goals")
@limiter.limit(READ_LIMIT)
async def list_goals(request: Request):
    """Goals with current values re-synced from the live totals."""
    state = get_state(request)
    state.sync_goals()
    return {
        "goals": [
            {**goal.to_dict(), "progress": goal.progress_percent}
            for goal in state.goals
        ],
        "count": len(state.goals),
    }


@router.post("/goals", status_code=201)
@limiter.limit(WRITE_LIMIT)
async def create_goal(request: Request, body: GoalCreate):
    state = get_state(request)
    goal = state.add_goal(
        name=body.name,
        target_value=body.target_value,
        goal_type=body.type,
        deadline=body.deadline,
    )
    return {**goal.to_dict(), "progress": goal.progress_percent}


@router.patch("/goals/{goal_id}")
@limiter.limit(WRITE_LIMIT)
async def update_goal(request: Request, goal_id: str, body: GoalUpdate):
    state = get_state(request)
    goal = state.update_goal(
        goal_id,
        name=body.name,
        target_value=body.target_value,
        deadline=body.deadline,
    )
    return {**goal.to_dict(), "progress": goal.progress_percent}
