"""Activity feed API routes."""

from fastapi import APIRouter

from src.api.deps import CurrentUser
from src.schemas.activity import ActivityListResponse, ActivityResponse
from src.services.activity_service import ActivityService

router = APIRouter(prefix="/activities", tags=["activities"])


@router.get(
    "",
    response_model=ActivityListResponse,
    summary="List my activities",
    description="Returns the authenticated user's activity feed, newest first.",
)
async def list_activities(user: CurrentUser) -> ActivityListResponse:
    """List the caller's activity feed."""
    service = ActivityService()
    activities = await service.get_activities_for_user(user.user_id)
    return ActivityListResponse(items=[ActivityResponse(**activity) for activity in activities])
