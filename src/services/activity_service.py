"""Per-user activity feed."""

import logging
from typing import Any
from uuid import UUID

import httpx
from supabase import Client
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.core.config import get_settings
from src.core.supabase import get_supabase_client
from src.models.activity import ActivityCreate

logger = logging.getLogger(__name__)


class ActivityService:
    """Records and lists activity feed entries."""

    # Backoff between insert attempts.
    retry_wait = wait_exponential(multiplier=0.2, max=2)

    def __init__(self, client: Client | None = None) -> None:
        """Initialize activity service.

        Args:
            client: Supabase client to share with the caller; defaults to the singleton.
        """
        self.client = client or get_supabase_client()
        self.settings = get_settings()

    def _insert(self, activity: ActivityCreate) -> Any:
        return self.client.table("activities").insert(dict(activity)).execute()

    async def record_activity(self, activity: ActivityCreate) -> dict[str, Any] | None:
        """Insert an activity, retrying transient network failures.

        Args:
            activity: The activity to record.

        Returns:
            dict | None: The stored activity row.

        Raises:
            Exception: Whatever the final attempt raised.
        """
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(httpx.TransportError),
            stop=stop_after_attempt(self.settings.activity_max_attempts),
            wait=self.retry_wait,
            reraise=True,
        ):
            with attempt:
                response = self._insert(activity)
        return response.data[0] if response.data else None

    async def notify(self, activity: ActivityCreate) -> None:
        """Record an activity without ever raising.

        The feed is best-effort; a failure here must not fail the order
        mutation that triggered it.
        """
        try:
            await self.record_activity(activity)
        except Exception:
            logger.exception(
                "Failed to record %s activity for related id %s",
                activity["type"],
                activity["related_id"],
            )

    async def get_activities_for_user(self, user_id: UUID) -> list[dict[str, Any]]:
        """Get a user's activities, newest first.

        Args:
            user_id: The owner's UUID.

        Returns:
            list[dict]: List of activity rows.
        """
        response = (
            self.client.table("activities")
            .select("*")
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
            .execute()
        )

        return response.data or []
