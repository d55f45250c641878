from typing import Optional

import httpx

from innovators.logging_config import get_logger

logger = get_logger("slack_service")

PROCESSING_REACTION = "eyes"


class SlackService:
    """Service for sending messages through the Slack Web API.

    Failures are logged and reported through the return value, never raised.
    """

    BASE_URL = "https://slack.com/api"

    def __init__(self, bot_token: str, channel_id: str = "", admin_user_id: str = "", timeout: float = 10.0):
        self.bot_token = bot_token
        self.channel_id = channel_id
        self.admin_user_id = admin_user_id
        self.timeout = timeout

    async def _make_request(self, method: str, data: dict) -> dict:
        """Make request to Slack API."""
        if not self.bot_token:
            logger.warning(f"SLACK_BOT_TOKEN not configured, skipping {method}")
            return {"ok": False, "error": "not_configured"}

        url = f"{self.BASE_URL}/{method}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    url,
                    headers={"Authorization": f"Bearer {self.bot_token}"},
                    data=data,
                )
                result = response.json()
        except Exception as e:
            logger.error(f"Slack API error: {e}", extra={"context": {"method": method}})
            return {"ok": False, "error": str(e)}

        if not result.get("ok"):
            logger.warning(
                f"Slack API call failed: {result.get('error')}",
                extra={"context": {"method": method}},
            )
        return result

    async def send_direct_message(self, user_id: str, text: str) -> bool:
        """Post to a user id; Slack opens the IM channel for us."""
        result = await self._make_request("chat.postMessage", {"channel": user_id, "text": text})
        return bool(result.get("ok"))

    async def post_to_channel(self, text: str, channel_id: Optional[str] = None) -> bool:
        channel = channel_id or self.channel_id
        if not channel:
            logger.warning("SLACK_CHANNEL_ID not configured, skipping channel post")
            return False
        result = await self._make_request("chat.postMessage", {"channel": channel, "text": text})
        return bool(result.get("ok"))

    async def get_user_display_name(self, user_id: str) -> Optional[str]:
        result = await self._make_request("users.info", {"user": user_id})
        if not result.get("ok"):
            return None
        user = result.get("user") or {}
        return user.get("real_name") or user.get("name") or None

    async def add_reaction(self, channel: str, timestamp: str, name: str = PROCESSING_REACTION) -> bool:
        result = await self._make_request("reactions.add", {"channel": channel, "timestamp": timestamp, "name": name})
        return bool(result.get("ok"))

    async def remove_reaction(self, channel: str, timestamp: str, name: str = PROCESSING_REACTION) -> bool:
        result = await self._make_request(
            "reactions.remove", {"channel": channel, "timestamp": timestamp, "name": name}
        )
        return bool(result.get("ok"))

    async def notify_admin(self, submitter_id: str, polished_summary: str) -> bool:
        if not self.admin_user_id:
            logger.info("ADMIN_USER_ID not configured, skipping notification")
            return False

        message = (
            "🎉 *New Innovators Circle Submission!*\n\n"
            f"Submitted by: <@{submitter_id}>\n\n"
            f"{polished_summary}\n\n"
            "_Use `/pending` to review and approve/decline._"
        )
        return await self.send_direct_message(self.admin_user_id, message)

    async def send_pending_reminder(self, pending_count: int) -> bool:
        if not self.admin_user_id or pending_count <= 0:
            return False

        plural = "s" if pending_count > 1 else ""
        message = (
            f"📬 *Reminder: {pending_count} submission{plural} awaiting review*\n\n"
            "Use `/pending` to see them and `/approve` or `/decline` to process."
        )
        return await self.send_direct_message(self.admin_user_id, message)
