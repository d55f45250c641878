import asyncio
import hmac
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from innovators.container import BotContainer, get_container
from innovators.logging_config import get_logger
from innovators.schemas.slack import CronReminderResponse, WeeklyTipResponse
from innovators.services.alert_service import alert_error

logger = get_logger("cron")

router = APIRouter(prefix="/cron")


def _matches(provided: Optional[str], expected: str) -> bool:
    return bool(provided) and hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def require_cron_secret(
    request: Request,
    authorization: Optional[str] = Header(None),
    x_admin_secret: Optional[str] = Header(None),
    container: BotContainer = Depends(get_container),
) -> None:
    """Scheduler sends a bearer token; admins may trigger by hand with X-Admin-Secret on POST."""
    expected = container.settings.cron_secret
    if not expected:
        raise HTTPException(status_code=401, detail="Unauthorized")
    if _matches(authorization, f"Bearer {expected}"):
        return
    if request.method == "POST" and _matches(x_admin_secret, expected):
        return
    raise HTTPException(status_code=401, detail="Unauthorized")


@router.api_route(
    "/reminder",
    methods=["GET", "POST"],
    response_model=CronReminderResponse,
    dependencies=[Depends(require_cron_secret)],
)
async def send_pending_reminder(container: BotContainer = Depends(get_container)):
    """Remind the admin about submissions awaiting review."""
    try:
        pending = await container.sheets.get_pending_submissions()
        if pending:
            await container.slack.send_pending_reminder(len(pending))
            logger.info(f"Sent reminder for {len(pending)} pending submissions")
        else:
            logger.info("No pending submissions to remind about")
    except Exception as e:
        logger.error(f"Cron reminder error: {e}", exc_info=True)
        await asyncio.to_thread(alert_error, "Pending reminder cron failed", {"error": str(e)})
        raise HTTPException(status_code=500, detail="Failed to send reminder") from e

    return CronReminderResponse(success=True, pending_count=len(pending), reminder_sent=bool(pending))


@router.api_route(
    "/weekly-tip",
    methods=["GET", "POST"],
    response_model=WeeklyTipResponse,
    dependencies=[Depends(require_cron_secret)],
)
async def post_weekly_tip(container: BotContainer = Depends(get_container)):
    """Generate one AI tip and post it to the announcements channel."""
    result = await container.generation.weekly_tip()
    if not result.ok:
        await asyncio.to_thread(alert_error, "Weekly tip generation failed", {"error": result.error})
        raise HTTPException(status_code=500, detail="Failed to post weekly tip")

    if not await container.slack.post_to_channel(result.value):
        await asyncio.to_thread(alert_error, "Weekly tip could not be posted", {"channel": container.settings.slack_channel_id})
        raise HTTPException(status_code=500, detail="Failed to post weekly tip")

    logger.info("Weekly AI tip posted")
    return WeeklyTipResponse(success=True, tip=result.value)
