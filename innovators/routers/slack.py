import asyncio
import json
from typing import Optional
from urllib.parse import parse_qs

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from innovators.container import BotContainer, get_container
from innovators.logging_config import get_logger
from innovators.schemas.slack import SlackCommand, SlackMessageEvent
from innovators.services.alert_service import alert_error
from innovators.services.signature_service import verify_slack_signature

logger = get_logger("slack_webhook")

router = APIRouter()


def parse_slack_payload(raw: bytes) -> Optional[dict]:
    """
    Parse a Slack request body: JSON for events, form encoding for slash commands.
    Returns dict or None.
    """
    text = raw.decode("utf-8", errors="replace")
    try:
        payload = json.loads(text)
        if isinstance(payload, dict):
            return payload
    except json.JSONDecodeError:
        pass

    form = parse_qs(text, keep_blank_values=True)
    if not form:
        return None
    return {key: values[0] for key, values in form.items()}


def _ack() -> Response:
    return Response(status_code=200)


async def run_deferred_command(container: BotContainer, command: SlackCommand) -> None:
    """Runs after the acknowledgement has been sent."""
    try:
        await container.commands.dispatch(command.command, command.text, command.user_id)
    except Exception as e:
        logger.error(
            f"Deferred command failed: {e}",
            exc_info=True,
            extra={"context": {"command": command.command, "user_id": command.user_id}},
        )
        await asyncio.to_thread(alert_error, "Deferred Slack command failed", {"command": command.command, "error": str(e)})


async def process_direct_message(container: BotContainer, event: SlackMessageEvent) -> None:
    marked = False
    if event.channel and event.ts:
        marked = await container.slack.add_reaction(event.channel, event.ts)
    try:
        await container.router.handle_message(event.user, event.text or "")
    finally:
        if marked:
            await container.slack.remove_reaction(event.channel, event.ts)


async def handle_slack_request(
    request: Request,
    background_tasks: BackgroundTasks,
    container: BotContainer = Depends(get_container),
):
    """
    Handle Slack deliveries:
    - url_verification -> echo challenge (unsigned)
    - slash commands -> dispatch, slow ones after the ack
    - direct messages from people -> dedupe, then route through the conversation flows
    """
    try:
        raw = await request.body()
        payload = parse_slack_payload(raw)
        if payload is None:
            logger.warning("Unreadable Slack payload")
            return _ack()

        if payload.get("type") == "url_verification":
            return {"challenge": payload.get("challenge")}

        settings = container.settings
        if not verify_slack_signature(
            settings.slack_signing_secret,
            request.headers.get("X-Slack-Request-Timestamp"),
            raw,
            request.headers.get("X-Slack-Signature"),
            max_age_seconds=settings.signature_max_age_seconds,
        ):
            logger.warning("Rejected Slack request with invalid signature")
            return JSONResponse(status_code=401, content={"error": "Invalid signature"})

        if payload.get("command"):
            try:
                command = SlackCommand.model_validate(payload)
            except ValidationError as e:
                logger.warning(f"Malformed slash command: {e}")
                return _ack()
            if not command.user_id:
                return _ack()

            if container.commands.is_deferred(command.command):
                background_tasks.add_task(run_deferred_command, container, command)
            else:
                await container.commands.dispatch(command.command, command.text, command.user_id)
            return _ack()

        if payload.get("type") == "event_callback" and isinstance(payload.get("event"), dict):
            try:
                event = SlackMessageEvent.model_validate(payload["event"])
            except ValidationError as e:
                logger.warning(f"Malformed message event: {e}")
                return _ack()
            if event.is_human_direct_message and await container.dedup.should_process(event.event_id):
                await process_direct_message(container, event)
            return _ack()

        logger.debug(f"Ignoring Slack payload type: {payload.get('type')}")
        return _ack()
    except Exception as e:
        logger.error(f"Slack handler error: {e}", exc_info=True)
        await asyncio.to_thread(alert_error, "Slack webhook handler failed", {"error": str(e)})
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


router.add_api_route("/slack/events", handle_slack_request, methods=["POST"])
router.add_api_route("/api/slack", handle_slack_request, methods=["POST"], include_in_schema=False)
