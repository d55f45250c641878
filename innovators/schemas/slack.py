from typing import Optional

from pydantic import BaseModel, ConfigDict


class SlackCommand(BaseModel):
    """Slash command invocation, form-encoded by Slack."""

    model_config = ConfigDict(extra="ignore")

    command: str
    text: str = ""
    user_id: str = ""
    user_name: Optional[str] = None
    channel_id: Optional[str] = None
    response_url: Optional[str] = None
    trigger_id: Optional[str] = None


class SlackMessageEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Optional[str] = None
    channel_type: Optional[str] = None
    channel: Optional[str] = None
    user: Optional[str] = None
    text: Optional[str] = None
    ts: Optional[str] = None
    client_msg_id: Optional[str] = None
    bot_id: Optional[str] = None
    subtype: Optional[str] = None

    @property
    def event_id(self) -> Optional[str]:
        return self.client_msg_id or self.ts

    @property
    def is_human_direct_message(self) -> bool:
        return (
            self.type == "message"
            and self.channel_type == "im"
            and not self.bot_id
            and not self.subtype
            and bool(self.user)
        )


class CronReminderResponse(BaseModel):
    success: bool
    pending_count: int
    reminder_sent: bool


class WeeklyTipResponse(BaseModel):
    success: bool
    tip: str
