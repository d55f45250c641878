from enum import Enum
from typing import Optional

from pydantic import BaseModel


class SubmissionStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"


# Older rows marked approval with yes/true in the status column.
APPROVED_STATUS_VALUES = {"approved", "yes", "true"}
PENDING_STATUS_VALUES = {"pending", ""}


class SubmissionRecord(BaseModel):
    row_number: int
    timestamp: str = ""
    user_name: str = ""
    problem: str = ""
    solution: str = ""
    time_saved: str = ""
    reusable_by: str = ""
    polished_summary: str = ""
    status: str = SubmissionStatus.PENDING.value
    user_id: Optional[str] = None
    how_to_reuse: str = ""

    @property
    def is_approved(self) -> bool:
        return self.status in APPROVED_STATUS_VALUES

    @property
    def is_pending(self) -> bool:
        return self.status in PENDING_STATUS_VALUES


class NewSubmission(BaseModel):
    user_id: str
    user_name: str = ""
    problem: str
    solution: str
    time_saved: str
    reusable_by: str
    how_to_reuse: str = ""
    polished_summary: str = ""


class HelpRequestRecord(BaseModel):
    user_id: str
    user_name: str = ""
    department: Optional[str] = None
    challenge: str
    note: str = ""


class InnovatorEntry(BaseModel):
    problem: str = ""
    solution: str = ""
    time_saved: str = ""
    timestamp: str = ""
