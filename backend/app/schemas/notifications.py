from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field

NotificationType = Literal[
    "assessment_completed",
    "analysis_ready",
    "reminder",
    "goal_achieved",
    "partner_invitation",
]


class NotificationOut(BaseModel):
    id: str
    user_id: str
    type: NotificationType
    title: str
    message: str
    read: bool = False
    created_at: datetime
    data: dict[str, str] = Field(default_factory=dict)


class PartnerInviteRequest(BaseModel):
    email: EmailStr


class PartnerAcceptRequest(BaseModel):
    notification_id: str
