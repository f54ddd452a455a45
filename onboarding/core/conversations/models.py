from __future__ import annotations

import time
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ConversationType(str, Enum):
    PRIVATE = "private"
    GROUP = "group"


class ConversationAttributes(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    type: ConversationType = ConversationType.PRIVATE
    display_name_in_profile: Optional[str] = None
    is_approved: bool = False
    did_approve_me: bool = False
    hidden: bool = False
    active_at: float = 0.0
    created_at: float = Field(default_factory=lambda: time.time())
