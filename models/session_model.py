"""
Data model for Session entity.
"""

import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Session(BaseModel):
    """One ongoing multi-turn conversation held in process memory.

    ``handle`` is the conversation engine object owned by this session;
    dropping the session is the only way it is released.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str
    handle: Any = Field(repr=False)
    created_at: float = Field(default_factory=time.time)
    last_used: float = Field(default_factory=time.time)

    def touch(self, now: float) -> None:
        self.last_used = now

    def idle_seconds(self, now: float) -> float:
        return now - self.last_used

    def is_expired(self, ttl_seconds: float, now: float) -> bool:
        """Check if the session has been idle longer than ``ttl_seconds``."""
        return self.idle_seconds(now) > ttl_seconds
