"""
Rate Limit Models

One row per API key holding the request count of its current fixed window.
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from osas.core.security import API_KEY_MAX_LENGTH
from osas.modules.shared import BaseModel


class RateLimitRecord(BaseModel):
    """
    Request counter for one API key.

    `request_count` is only meaningful relative to `window_start`; a record
    whose window has elapsed is reset rather than incremented.
    """

    __tablename__ = "rate_limits"

    api_key: Mapped[str] = mapped_column(String(API_KEY_MAX_LENGTH), unique=True, nullable=False)
    request_count: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    window_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("ix_rate_limits_window_start", "window_start"),)

    def __repr__(self) -> str:
        return f"<RateLimitRecord(count={self.request_count}, window_start={self.window_start})>"
