"""
Rate Limit Repository

Persistence for per-key request windows.
"""

import uuid
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from osas.modules.rate_limits.models import RateLimitRecord


async def get_by_api_key(db: AsyncSession, api_key: str) -> RateLimitRecord | None:
    result = await db.execute(select(RateLimitRecord).where(RateLimitRecord.api_key == api_key))
    return result.scalar_one_or_none()


async def insert_first_request(db: AsyncSession, api_key: str, now: datetime) -> bool:
    """
    Insert a fresh window with a count of one.

    Returns:
        False if another request created the record first
    """
    stmt = (
        insert(RateLimitRecord)
        .values(
            id=str(uuid.uuid4()),
            api_key=api_key,
            request_count=1,
            window_start=now,
        )
        .on_conflict_do_nothing(index_elements=["api_key"])
    )
    result = await db.execute(stmt)
    await db.commit()
    return bool(result.rowcount)


async def save(db: AsyncSession, record: RateLimitRecord) -> None:
    await db.commit()


async def delete_stale(db: AsyncSession, older_than: datetime) -> int:
    """
    Delete records whose window started before `older_than`.

    Returns:
        Number of deleted rows
    """
    result = await db.execute(
        delete(RateLimitRecord).where(RateLimitRecord.window_start < older_than)
    )
    await db.commit()
    return result.rowcount or 0
