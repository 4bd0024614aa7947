"""
Shop Status Store

Holds the administrative open/closed override in the SQL store (one row,
id = 1) so it survives restarts and is shared by every worker process.
Reads and writes are single statements; concurrent writers race and the
last write wins.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_backend.database import store_operation
from restaurant_backend.models import ShopStatus
from restaurant_backend.services.opening_hours import (
    ShopOverride,
    WeeklySchedule,
    is_open,
    next_opening,
)

logger = logging.getLogger(__name__)

STATUS_ROW_ID = 1

Clock = Callable[[], datetime]


@dataclass
class StatusSnapshot:
    override: Optional[ShopOverride]
    open: bool
    next_open: Optional[datetime] = None


class ShopStatusStore:
    """
    Read/update access to the override plus the derived open state.

    Args:
        db: Session of the current request
        schedule: Weekly opening intervals
        clock: Returns the current time in the shop's timezone
    """

    def __init__(self, db: AsyncSession, schedule: WeeklySchedule, clock: Clock):
        self.db = db
        self.schedule = schedule
        self.clock = clock

    async def get_override(self) -> Optional[ShopOverride]:
        async with store_operation(self.db, "load shop status"):
            result = await self.db.execute(
                select(ShopStatus.override).where(ShopStatus.id == STATUS_ROW_ID)
            )
            return result.scalar_one_or_none()

    async def set_override(self, override: Optional[ShopOverride]) -> Optional[ShopOverride]:
        """Store a new override; None returns the shop to its schedule."""
        async with store_operation(self.db, "save shop status"):
            row = await self.db.get(ShopStatus, STATUS_ROW_ID)
            if row is None:
                row = ShopStatus(id=STATUS_ROW_ID)
                self.db.add(row)
            row.override = override
            await self.db.commit()

        logger.info(
            f"Shop override set to {override.value if override else 'schedule'}"
        )
        return override

    async def is_open(self) -> bool:
        return is_open(self.clock(), await self.get_override(), self.schedule)

    async def snapshot(self) -> StatusSnapshot:
        """
        Current override and open state.

        ``next_open`` is only filled in when the schedule (not an override)
        keeps the shop closed.
        """
        now = self.clock()
        override = await self.get_override()
        currently_open = is_open(now, override, self.schedule)

        upcoming = None
        if not currently_open and override is None:
            upcoming = next_opening(now, self.schedule)

        return StatusSnapshot(override=override, open=currently_open, next_open=upcoming)
