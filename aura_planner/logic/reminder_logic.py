"""
Reminder registry: one cancellable asyncio task per schedule item
"""
import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from ..models import ScheduleItem
from .announcements import notification_for
from .time_math import time_to_minutes

logger = logging.getLogger(__name__)


class ReminderScheduler:
    """Arms start/end reminders for a schedule (must be used inside a running loop)"""

    LEAD_MINUTES = 5

    def __init__(self, on_notify: Optional[Callable] = None, sleep=asyncio.sleep):
        # on_notify(item, title, body)
        self.on_notify = on_notify
        self._sleep = sleep
        self._tasks: Dict[str, asyncio.Task] = {}

    def schedule(self, schedule: List[ScheduleItem], now: Optional[datetime] = None) -> List[str]:
        """
        Replace all reminders with ones for the given schedule

        Returns:
            ids of the items that got at least one reminder
        """
        self.cancel_all()
        now = now or datetime.now()
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
        armed = []

        for item in schedule:
            start_at = midnight + timedelta(minutes=time_to_minutes(item.start_time))
            end_at = midnight + timedelta(minutes=time_to_minutes(item.end_time))

            delays = []
            starting_delay = (start_at - timedelta(minutes=self.LEAD_MINUTES) - now).total_seconds()
            if starting_delay > 0:
                delays.append(("starting", starting_delay))
            if item.type == "work":
                ending_delay = (end_at - now).total_seconds()
                if ending_delay > 0:
                    delays.append(("ending", ending_delay))

            if delays:
                self._tasks[item.id] = asyncio.ensure_future(self._run(item, delays))
                armed.append(item.id)

        return armed

    async def _run(self, item: ScheduleItem, delays):
        elapsed = 0.0
        for phase, delay in delays:
            await self._sleep(delay - elapsed)
            elapsed = delay
            title, body = notification_for(item, phase)
            if self.on_notify:
                try:
                    self.on_notify(item, title, body)
                except Exception as e:
                    logger.warning("Reminder callback failed for %s: %s", item.id, e)
        self._tasks.pop(item.id, None)

    def cancel(self, item_id: str) -> bool:
        """Cancel one pending reminder; False when none exists"""
        task = self._tasks.pop(item_id, None)
        if task is None:
            return False
        task.cancel()
        return True

    def cancel_all(self):
        """Cancel every pending reminder"""
        for task in self._tasks.values():
            task.cancel()
        self._tasks.clear()

    def pending_ids(self) -> List[str]:
        return [item_id for item_id, task in self._tasks.items() if not task.done()]
