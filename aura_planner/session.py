"""
Session store facade: remote store first, local SQLite as fallback
"""
import logging
from datetime import date as date_cls
from typing import Any, Dict, List, Optional

from .database import Database
from .models import DailyPlan, GameStats

logger = logging.getLogger(__name__)


class UserSessionManager:
    """Plans and game stats keyed by (user_id, date)"""

    def __init__(self, local_db: Database, cloud_db=None, user_id: str = "local-user", today=None):
        self.local_db = local_db
        self.cloud_db = cloud_db
        self.user_id = user_id
        # today() -> "YYYY-MM-DD"
        self._today = today or (lambda: date_cls.today().isoformat())

    @property
    def today(self) -> str:
        return self._today()

    def _cloud_enabled(self) -> bool:
        return self.cloud_db is not None and self.cloud_db.is_configured

    def save_daily_plan(self, plan: DailyPlan) -> DailyPlan:
        """Write the plan locally, then to the remote store when configured"""
        plan.user_id = plan.user_id or self.user_id
        plan.date = plan.date or self.today

        # the local copy is always written so a later cloud outage still finds it
        self.local_db.save_daily_plan(plan)
        if self._cloud_enabled() and not self.cloud_db.save_daily_plan(plan):
            logger.warning("Remote plan save failed, kept local copy only")
        return plan

    def get_todays_plan(self) -> Optional[DailyPlan]:
        """Today's plan from the remote store, else the local copy"""
        if self._cloud_enabled():
            plan = self.cloud_db.get_daily_plan(self.user_id, self.today)
            if plan is not None:
                return plan
        return self.local_db.get_daily_plan(self.user_id, self.today)

    def update_progress(self, **updates: Any) -> bool:
        """
        Partial update of today's plan

        Keys are camelCase plan fields: schedule, completedTasks, skippedTasks,
        rescheduledTasks, balanceScore, wellnessActivities.
        """
        updates = self._serialize(updates)
        updated = self.local_db.update_daily_plan(self.user_id, self.today, updates)
        if self._cloud_enabled() and not self.cloud_db.update_daily_plan(self.user_id, self.today, updates):
            logger.warning("Remote progress update failed, kept local copy only")
        return updated

    def get_recent_plans(self, limit: int = 7) -> List[DailyPlan]:
        """Recent plans from the remote store, else the local ones"""
        if self._cloud_enabled():
            plans = self.cloud_db.get_recent_plans(self.user_id, limit)
            if plans is not None:
                return plans
        return self.local_db.get_recent_plans(self.user_id, limit)

    def save_game_stats(self, stats: GameStats):
        """Write game stats locally and remotely"""
        self.local_db.save_game_stats(self.user_id, stats)
        if self._cloud_enabled() and not self.cloud_db.save_game_stats(self.user_id, stats.to_dict()):
            logger.warning("Remote game stats save failed, kept local copy only")

    def load_game_stats(self) -> GameStats:
        """Game stats from the remote store, else local, else fresh"""
        if self._cloud_enabled():
            data = self.cloud_db.get_game_stats(self.user_id)
            if data is not None:
                return GameStats.from_dict(data)
        return self.local_db.get_game_stats(self.user_id) or GameStats()

    @staticmethod
    def _serialize(updates: Dict[str, Any]) -> Dict[str, Any]:
        result = {}
        for key, value in updates.items():
            if key == "schedule":
                value = [item.to_dict() if hasattr(item, "to_dict") else item for item in value]
            elif isinstance(value, (set, frozenset)):
                value = sorted(value)
            result[key] = value
        return result
