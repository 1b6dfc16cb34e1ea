"""
Remote plan storage through the Supabase REST API (httpx)
"""
import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import Settings, get_settings
from ..models import DailyPlan

logger = logging.getLogger(__name__)


class SupabasePlanDB:
    """daily_plans / game_stats tables on Supabase"""

    TIMEOUT = 10.0

    def __init__(self, settings: Optional[Settings] = None, transport: Optional[httpx.BaseTransport] = None):
        self.settings = settings or get_settings()
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return self.settings.supabase_configured

    def _get_headers(self, prefer: str = "return=representation") -> dict:
        key = self.settings.supabase_key
        return {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
            "Prefer": prefer,
        }

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=f"{self.settings.supabase_url}/rest/v1",
            transport=self._transport,
            timeout=self.TIMEOUT,
        )

    # === Daily plans ===

    def get_daily_plan(self, user_id: str, date: str) -> Optional[DailyPlan]:
        """Fetch one plan; None when missing or on error"""
        if not self.is_configured:
            return None

        try:
            with self._client() as client:
                response = client.get(
                    "/daily_plans",
                    params={"user_id": f"eq.{user_id}", "date": f"eq.{date}", "select": "*"},
                    headers=self._get_headers(),
                )
            if response.status_code == 200:
                rows = response.json()
                return self._row_to_plan(rows[0]) if rows else None
            logger.warning("Plan fetch failed (%s)", response.status_code)
        except Exception as e:
            logger.warning("Plan fetch error: %s", e)
        return None

    def save_daily_plan(self, plan: DailyPlan) -> bool:
        """Upsert a plan on (user_id, date)"""
        if not self.is_configured:
            return False

        try:
            with self._client() as client:
                response = client.post(
                    "/daily_plans",
                    params={"on_conflict": "user_id,date"},
                    headers=self._get_headers("resolution=merge-duplicates"),
                    json=self._plan_to_row(plan),
                )
            return response.status_code in [200, 201]
        except Exception as e:
            logger.warning("Plan save error: %s", e)
        return False

    def update_daily_plan(self, user_id: str, date: str, updates: Dict[str, Any]) -> bool:
        """Patch selected plan fields"""
        if not self.is_configured:
            return False

        row = {self._column(key): value for key, value in updates.items()}
        try:
            with self._client() as client:
                response = client.patch(
                    "/daily_plans",
                    params={"user_id": f"eq.{user_id}", "date": f"eq.{date}"},
                    headers=self._get_headers(),
                    json=row,
                )
            return response.status_code in [200, 204]
        except Exception as e:
            logger.warning("Plan update error: %s", e)
        return False

    def get_recent_plans(self, user_id: str, limit: int = 7) -> Optional[List[DailyPlan]]:
        """None when the remote store could not be read"""
        if not self.is_configured:
            return None

        try:
            with self._client() as client:
                response = client.get(
                    "/daily_plans",
                    params={
                        "user_id": f"eq.{user_id}",
                        "select": "*",
                        "order": "date.desc",
                        "limit": str(limit),
                    },
                    headers=self._get_headers(),
                )
            if response.status_code == 200:
                return [self._row_to_plan(row) for row in response.json()]
            logger.warning("Recent plans fetch failed (%s)", response.status_code)
        except Exception as e:
            logger.warning("Recent plans fetch error: %s", e)
        return None

    # === Game stats ===

    def get_game_stats(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Fetch the stats row as a camelCase dict"""
        if not self.is_configured:
            return None

        try:
            with self._client() as client:
                response = client.get(
                    "/game_stats",
                    params={"user_id": f"eq.{user_id}", "select": "stats"},
                    headers=self._get_headers(),
                )
            if response.status_code == 200:
                rows = response.json()
                if rows:
                    stats = rows[0]["stats"]
                    return json.loads(stats) if isinstance(stats, str) else stats
        except Exception as e:
            logger.warning("Game stats fetch error: %s", e)
        return None

    def save_game_stats(self, user_id: str, stats: Dict[str, Any]) -> bool:
        """Upsert the stats row"""
        if not self.is_configured:
            return False

        try:
            with self._client() as client:
                response = client.post(
                    "/game_stats",
                    params={"on_conflict": "user_id"},
                    headers=self._get_headers("resolution=merge-duplicates"),
                    json={"user_id": user_id, "stats": stats},
                )
            return response.status_code in [200, 201]
        except Exception as e:
            logger.warning("Game stats save error: %s", e)
        return False

    # camelCase plan fields -> snake_case columns
    @staticmethod
    def _column(key: str) -> str:
        return "".join(f"_{c.lower()}" if c.isupper() else c for c in key)

    def _plan_to_row(self, plan: DailyPlan) -> Dict[str, Any]:
        return {self._column(key): value for key, value in plan.to_dict().items()}

    @staticmethod
    def _row_to_plan(row: Dict[str, Any]) -> DailyPlan:
        data = {}
        for key, value in row.items():
            head, *rest = key.split("_")
            data[head + "".join(part.title() for part in rest)] = value
        return DailyPlan.from_dict(data)


_db_instance: Optional[SupabasePlanDB] = None


def get_cloud_db() -> SupabasePlanDB:
    """Shared remote plan store"""
    global _db_instance
    if _db_instance is None:
        _db_instance = SupabasePlanDB()
    return _db_instance
