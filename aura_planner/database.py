"""
Local session store (SQLite)
"""
import json
import sqlite3
from datetime import datetime
from typing import Any, Dict, List, Optional

from .models import DailyPlan, GameStats


# plan fields stored as JSON text
_JSON_FIELDS = {
    "schedule": "schedule",
    "userInput": "user_input",
    "completedTasks": "completed_tasks",
    "skippedTasks": "skipped_tasks",
    "rescheduledTasks": "rescheduled_tasks",
}
_PLAIN_FIELDS = {
    "balanceScore": "balance_score",
    "wellnessActivities": "wellness_activities",
}


class Database:
    """SQLite persistence for daily plans and game stats"""

    def __init__(self, db_path: str = "aura_planner.db"):
        self.db_path = db_path
        self.init_database()

    def get_connection(self):
        """Open a connection with Row access by column name"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_database(self):
        """Create the tables if they do not exist"""
        conn = self.get_connection()
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS daily_plans (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                date TEXT NOT NULL,
                schedule TEXT NOT NULL DEFAULT '[]',
                user_input TEXT,
                balance_score INTEGER DEFAULT 0,
                completed_tasks TEXT NOT NULL DEFAULT '[]',
                skipped_tasks TEXT NOT NULL DEFAULT '[]',
                rescheduled_tasks TEXT NOT NULL DEFAULT '[]',
                wellness_activities INTEGER DEFAULT 0,
                created_at TIMESTAMP,
                updated_at TIMESTAMP,
                UNIQUE (user_id, date)
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS game_stats (
                user_id TEXT PRIMARY KEY,
                stats TEXT NOT NULL,
                updated_at TIMESTAMP
            )
        """)

        conn.commit()
        conn.close()

    # ===== Daily plans =====

    def save_daily_plan(self, plan: DailyPlan) -> DailyPlan:
        """Insert or replace the plan for (user_id, date)"""
        now = datetime.now().isoformat()
        plan.created_at = plan.created_at or now
        plan.updated_at = now
        data = plan.to_dict()

        conn = self.get_connection()
        cursor = conn.cursor()
        cursor.execute("""
            INSERT INTO daily_plans (user_id, date, schedule, user_input, balance_score,
                                     completed_tasks, skipped_tasks, rescheduled_tasks,
                                     wellness_activities, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT (user_id, date) DO UPDATE SET
                schedule = excluded.schedule,
                user_input = excluded.user_input,
                balance_score = excluded.balance_score,
                completed_tasks = excluded.completed_tasks,
                skipped_tasks = excluded.skipped_tasks,
                rescheduled_tasks = excluded.rescheduled_tasks,
                wellness_activities = excluded.wellness_activities,
                updated_at = excluded.updated_at
        """, (
            plan.user_id, plan.date,
            json.dumps(data["schedule"]),
            json.dumps(data["userInput"]) if data["userInput"] else None,
            plan.balance_score,
            json.dumps(data["completedTasks"]),
            json.dumps(data["skippedTasks"]),
            json.dumps(data["rescheduledTasks"]),
            plan.wellness_activities,
            plan.created_at, plan.updated_at,
        ))
        conn.commit()
        conn.close()
        return plan

    def get_daily_plan(self, user_id: str, date: str) -> Optional[DailyPlan]:
        """Plan for (user_id, date), or None"""
        conn = self.get_connection()
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM daily_plans WHERE user_id = ? AND date = ?", (user_id, date))
        row = cursor.fetchone()
        conn.close()
        return self._row_to_plan(row) if row else None

    def update_daily_plan(self, user_id: str, date: str, updates: Dict[str, Any]) -> bool:
        """
        Partial update with camelCase plan keys

        Returns:
            False when no plan exists for (user_id, date)
        """
        columns = []
        values = []
        for key, value in updates.items():
            if key in _JSON_FIELDS:
                columns.append(f"{_JSON_FIELDS[key]} = ?")
                values.append(json.dumps(value))
            elif key in _PLAIN_FIELDS:
                columns.append(f"{_PLAIN_FIELDS[key]} = ?")
                values.append(value)

        columns.append("updated_at = ?")
        values.append(datetime.now().isoformat())

        conn = self.get_connection()
        cursor = conn.cursor()
        cursor.execute(
            f"UPDATE daily_plans SET {', '.join(columns)} WHERE user_id = ? AND date = ?",
            (*values, user_id, date),
        )
        updated = cursor.rowcount > 0
        conn.commit()
        conn.close()
        return updated

    def get_recent_plans(self, user_id: str, limit: int = 7) -> List[DailyPlan]:
        """Latest plans first"""
        conn = self.get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "SELECT * FROM daily_plans WHERE user_id = ? ORDER BY date DESC LIMIT ?",
            (user_id, limit),
        )
        rows = cursor.fetchall()
        conn.close()
        return [self._row_to_plan(row) for row in rows]

    def _row_to_plan(self, row) -> DailyPlan:
        return DailyPlan.from_dict({
            "userId": row["user_id"],
            "date": row["date"],
            "schedule": json.loads(row["schedule"]),
            "userInput": json.loads(row["user_input"]) if row["user_input"] else None,
            "balanceScore": row["balance_score"],
            "completedTasks": json.loads(row["completed_tasks"]),
            "skippedTasks": json.loads(row["skipped_tasks"]),
            "rescheduledTasks": json.loads(row["rescheduled_tasks"]),
            "wellnessActivities": row["wellness_activities"],
            "createdAt": row["created_at"],
            "updatedAt": row["updated_at"],
        })

    # ===== Game stats =====

    def save_game_stats(self, user_id: str, stats: GameStats):
        """Insert or replace the user's game stats"""
        conn = self.get_connection()
        cursor = conn.cursor()
        cursor.execute("""
            INSERT INTO game_stats (user_id, stats, updated_at) VALUES (?, ?, ?)
            ON CONFLICT (user_id) DO UPDATE SET stats = excluded.stats, updated_at = excluded.updated_at
        """, (user_id, json.dumps(stats.to_dict()), datetime.now().isoformat()))
        conn.commit()
        conn.close()

    def get_game_stats(self, user_id: str) -> Optional[GameStats]:
        """Stored game stats, or None"""
        conn = self.get_connection()
        cursor = conn.cursor()
        cursor.execute("SELECT stats FROM game_stats WHERE user_id = ?", (user_id,))
        row = cursor.fetchone()
        conn.close()
        return GameStats.from_dict(json.loads(row["stats"])) if row else None
