from datetime import datetime

import pytest

from aura_planner.models import Achievement, DailyPlan, GameStats, TaskAction


@pytest.fixture
def plan(user_input, item_factory):
    return DailyPlan(
        user_id="user-1",
        date="2024-05-06",
        schedule=[
            item_factory("t1", "09:00", "10:00", title="Write report"),
            item_factory("break-600", "10:00", "10:15", type="break"),
        ],
        user_input=user_input,
        balance_score=0,
    )


class TestDailyPlans:

    def test_save_and_load(self, db, plan, user_input):
        db.save_daily_plan(plan)

        loaded = db.get_daily_plan("user-1", "2024-05-06")

        assert loaded.schedule == plan.schedule
        assert loaded.user_input == user_input
        assert loaded.completed_tasks == []
        assert loaded.created_at is not None

    def test_missing_plan(self, db):
        assert db.get_daily_plan("user-1", "2024-05-06") is None

    def test_one_plan_per_user_and_day(self, db, plan):
        db.save_daily_plan(plan)
        plan.schedule = plan.schedule[:1]
        db.save_daily_plan(plan)

        plans = db.get_recent_plans("user-1")

        assert len(plans) == 1
        assert len(plans[0].schedule) == 1

    def test_partial_update(self, db, plan, item_factory):
        db.save_daily_plan(plan)

        updated = db.update_daily_plan("user-1", "2024-05-06", {
            "completedTasks": ["t1"],
            "balanceScore": 35,
            "schedule": [item_factory("t1", "11:00 AM", "12:00 PM").to_dict()],
            "ignored": "value",
        })

        loaded = db.get_daily_plan("user-1", "2024-05-06")
        assert updated is True
        assert loaded.completed_tasks == ["t1"]
        assert loaded.balance_score == 35
        assert loaded.schedule[0].start_time == "11:00 AM"
        assert loaded.skipped_tasks == []

    def test_update_without_plan(self, db):
        assert db.update_daily_plan("user-1", "2024-05-06", {"balanceScore": 10}) is False

    def test_recent_plans_newest_first(self, db, plan):
        for date in ("2024-05-04", "2024-05-06", "2024-05-05"):
            plan.date = date
            plan.created_at = None
            db.save_daily_plan(plan)
        other = DailyPlan(user_id="user-2", date="2024-05-07")
        db.save_daily_plan(other)

        plans = db.get_recent_plans("user-1", limit=2)

        assert [p.date for p in plans] == ["2024-05-06", "2024-05-05"]


class TestGameStats:

    def test_save_and_load(self, db):
        stats = GameStats(
            total_points=35,
            current_streak=2,
            longest_streak=2,
            achievements=[Achievement(id="first-complete", title="First Victory",
                                      requirement_type="completion_rate", target=1,
                                      unlocked_at=datetime(2024, 5, 6, 9, 30))],
            task_actions=[TaskAction(type="complete", task_id="t1",
                                     timestamp=datetime(2024, 5, 6, 9, 30), points=15)],
        )
        db.save_game_stats("user-1", stats)

        assert db.get_game_stats("user-1") == stats

    def test_overwrite(self, db):
        db.save_game_stats("user-1", GameStats(total_points=10))
        db.save_game_stats("user-1", GameStats(total_points=20))
        assert db.get_game_stats("user-1").total_points == 20

    def test_missing(self, db):
        assert db.get_game_stats("nobody") is None
