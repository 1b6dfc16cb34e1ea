import pytest

from aura_planner.logic.announcements import (
    notification_for,
    progress_message,
    schedule_summary,
    task_reminder,
    wellness_reminder,
)


class TestScheduleSummary:

    def test_clear_schedule(self):
        assert schedule_summary([], "Sam") == "Hi Sam! Your schedule is clear for now. Enjoy your free time!"

    def test_single_task(self, item_factory):
        schedule = [item_factory("t1", "9:00 AM", "10:00 AM", title="Write report")]

        text = schedule_summary(schedule)

        assert text.startswith("Hi there!")
        assert "You have one task: Write report, scheduled from 9:00 AM to 10:00 AM." in text
        assert "wellness breaks" not in text

    def test_many_tasks(self, item_factory):
        schedule = [
            item_factory(f"t{i}", f"{9 + i}:00", f"{9 + i}:45", title=f"Task {i}") for i in range(5)
        ] + [item_factory("well", "14:00", "14:30", type="wellness")]

        text = schedule_summary(schedule)

        assert "You have 5 tasks planned." in text
        assert "Starting with Task 0 at 9:00." in text
        assert "Then Task 2 at 11:00." in text
        assert "And 2 more tasks throughout the day." in text
        assert "wellness breaks" in text

    def test_three_tasks_end_with_finally(self, item_factory):
        schedule = [item_factory(f"t{i}", f"{9 + i}:00", f"{9 + i}:45", title=f"Task {i}") for i in range(3)]
        assert "And finally, Task 2 at 11:00." in schedule_summary(schedule)


class TestReminders:

    @pytest.mark.parametrize("minutes, fragment", [
        (0, "Time to start Focus!"),
        (4.6, "Focus starts in 5 minutes"),
        (12, "Heads up!"),
        (30, "coming up in 30 minutes"),
    ])
    def test_task_reminder(self, minutes, fragment):
        assert fragment in task_reminder("Focus", minutes)

    @pytest.mark.parametrize("completed, total, fragment", [
        (0, 4, "Ready to start"),
        (0, 0, "Ready to start"),
        (1, 5, "Great start"),
        (2, 5, "solid progress"),
        (3, 5, "more than halfway"),
        (4, 5, "almost done"),
        (5, 5, "Incredible"),
    ])
    def test_progress_message(self, completed, total, fragment):
        assert fragment in progress_message(completed, total)

    def test_wellness_reminder(self):
        assert wellness_reminder("hydration").startswith("Hydration check!")
        assert wellness_reminder("dance").startswith("Time for a wellness break")


class TestNotifications:

    def test_wellness_starting(self, item_factory):
        title, body = notification_for(item_factory("b", "10:00", "10:15", type="break", title="Short Break"), "starting")
        assert title == "Time for wellness 🌿"
        assert "short break" in body

    def test_work_starting(self, item_factory):
        title, body = notification_for(item_factory("t1", "10:00", "11:00", title="Write report"), "starting")
        assert title == "Time to start: Write report"
        assert body == "Your work session begins in 5 minutes. Get ready!"

    def test_ending(self, item_factory):
        title, _ = notification_for(item_factory("t1", "10:00", "11:00", title="Write report"), "ending")
        assert title == "Time to wrap up: Write report"
