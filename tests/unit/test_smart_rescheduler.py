from datetime import datetime

import pytest

from aura_planner.exceptions import (
    InvalidInputError,
    NotReschedulableError,
    ScheduleConflictError,
    TaskNotFoundError,
)
from aura_planner.logic.smart_rescheduler import (
    STRATEGIES,
    SmartRescheduler,
    find_item,
    manual_reschedule_task,
)
from aura_planner.logic.time_math import time_to_minutes
from aura_planner.models import UserInput


@pytest.fixture
def day():
    return UserInput(start_time="09:00", end_time="17:00", mood="balanced", energy=7)


@pytest.fixture
def two_tasks(item_factory):
    return [
        item_factory("t1", "09:00", "10:00", title="Write report", description="60 min"),
        item_factory("t2", "10:15", "11:15", title="Review code"),
    ]


NOW = datetime(2024, 5, 6, 10, 0)


class TestRescheduleTask:

    def test_only_work_item_moves_to_now(self, item_factory, day):
        schedule = [
            item_factory("t1", "09:00", "09:30"),
            item_factory("break-570", "09:30", "09:45", type="break"),
        ]

        result = SmartRescheduler().reschedule_task("t1", schedule, day, now=NOW)

        assert not result.needs_manual_reschedule
        assert (result.start_time, result.end_time) == ("10:00 AM", "10:30 AM")
        assert result.reason == "moved to start of your available time"
        assert [i.id for i in result.new_schedule] == ["break-570", "t1"]

    def test_moves_after_last_work_item(self, two_tasks, day):
        result = SmartRescheduler().reschedule_task("t1", two_tasks, day, now=NOW)

        assert (result.start_time, result.end_time) == ("11:20 AM", "12:20 PM")
        assert [i.id for i in result.new_schedule] == ["t2", "auto-break-t2-t1", "t1"]
        quick_break = result.new_schedule[1]
        assert quick_break.type == "break"
        assert (quick_break.start_time, quick_break.end_time) == ("11:15 AM", "11:20 AM")
        moved = result.new_schedule[2]
        assert moved.description == "60 min (rescheduled)"

    def test_input_schedule_not_mutated(self, two_tasks, day):
        SmartRescheduler().reschedule_task("t1", two_tasks, day, now=NOW)
        assert two_tasks[0].start_time == "09:00"
        assert len(two_tasks) == 2

    def test_no_room_needs_manual(self, two_tasks, day):
        day.end_time = "11:30"

        result = SmartRescheduler().reschedule_task("t1", two_tasks, day, now=NOW)

        assert result.needs_manual_reschedule
        assert result.new_schedule is None
        assert result.task_title == "Write report"
        assert result.task_duration == 60
        assert result.to_dict() == {
            "needsManualReschedule": True,
            "taskDetails": {"title": "Write report", "duration": 60},
        }

    def test_break_cannot_be_rescheduled(self, item_factory, day):
        schedule = [item_factory("break-1", "10:00", "10:15", type="break")]
        with pytest.raises(NotReschedulableError):
            SmartRescheduler().reschedule_task("break-1", schedule, day, now=NOW)

    def test_unknown_task(self, two_tasks, day):
        with pytest.raises(TaskNotFoundError) as exc:
            SmartRescheduler().reschedule_task("nope", two_tasks, day, now=NOW)
        assert exc.value.task_id == "nope"


class TestOptimalSlot:

    def test_picks_a_free_gap(self, two_tasks, day):
        two_tasks[1].start_time, two_tasks[1].end_time = "10:00", "11:00"
        rescheduler = SmartRescheduler(strategy="optimal_slot")

        result = rescheduler.reschedule_task("t1", two_tasks, day, now=datetime(2024, 5, 6, 9, 0))

        assert (result.start_time, result.end_time) == ("11:05 AM", "12:05 PM")
        assert result.reason == "optimized for better work-life balance"

    def test_unknown_strategy(self):
        with pytest.raises(InvalidInputError):
            SmartRescheduler(strategy="random")

    def test_time_gaps(self, two_tasks):
        gaps = SmartRescheduler().find_time_gaps(two_tasks, 9 * 60, 12 * 60)
        # the 15 minute gap at 10:00 is too short
        assert [(g.start, g.end) for g in gaps] == [(675, 720)]

    def test_time_gaps_start_after_running_item(self, two_tasks):
        # t2 runs 10:15 - 11:15
        gaps = SmartRescheduler().find_time_gaps(two_tasks, 10 * 60 + 30, 12 * 60)
        assert [(g.start, g.end) for g in gaps] == [(675, 720)]

    def test_optimal_slot_avoids_running_item(self, two_tasks, day):
        rescheduler = SmartRescheduler(strategy="optimal_slot")

        result = rescheduler.reschedule_task("t1", two_tasks, day, now=datetime(2024, 5, 6, 10, 30))

        assert (result.start_time, result.end_time) == ("11:20 AM", "12:20 PM")

    def test_energy_curve(self, day):
        day.mood = "energized"
        levels = SmartRescheduler.energy_levels(day, 9 * 60, 10 * 60)
        assert levels == {9: 95, 10: 100}

    def test_similar_titles(self):
        assert SmartRescheduler.tasks_similar("Write report draft", "Report review")
        assert not SmartRescheduler.tasks_similar("Do it now", "Do that")


class TestAutomaticBreaks:

    def test_break_fills_short_gap(self, item_factory):
        schedule = [item_factory("w1", "09:00", "10:00"), item_factory("w2", "10:07", "11:00")]

        result = SmartRescheduler().add_automatic_breaks(schedule)

        assert [i.id for i in result] == ["w1", "auto-break-w1-w2", "w2"]
        assert (result[1].start_time, result[1].end_time) == ("10:00 AM", "10:05 AM")

    @pytest.mark.parametrize("next_start", ["10:00", "10:03", "10:10"])
    def test_no_break_without_room_or_need(self, item_factory, next_start):
        schedule = [item_factory("w1", "09:00", "10:00"), item_factory("w2", next_start, "11:00")]
        assert SmartRescheduler().add_automatic_breaks(schedule) == schedule


class TestWindowInvariants:

    @pytest.mark.parametrize("strategy", STRATEGIES)
    @pytest.mark.parametrize("hour, minute", [(9, 0), (10, 0), (10, 30), (11, 0), (16, 0)])
    def test_result_stays_inside_window_without_overlap(self, two_tasks, day, strategy, hour, minute):
        rescheduler = SmartRescheduler(strategy=strategy)

        result = rescheduler.reschedule_task("t1", two_tasks, day, now=datetime(2024, 5, 6, hour, minute))

        assert not result.needs_manual_reschedule
        cursor = time_to_minutes(day.start_time)
        for item in result.new_schedule:
            start = time_to_minutes(item.start_time)
            end = time_to_minutes(item.end_time)
            assert start >= cursor
            assert end > start
            cursor = end
        assert cursor <= time_to_minutes(day.end_time)


class TestManualReschedule:

    def test_free_slot(self, two_tasks):
        result = manual_reschedule_task("t1", two_tasks, "11:15", "12:15")

        assert [i.id for i in result] == ["t2", "t1"]
        assert result[1].start_time == "11:15"
        assert result[1].description == "60 min (rescheduled to 11:15)"

    def test_conflict_with_work_item(self, two_tasks):
        with pytest.raises(ScheduleConflictError) as exc:
            manual_reschedule_task("t1", two_tasks, "10:30", "11:30")
        assert exc.value.item.id == "t2"

    def test_breaks_do_not_conflict(self, two_tasks, item_factory):
        schedule = two_tasks + [item_factory("break-600", "10:00", "10:15", type="break")]
        result = manual_reschedule_task("t1", schedule, "10:00", "10:15")
        assert find_item(result, "t1").start_time == "10:00"

    def test_end_before_start(self, two_tasks):
        with pytest.raises(InvalidInputError):
            manual_reschedule_task("t1", two_tasks, "12:00", "11:00")

    def test_note_without_description(self, two_tasks):
        result = manual_reschedule_task("t2", two_tasks, "12:00", "13:00")
        assert find_item(result, "t2").description == "(rescheduled to 12:00)"
