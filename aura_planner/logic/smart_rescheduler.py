"""
Single-task rescheduling

Default strategy moves the task after the last other work item. The
"optimal_slot" strategy first scores every free gap with an energy curve,
task clustering and an afternoon bonus, then falls back to the end of the
day. When neither fits, the caller gets needs_manual_reschedule and asks the
user for a time, which is then applied with manual_reschedule_task().
"""
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Dict, List, Optional

from ..exceptions import (
    InvalidInputError,
    NotReschedulableError,
    ScheduleConflictError,
    TaskNotFoundError,
)
from ..models import RescheduleResult, ScheduleItem, UserInput
from .time_math import clock_minutes, duration, minutes_to_12h, overlaps, time_to_minutes


STRATEGIES = ("end_of_day", "optimal_slot")

# typical focus by hour of day
BASE_ENERGY_CURVE = {
    9: 80, 10: 85, 11: 90,
    12: 70, 13: 60,
    14: 65, 15: 75, 16: 80,
    17: 70, 18: 60, 19: 50,
}


@dataclass
class Gap:
    start: int
    end: int

    @property
    def duration(self) -> int:
        return self.end - self.start


@dataclass
class Slot:
    start: int
    end: int
    reason: str


def find_item(schedule: List[ScheduleItem], task_id: str) -> ScheduleItem:
    """Look an item up by task id, then by item id"""
    for item in schedule:
        if item.task_id == task_id or item.id == task_id:
            return item
    raise TaskNotFoundError(task_id)


def sort_schedule(schedule: List[ScheduleItem]) -> List[ScheduleItem]:
    return sorted(schedule, key=lambda item: time_to_minutes(item.start_time))


class SmartRescheduler:
    """Finds a new slot for one work item"""

    BUFFER = 5  # minutes between the moved task and the one before it
    MIN_GAP = 20
    QUICK_BREAK = 5
    QUICK_BREAK_THRESHOLD = 10

    def __init__(self, strategy: str = "end_of_day"):
        if strategy not in STRATEGIES:
            raise InvalidInputError(f"Unknown reschedule strategy '{strategy}'")
        self.strategy = strategy

    def reschedule_task(
        self,
        task_id: str,
        current_schedule: List[ScheduleItem],
        user_input: UserInput,
        now: Optional[datetime] = None,
    ) -> RescheduleResult:
        """
        Move one work item to a new slot

        Args:
            task_id: task id or item id of the work item
            current_schedule: schedule to edit (not mutated)
            user_input: planning request, for the time window and energy
            now: defaults to the current time

        Returns:
            RescheduleResult; needs_manual_reschedule is set when no slot fits
        """
        item = find_item(current_schedule, task_id)
        if item.type != "work":
            raise NotReschedulableError(item)

        now_minutes = clock_minutes(now)
        task_duration = duration(item.start_time, item.end_time)

        slot = None
        if self.strategy == "optimal_slot":
            slot = self.find_optimal_slot(current_schedule, item, task_duration, user_input, now_minutes)
        if slot is None:
            slot = self.move_task_to_end(current_schedule, item, task_duration, user_input, now_minutes)

        if slot is None:
            return RescheduleResult(
                needs_manual_reschedule=True,
                task_title=item.title,
                task_duration=task_duration,
            )

        moved = replace(
            item,
            start_time=minutes_to_12h(slot.start),
            end_time=minutes_to_12h(slot.end),
            description=f"{item.description} (rescheduled)".lstrip(),
        )
        new_schedule = [i for i in current_schedule if i.id != item.id] + [moved]
        new_schedule = self.add_automatic_breaks(sort_schedule(new_schedule))

        return RescheduleResult(
            new_schedule=new_schedule,
            start_time=moved.start_time,
            end_time=moved.end_time,
            reason=slot.reason,
        )

    def move_task_to_end(
        self,
        schedule: List[ScheduleItem],
        item: ScheduleItem,
        task_duration: int,
        user_input: UserInput,
        now_minutes: int,
    ) -> Optional[Slot]:
        others = [i for i in schedule if i.type == "work" and i.id != item.id]

        if others:
            latest_end = max(time_to_minutes(i.end_time) for i in others)
            start = latest_end + self.BUFFER
            reason = "moved to the end of your schedule"
        else:
            start = max(now_minutes, time_to_minutes(user_input.start_time))
            reason = "moved to start of your available time"

        end = start + task_duration
        if end > time_to_minutes(user_input.end_time):
            return None
        return Slot(start, end, reason)

    def find_optimal_slot(
        self,
        schedule: List[ScheduleItem],
        item: ScheduleItem,
        task_duration: int,
        user_input: UserInput,
        now_minutes: int,
    ) -> Optional[Slot]:
        """Score free gaps by energy, clustering with similar tasks and time of day"""
        end_minutes = time_to_minutes(user_input.end_time)
        start_minutes = max(now_minutes, time_to_minutes(user_input.start_time))
        others = [i for i in schedule if i.id != item.id]

        gaps = self.find_time_gaps(others, start_minutes, end_minutes)
        energy = self.energy_levels(user_input, start_minutes, end_minutes)
        clusters = [
            time_to_minutes(i.start_time) for i in others
            if i.type == "work" and self.tasks_similar(i.title, item.title)
        ]

        best = None
        best_score = None
        for gap in gaps:
            if gap.duration < task_duration + self.BUFFER:
                continue

            midpoint = gap.start + gap.duration // 2
            energy_score = energy.get(midpoint // 60, 50)
            cluster_bonus = 20 if any(abs(c - gap.start) < 60 for c in clusters) else 0
            time_penalty = -30 if end_minutes - gap.start < 60 else 0
            afternoon_bonus = 15 if user_input.energy <= 4 and gap.start >= 14 * 60 else 0

            score = energy_score + cluster_bonus + time_penalty + afternoon_bonus
            if best_score is None or score > best_score:
                best_score = score
                reason = self._slot_reason(energy_score, cluster_bonus, afternoon_bonus, user_input)
                start = gap.start + self.BUFFER
                best = Slot(start, start + task_duration, reason)

        return best

    def find_time_gaps(self, schedule: List[ScheduleItem], start: int, end: int) -> List[Gap]:
        """Free intervals of at least MIN_GAP minutes between start and end"""
        items = sort_schedule([i for i in schedule if time_to_minutes(i.start_time) >= start])
        gaps = []
        # an item still running at start blocks time until it ends
        cursor = max([start] + [
            time_to_minutes(i.end_time) for i in schedule
            if time_to_minutes(i.start_time) < start < time_to_minutes(i.end_time)
        ])

        for i in items:
            item_start = time_to_minutes(i.start_time)
            item_end = time_to_minutes(i.end_time)
            if item_start > cursor:
                gaps.append(Gap(cursor, item_start))
            cursor = max(cursor, item_end)

        if cursor < end:
            gaps.append(Gap(cursor, end))

        return [g for g in gaps if g.duration >= self.MIN_GAP]

    @staticmethod
    def energy_levels(user_input: UserInput, start: int, end: int) -> Dict[int, float]:
        """Hour -> 0..100 expected focus, scaled by stated energy and mood"""
        levels = {}
        for hour in range(start // 60, end // 60 + 1):
            energy = BASE_ENERGY_CURVE.get(hour, 50) * (user_input.energy / 7)
            if user_input.mood == "energized":
                energy += 15
            elif user_input.mood == "tired":
                energy -= 20
            elif user_input.mood == "stressed":
                energy -= 10
            levels[hour] = max(0, min(100, energy))
        return levels

    @staticmethod
    def tasks_similar(title1: str, title2: str) -> bool:
        """Share a keyword longer than three letters"""
        words1 = title1.lower().split(" ")
        words2 = set(title2.lower().split(" "))
        return any(len(word) > 3 and word in words2 for word in words1)

    @staticmethod
    def _slot_reason(energy_score, cluster_bonus, afternoon_bonus, user_input) -> str:
        if energy_score >= 80:
            return "moved to your peak focus time for optimal performance"
        if cluster_bonus > 0:
            return "grouped with similar tasks for better workflow"
        if afternoon_bonus > 0:
            return "scheduled for afternoon when you have more energy"
        if user_input.mood == "stressed":
            return "moved to a calmer time slot to reduce pressure"
        return "optimized for better work-life balance"

    def add_automatic_breaks(self, schedule: List[ScheduleItem]) -> List[ScheduleItem]:
        """Insert a 5-minute Quick Break between work items 5 to 9 minutes apart"""
        result = []
        for index, current in enumerate(schedule):
            result.append(current)
            if index + 1 >= len(schedule):
                continue
            following = schedule[index + 1]
            if current.type == "work" and following.type == "work":
                current_end = time_to_minutes(current.end_time)
                # a tighter gap has no room for the break
                if self.QUICK_BREAK <= time_to_minutes(following.start_time) - current_end < self.QUICK_BREAK_THRESHOLD:
                    result.append(ScheduleItem(
                        id=f"auto-break-{current.id}-{following.id}",
                        task_id="",
                        start_time=minutes_to_12h(current_end),
                        end_time=minutes_to_12h(current_end + self.QUICK_BREAK),
                        type="break",
                        title="Quick Break",
                        description="Automatic break between tasks",
                    ))
        return result


def manual_reschedule_task(
    task_id: str,
    current_schedule: List[ScheduleItem],
    new_start_time: str,
    new_end_time: str,
) -> List[ScheduleItem]:
    """
    Apply a user-chosen slot. Rejects slots that overlap another work item.
    """
    item = find_item(current_schedule, task_id)

    new_start = time_to_minutes(new_start_time)
    new_end = time_to_minutes(new_end_time)
    if new_start >= new_end:
        raise InvalidInputError(f"Start time {new_start_time} must be before end time {new_end_time}")

    for other in current_schedule:
        if other.id == item.id or other.type != "work":
            continue
        if overlaps(new_start, new_end, time_to_minutes(other.start_time), time_to_minutes(other.end_time)):
            raise ScheduleConflictError(other)

    moved = replace(
        item,
        start_time=new_start_time,
        end_time=new_end_time,
        description=f"{item.description} (rescheduled to {new_start_time})".lstrip(),
    )
    return sort_schedule([i for i in current_schedule if i.id != item.id] + [moved])
