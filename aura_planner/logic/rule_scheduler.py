"""
Rule-based schedule generation (deterministic fallback for the AI generator)
"""
import random
from typing import List, Optional

from ..models import RuleSchedule, ScheduleItem, Task, UserInput
from .time_math import minutes_to_24h, round_half_up, time_to_minutes


PRIORITY_WEIGHT = {"high": 3, "medium": 2, "low": 1}

BREAK_ACTIVITIES = [
    "Grab a coffee",
    "Quick walk",
    "Hydrate",
    "Rest your eyes",
    "Deep breathing",
]

WELLNESS_ACTIVITIES = {
    "stressed": ["Meditation", "Breathing exercise", "Calming music"],
    "tired": ["Power nap", "Coffee break", "Fresh air"],
    "balanced": ["Walk", "Healthy snack", "Light reading"],
    "energized": ["Quick exercise", "Energizing activity", "Stretch"],
}


class RuleBasedScheduler:
    """Packs prioritized tasks into the time window with breaks"""

    BREAK_DURATION = 15  # minutes
    WELLNESS_BREAK_DURATION = 30
    MAX_FOCUS_TIME = 90
    MIN_BLOCK = 15

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def generate_schedule(self, user_input: UserInput) -> RuleSchedule:
        """
        Build a work/break/wellness schedule anchored at user_input.start_time

        Args:
            user_input: validated planning request

        Returns:
            RuleSchedule with the items and the ids of tasks that did not fit
        """
        user_input.validate()

        sorted_tasks = self.prioritize_tasks(user_input.tasks, user_input.mood, user_input.energy)

        current = time_to_minutes(user_input.start_time)
        remaining = user_input.available_minutes
        consecutive_work = 0

        items: List[ScheduleItem] = []
        dropped: List[str] = []

        for index, task in enumerate(sorted_tasks):
            if remaining <= 0:
                dropped.extend(t.id for t in sorted_tasks[index:])
                break

            if consecutive_work >= self.MAX_FOCUS_TIME:
                # no room for a wellness break and a minimum block after it
                if remaining <= self.WELLNESS_BREAK_DURATION:
                    dropped.extend(t.id for t in sorted_tasks[index:])
                    break
                items.append(self._wellness_break(current, user_input.mood))
                current += self.WELLNESS_BREAK_DURATION
                remaining -= self.WELLNESS_BREAK_DURATION
                consecutive_work = 0

            adjusted = self.adjust_task_duration(task.estimated_time, user_input.energy, user_input.mood)
            adjusted = min(adjusted, remaining)

            if adjusted < self.MIN_BLOCK:
                dropped.append(task.id)
                continue

            items.append(self._work_block(task, current, adjusted))
            current += adjusted
            remaining -= adjusted
            consecutive_work += adjusted

            if remaining > self.BREAK_DURATION and consecutive_work < self.MAX_FOCUS_TIME:
                items.append(self._short_break(current))
                current += self.BREAK_DURATION
                remaining -= self.BREAK_DURATION

        return RuleSchedule(items=items, dropped_task_ids=dropped)

    def prioritize_tasks(self, tasks: List[Task], mood: str, energy: int) -> List[Task]:
        """Highest score first; ties keep input order"""
        return sorted(
            tasks,
            key=lambda t: self._calculate_priority_score(t, mood, energy),
            reverse=True,
        )

    def _calculate_priority_score(self, task: Task, mood: str, energy: int) -> float:
        weight = PRIORITY_WEIGHT[task.priority]
        score = float(weight)

        # low energy: shorter tasks first
        if energy <= 4:
            score += (120 - task.estimated_time) * 0.01

        if mood == "stressed":
            score += weight * 0.5

        return score

    @staticmethod
    def adjust_task_duration(base_duration: int, energy: int, mood: str) -> int:
        multiplier = 1.0

        if energy <= 3:
            multiplier *= 1.3
        elif energy >= 8:
            multiplier *= 0.9

        if mood == "stressed":
            multiplier *= 1.2
        elif mood == "energized":
            multiplier *= 0.85
        elif mood == "tired":
            multiplier *= 1.4

        return round_half_up(base_duration * multiplier)

    def _work_block(self, task: Task, start: int, minutes: int) -> ScheduleItem:
        return ScheduleItem(
            id=f"work-{task.id}-{start}",
            task_id=task.id,
            start_time=minutes_to_24h(start),
            end_time=minutes_to_24h(start + minutes),
            type="work",
            title=task.name,
            description=f"{minutes} min • {task.priority} priority",
        )

    def _short_break(self, start: int) -> ScheduleItem:
        return ScheduleItem(
            id=f"break-{start}",
            task_id="",
            start_time=minutes_to_24h(start),
            end_time=minutes_to_24h(start + self.BREAK_DURATION),
            type="break",
            title="Short Break",
            description=self.rng.choice(BREAK_ACTIVITIES),
        )

    def _wellness_break(self, start: int, mood: str) -> ScheduleItem:
        activities = WELLNESS_ACTIVITIES.get(mood, WELLNESS_ACTIVITIES["balanced"])
        return ScheduleItem(
            id=f"wellness-{start}",
            task_id="",
            start_time=minutes_to_24h(start),
            end_time=minutes_to_24h(start + self.WELLNESS_BREAK_DURATION),
            type="wellness",
            title="Wellness Break",
            description=self.rng.choice(activities),
        )
