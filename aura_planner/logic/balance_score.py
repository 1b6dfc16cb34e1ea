"""
Balance score calculation

Two policies:
  - point budget (default): 70 points for work items, 30 for breaks and
    wellness items, driven by what the user actually completed
  - time weighted: the earlier duration-based policy, kept for comparison
"""
import math
from typing import Iterable, List

from ..models import BalanceScore, ScheduleItem, UserInput
from .time_math import duration, round_half_up


WORK_BUDGET = 70
WELLNESS_BUDGET = 30
SKIP_PENALTY = 5
RESCHEDULE_CREDIT = 0.5
RESCHEDULE_CONSISTENCY_WEIGHT = 0.7


def _clamp(value: float, low: int = 0, high: int = 100) -> int:
    return max(low, min(high, round_half_up(value)))


class BalanceCalculator:
    """Pure scoring functions; call again with the full action sets after every change"""

    @staticmethod
    def calculate_score(
        schedule: List[ScheduleItem],
        completed_tasks: Iterable[str] = (),
        skipped_tasks: Iterable[str] = (),
        rescheduled_tasks: Iterable[str] = (),
    ) -> BalanceScore:
        """
        Point-budget policy.

        Args:
            schedule: current schedule
            completed_tasks: ids (task id, or item id for breaks) marked complete
            skipped_tasks: ids marked skipped
            rescheduled_tasks: ids marked rescheduled

        Returns:
            BalanceScore with every field in [0, 100]
        """
        completed = set(completed_tasks)
        skipped = set(skipped_tasks)
        rescheduled = set(rescheduled_tasks)

        work_items = [item for item in schedule if item.type == "work"]
        wellness_items = [item for item in schedule if item.type in ("break", "wellness")]

        work_points = WORK_BUDGET / len(work_items) if work_items else 0
        wellness_points = WELLNESS_BUDGET / len(wellness_items) if wellness_items else 0

        earned = 0.0
        productivity_earned = 0.0
        wellness_earned = 0.0

        for item in work_items:
            key = item.key
            if key in completed:
                earned += work_points
                productivity_earned += work_points
            elif key in rescheduled:
                earned += work_points * RESCHEDULE_CREDIT
                productivity_earned += work_points * RESCHEDULE_CREDIT
            elif key in skipped:
                # flat penalty regardless of the per-item budget
                earned -= SKIP_PENALTY

        for item in wellness_items:
            key = item.key
            if key in completed:
                earned += wellness_points
                wellness_earned += wellness_points
            elif key in rescheduled:
                earned += wellness_points * RESCHEDULE_CREDIT
                wellness_earned += wellness_points * RESCHEDULE_CREDIT

        productivity = 0
        if work_items:
            productivity = _clamp(100 * productivity_earned / (work_points * len(work_items)))

        wellness = 0
        if wellness_items:
            wellness = _clamp(100 * wellness_earned / (wellness_points * len(wellness_items)))

        total_actioned = len(completed) + len(skipped) + len(rescheduled)
        consistency = 0
        if total_actioned:
            consistency = _clamp(
                100 * (len(completed) + RESCHEDULE_CONSISTENCY_WEIGHT * len(rescheduled)) / total_actioned
            )

        return BalanceScore(
            overall=_clamp(earned),
            productivity=productivity,
            wellness=wellness,
            consistency=consistency,
        )

    @classmethod
    def calculate_time_weighted_score(
        cls,
        schedule: List[ScheduleItem],
        user_input: UserInput,
        completed_tasks: Iterable[str] = (),
    ) -> BalanceScore:
        """Duration-based policy: overall is the mean of the three sub-scores"""
        completed = set(completed_tasks)
        productivity = _clamp(cls._time_weighted_productivity(schedule, completed))
        wellness = _clamp(cls._time_weighted_wellness(schedule, user_input))
        consistency = _clamp(cls._time_weighted_consistency(schedule))

        return BalanceScore(
            overall=_clamp((productivity + wellness + consistency) / 3),
            productivity=productivity,
            wellness=wellness,
            consistency=consistency,
        )

    @staticmethod
    def _time_weighted_productivity(schedule: List[ScheduleItem], completed: set) -> float:
        work_blocks = [item for item in schedule if item.type == "work"]
        total_work = sum(duration(b.start_time, b.end_time) for b in work_blocks)
        if total_work <= 0:
            return 0

        completed_work = sum(
            duration(b.start_time, b.end_time) for b in work_blocks if b.key in completed
        )
        completion_rate = completed_work / total_work * 100

        # one-hour blocks are ideal
        average_block = total_work / len(work_blocks)
        distribution = max(0, 100 - abs(average_block - 60))

        return completion_rate * 0.7 + distribution * 0.3

    @staticmethod
    def _time_weighted_wellness(schedule: List[ScheduleItem], user_input: UserInput) -> float:
        if not schedule:
            return 0
        wellness_count = len([i for i in schedule if i.type in ("break", "wellness")])
        ratio = wellness_count / len(schedule) * 100

        mood_bonus = 0
        if user_input.mood == "stressed":
            mood_bonus = 20 if ratio > 25 else -10
        elif user_input.mood == "tired":
            mood_bonus = 15 if ratio > 30 else -15
        elif user_input.mood == "energized":
            mood_bonus = 10 if ratio > 15 else 0
        elif user_input.mood == "balanced":
            mood_bonus = 10 if 20 <= ratio <= 25 else 0

        energy_adjustment = 0
        if user_input.energy <= 4:
            energy_adjustment = 15 if ratio > 25 else -20

        return ratio * 2 + mood_bonus + energy_adjustment

    @staticmethod
    def _time_weighted_consistency(schedule: List[ScheduleItem]) -> float:
        if len(schedule) < 2:
            return 100

        work_blocks = [item for item in schedule if item.type == "work"]
        if len(work_blocks) < 2:
            return 50

        durations = [duration(b.start_time, b.end_time) for b in work_blocks]
        average = sum(durations) / len(durations)
        variance = sum((d - average) ** 2 for d in durations) / len(durations)
        spread_score = max(0, 100 - math.sqrt(variance) * 2)

        # back-to-back work blocks without any gap
        break_score = 100
        for i in range(1, len(schedule) - 1):
            if schedule[i].type == "work" and schedule[i - 1].type == "work":
                if duration(schedule[i - 1].end_time, schedule[i].start_time) == 0:
                    break_score -= 10

        return spread_score * 0.6 + break_score * 0.4

    @staticmethod
    def score_message(score: BalanceScore) -> str:
        overall = score.overall
        if overall >= 90:
            return "🌟 Perfect balance! You're crushing it!"
        if overall >= 80:
            return "✨ Great balance! Keep up the awesome work!"
        if overall >= 70:
            return "🌿 Good balance! Small tweaks could make it even better."
        if overall >= 60:
            return "⚖️ Decent balance, but there's room for improvement."
        if overall >= 40:
            return "🔄 Consider adjusting your schedule for better balance."
        return "🆘 Your day needs more balance - let AURA help!"
