"""
Re-planning of the rest of the day after completions, skips and elapsed time
"""
import logging
from dataclasses import replace
from datetime import datetime
from typing import Iterable, List, Optional

from ..models import ScheduleItem, UserInput, normalize_schedule
from .time_math import (
    duration,
    format_clock,
    is_time_after,
    minutes_to_12h,
    remaining_minutes,
    round_half_up,
    time_to_minutes,
)

logger = logging.getLogger(__name__)


class DynamicScheduler:
    """Rebuilds the remaining schedule through the AI generator, or compresses it locally"""

    SKIP_TIME_FACTOR = 0.8
    MIN_BLOCK = 15
    SHIFT_THRESHOLD = 0.8   # share of the remaining time work may use before compressing
    COMPRESSION_TARGET = 0.7
    MAX_COMPRESSED_BREAK = 15

    def __init__(self, generator=None):
        # anything with generate(user_input, feedback=..., preferences=...)
        self.generator = generator

    def reschedule_remaining(
        self,
        original_schedule: List[ScheduleItem],
        user_input: UserInput,
        completed_tasks: Iterable[str] = (),
        skipped_tasks: Iterable[str] = (),
        rescheduled_tasks: Iterable[str] = (),
        current_time: Optional[datetime] = None,
    ) -> List[ScheduleItem]:
        """
        Produce the schedule for the rest of the day. Never raises.

        Args:
            original_schedule: schedule currently shown to the user
            user_input: the planning request the schedule came from
            completed_tasks / skipped_tasks / rescheduled_tasks: current action sets
            current_time: defaults to now

        Returns:
            the updated remaining schedule (or the original one when nothing changed)
        """
        try:
            return self._reschedule(
                original_schedule,
                user_input,
                set(completed_tasks),
                set(skipped_tasks),
                set(rescheduled_tasks),
                current_time or datetime.now(),
            )
        except Exception as e:
            logger.warning("Dynamic rescheduling failed, keeping original schedule: %s", e)
            return original_schedule

    def _reschedule(self, original_schedule, user_input, completed, skipped, rescheduled, now):
        now_text = format_clock(now)

        remaining_items = [
            item for item in original_schedule
            if item.key not in completed
            and item.key not in skipped
            and is_time_after(item.start_time, now_text)
        ]

        skipped_to_retry = [
            task for task in user_input.tasks
            if task.id in skipped and task.id not in rescheduled
        ]

        if not skipped_to_retry and len(remaining_items) == len(original_schedule):
            return original_schedule

        minutes_left = remaining_minutes(now_text, user_input.end_time)
        if minutes_left <= 0:
            return self._within_window(remaining_items, user_input.end_time)

        remaining_task_ids = {item.task_id for item in remaining_items if item.task_id}
        tasks = [
            replace(task, estimated_time=max(self.MIN_BLOCK, task.estimated_time * self.SKIP_TIME_FACTOR))
            for task in skipped_to_retry
        ]
        tasks += [
            task for task in user_input.tasks
            if task.id in remaining_task_ids and task.id not in completed and task.id not in skipped
        ]

        if not tasks:
            # only breaks and wellness items are left
            return self._within_window(remaining_items, user_input.end_time)

        reduced_input = replace(user_input, start_time=now_text, tasks=tasks)

        if self.generator is not None:
            feedback = f"Reschedule remaining tasks. Current time is {now_text}."
            if skipped_to_retry:
                feedback += f" Please include the {len(skipped_to_retry)} skipped task(s) if time allows."
            preferences = {
                "shorterWorkBlocks": len(skipped_to_retry) > 0,
                "moreWellnessTime": len(skipped) >= 2,
            }
            try:
                new_schedule = self.generator.generate(
                    reduced_input, feedback=feedback, preferences=preferences
                )
                return self._within_window(normalize_schedule(new_schedule), user_input.end_time)
            except Exception as e:
                logger.warning("Dynamic rescheduling error, compressing locally: %s", e)

        return self.compress_remaining_schedule(remaining_items, now_text, user_input.end_time)

    def compress_remaining_schedule(
        self, items: List[ScheduleItem], start_time: str, end_time: str
    ) -> List[ScheduleItem]:
        """Shift items to start_time, or squeeze work blocks when they no longer fit"""
        available = remaining_minutes(start_time, end_time)
        work_items = [item for item in items if item.type == "work"]

        if not work_items:
            return items

        total_work = sum(duration(item.start_time, item.end_time) for item in work_items)

        if total_work <= available * self.SHIFT_THRESHOLD:
            return self._within_window(self.shift_schedule(items, start_time), end_time)

        ratio = (available * self.COMPRESSION_TARGET) / total_work
        return self.compress_work_blocks(items, start_time, ratio, end_time=end_time)

    @staticmethod
    def _within_window(items: List[ScheduleItem], end_time: str) -> List[ScheduleItem]:
        end = time_to_minutes(end_time)
        kept = [item for item in items if time_to_minutes(item.end_time) <= end]
        if len(kept) < len(items):
            logger.info("Dropped %d item(s) that no longer fit before %s", len(items) - len(kept), end_time)
        return kept

    @staticmethod
    def shift_schedule(items: List[ScheduleItem], new_start_time: str) -> List[ScheduleItem]:
        """Move every item by the same offset so the first one starts at new_start_time"""
        if not items:
            return items

        offset = time_to_minutes(new_start_time) - time_to_minutes(items[0].start_time)
        return [
            replace(
                item,
                start_time=minutes_to_12h(time_to_minutes(item.start_time) + offset),
                end_time=minutes_to_12h(time_to_minutes(item.end_time) + offset),
            )
            for item in items
        ]

    def compress_work_blocks(
        self,
        items: List[ScheduleItem],
        start_time: str,
        ratio: float,
        end_time: Optional[str] = None,
    ) -> List[ScheduleItem]:
        """
        Lay items out back to back from start_time with scaled durations

        With end_time, the last work block that fits is trimmed to it and
        everything after is dropped.
        """
        cursor = time_to_minutes(start_time)
        end = time_to_minutes(end_time) if end_time else None
        result = []

        for index, item in enumerate(items):
            length = duration(item.start_time, item.end_time)
            if item.type == "work":
                new_length = max(self.MIN_BLOCK, round_half_up(length * ratio))
            else:
                new_length = min(self.MAX_COMPRESSED_BREAK, length)

            if end is not None and cursor + new_length > end:
                room = end - cursor
                if item.type != "work" or room < self.MIN_BLOCK:
                    logger.info("Dropped %d item(s) that no longer fit before %s", len(items) - index, end_time)
                    break
                new_length = room

            description = item.description
            if item.type == "work" and ratio < 1:
                description = f"{item.description} (compressed due to time constraints)".lstrip()

            result.append(replace(
                item,
                start_time=minutes_to_12h(cursor),
                end_time=minutes_to_12h(cursor + new_length),
                description=description,
            ))
            cursor += new_length

        return result

    @staticmethod
    def time_based_suggestion(
        action_type: str,
        minutes_remaining: float,
        total_tasks: int,
        completed_tasks: int,
    ) -> str:
        """Short advisory text after an action; empty when nothing applies"""
        completion_rate = completed_tasks / total_tasks * 100 if total_tasks > 0 else 0
        hours_remaining = minutes_remaining / 60

        if action_type == "skip" and hours_remaining < 1:
            return "With limited time remaining, consider focusing on your highest priority tasks."
        if action_type == "complete" and completion_rate > 75:
            return "Excellent progress! You're on track to complete most of your planned tasks."
        if action_type == "skip" and completion_rate < 25:
            return ("I notice you're skipping several tasks. Would you like me to adjust "
                    "the schedule to better match your current energy?")
        if hours_remaining > 2 and completion_rate > 50:
            return "Great momentum! You have good time cushion to maintain this steady pace."
        return ""
