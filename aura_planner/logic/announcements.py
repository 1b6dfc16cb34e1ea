"""
Text for voice read-outs and notifications

Only the text is produced here; speech synthesis and OS notifications are
fire-and-forget consumers outside the planner.
"""
from typing import List, Optional, Tuple

from ..models import ScheduleItem
from .time_math import round_half_up


def schedule_summary(schedule: List[ScheduleItem], user_name: Optional[str] = None) -> str:
    """Spoken overview of the day"""
    greeting = f"Hi {user_name}" if user_name else "Hi there"
    work_items = [item for item in schedule if item.type == "work"]

    if not work_items:
        return f"{greeting}! Your schedule is clear for now. Enjoy your free time!"

    summary = f"{greeting}! Here's your schedule for today. "

    if len(work_items) == 1:
        item = work_items[0]
        summary += f"You have one task: {item.title}, scheduled from {item.start_time} to {item.end_time}. "
    else:
        summary += f"You have {len(work_items)} tasks planned. "
        first = work_items[:3]
        for index, item in enumerate(first):
            if index == 0:
                summary += f"Starting with {item.title} at {item.start_time}. "
            elif index == len(first) - 1 and len(work_items) <= 3:
                summary += f"And finally, {item.title} at {item.start_time}. "
            else:
                summary += f"Then {item.title} at {item.start_time}. "
        if len(work_items) > 3:
            summary += f"And {len(work_items) - 3} more tasks throughout the day. "

    if any(item.type in ("break", "wellness") for item in schedule):
        summary += "I've also included some wellness breaks to keep you balanced. "

    return summary + "You've got this! Let me know if you need to reschedule anything."


def task_reminder(title: str, minutes_until: float) -> str:
    """Reminder text for an upcoming item"""
    minutes = round_half_up(minutes_until)
    if minutes <= 0:
        return f"Time to start {title}! You've got this."
    if minutes <= 5:
        return f"{title} starts in {minutes} minutes. Get ready!"
    if minutes <= 15:
        return f"Heads up! {title} starts in {minutes} minutes."
    return f"Reminder: {title} is coming up in {minutes} minutes."


def progress_message(completed: int, total: int) -> str:
    """Encouragement for the share of tasks completed"""
    progress = completed / total * 100 if total > 0 else 0
    if progress == 0:
        return "Ready to start your productive day? You've got this!"
    if progress < 25:
        return "Great start! Keep up the momentum."
    if progress < 50:
        return "You're making solid progress! Keep going strong."
    if progress < 75:
        return "Excellent work! You're more than halfway there."
    if progress < 100:
        return "Amazing progress! You're almost done for the day."
    return "Incredible! You've completed all your tasks. Time to celebrate your productive day!"


WELLNESS_REMINDERS = {
    "breathing": "Time for a quick breathing break. Take three deep breaths and reset your focus.",
    "stretching": ("Let's take a moment to stretch. Roll your shoulders, stretch your neck, "
                   "and get your body moving."),
    "hydration": "Hydration check! Grab some water and give your body the fuel it needs.",
    "walk": "Time for a short walk. Step away from your workspace and get some fresh air.",
}


def wellness_reminder(kind: str) -> str:
    return WELLNESS_REMINDERS.get(kind, "Time for a wellness break. Take care of yourself - you deserve it!")


def notification_for(item: ScheduleItem, phase: str) -> Tuple[str, str]:
    """(title, body) for a schedule item that is starting soon or ending"""
    if item.type in ("break", "wellness") and phase == "starting":
        return (
            "Time for wellness 🌿",
            f"It's time for your {item.title.lower()}. Your wellbeing matters!",
        )
    if phase == "starting":
        return (
            f"Time to start: {item.title}",
            f"Your {item.type} session begins in 5 minutes. Get ready!",
        )
    return (
        f"Time to wrap up: {item.title}",
        f"Your {item.type} session should be ending now. Great work!",
    )
