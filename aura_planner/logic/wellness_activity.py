"""
Guided wellness activity suggestions
"""
import random
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

from ..models import GameStats, UserInput
from .time_math import time_to_minutes


@dataclass
class WellnessActivity:
    type: str = ""  # breathing, stretching, hydration, mindfulness
    title: str = ""
    description: str = ""
    duration: Optional[int] = None  # seconds
    instructions: List[str] = field(default_factory=list)
    trigger: str = "break"  # stress, fatigue, focus, break

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "duration": self.duration,
            "instructions": list(self.instructions),
            "trigger": self.trigger,
        }


ACTIVITIES = [
    WellnessActivity(
        type="breathing",
        title="4-7-8 Breathing",
        description="Calm your mind with deep breathing",
        duration=120,
        instructions=[
            "Sit comfortably with your back straight",
            "Breathe in through your nose for 4 counts",
            "Hold your breath for 7 counts",
            "Exhale through your mouth for 8 counts",
            "Repeat the cycle 3-4 times",
        ],
        trigger="stress",
    ),
    WellnessActivity(
        type="stretching",
        title="Desk Stretches",
        description="Release tension from sitting",
        duration=180,
        instructions=[
            "Roll your shoulders backward 5 times",
            "Gently turn your head left and right",
            "Stretch your arms overhead and lean side to side",
            "Do some seated spinal twists",
            "Stretch your wrists and fingers",
        ],
        trigger="fatigue",
    ),
    WellnessActivity(
        type="hydration",
        title="Hydration Break",
        description="Fuel your body with water",
        instructions=[
            "Get a glass of water (8-12 oz)",
            "Drink slowly and mindfully",
            "Notice how the water feels",
            "Take a moment to check in with your body",
        ],
        trigger="break",
    ),
    WellnessActivity(
        type="mindfulness",
        title="Mindful Moment",
        description="Reset your focus and awareness",
        duration=60,
        instructions=[
            "Close your eyes or soften your gaze",
            "Notice three things you can hear right now",
            "Feel your feet on the ground",
            "Take three deep, conscious breaths",
            "Set an intention for your next task",
        ],
        trigger="focus",
    ),
    WellnessActivity(
        type="breathing",
        title="Quick Energy Breath",
        description="Boost your energy naturally",
        duration=60,
        instructions=[
            "Sit up straight and place hands on your belly",
            "Take quick, shallow breaths for 30 seconds",
            "Then take 3 deep, slow breaths",
            "Notice the energy flowing through your body",
        ],
        trigger="fatigue",
    ),
    WellnessActivity(
        type="stretching",
        title="Eye Rest Exercise",
        description="Give your eyes a break from screens",
        duration=90,
        instructions=[
            "Look away from your screen",
            "Focus on something 20 feet away for 20 seconds",
            "Blink slowly 10 times",
            "Gently massage your temples",
            "Close your eyes for 30 seconds",
        ],
        trigger="focus",
    ),
]


class WellnessActivityManager:
    """Picks a guided activity from stress, fatigue and focus scores (0-10)"""

    COOLDOWN = timedelta(minutes=30)
    PERIODIC_HOURS = 1.5

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def suggest_activity(
        self,
        user_input: UserInput,
        stats: GameStats,
        last_activity_time: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> Optional[WellnessActivity]:
        """Guided activity for the strongest trigger, or None during the cooldown"""
        now = now or datetime.now()

        if last_activity_time and now - last_activity_time < self.COOLDOWN:
            return None

        if self.stress_score(user_input, stats) >= 7:
            return self._random_activity("stress")
        if self.fatigue_score(user_input, now) >= 6:
            return self._random_activity("fatigue")
        if self.focus_score(user_input, stats, now) <= 3:
            return self._random_activity("focus")

        if last_activity_time:
            hours_since = (now - last_activity_time).total_seconds() / 3600
        else:
            hours_since = 2
        if hours_since >= self.PERIODIC_HOURS:
            return self._random_activity("break")

        return None

    @staticmethod
    def stress_score(user_input: UserInput, stats: GameStats) -> float:
        """0..10 from skips, low energy, stressed mood and a tight window"""
        score = 0.0

        total = len(stats.task_actions)
        if total:
            skips = len([a for a in stats.task_actions if a.type == "skip"])
            score += skips / total * 4

        if user_input.energy <= 3:
            score += 2
        if user_input.mood == "stressed":
            score += 3

        # very tight schedule
        work_minutes = sum(t.estimated_time for t in user_input.tasks)
        if work_minutes:
            window = time_to_minutes(user_input.end_time) - time_to_minutes(user_input.start_time)
            if window / work_minutes < 1.2:
                score += 2

        return min(10, score)

    @staticmethod
    def fatigue_score(user_input: UserInput, now: datetime) -> float:
        """0..10 from energy, mood, long tasks and the afternoon dip"""
        score = 10 - user_input.energy

        if user_input.mood == "tired":
            score += 2

        if user_input.tasks:
            average = sum(t.estimated_time for t in user_input.tasks) / len(user_input.tasks)
            if average > 90:
                score += 2

        # post-lunch dip
        if 14 <= now.hour <= 16:
            score += 1

        return min(10, score)

    @staticmethod
    def focus_score(user_input: UserInput, stats: GameStats, now: datetime) -> float:
        """0..10; lower when tasks were rescheduled in the last hour"""
        score = user_input.energy
        recent_reschedules = [
            a for a in stats.task_actions
            if a.type == "reschedule" and now - a.timestamp < timedelta(hours=1)
        ]
        score -= len(recent_reschedules)
        return max(0, min(10, score))

    def _random_activity(self, trigger: str) -> WellnessActivity:
        return self.rng.choice(self.activities_for_trigger(trigger))

    @staticmethod
    def activities_for_trigger(trigger: str) -> List[WellnessActivity]:
        """Catalogue entries for one trigger"""
        return [a for a in ACTIVITIES if a.trigger == trigger]

    @staticmethod
    def activity_by_type(activity_type: str) -> Optional[WellnessActivity]:
        for activity in ACTIVITIES:
            if activity.type == activity_type:
                return activity
        return None

    @staticmethod
    def wellness_summary(completed_types: List[str]) -> dict:
        """Counts per activity type with a recommendation"""
        total = len(completed_types)
        if total == 0:
            recommendation = "Try incorporating some wellness breaks into your day!"
        elif total < 3:
            recommendation = "Great start! Consider adding more wellness moments throughout your day."
        elif total < 6:
            recommendation = "Excellent wellness habits! You're taking good care of yourself."
        else:
            recommendation = "Outstanding commitment to wellness! You're a wellness champion!"

        return {
            "totalActivities": total,
            "breakdown": dict(Counter(completed_types)),
            "recommendation": recommendation,
        }
