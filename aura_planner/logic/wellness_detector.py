"""
Wellness classification from the action history (read-only)
"""
import random
import time
from typing import List, Optional

from ..models import GameStats, Suggestion, TaskAction, UserInput, WellnessMetrics


BREAK_ACTIVITIES = {
    "high_stress_short": [
        "Take 10 deep breaths",
        "Step outside for fresh air",
        "Drink a glass of water mindfully",
        "Do gentle neck and shoulder stretches",
    ],
    "high_stress_long": [
        "Take a 15-minute walk",
        "Practice guided meditation",
        "Call a friend or family member",
        "Listen to calming music",
    ],
    "moderate_stress": [
        "Stand up and stretch",
        "Make a healthy snack",
        "Tidy your workspace",
        "Review your accomplishments so far",
    ],
    "low_stress": [
        "Quick energizing walk",
        "Do some jumping jacks",
        "Read something inspiring",
        "Plan your next win",
    ],
}

MOOD_STRESS = {"stressed": 40, "tired": 30, "balanced": 10, "energized": 5}


def _clamp(value: float) -> float:
    return max(0, min(100, value))


class WellnessDetector:
    """Stress, burnout, consistency and balance heuristics"""

    RECENT_WINDOW = 10

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def analyze_wellness(self, stats: GameStats, user_input: UserInput) -> WellnessMetrics:
        """Stress, burnout, consistency and balance for the current session"""
        recent = stats.task_actions[-self.RECENT_WINDOW:]
        session_minutes = self.session_duration(stats.task_actions)

        stress = self.stress_level(recent, user_input)
        burnout = self.burnout_risk(stats, session_minutes)
        consistency = self.consistency_score(stats)
        balance = self.work_life_balance(user_input)

        needed = stress >= 60 or burnout >= 50 or consistency <= 30
        return WellnessMetrics(
            stress_level=stress,
            burnout_risk=burnout,
            consistency_score=consistency,
            work_life_balance=balance,
            intervention_needed=needed,
            intervention_type=self.intervention_type(stress, burnout, consistency, stats) if needed else None,
        )

    @staticmethod
    def stress_level(actions: List[TaskAction], user_input: UserInput) -> float:
        """0..100 from recent skips, mood and energy"""
        stress = MOOD_STRESS.get(user_input.mood, 0)

        if user_input.energy <= 3:
            stress += 25
        elif user_input.energy <= 5:
            stress += 15
        elif user_input.energy >= 8:
            stress -= 10

        skips = len([a for a in actions if a.type == "skip"])
        skip_rate = skips / len(actions) if actions else 0
        stress += skip_rate * 40

        return _clamp(stress)

    @staticmethod
    def burnout_risk(stats: GameStats, session_minutes: float) -> float:
        """0..100 from session length, a low completion rate and a broken streak"""
        risk = 0

        if session_minutes > 180:
            risk += 30
        elif session_minutes > 120:
            risk += 15

        recent = stats.task_actions[-10:]
        completion_rate = len([a for a in recent if a.type == "complete"]) / max(1, len(recent))
        if completion_rate < 0.3 and len(recent) >= 5:
            risk += 25

        # a long streak that was just broken
        if stats.current_streak == 0 and stats.longest_streak > 3:
            risk += 20

        return _clamp(risk)

    @staticmethod
    def consistency_score(stats: GameStats) -> float:
        """Recent completion share plus a streak bonus; 50 until five actions exist"""
        actions = stats.task_actions
        if len(actions) < 5:
            return 50

        recent = actions[-8:]
        completed = len([a for a in recent if a.type == "complete"])
        streak_bonus = min(20, stats.current_streak * 2)
        return _clamp(completed / len(recent) * 100 + streak_bonus)

    @staticmethod
    def work_life_balance(user_input: UserInput) -> float:
        """0..100 from stated energy and mood"""
        balance = 50

        if user_input.energy >= 7:
            balance += 20
        elif user_input.energy <= 3:
            balance -= 25

        if user_input.mood == "balanced":
            balance += 15
        elif user_input.mood == "stressed":
            balance -= 20

        return _clamp(balance)

    @staticmethod
    def intervention_type(stress: float, burnout: float, consistency: float, stats: GameStats) -> str:
        """rest, restructure, celebration or motivation, most urgent first"""
        if stress >= 70 or burnout >= 60:
            return "rest"
        if consistency <= 20:
            return "restructure"
        if stats.current_streak >= 5 and stress < 30:
            return "celebration"
        return "motivation"

    @staticmethod
    def session_duration(actions: List[TaskAction]) -> float:
        """Minutes between the first and last logged action"""
        if not actions:
            return 0
        return (actions[-1].timestamp - actions[0].timestamp).total_seconds() / 60

    @staticmethod
    def generate_intervention(metrics: WellnessMetrics, stats: GameStats) -> Optional[Suggestion]:
        """Suggestion for the user when metrics call for one"""
        if not metrics.intervention_needed or not metrics.intervention_type:
            return None

        suggestion_id = f"wellness-{int(time.time() * 1000)}"
        kind = metrics.intervention_type

        if kind == "rest":
            return Suggestion(
                id=suggestion_id,
                message=("Your wellness indicators suggest taking a longer break. How about a "
                         "20-minute walk or some deep breathing exercises?"),
                type="wellness",
                action_type="break",
                action_data={"duration": 20, "type": "wellness", "activity": "mindful break"},
            )
        if kind == "motivation":
            attempted = max(1, len(stats.task_actions))
            rate = len([a for a in stats.task_actions if a.type == "complete"]) / attempted * 100
            return Suggestion(
                id=suggestion_id,
                message=(f"You've completed {rate:.0f}% of attempted tasks! Let's build on this "
                         f"momentum with your next task."),
                type="motivation",
            )
        if kind == "restructure":
            return Suggestion(
                id=suggestion_id,
                message=("I notice some difficulty with task completion. Would you like me to break "
                         "down larger tasks into smaller, more manageable pieces?"),
                type="adjustment",
                action_type="split_task",
                action_data={"reason": "wellness_intervention"},
            )
        if kind == "celebration":
            return Suggestion(
                id=suggestion_id,
                message=(f"Outstanding work! You've maintained excellent balance and completed "
                         f"{stats.current_streak} tasks in a row. Take a moment to appreciate your progress."),
                type="motivation",
            )
        return None

    @staticmethod
    def detect_emotional_patterns(actions: List[TaskAction]) -> dict:
        """Classify the recent action log"""
        if len(actions) < 3:
            return {
                "pattern": "balanced",
                "confidence": 0.3,
                "description": "Not enough data to establish pattern",
            }

        recent = actions[-6:]
        total = len(recent)
        completion_rate = len([a for a in recent if a.type == "complete"]) / total
        skip_rate = len([a for a in recent if a.type == "skip"]) / total
        reschedule_rate = len([a for a in recent if a.type == "reschedule"]) / total

        if completion_rate >= 0.8:
            return {
                "pattern": "productive",
                "confidence": 0.9,
                "description": "High completion rate indicates strong focus and productivity",
            }
        if skip_rate >= 0.5:
            return {
                "pattern": "struggling",
                "confidence": 0.85,
                "description": "High skip rate suggests difficulty with current workload or energy levels",
            }
        if reschedule_rate >= 0.4:
            return {
                "pattern": "inconsistent",
                "confidence": 0.7,
                "description": "Frequent rescheduling indicates need for better time estimation or planning",
            }
        return {
            "pattern": "balanced",
            "confidence": 0.6,
            "description": "Healthy mix of completion and flexibility",
        }

    def suggest_break_activity(self, stress_level: float, session_minutes: float) -> str:
        """Pick a break activity for the stress level and session length"""
        if stress_level >= 70:
            category = "high_stress_long" if session_minutes > 120 else "high_stress_short"
        elif stress_level >= 40:
            category = "moderate_stress"
        else:
            category = "low_stress"
        return self.rng.choice(BREAK_ACTIVITIES[category])
