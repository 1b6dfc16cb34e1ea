"""
Points, streaks, levels and achievements
"""
import time
from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Optional

from ..models import (
    Achievement,
    ActionOutcome,
    BalanceScore,
    GameStats,
    Suggestion,
    TaskAction,
    UserInput,
)


POINTS = {
    "complete": 15,
    "complete_early": 20,
    "complete_late": 10,
    "skip": -5,
    "reschedule": 2,
    "streak_bonus": 5,
    "wellness_bonus": 10,
    "energy_match_bonus": 8,
}

STREAK_BONUS_THRESHOLD = 3
WELLNESS_BONUS_THRESHOLD = 80
POINTS_PER_LEVEL = 100

# (id, title, description, icon, requirement type, target)
ACHIEVEMENTS = [
    ("first-complete", "First Victory", "Complete your first task", "target", "completion_rate", 1),
    ("streak-3", "Momentum Building", "Complete 3 tasks in sequence", "trending-up", "streak", 3),
    ("streak-7", "Peak Performance", "Complete 7 tasks in sequence", "zap", "streak", 7),
    ("points-100", "Century Milestone", "Reach 100 total points", "award", "points", 100),
    ("wellness-master", "Balance Master", "Maintain optimal wellness score", "heart", "wellness_balance", 80),
]


def level_for(total_points: int) -> int:
    """Level reached at total_points"""
    return max(1, total_points // POINTS_PER_LEVEL + 1)


class GamificationEngine:
    """Scores task actions and unlocks achievements"""

    def __init__(self, clock=None):
        # clock() -> datetime, for the energy-match window
        self.clock = clock or datetime.now

    def process_task_action(
        self,
        action: TaskAction,
        current_stats: GameStats,
        balance_score: BalanceScore,
        user_input: UserInput,
    ) -> ActionOutcome:
        """
        Apply one action to the stats

        Args:
            action: the action (its points field is ignored and recomputed)
            current_stats: stats before the action (not mutated)
            balance_score: current balance score, for the wellness bonus
            user_input: planning request, for the energy-match bonus

        Returns:
            ActionOutcome with new stats, points, newly unlocked achievements
            and at most one suggestion
        """
        points = 0
        streak = current_stats.current_streak

        if action.type == "complete":
            streak += 1
            if action.reason == "early":
                points = POINTS["complete_early"]
            elif action.reason == "late":
                points = POINTS["complete_late"]
            else:
                points = POINTS["complete"]

            if streak >= STREAK_BONUS_THRESHOLD:
                points += POINTS["streak_bonus"]

            if self.matches_energy_level(user_input):
                points += POINTS["energy_match_bonus"]

        elif action.type == "skip":
            points = POINTS["skip"]
            streak = 0

        elif action.type == "reschedule":
            points = POINTS["reschedule"]

        if balance_score.wellness >= WELLNESS_BONUS_THRESHOLD:
            points += POINTS["wellness_bonus"]

        logged_action = replace(action, points=points)
        total_points = current_stats.total_points + points

        candidate = GameStats(
            total_points=total_points,
            current_streak=streak,
            longest_streak=max(current_stats.longest_streak, streak),
            level=level_for(total_points),
            achievements=list(current_stats.achievements),
            task_actions=list(current_stats.task_actions) + [logged_action],
        )

        unlocked = self.check_achievements(candidate, balance_score)
        candidate.achievements.extend(unlocked)

        return ActionOutcome(
            updated_stats=candidate,
            points_earned=points,
            new_achievements=unlocked,
            suggestion=self.generate_suggestion(logged_action, candidate, balance_score),
        )

    def check_achievements(self, stats: GameStats, balance_score: BalanceScore) -> List[Achievement]:
        """Achievements whose condition holds and that are not unlocked yet"""
        owned = set(stats.achievement_ids)
        unlocked = []

        for achievement_id, title, description, icon, kind, target in ACHIEVEMENTS:
            if achievement_id in owned:
                continue
            if self._check_condition(kind, target, stats, balance_score):
                unlocked.append(Achievement(
                    id=achievement_id,
                    title=title,
                    description=description,
                    icon=icon,
                    requirement_type=kind,
                    target=target,
                    unlocked_at=self.clock(),
                ))
        return unlocked

    @staticmethod
    def _check_condition(kind: str, target: int, stats: GameStats, balance_score: BalanceScore) -> bool:
        if kind == "points":
            return stats.total_points >= target
        elif kind == "streak":
            return stats.current_streak >= target
        elif kind == "completion_rate":
            completed = len([a for a in stats.task_actions if a.type == "complete"])
            return completed >= target
        elif kind == "wellness_balance":
            return balance_score.wellness >= target
        return False

    def generate_suggestion(
        self, action: TaskAction, stats: GameStats, balance_score: BalanceScore
    ) -> Optional[Suggestion]:
        """At most one suggestion for the action just processed"""
        recent = stats.task_actions[-3:]
        skip_count = len([a for a in recent if a.type == "skip"])
        suggestion_id = f"suggestion-{int(time.time() * 1000)}"

        if action.type == "skip" and skip_count >= 2:
            return Suggestion(
                id=suggestion_id,
                message=("I notice you've skipped several tasks. Would you like me to break "
                         "them into smaller, more manageable pieces?"),
                type="adjustment",
                action_type="split_task",
                action_data={"reason": "frequent_skips"},
            )

        if action.type == "complete" and stats.current_streak >= STREAK_BONUS_THRESHOLD:
            return Suggestion(
                id=suggestion_id,
                message=(f"Excellent work! You're maintaining strong momentum with "
                         f"{stats.current_streak} completed tasks."),
                type="motivation",
            )

        if balance_score.wellness < 40:
            return Suggestion(
                id=suggestion_id,
                message=("Your wellness metrics suggest taking a brief restorative break "
                         "would optimize your performance."),
                type="wellness",
                action_type="break",
                action_data={"duration": 15, "type": "mindfulness"},
            )

        if action.type == "reschedule":
            return Suggestion(
                id=suggestion_id,
                message="Smart adjustment. I've optimized your schedule to maintain workflow continuity.",
                type="productivity",
            )

        return None

    def matches_energy_level(self, user_input: UserInput) -> bool:
        """High energy in the morning, or low energy in the afternoon"""
        hour = self.clock().hour
        if user_input.energy >= 8 and 9 <= hour <= 11:
            return True
        if user_input.energy <= 4 and 14 <= hour <= 16:
            return True
        return False

    @staticmethod
    def level_progress(total_points: int) -> Dict[str, float]:
        """Current level, points into it and points still needed"""
        points_in_level = max(0, total_points) % POINTS_PER_LEVEL
        return {
            "currentLevel": level_for(total_points),
            "pointsInLevel": points_in_level,
            "pointsToNextLevel": POINTS_PER_LEVEL - points_in_level,
            "progressPercentage": points_in_level / POINTS_PER_LEVEL * 100,
        }

    @staticmethod
    def motivational_message(stats: GameStats) -> str:
        """Encouragement line based on streak and points"""
        if stats.current_streak >= 5:
            return f"Outstanding performance with {stats.current_streak} consecutive completions"
        if stats.total_points >= 500:
            return f"Level {stats.level} achieved with {stats.total_points} total points earned"
        if stats.current_streak >= 3:
            return f"Strong momentum maintained: {stats.current_streak} tasks completed"
        return f"Level {stats.level} - Building consistent productive habits"
