"""
Day planner service

Wires the control flow: plan -> score -> actions (points, wellness check,
rescheduling) -> persist.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .exceptions import NoActivePlanError
from .logic.announcements import schedule_summary
from .logic.balance_score import BalanceCalculator
from .logic.dynamic_scheduler import DynamicScheduler
from .logic.gamification import GamificationEngine
from .logic.rule_scheduler import RuleBasedScheduler
from .logic.smart_rescheduler import SmartRescheduler, find_item, manual_reschedule_task, sort_schedule
from .logic.time_math import clock_minutes, time_to_minutes
from .logic.wellness_activity import WellnessActivity, WellnessActivityManager
from .logic.wellness_detector import WellnessDetector
from .models import (
    ActionOutcome,
    BalanceScore,
    DailyPlan,
    GameStats,
    RescheduleResult,
    ScheduleItem,
    Suggestion,
    TaskAction,
    UserInput,
    WellnessMetrics,
    normalize_schedule,
)
from .session import UserSessionManager

logger = logging.getLogger(__name__)


@dataclass
class PlanSnapshot:
    plan: DailyPlan
    score: BalanceScore
    dropped_task_ids: List[str] = field(default_factory=list)
    source: str = "rules"  # ai, rules

    def to_dict(self) -> Dict[str, Any]:
        return {
            "plan": self.plan.to_dict(),
            "balanceScore": self.score.to_dict(),
            "droppedTaskIds": list(self.dropped_task_ids),
            "source": self.source,
        }


@dataclass
class ActionReport:
    plan: DailyPlan
    score: BalanceScore
    outcome: Optional[ActionOutcome] = None
    wellness: Optional[WellnessMetrics] = None
    intervention: Optional[Suggestion] = None
    reschedule: Optional[RescheduleResult] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "schedule": [item.to_dict() for item in self.plan.schedule],
            "balanceScore": self.score.to_dict(),
            "wellness": self.wellness.to_dict() if self.wellness else None,
            "intervention": self.intervention.to_dict() if self.intervention else None,
            "reschedule": self.reschedule.to_dict() if self.reschedule else None,
        }
        if self.outcome:
            data.update({
                "pointsEarned": self.outcome.points_earned,
                "newAchievements": [a.to_dict() for a in self.outcome.new_achievements],
                "suggestion": self.outcome.suggestion.to_dict() if self.outcome.suggestion else None,
                "gameStats": self.outcome.updated_stats.to_dict(),
            })
        return data


class DayPlanner:
    """Stateless service over the session store; every call reloads today's plan"""

    def __init__(
        self,
        session: UserSessionManager,
        generator=None,
        rule_scheduler: Optional[RuleBasedScheduler] = None,
        rescheduler: Optional[SmartRescheduler] = None,
        clock=None,
    ):
        self.session = session
        self.generator = generator
        self.clock = clock or datetime.now
        self.rule_scheduler = rule_scheduler or RuleBasedScheduler()
        self.rescheduler = rescheduler or SmartRescheduler()
        self.dynamic_scheduler = DynamicScheduler(generator)
        self.engine = GamificationEngine(clock=self.clock)
        self.detector = WellnessDetector()
        self.activities = WellnessActivityManager()

    # === Planning ===

    def create_plan(
        self,
        user_input: UserInput,
        feedback: Optional[str] = None,
        preferences: Optional[Dict[str, Any]] = None,
    ) -> PlanSnapshot:
        """Generate, score and persist a fresh plan; resets the game stats"""
        user_input.validate()

        schedule = None
        dropped: List[str] = []
        source = "ai"

        if self.generator is not None and getattr(self.generator, "is_configured", True):
            try:
                schedule = self._known_tasks_only(
                    normalize_schedule(self.generator.generate(user_input, feedback=feedback, preferences=preferences)),
                    user_input,
                )
            except Exception as e:
                logger.warning("AI scheduling error, using rule-based schedule: %s", e)
                schedule = None

        if not schedule:
            result = self.rule_scheduler.generate_schedule(user_input)
            schedule = result.items
            dropped = result.dropped_task_ids
            source = "rules"

        score = BalanceCalculator.calculate_score(schedule)
        plan = self.session.save_daily_plan(DailyPlan(
            schedule=schedule,
            user_input=user_input,
            balance_score=score.overall,
        ))
        self.session.save_game_stats(GameStats())

        return PlanSnapshot(plan=plan, score=score, dropped_task_ids=dropped, source=source)

    @staticmethod
    def _known_tasks_only(schedule: List[ScheduleItem], user_input: UserInput) -> List[ScheduleItem]:
        task_ids = {task.id for task in user_input.tasks}
        kept = []
        for item in schedule:
            if item.type == "work" and item.task_id not in task_ids:
                logger.warning("Dropping generated work item with unknown task id '%s'", item.task_id)
                continue
            kept.append(item)
        return kept

    def current_plan(self) -> DailyPlan:
        """Today's plan, or NoActivePlanError"""
        plan = self.session.get_todays_plan()
        if plan is None or plan.user_input is None:
            raise NoActivePlanError()
        return plan

    @staticmethod
    def score(plan: DailyPlan) -> BalanceScore:
        return BalanceCalculator.calculate_score(
            plan.schedule, plan.completed_tasks, plan.skipped_tasks, plan.rescheduled_tasks
        )

    # === Actions ===

    def record_action(self, item_id: str, action_type: str, reason: Optional[str] = None) -> ActionReport:
        """
        Complete, skip or reschedule one schedule item

        Raises:
            TaskNotFoundError: no item matches item_id
            NotReschedulableError: reschedule of a break or wellness item
        """
        action = TaskAction(type=action_type, reason=reason, timestamp=self.clock())
        plan = self.current_plan()
        item = find_item(plan.schedule, item_id)
        key = item.key
        score_before = self.score(plan)

        if (action.type == "complete" and key in plan.completed_tasks) or (
            action.type == "skip" and key in plan.skipped_tasks
        ):
            # repeat of an action already recorded; no points, no streak
            return ActionReport(plan=plan, score=score_before)

        reschedule_result = None
        if action.type == "reschedule":
            reschedule_result = self.rescheduler.reschedule_task(
                key, plan.schedule, plan.user_input, now=self.clock()
            )
            if reschedule_result.needs_manual_reschedule:
                # nothing changes until the user picks a time
                return ActionReport(plan=plan, score=score_before, reschedule=reschedule_result)
            plan.schedule = reschedule_result.new_schedule

        self._apply_action(plan, action.type, key)
        action.task_id = key
        return self._finish_action(plan, action, score_before, reschedule_result)

    def manual_reschedule(self, item_id: str, start_time: str, end_time: str) -> ActionReport:
        """Apply a user-chosen slot and score it as a reschedule"""
        plan = self.current_plan()
        item = find_item(plan.schedule, item_id)
        score_before = self.score(plan)

        plan.schedule = manual_reschedule_task(item_id, plan.schedule, start_time, end_time)
        self._apply_action(plan, "reschedule", item.key)

        action = TaskAction(type="reschedule", task_id=item.key, timestamp=self.clock(), reason="manual")
        return self._finish_action(plan, action, score_before, None)

    @staticmethod
    def _apply_action(plan: DailyPlan, action_type: str, key: str):
        completed = set(plan.completed_tasks)
        skipped = set(plan.skipped_tasks)
        rescheduled = set(plan.rescheduled_tasks)

        if action_type == "complete":
            completed.add(key)
            skipped.discard(key)
        elif action_type == "skip":
            skipped.add(key)
        elif action_type == "reschedule":
            rescheduled.add(key)
            skipped.discard(key)

        plan.completed_tasks = sorted(completed)
        plan.skipped_tasks = sorted(skipped)
        plan.rescheduled_tasks = sorted(rescheduled)

    def _finish_action(self, plan, action, score_before, reschedule_result) -> ActionReport:
        stats = self.session.load_game_stats()
        outcome = self.engine.process_task_action(action, stats, score_before, plan.user_input)
        self.session.save_game_stats(outcome.updated_stats)

        metrics = self.detector.analyze_wellness(outcome.updated_stats, plan.user_input)
        intervention = self.detector.generate_intervention(metrics, outcome.updated_stats)

        score = self.score(plan)
        plan.balance_score = score.overall
        self.session.update_progress(
            schedule=plan.schedule,
            completedTasks=plan.completed_tasks,
            skippedTasks=plan.skipped_tasks,
            rescheduledTasks=plan.rescheduled_tasks,
            balanceScore=score.overall,
        )

        return ActionReport(
            plan=plan,
            score=score,
            outcome=outcome,
            wellness=metrics,
            intervention=intervention,
            reschedule=reschedule_result,
        )

    def reschedule_remaining(self) -> DailyPlan:
        """Re-plan the rest of the day; acted-on and elapsed items stay in the plan"""
        plan = self.current_plan()
        now = self.clock()
        remaining = self.dynamic_scheduler.reschedule_remaining(
            plan.schedule,
            plan.user_input,
            plan.completed_tasks,
            plan.skipped_tasks,
            plan.rescheduled_tasks,
            current_time=now,
        )
        plan.schedule = self._merge_replanned(plan, remaining, clock_minutes(now))
        plan.balance_score = self.score(plan).overall
        self.session.update_progress(schedule=plan.schedule, balanceScore=plan.balance_score)
        return plan

    @staticmethod
    def _merge_replanned(plan: DailyPlan, remaining: List[ScheduleItem], now_minutes: int) -> List[ScheduleItem]:
        """Completed, skipped and already finished items plus the re-planned rest, by start time"""
        acted_on = set(plan.completed_tasks) | set(plan.skipped_tasks)
        new_ids = {item.id for item in remaining}
        new_keys = {item.key for item in remaining}

        kept = [
            item for item in plan.schedule
            if item.id not in new_ids
            and item.key not in new_keys
            and (item.key in acted_on or time_to_minutes(item.end_time) <= now_minutes)
        ]
        return sort_schedule(kept + list(remaining))

    def record_wellness_activity(self) -> DailyPlan:
        """Count one finished guided wellness activity"""
        plan = self.current_plan()
        plan.wellness_activities += 1
        self.session.update_progress(wellnessActivities=plan.wellness_activities)
        return plan

    # === Read-only views ===

    def wellness_check(self, last_activity_time: Optional[datetime] = None) -> Dict[str, Any]:
        """Metrics, intervention, activity suggestion and level progress"""
        plan = self.current_plan()
        stats = self.session.load_game_stats()
        metrics = self.detector.analyze_wellness(stats, plan.user_input)
        intervention = self.detector.generate_intervention(metrics, stats)
        activity: Optional[WellnessActivity] = self.activities.suggest_activity(
            plan.user_input, stats, last_activity_time, now=self.clock()
        )
        return {
            "metrics": metrics.to_dict(),
            "intervention": intervention.to_dict() if intervention else None,
            "activity": activity.to_dict() if activity else None,
            "pattern": self.detector.detect_emotional_patterns(stats.task_actions),
            "levelProgress": self.engine.level_progress(stats.total_points),
            "message": self.engine.motivational_message(stats),
        }

    def summary(self, user_name: Optional[str] = None) -> str:
        """Spoken overview of today's plan"""
        return schedule_summary(self.current_plan().schedule, user_name)
