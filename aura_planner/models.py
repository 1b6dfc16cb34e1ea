"""
Data models for the planner.

Field names are snake_case; ``to_dict``/``from_dict`` use the camelCase keys
that the AI schedule generator, the session store and the HTTP API exchange.
"""
import time
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional

from .exceptions import InvalidInputError
from .logic.time_math import round_half_up, time_to_minutes


PRIORITIES = ("low", "medium", "high")
MOODS = ("energized", "balanced", "tired", "stressed")
ITEM_TYPES = ("work", "break", "wellness")
ACTION_TYPES = ("complete", "skip", "reschedule")

MIN_TASK_MINUTES = 15


@dataclass
class Task:
    """A unit of user-intended work"""
    id: str = ""
    name: str = ""
    priority: str = "medium"  # low, medium, high
    estimated_time: int = 30  # minutes
    completed: bool = False

    def __post_init__(self):
        if self.priority not in PRIORITIES:
            raise InvalidInputError(f"Unknown priority '{self.priority}'")
        self.estimated_time = max(MIN_TASK_MINUTES, round_half_up(self.estimated_time))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "priority": self.priority,
            "estimatedTime": self.estimated_time,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            priority=data.get("priority", "medium"),
            estimated_time=data.get("estimatedTime", data.get("estimated_time", 30)),
            completed=bool(data.get("completed", False)),
        )


@dataclass
class UserInput:
    """Planning request snapshot. Regeneration builds a new instance."""
    tasks: List[Task] = field(default_factory=list)
    start_time: str = "09:00"  # HH:MM
    end_time: str = "17:00"    # HH:MM
    mood: str = "balanced"     # energized, balanced, tired, stressed
    energy: int = 5            # 1-10

    def validate(self):
        """Fail fast on input that would produce a garbage schedule"""
        if not self.tasks:
            raise InvalidInputError("At least one task is required")
        if self.mood not in MOODS:
            raise InvalidInputError(f"Unknown mood '{self.mood}'")
        if not 1 <= self.energy <= 10:
            raise InvalidInputError(f"Energy must be between 1 and 10, got {self.energy}")
        if time_to_minutes(self.start_time) >= time_to_minutes(self.end_time):
            raise InvalidInputError(
                f"Start time {self.start_time} must be before end time {self.end_time}"
            )
        return self

    @property
    def available_minutes(self) -> int:
        return max(0, time_to_minutes(self.end_time) - time_to_minutes(self.start_time))

    def find_task(self, task_id: str) -> Optional[Task]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tasks": [t.to_dict() for t in self.tasks],
            "startTime": self.start_time,
            "endTime": self.end_time,
            "mood": self.mood,
            "energy": self.energy,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserInput":
        tasks = []
        for index, raw in enumerate(data.get("tasks") or []):
            if not raw.get("id"):
                raw = dict(raw, id=f"task-{index + 1}")
            tasks.append(Task.from_dict(raw))
        return cls(
            tasks=tasks,
            start_time=data.get("startTime", data.get("start_time", "09:00")),
            end_time=data.get("endTime", data.get("end_time", "17:00")),
            mood=data.get("mood", "balanced"),
            energy=int(data.get("energy", 5)),
        )


@dataclass
class ScheduleItem:
    """A scheduled time block"""
    id: str = ""
    task_id: str = ""  # empty for break and wellness items
    start_time: str = ""
    end_time: str = ""
    type: str = "work"  # work, break, wellness
    title: str = ""
    description: str = ""

    @property
    def key(self) -> str:
        """Identifier used by task actions: the task id, or the item id for breaks."""
        return self.task_id or self.id

    @property
    def is_work(self) -> bool:
        return self.type == "work"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "taskId": self.task_id,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "type": self.type,
            "title": self.title,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScheduleItem":
        return cls(
            id=str(data.get("id", "")),
            task_id=str(data.get("taskId", data.get("task_id", "")) or ""),
            start_time=data.get("startTime", data.get("start_time", "")),
            end_time=data.get("endTime", data.get("end_time", "")),
            type=data.get("type", "work"),
            title=data.get("title", ""),
            description=data.get("description", "") or "",
        )


def normalize_schedule(raw_items: List[Dict[str, Any]]) -> List[ScheduleItem]:
    """
    Fill in missing fields of generator output.

    Missing ids get a synthetic ``schedule-<ms>-<index>`` id, a missing or
    unknown type becomes "work" and a missing title becomes "Untitled Task".
    """
    stamp = int(time.time() * 1000)
    items = []
    for index, raw in enumerate(raw_items):
        if isinstance(raw, ScheduleItem):
            raw = raw.to_dict()
        item_type = raw.get("type") or "work"
        if item_type not in ITEM_TYPES:
            item_type = "work"
        items.append(ScheduleItem(
            id=str(raw.get("id") or f"schedule-{stamp}-{index}"),
            task_id=str(raw.get("taskId") or ""),
            start_time=raw.get("startTime") or "9:00 AM",
            end_time=raw.get("endTime") or "10:00 AM",
            type=item_type,
            title=raw.get("title") or "Untitled Task",
            description=raw.get("description") or "",
        ))
    return items


@dataclass
class BalanceScore:
    """Composite 0-100 balance metric. Always recomputed, never stored as truth."""
    overall: int = 0
    productivity: int = 0
    wellness: int = 0
    consistency: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BalanceScore":
        return cls(
            overall=int(data.get("overall", 0)),
            productivity=int(data.get("productivity", 0)),
            wellness=int(data.get("wellness", 0)),
            consistency=int(data.get("consistency", 0)),
        )


@dataclass
class TaskAction:
    """An entry of the append-only action log"""
    type: str = "complete"  # complete, skip, reschedule
    task_id: str = ""
    timestamp: datetime = field(default_factory=datetime.now)
    points: int = 0  # filled in by the gamification engine
    reason: Optional[str] = None  # "early" / "late" for completions

    def __post_init__(self):
        if self.type not in ACTION_TYPES:
            raise InvalidInputError(f"Unknown action type '{self.type}'")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "taskId": self.task_id,
            "timestamp": self.timestamp.isoformat(),
            "points": self.points,
            "reason": self.reason,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaskAction":
        timestamp = data.get("timestamp")
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)
        return cls(
            type=data.get("type", "complete"),
            task_id=data.get("taskId", ""),
            timestamp=timestamp or datetime.now(),
            points=int(data.get("points", 0)),
            reason=data.get("reason"),
        )


@dataclass
class Achievement:
    """Unlockable achievement"""
    id: str = ""
    title: str = ""
    description: str = ""
    icon: str = ""
    requirement_type: str = ""  # streak, points, completion_rate, wellness_balance
    target: int = 0
    unlocked_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "icon": self.icon,
            "requirements": {"type": self.requirement_type, "target": self.target},
            "unlockedAt": self.unlocked_at.isoformat() if self.unlocked_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Achievement":
        requirements = data.get("requirements") or {}
        unlocked_at = data.get("unlockedAt")
        return cls(
            id=data.get("id", ""),
            title=data.get("title", ""),
            description=data.get("description", ""),
            icon=data.get("icon", ""),
            requirement_type=requirements.get("type", ""),
            target=int(requirements.get("target", 0)),
            unlocked_at=datetime.fromisoformat(unlocked_at) if unlocked_at else None,
        )


@dataclass
class GameStats:
    """Accumulated gamification state for one planning session"""
    total_points: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    level: int = 1
    achievements: List[Achievement] = field(default_factory=list)
    task_actions: List[TaskAction] = field(default_factory=list)

    @property
    def achievement_ids(self) -> List[str]:
        return [a.id for a in self.achievements]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalPoints": self.total_points,
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
            "level": self.level,
            "achievements": [a.to_dict() for a in self.achievements],
            "taskActions": [a.to_dict() for a in self.task_actions],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameStats":
        return cls(
            total_points=int(data.get("totalPoints", 0)),
            current_streak=int(data.get("currentStreak", 0)),
            longest_streak=int(data.get("longestStreak", 0)),
            level=int(data.get("level", 1)),
            achievements=[Achievement.from_dict(a) for a in data.get("achievements") or []],
            task_actions=[TaskAction.from_dict(a) for a in data.get("taskActions") or []],
        )


@dataclass
class Suggestion:
    """Advisory message emitted after an action or by a wellness check"""
    id: str = ""
    message: str = ""
    type: str = "motivation"  # motivation, adjustment, wellness, productivity
    action_type: Optional[str] = None  # reschedule, break, split_task, swap_tasks
    action_data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": self.id, "message": self.message, "type": self.type}
        if self.action_type:
            data["actionSuggestion"] = {"type": self.action_type, "data": self.action_data}
        return data


@dataclass
class WellnessMetrics:
    """Output of the wellness detector"""
    stress_level: float = 0
    burnout_risk: float = 0
    consistency_score: float = 50
    work_life_balance: float = 50
    intervention_needed: bool = False
    intervention_type: Optional[str] = None  # rest, motivation, restructure, celebration

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stressLevel": self.stress_level,
            "burnoutRisk": self.burnout_risk,
            "consistencyScore": self.consistency_score,
            "workLifeBalance": self.work_life_balance,
            "interventionNeeded": self.intervention_needed,
            "interventionType": self.intervention_type,
        }


@dataclass
class DailyPlan:
    """A persisted day plan, keyed by (user_id, date)"""
    user_id: str = ""
    date: str = ""  # YYYY-MM-DD
    schedule: List[ScheduleItem] = field(default_factory=list)
    user_input: Optional[UserInput] = None
    balance_score: int = 0
    completed_tasks: List[str] = field(default_factory=list)
    skipped_tasks: List[str] = field(default_factory=list)
    rescheduled_tasks: List[str] = field(default_factory=list)
    wellness_activities: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userId": self.user_id,
            "date": self.date,
            "schedule": [item.to_dict() for item in self.schedule],
            "userInput": self.user_input.to_dict() if self.user_input else None,
            "balanceScore": self.balance_score,
            "completedTasks": list(self.completed_tasks),
            "skippedTasks": list(self.skipped_tasks),
            "rescheduledTasks": list(self.rescheduled_tasks),
            "wellnessActivities": self.wellness_activities,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DailyPlan":
        user_input = data.get("userInput")
        return cls(
            user_id=data.get("userId", ""),
            date=data.get("date", ""),
            schedule=[ScheduleItem.from_dict(i) for i in data.get("schedule") or []],
            user_input=UserInput.from_dict(user_input) if user_input else None,
            balance_score=int(data.get("balanceScore", 0)),
            completed_tasks=list(data.get("completedTasks") or []),
            skipped_tasks=list(data.get("skippedTasks") or []),
            rescheduled_tasks=list(data.get("rescheduledTasks") or []),
            wellness_activities=int(data.get("wellnessActivities", 0)),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )


@dataclass
class RuleSchedule:
    """Rule-based scheduler output, including tasks that did not fit"""
    items: List[ScheduleItem] = field(default_factory=list)
    dropped_task_ids: List[str] = field(default_factory=list)


@dataclass
class RescheduleResult:
    """Outcome of a single-task reschedule"""
    new_schedule: Optional[List[ScheduleItem]] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    reason: str = ""
    needs_manual_reschedule: bool = False
    task_title: Optional[str] = None
    task_duration: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.needs_manual_reschedule:
            return {
                "needsManualReschedule": True,
                "taskDetails": {"title": self.task_title, "duration": self.task_duration},
            }
        return {
            "newSchedule": [item.to_dict() for item in self.new_schedule or []],
            "rescheduledTo": {"startTime": self.start_time, "endTime": self.end_time},
            "reason": self.reason,
        }


@dataclass
class ActionOutcome:
    """Result of processing one task action through the gamification engine"""
    updated_stats: GameStats
    points_earned: int = 0
    new_achievements: List[Achievement] = field(default_factory=list)
    suggestion: Optional[Suggestion] = None
