"""
Planner error types
"""


class PlannerError(Exception):
    """Base class for planner errors"""


class InvalidInputError(PlannerError, ValueError):
    """Malformed planning input (time window, energy, enum values...)"""


class InvalidTimeError(InvalidInputError):
    """A time string that is neither HH:MM nor h:mm AM/PM"""

    def __init__(self, value):
        super().__init__(f"Invalid time '{value}'")
        self.value = value


class TaskNotFoundError(PlannerError, LookupError):
    """No schedule item matches the given task id or item id"""

    def __init__(self, task_id: str):
        super().__init__(f"Task with ID '{task_id}' not found in schedule")
        self.task_id = task_id


class NoActivePlanError(PlannerError, LookupError):
    """No plan has been created for today"""

    def __init__(self):
        super().__init__("No plan found for today")


class NotReschedulableError(PlannerError):
    """Only work items can be moved by the smart rescheduler"""

    def __init__(self, item):
        super().__init__(f"Task '{item.title}' is not a work task and cannot be rescheduled")
        self.item = item


class ScheduleConflictError(PlannerError):
    """A manually chosen slot overlaps another work item"""

    def __init__(self, item):
        super().__init__(
            f"Time slot conflicts with '{item.title}' ({item.start_time} - {item.end_time})"
        )
        self.item = item


class GeneratorError(PlannerError):
    """The AI schedule generator failed or returned something unusable"""
