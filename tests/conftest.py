import random
from datetime import datetime

import pytest

from aura_planner.database import Database
from aura_planner.models import ScheduleItem, Task, UserInput
from aura_planner.session import UserSessionManager


FIXED_NOW = datetime(2024, 5, 6, 10, 0, 0)


def make_item(item_id, start, end, type="work", task_id=None, title=None, description=""):
    if task_id is None:
        task_id = item_id if type == "work" else ""
    return ScheduleItem(
        id=item_id,
        task_id=task_id,
        start_time=start,
        end_time=end,
        type=type,
        title=title or item_id,
        description=description,
    )


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def report_task():
    return Task(id="t1", name="Write report", priority="high", estimated_time=60)


@pytest.fixture
def user_input(report_task):
    return UserInput(
        tasks=[report_task],
        start_time="09:00",
        end_time="11:00",
        mood="balanced",
        energy=7,
    )


@pytest.fixture
def busy_input():
    return UserInput(
        tasks=[
            Task(id="t1", name="Write report", priority="high", estimated_time=60),
            Task(id="t2", name="Review code", priority="medium", estimated_time=45),
            Task(id="t3", name="Email inbox", priority="low", estimated_time=30),
        ],
        start_time="09:00",
        end_time="17:00",
        mood="balanced",
        energy=7,
    )


@pytest.fixture
def db(tmp_path):
    return Database(str(tmp_path / "planner.db"))


@pytest.fixture
def session(db):
    return UserSessionManager(db, user_id="user-1", today=lambda: "2024-05-06")


@pytest.fixture
def item_factory():
    return make_item
