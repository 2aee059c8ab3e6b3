import datetime

import pytest

from cpm_scheduler.core.models.dependency import Dependency
from cpm_scheduler.core.models.task import Task
from cpm_scheduler.core.models.team_member import TeamMember
from cpm_scheduler.core.models.time_off import EmployeeTimeOff
from cpm_scheduler.utils.date_utils import parse_date

# Воскресенье - четверг
SUN_THU = [0, 1, 2, 3, 4]


def d(value: str) -> datetime.date:
    return parse_date(value)


def make_task(task_id, duration=1, **kwargs) -> Task:
    return Task(id=task_id, name=f"Task {task_id}", duration=duration, **kwargs)


def make_dep(predecessor_id, successor_id, type='FS', lag_days=0) -> Dependency:
    return Dependency(predecessor_id, successor_id, type=type, lag_days=lag_days)


def make_member(member_id='user-1', work_days=None, work_hours_per_day=8) -> TeamMember:
    return TeamMember(id=member_id, name=f"Member {member_id}",
                      work_days=work_days if work_days is not None else list(SUN_THU),
                      work_hours_per_day=work_hours_per_day)


def make_time_off(member_id='user-1', start='2026-02-15', end='2026-02-17', status='approved') -> EmployeeTimeOff:
    return EmployeeTimeOff(team_member_id=member_id, start_date=d(start), end_date=d(end), status=status)


def by_id(tasks):
    return {task.id: task for task in tasks}


@pytest.fixture
def work_days():
    return list(SUN_THU)
