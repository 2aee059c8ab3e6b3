import datetime
import logging
import math
from collections import defaultdict
from typing import Any, Collection, Dict, Iterable, List, Optional, Sequence

from cpm_scheduler.core.algorithms.calendar import WorkCalendar
from cpm_scheduler.core.algorithms.critical_path import empty_result, run_schedule
from cpm_scheduler.core.errors import InvalidResourceCapacityError
from cpm_scheduler.core.models.dependency import Dependency
from cpm_scheduler.core.models.task import Task
from cpm_scheduler.core.models.team_member import TeamMember
from cpm_scheduler.core.models.time_off import EmployeeTimeOff

logger = logging.getLogger(__name__)


def collect_time_off_dates(time_off: Iterable[EmployeeTimeOff]) -> Dict[Any, List[datetime.date]]:
    """
    Разворачивает утвержденные отсутствия в списки дат по участникам

    Args:
        time_off: Список отсутствий (неутвержденные пропускаются)

    Returns:
        dict: ID участника -> список дат отсутствия
    """
    dates_by_member = defaultdict(list)
    for absence in time_off:
        if not absence.is_approved:
            continue
        dates_by_member[absence.team_member_id].extend(absence.dates())
    return dict(dates_by_member)


def build_resource_calendars(team_members: Iterable[TeamMember],
                             time_off: Iterable[EmployeeTimeOff],
                             project_calendar: WorkCalendar) -> Dict[Any, WorkCalendar]:
    """
    Строит индивидуальные календари участников команды

    Рабочая неделя участника пересекается с рабочей неделей проекта,
    к праздникам проекта добавляются все дни утвержденных отсутствий.

    Args:
        team_members: Участники команды
        time_off: Отсутствия участников
        project_calendar: Календарь проекта

    Returns:
        dict: ID участника -> календарь
    """
    absences = collect_time_off_dates(time_off)
    calendars = {}

    for member in team_members:
        work_days = member.work_days or project_calendar.work_days
        calendars[member.id] = project_calendar.restricted_to(work_days, absences.get(member.id, ()))
        logger.debug(f"Календарь участника {member.id}: {calendars[member.id]!r}")

    # Отсутствия участников, не переданных в списке команды, тоже учитываются
    for member_id, dates in absences.items():
        if member_id not in calendars:
            calendars[member_id] = project_calendar.restricted_to(project_calendar.work_days, dates)

    return calendars


def calculate_with_resources(tasks: Sequence[Task],
                             dependencies: Sequence[Dependency],
                             project_start: datetime.date,
                             work_days: Collection[int],
                             holidays: Iterable,
                             team_members: Sequence[TeamMember],
                             time_off: Sequence[EmployeeTimeOff]) -> Dict[str, Any]:
    """
    Вычисляет календарный план с учетом индивидуальных календарей исполнителей

    Задачи с исполнителем считаются по его рабочей неделе и с учетом его
    утвержденных отсутствий, остальные задачи - по календарю проекта.

    Args:
        tasks: Список задач
        dependencies: Список зависимостей
        project_start: Дата начала проекта
        work_days: Рабочие дни недели проекта (0 - воскресенье)
        holidays: Праздничные дни проекта
        team_members: Участники команды
        time_off: Отсутствия участников

    Returns:
        dict: {'tasks', 'critical_path', 'project_end_date'}

    Raises:
        CircularDependencyError: Если в графе зависимостей есть цикл
        InvalidCalendarError: Если у проекта или исполнителя не остается рабочих дней
    """
    if not tasks:
        return empty_result()

    project_calendar = WorkCalendar(work_days, holidays).validate()
    calendars = build_resource_calendars(team_members, time_off, project_calendar)

    # Проверяем календари только тех исполнителей, которые назначены на задачи
    for task in tasks:
        if task.assignee_id is None:
            continue
        if task.assignee_id in calendars:
            calendars[task.assignee_id].validate(owner=f"team member {task.assignee_id}")
        else:
            logger.warning(f"Исполнитель {task.assignee_id} задачи {task.id} не найден, "
                           f"используется календарь проекта")

    def calendar_for(task: Task) -> WorkCalendar:
        if task.assignee_id is None:
            return project_calendar
        return calendars.get(task.assignee_id, project_calendar)

    logger.info(f"Расчет с учетом ресурсов: {len(tasks)} задач, {len(calendars)} индивидуальных календарей")

    return run_schedule(tasks, dependencies, project_start, calendar_for)


def calculate_effective_duration(estimated_hours: float, member: TeamMember) -> int:
    """
    Переводит оценку в часах в длительность в целых рабочих днях

    Args:
        estimated_hours: Оценка трудоемкости в часах
        member: Исполнитель

    Returns:
        int: Количество рабочих дней (с округлением вверх)

    Raises:
        InvalidResourceCapacityError: Если дневная загрузка не задана или неположительна
    """
    capacity = member.work_hours_per_day
    if capacity is None or capacity <= 0:
        raise InvalidResourceCapacityError(member.id, capacity)

    return math.ceil(estimated_hours / capacity)


def calculate_duration_with_time_off(estimated_hours: float,
                                     start_date: datetime.date,
                                     member: TeamMember,
                                     time_off: Iterable[EmployeeTimeOff],
                                     work_days: Optional[Collection[int]] = None,
                                     holidays: Optional[Iterable] = None) -> Dict[str, Any]:
    """
    Вычисляет длительность задачи с учетом отсутствий исполнителя в период работы

    Args:
        estimated_hours: Оценка трудоемкости в часах
        start_date: Дата начала задачи
        member: Исполнитель
        time_off: Отсутствия исполнителя
        work_days: Рабочие дни недели проекта (по умолчанию воскресенье - четверг)
        holidays: Праздничные дни проекта

    Returns:
        dict: {'base_duration', 'effective_duration', 'time_off_days', 'affected_time_off'}
    """
    base_duration = calculate_effective_duration(estimated_hours, member)

    project_calendar = WorkCalendar(work_days if work_days is not None else (0, 1, 2, 3, 4), holidays)
    calendar = project_calendar.restricted_to(member.work_days or project_calendar.work_days)
    calendar.validate(owner=f"team member {member.id}")

    approved = [absence for absence in time_off
                if absence.is_approved and absence.team_member_id in (None, member.id)]

    if not approved:
        return {
            'base_duration': base_duration,
            'effective_duration': base_duration,
            'time_off_days': 0,
            'affected_time_off': []
        }

    initial_end = calendar.add_working_days(start_date, base_duration)

    affected = []
    time_off_days = 0
    for absence in approved:
        if not absence.overlaps(start_date, initial_end):
            continue

        affected.append(absence)
        # Считаем только рабочие дни отсутствия внутри периода задачи
        for day in absence.dates():
            if start_date <= day <= initial_end and calendar.is_working_day(day):
                time_off_days += 1

    return {
        'base_duration': base_duration,
        'effective_duration': base_duration + time_off_days,
        'time_off_days': time_off_days,
        'affected_time_off': affected
    }
