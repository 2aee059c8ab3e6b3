import datetime
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from cpm_scheduler.config import DEFAULT_WORK_DAYS, DEFAULT_WORK_HOURS_PER_DAY
from cpm_scheduler.core.algorithms.calendar import WorkCalendar
from cpm_scheduler.core.algorithms.critical_path import calculate_critical_path, order_critical_chain
from cpm_scheduler.core.algorithms.resource_allocation import (
    calculate_duration_with_time_off,
    calculate_effective_duration,
    calculate_with_resources,
)
from cpm_scheduler.core.errors import SchedulingError
from cpm_scheduler.core.models.dependency import Dependency
from cpm_scheduler.core.models.task import Task
from cpm_scheduler.core.models.team_member import TeamMember
from cpm_scheduler.core.models.time_off import EmployeeTimeOff
from cpm_scheduler.utils.date_utils import parse_date

logger = logging.getLogger(__name__)


def _as_tasks(items: Iterable[Union[Task, Dict[str, Any]]]) -> List[Task]:
    return [item if isinstance(item, Task) else Task.from_dict(item) for item in items]


def _as_dependencies(items: Iterable[Union[Dependency, Dict[str, Any]]]) -> List[Dependency]:
    return [item if isinstance(item, Dependency) else Dependency.from_dict(item) for item in items]


def _as_members(items: Iterable[Union[TeamMember, Dict[str, Any]]]) -> List[TeamMember]:
    return [item if isinstance(item, TeamMember) else TeamMember.from_dict(item) for item in items]


def _as_time_off(items: Iterable[Union[EmployeeTimeOff, Dict[str, Any]]]) -> List[EmployeeTimeOff]:
    return [item if isinstance(item, EmployeeTimeOff) else EmployeeTimeOff.from_dict(item) for item in items]


class ScheduleService:
    """Сервис для календарного планирования"""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Инициализирует сервис календарного планирования

        Args:
            config: Настройки из load_config() (рабочая неделя, праздники, загрузка по умолчанию)
        """
        config = config or {}
        self.work_days = list(config.get('WORK_DAYS') or DEFAULT_WORK_DAYS)
        self.holidays = list(config.get('HOLIDAYS') or [])
        self.default_work_hours = config.get('DEFAULT_WORK_HOURS_PER_DAY') or DEFAULT_WORK_HOURS_PER_DAY

    def resolve_durations(self, tasks: Sequence[Task], team_members: Sequence[TeamMember]) -> List[Task]:
        """
        Заполняет длительность задач, для которых задана только оценка в часах

        Длительность переводится по дневной загрузке исполнителя, а для задач
        без исполнителя - по загрузке по умолчанию.

        Args:
            tasks: Список задач
            team_members: Участники команды

        Returns:
            list: Копии задач с заполненной длительностью
        """
        members = {member.id: member for member in team_members}
        default_member = TeamMember(id=None, work_hours_per_day=self.default_work_hours)

        resolved = []
        for task in tasks:
            task = task.copy()
            if task.duration is None and task.estimated_hours is not None:
                member = members.get(task.assignee_id, default_member)
                task.duration = calculate_effective_duration(task.estimated_hours, member)
                logger.debug(f"Задача {task.id}: {task.estimated_hours} ч -> {task.duration} дн.")
            resolved.append(task)

        return resolved

    def calculate_schedule(self,
                           project: Dict[str, Any],
                           tasks: Iterable[Union[Task, Dict[str, Any]]],
                           dependencies: Iterable[Union[Dependency, Dict[str, Any]]],
                           team_members: Optional[Iterable[Union[TeamMember, Dict[str, Any]]]] = None,
                           time_off: Optional[Iterable[Union[EmployeeTimeOff, Dict[str, Any]]]] = None
                           ) -> Dict[str, Any]:
        """
        Рассчитывает календарный план проекта

        Args:
            project: Информация о проекте ('name', 'start_date')
            tasks: Список задач (модели или словари)
            dependencies: Список зависимостей (модели или словари)
            team_members: Участники команды (если заданы, расчет идет с учетом ресурсов)
            time_off: Отсутствия участников

        Returns:
            dict: Результаты расчета ('tasks', 'critical_path', 'project_end_date',
                  'critical_chains', 'workday_duration')

        Raises:
            SchedulingError: Если граф зависимостей или календари некорректны
            ValueError: Если не указана дата начала проекта
        """
        logger.info(f"Начинаем расчет календарного плана для проекта '{project.get('name', '')}'...")

        project_start = parse_date(project.get('start_date'))
        if project_start is None:
            raise ValueError(f"Не указана дата начала проекта '{project.get('name', '')}'")
        task_models = _as_tasks(tasks)
        dependency_models = _as_dependencies(dependencies)
        members = _as_members(team_members or [])
        absences = _as_time_off(time_off or [])

        try:
            task_models = self.resolve_durations(task_models, members)

            if members or absences:
                result = calculate_with_resources(
                    task_models, dependency_models, project_start,
                    self.work_days, self.holidays, members, absences
                )
            else:
                result = calculate_critical_path(
                    task_models, dependency_models, project_start, self.work_days, self.holidays
                )
        except SchedulingError as e:
            logger.error(f"Ошибка расчета календарного плана: {e}")
            raise

        result['critical_chains'] = order_critical_chain(result['tasks'], dependency_models)
        result['workday_duration'] = self._workday_duration(project_start, result['project_end_date'])

        logger.info(f"Расчет календарного плана успешен. Окончание проекта: {result['project_end_date']}")
        return result

    def estimate_duration(self,
                          estimated_hours: float,
                          start_date: datetime.date,
                          member: Union[TeamMember, Dict[str, Any]],
                          time_off: Iterable[Union[EmployeeTimeOff, Dict[str, Any]]] = ()) -> Dict[str, Any]:
        """
        Оценивает длительность задачи исполнителя с учетом его отсутствий

        Args:
            estimated_hours: Оценка трудоемкости в часах
            start_date: Планируемая дата начала
            member: Исполнитель
            time_off: Отсутствия исполнителя

        Returns:
            dict: {'base_duration', 'effective_duration', 'time_off_days', 'affected_time_off'}
        """
        if not isinstance(member, TeamMember):
            member = TeamMember.from_dict(member)

        own_time_off = [absence for absence in _as_time_off(time_off) if absence.team_member_id == member.id]
        return calculate_duration_with_time_off(
            estimated_hours, start_date, member, own_time_off, self.work_days, self.holidays
        )

    def _workday_duration(self, project_start: datetime.date, project_end: Optional[datetime.date]) -> int:
        # Длительность проекта в рабочих днях по календарю проекта, включая день начала
        if project_end is None:
            return 0

        calendar = WorkCalendar(self.work_days, self.holidays)
        first_day = calendar.next_working_day(project_start)
        if project_end < first_day:
            return 0
        return calendar.working_days_between(first_day, project_end) + 1
