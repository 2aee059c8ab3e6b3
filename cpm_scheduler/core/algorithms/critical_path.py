import datetime
import logging
from typing import Any, Collection, Dict, Iterable, List, Optional, Sequence

from cpm_scheduler.core.algorithms.calendar import WorkCalendar
from cpm_scheduler.core.algorithms.network_model import (
    CalendarResolver,
    build_dependency_maps,
    schedule_backward,
    schedule_forward,
    topological_sort,
)
from cpm_scheduler.core.models.dependency import Dependency
from cpm_scheduler.core.models.task import Task

logger = logging.getLogger(__name__)


def empty_result() -> Dict[str, Any]:
    """Результат расчета для проекта без задач"""
    return {
        'tasks': [],
        'critical_path': [],
        'project_end_date': None
    }


def calculate_slack_with(tasks: Sequence[Task], calendar_for: CalendarResolver) -> List[Task]:
    """
    Вычисляет резерв времени каждой задачи по ее собственному календарю

    Args:
        tasks: Задачи с заполненными ES и LS
        calendar_for: Функция, возвращающая календарь задачи

    Returns:
        list: Копии задач с заполненными slack и is_critical
    """
    result = []
    for task in tasks:
        new_task = task.copy()

        if task.es is not None and task.ls is not None:
            new_task.slack = calendar_for(task).working_days_between(task.es, task.ls)
            # Отрицательный резерв означает перегруженный ограничениями план
            new_task.is_critical = new_task.slack <= 0

        result.append(new_task)

    return result


def calculate_slack(tasks: Sequence[Task], work_days: Collection[int], holidays: Iterable) -> List[Task]:
    """
    Вычисляет резерв времени (LS - ES в рабочих днях) и отмечает критические задачи

    Args:
        tasks: Задачи с заполненными ES и LS
        work_days: Рабочие дни недели (0 - воскресенье)
        holidays: Праздничные дни проекта

    Returns:
        list: Копии задач с заполненными slack и is_critical
    """
    calendar = WorkCalendar(work_days, holidays).validate()
    return calculate_slack_with(tasks, lambda task: calendar)


def find_project_end(tasks: Iterable[Task]) -> Optional[datetime.date]:
    """Возвращает самую позднюю дату раннего окончания среди задач"""
    finish_dates = [task.ef for task in tasks if task.ef is not None]
    return max(finish_dates) if finish_dates else None


def identify_critical_tasks(tasks: Iterable[Task]) -> List[Any]:
    """Возвращает ID задач, отмеченных как критические, в порядке списка задач"""
    return [task.id for task in tasks if task.is_critical]


def order_critical_chain(tasks: Sequence[Task], dependencies: Sequence[Dependency]) -> List[List[Any]]:
    """
    Восстанавливает цепочки критического пути по связям между критическими задачами

    Args:
        tasks: Рассчитанные задачи
        dependencies: Список зависимостей

    Returns:
        list: Список цепочек (каждая - список ID от начала к концу)
    """
    critical_ids = set(identify_critical_tasks(tasks))
    if not critical_ids:
        return []

    ordered = [task.id for task in topological_sort(tasks, dependencies) if task.id in critical_ids]
    incoming, outgoing = build_dependency_maps(dependencies, [task.id for task in tasks])

    chains = []
    for task_id in ordered:
        # Цепочка начинается с критической задачи без критических предшественников
        if any(dep.predecessor_id in critical_ids for dep in incoming[task_id]):
            continue

        chain = [task_id]
        current = task_id
        while True:
            next_ids = [dep.successor_id for dep in outgoing[current] if dep.successor_id in critical_ids]
            if not next_ids:
                break
            current = min(next_ids, key=ordered.index)
            chain.append(current)
        chains.append(chain)

    return chains


def run_schedule(tasks: Sequence[Task],
                 dependencies: Sequence[Dependency],
                 project_start: datetime.date,
                 calendar_for: CalendarResolver) -> Dict[str, Any]:
    """
    Полный расчет: прямой проход, окончание проекта, обратный проход, резервы

    Args:
        tasks: Список задач
        dependencies: Список зависимостей
        project_start: Дата начала проекта
        calendar_for: Функция, возвращающая календарь задачи

    Returns:
        dict: {'tasks', 'critical_path', 'project_end_date'}
    """
    if not tasks:
        return empty_result()

    processed = schedule_forward(tasks, dependencies, project_start, calendar_for)

    project_end = find_project_end(processed)
    if project_end is None:
        return {
            'tasks': processed,
            'critical_path': [],
            'project_end_date': None
        }

    processed = schedule_backward(processed, dependencies, project_end, calendar_for)
    processed = calculate_slack_with(processed, calendar_for)

    critical_path = identify_critical_tasks(processed)
    logger.info(f"Расчет завершен: задач {len(processed)}, окончание проекта {project_end}, "
                f"критический путь {critical_path}")

    return {
        'tasks': processed,
        'critical_path': critical_path,
        'project_end_date': project_end
    }


def calculate_critical_path(tasks: Sequence[Task],
                            dependencies: Sequence[Dependency],
                            project_start: datetime.date,
                            work_days: Collection[int],
                            holidays: Iterable) -> Dict[str, Any]:
    """
    Вычисляет календарный план и критический путь проекта по методу CPM

    Args:
        tasks: Список задач
        dependencies: Список зависимостей
        project_start: Дата начала проекта
        work_days: Рабочие дни недели (0 - воскресенье)
        holidays: Праздничные дни проекта

    Returns:
        dict: {'tasks': задачи с датами, 'critical_path': ID критических задач,
               'project_end_date': дата окончания проекта или None}

    Raises:
        CircularDependencyError: Если в графе зависимостей есть цикл
        InvalidDependencyTypeError: Если встретился неизвестный тип зависимости
        InvalidCalendarError: Если в календаре нет рабочих дней
    """
    if not tasks:
        return empty_result()

    calendar = WorkCalendar(work_days, holidays).validate()
    logger.info(f"Расчет критического пути: {len(tasks)} задач, {len(dependencies)} зависимостей, "
                f"начало проекта {project_start}")

    return run_schedule(tasks, dependencies, project_start, lambda task: calendar)
