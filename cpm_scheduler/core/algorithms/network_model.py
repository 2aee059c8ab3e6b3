import datetime
import logging
from collections import deque
from typing import Callable, Collection, Dict, Iterable, List, Sequence, Tuple

from cpm_scheduler.core.algorithms.calendar import ONE_DAY, WorkCalendar
from cpm_scheduler.core.errors import CircularDependencyError, InvalidDependencyTypeError
from cpm_scheduler.core.models.dependency import Dependency, DependencyType
from cpm_scheduler.core.models.task import (
    CONSTRAINT_FINISH_NO_LATER_THAN,
    START_CONSTRAINTS,
    Task,
)

logger = logging.getLogger(__name__)

# Функция, возвращающая календарь, по которому считается конкретная задача
CalendarResolver = Callable[[Task], WorkCalendar]


def build_dependency_maps(dependencies: Iterable[Dependency],
                          task_ids: Collection) -> Tuple[Dict, Dict]:
    """
    Группирует зависимости по последователю и по предшественнику

    Зависимости, ссылающиеся на неизвестные задачи, пропускаются.

    Args:
        dependencies: Список зависимостей
        task_ids: Идентификаторы задач текущего расчета

    Returns:
        tuple: (входящие зависимости задачи, исходящие зависимости задачи)
    """
    incoming = {task_id: [] for task_id in task_ids}
    outgoing = {task_id: [] for task_id in task_ids}

    for dep in dependencies:
        if dep.predecessor_id not in incoming or dep.successor_id not in incoming:
            logger.warning(f"Пропущена зависимость {dep!r}: задача не найдена в расчете")
            continue

        incoming[dep.successor_id].append(dep)
        outgoing[dep.predecessor_id].append(dep)

    return incoming, outgoing


def topological_sort(tasks: Sequence[Task], dependencies: Iterable[Dependency]) -> List[Task]:
    """
    Выполняет топологическую сортировку задач (алгоритм Кана)

    Args:
        tasks: Список задач
        dependencies: Список зависимостей

    Returns:
        list: Задачи в порядке, где каждый предшественник стоит раньше последователя

    Raises:
        CircularDependencyError: Если в графе зависимостей есть цикл
    """
    task_map = {task.id: task for task in tasks}
    _, outgoing = build_dependency_maps(dependencies, task_map.keys())

    # Подсчитываем входящие ребра для каждой задачи
    in_degree = {task_id: 0 for task_id in task_map}
    for deps in outgoing.values():
        for dep in deps:
            in_degree[dep.successor_id] += 1

    # Очередь задач без невыполненных предшественников (в исходном порядке)
    queue = deque(task_id for task_id in task_map if in_degree[task_id] == 0)

    sorted_tasks = []
    while queue:
        task_id = queue.popleft()
        sorted_tasks.append(task_map[task_id])

        for dep in outgoing[task_id]:
            in_degree[dep.successor_id] -= 1
            if in_degree[dep.successor_id] == 0:
                queue.append(dep.successor_id)

    # Оставшиеся задачи ждут друг друга по кругу
    if len(sorted_tasks) < len(task_map):
        blocked = [task_id for task_id in task_map if in_degree[task_id] > 0]
        logger.warning(f"Обнаружен цикл в графе зависимостей! Задачи в цикле или за ним: {blocked}")
        raise CircularDependencyError(blocked)

    return sorted_tasks


# ---------------------------------------------------------------------------
# Ограничения по типам зависимостей
# ---------------------------------------------------------------------------

def _shift_later(anchor: datetime.date, lag: int, calendar: WorkCalendar) -> datetime.date:
    # Сдвиг якорной даты на lag рабочих дней (якорь уже занят событием предшественника)
    if lag > 0:
        return calendar.add_working_days(anchor, lag + 1)
    if lag < 0:
        return calendar.subtract_working_days(anchor, -lag + 1)
    return anchor


def _shift_earlier(anchor: datetime.date, lag: int, calendar: WorkCalendar) -> datetime.date:
    if lag > 0:
        return calendar.subtract_working_days(anchor, lag + 1)
    if lag < 0:
        return calendar.add_working_days(anchor, -lag + 1)
    return anchor


def _fs_candidate_es(dep: Dependency, pred: Task, duration: int, calendar: WorkCalendar) -> datetime.date:
    candidate = pred.ef + ONE_DAY
    if dep.lag_days > 0:
        candidate = calendar.add_working_days(candidate, dep.lag_days)
    elif dep.lag_days < 0:
        candidate = calendar.subtract_working_days(candidate, -dep.lag_days)
    return candidate


def _ss_candidate_es(dep: Dependency, pred: Task, duration: int, calendar: WorkCalendar) -> datetime.date:
    return _shift_later(pred.es, dep.lag_days, calendar)


def _ff_candidate_es(dep: Dependency, pred: Task, duration: int, calendar: WorkCalendar) -> datetime.date:
    # Дата предшественника может быть нерабочей в календаре последователя:
    # окончание сдвигается только вперед, иначе граница FF нарушится
    candidate_ef = calendar.next_working_day(_shift_later(pred.ef, dep.lag_days, calendar))
    return calendar.subtract_working_days(candidate_ef, duration)


def _sf_candidate_es(dep: Dependency, pred: Task, duration: int, calendar: WorkCalendar) -> datetime.date:
    candidate_ef = calendar.next_working_day(_shift_later(pred.es, dep.lag_days, calendar))
    return calendar.subtract_working_days(candidate_ef, duration)


def _fs_lead_candidate_lf(dep: Dependency, succ: Task, calendar: WorkCalendar) -> datetime.date:
    # Обращение прямого правила: ES = subtract(EF + 1, |lag|). Самое позднее
    # окончание, при котором последователь еще успевает начаться в свой LS
    latest = calendar.add_working_days(succ.ls, -dep.lag_days)
    if calendar.is_working_day(latest + ONE_DAY):
        return calendar.previous_working_day(latest - ONE_DAY)
    return latest


def _fs_candidate_lf(dep: Dependency, succ: Task, duration: int, calendar: WorkCalendar) -> datetime.date:
    if dep.lag_days < 0:
        return _fs_lead_candidate_lf(dep, succ, calendar)

    candidate = succ.ls - ONE_DAY
    if dep.lag_days > 0:
        candidate = calendar.subtract_working_days(candidate, dep.lag_days)
    return calendar.previous_working_day(candidate)


def _ss_candidate_lf(dep: Dependency, succ: Task, duration: int, calendar: WorkCalendar) -> datetime.date:
    candidate_ls = calendar.previous_working_day(_shift_earlier(succ.ls, dep.lag_days, calendar))
    return calendar.add_working_days(candidate_ls, duration)


def _ff_candidate_lf(dep: Dependency, succ: Task, duration: int, calendar: WorkCalendar) -> datetime.date:
    return _shift_earlier(succ.lf, dep.lag_days, calendar)


def _sf_candidate_lf(dep: Dependency, succ: Task, duration: int, calendar: WorkCalendar) -> datetime.date:
    candidate_ls = calendar.previous_working_day(_shift_earlier(succ.lf, dep.lag_days, calendar))
    return calendar.add_working_days(candidate_ls, duration)


# Тип зависимости -> (кандидат ES последователя, кандидат LF предшественника)
CONSTRAINT_RULES = {
    DependencyType.FS: (_fs_candidate_es, _fs_candidate_lf),
    DependencyType.SS: (_ss_candidate_es, _ss_candidate_lf),
    DependencyType.FF: (_ff_candidate_es, _ff_candidate_lf),
    DependencyType.SF: (_sf_candidate_es, _sf_candidate_lf),
}


def get_constraint_rules(dep: Dependency):
    """
    Возвращает пару функций расчета ограничений для типа зависимости

    Raises:
        InvalidDependencyTypeError: Если тип зависимости не поддерживается
    """
    rules = CONSTRAINT_RULES.get(dep.type)
    if rules is None:
        raise InvalidDependencyTypeError(dep.type)
    return rules


# ---------------------------------------------------------------------------
# Прямой и обратный проходы
# ---------------------------------------------------------------------------

def _fixed_calendar(work_days: Collection[int], holidays: Iterable) -> CalendarResolver:
    calendar = WorkCalendar(work_days, holidays).validate()
    return lambda task: calendar


def _restore_input_order(tasks: Sequence[Task], scheduled: Dict) -> List[Task]:
    return [scheduled[task.id] for task in tasks]


def _apply_manual_dates(task: Task, calendar: WorkCalendar) -> None:
    # Ручные задачи сохраняют свои даты, недостающие восстанавливаются из плана
    if task.es is None:
        task.es = task.start_date
    if task.ef is None:
        if task.es is not None:
            task.ef = calendar.add_working_days(task.es, task.working_duration)
        else:
            task.ef = task.end_date


def _apply_start_constraint(task: Task, es: datetime.date, calendar: WorkCalendar) -> datetime.date:
    if task.constraint_type not in START_CONSTRAINTS or task.constraint_date is None:
        return es

    constraint_start = calendar.next_working_day(task.constraint_date)
    # Зависимости имеют приоритет: берем более позднюю дату
    task.constraint_overridden = es > constraint_start
    if constraint_start > es:
        logger.debug(f"Задача {task.id}: начало сдвинуто ограничением {task.constraint_type} на {constraint_start}")
        return constraint_start
    return es


def schedule_forward(tasks: Sequence[Task],
                     dependencies: Sequence[Dependency],
                     project_start: datetime.date,
                     calendar_for: CalendarResolver) -> List[Task]:
    """
    Прямой проход: вычисляет ранние даты начала (ES) и окончания (EF)

    Args:
        tasks: Список задач
        dependencies: Список зависимостей
        project_start: Дата начала проекта
        calendar_for: Функция, возвращающая календарь задачи

    Returns:
        list: Копии задач (в исходном порядке) с заполненными ES/EF

    Raises:
        CircularDependencyError: Если в графе зависимостей есть цикл
        InvalidDependencyTypeError: Если встретился неизвестный тип зависимости
    """
    ordered = topological_sort(tasks, dependencies)
    scheduled = {task.id: task.copy() for task in ordered}
    incoming, _ = build_dependency_maps(dependencies, scheduled.keys())

    for original in ordered:
        task = scheduled[original.id]
        calendar = calendar_for(task)

        if task.is_manual:
            _apply_manual_dates(task, calendar)
            continue

        duration = task.working_duration
        start_floor = calendar.next_working_day(project_start)

        es = None
        for dep in incoming[task.id]:
            pred = scheduled[dep.predecessor_id]
            if pred.es is None or pred.ef is None:
                continue

            candidate_es, _ = get_constraint_rules(dep)
            candidate = candidate_es(dep, pred, duration, calendar)

            # Опережение не может увести задачу раньше начала проекта
            if candidate < start_floor:
                candidate = start_floor
            candidate = calendar.next_working_day(candidate)

            if es is None or candidate > es:
                es = candidate

        if es is None:
            es = start_floor

        task.es = _apply_start_constraint(task, es, calendar)
        task.ef = calendar.add_working_days(task.es, duration)

        if task.constraint_type == CONSTRAINT_FINISH_NO_LATER_THAN and task.constraint_date is not None:
            task.fnlt_violation = task.ef > task.constraint_date
            if task.fnlt_violation:
                logger.warning(f"Задача {task.id} завершается {task.ef}, позже ограничения {task.constraint_date}")

    return _restore_input_order(tasks, scheduled)


def schedule_backward(tasks: Sequence[Task],
                      dependencies: Sequence[Dependency],
                      project_end: datetime.date,
                      calendar_for: CalendarResolver) -> List[Task]:
    """
    Обратный проход: вычисляет поздние даты начала (LS) и окончания (LF)

    Args:
        tasks: Список задач с заполненными ES/EF
        dependencies: Список зависимостей
        project_end: Дата окончания проекта
        calendar_for: Функция, возвращающая календарь задачи

    Returns:
        list: Копии задач (в исходном порядке) с заполненными LS/LF
    """
    ordered = topological_sort(tasks, dependencies)
    scheduled = {task.id: task.copy() for task in ordered}
    _, outgoing = build_dependency_maps(dependencies, scheduled.keys())

    for original in reversed(ordered):
        task = scheduled[original.id]

        if task.is_manual:
            task.ls = task.es
            task.lf = task.ef
            continue

        calendar = calendar_for(task)
        duration = task.working_duration

        lf = None
        for dep in outgoing[task.id]:
            succ = scheduled[dep.successor_id]
            if succ.ls is None or succ.lf is None:
                continue

            _, candidate_lf = get_constraint_rules(dep)
            candidate = candidate_lf(dep, succ, duration, calendar)

            if lf is None or candidate < lf:
                lf = candidate

        # Ни одна задача не может заканчиваться позже проекта
        if lf is None or lf > project_end:
            lf = project_end

        task.lf = calendar.previous_working_day(lf)
        task.ls = calendar.subtract_working_days(task.lf, duration)

    return _restore_input_order(tasks, scheduled)


def forward_pass(tasks: Sequence[Task],
                 dependencies: Sequence[Dependency],
                 project_start: datetime.date,
                 work_days: Collection[int],
                 holidays: Iterable) -> List[Task]:
    """
    Прямой проход по единому календарю проекта

    Args:
        tasks: Список задач
        dependencies: Список зависимостей
        project_start: Дата начала проекта
        work_days: Рабочие дни недели (0 - воскресенье)
        holidays: Праздничные дни проекта

    Returns:
        list: Копии задач с заполненными ES/EF
    """
    return schedule_forward(tasks, dependencies, project_start, _fixed_calendar(work_days, holidays))


def backward_pass(tasks: Sequence[Task],
                  dependencies: Sequence[Dependency],
                  project_end: datetime.date,
                  work_days: Collection[int],
                  holidays: Iterable) -> List[Task]:
    """
    Обратный проход по единому календарю проекта

    Args:
        tasks: Список задач с заполненными ES/EF
        dependencies: Список зависимостей
        project_end: Дата окончания проекта
        work_days: Рабочие дни недели (0 - воскресенье)
        holidays: Праздничные дни проекта

    Returns:
        list: Копии задач с заполненными LS/LF
    """
    return schedule_backward(tasks, dependencies, project_end, _fixed_calendar(work_days, holidays))
