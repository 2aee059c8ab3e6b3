import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional

from cpm_scheduler.core.models.task import Task
from cpm_scheduler.utils.date_utils import format_date

logger = logging.getLogger(__name__)


def _task_title(task: Task) -> str:
    return task.name or f"Задача {task.id}"


def _format_task_line(task: Task) -> str:
    return (f"{str(task.id):<10} {_task_title(task)[:30]:<30} {task.working_duration:>5} "
            f"{format_date(task.es):>11} {format_date(task.ef):>11} "
            f"{format_date(task.ls):>11} {format_date(task.lf):>11} {task.slack:>6}"
            f"{'  *' if task.is_critical else ''}")


def generate_schedule_report(project: Dict[str, Any],
                             result: Dict[str, Any],
                             team_members: Optional[List[Any]] = None) -> str:
    """
    Генерирует текстовый отчет по результатам расчета календарного плана

    Args:
        project: Информация о проекте
        result: Результаты расчета (ScheduleService.calculate_schedule)
        team_members: Участники команды (опционально, для раздела распределения задач)

    Returns:
        str: Текстовый отчет
    """
    tasks: List[Task] = result.get('tasks', [])
    task_dict = {task.id: task for task in tasks}
    critical_chains = result.get('critical_chains') or []
    project_end = result.get('project_end_date')

    # Начинаем формировать отчет
    report = "📊 ОТЧЕТ ПО КАЛЕНДАРНОМУ ПЛАНУ\n"
    report += "=============================================\n\n"

    # Общая информация о проекте
    report += "📋 ОБЩАЯ ИНФОРМАЦИЯ О ПРОЕКТЕ\n"
    report += f"Название проекта: '{project.get('name', 'Неизвестный проект')}'\n"
    report += f"Дата начала: {format_date(min((t.es for t in tasks if t.es), default=None))}\n"
    report += f"Дата завершения: {format_date(project_end)}\n"
    report += f"Длительность проекта: {result.get('workday_duration', 0)} рабочих дней\n"
    report += f"Общее количество задач: {len(tasks)}\n\n"

    # Критический путь
    report += "🚩 КРИТИЧЕСКИЙ ПУТЬ\n"
    if critical_chains:
        for chain in critical_chains:
            report += " → ".join(_task_title(task_dict[task_id]) for task_id in chain if task_id in task_dict)
            report += "\n"
        report += "\n"
    elif result.get('critical_path'):
        report += ", ".join(str(task_id) for task_id in result['critical_path']) + "\n\n"
    else:
        report += "Критический путь не определен.\n\n"

    # Таблица дат
    report += "🗓 ДАТЫ ЗАДАЧ (* - критическая задача)\n"
    report += (f"{'ID':<10} {'Задача':<30} {'Дн.':>5} {'ES':>11} {'EF':>11} "
               f"{'LS':>11} {'LF':>11} {'Резерв':>6}\n")
    for task in tasks:
        report += _format_task_line(task) + "\n"
    report += "\n"

    # Нарушения ограничений
    warnings = []
    for task in tasks:
        if task.fnlt_violation:
            warnings.append(f"• {_task_title(task)}: окончание {format_date(task.ef)} позже "
                            f"ограничения {format_date(task.constraint_date)}")
        if task.constraint_overridden:
            warnings.append(f"• {_task_title(task)}: зависимости сдвинули начало позже "
                            f"ограничения {task.constraint_type} {format_date(task.constraint_date)}")
    if warnings:
        report += "⚠️ ОГРАНИЧЕНИЯ\n" + "\n".join(warnings) + "\n\n"

    # Распределение задач по исполнителям
    if team_members:
        names = {member.id: member.name or str(member.id) for member in team_members}
        by_assignee = defaultdict(list)
        for task in tasks:
            if task.assignee_id is not None:
                by_assignee[task.assignee_id].append(task)

        if by_assignee:
            report += "👥 РАСПРЕДЕЛЕНИЕ ЗАДАЧ\n"
            for assignee_id, assigned in by_assignee.items():
                report += f"{names.get(assignee_id, f'Сотрудник {assignee_id}')}:\n"
                for task in sorted(assigned, key=lambda t: (t.es is None, t.es)):
                    report += (f"  • {_task_title(task)} ({task.working_duration} дн.): "
                               f"{format_date(task.es)} - {format_date(task.ef)}\n")
                total_load = sum(task.working_duration for task in assigned)
                report += f"  Общая нагрузка: {total_load} дней\n\n"

    report += "============================================="
    return report
