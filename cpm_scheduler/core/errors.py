from typing import Iterable, List, Optional


class SchedulingError(Exception):
    """Базовое исключение расчетного движка календарного планирования"""


class CircularDependencyError(SchedulingError):
    """Граф зависимостей содержит цикл"""

    def __init__(self, task_ids: Optional[Iterable] = None):
        self.task_ids: List = list(task_ids or [])
        message = "Circular dependency detected"
        if self.task_ids:
            message += f": {', '.join(str(task_id) for task_id in self.task_ids)}"
        super().__init__(message)


class InvalidDependencyTypeError(SchedulingError):
    """Неизвестный тип зависимости (ожидается FS, SS, FF или SF)"""

    def __init__(self, dependency_type):
        self.dependency_type = dependency_type
        super().__init__(f"Invalid dependency type: {dependency_type!r}")


class InvalidResourceCapacityError(SchedulingError):
    """У сотрудника не задана или неположительна дневная загрузка в часах"""

    def __init__(self, member_id, capacity):
        self.member_id = member_id
        self.capacity = capacity
        super().__init__(f"Invalid work hours per day for team member {member_id}: {capacity!r}")


class InvalidCalendarError(SchedulingError):
    """Календарь не содержит ни одного рабочего дня недели"""

    def __init__(self, owner: str = "project"):
        self.owner = owner
        super().__init__(f"Calendar for {owner} has no working days")
