import copy
import datetime
from typing import Any, Dict, Optional

from cpm_scheduler.utils.date_utils import parse_date, to_iso

SCHEDULING_MODE_AUTO = 'auto'
SCHEDULING_MODE_MANUAL = 'manual'

# Ограничения на даты задачи
CONSTRAINT_ASAP = 'ASAP'
CONSTRAINT_MUST_START_ON = 'MSO'
CONSTRAINT_START_NO_EARLIER_THAN = 'SNET'
CONSTRAINT_FINISH_NO_LATER_THAN = 'FNLT'

START_CONSTRAINTS = (CONSTRAINT_MUST_START_ON, CONSTRAINT_START_NO_EARLIER_THAN)


class Task:
    """Модель данных задачи"""

    def __init__(self,
                 id: Any = None,
                 name: str = "",
                 duration: Optional[int] = 0,
                 estimated_hours: Optional[float] = None,
                 assignee_id: Any = None,
                 scheduling_mode: str = SCHEDULING_MODE_AUTO,
                 start_date: Optional[datetime.date] = None,
                 end_date: Optional[datetime.date] = None,
                 constraint_type: Optional[str] = None,
                 constraint_date: Optional[datetime.date] = None,
                 es: Optional[datetime.date] = None,
                 ef: Optional[datetime.date] = None,
                 ls: Optional[datetime.date] = None,
                 lf: Optional[datetime.date] = None,
                 slack: int = 0,
                 is_critical: bool = False):
        self.id = id
        self.name = name
        self.duration = duration
        self.estimated_hours = estimated_hours
        self.assignee_id = assignee_id
        self.scheduling_mode = scheduling_mode or SCHEDULING_MODE_AUTO
        self.start_date = start_date
        self.end_date = end_date
        self.constraint_type = constraint_type
        self.constraint_date = constraint_date

        # Расчетные поля, заполняются движком
        self.es = es
        self.ef = ef
        self.ls = ls
        self.lf = lf
        self.slack = slack
        self.is_critical = is_critical
        self.constraint_overridden = False
        self.fnlt_violation = False

    @property
    def is_manual(self) -> bool:
        """Задача с ручным планированием не пересчитывается движком"""
        return self.scheduling_mode == SCHEDULING_MODE_MANUAL

    @property
    def working_duration(self) -> int:
        """Длительность в рабочих днях (не заданная длительность считается нулевой)"""
        return self.duration or 0

    def copy(self) -> 'Task':
        """Возвращает независимую копию задачи"""
        return copy.copy(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Task':
        """
        Создает объект задачи из словаря

        Args:
            data: Словарь с данными задачи

        Returns:
            Task: Созданный объект задачи

        Raises:
            ValueError: Если дату или длительность не удалось разобрать
        """
        duration = data.get('duration')
        if duration is not None and duration != '':
            duration = int(duration)
        else:
            duration = None

        estimated_hours = data.get('estimated_hours')
        if estimated_hours is not None and estimated_hours != '':
            estimated_hours = float(estimated_hours)
        else:
            estimated_hours = None

        task = cls(
            id=data.get('id'),
            name=data.get('name', ''),
            duration=duration,
            estimated_hours=estimated_hours,
            assignee_id=data.get('assignee_id') or None,
            scheduling_mode=data.get('scheduling_mode') or SCHEDULING_MODE_AUTO,
            start_date=parse_date(data.get('start_date')),
            end_date=parse_date(data.get('end_date')),
            constraint_type=(data.get('constraint_type') or None),
            constraint_date=parse_date(data.get('constraint_date')),
            es=parse_date(data.get('es')),
            ef=parse_date(data.get('ef')),
            ls=parse_date(data.get('ls')),
            lf=parse_date(data.get('lf')),
            slack=int(data.get('slack') or 0),
            is_critical=bool(data.get('is_critical', False))
        )

        if task.constraint_type:
            task.constraint_type = task.constraint_type.strip().upper()

        return task

    def to_dict(self) -> Dict[str, Any]:
        """
        Преобразует объект задачи в словарь

        Returns:
            dict: Словарь с данными задачи (даты в формате YYYY-MM-DD)
        """
        return {
            'id': self.id,
            'name': self.name,
            'duration': self.duration,
            'estimated_hours': self.estimated_hours,
            'assignee_id': self.assignee_id,
            'scheduling_mode': self.scheduling_mode,
            'start_date': to_iso(self.start_date),
            'end_date': to_iso(self.end_date),
            'constraint_type': self.constraint_type,
            'constraint_date': to_iso(self.constraint_date),
            'es': to_iso(self.es),
            'ef': to_iso(self.ef),
            'ls': to_iso(self.ls),
            'lf': to_iso(self.lf),
            'slack': self.slack,
            'is_critical': self.is_critical,
            'constraint_overridden': self.constraint_overridden,
            'fnlt_violation': self.fnlt_violation
        }

    def __repr__(self) -> str:
        return f"Task(id={self.id!r}, duration={self.duration!r}, es={self.es}, ef={self.ef})"
