import json
from typing import Any, Dict, List, Optional, Union

DEFAULT_WORK_DAYS = [0, 1, 2, 3, 4]  # воскресенье - четверг


class TeamMember:
    """Модель данных участника команды (ресурса)"""

    def __init__(self,
                 id: Any = None,
                 name: str = "",
                 work_days: Union[List[int], str, None] = None,
                 work_hours_per_day: Optional[float] = 8,
                 employment_type: str = "full_time"):
        self.id = id
        self.name = name
        self.work_hours_per_day = work_hours_per_day
        self.employment_type = employment_type

        # Обрабатываем work_days (0 - воскресенье, 6 - суббота)
        if work_days is None:
            self.work_days = list(DEFAULT_WORK_DAYS)
        elif isinstance(work_days, str):
            try:
                self.work_days = [int(day) for day in json.loads(work_days)]
            except (ValueError, TypeError):
                self.work_days = [int(day) for day in work_days.split(',') if day.strip()]
        else:
            self.work_days = [int(day) for day in work_days]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TeamMember':
        """
        Создает объект участника команды из словаря

        Args:
            data: Словарь с данными участника

        Returns:
            TeamMember: Созданный объект участника
        """
        hours = data.get('work_hours_per_day', 8)
        if hours is not None and hours != '':
            hours = float(hours)
        else:
            hours = None

        return cls(
            id=data.get('id'),
            name=data.get('name', ''),
            work_days=data.get('work_days') or None,
            work_hours_per_day=hours,
            employment_type=data.get('employment_type') or 'full_time'
        )

    def to_dict(self) -> Dict[str, Any]:
        """Преобразует объект участника команды в словарь"""
        return {
            'id': self.id,
            'name': self.name,
            'work_days': json.dumps(self.work_days),
            'work_hours_per_day': self.work_hours_per_day,
            'employment_type': self.employment_type
        }
