import datetime
from typing import Any, Dict, List

from cpm_scheduler.utils.date_utils import date_range, parse_date, to_iso

STATUS_APPROVED = 'approved'


class EmployeeTimeOff:
    """Отсутствие участника команды (отпуск, больничный) на интервале дат включительно"""

    def __init__(self,
                 team_member_id: Any,
                 start_date: datetime.date,
                 end_date: datetime.date,
                 status: str = STATUS_APPROVED,
                 type: str = "vacation"):
        self.team_member_id = team_member_id
        self.start_date = start_date
        self.end_date = end_date
        self.status = status
        self.type = type

    @property
    def is_approved(self) -> bool:
        """На расчет влияют только утвержденные отсутствия"""
        return self.status == STATUS_APPROVED

    def dates(self) -> List[datetime.date]:
        """Возвращает все календарные дни отсутствия"""
        return list(date_range(self.start_date, self.end_date))

    def overlaps(self, start: datetime.date, end: datetime.date) -> bool:
        """Проверяет пересечение отсутствия с интервалом [start, end]"""
        return self.end_date >= start and self.start_date <= end

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EmployeeTimeOff':
        """
        Создает объект отсутствия из словаря

        Args:
            data: Словарь с данными отсутствия

        Returns:
            EmployeeTimeOff: Созданный объект
        """
        return cls(
            team_member_id=data.get('team_member_id'),
            start_date=parse_date(data.get('start_date')),
            end_date=parse_date(data.get('end_date')),
            status=data.get('status') or STATUS_APPROVED,
            type=data.get('type') or 'vacation'
        )

    def to_dict(self) -> Dict[str, Any]:
        """Преобразует объект отсутствия в словарь"""
        return {
            'team_member_id': self.team_member_id,
            'start_date': to_iso(self.start_date),
            'end_date': to_iso(self.end_date),
            'status': self.status,
            'type': self.type
        }
