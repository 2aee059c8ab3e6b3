from enum import Enum
from typing import Any, Dict

from cpm_scheduler.core.errors import InvalidDependencyTypeError


class DependencyType(Enum):
    """Тип связи между событиями предшественника и последователя"""

    FS = 'FS'  # окончание -> начало
    SS = 'SS'  # начало -> начало
    FF = 'FF'  # окончание -> окончание
    SF = 'SF'  # начало -> окончание

    @classmethod
    def parse(cls, value: Any) -> 'DependencyType':
        """
        Преобразует строковый тег в тип зависимости

        Args:
            value: Тег ('FS', 'ss', ...) или уже готовый DependencyType

        Returns:
            DependencyType: Тип зависимости

        Raises:
            InvalidDependencyTypeError: Если тег не распознан
        """
        if isinstance(value, cls):
            return value

        if value is None or value == '':
            return cls.FS

        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise InvalidDependencyTypeError(value) from None


class Dependency:
    """Модель данных зависимости между двумя задачами"""

    def __init__(self,
                 predecessor_id: Any,
                 successor_id: Any,
                 type: Any = DependencyType.FS,
                 lag_days: int = 0):
        self.predecessor_id = predecessor_id
        self.successor_id = successor_id
        self.type = DependencyType.parse(type)
        self.lag_days = int(lag_days or 0)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Dependency':
        """
        Создает объект зависимости из словаря

        Args:
            data: Словарь с данными зависимости

        Returns:
            Dependency: Созданный объект зависимости
        """
        return cls(
            predecessor_id=data.get('predecessor_id'),
            successor_id=data.get('successor_id'),
            type=data.get('type', 'FS'),
            lag_days=data.get('lag_days', 0)
        )

    def to_dict(self) -> Dict[str, Any]:
        """Преобразует объект зависимости в словарь"""
        return {
            'predecessor_id': self.predecessor_id,
            'successor_id': self.successor_id,
            'type': self.type.value,
            'lag_days': self.lag_days
        }

    def __repr__(self) -> str:
        return f"Dependency({self.predecessor_id!r} -{self.type.value}({self.lag_days:+d})-> {self.successor_id!r})"
