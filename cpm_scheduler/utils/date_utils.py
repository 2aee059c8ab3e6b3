import datetime
from typing import Iterator, List, Optional, Union

DateLike = Union[datetime.date, datetime.datetime, str, None]


def validate_date_format(date_str: str) -> bool:
    """
    Проверяет, что строка соответствует формату YYYY-MM-DD

    Args:
        date_str: Строка с датой

    Returns:
        bool: True, если формат корректный, иначе False
    """
    try:
        datetime.datetime.strptime(date_str, '%Y-%m-%d')
        return True
    except (ValueError, TypeError):
        return False


def parse_date(value: DateLike) -> Optional[datetime.date]:
    """
    Приводит значение к календарной дате (без времени суток)

    Args:
        value: Дата, дата-время или строка в формате YYYY-MM-DD

    Returns:
        Optional[datetime.date]: Дата или None для пустого значения

    Raises:
        ValueError: Если строку не удалось разобрать
    """
    if value is None or value == '':
        return None

    if isinstance(value, datetime.datetime):
        return value.date()

    if isinstance(value, datetime.date):
        return value

    # Допускаем полную ISO-строку с временем, берем только дату
    return datetime.datetime.strptime(str(value).strip()[:10], '%Y-%m-%d').date()


def to_iso(value: Optional[datetime.date]) -> Optional[str]:
    """Преобразует дату в строку YYYY-MM-DD (None остается None)"""
    if value is None:
        return None
    return value.strftime('%Y-%m-%d')


def format_date(value: Optional[datetime.date]) -> str:
    """
    Форматирует дату для отображения

    Args:
        value: Дата

    Returns:
        str: Отформатированная дата (DD.MM.YYYY)
    """
    if not value:
        return "Не указана"

    return value.strftime('%d.%m.%Y')


def date_range(start: datetime.date, end: datetime.date) -> Iterator[datetime.date]:
    """
    Перебирает все календарные дни интервала, включая обе границы

    Args:
        start: Первая дата
        end: Последняя дата

    Yields:
        datetime.date: Очередная дата
    """
    current = start
    while current <= end:
        yield current
        current += datetime.timedelta(days=1)


def parse_date_list(value: str) -> List[datetime.date]:
    """
    Разбирает список дат, разделенных запятыми

    Args:
        value: Строка вида "2026-03-01,2026-03-02"

    Returns:
        List[datetime.date]: Список дат (некорректные элементы пропускаются)
    """
    dates = []
    for item in (value or '').split(','):
        item = item.strip()
        if item and validate_date_format(item):
            dates.append(parse_date(item))
    return dates
