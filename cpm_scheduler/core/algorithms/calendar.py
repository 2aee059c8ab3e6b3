import datetime
from typing import Collection, FrozenSet, Iterable, Optional

from cpm_scheduler.core.errors import InvalidCalendarError
from cpm_scheduler.utils.date_utils import parse_date

ONE_DAY = datetime.timedelta(days=1)


def weekday_index(day: datetime.date) -> int:
    """Номер дня недели: 0 - воскресенье, 6 - суббота"""
    return day.isoweekday() % 7


def _holiday_set(holidays: Optional[Iterable]) -> FrozenSet[datetime.date]:
    # Праздники сравниваются по календарной дате, время суток отбрасывается
    return frozenset(parse_date(holiday) for holiday in (holidays or ()))


# Внутренние функции принимают уже нормализованный набор праздников

def _is_working(day: datetime.date, work_days: Collection[int], holidays: FrozenSet[datetime.date]) -> bool:
    return weekday_index(day) in work_days and parse_date(day) not in holidays


def _next_working(day: datetime.date, work_days: Collection[int], holidays: FrozenSet[datetime.date]) -> datetime.date:
    current = day
    while not _is_working(current, work_days, holidays):
        current += ONE_DAY
    return current


def _previous_working(day: datetime.date, work_days: Collection[int],
                      holidays: FrozenSet[datetime.date]) -> datetime.date:
    current = day
    while not _is_working(current, work_days, holidays):
        current -= ONE_DAY
    return current


def _add(start: datetime.date, days: int, work_days: Collection[int],
         holidays: FrozenSet[datetime.date]) -> datetime.date:
    if days <= 0:
        return start

    current = _next_working(start, work_days, holidays)
    counted = 1
    while counted < days:
        current += ONE_DAY
        if _is_working(current, work_days, holidays):
            counted += 1
    return current


def _subtract(end: datetime.date, days: int, work_days: Collection[int],
              holidays: FrozenSet[datetime.date]) -> datetime.date:
    if days <= 0:
        return end

    current = _previous_working(end, work_days, holidays)
    counted = 1
    while counted < days:
        current -= ONE_DAY
        if _is_working(current, work_days, holidays):
            counted += 1
    return current


def _between(start: datetime.date, end: datetime.date, work_days: Collection[int],
             holidays: FrozenSet[datetime.date]) -> int:
    if start == end:
        return 0

    step = ONE_DAY if end > start else -ONE_DAY
    count = 0
    current = start
    while current != end:
        current += step
        if _is_working(current, work_days, holidays):
            count += 1
    return count if end > start else -count


def is_working_day(day: datetime.date,
                   work_days: Collection[int],
                   holidays: Iterable) -> bool:
    """
    Проверяет, является ли дата рабочим днем

    Args:
        day: Проверяемая дата
        work_days: Рабочие дни недели (0 - воскресенье, 6 - суббота)
        holidays: Нерабочие даты (праздники)

    Returns:
        bool: True, если день недели рабочий и дата не праздник
    """
    return _is_working(day, work_days, _holiday_set(holidays))


def next_working_day(day: datetime.date, work_days: Collection[int], holidays: Iterable) -> datetime.date:
    """Возвращает первый рабочий день начиная с указанной даты (включительно)"""
    return _next_working(day, work_days, _holiday_set(holidays))


def previous_working_day(day: datetime.date, work_days: Collection[int], holidays: Iterable) -> datetime.date:
    """Возвращает последний рабочий день не позже указанной даты (включительно)"""
    return _previous_working(day, work_days, _holiday_set(holidays))


def add_working_days(start: datetime.date,
                     days: int,
                     work_days: Collection[int],
                     holidays: Iterable) -> datetime.date:
    """
    Отсчитывает указанное количество рабочих дней вперед

    Первый рабочий день (сама дата начала или ближайший следующий рабочий день)
    считается первым днем, поэтому длительность 1 заканчивается в день начала.

    Args:
        start: Дата начала
        days: Количество рабочих дней
        work_days: Рабочие дни недели
        holidays: Нерабочие даты

    Returns:
        datetime.date: Последний рабочий день интервала
    """
    return _add(start, days, work_days, _holiday_set(holidays))


def subtract_working_days(end: datetime.date,
                          days: int,
                          work_days: Collection[int],
                          holidays: Iterable) -> datetime.date:
    """
    Отсчитывает указанное количество рабочих дней назад

    Симметрична add_working_days: дата окончания (или ближайший предыдущий
    рабочий день) считается первым днем.

    Args:
        end: Дата окончания
        days: Количество рабочих дней
        work_days: Рабочие дни недели
        holidays: Нерабочие даты

    Returns:
        datetime.date: Первый рабочий день интервала
    """
    return _subtract(end, days, work_days, _holiday_set(holidays))


def working_days_between(start: datetime.date,
                         end: datetime.date,
                         work_days: Collection[int],
                         holidays: Iterable) -> int:
    """
    Считает рабочие дни в интервале (start, end]

    Args:
        start: Начальная дата (не учитывается)
        end: Конечная дата (учитывается)
        work_days: Рабочие дни недели
        holidays: Нерабочие даты

    Returns:
        int: Количество рабочих дней; отрицательное, если end раньше start
    """
    return _between(start, end, work_days, _holiday_set(holidays))


class WorkCalendar:
    """
    Рабочий календарь: набор рабочих дней недели и нерабочих дат

    Неизменяемое значение, которое передается в функции календарной
    арифметики. Для ресурса строится отдельный экземпляр с его рабочей
    неделей и датами отсутствия.
    """

    __slots__ = ('work_days', 'holidays')

    def __init__(self, work_days: Iterable[int], holidays: Optional[Iterable] = None):
        object.__setattr__(self, 'work_days', frozenset(int(day) for day in work_days))
        object.__setattr__(self, 'holidays', _holiday_set(holidays))

    def __setattr__(self, name, value):
        raise AttributeError("WorkCalendar is immutable")

    def __eq__(self, other) -> bool:
        if not isinstance(other, WorkCalendar):
            return NotImplemented
        return self.work_days == other.work_days and self.holidays == other.holidays

    def __hash__(self) -> int:
        return hash((self.work_days, self.holidays))

    def __repr__(self) -> str:
        return f"WorkCalendar(work_days={sorted(self.work_days)}, holidays={len(self.holidays)})"

    def validate(self, owner: str = "project") -> 'WorkCalendar':
        """
        Проверяет, что в календаре есть хотя бы один рабочий день недели

        Без рабочих дней поиск ближайшего рабочего дня никогда не завершится.

        Raises:
            InvalidCalendarError: Если набор рабочих дней пуст
        """
        if not self.work_days.intersection(range(7)):
            raise InvalidCalendarError(owner)
        return self

    def restricted_to(self, work_days: Iterable[int], extra_holidays: Iterable = ()) -> 'WorkCalendar':
        """
        Строит календарь ресурса: пересечение рабочих недель и объединение нерабочих дат

        Args:
            work_days: Рабочие дни недели ресурса
            extra_holidays: Дополнительные нерабочие даты (отсутствия)

        Returns:
            WorkCalendar: Новый календарь
        """
        return WorkCalendar(
            self.work_days.intersection(work_days),
            self.holidays.union(_holiday_set(extra_holidays))
        )

    def is_working_day(self, day: datetime.date) -> bool:
        return _is_working(day, self.work_days, self.holidays)

    def next_working_day(self, day: datetime.date) -> datetime.date:
        return _next_working(day, self.work_days, self.holidays)

    def previous_working_day(self, day: datetime.date) -> datetime.date:
        return _previous_working(day, self.work_days, self.holidays)

    def add_working_days(self, start: datetime.date, days: int) -> datetime.date:
        return _add(start, days, self.work_days, self.holidays)

    def subtract_working_days(self, end: datetime.date, days: int) -> datetime.date:
        return _subtract(end, days, self.work_days, self.holidays)

    def working_days_between(self, start: datetime.date, end: datetime.date) -> int:
        return _between(start, end, self.work_days, self.holidays)
