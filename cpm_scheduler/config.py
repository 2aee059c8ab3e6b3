import os
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from cpm_scheduler.utils.date_utils import parse_date_list

# Рабочая неделя по умолчанию: воскресенье - четверг
DEFAULT_WORK_DAYS = [0, 1, 2, 3, 4]
DEFAULT_WORK_HOURS_PER_DAY = 8.0


def load_config(env_file: Optional[str] = None) -> Dict[str, Any]:
    """
    Загружает конфигурацию расчета из переменных окружения

    Args:
        env_file: Путь к .env файлу (по умолчанию ищется автоматически)

    Returns:
        dict: Словарь с настройками
    """
    # Загружаем .env файл, если он существует
    load_dotenv(env_file)

    return {
        'WORK_DAYS': parse_work_days(os.getenv('WORK_DAYS', '')),
        'HOLIDAYS': parse_date_list(os.getenv('HOLIDAYS', '')),
        'DEFAULT_WORK_HOURS_PER_DAY': parse_work_hours(os.getenv('DEFAULT_WORK_HOURS_PER_DAY', '')),
        'LOG_LEVEL': os.getenv('LOG_LEVEL', 'INFO'),
        'LOG_FILE': os.getenv('LOG_FILE') or None,
    }


def parse_work_days(work_days_str: str) -> List[int]:
    """
    Парсит рабочие дни недели из строки

    Args:
        work_days_str: Номера дней (0 - воскресенье, 6 - суббота), разделенные запятыми

    Returns:
        List[int]: Отсортированный список дней; при ошибке - неделя по умолчанию
    """
    if not work_days_str:
        return list(DEFAULT_WORK_DAYS)

    try:
        days = sorted({int(day.strip()) for day in work_days_str.split(',') if day.strip()})
    except ValueError:
        # В случае ошибки возвращаем неделю по умолчанию
        return list(DEFAULT_WORK_DAYS)

    if not days or any(day < 0 or day > 6 for day in days):
        return list(DEFAULT_WORK_DAYS)

    return days


def parse_work_hours(hours_str: str) -> float:
    """Парсит дневную загрузку в часах; некорректное значение заменяется на 8"""
    try:
        hours = float(hours_str)
    except (TypeError, ValueError):
        return DEFAULT_WORK_HOURS_PER_DAY

    return hours if hours > 0 else DEFAULT_WORK_HOURS_PER_DAY
