import logging
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Настраивает логирование для приложения

    Args:
        level: Уровень логирования
        log_file: Путь к файлу логов (если нужно)
    """
    # Корневой logger
    logger = logging.getLogger()
    logger.setLevel(level)

    # Повторная настройка не должна дублировать обработчики
    for handler in list(logger.handlers):
        if getattr(handler, '_cpm_scheduler', False):
            logger.removeHandler(handler)
            handler.close()

    # Форматирование логов
    formatter = logging.Formatter(LOG_FORMAT)

    # Консольный обработчик (stderr, чтобы не смешивать с отчетом в stdout)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler._cpm_scheduler = True
    logger.addHandler(console_handler)

    # Файловый обработчик (если указан файл)
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(formatter)
        file_handler._cpm_scheduler = True
        logger.addHandler(file_handler)

    # Предотвращаем вывод логов от библиотек
    logging.getLogger('dotenv').setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Возвращает именованный логгер

    Args:
        name: Имя логгера (обычно __name__)

    Returns:
        logging.Logger: Настроенный логгер
    """
    return logging.getLogger(name)


def parse_log_level(name: str, default: int = logging.INFO) -> int:
    """Преобразует имя уровня ('DEBUG', 'info') в числовой уровень logging"""
    level = getattr(logging, str(name or '').upper(), None)
    return level if isinstance(level, int) else default
