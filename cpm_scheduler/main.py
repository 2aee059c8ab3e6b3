import argparse
import sys
from typing import List, Optional

from cpm_scheduler.config import load_config
from cpm_scheduler.core.errors import SchedulingError
from cpm_scheduler.core.models.team_member import TeamMember
from cpm_scheduler.core.reports.schedule_report import generate_schedule_report
from cpm_scheduler.core.services.schedule_service import ScheduleService
from cpm_scheduler.data.csv.parser import (
    parse_dependencies_csv,
    parse_tasks_csv,
    parse_team_members_csv,
    parse_time_off_csv,
)
from cpm_scheduler.utils.date_utils import validate_date_format
from cpm_scheduler.utils.logging import get_logger, parse_log_level, setup_logging

# Настройка логирования
logger = get_logger(__name__)


def _read_file(path: Optional[str]) -> str:
    if not path:
        return ""
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def build_parser() -> argparse.ArgumentParser:
    """Описание аргументов командной строки"""
    parser = argparse.ArgumentParser(description="Расчет календарного плана проекта методом критического пути")
    parser.add_argument("tasks", help="CSV-файл с задачами")
    parser.add_argument("dependencies", nargs="?", help="CSV-файл с зависимостями")
    parser.add_argument("--start", required=True, help="Дата начала проекта (YYYY-MM-DD)")
    parser.add_argument("--name", default="Проект", help="Название проекта")
    parser.add_argument("--team", help="CSV-файл с участниками команды")
    parser.add_argument("--time-off", help="CSV-файл с отсутствиями участников")
    parser.add_argument("--env-file", help="Путь к .env файлу с настройками")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # Загружаем конфигурацию
    config = load_config(args.env_file)

    # Настраиваем логирование
    setup_logging(level=parse_log_level(config.get('LOG_LEVEL')), log_file=config.get('LOG_FILE'))

    if not validate_date_format(args.start):
        logger.error(f"Некорректная дата начала проекта: {args.start}")
        return 2

    project = {'name': args.name, 'start_date': args.start}

    try:
        tasks = parse_tasks_csv(_read_file(args.tasks))
        dependencies = parse_dependencies_csv(_read_file(args.dependencies))
        team_members = [TeamMember.from_dict(row) for row in parse_team_members_csv(_read_file(args.team))]
        time_off = parse_time_off_csv(_read_file(args.time_off))
    except (OSError, ValueError) as e:
        logger.error(f"Не удалось прочитать входные данные: {e}")
        return 2

    logger.info(f"Загружено задач: {len(tasks)}, зависимостей: {len(dependencies)}, "
                f"участников: {len(team_members)}")

    schedule_service = ScheduleService(config)

    try:
        result = schedule_service.calculate_schedule(project, tasks, dependencies, team_members, time_off)
    except (SchedulingError, ValueError) as e:
        print(f"Ошибка расчета: {e}", file=sys.stderr)
        return 1

    print(generate_schedule_report(project, result, team_members))
    return 0


if __name__ == "__main__":
    sys.exit(main())
