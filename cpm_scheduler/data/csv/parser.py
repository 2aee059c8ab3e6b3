import csv
import io
from typing import Any, Dict, List


def _read_rows(csv_content: str) -> List[Dict[str, str]]:
    csv_file = io.StringIO(csv_content)
    reader = csv.DictReader(csv_file)

    rows = []
    for row in reader:
        # Пропускаем пустые строки и убираем пробелы вокруг значений
        cleaned = {(key or '').strip(): (value or '').strip() for key, value in row.items()}
        if any(cleaned.values()):
            rows.append(cleaned)
    return rows


def parse_tasks_csv(csv_content: str) -> List[Dict[str, Any]]:
    """
    Разбирает содержимое CSV-файла с задачами проекта

    Ожидаемые колонки: id, name, duration, estimated_hours, assignee_id,
    scheduling_mode, start_date, constraint_type, constraint_date.
    Пустая длительность допускается, если задана оценка в часах.

    Args:
        csv_content (str): Содержимое CSV-файла

    Returns:
        list: Список словарей с данными о задачах
    """
    tasks = []

    for row in _read_rows(csv_content):
        task = {
            "id": row.get("id", ""),
            "name": row.get("name", "") or row.get("id", ""),
            "duration": int(row["duration"]) if row.get("duration") else None,
            "estimated_hours": float(row["estimated_hours"]) if row.get("estimated_hours") else None,
            "assignee_id": row.get("assignee_id") or None,
            "scheduling_mode": row.get("scheduling_mode") or "auto",
            "start_date": row.get("start_date") or None,
            "end_date": row.get("end_date") or None,
            "constraint_type": row.get("constraint_type") or None,
            "constraint_date": row.get("constraint_date") or None,
        }

        if not task["id"]:
            raise ValueError(f"Задача без идентификатора: {row}")

        tasks.append(task)

    return tasks


def parse_dependencies_csv(csv_content: str) -> List[Dict[str, Any]]:
    """
    Разбирает содержимое CSV-файла с зависимостями

    Ожидаемые колонки: predecessor_id, successor_id, type, lag_days.

    Args:
        csv_content (str): Содержимое CSV-файла

    Returns:
        list: Список словарей с данными о зависимостях
    """
    dependencies = []

    for row in _read_rows(csv_content):
        dependencies.append({
            "predecessor_id": row.get("predecessor_id", ""),
            "successor_id": row.get("successor_id", ""),
            "type": (row.get("type") or "FS").upper(),
            "lag_days": int(row["lag_days"]) if row.get("lag_days") else 0,
        })

    return dependencies


def parse_team_members_csv(csv_content: str) -> List[Dict[str, Any]]:
    """
    Разбирает содержимое CSV-файла с участниками команды

    Ожидаемые колонки: id, name, work_days (номера дней через ';'),
    work_hours_per_day, employment_type.

    Args:
        csv_content (str): Содержимое CSV-файла

    Returns:
        list: Список словарей с данными об участниках
    """
    members = []

    for row in _read_rows(csv_content):
        work_days_str = row.get("work_days", "")
        work_days = [int(day) for day in work_days_str.split(';') if day.strip()] if work_days_str else None

        members.append({
            "id": row.get("id", ""),
            "name": row.get("name", "") or row.get("id", ""),
            "work_days": work_days,
            "work_hours_per_day": row.get("work_hours_per_day") or 8,
            "employment_type": row.get("employment_type") or "full_time",
        })

    return members


def parse_time_off_csv(csv_content: str) -> List[Dict[str, Any]]:
    """
    Разбирает содержимое CSV-файла с отсутствиями участников

    Ожидаемые колонки: team_member_id, start_date, end_date, status, type.

    Args:
        csv_content (str): Содержимое CSV-файла

    Returns:
        list: Список словарей с данными об отсутствиях
    """
    return [
        {
            "team_member_id": row.get("team_member_id", ""),
            "start_date": row.get("start_date", ""),
            "end_date": row.get("end_date", ""),
            "status": row.get("status") or "approved",
            "type": row.get("type") or "vacation",
        }
        for row in _read_rows(csv_content)
    ]
