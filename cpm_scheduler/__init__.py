"""Расчет календарного плана проекта методом критического пути (CPM)"""

__version__ = "1.0.0"
