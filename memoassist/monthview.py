"""Month calendar layout of tasks: which tasks fall on which day of a month grid."""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from .models import Task

MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
DAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

_CELL_WIDTH = 5


@dataclass
class DayCell:
    """One day of the month grid and the tasks shown on it."""

    day: date
    in_month: bool
    tasks: list[Task] = field(default_factory=list)


def tasks_for_date(tasks: Iterable[Task], day: date) -> list[Task]:
    """Single tasks starting on the day and continuous tasks ending on it."""
    result = []
    for task in tasks:
        moment = task.stop_time if task.is_continuous else task.start_time
        if moment is not None and moment.date() == day:
            result.append(task)
    return result


def month_title(month: date | None = None) -> str:
    """Title of the month, such as ``May 2025``."""
    month = month or date.today()
    return f"{MONTH_NAMES[month.month - 1]} {month.year}"


def month_grid(month: date | None = None) -> list[list[date]]:
    """Whole weeks, Monday first, covering every day of the month."""
    month = month or date.today()
    return calendar.Calendar(firstweekday=0).monthdatescalendar(month.year, month.month)


def build_month(tasks: Iterable[Task], month: date | None = None) -> list[list[DayCell]]:
    """The month grid with each in-month day holding its tasks.

    Days belonging to the neighbouring months are shown without tasks.
    """
    month = month or date.today()
    tasks = list(tasks)
    return [
        [
            DayCell(
                day=day,
                in_month=day.month == month.month,
                tasks=tasks_for_date(tasks, day) if day.month == month.month else [],
            )
            for day in week
        ]
        for week in month_grid(month)
    ]


def _cell_label(cell: DayCell) -> str:
    text = str(cell.day.day)
    if not cell.in_month:
        text = f"({text})"
    return text.rjust(_CELL_WIDTH)


def render_month(tasks: Iterable[Task], month: date | None = None) -> str:
    """Plain-text calendar of the month with the tasks listed under each week.

    Days outside the month are shown in parentheses.
    """
    month = month or date.today()
    lines = [month_title(month), "".join(name.rjust(_CELL_WIDTH) for name in DAY_NAMES)]
    for week in build_month(tasks, month):
        lines.append("".join(_cell_label(cell) for cell in week))
        for cell in week:
            for task in cell.tasks:
                lines.append(f"  {cell.day.day}: {task.task_name}")
    return "\n".join(lines)