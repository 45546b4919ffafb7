"""Core data types for memos and users, plus sorting and timestamp helpers."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

BASE_COLORS: tuple[tuple[int, int, int], ...] = (
    (239, 154, 154),
    (255, 183, 77),
    (255, 213, 79),
    (129, 199, 132),
    (129, 212, 250),
    (179, 157, 219),
    (244, 143, 177),
)


@dataclass
class Task:
    """A single memo entry. A task without a stored id (-1) is falsy."""

    task_id: int = -1
    task_name: str = ""
    is_continuous: bool = False
    start_time: datetime | None = None
    stop_time: datetime | None = None
    priority: int = 1
    tags: list[str] = field(default_factory=list)
    finished: bool = False

    def __bool__(self) -> bool:
        return self.task_id != -1


@dataclass
class User:
    """An account holder and the name of their personal task database."""

    id: int
    name: str
    email: str = ""
    db_name: str = ""


class SortType(enum.Enum):
    BY_DATE = "date"
    BY_PRIORITY = "priority"
    BY_TAGS = "tags"


def _time_key(value: datetime | None) -> tuple[bool, datetime]:
    # Missing timestamps sort before any real one.
    return (value is not None, value or datetime.min)


def _by_date(task: Task) -> tuple:
    return (_time_key(task.start_time), -task.priority)


def _by_priority(task: Task) -> tuple:
    return (-task.priority, _time_key(task.start_time))


def _by_tags(task: Task) -> tuple:
    return (list(task.tags), -task.priority)


_SORT_KEYS: dict[SortType, Callable[[Task], tuple]] = {
    SortType.BY_DATE: _by_date,
    SortType.BY_PRIORITY: _by_priority,
    SortType.BY_TAGS: _by_tags,
}


def sort_tasks(tasks: Iterable[Task], sort_type: SortType) -> list[Task]:
    """Return the tasks ordered by the given criterion.

    By date: earliest start first, higher priority first on ties.
    By priority: highest priority first, earliest start first on ties.
    By tags: tag lists in lexicographic order, higher priority first on ties.
    """
    try:
        key = _SORT_KEYS[sort_type]
    except (KeyError, TypeError):
        raise ValueError(f"unknown sort type: {sort_type!r}") from None
    return sorted(tasks, key=key)


def format_datetime(value: datetime | None) -> str:
    """Format a timestamp as stored in the database; a missing one becomes ''."""
    if value is None:
        return ""
    return value.strftime(DATETIME_FORMAT)


def parse_datetime(text: str | None) -> datetime | None:
    """Parse a stored timestamp; empty or malformed text yields None."""
    if not text:
        return None
    try:
        return datetime.strptime(text, DATETIME_FORMAT)
    except ValueError:
        return None