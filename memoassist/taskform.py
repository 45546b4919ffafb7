"""Task entry form, tag handling and the text shown on a task card."""

from __future__ import annotations

import re
import zlib
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable

from .models import BASE_COLORS, Task, format_datetime

STAR = "⭐"
MIN_PRIORITY = 1
MAX_PRIORITY = 5
DEFAULT_PRIORITY = 2

PRIORITY_LABELS = {
    1: "⭐ 低优先级",
    2: "⭐⭐ 中优先级",
    3: "⭐⭐⭐ 高优先级",
    4: "⭐⭐⭐⭐ 紧急",
    5: "⭐⭐⭐⭐⭐ 最高优先级",
}

_TAG_SEPARATOR = re.compile("[,，]")


class TaskFormError(ValueError):
    """The form's input cannot be turned into a task."""


def parse_tags(text: str) -> list[str]:
    """Split tags on ASCII or full-width commas, trimming each one."""
    text = text.strip()
    if not text:
        return []
    return [part.strip() for part in _TAG_SEPARATOR.split(text) if part]


def format_tags(tags: Iterable[str]) -> str:
    """Join tags with commas, as the form's tag field shows them."""
    return ",".join(tags)


def priority_stars(priority: int) -> str:
    """One star per priority level."""
    return STAR * max(priority, 0)


def tag_color(tag: str) -> tuple[int, int, int]:
    """A stable colour from the base palette for a tag."""
    digest = zlib.crc32(f"#{tag}".encode("utf-8"))
    return BASE_COLORS[digest % len(BASE_COLORS)]


def describe_task(task: Task) -> str:
    """The lines a task card shows: name, stars, kind, times and tags."""
    lines = [
        task.task_name,
        priority_stars(task.priority),
        f"连续事件: {'是' if task.is_continuous else '否'}",
        f"开始于: {format_datetime(task.start_time)}",
    ]
    if task.is_continuous:
        lines.append(f"结束于: {format_datetime(task.stop_time)}")
    if task.tags:
        lines.append(" ".join(f"#{tag}" for tag in task.tags))
    return "\n".join(lines)


def _to_seconds(value: datetime | None) -> datetime | None:
    return value.replace(microsecond=0) if value is not None else None


@dataclass
class TaskForm:
    """The editable fields of a task; ``base`` is the task being edited, if any."""

    name: str = ""
    is_continuous: bool = False
    start: datetime | None = None
    stop: datetime | None = None
    priority: int = DEFAULT_PRIORITY
    tags_text: str = ""
    base: Task = field(default_factory=Task)

    @property
    def is_add_mode(self) -> bool:
        return not self.base

    @classmethod
    def from_task(cls, task: Task) -> TaskForm:
        """A form filled in from an existing task."""
        return cls(
            name=task.task_name,
            is_continuous=task.is_continuous,
            start=_to_seconds(task.start_time),
            stop=_to_seconds(task.stop_time) if task.is_continuous else None,
            priority=task.priority,
            tags_text=format_tags(task.tags),
            base=task,
        )

    def validate(self) -> None:
        """Raise TaskFormError if the input cannot be saved."""
        if not self.name.strip():
            raise TaskFormError("请输入任务名称")
        if self.start is None:
            raise TaskFormError("请选择开始时间")
        if not MIN_PRIORITY <= self.priority <= MAX_PRIORITY:
            raise TaskFormError(f"priority must be between {MIN_PRIORITY} and {MAX_PRIORITY}")
        if self.is_continuous and (self.stop is None or self.stop <= self.start):
            raise TaskFormError("结束时间必须晚于开始时间")

    def to_task(self) -> Task:
        """Validate and build the task to save.

        A single task stops when it starts; an empty tag field keeps the
        edited task's tags.
        """
        self.validate()
        start = _to_seconds(self.start)
        stop = _to_seconds(self.stop) if self.is_continuous else start
        tags = parse_tags(self.tags_text) if self.tags_text.strip() else list(self.base.tags)
        return replace(
            self.base,
            task_name=self.name.strip(),
            is_continuous=self.is_continuous,
            start_time=start,
            stop_time=stop,
            priority=self.priority,
            tags=tags,
            finished=False,
        )

    def clear(self, now: datetime | None = None) -> None:
        """Reset every field to its default, with both times set to now."""
        now = _to_seconds(now or datetime.now())
        self.name = ""
        self.is_continuous = False
        self.start = now
        self.stop = now
        self.priority = DEFAULT_PRIORITY
        self.tags_text = ""