"""Statistics, text summaries and detail tables over a date range of tasks."""

from __future__ import annotations

import calendar
import enum
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable

from .models import Task

DETAIL_TIME_FORMAT = "%Y-%m-%d %H:%M"
DETAIL_HEADERS = ("任务名称", "类型", "开始时间", "结束时间", "时长", "优先级", "标签")

CONTINUOUS_LABEL = "连续任务"
SINGLE_LABEL = "单次任务"
FINISHED_LABEL = "已完成"
IN_PROGRESS_LABEL = "进行中"


class ReportRange(enum.Enum):
    DAILY = 0
    WEEKLY = 1
    MONTHLY = 2
    YEARLY = 3


@dataclass
class ReportStatistics:
    """Aggregated figures for a set of tasks."""

    total_tasks: int = 0
    completed_tasks: int = 0
    continuous_tasks: int = 0
    total_hours: float = 0.0
    average_task_duration: float = 0.0
    tag_stats: dict[str, int] = field(default_factory=dict)
    priority_stats: dict[int, int] = field(default_factory=dict)
    daily_stats: dict[date, int] = field(default_factory=dict)


def _add_months(day: date, months: int) -> date:
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last))


def default_date_range(report_range: ReportRange, today: date | None = None) -> tuple[date, date]:
    """Start and end dates a report range selects, ending today."""
    today = today or date.today()
    report_range = ReportRange(report_range)
    if report_range is ReportRange.DAILY:
        start = today
    elif report_range is ReportRange.WEEKLY:
        start = today - timedelta(days=7)
    elif report_range is ReportRange.MONTHLY:
        start = _add_months(today, -1)
    else:
        start = _add_months(today, -12)
    return start, today


def filter_tasks(tasks: Iterable[Task], start: date, end: date) -> list[Task]:
    """Tasks whose start date lies within [start, end]."""
    return [
        task
        for task in tasks
        if task.start_time is not None and start <= task.start_time.date() <= end
    ]


def _seconds_between(earlier: datetime, later: datetime) -> int:
    return int((later - earlier).total_seconds())


def task_duration(task: Task, now: datetime | None = None) -> float:
    """Duration in hours; single tasks count zero.

    Finished continuous tasks with a stop time use it; otherwise the
    duration runs up to ``now``.
    """
    if not task.is_continuous or task.start_time is None:
        return 0.0
    if task.finished and task.stop_time is not None:
        return _seconds_between(task.start_time, task.stop_time) / 3600.0
    now = now or datetime.now()
    return _seconds_between(task.start_time, now) / 3600.0


def calculate_statistics(tasks: Iterable[Task], now: datetime | None = None) -> ReportStatistics:
    """Aggregate counts, durations, tags, priorities and per-day totals."""
    now = now or datetime.now()
    tasks = list(tasks)
    tags: Counter[str] = Counter()
    priorities: Counter[int] = Counter()
    days: Counter[date] = Counter()
    stats = ReportStatistics(total_tasks=len(tasks))
    finished_continuous = 0
    finished_continuous_hours = 0.0

    for task in tasks:
        duration = task_duration(task, now)
        if task.finished:
            stats.completed_tasks += 1
        if task.is_continuous:
            stats.continuous_tasks += 1
            if task.finished:
                finished_continuous += 1
                finished_continuous_hours += duration
        stats.total_hours += duration
        tags.update(tag for tag in task.tags if tag)
        priorities[task.priority] += 1
        if task.start_time is not None:
            days[task.start_time.date()] += 1

    stats.average_task_duration = (
        finished_continuous_hours / finished_continuous if finished_continuous else 0.0
    )
    stats.tag_stats = dict(sorted(tags.items()))
    stats.priority_stats = dict(sorted(priorities.items()))
    stats.daily_stats = dict(sorted(days.items()))
    return stats


def format_duration(hours: float) -> str:
    """Minutes below one hour, otherwise hours with one decimal."""
    if hours < 1.0:
        return f"{hours * 60:.0f}分钟"
    return f"{hours:.1f}小时"


def completion_rate(stats: ReportStatistics) -> float:
    """Percentage of completed tasks, 0 when there are none."""
    if stats.total_tasks <= 0:
        return 0.0
    return stats.completed_tasks / stats.total_tasks * 100


def generate_summary(stats: ReportStatistics) -> str:
    """An HTML summary of the statistics with a short recommendation."""
    parts = ["<div style='font-family: Microsoft YaHei; line-height: 1.6; color: #ffffff;'>"]

    rate_text = f"{completion_rate(stats):.1f}" if stats.total_tasks > 0 else "0"
    parts.append("<p><b style='color: #4fc3f7;'>📊 统计概览</b><br>")
    parts.append(
        f"在选定时间范围内，您共有 <b style='color: #81c784;'>{stats.total_tasks}</b> 个任务，"
        f"其中 <b style='color: #81c784;'>{stats.completed_tasks}</b> 个已完成，"
        f"完成率为 <b style='color: #ffb74d;'>{rate_text}%</b>。"
    )
    parts.append("</p>")

    if stats.total_hours > 0:
        parts.append("<p><b style='color: #4fc3f7;'>⏱️ 时间分析</b><br>")
        parts.append(
            f"持续任务总计投入时间 <b style='color: #81c784;'>{format_duration(stats.total_hours)}</b>，"
            f"平均每个持续任务耗时 <b style='color: #81c784;'>"
            f"{format_duration(stats.average_task_duration)}</b>。"
        )
        if stats.continuous_tasks > 0:
            share = stats.continuous_tasks / stats.total_tasks * 100
            parts.append(
                f"其中连续性任务 <b style='color: #81c784;'>{stats.continuous_tasks}</b> 个，"
                f"占总任务的 <b style='color: #ffb74d;'>{share:.1f}%</b>。"
            )
        single = stats.total_tasks - stats.continuous_tasks
        if single > 0:
            parts.append(f"单次任务 <b style='color: #81c784;'>{single}</b> 个，不计入时长统计。")
        parts.append("</p>")

    if stats.tag_stats:
        top = [
            f"<span style='color: #ba68c8;'>{tag}</span>"
            f"(<span style='color: #81c784;'>{count}个</span>)"
            for tag, count in sorted(stats.tag_stats.items())[:3]
        ]
        parts.append("<p><b style='color: #4fc3f7;'>🏷️ 分类分析</b><br>")
        parts.append(f"主要任务类型包括：{'、'.join(top)}。")
        parts.append("</p>")

    parts.append("<p><b style='color: #4fc3f7;'>💡 效率建议</b><br>")
    if stats.total_tasks == 0:
        parts.append("<span style='color: #ffb74d;'>暂无任务数据，建议开始规划和记录您的任务。</span>")
    else:
        ratio = stats.completed_tasks / stats.total_tasks
        if ratio >= 0.8:
            parts.append("<span style='color: #81c784;'>任务完成率很高，保持良好的执行力！</span>")
        elif ratio >= 0.6:
            parts.append("<span style='color: #ffb74d;'>任务完成情况良好，可以适当提高执行效率。</span>")
        else:
            parts.append("<span style='color: #f06292;'>建议关注未完成任务，优化时间管理和任务规划。</span>")
    parts.append("</p>")
    parts.append("</div>")
    return "".join(parts)


def _end_text(task: Task) -> str:
    if not task.finished:
        return IN_PROGRESS_LABEL
    if task.stop_time is not None:
        return task.stop_time.strftime(DETAIL_TIME_FORMAT)
    return FINISHED_LABEL


def detail_rows(tasks: Iterable[Task], now: datetime | None = None) -> list[tuple[str, ...]]:
    """One row of display strings per task, in the order of DETAIL_HEADERS."""
    now = now or datetime.now()
    return [
        (
            task.task_name,
            CONTINUOUS_LABEL if task.is_continuous else SINGLE_LABEL,
            task.start_time.strftime(DETAIL_TIME_FORMAT) if task.start_time else "",
            _end_text(task),
            format_duration(task_duration(task, now)),
            str(task.priority),
            ", ".join(task.tags),
        )
        for task in tasks
    ]


class Report:
    """The report page's state: all tasks plus the selected range and dates."""

    def __init__(self, tasks: Iterable[Task] = (), today: date | None = None) -> None:
        self.tasks: list[Task] = list(tasks)
        self.range = ReportRange.MONTHLY
        self.start, self.end = default_date_range(self.range, today)

    def update_tasks(self, tasks: Iterable[Task]) -> None:
        self.tasks = list(tasks)

    def set_range(self, report_range: ReportRange, today: date | None = None) -> None:
        """Select a range and reset the dates to the ones it implies."""
        self.range = ReportRange(report_range)
        self.start, self.end = default_date_range(self.range, today)

    def set_dates(self, start: date, end: date) -> None:
        self.start, self.end = start, end

    def _selected(self) -> list[Task]:
        return filter_tasks(self.tasks, self.start, self.end)

    def statistics(self, now: datetime | None = None) -> ReportStatistics:
        return calculate_statistics(self._selected(), now)

    def summary(self, now: datetime | None = None) -> str:
        return generate_summary(self.statistics(now))

    def rows(self, now: datetime | None = None) -> list[tuple[str, ...]]:
        return detail_rows(self._selected(), now)