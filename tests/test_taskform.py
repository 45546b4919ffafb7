from datetime import datetime

import pytest

from memoassist.models import BASE_COLORS, Task
from memoassist.taskform import (
    PRIORITY_LABELS,
    TaskForm,
    TaskFormError,
    describe_task,
    format_tags,
    parse_tags,
    priority_stars,
    tag_color,
)

START = datetime(2025, 5, 29, 9, 30, 0)
STOP = datetime(2025, 5, 30, 18, 0, 0)


def _task(**changes):
    values = dict(
        task_id=7,
        task_name="report",
        is_continuous=True,
        start_time=START,
        stop_time=STOP,
        priority=3,
        tags=["work", "urgent"],
        finished=True,
    )
    values.update(changes)
    return Task(**values)


def test_parse_tags_accepts_both_commas():
    assert parse_tags("work,home，study") == ["work", "home", "study"]


def test_parse_tags_trims_and_skips_empty_parts():
    assert parse_tags("  a , b ,,c ") == ["a", "b", "c"]
    assert parse_tags("   ") == []


def test_format_and_parse_tags_round_trip():
    tags = ["alpha", "beta", "gamma"]
    assert parse_tags(format_tags(tags)) == tags


def test_priority_stars_counts_priority():
    for level in PRIORITY_LABELS:
        assert priority_stars(level).count("⭐") == level
        assert PRIORITY_LABELS[level].startswith(priority_stars(level))


def test_tag_color_is_stable_palette_entry():
    assert tag_color("work") in BASE_COLORS
    assert tag_color("work") == tag_color("work")


def test_describe_task_continuous_shows_stop_and_tags():
    lines = describe_task(_task()).splitlines()
    assert lines[0] == "report"
    assert lines[1] == priority_stars(3)
    assert "开始于: 2025-05-29 09:30:00" in lines
    assert "结束于: 2025-05-30 18:00:00" in lines
    assert lines[-1] == "#work #urgent"


def test_describe_task_single_omits_stop():
    text = describe_task(_task(is_continuous=False, tags=[]))
    assert "结束于" not in text
    assert "#" not in text


def test_from_task_to_task_round_trip_resets_finished():
    task = _task()
    saved = TaskForm.from_task(task).to_task()
    assert saved.task_id == task.task_id
    assert saved.task_name == task.task_name
    assert saved.start_time == START
    assert saved.stop_time == STOP
    assert saved.tags == task.tags
    assert saved.priority == task.priority
    assert saved.finished is False


def test_single_task_stops_at_start():
    form = TaskForm(name="  call  ", start=START, stop=STOP, tags_text="x，y")
    task = form.to_task()
    assert task.task_name == "call"
    assert task.stop_time == task.start_time == START
    assert task.tags == ["x", "y"]
    assert not task


def test_empty_tag_field_keeps_existing_tags():
    form = TaskForm.from_task(_task())
    form.tags_text = ""
    assert form.to_task().tags == ["work", "urgent"]


def test_validate_rejects_blank_name():
    with pytest.raises(TaskFormError):
        TaskForm(name="   ", start=START).validate()


def test_validate_rejects_stop_not_after_start():
    form = TaskForm(name="trip", is_continuous=True, start=STOP, stop=START)
    with pytest.raises(TaskFormError):
        form.to_task()
    form.stop = STOP
    with pytest.raises(TaskFormError):
        form.validate()


def test_validate_rejects_missing_start_and_bad_priority():
    with pytest.raises(TaskFormError):
        TaskForm(name="x").validate()
    with pytest.raises(TaskFormError):
        TaskForm(name="x", start=START, priority=0).validate()


def test_clear_resets_fields():
    form = TaskForm.from_task(_task())
    now = datetime(2025, 6, 1, 12, 0, 0, 123456)
    form.clear(now)
    assert form.name == ""
    assert form.is_continuous is False
    assert form.start == form.stop == now.replace(microsecond=0)
    assert form.priority == TaskForm().priority
    assert form.tags_text == ""


def test_add_mode_depends_on_base_task():
    assert TaskForm().is_add_mode
    assert not TaskForm.from_task(_task()).is_add_mode