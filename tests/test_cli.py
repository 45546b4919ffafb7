from datetime import datetime

import pytest

from memoassist.accounts import GUEST_TITLE
from memoassist.cli import (
    CHANGE_OK,
    DELETE_OK,
    NO_TASKS,
    REGISTER_OK,
    SAVE_OK,
    build_parser,
    main,
)
from memoassist.database import TaskDatabase
from memoassist.events import TaskEventBus

PASSWORD = "password"


def stored(data_dir, name="default"):
    return TaskDatabase(name, data_dir, bus=TaskEventBus()).query_all_tasks()


def run(tmp_path, *args):
    return main(["--data-dir", str(tmp_path), *args])


def test_list_empty(tmp_path, capsys):
    assert run(tmp_path, "list") == 0
    assert NO_TASKS in capsys.readouterr().out


def test_add_stores_task(tmp_path, capsys):
    code = run(
        tmp_path, "add", "Dentist", "--start", "2025-05-20 09:30:00",
        "--priority", "4", "--tags", "health，personal",
    )
    assert code == 0
    assert SAVE_OK in capsys.readouterr().out
    (task,) = stored(tmp_path)
    assert task.task_name == "Dentist"
    assert task.start_time == datetime(2025, 5, 20, 9, 30, 0)
    assert task.stop_time == task.start_time
    assert task.priority == 4
    assert task.tags == ["health", "personal"]


def test_add_then_list_shows_task(tmp_path, capsys):
    run(tmp_path, "add", "Write report", "--start", "2025-05-20 09:30:00")
    capsys.readouterr()
    assert run(tmp_path, "list", "--sort", "priority") == 0
    out = capsys.readouterr().out
    assert "Write report" in out
    assert "2025-05-20 09:30:00" in out


def test_continuous_without_stop_is_rejected(tmp_path):
    code = run(tmp_path, "add", "Trip", "--continuous", "--start", "2025-05-20 09:00:00")
    assert code == 1
    assert stored(tmp_path) == []


def test_continuous_with_stop(tmp_path):
    code = run(
        tmp_path, "add", "Trip", "--continuous",
        "--start", "2025-05-20 09:00:00", "--stop", "2025-05-22 18:00:00",
    )
    assert code == 0
    (task,) = stored(tmp_path)
    assert task.is_continuous
    assert task.stop_time == datetime(2025, 5, 22, 18, 0, 0)


def test_invalid_datetime_is_usage_error(tmp_path):
    with pytest.raises(SystemExit) as info:
        run(tmp_path, "add", "x", "--start", "tomorrow")
    assert info.value.code == 2


def test_edit_changes_name_and_priority(tmp_path, capsys):
    run(tmp_path, "add", "Old", "--start", "2025-05-20 09:00:00", "--tags", "a")
    (task,) = stored(tmp_path)
    code = run(tmp_path, "edit", str(task.task_id), "--name", "New", "--priority", "5")
    assert code == 0
    assert CHANGE_OK in capsys.readouterr().out
    (changed,) = stored(tmp_path)
    assert changed.task_name == "New"
    assert changed.priority == 5
    assert changed.tags == ["a"]


def test_delete_removes_task(tmp_path, capsys):
    run(tmp_path, "add", "Gone", "--start", "2025-05-20 09:00:00")
    (task,) = stored(tmp_path)
    assert run(tmp_path, "delete", str(task.task_id)) == 0
    assert DELETE_OK in capsys.readouterr().out
    assert stored(tmp_path) == []


def test_delete_unknown_id_fails(tmp_path):
    assert run(tmp_path, "delete", "42") == 1


def test_finish_marks_task_and_report_counts_it(tmp_path, capsys):
    run(tmp_path, "add", "Today")
    (task,) = stored(tmp_path)
    assert run(tmp_path, "finish", str(task.task_id)) == 0
    assert stored(tmp_path)[0].finished
    capsys.readouterr()
    assert run(tmp_path, "report", "--range", "daily") == 0
    out = capsys.readouterr().out
    assert "完成率: 100.0%" in out
    assert "Today" in out


def test_report_html_summary(tmp_path, capsys):
    assert run(tmp_path, "report", "--html") == 0
    out = capsys.readouterr().out
    assert out.startswith("<div")
    assert "暂无任务数据" in out


def test_calendar_lists_task(tmp_path, capsys):
    run(tmp_path, "add", "Party", "--start", "2025-05-20 19:00:00")
    capsys.readouterr()
    assert run(tmp_path, "calendar", "--month", "2025-05") == 0
    out = capsys.readouterr().out
    assert out.splitlines()[0] == "May 2025"
    assert "20: Party" in out


def test_whoami_guest(tmp_path, capsys):
    assert run(tmp_path, "whoami") == 0
    out = capsys.readouterr().out
    assert GUEST_TITLE in out
    assert "default" in out


def test_register_then_login_uses_user_database(tmp_path, capsys):
    code = run(tmp_path, "--user", "alice", "--password", PASSWORD, "--register",
               "add", "Private", "--start", "2025-05-20 09:00:00")
    assert code == 0
    assert REGISTER_OK in capsys.readouterr().out
    assert [t.task_name for t in stored(tmp_path, "alice")] == ["Private"]
    assert stored(tmp_path) == []
    assert run(tmp_path, "--user", "alice", "--password", PASSWORD, "whoami") == 0
    assert "alice" in capsys.readouterr().out


def test_login_wrong_password(tmp_path):
    run(tmp_path, "--user", "bob", "--password", PASSWORD, "--register", "whoami")
    assert run(tmp_path, "--user", "bob", "--password", "secret", "whoami") == 1


def test_login_unknown_user(tmp_path, capsys):
    assert run(tmp_path, "--user", "nobody", "--password", PASSWORD, "whoami") == 1
    assert "--register" in capsys.readouterr().err


def test_parser_requires_command():
    with pytest.raises(SystemExit) as info:
        build_parser().parse_args([])
    assert info.value.code == 2