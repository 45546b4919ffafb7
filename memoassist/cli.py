"""Command-line front end: sign in, manage memos and view reports and calendars."""

from __future__ import annotations

import argparse
import sys
from datetime import date, datetime
from typing import Callable, Sequence

from .accounts import AccountError, AuthenticationError, Session, UnknownUserError
from .database import DatabaseError
from .events import Event, TaskEventBus
from .models import SortType, Task, parse_datetime, sort_tasks
from .monthview import render_month
from .report import (
    DETAIL_HEADERS,
    Report,
    ReportRange,
    completion_rate,
    format_duration,
    generate_summary,
)
from .taskform import (
    DEFAULT_PRIORITY,
    MAX_PRIORITY,
    MIN_PRIORITY,
    TaskForm,
    TaskFormError,
    describe_task,
)

NO_TASKS = "今天没有事项~"
SAVE_OK = "保存成功: 备忘录已成功创建"
SAVE_FAILED = "保存失败: 无法保存备忘录，请重试"
CHANGE_OK = "修改成功"
CHANGE_FAILED = "修改失败"
DELETE_OK = "删除成功"
DELETE_FAILED = "删除失败"
FINISH_OK = "已完成"
LOGIN_OK = "登录成功！欢迎回来！"
REGISTER_OK = "注册成功！新用户创建完成，欢迎使用！"
LOGIN_FAILED = "登录失败!"
INPUT_ERROR = "输入错误"

_RANGES = {
    "daily": ReportRange.DAILY,
    "weekly": ReportRange.WEEKLY,
    "monthly": ReportRange.MONTHLY,
    "yearly": ReportRange.YEARLY,
}


def _datetime_arg(text: str) -> datetime:
    value = parse_datetime(text)
    if value is None:
        raise argparse.ArgumentTypeError(f"expected 'YYYY-MM-DD hh:mm:ss', got {text!r}")
    return value


def _date_arg(text: str) -> date:
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected 'YYYY-MM-DD', got {text!r}") from None


def _month_arg(text: str) -> date:
    try:
        return datetime.strptime(text, "%Y-%m").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected 'YYYY-MM', got {text!r}") from None


def _find_task(session: Session, task_id: int) -> Task:
    for task in session.tasks:
        if task.task_id == task_id:
            return task
    raise LookupError(f"no task with id {task_id}")


def _print_form_error(exc: TaskFormError) -> int:
    print(f"{INPUT_ERROR}: {exc}", file=sys.stderr)
    return 1


def _cmd_add(session: Session, args: argparse.Namespace) -> int:
    form = TaskForm()
    form.clear()
    form.name = args.name
    form.is_continuous = args.continuous
    if args.start is not None:
        form.start = args.start
    form.stop = args.stop
    form.priority = args.priority
    form.tags_text = args.tags
    try:
        task = form.to_task()
    except TaskFormError as exc:
        return _print_form_error(exc)
    try:
        (task_id,) = session.bus.publish(Event.TASK_ADDED, task)
    except DatabaseError as exc:
        print(f"{SAVE_FAILED} ({exc})", file=sys.stderr)
        return 1
    print(f"{SAVE_OK} (id {task_id})")
    return 0


def _cmd_list(session: Session, args: argparse.Namespace) -> int:
    tasks = sort_tasks(session.tasks, SortType(args.sort))
    if not tasks:
        print(NO_TASKS)
        return 0
    blocks = [f"[{task.task_id}]\n{describe_task(task)}" for task in tasks]
    print("\n\n".join(blocks))
    return 0


def _cmd_edit(session: Session, args: argparse.Namespace) -> int:
    form = TaskForm.from_task(_find_task(session, args.id))
    if args.name is not None:
        form.name = args.name
    if args.continuous is not None:
        form.is_continuous = args.continuous
    if args.start is not None:
        form.start = args.start
    if args.stop is not None:
        form.stop = args.stop
    if args.priority is not None:
        form.priority = args.priority
    if args.tags is not None:
        form.tags_text = args.tags
    try:
        task = form.to_task()
    except TaskFormError as exc:
        return _print_form_error(exc)
    try:
        session.bus.publish(Event.TASK_CHANGED, task)
    except DatabaseError as exc:
        print(f"{CHANGE_FAILED} ({exc})", file=sys.stderr)
        return 1
    print(CHANGE_OK)
    return 0


def _cmd_delete(session: Session, args: argparse.Namespace) -> int:
    task = _find_task(session, args.id)
    try:
        session.bus.publish(Event.TASK_DELETED, task)
    except DatabaseError as exc:
        print(f"{DELETE_FAILED} ({exc})", file=sys.stderr)
        return 1
    print(DELETE_OK)
    return 0


def _cmd_finish(session: Session, args: argparse.Namespace) -> int:
    session.finish_task(_find_task(session, args.id))
    print(FINISH_OK)
    return 0


def _cmd_report(session: Session, args: argparse.Namespace) -> int:
    report = Report(session.tasks)
    report.set_range(_RANGES[args.range])
    if args.start is not None or args.end is not None:
        report.set_dates(args.start or report.start, args.end or report.end)
    now = datetime.now()
    stats = report.statistics(now)
    if args.html:
        print(generate_summary(stats))
        return 0
    lines = [
        f"{report.start.isoformat()} ~ {report.end.isoformat()}",
        f"总任务数: {stats.total_tasks}",
        f"完成率: {completion_rate(stats):.1f}%",
        f"总时长: {format_duration(stats.total_hours)}",
        f"平均时长: {format_duration(stats.average_task_duration)}",
        "\t".join(DETAIL_HEADERS),
    ]
    lines.extend("\t".join(row) for row in report.rows(now))
    print("\n".join(lines))
    return 0


def _cmd_calendar(session: Session, args: argparse.Namespace) -> int:
    print(render_month(session.tasks, args.month))
    return 0


def _cmd_whoami(session: Session, args: argparse.Namespace) -> int:
    title, subtitle = session.user_card()
    print(f"{title}\n{subtitle}\n{session.database_name()}")
    return 0


def _add_task_fields(parser: argparse.ArgumentParser, editing: bool) -> None:
    parser.add_argument("--start", type=_datetime_arg, help="start time, 'YYYY-MM-DD hh:mm:ss'")
    parser.add_argument("--stop", type=_datetime_arg, help="stop time of a continuous task")
    parser.add_argument(
        "--priority",
        type=int,
        choices=range(MIN_PRIORITY, MAX_PRIORITY + 1),
        default=None if editing else DEFAULT_PRIORITY,
    )
    parser.add_argument(
        "--tags",
        default=None if editing else "",
        help="tags separated by commas",
    )


def build_parser() -> argparse.ArgumentParser:
    """The argument parser for the memo assistant command."""
    parser = argparse.ArgumentParser(prog="memoassist", description="Memo and schedule assistant.")
    parser.add_argument("--data-dir", default="data", help="directory holding the databases")
    parser.add_argument("--user", help="sign in as this user")
    parser.add_argument("--password", default="", help="password of the user")
    parser.add_argument(
        "--register", action="store_true", help="create the user before signing in"
    )
    commands = parser.add_subparsers(dest="command", required=True)

    def command(name: str, handler: Callable[..., int], text: str) -> argparse.ArgumentParser:
        sub = commands.add_parser(name, help=text)
        sub.set_defaults(handler=handler)
        return sub

    add = command("add", _cmd_add, "create a memo")
    add.add_argument("name")
    add.add_argument("--continuous", action="store_true", help="the memo spans a period")
    _add_task_fields(add, editing=False)

    listing = command("list", _cmd_list, "show all memos")
    listing.add_argument(
        "--sort", choices=[kind.value for kind in SortType], default=SortType.BY_DATE.value
    )

    edit = command("edit", _cmd_edit, "change a memo")
    edit.add_argument("id", type=int)
    edit.add_argument("--name")
    edit.add_argument("--continuous", action=argparse.BooleanOptionalAction, default=None)
    _add_task_fields(edit, editing=True)

    delete = command("delete", _cmd_delete, "remove a memo")
    delete.add_argument("id", type=int)

    finish = command("finish", _cmd_finish, "mark a memo as finished")
    finish.add_argument("id", type=int)

    report = command("report", _cmd_report, "summarise recent memos")
    report.add_argument("--range", choices=list(_RANGES), default="monthly")
    report.add_argument("--start", type=_date_arg)
    report.add_argument("--end", type=_date_arg)
    report.add_argument("--html", action="store_true", help="print the HTML summary")

    cal = command("calendar", _cmd_calendar, "show a month calendar")
    cal.add_argument("--month", type=_month_arg, default=None, help="'YYYY-MM'")

    command("whoami", _cmd_whoami, "show the current user")
    return parser


def _sign_in(session: Session, args: argparse.Namespace) -> None:
    if args.register:
        session.register(args.user, args.password)
        print(REGISTER_OK)
    else:
        session.login(args.user, args.password)
        print(LOGIN_OK)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command and return its exit status."""
    args = build_parser().parse_args(argv)
    try:
        with Session(args.data_dir, bus=TaskEventBus()) as session:
            if args.user is not None:
                try:
                    _sign_in(session, args)
                except UnknownUserError as exc:
                    print(f"{LOGIN_FAILED} {exc} (use --register to create it)", file=sys.stderr)
                    return 1
                except AuthenticationError as exc:
                    print(f"{LOGIN_FAILED} {exc}", file=sys.stderr)
                    return 1
            return args.handler(session, args)
    except (AccountError, DatabaseError, LookupError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())