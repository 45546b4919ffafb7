# memoassist

A small personal memo assistant for the terminal. It keeps tasks in one SQLite
database per user, sorts them, lays them out on a month calendar and summarises
recent activity. It needs nothing beyond the standard library.

Messages, labels and the report text are in Chinese.

## Installing

```
pip install .
```

To run the test suite as well:

```
pip install ".[test]"
pytest
```

## The command line

Installing the package provides the `memoassist` command:

```
memoassist --help
```

Global options come before the command:

- `--data-dir DIR` – where the databases live (default `data`, relative to the
  current directory);
- `--user NAME` and `--password PASSWORD` – sign in as this user for the command;
- `--register` – create the user first, then sign in.

Without `--user` every command works on the shared `default` database.

Commands:

- `add NAME [--continuous] [--start "YYYY-MM-DD hh:mm:ss"] [--stop ...] [--priority 1-5] [--tags a,b]`
  – create a memo. The start defaults to now, the priority to 2.
- `list [--sort date|priority|tags]` – show every memo with its id.
- `edit ID [--name ...] [--continuous/--no-continuous] [--start ...] [--stop ...] [--priority ...] [--tags ...]`
  – change a memo; fields not given keep their values. Saving an edit clears the
  finished flag.
- `delete ID` – remove a memo.
- `finish ID` – mark a memo as finished.
- `report [--range daily|weekly|monthly|yearly] [--start YYYY-MM-DD] [--end YYYY-MM-DD] [--html]`
  – statistics and a detail table for memos starting in the range (monthly by
  default); `--html` prints the HTML summary instead.
- `calendar [--month YYYY-MM]` – a text calendar of the month (the current one by
  default) with the memos of each week.
- `whoami` – the current user card and the database in use.

For example:

```
memoassist --user alice --password secret --register whoami
memoassist --user alice --password secret add "Dentist" --start "2025-06-02 09:30:00" --tags health
memoassist --user alice --password secret list --sort priority
```

The command exits with status 0 on success and 1 on a failed sign-in, invalid
input, an unknown memo id or a storage error.

## Tasks

A task (`memoassist.models.Task`) has a name, a start time, an optional stop time
for continuous tasks, a priority from 1 (low) to 5 (highest), a list of tags and a
finished flag. A task whose id is still -1 (not stored yet) is false in a boolean
context. `User` holds an account's id, name, e-mail and database name.

`sort_tasks(tasks, sort_type)` returns a new list ordered by a `SortType`:

- `BY_DATE`: earliest start first; equal starts put the higher priority first;
- `BY_PRIORITY`: highest priority first; equal priorities put the earlier start first;
- `BY_TAGS`: tag lists compared in order; equal tags put the higher priority first.

Any other value raises `ValueError`.

Times are stored as text in the form `YYYY-MM-DD hh:mm:ss`; `format_datetime` and
`parse_datetime` convert between that text and `datetime` values (a missing or
malformed value becomes `""` or `None`).

## Events

`memoassist.events.TaskEventBus` calls handlers synchronously, in the order they
subscribed: `subscribe(event, handler)`, `unsubscribe(event, handler)` and
`publish(event, *args)`, which returns the handlers' results. The `Event` enum lists
`TASK_ADDED`, `TASK_CHANGED`, `TASK_DELETED`, `DATABASE_CHANGED` and
`DATABASE_UNCHANGED`. `default_bus()` returns a shared, process-wide bus.

## Storage

`memoassist.database.TaskDatabase(name, data_dir="data", bus=None)` keeps tasks in
`<data_dir>/<name>.db`, creating the directory and the `Tasks` table on first use.
It offers `insert_task` (returns the new id), `query_all_tasks`, `update_task`
(the stop time is only written for continuous tasks), `delete_task` and
`mark_finished`. Failures raise `DatabaseError`. Each successful change publishes
`Event.DATABASE_CHANGED` on its bus (the default bus unless one is given).

## Accounts and sessions

`memoassist.accounts.AccountStore(data_dir="data")` keeps accounts in
`<data_dir>/accounts.db`: `find_user`, `authenticate` and `create_user`. Empty
credentials or a wrong password raise `AuthenticationError`; an unregistered name
raises `UnknownUserError`; both derive from `AccountError`. `create_user` also
creates the user's own task database, named after the user, and removes the account
again if that fails.

A `Session(data_dir="data", bus=None)` starts in guest mode on the `default`
database and subscribes to the bus: published `TASK_ADDED`, `TASK_CHANGED` and
`TASK_DELETED` events are written to the current database, and `DATABASE_CHANGED`
reloads `session.tasks`. `login(name, password)` switches to the user's database,
`register(name, password)` creates the account first, and `logout()` returns to
guest mode. `add_task`, `change_task`, `delete_task` and `finish_task` write to the
current database directly; `refresh()` reloads the tasks; `database_name()` names the
database in use; `user_card()` gives the title and subtitle shown for the current
user. A session is a context manager; `close()` detaches it from the bus.

## Reports

`memoassist.report` summarises the tasks that start inside a date range:

- `default_date_range(report_range, today)` – for a `ReportRange`: today only, the
  last seven days, the last month or the last twelve months, each ending today;
- `filter_tasks(tasks, start, end)` – tasks starting within the range, inclusive;
- `task_duration(task, now)` – zero for one-off tasks; for continuous ones, the hours
  from start to stop if finished, otherwise up to `now`;
- `calculate_statistics(tasks, now)` – task, finished and continuous counts, total
  hours, the average over finished continuous tasks, and tallies of tags, priorities
  and start days in a `ReportStatistics`;
- `completion_rate(stats)` – the percentage of finished tasks;
- `format_duration(hours)` – minutes below one hour, hours with one decimal above;
- `generate_summary(stats)` – an HTML overview with a suggestion based on the
  completion rate;
- `detail_rows(tasks, now)` – one row of strings per task, in the order of
  `DETAIL_HEADERS`.

`Report` keeps the task list with the selected range and dates (`update_tasks`,
`set_range`, `set_dates`) and answers `statistics`, `summary` and `rows` for them.

## Calendar

`memoassist.monthview` lays a month out in whole weeks from Monday to Sunday.
`tasks_for_date(tasks, day)` picks one-off tasks starting on that day and continuous
tasks ending on it; `month_title` and `month_grid` give the heading and the weeks;
`build_month` fills `DayCell`s (days of neighbouring months stay empty) and
`render_month` prints the month as text.

## Task forms

`memoassist.taskform.TaskForm` holds the fields of the add/edit form.
`TaskForm.from_task(task)` fills it from a stored task; `validate()` raises
`TaskFormError` when the name is blank, the start is missing, the priority is outside
1–5, or a continuous task does not stop after it starts; `to_task()` builds the task
to save (a one-off task stops when it starts, and an empty tag field keeps the edited
task's tags); `clear(now)` resets the fields. Tags are entered as one line separated by
ASCII or full-width commas (`parse_tags`, `format_tags`). `priority_stars`,
`tag_color` and `describe_task` give the pieces of a task card.

## What it does not do

- There is no graphical interface; the package is a library and a command-line tool.
- Signing in lasts for one command only: each run of `memoassist` starts as a guest
  unless `--user` is given.
- Passwords are stored and compared as plain text in `accounts.db`; the account store
  is not meant to protect anything sensitive.
- There are no reminders or notifications; nothing runs in the background.