"""SQLite storage for a user's tasks."""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Iterator

from .events import Event, TaskEventBus, default_bus
from .models import Task, format_datetime, parse_datetime

log = logging.getLogger(__name__)

TABLE = "Tasks"

_CREATE_TABLE = (
    f"CREATE TABLE {TABLE} ("
    "TaskID INTEGER PRIMARY KEY AUTOINCREMENT,"
    "TaskName TEXT NOT NULL,"
    "IsContinuous INTEGER NOT NULL DEFAULT 0,"
    "StartTime TEXT NOT NULL,"
    "StopTime TEXT DEFAULT NULL,"
    "Priority INTEGER NOT NULL DEFAULT 1,"
    "Tags TEXT DEFAULT '',"
    "Finished BOOL DEFAULT 0"
    ");"
)


class DatabaseError(Exception):
    """A task database could not be opened, read or written."""


def _encode_tags(tags: list[str]) -> str:
    return json.dumps(list(tags), ensure_ascii=False, separators=(",", ":"))


def _decode_tags(text: str | None) -> list[str]:
    if not text:
        return []
    try:
        doc = json.loads(text)
    except ValueError:
        return []
    if not isinstance(doc, list):
        return []
    return [item if isinstance(item, str) else "" for item in doc]


class TaskDatabase:
    """Tasks stored in ``<data_dir>/<name>.db``; each change is announced on the bus."""

    def __init__(
        self,
        name: str,
        data_dir: str | Path = "data",
        bus: TaskEventBus | None = None,
    ) -> None:
        self.name = name
        self.data_dir = Path(data_dir)
        self.path = self.data_dir / f"{name}.db"
        self.bus = bus if bus is not None else default_bus()
        self._initialise()

    @contextmanager
    def _connect(self, action: str) -> Iterator[sqlite3.Connection]:
        try:
            with closing(sqlite3.connect(self.path)) as conn:
                with conn:
                    yield conn
        except sqlite3.Error as exc:
            raise DatabaseError(f"{action} failed: {exc}") from exc

    def _initialise(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        with self._connect("initialisation") as conn:
            (count,) = conn.execute(
                "SELECT COUNT(*) FROM sqlite_master WHERE type = 'table' AND name = ?",
                (TABLE,),
            ).fetchone()
            if count == 0:
                log.debug("%s database init - creating table", self.name)
                conn.execute(_CREATE_TABLE)

    def _changed(self) -> None:
        self.bus.publish(Event.DATABASE_CHANGED)

    def insert_task(self, task: Task) -> int:
        """Store a new task and return its assigned id."""
        with self._connect("insert") as conn:
            cursor = conn.execute(
                f"INSERT INTO {TABLE} "
                "(TaskName,IsContinuous,StartTime,StopTime,Priority,Finished,Tags) "
                "VALUES (?,?,?,?,?,?,?)",
                (
                    task.task_name,
                    1 if task.is_continuous else 0,
                    format_datetime(task.start_time),
                    format_datetime(task.stop_time),
                    task.priority,
                    1 if task.finished else 0,
                    _encode_tags(task.tags),
                ),
            )
            new_id = cursor.lastrowid
        self._changed()
        return new_id

    def query_all_tasks(self) -> list[Task]:
        """Return every stored task in table order."""
        with self._connect("query") as conn:
            rows = conn.execute(
                "SELECT TaskID,TaskName,IsContinuous,StartTime,StopTime,Priority,Tags,Finished "
                f"FROM {TABLE}"
            ).fetchall()
        return [
            Task(
                task_id=int(task_id),
                task_name=str(name),
                is_continuous=bool(continuous),
                start_time=parse_datetime(start),
                stop_time=parse_datetime(stop),
                priority=int(priority or 0),
                tags=_decode_tags(tags),
                finished=bool(finished),
            )
            for task_id, name, continuous, start, stop, priority, tags, finished in rows
        ]

    def update_task(self, task: Task) -> None:
        """Overwrite the stored task with the same id.

        The stop time is only written for continuous tasks.
        """
        common = (
            task.task_name,
            1 if task.is_continuous else 0,
            format_datetime(task.start_time),
        )
        rest = (task.priority, _encode_tags(task.tags), 1 if task.finished else 0, task.task_id)
        if task.is_continuous:
            sql = (
                f"UPDATE {TABLE} SET TaskName = ?, IsContinuous = ?, StartTime = ?, "
                "StopTime = ?, Priority = ?, Tags = ?, Finished = ? WHERE TaskID = ?"
            )
            params = common + (format_datetime(task.stop_time),) + rest
        else:
            sql = (
                f"UPDATE {TABLE} SET TaskName = ?, IsContinuous = ?, StartTime = ?, "
                "Priority = ?, Tags = ?, Finished = ? WHERE TaskID = ?"
            )
            params = common + rest
        with self._connect("update") as conn:
            conn.execute(sql, params)
        self._changed()
        log.debug("database updated: %s %s", task.task_id, task.task_name)

    def delete_task(self, task: Task) -> None:
        with self._connect("delete") as conn:
            conn.execute(f"DELETE FROM {TABLE} WHERE TaskID = ?", (task.task_id,))
        self._changed()

    def mark_finished(self, task: Task) -> None:
        with self._connect("finish") as conn:
            conn.execute(f"UPDATE {TABLE} SET Finished = 1 WHERE TaskID = ?", (task.task_id,))
        self._changed()