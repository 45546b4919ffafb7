"""User accounts and the signed-in session that owns the active task database."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Iterator

from .database import DatabaseError, TaskDatabase
from .events import Event, TaskEventBus, default_bus
from .models import Task, User

log = logging.getLogger(__name__)

ACCOUNTS_FILE = "accounts.db"
DEFAULT_DATABASE = "default"

GUEST_TITLE = "访客模式"
GUEST_SUBTITLE = "使用默认数据库 · 点击登录"
LOGGED_IN_SUBTITLE = "已登录"

_CREATE_USERS = (
    "CREATE TABLE users("
    "UserID INTEGER PRIMARY KEY AUTOINCREMENT,"
    "UserName TEXT NOT NULL UNIQUE,"
    "UserEmail TEXT DEFAULT '',"
    "UserPsw TEXT DEFAULT '',"
    "UserDBName TEXT NOT NULL);"
)


class AccountError(Exception):
    """The account store could not be opened, read or written."""


class AuthenticationError(AccountError):
    """Credentials were missing or did not match."""


class UnknownUserError(AccountError):
    """No account exists under the given name."""


class AccountStore:
    """Accounts kept in ``<data_dir>/accounts.db``."""

    def __init__(self, data_dir: str | Path = "data") -> None:
        self.data_dir = Path(data_dir)
        self.path = self.data_dir / ACCOUNTS_FILE
        self._initialise()

    @contextmanager
    def _connect(self, action: str) -> Iterator[sqlite3.Connection]:
        try:
            with closing(sqlite3.connect(self.path)) as conn:
                with conn:
                    yield conn
        except sqlite3.Error as exc:
            raise AccountError(f"{action} failed: {exc}") from exc

    def _initialise(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        with self._connect("account database initialisation") as conn:
            exists = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name='users';"
            ).fetchone()
            if exists is None:
                conn.execute(_CREATE_USERS)

    def _lookup(self, name: str) -> tuple[User, str] | None:
        with self._connect("query") as conn:
            row = conn.execute(
                "SELECT UserID, UserPsw, UserEmail, UserDBName FROM users WHERE UserName = ?",
                (name,),
            ).fetchone()
        if row is None:
            return None
        user_id, stored, email, db_name = row
        user = User(id=int(user_id), name=name, email=email or "", db_name=str(db_name))
        return user, stored or ""

    def find_user(self, name: str) -> User | None:
        """Return the account with this name, or None."""
        found = self._lookup(name)
        return found[0] if found else None

    def authenticate(self, name: str, password: str) -> User:
        """Return the account if the password matches.

        Raises AuthenticationError for empty credentials or a wrong password,
        UnknownUserError when the name is not registered.
        """
        if not name or not password:
            raise AuthenticationError("user name and password must not be empty")
        found = self._lookup(name)
        if found is None:
            raise UnknownUserError(f"no such user: {name}")
        user, stored = found
        if stored != password:
            raise AuthenticationError("wrong password")
        return user

    def create_user(self, name: str, password: str) -> User:
        """Register an account and create its personal task database.

        The account record is removed again if the database cannot be created.
        """
        if not name or not password:
            raise AuthenticationError("user name and password must not be empty")
        db_name = name
        with self._connect("user creation") as conn:
            cursor = conn.execute(
                "INSERT INTO users (UserName, UserEmail, UserPsw, UserDBName) VALUES (?, ?, ?, ?)",
                (name, "", password, db_name),
            )
            new_id = int(cursor.lastrowid)
        try:
            TaskDatabase(db_name, self.data_dir, bus=TaskEventBus())
        except (DatabaseError, OSError) as exc:
            with self._connect("user rollback") as conn:
                conn.execute("DELETE FROM users WHERE UserID = ?", (new_id,))
            raise AccountError(f"user database creation failed: {exc}") from exc
        return User(id=new_id, name=name, email="", db_name=db_name)


class Session:
    """The current user, their task database and its loaded tasks.

    Without a signed-in user the shared ``default`` database is used. Task
    events published on the bus are applied to the active database, and the
    task list is reloaded whenever a database announces a change.
    """

    def __init__(self, data_dir: str | Path = "data", bus: TaskEventBus | None = None) -> None:
        self.data_dir = Path(data_dir)
        self.bus = bus if bus is not None else default_bus()
        self.accounts = AccountStore(self.data_dir)
        self.user: User | None = None
        self.tasks: list[Task] = []
        self._subscriptions = (
            (Event.TASK_ADDED, self.add_task),
            (Event.TASK_CHANGED, self.change_task),
            (Event.TASK_DELETED, self.delete_task),
            (Event.DATABASE_CHANGED, self.refresh),
        )
        for event, handler in self._subscriptions:
            self.bus.subscribe(event, handler)
        self.db = self._open(DEFAULT_DATABASE)

    def close(self) -> None:
        """Detach from the event bus."""
        for event, handler in self._subscriptions:
            try:
                self.bus.unsubscribe(event, handler)
            except ValueError:
                pass

    def __enter__(self) -> Session:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def logged_in(self) -> bool:
        return self.user is not None

    def _open(self, name: str) -> TaskDatabase:
        log.debug("opening task database %s", name)
        self.db = TaskDatabase(name, self.data_dir, bus=self.bus)
        self.refresh()
        return self.db

    def login(self, name: str, password: str) -> User:
        """Sign in and switch to the user's database."""
        user = self.accounts.authenticate(name, password)
        self.user = user
        self._open(user.db_name)
        return user

    def register(self, name: str, password: str) -> User:
        """Create an account, sign in as it and switch to its database."""
        user = self.accounts.create_user(name, password)
        self.user = user
        self._open(user.db_name)
        return user

    def logout(self) -> None:
        """Sign out and return to the default database."""
        name = self.user.name if self.user else "Unknown"
        self.user = None
        self.tasks = []
        self._open(DEFAULT_DATABASE)
        log.debug("user %s logged out", name)

    def refresh(self) -> list[Task]:
        """Reload the task list from the active database."""
        self.tasks = self.db.query_all_tasks()
        return self.tasks

    def database_name(self) -> str:
        return self.user.db_name if self.user else DEFAULT_DATABASE

    def user_card(self) -> tuple[str, str]:
        """Title and subtitle shown for the current user."""
        if self.user is None:
            return GUEST_TITLE, GUEST_SUBTITLE
        return self.user.name, self.user.email or LOGGED_IN_SUBTITLE

    def add_task(self, task: Task) -> int:
        return self.db.insert_task(task)

    def change_task(self, task: Task) -> None:
        self.db.update_task(task)

    def delete_task(self, task: Task) -> None:
        self.db.delete_task(task)

    def finish_task(self, task: Task) -> None:
        self.db.mark_finished(task)