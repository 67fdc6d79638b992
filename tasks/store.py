"""
tasks/store.py -- SQLAlchemy-backed persistence layer for per-user tasks.

Uses SQLAlchemy Core (not ORM) so the Task dataclass in tasks/models.py
remains the authoritative domain representation.

Pattern: Repository + Data Mapper. TaskStore is the repository; _row_to_task
is the mapper. Route handlers never touch SQL directly.

Tenancy: every query is scoped by user_id. A task owned by another user is
indistinguishable from a missing one at this layer; update_task() and
delete_task() return False in both cases.

Usage:
    store = TaskStore("sqlite:///tasktrack.db")
    task = store.create_task(user_id, "Write report", None)
    store.update_task(user_id, task.id, title="Write final report")
    tasks = store.list_tasks(user_id)
    store.close()
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Index, Integer, MetaData, String, Table, Text, create_engine, event
from sqlalchemy.engine import Engine

from tasks.models import Task

_UPDATABLE_FIELDS = frozenset({"title", "description"})

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

# user_id references users.id in auth/store.py. No FK constraint: the two
# stores own separate metadata and may live in different databases.
_tasks = Table(
    "tasks",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False),
    Column("title", String(255), nullable=False),
    Column("description", Text),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
    Index("ix_tasks_user_id", "user_id"),
)


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers do not block during writes.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class TaskStore:
    """Repository for Task entities, always scoped to one owner."""

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    def list_tasks(self, user_id: int) -> list[Task]:
        """Return all tasks for a user, newest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _tasks.select()
                .where(_tasks.c.user_id == user_id)
                .order_by(_tasks.c.created_at.desc(), _tasks.c.id.desc())
            ).fetchall()
        return [_row_to_task(r) for r in rows]

    def get_task(self, user_id: int, task_id: int) -> Optional[Task]:
        with self.engine.connect() as conn:
            row = conn.execute(
                _tasks.select().where((_tasks.c.id == task_id) & (_tasks.c.user_id == user_id))
            ).fetchone()
        return _row_to_task(row) if row is not None else None

    def create_task(self, user_id: int, title: str, description: Optional[str] = None) -> Task:
        """Insert a task and return it with id and timestamps filled in."""
        now = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(
                _tasks.insert().values(
                    user_id=user_id,
                    title=title,
                    description=description,
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
            task_id = result.inserted_primary_key[0]
        return Task(
            id=task_id,
            user_id=user_id,
            title=title,
            description=description,
            created_at=now,
            updated_at=now,
        )

    def update_task(self, user_id: int, task_id: int, **fields) -> bool:
        """Update title and/or description on a task the user owns.

        Only keys in _UPDATABLE_FIELDS are accepted. Unknown keys raise
        ValueError rather than being silently ignored.

        Returns True if a row was updated, False if the task is missing or
        belongs to another user.
        """
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown task fields: {unknown!r}")
        with self.engine.connect() as conn:
            result = conn.execute(
                _tasks.update()
                .where((_tasks.c.id == task_id) & (_tasks.c.user_id == user_id))
                .values(updated_at=_now_iso(), **fields)
            )
            conn.commit()
        return result.rowcount > 0

    def delete_task(self, user_id: int, task_id: int) -> bool:
        """Delete a task the user owns. Returns False if missing or not owned."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _tasks.delete().where((_tasks.c.id == task_id) & (_tasks.c.user_id == user_id))
            )
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


def _row_to_task(row) -> Task:
    return Task(
        id=row.id,
        user_id=row.user_id,
        title=row.title,
        description=row.description,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
