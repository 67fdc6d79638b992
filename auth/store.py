"""
auth/store.py -- SQLAlchemy Core persistence layer for credentials and identities.

Pattern: Repository + Data Mapper (same as tasks/store.py).
UserStore is the repository; _row_to_credential / _row_to_user are the
mappers. Route and gateway code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  UNIQUE(email) is enforced by the database. create_credential() converts
  that specific IntegrityError into UniqueViolation so callers can tell a
  taken email apart from any other storage failure, which propagates as-is.

  The password hash is only ever mapped into Credential. The identity
  lookups select explicit columns and never read hashed_password.

Layer rule: no imports from api/, core/, or tasks/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from auth.models import Credential, User

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("nick_name", String(255)),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

# Everything except hashed_password.
_identity_columns = (
    _users.c.id,
    _users.c.email,
    _users.c.nick_name,
    _users.c.created_at,
    _users.c.updated_at,
)


class UniqueViolation(Exception):
    """Raised by create_credential() when the email is already registered."""


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers do not block during writes.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _is_unique_violation(exc: IntegrityError) -> bool:
    # SQLite: "UNIQUE constraint failed: users.email"
    # PostgreSQL: SQLSTATE 23505 unique_violation
    if getattr(exc.orig, "pgcode", None) == "23505":
        return True
    return "unique" in str(exc.orig).lower()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for Credential and User entities.

    Usage:
        store = UserStore("sqlite:///tasktrack.db")
        user_id = store.create_credential("a@x.com", hash_password("secret"))
        cred = store.find_credential_by_email("a@x.com")
        user = store.find_identity_by_id(user_id)
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    def find_credential_by_email(self, email: str) -> Credential | None:
        """Look up login material by exact email. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(
                select(_users.c.id, _users.c.email, _users.c.hashed_password).where(_users.c.email == email)
            ).fetchone()
        return _row_to_credential(row) if row is not None else None

    def create_credential(self, email: str, hashed_password: str) -> int:
        """Insert a new account and return its assigned ID.

        Raises UniqueViolation if the email already exists. Any other
        IntegrityError or database error propagates unchanged.
        """
        now = _now_iso()
        try:
            with self.engine.connect() as conn:
                result = conn.execute(
                    _users.insert().values(
                        email=email,
                        hashed_password=hashed_password,
                        created_at=now,
                        updated_at=now,
                    )
                )
                conn.commit()
                return result.inserted_primary_key[0]
        except IntegrityError as exc:
            if _is_unique_violation(exc):
                raise UniqueViolation(email) from exc
            raise

    # ------------------------------------------------------------------
    # Identities
    # ------------------------------------------------------------------

    def find_identity_by_id(self, user_id: int) -> User | None:
        """Look up the public identity for a user ID. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(select(*_identity_columns).where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def update_nick_name(self, user_id: int, nick_name: str | None) -> User | None:
        """Set the nickname and return the updated identity, or None if user_id is unknown."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.update().where(_users.c.id == user_id).values(nick_name=nick_name, updated_at=_now_iso())
            )
            conn.commit()
        if result.rowcount == 0:
            return None
        return self.find_identity_by_id(user_id)

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_credential(row) -> Credential:
    return Credential(id=row.id, email=row.email, hashed_password=row.hashed_password)


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        nick_name=row.nick_name,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
