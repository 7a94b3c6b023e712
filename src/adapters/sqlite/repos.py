"""
SQLite persistence for the moderation workflow.

Repositories share one connection when created by SQLiteUnitOfWork; used on
their own they open (and commit/close) a connection per call. Published
collections go through the generic SQLiteContentStore, which validates
collection and column names against the record models.
"""

from __future__ import annotations

import builtins
import json
import sqlite3
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from src.domain.entities import ActivityLog, Proposal, ProposalStatus, UserProfile
from src.domain.errors import NotFoundError, QueryError
from src.domain.records import COLLECTIONS, PublishedRecord, json_fields, model_for_collection

# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def parse_dt(s: str | None) -> datetime | None:
    """Parse ISO datetime string."""
    return datetime.fromisoformat(s) if s else None


def _iso(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt else None


def _load_json(s: str | None) -> Any:
    return json.loads(s) if s else None


def _dump_json(value: Any) -> str | None:
    return json.dumps(value, ensure_ascii=False) if value is not None else None


def connect(db_path: str) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path)
    conn.row_factory = dict_factory
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


# -----------------------------------------------------------------------------
# Base SQLite Repository
# -----------------------------------------------------------------------------


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str, connection: sqlite3.Connection | None = None):
        self.db_path = db_path
        self._external_conn = connection

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (uses external if provided)."""
        if self._external_conn is not None:
            return self._external_conn
        return connect(self.db_path)

    def _should_close(self) -> bool:
        """Whether to close connection after use."""
        return self._external_conn is None


# -----------------------------------------------------------------------------
# Profiles
# -----------------------------------------------------------------------------


class SQLiteProfileRepo(SQLiteRepoBase):
    """Profiles table (stands in for the auth provider's profile store)."""

    def save(self, profile: UserProfile) -> UserProfile:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO profiles (
                    id, email, full_name, avatar_url, role,
                    password_hash, is_active, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    email=excluded.email,
                    full_name=excluded.full_name,
                    avatar_url=excluded.avatar_url,
                    role=excluded.role,
                    password_hash=excluded.password_hash,
                    is_active=excluded.is_active,
                    updated_at=excluded.updated_at
                """,
                (
                    profile.id,
                    profile.email,
                    profile.full_name,
                    profile.avatar_url,
                    profile.role,
                    profile.password_hash,
                    profile.is_active,
                    profile.created_at.isoformat(),
                    profile.updated_at.isoformat(),
                ),
            )
            if self._should_close():
                conn.commit()
            return profile
        finally:
            if self._should_close():
                conn.close()

    def get_by_id(self, profile_id: str) -> UserProfile | None:
        return self._get_one("SELECT * FROM profiles WHERE id = ?", (profile_id,))

    def get_by_email(self, email: str) -> UserProfile | None:
        return self._get_one(
            "SELECT * FROM profiles WHERE lower(email) = lower(?)", (email.strip(),)
        )

    def list_all(self) -> list[UserProfile]:
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT * FROM profiles ORDER BY created_at").fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            if self._should_close():
                conn.close()

    def _get_one(self, query: str, params: tuple[Any, ...]) -> UserProfile | None:
        conn = self._get_conn()
        try:
            row = conn.execute(query, params).fetchone()
            return self._map_row(row) if row else None
        finally:
            if self._should_close():
                conn.close()

    def _map_row(self, row: dict[str, Any]) -> UserProfile:
        return UserProfile(
            id=row["id"],
            email=row["email"],
            full_name=row["full_name"],
            avatar_url=row["avatar_url"],
            role=row["role"],
            password_hash=row["password_hash"],
            is_active=bool(row["is_active"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


# -----------------------------------------------------------------------------
# Proposals
# -----------------------------------------------------------------------------


class SQLiteProposalRepo(SQLiteRepoBase):
    """Proposals table."""

    FILTER_COLUMNS = frozenset({"status", "content_type", "proposed_by"})

    def insert(self, proposal: Proposal) -> Proposal:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO proposals (
                    id, content_type, content_data, status, proposed_by,
                    reviewed_by, reviewed_at, review_notes, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(proposal.id),
                    proposal.content_type,
                    json.dumps(proposal.content_data, ensure_ascii=False),
                    proposal.status,
                    proposal.proposed_by,
                    proposal.reviewed_by,
                    _iso(proposal.reviewed_at),
                    proposal.review_notes,
                    proposal.created_at.isoformat(),
                    proposal.updated_at.isoformat(),
                ),
            )
            if self._should_close():
                conn.commit()
            return proposal
        finally:
            if self._should_close():
                conn.close()

    def get_by_id(self, proposal_id: UUID) -> Proposal | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM proposals WHERE id = ?", (str(proposal_id),)
            ).fetchone()
            return self._map_row(row) if row else None
        finally:
            if self._should_close():
                conn.close()

    def list(self, filters: Mapping[str, Any] | None = None) -> builtins.list[Proposal]:
        """Newest first; filters are ANDed equality matches."""
        clauses: builtins.list[str] = []
        params: builtins.list[Any] = []
        for column, value in (filters or {}).items():
            if value is None:
                continue
            if column not in self.FILTER_COLUMNS:
                raise ValueError(f"Unknown proposal filter: {column}")
            clauses.append(f"{column} = ?")
            params.append(value)

        query = "SELECT * FROM proposals"
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY created_at DESC, rowid DESC"

        conn = self._get_conn()
        try:
            rows = conn.execute(query, params).fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            if self._should_close():
                conn.close()

    def mark_reviewed(
        self,
        proposal_id: UUID,
        status: ProposalStatus,
        reviewer_id: str,
        reviewed_at: datetime,
        notes: str | None,
    ) -> bool:
        """
        Conditional transition out of 'pending'.

        Returns False when no pending row matched (already reviewed or gone).
        """
        conn = self._get_conn()
        try:
            cursor = conn.execute(
                """
                UPDATE proposals
                SET status = ?, reviewed_by = ?, reviewed_at = ?,
                    review_notes = ?, updated_at = ?
                WHERE id = ? AND status = 'pending'
                """,
                (
                    status,
                    reviewer_id,
                    reviewed_at.isoformat(),
                    notes,
                    reviewed_at.isoformat(),
                    str(proposal_id),
                ),
            )
            if self._should_close():
                conn.commit()
            return cursor.rowcount == 1
        finally:
            if self._should_close():
                conn.close()

    def delete(self, proposal_id: UUID) -> bool:
        conn = self._get_conn()
        try:
            cursor = conn.execute("DELETE FROM proposals WHERE id = ?", (str(proposal_id),))
            if self._should_close():
                conn.commit()
            return cursor.rowcount > 0
        finally:
            if self._should_close():
                conn.close()

    def _map_row(self, row: dict[str, Any]) -> Proposal:
        return Proposal(
            id=UUID(row["id"]),
            content_type=row["content_type"],
            content_data=_load_json(row["content_data"]) or {},
            status=row["status"],
            proposed_by=row["proposed_by"],
            reviewed_by=row["reviewed_by"],
            reviewed_at=parse_dt(row["reviewed_at"]),
            review_notes=row["review_notes"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


# -----------------------------------------------------------------------------
# Published collections
# -----------------------------------------------------------------------------


class SQLiteContentStore(SQLiteRepoBase):
    """
    Generic insert/update/select/delete over the published collections.

    Rows come back as plain dicts with JSON columns decoded and boolean
    columns converted back to bool.
    """

    STORE_COLUMNS = ("id", "created_at", "updated_at")

    def _model(self, collection: str) -> type[PublishedRecord]:
        model = model_for_collection(collection)
        if model is None:
            raise ValueError(
                f"Unknown collection: {collection!r} (expected one of {sorted(COLLECTIONS.values())})"
            )
        return model

    def _columns(self, model: type[PublishedRecord]) -> set[str]:
        return set(model.model_fields) | set(self.STORE_COLUMNS)

    def _check_columns(self, model: type[PublishedRecord], names: Any) -> None:
        unknown = set(names) - self._columns(model)
        if unknown:
            raise ValueError(f"Unknown column(s) for {model.__name__}: {sorted(unknown)}")

    def _encode(self, model: type[PublishedRecord], values: Mapping[str, Any]) -> dict[str, Any]:
        encoded_json = json_fields(model)
        out: dict[str, Any] = {}
        for name, value in values.items():
            if name in encoded_json:
                out[name] = _dump_json(value)
            elif isinstance(value, datetime):
                out[name] = value.isoformat()
            else:
                out[name] = value
        return out

    def _decode(self, model: type[PublishedRecord], row: dict[str, Any]) -> dict[str, Any]:
        encoded_json = json_fields(model)
        for name, info in model.model_fields.items():
            if name not in row:
                continue
            if name in encoded_json:
                row[name] = _load_json(row[name])
            elif info.annotation is bool and row[name] is not None:
                row[name] = bool(row[name])
        return row

    def insert(
        self,
        collection: str,
        record: PublishedRecord | Mapping[str, Any],
        now: datetime | None = None,
    ) -> dict[str, Any]:
        model = self._model(collection)
        values = dict(record.model_dump() if isinstance(record, PublishedRecord) else record)
        self._check_columns(model, values)

        stamp = (now or datetime.now(UTC)).isoformat()
        values.setdefault("id", str(uuid4()))
        values.setdefault("created_at", stamp)
        values.setdefault("updated_at", stamp)

        encoded = self._encode(model, values)
        columns = list(encoded)
        placeholders = ", ".join("?" for _ in columns)

        conn = self._get_conn()
        try:
            conn.execute(
                f"INSERT INTO {collection} ({', '.join(columns)}) VALUES ({placeholders})",
                [encoded[c] for c in columns],
            )
            row = conn.execute(
                f"SELECT * FROM {collection} WHERE id = ?", (values["id"],)
            ).fetchone()
            if self._should_close():
                conn.commit()
            return self._decode(model, row)
        finally:
            if self._should_close():
                conn.close()

    def update(
        self,
        collection: str,
        record_id: str,
        partial: Mapping[str, Any],
        now: datetime | None = None,
    ) -> dict[str, Any]:
        model = self._model(collection)
        values = {k: v for k, v in partial.items() if k not in ("id", "created_at")}
        self._check_columns(model, values)
        values["updated_at"] = (now or datetime.now(UTC)).isoformat()

        encoded = self._encode(model, values)
        assignments = ", ".join(f"{c} = ?" for c in encoded)

        conn = self._get_conn()
        try:
            cursor = conn.execute(
                f"UPDATE {collection} SET {assignments} WHERE id = ?",
                [*encoded.values(), record_id],
            )
            if cursor.rowcount == 0:
                raise NotFoundError(collection, record_id)
            row = conn.execute(
                f"SELECT * FROM {collection} WHERE id = ?", (record_id,)
            ).fetchone()
            if self._should_close():
                conn.commit()
            return self._decode(model, row)
        finally:
            if self._should_close():
                conn.close()

    def select(
        self,
        collection: str,
        filters: Mapping[str, Any] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Equality-filtered rows, newest first."""
        model = self._model(collection)
        filters = dict(filters or {})
        self._check_columns(model, filters)
        encoded = self._encode(model, filters)

        query = f"SELECT * FROM {collection}"
        if encoded:
            query += " WHERE " + " AND ".join(f"{c} = ?" for c in encoded)
        query += " ORDER BY created_at DESC, rowid DESC"
        params: list[Any] = list(encoded.values())
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        conn = self._get_conn()
        try:
            rows = conn.execute(query, params).fetchall()
            return [self._decode(model, r) for r in rows]
        finally:
            if self._should_close():
                conn.close()

    def exists(self, collection: str, filters: Mapping[str, Any]) -> bool:
        return bool(self.select(collection, filters, limit=1))

    def delete(self, collection: str, record_id: str) -> bool:
        self._model(collection)
        conn = self._get_conn()
        try:
            cursor = conn.execute(f"DELETE FROM {collection} WHERE id = ?", (record_id,))
            if self._should_close():
                conn.commit()
            return cursor.rowcount > 0
        finally:
            if self._should_close():
                conn.close()


# -----------------------------------------------------------------------------
# Activity log
# -----------------------------------------------------------------------------


class SQLiteActivityRepo(SQLiteRepoBase):
    """Append-only activity log."""

    def append(self, entry: ActivityLog) -> ActivityLog:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO activity_logs (
                    id, user_id, action, entity_type, entity_id,
                    old_data, new_data, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(entry.id),
                    entry.user_id,
                    entry.action,
                    entry.entity_type,
                    entry.entity_id,
                    _dump_json(entry.old_data),
                    _dump_json(entry.new_data),
                    entry.created_at.isoformat(),
                ),
            )
            if self._should_close():
                conn.commit()
            return entry
        finally:
            if self._should_close():
                conn.close()

    def list_for_entity(self, entity_type: str, entity_id: str) -> list[ActivityLog]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                """
                SELECT * FROM activity_logs
                WHERE entity_type = ? AND entity_id = ?
                ORDER BY created_at ASC, rowid ASC
                """,
                (entity_type, entity_id),
            ).fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            if self._should_close():
                conn.close()

    def _map_row(self, row: dict[str, Any]) -> ActivityLog:
        return ActivityLog(
            id=UUID(row["id"]),
            user_id=row["user_id"],
            action=row["action"],
            entity_type=row["entity_type"],
            entity_id=row["entity_id"],
            old_data=_load_json(row["old_data"]),
            new_data=_load_json(row["new_data"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )


# -----------------------------------------------------------------------------
# Unit of Work
# -----------------------------------------------------------------------------


class SQLiteUnitOfWork:
    """
    SQLite Unit of Work implementation.

    Provides transaction management and access to all repositories.
    Uses a shared connection for all operations within a transaction.
    Any sqlite3.Error raised inside the block rolls back and surfaces as
    QueryError.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None

        # Lazy-initialized repositories
        self._proposals: SQLiteProposalRepo | None = None
        self._profiles: SQLiteProfileRepo | None = None
        self._content: SQLiteContentStore | None = None
        self._activity: SQLiteActivityRepo | None = None

    def __enter__(self) -> SQLiteUnitOfWork:
        try:
            self._conn = connect(self.db_path)
        except sqlite3.Error as e:
            raise QueryError("connect") from e
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        try:
            if exc_type is not None:
                self.rollback()
        finally:
            if self._conn:
                self._conn.close()
                self._conn = None
        if isinstance(exc_val, sqlite3.Error):
            raise QueryError("transaction") from exc_val

    def commit(self) -> None:
        if self._conn:
            self._conn.commit()

    def rollback(self) -> None:
        if self._conn:
            self._conn.rollback()

    @property
    def proposals(self) -> SQLiteProposalRepo:
        if self._proposals is None:
            self._proposals = SQLiteProposalRepo(self.db_path, self._conn)
        return self._proposals

    @property
    def profiles(self) -> SQLiteProfileRepo:
        if self._profiles is None:
            self._profiles = SQLiteProfileRepo(self.db_path, self._conn)
        return self._profiles

    @property
    def content(self) -> SQLiteContentStore:
        if self._content is None:
            self._content = SQLiteContentStore(self.db_path, self._conn)
        return self._content

    @property
    def activity(self) -> SQLiteActivityRepo:
        if self._activity is None:
            self._activity = SQLiteActivityRepo(self.db_path, self._conn)
        return self._activity
