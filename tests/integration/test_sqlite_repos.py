"""Integration tests for the SQLite repositories and unit of work."""

import sqlite3
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from src.adapters.sqlite.repos import (
    SQLiteActivityRepo,
    SQLiteContentStore,
    SQLiteProfileRepo,
    SQLiteProposalRepo,
    SQLiteUnitOfWork,
)
from src.components.transform import transform
from src.domain.entities import ActivityLog, Proposal, UserProfile
from src.domain.errors import NotFoundError, QueryError
from src.domain.records import PublishedRecord

FIXED = datetime(2025, 3, 14, 18, 30, tzinfo=UTC)


def _record(content_type, data, **updates) -> PublishedRecord:
    record = transform(content_type, data, proposal_id=None, proposed_by=None, now=FIXED)
    return record.model_copy(update=updates)


def _startup(name, **updates):
    return _record("startup", {"name": name}, **updates)


def _job(title, **extra):
    return {**_record("job", {"title": title}).model_dump(), **extra}


def _proposal(owner, now, content_type="startup", **kwargs):
    data = kwargs.pop("content_data", {"name": "Acme"})
    return Proposal(
        content_type=content_type,
        content_data=data,
        proposed_by=owner.id,
        created_at=now,
        updated_at=now,
        **kwargs,
    )


# --- Profiles ---


class TestProfileRepo:
    def test_save_and_get(self, db_path):
        repo = SQLiteProfileRepo(db_path)
        profile = UserProfile(email="Ana@Example.com", full_name="Ana", role="editor")
        repo.save(profile)

        fetched = repo.get_by_id(profile.id)
        assert fetched is not None
        assert fetched.role == "editor"
        assert fetched.is_active is True

    def test_email_lookup_is_case_insensitive(self, db_path):
        repo = SQLiteProfileRepo(db_path)
        profile = repo.save(UserProfile(email="Ana@Example.com"))

        assert repo.get_by_email("ana@example.com").id == profile.id
        assert repo.get_by_email("nobody@example.com") is None

    def test_save_upserts(self, db_path):
        repo = SQLiteProfileRepo(db_path)
        profile = repo.save(UserProfile(email="ana@example.com"))
        repo.save(profile.model_copy(update={"is_active": False, "full_name": "Ana L."}))

        fetched = repo.get_by_id(profile.id)
        assert fetched.is_active is False
        assert fetched.full_name == "Ana L."
        assert len(repo.list_all()) == 1


# --- Proposals ---


class TestProposalRepo:
    def test_insert_round_trip_keeps_unicode_payload(self, db_path, submitter, clock):
        repo = SQLiteProposalRepo(db_path)
        p = _proposal(submitter, clock.now_utc(), content_data={"name": "Café Árbol", "tags": ["defi"]})
        repo.insert(p)

        fetched = repo.get_by_id(p.id)
        assert fetched == p

    def test_get_missing(self, db_path):
        assert SQLiteProposalRepo(db_path).get_by_id(uuid4()) is None

    def test_list_newest_first_and_filters(self, db_path, submitter, editor, clock):
        repo = SQLiteProposalRepo(db_path)
        now = clock.now_utc()
        older = repo.insert(_proposal(submitter, now - timedelta(hours=1)))
        newer = repo.insert(_proposal(editor, now, content_type="event", content_data={"title": "M"}))

        assert [p.id for p in repo.list()] == [newer.id, older.id]
        assert [p.id for p in repo.list({"content_type": "event"})] == [newer.id]
        assert [p.id for p in repo.list({"proposed_by": submitter.id, "status": None})] == [older.id]
        assert repo.list({"status": "approved"}) == []

    def test_list_rejects_unknown_filter(self, db_path):
        with pytest.raises(ValueError):
            SQLiteProposalRepo(db_path).list({"content_data": "x"})

    def test_mark_reviewed_only_from_pending(self, db_path, submitter, editor, clock):
        repo = SQLiteProposalRepo(db_path)
        p = repo.insert(_proposal(submitter, clock.now_utc()))

        assert repo.mark_reviewed(p.id, "approved", editor.id, clock.now_utc(), "ok") is True
        assert repo.mark_reviewed(p.id, "rejected", editor.id, clock.now_utc(), "no") is False

        fetched = repo.get_by_id(p.id)
        assert fetched.status == "approved"
        assert fetched.reviewed_by == editor.id
        assert fetched.reviewed_at == clock.now_utc()
        assert fetched.review_notes == "ok"

    def test_delete(self, db_path, submitter, clock):
        repo = SQLiteProposalRepo(db_path)
        p = repo.insert(_proposal(submitter, clock.now_utc()))

        assert repo.delete(p.id) is True
        assert repo.delete(p.id) is False
        assert repo.get_by_id(p.id) is None

    def test_proposed_by_must_reference_profile(self, db_path, clock):
        orphan = UserProfile(email="ghost@example.com")
        with pytest.raises(sqlite3.IntegrityError):
            SQLiteProposalRepo(db_path).insert(_proposal(orphan, clock.now_utc()))


# --- Content store ---


class TestContentStore:
    def test_insert_defaults_and_decodes(self, db_path, clock):
        store = SQLiteContentStore(db_path)
        record = _startup("Acme", tags=["defi", "pagos"], proposal_id="p-1")

        row = store.insert("startups", record, now=clock.now_utc())

        assert row["id"]
        assert row["created_at"] == clock.now_utc().isoformat()
        assert row["tags"] == ["defi", "pagos"]
        assert row["is_featured"] is False
        assert row["view_count"] == 0

    def test_insert_mapping_keeps_given_id(self, db_path):
        store = SQLiteContentStore(db_path)
        row = store.insert("jobs", _job("Dev", id="job-1"))
        assert row["id"] == "job-1"

    def test_unknown_collection(self, db_path):
        with pytest.raises(ValueError, match="Unknown collection"):
            SQLiteContentStore(db_path).select("users")

    def test_unknown_column(self, db_path):
        with pytest.raises(ValueError, match="Unknown column"):
            SQLiteContentStore(db_path).insert("jobs", _job("Dev", **{"x; DROP": 1}))

    def test_select_filters_and_limit(self, db_path, clock):
        store = SQLiteContentStore(db_path)
        now = clock.now_utc()
        store.insert("startups", _startup("A", is_featured=True), now=now)
        store.insert("startups", _startup("B"), now=now + timedelta(minutes=1))
        store.insert("startups", _startup("C"), now=now + timedelta(minutes=2))

        assert [r["slug"] for r in store.select("startups")] == ["c", "b", "a"]
        assert [r["slug"] for r in store.select("startups", {"is_featured": True})] == ["a"]
        assert len(store.select("startups", limit=2)) == 2
        assert store.exists("startups", {"slug": "b"}) is True
        assert store.exists("startups", {"slug": "z"}) is False

    def test_update_partial(self, db_path, clock):
        store = SQLiteContentStore(db_path)
        row = store.insert("startups", _startup("Acme"), now=clock.now_utc())

        later = clock.advance(hours=1)
        updated = store.update("startups", row["id"], {"tags": ["nft"], "id": "ignored"}, now=later)

        assert updated["id"] == row["id"]
        assert updated["tags"] == ["nft"]
        assert updated["updated_at"] == later.isoformat()
        assert updated["created_at"] == row["created_at"]

    def test_update_missing_raises(self, db_path):
        with pytest.raises(NotFoundError):
            SQLiteContentStore(db_path).update("startups", "nope", {"name": "x"})

    def test_delete(self, db_path):
        store = SQLiteContentStore(db_path)
        row = store.insert("jobs", _job("Dev"))

        assert store.delete("jobs", row["id"]) is True
        assert store.delete("jobs", row["id"]) is False


# --- Activity ---


def test_activity_append_and_list(db_path, clock):
    repo = SQLiteActivityRepo(db_path)
    now = clock.now_utc()
    first = repo.append(
        ActivityLog(user_id="u", action="create", entity_type="proposal", entity_id="p",
                    new_data={"status": "pending"}, created_at=now)
    )
    repo.append(
        ActivityLog(user_id="e", action="approve", entity_type="proposal", entity_id="p",
                    created_at=now + timedelta(seconds=1))
    )
    repo.append(ActivityLog(user_id="u", action="create", entity_type="proposal", entity_id="q"))

    entries = repo.list_for_entity("proposal", "p")
    assert [e.action for e in entries] == ["create", "approve"]
    assert entries[0] == first


# --- Unit of work ---


class TestUnitOfWork:
    def test_commit_persists(self, uow_factory, submitter, clock):
        p = _proposal(submitter, clock.now_utc())
        with uow_factory() as uow:
            uow.proposals.insert(p)
            uow.commit()

        with uow_factory() as uow:
            assert uow.proposals.get_by_id(p.id) is not None

    def test_no_commit_discards(self, uow_factory, submitter, clock):
        p = _proposal(submitter, clock.now_utc())
        with uow_factory() as uow:
            uow.proposals.insert(p)

        with uow_factory() as uow:
            assert uow.proposals.get_by_id(p.id) is None

    def test_exception_rolls_back_all_repos(self, uow_factory, submitter, clock):
        p = _proposal(submitter, clock.now_utc())
        with pytest.raises(RuntimeError):
            with uow_factory() as uow:
                uow.proposals.insert(p)
                uow.content.insert("startups", _startup("Acme"))
                raise RuntimeError("boom")

        with uow_factory() as uow:
            assert uow.proposals.get_by_id(p.id) is None
            assert uow.content.select("startups") == []

    def test_driver_error_becomes_query_error(self, uow_factory):
        with pytest.raises(QueryError) as exc:
            with uow_factory() as uow:
                uow.content.insert("jobs", _job("A", id="same"))
                uow.content.insert("jobs", _job("B", id="same"))

        assert exc.value.operation == "transaction"
        assert isinstance(exc.value.__cause__, sqlite3.IntegrityError)

    def test_connect_failure(self, tmp_path):
        with pytest.raises(QueryError) as exc:
            with SQLiteUnitOfWork(str(tmp_path / "missing" / "db.sqlite")):
                pass

        assert exc.value.operation == "connect"
