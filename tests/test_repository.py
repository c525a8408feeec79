"""
Contract tests run against both repository implementations.
"""
import json
from unittest.mock import patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from kryos.domain import TransactionStatus
from kryos.errors import ImmutableFieldError, PersistenceError
from kryos.repository import JsonSnapshotTransactionRepository, SqlTransactionRepository
from tests.conftest import make_record


@pytest.fixture(params=["sql", "json"])
def any_repo(request, db, tmp_path):
    if request.param == "sql":
        return SqlTransactionRepository(db)
    return JsonSnapshotTransactionRepository(str(tmp_path / "transactions.json"))


class TestRepositoryContract:
    def test_put_then_get(self, any_repo):
        record = make_record(any_repo)
        assert any_repo.get(record.id) == record

    def test_get_missing(self, any_repo):
        assert any_repo.get("txn_missing") is None

    def test_list_for_user(self, any_repo):
        make_record(any_repo, user_id="a")
        make_record(any_repo, user_id="b")
        assert [r.user_id for r in any_repo.list_for_user("a")] == ["a"]
        assert len(any_repo.list()) == 2

    def test_status_change_allowed(self, any_repo):
        record = make_record(any_repo)
        any_repo.put(record.with_status("approved"))
        assert any_repo.get(record.id).status is TransactionStatus.COMPLETED

    def test_rewriting_gateway_fields_refused(self, any_repo):
        from dataclasses import replace
        record = make_record(any_repo)
        with pytest.raises(ImmutableFieldError):
            any_repo.put(replace(record, gateway_signature="forged"))
        with pytest.raises(ImmutableFieldError):
            any_repo.put(replace(record, signature_verified=False, status="failed"))
        assert any_repo.get(record.id) == record


class TestSqlWriteFailure:
    def test_commit_error_rolls_back_and_raises_persistence_error(self, db):
        repo = SqlTransactionRepository(db)
        with patch.object(db, "commit", side_effect=SQLAlchemyError("disk I/O error")):
            with pytest.raises(PersistenceError) as exc:
                make_record(repo)
        assert exc.value.status_code == 503
        assert exc.value.detail == "disk I/O error"
        assert repo.list() == []


class TestJsonSnapshot:
    def test_every_put_rewrites_the_whole_collection(self, tmp_path):
        path = tmp_path / "transactions.json"
        repo = JsonSnapshotTransactionRepository(str(path))
        first = make_record(repo, user_id="a")
        second = make_record(repo, user_id="b")

        data = json.loads(path.read_text())
        assert {item["id"] for item in data} == {first.id, second.id}

    def test_last_writer_wins(self, tmp_path):
        path = str(tmp_path / "transactions.json")
        repo = JsonSnapshotTransactionRepository(path)
        a = make_record(repo, user_id="a")
        b = make_record(repo, user_id="b")

        # two sessions load the same snapshot, each changes a different record
        stale_session = repo._load()
        repo.put(a.with_status("approved"))
        stale_session[b.id] = b.with_status("rejected")
        repo._dump(stale_session)

        assert repo.get(a.id).status is TransactionStatus.PENDING
        assert repo.get(b.id).status is TransactionStatus.FAILED

    def test_corrupt_snapshot_raises_persistence_error(self, tmp_path):
        path = tmp_path / "transactions.json"
        path.write_text("{not json")
        with pytest.raises(PersistenceError):
            JsonSnapshotTransactionRepository(str(path)).list()
