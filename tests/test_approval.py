"""
Unit tests for the approval state machine in kryos/services/approval.py.
"""
import pytest

from kryos.domain import TransactionStatus
from kryos.errors import InvalidTransitionError, NotFoundError
from kryos.services import approval
from tests.conftest import make_record


class TestSingleTransitions:
    def test_approve_pending(self, repo):
        record = make_record(repo)
        approved = approval.approve(repo, record.id)

        assert approved.status is TransactionStatus.COMPLETED
        assert repo.get(record.id).status is TransactionStatus.COMPLETED
        assert approved.updated_at >= record.updated_at

    def test_reject_pending(self, repo):
        record = make_record(repo)
        rejected = approval.reject(repo, record.id)

        assert rejected.status is TransactionStatus.FAILED
        # only status changes on reject
        assert rejected.gateway_payment_id == record.gateway_payment_id
        assert rejected.signature_verified is True
        assert rejected.failure_reason is None

    @pytest.mark.parametrize("terminal", [TransactionStatus.COMPLETED, TransactionStatus.FAILED])
    def test_terminal_states_cannot_move(self, repo, terminal):
        record = make_record(repo, status=terminal)
        with pytest.raises(InvalidTransitionError):
            approval.approve(repo, record.id)
        with pytest.raises(InvalidTransitionError):
            approval.reject(repo, record.id)
        assert repo.get(record.id).status is terminal

    def test_unverified_pending_cannot_be_approved(self, repo):
        record = make_record(repo, verified=False)
        with pytest.raises(InvalidTransitionError):
            approval.approve(repo, record.id)

    def test_unknown_transaction(self, repo):
        with pytest.raises(NotFoundError):
            approval.approve(repo, "txn_missing")


class TestBulkApprove:
    def test_approves_all_pending_only(self, repo):
        pending = [make_record(repo, user_id=f"user_{i}") for i in range(3)]
        failed = make_record(repo, status=TransactionStatus.FAILED, user_id="user_x")

        approved = approval.bulk_approve(repo)

        assert sorted(r.id for r in approved) == sorted(r.id for r in pending)
        assert all(repo.get(r.id).status is TransactionStatus.COMPLETED for r in pending)
        assert repo.get(failed.id).status is TransactionStatus.FAILED

    def test_no_pending_is_noop(self, repo):
        completed = make_record(repo, status=TransactionStatus.COMPLETED)
        before = repo.get(completed.id)

        assert approval.bulk_approve(repo) == []
        assert repo.get(completed.id) == before

    def test_empty_store(self, repo):
        assert approval.bulk_approve(repo) == []


class TestStats:
    def test_counts_and_rates(self, repo):
        make_record(repo, user_id="a")
        make_record(repo, user_id="b", status=TransactionStatus.COMPLETED, amount=250)
        make_record(repo, user_id="c", status=TransactionStatus.COMPLETED, amount=750)
        make_record(repo, user_id="d", status=TransactionStatus.FAILED)

        stats = approval.transaction_stats(repo)

        assert stats["total_transactions"] == 4
        assert stats["pending_transactions"] == 1
        assert stats["approved_transactions"] == 2
        assert stats["rejected_transactions"] == 1
        assert stats["total_value"] == 1000
        assert stats["approval_rate"] == 50
        assert stats["rejection_rate"] == 25

    def test_empty(self, repo):
        stats = approval.transaction_stats(repo)
        assert stats["total_transactions"] == 0
        assert stats["approval_rate"] == 0
