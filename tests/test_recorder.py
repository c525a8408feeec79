"""
Unit tests for kryos/services/recorder.py and kryos/services/query.py
against the SQL repository.
"""
from datetime import datetime, timedelta, timezone

import pytest

from kryos.domain import TransactionRecord, TransactionStatus
from kryos.errors import InputValidationError, NotFoundError, PermissionDeniedError
from kryos.schemas.requests import GatewayCallback, OrderDetails
from kryos.services import query, recorder
from tests.conftest import SECRET, make_record, sign

DETAILS = OrderDetails(amount=500, currency="INR", receiver="Acme Supplies", description="Invoice 7")


def callback(order_id="order_1", payment_id="pay_1", signature=None):
    return GatewayCallback(
        order_id=order_id,
        payment_id=payment_id,
        signature=signature if signature is not None else sign(order_id, payment_id),
    )


class TestRecordVerifiedPayment:
    def test_verified_callback_is_completed(self, repo):
        record = recorder.record_verified_payment(repo, callback(), DETAILS, "user_1", SECRET)

        stored = repo.get(record.id)
        assert stored.status is TransactionStatus.COMPLETED
        assert stored.signature_verified is True
        assert stored.amount == 500
        assert stored.currency == "INR"
        assert stored.gateway_payment_id == "pay_1"
        assert stored.failure_reason is None

    def test_signature_mismatch_is_failed_not_raised(self, repo):
        record = recorder.record_verified_payment(
            repo, callback(signature="f" * 64), DETAILS, "user_1", SECRET
        )
        assert record.status is TransactionStatus.FAILED
        assert record.signature_verified is False
        assert record.failure_reason == recorder.SIGNATURE_FAILURE_REASON
        assert repo.get(record.id) == record

    def test_missing_signature_rejected_before_persisting(self, repo):
        with pytest.raises(InputValidationError):
            recorder.record_verified_payment(
                repo, GatewayCallback(order_id="order_1", payment_id="pay_1"), DETAILS, "user_1", SECRET
            )
        assert repo.list() == []

    def test_each_callback_gets_a_fresh_id(self, repo):
        first = recorder.record_verified_payment(repo, callback(), DETAILS, "user_1", SECRET)
        second = recorder.record_verified_payment(repo, callback(), DETAILS, "user_1", SECRET)
        assert first.id != second.id
        assert first.id.startswith("txn_")
        assert len(repo.list()) == 2


class TestRecordFailedPayment:
    def test_cancellation_yields_one_failed_record_with_reason(self, repo):
        record = recorder.record_failed_payment(repo, "order_1", DETAILS, "user_1")

        records = repo.list()
        assert len(records) == 1
        assert records[0].id == record.id
        assert record.status is TransactionStatus.FAILED
        assert record.failure_reason == "Payment cancelled by user"
        assert record.gateway_payment_id is None
        assert record.signature_verified is False

    def test_blank_reason_falls_back_to_default(self, repo):
        record = recorder.record_failed_payment(repo, "order_1", DETAILS, "user_1", "   ")
        assert record.failure_reason == recorder.DEFAULT_CANCEL_REASON

    def test_custom_reason_kept(self, repo):
        record = recorder.record_failed_payment(repo, "order_1", DETAILS, "user_1", "Card declined")
        assert record.failure_reason == "Card declined"

    def test_missing_order_id(self, repo):
        with pytest.raises(InputValidationError):
            recorder.record_failed_payment(repo, None, DETAILS, "user_1")


class TestSubmitPayment:
    def test_user_payment_waits_for_approval(self, repo):
        record = recorder.submit_payment(repo, callback(), DETAILS, "user_1", "user", SECRET)
        assert record.status is TransactionStatus.PENDING
        assert record.signature_verified is True

    def test_admin_payment_completes_immediately(self, repo):
        record = recorder.submit_payment(repo, callback(), DETAILS, "admin_1", "admin", SECRET)
        assert record.status is TransactionStatus.COMPLETED

    def test_bad_signature_fails_regardless_of_role(self, repo):
        record = recorder.submit_payment(
            repo, callback(signature="0" * 64), DETAILS, "admin_1", "admin", SECRET
        )
        assert record.status is TransactionStatus.FAILED

    def test_user_ceiling_enforced(self, repo):
        big = OrderDetails(amount=2_000_000, receiver="Acme Supplies")
        with pytest.raises(PermissionDeniedError):
            recorder.submit_payment(repo, callback(), big, "user_1", "user", SECRET)
        assert repo.list() == []


class TestInvariants:
    def test_completed_without_verified_signature_cannot_be_built(self):
        with pytest.raises(InputValidationError):
            TransactionRecord(
                user_id="user_1", amount=10, receiver="x",
                status=TransactionStatus.COMPLETED, signature_verified=False,
            )

    @pytest.mark.parametrize("amount", [float("inf"), float("nan")])
    def test_non_finite_amount_cannot_be_built(self, amount):
        with pytest.raises(InputValidationError):
            TransactionRecord(
                user_id="user_1", amount=amount, receiver="x",
                status=TransactionStatus.PENDING, signature_verified=True,
            )

    def test_every_completed_record_is_verified(self, repo):
        recorder.record_verified_payment(repo, callback(), DETAILS, "user_1", SECRET)
        recorder.record_verified_payment(repo, callback(signature="a" * 64), DETAILS, "user_1", SECRET)
        recorder.record_failed_payment(repo, "order_2", DETAILS, "user_1")
        for record in repo.list():
            if record.status is TransactionStatus.COMPLETED:
                assert record.signature_verified


class TestQuery:
    def test_lists_only_the_users_records_newest_first(self, repo):
        now = datetime.now(timezone.utc)
        make_record(repo, user_id="user_a", created_at=now - timedelta(days=2), txn_id="txn_old")
        make_record(repo, user_id="user_a", created_at=now - timedelta(hours=1), txn_id="txn_new")
        make_record(repo, user_id="user_b", created_at=now, txn_id="txn_other")

        records, total = query.list_user_transactions(repo, "user_a")

        assert total == 2
        assert [r.id for r in records] == ["txn_new", "txn_old"]
        assert all(r.user_id == "user_a" for r in records)

    def test_unknown_user_gets_empty_list(self, repo):
        assert query.list_user_transactions(repo, "nobody") == ([], 0)

    def test_user_id_required(self, repo):
        with pytest.raises(InputValidationError):
            query.list_user_transactions(repo, "")

    def test_get_missing_transaction(self, repo):
        with pytest.raises(NotFoundError):
            query.get_transaction(repo, "txn_missing")

    def test_filter_by_admin_vocabulary(self, repo):
        make_record(repo, txn_id="txn_p")
        make_record(repo, status=TransactionStatus.COMPLETED, txn_id="txn_c")
        assert [r.id for r in query.list_all_transactions(repo, "approved")] == ["txn_c"]
        assert [r.id for r in query.list_all_transactions(repo, "pending")] == ["txn_p"]
