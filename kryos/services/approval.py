"""
Admin approval of pending transactions.

    pending --approve--> completed   (shown to admins as "approved")
    pending --reject---> failed      (shown to admins as "rejected")

completed and failed are terminal. Each transition writes the whole new record
through the repository; there is no version check, so concurrent admins
follow last-writer-wins.
"""
import logging
from typing import Dict, List

from kryos.domain import TransactionRecord, TransactionStatus
from kryos.errors import InvalidTransitionError
from kryos.repository import TransactionRepository
from kryos.services.query import get_transaction

logger = logging.getLogger(__name__)

TRANSITIONS = {
    TransactionStatus.PENDING: {TransactionStatus.COMPLETED, TransactionStatus.FAILED},
    TransactionStatus.COMPLETED: set(),
    TransactionStatus.FAILED: set(),
}


def _transition(
    repo: TransactionRepository, record: TransactionRecord, target: TransactionStatus
) -> TransactionRecord:
    if target not in TRANSITIONS[record.status]:
        raise InvalidTransitionError(
            f"Transaction {record.id} is {record.status.value} and cannot become {target.value}"
        )
    if target is TransactionStatus.COMPLETED and not record.signature_verified:
        raise InvalidTransitionError(
            f"Transaction {record.id} has no verified signature and cannot be approved"
        )
    updated = repo.put(record.with_status(target))
    logger.info(
        "Transaction status changed",
        extra={"transaction_id": record.id, "from": record.status.value, "to": target.value},
    )
    return updated


def approve(repo: TransactionRepository, transaction_id: str) -> TransactionRecord:
    return _transition(repo, get_transaction(repo, transaction_id), TransactionStatus.COMPLETED)


def reject(repo: TransactionRepository, transaction_id: str) -> TransactionRecord:
    return _transition(repo, get_transaction(repo, transaction_id), TransactionStatus.FAILED)


def bulk_approve(repo: TransactionRepository) -> List[TransactionRecord]:
    """Approve every pending transaction in one pass. No pending records is a no-op."""
    pending = [r for r in repo.list() if r.status is TransactionStatus.PENDING]
    approved = []
    for record in pending:
        if not record.signature_verified:
            logger.warning("Skipping unverified pending transaction", extra={"transaction_id": record.id})
            continue
        approved.append(_transition(repo, record, TransactionStatus.COMPLETED))
    logger.info("Bulk approve finished", extra={"approved": len(approved)})
    return approved


def transaction_stats(repo: TransactionRepository) -> Dict[str, float]:
    records = repo.list()
    total = len(records)
    counts = {status: 0 for status in TransactionStatus}
    for record in records:
        counts[record.status] += 1
    completed_value = sum(
        r.amount for r in records if r.status is TransactionStatus.COMPLETED
    )
    return {
        "total_transactions": total,
        "pending_transactions": counts[TransactionStatus.PENDING],
        "approved_transactions": counts[TransactionStatus.COMPLETED],
        "rejected_transactions": counts[TransactionStatus.FAILED],
        "total_value": round(completed_value, 2),
        "approval_rate": round(counts[TransactionStatus.COMPLETED] * 100 / total) if total else 0,
        "rejection_rate": round(counts[TransactionStatus.FAILED] * 100 / total) if total else 0,
    }
