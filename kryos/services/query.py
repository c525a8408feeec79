from typing import List, Optional, Tuple

from kryos.domain import TransactionRecord, normalize_status
from kryos.errors import InputValidationError, NotFoundError
from kryos.repository import TransactionRepository


def newest_first(records: List[TransactionRecord]) -> List[TransactionRecord]:
    return sorted(records, key=lambda r: r.created_at, reverse=True)


def list_user_transactions(
    repo: TransactionRepository, user_id: str
) -> Tuple[List[TransactionRecord], int]:
    """
    All transactions owned by user_id, newest first.

    Storage is not asked to order the results; sorting happens here.
    """
    if not user_id:
        raise InputValidationError("User ID is required")
    records = [r for r in repo.list_for_user(user_id) if r.user_id == user_id]
    records = newest_first(records)
    return records, len(records)


def list_all_transactions(
    repo: TransactionRepository, status: Optional[str] = None
) -> List[TransactionRecord]:
    records = repo.list()
    if status:
        wanted = normalize_status(status)
        records = [r for r in records if r.status is wanted]
    return newest_first(records)


def get_transaction(repo: TransactionRepository, transaction_id: str) -> TransactionRecord:
    record = repo.get(transaction_id)
    if record is None:
        raise NotFoundError(f"Transaction {transaction_id} not found")
    return record
