"""
Transaction storage behind one get/list/put interface.

SqlTransactionRepository keeps one row per transaction id.
JsonSnapshotTransactionRepository is the offline variant: the whole collection
lives in a single JSON file that is re-read and rewritten on every put, so two
writers racing on different records can drop each other's change (last
snapshot wins).
"""
import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from kryos import models
from kryos.domain import TransactionRecord, check_immutable
from kryos.errors import PersistenceError

logger = logging.getLogger(__name__)


class TransactionRepository(ABC):

    @abstractmethod
    def get(self, transaction_id: str) -> Optional[TransactionRecord]:
        pass

    @abstractmethod
    def list(self) -> List[TransactionRecord]:
        """All records, in storage order."""
        pass

    def list_for_user(self, user_id: str) -> List[TransactionRecord]:
        return [record for record in self.list() if record.user_id == user_id]

    def put(self, record: TransactionRecord) -> TransactionRecord:
        """Insert or replace a record, refusing changes to immutable fields."""
        existing = self.get(record.id)
        if existing is not None:
            check_immutable(existing, record)
        self._write(record)
        return record

    @abstractmethod
    def _write(self, record: TransactionRecord) -> None:
        pass


def _row_to_record(row: models.Transaction) -> TransactionRecord:
    return TransactionRecord(
        id=row.id,
        user_id=row.user_id,
        amount=row.amount,
        currency=row.currency,
        receiver=row.receiver,
        description=row.description or "",
        status=row.status,
        gateway_order_id=row.gateway_order_id,
        gateway_payment_id=row.gateway_payment_id,
        gateway_signature=row.gateway_signature,
        signature_verified=bool(row.signature_verified),
        failure_reason=row.failure_reason,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SqlTransactionRepository(TransactionRepository):

    def __init__(self, db: Session):
        self.db = db

    def get(self, transaction_id: str) -> Optional[TransactionRecord]:
        try:
            row = self.db.query(models.Transaction).filter(
                models.Transaction.id == transaction_id
            ).first()
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to read transaction", detail=str(e))
        return _row_to_record(row) if row is not None else None

    def list(self) -> List[TransactionRecord]:
        try:
            rows = self.db.query(models.Transaction).all()
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to fetch transactions", detail=str(e))
        return [_row_to_record(row) for row in rows]

    def list_for_user(self, user_id: str) -> List[TransactionRecord]:
        # No ORDER BY: sorting is done by the caller
        try:
            rows = self.db.query(models.Transaction).filter(
                models.Transaction.user_id == user_id
            ).all()
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to fetch transactions", detail=str(e))
        return [_row_to_record(row) for row in rows]

    def _write(self, record: TransactionRecord) -> None:
        data = record.to_dict()
        data["created_at"] = record.created_at
        data["updated_at"] = record.updated_at
        try:
            self.db.merge(models.Transaction(**data))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Transaction write failed", extra={"transaction_id": record.id})
            raise PersistenceError("Failed to save transaction", detail=str(e))


class JsonSnapshotTransactionRepository(TransactionRepository):

    def __init__(self, path: str):
        self.path = path

    def _load(self) -> Dict[str, TransactionRecord]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            raise PersistenceError("Failed to read transaction snapshot", detail=str(e))
        records = [TransactionRecord.from_dict(item) for item in raw]
        return {record.id: record for record in records}

    def _dump(self, records: Dict[str, TransactionRecord]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = f"{self.path}.tmp"
        try:
            os.makedirs(directory, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump([record.to_dict() for record in records.values()], f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise PersistenceError("Failed to write transaction snapshot", detail=str(e))

    def get(self, transaction_id: str) -> Optional[TransactionRecord]:
        return self._load().get(transaction_id)

    def list(self) -> List[TransactionRecord]:
        return list(self._load().values())

    def _write(self, record: TransactionRecord) -> None:
        records = self._load()
        records[record.id] = record
        self._dump(records)
