from pydantic import BaseModel, ConfigDict
from typing import Optional, List, Dict, Any
from datetime import datetime

from kryos.domain import ADMIN_LABELS, TransactionRecord


class TransactionResponse(BaseModel):
    id: str
    user_id: str
    amount: float
    currency: str
    receiver: str
    description: str
    status: str
    gateway_order_id: Optional[str] = None
    gateway_payment_id: Optional[str] = None
    signature_verified: bool
    failure_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: TransactionRecord) -> "TransactionResponse":
        # The signature itself is never echoed back
        return cls(
            id=record.id,
            user_id=record.user_id,
            amount=record.amount,
            currency=record.currency,
            receiver=record.receiver,
            description=record.description,
            status=record.status.value,
            gateway_order_id=record.gateway_order_id,
            gateway_payment_id=record.gateway_payment_id,
            signature_verified=record.signature_verified,
            failure_reason=record.failure_reason,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class AdminTransactionResponse(TransactionResponse):
    approval_status: str  # pending / approved / rejected

    @classmethod
    def from_record(cls, record: TransactionRecord) -> "AdminTransactionResponse":
        base = TransactionResponse.from_record(record)
        return cls(**base.model_dump(), approval_status=ADMIN_LABELS[record.status])


class CreateOrderResponse(BaseModel):
    success: bool = True
    order: Dict[str, Any]
    key_id: str


class VerifyPaymentResponse(BaseModel):
    success: bool = True
    verified: bool
    transaction_id: str
    status: str
    message: str


class RecordedPaymentResponse(BaseModel):
    success: bool = True
    transaction_id: str
    status: str
    message: str
    needs_approval: bool = False


class TransactionListResponse(BaseModel):
    success: bool = True
    transactions: List[TransactionResponse]
    total: int


class AdminTransactionListResponse(BaseModel):
    transactions: List[AdminTransactionResponse]
    total: int


class BulkApproveResponse(BaseModel):
    approved: int
    transaction_ids: List[str]
    message: str


class StatsResponse(BaseModel):
    total_transactions: int
    pending_transactions: int
    approved_transactions: int
    rejected_transactions: int
    total_value: float
    approval_rate: int
    rejection_rate: int
    total_users: int
    admin_users: int


class UserResponse(BaseModel):
    id: str
    email: str
    display_name: Optional[str] = None
    role: str
    profile_updated_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserListResponse(BaseModel):
    users: List[UserResponse]
    total: int


class MediaFile(BaseModel):
    id: str
    name: str
    type: str
    size: int
    url: str
    public_id: str
    user_id: str
    uploaded_at: datetime
    format: Optional[str] = None


class UploadResponse(BaseModel):
    success: bool = True
    url: str
    file: MediaFile


class MediaListResponse(BaseModel):
    success: bool = True
    files: List[MediaFile]
    total: int


class DeleteMediaResponse(BaseModel):
    success: bool = True
    message: str
    result: str


class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None
