from pydantic import AliasChoices, BaseModel, Field, field_validator
from typing import Any, Dict, Optional


class OrderDetails(BaseModel):
    """What the user was paying for, in major currency units."""
    amount: float = Field(gt=0, allow_inf_nan=False)
    currency: str = "INR"
    receiver: str = Field(min_length=1)
    description: Optional[str] = ""

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v):
        return (v or "INR").upper()


class GatewayCallback(BaseModel):
    # Fields are optional so a missing one surfaces as a 400 from verification,
    # before any HMAC is computed.
    order_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("order_id", "razorpay_order_id")
    )
    payment_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("payment_id", "razorpay_payment_id")
    )
    signature: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("signature", "razorpay_signature")
    )


class CreateOrderRequest(BaseModel):
    amount: Optional[float] = Field(default=None, allow_inf_nan=False)
    currency: str = "INR"
    receipt: Optional[str] = None
    notes: Dict[str, Any] = {}
    user_id: Optional[str] = None


class VerifyPaymentRequest(GatewayCallback):
    order_details: OrderDetails
    user_id: Optional[str] = None


class SubmitPaymentRequest(VerifyPaymentRequest):
    pass


class FailedPaymentRequest(BaseModel):
    order_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("order_id", "razorpay_order_id")
    )
    order_details: OrderDetails
    user_id: Optional[str] = None
    failure_reason: Optional[str] = None


class RegisterUserRequest(BaseModel):
    id: str = Field(min_length=1)
    email: str = Field(min_length=3)
    display_name: Optional[str] = None


class UpdateProfileRequest(BaseModel):
    email: Optional[str] = None
    display_name: Optional[str] = None


class DeleteMediaRequest(BaseModel):
    public_id: Optional[str] = None


class SetRoleRequest(BaseModel):
    role: str
