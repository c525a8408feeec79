"""
Payment order creation.

Amounts are carried in major units everywhere in this service and converted
to minor units (x100) only here, immediately before the gateway call.
"""
import logging
import math
import time
from typing import Any, Dict, Optional

from kryos import policy
from kryos.errors import InputValidationError, PermissionDeniedError
from kryos.processors.base import BaseGateway

logger = logging.getLogger(__name__)

MINOR_UNITS_PER_MAJOR = 100


def to_minor_units(amount: float) -> int:
    return int(round(amount * MINOR_UNITS_PER_MAJOR))


def default_receipt() -> str:
    return f"rcpt_{int(time.time() * 1000)}"


def build_order_payload(
    amount: float,
    currency: str = "INR",
    receipt: Optional[str] = None,
    notes: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    if amount is None or not math.isfinite(amount) or amount <= 0:
        raise InputValidationError("Valid amount is required")
    return {
        "amount": to_minor_units(amount),
        "currency": currency or "INR",
        "receipt": receipt or default_receipt(),
        "notes": notes or {},
    }


def create_order(
    gateway: BaseGateway,
    amount: float,
    currency: str = "INR",
    receipt: Optional[str] = None,
    notes: Optional[Dict[str, Any]] = None,
    role: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create a gateway order for a checkout.

    Raises:
        InputValidationError: non-positive amount
        PermissionDeniedError: amount above the caller's payment ceiling
        UpstreamError: gateway refused or was unreachable (not retried)
    """
    payload = build_order_payload(amount, currency, receipt, notes)

    if policy.exceeds_ceiling(role, amount):
        ceiling = policy.max_payment_amount(role)
        raise PermissionDeniedError(
            f"Payment amount cannot exceed {ceiling:,.0f} for regular users"
        )

    order = gateway.create_order(payload)
    logger.info(
        "Order created",
        extra={"gateway": gateway.gateway_name, "order_id": order.get("id"),
               "amount_minor": payload["amount"], "currency": payload["currency"]},
    )
    return {"order": order, "key_id": gateway.key_id}
