import logging
from typing import Dict, Any

import requests

from kryos.errors import UpstreamError
from kryos.processors.base import BaseGateway

logger = logging.getLogger(__name__)


class RazorpayGateway(BaseGateway):
    """
    Razorpay orders API.
    Endpoint: POST {base_url}/orders, HTTP basic auth (key_id, key_secret)
    Amount: minor units (paise for INR)
    Errors: {"error": {"code": ..., "description": ...}}
    """

    def __init__(self, key_id: str, key_secret: str, base_url: str, timeout: float = 10):
        self._key_id = key_id
        self._key_secret = key_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    def gateway_name(self) -> str:
        return "razorpay"

    @property
    def key_id(self) -> str:
        return self._key_id

    def create_order(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        logger.info(
            "Creating gateway order",
            extra={"amount": payload.get("amount"), "currency": payload.get("currency"),
                   "receipt": payload.get("receipt")},
        )
        try:
            response = requests.post(
                f"{self.base_url}/orders",
                json=payload,
                auth=(self._key_id, self._key_secret),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Gateway unreachable", extra={"error": str(e)})
            raise UpstreamError("Failed to create payment order", detail=str(e))

        if not response.ok:
            description = _error_description(response)
            logger.error(
                "Gateway rejected order",
                extra={"status_code": response.status_code, "error": description},
            )
            raise UpstreamError(
                "Failed to create payment order",
                detail=f"Gateway API error: {description}",
            )

        order = response.json()
        logger.info("Gateway order created", extra={"order_id": order.get("id")})
        return order


def _error_description(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or "Unknown error"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("description"):
        return error["description"]
    return "Unknown error"
