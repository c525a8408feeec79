from abc import ABC, abstractmethod
from typing import Dict, Any


class BaseGateway(ABC):
    """Abstract base for payment gateway clients."""

    @abstractmethod
    def create_order(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create an order upstream.
        payload carries the amount already converted to minor units.
        Returns the gateway's order object.
        """
        pass

    @property
    @abstractmethod
    def gateway_name(self) -> str:
        pass

    @property
    @abstractmethod
    def key_id(self) -> str:
        """Public key identifier handed to the browser checkout widget."""
        pass
