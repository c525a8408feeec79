import os
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

DEFAULT_GATEWAY_KEY_ID = "rzp_test_1234567890"
DEFAULT_GATEWAY_KEY_SECRET = "test_secret_key"


class Settings:
    """Application settings read from the environment."""

    def __init__(self) -> None:
        self.APP_MODE: str = os.getenv("APP_MODE", "development").lower()

        # Database
        self.DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./kryos.db")

        # Payment gateway
        self.GATEWAY_BASE_URL: str = os.getenv("GATEWAY_BASE_URL", "https://api.razorpay.com/v1")
        self.GATEWAY_KEY_ID: str = os.getenv("GATEWAY_KEY_ID", DEFAULT_GATEWAY_KEY_ID)
        self.GATEWAY_KEY_SECRET: str = os.getenv("GATEWAY_KEY_SECRET", DEFAULT_GATEWAY_KEY_SECRET)
        self.GATEWAY_TIMEOUT_SECONDS: float = float(os.getenv("GATEWAY_TIMEOUT_SECONDS", "10"))

        # Transaction persistence: "sql" (one row per id) or "json" (snapshot file)
        self.TRANSACTION_STORE: str = os.getenv("TRANSACTION_STORE", "sql").lower()
        self.TRANSACTION_SNAPSHOT_PATH: str = os.getenv(
            "TRANSACTION_SNAPSHOT_PATH", "./data/kryos_transactions.json"
        )

        # Media
        self.MEDIA_ROOT: str = os.getenv("MEDIA_ROOT", "./media")
        self.MEDIA_BASE_URL: str = os.getenv("MEDIA_BASE_URL", "http://localhost:8000/media")

        # Payment ceiling for non-admin users, in major currency units
        self.USER_MAX_PAYMENT_AMOUNT: float = float(os.getenv("USER_MAX_PAYMENT_AMOUNT", "1000000"))

        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG" if self.DEBUG else "INFO").upper()

        self._validate_settings()

    @property
    def IS_PRODUCTION(self) -> bool:
        return self.APP_MODE == "production"

    @property
    def DEBUG(self) -> bool:
        return not self.IS_PRODUCTION

    def _validate_settings(self) -> None:
        """Validate that required settings are present."""
        if self.TRANSACTION_STORE not in ("sql", "json"):
            raise ValueError(
                f"TRANSACTION_STORE must be 'sql' or 'json', got {self.TRANSACTION_STORE!r}"
            )

        if self.IS_PRODUCTION:
            if self.GATEWAY_KEY_SECRET == DEFAULT_GATEWAY_KEY_SECRET:
                raise ValueError(
                    "GATEWAY_KEY_SECRET must be set and secure in production mode"
                )
            if "sqlite" in self.DATABASE_URL.lower():
                raise ValueError("SQLite is not suitable for production")

    def __repr__(self) -> str:
        """Safe string representation hiding sensitive data."""
        return f"<Settings APP_MODE={self.APP_MODE} TRANSACTION_STORE={self.TRANSACTION_STORE}>"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
