"""Configuration: one immutable record built from the environment."""

import os
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from dotenv import load_dotenv

INSECURE_API_SECRET = "change-me-in-production"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


@dataclass(frozen=True)
class TelegramConfig:
    session_string: str = ""
    two_factor_password: str = ""
    api_id: int = 0
    api_hash: str = ""
    connection_retries: int = 5

    @property
    def is_configured(self) -> bool:
        return bool(self.session_string.strip() and self.api_id and self.api_hash)


@dataclass(frozen=True)
class LedgerConfig:
    url: str = ""
    service_key: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.service_key)


@dataclass(frozen=True)
class TransferPolicy:
    # A full page signals more admins than one request returns.
    admin_page_limit: int = 200
    # None keeps revocation permissive: any number of failures proceeds to handoff.
    max_revocation_failures: Optional[int] = None


@dataclass(frozen=True)
class AppConfig:
    """Typed configuration passed into the session provider and orchestrator."""

    port: int = 3000
    api_secret: str = INSECURE_API_SECRET
    cors_origins: Tuple[str, ...] = ("*",)
    expose_error_stack: bool = True
    log_level: str = "INFO"
    telegram: TelegramConfig = field(default_factory=TelegramConfig)
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    policy: TransferPolicy = field(default_factory=TransferPolicy)

    @property
    def uses_insecure_secret(self) -> bool:
        return self.api_secret == INSECURE_API_SECRET

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create AppConfig from environment variables (and .env, if present)."""
        load_dotenv()
        origins = tuple(
            o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
        )
        return cls(
            port=_env_int("PORT", 3000),
            api_secret=os.getenv("API_SECRET") or INSECURE_API_SECRET,
            cors_origins=origins or ("*",),
            expose_error_stack=_env_bool("EXPOSE_ERROR_STACK", True),
            log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
            telegram=TelegramConfig(
                session_string=os.getenv("TELEGRAM_ADMIN_SESSION_STRING", ""),
                two_factor_password=os.getenv("TELEGRAM_ADMIN_2FA_PASSWORD", ""),
                api_id=_env_int("TELEGRAM_API_ID", 0),
                api_hash=os.getenv("TELEGRAM_API_HASH", ""),
                connection_retries=_env_int("TELEGRAM_CONNECTION_RETRIES", 5),
            ),
            ledger=LedgerConfig(
                url=os.getenv("SUPABASE_URL", "").rstrip("/"),
                service_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY", ""),
            ),
            policy=TransferPolicy(
                admin_page_limit=_env_int("ADMIN_PAGE_LIMIT", 200),
                max_revocation_failures=_env_optional_int("MAX_ADMIN_REVOCATION_FAILURES"),
            ),
        )

    def describe(self) -> Dict[str, str]:
        """Set/missing summary for the startup configuration check. Never includes secret values."""

        def _flag(value) -> str:
            return "set" if value else "missing"

        return {
            "session_string": _flag(self.telegram.session_string.strip()),
            "two_factor_password": _flag(self.telegram.two_factor_password),
            "api_id": str(self.telegram.api_id) if self.telegram.api_id else "missing",
            "api_hash": _flag(self.telegram.api_hash),
            "ledger_url": _flag(self.ledger.url),
            "ledger_key": _flag(self.ledger.service_key),
            "api_secret": "default (insecure)" if self.uses_insecure_secret else "set",
        }
