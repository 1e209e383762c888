"""Service wiring shared by the FastAPI routes."""

import secrets
from dataclasses import dataclass
from typing import Optional

from fastapi import Header, Request

from channel_escrow.adapters.ledger.supabase import SupabaseLedger
from channel_escrow.adapters.telegram.session import TelethonSessionProvider
from channel_escrow.config import AppConfig
from channel_escrow.domain.orchestrator import TransferOrchestrator
from channel_escrow.errors import AuthError
from channel_escrow.ports.outbound import LedgerPort, SessionProvider


@dataclass
class Services:
    config: AppConfig
    sessions: SessionProvider
    orchestrator: TransferOrchestrator
    ledger: Optional[LedgerPort] = None


def build_services(config: AppConfig) -> Services:
    sessions = TelethonSessionProvider(config.telegram)
    ledger = SupabaseLedger(config.ledger)
    return Services(
        config=config,
        sessions=sessions,
        orchestrator=TransferOrchestrator(sessions, config, ledger),
        ledger=ledger,
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


SECRET_HEADER = "X-API-Secret"


def secret_matches(config: AppConfig, provided: Optional[str]) -> bool:
    if provided is None:
        return False
    return secrets.compare_digest(provided.encode("utf-8"), config.api_secret.encode("utf-8"))


async def verify_secret(
    request: Request,
    x_api_secret: Optional[str] = Header(default=None, alias=SECRET_HEADER),
) -> None:
    if not secret_matches(get_services(request).config, x_api_secret):
        raise AuthError("Unauthorized")
