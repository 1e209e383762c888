"""Port interfaces (Hexagonal Architecture)."""

from channel_escrow.ports.outbound import LedgerPort, PlatformPort, SessionProvider

__all__ = [
    "LedgerPort",
    "PlatformPort",
    "SessionProvider",
]
