"""Channel Escrow: settles marketplace sales by handing channel ownership to the buyer."""

__version__ = "1.0.0"

from channel_escrow.config import AppConfig, LedgerConfig, TelegramConfig, TransferPolicy
from channel_escrow.domain.orchestrator import TransferOrchestrator, TransferRun, TransferState
from channel_escrow.errors import TransferFailed, TransferServiceError

__all__ = [
    "__version__",
    "AppConfig",
    "LedgerConfig",
    "TelegramConfig",
    "TransferPolicy",
    "TransferOrchestrator",
    "TransferRun",
    "TransferState",
    "TransferFailed",
    "TransferServiceError",
]
