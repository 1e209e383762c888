"""Telegram adapters: Telethon session provider and platform client."""

from channel_escrow.adapters.telegram.platform import TelethonPlatform, classify_participant
from channel_escrow.adapters.telegram.session import TelethonSessionProvider

__all__ = ["TelethonPlatform", "TelethonSessionProvider", "classify_participant"]
