"""Tests for port protocol conformance.

Verifies that the adapters and the test fakes implement the expected interfaces.
"""

from unittest.mock import MagicMock

from channel_escrow.adapters.ledger.supabase import SupabaseLedger
from channel_escrow.adapters.telegram.platform import TelethonPlatform
from channel_escrow.adapters.telegram.session import TelethonSessionProvider
from channel_escrow.config import LedgerConfig, TelegramConfig
from channel_escrow.ports.outbound import LedgerPort, PlatformPort, SessionProvider


class TestAdapterConformance:
    def test_telethon_platform(self):
        assert isinstance(TelethonPlatform(MagicMock()), PlatformPort)

    def test_session_provider(self):
        assert isinstance(TelethonSessionProvider(TelegramConfig()), SessionProvider)

    def test_supabase_ledger(self):
        assert isinstance(SupabaseLedger(LedgerConfig()), LedgerPort)


class TestFakeConformance:
    def test_fake_sessions(self, sessions):
        assert isinstance(sessions, SessionProvider)

    def test_fake_ledger(self, ledger):
        assert isinstance(ledger, LedgerPort)
