"""Session provider: one authenticated Telethon connection per operation."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, TypeVar

from telethon import TelegramClient
from telethon.sessions import StringSession

from channel_escrow.adapters.telegram.platform import TelethonPlatform
from channel_escrow.config import TelegramConfig
from channel_escrow.errors import PlatformConnectionError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TelethonSessionProvider:
    """Connects with the escrow account's string session and always disconnects.

    Sessions are never pooled: every ``session()`` builds a new client.
    """

    def __init__(self, config: TelegramConfig, client_factory: Callable[..., TelegramClient] = TelegramClient):
        self._config = config
        self._client_factory = client_factory

    def _build_client(self) -> TelegramClient:
        session_string = self._config.session_string.strip()
        if not session_string:
            raise PlatformConnectionError("Escrow session string is not configured")
        if not (self._config.api_id and self._config.api_hash):
            raise PlatformConnectionError("Telegram API id/hash are not configured")
        try:
            session = StringSession(session_string)
        except ValueError as e:
            raise PlatformConnectionError(f"Escrow session string is invalid: {e}") from e
        return self._client_factory(
            session,
            self._config.api_id,
            self._config.api_hash,
            connection_retries=self._config.connection_retries,
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[TelethonPlatform]:
        client = self._build_client()
        try:
            try:
                await client.connect()
            except OSError as e:
                raise PlatformConnectionError(f"Could not connect to Telegram: {e}") from e
            if not await client.is_user_authorized():
                raise PlatformConnectionError("Escrow session is not authorized")
            logger.debug("Telegram session opened")
            yield TelethonPlatform(client)
        finally:
            await client.disconnect()
            logger.debug("Telegram session closed")

    async def with_session(self, work: Callable[[TelethonPlatform], Awaitable[T]]) -> T:
        async with self.session() as platform:
            return await work(platform)
