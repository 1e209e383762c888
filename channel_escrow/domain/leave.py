"""Escrow exit."""

import logging
from typing import TYPE_CHECKING

from channel_escrow.domain.resolver import resolve_channel

if TYPE_CHECKING:
    from channel_escrow.ports.outbound import PlatformPort, SessionProvider

logger = logging.getLogger(__name__)


class EscrowExit:
    def __init__(self, sessions: "SessionProvider"):
        self._sessions = sessions

    async def leave(self, channel_handle: str) -> None:
        async def _work(platform: "PlatformPort") -> None:
            channel = await resolve_channel(platform, channel_handle)
            await platform.leave(channel)

        await self._sessions.with_session(_work)
        logger.info("Escrow left %s", channel_handle)
