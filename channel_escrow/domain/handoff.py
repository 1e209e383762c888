"""Creator handoff: the irreversible step of a transfer.

The escrow account proves knowledge of its two-factor password with a
one-time proof computed against the current password configuration, then
asks the platform to make the buyer the channel creator. Once the platform
accepts the request nothing in this service can undo it.
"""

import logging
from typing import TYPE_CHECKING

from channel_escrow.domain.resolver import resolve_channel, resolve_entity
from channel_escrow.errors import AuthProofError

if TYPE_CHECKING:
    from channel_escrow.ports.outbound import PlatformPort, SessionProvider

logger = logging.getLogger(__name__)


class CreatorHandoff:
    def __init__(self, sessions: "SessionProvider", two_factor_password: str):
        self._sessions = sessions
        self._password = two_factor_password

    def check_ready(self) -> None:
        """Raise AuthProofError when no two-factor secret is configured. Makes no remote call."""
        if not isinstance(self._password, str) or not self._password.strip():
            raise AuthProofError("Escrow two-factor password is not configured")

    async def transfer_creator(self, channel_handle: str, buyer_handle: str) -> None:
        self.check_ready()

        async def _work(platform: "PlatformPort") -> None:
            channel = await resolve_channel(platform, channel_handle)
            buyer = await resolve_entity(platform, buyer_handle)
            password_config = await platform.get_password_config()
            proof = await platform.compute_password_proof(password_config, self._password)
            logger.info("Handing creator of %s to %s", channel.username, buyer_handle)
            await platform.edit_creator(channel, buyer, proof)

        await self._sessions.with_session(_work)
        logger.info("Creator of %s is now %s", channel_handle, buyer_handle)
