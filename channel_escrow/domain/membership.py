"""Membership gate: make sure the escrow account is inside the channel."""

import logging
from typing import TYPE_CHECKING

from channel_escrow.domain.models import MembershipResult, Role
from channel_escrow.domain.resolver import resolve_channel

if TYPE_CHECKING:
    from channel_escrow.ports.outbound import PlatformPort, SessionProvider

logger = logging.getLogger(__name__)


class MembershipGate:
    def __init__(self, sessions: "SessionProvider"):
        self._sessions = sessions

    async def ensure_member(self, channel_handle: str) -> MembershipResult:
        """Join the channel unless the escrow account already participates.

        Lookup failures other than "not a participant" propagate unchanged.
        """

        async def _work(platform: "PlatformPort") -> MembershipResult:
            channel = await resolve_channel(platform, channel_handle)
            me = await platform.get_self()
            participant = await platform.get_participant(channel, me)
            if participant.role is not Role.NOT_PARTICIPANT:
                logger.info("Already a member of %s as %s", channel.username, participant.role.value)
                return MembershipResult(joined=True, already_member=True)

            logger.info("Joining %s", channel.username)
            await platform.join(channel)
            return MembershipResult(joined=True, already_member=False)

        return await self._sessions.with_session(_work)
