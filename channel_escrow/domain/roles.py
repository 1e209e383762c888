"""Role classifier: the only precondition gate for a transfer."""

import logging
from typing import TYPE_CHECKING

from channel_escrow.domain.models import OwnershipCheck, Role
from channel_escrow.domain.resolver import resolve_channel

if TYPE_CHECKING:
    from channel_escrow.ports.outbound import PlatformPort, SessionProvider

logger = logging.getLogger(__name__)


class RoleClassifier:
    def __init__(self, sessions: "SessionProvider"):
        self._sessions = sessions

    async def classify(self, channel_handle: str) -> OwnershipCheck:
        async def _work(platform: "PlatformPort") -> OwnershipCheck:
            channel = await resolve_channel(platform, channel_handle)
            me = await platform.get_self()
            participant = await platform.get_participant(channel, me)
            return OwnershipCheck(
                is_owner=participant.role is Role.CREATOR,
                current_role=participant.role,
                participant_type=participant.kind,
                channel_id=str(channel.id),
                channel_title=channel.title,
            )

        check = await self._sessions.with_session(_work)
        logger.info(
            "Ownership check for %s: role=%s owner=%s",
            channel_handle, check.current_role.value, check.is_owner,
        )
        return check
