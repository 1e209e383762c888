"""Admin rights revoker: strip every other administrator before handoff."""

import logging
from typing import TYPE_CHECKING

from channel_escrow.domain.models import (
    REVOKED_RANK,
    REVOKED_RIGHTS,
    RevocationResult,
    Role,
)
from channel_escrow.domain.resolver import resolve_channel

if TYPE_CHECKING:
    from channel_escrow.ports.outbound import PlatformPort, SessionProvider

logger = logging.getLogger(__name__)

DEFAULT_PAGE_LIMIT = 200


class AdminRightsRevoker:
    """Revokes the rights of all admins except the creator and the escrow account.

    Only the first page of admins is read. A full page is reported as
    ``truncated`` so callers can tell that some admins may have been missed.
    """

    def __init__(self, sessions: "SessionProvider", page_limit: int = DEFAULT_PAGE_LIMIT):
        self._sessions = sessions
        self._page_limit = page_limit

    async def revoke_other_admins(self, channel_handle: str) -> RevocationResult:
        async def _work(platform: "PlatformPort") -> RevocationResult:
            channel = await resolve_channel(platform, channel_handle)
            me = await platform.get_self()
            admins = await platform.list_admins(channel, self._page_limit)
            result = RevocationResult(truncated=len(admins) >= self._page_limit)
            if result.truncated:
                logger.warning(
                    "Admin list for %s hit the page limit (%d); admins past it are not revoked",
                    channel.username, self._page_limit,
                )

            for admin in admins:
                if admin.role is Role.CREATOR or admin.user_id == me.user_id:
                    continue
                try:
                    await platform.edit_admin_rights(channel, admin, REVOKED_RIGHTS, REVOKED_RANK)
                except Exception as e:
                    logger.warning("Failed to revoke admin %s in %s: %s", admin.user_id, channel.username, e)
                    result.failed[admin.user_id] = str(e)
                    continue
                logger.info("Revoked admin %s in %s", admin.user_id, channel.username)
                result.revoked.append(admin.user_id)
            return result

        return await self._sessions.with_session(_work)
