"""Telethon implementation of PlatformPort.

All Telethon types stop here: participant records are classified into the
closed Role enum and RPC errors are translated into the service's errors.
"""

import asyncio
from typing import Any, Dict, List, Optional

from telethon import TelegramClient
from telethon.errors import (
    PasswordHashInvalidError,
    RPCError,
    SrpIdInvalidError,
    UserNotParticipantError,
    UsernameInvalidError,
    UsernameNotOccupiedError,
)
from telethon.password import compute_check
from telethon.tl.functions.account import GetPasswordRequest
from telethon.tl.functions.channels import (
    EditAdminRequest,
    EditCreatorRequest,
    GetParticipantRequest,
    GetParticipantsRequest,
    JoinChannelRequest,
    LeaveChannelRequest,
)
from telethon.tl.types import (
    ChannelParticipantAdmin,
    ChannelParticipantBanned,
    ChannelParticipantCreator,
    ChannelParticipantLeft,
    ChannelParticipantsAdmins,
    ChatAdminRights,
)

from channel_escrow.domain.models import AdminRights, Channel, Identity, Participant, Role
from channel_escrow.errors import (
    AuthProofError,
    NotFoundError,
    PlatformApiError,
    PlatformConnectionError,
)


def classify_participant(record: Any) -> Role:
    """Map a Telethon participant record to a Role."""
    if isinstance(record, ChannelParticipantCreator):
        return Role.CREATOR
    if isinstance(record, ChannelParticipantAdmin):
        return Role.ADMIN
    if isinstance(record, ChannelParticipantLeft):
        return Role.NOT_PARTICIPANT
    if isinstance(record, ChannelParticipantBanned) and record.left:
        return Role.NOT_PARTICIPANT
    return Role.MEMBER


def _record_user_id(record: Any) -> Optional[int]:
    user_id = getattr(record, "user_id", None)
    if user_id is None:
        # Banned/left records carry a peer instead of a user id.
        user_id = getattr(getattr(record, "peer", None), "user_id", None)
    return user_id


def participant_from_record(record: Any, entity: Any = None) -> Participant:
    return Participant(
        user_id=_record_user_id(record),
        role=classify_participant(record),
        kind=type(record).__name__,
        entity=entity,
    )


def admin_rights_to_telethon(rights: AdminRights) -> ChatAdminRights:
    return ChatAdminRights(**rights.as_flags())


class TelethonPlatform:
    """PlatformPort bound to one connected TelegramClient."""

    def __init__(self, client: TelegramClient):
        self._client = client

    async def _call(self, request: Any) -> Any:
        try:
            return await self._client(request)
        except RPCError as e:
            raise PlatformApiError(f"{type(request).__name__} failed: {e}") from e

    async def resolve_entity(self, handle: str) -> Any:
        try:
            return await self._client.get_entity(handle)
        except (ValueError, UsernameNotOccupiedError, UsernameInvalidError) as e:
            raise NotFoundError(f"Cannot find any entity corresponding to {handle!r}") from e
        except RPCError as e:
            raise PlatformApiError(f"Resolving {handle!r} failed: {e}") from e

    async def get_channel(self, handle: str) -> Channel:
        entity = await self.resolve_entity(handle)
        title = getattr(entity, "title", None)
        if title is None:
            raise NotFoundError(f"{handle!r} is not a channel or group")
        return Channel(
            id=entity.id,
            username=getattr(entity, "username", None) or handle,
            title=title,
            entity=entity,
        )

    async def get_self(self) -> Identity:
        me = await self._client.get_me()
        if me is None:
            raise PlatformConnectionError("Escrow session is not authorized")
        return Identity(user_id=me.id, username=me.username, entity=me)

    async def get_participant(self, channel: Channel, user: Identity) -> Participant:
        try:
            result = await self._client(
                GetParticipantRequest(channel=channel.entity, participant=user.entity)
            )
        except UserNotParticipantError:
            return Participant(user_id=user.user_id, role=Role.NOT_PARTICIPANT, entity=user.entity)
        except RPCError as e:
            raise PlatformApiError(f"GetParticipantRequest failed: {e}") from e
        return participant_from_record(result.participant, entity=user.entity)

    async def join(self, channel: Channel) -> None:
        await self._call(JoinChannelRequest(channel=channel.entity))

    async def leave(self, channel: Channel) -> None:
        try:
            await self._client(LeaveChannelRequest(channel=channel.entity))
        except UserNotParticipantError:
            # Already gone.
            return
        except RPCError as e:
            raise PlatformApiError(f"LeaveChannelRequest failed: {e}") from e

    async def list_admins(self, channel: Channel, limit: int) -> List[Participant]:
        result = await self._call(
            GetParticipantsRequest(
                channel=channel.entity,
                filter=ChannelParticipantsAdmins(),
                offset=0,
                limit=limit,
                hash=0,
            )
        )
        users: Dict[int, Any] = {u.id: u for u in getattr(result, "users", [])}
        return [
            participant_from_record(p, entity=users.get(_record_user_id(p)))
            for p in getattr(result, "participants", [])
        ]

    async def edit_admin_rights(
        self, channel: Channel, participant: Participant, rights: AdminRights, rank: str
    ) -> None:
        target = participant.entity if participant.entity is not None else participant.user_id
        await self._call(
            EditAdminRequest(
                channel=channel.entity,
                user_id=target,
                admin_rights=admin_rights_to_telethon(rights),
                rank=rank,
            )
        )

    async def get_password_config(self) -> Any:
        return await self._call(GetPasswordRequest())

    async def compute_password_proof(self, password_config: Any, secret: str) -> Any:
        if not getattr(password_config, "has_password", False):
            raise AuthProofError("Escrow account has no two-factor password enabled")
        try:
            return await asyncio.to_thread(compute_check, password_config, secret)
        except (ValueError, TypeError) as e:
            raise AuthProofError(f"Could not compute password proof: {e}") from e

    async def edit_creator(self, channel: Channel, user: Any, proof: Any) -> None:
        try:
            await self._client(
                EditCreatorRequest(channel=channel.entity, user_id=user, password=proof)
            )
        except (PasswordHashInvalidError, SrpIdInvalidError) as e:
            raise AuthProofError(f"Two-factor password proof was rejected: {e}") from e
        except RPCError as e:
            raise PlatformApiError(f"EditCreatorRequest failed: {e}") from e
