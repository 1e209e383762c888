"""Shared in-memory fakes for the platform and ledger ports."""

from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

import pytest

from channel_escrow.domain.models import (
    AdminRights,
    Channel,
    Identity,
    Participant,
    Role,
    TransferJob,
)
from channel_escrow.errors import AuthProofError, NotFoundError, PlatformApiError

ESCROW_ID = 1000
BUYER_ID = 2000


class FakeTelegram:
    """Live state of one fake channel as seen by the escrow account."""

    def __init__(self, role: Role = Role.MEMBER):
        self.me = Identity(user_id=ESCROW_ID, username="escrow", entity="me")
        self.channel = Channel(id=555, username="shop1", title="Shop One", entity="channel:shop1")
        self.users: Dict[str, Identity] = {
            "buyer": Identity(user_id=BUYER_ID, username="buyer", entity="user:buyer"),
        }
        self.role = role
        self.admins: List[Participant] = []
        self.password = "s3cret"
        self.has_password = True
        self.fail_revoke_for: Dict[int, str] = {}
        self.participant_error: Optional[Exception] = None
        self.edit_creator_error: Optional[Exception] = None
        self.leave_error: Optional[Exception] = None
        self.creator_id: Optional[int] = ESCROW_ID if role is Role.CREATOR else None
        self.calls: List[tuple] = []

    def calls_named(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]

    def add_admin(self, user_id: int, role: Role = Role.ADMIN) -> Participant:
        admin = Participant(user_id=user_id, role=role, kind="ChannelParticipantAdmin", entity=f"user:{user_id}")
        self.admins.append(admin)
        return admin


class FakePlatform:
    def __init__(self, world: FakeTelegram):
        self._world = world

    async def resolve_entity(self, handle: str) -> Any:
        self._world.calls.append(("resolve_entity", handle))
        if handle == self._world.channel.username:
            return self._world.channel.entity
        if handle in self._world.users:
            return self._world.users[handle].entity
        raise NotFoundError(f"Cannot find any entity corresponding to {handle!r}")

    async def get_channel(self, handle: str) -> Channel:
        self._world.calls.append(("get_channel", handle))
        if handle != self._world.channel.username:
            raise NotFoundError(f"Cannot find any entity corresponding to {handle!r}")
        return self._world.channel

    async def get_self(self) -> Identity:
        self._world.calls.append(("get_self",))
        return self._world.me

    async def get_participant(self, channel: Channel, user: Identity) -> Participant:
        self._world.calls.append(("get_participant", channel.id, user.user_id))
        if self._world.participant_error is not None:
            raise self._world.participant_error
        kinds = {
            Role.CREATOR: "ChannelParticipantCreator",
            Role.ADMIN: "ChannelParticipantAdmin",
            Role.MEMBER: "ChannelParticipantSelf",
            Role.NOT_PARTICIPANT: "",
        }
        return Participant(user_id=user.user_id, role=self._world.role, kind=kinds[self._world.role])

    async def join(self, channel: Channel) -> None:
        self._world.calls.append(("join", channel.id))
        if self._world.role is Role.NOT_PARTICIPANT:
            self._world.role = Role.MEMBER

    async def leave(self, channel: Channel) -> None:
        self._world.calls.append(("leave", channel.id))
        if self._world.leave_error is not None:
            raise self._world.leave_error
        self._world.role = Role.NOT_PARTICIPANT

    async def list_admins(self, channel: Channel, limit: int) -> List[Participant]:
        self._world.calls.append(("list_admins", channel.id, limit))
        return list(self._world.admins[:limit])

    async def edit_admin_rights(
        self, channel: Channel, participant: Participant, rights: AdminRights, rank: str
    ) -> None:
        self._world.calls.append(("edit_admin_rights", participant.user_id, rights, rank))
        if participant.user_id in self._world.fail_revoke_for:
            raise PlatformApiError(self._world.fail_revoke_for[participant.user_id])

    async def get_password_config(self) -> Any:
        self._world.calls.append(("get_password_config",))
        return {"has_password": self._world.has_password}

    async def compute_password_proof(self, password_config: Any, secret: str) -> Any:
        self._world.calls.append(("compute_password_proof",))
        if not password_config["has_password"]:
            raise AuthProofError("Escrow account has no two-factor password enabled")
        return f"proof:{secret}"

    async def edit_creator(self, channel: Channel, user: Any, proof: Any) -> None:
        self._world.calls.append(("edit_creator", channel.id, user, proof))
        if self._world.edit_creator_error is not None:
            raise self._world.edit_creator_error
        if proof != f"proof:{self._world.password}":
            raise AuthProofError("Two-factor password proof was rejected")
        self._world.creator_id = BUYER_ID
        self._world.role = Role.ADMIN


class FakeSessionProvider:
    def __init__(self, world: FakeTelegram):
        self.world = world
        self.opened = 0
        self.closed = 0

    @property
    def active(self) -> int:
        return self.opened - self.closed

    @asynccontextmanager
    async def session(self):
        self.opened += 1
        try:
            yield FakePlatform(self.world)
        finally:
            self.closed += 1

    async def with_session(self, work):
        async with self.session() as platform:
            return await work(platform)


class InMemoryLedger:
    def __init__(self, configured: bool = True):
        self.configured = configured
        self.jobs: Dict[str, TransferJob] = {}
        self.job_updates: List[tuple] = []
        self.listing_updates: List[tuple] = []
        self.fail_updates = False

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def get_job(self, job_id: str) -> Optional[TransferJob]:
        return self.jobs.get(job_id)

    async def update_job(self, job_id: str, values: Dict[str, Any]) -> None:
        if self.fail_updates:
            raise RuntimeError("ledger unavailable")
        self.job_updates.append((job_id, dict(values)))
        job = self.jobs.get(job_id)
        if job is not None and "status" in values:
            job.status = values["status"]

    async def update_listing(self, listing_id: str, values: Dict[str, Any]) -> None:
        self.listing_updates.append((listing_id, dict(values)))


@pytest.fixture
def telegram():
    return FakeTelegram()


@pytest.fixture
def sessions(telegram):
    return FakeSessionProvider(telegram)


@pytest.fixture
def ledger():
    led = InMemoryLedger()
    led.jobs["job-1"] = TransferJob(id="job-1", listing_id="listing-9", status="pending")
    return led
