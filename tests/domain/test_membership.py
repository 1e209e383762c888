"""Tests for domain/membership.py: MembershipGate."""

import pytest

from channel_escrow.domain.membership import MembershipGate
from channel_escrow.domain.models import Role
from channel_escrow.errors import NotFoundError, PlatformApiError


class TestEnsureMember:
    @pytest.mark.asyncio
    async def test_joins_when_not_participant(self, telegram, sessions):
        telegram.role = Role.NOT_PARTICIPANT
        result = await MembershipGate(sessions).ensure_member("@shop1")
        assert result.joined is True
        assert result.already_member is False
        assert len(telegram.calls_named("join")) == 1

    @pytest.mark.asyncio
    async def test_second_call_is_already_member(self, telegram, sessions):
        telegram.role = Role.NOT_PARTICIPANT
        gate = MembershipGate(sessions)
        await gate.ensure_member("@shop1")
        second = await gate.ensure_member("@shop1")
        assert second.already_member is True
        assert len(telegram.calls_named("join")) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", [Role.MEMBER, Role.ADMIN, Role.CREATOR])
    async def test_existing_participant_does_not_join(self, telegram, sessions, role):
        telegram.role = role
        result = await MembershipGate(sessions).ensure_member("shop1")
        assert result.to_dict() == {"joined": True, "alreadyMember": True}
        assert telegram.calls_named("join") == []

    @pytest.mark.asyncio
    async def test_other_lookup_failure_propagates(self, telegram, sessions):
        telegram.participant_error = PlatformApiError("CHANNEL_PRIVATE")
        with pytest.raises(PlatformApiError):
            await MembershipGate(sessions).ensure_member("@shop1")
        assert telegram.calls_named("join") == []
        assert sessions.active == 0

    @pytest.mark.asyncio
    async def test_unknown_channel(self, sessions):
        with pytest.raises(NotFoundError):
            await MembershipGate(sessions).ensure_member("@nope")
        assert sessions.active == 0

    @pytest.mark.asyncio
    async def test_one_session_per_call(self, sessions):
        gate = MembershipGate(sessions)
        await gate.ensure_member("@shop1")
        await gate.ensure_member("@shop1")
        assert sessions.opened == 2
        assert sessions.closed == 2
