"""Tests for domain/handoff.py and domain/leave.py."""

import pytest

from channel_escrow.domain.handoff import CreatorHandoff
from channel_escrow.domain.leave import EscrowExit
from channel_escrow.domain.models import Role
from channel_escrow.errors import AuthProofError, NotFoundError, PlatformApiError


class TestTransferCreator:
    @pytest.mark.asyncio
    async def test_success(self, telegram, sessions):
        telegram.role = Role.CREATOR
        await CreatorHandoff(sessions, "s3cret").transfer_creator("@shop1", "@buyer")
        call = telegram.calls_named("edit_creator")[0]
        assert call == ("edit_creator", 555, "user:buyer", "proof:s3cret")
        assert telegram.creator_id == 2000

    @pytest.mark.asyncio
    async def test_password_config_fetched_before_proof(self, telegram, sessions):
        await CreatorHandoff(sessions, "s3cret").transfer_creator("shop1", "buyer")
        names = [c[0] for c in telegram.calls]
        assert names.index("get_password_config") < names.index("compute_password_proof") < names.index("edit_creator")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("secret", ["", "   ", None])
    async def test_missing_secret_opens_no_session(self, sessions, secret):
        with pytest.raises(AuthProofError):
            await CreatorHandoff(sessions, secret).transfer_creator("@shop1", "@buyer")
        assert sessions.opened == 0

    @pytest.mark.parametrize("secret", ["", None])
    def test_check_ready_without_secret(self, sessions, secret):
        with pytest.raises(AuthProofError):
            CreatorHandoff(sessions, secret).check_ready()
        assert sessions.opened == 0

    def test_check_ready_with_secret(self, sessions):
        CreatorHandoff(sessions, "s3cret").check_ready()
        assert sessions.opened == 0

    @pytest.mark.asyncio
    async def test_wrong_secret(self, telegram, sessions):
        telegram.role = Role.CREATOR
        with pytest.raises(AuthProofError):
            await CreatorHandoff(sessions, "wrong").transfer_creator("@shop1", "@buyer")
        assert telegram.role is Role.CREATOR
        assert sessions.active == 0

    @pytest.mark.asyncio
    async def test_account_without_password(self, telegram, sessions):
        telegram.has_password = False
        with pytest.raises(AuthProofError):
            await CreatorHandoff(sessions, "s3cret").transfer_creator("@shop1", "@buyer")
        assert telegram.calls_named("edit_creator") == []

    @pytest.mark.asyncio
    async def test_unknown_buyer(self, telegram, sessions):
        with pytest.raises(NotFoundError):
            await CreatorHandoff(sessions, "s3cret").transfer_creator("@shop1", "@ghost")
        assert telegram.calls_named("get_password_config") == []

    @pytest.mark.asyncio
    async def test_platform_rejection(self, telegram, sessions):
        telegram.edit_creator_error = PlatformApiError("USER_PRIVACY_RESTRICTED")
        with pytest.raises(PlatformApiError):
            await CreatorHandoff(sessions, "s3cret").transfer_creator("@shop1", "@buyer")


class TestEscrowExit:
    @pytest.mark.asyncio
    async def test_leave(self, telegram, sessions):
        telegram.role = Role.ADMIN
        await EscrowExit(sessions).leave("@shop1")
        assert telegram.calls_named("leave") == [("leave", 555)]
        assert telegram.role is Role.NOT_PARTICIPANT

    @pytest.mark.asyncio
    async def test_each_leave_opens_own_session(self, telegram, sessions):
        exit_ = EscrowExit(sessions)
        await exit_.leave("@shop1")
        await exit_.leave("@shop1")
        assert sessions.opened == 2
        assert sessions.active == 0
