"""Outbound ports: interfaces for the platform client and the ledger."""

from typing import (
    Any,
    AsyncContextManager,
    Awaitable,
    Callable,
    Dict,
    List,
    Optional,
    Protocol,
    TypeVar,
    runtime_checkable,
)

from channel_escrow.domain.models import (
    AdminRights,
    Channel,
    Identity,
    Participant,
    TransferJob,
)

T = TypeVar("T")


@runtime_checkable
class PlatformPort(Protocol):
    """Administrative API of the messaging platform, bound to one live session."""

    async def resolve_entity(self, handle: str) -> Any: ...

    async def get_channel(self, handle: str) -> Channel: ...

    async def get_self(self) -> Identity: ...

    async def get_participant(self, channel: Channel, user: Identity) -> Participant: ...

    async def join(self, channel: Channel) -> None: ...

    async def leave(self, channel: Channel) -> None: ...

    async def list_admins(self, channel: Channel, limit: int) -> List[Participant]: ...

    async def edit_admin_rights(
        self, channel: Channel, participant: Participant, rights: AdminRights, rank: str
    ) -> None: ...

    async def get_password_config(self) -> Any: ...

    async def compute_password_proof(self, password_config: Any, secret: str) -> Any: ...

    async def edit_creator(self, channel: Channel, user: Any, proof: Any) -> None: ...


@runtime_checkable
class SessionProvider(Protocol):
    """Opens one authenticated platform session per logical operation."""

    def session(self) -> AsyncContextManager[PlatformPort]: ...

    async def with_session(self, work: Callable[[PlatformPort], Awaitable[T]]) -> T: ...


@runtime_checkable
class LedgerPort(Protocol):
    """Persisted job/listing records of the marketplace."""

    @property
    def is_configured(self) -> bool: ...

    async def get_job(self, job_id: str) -> Optional[TransferJob]: ...

    async def update_job(self, job_id: str, values: Dict[str, Any]) -> None: ...

    async def update_listing(self, listing_id: str, values: Dict[str, Any]) -> None: ...
