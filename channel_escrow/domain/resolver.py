"""Handle normalization and entity lookup."""

from typing import TYPE_CHECKING, Any

from channel_escrow.domain.models import Channel
from channel_escrow.errors import NotFoundError

if TYPE_CHECKING:
    from channel_escrow.ports.outbound import PlatformPort

HANDLE_SIGIL = "@"


def normalize_handle(handle: str) -> str:
    """Strip whitespace and one leading '@'. '@shop1' and 'shop1' are the same handle."""
    handle = (handle or "").strip()
    if handle.startswith(HANDLE_SIGIL):
        handle = handle[len(HANDLE_SIGIL):]
    return handle


async def resolve_entity(platform: "PlatformPort", handle: str) -> Any:
    name = normalize_handle(handle)
    if not name:
        raise NotFoundError(f"Cannot resolve an empty handle: {handle!r}")
    return await platform.resolve_entity(name)


async def resolve_channel(platform: "PlatformPort", handle: str) -> Channel:
    name = normalize_handle(handle)
    if not name:
        raise NotFoundError(f"Cannot resolve an empty handle: {handle!r}")
    return await platform.get_channel(name)
