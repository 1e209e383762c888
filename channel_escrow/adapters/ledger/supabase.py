"""Supabase ledger client using aiohttp against the PostgREST API."""

from datetime import datetime
from typing import Any, Dict, Optional

import aiohttp

from channel_escrow.config import LedgerConfig
from channel_escrow.domain.models import TransferJob
from channel_escrow.errors import LedgerError

JOBS_TABLE = "jobs"
LISTINGS_TABLE = "social_media_listings"


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


class SupabaseLedger:
    """Async ledger client: reads and updates job/listing rows by id."""

    def __init__(self, config: LedgerConfig):
        self._config = config

    @property
    def is_configured(self) -> bool:
        return self._config.is_configured

    def _url(self, table: str) -> str:
        return f"{self._config.url}/rest/v1/{table}"

    def _headers(self) -> Dict[str, str]:
        key = self._config.service_key
        return {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    @staticmethod
    async def _raise_for_status(resp: aiohttp.ClientResponse, action: str) -> None:
        if resp.status < 300:
            return
        try:
            data = await resp.json()
            message = data.get("message", str(data)) if isinstance(data, dict) else str(data)
        except Exception:
            message = await resp.text()
        raise LedgerError(f"{action} failed ({resp.status}): {message}")

    async def _patch(self, table: str, row_id: str, values: Dict[str, Any]) -> None:
        params = {"id": f"eq.{row_id}"}
        headers = {**self._headers(), "Prefer": "return=minimal"}
        try:
            async with aiohttp.ClientSession() as session:
                async with session.patch(self._url(table), params=params, json=values, headers=headers) as resp:
                    await self._raise_for_status(resp, f"Update {table}/{row_id}")
        except aiohttp.ClientError as e:
            raise LedgerError(f"Update {table}/{row_id} failed: {e}") from e

    async def get_job(self, job_id: str) -> Optional[TransferJob]:
        params = {"id": f"eq.{job_id}", "select": "id,listing_id,status,completed_at"}
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(self._url(JOBS_TABLE), params=params, headers=self._headers()) as resp:
                    await self._raise_for_status(resp, f"Read {JOBS_TABLE}/{job_id}")
                    rows = await resp.json()
        except aiohttp.ClientError as e:
            raise LedgerError(f"Read {JOBS_TABLE}/{job_id} failed: {e}") from e
        if not rows:
            return None
        row = rows[0]
        listing_id = row.get("listing_id")
        return TransferJob(
            id=str(row.get("id", job_id)),
            listing_id=str(listing_id) if listing_id is not None else None,
            status=row.get("status"),
            completed_at=_parse_timestamp(row.get("completed_at")),
        )

    async def update_job(self, job_id: str, values: Dict[str, Any]) -> None:
        await self._patch(JOBS_TABLE, job_id, values)

    async def update_listing(self, listing_id: str, values: Dict[str, Any]) -> None:
        await self._patch(LISTINGS_TABLE, listing_id, values)
