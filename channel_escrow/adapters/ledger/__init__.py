"""Ledger adapters."""

from channel_escrow.adapters.ledger.supabase import SupabaseLedger

__all__ = ["SupabaseLedger"]
