"""Remote persistence adapters (Supabase)."""

from bluecarbon.infrastructure.adapters.persistence.supabase_persistence import (
    CREDITS_TABLE,
    SUBMISSIONS_TABLE,
    SupabasePersistenceAdapter,
)

__all__: list[str] = [
    "CREDITS_TABLE",
    "SUBMISSIONS_TABLE",
    "SupabasePersistenceAdapter",
]
