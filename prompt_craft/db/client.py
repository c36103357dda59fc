"""Supabase client initialization and helper methods."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

import structlog
from supabase import Client, create_client

from prompt_craft.config import get_settings

logger = structlog.get_logger()


class SupabaseClient:
    """Wrapper around the Supabase client with convenience methods."""

    def __init__(self, client: Client) -> None:
        self._client = client

    def insert(self, table: str, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a record and return the created row."""
        result = self._client.table(table).insert(data).execute()
        return result.data[0]

    def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
    ) -> list[dict[str, Any]]:
        """Select records with optional equality filters, ascending by ``order_by``."""
        query = self._client.table(table).select("*")

        if filters:
            for key, value in filters.items():
                if value is None:
                    query = query.is_(key, "null")
                else:
                    query = query.eq(key, value)

        if order_by:
            query = query.order(order_by)

        result = query.execute()
        return result.data

    def update(self, table: str, id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Update a record by ID and return the updated row."""
        result = self._client.table(table).update(data).eq("id", id).execute()
        if not result.data:
            raise LookupError(f"Row {id} not found in {table}")
        return result.data[0]

    def delete(self, table: str, id: str) -> None:
        """Delete a record by ID. Foreign keys cascade in the database."""
        self._client.table(table).delete().eq("id", id).execute()


@lru_cache
def get_supabase_client() -> SupabaseClient:
    """Get cached Supabase client instance."""
    settings = get_settings()
    client = create_client(settings.supabase_url, settings.supabase_key)
    logger.info("supabase.connected", url=settings.supabase_url)
    return SupabaseClient(client)
