# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides small row-level helpers shared by the service layer:
# - fetch_one / fetch_by_id for single-row lookups
# - fetch_rows for filtered, ordered lists
# - insert_row / update_rows / upsert_row for writes
#
# Missing rows come back as None rather than raising, so services decide
# which "not found" error to surface.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   listing = SupabaseClient.fetch_by_id("food_listings", listing_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings
from lib.utils import normalize_uuid

# Set up logging for this module
logger = logging.getLogger(__name__)


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Provides actionable error messages:
    "Errors should tell HOW to fix, not just WHAT failed."
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


def _filter_value(value: Any) -> Any:
    """PostgREST filters take plain strings for ids."""
    if isinstance(value, UUID):
        return normalize_uuid(value)
    return value


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        user = SupabaseClient.fetch_one("users", email="ada@campus.edu")
        row = SupabaseClient.insert_row("notifications", {...})
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        This is appropriate for server-side operations.

        Returns:
            Client: Supabase client instance

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_one(cls, table: str, **filters: Any) -> dict[str, Any] | None:
        """
        Fetch the first row matching all equality filters.

        Args:
            table: Table name
            **filters: column=value equality filters

        Returns:
            Row dict, or None if nothing matches

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            query = client.table(table).select("*")
            for column, value in filters.items():
                query = query.eq(column, _filter_value(value))
            response = query.limit(1).execute()

            rows = response.data or []
            return rows[0] if rows else None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch from {table}: {e}",
                code="FETCH_FAILED",
                suggestion=f"Check that the {table} table exists and is accessible",
                details={"table": table, "filters": {k: str(v) for k, v in filters.items()}}
            )

    @classmethod
    def fetch_by_id(cls, table: str, row_id: str | UUID) -> dict[str, Any] | None:
        """Fetch a row by primary key, or None if it doesn't exist."""
        return cls.fetch_one(table, id=normalize_uuid(row_id))

    @classmethod
    def fetch_rows(
        cls,
        table: str,
        order_by: str | None = "created_at",
        desc: bool = True,
        limit: int | None = None,
        **filters: Any,
    ) -> list[dict[str, Any]]:
        """
        Fetch rows matching all equality filters.

        Args:
            table: Table name
            order_by: Column to sort by (None for database order)
            desc: Sort newest first when ordering by a timestamp
            limit: Maximum number of rows
            **filters: column=value equality filters

        Returns:
            List of row dicts (possibly empty)

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            query = client.table(table).select("*")
            for column, value in filters.items():
                query = query.eq(column, _filter_value(value))
            if order_by:
                query = query.order(order_by, desc=desc)
            if limit:
                query = query.limit(limit)

            response = query.execute()
            rows = response.data or []
            logger.debug(f"Fetched {len(rows)} rows from {table}")
            return rows

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to list {table}: {e}",
                code="FETCH_FAILED",
                details={"table": table}
            )

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    @classmethod
    def insert_row(cls, table: str, data: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a row and return it with database defaults applied.

        Raises:
            SupabaseClientError: If insert fails or returns nothing
        """
        client = cls.get_client()

        try:
            response = client.table(table).insert(data).execute()

            if response.data:
                return response.data[0]
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA",
                details={"table": table}
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert into {table}: {e}",
                code="INSERT_FAILED",
                details={"table": table}
            )

    @classmethod
    def upsert_row(
        cls,
        table: str,
        data: dict[str, Any],
        on_conflict: str,
    ) -> dict[str, Any]:
        """
        Insert a row, or update the existing row that collides on `on_conflict`.

        Raises:
            SupabaseClientError: If the upsert fails
        """
        client = cls.get_client()

        try:
            response = client.table(table).upsert(data, on_conflict=on_conflict).execute()

            if response.data:
                return response.data[0]
            raise SupabaseClientError(
                message="Upsert returned no data",
                code="UPSERT_NO_DATA",
                details={"table": table, "on_conflict": on_conflict}
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to upsert into {table}: {e}",
                code="UPSERT_FAILED",
                suggestion=f"Check that {table}.{on_conflict} has a unique constraint",
                details={"table": table, "on_conflict": on_conflict}
            )

    @classmethod
    def update_rows(
        cls,
        table: str,
        data: dict[str, Any],
        **filters: Any,
    ) -> list[dict[str, Any]]:
        """
        Update all rows matching the equality filters.

        Returns:
            The updated rows (empty if nothing matched)

        Raises:
            SupabaseClientError: If update fails
        """
        if not filters:
            raise SupabaseClientError(
                message="Refusing to update without filters",
                code="UNFILTERED_UPDATE",
                details={"table": table}
            )

        client = cls.get_client()

        try:
            query = client.table(table).update(data)
            for column, value in filters.items():
                query = query.eq(column, _filter_value(value))
            response = query.execute()
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update {table}: {e}",
                code="UPDATE_FAILED",
                details={"table": table}
            )
