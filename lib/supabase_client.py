# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and turns PostgREST responses into QueryResult values:
# - OK: the query ran, rows are in `data`
# - UNSUPPORTED: the function/table/column does not exist on this project
#   (migrations not applied yet), so callers may fall back
# - FAILED: any other database error (RLS denial, bad input, ...)
#
# Classification uses the structured error codes returned by PostgREST and
# Postgres, never the wording of the error message.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   result = SupabaseClient.rpc("get_universities_for_city", {"p_city_id": city_id})
#   if result.unsupported:
#       ...
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from postgrest.exceptions import APIError
from supabase import Client, create_client

from app.config import settings
from lib.utils import ApplicationError

# Set up logging for this module
logger = logging.getLogger(__name__)


# Postgres SQLSTATEs and PostgREST codes meaning "this schema object is not
# deployed": undefined function/table/column and schema-cache misses.
MISSING_SCHEMA_CODES = frozenset({
    "42883",     # undefined_function
    "42P01",     # undefined_table
    "42703",     # undefined_column
    "PGRST200",  # relationship not found in schema cache
    "PGRST202",  # function not found in schema cache
    "PGRST204",  # column not found in schema cache
    "PGRST205",  # table not found in schema cache
})


class SupabaseClientError(ApplicationError):
    """
    Error talking to Supabase itself (client creation, network, timeouts).

    Database-level errors are not raised; they come back as a FAILED or
    UNSUPPORTED QueryResult.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, suggestion=suggestion, details=details)

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class ResultStatus(str, Enum):
    """Outcome of one PostgREST call."""
    OK = "ok"
    UNSUPPORTED = "unsupported"
    FAILED = "failed"


@dataclass(frozen=True)
class QueryResult:
    """Rows from a query or RPC together with how the call went."""
    status: ResultStatus
    data: list[dict[str, Any]] = field(default_factory=list)
    message: str | None = None
    error_code: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is ResultStatus.OK

    @property
    def unsupported(self) -> bool:
        return self.status is ResultStatus.UNSUPPORTED

    @property
    def failed(self) -> bool:
        return self.status is ResultStatus.FAILED

    @classmethod
    def success(cls, data: Any) -> QueryResult:
        if data is None:
            rows: list[dict[str, Any]] = []
        elif isinstance(data, list):
            rows = data
        else:
            rows = [data]
        return cls(status=ResultStatus.OK, data=rows)

    @classmethod
    def from_api_error(cls, error: APIError) -> QueryResult:
        return cls(
            status=classify_api_error(error),
            message=getattr(error, "message", None) or str(error),
            error_code=getattr(error, "code", None),
        )


def classify_api_error(error: APIError) -> ResultStatus:
    """Map a PostgREST APIError onto UNSUPPORTED or FAILED by its code."""
    code = getattr(error, "code", None)
    if code and str(code) in MISSING_SCHEMA_CODES:
        return ResultStatus.UNSUPPORTED
    return ResultStatus.FAILED


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        result = SupabaseClient.execute(
            SupabaseClient.table("cities").select("id, name").order("name")
        )
        if result.ok:
            cities = result.data
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses the service_role key which bypasses Row Level Security (RLS).
        Callers are responsible for scoping queries to the requesting user.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY,
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file",
                )
        return cls._instance

    @classmethod
    def table(cls, name: str):
        """Start a query builder on a table or view."""
        return cls.get_client().table(name)

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    @classmethod
    def execute(cls, query, *, description: str | None = None) -> QueryResult:
        """
        Execute a prepared query builder and classify the outcome.

        Args:
            query: Any postgrest request builder (table or rpc)
            description: Short label for log messages

        Returns:
            QueryResult with rows or the classified error

        Raises:
            SupabaseClientError: If the request could not be sent at all
        """
        label = description or "query"
        try:
            response = query.execute()
        except APIError as e:
            result = QueryResult.from_api_error(e)
            if result.unsupported:
                logger.info(f"{label} is not available on this project ({result.error_code})")
            else:
                logger.warning(f"{label} failed: {result.message} ({result.error_code})")
            return result
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to execute {label}: {e}",
                code="REQUEST_FAILED",
                suggestion="Check network connectivity to the Supabase project",
                details={"operation": label},
            )

        # Some builders return None instead of a response when no row matched
        data = getattr(response, "data", None) if response is not None else None
        return QueryResult.success(data)

    @classmethod
    def rpc(cls, function_name: str, params: dict[str, Any] | None = None) -> QueryResult:
        """
        Call a Postgres function through PostgREST.

        Example:
            result = SupabaseClient.rpc("get_universities_for_city", {"p_city_id": "..."})
        """
        client = cls.get_client()
        return cls.execute(client.rpc(function_name, params or {}), description=f"rpc {function_name}")

    # -------------------------------------------------------------------------
    # Auth Admin
    # -------------------------------------------------------------------------

    @classmethod
    def delete_auth_user(cls, user_id: str) -> None:
        """
        Delete a user from Supabase Auth (service role only).

        Raises:
            SupabaseClientError: If the auth API rejects the deletion
        """
        client = cls.get_client()
        try:
            client.auth.admin.delete_user(user_id)
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete auth user: {e}",
                code="AUTH_DELETE_FAILED",
                details={"user_id": user_id},
            )
