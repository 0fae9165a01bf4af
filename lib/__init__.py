# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Supabase wrapper returning typed query results
# - recommendations.py: Peer affinity scoring and directory ordering
# - match_tiers.py: Strong/medium/weak match classification and labels
# - i18n.py: Locales and bilingual messages
# - utils.py: Shared utilities (error handling, id normalization)
#
# Scoring and classification are pure and can be tested in isolation.
# =============================================================================

from lib.supabase_client import QueryResult, ResultStatus, SupabaseClient, SupabaseClientError
from lib.i18n import Locale, LocalizedMessage, resolve_locale
from lib.utils import ApplicationError, normalize_id, unique_by_id

__all__ = [
    # Supabase
    "QueryResult",
    "ResultStatus",
    "SupabaseClient",
    "SupabaseClientError",
    # i18n
    "Locale",
    "LocalizedMessage",
    "resolve_locale",
    # Utils
    "ApplicationError",
    "normalize_id",
    "unique_by_id",
]
