# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the community backend's business logic:
# - models/: Pydantic schemas for profiles, lookups, saved items and cleanup
# - services/: Supabase-backed operations (directory, lookups, saved items,
#   pre-student cleanup)
#
# Services raise app.exceptions errors but never touch routers or Celery.
# =============================================================================
