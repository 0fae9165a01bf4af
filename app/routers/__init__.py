# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - peers.py: Student directory and tiered matches
# - lookups.py: City/university/school/department pickers
# - saved.py: Saved items
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import lookups
from . import peers
from . import saved

__all__ = [
    "health",
    "lookups",
    "peers",
    "saved",
]
