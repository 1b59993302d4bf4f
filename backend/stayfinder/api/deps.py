"""Shared API dependencies — single import point for all routers.

Re-exports database session and authentication dependencies so that router
modules can import everything they need from one place::

    from stayfinder.api.deps import get_db, get_current_active_user, require_host
"""

from stayfinder.auth.dependencies import (
    get_current_active_user,
    get_current_user,
    get_optional_user,
    require_roles,
)
from stayfinder.database import get_db

# Listing management and the host booking view
require_host = require_roles("host", "admin")

__all__ = [
    "get_db",
    "get_current_user",
    "get_current_active_user",
    "get_optional_user",
    "require_host",
    "require_roles",
]
