"""Authentication / authorization helpers.

Auth is deliberately small:

- Users table (email + optional password hash + role + status)
- JWT access tokens presented as `Authorization: Bearer <token>`
- Social login via an identity bridge that yields a verified email/name/id

Tokens are never revoked; logout is client-side. The blocked-status check in
`get_current_user` runs on every request and is what cuts off a blocked account.
"""

from .deps import get_current_user, is_admin, require_admin
from .crud import bootstrap_admin_if_needed, create_user, public_user

__all__ = [
    "get_current_user",
    "is_admin",
    "require_admin",
    "bootstrap_admin_if_needed",
    "create_user",
    "public_user",
]
