"""Auth module - admin login and token storage"""

from .admin_login import AdminAuthenticator
from .token_store import TokenStore

__all__ = ["AdminAuthenticator", "TokenStore"]
