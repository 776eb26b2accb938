"""
Security utilities for account provisioning.
"""

from .password import PasswordHasher, password_hasher
from .tokens import PASSWORD_RESET_TOKEN_TYPE, TokenService

__all__ = [
    "PASSWORD_RESET_TOKEN_TYPE",
    "PasswordHasher",
    "password_hasher",
    "TokenService",
]
