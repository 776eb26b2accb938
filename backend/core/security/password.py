"""
Credentials for accounts created on the buyer's behalf.
"""

import secrets

from passlib.context import CryptContext

# Length of the throwaway password before hashing
RANDOM_PASSWORD_BYTES = 24


class PasswordHasher:
    """bcrypt hashing through passlib.

    Checkout-provisioned accounts get a password nobody knows; the owner
    replaces it through the reset link in the welcome email.
    """

    def __init__(self, rounds: int = 12):
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def hash_random_password(self) -> str:
        return self.hash(secrets.token_urlsafe(RANDOM_PASSWORD_BYTES))


password_hasher = PasswordHasher()
