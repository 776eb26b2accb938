"""
Local identity admin for accounts provisioned during checkout.
"""

import logging
from typing import Optional
from urllib.parse import urlencode

from core.interfaces.services import IdentityAdmin
from core.security import PasswordHasher, TokenService, password_hasher
from infrastructure.config.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class LocalIdentityAdmin(IdentityAdmin):
    """Issues credentials and reset links for users stored in the local database."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        hasher: Optional[PasswordHasher] = None,
        token_service: Optional[TokenService] = None,
    ):
        self._settings = settings or default_settings
        self._hasher = hasher or password_hasher
        self._tokens = token_service or TokenService(
            secret_key=self._settings.secret_key,
            algorithm=self._settings.jwt_algorithm,
        )

    def create_credentials(self) -> str:
        return self._hasher.hash_random_password()

    def generate_password_reset_link(self, user_id: str, email: str) -> str:
        token = self._tokens.create_password_reset_token(user_id, email)
        site_url = self._settings.site_url.rstrip("/")
        return f"{site_url}/reset-password?{urlencode({'token': token})}"


def create_identity_admin(settings: Optional[Settings] = None) -> LocalIdentityAdmin:
    """Create the identity admin backed by local password hashes."""
    return LocalIdentityAdmin(settings=settings)
