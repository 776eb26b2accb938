"""Identity adapters."""

from .local_identity_adapter import LocalIdentityAdmin, create_identity_admin

__all__ = ["LocalIdentityAdmin", "create_identity_admin"]
