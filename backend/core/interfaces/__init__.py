# Interfaces (Abstract Contracts)
# Adapters implement these interfaces
from .services import AlertNotifier, EmailResult, EmailService, IdentityAdmin, PaymentProvider

__all__ = [
    "EmailService",
    "EmailResult",
    "PaymentProvider",
    "IdentityAdmin",
    "AlertNotifier",
]
