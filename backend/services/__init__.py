"""
Service layer for business logic.
"""

from services.error_alerts import ErrorAlertService

__all__ = ["ErrorAlertService"]
