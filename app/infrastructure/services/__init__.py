"""Infrastructure implementations of application service interfaces."""

from app.infrastructure.services.notification_service import (
    LogOnlyNotificationSender,
    NotificationDispatcher,
    session_contact_lookup,
)
from app.infrastructure.services.system_audit_service import SystemAuditService

__all__ = [
    "LogOnlyNotificationSender",
    "NotificationDispatcher",
    "SystemAuditService",
    "session_contact_lookup",
]
