"""System audit service: appends audit_log rows (implements IAuditService)."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.models.audit_log import AuditLog
from app.shared.enums import ActorType, AuditAction
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_SENSITIVE_KEYS = frozenset(
    {
        "password",
        "hashed_password",
        "secret",
        "api_key",
        "token",
        "credentials",
        "access_token",
        "refresh_token",
    }
)


class SystemAuditService:
    """Writes one AuditLog row per emitted event in the caller's transaction."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def emit_audit_event(
        self,
        entity_type: str,
        action: AuditAction,
        entity_id: str,
        entity_data: dict[str, Any],
        actor_id: str | None = None,
        actor_type: ActorType | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> AuditLog:
        """Append one audit record. The row commits or rolls back with the request."""
        entry = AuditLog(
            entity_type=entity_type,
            entity_id=entity_id,
            action=getattr(action, "value", str(action)),
            actor_id=actor_id,
            actor_type=getattr(actor_type or ActorType.SYSTEM, "value", "system"),
            entity_data=self._sanitize_entity_data(entity_data),
            audit_metadata=metadata or None,
        )
        self.db.add(entry)
        logger.debug(
            "Emitted audit event for %s.%s (entity_id: %s)",
            entity_type,
            entry.action,
            entity_id,
        )
        return entry

    @staticmethod
    def _sanitize_entity_data(data: dict[str, Any]) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for key, value in data.items():
            if key.lower() in _SENSITIVE_KEYS:
                out[key] = "[REDACTED]"
            elif isinstance(value, datetime):
                out[key] = value.isoformat()
            elif hasattr(value, "value"):
                out[key] = value.value
            else:
                out[key] = value
        return out
