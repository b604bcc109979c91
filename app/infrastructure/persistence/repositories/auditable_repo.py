"""Auditable repository: automatic audit record emission on CRUD.

Extends BaseRepository; subclasses implement _get_entity_type and
_serialize_for_audit. Audit service is injected (no lazy init). When
audit_service is None, no records are emitted.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any

from app.infrastructure.persistence.repositories.base import BaseRepository, ModelType
from app.shared.context import current_context
from app.shared.enums import AuditAction
from app.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from app.application.interfaces.services import IAuditService

_logger = get_logger(__name__)


class AuditableRepository(BaseRepository[ModelType]):
    """Repository that emits audit records on create/update/delete.

    Pass audit_service in constructor when auditing is needed (DIP).
    The actor is read from the request context (app.shared.context).
    """

    def __init__(
        self,
        db: AsyncSession,
        model: type[ModelType],
        audit_service: IAuditService | None = None,
    ) -> None:
        super().__init__(db, model)
        self._audit_service = audit_service

    @abstractmethod
    def _get_entity_type(self) -> str:
        """Return entity type for audit (e.g. 'task')."""
        ...

    @abstractmethod
    def _serialize_for_audit(self, obj: ModelType) -> dict[str, Any]:
        """Return dict representation for audit payload."""
        ...

    async def _emit_audit_event(
        self,
        action: AuditAction,
        obj: ModelType,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Emit one audit record. No-op if service not set; failures are logged."""
        if self._audit_service is None:
            return
        context = current_context()
        if context.request_id:
            metadata = {**(metadata or {}), "request_id": context.request_id}
        try:
            await self._audit_service.emit_audit_event(
                entity_type=self._get_entity_type(),
                action=action,
                entity_id=getattr(obj, "id", str(obj)),
                entity_data=self._serialize_for_audit(obj),
                actor_id=context.actor_id,
                actor_type=context.actor_type,
                metadata=metadata,
            )
        except Exception as e:
            _logger.warning(
                "Failed to emit audit event for %s.%s: %s",
                self._get_entity_type(),
                action.value,
                str(e),
                exc_info=True,
            )

    async def _on_after_create(self, obj: ModelType) -> None:
        await super()._on_after_create(obj)
        await self._emit_audit_event(AuditAction.CREATED, obj)

    async def _on_after_update(self, obj: ModelType) -> None:
        await super()._on_after_update(obj)
        await self._emit_audit_event(AuditAction.UPDATED, obj)

    async def _on_before_delete(self, obj: ModelType) -> None:
        await super()._on_before_delete(obj)
        await self._emit_audit_event(AuditAction.DELETED, obj)
