"""Row-level repository plumbing shared by the role, user and task repositories."""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Loads, inserts, flushes and deletes ORM rows of one model.

    Concrete repositories translate rows to domain entities. The _on_* hooks
    run inside the caller's transaction; AuditableRepository uses them to
    write audit rows.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def get_row(self, entity_id: str, *, for_update: bool = False) -> ModelType | None:
        """Row by primary key, or None.

        for_update locks the row until the transaction ends and overwrites any
        copy already held by the session.
        """
        model: Any = self.model
        stmt = select(self.model).where(model.id == entity_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def create(self, obj: ModelType) -> ModelType:
        self.db.add(obj)
        await self.db.flush()
        # Pull server defaults (created_at, updated_at, version).
        await self.db.refresh(obj)
        await self._on_after_create(obj)
        return obj

    async def flush_update(self, obj: ModelType) -> ModelType:
        await self.db.flush()
        await self.db.refresh(obj)
        await self._on_after_update(obj)
        return obj

    async def delete(self, obj: ModelType) -> None:
        await self._on_before_delete(obj)
        await self.db.delete(obj)
        await self.db.flush()

    async def _on_after_create(self, obj: ModelType) -> None:
        pass

    async def _on_after_update(self, obj: ModelType) -> None:
        pass

    async def _on_before_delete(self, obj: ModelType) -> None:
        pass
