"""Column mixins shared by the roles, users, departments and tasks tables."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.utils.generators import generate_cuid


class EntityModel:
    """CUID primary key plus server-side created_at / updated_at (UTC)."""

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_cuid)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class VersionedMixin:
    """Optimistic-concurrency counter, bumped by UPDATE ... WHERE version = :expected."""

    version: Mapped[int] = mapped_column(Integer, default=1, server_default="1", nullable=False)
