"""Role ORM model and the role -> managed role association table."""

from typing import Any

from sqlalchemy import JSON, Boolean, Column, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import EntityModel

role_managed_role = Table(
    "role_managed_role",
    Base.metadata,
    Column("role_id", String, ForeignKey("role.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "managed_role_id",
        String,
        ForeignKey("role.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Role(EntityModel, Base):
    """Role. Table: role. Unique name.

    permissions is the stored boolean bag keyed by capability name.
    """

    __tablename__ = "role"

    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    permissions: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    is_system: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_static: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    managed_roles: Mapped[list["Role"]] = relationship(
        "Role",
        secondary=role_managed_role,
        primaryjoin=lambda: Role.id == role_managed_role.c.role_id,
        secondaryjoin=lambda: Role.id == role_managed_role.c.managed_role_id,
        lazy="selectin",
    )
