"""Task and task comment ORM models, plus the serial-number counter."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import EntityModel, VersionedMixin


class Task(EntityModel, VersionedMixin, Base):
    """Task. Table: task. sno is the human-facing serial number (unique, never reused).

    User references are plain strings (not FKs) so that deleting a user keeps
    the task history readable through the denormalized name/contact columns.
    """

    __tablename__ = "task"

    sno: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    created_by: Mapped[str] = mapped_column(String, nullable=False, index=True)
    created_by_name: Mapped[str] = mapped_column(String(200), nullable=False)
    created_by_contact: Mapped[str] = mapped_column(String(320), nullable=False)
    assigned_to: Mapped[str] = mapped_column(String, nullable=False, index=True)
    assigned_to_name: Mapped[str] = mapped_column(String(200), nullable=False)
    assigned_to_contact: Mapped[str] = mapped_column(String(320), nullable=False)
    priority: Mapped[str] = mapped_column(String(16), nullable=False, default="Medium")
    due_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_self_task: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    task_given_by_contact: Mapped[str | None] = mapped_column(String(320), nullable=True)
    task_given_by_name: Mapped[str | None] = mapped_column(String(200), nullable=True)

    status: Mapped[str] = mapped_column(String(32), nullable=False, default="Pending")
    approval_status: Mapped[str] = mapped_column(
        String(16), nullable=False, default="Pending"
    )
    approved_by: Mapped[str | None] = mapped_column(String, nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    approval_comments: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_forwarded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    forwarded_by: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    forwarded_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    forwarder_approved: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    current_approver: Mapped[str | None] = mapped_column(String, nullable=True)

    comments: Mapped[list["TaskCommentRow"]] = relationship(
        back_populates="task",
        order_by="TaskCommentRow.created_at",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_task_status_approver", "status", "current_approver"),
    )


class TaskCommentRow(Base):
    """Append-only comment. Table: task_comment."""

    __tablename__ = "task_comment"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    task_id: Mapped[str] = mapped_column(
        String, ForeignKey("task.id", ondelete="CASCADE"), nullable=False, index=True
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[str | None] = mapped_column(String, nullable=True)
    author_name: Mapped[str] = mapped_column(String(200), nullable=False)
    author_role: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    task: Mapped[Task] = relationship(back_populates="comments")


class SequenceCounter(Base):
    """Named monotonically increasing counter. Table: sequence_counter."""

    __tablename__ = "sequence_counter"

    name: Mapped[str] = mapped_column(String(50), primary_key=True)
    value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
