"""Department ORM model. Referenced by users; managed outside the task core."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import EntityModel


class Department(EntityModel, Base):
    """Department. Table: department. Unique name."""

    __tablename__ = "department"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
