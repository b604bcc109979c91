"""Commands for role administration (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RoleCreate:
    name: str
    display_name: str
    level: int = 1
    description: str | None = None
    permissions: dict[str, bool] = field(default_factory=dict)
    managed_role_ids: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RoleUpdate:
    """Partial role update. permissions are merged into the existing bag."""

    display_name: str | None = None
    level: int | None = None
    description: str | None = None
    permissions: dict[str, bool] | None = None
    managed_role_ids: list[str] | None = None
