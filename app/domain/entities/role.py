"""Role domain entity.

A role carries a typed capability set and an explicit list of roles it may
manage (assign tasks to, grant at user creation). The static role is the
super role: it is never managed and never constrained by a managed list.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from app.domain.enums import Capability
from app.domain.exceptions import ValidationException


def capabilities_from_bag(bag: Mapping[str, bool] | None) -> tuple[frozenset[Capability], list[str]]:
    """Convert a stored boolean bag into a capability set.

    Returns:
        (granted capabilities, names in the bag that are not known capabilities).
    """
    granted: set[Capability] = set()
    unknown: list[str] = []
    for name, enabled in (bag or {}).items():
        capability = Capability.parse(name)
        if capability is None:
            unknown.append(name)
        elif enabled:
            granted.add(capability)
    return frozenset(granted), unknown


def capabilities_to_bag(capabilities: Iterable[Capability]) -> dict[str, bool]:
    """Return the full boolean bag (every known capability present) for storage."""
    held = set(capabilities)
    return {capability.value: capability in held for capability in Capability}


@dataclass
class RoleEntity:
    """Domain entity for a role in the organizational hierarchy.

    level is advisory seniority (higher = more senior); authorization decisions
    use capabilities and managed_role_ids only.
    """

    id: str
    name: str
    display_name: str
    level: int
    capabilities: frozenset[Capability] = field(default_factory=frozenset)
    managed_role_ids: frozenset[str] = field(default_factory=frozenset)
    description: str | None = None
    is_system: bool = False
    is_static: bool = False

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate role business rules. Raises ValidationException if invalid."""
        if not self.name or not self.name.strip():
            raise ValidationException("Role name is required", field="name")
        if not self.display_name or not self.display_name.strip():
            raise ValidationException("Role display name is required", field="display_name")

    def has(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def manages(self, role_id: str) -> bool:
        return role_id in self.managed_role_ids


def unprivileged_role() -> RoleEntity:
    """Synthetic role with no capabilities, used when no role can be resolved at all."""
    return RoleEntity(id="", name="none", display_name="No role", level=0)
