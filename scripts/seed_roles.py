"""Seed the default role hierarchy and, optionally, the super-admin user.

Usage:
    python -m scripts.seed_roles [admin_email admin_password]

Idempotent: existing roles are updated in place (capabilities, level,
managed roles); the super-admin user is created only if the email is free.
Requires Postgres with migrations applied.
"""

import asyncio
import sys
from dataclasses import replace

from app.application.dtos.user import UserCreate
from app.core.config import get_settings
from app.domain.entities.role import RoleEntity, capabilities_from_bag
from app.domain.enums import Capability
from app.infrastructure.persistence.database import session_factory
from app.infrastructure.persistence.repositories import RoleRepository, UserRepository
from app.infrastructure.security.password import get_password_hash
from app.infrastructure.services import SystemAuditService
from app.shared.context import bind_actor
from app.shared.enums import ActorType
from app.shared.telemetry.logging import get_logger, setup_logging
from app.shared.utils.generators import generate_cuid

logger = get_logger("scripts.seed_roles")

SUPER_ROLE = "superadmin"

_ADMIN = {c.value for c in Capability}
_STAFF = {"createTasks", "editOwnTasks"}
_MANAGER = {
    "viewUsers", "createUsers", "editUsers", "deleteUsers", "viewDepartments",
    "viewAllTasks", "createTasks", "editOwnTasks", "editAllTasks", "deleteOwnTasks",
    "viewApprovals", "approveRejectTasks", "viewReports", "downloadReports",
}

# Seeded bottom-up so every managed role exists before it is referenced.
DEFAULT_ROLES: list[dict] = [
    {
        "name": "staff",
        "display_name": "Staff",
        "description": "Task management access only",
        "level": 1,
        "permissions": _STAFF,
        "manages": ["staff"],
    },
    {
        "name": "manager",
        "display_name": "Manager",
        "description": "Manages staff and handles approvals",
        "level": 2,
        "permissions": _MANAGER,
        "manages": ["staff"],
    },
    {
        "name": "generalmanager",
        "display_name": "General Manager",
        "description": "Full access; manages managers and staff",
        "level": 3,
        "permissions": _ADMIN,
        "manages": ["manager", "staff"],
    },
    {
        "name": "director",
        "display_name": "Director",
        "description": "Full access; manages every non-static role",
        "level": 4,
        "permissions": _ADMIN,
        "manages": ["generalmanager", "manager", "staff"],
    },
]


def _bag(enabled: set[str]) -> dict[str, bool]:
    return {c.value: c.value in enabled for c in Capability}


async def seed_roles(role_repo: RoleRepository) -> dict[str, RoleEntity]:
    """Create or update the default roles and the static super role."""
    seeded: dict[str, RoleEntity] = {}
    for definition in DEFAULT_ROLES:
        capabilities, _ = capabilities_from_bag(_bag(definition["permissions"]))
        existing = await role_repo.get_by_name(definition["name"])
        role = RoleEntity(
            id=existing.id if existing else generate_cuid(),
            name=definition["name"],
            display_name=definition["display_name"],
            level=definition["level"],
            description=definition["description"],
            capabilities=capabilities,
            is_system=True,
        )
        seeded[role.name] = role
        role.managed_role_ids = frozenset(seeded[name].id for name in definition["manages"])
        if existing:
            await role_repo.save(role)
            logger.info("Updated role %s (level %d)", role.name, role.level)
        else:
            # Edges to the role itself need its row first.
            await role_repo.add(
                replace(role, managed_role_ids=role.managed_role_ids - {role.id})
            )
            if role.manages(role.id):
                await role_repo.save(role)
            logger.info("Created role %s (level %d)", role.name, role.level)

    if await role_repo.get_by_name(SUPER_ROLE) is None:
        capabilities, _ = capabilities_from_bag(_bag(_ADMIN))
        super_role = RoleEntity(
            id=generate_cuid(),
            name=SUPER_ROLE,
            display_name="Super Admin",
            level=5,
            description="Static role: may assign any non-static role; cannot be edited",
            capabilities=capabilities,
            is_system=True,
            is_static=True,
        )
        await role_repo.add(super_role)
        logger.info("Created static role %s", SUPER_ROLE)
    seeded[SUPER_ROLE] = await role_repo.get_by_name(SUPER_ROLE)  # type: ignore[assignment]
    return seeded


async def seed_admin(
    user_repo: UserRepository, super_role: RoleEntity, email: str, password: str
) -> None:
    if await user_repo.find_by_contact(email.lower()):
        logger.info("Super admin %s already exists", email)
        return
    hashed = await asyncio.to_thread(get_password_hash, password)
    await user_repo.create(
        UserCreate(name="Super Admin", password=password, role_id=super_role.id, email=email),
        hashed,
    )
    logger.info("Created super admin %s", email)


async def main() -> None:
    get_settings()
    setup_logging()
    args = sys.argv[1:]
    if len(args) not in (0, 2):
        print("Usage: python -m scripts.seed_roles [admin_email admin_password]", file=sys.stderr)
        sys.exit(1)
    bind_actor(None, ActorType.SYSTEM)

    async with session_factory()() as session:
        async with session.begin():
            audit = SystemAuditService(session)
            roles = await seed_roles(RoleRepository(session, audit_service=audit))
            if args:
                await seed_admin(
                    UserRepository(session, audit_service=audit),
                    roles[SUPER_ROLE],
                    args[0],
                    args[1],
                )
    print(f"Seeded {len(roles)} roles")


if __name__ == "__main__":
    asyncio.run(main())
