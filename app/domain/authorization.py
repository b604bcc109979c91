"""Role-hierarchy authorization and task visibility rules.

Pure functions over roles, actors and tasks: no I/O, no role lookup. The
application layer resolves the actor's role once and passes it in.
"""

from collections.abc import Callable
from dataclasses import dataclass

from app.domain.entities.role import RoleEntity
from app.domain.entities.task import TaskEntity
from app.domain.entities.user import Actor
from app.domain.enums import Capability, VisibilityKind


def can_assign_role(actor_role: RoleEntity, target_role: RoleEntity) -> bool:
    """Return whether actor_role may assign tasks to, or grant, target_role.

    The static role may target any non-static role; other roles only the roles
    on their managed list. The static role is never a valid target.
    """
    if target_role.is_static:
        return False
    if actor_role.is_static:
        return True
    return actor_role.manages(target_role.id)


def can_perform(role: RoleEntity, permission: Capability | str) -> bool:
    """Return whether role holds permission. Unknown permission names are denied."""
    if isinstance(permission, Capability):
        capability: Capability | None = permission
    else:
        capability = Capability.parse(permission)
    if capability is None:
        return False
    return role.has(capability)


def can_assign_task(actor: Actor, assignee_id: str, assignee_role: RoleEntity) -> bool:
    """Creation / reassignment guard: self, static actor, or a managed role."""
    if assignee_id == actor.id:
        return True
    return can_assign_role(actor.role, assignee_role)


def sees_all_tasks(role: RoleEntity) -> bool:
    return role.is_static or role.has(Capability.VIEW_ALL_TASKS)


def can_edit_task(actor: Actor, task: TaskEntity) -> bool:
    """Details edits: editAllTasks, or the creator holding editOwnTasks."""
    if actor.role.is_static or actor.role.has(Capability.EDIT_ALL_TASKS):
        return True
    return task.is_creator(actor.id) and actor.role.has(Capability.EDIT_OWN_TASKS)


def can_forward_task(actor: Actor) -> bool:
    """Capability half of the forward guard (assignee check lives on the task)."""
    role = actor.role
    return (
        role.is_static
        or role.has(Capability.EDIT_OWN_TASKS)
        or role.has(Capability.EDIT_ALL_TASKS)
    )


def can_delete_task(actor: Actor, task: TaskEntity) -> bool:
    role = actor.role
    if role.is_static or role.has(Capability.DELETE_ALL_TASKS):
        return True
    return role.has(Capability.DELETE_OWN_TASKS) and task.is_creator(actor.id)


def can_comment_on_task(actor: Actor, task: TaskEntity) -> bool:
    """Creator, assignee, the person who handed the task over, or a see-all role."""
    if task.is_creator(actor.id) or task.is_assignee(actor.id):
        return True
    if actor.user.has_contact(task.task_given_by_contact):
        return True
    return sees_all_tasks(actor.role)


@dataclass(frozen=True)
class TaskVisibilityScope:
    """Declarative filter over tasks an actor may list or view.

    Storage translates it into a query predicate; permits() evaluates it in
    memory given a lookup from user id to department id.
    """

    kind: VisibilityKind
    actor_id: str
    department_id: str | None = None

    def permits(
        self, task: TaskEntity, department_of: Callable[[str], str | None]
    ) -> bool:
        if self.kind == VisibilityKind.ALL:
            return True
        if task.created_by == self.actor_id or task.assigned_to == self.actor_id:
            return True
        if self.kind == VisibilityKind.DEPARTMENT:
            if task.forwarded_by == self.actor_id:
                return True
            return self.department_id in (
                department_of(task.assigned_to),
                department_of(task.created_by),
            )
        return False


def task_visibility_scope(actor: Actor) -> TaskVisibilityScope:
    """Compute the actor's visibility tier: all, own department, or own tasks."""
    if sees_all_tasks(actor.role):
        return TaskVisibilityScope(VisibilityKind.ALL, actor.id)
    if actor.role.has(Capability.VIEW_DEPARTMENT_TASKS) and actor.department_id:
        return TaskVisibilityScope(
            VisibilityKind.DEPARTMENT, actor.id, actor.department_id
        )
    return TaskVisibilityScope(VisibilityKind.OWN, actor.id)
