"""Domain enumerations for the Taskflow application.

Enums represent fixed sets of domain values: task status, approval status,
priority, duration units, and role capabilities.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings (e.g. for validation or serialization)."""
        return [member.value for member in cls]


class TaskStatus(_ValuesMixin, str, Enum):
    """Task lifecycle status.

    COMPLETED is reachable only through final approval, never by a status update.
    """

    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    WAITING_FOR_APPROVAL = "Waiting for Approval"
    COMPLETED = "Completed"

    @property
    def is_open(self) -> bool:
        """True for statuses the assignee is still working on."""
        return self in (TaskStatus.PENDING, TaskStatus.IN_PROGRESS)


class ApprovalStatus(_ValuesMixin, str, Enum):
    """Approval bookkeeping of a task."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class TaskPriority(_ValuesMixin, str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class DurationUnit(_ValuesMixin, str, Enum):
    HOURS = "hours"
    DAYS = "days"


class TaskView(_ValuesMixin, str, Enum):
    """Named task listings offered to an actor."""

    ASSIGNED = "assigned"
    CREATED = "created"
    SELF = "self"
    ALL = "all"


class VisibilityKind(_ValuesMixin, str, Enum):
    """Tier of a task visibility scope, broadest first."""

    ALL = "all"
    DEPARTMENT = "department"
    OWN = "own"


class Capability(_ValuesMixin, str, Enum):
    """Closed set of role capabilities.

    Stored on roles as a boolean bag keyed by these names.
    """

    VIEW_USERS = "viewUsers"
    CREATE_USERS = "createUsers"
    EDIT_USERS = "editUsers"
    DELETE_USERS = "deleteUsers"
    VIEW_DEPARTMENTS = "viewDepartments"
    CREATE_DEPARTMENTS = "createDepartments"
    EDIT_DEPARTMENTS = "editDepartments"
    DELETE_DEPARTMENTS = "deleteDepartments"
    VIEW_ALL_TASKS = "viewAllTasks"
    VIEW_DEPARTMENT_TASKS = "viewDepartmentTasks"
    CREATE_TASKS = "createTasks"
    EDIT_OWN_TASKS = "editOwnTasks"
    EDIT_ALL_TASKS = "editAllTasks"
    DELETE_OWN_TASKS = "deleteOwnTasks"
    DELETE_ALL_TASKS = "deleteAllTasks"
    VIEW_APPROVALS = "viewApprovals"
    APPROVE_REJECT_TASKS = "approveRejectTasks"
    VIEW_REPORTS = "viewReports"
    DOWNLOAD_REPORTS = "downloadReports"
    VIEW_ROLES = "viewRoles"
    CREATE_ROLES = "createRoles"
    EDIT_ROLES = "editRoles"
    DELETE_ROLES = "deleteRoles"

    @classmethod
    def parse(cls, name: str) -> "Capability | None":
        """Return the capability named ``name``, or None when unknown."""
        try:
            return cls(name)
        except ValueError:
            return None
