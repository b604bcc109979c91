"""Cross-cutting helpers shared by every layer: request context, enums, ids and time.

No business logic lives here.
"""

from app.shared.context import (
    RequestContext,
    bind_actor,
    bind_request,
    current_context,
    get_request_id,
    reset_context,
)
from app.shared.enums import ActorType, AuditAction, TaskEventKind
from app.shared.utils import ensure_utc, generate_cuid, utc_now

__all__ = [
    "ActorType",
    "AuditAction",
    "RequestContext",
    "TaskEventKind",
    "bind_actor",
    "bind_request",
    "current_context",
    "ensure_utc",
    "generate_cuid",
    "get_request_id",
    "reset_context",
    "utc_now",
]
