"""Per-request context carried in a ContextVar.

One immutable RequestContext holds the request id and the acting user, so
logging and audit can read them without threading arguments through every
call. Scripts bind a SYSTEM actor; HTTP requests bind the authenticated user.
"""

from contextvars import ContextVar, Token
from dataclasses import dataclass, replace

from app.shared.enums import ActorType


@dataclass(frozen=True)
class RequestContext:
    request_id: str | None = None
    actor_id: str | None = None
    actor_type: ActorType = ActorType.SYSTEM


_context: ContextVar[RequestContext] = ContextVar("request_context", default=RequestContext())


def current_context() -> RequestContext:
    return _context.get()


def bind_request(request_id: str | None) -> Token[RequestContext]:
    """Start a fresh context for one request. Pass the token to reset_context()."""
    return _context.set(RequestContext(request_id=request_id))


def reset_context(token: Token[RequestContext]) -> None:
    _context.reset(token)


def bind_actor(actor_id: str | None, actor_type: ActorType = ActorType.USER) -> None:
    """Record who is acting, keeping the request id.

    Raises:
        ValueError: actor_type is USER without an actor_id.
    """
    if actor_type == ActorType.USER and not actor_id:
        raise ValueError("actor_id is required for a USER actor")
    _context.set(replace(_context.get(), actor_id=actor_id, actor_type=actor_type))


def get_request_id() -> str | None:
    return _context.get().request_id
