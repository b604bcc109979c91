"""Request context binding and the logging filter that reads it."""

import logging

import pytest

from app.shared.context import bind_actor, bind_request, current_context, reset_context
from app.shared.enums import ActorType
from app.shared.telemetry.logging import RequestContextFilter


def test_bind_actor_keeps_request_id() -> None:
    token = bind_request("req-1")
    try:
        bind_actor("u-x")
        context = current_context()
        assert context.request_id == "req-1"
        assert context.actor_id == "u-x"
        assert context.actor_type == ActorType.USER
    finally:
        reset_context(token)
    assert current_context().request_id is None


def test_user_actor_requires_id() -> None:
    token = bind_request(None)
    try:
        with pytest.raises(ValueError):
            bind_actor(None)
        bind_actor(None, ActorType.SYSTEM)
        assert current_context().actor_type == ActorType.SYSTEM
    finally:
        reset_context(token)


def test_log_records_carry_request_and_actor() -> None:
    record = logging.LogRecord("t", logging.INFO, __file__, 1, "msg", None, None)
    token = bind_request("req-9")
    try:
        bind_actor("u-head")
        assert RequestContextFilter().filter(record) is True
    finally:
        reset_context(token)
    assert record.request_id == "req-9"
    assert record.actor_id == "u-head"

    outside = logging.LogRecord("t", logging.INFO, __file__, 1, "msg", None, None)
    RequestContextFilter().filter(outside)
    assert outside.request_id == "-"
    assert outside.actor_id == "-"
