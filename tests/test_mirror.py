"""Tests for session mirroring."""

import asyncio
import logging
from uuid import uuid4

from past_forward.services.mirror import SessionMirror
from tests.conftest import InMemorySessionRepository


def test_writes_are_attempted_in_publish_order() -> None:
    repository = InMemorySessionRepository()
    session = repository.create_session(uuid4(), "src", ["1950s"], {})
    mirror = SessionMirror(repository)

    async def scenario() -> None:
        for index in range(3):
            mirror.publish(
                session.id,
                {"1950s": {"status": "done", "image_ref": f"img-{index}"}},
            )
        await mirror.flush()

    asyncio.run(scenario())

    assert [items["1950s"]["image_ref"] for _, items in repository.writes] == [
        "img-0",
        "img-1",
        "img-2",
    ]


def test_failed_write_is_logged_and_not_raised(caplog) -> None:
    repository = InMemorySessionRepository()
    session_id = repository.create_session(uuid4(), "src", ["1950s"], {}).id
    repository.fail_updates = True
    mirror = SessionMirror(repository)
    logger = logging.getLogger("past_forward.services.mirror")
    logger.addHandler(caplog.handler)

    async def scenario() -> None:
        mirror.publish(session_id, {"1950s": {"status": "pending"}})
        await mirror.flush()
        repository.fail_updates = False
        mirror.publish(session_id, {"1950s": {"status": "pending"}})
        await mirror.close()

    try:
        asyncio.run(scenario())
    finally:
        logger.removeHandler(caplog.handler)

    assert "Failed to mirror session items" in caplog.text
    assert [sid for sid, _ in repository.writes] == [session_id]


def test_flush_without_writes_returns() -> None:
    mirror = SessionMirror(InMemorySessionRepository())

    asyncio.run(mirror.flush())
    asyncio.run(mirror.close())


def test_mirror_restarts_on_new_event_loop() -> None:
    repository = InMemorySessionRepository()
    session = repository.create_session(uuid4(), "src", ["1950s"], {})
    mirror = SessionMirror(repository)

    async def publish_once(ref: str) -> None:
        mirror.publish(session.id, {"1950s": {"status": "done", "image_ref": ref}})
        await mirror.flush()

    asyncio.run(publish_once("first"))
    asyncio.run(publish_once("second"))

    assert len(repository.writes) == 2
