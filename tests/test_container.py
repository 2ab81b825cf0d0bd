"""Tests for container wiring."""

import asyncio

from past_forward.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)
    assert container.session_service is not None
    assert container.session_service.concurrency == settings.batch_concurrency
    assert container.session_service.mirror is container.mirror
    asyncio.run(container.close_resources())
