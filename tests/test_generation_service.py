"""Tests for the generation invoker and video gate."""

import asyncio

import pytest

from past_forward.adapters.settings_video_authorization import (
    SettingsVideoAuthorization,
)
from past_forward.services.generation import (
    GenerationError,
    GenerationService,
    VideoAuthorizationGate,
)
from tests.conftest import SOURCE_IMAGE, FakeGenerationClient, FakeVideoAuthorization


def test_generation_service_times_out() -> None:
    service = GenerationService(
        client=FakeGenerationClient(delay=0.5), timeout_seconds=0.01
    )

    with pytest.raises(GenerationError, match="timed out"):
        asyncio.run(service.generate_narration("1950s"))


def test_generation_service_passes_results_through() -> None:
    client = FakeGenerationClient(delay=0)
    service = GenerationService(client=client, timeout_seconds=1.0)

    result = asyncio.run(service.generate_image(SOURCE_IMAGE, "1920s"))

    assert result.startswith("data:image/png;base64,1920s")
    assert client.calls == [("image", "1920s")]


def test_generation_service_rejects_unknown_aspect_ratio() -> None:
    client = FakeGenerationClient()
    service = GenerationService(client=client)

    with pytest.raises(ValueError):
        asyncio.run(service.generate_video("img", "1950s", "1:1"))

    assert client.calls == []


def test_gate_caches_confirmation_until_reset() -> None:
    authorization = FakeVideoAuthorization()
    gate = VideoAuthorizationGate(authorization)

    assert asyncio.run(gate.ensure())
    assert asyncio.run(gate.ensure())
    assert authorization.checks == 1

    gate.reset()
    authorization.authorized = False

    assert not asyncio.run(gate.ensure())
    assert authorization.requests == 1


def test_settings_video_authorization_requires_key() -> None:
    assert asyncio.run(SettingsVideoAuthorization("key").has_authorization())
    assert not asyncio.run(SettingsVideoAuthorization("  ").has_authorization())
    assert not asyncio.run(SettingsVideoAuthorization(None).has_authorization())
