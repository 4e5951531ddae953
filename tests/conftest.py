import asyncio
import socket

import pytest

from fetch_guard import config
from fetch_guard.config import Settings


class FakeResolver:
    """Resolver double: fixed answers per hostname plus a call log."""

    def __init__(
        self,
        answers: dict[str, list[str]] | None = None,
        *,
        error: Exception | None = None,
        delay: float = 0.0,
    ):
        self.answers = answers or {}
        self.error = error
        self.delay = delay
        self.calls: list[str] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def __call__(self, hostname: str) -> list[str]:
        self.calls.append(hostname)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if hostname not in self.answers:
            raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")
        return list(self.answers[hostname])


@pytest.fixture
def fake_resolver():
    """Factory for FakeResolver instances."""
    return FakeResolver


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    """Pin settings to defaults so user/project config files never leak into tests."""
    settings = Settings()
    monkeypatch.setattr(config, "_settings", settings)
    return settings
