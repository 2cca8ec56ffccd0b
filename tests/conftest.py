"""Shared fixtures: default config, seeded sessions and a tick runner."""

import math

import pytest

from game.arena.config import ArenaConfig
from game.arena.controls import InputIntent
from game.arena.session import ArenaSession


@pytest.fixture
def config():
    return ArenaConfig()


@pytest.fixture
def session(config):
    return ArenaSession(config, seed=1234)


@pytest.fixture
def run_ms():
    """Tick a session for at least ``ms`` of simulated time, returning every event."""

    def _run(session, ms, intent=None):
        events = []
        ticks = int(math.ceil(ms / session.config.tick_ms))
        for _ in range(ticks):
            events.extend(session.tick(intent or InputIntent()))
        return events

    return _run
