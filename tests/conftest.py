"""
Shared pytest fixtures for the POS engine tests.

These fixtures provide a fresh in-memory store, a deterministic clock and id
source, and engines seeded with the default catalog.
"""

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from engine.event_bus import EventBus
from engine.state_engine import StateDefaults, StateEngine
from shared.channels import EmailChannel
from shared.models import AppSettings
from shared.storage import MemoryStore


START = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


class StepClock:
    """Clock that advances one second per call."""

    def __init__(self, start: datetime = START, step: timedelta = timedelta(seconds=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        now = self.current
        self.current += self.step
        return now


class FrozenClock:
    """Clock that always returns the same instant (same-tick generation)."""

    def __init__(self, instant: datetime = START):
        self.instant = instant

    def __call__(self) -> datetime:
        return self.instant


@pytest.fixture
def store() -> MemoryStore:
    """Fresh MemoryStore for each test."""
    return MemoryStore()


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def id_factory():
    """Sequential ids: id-1, id-2, ..."""
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def email_channel() -> EmailChannel:
    """Fresh EmailChannel for each test."""
    return EmailChannel()


@pytest.fixture
def engine(store, event_bus, email_channel, id_factory, clock) -> StateEngine:
    """
    Engine seeded with the default catalog.

    The notification email is admin@example.com, so errors and warnings are
    echoed.
    """
    return StateEngine(
        store,
        event_bus=event_bus,
        email_channel=email_channel,
        id_factory=id_factory,
        clock=clock,
    )


@pytest.fixture
def quiet_engine(store, event_bus, email_channel, id_factory, clock) -> StateEngine:
    """Engine seeded with the default catalog and no notification email."""
    return StateEngine(
        store,
        event_bus=event_bus,
        email_channel=email_channel,
        id_factory=id_factory,
        clock=clock,
        defaults=StateDefaults(settings=AppSettings(notification_email="")),
    )


# =============================================================================
# Seed data ids
# =============================================================================

@pytest.fixture
def batteries_id() -> str:
    """Piles AA: stock 8, sale 150, purchase 100, total_sales 40."""
    return "p3"


@pytest.fixture
def sprite_id() -> str:
    """Sprite 1L: already out of stock."""
    return "p5"


@pytest.fixture
def sodas_category_id() -> str:
    """Boissons Gazeuses: used by p1 and p5."""
    return "1"


@pytest.fixture
def frozen_clock() -> FrozenClock:
    return FrozenClock()
