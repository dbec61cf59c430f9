from __future__ import annotations

from datetime import date

import pytest

from casetrack.domain.deadlines.engine import DeadlineEngine
from tests.fakes import FixedClock, InMemoryDeadlineStore, SeqIds


@pytest.fixture
def store() -> InMemoryDeadlineStore:
    return InMemoryDeadlineStore()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(date(2025, 1, 10))


@pytest.fixture
def engine(store: InMemoryDeadlineStore, clock: FixedClock) -> DeadlineEngine:
    return DeadlineEngine(store=store, clock=clock, ids=SeqIds())
