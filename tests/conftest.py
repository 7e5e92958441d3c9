import random
from typing import Callable, List

import pytest

from ecolexico.engine import QuizEngine
from ecolexico.models import WordEntry
from ecolexico.rounds import RandomRoundGenerator
from ecolexico.scheduler import Handle, Scheduler


def make_catalog(size: int, start: int = 1) -> List[WordEntry]:
    return [
        WordEntry(
            id=i,
            term=f"palabra-{i}",
            meaning=f"significado-{i}",
            region_id=1,
        )
        for i in range(start, start + size)
    ]


class ManualHandle(Handle):
    def __init__(self, delay: float, callback: Callable[[], None]):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler(Scheduler):
    """Holds callbacks until the test decides the delay is over."""

    def __init__(self):
        self.pending: List[ManualHandle] = []

    def schedule(self, delay_seconds, callback):
        handle = ManualHandle(delay_seconds, callback)
        self.pending.append(handle)
        return handle

    def run_all(self) -> int:
        pending, self.pending = self.pending, []
        fired = 0
        for handle in pending:
            if not handle.cancelled:
                handle.callback()
                fired += 1
        return fired


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def generator(rng):
    return RandomRoundGenerator(rng)


@pytest.fixture
def catalog():
    return make_catalog(4)


@pytest.fixture
def manual_scheduler():
    return ManualScheduler()


@pytest.fixture
def engine(generator):
    """Engine whose next round is dealt as soon as an answer resolves."""
    return QuizEngine(generator=generator, check_invariants=True)


@pytest.fixture
def delayed_engine(generator, manual_scheduler):
    return QuizEngine(
        generator=generator,
        scheduler=manual_scheduler,
        next_round_delay=1.5,
        check_invariants=True,
    )


def wrong_option(round_):
    return next(o.id for o in round_.options if o.id != round_.target.id)
