from datetime import datetime, timedelta

from conftest import make_catalog
from ecolexico.engine import QuizEngine
from ecolexico.levels import level_for_score
from ecolexico.sessions import SessionStore


class FakeClock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, 12, 0)

    def __call__(self):
        return self.now


def test_sessions_expire_after_timeout():
    clock = FakeClock()
    store = SessionStore(lambda sid: QuizEngine(session_id=sid), timeout_minutes=10, clock=clock)
    session_id, engine = store.create()
    engine.start(make_catalog(4))

    clock.now += timedelta(minutes=5)
    assert store.get(session_id) is engine

    clock.now += timedelta(minutes=6)
    assert store.get(session_id) is None
    assert engine.session is None
    assert len(store) == 0


def test_create_sweeps_expired_sessions():
    clock = FakeClock()
    store = SessionStore(lambda sid: QuizEngine(session_id=sid), timeout_minutes=1, clock=clock)
    old_engines = []
    for _ in range(100):
        _, engine = store.create()
        engine.start(make_catalog(4))
        old_engines.append(engine)
    assert len(store) == 100

    clock.now += timedelta(hours=5)
    session_id, engine = store.create()

    assert len(store) == 1
    assert store.get(session_id) is engine
    assert all(old.session is None for old in old_engines)


def test_create_keeps_sessions_still_in_time():
    clock = FakeClock()
    store = SessionStore(lambda sid: QuizEngine(session_id=sid), timeout_minutes=10, clock=clock)
    first_id, first = store.create()

    clock.now += timedelta(minutes=9)
    store.create()

    assert len(store) == 2
    assert store.get(first_id) is first


def test_unknown_or_missing_ids():
    store = SessionStore(lambda sid: QuizEngine(session_id=sid))

    assert store.get(None) is None
    assert store.get("nope") is None
    store.drop("nope")


def test_levels_follow_score_thresholds():
    assert level_for_score(0).id == "novato"
    assert level_for_score(4).id == "novato"
    assert level_for_score(5).id == "casi"
    assert level_for_score(15).id == "nano"
    assert level_for_score(400).id == "nano"
