import pytest

from conftest import make_catalog, wrong_option
from ecolexico.errors import InsufficientWordsError, SessionInvariantError
from ecolexico.models import GameSession, GameState
from ecolexico.state import (
    AdvanceRound,
    AnswerSubmitted,
    Restart,
    check_invariants,
    reduce,
    start_session,
)


@pytest.fixture
def session(generator, catalog):
    return start_session(catalog, generator)


def test_start_deals_a_round(session):
    assert session.state == GameState.PLAYING
    assert session.score == 0
    assert session.lives == 3
    assert session.used_ids == frozenset()
    assert session.current_round is not None
    check_invariants(session)


def test_start_with_three_words_returns_error(generator):
    result = start_session(make_catalog(3), generator)

    assert isinstance(result, InsufficientWordsError)


def test_correct_answer_scores_and_waits_for_advance(session, generator):
    target = session.current_round.target

    after = reduce(session, AnswerSubmitted(selected_id=target.id), generator)

    assert after.score == 10
    assert after.lives == 3
    assert after.used_ids == frozenset({target.id})
    assert after.current_round is None
    assert after.state == GameState.ROUND_RESOLVED
    assert after.last_answer.is_correct
    assert session.score == 0


def test_wrong_answer_costs_a_life_and_consumes_the_word(session, generator):
    round_ = session.current_round

    after = reduce(session, AnswerSubmitted(selected_id=wrong_option(round_)), generator)

    assert after.score == 0
    assert after.lives == 2
    assert round_.target.id in after.used_ids
    assert not after.last_answer.is_correct
    assert after.last_answer.lives_lost == 1


def test_answer_without_open_round_is_ignored(session, generator):
    target = session.current_round.target
    resolved = reduce(session, AnswerSubmitted(selected_id=target.id), generator)

    again = reduce(resolved, AnswerSubmitted(selected_id=target.id), generator)

    assert again is resolved


def test_answer_outside_the_options_is_ignored(generator):
    session = start_session(make_catalog(10), generator)
    offered = {o.id for o in session.current_round.options}
    stranger = next(i for i in range(1, 11) if i not in offered)

    assert reduce(session, AnswerSubmitted(selected_id=stranger), generator) is session


def test_advance_deals_an_unused_target(session, generator):
    target = session.current_round.target
    resolved = reduce(session, AnswerSubmitted(selected_id=target.id), generator)

    playing = reduce(resolved, AdvanceRound(generation=resolved.generation), generator)

    assert playing.state == GameState.PLAYING
    assert playing.current_round.target.id != target.id


def test_advance_from_another_generation_is_dropped(session, generator):
    target = session.current_round.target
    resolved = reduce(session, AnswerSubmitted(selected_id=target.id), generator)

    stale = reduce(resolved, AdvanceRound(generation=resolved.generation + 1), generator)

    assert stale is resolved


def test_losing_the_last_life_ends_the_game(generator, catalog):
    session = start_session(catalog, generator)
    for _ in range(3):
        session = reduce(
            session,
            AnswerSubmitted(selected_id=wrong_option(session.current_round)),
            generator,
        )
        session = reduce(session, AdvanceRound(generation=session.generation), generator)

    assert session.state == GameState.GAME_OVER
    assert session.lives == 0
    assert session.score == 0
    assert session.current_round is None
    check_invariants(session)


def test_last_word_wins_immediately(generator, catalog):
    session = start_session(catalog, generator)
    for _ in range(4):
        target = session.current_round.target
        session = reduce(session, AnswerSubmitted(selected_id=target.id), generator)
        session = reduce(session, AdvanceRound(generation=session.generation), generator)

    assert session.state == GameState.WIN
    assert session.score == 40
    assert len(session.used_ids) == 4
    check_invariants(session)


def test_restart_resets_and_bumps_generation(generator, catalog):
    session = start_session(catalog, generator)
    session = reduce(
        session,
        AnswerSubmitted(selected_id=wrong_option(session.current_round)),
        generator,
    )

    fresh = reduce(session, Restart(), generator)

    assert fresh.score == 0
    assert fresh.lives == 3
    assert fresh.used_ids == frozenset()
    assert fresh.generation == session.generation + 1
    assert fresh.state == GameState.PLAYING
    assert fresh.current_round is not None


def test_restart_without_catalog_does_nothing(generator):
    empty = GameSession()

    assert reduce(empty, Restart(), generator) is empty


def test_unknown_event_is_rejected(session, generator):
    with pytest.raises(TypeError):
        reduce(session, object(), generator)


def test_invariant_checker_flags_broken_sessions(session):
    broken = session.model_copy(update={"lives": 0})

    with pytest.raises(SessionInvariantError):
        check_invariants(broken)

    with pytest.raises(SessionInvariantError):
        check_invariants(session.model_copy(update={"state": GameState.WIN}))
