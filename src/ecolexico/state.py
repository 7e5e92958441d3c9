"""Game rules as pure transitions over an immutable ``GameSession``.

Every function here returns a new session (or the same one when the event does
not apply) and never touches timers or I/O, so the rules can be exercised with
nothing but a seeded round generator.
"""
import logging
from typing import Iterable, Union

from pydantic import BaseModel, ConfigDict

from .config import settings
from .errors import InsufficientWordsError, SessionInvariantError
from .models import (
    TERMINAL_STATES,
    AnswerRecord,
    Exhausted,
    GameSession,
    GameState,
    WordEntry,
)
from .pool import WordPool
from .rounds import RoundGenerator

logger = logging.getLogger(__name__)


# --- Events ---
class AnswerSubmitted(BaseModel):
    model_config = ConfigDict(frozen=True)

    selected_id: int


class AdvanceRound(BaseModel):
    """Fired once the feedback delay is over; carries the playthrough it belongs to."""

    model_config = ConfigDict(frozen=True)

    generation: int


class Restart(BaseModel):
    model_config = ConfigDict(frozen=True)


Event = Union[AnswerSubmitted, AdvanceRound, Restart]


# --- Transitions ---
def deal_round(session: GameSession, generator: RoundGenerator) -> GameSession:
    result = generator.generate(session.catalog, session.used_ids)
    if isinstance(result, Exhausted):
        logger.info(f"All {result.catalog_size} words used, playthrough won")
        return session.model_copy(
            update={"state": GameState.WIN, "current_round": None}
        )
    return session.model_copy(
        update={"state": GameState.PLAYING, "current_round": result}
    )


def start_session(
    catalog: Iterable[WordEntry], generator: RoundGenerator, generation: int = 0
) -> Union[GameSession, InsufficientWordsError]:
    pool = WordPool()
    error = pool.initialize(catalog)
    if error is not None:
        return error
    session = GameSession(
        catalog=pool.catalog,
        lives=settings.LIVES_PER_GAME,
        state=GameState.LOADING,
        generation=generation,
    )
    return deal_round(session, generator)


def submit_answer(session: GameSession, selected_id: int) -> GameSession:
    current = session.current_round
    if session.state != GameState.PLAYING or current is None:
        return session
    # An id that was never offered is not an answer: no life is lost for it.
    if selected_id not in {option.id for option in current.options}:
        logger.warning(f"Answer {selected_id} is not an option of this round, ignored")
        return session

    target = current.target
    is_correct = selected_id == target.id
    score_delta = settings.POINTS_PER_CORRECT_ANSWER if is_correct else 0
    lives_lost = 0 if is_correct else 1

    # The target is consumed whether or not it was answered correctly.
    pool = WordPool(session.catalog, session.used_ids)
    pool.mark_used(target.id)

    lives = max(session.lives - lives_lost, 0)
    if lives == 0:
        state = GameState.GAME_OVER
    elif pool.is_exhausted():
        state = GameState.WIN
    else:
        state = GameState.ROUND_RESOLVED

    return session.model_copy(
        update={
            "score": session.score + score_delta,
            "lives": lives,
            "state": state,
            "used_ids": pool.used_ids,
            "current_round": None,
            "last_answer": AnswerRecord(
                selected_id=selected_id,
                target_id=target.id,
                is_correct=is_correct,
                score_delta=score_delta,
                lives_lost=lives_lost,
            ),
        }
    )


def advance_round(
    session: GameSession, generation: int, generator: RoundGenerator
) -> GameSession:
    if session.state != GameState.ROUND_RESOLVED:
        return session
    if generation != session.generation:
        logger.debug(
            f"Stale advance for generation {generation} "
            f"(current {session.generation}) dropped"
        )
        return session
    return deal_round(session, generator)


def restart(session: GameSession, generator: RoundGenerator) -> GameSession:
    if not session.catalog:
        return session
    fresh = GameSession(
        catalog=session.catalog,
        lives=settings.LIVES_PER_GAME,
        state=GameState.LOADING,
        generation=session.generation + 1,
    )
    return deal_round(fresh, generator)


def reduce(session: GameSession, event: Event, generator: RoundGenerator) -> GameSession:
    if isinstance(event, AnswerSubmitted):
        return submit_answer(session, event.selected_id)
    if isinstance(event, AdvanceRound):
        return advance_round(session, event.generation, generator)
    if isinstance(event, Restart):
        return restart(session, generator)
    raise TypeError(f"Unknown game event: {event!r}")


def check_invariants(session: GameSession) -> None:
    """Raises ``SessionInvariantError`` if the session breaks a game rule."""
    catalog_ids = {word.id for word in session.catalog}
    problems = []
    if session.score < 0 or session.score % settings.POINTS_PER_CORRECT_ANSWER:
        problems.append(f"score {session.score} is not a multiple of the reward")
    if not 0 <= session.lives <= settings.LIVES_PER_GAME:
        problems.append(f"lives {session.lives} out of range")
    if session.lives == 0 and session.state != GameState.GAME_OVER:
        problems.append(f"no lives left but state is {session.state.value}")
    if (
        session.catalog
        and session.lives > 0
        and session.used_ids >= catalog_ids
        and session.state != GameState.WIN
    ):
        problems.append(f"catalog exhausted but state is {session.state.value}")
    if session.state in TERMINAL_STATES and session.current_round is not None:
        problems.append("terminal session still holds a round")
    if not session.used_ids <= catalog_ids:
        problems.append("used ids outside the catalog")
    current = session.current_round
    if current is not None and current.target.id in session.used_ids:
        problems.append(f"target {current.target.id} was already asked")
    if problems:
        raise SessionInvariantError("; ".join(problems))
