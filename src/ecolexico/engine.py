import logging
import threading
from typing import Iterable, Optional, Union

from .config import settings
from .errors import InsufficientWordsError
from .levels import level_for_score
from .models import (
    TERMINAL_STATES,
    GameSession,
    GameSnapshot,
    GameState,
    OptionView,
    Round,
    RoundView,
    WordEntry,
)
from .rounds import RandomRoundGenerator, RoundGenerator
from .scheduler import Handle, ImmediateScheduler, Scheduler
from . import state as rules

logger = logging.getLogger(__name__)


class QuizEngine:
    """One player's trivia game.

    Holds the current ``GameSession`` and feeds it through the transitions in
    ``ecolexico.state``. Answer effects apply as soon as ``submit_answer``
    returns; only dealing the next round waits for ``next_round_delay``.
    """

    def __init__(
        self,
        generator: Optional[RoundGenerator] = None,
        scheduler: Optional[Scheduler] = None,
        next_round_delay: float = settings.NEXT_ROUND_DELAY_MS / 1000,
        check_invariants: bool = settings.DEBUG,
        session_id: str = "",
    ):
        self.generator = generator or RandomRoundGenerator()
        self.scheduler = scheduler or ImmediateScheduler()
        self.next_round_delay = next_round_delay
        self.check_invariants = check_invariants
        self.session_id = session_id
        self._session: Optional[GameSession] = None
        self._pending: Optional[Handle] = None
        self._lock = threading.RLock()

    # --- Commands ---
    def start(
        self, catalog: Iterable[WordEntry]
    ) -> Union[GameSnapshot, InsufficientWordsError]:
        with self._lock:
            generation = self._session.generation + 1 if self._session else 0
            result = rules.start_session(catalog, self.generator, generation)
            if isinstance(result, InsufficientWordsError):
                logger.warning(f"[{self.session_id}] Game not started: {result}")
                return result
            self._cancel_pending()
            self._commit(result)
            logger.info(
                f"[{self.session_id}] Game started with {len(result.catalog)} words"
            )
            return self.snapshot()

    def submit_answer(self, selected_id: int) -> None:
        with self._lock:
            if self._session is None:
                return
            before = self._session
            after = rules.submit_answer(before, selected_id)
            if after is before:
                return
            self._commit(after)
            answer = after.last_answer
            logger.info(
                f"[{self.session_id}] Word {answer.target_id} answered "
                f"{'correctly' if answer.is_correct else 'wrong'}: "
                f"score={after.score} lives={after.lives} state={after.state.value}"
            )
            if after.state == GameState.ROUND_RESOLVED:
                generation = after.generation
                self._pending = self.scheduler.schedule(
                    self.next_round_delay, lambda: self.advance(generation)
                )

    def advance(self, generation: int) -> None:
        """Deals the next round if the playthrough ``generation`` is still current."""
        with self._lock:
            if self._session is None:
                return
            self._pending = None
            self._commit(rules.advance_round(self._session, generation, self.generator))

    def restart(self) -> None:
        with self._lock:
            if self._session is None:
                return
            self._cancel_pending()
            self._commit(rules.restart(self._session, self.generator))
            logger.info(
                f"[{self.session_id}] Game restarted "
                f"(generation {self._session.generation})"
            )

    def close(self) -> None:
        with self._lock:
            self._cancel_pending()
            self._session = None

    # --- Queries ---
    @property
    def session(self) -> Optional[GameSession]:
        return self._session

    def current_round(self) -> Optional[Round]:
        session = self._session
        return session.current_round if session else None

    def snapshot(self) -> GameSnapshot:
        session = self._session or GameSession()
        catalog_size = len(session.catalog)
        used_count = len(session.used_ids)
        current = session.current_round
        return GameSnapshot(
            score=session.score,
            lives=session.lives,
            state=session.state,
            progress=used_count / catalog_size if catalog_size else 0.0,
            used_count=used_count,
            catalog_size=catalog_size,
            generation=session.generation,
            current_round=(
                RoundView(
                    term=current.target.term,
                    audio_url=current.target.audio_url,
                    options=[
                        OptionView(id=option.id, meaning=option.meaning)
                        for option in current.options
                    ],
                )
                if current
                else None
            ),
            last_answer=session.last_answer,
            level=level_for_score(session.score)
            if session.state in TERMINAL_STATES
            else None,
        )

    # --- Internals ---
    def _commit(self, session: GameSession) -> None:
        if self.check_invariants:
            rules.check_invariants(session)
        self._session = session

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
