from enum import Enum
from typing import FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .config import settings


# --- Catalog ---
class WordEntry(BaseModel):
    """A regionalism as served by the word catalog.

    The catalog API speaks Spanish field names (``palabra``, ``significado``);
    both those and the attribute names are accepted.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    term: str = Field(alias="palabra")
    meaning: str = Field(alias="significado")
    audio_url: Optional[str] = None
    region_id: Optional[int] = None


# --- Rounds ---
class Round(BaseModel):
    model_config = ConfigDict(frozen=True)

    target: WordEntry
    options: Tuple[WordEntry, ...]

    @model_validator(mode="after")
    def _check_options(self) -> "Round":
        ids = [option.id for option in self.options]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Round options repeat a word id: {ids}")
        if ids.count(self.target.id) != 1:
            raise ValueError(
                f"Round target {self.target.id} must appear exactly once in {ids}"
            )
        return self


class Exhausted(BaseModel):
    """Every catalog word has already been asked this playthrough."""

    model_config = ConfigDict(frozen=True)

    catalog_size: int


# --- Game session ---
class GameState(str, Enum):
    LOADING = "loading"
    PLAYING = "playing"
    ROUND_RESOLVED = "round_resolved"
    GAME_OVER = "game_over"
    WIN = "win"


TERMINAL_STATES = frozenset({GameState.GAME_OVER, GameState.WIN})


class AnswerRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    selected_id: int
    target_id: int
    is_correct: bool
    score_delta: int
    lives_lost: int


class GameSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    catalog: Tuple[WordEntry, ...] = ()
    score: int = 0
    lives: int = settings.LIVES_PER_GAME
    state: GameState = GameState.LOADING
    used_ids: FrozenSet[int] = frozenset()
    current_round: Optional[Round] = None
    generation: int = 0
    last_answer: Optional[AnswerRecord] = None


# --- Presentation views ---
class Level(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    threshold: int
    title: str
    phrase: str
    icon: str


class OptionView(BaseModel):
    id: int
    meaning: str


class RoundView(BaseModel):
    """A round as shown to the player; the answer is not included."""

    term: str
    audio_url: Optional[str] = None
    options: List[OptionView]


class GameSnapshot(BaseModel):
    score: int
    lives: int
    state: GameState
    progress: float
    used_count: int
    catalog_size: int
    generation: int
    current_round: Optional[RoundView] = None
    last_answer: Optional[AnswerRecord] = None
    level: Optional[Level] = None
