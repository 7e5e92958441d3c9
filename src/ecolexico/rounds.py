import random
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Sequence, TypeVar, Union

from .config import settings
from .models import Exhausted, Round, WordEntry
from .pool import available_words

T = TypeVar("T")


def fisher_yates_shuffle(items: Sequence[T], rng: random.Random) -> List[T]:
    """Returns a uniformly shuffled copy of ``items``."""
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def sample_distractors(
    candidates: Sequence[WordEntry], count: int, rng: random.Random
) -> List[WordEntry]:
    """Draws up to ``count`` distinct words by rejection sampling.

    When there are fewer candidates than requested, every candidate is
    returned (in draw order) and the round simply has fewer options.
    """
    wanted = min(count, len({word.id for word in candidates}))
    picked: List[WordEntry] = []
    picked_ids = set()
    while len(picked) < wanted:
        word = candidates[rng.randrange(len(candidates))]
        if word.id in picked_ids:
            continue
        picked_ids.add(word.id)
        picked.append(word)
    return picked


# --- Strategy Pattern: Round Generators ---
class RoundGenerator(ABC):
    """Builds one multiple-choice round from the words not yet asked."""

    @abstractmethod
    def generate(
        self, catalog: Sequence[WordEntry], used_ids: Iterable[int]
    ) -> Union[Round, Exhausted]:
        pass


class RandomRoundGenerator(RoundGenerator):
    """Uniform target choice, uniform distractors from the whole catalog."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        distractors: int = settings.DISTRACTORS_PER_ROUND,
    ):
        self.rng = rng or random.Random()
        self.distractors = distractors

    def generate(
        self, catalog: Sequence[WordEntry], used_ids: Iterable[int]
    ) -> Union[Round, Exhausted]:
        available = available_words(catalog, used_ids)
        if not available:
            return Exhausted(catalog_size=len(catalog))

        target = available[self.rng.randrange(len(available))]
        # Distractors may have been asked already; only the target must be fresh.
        candidates = [word for word in catalog if word.id != target.id]
        distractors = sample_distractors(candidates, self.distractors, self.rng)

        options = fisher_yates_shuffle([target, *distractors], self.rng)
        return Round(target=target, options=tuple(options))
