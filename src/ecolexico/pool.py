import logging
from typing import FrozenSet, Iterable, List, Optional, Tuple

from .config import settings
from .errors import InsufficientWordsError
from .models import WordEntry

logger = logging.getLogger(__name__)


def dedupe_catalog(catalog: Iterable[WordEntry]) -> Tuple[WordEntry, ...]:
    """Drops repeated ids, keeping the first entry seen for each."""
    seen = set()
    unique = []
    for word in catalog:
        if word.id in seen:
            logger.warning(f"Duplicate word id {word.id} ({word.term!r}) ignored")
            continue
        seen.add(word.id)
        unique.append(word)
    return tuple(unique)


def available_words(
    catalog: Iterable[WordEntry], used_ids: Iterable[int]
) -> List[WordEntry]:
    used = set(used_ids)
    return [word for word in catalog if word.id not in used]


class WordPool:
    """The catalog of one playthrough and the words already asked from it."""

    def __init__(
        self, catalog: Iterable[WordEntry] = (), used_ids: Iterable[int] = ()
    ):
        self.catalog: Tuple[WordEntry, ...] = tuple(catalog)
        self._used = set(used_ids)

    def initialize(
        self, catalog: Iterable[WordEntry]
    ) -> Optional[InsufficientWordsError]:
        """Loads a new catalog and forgets every used mark.

        Returns the error instead of raising it; on failure the pool is left
        untouched.
        """
        unique = dedupe_catalog(catalog)
        if len(unique) < settings.OPTIONS_PER_ROUND:
            return InsufficientWordsError(settings.OPTIONS_PER_ROUND, len(unique))
        self.catalog = unique
        self._used = set()
        return None

    def available_words(self) -> List[WordEntry]:
        return available_words(self.catalog, self._used)

    def mark_used(self, word_id: int) -> None:
        self._used.add(word_id)

    def is_exhausted(self) -> bool:
        return len(self.available_words()) == 0

    @property
    def used_ids(self) -> FrozenSet[int]:
        return frozenset(self._used)

    @property
    def used_count(self) -> int:
        return len(self._used)

    @property
    def catalog_size(self) -> int:
        return len(self.catalog)

    def progress(self) -> float:
        if not self.catalog:
            return 0.0
        return self.used_count / self.catalog_size
