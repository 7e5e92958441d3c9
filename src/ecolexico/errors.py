class EcolexicoError(Exception):
    """Base class for errors raised by the trivia service."""


class InsufficientWordsError(EcolexicoError):
    """The catalog is too small to build a single round."""

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        super().__init__(
            f"Need at least {required} words to play, catalog has {available}"
        )


class CatalogFetchError(EcolexicoError):
    """The word catalog could not be loaded."""


class SessionInvariantError(AssertionError):
    """A game session reached a state the rules never produce."""
