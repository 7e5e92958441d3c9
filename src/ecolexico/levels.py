from typing import List

from .models import Level

LEVELS: List[Level] = [
    Level(
        id="novato",
        threshold=0,
        title="Newbie Tourist",
        phrase="Good start! Don't get lost.",
        icon="🥉",
    ),
    Level(
        id="casi",
        threshold=5,
        title="Almost Local",
        phrase="Nice! You almost got the slang.",
        icon="🥈",
    ),
    Level(
        id="nano",
        threshold=15,
        title="True Ecuadorian!",
        phrase="Amazing! You are a true Ñaño.",
        icon="🥇",
    ),
]


def level_for_score(score: int) -> Level:
    """Highest level whose threshold the score reaches."""
    for level in sorted(LEVELS, key=lambda x: x.threshold, reverse=True):
        if score >= level.threshold:
            return level
    return LEVELS[0]
