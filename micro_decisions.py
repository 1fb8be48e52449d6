"""Quick suggestions for small, low-stakes choices.

There is no signal to score a micro-decision on, so the suggestion is a
uniform pick. The randomness comes from a ``RandomSource`` so tests and
replays can pin it down with a seed.
"""

import random
from typing import List, Optional, Protocol

from loguru import logger

from schemas import MicroSuggestion

REASONINGS = (
    "Sometimes a quick choice helps build decision momentum.",
    "Trust your instincts on small decisions.",
    "Small decisions rarely have lasting consequences.",
    "The best choice is often the one you make confidently.",
    "Analysis paralysis on small choices wastes mental energy.",
)


class RandomSource(Protocol):
    def pick(self, n: int) -> int:
        """Return an index in ``range(n)``."""
        ...


class PythonRandomSource:
    def __init__(self, seed: Optional[int] = None):
        self._random = random.Random(seed)

    def pick(self, n: int) -> int:
        return self._random.randrange(n)


def analyze_micro_decision(question: str, options: List[str], rng: Optional[RandomSource] = None) -> MicroSuggestion:
    rng = rng or PythonRandomSource()
    suggestion = options[rng.pick(len(options))]
    logger.debug(f"[MICRO] Suggesting '{suggestion}' for '{question}' out of {len(options)} options")
    return MicroSuggestion(suggestion=suggestion, reasoning=REASONINGS[rng.pick(len(REASONINGS))])
