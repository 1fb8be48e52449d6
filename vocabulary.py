"""Keyword vocabularies used to classify decisions and options.

The scorer only ever asks "does this text contain any of these words", so each
vocabulary is a plain tuple of lower-case fragments matched as substrings
(``homework`` counts as ``work``). Swap a ``Vocabulary`` into the scorer to
change the rules without touching control flow.
"""

import re
from re import Pattern
from typing import Tuple

from pydantic import BaseModel, ConfigDict

WORK_KEYWORDS = (
    "work", "project", "job", "task", "assignment", "study", "homework",
    "deadline", "school", "college", "office",
)

AVOIDANCE_WORDS = (
    "sleep", "rest", "relax", "nothing", "later", "tomorrow", "skip", "ignore",
    "avoid", "procrastinate", "delay", "netflix", "game", "play", "chill",
)

PRODUCTIVE_WORDS = (
    "work", "project", "study", "complete", "finish", "start", "begin", "do",
    "create", "build", "learn", "practice", "maths", "math", "graphics", "code",
    "write", "research", "prepare",
)

POSITIVE_WORDS = (
    "best", "better", "good", "great", "important", "priority", "urgent",
    "deadline", "required", "necessary",
)

NEGATIVE_WORDS = ("risk", "bad", "problem", "difficult", "hard", "boring", "tedious")

# Boilerplate pros/cons that say nothing about the option itself
GENERIC_PRO_PATTERNS = tuple(re.compile(p, re.IGNORECASE) for p in (
    r"offers a viable path",
    r"addresses the decision",
    r"provides a definitive choice",
    r"takes action rather than remaining stuck",
    r"allows you to move forward",
    r"first option that comes to mind",
    r"requires less decision",
    r"offers an alternative",
    r"provides more options",
))

GENERIC_CON_PATTERNS = tuple(re.compile(p, re.IGNORECASE) for p in (
    r"requires careful consideration of trade-offs",
    r"may involve trade-offs",
    r"has trade-offs like any",
    r"means not choosing",
))


def contains_any(text: str, words) -> bool:
    return any(word in text for word in words)


def count_present(text: str, words) -> int:
    """Number of distinct vocabulary entries that occur in ``text``."""
    return sum(1 for word in words if word in text)


def is_meaningful(statement: str, patterns) -> bool:
    return not any(pattern.search(statement) for pattern in patterns)


class Vocabulary(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    work: Tuple[str, ...] = WORK_KEYWORDS
    avoidance: Tuple[str, ...] = AVOIDANCE_WORDS
    productive: Tuple[str, ...] = PRODUCTIVE_WORDS
    positive: Tuple[str, ...] = POSITIVE_WORDS
    negative: Tuple[str, ...] = NEGATIVE_WORDS
    generic_pros: Tuple[Pattern[str], ...] = GENERIC_PRO_PATTERNS
    generic_cons: Tuple[Pattern[str], ...] = GENERIC_CON_PATTERNS

    def is_work_decision(self, context_text: str) -> bool:
        return contains_any(context_text.lower(), self.work)

    def is_avoidance(self, option_text: str) -> bool:
        return contains_any(option_text, self.avoidance)

    def is_productive(self, option_text: str) -> bool:
        return contains_any(option_text, self.productive)

    def meaningful_pros(self, pros):
        return [p for p in pros if is_meaningful(p, self.generic_pros)]

    def meaningful_cons(self, cons):
        return [c for c in cons if is_meaningful(c, self.generic_cons)]


DEFAULT_VOCABULARY = Vocabulary()
