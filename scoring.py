from typing import List

from loguru import logger

from schemas import AIRanking, DecisionContext, DecisionOption
from vocabulary import DEFAULT_VOCABULARY, Vocabulary, count_present
import narrative_templates as templates

BASE_SCORE = 50
MIN_SCORE = 20
MAX_SCORE = 95

AVOIDANCE_PENALTY = 25
PRODUCTIVE_BONUS = 15
TITLE_WORD_BONUS = 10
POSITIVE_WORD_BONUS = 5
NEGATIVE_WORD_PENALTY = 3
PRO_WEIGHT = 10
CON_WEIGHT = 7
SPECIFICITY_BONUS = 5
POSITION_BONUS = 3

# Normalizer tunables: empirically chosen, kept for compatibility with stored scores
SPREAD_THRESHOLD = 15
SPREAD_TOP_SCORE = 85
SPREAD_STEP = 15
SPREAD_FLOOR = 25

URGENT = ("high", "critical")


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def time_horizon(urgency: str) -> str:
    return "short-term" if urgency in URGENT else "long-term"


def predict_outcome(option: DecisionOption, category: str) -> str:
    phrases = templates.outcome_phrases(category)
    phrase = phrases[len(option.text) % len(phrases)]
    wording = templates.OUTCOME_WORDING[templates.balance_key(len(option.pros), len(option.cons))]
    return wording.format(phrase=phrase)


def score_option(
    option: DecisionOption,
    index: int,
    context: DecisionContext,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> AIRanking:
    """Raw heuristic score for one option; rank stays 0 until normalization."""
    title = context.title.lower()
    full_context = f"{title} {(context.description or '').lower()}"
    text = option.text.lower().strip()

    is_work = vocabulary.is_work_decision(full_context)
    is_avoidance = vocabulary.is_avoidance(text)
    is_productive = vocabulary.is_productive(text)

    score = BASE_SCORE
    if is_work:
        if is_avoidance:
            score -= AVOIDANCE_PENALTY
        if is_productive:
            score += PRODUCTIVE_BONUS

    title_words = [w for w in title.split() if len(w) > 3]
    score += TITLE_WORD_BONUS * sum(1 for w in title_words if w in text)

    score += POSITIVE_WORD_BONUS * count_present(text, vocabulary.positive)
    score -= NEGATIVE_WORD_PENALTY * count_present(text, vocabulary.negative)

    score += PRO_WEIGHT * len(option.pros)
    score -= CON_WEIGHT * len(option.cons)

    if 2 <= len(text.split()) <= 10:
        score += SPECIFICITY_BONUS

    score += max(0, POSITION_BONUS - index)
    score = clamp(score, MIN_SCORE, MAX_SCORE)

    if is_avoidance and is_work:
        risk_level = "high"
    elif is_productive:
        risk_level = "low"
    else:
        risk_level = "medium"

    logger.debug(
        f"[SCORING] option={option.id} score={score} work={is_work} "
        f"avoidance={is_avoidance} productive={is_productive}"
    )

    return AIRanking(
        option_id=option.id,
        rank=0,
        score=score,
        predicted_outcome=predict_outcome(option, context.category),
        risk_level=risk_level,
        time_horizon=time_horizon(context.urgency),
    )


def score_options(context: DecisionContext, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> List[AIRanking]:
    return [score_option(option, i, context, vocabulary) for i, option in enumerate(context.options)]


def score_spread(rankings: List[AIRanking]) -> int:
    scores = [r.score for r in rankings]
    return max(scores) - min(scores) if scores else 0


def normalize_rankings(rankings: List[AIRanking], spread_threshold: int = SPREAD_THRESHOLD) -> List[AIRanking]:
    """Spread near-tied scores apart, then assign dense ranks best-first.

    ``sorted`` is stable, so equal scores keep their input order both when the
    scores are rewritten and when the final ranks are handed out.
    """
    ordered = sorted(rankings, key=lambda r: r.score, reverse=True)

    if len(ordered) > 1 and score_spread(ordered) < spread_threshold:
        logger.debug(f"[SCORING] spread {score_spread(ordered)} below {spread_threshold}, reassigning scores")
        ordered = [
            r.model_copy(update={"score": clamp(SPREAD_TOP_SCORE - SPREAD_STEP * i, SPREAD_FLOOR, MAX_SCORE)})
            for i, r in enumerate(ordered)
        ]
        ordered = sorted(ordered, key=lambda r: r.score, reverse=True)

    return [r.model_copy(update={"rank": i + 1}) for i, r in enumerate(ordered)]
