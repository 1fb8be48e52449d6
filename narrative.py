"""
Narrative generation for decision analysis.

``analyze_decision`` is the single entry point callers use: it scores every
option, normalizes and ranks the scores, then turns the ranking into the
reasoning, summary, key factors and bias warnings shown next to the option
cards. The whole pipeline is deterministic for a given context.
"""

from typing import List, Optional

from loguru import logger

from schemas import AIAnalysisResult, AIRanking, DecisionContext, DecisionOption
from scoring import URGENT, normalize_rankings, score_options, score_spread
from vocabulary import DEFAULT_VOCABULARY, Vocabulary
import narrative_templates as templates

MAX_QUOTED_PROS = 3
MAX_QUOTED_CONS = 2
MAX_CONFIDENCE = 0.95
MIN_CONFIDENCE = 0.5


def confidence_from_spread(spread: int) -> float:
    return min(MAX_CONFIDENCE, MIN_CONFIDENCE + (spread / 100) * 0.4)


def build_summary(top_option: DecisionOption, top: AIRanking) -> str:
    return templates.SUMMARY.format(
        text=top_option.text,
        score=top.score,
        closing=templates.SUMMARY_CLOSINGS[top.risk_level],
    )


def generate_reasoning(
    context: DecisionContext,
    rankings: List[AIRanking],
    top_option: Optional[DecisionOption],
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> str:
    parts = [
        templates.REASONING_OPENING.format(count=len(context.options), title=context.title),
        templates.URGENCY_CLAUSES[context.urgency in URGENT],
    ]

    if top_option is not None:
        top = rankings[0]
        parts.append(templates.STANDS_OUT.format(text=top_option.text))

        pros = vocabulary.meaningful_pros(top_option.pros)
        if pros:
            parts.append(templates.STRONG_POINTS.format(pros="; ".join(pros[:MAX_QUOTED_PROS])))
        else:
            parts.append(templates.SCORED_WELL.format(score=top.score))

        cons = vocabulary.meaningful_cons(top_option.cons)
        if cons:
            parts.append(templates.KEEP_IN_MIND.format(cons="; ".join(cons[:MAX_QUOTED_CONS])))

        if top.risk_level in templates.RISK_REMARKS:
            parts.append(templates.RISK_REMARKS[top.risk_level])

    bucket = templates.spread_bucket(score_spread(rankings))
    parts.append(templates.SPREAD_REMARKS[bucket].format(text=top_option.text if top_option else ""))

    return " ".join(parts)


def extract_key_factors(context: DecisionContext) -> List[str]:
    count = len(context.options)
    factors = [
        templates.CATEGORY_FACTOR.format(category=context.category),
        templates.TIME_FACTORS[context.urgency in URGENT],
        templates.OPTION_COUNT_FACTORS[templates.option_count_bucket(count)].format(count=count),
    ]

    total_pros = sum(len(o.pros) for o in context.options)
    total_cons = sum(len(o.cons) for o in context.options)
    if total_pros > total_cons * 2:
        factors.append(templates.VOLUME_FACTORS["upbeat"])
    elif total_cons > total_pros:
        factors.append(templates.VOLUME_FACTORS["challenging"])

    history = context.userHistory
    if history is not None and history.totalDecisions > 0:
        factors.append(templates.HISTORY_FACTOR.format(
            total=history.totalDecisions,
            rate=f"{history.successRate * 100:.0f}",
        ))

    return factors


def detect_biases(context: DecisionContext) -> List[str]:
    options = context.options
    warnings = []

    if options and len(options[0].pros) > len(options[0].cons) + 2:
        warnings.append(templates.BIAS_WARNINGS["first_option"])

    if len(options) > 5:
        warnings.append(templates.BIAS_WARNINGS["too_many"])

    if context.urgency == "critical":
        warnings.append(templates.BIAS_WARNINGS["time_pressure"])

    if options:
        avg_pros = sum(len(o.pros) for o in options) / len(options)
        avg_cons = sum(len(o.cons) for o in options) / len(options)
        if avg_pros > avg_cons * 2:
            warnings.append(templates.BIAS_WARNINGS["overly_positive"])
        elif avg_cons > avg_pros * 2:
            warnings.append(templates.BIAS_WARNINGS["overly_negative"])

    if not warnings:
        warnings.append(templates.BIAS_WARNINGS["balanced"])

    return warnings


def analyze_decision(context: DecisionContext, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> AIAnalysisResult:
    """Score, rank and explain the options of a decision.

    Callers must reject contexts with fewer than two options before calling.
    """
    rankings = normalize_rankings(score_options(context, vocabulary))

    by_id = {o.id: o for o in context.options}
    top_option = by_id.get(rankings[0].option_id)
    spread = score_spread(rankings)

    logger.info(
        f"[ANALYSIS] Analyzed '{context.title}' with {len(context.options)} options, "
        f"top={rankings[0].option_id} score={rankings[0].score} spread={spread}"
    )

    return AIAnalysisResult(
        rankings=rankings,
        reasoning=generate_reasoning(context, rankings, top_option, vocabulary),
        summary=build_summary(top_option, rankings[0]),
        confidence_score=confidence_from_spread(spread),
        key_factors=extract_key_factors(context),
        potential_biases=detect_biases(context),
        recommended_action=top_option.text,
    )
