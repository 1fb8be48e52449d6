"""
Decision metrics over a window of a user's history.

All functions are pure folds over the decisions/outcomes the caller fetched
(usually the trailing 7 or 30 days). Empty input never raises: rates and
scores come back as 0 and mappings keep their fixed keys.
"""

from collections import Counter
from datetime import datetime, timezone
from functools import reduce
from typing import Dict, List

from schemas import CategoryStats, Decision, Outcome, UserMetrics

COMPONENT_CAP = 2.5
MAX_FATIGUE = 10.0
DAILY_DECISIONS_SCALE = 5
SLOW_DECISION_SECONDS = 300
PARALYSIS_SECONDS = 600
OVERCONFIDENT_ABOVE = 0.8
POSITIVE_SCORE = 7

TIME_BUCKETS = ("morning (6-12)", "afternoon (12-17)", "evening (17-21)", "night (21-6)")

BIAS_KEYS = (
    "first_option_bias",
    "last_option_bias",
    "status_quo_bias",
    "overconfidence_bias",
    "analysis_paralysis",
)


def is_positive(outcome: Outcome) -> bool:
    return outcome.outcome_type == "positive" or (
        outcome.outcome_score is not None and outcome.outcome_score >= POSITIVE_SCORE
    )


def calculate_success_rate(outcomes: List[Outcome]) -> float:
    if not outcomes:
        return 0.0
    return sum(1 for o in outcomes if is_positive(o)) / len(outcomes)


def _utc_day(moment: datetime):
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(timezone.utc).date()


def calculate_fatigue_score(decisions: List[Decision]) -> float:
    """0-10 overload estimate from volume, urgency, slowness and incompletion.

    Each of the four signals contributes at most 2.5 points.
    """
    if not decisions:
        return 0.0

    total = len(decisions)
    per_day = Counter(_utc_day(d.created_at) for d in decisions)
    timed = [d.time_to_decide for d in decisions if d.time_to_decide]

    avg_daily = sum(per_day.values()) / len(per_day)
    urgency_ratio = sum(1 for d in decisions if d.urgency in ("high", "critical")) / total
    avg_time = sum(timed) / len(timed) if timed else 0
    incomplete_ratio = sum(1 for d in decisions if not d.is_completed) / total

    fatigue = (
        min(avg_daily / DAILY_DECISIONS_SCALE, COMPONENT_CAP)
        + urgency_ratio * COMPONENT_CAP
        + min(avg_time / SLOW_DECISION_SECONDS, COMPONENT_CAP)
        + incomplete_ratio * COMPONENT_CAP
    )
    return min(fatigue, MAX_FATIGUE)


def calculate_productivity_score(decisions: List[Decision]) -> float:
    """Percentage of decisions marked completed."""
    if not decisions:
        return 0.0
    return sum(1 for d in decisions if d.is_completed) / len(decisions) * 100


def analyze_category_performance(decisions: List[Decision], outcomes: List[Outcome]) -> Dict[str, CategoryStats]:
    # later outcomes for the same decision win
    outcome_by_decision = {o.decision_id: o for o in outcomes}

    def fold(acc, decision):
        category = decision.category or "general"
        total, positive, confidence_sum = acc.get(category, (0, 0, 0.0))
        outcome = outcome_by_decision.get(decision.id)
        return {
            **acc,
            category: (
                total + 1,
                positive + (1 if outcome is not None and is_positive(outcome) else 0),
                confidence_sum + (decision.confidence_score or 0),
            ),
        }

    sums = reduce(fold, decisions, {})
    return {
        category: CategoryStats(total=total, positive=positive, avgConfidence=confidence_sum / total)
        for category, (total, positive, confidence_sum) in sums.items()
    }


def time_bucket(hour: int) -> str:
    if 6 <= hour < 12:
        return TIME_BUCKETS[0]
    if 12 <= hour < 17:
        return TIME_BUCKETS[1]
    if 17 <= hour < 21:
        return TIME_BUCKETS[2]
    return TIME_BUCKETS[3]


def analyze_time_patterns(decisions: List[Decision]) -> Dict[str, int]:
    counts = Counter(time_bucket(d.created_at.hour) for d in decisions)
    return {bucket: counts.get(bucket, 0) for bucket in TIME_BUCKETS}


def _bias_hits(decision: Decision) -> Counter:
    hits = Counter()
    options, chosen = decision.options, decision.chosen_option
    if options and chosen is not None:
        if options[0].id == chosen.id:
            hits["first_option_bias"] += 1
        if options[-1].id == chosen.id:
            hits["last_option_bias"] += 1
    if decision.confidence_score is not None and decision.confidence_score > OVERCONFIDENT_ABOVE:
        hits["overconfidence_bias"] += 1
    if decision.time_to_decide is not None and decision.time_to_decide > PARALYSIS_SECONDS:
        hits["analysis_paralysis"] += 1
    return hits


def analyze_biases(decisions: List[Decision]) -> Dict[str, float]:
    """Fraction of decisions showing each bias pattern, keyed by bias name."""
    hits = sum((_bias_hits(d) for d in decisions), Counter())
    total = len(decisions) or 1
    return {key: hits.get(key, 0) / total for key in BIAS_KEYS}


def compute_user_metrics(decisions: List[Decision], outcomes: List[Outcome]) -> UserMetrics:
    return UserMetrics(
        successRate=calculate_success_rate(outcomes),
        fatigueScore=calculate_fatigue_score(decisions),
        productivityScore=calculate_productivity_score(decisions),
        biasAnalysis=analyze_biases(decisions),
        categoryPerformance=analyze_category_performance(decisions, outcomes),
        timePatterns=analyze_time_patterns(decisions),
    )
