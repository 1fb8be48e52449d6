"""
Insight generation.

Turns a ``UserMetrics`` snapshot into natural-language insight records, and
runs that for one user (weekly or monthly window) or for every user active in
the past week. The per-user and batch runs read from and write to a
``RecordStore``; the metric and insight functions themselves are pure.
"""

from datetime import datetime, timedelta, timezone
from functools import reduce
from typing import Dict, List, Optional

from loguru import logger

from database import RecordStore
from schemas import CategoryStats, Insight, UserMetrics
from user_metrics import compute_user_metrics

WEEKLY_WINDOW = timedelta(days=7)
MONTHLY_WINDOW = timedelta(days=30)

STRONG_SUCCESS = 0.7
WEAK_SUCCESS = 0.5
HIGH_FATIGUE = 7
BIAS_ALERT = 0.4
MIN_CATEGORY_SAMPLES = 3

LOW_SUCCESS_ACTIONS = [
    "Review recent decisions that didn't work out",
    "Consider seeking input before major choices",
]

FATIGUE_ACTIONS = [
    "Batch similar decisions together",
    "Delegate minor decisions when possible",
    "Set decision-making time limits",
]

BIAS_DESCRIPTIONS = {
    "first_option_bias": "You tend to choose the first option presented. Consider evaluating all options equally.",
    "last_option_bias": "You tend to favor the last option you consider. The earlier options might be better.",
    "overconfidence_bias": "Your high confidence doesn't always match outcomes. Consider seeking second opinions.",
    "analysis_paralysis": "You spend significant time on decisions. Try setting time limits for choices.",
}


def bias_title(bias: str) -> str:
    return " ".join(word.capitalize() for word in bias.split("_")) + " Detected"


def _positive_rate(stats: CategoryStats) -> float:
    return stats.positive / stats.total if stats.total > 0 else 0.0


def best_category(performance: Dict[str, CategoryStats]):
    """Category with the highest positive rate; ``("none", ...)`` when no rate beats zero."""
    sentinel = ("none", CategoryStats())
    return reduce(
        lambda best, item: item if _positive_rate(item[1]) > _positive_rate(best[1]) else best,
        performance.items(),
        sentinel,
    )


def generate_insights_from_metrics(
    user_id: str,
    metrics: UserMetrics,
    period_start: datetime,
    period_end: datetime,
) -> List[Insight]:
    period = {"period_start": period_start, "period_end": period_end}
    insights = []
    rate = metrics.successRate

    if rate >= STRONG_SUCCESS:
        insights.append(Insight(
            user_id=user_id,
            insight_type="weekly",
            insight_title="Strong Decision Performance",
            insight_text=f"Your success rate of {rate * 100:.1f}% shows excellent decision-making skills this period.",
            metrics={"successRate": rate},
            priority=5,
            **period,
        ))
    elif rate < WEAK_SUCCESS:
        insights.append(Insight(
            user_id=user_id,
            insight_type="weekly",
            insight_title="Decision Quality Alert",
            insight_text=(
                f"Your success rate of {rate * 100:.1f}% suggests room for improvement. "
                "Consider taking more time for important decisions."
            ),
            metrics={"successRate": rate},
            action_items=list(LOW_SUCCESS_ACTIONS),
            priority=8,
            **period,
        ))

    if metrics.fatigueScore >= HIGH_FATIGUE:
        insights.append(Insight(
            user_id=user_id,
            insight_type="pattern",
            insight_title="High Decision Fatigue Detected",
            insight_text=(
                f"Your fatigue score of {metrics.fatigueScore:.1f}/10 indicates you might be overwhelmed. "
                "Consider batching smaller decisions."
            ),
            metrics={"fatigueScore": metrics.fatigueScore},
            action_items=list(FATIGUE_ACTIONS),
            priority=9,
            **period,
        ))

    for bias, score in metrics.biasAnalysis.items():
        if score > BIAS_ALERT and bias in BIAS_DESCRIPTIONS:
            insights.append(Insight(
                user_id=user_id,
                insight_type="pattern",
                insight_title=bias_title(bias),
                insight_text=BIAS_DESCRIPTIONS[bias],
                metrics={bias: score},
                priority=7,
                **period,
            ))

    category, stats = best_category(metrics.categoryPerformance)
    if category != "none" and stats.total >= MIN_CATEGORY_SAMPLES:
        insights.append(Insight(
            user_id=user_id,
            insight_type="category",
            insight_title=f"Strong in {category[:1].upper() + category[1:]} Decisions",
            insight_text=f"You excel at {category} decisions with a {_positive_rate(stats) * 100:.0f}% success rate.",
            category=category,
            metrics={name: s.model_dump() for name, s in metrics.categoryPerformance.items()},
            priority=4,
            **period,
        ))

    return insights


def monthly_summary(user_id: str, total_decisions: int, metrics: UserMetrics, period_start: datetime, period_end: datetime) -> Insight:
    return Insight(
        user_id=user_id,
        insight_type="monthly",
        insight_title="Monthly Decision Summary",
        insight_text=(
            f"This month you made {total_decisions} decisions with a {metrics.successRate * 100:.1f}% "
            f"success rate and productivity score of {metrics.productivityScore:.0f}%."
        ),
        metrics={
            "totalDecisions": total_decisions,
            "successRate": metrics.successRate,
            "productivityScore": metrics.productivityScore,
            "fatigueScore": metrics.fatigueScore,
        },
        period_start=period_start,
        period_end=period_end,
        priority=6,
    )


def _window(now: Optional[datetime], length: timedelta):
    end = now or datetime.now(timezone.utc)
    return end - length, end


def generate_weekly_insights_for_user(store: RecordStore, user_id: str, now: Optional[datetime] = None) -> List[Insight]:
    start, end = _window(now, WEEKLY_WINDOW)
    decisions = store.decisions_between(start, end, user_id=user_id)
    if not decisions:
        logger.info(f"[INSIGHTS] No decisions for user_id={user_id} in the past week, skipping")
        return []

    outcomes = store.outcomes_for_decisions([d.id for d in decisions])
    metrics = compute_user_metrics(decisions, outcomes)
    insights = generate_insights_from_metrics(user_id, metrics, start, end)

    if insights:
        store.insert_insights(insights)
    logger.info(f"[INSIGHTS] Generated {len(insights)} weekly insights for user_id={user_id}")
    return insights


def generate_monthly_insights_for_user(store: RecordStore, user_id: str, now: Optional[datetime] = None) -> List[Insight]:
    start, end = _window(now, MONTHLY_WINDOW)
    decisions = store.decisions_between(start, end, user_id=user_id)
    if not decisions:
        return []

    outcomes = store.outcomes_for_decisions([d.id for d in decisions])
    metrics = compute_user_metrics(decisions, outcomes)
    insights = [monthly_summary(user_id, len(decisions), metrics, start, end)]

    store.insert_insights(insights)
    logger.info(f"[INSIGHTS] Generated monthly summary for user_id={user_id}")
    return insights


def dashboard_metrics(store: RecordStore, user_id: str, now: Optional[datetime] = None) -> dict:
    """Trailing 30-day metrics plus current streaks, for the dashboard view."""
    start, end = _window(now, MONTHLY_WINDOW)
    decisions = store.decisions_between(start, end, user_id=user_id)
    outcomes = store.outcomes_for_decisions([d.id for d in decisions])
    metrics = compute_user_metrics(decisions, outcomes)

    return {
        "totalDecisions": len(decisions),
        "completedDecisions": sum(1 for d in decisions if d.is_completed),
        **metrics.model_dump(),
        "streaks": [
            {"type": s.streak_type, "current": s.current_count, "longest": s.longest_count}
            for s in store.get_streaks(user_id)
        ],
    }


def process_weekly_insights(store: RecordStore, now: Optional[datetime] = None) -> dict:
    """Generate weekly insights for every user with decisions in the past week.

    A failure for one user is logged and counted; the remaining users are
    still processed.
    """
    start, end = _window(now, WEEKLY_WINDOW)
    user_ids = store.active_user_ids(start, end)
    logger.info(f"[CRON] Processing weekly insights for {len(user_ids)} users")

    generated = 0
    errors = []
    for user_id in user_ids:
        try:
            generated += len(generate_weekly_insights_for_user(store, user_id, now=end))
        except Exception as e:
            logger.exception(f"[CRON] Error processing user_id={user_id}: {e}")
            errors.append(f"{user_id}: {e}")

    logger.info(f"[CRON] Weekly insights done: users={len(user_ids)} insights={generated} errors={len(errors)}")
    return {
        "success": not errors,
        "usersProcessed": len(user_ids),
        "insightsGenerated": generated,
        "errors": errors,
    }
