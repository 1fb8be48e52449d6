from collections import Counter, defaultdict
from typing import List

from schemas import CommunityTrend, Decision, TrendPoint

MIN_SAMPLE_SIZE = 5
DEFAULT_SLOT = "afternoon"


def time_slot(hour: int) -> str:
    if 6 <= hour < 12:
        return "morning"
    if 12 <= hour < 17:
        return "afternoon"
    if 17 <= hour < 21:
        return "evening"
    return "night"


def _trend(category: str, decisions: List[Decision]) -> CommunityTrend:
    total = len(decisions)
    completion_rate = sum(1 for d in decisions if d.is_completed) / total
    avg_confidence = sum(d.confidence_score or 0 for d in decisions) / total
    # most_common keeps first-seen order among equal counts
    slots = Counter(time_slot(d.created_at.hour) for d in decisions).most_common(1)
    popular = slots[0][0] if slots else DEFAULT_SLOT

    return CommunityTrend(
        trend_title=f"{category[:1].upper() + category[1:]} Decision Trends",
        trend_description=f"Weekly trends for {category} decisions",
        category=category,
        metrics={
            "totalDecisions": total,
            "completionRate": completion_rate,
            "avgConfidence": avg_confidence,
            "mostPopularTime": popular,
        },
        sample_size=total,
        time_period="weekly",
        trend_data=[
            TrendPoint(label="Completion Rate", value=f"{completion_rate * 100:.1f}"),
            TrendPoint(label="Avg Confidence", value=f"{avg_confidence * 100:.1f}"),
            TrendPoint(label="Peak Time", value=popular),
        ],
    )


def generate_community_trends(decisions: List[Decision]) -> List[CommunityTrend]:
    """Per-category trends across all users; small categories are left out."""
    by_category = defaultdict(list)
    for d in decisions:
        by_category[d.category or "general"].append(d)

    return [
        _trend(category, items)
        for category, items in by_category.items()
        if len(items) >= MIN_SAMPLE_SIZE
    ]
