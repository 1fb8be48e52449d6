from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from schemas import Streak


def _day(moment: datetime):
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(timezone.utc).date()


def record_streak_activity(
    streak: Optional[Streak],
    streak_type: str,
    user_id: str,
    now: Optional[datetime] = None,
) -> Tuple[Streak, bool]:
    """Apply one activity to a streak and report whether it had been broken.

    Activity on the same day as the last one leaves the streak unchanged;
    activity on the following day extends it; anything later restarts it at 1.
    """
    now = now or datetime.now(timezone.utc)

    if streak is None:
        return Streak(
            user_id=user_id,
            streak_type=streak_type,
            current_count=1,
            longest_count=1,
            last_activity_at=now,
        ), False

    today = _day(now)
    last = _day(streak.last_activity_at) if streak.last_activity_at else None

    if last == today:
        return streak, False

    if last is None or last == today - timedelta(days=1):
        count, broken = streak.current_count + 1, False
    else:
        count, broken = 1, True

    return streak.model_copy(update={
        "current_count": count,
        "longest_count": max(streak.longest_count, count),
        "last_activity_at": now,
        "broken_at": now if broken else streak.broken_at,
    }), broken


def habit_score(streaks: List[Streak]) -> int:
    """Average current streak as a percentage of the average longest streak."""
    if not streaks:
        return 0
    avg_current = sum(s.current_count for s in streaks) / len(streaks)
    avg_longest = sum(s.longest_count for s in streaks) / len(streaks)
    if avg_longest <= 0:
        return 0
    return round(min(avg_current / avg_longest * 100, 100))
