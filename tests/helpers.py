"""Builders and an in-memory record store shared by the test modules."""

import datetime as dt

from bson import ObjectId

from schemas import ChosenOption, Decision, DecisionContext, DecisionOption, Outcome


NOW = dt.datetime(2025, 3, 14, 15, 0, tzinfo=dt.timezone.utc)


def make_context(*texts, title="Pick one", urgency="medium", category="general", description=None, **kwargs) -> DecisionContext:
    options = [DecisionOption(id=str(i + 1), text=t) for i, t in enumerate(texts)]
    return DecisionContext(
        title=title,
        description=description,
        category=category,
        urgency=urgency,
        options=kwargs.pop("options", options),
        **kwargs,
    )


def make_decision(
    *,
    id="d1",
    user_id="u1",
    created_at=NOW,
    category="general",
    urgency="medium",
    option_ids=("a", "b", "c"),
    chosen=None,
    confidence=None,
    time_to_decide=None,
    is_completed=True,
) -> Decision:
    return Decision(
        id=id,
        user_id=user_id,
        title="Some decision",
        category=category,
        urgency=urgency,
        options=[DecisionOption(id=o, text=f"Option {o}") for o in option_ids],
        chosen_option=ChosenOption(id=chosen) if chosen else None,
        confidence_score=confidence,
        time_to_decide=time_to_decide,
        is_completed=is_completed,
        created_at=created_at,
    )


def make_outcome(decision_id="d1", outcome_type="neutral", score=None, user_id="u1") -> Outcome:
    return Outcome(
        id=f"o-{decision_id}",
        decision_id=decision_id,
        user_id=user_id,
        outcome_type=outcome_type,
        outcome_score=score,
    )


class InMemoryStore:
    """Dict-backed stand-in for MongoRecordStore."""

    def __init__(self):
        self.decisions = {}
        self.outcomes = []
        self.insights = []
        self.micro_decisions = {}
        self.streaks = {}
        self.trends = []
        self.fail_for = set()

    def insert_decision(self, doc):
        record = {**doc, "id": str(ObjectId())}
        record.setdefault("created_at", dt.datetime.now(dt.timezone.utc))
        self.decisions[record["id"]] = record
        return dict(record)

    def get_decision(self, decision_id):
        record = self.decisions.get(decision_id)
        return dict(record) if record else None

    def update_decision(self, decision_id, fields):
        self.decisions[decision_id].update(fields)
        return dict(self.decisions[decision_id])

    def decision_history(self, user_id, limit=None, offset=0, category=None, completed=None):
        rows = sorted(
            (
                d for d in self.decisions.values()
                if d["user_id"] == user_id
                and (not category or d.get("category") == category)
                and (completed is None or d.get("is_completed") == completed)
            ),
            key=lambda d: d["created_at"],
            reverse=True,
        )[offset:]
        return rows[:limit] if limit else rows

    def delete_decision(self, decision_id, user_id):
        record = self.decisions.get(decision_id)
        if not record or record["user_id"] != user_id:
            return False
        del self.decisions[decision_id]
        return True

    def count_decisions(self, user_id):
        return len(self.decision_history(user_id))

    def decisions_between(self, start, end, user_id=None):
        if user_id in self.fail_for:
            raise RuntimeError("storage unavailable")
        return [
            Decision(**d)
            for d in self.decisions.values()
            if start <= d["created_at"] <= end and (user_id is None or d["user_id"] == user_id)
        ]

    def active_user_ids(self, start, end):
        return sorted({d.user_id for d in self.decisions_between(start, end)})

    def insert_outcome(self, doc):
        record = {**doc, "id": str(ObjectId())}
        self.outcomes.append(record)
        return dict(record)

    def outcome_for_decision(self, decision_id):
        return next((dict(o) for o in self.outcomes if o["decision_id"] == decision_id), None)

    def recent_outcomes(self, user_id, limit):
        return [Outcome(**o) for o in reversed(self.outcomes) if o["user_id"] == user_id][:limit]

    def outcomes_for_decisions(self, decision_ids):
        ids = set(decision_ids)
        return [Outcome(**o) for o in self.outcomes if o["decision_id"] in ids]

    def list_outcomes(self, user_id, outcome_type=None, limit=20, offset=0):
        rows = [
            dict(o) for o in reversed(self.outcomes)
            if o["user_id"] == user_id and (not outcome_type or o["outcome_type"] == outcome_type)
        ]
        return rows[offset:offset + limit]

    def insert_insights(self, insights):
        self.insights.extend(insights)

    def list_insights(self, user_id, insight_type=None, unread_only=False, limit=20, offset=0):
        rows = [
            i for i in reversed(self.insights)
            if i.user_id == user_id
            and not i.is_dismissed
            and (not insight_type or i.insight_type == insight_type)
            and not (unread_only and i.is_read)
        ]
        rows.sort(key=lambda i: i.priority, reverse=True)
        return [i.model_dump() for i in rows[offset:offset + limit]]

    def insert_micro_decision(self, doc):
        record = {**doc, "id": str(ObjectId())}
        self.micro_decisions[record["id"]] = record
        return dict(record)

    def update_micro_decision(self, micro_id, user_id, fields):
        record = self.micro_decisions.get(micro_id)
        if not record or record["user_id"] != user_id:
            return None
        record.update(fields)
        return dict(record)

    def list_micro_decisions(self, user_id, limit=20, offset=0):
        rows = [dict(m) for m in reversed(list(self.micro_decisions.values())) if m["user_id"] == user_id]
        return rows[offset:offset + limit]

    def get_streaks(self, user_id):
        return [s for (uid, _), s in self.streaks.items() if uid == user_id]

    def get_streak(self, user_id, streak_type):
        return self.streaks.get((user_id, streak_type))

    def save_streak(self, streak):
        self.streaks[(streak.user_id, streak.streak_type)] = streak
        return streak

    def replace_community_trends(self, trends):
        self.trends = list(trends)

    def list_community_trends(self, category=None, time_period=None):
        return [
            t.model_dump() for t in reversed(self.trends)
            if t.is_active
            and (not category or t.category == category)
            and (not time_period or t.time_period == time_period)
        ]
