"""
MongoDB access for DailyWhy

The connection is configured from the environment:
- DATABASE_URL: MongoDB connection string (no database when unset)
- DATABASE_NAME: database to use, defaults to "dailywhy"

``db`` stays None when DATABASE_URL is missing; the API reports that as
"Database not configured" instead of failing at import time.
"""

import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol

from bson import ObjectId
from loguru import logger
from pymongo import DESCENDING, MongoClient

from schemas import CommunityTrend, Decision, Insight, Outcome, Streak

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "dailywhy")

db = None
if DATABASE_URL:
    client = MongoClient(DATABASE_URL, tz_aware=True)
    db = client[DATABASE_NAME]
    logger.info(f"Using MongoDB database '{DATABASE_NAME}'")
else:
    logger.warning("DATABASE_URL not set, running without a database")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def serialize(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if doc is None:
        return None
    out = dict(doc)
    out["id"] = str(out.pop("_id"))
    return out


class RecordStore(Protocol):
    """Storage the service layer needs; the engine itself never touches it."""

    def insert_decision(self, doc: Dict[str, Any]) -> Dict[str, Any]: ...
    def get_decision(self, decision_id: str) -> Optional[Dict[str, Any]]: ...
    def update_decision(self, decision_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]: ...
    def decision_history(
        self,
        user_id: str,
        limit: Optional[int] = None,
        offset: int = 0,
        category: Optional[str] = None,
        completed: Optional[bool] = None,
    ) -> List[Dict[str, Any]]: ...
    def delete_decision(self, decision_id: str, user_id: str) -> bool: ...
    def count_decisions(self, user_id: str) -> int: ...
    def decisions_between(self, start: datetime, end: datetime, user_id: Optional[str] = None) -> List[Decision]: ...
    def active_user_ids(self, start: datetime, end: datetime) -> List[str]: ...
    def insert_outcome(self, doc: Dict[str, Any]) -> Dict[str, Any]: ...
    def outcome_for_decision(self, decision_id: str) -> Optional[Dict[str, Any]]: ...
    def recent_outcomes(self, user_id: str, limit: int) -> List[Outcome]: ...
    def outcomes_for_decisions(self, decision_ids: List[str]) -> List[Outcome]: ...
    def list_outcomes(self, user_id: str, outcome_type: Optional[str] = None, limit: int = 20, offset: int = 0) -> List[Dict[str, Any]]: ...
    def insert_insights(self, insights: List[Insight]) -> None: ...
    def list_insights(
        self,
        user_id: str,
        insight_type: Optional[str] = None,
        unread_only: bool = False,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Dict[str, Any]]: ...
    def insert_micro_decision(self, doc: Dict[str, Any]) -> Dict[str, Any]: ...
    def update_micro_decision(self, micro_id: str, user_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]: ...
    def list_micro_decisions(self, user_id: str, limit: int = 20, offset: int = 0) -> List[Dict[str, Any]]: ...
    def get_streaks(self, user_id: str) -> List[Streak]: ...
    def get_streak(self, user_id: str, streak_type: str) -> Optional[Streak]: ...
    def save_streak(self, streak: Streak) -> Streak: ...
    def replace_community_trends(self, trends: List[CommunityTrend]) -> None: ...
    def list_community_trends(self, category: Optional[str] = None, time_period: Optional[str] = None) -> List[Dict[str, Any]]: ...


class MongoRecordStore:
    def __init__(self, database):
        self.db = database

    # Decisions

    def insert_decision(self, doc):
        doc = {**doc, "created_at": doc.get("created_at") or _now(), "updated_at": _now()}
        inserted = self.db["decision"].insert_one(doc).inserted_id
        return serialize({**doc, "_id": inserted})

    def get_decision(self, decision_id):
        return serialize(self.db["decision"].find_one({"_id": ObjectId(decision_id)}))

    def update_decision(self, decision_id, fields):
        self.db["decision"].update_one(
            {"_id": ObjectId(decision_id)},
            {"$set": {**fields, "updated_at": _now()}},
        )
        return self.get_decision(decision_id)

    def decision_history(self, user_id, limit=None, offset=0, category=None, completed=None):
        query = {"user_id": user_id}
        if category:
            query["category"] = category
        if completed is not None:
            query["is_completed"] = completed
        cursor = self.db["decision"].find(query).sort("created_at", DESCENDING).skip(offset)
        if limit:
            cursor = cursor.limit(limit)
        return [serialize(d) for d in cursor]

    def delete_decision(self, decision_id, user_id):
        result = self.db["decision"].delete_one({"_id": ObjectId(decision_id), "user_id": user_id})
        return result.deleted_count > 0

    def count_decisions(self, user_id):
        return self.db["decision"].count_documents({"user_id": user_id})

    def decisions_between(self, start, end, user_id=None):
        query = {"created_at": {"$gte": start, "$lte": end}}
        if user_id is not None:
            query["user_id"] = user_id
        return [Decision(**serialize(d)) for d in self.db["decision"].find(query)]

    def active_user_ids(self, start, end):
        return sorted(self.db["decision"].distinct("user_id", {"created_at": {"$gte": start, "$lte": end}}))

    # Outcomes

    def insert_outcome(self, doc):
        doc = {**doc, "created_at": _now(), "updated_at": _now()}
        inserted = self.db["outcome"].insert_one(doc).inserted_id
        return serialize({**doc, "_id": inserted})

    def outcome_for_decision(self, decision_id):
        return serialize(self.db["outcome"].find_one({"decision_id": decision_id}))

    def recent_outcomes(self, user_id, limit):
        cursor = self.db["outcome"].find({"user_id": user_id}).sort("created_at", DESCENDING).limit(limit)
        return [Outcome(**serialize(o)) for o in cursor]

    def outcomes_for_decisions(self, decision_ids):
        if not decision_ids:
            return []
        return [Outcome(**serialize(o)) for o in self.db["outcome"].find({"decision_id": {"$in": list(decision_ids)}})]

    def list_outcomes(self, user_id, outcome_type=None, limit=20, offset=0):
        query = {"user_id": user_id}
        if outcome_type:
            query["outcome_type"] = outcome_type
        cursor = self.db["outcome"].find(query).sort("created_at", DESCENDING).skip(offset).limit(limit)
        return [serialize(o) for o in cursor]

    # Insights

    def insert_insights(self, insights):
        if insights:
            self.db["insight"].insert_many([{**i.model_dump(), "created_at": _now()} for i in insights])

    def list_insights(self, user_id, insight_type=None, unread_only=False, limit=20, offset=0):
        query = {"user_id": user_id, "is_dismissed": False}
        if insight_type:
            query["insight_type"] = insight_type
        if unread_only:
            query["is_read"] = False
        cursor = self.db["insight"].find(query).sort([("priority", DESCENDING), ("created_at", DESCENDING)])
        return [serialize(i) for i in cursor.skip(offset).limit(limit)]

    # Micro-decisions

    def insert_micro_decision(self, doc):
        doc = {**doc, "created_at": _now()}
        inserted = self.db["micro_decision"].insert_one(doc).inserted_id
        return serialize({**doc, "_id": inserted})

    def update_micro_decision(self, micro_id, user_id, fields):
        query = {"_id": ObjectId(micro_id), "user_id": user_id}
        result = self.db["micro_decision"].update_one(query, {"$set": fields})
        if result.matched_count == 0:
            return None
        return serialize(self.db["micro_decision"].find_one(query))

    def list_micro_decisions(self, user_id, limit=20, offset=0):
        cursor = self.db["micro_decision"].find({"user_id": user_id}).sort("created_at", DESCENDING)
        return [serialize(m) for m in cursor.skip(offset).limit(limit)]

    # Streaks

    def get_streaks(self, user_id):
        return [Streak(**d) for d in self.db["streak"].find({"user_id": user_id}, {"_id": 0})]

    def get_streak(self, user_id, streak_type):
        doc = self.db["streak"].find_one({"user_id": user_id, "streak_type": streak_type}, {"_id": 0})
        return Streak(**doc) if doc else None

    def save_streak(self, streak):
        self.db["streak"].update_one(
            {"user_id": streak.user_id, "streak_type": streak.streak_type},
            {"$set": {**streak.model_dump(), "updated_at": _now()}},
            upsert=True,
        )
        return streak

    # Community trends

    def replace_community_trends(self, trends):
        self.db["community_trend"].update_many({"time_period": "weekly"}, {"$set": {"is_active": False}})
        if trends:
            self.db["community_trend"].insert_many([{**t.model_dump(), "created_at": _now()} for t in trends])

    def list_community_trends(self, category=None, time_period=None):
        query = {"is_active": True}
        if category:
            query["category"] = category
        if time_period:
            query["time_period"] = time_period
        return [serialize(t) for t in self.db["community_trend"].find(query).sort("created_at", DESCENDING)]
