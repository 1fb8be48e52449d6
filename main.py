import os
from collections import Counter
from typing import Any, Dict, List, Literal, Optional
from datetime import datetime, timedelta, timezone

from fastapi import Depends, FastAPI, Header, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from bson import ObjectId
from loguru import logger

from database import db, MongoRecordStore, RecordStore
from insights import (
    dashboard_metrics,
    generate_monthly_insights_for_user,
    generate_weekly_insights_for_user,
    process_weekly_insights,
)
from micro_decisions import analyze_micro_decision
from narrative import analyze_decision
from schemas import ChosenOption, DecisionContext, DecisionOption, OutcomeType, StreakType, Urgency, UserHistory
from streaks import habit_score, record_streak_activity
from trends import generate_community_trends

app = FastAPI(title="DailyWhy API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

RECENT_OUTCOMES = 20
RECENT_CATEGORIES = 50
TRENDS_WINDOW = timedelta(days=7)

# -----------------------------
# Utility helpers
# -----------------------------

def oid(id_str: str) -> str:
    if not ObjectId.is_valid(id_str):
        raise HTTPException(status_code=400, detail="Invalid ID format")
    return id_str

def get_store() -> RecordStore:
    if db is None:
        raise HTTPException(status_code=500, detail="Database not configured")
    return MongoRecordStore(db)

def require_cron_secret(authorization: Optional[str] = Header(None)):
    cron_secret = os.getenv("CRON_SECRET")
    if cron_secret and authorization != f"Bearer {cron_secret}":
        raise HTTPException(status_code=401, detail="Unauthorized")

def require_min_options(options: list):
    if len(options) < 2:
        raise HTTPException(status_code=400, detail="At least 2 options are required")

def build_user_history(store: RecordStore, user_id: str) -> UserHistory:
    recent = store.recent_outcomes(user_id, RECENT_OUTCOMES)
    positive = sum(1 for o in recent if o.outcome_type == "positive")
    success_rate = positive / len(recent) if recent else 0.5

    categories = Counter(d.get("category") or "general" for d in store.decision_history(user_id, limit=RECENT_CATEGORIES))

    return UserHistory(
        totalDecisions=store.count_decisions(user_id),
        successRate=success_rate,
        preferredCategories=[c for c, _ in categories.most_common(3)],
    )

def bump_streak(store: RecordStore, user_id: str, streak_type: str):
    streak, broken = record_streak_activity(store.get_streak(user_id, streak_type), streak_type, user_id)
    store.save_streak(streak)
    return streak, broken

# -----------------------------
# Pydantic Models
# -----------------------------

class DecisionIn(BaseModel):
    userId: str
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    category: str = "general"
    urgency: Urgency = "medium"
    options: List[DecisionOption]
    mood_before: Optional[str] = None
    decision_type: str = "standard"
    analyze: bool = True

class DecisionUpdateIn(BaseModel):
    userId: str
    chosen_option: Optional[ChosenOption] = None
    mood_after: Optional[str] = None
    time_to_decide: Optional[int] = Field(None, ge=0)
    is_completed: Optional[bool] = None

class ReanalyzeIn(BaseModel):
    userId: str

class OutcomeIn(BaseModel):
    userId: str
    decision_id: str
    outcome_type: OutcomeType
    outcome_score: Optional[int] = Field(None, ge=1, le=10)
    notes: Optional[str] = None
    learned_lessons: Optional[str] = None
    would_decide_same: Optional[bool] = None
    actual_vs_predicted: Optional[str] = None
    follow_up_actions: List[str] = Field(default_factory=list)

class MicroDecisionIn(BaseModel):
    userId: str
    question: str = Field(..., min_length=1)
    options: List[str]
    category: str = "quick"

class MicroChoiceIn(BaseModel):
    userId: str
    chosen_option: str
    response_time_ms: Optional[int] = Field(None, ge=0)

class StreakIn(BaseModel):
    userId: str
    streak_type: StreakType

# -----------------------------
# Routes
# -----------------------------

@app.get("/")
def read_root():
    return {"message": "DailyWhy API"}

@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set",
        "database_name": os.getenv("DATABASE_NAME") or "❌ Not Set",
        "connection_status": "Not Connected",
        "collections": [],
    }
    if db is not None:
        response["connection_status"] = "Connected"
        try:
            response["collections"] = db.list_collection_names()
            response["database"] = "✅ Connected & Working"
        except Exception as e:
            logger.warning(f"[HEALTH] Database check failed: {e}")
            response["database"] = f"⚠️ Connected but Error: {e}"[:120]
    return response

@app.post("/api/decisions/analyze")
def analyze(context: DecisionContext):
    require_min_options(context.options)
    return analyze_decision(context)

@app.post("/api/decisions", status_code=201)
def create_decision(payload: DecisionIn, store: RecordStore = Depends(get_store)):
    require_min_options(payload.options)

    analysis = None
    if payload.analyze:
        context = DecisionContext(
            title=payload.title,
            description=payload.description,
            category=payload.category,
            urgency=payload.urgency,
            options=payload.options,
            userHistory=build_user_history(store, payload.userId),
        )
        analysis = analyze_decision(context)

    decision = store.insert_decision({
        "user_id": payload.userId,
        "title": payload.title,
        "description": payload.description,
        "category": payload.category,
        "urgency": payload.urgency,
        "options": [o.model_dump() for o in payload.options],
        "chosen_option": None,
        "decision_type": payload.decision_type,
        "is_micro": payload.decision_type == "micro",
        "mood_before": payload.mood_before,
        "ai_rankings": [r.model_dump() for r in analysis.rankings] if analysis else None,
        "ai_reasoning": analysis.reasoning if analysis else None,
        "ai_summary": analysis.summary if analysis else None,
        "confidence_score": analysis.confidence_score if analysis else None,
        "time_to_decide": None,
        "is_completed": False,
    })
    bump_streak(store, payload.userId, "daily_decision")

    return {"decision": decision, "aiAnalysis": analysis}

@app.get("/api/decisions/history/{userId}")
def get_history(
    userId: str,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    category: Optional[str] = None,
    completed: Optional[bool] = None,
    store: RecordStore = Depends(get_store),
):
    return store.decision_history(userId, limit=limit, offset=offset, category=category, completed=completed)

@app.get("/api/decisions/{id}")
def get_decision(id: str, store: RecordStore = Depends(get_store)):
    decision = store.get_decision(oid(id))
    if not decision:
        raise HTTPException(status_code=404, detail="Decision not found")
    return {"decision": decision, "outcome": store.outcome_for_decision(id)}

@app.patch("/api/decisions/{id}")
def update_decision(id: str, payload: DecisionUpdateIn, store: RecordStore = Depends(get_store)):
    decision = store.get_decision(oid(id))
    if not decision or decision["user_id"] != payload.userId:
        raise HTTPException(status_code=404, detail="Decision not found")

    # dump nested models whole so stored records keep every key
    fields: Dict[str, Any] = {}
    for name in payload.model_fields_set - {"userId"}:
        value = getattr(payload, name)
        fields[name] = value.model_dump() if isinstance(value, BaseModel) else value
    if not fields:
        raise HTTPException(status_code=400, detail="No valid fields to update")
    if fields.get("is_completed"):
        fields["completed_at"] = datetime.now(timezone.utc)

    return {"decision": store.update_decision(id, fields)}

@app.delete("/api/decisions/{id}")
def delete_decision(id: str, userId: str, store: RecordStore = Depends(get_store)):
    if not store.delete_decision(oid(id), userId):
        raise HTTPException(status_code=404, detail="Decision not found")
    return {"success": True}

@app.post("/api/decisions/{id}/analyze")
def reanalyze_decision(id: str, payload: ReanalyzeIn, store: RecordStore = Depends(get_store)):
    decision = store.get_decision(oid(id))
    if not decision or decision["user_id"] != payload.userId:
        raise HTTPException(status_code=404, detail="Decision not found")

    context = DecisionContext(
        title=decision["title"],
        description=decision.get("description"),
        category=decision.get("category") or "general",
        urgency=decision.get("urgency") or "medium",
        options=decision["options"],
        userHistory=build_user_history(store, payload.userId),
    )
    require_min_options(context.options)
    analysis = analyze_decision(context)

    updated = store.update_decision(id, {
        "ai_rankings": [r.model_dump() for r in analysis.rankings],
        "ai_reasoning": analysis.reasoning,
        "ai_summary": analysis.summary,
        "confidence_score": analysis.confidence_score,
    })
    return {"decision": updated, "aiAnalysis": analysis}

@app.post("/api/outcomes", status_code=201)
def record_outcome(payload: OutcomeIn, store: RecordStore = Depends(get_store)):
    decision = store.get_decision(oid(payload.decision_id))
    if not decision or decision["user_id"] != payload.userId:
        raise HTTPException(status_code=404, detail="Decision not found")
    if store.outcome_for_decision(payload.decision_id):
        raise HTTPException(status_code=409, detail="Outcome already recorded for this decision")

    outcome = store.insert_outcome({
        "decision_id": payload.decision_id,
        "user_id": payload.userId,
        **payload.model_dump(exclude={"userId", "decision_id"}),
    })
    store.update_decision(payload.decision_id, {"is_completed": True, "completed_at": datetime.now(timezone.utc)})
    bump_streak(store, payload.userId, "outcome_tracking")

    return {"outcome": outcome}

@app.get("/api/outcomes/{userId}")
def list_outcomes(
    userId: str,
    outcome_type: Optional[OutcomeType] = None,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    store: RecordStore = Depends(get_store),
):
    return {"outcomes": store.list_outcomes(userId, outcome_type=outcome_type, limit=limit, offset=offset)}

@app.post("/api/micro-decisions", status_code=201)
def create_micro_decision(payload: MicroDecisionIn, store: RecordStore = Depends(get_store)):
    require_min_options(payload.options)
    suggestion = analyze_micro_decision(payload.question, payload.options)

    micro = store.insert_micro_decision({
        "user_id": payload.userId,
        "question": payload.question,
        "options": payload.options,
        "category": payload.category,
        "ai_suggestion": suggestion.suggestion,
        "chosen_option": None,
        "response_time_ms": None,
    })
    return {"microDecision": micro, "aiSuggestion": suggestion}

@app.get("/api/micro-decisions/{userId}")
def list_micro_decisions(
    userId: str,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    store: RecordStore = Depends(get_store),
):
    return {"microDecisions": store.list_micro_decisions(userId, limit=limit, offset=offset)}

@app.patch("/api/micro-decisions/{id}")
def record_micro_choice(id: str, payload: MicroChoiceIn, store: RecordStore = Depends(get_store)):
    micro = store.update_micro_decision(oid(id), payload.userId, {
        "chosen_option": payload.chosen_option,
        "response_time_ms": payload.response_time_ms,
    })
    if not micro:
        raise HTTPException(status_code=404, detail="Micro-decision not found")
    return {"microDecision": micro}

@app.get("/api/streaks/{userId}")
def get_streaks(userId: str, store: RecordStore = Depends(get_store)):
    streaks = store.get_streaks(userId)
    return {"streaks": streaks, "habitScore": habit_score(streaks)}

@app.post("/api/streaks")
def record_streak(payload: StreakIn, store: RecordStore = Depends(get_store)):
    streak, broken = bump_streak(store, payload.userId, payload.streak_type)
    return {"streak": streak, "broken": broken}

@app.get("/api/insights/{userId}")
def list_insights(
    userId: str,
    insight_type: Optional[str] = Query(None, alias="type"),
    unread: bool = False,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    store: RecordStore = Depends(get_store),
):
    insights = store.list_insights(userId, insight_type=insight_type, unread_only=unread, limit=limit, offset=offset)
    return {"insights": insights}

@app.get("/api/insights/{userId}/dashboard")
def get_dashboard(userId: str, store: RecordStore = Depends(get_store)):
    return {"metrics": dashboard_metrics(store, userId)}

@app.post("/api/insights/{userId}/generate")
def generate_insights(userId: str, period: Literal["weekly", "monthly"] = "weekly", store: RecordStore = Depends(get_store)):
    if period == "monthly":
        insights = generate_monthly_insights_for_user(store, userId)
    else:
        insights = generate_weekly_insights_for_user(store, userId)
    return {"insights": insights}

@app.get("/api/cron/weekly-insights", dependencies=[Depends(require_cron_secret)])
def weekly_insights_cron(store: RecordStore = Depends(get_store)):
    return process_weekly_insights(store)

@app.get("/api/trends")
def list_trends(category: Optional[str] = None, period: Optional[str] = None, store: RecordStore = Depends(get_store)):
    return {"trends": store.list_community_trends(category=category, time_period=period)}

@app.post("/api/trends")
def refresh_trends(store: RecordStore = Depends(get_store)):
    end = datetime.now(timezone.utc)
    decisions = store.decisions_between(end - TRENDS_WINDOW, end)
    if not decisions:
        return {"success": True, "message": "No decisions to analyze", "trendsGenerated": 0, "totalDecisionsAnalyzed": 0}

    trends = generate_community_trends(decisions)
    store.replace_community_trends(trends)
    logger.info(f"[TRENDS] Generated {len(trends)} trends from {len(decisions)} decisions")
    return {"success": True, "trendsGenerated": len(trends), "totalDecisionsAnalyzed": len(decisions)}

if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
