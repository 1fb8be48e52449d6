"""
Schemas for DailyWhy

Each Pydantic model is either an engine value object (computed fresh on every
call, never persisted by the engine) or a stored record. Stored records map to
a collection named after the model in lowercase:
- Decision -> "decision" collection
- Outcome -> "outcome" collection
- Insight -> "insight" collection
- Streak -> "streak" collection
- CommunityTrend -> "community_trend" collection
- DecisionOption -> embedded in Decision documents
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Literal, Optional
from datetime import datetime

Urgency = Literal["low", "medium", "high", "critical"]
RiskLevel = Literal["low", "medium", "high"]
OutcomeType = Literal["positive", "negative", "neutral", "mixed"]
StreakType = Literal["daily_decision", "weekly_review", "outcome_tracking"]

# -----------------------------
# Analysis input
# -----------------------------

class DecisionOption(BaseModel):
    """One candidate choice, embedded inside a Decision"""
    id: str
    text: str = Field(..., min_length=1)
    pros: List[str] = Field(default_factory=list)
    cons: List[str] = Field(default_factory=list)

class UserHistory(BaseModel):
    totalDecisions: int = Field(0, ge=0)
    successRate: float = Field(0.0, ge=0, le=1)
    preferredCategories: List[str] = Field(default_factory=list)

class DecisionContext(BaseModel):
    title: str
    description: Optional[str] = None
    category: str = "general"
    urgency: Urgency = "medium"
    options: List[DecisionOption]
    userHistory: Optional[UserHistory] = None

# -----------------------------
# Analysis output
# -----------------------------

class AIRanking(BaseModel):
    model_config = ConfigDict(frozen=True)

    option_id: str
    rank: int = Field(0, ge=0, description="0 until normalization assigns 1..N")
    score: int = Field(..., ge=0, le=100)
    predicted_outcome: str
    risk_level: RiskLevel
    time_horizon: str = Field(..., description="short-term | long-term")

class AIAnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    rankings: List[AIRanking]
    reasoning: str
    summary: str
    confidence_score: float = Field(..., ge=0.5, le=0.95)
    key_factors: List[str]
    potential_biases: List[str]
    recommended_action: str

class MicroSuggestion(BaseModel):
    suggestion: str
    reasoning: str

# -----------------------------
# Stored records
# -----------------------------

class ChosenOption(BaseModel):
    id: str
    text: Optional[str] = None

class Decision(BaseModel):
    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    category: Optional[str] = "general"
    urgency: Urgency = "medium"
    options: List[DecisionOption] = Field(default_factory=list)
    chosen_option: Optional[ChosenOption] = None
    confidence_score: Optional[float] = None
    time_to_decide: Optional[int] = Field(None, description="Seconds taken to decide")
    is_completed: bool = False
    created_at: datetime

class Outcome(BaseModel):
    id: str
    decision_id: str
    user_id: str
    outcome_type: str
    outcome_score: Optional[int] = Field(None, ge=1, le=10)

class Insight(BaseModel):
    user_id: str
    insight_type: str = Field(..., description="weekly | monthly | category | pattern")
    insight_title: str
    insight_text: str
    metrics: Dict[str, Any] = Field(default_factory=dict)
    category: Optional[str] = None
    period_start: Optional[datetime] = None
    period_end: Optional[datetime] = None
    action_items: List[str] = Field(default_factory=list)
    is_read: bool = False
    is_dismissed: bool = False
    priority: int = Field(5, ge=1, le=10)

class CategoryStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int = 0
    positive: int = 0
    avgConfidence: float = 0.0

class UserMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    successRate: float = Field(0.0, ge=0, le=1)
    fatigueScore: float = Field(0.0, ge=0, le=10)
    productivityScore: float = Field(0.0, ge=0, le=100)
    biasAnalysis: Dict[str, float] = Field(default_factory=dict)
    categoryPerformance: Dict[str, CategoryStats] = Field(default_factory=dict)
    timePatterns: Dict[str, int] = Field(default_factory=dict)

class Streak(BaseModel):
    user_id: str
    streak_type: StreakType
    current_count: int = Field(0, ge=0)
    longest_count: int = Field(0, ge=0)
    last_activity_at: Optional[datetime] = None
    broken_at: Optional[datetime] = None

class TrendPoint(BaseModel):
    label: str
    value: str

class CommunityTrend(BaseModel):
    trend_title: str
    trend_description: str
    category: str
    metrics: Dict[str, Any] = Field(default_factory=dict)
    sample_size: int = 0
    time_period: str = "weekly"
    trend_data: List[TrendPoint] = Field(default_factory=list)
    is_active: bool = True
