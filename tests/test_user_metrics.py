import datetime as dt

import pytest
from tests.helpers import NOW, make_decision, make_outcome

from user_metrics import (
    analyze_biases,
    analyze_category_performance,
    analyze_time_patterns,
    calculate_fatigue_score,
    calculate_productivity_score,
    calculate_success_rate,
    compute_user_metrics,
)


def test_empty_history_yields_zeros():
    assert calculate_success_rate([]) == 0
    assert calculate_fatigue_score([]) == 0
    assert calculate_productivity_score([]) == 0
    assert analyze_category_performance([], []) == {}
    assert set(analyze_time_patterns([]).values()) == {0}
    assert set(analyze_biases([]).values()) == {0}


def test_success_counts_positive_type_or_high_score():
    outcomes = [
        make_outcome("d1", "positive"),
        make_outcome("d2", "neutral", score=8),
        make_outcome("d3", "negative", score=3),
        make_outcome("d4", "mixed"),
    ]

    assert calculate_success_rate(outcomes) == 0.5


def test_fatigue_near_cap_for_overloaded_day():
    decisions = [
        make_decision(id=f"d{i}", urgency="critical", time_to_decide=900, is_completed=False)
        for i in range(5)
    ]

    score = calculate_fatigue_score(decisions)

    # 5 decisions on one day contributes 1.0, the other three components hit 2.5
    assert score == pytest.approx(8.5)
    assert score <= 10


def test_fatigue_is_capped_at_ten():
    decisions = [
        make_decision(id=f"d{i}", urgency="high", time_to_decide=3600, is_completed=False)
        for i in range(60)
    ]

    assert calculate_fatigue_score(decisions) == 10


def test_fatigue_averages_over_active_days_and_timed_decisions():
    decisions = [
        make_decision(id="d1", time_to_decide=None),
        make_decision(id="d2", time_to_decide=0),
        make_decision(id="d3", time_to_decide=600, created_at=NOW - dt.timedelta(days=3)),
    ]

    # 1.5 decisions per active day -> 0.3, one timed decision of 600s -> 2.0
    assert calculate_fatigue_score(decisions) == pytest.approx(2.3)


def test_productivity_is_completed_percentage():
    decisions = [make_decision(id=f"d{i}", is_completed=i != 0) for i in range(4)]

    assert calculate_productivity_score(decisions) == 75.0


def test_category_performance():
    decisions = [
        make_decision(id="d1", category="work", confidence=0.8),
        make_decision(id="d2", category="work"),
        make_decision(id="d3", category=None, confidence=0.6),
    ]
    outcomes = [make_outcome("d1", "positive"), make_outcome("d3", "negative", score=2)]

    performance = analyze_category_performance(decisions, outcomes)

    assert performance["work"].total == 2
    assert performance["work"].positive == 1
    assert performance["work"].avgConfidence == pytest.approx(0.4)
    assert performance["general"].total == 1
    assert performance["general"].positive == 0
    assert performance["general"].avgConfidence == pytest.approx(0.6)


def test_time_patterns_bucket_by_hour():
    hours = [6, 11, 12, 17, 20, 21, 3]
    decisions = [make_decision(id=f"d{h}", created_at=NOW.replace(hour=h)) for h in hours]

    assert analyze_time_patterns(decisions) == {
        "morning (6-12)": 2,
        "afternoon (12-17)": 1,
        "evening (17-21)": 2,
        "night (21-6)": 2,
    }


def test_first_option_bias_fraction():
    decisions = [make_decision(id=f"d{i}", chosen="a" if i < 5 else "b") for i in range(10)]

    biases = analyze_biases(decisions)

    assert biases["first_option_bias"] == 0.5
    assert biases["last_option_bias"] == 0
    assert biases["status_quo_bias"] == 0


def test_other_biases():
    decisions = [
        make_decision(id="d1", chosen="c", confidence=0.9, time_to_decide=700),
        make_decision(id="d2", confidence=0.8, time_to_decide=600),
        make_decision(id="d3", option_ids=("only",), chosen="only", confidence=0.95),
        make_decision(id="d4", option_ids=(), chosen="x", time_to_decide=1200),
    ]

    biases = analyze_biases(decisions)

    assert biases["first_option_bias"] == 0.25
    assert biases["last_option_bias"] == 0.5
    assert biases["overconfidence_bias"] == 0.5
    assert biases["analysis_paralysis"] == 0.5


def test_compute_user_metrics_bundles_everything():
    decisions = [make_decision(id="d1", category="work", is_completed=False), make_decision(id="d2", category="work")]
    outcomes = [make_outcome("d2", "positive")]

    metrics = compute_user_metrics(decisions, outcomes)

    assert metrics.successRate == 1.0
    assert metrics.productivityScore == 50.0
    assert metrics.categoryPerformance["work"].positive == 1
    assert sum(metrics.timePatterns.values()) == 2
    assert metrics.fatigueScore == pytest.approx(2 / 5 + 0.5 * 2.5)
