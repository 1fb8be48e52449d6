from tests.helpers import make_context

from schemas import AIRanking, DecisionOption
from scoring import normalize_rankings, predict_outcome, score_option, score_options
from vocabulary import Vocabulary


def _ranking(option_id, score):
    return AIRanking(
        option_id=option_id,
        score=score,
        predicted_outcome="",
        risk_level="medium",
        time_horizon="long-term",
    )


def test_productive_option_beats_avoidance_for_work_decision():
    context = make_context("Finish the project", "Go to sleep", title="Finish project or sleep", category="work", urgency="high")

    finish, sleep = score_options(context)

    # 50 + 15 productive + 20 title words + 5 specificity + 3 position
    assert finish.score == 93
    # 50 - 25 avoidance + 10 title word + 5 specificity + 2 position
    assert sleep.score == 42
    assert finish.risk_level == "low"
    assert sleep.risk_level == "high"
    assert finish.time_horizon == sleep.time_horizon == "short-term"
    assert finish.rank == sleep.rank == 0


def test_work_keywords_detected_in_description():
    context = make_context("Play games", "Read", title="What now", description="My HOMEWORK is due")

    games = score_options(context)[0]

    assert games.risk_level == "high"


def test_avoidance_is_not_penalized_outside_work():
    context = make_context("Play games", "Read", title="Friday evening")

    games = score_options(context)[0]

    # 50 + 5 specificity + 3 position
    assert games.score == 58
    assert games.risk_level == "medium"


def test_productive_option_is_low_risk_even_outside_work():
    context = make_context("Learn piano", "Watch TV", title="Free time")

    assert score_options(context)[0].risk_level == "low"


def test_title_words_boost_relevant_options():
    context = make_context("Visit grandma", "Stay home", title="Visit grandma this weekend")

    visit = score_option(context.options[0], 0, context)

    # visit + grandma match, "this" and "weekend" do not
    assert visit.score == 50 + 20 + 5 + 3


def test_sentiment_words_adjust_score():
    context = make_context("A good and important choice", "A hard and boring chore")

    good, bad = score_options(context)

    assert good.score == 50 + 5 + 5 + 5 + 3
    assert bad.score == 50 - 3 - 3 + 5 + 2


def test_pros_and_cons_are_weighted():
    context = make_context(title="Pick one", options=[
        DecisionOption(id="1", text="Option", pros=["cheap", "fast"], cons=["ugly"]),
        DecisionOption(id="2", text="Option"),
    ])

    first, second = score_options(context)

    assert first.score == 50 + 20 - 7 + 3
    assert second.score == 52


def test_scores_are_clamped():
    context = make_context(title="Pick one", options=[
        DecisionOption(id="1", text="Option", pros=list("abcde")),
        DecisionOption(id="2", text="Option", cons=list("abcdef")),
    ])

    high, low = score_options(context)

    assert high.score == 95
    assert low.score == 20


def test_time_horizon_follows_urgency():
    assert score_options(make_context("A", "B", urgency="critical"))[0].time_horizon == "short-term"
    assert score_options(make_context("A", "B", urgency="low"))[0].time_horizon == "long-term"


def test_predicted_outcome_uses_category_phrase_and_balance():
    with_pros = DecisionOption(id="1", text="abcd", pros=["x"])
    with_cons = DecisionOption(id="2", text="abcd", cons=["x"])
    plain = DecisionOption(id="3", text="abcd")

    assert predict_outcome(with_pros, "finance") == "Likely to result in financial stability with manageable challenges"
    assert predict_outcome(with_cons, "finance") == (
        "May face obstacles but could lead to financial stability with careful execution"
    )
    assert predict_outcome(plain, "health") == "Balanced outcome expected with potential for improved wellness"


def test_unknown_category_falls_back_to_general_phrases():
    option = DecisionOption(id="1", text="abcde")

    assert predict_outcome(option, "work") == "Balanced outcome expected with potential for goal achievement"


def test_custom_vocabulary_changes_classification():
    context = make_context("Go surfing", "Write report", title="Weekend plans")
    surf_is_avoidance = Vocabulary(work=("weekend",), avoidance=("surf",))

    surfing = score_options(context, surf_is_avoidance)[0]

    assert surfing.risk_level == "high"


def test_near_tie_is_spread_apart_in_input_order():
    context = make_context("Option", "Option")

    rankings = normalize_rankings(score_options(context))

    assert [(r.option_id, r.rank, r.score) for r in rankings] == [("1", 1, 85), ("2", 2, 70)]
    assert rankings[0].score - rankings[1].score >= 15


def test_spread_reassignment_floors_at_25():
    context = make_context(*["Option"] * 7)

    rankings = normalize_rankings(score_options(context))

    assert [r.score for r in rankings] == [85, 70, 55, 40, 25, 25, 25]
    assert [r.option_id for r in rankings] == ["1", "2", "3", "4", "5", "6", "7"]
    assert [r.rank for r in rankings] == [1, 2, 3, 4, 5, 6, 7]


def test_wide_spread_keeps_scores_and_breaks_ties_by_input_order():
    rankings = normalize_rankings([_ranking("a", 60), _ranking("b", 90), _ranking("c", 60)])

    assert [(r.option_id, r.rank, r.score) for r in rankings] == [("b", 1, 90), ("a", 2, 60), ("c", 3, 60)]


def test_single_option_is_ranked_first_unchanged():
    (only,) = normalize_rankings([_ranking("a", 40)])

    assert only.rank == 1
    assert only.score == 40


def test_normalize_does_not_mutate_input():
    before = [_ranking("a", 50), _ranking("b", 52)]

    normalize_rankings(before)

    assert [(r.rank, r.score) for r in before] == [(0, 50), (0, 52)]
