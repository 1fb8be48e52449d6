"""Template tables for the narrative generator.

Every user-facing sentence the analysis produces lives here, keyed by the
small tuples the generator branches on (category, risk level, spread bucket,
pros/cons balance). Adding a category or rewording a remark never touches
control flow in ``scoring`` or ``narrative``.
"""

from typing import Dict, Tuple

OUTCOME_PHRASES: Dict[str, Tuple[str, str, str, str]] = {
    "career": ("career advancement", "professional growth", "skill development", "network expansion"),
    "finance": ("financial stability", "investment returns", "cost savings", "budget optimization"),
    "health": ("improved wellness", "better habits", "increased energy", "long-term health benefits"),
    "relationships": ("stronger connections", "better communication", "mutual understanding", "trust building"),
    "lifestyle": ("improved quality of life", "better work-life balance", "personal satisfaction", "new experiences"),
    "general": ("positive progress", "goal achievement", "personal growth", "favorable results"),
}

OUTCOME_WORDING = {
    "more_pros": "Likely to result in {phrase} with manageable challenges",
    "more_cons": "May face obstacles but could lead to {phrase} with careful execution",
    "balanced": "Balanced outcome expected with potential for {phrase}",
}

SUMMARY_CLOSINGS = {
    "low": "The risks are manageable and the potential benefits are solid.",
    "high": "Just be aware there are some risks involved - make sure you're ready for them.",
    "medium": "It's a balanced choice with both opportunities and things to watch out for.",
}

SUMMARY = 'My recommendation: Go with "{text}". It scored {score}/100 in my analysis. {closing}'

REASONING_OPENING = 'I looked at all {count} options you\'re considering for "{title}".'

URGENCY_CLAUSES = {
    True: "Since this decision is urgent, I focused on which option will give you the best results quickly.",
    False: "I evaluated each option based on its potential benefits and drawbacks.",
}

STANDS_OUT = '\n\n**Why "{text}" stands out:**'
STRONG_POINTS = "\nThis option has some really strong points: {pros}."
SCORED_WELL = "\nThis option scored well ({score}/100) based on the overall analysis."
KEEP_IN_MIND = "\nHowever, keep in mind: {cons}. These aren't deal-breakers, just things to be aware of."

RISK_REMARKS = {
    "low": "\nOverall, this is a pretty safe choice with manageable downsides.",
    "high": "\nThis option does carry some risk, so make sure you're prepared for potential challenges.",
}

SPREAD_REMARKS = {
    "close": (
        "\n\nHonestly, all your options are pretty close in quality. Trust your gut feeling "
        'on this one - there\'s no clearly "wrong" choice here.'
    ),
    "clear": (
        "\n\nThere's a noticeable difference between the options. The top choice clearly "
        "has more going for it compared to the others."
    ),
    "mixed": (
        '\n\nWhile "{text}" seems strongest, the other options have their merits too. '
        "Consider what matters most to you personally."
    ),
}

CATEGORY_FACTOR = "This is a {category} decision"

TIME_FACTORS = {
    True: "Time is a factor - you need to decide soon",
    False: "You have time to think this through carefully",
}

OPTION_COUNT_FACTORS = {
    "many": "You have {count} options - that's a lot to consider",
    "two": "This is a straightforward choice between two paths",
    "some": "You're weighing {count} different approaches",
}

VOLUME_FACTORS = {
    "upbeat": "Your options have lots of upsides - this is a positive situation",
    "challenging": "There are some challenges to navigate, but that's normal for tough decisions",
}

HISTORY_FACTOR = "You've made {total} decisions before with a {rate}% success rate"

BIAS_WARNINGS = {
    "first_option": (
        "The first option you listed has more positives - sometimes we unconsciously "
        "favor what comes to mind first"
    ),
    "too_many": (
        "With so many choices, it can be tough to pick one. Consider if you can group "
        "similar options together"
    ),
    "time_pressure": (
        "When pressed for time, we sometimes miss important details. Take a moment to "
        "breathe before deciding"
    ),
    "overly_positive": (
        "You've listed lots of positives and fewer negatives. That's great, but also "
        "consider what could go wrong"
    ),
    "overly_negative": (
        "You're focusing more on what could go wrong. Don't forget to also consider the "
        "good things that could happen"
    ),
    "balanced": "Your analysis seems balanced - no major red flags in how you're approaching this",
}


def outcome_phrases(category: str) -> Tuple[str, str, str, str]:
    return OUTCOME_PHRASES.get(category, OUTCOME_PHRASES["general"])


def balance_key(pros_count: int, cons_count: int) -> str:
    if pros_count > cons_count:
        return "more_pros"
    if cons_count > pros_count:
        return "more_cons"
    return "balanced"


def spread_bucket(spread: int, close_below: int = 15, clear_above: int = 30) -> str:
    if spread < close_below:
        return "close"
    if spread > clear_above:
        return "clear"
    return "mixed"


def option_count_bucket(count: int) -> str:
    if count > 4:
        return "many"
    if count == 2:
        return "two"
    return "some"
