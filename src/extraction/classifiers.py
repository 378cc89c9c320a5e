"""Fixed keyword tables and the classifiers that read them.

Every classifier is a pure function of its inputs. Tables are the contract:
widening coverage means editing a table, not the functions.
"""

import re
from typing import Optional

DEFAULT_PROFICIENCY = "intermediate"
DEFAULT_EXPERIENCE_YEARS = 2

# (level, phrase templates); first level with a matching phrase wins
PROFICIENCY_CUES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("expert", ("expert in {s}", "expert at {s}", "{s} expert", "mastered {s}")),
    ("advanced", ("advanced in {s}", "{s} advanced", "advanced {s}")),
    ("beginner", ("beginner in {s}", "{s} beginner", "new to {s}")),
    ("intermediate", ("good at {s}", "proficient in {s}", "comfortable with {s}")),
)

INDUSTRY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "technology": (
        "tech", "technology", "software", "app", "apps", "digital", "ai",
        "machine learning", "data", "saas", "cloud",
    ),
    "finance": ("bank", "banking", "finance", "financial", "trading", "investment", "fintech"),
    "healthcare": ("health", "healthcare", "medical", "hospital", "pharma", "biotech"),
    "education": ("school", "university", "education", "learning", "academic"),
    "retail": ("shop", "store", "retail", "commerce", "e-commerce", "sales"),
    "consulting": ("consulting", "consultancy", "advisory", "strategy"),
    "media": ("media", "news", "publishing", "entertainment", "content"),
}

# Order is significant: learning, professional, health, personal
OBJECTIVE_CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "learning": (
        "learn", "study", "studying", "course", "certification", "certified",
        "degree", "read", "bootcamp", "training", "master",
    ),
    "professional": (
        "career", "job", "promotion", "promoted", "work", "business", "revenue",
        "team", "lead", "manager", "client", "salary", "startup", "company",
    ),
    "health": (
        "health", "healthy", "fitness", "exercise", "workout", "run", "running",
        "marathon", "weight", "sleep", "diet", "gym", "meditate",
    ),
    "personal": (
        "family", "personal", "hobby", "travel", "friends", "relationship",
        "home", "kids", "partner",
    ),
}
DEFAULT_OBJECTIVE_CATEGORY = "professional"

PRIORITY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "high": (
        "urgent", "urgently", "asap", "critical", "crucial", "must",
        "top priority", "immediately", "important", "need to",
    ),
    "low": (
        "eventually", "someday", "some day", "maybe", "nice to have",
        "low priority", "when i can", "if possible",
    ),
}
DEFAULT_PRIORITY = "medium"

# Order is significant: checked top to bottom
GOAL_TIMEFRAME_KEYWORDS: dict[str, tuple[str, ...]] = {
    "quarter": ("quarter", "q1", "q2", "q3", "q4", "3 months", "three months", "90 days"),
    "year": (
        "year", "years", "yearly", "annual", "annually", "12 months",
        "twelve months", "6 months", "six months",
    ),
    "month": ("month", "months", "week", "weeks", "30 days"),
    "ongoing": ("ongoing", "every day", "daily", "weekly", "always", "continuously", "habit"),
}
DEFAULT_GOAL_TIMEFRAME = "quarter"

_MONTHS = (
    r"(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|"
    r"aug(?:ust)?|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)"
)
_DATE_PHRASE = (
    r"(?:(?:the\s+)?end\s+of\s+(?:the\s+)?(?:year|quarter|month|(?:19|20)\d{2})"
    r"|(?:next|this)\s+(?:week|month|quarter|year|summer|spring|fall|autumn|winter)"
    rf"|{_MONTHS}\.?(?:\s+\d{{1,2}}(?:st|nd|rd|th)?)?(?:,?\s+(?:19|20)\d{{2}})?"
    r"|q[1-4](?:\s+(?:19|20)\d{2})?"
    r"|\d{4}-\d{2}-\d{2}"
    r"|\d{1,2}/\d{1,2}/\d{2,4}"
    r"|(?:19|20)\d{2}"
    r"|(?:a|one|two|three|six|\d+)\s+(?:days?|weeks?|months?|years?))"
)
_TARGET_DATE_RE = re.compile(rf"\b(?:by|within|before)\s+({_DATE_PHRASE})\b", re.IGNORECASE)

CURRENCY_SYMBOLS = {"$": "USD", "€": "EUR", "£": "GBP"}
CURRENCY_WORDS = {
    "dollar": "USD", "dollars": "USD", "usd": "USD",
    "euro": "EUR", "euros": "EUR", "eur": "EUR",
    "pound": "GBP", "pounds": "GBP", "gbp": "GBP",
}
PERCENT_UNITS = {"%", "percent", "percentage"}
MAGNITUDES = {"k": 1_000, "m": 1_000_000}

# Words that follow a number but are not units
NON_UNIT_WORDS = {
    "by", "in", "within", "before", "this", "next", "the", "and", "or", "per",
    "a", "an", "to", "from", "at", "of", "for", "on", "end", "so", "until", "over",
}


def _keyword_regex(keywords: tuple[str, ...]) -> re.Pattern:
    alternatives = "|".join(re.escape(k) for k in sorted(keywords, key=len, reverse=True))
    return re.compile(rf"(?<![\w-])(?:{alternatives})(?![\w-])", re.IGNORECASE)


_INDUSTRY_RES = {name: _keyword_regex(kws) for name, kws in INDUSTRY_KEYWORDS.items()}
_CATEGORY_RES = {name: _keyword_regex(kws) for name, kws in OBJECTIVE_CATEGORY_KEYWORDS.items()}
_PRIORITY_RES = {name: _keyword_regex(kws) for name, kws in PRIORITY_KEYWORDS.items()}
_TIMEFRAME_RES = {name: _keyword_regex(kws) for name, kws in GOAL_TIMEFRAME_KEYWORDS.items()}


def _first_hit(patterns: dict[str, re.Pattern], text: str, default: Optional[str]) -> Optional[str]:
    for name, pattern in patterns.items():
        if pattern.search(text):
            return name
    return default


def _entity_pattern(entity: str) -> str:
    return rf"(?<![\w+#]){re.escape(entity.lower())}(?![\w+#])"


def infer_proficiency(text: str, skill: str) -> str:
    """Proficiency from qualifier phrases around the skill name."""
    lowered = text.lower()
    s = skill.lower()
    for level, templates in PROFICIENCY_CUES:
        if any(t.format(s=s) in lowered for t in templates):
            return level
    return DEFAULT_PROFICIENCY


def infer_experience(text: str, skill: str) -> int:
    """Years of experience from a '<N> year(s)' phrase tied to the skill.

    A number before the skill ("5 years of experience with Python") wins over
    one after it ("React for 3 years"); neither may cross a sentence end or
    another number.
    """
    lowered = text.lower()
    name = _entity_pattern(skill)
    years = r"\b(\d{1,2})\+?\s*(?:years?|yrs?)\b"
    for pattern in (
        rf"{years}[^.!?\d]{{0,60}}?{name}",
        rf"{name}[^.!?\d]{{0,60}}?{years}",
    ):
        match = re.search(pattern, lowered)
        if match:
            return int(match.group(1))
    return DEFAULT_EXPERIENCE_YEARS


def infer_industry(context: str, company: str) -> Optional[str]:
    """Industry from the company name or its sentence; None when nothing matches."""
    for name, pattern in _INDUSTRY_RES.items():
        if pattern.search(company) or pattern.search(context):
            return name
    return None


def infer_objective_category(text: str) -> str:
    return _first_hit(_CATEGORY_RES, text, DEFAULT_OBJECTIVE_CATEGORY)


def infer_priority(text: str) -> str:
    return _first_hit(_PRIORITY_RES, text, DEFAULT_PRIORITY)


def infer_goal_timeframe(text: str) -> str:
    return _first_hit(_TIMEFRAME_RES, text, DEFAULT_GOAL_TIMEFRAME)


def infer_target_date(text: str) -> Optional[str]:
    """First date-like phrase introduced by 'by', 'within' or 'before'."""
    match = _TARGET_DATE_RE.search(text)
    return match.group(1).strip() if match else None


def parse_target(
    number: Optional[str],
    magnitude: Optional[str] = None,
    currency: Optional[str] = None,
    unit: Optional[str] = None,
) -> tuple[Optional[float], Optional[str], str]:
    """Return (target_value, unit, measurement_type) for a key-result target.

    No number means a done/not-done result (boolean).
    """
    if not number:
        return None, None, "boolean"

    value = float(number.replace(",", ""))
    if magnitude:
        value *= MAGNITUDES[magnitude.lower()]

    unit_word = unit.lower() if unit else None
    if unit_word in NON_UNIT_WORDS:
        unit_word = None

    if unit_word in PERCENT_UNITS:
        return value, "%", "percentage"
    if currency:
        return value, CURRENCY_SYMBOLS[currency], "currency"
    if unit_word in CURRENCY_WORDS:
        return value, CURRENCY_WORDS[unit_word], "currency"
    return value, unit_word, "number"


def is_unit_word(unit: Optional[str]) -> bool:
    return bool(unit) and unit.lower() not in NON_UNIT_WORDS


def infer_date_span(text: str) -> tuple[Optional[str], Optional[str]]:
    """(start, end) years from 'from 2018 to 2021' / 'since 2020' phrasing."""
    span = re.search(
        r"\b(?:from|between)\s+((?:19|20)\d{2})\s+(?:to|and|until|-)\s+((?:19|20)\d{2}|present|now)\b",
        text,
        re.IGNORECASE,
    )
    if span:
        end = span.group(2)
        return span.group(1), None if end.lower() in ("present", "now") else end
    since = re.search(r"\bsince\s+((?:19|20)\d{2})\b", text, re.IGNORECASE)
    if since:
        return since.group(1), None
    return None, None


def infer_graduation_year(text: str) -> Optional[str]:
    match = re.search(r"\b(?:in|class of)\s+((?:19|20)\d{2})\b", text, re.IGNORECASE)
    return match.group(1) if match else None
