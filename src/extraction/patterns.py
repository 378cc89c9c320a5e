"""Declarative pattern tables: one list of (pattern, extractor) rules per family.

Rules are independent of each other and of the engine, so each can be run
against a sentence on its own. Extractors return zero or more actions per
match and never raise for well-formed matches.
"""

import re
from dataclasses import dataclass, field
from typing import Callable

from shared_types import ActionType

from .classifiers import (
    infer_date_span,
    infer_experience,
    infer_goal_timeframe,
    infer_graduation_year,
    infer_industry,
    infer_objective_category,
    infer_priority,
    infer_proficiency,
    infer_target_date,
    is_unit_word,
    parse_target,
)
from .models import ConversationAction

_SENTENCE_END = re.compile(r"[.!?](?=\s|$)|\n")

_SKILL_CAPTURE = r"([A-Za-z0-9.#][\w\s\-\+\.#/]*)"
_SKILL_LIST_CAPTURE = r"([A-Za-z0-9.#][\w\s\-\+\.#/,]*)"
_ORG_CAPTURE = r"([A-Za-z0-9][\w\s\-&\.]*)"
_NUMBER = (
    r"(?P<cur>[$€£])?(?P<num>\d[\d,]*(?:\.\d+)?)\s*(?P<mag>[kKmM]\b)?\s*(?P<unit>%|[A-Za-z]+)?"
)

_CONNECTORS = re.compile(r"\s*(?:,|;|\band\b|\bor\b|\bwith\b|\bplus\b|&)\s*", re.IGNORECASE)
_DISALLOWED = re.compile(r"[^\w\s\-\+\.#&/]")
_GOAL_DISALLOWED = re.compile(r"[^\w\s\-\+\.#&/'$€£%]")
_LEADING = re.compile(r"^(?:(?:a|an|the|some|also|and|or|with|my|our|in)\s+)+", re.IGNORECASE)
_TRAILING = re.compile(r"(?:\s+(?:and|or|with|the|a|an|of|to))+$", re.IGNORECASE)

_SKILL_STOPS = re.compile(
    r"\b(?:i|i'm|i've|we|my|at|as|for|since|because|but|so|when|while|which|who|that|"
    r"to|from|during|after|before|in|using|every|daily|professionally|years?|yrs?)\b",
    re.IGNORECASE,
)
# Case-sensitive: stops are lowercase words, so names like "AT&T" survive
_ORG_STOPS = re.compile(
    r"\b(?:as|at|since|for|in|where|because|but|when|while|during|from|until|on|doing|"
    r"which|who|with|after|before|last|this|then|[Ii]|[Ww]e|and\s+(?:I|[a-z]\w*))\b"
)
_ROLE_STOPS = re.compile(r"\b(?:in|at|for|since|and|with|where|from|on|during|until)\b", re.IGNORECASE)
_GOAL_STOPS = re.compile(
    r"\s+(?:by|within|before|so that|so i can|because|in order to|and then)\b"
    r"|\s+(?:this|next|every)\s+(?:day|week|month|quarter|year)\b"
    r"|[,;]",
    re.IGNORECASE,
)
_DEGREE_WORDS = re.compile(
    r"\b(?:bachelor'?s?|master'?s?|masters|ph\.?d|doctorate|mba|bsc|msc|bs|ba|ms|ma|"
    r"degree|diploma|associate'?s?|certificate)\b",
    re.IGNORECASE,
)
_NON_ROLE_WORDS = re.compile(r"\b(?:in|to|about|of working|believer|fan)\b", re.IGNORECASE)

STOP_ENTITIES = {
    "it", "this", "that", "them", "things", "stuff", "how", "what", "lot", "lots",
    "bit", "some", "more", "many", "much", "everything", "something", "people",
    "well", "too", "very", "really", "experience", "years", "year", "is", "am", "be",
    "the", "there", "here", "home", "work",
}

# Places and groups people mention without naming an organisation
GENERIC_ORGS = {
    "gym", "team", "office", "company", "startup", "firm", "business", "job", "club",
    "party", "school", "college", "university", "class", "church", "library", "park",
    "heart", "night", "moment", "weekend", "morning", "evening", "family", "group",
    "meeting", "conference", "event", "community", "board", "band", "army",
}


@dataclass(frozen=True)
class MatchContext:
    """The full (normalized) input a rule matched against."""

    text: str

    def _sentence_bounds(self, pos: int) -> tuple[int, int]:
        start = 0
        for m in _SENTENCE_END.finditer(self.text, 0, pos):
            start = m.end()
        nxt = _SENTENCE_END.search(self.text, pos)
        return start, nxt.start() if nxt else len(self.text)

    def sentence_at(self, pos: int) -> str:
        start, end = self._sentence_bounds(pos)
        return self.text[start:end].strip()

    def rest_of_sentence(self, pos: int) -> str:
        _, end = self._sentence_bounds(pos)
        return self.text[pos:end]


Extractor = Callable[[re.Match, MatchContext], list[ConversationAction]]


@dataclass(frozen=True)
class PatternRule:
    name: str
    pattern: re.Pattern
    extract: Extractor

    def apply(self, text: str) -> list[ConversationAction]:
        """Run this rule alone over ``text``."""
        ctx = MatchContext(text)
        actions: list[ConversationAction] = []
        for match in self.pattern.finditer(text):
            actions.extend(self.extract(match, ctx))
        return actions


@dataclass(frozen=True)
class PatternFamily:
    action_type: ActionType
    rules: tuple[PatternRule, ...] = field(default_factory=tuple)


# --- cleanup helpers ---


def _cut(raw: str, stops: re.Pattern) -> str:
    end = _SENTENCE_END.search(raw)
    if end:
        raw = raw[: end.start()]
    stop = stops.search(raw)
    if stop:
        raw = raw[: stop.start()]
    return raw


def clean_entity(raw: str) -> str:
    """Strip punctuation, leading articles and trailing connector words."""
    value = _DISALLOWED.sub("", raw)
    value = re.sub(r"\s+", " ", value).strip()
    value = _LEADING.sub("", value)
    value = _TRAILING.sub("", value)
    return value.rstrip(".-/& ").strip()


def clean_phrase(raw: str) -> str:
    """Looser cleanup for goal titles, keeping currency, percent and apostrophes."""
    value = _GOAL_DISALLOWED.sub("", raw)
    value = re.sub(r"\s+", " ", value).strip()
    value = _TRAILING.sub("", value)
    return value.rstrip(".-/& ").strip()


def is_valid_entity(value: str) -> bool:
    return len(value) > 1 and value.lower() not in STOP_ENTITIES and not value.isdigit()


def is_valid_org(value: str) -> bool:
    return is_valid_entity(value) and value.lower() not in GENERIC_ORGS


def _clean_role(raw: str | None) -> str | None:
    if not raw:
        return None
    role = clean_entity(_cut(raw, _ROLE_STOPS))
    if not is_valid_entity(role) or _NON_ROLE_WORDS.search(role):
        return None
    return role


def _role_after(sentence: str, org: str) -> str | None:
    match = re.search(
        rf"{re.escape(org)}(?!\w).*?\bas\s+(?:an?\s+)?([A-Za-z][A-Za-z\s\-]*)", sentence, re.IGNORECASE
    )
    return _clean_role(match.group(1)) if match else None


# --- skills ---


def _skills(match: re.Match, ctx: MatchContext) -> list[ConversationAction]:
    raw = _cut(match.group(1), _SKILL_STOPS)
    actions = []
    for part in _CONNECTORS.split(raw):
        name = clean_entity(part)
        if not is_valid_entity(name):
            continue
        actions.append(
            ConversationAction.build(
                ActionType.SKILL,
                name,
                proficiency=infer_proficiency(ctx.text, name),
                experience=infer_experience(ctx.text, name),
            )
        )
    return actions


SKILL_RULES = (
    PatternRule(
        "skill_phrase",
        re.compile(
            r"\b(?:i know|i can code in|i can use|i'?m good at|i am good at|i'?ve worked with|"
            r"i have worked with|i use|i'?m skilled in|i am skilled in|skilled in|add skill|"
            r"i'?ve learned|i learned|(?:years? of )?experience (?:with|in))\s+" + _SKILL_CAPTURE,
            re.IGNORECASE,
        ),
        _skills,
    ),
    PatternRule(
        "skill_list",
        re.compile(
            r"\b(?:my skills include|my skills are|skills include|skills:|my stack is|"
            r"my tech stack includes)\s*" + _SKILL_LIST_CAPTURE,
            re.IGNORECASE,
        ),
        _skills,
    ),
    PatternRule(
        "skill_level",
        re.compile(
            r"\b(?:proficient in|expert in|expert at|advanced in|beginner in|fluent in)\s+"
            + _SKILL_CAPTURE,
            re.IGNORECASE,
        ),
        _skills,
    ),
)


# --- companies ---


def _company(org_raw: str, role: str | None, match: re.Match, ctx: MatchContext):
    org = clean_entity(_cut(org_raw, _ORG_STOPS))
    if not is_valid_org(org):
        return []
    sentence = ctx.sentence_at(match.start())
    start, end = infer_date_span(sentence)
    return [
        ConversationAction.build(
            ActionType.COMPANY,
            org,
            role=role or _role_after(sentence, org),
            industry=infer_industry(sentence, org),
            start_date=start,
            end_date=end,
        )
    ]


def _employer(match: re.Match, ctx: MatchContext) -> list[ConversationAction]:
    return _company(match.group(1), None, match, ctx)


def _role_at_employer(match: re.Match, ctx: MatchContext) -> list[ConversationAction]:
    role = _clean_role(match.group(1))
    if role is None:
        return []
    return _company(match.group(2), role, match, ctx)


COMPANY_RULES = (
    PatternRule(
        "employer",
        re.compile(
            r"\b(?:i work at|i worked at|i'?m working at|i am working at|employed at|employed by|"
            r"job at|i work for|i worked for|worked for|i joined)\s+" + _ORG_CAPTURE,
            re.IGNORECASE,
        ),
        _employer,
    ),
    PatternRule(
        "role_at_employer",
        re.compile(
            r"\b(?:my (?:current )?role is(?: an?)?|i'?m an?|i am an?|i work as(?: an?)?|"
            r"i'?m working as(?: an?)?)\s+((?:[A-Za-z][\w\-]*\s+){0,4}?[A-Za-z][\w\-]*)\s+"
            r"(?:at|for)\s+" + _ORG_CAPTURE,
            re.IGNORECASE,
        ),
        _role_at_employer,
    ),
)


# --- education ---


def _education(inst_raw: str, match: re.Match, ctx: MatchContext, **details):
    institution = clean_entity(_cut(inst_raw, _ORG_STOPS))
    if not is_valid_org(institution):
        return []
    rest = ctx.rest_of_sentence(match.start())
    return [
        ConversationAction.build(
            ActionType.EDUCATION,
            institution,
            end_date=infer_graduation_year(rest),
            **details,
        )
    ]


def _institution(match: re.Match, ctx: MatchContext) -> list[ConversationAction]:
    return _education(match.group(1), match, ctx)


def _degree_from(match: re.Match, ctx: MatchContext) -> list[ConversationAction]:
    raw = re.sub(r"\s+", " ", match.group(1)).strip()
    if not _DEGREE_WORDS.search(raw):
        return []
    parts = re.split(r"\s+in\s+", raw, maxsplit=1)
    degree = parts[0].strip() or None
    field_of_study = parts[1] if len(parts) > 1 else ""
    if degree and degree.lower() in ("degree", "a degree"):
        degree = None
    return _education(
        match.group(2),
        match,
        ctx,
        degree=degree,
        field_of_study=field_of_study.strip() or None,
    )


def _field_at(match: re.Match, ctx: MatchContext) -> list[ConversationAction]:
    field_of_study = clean_entity(match.group(1))
    return _education(
        match.group(2),
        match,
        ctx,
        field_of_study=field_of_study if is_valid_entity(field_of_study) else None,
    )


EDUCATION_RULES = (
    PatternRule(
        "institution",
        re.compile(
            r"\b(?:i studied at|studied at|i graduated from|graduated from|i went to school at|"
            r"i attended|attended|i'?m studying at|i am studying at|enrolled at)\s+" + _ORG_CAPTURE,
            re.IGNORECASE,
        ),
        _institution,
    ),
    PatternRule(
        "degree_from",
        re.compile(
            r"\b(?:have an?|hold an?|got my|got an?|earned my|earned an?|"
            r"received my|received an?|completed my|did my)\s+"
            r"([A-Za-z][A-Za-z'\s\.\-]*?)\s+(?:degree\s+)?(?:from|at)\s+" + _ORG_CAPTURE,
            re.IGNORECASE,
        ),
        _degree_from,
    ),
    PatternRule(
        "field_at",
        re.compile(
            r"\b(?:i studied|i majored in)\s+([A-Za-z][A-Za-z\s\-]*?)\s+at\s+" + _ORG_CAPTURE,
            re.IGNORECASE,
        ),
        _field_at,
    ),
)


# --- objectives ---


def _goal_fields(title: str, match: re.Match, ctx: MatchContext) -> dict:
    sentence = ctx.sentence_at(match.start())
    return {
        "category": infer_objective_category(title),
        "priority": infer_priority(sentence),
        "timeframe": infer_goal_timeframe(sentence),
        "target_date": infer_target_date(ctx.rest_of_sentence(match.start())),
    }


def _objective(match: re.Match, ctx: MatchContext) -> list[ConversationAction]:
    raw = match.group(1)
    stop = _GOAL_STOPS.search(raw)
    if stop:
        raw = raw[: stop.start()]
    title = clean_phrase(raw)
    if not is_valid_entity(title):
        return []
    return [
        ConversationAction.build(ActionType.OBJECTIVE, title, **_goal_fields(title, match, ctx))
    ]


OBJECTIVE_RULES = (
    PatternRule(
        "intent",
        re.compile(
            r"\b(?:my goal is to|my objective is to|my aim is to|i want to|i plan to|"
            r"i'?m planning to|i am planning to|i aim to|i hope to|i'?d like to|"
            r"i would like to|i intend to)\s+([^.!?\n]+)",
            re.IGNORECASE,
        ),
        _objective,
    ),
    PatternRule(
        "labelled_goal",
        re.compile(r"\b(?:goal|objective)s?:\s*([^.!?\n]+)", re.IGNORECASE),
        _objective,
    ),
)


# --- key results ---


def _key_result(match: re.Match, ctx: MatchContext) -> list[ConversationAction]:
    unit = match.group("unit")
    if not is_unit_word(unit):
        unit = None
    end = match.end("unit") if unit else max(match.end("num"), match.end("mag"))
    title = clean_phrase(ctx.text[match.start() : end])
    if not is_valid_entity(title):
        return []
    value, unit, measurement = parse_target(
        match.group("num"), match.group("mag"), match.group("cur"), unit
    )
    return [
        ConversationAction.build(
            ActionType.KEY_RESULT,
            title,
            **_goal_fields(title, match, ctx),
            target_value=value,
            unit=unit,
            measurement_type=measurement,
        )
    ]


_NUMBER_RE = re.compile(_NUMBER)


def _labelled_key_result(match: re.Match, ctx: MatchContext) -> list[ConversationAction]:
    title = clean_phrase(match.group(1))
    if not is_valid_entity(title):
        return []
    number = _NUMBER_RE.search(title)
    if number:
        unit = number.group("unit") if is_unit_word(number.group("unit")) else None
        value, unit, measurement = parse_target(
            number.group("num"), number.group("mag"), number.group("cur"), unit
        )
    else:
        value, unit, measurement = parse_target(None)
    return [
        ConversationAction.build(
            ActionType.KEY_RESULT,
            title,
            **_goal_fields(title, match, ctx),
            target_value=value,
            unit=unit,
            measurement_type=measurement,
        )
    ]


KEY_RESULT_RULES = (
    PatternRule(
        "change_to_target",
        re.compile(
            r"\b(?:increase|grow|raise|boost|improve|reduce|decrease|cut|lower|double|triple)\s+"
            r"(?:my\s+|our\s+|the\s+)?[A-Za-z][A-Za-z\s\-]*?\s+(?:to|by)\s+" + _NUMBER,
            re.IGNORECASE,
        ),
        _key_result,
    ),
    PatternRule(
        "count_target",
        re.compile(
            r"\b(?:reach|hit|achieve|get to|gain|acquire|sign|land|hire|ship|publish|close|"
            r"complete|run|read|write|save|earn|raise)\s+" + _NUMBER,
            re.IGNORECASE,
        ),
        _key_result,
    ),
    PatternRule(
        "labelled_key_result",
        re.compile(r"\b(?:key results?|kr):\s*([^.!?\n]+)", re.IGNORECASE),
        _labelled_key_result,
    ),
)


FAMILIES: tuple[PatternFamily, ...] = (
    PatternFamily(ActionType.SKILL, SKILL_RULES),
    PatternFamily(ActionType.COMPANY, COMPANY_RULES),
    PatternFamily(ActionType.EDUCATION, EDUCATION_RULES),
    PatternFamily(ActionType.OBJECTIVE, OBJECTIVE_RULES),
    PatternFamily(ActionType.KEY_RESULT, KEY_RESULT_RULES),
)
