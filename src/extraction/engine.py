"""Rule-based extraction of candidate profile facts from narrated text."""

import structlog

from .models import ConversationAction
from .patterns import FAMILIES, PatternFamily, MatchContext

logger = structlog.get_logger()


def normalize(text: str) -> str:
    """Fold typographic quotes so rules only have to handle ASCII apostrophes."""
    return text.replace("’", "'").replace("‘", "'").replace("“", '"').replace("”", '"')


class ExtractionEngine:
    """Runs every pattern family over a text and collects candidate actions.

    Holds only the (immutable) family tables, so one instance can be shared
    across threads. Overlapping matches from different families are all
    kept; duplicates are settled when the action is resolved.
    """

    def __init__(self, families: tuple[PatternFamily, ...] = FAMILIES):
        self.families = families

    def extract(self, text: str) -> list[ConversationAction]:
        if not isinstance(text, str) or not text.strip():
            return []

        normalized = normalize(text)
        ctx = MatchContext(normalized)
        actions: list[ConversationAction] = []
        for family in self.families:
            for rule in family.rules:
                for match in rule.pattern.finditer(normalized):
                    try:
                        actions.extend(rule.extract(match, ctx))
                    except ValueError as e:
                        logger.debug(
                            "extraction.rule_skipped",
                            family=family.action_type.value,
                            rule=rule.name,
                            error=str(e),
                        )

        logger.debug("extraction.done", text_length=len(text), actions=len(actions))
        return actions


_default_engine = ExtractionEngine()


def extract(text: str) -> list[ConversationAction]:
    """Extract candidate actions with the default rule tables."""
    return _default_engine.extract(text)
