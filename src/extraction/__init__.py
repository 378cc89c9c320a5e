"""Pattern extraction of candidate profile facts."""

from .engine import ExtractionEngine, extract
from .models import ConversationAction

__all__ = ["ConversationAction", "ExtractionEngine", "extract"]
