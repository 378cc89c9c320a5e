"""Shared enums and types for profile-commits."""

from enum import StrEnum


class ActionType(StrEnum):
    SKILL = "skill"
    COMPANY = "company"
    EDUCATION = "education"
    OBJECTIVE = "objective"
    KEY_RESULT = "key_result"
    NONE = "none"


class CommitStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMMITTED = "committed"


class BatchStatus(StrEnum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class BatchType(StrEnum):
    LIVE_CONVERSATION = "live_conversation"
    VOICE_SESSION = "voice_session"
    CHAT_SESSION = "chat_session"
    DOCUMENT_UPLOAD = "document_upload"
    MANUAL = "manual"


class TargetLayer(StrEnum):
    SURFACE = "surface"
    PERSONAL = "personal"


class ExtractionMode(StrEnum):
    AUTO = "auto"
    MANUAL = "manual"


class InsightType(StrEnum):
    LIFE_COMMITMENT = "life_commitment"
    PROFESSIONAL_COMMITMENT = "professional_commitment"
    PERSONAL_GROWTH = "personal_growth"
    RELATIONSHIP_COMMITMENT = "relationship_commitment"
    SKILL_COMMITMENT = "skill_commitment"


class Intensity(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    LIFE_CHANGING = "life_changing"


class Timeframe(StrEnum):
    IMMEDIATE = "immediate"
    SHORT_TERM = "short_term"
    LONG_TERM = "long_term"
    LIFELONG = "lifelong"
