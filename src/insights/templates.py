"""Fixed, type-keyed text for commitment insights.

These are lookups, not generated text: each entry is formatted with the
insight's entity and nothing else.
"""

from shared_types import InsightType

# Phrases that open a commitment statement, per type
COMMITMENT_PHRASES: dict[InsightType, tuple[str, ...]] = {
    InsightType.LIFE_COMMITMENT: (
        "i want to become",
        "i'm dedicated to",
        "i will always",
        "my life's purpose",
        "i'm committed to",
        "i pledge to",
        "i promise to",
        "i've decided to",
        "i will never give up on",
        "this is my calling",
    ),
    InsightType.PROFESSIONAL_COMMITMENT: (
        "i want to work at",
        "i'm pursuing a career in",
        "i will master",
        "i'm building expertise in",
        "i want to lead",
        "i will become an expert in",
        "i'm transitioning to",
        "i will achieve",
    ),
    InsightType.PERSONAL_GROWTH: (
        "i want to improve",
        "i need to work on",
        "i will develop",
        "i must overcome",
        "i will learn",
        "i will change",
        "i want to be better at",
        "i'm working on myself",
    ),
    InsightType.RELATIONSHIP_COMMITMENT: (
        "i will support",
        "i want to be there for",
        "i will maintain",
        "i care about",
        "i will prioritize",
        "i want to connect with",
        "i will be present for",
    ),
    InsightType.SKILL_COMMITMENT: (
        "i will practice",
        "i will study",
        "i will train",
        "i will perfect",
        "i will hone",
        "i will develop my skills in",
        "i will become proficient in",
    ),
}

CATEGORIES: dict[InsightType, str] = {
    InsightType.LIFE_COMMITMENT: "Life Direction",
    InsightType.PROFESSIONAL_COMMITMENT: "Career Development",
    InsightType.PERSONAL_GROWTH: "Self Improvement",
    InsightType.RELATIONSHIP_COMMITMENT: "Relationships",
    InsightType.SKILL_COMMITMENT: "Skill Development",
}

SIGNIFICANCE: dict[InsightType, str] = {
    InsightType.LIFE_COMMITMENT: (
        'This represents a fundamental life direction that shapes identity and purpose. '
        'Committing to "{entity}" is a declaration of values and a choice about who you want to become.'
    ),
    InsightType.PROFESSIONAL_COMMITMENT: (
        'This professional commitment to "{entity}" reflects your dedication to craft mastery '
        "and contribution to society. It's about building competence and creating value through your work."
    ),
    InsightType.PERSONAL_GROWTH: (
        'This growth commitment to "{entity}" represents self-actualization and the courage to evolve. '
        "It's about becoming the best version of yourself and overcoming limitations."
    ),
    InsightType.RELATIONSHIP_COMMITMENT: (
        'This relational commitment to "{entity}" embodies the human need for connection and the '
        "willingness to invest in others. It's about building meaningful bonds and mutual support."
    ),
    InsightType.SKILL_COMMITMENT: (
        'This skill commitment to "{entity}" represents the pursuit of mastery and the dedication to '
        "continuous improvement. It's about developing competence and expanding capabilities."
    ),
}

ACTIONABLE_STEPS: dict[InsightType, tuple[str, ...]] = {
    InsightType.LIFE_COMMITMENT: (
        'Define what success looks like for "{entity}"',
        "Create a personal mission statement",
        "Identify daily practices that align with this commitment",
        "Set up accountability systems",
        "Review and adjust regularly",
    ),
    InsightType.PROFESSIONAL_COMMITMENT: (
        'Research the path to achieving "{entity}"',
        "Identify required skills and knowledge",
        "Network with professionals in the field",
        "Create a professional development plan",
        "Seek mentorship and guidance",
    ),
    InsightType.PERSONAL_GROWTH: (
        'Assess current state regarding "{entity}"',
        "Set specific, measurable goals",
        "Identify resources and support systems",
        "Create a practice schedule",
        "Track progress and celebrate milestones",
    ),
    InsightType.RELATIONSHIP_COMMITMENT: (
        'Prioritize time and energy for "{entity}"',
        "Communicate your commitment clearly",
        "Develop emotional intelligence",
        "Practice active listening",
        "Invest in shared experiences",
    ),
    InsightType.SKILL_COMMITMENT: (
        'Practice "{entity}" consistently',
        "Seek feedback from experts",
        "Study best practices and techniques",
        "Join communities of practice",
        "Apply skills in real-world scenarios",
    ),
}

RISK_FACTORS: dict[InsightType, tuple[str, ...]] = {
    InsightType.LIFE_COMMITMENT: (
        "May be too broad or vague to execute",
        "Could conflict with other life priorities",
        "Risk of burnout from over-commitment",
        "May evolve as life circumstances change",
    ),
    InsightType.PROFESSIONAL_COMMITMENT: (
        "Industry changes may affect relevance",
        "Requires significant time investment",
        "May face competition and setbacks",
        "Balancing with personal life challenges",
    ),
    InsightType.PERSONAL_GROWTH: (
        "Progress may be slow and non-linear",
        "Requires consistent self-discipline",
        "May face internal resistance to change",
        "Difficult to measure progress objectively",
    ),
    InsightType.RELATIONSHIP_COMMITMENT: (
        "Requires mutual investment from others",
        "May face conflicts and disagreements",
        "Time and energy constraints",
        "Relationships naturally evolve over time",
    ),
    InsightType.SKILL_COMMITMENT: (
        "Requires sustained practice and effort",
        "May plateau at intermediate levels",
        "Competing priorities may interfere",
        "Skill may become obsolete over time",
    ),
}

SUCCESS_METRICS: dict[InsightType, tuple[str, ...]] = {
    InsightType.LIFE_COMMITMENT: (
        "Alignment between daily actions and stated values",
        "Progress toward long-term life goals",
        "Sense of fulfillment and purpose",
        "Consistency in choices and behaviors",
    ),
    InsightType.PROFESSIONAL_COMMITMENT: (
        "Skill development and competency growth",
        "Career advancement opportunities",
        "Recognition from peers and industry",
        "Contribution to meaningful projects",
    ),
    InsightType.PERSONAL_GROWTH: (
        "Self-awareness and emotional intelligence",
        "Improved relationships and communication",
        "Increased resilience and adaptability",
        "Achievement of personal milestones",
    ),
    InsightType.RELATIONSHIP_COMMITMENT: (
        "Depth and quality of connections",
        "Mutual support and trust levels",
        "Shared experiences and memories",
        "Positive impact on others' lives",
    ),
    InsightType.SKILL_COMMITMENT: (
        "Measurable improvement in ability",
        "Application of skills in real scenarios",
        "Recognition of expertise by others",
        "Ability to teach or mentor others",
    ),
}

# (label, cue words); a label is added when any cue appears in the context window
INDICATOR_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Strong verbal commitment expressed", ("will", "committed")),
    ("Absolute language used, indicating high conviction", ("always", "never")),
    ("Necessity-based motivation detected", ("need", "must")),
    ("Desire-driven motivation present", ("want", "desire")),
    ("Conscious decision-making evident", ("decided", "choice")),
)
DEFAULT_INDICATOR = "Commitment pattern detected in conversation"

REFLECTIVE_QUESTIONS: dict[InsightType, tuple[str, ...]] = {
    InsightType.LIFE_COMMITMENT: (
        'What would change in your daily routine if "{entity}" were already true?',
        'Who do you want to be in five years because of "{entity}"?',
        'What are you willing to give up to make "{entity}" real?',
    ),
    InsightType.PROFESSIONAL_COMMITMENT: (
        'What is the next concrete step toward "{entity}" you can take this week?',
        'Who in your network has already achieved "{entity}"?',
        'Which skill stands between you and "{entity}" right now?',
    ),
    InsightType.PERSONAL_GROWTH: (
        'How will you know you have made progress on "{entity}"?',
        'What has held you back from "{entity}" so far?',
        'Who could keep you accountable for "{entity}"?',
    ),
    InsightType.RELATIONSHIP_COMMITMENT: (
        'What would "{entity}" look like on an ordinary Tuesday?',
        'How will the people involved know you are committed to "{entity}"?',
        'What boundary do you need to protect "{entity}"?',
    ),
    InsightType.SKILL_COMMITMENT: (
        'How much time each week will you set aside for "{entity}"?',
        'What small project would prove your progress in "{entity}"?',
        'Who could give you honest feedback on "{entity}"?',
    ),
}

NO_INSIGHT_REFLECTION = (
    "Every conversation contains seeds of commitment. "
    "The words we choose reveal the directions we want to grow."
)
REFLECTION_OPENING = "Your words reveal deep currents of commitment. "
REFLECTION_HIGH_INTENSITY = (
    "{count} high-intensity commitments detected - these are the declarations that shape destiny. "
)
REFLECTION_DIVERSITY = (
    "The diversity of your commitments shows a holistic approach to growth - professional, "
    "personal, and relational development are all interconnected. "
)
REFLECTION_CLOSING = (
    "Remember: commitment is not just about the destination, but about who you become on the "
    "journey. Each commitment is a choice to become more than you are today."
)
NO_INSIGHT_RESPONSE = (
    "Thanks for sharing. I didn't pick up any specific commitments this time; "
    "tell me more about what you want to work toward."
)
