"""Follow-up suggestions derived from a completed exchange."""

from enum import Enum

from edtech.schemas.chat import Suggestion


class Intent(str, Enum):
    LESSON = "lesson"
    QUIZ = "quiz"
    NONE = "none"


# Checked in order; first match wins
KEYWORD_RULES: list[tuple[str, Intent]] = [
    ("lesson plan", Intent.LESSON),
    ("quiz", Intent.QUIZ),
]

SUGGESTION_RULES: dict[Intent, list[Suggestion]] = {
    Intent.LESSON: [
        Suggestion(
            label="Generate a quiz from this",
            action="quiz",
            prompt="Create a quiz that assesses the objectives of the lesson plan above. Include an answer key.",
        ),
        Suggestion(
            label="Generate a rubric from this",
            action="rubric",
            prompt="Create a grading rubric for the main activity of the lesson plan above.",
        ),
    ],
    Intent.QUIZ: [
        Suggestion(
            label="Explain the answer key",
            action="chat",
            prompt="Explain the reasoning behind each answer in the answer key above.",
        ),
    ],
    Intent.NONE: [],
}


def resolve_intent(declared: Intent | str | None, user_text: str) -> Intent:
    """
    A declared intent wins, `none` included; generators always declare one.
    Undeclared (None) turns are matched against the keyword table.
    """
    if declared is not None:
        return Intent(declared)
    lowered = user_text.lower()
    for keyword, intent in KEYWORD_RULES:
        if keyword in lowered:
            return intent
    return Intent.NONE


def suggestions_for(intent: Intent) -> list[Suggestion]:
    """Fresh copies of the suggestions offered for an intent."""
    return [s.model_copy() for s in SUGGESTION_RULES[intent]]


def classify(user_text: str, response_text: str, declared: Intent | str | None = None) -> list[Suggestion]:
    """Suggestions to attach to the assistant message that answered `user_text`."""
    if not response_text.strip():
        return []
    return suggestions_for(resolve_intent(declared, user_text))
