"""Tests for follow-up suggestion rules."""

from edtech.services.suggestions import Intent, classify, resolve_intent


def test_lesson_intent_offers_quiz_and_rubric():
    suggestions = classify("Anything", "# Lesson Plan", Intent.LESSON)
    assert [s.action for s in suggestions] == ["quiz", "rubric"]
    assert all(s.prompt for s in suggestions)


def test_quiz_intent_offers_answer_key_follow_up():
    suggestions = classify("Anything", "1. What is 2+2?", "quiz")
    assert [s.action for s in suggestions] == ["chat"]


def test_keyword_match_when_no_intent_declared():
    assert resolve_intent(None, "Can you write a Lesson Plan on volcanoes?") is Intent.LESSON
    assert resolve_intent(None, "Make a quiz about volcanoes") is Intent.QUIZ
    assert resolve_intent(None, "Tell me about volcanoes") is Intent.NONE


def test_declared_intent_wins_over_keywords():
    assert resolve_intent(Intent.QUIZ, "lesson plan please") is Intent.QUIZ


def test_no_suggestions_for_plain_chat():
    assert classify("How are you?", "Fine, thanks.") == []


def test_no_suggestions_for_empty_response():
    assert classify("lesson plan", "   ", Intent.LESSON) == []


def test_suggestions_are_fresh_copies():
    first = classify("x", "y", Intent.LESSON)
    first[0].label = "changed"
    assert classify("x", "y", Intent.LESSON)[0].label != "changed"


def test_declared_none_skips_keyword_match():
    assert resolve_intent(Intent.NONE, "Rubric for the unit quiz") is Intent.NONE
    assert classify("Rubric for the unit quiz", "| Criteria |", Intent.NONE) == []
