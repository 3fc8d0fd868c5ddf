"""
Content Package

Typed content models for the question types this toolkit authors, a
fluent builder and content-level validation. The archive layer never
imports from here: content.json stays plain JSON until decoded.
"""

from .builder import (
    QuestionSetBuilder,
    create_answer,
    create_answer_with_feedback,
    create_feedback_range,
)
from .images import add_content_image, detect_image
from .multichoice import (
    AnswerOption,
    AnswerTipsAndFeedback,
    Behaviour,
    MultiChoiceParams,
    UITranslations,
)
from .question_set import BackgroundImage, Copyright, FeedbackRange, Question, QuestionSet
from .validation import validate_content, validate_multichoice, validate_question_set

__all__ = [
    "QuestionSetBuilder",
    "create_answer",
    "create_answer_with_feedback",
    "create_feedback_range",
    "add_content_image",
    "detect_image",
    "AnswerOption",
    "AnswerTipsAndFeedback",
    "Behaviour",
    "MultiChoiceParams",
    "UITranslations",
    "BackgroundImage",
    "Copyright",
    "FeedbackRange",
    "Question",
    "QuestionSet",
    "validate_content",
    "validate_multichoice",
    "validate_question_set",
]
