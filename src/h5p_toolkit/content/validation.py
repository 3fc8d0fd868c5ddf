"""
Content Validation

Rule checks for MultiChoice params and QuestionSet content. Like
validate_package(), every rule runs and each violation is recorded, so a
payload with no correct answer AND a bad pass percentage reports both.

Field names in issues use the JSON keys, e.g. "behaviour.passPercentage" or
"questions[0].params.answers[1].text".
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from h5p_toolkit.core.schemas.validator import ValidationResult

from .multichoice import QUESTION_TYPES, MultiChoiceParams
from .question_set import QuestionSet

logger = logging.getLogger(__name__)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_percentage(value: Any, field: str, result: ValidationResult) -> None:
    if not _is_int(value) or not 0 <= value <= 100:
        result.add_error(field, "Pass percentage must be an integer between 0 and 100", value)


def _check_feedback_ranges(ranges: Sequence[Any], prefix: str, result: ValidationResult) -> None:
    """
    Each range needs from <= to within 0..100; valid ranges must not overlap.

    Ranges are inclusive, so 0-50 and 50-100 overlap while 0-50 and 51-100 do not.
    """
    valid = []
    for i, band in enumerate(ranges):
        field = f"{prefix}[{i}]"
        low, high = band.from_score, band.to_score
        if not _is_int(low) or not _is_int(high):
            result.add_error(field, "Feedback range bounds must be integers", (low, high))
            continue
        if low > high:
            result.add_error(field, f"Feedback range 'from' ({low}) is greater than 'to' ({high})", (low, high))
            continue
        if low < 0 or high > 100:
            result.add_error(field, "Feedback range must lie within 0 to 100", (low, high))
            continue
        valid.append((low, high, i))

    valid.sort()
    for (_, prev_high, prev_i), (low, high, i) in zip(valid, valid[1:]):
        if low <= prev_high:
            result.add_error(
                f"{prefix}[{i}]",
                f"Feedback range overlaps {prefix}[{prev_i}]",
                (low, high),
            )


def validate_multichoice(params: MultiChoiceParams, prefix: str = "") -> ValidationResult:
    """
    Validate MultiChoice parameters.

    Args:
        params: Decoded parameters
        prefix: Prepended to every field name, e.g. "questions[0].params."

    Returns:
        ValidationResult with every issue found

    Example:
        >>> from h5p_toolkit.content.multichoice import AnswerOption
        >>> result = validate_multichoice(MultiChoiceParams("Q?", (AnswerOption("A"),)))
        >>> [issue.field for issue in result.errors]
        ['answers']
    """
    result = ValidationResult()

    if not isinstance(params.question, str) or not params.question.strip():
        result.add_error(f"{prefix}question", "Question text is required", params.question)

    if not params.answers:
        result.add_error(f"{prefix}answers", "At least one answer is required")
    else:
        for i, answer in enumerate(params.answers):
            if not isinstance(answer.text, str) or not answer.text.strip():
                result.add_error(f"{prefix}answers[{i}].text", "Answer text cannot be empty", answer.text)
            if not isinstance(answer.correct, bool):
                result.add_error(
                    f"{prefix}answers[{i}].correct", "Correct flag must be true or false", answer.correct
                )
        if not params.correct_answers:
            result.add_error(f"{prefix}answers", "At least one answer must be marked as correct")

    behaviour = params.behaviour
    if behaviour is not None:
        if behaviour.type is not None and behaviour.type not in QUESTION_TYPES:
            result.add_error(
                f"{prefix}behaviour.type",
                f"Invalid question type {behaviour.type!r} (expected auto, multi or single)",
                behaviour.type,
            )
        if behaviour.pass_percentage is not None:
            _check_percentage(behaviour.pass_percentage, f"{prefix}behaviour.passPercentage", result)

    _check_feedback_ranges(params.overall_feedback, f"{prefix}overallFeedback", result)
    return result


def validate_question_set(question_set: QuestionSet) -> ValidationResult:
    """
    Validate a question set and every MultiChoice question in it.

    Questions using other libraries only have their library reference
    checked; their params are opaque here.
    """
    result = ValidationResult()

    if not question_set.questions:
        result.add_error("questions", "Question set must have at least one question")

    if question_set.pass_percentage is not None:
        _check_percentage(question_set.pass_percentage, "passPercentage", result)

    _check_feedback_ranges(question_set.overall_feedback, "overallFeedback", result)

    for i, question in enumerate(question_set.questions):
        prefix = f"questions[{i}]"
        try:
            question.dependency
        except ValueError as e:
            result.add_error(f"{prefix}.library", str(e), question.library)
            continue

        if not question.is_multichoice:
            logger.debug(f"Skipping params check of {prefix} ({question.library})")
            continue
        try:
            params = question.multichoice()
        except ValueError as e:
            result.add_error(f"{prefix}.params", f"Cannot decode MultiChoice params: {e}")
            continue
        result.extend(validate_multichoice(params, prefix=f"{prefix}.params."))

    return result


def validate_content(content: Any) -> ValidationResult:
    """
    Validate a raw content.json payload.

    An object with a "questions" key is treated as a question set, any
    other object as MultiChoice params.
    """
    if not isinstance(content, dict):
        result = ValidationResult()
        result.add_error("content", f"Content must be a JSON object, got {type(content).__name__}")
        return result

    try:
        if "questions" in content:
            return validate_question_set(QuestionSet.from_dict(content))
        return validate_multichoice(MultiChoiceParams.from_dict(content))
    except ValueError as e:
        result = ValidationResult()
        result.add_error("content", f"Cannot decode content: {e}")
        return result
