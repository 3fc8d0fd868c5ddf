"""
Module: multichoice

Purpose:
    Typed view of H5P.MultiChoice content parameters. The archive layer
    keeps content.json as plain JSON; this module decodes it into frozen
    dataclasses and encodes it back with the same camelCase keys.

Key Classes:
    - AnswerTipsAndFeedback: Tip and per-answer feedback texts
    - AnswerOption: One answer (text + correct flag)
    - Behaviour: Retry/solution buttons, question type, pass percentage
    - UITranslations: Button and label texts
    - FeedbackRange: Score band with its feedback text
    - MultiChoiceParams: The whole parameter object

Dependencies:
    - dataclasses (std)
    - json (std)

Used By:
    - content.question_set.Question.multichoice()
    - content.builder.QuestionSetBuilder
    - content.validation.validate_multichoice
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

QUESTION_TYPES = ("auto", "multi", "single")


def _require_object(data: Any, what: str) -> dict:
    if not isinstance(data, dict):
        raise ValueError(f"{what} must be a JSON object, got {type(data).__name__}")
    return data


def _compact(d: Dict[str, Any]) -> Dict[str, Any]:
    """Drop keys whose value is None."""
    return {k: v for k, v in d.items() if v is not None}


@dataclass(frozen=True, slots=True)
class AnswerTipsAndFeedback:
    """Tip shown before answering, feedback shown after."""

    tip: Optional[str] = None
    chosen_feedback: Optional[str] = None
    not_chosen_feedback: Optional[str] = None

    def to_dict(self) -> dict:
        return _compact({
            "tip": self.tip,
            "chosenFeedback": self.chosen_feedback,
            "notChosenFeedback": self.not_chosen_feedback,
        })

    @classmethod
    def from_dict(cls, data: dict) -> AnswerTipsAndFeedback:
        data = _require_object(data, "tipsAndFeedback")
        return cls(
            tip=data.get("tip"),
            chosen_feedback=data.get("chosenFeedback"),
            not_chosen_feedback=data.get("notChosenFeedback"),
        )


@dataclass(frozen=True, slots=True)
class AnswerOption:
    """
    One answer of a multiple-choice question.

    `correct` keeps the JSON value as written; validate_multichoice() reports
    anything other than a boolean.

    Example:
        >>> AnswerOption("Paris", correct=True).to_dict()
        {'text': 'Paris', 'correct': True}
    """

    text: str
    correct: bool = False
    tips_and_feedback: Optional[AnswerTipsAndFeedback] = None

    def to_dict(self) -> dict:
        d: Dict[str, Any] = {"text": self.text, "correct": self.correct}
        if self.tips_and_feedback is not None:
            d["tipsAndFeedback"] = self.tips_and_feedback.to_dict()
        return d

    @classmethod
    def from_dict(cls, data: dict) -> AnswerOption:
        data = _require_object(data, "Answer")
        tips = data.get("tipsAndFeedback")
        return cls(
            text=data.get("text", ""),
            correct=data.get("correct", False),
            tips_and_feedback=AnswerTipsAndFeedback.from_dict(tips) if tips is not None else None,
        )


_BEHAVIOUR_KEYS: Tuple[Tuple[str, str], ...] = (
    ("enable_retry", "enableRetry"),
    ("enable_solutions_button", "enableSolutionsButton"),
    ("enable_check_button", "enableCheckButton"),
    ("type", "type"),
    ("single_point", "singlePoint"),
    ("random_answers", "randomAnswers"),
    ("pass_percentage", "passPercentage"),
    ("show_score_points", "showScorePoints"),
)


@dataclass(frozen=True, slots=True)
class Behaviour:
    """
    Behavioural settings. Unset values are omitted from the JSON so the
    player's own defaults apply.

    Attributes:
        type: "auto", "multi" or "single"
        pass_percentage: Score (0-100) needed to pass
    """

    enable_retry: Optional[bool] = None
    enable_solutions_button: Optional[bool] = None
    enable_check_button: Optional[bool] = None
    type: Optional[str] = None
    single_point: Optional[bool] = None
    random_answers: Optional[bool] = None
    pass_percentage: Optional[int] = None
    show_score_points: Optional[bool] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        d = _compact({key: getattr(self, attr) for attr, key in _BEHAVIOUR_KEYS})
        d.update(self.extra)
        return d

    @classmethod
    def from_dict(cls, data: dict) -> Behaviour:
        data = _require_object(data, "behaviour")
        known = {key for _, key in _BEHAVIOUR_KEYS}
        return cls(
            **{attr: data.get(key) for attr, key in _BEHAVIOUR_KEYS},
            extra={k: v for k, v in data.items() if k not in known},
        )


_UI_KEYS: Tuple[Tuple[str, str], ...] = (
    ("check_answer_button", "checkAnswerButton"),
    ("show_solution_button", "showSolutionButton"),
    ("try_again_button", "tryAgainButton"),
    ("tips_label", "tipsLabel"),
    ("score_bar_label", "scoreBarLabel"),
    ("tip_available", "tipAvailable"),
    ("feedback_available", "feedbackAvailable"),
    ("read_feedback", "readFeedback"),
    ("wrong_answer", "wrongAnswer"),
    ("correct_answer", "correctAnswer"),
)


@dataclass(frozen=True, slots=True)
class UITranslations:
    """Player texts; anything left None falls back to the player default."""

    check_answer_button: Optional[str] = None
    show_solution_button: Optional[str] = None
    try_again_button: Optional[str] = None
    tips_label: Optional[str] = None
    score_bar_label: Optional[str] = None
    tip_available: Optional[str] = None
    feedback_available: Optional[str] = None
    read_feedback: Optional[str] = None
    wrong_answer: Optional[str] = None
    correct_answer: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        d = _compact({key: getattr(self, attr) for attr, key in _UI_KEYS})
        d.update(self.extra)
        return d

    @classmethod
    def from_dict(cls, data: dict) -> UITranslations:
        data = _require_object(data, "UI")
        known = {key for _, key in _UI_KEYS}
        return cls(
            **{attr: data.get(key) for attr, key in _UI_KEYS},
            extra={k: v for k, v in data.items() if k not in known},
        )


@dataclass(frozen=True, slots=True)
class FeedbackRange:
    """Feedback for scores from `from_score` to `to_score` percent, inclusive."""

    from_score: int
    to_score: int
    feedback: str = ""

    def to_dict(self) -> dict:
        d: Dict[str, Any] = {"from": self.from_score, "to": self.to_score}
        if self.feedback:
            d["feedback"] = self.feedback
        return d

    @classmethod
    def from_dict(cls, data: dict) -> FeedbackRange:
        data = _require_object(data, "Feedback range")
        return cls(
            from_score=data.get("from", 0),
            to_score=data.get("to", 0),
            feedback=data.get("feedback", ""),
        )


@dataclass(frozen=True, slots=True)
class MediaGroup:
    """Optional media shown above the question."""

    type: Optional[Any] = None
    disable_image_zooming: Optional[bool] = None

    def to_dict(self) -> dict:
        return _compact({"type": self.type, "disableImageZooming": self.disable_image_zooming})

    @classmethod
    def from_dict(cls, data: dict) -> MediaGroup:
        data = _require_object(data, "media")
        return cls(type=data.get("type"), disable_image_zooming=data.get("disableImageZooming"))


_PARAMS_KEYS = frozenset({"media", "question", "answers", "overallFeedback", "behaviour", "UI"})


@dataclass(frozen=True, slots=True)
class MultiChoiceParams:
    """
    H5P.MultiChoice content parameters.

    Overall feedback is stored by H5P as
    {"overallFeedback": {"overallFeedback": [ranges]}}; `overall_feedback`
    holds the inner list directly.

    Example:
        >>> params = MultiChoiceParams(
        ...     question="Capital of France?",
        ...     answers=(AnswerOption("Paris", True), AnswerOption("London")),
        ... )
        >>> params.correct_answers
        (AnswerOption(text='Paris', correct=True, tips_and_feedback=None),)
    """

    question: str
    answers: Tuple[AnswerOption, ...] = ()
    media: Optional[MediaGroup] = None
    overall_feedback: Tuple[FeedbackRange, ...] = ()
    behaviour: Optional[Behaviour] = None
    ui: Optional[UITranslations] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def correct_answers(self) -> Tuple[AnswerOption, ...]:
        return tuple(answer for answer in self.answers if answer.correct is True)

    def to_dict(self) -> dict:
        d: Dict[str, Any] = {}
        if self.media is not None:
            d["media"] = self.media.to_dict()
        d["question"] = self.question
        d["answers"] = [answer.to_dict() for answer in self.answers]
        if self.overall_feedback:
            d["overallFeedback"] = {
                "overallFeedback": [band.to_dict() for band in self.overall_feedback]
            }
        if self.behaviour is not None:
            d["behaviour"] = self.behaviour.to_dict()
        if self.ui is not None:
            d["UI"] = self.ui.to_dict()
        d.update(self.extra)
        return d

    @classmethod
    def from_dict(cls, data: dict) -> MultiChoiceParams:
        """
        Deserialize from a content.json object.

        Raises:
            ValueError: If data, or one of its nested objects, is not a JSON object
        """
        data = _require_object(data, "MultiChoice params")

        answers = data.get("answers") or []
        if not isinstance(answers, list):
            raise ValueError("answers must be a JSON array")

        ranges: list = []
        overall = data.get("overallFeedback")
        if overall is not None:
            ranges = _require_object(overall, "overallFeedback").get("overallFeedback") or []

        media = data.get("media")
        behaviour = data.get("behaviour")
        ui = data.get("UI")
        return cls(
            question=data.get("question", ""),
            answers=tuple(AnswerOption.from_dict(answer) for answer in answers),
            media=MediaGroup.from_dict(media) if media is not None else None,
            overall_feedback=tuple(FeedbackRange.from_dict(band) for band in ranges),
            behaviour=Behaviour.from_dict(behaviour) if behaviour is not None else None,
            ui=UITranslations.from_dict(ui) if ui is not None else None,
            extra={k: v for k, v in data.items() if k not in _PARAMS_KEYS},
        )

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> MultiChoiceParams:
        """
        Raises:
            ValueError: If text is not valid JSON or not a params object
        """
        return cls.from_dict(json.loads(text))
