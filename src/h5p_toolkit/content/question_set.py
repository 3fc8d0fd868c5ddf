"""
Module: question_set

Purpose:
    Typed view of H5P.QuestionSet content: a sequence of sub-questions, each
    naming the library that renders it and carrying that library's params,
    plus pass percentage, intro/result page settings and score feedback.

Key Classes:
    - QuestionSet: The content.json object
    - Question: {"library": "H5P.MultiChoice 1.16", "params": {...}}
    - BackgroundImage / Copyright: Image reference under content/
    - FeedbackRange: Score band with its text

Dependencies:
    - dataclasses (std)
    - json (std)
    - h5p_toolkit.core.models.library: LibraryDependency

Used By:
    - content.builder
    - content.validation
    - cli (parse-questionset)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from h5p_toolkit.core.models.library import LibraryDependency

from .multichoice import MultiChoiceParams, _compact, _require_object

MULTICHOICE_MACHINE_NAME = "MultiChoice"


@dataclass(frozen=True, slots=True)
class Copyright:
    title: Optional[str] = None
    author: Optional[str] = None
    license: Optional[str] = None
    version: Optional[str] = None
    source: Optional[str] = None

    def to_dict(self) -> dict:
        return _compact({
            "title": self.title,
            "author": self.author,
            "license": self.license,
            "version": self.version,
            "source": self.source,
        })

    @classmethod
    def from_dict(cls, data: dict) -> Copyright:
        data = _require_object(data, "copyright")
        return cls(
            title=data.get("title"),
            author=data.get("author"),
            license=data.get("license"),
            version=data.get("version"),
            source=data.get("source"),
        )


@dataclass(frozen=True, slots=True)
class BackgroundImage:
    """
    Image stored in the package content files.

    Attributes:
        path: Path relative to content/, e.g. "images/map.png"
        mime: MIME type, e.g. "image/png"
        width / height: Pixel size, when known
    """

    path: str
    mime: str
    copyright: Optional[Copyright] = None
    width: Optional[int] = None
    height: Optional[int] = None

    def to_dict(self) -> dict:
        d: Dict[str, Any] = {"path": self.path, "mime": self.mime}
        if self.copyright is not None:
            d["copyright"] = self.copyright.to_dict()
        if self.width is not None:
            d["width"] = self.width
        if self.height is not None:
            d["height"] = self.height
        return d

    @classmethod
    def from_dict(cls, data: dict) -> BackgroundImage:
        data = _require_object(data, "backgroundImage")
        copyright = data.get("copyright")
        return cls(
            path=data.get("path", ""),
            mime=data.get("mime", ""),
            copyright=Copyright.from_dict(copyright) if copyright is not None else None,
            width=data.get("width"),
            height=data.get("height"),
        )


@dataclass(frozen=True, slots=True)
class FeedbackRange:
    """Text shown for overall scores from `from_score` to `to_score`, inclusive."""

    from_score: int
    to_score: int
    text: str = ""

    def to_dict(self) -> dict:
        return {"from": self.from_score, "to": self.to_score, "text": self.text}

    @classmethod
    def from_dict(cls, data: dict) -> FeedbackRange:
        data = _require_object(data, "Feedback range")
        return cls(
            from_score=data.get("from", 0),
            to_score=data.get("to", 0),
            text=data.get("text", ""),
        )


@dataclass(frozen=True, slots=True)
class Question:
    """
    One question of a set.

    `params` stays plain JSON because its shape depends on `library`;
    multichoice() decodes it for MultiChoice questions.

    Example:
        >>> q = Question("H5P.MultiChoice 1.16", {"question": "2 + 2?", "answers": []})
        >>> q.dependency.machine_name
        'H5P.MultiChoice'
        >>> q.is_multichoice
        True
    """

    library: str
    params: Any = None

    @property
    def dependency(self) -> LibraryDependency:
        """
        Raises:
            ValueError: If library is not "<machineName> <major>.<minor>"
        """
        return LibraryDependency.parse(self.library)

    @property
    def is_multichoice(self) -> bool:
        """True for any library whose machine name ends in ".MultiChoice"."""
        if not isinstance(self.library, str):
            return False
        name = self.library.split(" ", 1)[0]
        return name.rsplit(".", 1)[-1] == MULTICHOICE_MACHINE_NAME

    def multichoice(self) -> MultiChoiceParams:
        """
        Decode params as MultiChoice parameters.

        Raises:
            ValueError: If this is not a MultiChoice question or params are malformed
        """
        if not self.is_multichoice:
            raise ValueError(f"Question uses {self.library!r}, not a MultiChoice library")
        return MultiChoiceParams.from_dict(self.params)

    def to_dict(self) -> dict:
        params = self.params.to_dict() if isinstance(self.params, MultiChoiceParams) else self.params
        return {"library": self.library, "params": params}

    @classmethod
    def from_dict(cls, data: dict) -> Question:
        data = _require_object(data, "Question")
        return cls(library=data.get("library", ""), params=data.get("params"))


_SCALAR_KEYS: Tuple[Tuple[str, str], ...] = (
    ("title", "title"),
    ("progress_type", "progressType"),
    ("pass_percentage", "passPercentage"),
    ("show_intro_page", "showIntroPage"),
    ("start_button_text", "startButtonText"),
    ("introduction", "introduction"),
    ("show_result_page", "showResultPage"),
    ("message", "message"),
    ("solution_button_text", "solutionButtonText"),
)

_KNOWN_KEYS = frozenset(key for _, key in _SCALAR_KEYS) | {
    "backgroundImage", "questions", "overallFeedback",
}


@dataclass(frozen=True, slots=True)
class QuestionSet:
    """
    H5P.QuestionSet content.

    Attributes:
        questions: Ordered questions
        progress_type: "dots" or "textual"
        pass_percentage: Overall score (0-100) needed to pass
        show_intro_page / introduction / start_button_text: Intro page
        show_result_page / message / solution_button_text: Result page
        overall_feedback: Score bands shown on the result page
        extra: Unmodelled keys, written back unchanged
    """

    questions: Tuple[Question, ...] = ()
    title: Optional[str] = None
    progress_type: Optional[str] = None
    pass_percentage: Optional[int] = None
    background_image: Optional[BackgroundImage] = None
    show_intro_page: Optional[bool] = None
    start_button_text: Optional[str] = None
    introduction: Optional[str] = None
    show_result_page: Optional[bool] = None
    message: Optional[str] = None
    solution_button_text: Optional[str] = None
    overall_feedback: Tuple[FeedbackRange, ...] = ()
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        d = _compact({key: getattr(self, attr) for attr, key in _SCALAR_KEYS})
        if self.background_image is not None:
            d["backgroundImage"] = self.background_image.to_dict()
        d["questions"] = [question.to_dict() for question in self.questions]
        if self.overall_feedback:
            d["overallFeedback"] = [band.to_dict() for band in self.overall_feedback]
        d.update(self.extra)
        return d

    @classmethod
    def from_dict(cls, data: dict) -> QuestionSet:
        """
        Deserialize from a content.json object.

        Raises:
            ValueError: If data or a nested value has the wrong JSON type
        """
        data = _require_object(data, "Question set")
        questions = data.get("questions") or []
        ranges = data.get("overallFeedback") or []
        if not isinstance(questions, list):
            raise ValueError("questions must be a JSON array")
        if not isinstance(ranges, list):
            raise ValueError("overallFeedback must be a JSON array")

        image = data.get("backgroundImage")
        return cls(
            questions=tuple(Question.from_dict(q) for q in questions),
            background_image=BackgroundImage.from_dict(image) if image is not None else None,
            overall_feedback=tuple(FeedbackRange.from_dict(band) for band in ranges),
            extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
            **{attr: data.get(key) for attr, key in _SCALAR_KEYS},
        )

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> QuestionSet:
        """
        Raises:
            ValueError: If text is not valid JSON or not a question set object
        """
        return cls.from_dict(json.loads(text))
