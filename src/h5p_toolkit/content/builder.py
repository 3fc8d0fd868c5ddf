"""
Module: builder

Purpose:
    Fluent construction of QuestionSet content.

Key Classes:
    - QuestionSetBuilder: Chainable setters, build() returns a QuestionSet

Key Functions:
    - create_answer(): Plain answer option
    - create_answer_with_feedback(): Answer with chosen-feedback text
    - create_feedback_range(): Score band for the result page

Example:
    >>> qs = (
    ...     QuestionSetBuilder()
    ...     .set_title("Geography Quiz")
    ...     .set_pass_percentage(60)
    ...     .add_multiple_choice_question(
    ...         "Capital of France?",
    ...         [create_answer("Paris", True), create_answer("London", False)],
    ...     )
    ...     .build()
    ... )
    >>> qs.questions[0].library
    'H5P.MultiChoice 1.16'
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Union

from h5p_toolkit.errors import BuilderError

from .multichoice import AnswerOption, AnswerTipsAndFeedback, Behaviour, MultiChoiceParams
from .question_set import BackgroundImage, FeedbackRange, Question, QuestionSet

logger = logging.getLogger(__name__)

DEFAULT_MULTICHOICE_LIBRARY = "H5P.MultiChoice 1.16"
PROGRESS_TYPES = ("dots", "textual")


class QuestionSetBuilder:
    """
    Collects question-set settings and questions, then freezes them into a
    QuestionSet with build(). Every setter returns the builder.

    Args:
        multichoice_library: Library reference stamped on MultiChoice
            questions, "<machineName> <major>.<minor>"
    """

    def __init__(self, multichoice_library: str = DEFAULT_MULTICHOICE_LIBRARY):
        self.multichoice_library = multichoice_library
        self._title: Optional[str] = None
        self._progress_type: Optional[str] = None
        self._pass_percentage: Optional[int] = None
        self._introduction: Optional[str] = None
        self._start_button_text: Optional[str] = None
        self._background_image: Optional[BackgroundImage] = None
        self._questions: List[Question] = []
        self._overall_feedback: List[FeedbackRange] = []

    def set_title(self, title: str) -> QuestionSetBuilder:
        self._title = title
        return self

    def set_progress_type(self, progress_type: str) -> QuestionSetBuilder:
        """
        Raises:
            BuilderError: If progress_type is not "dots" or "textual"
        """
        if progress_type not in PROGRESS_TYPES:
            raise BuilderError(f"Unknown progress type {progress_type!r} (expected dots or textual)")
        self._progress_type = progress_type
        return self

    def set_pass_percentage(self, percentage: int) -> QuestionSetBuilder:
        # Range is checked by validate_question_set(), not here
        self._pass_percentage = percentage
        return self

    def set_introduction(self, introduction: str) -> QuestionSetBuilder:
        """Set the intro page text; this also turns the intro page on."""
        self._introduction = introduction
        return self

    def set_start_button_text(self, text: str) -> QuestionSetBuilder:
        self._start_button_text = text
        return self

    def set_background_image(
        self, image_or_path: Union[BackgroundImage, str], mime: Optional[str] = None
    ) -> QuestionSetBuilder:
        """
        Set the background image, either as a BackgroundImage (for example
        from content.images.add_content_image) or as path + MIME type.
        """
        if isinstance(image_or_path, BackgroundImage):
            self._background_image = image_or_path
        else:
            if not mime:
                raise BuilderError("A MIME type is required when the image is given as a path")
            self._background_image = BackgroundImage(path=image_or_path, mime=mime)
        return self

    def add_multiple_choice_question(
        self,
        question: str,
        answers: Sequence[AnswerOption],
        behaviour: Optional[Behaviour] = None,
    ) -> QuestionSetBuilder:
        params = MultiChoiceParams(question=question, answers=tuple(answers), behaviour=behaviour)
        self._questions.append(Question(library=self.multichoice_library, params=params.to_dict()))
        return self

    def add_overall_feedback(self, ranges: Iterable[FeedbackRange]) -> QuestionSetBuilder:
        self._overall_feedback.extend(ranges)
        return self

    def build(self) -> QuestionSet:
        """
        Freeze the collected settings.

        Raises:
            BuilderError: If no question was added
        """
        if not self._questions:
            raise BuilderError("Question set must have at least one question")

        question_set = QuestionSet(
            questions=tuple(self._questions),
            title=self._title,
            progress_type=self._progress_type,
            pass_percentage=self._pass_percentage,
            background_image=self._background_image,
            show_intro_page=True if self._introduction is not None else None,
            introduction=self._introduction,
            start_button_text=self._start_button_text,
            overall_feedback=tuple(self._overall_feedback),
        )
        logger.debug(f"Built question set {self._title!r} with {len(self._questions)} question(s)")
        return question_set


def create_answer(text: str, correct: bool = False) -> AnswerOption:
    return AnswerOption(text=text, correct=correct)


def create_answer_with_feedback(text: str, correct: bool, feedback: str) -> AnswerOption:
    """Answer whose feedback is shown when it is chosen."""
    return AnswerOption(
        text=text,
        correct=correct,
        tips_and_feedback=AnswerTipsAndFeedback(chosen_feedback=feedback),
    )


def create_feedback_range(from_score: int, to_score: int, text: str) -> FeedbackRange:
    return FeedbackRange(from_score=from_score, to_score=to_score, text=text)
