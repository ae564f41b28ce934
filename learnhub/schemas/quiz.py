from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from learnhub.model.enums import AttemptStatus, QuestionType
from learnhub.model.quiz_models import Quiz, QuizAttempt


# =============================
#   Authoring drafts
# =============================
class AnswerDraft(BaseModel):
    """Schema for a single answer option being edited"""

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    answer_text: str = ""
    is_correct: bool = False
    order_index: int = 0


class QuestionDraft(BaseModel):
    """Schema for a question being edited"""

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    question_text: str = ""
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE
    points: int = Field(default=1, ge=1)
    order_index: int = 0
    answers: tuple[AnswerDraft, ...] = ()


class QuizDraft(BaseModel):
    """
    Full in-memory quiz definition. Saved as a whole, never partially.
    """

    model_config = ConfigDict(frozen=True)

    lesson_id: str
    quiz_id: Optional[str] = Field(None, description="Set when editing a saved quiz")
    title: str = ""
    description: Optional[str] = None
    passing_score: int = Field(default=70, ge=0, le=100)
    time_limit_minutes: Optional[int] = Field(None, ge=0)
    questions: tuple[QuestionDraft, ...] = ()

    @field_validator("time_limit_minutes")
    @classmethod
    def zero_means_no_limit(cls, v: Optional[int]) -> Optional[int]:
        return v or None

    @classmethod
    def from_model(cls, quiz: Quiz) -> "QuizDraft":
        """Build a draft from a quiz loaded with its questions and answers."""
        return cls(
            lesson_id=quiz.lesson_id,
            quiz_id=quiz.id,
            title=quiz.title,
            description=quiz.description,
            passing_score=quiz.passing_score,
            time_limit_minutes=quiz.time_limit_minutes,
            questions=tuple(
                QuestionDraft(
                    id=question.id,
                    question_text=question.question_text,
                    question_type=QuestionType(question.question_type),
                    points=question.points,
                    order_index=question.order_index,
                    answers=tuple(
                        AnswerDraft(
                            id=answer.id,
                            answer_text=answer.answer_text,
                            is_correct=answer.is_correct,
                            order_index=answer.order_index,
                        )
                        for answer in question.answers
                    ),
                )
                for question in quiz.questions
            ),
        )


# =============================
#   Attempt snapshots
# =============================
class AnswerOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    answer_text: str
    is_correct: bool
    order_index: int


class QuestionSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    question_text: str
    question_type: QuestionType
    points: int
    order_index: int
    answers: tuple[AnswerOption, ...]


class QuizSnapshot(BaseModel):
    """Quiz definition as loaded for one attempt"""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: Optional[str] = None
    passing_score: int
    time_limit_minutes: Optional[int] = None
    questions: tuple[QuestionSnapshot, ...] = ()

    @classmethod
    def from_model(cls, quiz: Quiz) -> "QuizSnapshot":
        return cls(
            id=quiz.id,
            title=quiz.title,
            description=quiz.description,
            passing_score=quiz.passing_score,
            time_limit_minutes=quiz.time_limit_minutes,
            questions=tuple(
                QuestionSnapshot(
                    id=question.id,
                    question_text=question.question_text,
                    question_type=QuestionType(question.question_type),
                    points=question.points,
                    order_index=question.order_index,
                    answers=tuple(
                        AnswerOption(
                            id=answer.id,
                            answer_text=answer.answer_text,
                            is_correct=answer.is_correct,
                            order_index=answer.order_index,
                        )
                        for answer in sorted(question.answers, key=lambda a: a.order_index)
                    ),
                )
                for question in sorted(quiz.questions, key=lambda q: q.order_index)
            ),
        )


class AttemptState(BaseModel):
    """
    One learner's attempt as an immutable value. The engine returns a new
    state from every operation.
    """

    model_config = ConfigDict(frozen=True)

    attempt_id: Optional[str] = None
    user_id: str
    quiz: QuizSnapshot
    status: AttemptStatus = AttemptStatus.LOADING
    selections: dict[str, tuple[str, ...]] = Field(default_factory=dict)
    time_remaining: Optional[int] = Field(None, description="Seconds left, None when untimed")
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    score: Optional[int] = None
    passed: Optional[bool] = None
    timed_out: bool = False
    persisted: bool = False

    @property
    def is_submitted(self) -> bool:
        return self.status == AttemptStatus.SUBMITTED


class SelectAnswerRequest(BaseModel):
    question_id: str
    answer_id: str


class AttemptView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    quiz_id: str
    started_at: datetime
    completed_at: Optional[datetime] = None
    score: Optional[int] = None
    passed: Optional[bool] = None

    @classmethod
    def from_model(cls, attempt: QuizAttempt) -> "AttemptView":
        return cls.model_validate(attempt)


class StartAttemptRequest(BaseModel):
    quiz_id: str


class SubmitAttemptRequest(BaseModel):
    """Selections made on the client, applied in order before submitting."""
    selections: list[SelectAnswerRequest] = Field(default_factory=list)


def learner_view(state: AttemptState) -> dict:
    """Serialize a state for the learner; correct answers stay hidden until submitted."""
    if state.is_submitted:
        return state.model_dump(mode="json")
    return state.model_dump(
        mode="json",
        exclude={"quiz": {"questions": {"__all__": {"answers": {"__all__": {"is_correct"}}}}}},
    )
