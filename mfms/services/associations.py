from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mfms.models import Feedback, Question, FeedbackQuestionAssociation
from .errors import NotFound, PersistenceFailure, ValidationFailure


@dataclass(frozen=True)
class FeedbackAnswer:
    question_id: int
    question_description: str
    answer: str


def create_association(
    session: Session,
    *,
    feedback: Optional[Feedback],
    question: Optional[Question],
    answer: Optional[str],
) -> FeedbackQuestionAssociation:
    """
    Attach one answered question to a persisted feedback and commit it.

    Raises ValidationFailure for missing references or a blank answer,
    NotFound when the feedback/question row does not exist, and
    PersistenceFailure when the store rejects the write.
    """
    if feedback is None or feedback.id is None:
        raise ValidationFailure("feedback", "Feedback and its ID cannot be null or empty")
    stored_feedback = session.get(Feedback, feedback.id)
    if stored_feedback is None:
        raise NotFound("Feedback", feedback.id)

    if question is None or question.id is None:
        raise ValidationFailure("question", "Question and its ID cannot be null or empty")
    stored_question = session.get(Question, question.id)
    if stored_question is None:
        raise NotFound("Question", question.id)

    if answer is None or not str(answer).strip():
        raise ValidationFailure("answer", f"Answer for question {question.id} cannot be null or empty")

    assoc = FeedbackQuestionAssociation(
        feedback_id=stored_feedback.id,
        question_id=stored_question.id,
        answer=answer,
    )
    try:
        session.add(assoc)
        session.commit()
    except SQLAlchemyError as ex:
        session.rollback()
        current_app.logger.error(
            "association write failed feedback_id=%s question_id=%s: %s",
            stored_feedback.id, stored_question.id, ex,
        )
        raise PersistenceFailure(
            "FeedbackQuestionAssociation",
            f"feedback {stored_feedback.id} / question {stored_question.id}",
        ) from ex
    return assoc


def get_feedback_answers(session: Session, feedback_id: int) -> list[FeedbackAnswer]:
    """Question/answer pairs recorded for one feedback, ordered by question id."""
    if feedback_id is None:
        raise ValidationFailure("feedback_id", "Feedback ID cannot be null")
    if session.get(Feedback, feedback_id) is None:
        raise NotFound("Feedback", feedback_id)

    rows = (
        session.query(FeedbackQuestionAssociation)
        .filter(FeedbackQuestionAssociation.feedback_id == feedback_id)
        .order_by(FeedbackQuestionAssociation.question_id)
        .all()
    )
    if not rows:
        raise NotFound("FeedbackQuestionAssociation", feedback_id, field="Feedback ID")

    return [
        FeedbackAnswer(
            question_id=row.question_id,
            question_description=row.question.description,
            answer=row.answer,
        )
        for row in rows
    ]
