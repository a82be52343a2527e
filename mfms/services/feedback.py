"""
Feedback submission workflow.

A submission runs once, synchronously, on the caller's session:

    START -> VALIDATING -> PERSISTING -> ASSOCIATING -> NOTIFYING_SUCCESS -> DONE

and any stage may branch to its *_FAILED state, then NOTIFYING_FAILURE, then
FAILED. Stages return ``Ok``/``Err`` values (see result.py); a store error
escaping a stage becomes ``PersistenceFailure``. Only ``run`` raises, after
the failure notice has been attempted.

Nothing is locked between validation and the association fan-out. A link
revoked or a question added/removed in that window is an accepted race: the
fan-out always uses the catalog as read at ASSOCIATING time. Each row is its
own commit, so a failure mid fan-out leaves the feedback row and the
associations written so far in place.
"""
from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional, Sequence, Tuple

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mfms.extensions import db
from mfms.models import Feedback
from .associations import create_association
from .errors import (
    BusinessRuleViolation,
    FailureNotificationError,
    NotFound,
    PersistenceFailure,
    ValidationFailure,
    WorkflowError,
)
from .notifications import NotificationDispatcher, Notifier
from .result import Err, Ok, Result
from .stores import (
    EntityLookup,
    LinkLookup,
    MerchantDeviceLinkStore,
    QuestionCatalog,
    QuestionCatalogReader,
    device_store,
    employee_store,
    merchant_store,
)

DEFAULT_ANSWER = "No answer provided"


class WorkflowState(str, Enum):
    START = "START"
    VALIDATING = "VALIDATING"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    PERSISTING = "PERSISTING"
    PERSIST_FAILED = "PERSIST_FAILED"
    ASSOCIATING = "ASSOCIATING"
    ASSOC_FAILED = "ASSOC_FAILED"
    NOTIFYING_SUCCESS = "NOTIFYING_SUCCESS"
    NOTIFY_FAILED = "NOTIFY_FAILED"
    NOTIFYING_FAILURE = "NOTIFYING_FAILURE"
    FAILED = "FAILED"
    DONE = "DONE"


_FAILED_STATE = {
    WorkflowState.VALIDATING: WorkflowState.VALIDATION_FAILED,
    WorkflowState.PERSISTING: WorkflowState.PERSIST_FAILED,
    WorkflowState.ASSOCIATING: WorkflowState.ASSOC_FAILED,
    WorkflowState.NOTIFYING_SUCCESS: WorkflowState.NOTIFY_FAILED,
}


@dataclass(frozen=True)
class FeedbackSubmission:
    employee_id: int
    merchant_id: int
    device_id: int
    rating: float
    comment: str
    image_ref: str
    answers: Tuple[Tuple[int, Any], ...] = ()


@dataclass(frozen=True)
class ResolvedEntities:
    employee: Any
    merchant: Any
    device: Any


def _log_structured(event: str, **fields):
    payload = {"event": event, **fields}
    current_app.logger.info(json.dumps(payload, default=str))


def _persistence_failure(resource: str, ex: SQLAlchemyError) -> PersistenceFailure:
    failure = PersistenceFailure(resource, str(getattr(ex, "orig", None) or ex))
    failure.__cause__ = ex
    return failure


def _answer_map(answers: Iterable[Tuple[int, Any]]) -> Result:
    """question id -> answer; a question id given twice is rejected."""
    mapping = {}
    for question_id, answer in answers:
        if question_id in mapping:
            return Err(ValidationFailure("answers", f"Duplicate answer for question {question_id}"))
        mapping[question_id] = answer
    return Ok(mapping)


class FeedbackWorkflow:
    def __init__(
        self,
        *,
        session: Session,
        employees: EntityLookup,
        merchants: EntityLookup,
        devices: EntityLookup,
        links: LinkLookup,
        catalog: QuestionCatalogReader,
        notifier: Notifier,
        default_answer: str = DEFAULT_ANSWER,
    ):
        self.session = session
        self.employees = employees
        self.merchants = merchants
        self.devices = devices
        self.links = links
        self.catalog = catalog
        self.dispatcher = NotificationDispatcher(notifier)
        self.default_answer = default_answer
        self.states: list[WorkflowState] = []

    @classmethod
    def for_session(cls, session: Session, notifier: Optional[Notifier] = None) -> "FeedbackWorkflow":
        """Workflow wired to the SQLAlchemy stores and the mail notifier."""
        if notifier is None:
            from .email import MailNotifier
            notifier = MailNotifier(template="feedback")
        return cls(
            session=session,
            employees=employee_store(session),
            merchants=merchant_store(session),
            devices=device_store(session),
            links=MerchantDeviceLinkStore(session),
            catalog=QuestionCatalog(session),
            notifier=notifier,
            default_answer=current_app.config.get("FEEDBACK_DEFAULT_ANSWER", DEFAULT_ANSWER),
        )

    # ------------------------------------------------------------------
    # entry points
    # ------------------------------------------------------------------
    def submit(
        self,
        employee_id: int,
        merchant_id: int,
        device_id: int,
        rating: float,
        comment: str,
        image_ref: str,
        answers: Sequence[Tuple[int, Any]] = (),
    ) -> bool:
        submission = FeedbackSubmission(
            employee_id=employee_id,
            merchant_id=merchant_id,
            device_id=device_id,
            rating=rating,
            comment=comment,
            image_ref=image_ref,
            answers=tuple(tuple(pair) for pair in answers),
        )
        return self.run(submission)

    def run(self, submission: FeedbackSubmission) -> bool:
        """True on DONE; otherwise raises the WorkflowError that stopped it."""
        self.states = [WorkflowState.START]
        _log_structured(
            "feedback_submit",
            employee_id=submission.employee_id,
            merchant_id=submission.merchant_id,
            device_id=submission.device_id,
            answers=len(submission.answers),
        )

        self._enter(WorkflowState.VALIDATING)
        result = self._guarded(self.validate, submission)

        if isinstance(result, Ok):
            resolved = result.value
            self._enter(WorkflowState.PERSISTING)
            result = self._guarded(self.persist_feedback, resolved, submission)

        if isinstance(result, Ok):
            self._enter(WorkflowState.ASSOCIATING)
            result = self._guarded(self.associate_questions, result.value, submission.answers)

        if isinstance(result, Ok):
            self._enter(WorkflowState.NOTIFYING_SUCCESS)
            result = self._guarded(self.dispatcher.notify_success, resolved.employee, result.value)

        if isinstance(result, Err):
            self._fail(submission, result.error)

        self._enter(WorkflowState.DONE)
        _log_structured("feedback_done", feedback_id=result.value.id, feedback_uuid=result.value.uuid)
        return True

    # ------------------------------------------------------------------
    # stages
    # ------------------------------------------------------------------
    def validate(self, submission: FeedbackSubmission) -> Result:
        """Employee, merchant, device, then the merchant/device link. Read-only."""
        employee = self.employees.find_by_id(submission.employee_id)
        if employee is None:
            current_app.logger.error("Employee not found with ID: %s", submission.employee_id)
            return Err(NotFound("Employee", submission.employee_id))

        merchant = self.merchants.find_by_id(submission.merchant_id)
        if merchant is None:
            current_app.logger.error("Merchant not found with ID: %s", submission.merchant_id)
            return Err(NotFound("Merchant", submission.merchant_id))

        device = self.devices.find_by_id(submission.device_id)
        if device is None:
            current_app.logger.error("Device not found with ID: %s", submission.device_id)
            return Err(NotFound("Device", submission.device_id))

        if not self.links.exists(submission.merchant_id, submission.device_id):
            current_app.logger.error(
                "Device with ID %s is not associated with Merchant ID %s",
                submission.device_id, submission.merchant_id,
            )
            return Err(BusinessRuleViolation.device_not_assigned(submission.device_id, submission.merchant_id))

        return Ok(ResolvedEntities(employee=employee, merchant=merchant, device=device))

    def persist_feedback(self, resolved: ResolvedEntities, submission: FeedbackSubmission) -> Result:
        """
        Write the Feedback row. The answer list is checked first: a question
        id supplied twice fails here, before the row exists, not midway
        through the association fan-out.
        """
        answers = _answer_map(submission.answers)
        if isinstance(answers, Err):
            return answers

        feedback = Feedback(
            uuid=str(uuid.uuid4()),
            employee=resolved.employee,
            merchant=resolved.merchant,
            device=resolved.device,
            rating=submission.rating,
            comment=submission.comment,
            image_ref=submission.image_ref,
        )
        try:
            self.session.add(feedback)
            self.session.commit()
        except SQLAlchemyError as ex:
            self.session.rollback()
            current_app.logger.error("feedback write failed: %s", ex)
            return Err(_persistence_failure("Feedback", ex))

        current_app.logger.info("Feedback created with ID: %s", feedback.id)
        return Ok(feedback)

    def associate_questions(self, feedback: Feedback, answers: Iterable[Tuple[int, Any]]) -> Result:
        """One association per catalog question, each committed on its own."""
        mapping = _answer_map(answers)
        if isinstance(mapping, Err):
            return mapping
        supplied = mapping.value

        questions = self.catalog.list_all()
        current_app.logger.debug("Retrieved %d catalog questions for feedback %s", len(questions), feedback.id)

        for question in questions:
            answer = supplied.get(question.id, self.default_answer)
            try:
                create_association(self.session, feedback=feedback, question=question, answer=answer)
            except WorkflowError as e:
                current_app.logger.error(
                    "Failed to create association for feedback ID: %s and question ID: %s: %s",
                    feedback.id, question.id, e,
                )
                return Err(e)

        current_app.logger.info("Feedback %s associated with %d questions", feedback.id, len(questions))
        return Ok(feedback)

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _guarded(self, stage, *args) -> Result:
        """Run one stage; a store error escaping it becomes Err(PersistenceFailure)."""
        try:
            return stage(*args)
        except SQLAlchemyError as ex:
            self.session.rollback()
            stage_state = self.states[-1]
            current_app.logger.error("store error during %s: %s", stage_state.value, ex)
            resource = "FeedbackQuestionAssociation" if stage_state is WorkflowState.ASSOCIATING else "Feedback"
            return Err(_persistence_failure(resource, ex))

    def _enter(self, state: WorkflowState) -> None:
        self.states.append(state)
        current_app.logger.debug("feedback workflow -> %s", state.value)

    def _fail(self, submission: FeedbackSubmission, error: WorkflowError):
        self._enter(_FAILED_STATE[self.states[-1]])
        self._enter(WorkflowState.NOTIFYING_FAILURE)
        try:
            employee = None
            # The employee is re-read: a failed validation stage resolves nothing.
            if not (isinstance(error, NotFound) and error.kind == "Employee"):
                employee = self.employees.find_by_id(submission.employee_id)
            self.dispatcher.notify_failure(employee, submission, error)
        except FailureNotificationError:
            raise
        except Exception as ex:
            raise FailureNotificationError(str(ex), original=error) from ex
        finally:
            self._enter(WorkflowState.FAILED)
            _log_structured(
                "feedback_failed",
                error=type(error).__name__,
                category=error.category,
                states=[s.value for s in self.states],
            )
        raise error


def submit_feedback(
    employee_id: int,
    merchant_id: int,
    device_id: int,
    rating: float,
    comment: str,
    image_ref: str,
    answers: Sequence[Tuple[int, Any]] = (),
    *,
    notifier: Optional[Notifier] = None,
) -> bool:
    """Run the workflow on ``db.session`` for the current app context."""
    workflow = FeedbackWorkflow.for_session(db.session, notifier=notifier)
    return workflow.submit(employee_id, merchant_id, device_id, rating, comment, image_ref, answers)
