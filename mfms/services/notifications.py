from __future__ import annotations

import json
from typing import Optional, Protocol

from flask import current_app, render_template

from mfms.models import Employee, Feedback
from .errors import FailureNotificationError, NotificationFailure, WorkflowError
from .result import Err, Ok, Result


class Notifier(Protocol):
    def send(self, to: str, subject: str, body: str) -> bool: ...


def _log_structured(event: str, **fields):
    payload = {"event": event, **fields}
    current_app.logger.info(json.dumps(payload, default=str))


class NotificationDispatcher:
    """Renders and sends the success/failure notices for a submission."""

    def __init__(self, notifier: Notifier):
        self.notifier = notifier

    def notify_success(self, employee: Employee, feedback: Feedback) -> Result:
        """Ok(feedback) when the notifier accepted the mail, else Err(NotificationFailure)."""
        subject = current_app.config["FEEDBACK_MAIL_SUBJECT"]
        body = render_template(
            "email/feedback_created.txt",
            feedback=feedback,
            employee=employee,
            device=feedback.device,
            merchant=feedback.merchant,
        )
        sent = self.notifier.send(employee.email, subject, body)
        _log_structured(
            "feedback_notify_success",
            feedback_id=feedback.id,
            to=employee.email,
            outcome="sent" if sent else "failed",
        )
        if not sent:
            return Err(NotificationFailure(employee.email))
        return Ok(feedback)

    def notify_failure(self, employee: Optional[Employee], submission, error: WorkflowError) -> bool:
        """
        Best-effort failure notice. Returns whether the notifier accepted it.

        A ``False`` from the notifier is only logged. Anything raised while
        rendering or sending is wrapped in FailureNotificationError.
        """
        if employee is None:
            current_app.logger.error(
                "failure notice skipped: employee %s not found (error=%s)",
                submission.employee_id, type(error).__name__,
            )
            return False

        subject = current_app.config["FEEDBACK_FAILURE_MAIL_SUBJECT"]
        try:
            body = render_template(
                "email/feedback_failed.txt",
                error_name=type(error).__name__,
                error_message=str(error),
                submission=submission,
            )
            sent = self.notifier.send(employee.email, subject, body)
        except Exception as ex:
            current_app.logger.error("failure notice to %s raised: %s", employee.email, ex)
            raise FailureNotificationError(str(ex), original=error) from ex

        _log_structured(
            "feedback_notify_failure",
            to=employee.email,
            error=type(error).__name__,
            outcome="sent" if sent else "failed",
        )
        return sent
