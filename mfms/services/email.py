from typing import Optional, Dict, Any
from flask import current_app
from flask_mail import Message
from mfms.extensions import db, mail
from mfms.models import EmailLog
import json
import time


def _log_email(*, to_email, template, subject, status, meta=None):
    entry = EmailLog(
        to_email=to_email.lower(),
        template=template,
        subject=subject,
        status=status,
        meta=meta or {},
    )
    db.session.add(entry)
    db.session.commit()
    return entry


class MailNotifier:
    """
    Notifier backed by Flask-Mail.

    ``send`` never raises: transport errors are logged, recorded in
    ``email_logs`` and reported as ``False``.
    """

    def __init__(self, template: str = "plain", meta: Optional[Dict[str, Any]] = None):
        self.template = template
        self.meta = meta or {}

    def send(self, to: str, subject: str, body: str) -> bool:
        msg = Message(recipients=[to], subject=subject)
        msg.body = body

        start = time.perf_counter()
        try:
            mail.send(msg)
        except Exception as ex:
            latency_ms = int((time.perf_counter() - start) * 1000)
            current_app.logger.warning(json.dumps({
                "event": "mail_send",
                "template": self.template,
                "to": to.lower(),
                "subject": subject,
                "outcome": "smtp_error",
                "latency_ms": latency_ms,
                "smtp_error": str(ex),
            }))
            self._record(to, subject, "failed", {"error": str(ex)})
            return False

        latency_ms = int((time.perf_counter() - start) * 1000)
        current_app.logger.info(json.dumps({
            "event": "mail_send",
            "template": self.template,
            "to": to.lower(),
            "subject": subject,
            "outcome": "sent",
            "latency_ms": latency_ms,
        }))
        self._record(to, subject, "sent", {})
        return True

    def _record(self, to, subject, status, meta):
        # The audit row is best effort; losing it must not turn a delivered
        # mail into a reported failure.
        try:
            _log_email(
                to_email=to,
                template=self.template,
                subject=subject,
                status=status,
                meta={**self.meta, **meta},
            )
        except Exception as ex:
            db.session.rollback()
            current_app.logger.warning("email log write skipped for %s: %s", to, ex)
