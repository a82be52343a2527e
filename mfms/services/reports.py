from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from flask import current_app
from sqlalchemy import func
from sqlalchemy.orm import Session

from mfms.models import Device, Employee, Feedback, Merchant
from .errors import NotFound


@dataclass(frozen=True)
class EmployeeFeedbackCount:
    employee_id: int
    employee_email: str
    feedback_count: int


@dataclass(frozen=True)
class DeviceAverageRating:
    device_id: int
    average_rating: float


@dataclass(frozen=True)
class DeviceFeedbackCount:
    device_id: int
    feedback_count: int


def count_feedback_by_employee(session: Session) -> List[EmployeeFeedbackCount]:
    """Feedback count per employee; employees without feedback are absent."""
    rows = (
        session.query(Feedback.employee_id, Employee.email, func.count(Feedback.id))
        .join(Employee, Employee.id == Feedback.employee_id)
        .group_by(Feedback.employee_id, Employee.email)
        .order_by(Feedback.employee_id)
        .all()
    )
    return [
        EmployeeFeedbackCount(employee_id=emp_id, employee_email=email, feedback_count=int(count))
        for emp_id, email, count in rows
    ]


def average_rating_by_device(session: Session) -> List[DeviceAverageRating]:
    rows = (
        session.query(Feedback.device_id, func.avg(Feedback.rating))
        .group_by(Feedback.device_id)
        .order_by(Feedback.device_id)
        .all()
    )
    return [DeviceAverageRating(device_id=dev_id, average_rating=float(avg)) for dev_id, avg in rows]


def count_feedback_by_device(session: Session) -> List[DeviceFeedbackCount]:
    rows = (
        session.query(Feedback.device_id, func.count(Feedback.id))
        .group_by(Feedback.device_id)
        .order_by(Feedback.device_id)
        .all()
    )
    return [DeviceFeedbackCount(device_id=dev_id, feedback_count=int(count)) for dev_id, count in rows]


def _require(session: Session, model, kind: str, entity_id: int) -> None:
    if session.get(model, entity_id) is None:
        current_app.logger.error("%s with ID %s not found.", kind, entity_id)
        raise NotFound(kind, entity_id)


def list_feedback(
    session: Session,
    *,
    employee_id: Optional[int] = None,
    device_id: Optional[int] = None,
    rating: Optional[float] = None,
    merchant_id: Optional[int] = None,
) -> List[Feedback]:
    """
    Feedback matching at most one filter.

    When several are given only the first of merchant, employee, device,
    rating is applied; with none, every feedback is returned. Entity filters
    raise NotFound for an unknown id.
    """
    query = session.query(Feedback)
    if merchant_id is not None:
        _require(session, Merchant, "Merchant", merchant_id)
        query = query.filter(Feedback.merchant_id == merchant_id)
    elif employee_id is not None:
        _require(session, Employee, "Employee", employee_id)
        query = query.filter(Feedback.employee_id == employee_id)
    elif device_id is not None:
        _require(session, Device, "Device", device_id)
        query = query.filter(Feedback.device_id == device_id)
    elif rating is not None:
        query = query.filter(Feedback.rating == rating)

    items = query.order_by(Feedback.id).all()
    current_app.logger.info("Found %d feedback(s)", len(items))
    return items
