import pytest

from mfms.extensions import db
from mfms.models import Feedback
from mfms.services import reports
from mfms.services.errors import NotFound


def _feedback(n, employee_id, merchant_id, device_id, rating):
    fb = Feedback(
        uuid=f"00000000-0000-4000-b000-{n:012d}",
        employee_id=employee_id,
        merchant_id=merchant_id,
        device_id=device_id,
        rating=rating,
        comment=f"note {n}",
        image_ref=f"img-{n}",
    )
    db.session.add(fb)
    return fb


@pytest.fixture()
def history(seed, build):
    """Employees 7 and 8, merchants 3 and 4, feedback on devices 9 and 5."""
    build.employee(8, email="emp8@example.com")
    build.merchant(4)
    _feedback(1, 7, 3, 9, 2.0)
    _feedback(2, 7, 3, 9, 4.0)
    _feedback(3, 8, 4, 5, 5.0)
    db.session.commit()
    return seed


def test_average_rating_by_device(history):
    got = {r.device_id: r.average_rating for r in reports.average_rating_by_device(db.session)}
    assert got == {5: 5.0, 9: 3.0}


def test_count_feedback_by_device(history):
    got = [(r.device_id, r.feedback_count) for r in reports.count_feedback_by_device(db.session)]
    assert got == [(5, 1), (9, 2)]


def test_count_feedback_by_employee_carries_email(history):
    got = [(r.employee_id, r.employee_email, r.feedback_count)
           for r in reports.count_feedback_by_employee(db.session)]
    assert got == [(7, "emp7@example.com", 2), (8, "emp8@example.com", 1)]


def test_aggregates_are_empty_without_feedback(seed):
    assert reports.average_rating_by_device(db.session) == []
    assert reports.count_feedback_by_device(db.session) == []
    assert reports.count_feedback_by_employee(db.session) == []


def test_list_feedback_without_filters_returns_everything(history):
    assert [fb.comment for fb in reports.list_feedback(db.session)] == ["note 1", "note 2", "note 3"]


@pytest.mark.parametrize(
    "filters, expected",
    [
        (dict(employee_id=8), ["note 3"]),
        (dict(device_id=9), ["note 1", "note 2"]),
        (dict(rating=4.0), ["note 2"]),
        (dict(merchant_id=4), ["note 3"]),
        # merchant wins over everything else
        (dict(merchant_id=4, employee_id=7, device_id=9, rating=2.0), ["note 3"]),
        # employee wins over device and rating
        (dict(employee_id=8, device_id=9, rating=2.0), ["note 3"]),
        (dict(device_id=5, rating=2.0), ["note 3"]),
    ],
)
def test_list_feedback_applies_first_filter_only(history, filters, expected):
    assert [fb.comment for fb in reports.list_feedback(db.session, **filters)] == expected


@pytest.mark.parametrize(
    "filters, kind",
    [
        (dict(merchant_id=99), "Merchant"),
        (dict(employee_id=99), "Employee"),
        (dict(device_id=99), "Device"),
    ],
)
def test_list_feedback_unknown_entity_is_not_found(history, filters, kind):
    with pytest.raises(NotFound) as exc:
        reports.list_feedback(db.session, **filters)
    assert exc.value.kind == kind
    assert exc.value.key == 99


def test_list_feedback_unmatched_rating_is_empty(history):
    assert reports.list_feedback(db.session, rating=1.5) == []
