import os
# Ensure the app factory picks the Testing config & SQLite memory DB
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("TEST_DATABASE_URL", "sqlite:///:memory:")

import types

import pytest
from mfms import create_app
from mfms.extensions import db
from mfms.models import (
    Device,
    Employee,
    Merchant,
    MerchantDeviceAssociation,
    Question,
)
from mfms.services.feedback import FeedbackWorkflow
from mfms.services.stores import (
    MerchantDeviceLinkStore,
    QuestionCatalog,
    device_store,
    employee_store,
    merchant_store,
)

@pytest.fixture(scope="session")
def app():
    app = create_app()
    app.config.update(
        TESTING=True,
        SQLALCHEMY_DATABASE_URI="sqlite:///:memory:",
        MAIL_SUPPRESS_SEND=True,
    )
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()

@pytest.fixture(autouse=True)
def _db_clean(app):
    # Clean BEFORE each test
    with app.app_context():
        db.session.rollback()
        for tbl in reversed(db.metadata.sorted_tables):
            db.session.execute(tbl.delete())
        db.session.commit()
    yield
    # And AFTER each test (keeps state hermetic even if a test fails mid-transaction)
    with app.app_context():
        db.session.rollback()
        for tbl in reversed(db.metadata.sorted_tables):
            db.session.execute(tbl.delete())
        db.session.commit()

@pytest.fixture()
def ctx(app):
    with app.app_context():
        yield app


class RecordingNotifier:
    """Notifier double: records every send and answers from ``results`` (default True)."""

    def __init__(self, *results):
        self.results = list(results)
        self.sent = []

    def send(self, to, subject, body):
        self.sent.append(types.SimpleNamespace(to=to, subject=subject, body=body))
        return self.results.pop(0) if self.results else True


class CountingStore:
    """Wraps a store and remembers the ids it was asked for."""

    def __init__(self, inner):
        self.inner = inner
        self.calls = []

    def find_by_id(self, entity_id):
        self.calls.append(entity_id)
        return self.inner.find_by_id(entity_id)

    def exists(self, *args):
        self.calls.append(args)
        return self.inner.exists(*args)


@pytest.fixture()
def notifier():
    return RecordingNotifier()

@pytest.fixture()
def make_notifier():
    return RecordingNotifier

@pytest.fixture()
def make_workflow(ctx):
    """Workflow over db.session with counting stores; keyword overrides win."""
    def _make(notifier, **overrides):
        session = db.session
        parts = dict(
            session=session,
            employees=CountingStore(employee_store(session)),
            merchants=CountingStore(merchant_store(session)),
            devices=CountingStore(device_store(session)),
            links=CountingStore(MerchantDeviceLinkStore(session)),
            catalog=QuestionCatalog(session),
            notifier=notifier,
        )
        parts.update(overrides)
        return FeedbackWorkflow(**parts)
    return _make


def add_employee(id=7, email="emp7@example.com", employee_type="employee"):
    emp = Employee(
        id=id,
        uuid=f"00000000-0000-4000-8000-{id:012d}",
        payswiff_id=f"PS{id:04d}",
        name=f"Employee {id}",
        email=email,
        phone=f"+1555000{id:04d}",
        designation="Field Agent",
        employee_type=employee_type,
    )
    emp.set_password("s3cret!")
    db.session.add(emp)
    return emp

def add_merchant(id=3):
    m = Merchant(
        id=id,
        uuid=f"00000000-0000-4000-9000-{id:012d}",
        name=f"Merchant {id}",
        email=f"merchant{id}@example.com",
        phone=f"+1555100{id:04d}",
        business_name=f"Corner Shop {id}",
        business_type="Grocery",
    )
    db.session.add(m)
    return m

def add_device(id=9, model=None):
    d = Device(
        id=id,
        uuid=f"00000000-0000-4000-a000-{id:012d}",
        model=model or f"POS-{id}",
        manufacturer="Verifone",
    )
    db.session.add(d)
    return d

def add_link(merchant_id, device_id):
    link = MerchantDeviceAssociation(merchant_id=merchant_id, device_id=device_id)
    db.session.add(link)
    return link

def add_question(id, description):
    q = Question(id=id, uuid=None, description=description)
    db.session.add(q)
    return q


@pytest.fixture()
def seed(ctx):
    """employee 7, merchant 3, devices 9 (linked to 3) and 5 (not linked), questions 1 and 2."""
    add_employee(7)
    add_merchant(3)
    add_device(9)
    add_device(5)
    add_link(3, 9)
    add_question(1, "Is the device easy to use?")
    add_question(2, "Does the printer work reliably?")
    db.session.commit()
    return types.SimpleNamespace(employee_id=7, merchant_id=3, device_id=9, unlinked_device_id=5, question_ids=[1, 2])

@pytest.fixture()
def build(ctx):
    """Row builders for tests that need data beyond ``seed``; caller commits."""
    return types.SimpleNamespace(
        employee=add_employee,
        merchant=add_merchant,
        device=add_device,
        link=add_link,
        question=add_question,
    )
