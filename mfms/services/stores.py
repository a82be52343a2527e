"""
Read-side collaborators of the feedback workflow.

The workflow only depends on the small protocols below; the classes here are
the SQLAlchemy-backed defaults used in the app. Tests swap in plain fakes.
"""
from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from mfms.models import Employee, Merchant, Device, Question, MerchantDeviceAssociation


class EntityLookup(Protocol):
    def find_by_id(self, entity_id: int) -> Optional[Any]: ...

    def exists(self, entity_id: int) -> bool: ...


class LinkLookup(Protocol):
    def exists(self, merchant_id: int, device_id: int) -> bool: ...


class QuestionCatalogReader(Protocol):
    def list_all(self) -> Sequence[Question]: ...


class EntityStore:
    """Keyed lookup over one model."""

    def __init__(self, session: Session, model):
        self.session = session
        self.model = model

    def find_by_id(self, entity_id: int):
        if entity_id is None:
            return None
        return self.session.get(self.model, entity_id)

    def exists(self, entity_id: int) -> bool:
        if entity_id is None:
            return False
        stmt = select(self.model.id).where(self.model.id == entity_id)
        return self.session.execute(stmt).first() is not None


class MerchantDeviceLinkStore:
    def __init__(self, session: Session):
        self.session = session

    def exists(self, merchant_id: int, device_id: int) -> bool:
        q = self.session.query(MerchantDeviceAssociation).filter(
            MerchantDeviceAssociation.merchant_id == merchant_id,
            MerchantDeviceAssociation.device_id == device_id,
        )
        return self.session.query(q.exists()).scalar()


class QuestionCatalog:
    def __init__(self, session: Session):
        self.session = session

    def list_all(self) -> list[Question]:
        # Always the catalog as it is right now; no snapshot is kept.
        return self.session.query(Question).order_by(Question.id).all()


def employee_store(session: Session) -> EntityStore:
    return EntityStore(session, Employee)


def merchant_store(session: Session) -> EntityStore:
    return EntityStore(session, Merchant)


def device_store(session: Session) -> EntityStore:
    return EntityStore(session, Device)
