from sqlalchemy import func
from mfms.extensions import db

class Device(db.Model):
    __tablename__ = "devices"

    id = db.Column(db.Integer, primary_key=True)
    uuid = db.Column(db.String(36), nullable=False, unique=True)
    model = db.Column(db.String(120), nullable=False, unique=True)
    manufacturer = db.Column(db.String(120), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<Device id={self.id} model={self.model!r}>"
