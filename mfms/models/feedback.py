from sqlalchemy import func
from mfms.extensions import db

class Feedback(db.Model):
    __tablename__ = "feedback"

    id = db.Column(db.Integer, primary_key=True)
    uuid = db.Column(db.String(36), nullable=False, unique=True)
    # References are set once at creation and never reassigned
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False, index=True)
    merchant_id = db.Column(db.Integer, db.ForeignKey("merchants.id", ondelete="RESTRICT"), nullable=False, index=True)
    device_id = db.Column(db.Integer, db.ForeignKey("devices.id", ondelete="RESTRICT"), nullable=False, index=True)
    rating = db.Column(db.Float, nullable=False)
    comment = db.Column(db.Text, nullable=False)
    image_ref = db.Column(db.String(1000), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    employee = db.relationship("Employee", lazy="joined")
    merchant = db.relationship("Merchant", lazy="joined")
    device = db.relationship("Device", lazy="joined")
    answers = db.relationship(
        "FeedbackQuestionAssociation",
        back_populates="feedback",
        lazy="select",
        order_by="FeedbackQuestionAssociation.question_id",
    )

    __table_args__ = (
        db.Index("ix_feedback_device_rating", "device_id", "rating"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "uuid": self.uuid,
            "employee_id": self.employee_id,
            "merchant_id": self.merchant_id,
            "device_id": self.device_id,
            "rating": self.rating,
            "comment": self.comment,
            "image_ref": self.image_ref,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:
        return f"<Feedback id={self.id} uuid={self.uuid} rating={self.rating}>"
