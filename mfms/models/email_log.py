from datetime import datetime, timezone
from mfms.extensions import db

def _utcnow():
    return datetime.now(timezone.utc)

class EmailLog(db.Model):
    __tablename__ = "email_logs"

    id = db.Column(db.Integer, primary_key=True)
    to_email = db.Column(db.String(320), nullable=False, index=True)
    template = db.Column(db.String(64), nullable=False)
    subject = db.Column(db.String(200), nullable=False)
    status = db.Column(db.String(20), nullable=False, index=True)  # sent|failed
    meta = db.Column(db.JSON, nullable=False, default=dict)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    def __repr__(self) -> str:
        return f"<EmailLog id={self.id} to={self.to_email} status={self.status}>"
