from mfms.extensions import db

class Question(db.Model):
    __tablename__ = "questions"

    id = db.Column(db.Integer, primary_key=True)
    uuid = db.Column(db.String(36), nullable=True, unique=True)
    description = db.Column(db.String(500), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<Question id={self.id} {self.description[:40]!r}>"
