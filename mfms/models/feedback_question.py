from mfms.extensions import db

class FeedbackQuestionAssociation(db.Model):
    __tablename__ = "feedback_question_associations"

    id = db.Column(db.Integer, primary_key=True)
    feedback_id = db.Column(
        db.Integer,
        db.ForeignKey("feedback.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    question_id = db.Column(
        db.Integer,
        db.ForeignKey("questions.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    answer = db.Column(db.Text, nullable=False)

    feedback = db.relationship("Feedback", back_populates="answers")
    question = db.relationship("Question", lazy="joined")

    __table_args__ = (
        db.UniqueConstraint("feedback_id", "question_id", name="uq_fqa_feedback_question"),
    )
