"""
Submission Model
One student's scored attempt at an exam
"""
from examhall.extensions import db
from examhall.utils.helpers import now_utc, isoformat


def calculate_percentage(score, total_marks):
    """score / total_marks * 100 rounded to 2 places (0.0 for an empty exam)"""
    if not total_marks:
        return 0.0
    return round(score / total_marks * 100, 2)


class Submission(db.Model):
    """
    Submission model
    exam_id is a plain reference, not a foreign key: deleting an exam
    leaves its submissions in place as history.
    """
    __tablename__ = 'exam_submission'

    id = db.Column(db.Integer, primary_key=True)
    exam_id = db.Column(db.Integer, nullable=False, index=True)
    student_id = db.Column(db.String(64), nullable=False, index=True)

    # One entry per question position, None = unanswered
    answers = db.Column(db.JSON, nullable=False, default=list)

    score = db.Column(db.Integer, nullable=False, default=0)
    # Exam total captured when scored, never recomputed
    total_marks = db.Column(db.Integer, nullable=False, default=0)
    time_taken = db.Column(db.Integer, nullable=False, default=0)  # seconds
    submitted_at = db.Column(db.DateTime(timezone=True), default=now_utc)

    def __repr__(self):
        return f'<Submission {self.student_id}: {self.score}/{self.total_marks}>'

    @property
    def percentage(self):
        return calculate_percentage(self.score, self.total_marks)

    def to_dict(self):
        return {
            '_id': self.id,
            'examId': self.exam_id,
            'studentId': self.student_id,
            'answers': list(self.answers or []),
            'score': self.score,
            'totalMarks': self.total_marks,
            'percentage': self.percentage,
            'timeTaken': self.time_taken,
            'submittedAt': isoformat(self.submitted_at),
        }
