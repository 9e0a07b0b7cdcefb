"""
Exam Model
A timed set of scored multiple-choice questions
"""
from examhall.extensions import db
from examhall.utils.helpers import now_utc, isoformat


class Exam(db.Model):
    """Exam model"""
    __tablename__ = 'exam'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, default='')

    # Ordered list of {question, options, correctAnswer, marks}
    # List position is the canonical question order used for scoring
    questions = db.Column(db.JSON, nullable=False, default=list)

    duration = db.Column(db.Integer, nullable=False, default=60)  # minutes
    total_marks = db.Column(db.Integer, nullable=False, default=0)
    assigned_to = db.Column(db.JSON, nullable=False, default=list)

    created_by = db.Column(db.String(120))
    created_at = db.Column(db.DateTime(timezone=True), default=now_utc)
    updated_at = db.Column(db.DateTime(timezone=True))

    def __repr__(self):
        return f'<Exam {self.title}>'

    @staticmethod
    def compute_total_marks(questions):
        """Sum of question marks (unset marks count as 1)"""
        return sum(int(q.get('marks') or 1) for q in questions or [])

    def get_questions(self):
        return list(self.questions or [])

    def get_total_time_seconds(self):
        return (self.duration or 0) * 60

    def to_dict(self):
        return {
            '_id': self.id,
            'title': self.title,
            'description': self.description or '',
            'questions': self.get_questions(),
            'duration': self.duration,
            'totalMarks': self.total_marks,
            'assignedTo': list(self.assigned_to or []),
            'createdBy': self.created_by,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }
