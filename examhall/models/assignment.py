"""
Assignment and Grade Models
Homework assignments and the per-student grade awarded for each
"""
from examhall.extensions import db


class Assignment(db.Model):
    """Assignment model"""
    __tablename__ = 'assignment'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, default='')
    subject = db.Column(db.String(100))
    due_date = db.Column(db.String(10))  # YYYY-MM-DD
    max_score = db.Column(db.Integer, default=100)

    def __repr__(self):
        return f'<Assignment {self.title}>'

    def to_dict(self):
        return {
            '_id': self.id,
            'title': self.title,
            'description': self.description or '',
            'subject': self.subject,
            'dueDate': self.due_date,
            'maxScore': self.max_score,
        }


class Grade(db.Model):
    """Grade model"""
    __tablename__ = 'grade'

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.String(64), nullable=False, index=True)
    assignment_id = db.Column(db.String(64), nullable=False, index=True)
    score = db.Column(db.Float, nullable=False, default=0)

    __table_args__ = (
        db.UniqueConstraint(
            'student_id', 'assignment_id',
            name='unique_grade_per_assignment'
        ),
    )

    def __repr__(self):
        return f'<Grade {self.student_id}/{self.assignment_id}: {self.score}>'

    def to_dict(self):
        return {
            '_id': self.id,
            'studentId': self.student_id,
            'assignmentId': self.assignment_id,
            'score': self.score,
        }
