"""
User Model
Accounts for admins, teachers, students and parents
"""
from examhall.extensions import db
from examhall.utils.helpers import now_utc, isoformat


class User(db.Model):
    """User model"""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(200), unique=True, nullable=False, index=True)
    password = db.Column(db.String(256), nullable=False)  # werkzeug hash
    role = db.Column(db.String(20), nullable=False, default='student')

    # Parents: id of the child's student account (the id submissions are stored under)
    student_id = db.Column(db.String(64))

    created_at = db.Column(db.DateTime(timezone=True), default=now_utc)

    def __repr__(self):
        return f'<User {self.email} ({self.role})>'

    def to_dict(self):
        """Public representation (never includes the password hash)"""
        return {
            '_id': self.id,
            'name': self.name,
            'email': self.email,
            'role': self.role,
            'studentId': self.student_id,
            'createdAt': isoformat(self.created_at),
        }
