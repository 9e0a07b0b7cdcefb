"""
Student Model
Enrolled student records with parent contact details
"""
from examhall.extensions import db


class Student(db.Model):
    """Student model"""
    __tablename__ = 'student'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    parent_name = db.Column(db.String(120))
    parent_email = db.Column(db.String(200))
    parent_phone = db.Column(db.String(40))

    def __repr__(self):
        return f'<Student {self.name}>'

    def to_dict(self):
        return {
            '_id': self.id,
            'name': self.name,
            'parentName': self.parent_name,
            'parentEmail': self.parent_email,
            'parentPhone': self.parent_phone,
        }
