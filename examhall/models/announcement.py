"""
Announcement Model
"""
from examhall.extensions import db
from examhall.utils.helpers import now_utc, isoformat


class Announcement(db.Model):
    """Announcement model"""
    __tablename__ = 'announcement'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    content = db.Column(db.Text, default='')
    date = db.Column(db.DateTime(timezone=True), default=now_utc, index=True)

    def __repr__(self):
        return f'<Announcement {self.title}>'

    def to_dict(self):
        return {
            '_id': self.id,
            'title': self.title,
            'content': self.content or '',
            'date': isoformat(self.date),
        }
