"""
Attendance Model
One register per calendar day
"""
from examhall.extensions import db

ATTENDANCE_STATUSES = ('present', 'absent', 'late')


class Attendance(db.Model):
    """Attendance model"""
    __tablename__ = 'attendance'

    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.String(10), unique=True, nullable=False, index=True)  # YYYY-MM-DD

    # List of {studentId, status}
    records = db.Column(db.JSON, nullable=False, default=list)

    def __repr__(self):
        return f'<Attendance {self.date}>'

    def summary(self):
        """Count of present/absent/late entries"""
        counts = {status: 0 for status in ATTENDANCE_STATUSES}
        for record in self.records or []:
            status = record.get('status')
            if status in counts:
                counts[status] += 1
        return counts

    def to_dict(self):
        return {
            '_id': self.id,
            'date': self.date,
            'records': list(self.records or []),
        }
