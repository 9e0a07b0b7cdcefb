"""
Report Service
Dashboard counts and summaries across school records
"""
from examhall.models import Assignment, Attendance, Exam, Grade, Student, Submission, ATTENDANCE_STATUSES


class ReportService:
    """Aggregate queries for dashboards"""

    @staticmethod
    def attendance_summary(date):
        """Counts of present/absent/late for one day (zeros if no register)"""
        record = Attendance.query.filter_by(date=date).first()
        if record is None:
            return {status: 0 for status in ATTENDANCE_STATUSES}
        return record.summary()

    @staticmethod
    def ungraded_count():
        """
        Expected grades (assignments x students) minus grades recorded
        Never negative
        """
        expected = Assignment.query.count() * Student.query.count()
        return max(expected - Grade.query.count(), 0)

    @staticmethod
    def dashboard_summary(date):
        return {
            'date': date,
            'students': Student.query.count(),
            'exams': Exam.query.count(),
            'submissions': Submission.query.count(),
            'ungradedAssignments': ReportService.ungraded_count(),
            'attendance': ReportService.attendance_summary(date),
        }
