"""
Models Package
Exports all database models
"""
from examhall.models.user import User
from examhall.models.exam import Exam
from examhall.models.submission import Submission, calculate_percentage
from examhall.models.student import Student
from examhall.models.attendance import Attendance, ATTENDANCE_STATUSES
from examhall.models.assignment import Assignment, Grade
from examhall.models.announcement import Announcement

__all__ = [
    'User', 'Exam', 'Submission', 'calculate_percentage', 'Student',
    'Attendance', 'ATTENDANCE_STATUSES', 'Assignment', 'Grade', 'Announcement'
]
