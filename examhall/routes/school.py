"""
School Records Routes
Students, attendance, assignments, grades, announcements and dashboard counts
"""
import logging

from flask import Blueprint, jsonify, request

from examhall.errors import NotFoundError, ValidationError
from examhall.extensions import db
from examhall.models import (
    Announcement, Assignment, Attendance, Grade, Student, ATTENDANCE_STATUSES
)
from examhall.services import ReportService
from examhall.utils import AUTHOR_ROLES, commit_or_raise, local_today, now_utc, require_auth, require_roles

logger = logging.getLogger(__name__)

school_bp = Blueprint('school', __name__)


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def _get_or_404(model, record_id, label):
    record = db.session.get(model, record_id)
    if record is None:
        raise NotFoundError(f'{label} not found')
    return record


# ========================================
# DASHBOARD
# ========================================

@school_bp.route('/dashboard/summary')
@require_auth
def dashboard_summary():
    """Counts for the dashboard cards (today in the school timezone)"""
    date = request.args.get('date') or local_today()
    return jsonify(ReportService.dashboard_summary(date))


# ========================================
# STUDENTS
# ========================================

def _apply_student_fields(student, data):
    student.name = (data.get('name') or '').strip()
    student.parent_name = data.get('parentName')
    student.parent_email = data.get('parentEmail')
    student.parent_phone = data.get('parentPhone')
    if not student.name:
        raise ValidationError('Student name is required', {'name': 'Student name is required.'})


@school_bp.route('/students', methods=['GET'])
@require_auth
def list_students():
    return jsonify([s.to_dict() for s in Student.query.order_by(Student.id).all()])


@school_bp.route('/students/count')
@require_auth
def student_count():
    return jsonify({'count': Student.query.count()})


@school_bp.route('/students', methods=['POST'])
@require_roles(*AUTHOR_ROLES)
def create_student():
    student = Student()
    _apply_student_fields(student, _json_body())
    db.session.add(student)
    commit_or_raise('adding student')
    return jsonify(student.to_dict()), 201


@school_bp.route('/students/<int:student_id>', methods=['GET'])
@require_auth
def get_student(student_id):
    return jsonify(_get_or_404(Student, student_id, 'Student').to_dict())


@school_bp.route('/students/<int:student_id>', methods=['PUT'])
@require_roles(*AUTHOR_ROLES)
def update_student(student_id):
    student = _get_or_404(Student, student_id, 'Student')
    _apply_student_fields(student, _json_body())
    commit_or_raise('updating student')
    return jsonify(student.to_dict())


@school_bp.route('/students/<int:student_id>', methods=['DELETE'])
@require_roles(*AUTHOR_ROLES)
def delete_student(student_id):
    student = _get_or_404(Student, student_id, 'Student')
    db.session.delete(student)
    commit_or_raise('deleting student')
    return jsonify({'message': 'Student deleted'})


# ========================================
# ATTENDANCE
# ========================================

@school_bp.route('/attendance/summary/<date>')
@require_auth
def attendance_summary(date):
    return jsonify(ReportService.attendance_summary(date))


@school_bp.route('/attendance/<date>', methods=['GET'])
@require_auth
def get_attendance(date):
    """Register for a day (empty if none was taken)"""
    record = Attendance.query.filter_by(date=date).first()
    if record is None:
        return jsonify({'date': date, 'records': []})
    return jsonify(record.to_dict())


@school_bp.route('/attendance', methods=['POST'])
@require_roles(*AUTHOR_ROLES)
def save_attendance():
    """Create or replace the register for a day"""
    data = _json_body()
    date = (data.get('date') or '').strip()
    records = data.get('records')

    if not date:
        raise ValidationError('date is required', {'date': 'date is required.'})
    if not isinstance(records, list):
        raise ValidationError('records must be a list', {'records': 'records must be a list.'})
    for i, entry in enumerate(records):
        if not isinstance(entry, dict) or entry.get('status') not in ATTENDANCE_STATUSES:
            raise ValidationError(
                'Invalid attendance record',
                {f'records[{i}].status': f"status must be one of: {', '.join(ATTENDANCE_STATUSES)}."}
            )

    record = Attendance.query.filter_by(date=date).first()
    if record is None:
        record = Attendance(date=date)
        db.session.add(record)
    record.records = records
    commit_or_raise('saving attendance')

    logger.info('Attendance saved for %s (%d records)', date, len(records))
    return jsonify(record.to_dict()), 201


# ========================================
# ASSIGNMENTS
# ========================================

@school_bp.route('/assignments', methods=['GET'])
@require_auth
def list_assignments():
    return jsonify([a.to_dict() for a in Assignment.query.order_by(Assignment.id).all()])


@school_bp.route('/assignments/ungraded-count')
@require_auth
def ungraded_count():
    return jsonify({'count': ReportService.ungraded_count()})


@school_bp.route('/assignments', methods=['POST'])
@require_roles(*AUTHOR_ROLES)
def create_assignment():
    data = _json_body()
    title = (data.get('title') or '').strip()
    if not title:
        raise ValidationError('Assignment title is required', {'title': 'Assignment title is required.'})

    max_score = data.get('maxScore')
    if max_score in (None, ''):
        max_score = 100
    try:
        max_score = int(max_score)
    except (TypeError, ValueError):
        raise ValidationError('maxScore must be a whole number', {'maxScore': 'maxScore must be a whole number.'})
    if max_score < 1:
        raise ValidationError('maxScore must be at least 1', {'maxScore': 'maxScore must be at least 1.'})

    assignment = Assignment(
        title=title,
        description=data.get('description') or '',
        subject=data.get('subject'),
        due_date=data.get('dueDate'),
        max_score=max_score,
    )
    db.session.add(assignment)
    commit_or_raise('adding assignment')
    return jsonify(assignment.to_dict()), 201


# ========================================
# GRADES
# ========================================

@school_bp.route('/grades', methods=['GET'])
@require_auth
def list_grades():
    return jsonify([grade.to_dict() for grade in Grade.query.order_by(Grade.id).all()])


@school_bp.route('/grades', methods=['POST'])
@require_roles(*AUTHOR_ROLES)
def save_grade():
    """Create or replace the grade for a (student, assignment) pair"""
    data = _json_body()
    student_id = data.get('studentId')
    assignment_id = data.get('assignmentId')
    if student_id in (None, '') or assignment_id in (None, ''):
        raise ValidationError('studentId and assignmentId are required')
    try:
        score = float(data.get('score'))
    except (TypeError, ValueError):
        raise ValidationError('score must be a number', {'score': 'score must be a number.'})

    grade = Grade.query.filter_by(
        student_id=str(student_id),
        assignment_id=str(assignment_id)
    ).first()
    if grade is None:
        grade = Grade(student_id=str(student_id), assignment_id=str(assignment_id))
        db.session.add(grade)
    grade.score = score
    commit_or_raise('saving grade')
    return jsonify(grade.to_dict()), 201


# ========================================
# ANNOUNCEMENTS
# ========================================

@school_bp.route('/announcements', methods=['GET'])
@require_auth
def list_announcements():
    """Announcements, newest first"""
    announcements = Announcement.query.order_by(Announcement.date.desc(), Announcement.id.desc()).all()
    return jsonify([a.to_dict() for a in announcements])


@school_bp.route('/announcements', methods=['POST'])
@require_roles(*AUTHOR_ROLES)
def create_announcement():
    data = _json_body()
    title = (data.get('title') or '').strip()
    if not title:
        raise ValidationError('Announcement title is required', {'title': 'Announcement title is required.'})

    announcement = Announcement(title=title, content=data.get('content') or '', date=now_utc())
    db.session.add(announcement)
    commit_or_raise('creating announcement')
    return jsonify(announcement.to_dict()), 201
