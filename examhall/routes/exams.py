"""
Exam Routes
Exam authoring CRUD, authoritative submission scoring and result history
"""
from flask import Blueprint, g, jsonify, request

from examhall.errors import ForbiddenError
from examhall.services import ExamService, ScoringService
from examhall.utils import AUTHOR_ROLES, get_current_user, require_auth, require_roles

exams_bp = Blueprint('exams', __name__)


def _caller_is_author():
    user = get_current_user()
    return user is not None and user.role in AUTHOR_ROLES


def _public_exam(exam):
    """Exam payload for students: the answer key is withheld"""
    payload = exam.to_dict()
    payload['questions'] = [
        {k: v for k, v in q.items() if k != 'correctAnswer'}
        for q in payload['questions']
    ]
    return payload


def _check_student_access(user, student_id):
    """Students see only their own results, parents only their linked child account's"""
    if user.role in AUTHOR_ROLES:
        return
    if user.role == 'student' and str(student_id) == str(user.id):
        return
    if user.role == 'parent' and user.student_id and str(student_id) == str(user.student_id):
        return
    raise ForbiddenError('Not allowed to view these results')


@exams_bp.route('', methods=['GET'])
def list_exams():
    """List all exams"""
    exams = ExamService.list_exams()
    if _caller_is_author():
        return jsonify([exam.to_dict() for exam in exams])
    return jsonify([_public_exam(exam) for exam in exams])


@exams_bp.route('', methods=['POST'])
@require_roles(*AUTHOR_ROLES)
def create_exam():
    """Create an exam (totalMarks is always recomputed)"""
    exam = ExamService.create_exam(request.get_json(silent=True), created_by=g.current_user.email)
    return jsonify(exam.to_dict()), 201


@exams_bp.route('/<int:exam_id>', methods=['GET'])
def get_exam(exam_id):
    exam = ExamService.get_exam(exam_id)
    if _caller_is_author():
        return jsonify(exam.to_dict())
    return jsonify(_public_exam(exam))


@exams_bp.route('/<int:exam_id>', methods=['PUT'])
@require_roles(*AUTHOR_ROLES)
def update_exam(exam_id):
    exam = ExamService.update_exam(exam_id, request.get_json(silent=True))
    return jsonify(exam.to_dict())


@exams_bp.route('/<int:exam_id>', methods=['DELETE'])
@require_roles(*AUTHOR_ROLES)
def delete_exam(exam_id):
    ExamService.delete_exam(exam_id)
    return jsonify({'message': 'Exam deleted successfully'})


@exams_bp.route('/<int:exam_id>/submit', methods=['POST'])
@require_auth
def submit_exam(exam_id):
    """
    Score an attempt against the stored answer key
    Body: {studentId, answers[], timeTaken}. Students always submit as
    themselves; authors may submit on a student's behalf.
    """
    data = request.get_json(silent=True) or {}
    user = g.current_user

    student_id = data.get('studentId')
    if user.role not in AUTHOR_ROLES:
        if student_id is not None and str(student_id) != str(user.id):
            raise ForbiddenError('Cannot submit on behalf of another student')
        student_id = user.id

    result = ScoringService.submit_exam(
        exam_id,
        student_id,
        data.get('answers'),
        data.get('timeTaken', 0),
    )
    return jsonify(result), 201


@exams_bp.route('/results/<student_id>', methods=['GET'])
@require_auth
def student_results(student_id):
    """Submission history for one student"""
    _check_student_access(g.current_user, student_id)
    return jsonify(ScoringService.results_for_student(student_id))


@exams_bp.route('/<int:exam_id>/submissions', methods=['GET'])
@require_roles(*AUTHOR_ROLES)
def exam_submissions(exam_id):
    """All submissions for an exam id, including ones whose exam was deleted"""
    return jsonify(ScoringService.submissions_for_exam(exam_id))
