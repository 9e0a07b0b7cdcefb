"""
Exam Service
Authoring store: create, read, update and delete exam definitions
"""
import logging

from examhall.errors import NotFoundError, ValidationError
from examhall.extensions import db
from examhall.models import Exam
from examhall.utils.helpers import commit_or_raise, now_utc

logger = logging.getLogger(__name__)

MIN_OPTIONS = 2
DEFAULT_DURATION = 60


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def _clean_question(raw, index, errors):
    """Validate one question dict, returning the stored shape (or None)"""
    prefix = f'questions[{index}]'
    if not isinstance(raw, dict):
        errors[prefix] = 'Question must be an object.'
        return None

    text = str(raw.get('question') or '').strip()
    if not text:
        errors[f'{prefix}.question'] = 'Question text is required.'

    options = raw.get('options')
    if not isinstance(options, list) or len(options) < MIN_OPTIONS:
        errors[f'{prefix}.options'] = f'At least {MIN_OPTIONS} options are required.'
        options = []
    else:
        options = [str(opt) for opt in options]
        if any(not opt.strip() for opt in options):
            errors[f'{prefix}.options'] = 'Options cannot be blank.'

    correct = raw.get('correctAnswer')
    if correct is None:
        errors[f'{prefix}.correctAnswer'] = 'correctAnswer is required.'
    elif not _is_int(correct) or not 0 <= correct < max(len(options), 1):
        errors[f'{prefix}.correctAnswer'] = 'correctAnswer must be the index of one of the options.'

    marks = raw.get('marks')
    if marks is None:
        marks = 1
    if not _is_int(marks) or marks < 1:
        errors[f'{prefix}.marks'] = 'marks must be a whole number of at least 1.'

    return {
        'question': text,
        'options': options,
        'correctAnswer': correct,
        'marks': marks,
    }


def normalize_definition(data):
    """
    Validate an exam definition from the API
    Returns a dict of model fields; raises ValidationError listing every problem.
    Any client-supplied totalMarks is ignored.
    """
    if not isinstance(data, dict):
        raise ValidationError('Exam definition must be a JSON object.')

    errors = {}

    title = str(data.get('title') or '').strip()
    if not title:
        errors['title'] = 'Exam title is required.'

    raw_questions = data.get('questions')
    if not isinstance(raw_questions, list) or not raw_questions:
        errors['questions'] = 'At least one question is required.'
        raw_questions = []

    questions = [_clean_question(q, i, errors) for i, q in enumerate(raw_questions)]

    duration = data.get('duration', DEFAULT_DURATION)
    if duration is None:
        duration = DEFAULT_DURATION
    if not _is_int(duration) or duration < 1:
        errors['duration'] = 'duration must be a whole number of minutes (at least 1).'

    assigned_to = data.get('assignedTo') or []
    if not isinstance(assigned_to, list):
        errors['assignedTo'] = 'assignedTo must be a list of identifiers.'
        assigned_to = []

    if errors:
        raise ValidationError('Please provide exam title and at least one valid question', errors)

    return {
        'title': title,
        'description': str(data.get('description') or ''),
        'questions': questions,
        'duration': duration,
        'total_marks': Exam.compute_total_marks(questions),
        'assigned_to': [str(a) for a in assigned_to],
    }


class ExamService:
    """Exam authoring store"""

    @staticmethod
    def create_exam(data, created_by=None):
        fields = normalize_definition(data)
        exam = Exam(created_by=created_by or 'admin', created_at=now_utc(), **fields)
        db.session.add(exam)
        commit_or_raise('creating exam')

        logger.info('Exam %s created: %r (%d questions, %d marks)',
                    exam.id, exam.title, len(exam.questions), exam.total_marks)
        return exam

    @staticmethod
    def list_exams():
        return Exam.query.order_by(Exam.id).all()

    @staticmethod
    def get_exam(exam_id):
        exam = db.session.get(Exam, exam_id)
        if exam is None:
            raise NotFoundError('Exam not found')
        return exam

    @staticmethod
    def update_exam(exam_id, data):
        exam = ExamService.get_exam(exam_id)
        fields = normalize_definition(data)

        for name, value in fields.items():
            setattr(exam, name, value)
        exam.updated_at = now_utc()
        commit_or_raise('updating exam')

        logger.info('Exam %s updated: %d marks', exam.id, exam.total_marks)
        return exam

    @staticmethod
    def delete_exam(exam_id):
        """Delete an exam; its submissions stay as history"""
        exam = ExamService.get_exam(exam_id)
        db.session.delete(exam)
        commit_or_raise('deleting exam')

        logger.info('Exam %s deleted', exam_id)

    @staticmethod
    def exam_titles():
        """Map of exam id -> title for joining onto result listings"""
        return {exam_id: title for exam_id, title in db.session.query(Exam.id, Exam.title)}
