"""
Scoring Service
Authoritative server-side scoring and submission history
"""
import logging

from examhall.errors import ValidationError
from examhall.extensions import db
from examhall.models import Submission, calculate_percentage
from examhall.services.exam_service import ExamService
from examhall.utils.helpers import commit_or_raise, now_utc

logger = logging.getLogger(__name__)

# Legacy clients send -1 for an unanswered question
UNANSWERED_SENTINEL = -1
UNKNOWN_EXAM_TITLE = 'Unknown Exam'


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def normalize_answers(answers, question_count):
    """
    Coerce a submitted answer vector to one entry per question
    None marks an unanswered position. Missing, non-integer and
    out-of-range entries become None rather than raising.
    """
    if not isinstance(answers, (list, tuple)):
        answers = []

    normalized = []
    for index in range(question_count):
        value = answers[index] if index < len(answers) else None
        if not _is_int(value) or value == UNANSWERED_SENTINEL or value < 0:
            value = None
        normalized.append(value)
    return normalized


class ScoringService:
    """Service for scoring exam attempts"""

    @staticmethod
    def calculate_score(questions, answers):
        """
        Sum the marks of every question whose answer matches its key
        answers[i] is compared with questions[i]['correctAnswer'];
        unanswered, mismatched and missing positions contribute zero.
        """
        answers = answers or []
        score = 0
        for index, question in enumerate(questions):
            if index >= len(answers):
                break
            selected = answers[index]
            if not _is_int(selected):
                continue
            if selected == question.get('correctAnswer'):
                score += int(question.get('marks') or 1)
        return score

    @staticmethod
    def submit_exam(exam_id, student_id, answers, time_taken=0):
        """
        Score and persist one attempt
        Raises NotFoundError for an unknown exam (nothing is stored) and
        PersistenceError if the write fails (no score is reported).
        """
        exam = ExamService.get_exam(exam_id)

        if student_id is None or not str(student_id).strip():
            raise ValidationError('studentId is required', {'studentId': 'studentId is required.'})

        questions = exam.get_questions()
        normalized = normalize_answers(answers, len(questions))
        score = ScoringService.calculate_score(questions, normalized)

        try:
            time_taken = max(int(time_taken or 0), 0)
        except (TypeError, ValueError):
            time_taken = 0

        submission = Submission(
            exam_id=exam.id,
            student_id=str(student_id),
            answers=normalized,
            score=score,
            total_marks=exam.total_marks,
            time_taken=time_taken,
            submitted_at=now_utc(),
        )
        db.session.add(submission)
        commit_or_raise('submitting exam')

        logger.info('Submission %s: student %s scored %d/%d on exam %s',
                    submission.id, submission.student_id, score, exam.total_marks, exam.id)

        return {
            'submissionId': submission.id,
            'score': score,
            'totalMarks': submission.total_marks,
            'percentage': calculate_percentage(score, submission.total_marks),
        }

    @staticmethod
    def _with_titles(submissions):
        titles = ExamService.exam_titles()
        payload = []
        for submission in submissions:
            entry = submission.to_dict()
            entry['examTitle'] = titles.get(submission.exam_id, UNKNOWN_EXAM_TITLE)
            payload.append(entry)
        return payload

    @staticmethod
    def results_for_student(student_id):
        """All submissions by one student, newest first"""
        submissions = (
            Submission.query
            .filter_by(student_id=str(student_id))
            .order_by(Submission.submitted_at.desc(), Submission.id.desc())
            .all()
        )
        return ScoringService._with_titles(submissions)

    @staticmethod
    def submissions_for_exam(exam_id):
        """All submissions recorded against an exam id (the exam may be deleted)"""
        submissions = (
            Submission.query
            .filter_by(exam_id=exam_id)
            .order_by(Submission.id)
            .all()
        )
        return ScoringService._with_titles(submissions)
