"""
Exam Session Engine
One student's timed attempt at one exam, modelled as an immutable
session value and pure transition functions:

    NOT_STARTED -> IN_PROGRESS -> SUBMITTED (terminal)

The countdown is an explicit recurring task (CountdownTimer) that can be
cancelled; callers cancel it before acting on a SUBMITTED transition so a
late tick can never trigger a second submission.
"""
from dataclasses import dataclass, field, replace
from typing import Callable, Optional, Tuple

NOT_STARTED = 'not_started'
IN_PROGRESS = 'in_progress'
SUBMITTED = 'submitted'

REASON_MANUAL = 'manual'
REASON_TIMEOUT = 'timeout'


class SessionError(ValueError):
    """Transition not allowed in the session's current state"""


@dataclass(frozen=True)
class ExamSession:
    exam_id: int
    option_counts: Tuple[int, ...]
    duration: int  # minutes
    total_marks: int
    status: str = NOT_STARTED
    answers: Tuple[Optional[int], ...] = ()
    current_question: int = 0
    remaining_seconds: int = 0
    submit_reason: Optional[str] = None
    title: str = field(default='', compare=False)

    @property
    def question_count(self):
        return len(self.option_counts)

    @property
    def total_seconds(self):
        return self.duration * 60

    @property
    def is_submitted(self):
        return self.status == SUBMITTED


def new_session(exam):
    """Build a NOT_STARTED session from an Exam model"""
    questions = exam.get_questions()
    option_counts = tuple(len(q.get('options') or []) for q in questions)
    return ExamSession(
        exam_id=exam.id,
        title=exam.title,
        option_counts=option_counts,
        duration=exam.duration,
        total_marks=exam.total_marks,
        answers=(None,) * len(option_counts),
        remaining_seconds=exam.get_total_time_seconds(),
    )


def _require(session, status, action):
    if session.status != status:
        raise SessionError(f'Cannot {action} while exam is {session.status}')


def _check_question(session, question_index):
    if (not isinstance(question_index, int) or isinstance(question_index, bool)
            or not 0 <= question_index < session.question_count):
        raise SessionError(f'Question {question_index} does not exist')


def start(session):
    _require(session, NOT_STARTED, 'start')
    return replace(session, status=IN_PROGRESS, remaining_seconds=session.total_seconds)


def select_answer(session, question_index, option_index):
    """Record (or change) the selected option for one question"""
    _require(session, IN_PROGRESS, 'answer')
    _check_question(session, question_index)
    if option_index is None:
        return clear_answer(session, question_index)
    if (not isinstance(option_index, int) or isinstance(option_index, bool)
            or not 0 <= option_index < session.option_counts[question_index]):
        raise SessionError(f'Option {option_index} does not exist for question {question_index}')

    answers = list(session.answers)
    answers[question_index] = option_index
    return replace(session, answers=tuple(answers))


def clear_answer(session, question_index):
    _require(session, IN_PROGRESS, 'answer')
    _check_question(session, question_index)
    answers = list(session.answers)
    answers[question_index] = None
    return replace(session, answers=tuple(answers))


def navigate(session, question_index):
    """Move to any question; out-of-range targets are clamped"""
    if session.is_submitted or session.question_count == 0:
        return session
    target = max(0, min(int(question_index), session.question_count - 1))
    return replace(session, current_question=target)


def tick(session):
    """
    Advance the countdown by one second
    Reaching exactly zero submits with reason 'timeout'. Ticks outside
    IN_PROGRESS are ignored.
    """
    if session.status != IN_PROGRESS:
        return session
    remaining = max(session.remaining_seconds - 1, 0)
    if remaining == 0:
        return replace(session, remaining_seconds=0, status=SUBMITTED, submit_reason=REASON_TIMEOUT)
    return replace(session, remaining_seconds=remaining)


def submit(session):
    """Manual submit; submitting twice leaves the first submission in place"""
    if session.is_submitted:
        return session
    _require(session, IN_PROGRESS, 'submit')
    return replace(session, status=SUBMITTED, submit_reason=REASON_MANUAL)


def elapsed_seconds(session):
    return session.total_seconds - session.remaining_seconds


def answered_count(session):
    return sum(1 for a in session.answers if a is not None)


def progress(session):
    """Percent of questions answered"""
    if not session.question_count:
        return 0.0
    return round(answered_count(session) / session.question_count * 100, 2)


def submission_payload(session, student_id):
    """Request body for the scoring endpoint"""
    return {
        'studentId': student_id,
        'answers': list(session.answers),
        'timeTaken': elapsed_seconds(session),
    }


def format_time(seconds):
    """MM:SS countdown display"""
    mins, secs = divmod(max(int(seconds), 0), 60)
    return f'{mins:02d}:{secs:02d}'


class CountdownTimer:
    """
    Recurring one-second task with cancellation

    run() sleeps, then checks the cancelled flag before calling on_tick,
    so cancel() always wins over a tick that has not fired yet.
    """

    def __init__(self, on_tick: Callable[[], None], sleep: Callable[[float], None], interval=1):
        self._on_tick = on_tick
        self._sleep = sleep
        self.interval = interval
        self.cancelled = False
        self.ticks = 0

    def cancel(self):
        self.cancelled = True

    def run(self):
        while not self.cancelled:
            self._sleep(self.interval)
            if self.cancelled:
                break
            self.ticks += 1
            self._on_tick()
