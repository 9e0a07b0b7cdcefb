"""
Socket.IO Event Handlers
Live timed exam sessions: start, answer, navigate, countdown and submit
"""
import logging
import threading

from flask import current_app, request

from examhall.errors import ExamHallError
from examhall.extensions import exam_sessions, socketio
from examhall.services import ExamService, ScoringService
from examhall.services import exam_session as engine
from examhall.utils import AUTHOR_ROLES, verify_token

logger = logging.getLogger(__name__)


class LiveExam:
    """Server-side holder for one connection's exam session and its timer"""

    def __init__(self, sid, student_id, session):
        self.sid = sid
        self.student_id = student_id
        self.session = session
        self.timer = None
        self.result = None
        self.persisting = False
        self.lock = threading.Lock()

    def transition(self, fn, *args):
        """Apply a transition; returns (before, after)"""
        with self.lock:
            before = self.session
            self.session = fn(before, *args)
            return before, self.session

    def state(self):
        session = self.session
        return {
            'examId': session.exam_id,
            'title': session.title,
            'status': session.status,
            'answers': list(session.answers),
            'currentQuestion': session.current_question,
            'remaining': session.remaining_seconds,
            'answered': engine.answered_count(session),
            'progress': engine.progress(session),
            'questionCount': session.question_count,
            'totalMarks': session.total_marks,
        }


def _emit_error(sid, message):
    socketio.emit('exam_error', {'message': message}, to=sid)


def _start_countdown(live, app):
    """Run the one-second countdown as a background task"""
    interval = app.config.get('EXAM_TICK_SECONDS', 1)
    live.timer = engine.CountdownTimer(
        on_tick=lambda: tick_session(live.sid, app),
        sleep=socketio.sleep,
        interval=interval,
    )
    socketio.start_background_task(live.timer.run)


def _cancel_countdown(live):
    if live.timer is not None:
        live.timer.cancel()


def _persist(live, app):
    """Send the frozen answer vector to the scoring service"""
    with live.lock:
        if live.persisting or live.result is not None:
            return
        live.persisting = True
        payload = engine.submission_payload(live.session, live.student_id)
        reason = live.session.submit_reason

    result = None
    try:
        with app.app_context():
            result = ScoringService.submit_exam(
                live.session.exam_id,
                payload['studentId'],
                payload['answers'],
                payload['timeTaken'],
            )
    except ExamHallError as exc:
        logger.warning('Submit failed for %s on exam %s: %s',
                       live.student_id, live.session.exam_id, exc.message)
        _emit_error(live.sid, f'{exc.message}. Please submit again.')
        return
    finally:
        # result and persisting change together so no caller sees neither set
        with live.lock:
            live.result = result
            live.persisting = False

    socketio.emit('exam_submitted', dict(result, reason=reason), to=live.sid)


def _on_transition(live, before, after, app):
    """Cancel the countdown before acting on a SUBMITTED transition"""
    if before.status == engine.IN_PROGRESS and after.is_submitted:
        _cancel_countdown(live)
        logger.info('Exam %s submitted by %s (%s)',
                    after.exam_id, live.student_id, after.submit_reason)
        _persist(live, app)


def tick_session(sid, app):
    """One countdown tick for the session owned by sid"""
    live = exam_sessions.get(sid)
    if live is None:
        return
    before, after = live.transition(engine.tick)
    if after.status == engine.IN_PROGRESS:
        socketio.emit('exam_tick', {
            'remaining': after.remaining_seconds,
            'display': engine.format_time(after.remaining_seconds),
        }, to=sid)
    _on_transition(live, before, after, app)


def discard_session(sid):
    live = exam_sessions.pop(sid, None)
    if live is not None:
        _cancel_countdown(live)
    return live


def register_socket_events():
    """Register all Socket.IO event handlers"""

    @socketio.on('exam_start')
    def handle_exam_start(data):
        """Student starts a timed attempt"""
        sid = request.sid
        data = data or {}
        app = current_app._get_current_object()

        try:
            claims = verify_token(data.get('token') or '')
            exam = ExamService.get_exam(int(data.get('examId')))
        except ExamHallError as exc:
            _emit_error(sid, exc.message)
            return
        except (TypeError, ValueError):
            _emit_error(sid, 'examId is required')
            return

        student_id = str(claims['id'])
        if claims.get('role') in AUTHOR_ROLES and data.get('studentId'):
            student_id = str(data['studentId'])

        discard_session(sid)
        live = LiveExam(sid, student_id, engine.start(engine.new_session(exam)))
        exam_sessions[sid] = live

        logger.info('Exam %s started by %s (%d s)', exam.id, student_id, live.session.remaining_seconds)
        socketio.emit('exam_started', live.state(), to=sid)
        _start_countdown(live, app)

    @socketio.on('exam_answer')
    def handle_exam_answer(data):
        """Select, change or clear the option for one question"""
        sid = request.sid
        live = exam_sessions.get(sid)
        if live is None:
            _emit_error(sid, 'No exam in progress')
            return
        data = data or {}
        try:
            live.transition(engine.select_answer, data.get('questionIndex'), data.get('optionIndex'))
        except engine.SessionError as exc:
            _emit_error(sid, str(exc))
            return
        socketio.emit('exam_state', live.state(), to=sid)

    @socketio.on('exam_navigate')
    def handle_exam_navigate(data):
        sid = request.sid
        live = exam_sessions.get(sid)
        if live is None:
            _emit_error(sid, 'No exam in progress')
            return
        try:
            live.transition(engine.navigate, int((data or {}).get('questionIndex', 0)))
        except (TypeError, ValueError):
            _emit_error(sid, 'questionIndex must be a number')
            return
        socketio.emit('exam_state', live.state(), to=sid)

    @socketio.on('exam_submit')
    def handle_exam_submit(data=None):
        """Manual submit, or a retry after a failed submit"""
        sid = request.sid
        live = exam_sessions.get(sid)
        if live is None:
            _emit_error(sid, 'No exam in progress')
            return
        app = current_app._get_current_object()

        before, after = live.transition(engine.submit)
        if before.is_submitted:
            if live.result is None:
                _persist(live, app)
            else:
                socketio.emit('exam_submitted', dict(live.result, reason=after.submit_reason), to=sid)
            return
        _on_transition(live, before, after, app)

    @socketio.on('disconnect')
    def handle_disconnect(*args):
        """Cancel the countdown and forget the session"""
        live = discard_session(request.sid)
        if live is not None and not live.session.is_submitted:
            logger.info('Exam %s abandoned by %s', live.session.exam_id, live.student_id)
