import pytest

from examhall.errors import PersistenceError
from examhall.extensions import exam_sessions, socketio
from examhall.models import Submission
from examhall.sockets import exam_events


@pytest.fixture
def no_background_timer(monkeypatch):
    """Keep the countdown from running in a thread; tests tick it by hand"""
    started = []
    monkeypatch.setattr(exam_events, '_start_countdown', lambda live, app: started.append(live))
    return started


@pytest.fixture
def live_client(app, no_background_timer):
    client = socketio.test_client(app)
    yield client
    if client.is_connected():
        client.disconnect()


def _events(client, name):
    return [msg['args'][0] for msg in client.get_received() if msg['name'] == name]


def _start(client, exam, student):
    client.emit('exam_start', {'examId': exam['_id'], 'token': student['token']})
    return _events(client, 'exam_started')


def _tick(app, times):
    sid = next(iter(exam_sessions))
    with app.app_context():
        for _ in range(times):
            exam_events.tick_session(sid, app)


def test_start_creates_in_progress_session(live_client, created_exam, student, no_background_timer):
    started = _start(live_client, created_exam, student)

    assert len(started) == 1
    assert started[0]['status'] == 'in_progress'
    assert started[0]['remaining'] == 60
    assert started[0]['answers'] == [None, None]
    assert started[0]['questionCount'] == 2
    assert len(no_background_timer) == 1


def test_start_with_bad_token_is_rejected(live_client, created_exam):
    live_client.emit('exam_start', {'examId': created_exam['_id'], 'token': 'forged'})

    errors = _events(live_client, 'exam_error')
    assert errors == [{'message': 'Invalid or expired token'}]
    assert exam_sessions == {}


def test_start_unknown_exam_is_rejected(live_client, student):
    live_client.emit('exam_start', {'examId': 999, 'token': student['token']})
    assert _events(live_client, 'exam_error') == [{'message': 'Exam not found'}]


def test_manual_submit_scores_once(app, live_client, created_exam, student):
    _start(live_client, created_exam, student)
    live_client.emit('exam_navigate', {'questionIndex': 1})
    live_client.emit('exam_answer', {'questionIndex': 1, 'optionIndex': 1})
    live_client.emit('exam_answer', {'questionIndex': 0, 'optionIndex': 0})
    states = _events(live_client, 'exam_state')
    assert states[0]['currentQuestion'] == 1
    assert states[-1]['answers'] == [0, 1]

    _tick(app, 5)
    live_client.emit('exam_submit')
    live_client.emit('exam_submit')

    received = live_client.get_received()
    submitted = [m['args'][0] for m in received if m['name'] == 'exam_submitted']
    assert len(submitted) == 2
    assert submitted[0] == submitted[1]
    assert submitted[0]['score'] == 3
    assert submitted[0]['percentage'] == 100.0
    assert submitted[0]['reason'] == 'manual'

    with app.app_context():
        submission = Submission.query.one()
        assert submission.time_taken == 5
        assert submission.student_id == str(student['id'])


def test_timeout_submits_exactly_once(app, live_client, created_exam, student):
    _start(live_client, created_exam, student)
    live_client.emit('exam_answer', {'questionIndex': 1, 'optionIndex': 1})
    live_client.get_received()

    _tick(app, 60)
    received = live_client.get_received()
    ticks = [m['args'][0] for m in received if m['name'] == 'exam_tick']
    submitted = [m['args'][0] for m in received if m['name'] == 'exam_submitted']

    assert len(ticks) == 59
    assert ticks[-1] == {'remaining': 1, 'display': '00:01'}
    assert len(submitted) == 1
    assert submitted[0]['reason'] == 'timeout'
    assert submitted[0]['score'] == 2
    assert submitted[0]['percentage'] == 66.67

    # Stray ticks and late answers change nothing
    _tick(app, 3)
    live_client.emit('exam_answer', {'questionIndex': 0, 'optionIndex': 0})
    received = live_client.get_received()
    assert [m['name'] for m in received] == ['exam_error']

    with app.app_context():
        assert Submission.query.count() == 1
        assert Submission.query.one().answers == [None, 1]
        assert Submission.query.one().time_taken == 60


def test_submit_cancels_countdown(live_client, created_exam, student):
    _start(live_client, created_exam, student)
    live = next(iter(exam_sessions.values()))
    live.timer = exam_events.engine.CountdownTimer(on_tick=lambda: None, sleep=lambda s: None)

    live_client.emit('exam_submit')

    assert live.timer.cancelled


def test_failed_submit_can_be_retried(app, live_client, created_exam, student, monkeypatch):
    _start(live_client, created_exam, student)
    live_client.emit('exam_answer', {'questionIndex': 0, 'optionIndex': 0})
    live_client.get_received()

    real_submit = exam_events.ScoringService.submit_exam

    def unreachable(*args, **kwargs):
        raise PersistenceError('Error submitting exam')

    monkeypatch.setattr(exam_events.ScoringService, 'submit_exam', staticmethod(unreachable))
    live_client.emit('exam_submit')
    assert _events(live_client, 'exam_error') == [{'message': 'Error submitting exam. Please submit again.'}]

    monkeypatch.setattr(exam_events.ScoringService, 'submit_exam', staticmethod(real_submit))
    live_client.emit('exam_submit')
    submitted = _events(live_client, 'exam_submitted')

    assert len(submitted) == 1
    assert submitted[0]['score'] == 1
    with app.app_context():
        assert Submission.query.count() == 1


def test_disconnect_discards_session(live_client, created_exam, student):
    _start(live_client, created_exam, student)
    live = next(iter(exam_sessions.values()))
    live.timer = exam_events.engine.CountdownTimer(on_tick=lambda: None, sleep=lambda s: None)

    live_client.disconnect()

    assert exam_sessions == {}
    assert live.timer.cancelled


def test_events_without_session_report_error(live_client):
    live_client.emit('exam_answer', {'questionIndex': 0, 'optionIndex': 0})
    live_client.emit('exam_submit')
    assert _events(live_client, 'exam_error') == [
        {'message': 'No exam in progress'},
        {'message': 'No exam in progress'},
    ]


class _LockWithRival:
    """Lock that runs a competing caller right after each release"""

    def __init__(self, lock, rival):
        self._lock = lock
        self._rival = rival
        self._running = False

    def __enter__(self):
        self._lock.acquire()
        return self

    def __exit__(self, *exc_info):
        self._lock.release()
        if not self._running:
            self._running = True
            try:
                self._rival()
            finally:
                self._running = False
        return False


def test_concurrent_persist_stores_attempt_once(app, live_client, created_exam, student):
    _start(live_client, created_exam, student)
    live = next(iter(exam_sessions.values()))
    live.transition(exam_events.engine.submit)
    live.lock = _LockWithRival(live.lock, lambda: exam_events._persist(live, app))

    exam_events._persist(live, app)

    assert len(_events(live_client, 'exam_submitted')) == 1
    assert live.result is not None
    assert not live.persisting
    with app.app_context():
        assert Submission.query.count() == 1
