import pytest

from examhall.services import exam_session as engine
from examhall.services.exam_session import CountdownTimer, ExamSession, SessionError


@pytest.fixture
def session():
    return ExamSession(
        exam_id=1,
        title='Algebra Basics',
        option_counts=(4, 4, 2),
        duration=1,
        total_marks=4,
        answers=(None, None, None),
        remaining_seconds=60,
    )


@pytest.fixture
def running(session):
    return engine.start(session)


def test_new_session_from_exam(app, created_exam):
    from examhall.services import ExamService

    with app.app_context():
        session = engine.new_session(ExamService.get_exam(created_exam['_id']))

    assert session.status == engine.NOT_STARTED
    assert session.question_count == 2
    assert session.option_counts == (4, 4)
    assert session.answers == (None, None)
    assert session.remaining_seconds == 60
    assert session.total_marks == 3


def test_not_started_collects_no_answers(session):
    with pytest.raises(SessionError):
        engine.select_answer(session, 0, 1)
    with pytest.raises(SessionError):
        engine.submit(session)
    assert engine.tick(session) is session


def test_start_begins_countdown(session):
    running = engine.start(session)

    assert running.status == engine.IN_PROGRESS
    assert running.remaining_seconds == 60
    assert session.status == engine.NOT_STARTED
    with pytest.raises(SessionError):
        engine.start(running)


def test_answers_in_any_order_and_change(running):
    state = engine.select_answer(running, 2, 1)
    state = engine.select_answer(state, 0, 3)
    state = engine.select_answer(state, 0, 2)

    assert state.answers == (2, None, 1)
    assert engine.answered_count(state) == 2
    assert engine.progress(state) == 66.67
    assert running.answers == (None, None, None)


def test_clear_answer(running):
    state = engine.select_answer(running, 1, 0)
    assert engine.select_answer(state, 1, None).answers == (None, None, None)
    assert engine.clear_answer(state, 1).answers == (None, None, None)


@pytest.mark.parametrize('question, option', [(3, 0), (-1, 0), (2, 2), (0, 4), (0, -1), (0, True)])
def test_select_answer_rejects_out_of_range(running, question, option):
    with pytest.raises(SessionError):
        engine.select_answer(running, question, option)


def test_navigate_is_free_and_clamped(running):
    assert engine.navigate(running, 2).current_question == 2
    assert engine.navigate(engine.navigate(running, 2), 0).current_question == 0
    assert engine.navigate(running, 10).current_question == 2
    assert engine.navigate(running, -4).current_question == 0


def test_countdown_reaching_zero_submits_once(running):
    state = engine.select_answer(running, 0, 1)
    transitions = 0
    for _ in range(60):
        before = state
        state = engine.tick(state)
        if before.status == engine.IN_PROGRESS and state.is_submitted:
            transitions += 1

    assert transitions == 1
    assert state.status == engine.SUBMITTED
    assert state.submit_reason == engine.REASON_TIMEOUT
    assert state.remaining_seconds == 0
    assert state.answers == (1, None, None)

    assert engine.tick(state) is state
    assert engine.submit(state) is state
    with pytest.raises(SessionError):
        engine.select_answer(state, 1, 1)


def test_tick_one_second_before_zero_keeps_running(running):
    state = running
    for _ in range(59):
        state = engine.tick(state)
    assert state.status == engine.IN_PROGRESS
    assert state.remaining_seconds == 1


def test_manual_submit_and_payload(running):
    state = engine.select_answer(running, 1, 3)
    for _ in range(15):
        state = engine.tick(state)

    submitted = engine.submit(state)

    assert submitted.submit_reason == engine.REASON_MANUAL
    assert engine.elapsed_seconds(submitted) == 15
    assert engine.submission_payload(submitted, '7') == {
        'studentId': '7',
        'answers': [None, 3, None],
        'timeTaken': 15,
    }


def test_format_time():
    assert engine.format_time(3600) == '60:00'
    assert engine.format_time(65) == '01:05'
    assert engine.format_time(-3) == '00:00'


def test_timer_ticks_until_cancelled():
    calls = []

    def on_tick():
        calls.append('tick')
        if len(calls) == 3:
            timer.cancel()

    timer = CountdownTimer(on_tick=on_tick, sleep=lambda seconds: None)
    timer.run()

    assert calls == ['tick', 'tick', 'tick']
    assert timer.ticks == 3


def test_cancel_during_sleep_suppresses_pending_tick():
    calls = []

    def sleep(seconds):
        assert seconds == 1
        if timer.ticks == 2:
            timer.cancel()

    timer = CountdownTimer(on_tick=lambda: calls.append('tick'), sleep=sleep)
    timer.run()

    assert len(calls) == 2


def test_timer_drives_session_to_single_timeout(running):
    holder = {'state': running, 'submits': 0}

    def on_tick():
        before = holder['state']
        holder['state'] = engine.tick(before)
        if before.status == engine.IN_PROGRESS and holder['state'].is_submitted:
            timer.cancel()
            holder['submits'] += 1

    timer = CountdownTimer(on_tick=on_tick, sleep=lambda seconds: None)
    timer.run()

    assert holder['submits'] == 1
    assert timer.ticks == 60
    assert holder['state'].submit_reason == engine.REASON_TIMEOUT
