import random
import time
from dataclasses import replace

from mathquiz.models import create_session
from mathquiz.services.quiz.problems import Difficulty
from mathquiz.services.quiz.state import Feedback


def _wait_for(predicate, timeout=3.0):
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def test_countdown_ticks_until_round_over(timed_app):
    session = create_session(timed_app, rng=random.Random(3))
    session.start(Difficulty.HARD)
    assert session.countdown is not None

    assert _wait_for(lambda: session.state.round_over)
    assert session.state.time_left == 0
    assert not session.state.round_active
    assert session.countdown is None

    # Nothing keeps ticking against the finished round
    snapshot = session.state
    time.sleep(0.2)
    assert session.state is snapshot


def test_reset_cancels_countdown(timed_app):
    session = create_session(timed_app)
    session.start(Difficulty.EASY)
    handle = session.countdown
    assert _wait_for(lambda: session.state.time_left < 60)

    session.reset()
    assert handle.cancelled
    assert session.countdown is None
    time.sleep(0.2)
    assert session.state.time_left == 0
    assert session.state.difficulty is None


def test_restart_keeps_single_countdown(timed_app):
    session = create_session(timed_app)
    session.start(Difficulty.EASY)
    first = session.countdown
    session.start(Difficulty.EASY)
    second = session.countdown
    assert first.cancelled
    assert not second.cancelled
    assert first is not second

    # A stale handle can no longer drive the session
    before = session.state
    assert session.tick(handle=first) is False
    assert session.state is before


def test_submit_advances_after_delay(timed_app):
    session = create_session(timed_app, rng=random.Random(11))
    session.start(Difficulty.EASY)
    first_problem = session.state.problem
    assert session.submit(str(first_problem.correct_answer))
    assert session.state.feedback is Feedback.CORRECT
    assert session.pending_advance is not None

    assert _wait_for(lambda: session.state.feedback is None)
    state = session.state
    assert state.score == 10
    assert state.total_questions == 1
    assert state.answer == ''
    assert session.pending_advance is None


def test_advance_suppressed_when_round_ended_during_delay(flask_app):
    session = create_session(flask_app)
    session.start(Difficulty.HARD)
    session.submit('not a number')
    # Round ends before the delayed advance fires
    session.state = replace(session.state, time_left=1)
    assert session.tick()
    assert session.state.round_over

    over = session.state
    assert session.advance() is False
    assert session.state is over


def test_stale_advance_handle_is_ignored(timed_app):
    timed_app.config['ADVANCE_DELAY_SEC'] = 5.0
    session = create_session(timed_app)
    session.start(Difficulty.MEDIUM)
    session.submit('1')
    stale = session.pending_advance
    session.reset()
    assert stale.cancelled
    assert session.advance(handle=stale) is False
    assert session.state.difficulty is None


def test_scheduler_disabled_in_plain_testing(flask_app):
    session = create_session(flask_app)
    session.start(Difficulty.EASY)
    assert session.countdown is None
    session.submit('0')
    assert session.pending_advance is None
