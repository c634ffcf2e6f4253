import random
import string
import threading
import time
from typing import Dict, List, Optional

from mathquiz import socketio
from mathquiz.services.quiz.problems import Difficulty
from mathquiz.services.quiz.scheduler import arm_countdown, cancel_advance, cancel_all, schedule_advance
from mathquiz.services.quiz.scoring import timer_band
from mathquiz.services.quiz.state import (
    IDLE,
    RoundState,
    advance_problem,
    reset_round,
    start_round,
    submit_answer,
    tick,
    update_answer_text,
)


def serialize_state(state: RoundState, include_answer: bool = False) -> dict:
    payload = {
        'difficulty': state.difficulty.value if state.difficulty else None,
        'num1': state.problem.num1,
        'num2': state.problem.num2,
        'answer': state.answer,
        'time_left': state.time_left,
        'time_limit': state.time_limit,
        'score': state.score,
        'total_questions': state.total_questions,
        'correct_count': state.correct_count,
        'round_active': state.round_active,
        'round_over': state.round_over,
        'feedback': state.feedback.value if state.feedback else None,
        'phase': state.phase,
        'accuracy': state.accuracy_percent,
        'timer_band': timer_band(state.time_left, state.time_limit),
    }
    if include_answer:
        payload['correct_answer'] = state.problem.correct_answer
    return payload


class QuizSession:
    """One player's quiz: the current round snapshot plus the timers driving it.

    All transitions run under ``_lock`` so a tick, a delayed advance and a
    client request never interleave.
    """

    def __init__(self, app, code: str, rng: Optional[random.Random] = None):
        self.app = app
        self.code = code
        self.rng = rng
        self.state: RoundState = IDLE
        self.countdown = None
        self.pending_advance = None
        self.last_active = time.time()
        self._lock = threading.Lock()

    @property
    def room(self) -> str:
        return f"quiz:{self.code}"

    def start(self, difficulty: Difficulty) -> RoundState:
        with self._lock:
            self.last_active = time.time()
            self.state = start_round(self.state, difficulty, self.rng)
            cancel_advance(self.app, self)
            arm_countdown(self.app, self)
            state = self.state
        self.app.logger.info(
            f"[round-start] session={self.code} difficulty={difficulty.value} time_limit={state.time_limit}s"
        )
        self._broadcast(state)
        return state

    def update_answer(self, raw_text: str) -> RoundState:
        with self._lock:
            self.last_active = time.time()
            self.state = update_answer_text(self.state, raw_text)
            state = self.state
        self._broadcast(state)
        return state

    def submit(self, raw_text: Optional[str] = None) -> bool:
        """Score the answer and queue the next problem. False if no round is accepting answers."""
        with self._lock:
            self.last_active = time.time()
            previous = self.state
            self.state = submit_answer(previous, raw_text)
            if self.state is previous:
                return False
            schedule_advance(self.app, self)
            state = self.state
        self.app.logger.info(
            f"[submit] session={self.code} feedback={state.feedback.value} score={state.score} "
            f"answered={state.total_questions} correct={state.correct_count}"
        )
        self._broadcast(state)
        return True

    def advance(self, handle=None) -> bool:
        with self._lock:
            if handle is not None:
                if handle is not self.pending_advance or handle.cancelled:
                    return False
            self.pending_advance = None
            previous = self.state
            self.state = advance_problem(previous, self.rng)
            if self.state is previous:
                return False
            state = self.state
        self._broadcast(state)
        return True

    def tick(self, handle=None) -> bool:
        with self._lock:
            if handle is not None:
                if handle is not self.countdown or handle.cancelled:
                    return False
            previous = self.state
            self.state = tick(previous)
            if self.state is previous:
                cancel_all(self.app, self)
                return False
            state = self.state
            if state.round_over:
                cancel_all(self.app, self)
        if state.round_over:
            self.app.logger.info(
                f"[round-over] session={self.code} score={state.score} "
                f"answered={state.total_questions} accuracy={state.accuracy_percent}%"
            )
        self._broadcast(state)
        return True

    def reset(self) -> RoundState:
        with self._lock:
            self.last_active = time.time()
            cancel_all(self.app, self)
            self.state = reset_round(self.state)
            state = self.state
        self.app.logger.info(f"[reset] session={self.code}")
        self._broadcast(state)
        return state

    def close(self) -> None:
        with self._lock:
            cancel_all(self.app, self)

    def to_dict(self) -> dict:
        payload = serialize_state(self.state)
        payload['session_code'] = self.code
        return payload

    def _broadcast(self, state: RoundState) -> None:
        payload = serialize_state(state)
        payload['session_code'] = self.code
        socketio.emit('state_update', payload, to=self.room, namespace='/ws')


class SessionLimitReached(Exception):
    pass


_sessions: Dict[str, QuizSession] = {}
_registry_lock = threading.Lock()


def normalize_session_code(code) -> Optional[str]:
    """Uppercase, trimmed code, or None when the value cannot name a session."""
    if isinstance(code, bool) or not isinstance(code, (str, int)):
        return None
    code = str(code).strip().upper()
    return code or None


def generate_session_code(length=4):
    """Generate a unique, short session code."""
    while True:
        code = ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))
        if code not in _sessions:
            return code


def _pop_idle_sessions(idle_timeout: float) -> List[QuizSession]:
    # Caller holds _registry_lock
    cutoff = time.time() - idle_timeout
    stale = [s for s in _sessions.values() if s.last_active < cutoff]
    for session in stale:
        del _sessions[session.code]
    return stale


def create_session(app, rng: Optional[random.Random] = None) -> QuizSession:
    """Register a new idle session, dropping sessions nobody has touched lately.

    Raises SessionLimitReached when MAX_SESSIONS sessions are still live.
    """
    length = int(app.config.get('SESSION_CODE_LENGTH', 4))
    idle_timeout = float(app.config.get('SESSION_IDLE_TIMEOUT_SEC', 1800))
    max_sessions = int(app.config.get('MAX_SESSIONS', 1000))
    with _registry_lock:
        stale = _pop_idle_sessions(idle_timeout)
        if len(_sessions) >= max_sessions:
            session = None
        else:
            session = QuizSession(app, generate_session_code(length), rng=rng)
            _sessions[session.code] = session
    for old in stale:
        _close_ended(old, reason='idle')
    if session is None:
        app.logger.warning(f"[session-limit] live={len(_sessions)} max={max_sessions}")
        raise SessionLimitReached(f'Too many active sessions (max {max_sessions})')
    app.logger.info(f"[session-create] session={session.code}")
    return session


def get_session(code) -> Optional[QuizSession]:
    code = normalize_session_code(code)
    if code is None:
        return None
    return _sessions.get(code)


def end_session(code) -> bool:
    code = normalize_session_code(code)
    if code is None:
        return False
    with _registry_lock:
        session = _sessions.pop(code, None)
    if session is None:
        return False
    _close_ended(session, reason='deleted')
    return True


def _close_ended(session: QuizSession, reason: str) -> None:
    session.close()
    session.app.logger.info(f"[session-end] session={session.code} reason={reason}")
    socketio.emit('session_ended', {'session_code': session.code}, to=session.room, namespace='/ws')


def clear_sessions() -> None:
    with _registry_lock:
        sessions = list(_sessions.values())
        _sessions.clear()
    for session in sessions:
        session.close()
