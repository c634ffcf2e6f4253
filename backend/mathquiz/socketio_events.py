from flask_socketio import join_room, leave_room, emit
from flask import request
from mathquiz import socketio
from mathquiz.models import get_session, normalize_session_code
from mathquiz.services.quiz.problems import Difficulty
from typing import Dict


_sid_to_session: Dict[str, str] = {}


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _payload(data) -> dict:
    return data if isinstance(data, dict) else {}


def _resolve_session(data):
    """Find the session named in the payload, falling back to the one this socket joined."""
    raw = _payload(data).get('session_code')
    code = normalize_session_code(raw) if raw is not None else _sid_to_session.get(_get_sid())
    if not code:
        emit('error', {'message': 'session_code is required'})
        return None
    session = get_session(code)
    if session is None:
        emit('error', {'message': f'Session {code} not found'})
        return None
    return session


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(*args):
    _sid_to_session.pop(_get_sid(), None)


def handle_join_session(data):
    session = _resolve_session(data)
    if session is None:
        return
    join_room(session.room)
    _sid_to_session[_get_sid()] = session.code
    emit('joined', {'room': session.room})
    emit('state_update', session.to_dict())


def handle_leave_session(data):
    session = _resolve_session(data)
    if session is None:
        return
    leave_room(session.room)
    _sid_to_session.pop(_get_sid(), None)
    emit('left', {'room': session.room})


def handle_select_difficulty(data):
    session = _resolve_session(data)
    if session is None:
        return
    try:
        difficulty = Difficulty.parse(_payload(data).get('difficulty'))
    except ValueError as exc:
        emit('error', {'message': str(exc)})
        return
    session.start(difficulty)


def handle_change_answer(data):
    session = _resolve_session(data)
    if session is None:
        return
    answer = _payload(data).get('answer')
    session.update_answer('' if answer is None else str(answer))


def handle_submit_answer(data):
    session = _resolve_session(data)
    if session is None:
        return
    answer = _payload(data).get('answer')
    session.submit(None if answer is None else str(answer))


def handle_reset(data):
    session = _resolve_session(data)
    if session is None:
        return
    session.reset()


def handle_ping(data):
    emit('pong', data or {})


_HANDLERS = {
    'connect': handle_connect,
    'disconnect': handle_disconnect,
    'join_session': handle_join_session,
    'leave_session': handle_leave_session,
    'select_difficulty': handle_select_difficulty,
    'change_answer': handle_change_answer,
    'submit_answer': handle_submit_answer,
    'reset': handle_reset,
    'ping': handle_ping,
}


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    for event, handler in _HANDLERS.items():
        socketio.on_event(event, handler, namespace='/ws')

    if testing:
        for event, handler in _HANDLERS.items():
            socketio.on_event(event, handler, namespace='/')
