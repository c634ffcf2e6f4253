from flask import Blueprint, jsonify, request, current_app
from mathquiz.models import SessionLimitReached, create_session, end_session, get_session
from mathquiz.services.quiz.problems import Difficulty, describe_difficulties


quiz = Blueprint('quiz', __name__)


def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _session_or_404(session_code):
    session = get_session(session_code)
    if session is None:
        return None, (jsonify({'error': 'Session not found'}), 404)
    return session, None


@quiz.route('/difficulties', methods=['GET'])
def list_difficulties():
    return jsonify(describe_difficulties())


@quiz.route('/sessions', methods=['POST'])
def create_quiz_session():
    try:
        session = create_session(current_app._get_current_object())
    except SessionLimitReached as exc:
        return jsonify({'error': str(exc)}), 503
    return jsonify({
        'message': 'New quiz session created!',
        'session_code': session.code,
        'state': session.to_dict(),
    }), 201


@quiz.route('/<string:session_code>/state', methods=['GET'])
def get_quiz_state(session_code):
    session, error = _session_or_404(session_code)
    if error:
        return error
    return jsonify(session.to_dict())


@quiz.route('/<string:session_code>/start', methods=['POST'])
def start_quiz_round(session_code):
    session, error = _session_or_404(session_code)
    if error:
        return error
    data = _json_body()
    try:
        difficulty = Difficulty.parse(data.get('difficulty'))
    except ValueError as exc:
        return jsonify({'error': str(exc)}), 400
    session.start(difficulty)
    return jsonify(session.to_dict())


@quiz.route('/<string:session_code>/answer', methods=['POST'])
def update_quiz_answer(session_code):
    session, error = _session_or_404(session_code)
    if error:
        return error
    data = _json_body()
    answer = data.get('answer')
    session.update_answer('' if answer is None else str(answer))
    return jsonify(session.to_dict())


@quiz.route('/<string:session_code>/submit', methods=['POST'])
def submit_quiz_answer(session_code):
    session, error = _session_or_404(session_code)
    if error:
        return error
    data = _json_body()
    answer = data.get('answer')
    accepted = session.submit(None if answer is None else str(answer))
    payload = session.to_dict()
    payload['accepted'] = accepted
    return jsonify(payload)


@quiz.route('/<string:session_code>/reset', methods=['POST'])
def reset_quiz_round(session_code):
    session, error = _session_or_404(session_code)
    if error:
        return error
    session.reset()
    return jsonify(session.to_dict())


@quiz.route('/<string:session_code>', methods=['DELETE'])
def delete_quiz_session(session_code):
    if not end_session(session_code):
        return jsonify({'error': 'Session not found'}), 404
    return jsonify({'message': 'Session ended', 'session_code': session_code.upper()})
