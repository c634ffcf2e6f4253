from mathquiz.models import get_session


def _events(sio_client, name):
    return [e for e in sio_client.get_received('/ws') if e['name'] == name]


def test_socket_connect_and_ping(sio_client):
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')
    sio_client.get_received('/ws')

    sio_client.emit('ping', {'n': 1}, namespace='/ws')
    pongs = _events(sio_client, 'pong')
    assert pongs and pongs[0]['args'][0] == {'n': 1}


def test_join_unknown_session_errors(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('join_session', {'session_code': 'NOPE'}, namespace='/ws')
    errors = _events(sio_client, 'error')
    assert errors


def test_play_round_over_socket(sio_client, client):
    code = client.post('/api/quiz/sessions').get_json()['session_code']
    sio_client.get_received('/ws')

    sio_client.emit('join_session', {'session_code': code}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'joined' for pkt in received)

    sio_client.emit('select_difficulty', {'session_code': code, 'difficulty': 'easy'}, namespace='/ws')
    updates = _events(sio_client, 'state_update')
    assert updates
    state = updates[-1]['args'][0]
    assert state['difficulty'] == 'easy'
    assert state['time_left'] == 60
    assert 'correct_answer' not in state

    product = state['num1'] * state['num2']
    sio_client.emit('change_answer', {'answer': str(product)}, namespace='/ws')
    state = _events(sio_client, 'state_update')[-1]['args'][0]
    assert state['answer'] == str(product)

    sio_client.emit('submit_answer', {}, namespace='/ws')
    state = _events(sio_client, 'state_update')[-1]['args'][0]
    assert state['feedback'] == 'correct'
    assert state['score'] == 10

    sio_client.emit('reset', {}, namespace='/ws')
    state = _events(sio_client, 'state_update')[-1]['args'][0]
    assert state['phase'] == 'idle'
    assert get_session(code).state.difficulty is None


def test_bad_difficulty_over_socket(sio_client, client):
    code = client.post('/api/quiz/sessions').get_json()['session_code']
    sio_client.emit('join_session', {'session_code': code}, namespace='/ws')
    sio_client.get_received('/ws')
    sio_client.emit('select_difficulty', {'difficulty': 'legendary'}, namespace='/ws')
    assert _events(sio_client, 'error')
    assert get_session(code).state.difficulty is None


def test_http_changes_are_broadcast(sio_client, client):
    code = client.post('/api/quiz/sessions').get_json()['session_code']
    sio_client.emit('join_session', {'session_code': code}, namespace='/ws')
    sio_client.get_received('/ws')

    client.post(f'/api/quiz/{code}/start', json={'difficulty': 'hard'})
    updates = _events(sio_client, 'state_update')
    assert updates and updates[-1]['args'][0]['difficulty'] == 'hard'


def test_integer_session_code_reports_error(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('join_session', {'session_code': 1234}, namespace='/ws')
    errors = _events(sio_client, 'error')
    assert errors
    assert errors[0]['args'][0]['message'] == 'Session 1234 not found'


def test_non_dict_payloads_report_error(sio_client):
    sio_client.get_received('/ws')
    for payload in (['ABCD'], 'ABCD', 42):
        sio_client.emit('select_difficulty', payload, namespace='/ws')
        assert _events(sio_client, 'error')


def test_lowercase_session_code_joins(sio_client, client):
    code = client.post('/api/quiz/sessions').get_json()['session_code']
    sio_client.get_received('/ws')
    sio_client.emit('join_session', {'session_code': f' {code.lower()} '}, namespace='/ws')
    assert _events(sio_client, 'joined')
