import os
import sys
import pytest

# Ensure the backend root (containing the `mathquiz` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from mathquiz import create_app, socketio
from mathquiz.models import clear_sessions


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['http://localhost:5173']
    TICK_INTERVAL_SEC = 1.0
    ADVANCE_DELAY_SEC = 1.0
    SESSION_CODE_LENGTH = 4


class FastTimerConfig(TestConfig):
    ENABLE_SCHEDULER_IN_TESTS = True
    TICK_INTERVAL_SEC = 0.05
    ADVANCE_DELAY_SEC = 0.05


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application
    clear_sessions()


@pytest.fixture()
def timed_app():
    application = create_app(FastTimerConfig)
    with application.app_context():
        yield application
    clear_sessions()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass
