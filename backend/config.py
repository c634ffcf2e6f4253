import os

DEFAULT_ORIGINS = 'http://localhost:5173,http://127.0.0.1:5173,http://localhost:5174,http://127.0.0.1:5174'


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Browser origins allowed for HTTP and Socket.IO
    CORS_ORIGINS = [o.strip() for o in os.environ.get('CORS_ORIGINS', DEFAULT_ORIGINS).split(',') if o.strip()]
    # Countdown tick period (seconds)
    TICK_INTERVAL_SEC = float(os.environ.get('TICK_INTERVAL_SEC', '1.0'))
    # Pause after an answer before the next problem (seconds)
    ADVANCE_DELAY_SEC = float(os.environ.get('ADVANCE_DELAY_SEC', '1.0'))
    SESSION_CODE_LENGTH = int(os.environ.get('SESSION_CODE_LENGTH', '4'))
    # Sessions untouched by the player this long are dropped (seconds)
    SESSION_IDLE_TIMEOUT_SEC = float(os.environ.get('SESSION_IDLE_TIMEOUT_SEC', '1800'))
    MAX_SESSIONS = int(os.environ.get('MAX_SESSIONS', '1000'))
