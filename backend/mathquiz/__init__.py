from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from mathquiz.main import main
    flask_app.register_blueprint(main)

    from mathquiz.api.quiz import quiz
    flask_app.register_blueprint(quiz, url_prefix='/api/quiz')

    # Importing here ensures the handlers bind to the initialized socketio instance
    from mathquiz.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('quiz-sample')
    @click.option('--difficulty', default='easy', show_default=True,
                  type=click.Choice(['easy', 'medium', 'hard'], case_sensitive=False))
    @click.option('--count', default=5, show_default=True, type=click.IntRange(min=1))
    def quiz_sample_command(difficulty, count):
        """Prints sample problems for a difficulty tier."""
        from mathquiz.services.quiz.problems import Difficulty, TIME_LIMITS, generate_problem
        tier = Difficulty.parse(difficulty)
        click.echo(f'{tier.value}: {TIME_LIMITS[tier]} seconds per problem')
        for _ in range(count):
            problem = generate_problem(tier)
            click.echo(f'{problem.num1} x {problem.num2} = {problem.correct_answer}')

    flask_app.cli.add_command(quiz_sample_command)

    return flask_app
