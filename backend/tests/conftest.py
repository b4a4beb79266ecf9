import os
import sys
import pytest

# Ensure the backend root (containing the `flaggame` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from flaggame import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    WTF_CSRF_ENABLED = False
    BCRYPT_LOG_ROUNDS = 4
    HIGH_SCORE_LIMIT = 10
    QUIZ_TOTAL_QUESTIONS = 10
    QUIZ_STREAK_POINTS = 5
    OAUTH_PROVIDERS = ['github.com']
    DEFAULT_DISPLAY_NAME = 'Unknown User'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import flaggame.models  # noqa: F401
        db.create_all()
    # Requests push their own app context, so clients never share `g` or a session
    yield application
    with application.app_context():
        db.drop_all()


@pytest.fixture()
def app_ctx(flask_app):
    """Work with the stores directly, outside any request."""
    with flask_app.app_context():
        yield flask_app
        db.session.remove()


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
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')


@pytest.fixture()
def register():
    """Register (and log in) an account through the HTTP client given."""
    def _register(http, email='alice@example.com', password='secret', name='Alice'):
        res = http.post('/register', json={
            'name': name,
            'email': email,
            'password': password,
            'confirm_password': password,
        })
        assert res.status_code == 201, res.get_json()
        return res.get_json()['user']
    return _register


@pytest.fixture()
def correct_choice(flask_app):
    """Read the index of the right flag straight from the database."""
    from flaggame.models import QuizGame

    def _correct_choice(game_code):
        with flask_app.app_context():
            return QuizGame.query.filter_by(game_code=game_code).one().correct_answer
    return _correct_choice
