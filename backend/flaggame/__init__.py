from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:8081",
    "http://127.0.0.1:8081",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Import and register blueprints here
    from flaggame.main import main
    flask_app.register_blueprint(main)

    from flaggame.api.quiz import quiz
    flask_app.register_blueprint(quiz, url_prefix='/api/quiz')

    from flaggame.api.scores import scores
    flask_app.register_blueprint(scores, url_prefix='/api/scores')

    from flaggame.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    from flaggame.errors import FlagGameError

    @flask_app.errorhandler(FlagGameError)
    def handle_flag_game_error(exc):
        return jsonify({'error': exc.message}), exc.status_code

    # Flask-Login user loader
    from flaggame.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, user_id)

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from flaggame.services.accounts.auth import AuthService
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            # Seed a demo account
            auth = AuthService.from_config(flask_app.config)
            auth.sign_up_with_password('Demo Player', 'demo@example.com', 'password', 'password', login=False)
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
