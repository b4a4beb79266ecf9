from flaggame import db
from flask_login import UserMixin
from datetime import datetime, timezone
import json
import string
import random
import uuid


def _utcnow():
    return datetime.now(timezone.utc)


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    display_name = db.Column(db.String(128), nullable=False)
    provider_uid = db.Column(db.String(128), nullable=False)
    photo_url = db.Column(db.String(512), nullable=True)
    # Name on the linked OAuth account
    provider_display_name = db.Column(db.String(128), nullable=True)
    # Null for accounts that only ever signed in through an OAuth provider
    password_hash = db.Column(db.String(256), nullable=True)
    version = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    scores = db.relationship('Score', back_populates='user', lazy='dynamic')

    __mapper_args__ = {'version_id_col': version}

    def to_document(self):
        return {
            'id': self.id,
            'email': self.email,
            'display_name': self.display_name,
            'provider_uid': self.provider_uid,
            'photo_url': self.photo_url,
            'provider_display_name': self.provider_display_name,
        }

    def to_dict(self):
        return self.to_document()


class Score(db.Model):
    __tablename__ = 'score'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(36), db.ForeignKey('user.id'), nullable=False, index=True)
    score = db.Column(db.Integer, nullable=False)
    recorded_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    user = db.relationship('User', back_populates='scores')

    def to_document(self):
        return {
            'id': self.id,
            'score': self.score,
            'recorded_at': self.recorded_at,
        }


def generate_game_code(length=4):
    """Generate a unique, short game code."""
    while True:
        code = ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))
        if not QuizGame.query.filter_by(game_code=code).first():
            return code


class QuizGame(db.Model):
    __tablename__ = 'quiz_game'
    id = db.Column(db.Integer, primary_key=True)
    game_code = db.Column(db.String(4), unique=True, index=True)
    user_id = db.Column(db.String(36), db.ForeignKey('user.id'), nullable=False, index=True)
    status = db.Column(db.String(32), default='in_progress')  # in_progress, finished
    current_question = db.Column(db.Integer, default=1, nullable=False)
    total_questions = db.Column(db.Integer, nullable=False)
    score = db.Column(db.Integer, default=0, nullable=False)
    consecutive_correct = db.Column(db.Integer, default=0, nullable=False)
    consecutive_wrong = db.Column(db.Integer, default=0, nullable=False)
    options = db.Column(db.Text, nullable=True)  # JSON-encoded list of country names
    correct_answer = db.Column(db.Integer, nullable=True)
    answer_history = db.Column(db.Text, nullable=True)  # JSON-encoded list of answers
    # Set once the game finishes: whether the final score earned a high score slot
    score_recorded = db.Column(db.Boolean, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    # Two answers racing on the same question must not both commit
    version = db.Column(db.Integer, nullable=False)

    __mapper_args__ = {'version_id_col': version}

    def __init__(self, **kwargs):
        super(QuizGame, self).__init__(**kwargs)
        if not self.game_code:
            self.game_code = generate_game_code()

    def to_dict(self):
        # correct_answer stays server-side
        return {
            'game_code': self.game_code,
            'status': self.status,
            'current_question': self.current_question,
            'total_questions': self.total_questions,
            'score': self.score,
            'consecutive_correct': self.consecutive_correct,
            'consecutive_wrong': self.consecutive_wrong,
            'options': json.loads(self.options) if self.options else [],
            'prompt': self.prompt,
            'history': json.loads(self.answer_history) if self.answer_history else [],
            'score_recorded': self.score_recorded,
        }

    @property
    def prompt(self):
        if self.status != 'in_progress' or self.correct_answer is None or not self.options:
            return None
        return json.loads(self.options)[self.correct_answer]
