from flask import Blueprint, jsonify, current_app
from flask_login import login_required, current_user
from flaggame import socketio
from flaggame.services.game.ledger import ScoreLedger
from flaggame.services.stores import ScoreStore


scores = Blueprint('scores', __name__)


def current_ledger() -> ScoreLedger:
    return ScoreLedger(capacity=int(current_app.config.get('HIGH_SCORE_LIMIT', 10)))


def high_scores_for(user_id: str) -> list:
    ranked = current_ledger().rank(ScoreStore().list_for_user(user_id))
    return [entry.to_dict() for entry in ranked]


def broadcast_scores(user_id: str) -> None:
    """Push the refreshed list to any high score screen open for this user."""
    socketio.emit(
        'scores_update',
        {'user_id': user_id, 'scores': high_scores_for(user_id)},
        to=f"user:{user_id}",
        namespace='/ws',
    )


@scores.route('', methods=['GET'])
@login_required
def list_high_scores():
    return jsonify({'scores': high_scores_for(current_user.id)})
