from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from flaggame import db
from flaggame.errors import FlagGameError
from flaggame.models import QuizGame
from flaggame.api.scores import broadcast_scores, current_ledger
from flaggame.services.game.quiz import new_question, score_answer
from flaggame.services.stores import ScoreStore, storage_call
import json


quiz = Blueprint('quiz', __name__)


def _load_game(game_code: str) -> QuizGame:
    return QuizGame.query.filter_by(game_code=game_code.upper(), user_id=current_user.id).first_or_404()


def _deal_question(game: QuizGame) -> None:
    options, correct = new_question()
    game.options = json.dumps(options)
    game.correct_answer = correct


def _finish(game: QuizGame) -> dict:
    """Close the game and offer its final score to the high score list.

    The finished status and the ledger writes commit together; if either
    fails the game stays on its last question and can be answered again.
    """
    game.status = 'finished'
    game.options = None
    game.correct_answer = None
    try:
        decision, stored = ScoreStore().record(current_user.id, game.score, current_ledger(), commit=False)
        game.score_recorded = decision.qualified
        with storage_call(f"finish quiz {game.game_code}"):
            db.session.add(game)
            db.session.commit()
    except FlagGameError:
        db.session.rollback()
        raise
    current_app.logger.info(
        f"[quiz-finish] game={game.game_code} user={current_user.id} score={game.score} recorded={decision.qualified}"
    )
    if not decision.is_noop:
        broadcast_scores(current_user.id)
    return {
        'recorded': decision.qualified,
        'entry': stored.to_dict() if stored else None,
        'evicted': decision.evict,
    }


@quiz.route('/new', methods=['POST'])
@login_required
def new_game():
    total = int(current_app.config.get('QUIZ_TOTAL_QUESTIONS', 10))
    game = QuizGame(user_id=current_user.id, total_questions=total, answer_history='[]')
    _deal_question(game)
    with storage_call('create quiz'):
        db.session.add(game)
        db.session.commit()
    current_app.logger.info(f"[quiz-new] game={game.game_code} user={current_user.id} questions={total}")
    return jsonify(game.to_dict()), 201


@quiz.route('/<string:game_code>/state', methods=['GET'])
@login_required
def get_game_state(game_code):
    return jsonify(_load_game(game_code).to_dict())


@quiz.route('/<string:game_code>/answer', methods=['POST'])
@login_required
def submit_answer(game_code):
    data = request.get_json(silent=True) or {}
    choice = data.get('choice')

    game = _load_game(game_code)
    if game.status != 'in_progress':
        return jsonify({'error': 'This game is already finished'}), 400

    options = json.loads(game.options or '[]')
    if isinstance(choice, bool) or not isinstance(choice, int) or not 0 <= choice < len(options):
        return jsonify({'error': f'choice must be an integer between 0 and {len(options) - 1}'}), 400

    points = int(current_app.config.get('QUIZ_STREAK_POINTS', 5))
    outcome = score_answer(
        game.score,
        game.consecutive_correct,
        game.consecutive_wrong,
        correct=(choice == game.correct_answer),
        points=points,
    )
    result = {
        'question': game.current_question,
        'correct': outcome.correct,
        'delta': outcome.delta,
        'answer': options[game.correct_answer],
        'choice': options[choice],
    }
    history = json.loads(game.answer_history or '[]')
    history.append(result)
    game.answer_history = json.dumps(history)
    game.score = outcome.score
    game.consecutive_correct = outcome.consecutive_correct
    game.consecutive_wrong = outcome.consecutive_wrong

    payload = {'result': result}
    if game.current_question >= game.total_questions:
        payload['high_score'] = _finish(game)
    else:
        game.current_question += 1
        _deal_question(game)
        with storage_call(f"answer quiz {game.game_code}"):
            db.session.add(game)
            db.session.commit()
    payload['game'] = game.to_dict()
    return jsonify(payload)
