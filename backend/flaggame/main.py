from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required
from flaggame.services.accounts.auth import AuthService

main = Blueprint('main', __name__)


def _auth() -> AuthService:
    return AuthService.from_config(current_app.config)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Flag Game server!'})


@main.route('/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    if not data.get('email') or not data.get('password'):
        return jsonify({'error': 'Missing email or password'}), 400
    user = _auth().sign_up_with_password(
        data.get('name'),
        data['email'],
        data['password'],
        data.get('confirm_password'),
    )
    return jsonify({'success': True, 'user': user.to_dict()}), 201


@main.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    if not data.get('email') or not data.get('password'):
        return jsonify({'error': 'Missing email or password'}), 400
    user = _auth().sign_in_with_password(data['email'], data['password'])
    return jsonify({'success': True, 'user': user.to_dict()})


@main.route('/oauth/<path:provider>', methods=['POST'])
def oauth_sign_in(provider):
    """Sign in (or register) with the identity the client obtained from ``provider``.

    A profile already registered under the same email absorbs the provider
    identity instead of a second profile being created.
    """
    user = _auth().sign_in_with_oauth(provider, request.get_json(silent=True))
    return jsonify({'success': True, 'user': user.to_dict()})


@main.route('/check_login', methods=['GET'])
def check_login():
    user = _auth().current_session()
    if user is None:
        return jsonify({'success': False, 'error': 'Not logged in'}), 401
    return jsonify({'success': True, 'user': user.to_dict()})


@main.route('/logout', methods=['POST'])
@login_required
def logout():
    _auth().sign_out()
    return jsonify({'success': True})
