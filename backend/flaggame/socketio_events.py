from flask_socketio import join_room, leave_room, emit
from flask_login import current_user
from flaggame import socketio


def _scores_room(data):
    """Return the room for the requested user, or None after emitting an error."""
    user_id = (data or {}).get('user_id')
    if not user_id:
        emit('error', {'message': 'user_id is required'})
        return None
    if not current_user.is_authenticated:
        emit('error', {'message': 'login required'})
        return None
    if current_user.id != user_id:
        emit('error', {'message': 'cannot follow another player\'s scores'})
        return None
    return f"user:{user_id}"


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_scores(data):
    room = _scores_room(data)
    if room is None:
        return
    join_room(room)
    emit('joined', {'room': room})


def handle_leave_scores(data):
    room = _scores_room(data)
    if room is None:
        return
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    socketio.on_event('connect', handle_connect, namespace='/ws')
    socketio.on_event('join_scores', handle_join_scores, namespace='/ws')
    socketio.on_event('leave_scores', handle_leave_scores, namespace='/ws')
    socketio.on_event('ping', handle_ping, namespace='/ws')

    if testing:
        # Test-only mirror on default namespace
        socketio.on_event('connect', handle_connect, namespace='/')
        socketio.on_event('join_scores', handle_join_scores, namespace='/')
        socketio.on_event('leave_scores', handle_leave_scores, namespace='/')
        socketio.on_event('ping', handle_ping, namespace='/')
