"""Error taxonomy shared by the services and the HTTP layer.

Every error carries the HTTP status it is rendered with by the app-level
error handler registered in ``create_app``.
"""


class FlagGameError(Exception):
    status_code = 400
    default_message = 'Request failed'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingEmail(FlagGameError):
    """The external identity has no email, so it cannot be matched or created."""
    status_code = 422
    default_message = 'The signed-in account does not have an email address'


class PasswordMismatch(FlagGameError):
    default_message = 'Passwords do not match.'


class InvalidCredentials(FlagGameError):
    status_code = 401
    default_message = 'Invalid email or password'


class EmailInUse(FlagGameError):
    default_message = 'Email already registered'


class OAuthDenied(FlagGameError):
    status_code = 403
    default_message = 'Sign-in with this provider was denied'


class DecodingError(FlagGameError):
    """A payload or stored document is missing a field or has the wrong type."""
    default_message = 'Malformed record'


class CollaboratorUnavailable(FlagGameError):
    """A storage or auth backend call failed. The caller decides whether to retry."""
    status_code = 503
    default_message = 'Service temporarily unavailable, please try again'


class ConcurrentModification(CollaboratorUnavailable):
    status_code = 409
    default_message = 'The record was changed by another request, please try again'
