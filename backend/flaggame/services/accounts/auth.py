"""Auth collaborator: password accounts, OAuth sign-in and the login session.

Sessions are Flask-Login cookies. OAuth credential exchange happens on the
client; ``sign_in_with_oauth`` receives the identity the provider returned
and reconciles it against stored profiles by email.
"""
from typing import Iterable, Optional

from flask import current_app
from flask_login import current_user, login_user, logout_user

from flaggame import bcrypt
from flaggame.errors import DecodingError, EmailInUse, InvalidCredentials, OAuthDenied, PasswordMismatch
from flaggame.models import User
from flaggame.services.accounts.identity import DEFAULT_DISPLAY_NAME, Create, IdentityReconciler
from flaggame.services.records import ExternalIdentity
from flaggame.services.stores import ProfileStore


def normalize_email(email: Optional[str]) -> Optional[str]:
    if email is None:
        return None
    return email.strip().lower() or None


class AuthService:

    def __init__(self, profiles: Optional[ProfileStore] = None,
                 reconciler: Optional[IdentityReconciler] = None,
                 providers: Iterable[str] = ('github.com',)):
        self.profiles = profiles or ProfileStore()
        self.reconciler = reconciler or IdentityReconciler()
        self.providers = set(providers)

    @classmethod
    def from_config(cls, config) -> 'AuthService':
        return cls(
            reconciler=IdentityReconciler(config.get('DEFAULT_DISPLAY_NAME', DEFAULT_DISPLAY_NAME)),
            providers=config.get('OAUTH_PROVIDERS', ['github.com']),
        )

    def sign_in_with_password(self, email: str, password: str, remember: bool = True) -> User:
        user = self.profiles.find_user_by_email(normalize_email(email) or '')
        # OAuth-only profiles have no password to check against
        if user is None or not user.password_hash or not bcrypt.check_password_hash(user.password_hash, password):
            raise InvalidCredentials()
        login_user(user, remember=remember)
        return user

    def sign_up_with_password(self, name: str, email: str, password: str, confirm_password: str,
                              login: bool = True) -> User:
        if password != confirm_password:
            raise PasswordMismatch()
        email = normalize_email(email)
        if email is None:
            raise DecodingError("Field 'email' must not be empty")
        if self.profiles.find_user_by_email(email) is not None:
            raise EmailInUse()
        display_name = (name or '').strip() or self.reconciler.default_display_name
        password_hash = bcrypt.generate_password_hash(password).decode('utf-8')
        profile = self.profiles.create(
            {'email': email, 'display_name': display_name},
            password_hash=password_hash,
        )
        current_app.logger.info(f"[register] profile={profile.id}")
        user = self.profiles.get_user(profile.id)
        if login:
            login_user(user)
        return user

    def sign_in_with_oauth(self, provider: str, payload) -> User:
        if provider not in self.providers:
            raise OAuthDenied(f"Sign-in with {provider} is not enabled")
        identity = ExternalIdentity.from_payload(payload)
        identity = identity.model_copy(update={'email': normalize_email(identity.email)})

        action = self.reconciler.reconcile(identity, self.profiles.find_by_email)
        if isinstance(action, Create):
            profile = self.profiles.create(action.as_profile_fields())
            current_app.logger.info(f"[create] profile={profile.id} provider={provider}")
        else:
            profile = self.profiles.update(action.target_profile_id, action.patch())
            current_app.logger.info(f"[merge] profile={profile.id} provider={provider}")

        user = self.profiles.get_user(profile.id)
        login_user(user, remember=True)
        return user

    def current_session(self) -> Optional[User]:
        if current_user.is_authenticated:
            return current_user._get_current_object()
        return None

    def sign_out(self) -> None:
        logout_user()
