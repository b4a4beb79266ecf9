"""Profile and score collaborators backed by Flask-SQLAlchemy.

Rows are decoded into the records in ``flaggame.services.records`` on the
way out. Any SQLAlchemy failure rolls the session back and surfaces as
``CollaboratorUnavailable`` (``ConcurrentModification`` for a stale
optimistic-concurrency write).
"""
from contextlib import contextmanager
from typing import List, Optional, Tuple

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from flaggame import db
from flaggame.errors import CollaboratorUnavailable, ConcurrentModification
from flaggame.models import Score, User
from flaggame.services.game.ledger import Decision, ScoreLedger
from flaggame.services.records import ScoreEntry, UserProfile

PROFILE_PATCH_FIELDS = {'provider_uid', 'provider_display_name', 'photo_url', 'password_hash'}


@contextmanager
def storage_call(action: str):
    try:
        yield
    except StaleDataError as exc:
        db.session.rollback()
        current_app.logger.warning(f"[store-stale] {action}: {exc}")
        raise ConcurrentModification() from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.warning(f"[store-error] {action}: {exc}")
        raise CollaboratorUnavailable() from exc


class ProfileStore:

    def get_user(self, profile_id: str) -> Optional[User]:
        with storage_call(f"get profile {profile_id}"):
            return db.session.get(User, profile_id)

    def find_user_by_email(self, email: str) -> Optional[User]:
        with storage_call('find profile by email'):
            return User.query.filter_by(email=email).first()

    def find_by_email(self, email: str) -> Optional[UserProfile]:
        user = self.find_user_by_email(email)
        return UserProfile.from_document(user.to_document()) if user else None

    def create(self, fields: dict, password_hash: Optional[str] = None) -> UserProfile:
        with storage_call('create profile'):
            user = User(
                email=fields['email'],
                display_name=fields['display_name'],
                provider_uid=fields.get('provider_uid') or '',
                photo_url=fields.get('photo_url'),
                provider_display_name=fields.get('provider_display_name'),
                password_hash=password_hash,
            )
            db.session.add(user)
            db.session.flush()
            # Password accounts are their own provider
            if not user.provider_uid:
                user.provider_uid = user.id
            db.session.commit()
            return UserProfile.from_document(user.to_document())

    def update(self, profile_id: str, patch: dict) -> UserProfile:
        unknown = set(patch) - PROFILE_PATCH_FIELDS
        if unknown:
            raise ValueError(f"Cannot patch profile fields: {sorted(unknown)}")
        with storage_call(f"update profile {profile_id}"):
            user = db.session.get(User, profile_id)
            if user is None:
                raise ConcurrentModification('The profile no longer exists')
            for key, value in patch.items():
                setattr(user, key, value)
            db.session.commit()
            return UserProfile.from_document(user.to_document())


class ScoreStore:

    def list_for_user(self, user_id: str) -> List[ScoreEntry]:
        with storage_call(f"list scores for {user_id}"):
            rows = Score.query.filter_by(user_id=user_id).all()
            return [ScoreEntry.from_document(row.to_document()) for row in rows]

    def insert(self, user_id: str, entry: ScoreEntry, commit: bool = True) -> ScoreEntry:
        with storage_call(f"insert score for {user_id}"):
            row = Score(user_id=user_id, score=entry.score, recorded_at=entry.recorded_at)
            db.session.add(row)
            db.session.flush()
            if commit:
                db.session.commit()
            return ScoreEntry(score=entry.score, recorded_at=entry.recorded_at, id=row.id)

    def delete(self, user_id: str, entry_id, commit: bool = True) -> int:
        with storage_call(f"delete score {entry_id} for {user_id}"):
            deleted = Score.query.filter_by(id=entry_id, user_id=user_id).delete()
            if commit:
                db.session.commit()
            return deleted

    def apply(self, user_id: str, decision: Decision, commit: bool = True) -> Optional[ScoreEntry]:
        """Perform the ledger's insert and deletes in a single transaction.

        With ``commit=False`` the changes join the caller's transaction, which
        the caller commits together with its own writes.
        """
        if decision.is_noop:
            return None
        stored = None
        with storage_call(f"apply ledger decision for {user_id}"):
            if decision.insert is not None:
                stored = self.insert(user_id, decision.insert, commit=False)
            for entry_id in decision.removals:
                self.delete(user_id, entry_id, commit=False)
            if commit:
                db.session.commit()
        return stored

    def record(self, user_id: str, candidate: int, ledger: ScoreLedger,
               commit: bool = True) -> Tuple[Decision, Optional[ScoreEntry]]:
        existing = self.list_for_user(user_id)
        decision = ledger.record_if_qualifying(existing, candidate)
        stored = self.apply(user_id, decision, commit=commit)
        current_app.logger.info(
            f"[ledger] user={user_id} candidate={candidate} existing={len(existing)} "
            f"insert={stored.id if stored else None} evict={decision.evict} trim={list(decision.trim)}"
        )
        return decision, stored
