"""Create-or-merge decision for a freshly authenticated OAuth identity.

Email is the only merge key: an identity without one is rejected rather
than given a profile nobody can match later.
"""
from dataclasses import dataclass
from typing import Callable, Optional, Union

from flaggame.errors import MissingEmail
from flaggame.services.records import ExternalIdentity, UserProfile

DEFAULT_DISPLAY_NAME = 'Unknown User'


@dataclass(frozen=True)
class Create:
    email: str
    display_name: str
    provider_uid: str
    photo_url: Optional[str] = None
    provider_display_name: Optional[str] = None

    def as_profile_fields(self) -> dict:
        return {
            'email': self.email,
            'display_name': self.display_name,
            'provider_uid': self.provider_uid,
            'photo_url': self.photo_url,
            'provider_display_name': self.provider_display_name,
        }


@dataclass(frozen=True)
class Merge:
    target_profile_id: str
    provider_uid: str
    display_name: Optional[str] = None
    photo_url: Optional[str] = None

    def patch(self) -> dict:
        """Provider fields to overwrite on the target profile.

        The player's own display name is never touched; the provider's name is
        kept in ``provider_display_name``. Absent values are left alone.
        """
        fields = {'provider_uid': self.provider_uid}
        if self.display_name:
            fields['provider_display_name'] = self.display_name
        if self.photo_url is not None:
            fields['photo_url'] = self.photo_url
        return fields


Action = Union[Create, Merge]


class IdentityReconciler:

    def __init__(self, default_display_name: str = DEFAULT_DISPLAY_NAME):
        self.default_display_name = default_display_name

    def reconcile(self, candidate: ExternalIdentity,
                  lookup: Callable[[str], Optional[UserProfile]]) -> Action:
        email = (candidate.email or '').strip()
        if not email:
            raise MissingEmail()

        existing = lookup(email)
        if existing is not None:
            return Merge(
                target_profile_id=existing.id,
                provider_uid=candidate.provider_uid,
                display_name=candidate.display_name,
                photo_url=candidate.photo_url,
            )
        return Create(
            email=email,
            display_name=candidate.display_name or self.default_display_name,
            provider_uid=candidate.provider_uid,
            photo_url=candidate.photo_url,
            provider_display_name=candidate.display_name or None,
        )
