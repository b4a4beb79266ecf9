"""Typed records exchanged between the services and the stores.

Stored rows and request payloads are validated into these frozen pydantic
models at the boundary. A missing or mistyped field raises ``DecodingError``.
"""
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError, field_validator

from flaggame.errors import DecodingError


def _decoding_error(exc: ValidationError) -> DecodingError:
    problems = []
    for err in exc.errors():
        field = '.'.join(str(part) for part in err['loc']) or 'document'
        problems.append(f"'{field}': {err['msg']}")
    return DecodingError('Malformed record: ' + '; '.join(problems))


class Record(BaseModel):
    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_document(cls, doc: Any):
        try:
            return cls.model_validate(doc)
        except ValidationError as exc:
            raise _decoding_error(exc) from exc


class ScoreEntry(Record):
    score: StrictInt
    recorded_at: datetime
    id: Optional[Any] = None

    @field_validator('recorded_at', mode='before')
    @classmethod
    def _no_epoch_numbers(cls, value):
        if isinstance(value, (int, float)):
            raise ValueError('must be a datetime or an ISO timestamp')
        return value

    @field_validator('recorded_at')
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        # SQLite hands back naive datetimes
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def to_dict(self):
        return {
            'id': self.id,
            'score': self.score,
            'recorded_at': self.recorded_at.isoformat(),
        }


class UserProfile(Record):
    id: StrictStr
    email: StrictStr
    display_name: StrictStr
    provider_uid: StrictStr
    photo_url: Optional[StrictStr] = None
    # Name on the provider account, kept apart from the player's chosen name
    provider_display_name: Optional[StrictStr] = None


class ExternalIdentity(Record):
    """An identity vouched for by an OAuth provider."""
    # Accept the provider's own "uid" key as well as ours
    provider_uid: StrictStr = Field(validation_alias=AliasChoices('provider_uid', 'uid'))
    email: Optional[StrictStr] = None
    display_name: Optional[StrictStr] = None
    photo_url: Optional[StrictStr] = None

    @field_validator('provider_uid')
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError('must not be empty')
        return value

    @classmethod
    def from_payload(cls, payload: Any) -> 'ExternalIdentity':
        return cls.from_document(payload)
