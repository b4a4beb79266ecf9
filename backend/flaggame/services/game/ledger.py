"""Top-N high score retention.

The ledger only decides; ``ScoreStore.apply`` performs the insert and the
deletes in one transaction.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, List, Optional, Tuple

from flaggame.services.records import ScoreEntry

DEFAULT_CAPACITY = 10


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Decision:
    insert: Optional[ScoreEntry] = None
    evict: Optional[Any] = None
    # Ids of entries already beyond capacity, left behind by concurrent completions
    trim: Tuple[Any, ...] = ()

    @property
    def qualified(self) -> bool:
        return self.insert is not None

    @property
    def removals(self) -> Tuple[Any, ...]:
        head = (self.evict,) if self.evict is not None else ()
        return head + self.trim

    @property
    def is_noop(self) -> bool:
        return self.insert is None and not self.removals


class ScoreLedger:
    """Keeps a user's best ``capacity`` scores.

    Entries are ranked by score, highest first. Among equal scores the newer
    entry ranks higher, so the entry at the bottom of the ranking (the one
    evicted) is the oldest of the lowest scores.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY, clock: Callable[[], datetime] = _utcnow):
        if capacity < 1:
            raise ValueError('capacity must be at least 1')
        self.capacity = capacity
        self.clock = clock

    @staticmethod
    def _ranked(entries: Iterable[ScoreEntry]) -> List[ScoreEntry]:
        return sorted(entries, key=lambda e: (e.score, e.recorded_at), reverse=True)

    def rank(self, entries: Iterable[ScoreEntry]) -> List[ScoreEntry]:
        """Return the retained entries in display order."""
        return self._ranked(entries)[:self.capacity]

    def qualifies(self, existing: Iterable[ScoreEntry], candidate: int) -> bool:
        retained = self.rank(existing)
        return len(retained) < self.capacity or candidate > retained[-1].score

    def record_if_qualifying(self, existing: Iterable[ScoreEntry], candidate: int,
                             now: Optional[datetime] = None) -> Decision:
        """Decide whether ``candidate`` earns a slot and which entry it displaces.

        ``existing`` may arrive in any order. A candidate equal to the current
        lowest retained score does not qualify once the ledger is full. Once
        full, every entry that could be evicted must have an ``id``.
        """
        ranked = self._ranked(existing)
        retained, excess = ranked[:self.capacity], ranked[self.capacity:]
        full = len(retained) >= self.capacity
        # Anything that may be removed has to be addressable
        removable = excess + retained[-1:] if full else excess
        if any(e.id is None for e in removable):
            raise ValueError('entries that may be evicted must carry an id')
        trim = tuple(e.id for e in excess)

        if full and candidate <= retained[-1].score:
            return Decision(trim=trim)

        entry = ScoreEntry(score=candidate, recorded_at=now or self.clock())
        evict = retained[-1].id if full else None
        return Decision(insert=entry, evict=evict, trim=trim)
