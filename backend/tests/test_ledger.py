from datetime import datetime, timedelta, timezone

import pytest

from flaggame.services.game.ledger import Decision, ScoreLedger
from flaggame.services.records import ScoreEntry

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def _entries(scores, start=None):
    """Build entries with ids 1..n, each one minute newer than the previous."""
    start = start or NOW - timedelta(days=1)
    return [
        ScoreEntry(score=s, recorded_at=start + timedelta(minutes=i), id=i + 1)
        for i, s in enumerate(scores)
    ]


@pytest.fixture()
def ledger():
    return ScoreLedger(clock=lambda: NOW)


def test_below_capacity_inserts_without_eviction(ledger):
    existing = _entries([100, 90, 80])
    decision = ledger.record_if_qualifying(existing, 50)
    assert decision == Decision(insert=ScoreEntry(score=50, recorded_at=NOW))
    assert decision.evict is None


def test_full_ledger_evicts_the_minimum(ledger):
    existing = _entries([10, 20, 30, 40, 50, 60, 70, 80, 90, 100])
    decision = ledger.record_if_qualifying(existing, 15)
    assert decision.insert == ScoreEntry(score=15, recorded_at=NOW)
    assert decision.evict == 1
    assert decision.trim == ()


def test_tie_with_minimum_does_not_qualify(ledger):
    existing = _entries([10, 20, 30, 40, 50, 60, 70, 80, 90, 100])
    decision = ledger.record_if_qualifying(existing, 10)
    assert decision == Decision()
    assert decision.is_noop


def test_minimum_plus_one_evicts_exactly_one_minimum(ledger):
    existing = _entries([42] * 10)
    decision = ledger.record_if_qualifying(existing, 43)
    assert decision.qualified
    assert decision.removals == (decision.evict,)
    evicted = next(e for e in existing if e.id == decision.evict)
    assert evicted.score == 42


def test_eviction_tie_break_is_oldest_first(ledger):
    existing = _entries([5, 50, 60, 5, 70, 80, 90, 5, 100, 110])
    decision = ledger.record_if_qualifying(existing, 6)
    # ids 1, 4 and 8 all hold 5; id 1 was recorded first
    assert decision.evict == 1


def test_unsorted_input_is_sorted_before_evaluating(ledger):
    existing = _entries([70, 10, 100, 40, 90, 20, 60, 30, 80, 50])
    decision = ledger.record_if_qualifying(existing, 11)
    assert decision.evict == 2


@pytest.mark.parametrize('candidate', [-500, -1, 0, 1, 10_000])
def test_any_candidate_qualifies_below_capacity(ledger, candidate):
    existing = _entries([100] * 9)
    decision = ledger.record_if_qualifying(existing, candidate)
    assert decision.insert.score == candidate
    assert decision.evict is None


def test_retained_size_never_exceeds_capacity(ledger):
    retained = []
    next_id = 1
    for i, score in enumerate([3, 9, 1, 7, 7, 2, 8, 10, 4, 6, 5, 11, 0, 12, 7, 7, 13]):
        decision = ledger.record_if_qualifying(retained, score, now=NOW + timedelta(seconds=i))
        removed = set(decision.removals)
        retained = [e for e in retained if e.id not in removed]
        if decision.insert is not None:
            retained.append(decision.insert.model_copy(update={'id': next_id}))
            next_id += 1
        assert len(retained) <= 10
    assert sorted(e.score for e in retained) == [7, 7, 7, 7, 8, 9, 10, 11, 12, 13]


def test_over_capacity_collection_is_trimmed(ledger):
    # Two concurrent completions left twelve entries behind
    existing = _entries([10, 20, 30, 40, 50, 60, 70, 80, 90, 100, 110, 120])
    decision = ledger.record_if_qualifying(existing, 5)
    assert decision.insert is None
    assert decision.evict is None
    assert set(decision.trim) == {1, 2}

    decision = ledger.record_if_qualifying(existing, 35)
    assert decision.insert.score == 35
    assert decision.evict == 3
    assert set(decision.removals) == {1, 2, 3}


def test_full_ledger_refuses_entries_it_cannot_evict(ledger):
    existing = [ScoreEntry(score=s, recorded_at=NOW) for s in range(10)]
    with pytest.raises(ValueError):
        ledger.record_if_qualifying(existing, 50)
    # Below capacity nothing is evicted, so ids are not needed yet
    assert ledger.record_if_qualifying(existing[:9], 50).qualified


def test_over_capacity_entries_need_ids_to_be_trimmed(ledger):
    existing = _entries([10, 20, 30, 40, 50, 60, 70, 80, 90, 100])
    existing.append(ScoreEntry(score=5, recorded_at=NOW))
    with pytest.raises(ValueError):
        ledger.record_if_qualifying(existing, 1)


def test_rank_orders_for_display(ledger):
    existing = _entries([30, 10, 20, 30])
    ranked = ledger.rank(existing)
    assert [e.score for e in ranked] == [30, 30, 20, 10]
    # Newer of the two 30s first
    assert ranked[0].id == 4


def test_custom_capacity():
    ledger = ScoreLedger(capacity=3, clock=lambda: NOW)
    existing = _entries([1, 2, 3])
    assert not ledger.qualifies(existing, 1)
    assert ledger.qualifies(existing, 2)
    assert ledger.record_if_qualifying(existing, 2).evict == 1


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        ScoreLedger(capacity=0)
