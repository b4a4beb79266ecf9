import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

COUNTRIES = (
    'Estonia', 'France', 'Germany', 'Ireland', 'Italy', 'Nigeria',
    'Poland', 'Spain', 'UK', 'Ukraine', 'US',
)
OPTIONS_PER_QUESTION = 3
DEFAULT_STREAK_POINTS = 5


def new_question(rng: Optional[random.Random] = None) -> Tuple[List[str], int]:
    """Draw the flags shown for one question and the index of the one to tap."""
    rng = rng or random.Random()
    pool = list(COUNTRIES)
    rng.shuffle(pool)
    return pool[:OPTIONS_PER_QUESTION], rng.randint(0, OPTIONS_PER_QUESTION - 1)


@dataclass(frozen=True)
class AnswerOutcome:
    correct: bool
    delta: int
    score: int
    consecutive_correct: int
    consecutive_wrong: int


def score_answer(score: int, consecutive_correct: int, consecutive_wrong: int,
                 correct: bool, points: int = DEFAULT_STREAK_POINTS) -> AnswerOutcome:
    """Apply the streak rule.

    A correct answer earns ``points`` times the current run of correct
    answers; a wrong one costs ``points`` times the run of wrong answers.
    """
    if correct:
        consecutive_correct += 1
        consecutive_wrong = 0
        delta = consecutive_correct * points
    else:
        consecutive_wrong += 1
        consecutive_correct = 0
        delta = -consecutive_wrong * points
    return AnswerOutcome(
        correct=correct,
        delta=delta,
        score=score + delta,
        consecutive_correct=consecutive_correct,
        consecutive_wrong=consecutive_wrong,
    )
