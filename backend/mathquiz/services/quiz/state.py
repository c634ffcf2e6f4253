"""Round state and its transitions.

Every transition takes the current snapshot and returns the next one. A
transition that does not apply (for example a tick after the round is
over) returns the snapshot it was given, unchanged, so callers can test
``next_state is state`` to detect a no-op.
"""

import random
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from .problems import Difficulty, Problem, TIME_LIMITS, generate_problem
from .scoring import POINTS_PER_CORRECT, accuracy_percent, is_correct


class Feedback(str, Enum):
    CORRECT = 'correct'
    WRONG = 'wrong'


@dataclass(frozen=True)
class RoundState:
    difficulty: Optional[Difficulty] = None
    problem: Problem = field(default_factory=Problem.blank)
    answer: str = ''
    time_left: int = 0
    score: int = 0
    total_questions: int = 0
    correct_count: int = 0
    round_active: bool = False
    round_over: bool = False
    feedback: Optional[Feedback] = None

    @property
    def accepting_answers(self) -> bool:
        return self.round_active and not self.round_over

    @property
    def time_limit(self) -> int:
        return TIME_LIMITS[self.difficulty] if self.difficulty else 0

    @property
    def accuracy_percent(self) -> int:
        return accuracy_percent(self.correct_count, self.total_questions)

    @property
    def phase(self) -> str:
        if self.round_over:
            return 'over'
        if self.round_active:
            return 'active'
        return 'idle'


IDLE = RoundState()


def start_round(state: RoundState, difficulty: Difficulty, rng: Optional[random.Random] = None) -> RoundState:
    """Begin a fresh round. Allowed from any phase, including a running round."""
    return RoundState(
        difficulty=difficulty,
        problem=generate_problem(difficulty, rng),
        answer='',
        time_left=TIME_LIMITS[difficulty],
        round_active=True,
        round_over=False,
        feedback=None,
    )


def update_answer_text(state: RoundState, raw_text: str) -> RoundState:
    return replace(state, answer=raw_text)


def submit_answer(state: RoundState, raw_text: Optional[str] = None) -> RoundState:
    """Score the typed answer against the current problem.

    When ``raw_text`` is given it replaces the stored answer first.
    Unparseable text counts as a wrong answer.
    """
    if not state.accepting_answers:
        return state
    answer = state.answer if raw_text is None else raw_text
    correct = is_correct(answer, state.problem.correct_answer)
    return replace(
        state,
        answer=answer,
        total_questions=state.total_questions + 1,
        correct_count=state.correct_count + (1 if correct else 0),
        score=state.score + (POINTS_PER_CORRECT if correct else 0),
        feedback=Feedback.CORRECT if correct else Feedback.WRONG,
    )


def advance_problem(state: RoundState, rng: Optional[random.Random] = None) -> RoundState:
    """Swap in the next problem and put the full time limit back on the clock."""
    if not state.accepting_answers or state.difficulty is None:
        return state
    return replace(
        state,
        problem=generate_problem(state.difficulty, rng),
        time_left=TIME_LIMITS[state.difficulty],
        answer='',
        feedback=None,
    )


def tick(state: RoundState) -> RoundState:
    if not state.accepting_answers:
        return state
    if state.time_left <= 1:
        return replace(state, time_left=0, round_active=False, round_over=True)
    return replace(state, time_left=state.time_left - 1)


def reset_round(state: RoundState) -> RoundState:
    return IDLE
