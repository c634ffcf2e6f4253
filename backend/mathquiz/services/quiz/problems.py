import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class Difficulty(str, Enum):
    EASY = 'easy'
    MEDIUM = 'medium'
    HARD = 'hard'

    @classmethod
    def parse(cls, value: Union['Difficulty', str, None]) -> 'Difficulty':
        """Coerce a client-supplied value into a Difficulty.

        Raises ValueError for anything that is not one of the three tiers.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ValueError(f"difficulty must be one of: {', '.join(d.value for d in cls)}")


# Seconds on the clock for each problem
TIME_LIMITS = {
    Difficulty.EASY: 60,
    Difficulty.MEDIUM: 20,
    Difficulty.HARD: 10,
}

# Inclusive operand bounds
OPERAND_RANGES = {
    Difficulty.EASY: (10, 99),
    Difficulty.MEDIUM: (10, 99),
    Difficulty.HARD: (100, 999),
}


@dataclass(frozen=True)
class Problem:
    num1: int
    num2: int
    correct_answer: int

    @classmethod
    def blank(cls) -> 'Problem':
        return cls(0, 0, 0)


def generate_problem(difficulty: Difficulty, rng: Optional[random.Random] = None) -> Problem:
    """Draw two operands uniformly from the tier's range and multiply them."""
    source = rng or random
    low, high = OPERAND_RANGES[difficulty]
    num1 = source.randint(low, high)
    num2 = source.randint(low, high)
    return Problem(num1=num1, num2=num2, correct_answer=num1 * num2)


def describe_difficulties() -> list:
    return [
        {
            'difficulty': d.value,
            'time_limit': TIME_LIMITS[d],
            'operand_min': OPERAND_RANGES[d][0],
            'operand_max': OPERAND_RANGES[d][1],
        }
        for d in Difficulty
    ]
