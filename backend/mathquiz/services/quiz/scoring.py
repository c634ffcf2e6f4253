import re
from typing import Optional

POINTS_PER_CORRECT = 10

# Products top out at six digits; longer digit runs read as unparseable
MAX_ANSWER_DIGITS = 18

_LEADING_INT = re.compile(r'\s*([+-]?)([0-9]+)')


def parse_answer(raw_text: Optional[str]) -> Optional[int]:
    """Read the leading integer from typed text.

    Surrounding whitespace and anything after the digits are ignored, so
    "42", " 42 " and "42abc" all read as 42. Text without leading digits
    reads as None, as does a digit run too long to be any product.
    """
    if not raw_text:
        return None
    match = _LEADING_INT.match(raw_text)
    if not match:
        return None
    sign, digits = match.groups()
    if len(digits) > MAX_ANSWER_DIGITS:
        return None
    return int(sign + digits)


def is_correct(raw_text: Optional[str], correct_answer: int) -> bool:
    value = parse_answer(raw_text)
    return value is not None and value == correct_answer


def accuracy_percent(correct_count: int, total_questions: int) -> int:
    """Percent of correct answers, rounded half up to a whole number."""
    if total_questions <= 0:
        return 0
    return (200 * correct_count + total_questions) // (2 * total_questions)


def timer_band(time_left: int, time_limit: int) -> str:
    """Urgency band for the countdown display: idle, calm, warning or urgent."""
    if not time_limit:
        return 'idle'
    percentage = time_left * 100 / time_limit
    if percentage > 50:
        return 'calm'
    if percentage > 25:
        return 'warning'
    return 'urgent'
