"""
Log-domain probability arithmetic.

Probabilities are carried as natural logarithms to avoid underflow over long
products. A log-probability is either a float (log of a probability in (0, 1])
or ``None``, which stands for log(0): an impossible event.

``None`` is absorbing under :func:`log_product` and the identity under
:func:`log_sum`, so every accumulation can start from ``UNDEFINED`` and fold
contributions in.
"""

import math
from typing import Iterable, Optional

LogProb = Optional[float]

UNDEFINED: LogProb = None


def ln(p: float) -> LogProb:
    """
    Convert a probability to the log domain.

    Args:
        p: Probability in [0, 1]

    Returns:
        Natural log of ``p``, or ``UNDEFINED`` when ``p`` is exactly zero

    Raises:
        ValueError: If ``p`` is not a finite number in [0, 1]
    """
    if not math.isfinite(p) or p < 0.0 or p > 1.0:
        raise ValueError(f"Probability must be in [0, 1], got {p}")
    if p == 0.0:
        return UNDEFINED
    return math.log(p)


def log_product(a: LogProb, b: LogProb) -> LogProb:
    """Multiply two probabilities held in log space."""
    if a is None or b is None:
        return UNDEFINED
    return a + b


def log_sum(a: LogProb, b: LogProb) -> LogProb:
    """
    Add two probabilities held in log space.

    Uses log(e^a + e^b) = max + log(1 + e^(min - max)) so the exponent is
    never positive.
    """
    if a is None:
        return b
    if b is None:
        return a
    if a >= b:
        hi, lo = a, b
    else:
        hi, lo = b, a
    return hi + math.log1p(math.exp(lo - hi))


def log_sum_all(values: Iterable[LogProb]) -> LogProb:
    """Fold :func:`log_sum` over ``values``, starting from ``UNDEFINED``."""
    total = UNDEFINED
    for value in values:
        total = log_sum(total, value)
    return total


def to_probability(value: LogProb) -> float:
    """Map a log-probability back to linear space (``UNDEFINED`` -> 0.0)."""
    if value is None:
        return 0.0
    return math.exp(value)
