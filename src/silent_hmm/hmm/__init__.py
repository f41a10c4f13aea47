"""
Hidden Markov Model module.

Models with silent states, log-domain arithmetic and forward algorithm scoring.
"""

from .logprob import UNDEFINED, LogProb, ln, log_product, log_sum, log_sum_all, to_probability
from .model import HMM, State
from .matrix import DpMatrix
from .forward import ColumnLogger, ForwardResult, forward, score

__all__ = [
    "UNDEFINED",
    "LogProb",
    "ln",
    "log_product",
    "log_sum",
    "log_sum_all",
    "to_probability",
    "HMM",
    "State",
    "DpMatrix",
    "ColumnLogger",
    "ForwardResult",
    "forward",
    "score"
]
