"""
silent-hmm: forward algorithm scoring for Hidden Markov Models with silent states.

Computes the log-probability of a discrete symbol sequence under an HMM whose
states may be non-emitting, together with the full dynamic-programming matrix.
"""

__version__ = "0.1.0"
__author__ = "silent-hmm Development Team"

from .config import get_config, set_config
from .logger import get_logger
from .hmm import HMM, State, DpMatrix, ForwardResult, forward, score

__all__ = [
    "get_config",
    "set_config",
    "get_logger",
    "HMM",
    "State",
    "DpMatrix",
    "ForwardResult",
    "forward",
    "score",
    "__version__"
]
