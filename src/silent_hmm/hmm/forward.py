"""
Forward algorithm for HMMs with silent states.

Computes the log-probability of a symbol sequence under a model together with
the full DP matrix. Cell (state, t) of the matrix holds the joint
log-probability of having generated the first t symbols and being in that
state.

Each column is filled in two passes: emitting states first, which depend only
on the previous column, then silent states in the model's silent order, which
depend on cells of the same column.
"""

from typing import Callable, NamedTuple, Optional, Sequence

from ..config import get_config
from ..logger import get_forward_logger
from .logprob import LogProb, UNDEFINED, ln, log_product, log_sum, log_sum_all
from .matrix import DpMatrix
from .model import HMM, State

logger = get_forward_logger()

ColumnObserver = Callable[[int, DpMatrix], None]


class ForwardResult(NamedTuple):
    """Total log-probability of the sequence and the filled DP matrix."""
    log_probability: LogProb
    matrix: DpMatrix


class ColumnLogger:
    """Column observer that writes every completed column to a logger at DEBUG."""

    def __init__(self, log=None):
        self.log = log or logger

    def __call__(self, t: int, matrix: DpMatrix) -> None:
        if t == 0:
            self.log.debug("Time step 0 (init)")
        else:
            self.log.debug(f"Time step {t} (symbol {matrix.sequence[t - 1]!r})")
        for state_id, value in matrix.column(t).items():
            self.log.debug(f"  {state_id}: {'undefined' if value is None else f'{value:.6f}'}")


def forward(model: HMM,
            sequence: Sequence,
            observer: Optional[ColumnObserver] = None) -> ForwardResult:
    """
    Run the forward algorithm.

    Args:
        model: Validated HMM; it is only read
        sequence: Symbols drawn from ``model.alphabet`` (a string is a
            sequence of one-character symbols)
        observer: Optional callable invoked as ``observer(t, matrix)`` after
            column ``t`` is complete. Defaults to a :class:`ColumnLogger`
            when config ``forward.log_columns`` is set.

    Returns:
        ForwardResult of (log_probability, matrix). ``log_probability`` is
        ``UNDEFINED`` for an empty sequence or an impossible one.

    Raises:
        InvalidSymbolError: If the sequence contains a symbol outside the alphabet
    """
    if observer is None and get_config('forward', 'log_columns'):
        observer = ColumnLogger()

    matrix = DpMatrix(model, sequence)

    _initialize(matrix, model)
    if observer is not None:
        observer(0, matrix)

    for t in range(1, matrix.n_columns):
        _fill_column(matrix, model, t)
        if observer is not None:
            observer(t, matrix)

    log_probability = _terminate(matrix, model)

    logger.debug(f"Forward complete: model={model.name or 'unnamed'}, "
                 f"length={len(matrix.sequence)}, log_probability={log_probability}")

    return ForwardResult(log_probability, matrix)


def score(model: HMM, sequence: Sequence) -> LogProb:
    """Log-probability of ``sequence`` under ``model``."""
    return forward(model, sequence).log_probability


def _incoming(matrix: DpMatrix, model: HMM, state: State, t: int) -> LogProb:
    # Sum over predecessors of product(cell, log transition probability)
    total = UNDEFINED
    for pred, prob in model.predecessors(state.id):
        total = log_sum(total, log_product(matrix.require(pred, t), ln(prob)))
    return total


def _initialize(matrix: DpMatrix, model: HMM) -> None:
    begin = model.begin_state

    # No symbol consumed yet, so no emitting state is reachable at t=0
    for state in model.emitting_states:
        matrix.set(state, 0, UNDEFINED)

    matrix.set(begin, 0, ln(1.0))

    for state in model.silent_order:
        if state is not begin:
            matrix.set(state, 0, _incoming(matrix, model, state, 0))


def _fill_column(matrix: DpMatrix, model: HMM, t: int) -> None:
    symbol = matrix.sequence[t - 1]

    for state in model.emitting_states:
        e_prob = ln(model.emission_prob(state.id, symbol))
        matrix.set(state, t, log_product(e_prob, _incoming(matrix, model, state, t - 1)))

    for state in model.silent_order:
        matrix.set(state, t, _incoming(matrix, model, state, t))


def _terminate(matrix: DpMatrix, model: HMM) -> LogProb:
    # Silent states in the last column are excluded
    last = matrix.n_columns - 1
    return log_sum_all(matrix.require(state, last) for state in model.emitting_states)
