"""
Dynamic-programming matrix for the forward algorithm.

Rows are model states in declaration order, columns are time steps
0..N for a sequence of length N. Every cell is written exactly once.
"""

from typing import Dict, Sequence, Union

import numpy as np

from ..exceptions import FillOrderError
from .logprob import LogProb, UNDEFINED
from .model import HMM, State

StateRef = Union[State, str]


class DpMatrix:
    """
    Write-once grid of log-probabilities indexed by (state, time).

    Values are kept in a float array next to two masks: one recording which
    cells were written and one recording which written cells hold a defined
    value. Unwritten cells read as ``UNDEFINED`` through :meth:`get`.
    """

    def __init__(self, model: HMM, sequence: Sequence):
        self._model = model
        self._symbols = tuple(sequence)
        shape = (len(model), len(self._symbols) + 1)
        self._values = np.zeros(shape, dtype=np.float64)
        self._written = np.zeros(shape, dtype=bool)
        self._defined = np.zeros(shape, dtype=bool)

    @property
    def model(self) -> HMM:
        return self._model

    @property
    def sequence(self) -> tuple:
        return self._symbols

    @property
    def n_rows(self) -> int:
        return self._values.shape[0]

    @property
    def n_columns(self) -> int:
        return self._values.shape[1]

    @property
    def shape(self):
        return self._values.shape

    def _cell(self, state: StateRef, t: int):
        state_id = state.id if isinstance(state, State) else state
        if state_id not in self._model:
            raise KeyError(f"Unknown state: {state_id!r}")
        if not isinstance(t, (int, np.integer)) or not 0 <= t < self.n_columns:
            raise IndexError(f"Time index {t} out of range [0, {self.n_columns - 1}]")
        return self._model.index_of(state_id), int(t)

    def is_set(self, state: StateRef, t: int) -> bool:
        return bool(self._written[self._cell(state, t)])

    def get(self, state: StateRef, t: int) -> LogProb:
        """Stored value of a cell, or ``UNDEFINED`` if it holds log(0) or is unset."""
        cell = self._cell(state, t)
        if not self._defined[cell]:
            return UNDEFINED
        return float(self._values[cell])

    def require(self, state: StateRef, t: int) -> LogProb:
        """
        Read a cell that the fill order guarantees has been written.

        Raises:
            FillOrderError: If the cell has not been written yet
        """
        cell = self._cell(state, t)
        if not self._written[cell]:
            state_id = state.id if isinstance(state, State) else state
            raise FillOrderError(f"Cell ({state_id!r}, {t}) read before being written")
        return self.get(state, t)

    def set(self, state: StateRef, t: int, value: LogProb) -> None:
        """
        Write a cell.

        Raises:
            FillOrderError: If the cell has already been written
        """
        cell = self._cell(state, t)
        if self._written[cell]:
            state_id = state.id if isinstance(state, State) else state
            raise FillOrderError(f"Cell ({state_id!r}, {t}) written twice")
        self._written[cell] = True
        if value is not None:
            self._values[cell] = value
            self._defined[cell] = True

    def column(self, t: int) -> Dict[str, LogProb]:
        """Values of one time step keyed by state id."""
        return {state.id: self.get(state, t) for state in self._model.states}

    def to_array(self) -> np.ndarray:
        """Copy of the grid as floats, with ``-inf`` for undefined cells."""
        return np.where(self._defined, self._values, -np.inf)

    def __str__(self) -> str:
        headers = ["state", "0"] + [f"{t}:{symbol}" for t, symbol in enumerate(self._symbols, start=1)]
        rows = [headers]
        for state in self._model.states:
            row = [state.id + ("*" if state.silent else "")]
            for t in range(self.n_columns):
                value = self.get(state, t)
                row.append("-" if value is None else f"{value:.4f}")
            rows.append(row)

        widths = [max(len(row[i]) for row in rows) for i in range(len(headers))]
        return "\n".join(
            "  ".join(cell.rjust(width) for cell, width in zip(row, widths))
            for row in rows
        )

    def __repr__(self) -> str:
        return f"DpMatrix(n_states={self.n_rows}, n_columns={self.n_columns})"
