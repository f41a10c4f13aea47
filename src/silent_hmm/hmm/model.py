"""
Hidden Markov Model with silent (non-emitting) states.

This module implements the static model consumed by the forward algorithm:
states with discrete emission tables, a sparse transition table and a
designated silent begin state. The order in which silent states must be
evaluated within one time step is computed once, at construction time.
"""

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple, Union

from ..exceptions import InvalidSymbolError, ModelConstructionError, ModelUsageError
from ..logger import get_logger

logger = get_logger(__name__)

TransitionSpec = Union[Mapping[Tuple[str, str], float], Iterable[Tuple[str, str, float]]]


@dataclass(frozen=True)
class State:
    """
    A single HMM state.

    Silent states take part in transitions but emit nothing. Emitting states
    carry a table mapping alphabet symbols to emission probabilities; symbols
    missing from the table have probability 0.
    """
    id: str
    silent: bool = False
    emissions: Mapping[str, float] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        object.__setattr__(self, 'emissions', MappingProxyType(dict(self.emissions)))

    def __reduce__(self):
        return (self.__class__, (self.id, self.silent, dict(self.emissions)))

    def __repr__(self) -> str:
        kind = "silent" if self.silent else "emitting"
        return f"State({self.id!r}, {kind})"


def _check_probability(value: float, what: str) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise ModelConstructionError(f"{what} is not a number: {value!r}")
    if not math.isfinite(value) or value < 0.0 or value > 1.0:
        raise ModelConstructionError(f"{what} must be in [0, 1], got {value}")
    return value


class HMM:
    """
    Immutable hidden Markov model with silent states.

    The model is validated when it is built and never changes afterwards, so
    a single instance can be shared by any number of forward computations.

    Invariants:
    - the begin state exists and is silent
    - nonzero transitions between silent states form an acyclic graph
    - ``silent_order`` lists every silent state, begin state first, such that
      for every nonzero silent transition A -> B, A precedes B
    """

    def __init__(self,
                 states: Iterable[State],
                 transitions: TransitionSpec,
                 begin_state: str,
                 alphabet: Optional[Iterable[str]] = None,
                 name: Optional[str] = None):
        """
        Build and validate a model.

        Args:
            states: States in declaration order; ids must be unique
            transitions: Mapping ``{(src_id, dst_id): prob}`` or iterable of
                ``(src_id, dst_id, prob)`` triples; absent pairs have probability 0
            begin_state: Id of the silent state the model starts in
            alphabet: Emission alphabet; defaults to every symbol any state emits
            name: Optional model name used in reports

        Raises:
            ModelConstructionError: If the model violates any invariant
        """
        self._name = name
        self._states = tuple(states)
        if not self._states:
            raise ModelConstructionError("Model must have at least one state")

        self._by_id: Dict[str, State] = {}
        self._index: Dict[str, int] = {}
        for i, state in enumerate(self._states):
            if not isinstance(state, State):
                raise ModelConstructionError(f"Expected State, got {type(state).__name__}")
            if state.id in self._by_id:
                raise ModelConstructionError(f"Duplicate state id: {state.id!r}")
            self._by_id[state.id] = state
            self._index[state.id] = i

        if begin_state not in self._by_id:
            raise ModelConstructionError(f"Begin state {begin_state!r} is not declared")
        if not self._by_id[begin_state].silent:
            raise ModelConstructionError(f"Begin state {begin_state!r} must be silent")
        self._begin = self._by_id[begin_state]

        self._alphabet = self._build_alphabet(alphabet)
        self._transitions = self._build_transitions(transitions)

        # Predecessor lists restricted to nonzero transitions, in state order
        incoming: Dict[str, List[Tuple[State, float]]] = {s.id: [] for s in self._states}
        for (src, dst), prob in sorted(self._transitions.items(),
                                       key=lambda item: self._index[item[0][0]]):
            if prob > 0.0:
                incoming[dst].append((self._by_id[src], prob))
        self._predecessors = {sid: tuple(preds) for sid, preds in incoming.items()}

        self._silent_order = self._sort_silent_states()
        self._emitting = tuple(s for s in self._states if not s.silent)

        logger.debug(f"Built HMM {self._name or 'unnamed'}: {len(self._states)} states "
                     f"({len(self._silent_order)} silent), "
                     f"{len(self._transitions)} transitions, "
                     f"alphabet size {len(self._alphabet)}")

    def _build_alphabet(self, alphabet: Optional[Iterable[str]]) -> FrozenSet[str]:
        declared = None if alphabet is None else frozenset(alphabet)
        emitted = set()
        states = []

        for state in self._states:
            if state.silent:
                if state.emissions:
                    raise ModelConstructionError(
                        f"Silent state {state.id!r} cannot declare emissions")
                states.append(state)
                continue
            emissions = {}
            for symbol, prob in state.emissions.items():
                emissions[symbol] = _check_probability(
                    prob, f"Emission probability of {symbol!r} in state {state.id!r}")
                if declared is not None and symbol not in declared:
                    raise ModelConstructionError(
                        f"State {state.id!r} emits {symbol!r}, which is not in the alphabet")
                emitted.add(symbol)
            states.append(State(state.id, state.silent, emissions))

        # Emitting states are rebuilt with float probabilities
        self._states = tuple(states)
        self._by_id = {state.id: state for state in self._states}

        return declared if declared is not None else frozenset(emitted)

    def _build_transitions(self, transitions: TransitionSpec) -> Dict[Tuple[str, str], float]:
        if isinstance(transitions, Mapping):
            items = [(src, dst, prob) for (src, dst), prob in transitions.items()]
        else:
            items = list(transitions)

        table: Dict[Tuple[str, str], float] = {}
        for src, dst, prob in items:
            for sid in (src, dst):
                if sid not in self._by_id:
                    raise ModelConstructionError(
                        f"Transition {src!r} -> {dst!r} references unknown state {sid!r}")
            if (src, dst) in table:
                raise ModelConstructionError(f"Transition {src!r} -> {dst!r} declared twice")
            prob = _check_probability(prob, f"Transition probability {src!r} -> {dst!r}")
            if prob > 0.0 and dst == self._begin.id and self._by_id[src].silent:
                raise ModelConstructionError(
                    f"Silent state {src!r} cannot transition into begin state {dst!r}")
            table[(src, dst)] = prob

        return table

    def _sort_silent_states(self) -> Tuple[State, ...]:
        """
        Topologically sort silent states by depth-first finish order.

        Roots are visited in declaration order with the begin state last, so
        after reversal the begin state comes first.

        Raises:
            ModelConstructionError: If silent transitions contain a cycle
        """
        silent = [s for s in self._states if s.silent]
        successors: Dict[str, List[str]] = {s.id: [] for s in silent}
        for (src, dst), prob in self._transitions.items():
            if prob > 0.0 and src in successors and dst in successors:
                successors[src].append(dst)
        for sid in successors:
            successors[sid].sort(key=self._index.__getitem__)

        WHITE, GREY, BLACK = 0, 1, 2
        color = {sid: WHITE for sid in successors}
        finished: List[str] = []

        roots = [s.id for s in silent if s.id != self._begin.id] + [self._begin.id]
        for root in roots:
            if color[root] != WHITE:
                continue
            color[root] = GREY
            stack = [(root, iter(successors[root]))]
            while stack:
                node, children = stack[-1]
                for child in children:
                    if color[child] == GREY:
                        raise ModelConstructionError(
                            f"Silent states form a cycle through {node!r} -> {child!r}")
                    if color[child] == WHITE:
                        color[child] = GREY
                        stack.append((child, iter(successors[child])))
                        break
                else:
                    stack.pop()
                    color[node] = BLACK
                    finished.append(node)

        order = tuple(self._by_id[sid] for sid in reversed(finished))
        return order

    @property
    def name(self) -> Optional[str]:
        return self._name

    @property
    def states(self) -> Tuple[State, ...]:
        """All states in declaration order."""
        return self._states

    @property
    def silent_order(self) -> Tuple[State, ...]:
        """Silent states in evaluation order, begin state first."""
        return self._silent_order

    @property
    def emitting_states(self) -> Tuple[State, ...]:
        return self._emitting

    @property
    def begin_state(self) -> State:
        return self._begin

    @property
    def alphabet(self) -> FrozenSet[str]:
        return self._alphabet

    @property
    def transitions(self) -> Dict[Tuple[str, str], float]:
        """Copy of the declared transition table."""
        return dict(self._transitions)

    def state(self, state_id: str) -> State:
        try:
            return self._by_id[state_id]
        except KeyError:
            raise ModelUsageError(f"Unknown state: {state_id!r}") from None

    def index_of(self, state_id: str) -> int:
        """Row index of a state in declaration order."""
        try:
            return self._index[state_id]
        except KeyError:
            raise ModelUsageError(f"Unknown state: {state_id!r}") from None

    def transition_prob(self, src: str, dst: str) -> float:
        """Probability of moving from ``src`` to ``dst``; 0.0 if undeclared."""
        return self._transitions.get((src, dst), 0.0)

    def emission_prob(self, state_id: str, symbol: str) -> float:
        """
        Probability that an emitting state emits ``symbol``.

        Raises:
            InvalidSymbolError: If ``symbol`` is outside the alphabet
            ModelUsageError: If the state is unknown or silent
        """
        state = self.state(state_id)
        if state.silent:
            raise ModelUsageError(f"Silent state {state_id!r} has no emissions")
        if symbol not in self._alphabet:
            raise InvalidSymbolError(symbol)
        return state.emissions.get(symbol, 0.0)

    def predecessors(self, state_id: str) -> Tuple[Tuple[State, float], ...]:
        """States with a nonzero transition into ``state_id``, with their probabilities."""
        try:
            return self._predecessors[state_id]
        except KeyError:
            raise ModelUsageError(f"Unknown state: {state_id!r}") from None

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, state_id) -> bool:
        return state_id in self._by_id

    def __repr__(self) -> str:
        return (f"HMM(name={self._name!r}, n_states={len(self._states)}, "
                f"n_silent={len(self._silent_order)}, begin={self._begin.id!r})")
