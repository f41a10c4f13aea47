"""
Test configuration and fixtures for silent-hmm.

This file contains pytest configuration and shared model fixtures
for testing the forward algorithm and its collaborators.
"""

import itertools
import json
import math
import tempfile
from pathlib import Path

import pytest

from silent_hmm.hmm.model import HMM, State


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def ab_model():
    """
    Begin -> S1 -> S2 model: S1 emits only 'a', S2 emits only 'b'.

    P("ab") = 1.0 * 0.5 * 0.4 * 0.5 = 0.1
    """
    states = [
        State("B", silent=True),
        State("S1", emissions={"a": 0.5}),
        State("S2", emissions={"b": 0.5}),
    ]
    transitions = {
        ("B", "S1"): 1.0,
        ("S1", "S1"): 0.6,
        ("S1", "S2"): 0.4,
        ("S2", "S2"): 1.0,
    }
    return HMM(states, transitions, begin_state="B", name="ab")


@pytest.fixture
def two_state_model():
    """Fully connected 2-state model whose only silent state is the begin state."""
    states = [
        State("B", silent=True),
        State("S1", emissions={"a": 0.9, "b": 0.1}),
        State("S2", emissions={"a": 0.2, "b": 0.8}),
    ]
    transitions = [
        ("B", "S1", 0.6),
        ("B", "S2", 0.4),
        ("S1", "S1", 0.7),
        ("S1", "S2", 0.3),
        ("S2", "S1", 0.4),
        ("S2", "S2", 0.6),
    ]
    return HMM(states, transitions, begin_state="B", name="two_state")


def _passthrough_pair():
    emitting = [
        State("S1", emissions={"a": 0.6, "b": 0.4}),
        State("S2", emissions={"a": 0.1, "b": 0.9}),
    ]
    common = [("B", "S1", 1.0), ("S1", "S1", 0.5), ("S2", "S2", 0.7), ("S2", "S1", 0.3)]

    direct = HMM(
        [State("B", silent=True)] + emitting,
        common + [("S1", "S2", 0.5)],
        begin_state="B",
        name="direct"
    )
    with_silent = HMM(
        [State("B", silent=True), State("M", silent=True)] + emitting,
        common + [("S1", "M", 0.5), ("M", "S2", 1.0)],
        begin_state="B",
        name="passthrough"
    )
    return direct, with_silent


@pytest.fixture
def passthrough_models():
    """Equivalent models with and without a silent pass-through state between S1 and S2."""
    return _passthrough_pair()


@pytest.fixture
def model_definition():
    """Model file definition equivalent to the ab_model fixture."""
    return {
        "name": "ab",
        "alphabet": ["a", "b"],
        "begin": "B",
        "states": [
            {"id": "B", "silent": True},
            {"id": "S1", "emissions": {"a": 0.5}},
            {"id": "S2", "emissions": {"b": 0.5}}
        ],
        "transitions": [
            {"from": "B", "to": "S1", "prob": 1.0},
            {"from": "S1", "to": "S1", "prob": 0.6},
            {"from": "S1", "to": "S2", "prob": 0.4},
            {"from": "S2", "to": "S2", "prob": 1.0}
        ]
    }


@pytest.fixture
def model_file(temp_dir, model_definition):
    """JSON model file on disk."""
    path = temp_dir / "ab.json"
    path.write_text(json.dumps(model_definition))
    return path


def brute_force_log_probability(model, sequence):
    """
    Log-probability by enumerating every emitting-state path.

    Only valid for models whose single silent state is the begin state.
    """
    begin = model.begin_state.id
    emitting = [s.id for s in model.emitting_states]
    total = 0.0
    for path in itertools.product(emitting, repeat=len(sequence)):
        p = 1.0
        prev = begin
        for state_id, symbol in zip(path, sequence):
            p *= model.transition_prob(prev, state_id) * model.emission_prob(state_id, symbol)
            prev = state_id
        total += p
    if not sequence or total == 0.0:
        return None
    return math.log(total)


@pytest.fixture
def brute_force():
    """Brute-force path enumeration scorer."""
    return brute_force_log_probability


def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
