"""Shared helpers for the tiny-clifford tests."""

import numpy as np
import pytest

from tiny_clifford import Circuit, default_registry


UNITARY_GATES = [g.name for g in default_registry() if g.is_unitary]
SINGLE_QUBIT_GATES = [g for g in UNITARY_GATES if not default_registry()[g].targets_pairs]
TWO_QUBIT_GATES = [g for g in UNITARY_GATES if default_registry()[g].targets_pairs]


def make_random_circuit(num_qubits, depth, rng):
    """Random circuit of unitary Clifford gates."""
    circuit = Circuit(num_qubits)
    for _ in range(depth):
        if num_qubits >= 2 and rng.random() < 0.5:
            name = TWO_QUBIT_GATES[rng.integers(len(TWO_QUBIT_GATES))]
            qubits = rng.choice(num_qubits, size=2, replace=False)
        else:
            name = SINGLE_QUBIT_GATES[rng.integers(len(SINGLE_QUBIT_GATES))]
            qubits = [rng.integers(num_qubits)]
        circuit.append(name, [int(q) for q in qubits])
    return circuit


def assert_equal_up_to_phase(actual, expected, atol=1e-8):
    """Assert two arrays agree up to a global phase."""
    actual = np.asarray(actual, dtype=complex)
    expected = np.asarray(expected, dtype=complex)
    assert actual.shape == expected.shape
    k = np.unravel_index(np.argmax(np.abs(expected)), expected.shape)
    assert abs(actual[k]) > 1e-12
    phase = expected[k] / actual[k]
    assert abs(abs(phase) - 1) < atol
    np.testing.assert_allclose(actual * phase, expected, atol=atol)


@pytest.fixture
def rng():
    return np.random.default_rng(2024)


@pytest.fixture
def random_circuit():
    return make_random_circuit
