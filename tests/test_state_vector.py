"""
Tests for circuit <-> stabilizer state vector conversion.
"""

import numpy as np
import pytest

from tiny_clifford import (
    Circuit,
    ConversionConfig,
    InvalidArgument,
    UnsupportedOperation,
    circuit_to_output_state_vector,
    stabilizer_state_vector_to_circuit,
)
from tiny_clifford.backends import VectorSimulator

from conftest import assert_equal_up_to_phase

SQRT2 = 1 / np.sqrt(2)


class TestCircuitToStateVector:

    def test_plus_state(self):
        v = circuit_to_output_state_vector(Circuit().h(0))
        np.testing.assert_allclose(v, [SQRT2, SQRT2], atol=1e-12)

    def test_endianness(self):
        c = Circuit(2).x(0)
        little = circuit_to_output_state_vector(c)
        big = circuit_to_output_state_vector(c, little_endian=False)
        np.testing.assert_allclose(little, [0, 1, 0, 0])
        np.testing.assert_allclose(big, [0, 0, 1, 0])

    def test_bell(self):
        v = circuit_to_output_state_vector(Circuit().h(0).cx(0, 1))
        np.testing.assert_allclose(v, [SQRT2, 0, 0, SQRT2], atol=1e-12)

    def test_multiple_pairs(self):
        v = circuit_to_output_state_vector(Circuit().x(0, 2).cx(0, 1, 2, 3))
        assert abs(v[0b1111]) == pytest.approx(1)

    def test_tick_skipped(self):
        v = circuit_to_output_state_vector(Circuit().h(0).tick().h(0))
        np.testing.assert_allclose(v, [1, 0], atol=1e-12)

    def test_measurement_rejected(self):
        with pytest.raises(UnsupportedOperation):
            circuit_to_output_state_vector(Circuit().h(0).m(0))

    def test_noise_rejected(self):
        with pytest.raises(UnsupportedOperation):
            circuit_to_output_state_vector(Circuit().depolarize1(0.1, 0))

    def test_size_limit(self):
        with pytest.raises(InvalidArgument, match="max_dense_qubits"):
            circuit_to_output_state_vector(
                Circuit(3), config=ConversionConfig(max_dense_qubits=2)
            )


class TestStateVectorToCircuit:

    @pytest.mark.parametrize("seed", range(8))
    @pytest.mark.parametrize("little_endian", [True, False])
    def test_round_trip(self, seed, little_endian, random_circuit):
        n = 1 + seed % 4
        rng = np.random.default_rng(300 + seed)
        target = circuit_to_output_state_vector(random_circuit(n, 25, rng), little_endian)
        target = target * np.exp(1j * rng.uniform(0, 2 * np.pi))

        c = stabilizer_state_vector_to_circuit(target, little_endian)
        assert c.num_qubits == n
        produced = circuit_to_output_state_vector(c, little_endian)
        assert abs(np.vdot(produced, target)) == pytest.approx(1, abs=1e-8)
        assert_equal_up_to_phase(produced, target)

    @pytest.mark.parametrize("seed", range(4))
    def test_inverted_returns_to_zero(self, seed, random_circuit):
        n = 2 + seed % 3
        target = circuit_to_output_state_vector(
            random_circuit(n, 25, np.random.default_rng(400 + seed))
        )
        c = stabilizer_state_vector_to_circuit(target, inverted=True)
        sim = VectorSimulator.from_vector(target)
        for inst in c:
            sim.apply(inst.name, *(t.value for t in inst.targets))
        assert abs(sim.state_vector()[0]) == pytest.approx(1, abs=1e-8)

    def test_unnormalized_basis_state(self):
        assert len(stabilizer_state_vector_to_circuit([2, 0])) == 0

    def test_one_state(self):
        c = stabilizer_state_vector_to_circuit([0, 0, 1, 0])
        np.testing.assert_allclose(circuit_to_output_state_vector(c), [0, 0, 1, 0], atol=1e-12)

    def test_gate_set(self, random_circuit):
        target = circuit_to_output_state_vector(random_circuit(3, 30, np.random.default_rng(7)))
        c = stabilizer_state_vector_to_circuit(target)
        assert {inst.name for inst in c} <= {"X", "CX", "S", "S_DAG", "Z", "CZ", "H"}

    def test_non_stabilizer_phase_rejected(self):
        t_plus = np.array([1, np.exp(1j * np.pi / 4)]) * SQRT2
        with pytest.raises(InvalidArgument, match="not a stabilizer state"):
            stabilizer_state_vector_to_circuit(t_plus)

    def test_non_stabilizer_support_rejected(self):
        with pytest.raises(InvalidArgument, match="not a stabilizer state"):
            stabilizer_state_vector_to_circuit([1, 1, 1, 0])

    def test_bad_length(self):
        with pytest.raises(InvalidArgument, match="power of two"):
            stabilizer_state_vector_to_circuit([1, 0, 0])

    def test_zero_vector(self):
        with pytest.raises(InvalidArgument, match="zero"):
            stabilizer_state_vector_to_circuit([0, 0])

    def test_not_one_dimensional(self):
        with pytest.raises(InvalidArgument, match="1-D"):
            stabilizer_state_vector_to_circuit(np.eye(2))
