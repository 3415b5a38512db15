"""
Tests for tableau <-> dense unitary conversion.
"""

import numpy as np
import pytest

from tiny_clifford import (
    Circuit,
    ConversionConfig,
    InvalidArgument,
    Tableau,
    circuit_to_tableau,
    default_registry,
    tableau_to_unitary,
    unitary_to_tableau,
)

from conftest import assert_equal_up_to_phase

SQRT2 = 1 / np.sqrt(2)


class TestTableauToUnitary:

    def test_identity(self):
        np.testing.assert_allclose(tableau_to_unitary(Tableau(3)), np.eye(8), atol=1e-12)

    def test_hadamard(self):
        u = tableau_to_unitary(default_registry().tableau("H"))
        np.testing.assert_allclose(u, SQRT2 * np.array([[1, 1], [1, -1]]), atol=1e-12)

    def test_s(self):
        u = tableau_to_unitary(default_registry().tableau("S"))
        np.testing.assert_allclose(u, np.diag([1, 1j]), atol=1e-12)

    def test_cx_endianness(self):
        cx = default_registry().tableau("CX")
        big = tableau_to_unitary(cx, little_endian=False)
        little = tableau_to_unitary(cx, little_endian=True)
        np.testing.assert_allclose(big, default_registry()["CX"].matrix, atol=1e-12)
        expected_little = np.array([
            [1, 0, 0, 0],
            [0, 0, 0, 1],
            [0, 0, 1, 0],
            [0, 1, 0, 0],
        ])
        np.testing.assert_allclose(little, expected_little, atol=1e-12)

    def test_first_column_phase_convention(self):
        t = circuit_to_tableau(Circuit().x(0).s(0).h(0))
        column = tableau_to_unitary(t)[:, 0]
        first = np.flatnonzero(np.abs(column) > 1e-6)[0]
        assert abs(column[first].imag) < 1e-12
        assert column[first].real > 0

    def test_size_limit(self):
        with pytest.raises(InvalidArgument, match="max_dense_qubits"):
            tableau_to_unitary(Tableau(3), config=ConversionConfig(max_dense_qubits=2))


class TestUnitaryToTableau:

    @pytest.mark.parametrize("seed", range(6))
    @pytest.mark.parametrize("little_endian", [True, False])
    def test_round_trip(self, seed, little_endian, random_circuit):
        n = 1 + seed % 3
        t = circuit_to_tableau(random_circuit(n, 25, np.random.default_rng(seed)))
        u = tableau_to_unitary(t, little_endian)
        assert unitary_to_tableau(u, little_endian) == t
        assert_equal_up_to_phase(
            tableau_to_unitary(unitary_to_tableau(u, little_endian), little_endian), u
        )

    def test_global_phase_ignored(self):
        h = default_registry()["H"].matrix * np.exp(0.7j)
        assert unitary_to_tableau(h) == default_registry().tableau("H")

    def test_t_gate_rejected(self):
        t_gate = np.diag([1, np.exp(1j * np.pi / 4)])
        with pytest.raises(InvalidArgument, match="not a Clifford"):
            unitary_to_tableau(t_gate)

    def test_scaled_matrix_rejected(self):
        with pytest.raises(InvalidArgument):
            unitary_to_tableau(2 * np.eye(2))

    def test_non_square_rejected(self):
        with pytest.raises(InvalidArgument, match="square"):
            unitary_to_tableau(np.ones((2, 4)))

    def test_non_power_of_two_rejected(self):
        with pytest.raises(InvalidArgument, match="power of two"):
            unitary_to_tableau(np.eye(3))

    def test_tolerance(self):
        noisy = default_registry()["H"].matrix + 1e-6
        assert unitary_to_tableau(noisy) == default_registry().tableau("H")
        with pytest.raises(InvalidArgument):
            unitary_to_tableau(noisy, config=ConversionConfig(atol=1e-9))

    def test_strict_config_accepts_exact_integer_matrix(self):
        matrix = np.array([[0, 1], [1, 0]])
        t = unitary_to_tableau(matrix, config=ConversionConfig(atol=1e-9))
        assert str(t) == "Tableau(1 qubits)\n  X0 -> +X\n  Z0 -> -Z"
