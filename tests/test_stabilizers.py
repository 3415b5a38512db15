"""
Tests for completing a stabilizer list into a tableau.
"""

import numpy as np
import pytest

from tiny_clifford import (
    InvalidArgument,
    PauliString,
    Tableau,
    circuit_to_output_state_vector,
    circuit_to_tableau,
    stabilizers_to_tableau,
    tableau_to_circuit,
)


def P(text):
    return PauliString.from_str(text)


class TestStabilizersToTableau:

    def test_single_z_is_identity(self):
        t = stabilizers_to_tableau(["Z"], allow_underconstrained=True)
        assert t == Tableau(1)
        assert t.x_output(0) == P("+X")

    def test_bell_pair(self):
        t = stabilizers_to_tableau(["XX", "ZZ"])
        assert t.is_valid()
        assert t.z_output(0) == P("+XX")
        assert t.z_output(1) == P("+ZZ")

    def test_signs_kept(self):
        t = stabilizers_to_tableau(["-XX", "-YY"])
        assert t.z_output(0) == P("-XX")
        assert t.z_output(1) == P("-YY")

    def test_accepts_pauli_strings(self):
        t = stabilizers_to_tableau([P("Y_"), P("_X")])
        assert t.stabilizers() == ["+YI", "+IX"]

    @pytest.mark.parametrize("seed", range(6))
    def test_recovers_random_stabilizers(self, seed, random_circuit):
        n = 1 + seed % 5
        original = circuit_to_tableau(random_circuit(n, 40, np.random.default_rng(500 + seed)))
        t = stabilizers_to_tableau(original.stabilizers())
        assert t.is_valid()
        assert t.stabilizers() == original.stabilizers()

    def test_prepared_state_is_stabilized(self):
        stabilizers = ["XXX", "ZZI", "-IZZ"]
        t = stabilizers_to_tableau(stabilizers)
        v = circuit_to_output_state_vector(tableau_to_circuit(t))
        for s in stabilizers:
            np.testing.assert_allclose(P(s).apply_to(v), v, atol=1e-8)

    def test_invert_maps_stabilizers_to_z(self):
        stabilizers = ["XX", "ZZ"]
        t = stabilizers_to_tableau(stabilizers, invert=True)
        assert t(P("XX")) == P("+ZI")
        assert t(P("ZZ")) == P("+IZ")
        assert t == stabilizers_to_tableau(stabilizers).inverse()

    def test_empty(self):
        assert stabilizers_to_tableau([]) == Tableau(0)


class TestRedundancy:

    def test_duplicate_rejected(self):
        with pytest.raises(InvalidArgument, match="redundant"):
            stabilizers_to_tableau(["XX", "ZZ", "XX"])

    def test_product_rejected(self):
        with pytest.raises(InvalidArgument, match="redundant"):
            stabilizers_to_tableau(["XX", "ZZ", "-YY"])

    def test_redundant_allowed(self):
        t = stabilizers_to_tableau(["XX", "ZZ", "-YY"], allow_redundant=True)
        assert t == stabilizers_to_tableau(["XX", "ZZ"])

    def test_contradiction(self):
        with pytest.raises(InvalidArgument, match="contradicts"):
            stabilizers_to_tableau(["Z_", "-Z_"], allow_redundant=True)

    def test_contradicting_product(self):
        with pytest.raises(InvalidArgument, match="contradicts"):
            stabilizers_to_tableau(["XX", "ZZ", "YY"], allow_redundant=True)


class TestUnderconstrained:

    def test_rejected(self):
        with pytest.raises(InvalidArgument, match="underconstrained"):
            stabilizers_to_tableau(["XX"])

    def test_filled(self):
        t = stabilizers_to_tableau(["XX"], allow_underconstrained=True)
        assert t.is_valid()
        assert t.z_output(0) == P("+XX")
        assert t.z_output(1).commutes(P("XX"))

    def test_redundant_and_underconstrained(self):
        t = stabilizers_to_tableau(
            ["ZII", "ZII"], allow_redundant=True, allow_underconstrained=True
        )
        assert t.is_valid()
        assert t.z_output(0) == P("+ZII")


class TestValidation:

    def test_anticommuting(self):
        with pytest.raises(InvalidArgument, match="anticommute"):
            stabilizers_to_tableau(["X", "Z"])

    def test_length_mismatch(self):
        with pytest.raises(InvalidArgument, match="same length"):
            stabilizers_to_tableau(["X", "ZZ"])

    def test_bad_text(self):
        with pytest.raises(ValueError):
            stabilizers_to_tableau(["XQ"])
