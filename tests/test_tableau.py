"""
Tests for the Tableau data model.

Covers:
- Identity and construction from generator images
- Conjugation of Pauli strings (with signs)
- Composition, inversion and validity
- In-place gate application before / after
"""

import numpy as np
import pytest

from tiny_clifford import Circuit, PauliString, Tableau, circuit_to_tableau, default_registry


def P(text):
    return PauliString.from_str(text)


def hadamard():
    return Tableau.from_conjugated_generators(xs=[P("Z")], zs=[P("X")])


# ═══════════════════════════════════════════════════════════════════
# Construction
# ═══════════════════════════════════════════════════════════════════


class TestConstruction:

    def test_identity(self):
        t = Tableau(2)
        assert t.x_output(0) == P("+XI")
        assert t.z_output(1) == P("+IZ")
        assert t.is_valid()
        assert len(t) == 2

    def test_stabilizers_of_identity(self):
        t = Tableau(2)
        assert t.stabilizers() == ["+ZI", "+IZ"]
        assert t.destabilizers() == ["+XI", "+IX"]

    def test_from_generators(self):
        t = hadamard()
        assert t.x_output(0) == P("+Z")
        assert t.z_output(0) == P("+X")
        assert t == default_registry().tableau("H")

    def test_generator_count_mismatch(self):
        with pytest.raises(ValueError, match="X images"):
            Tableau.from_conjugated_generators(xs=[P("X")], zs=[])

    def test_generator_length_mismatch(self):
        with pytest.raises(ValueError, match="has length"):
            Tableau.from_conjugated_generators(xs=[P("XX")], zs=[P("Z")])

    def test_output_out_of_range(self):
        with pytest.raises(IndexError):
            Tableau(1).x_output(1)

    def test_invalid_tableau_detected(self):
        t = Tableau.from_conjugated_generators(xs=[P("X")], zs=[P("X")])
        assert not t.is_valid()

    def test_zero_qubits(self):
        t = Tableau(0)
        assert t.is_valid()
        assert t.inverse() == t

    def test_text(self):
        text = str(hadamard())
        assert "X0 -> +Z" in text
        assert "Z0 -> +X" in text


# ═══════════════════════════════════════════════════════════════════
# Conjugation
# ═══════════════════════════════════════════════════════════════════


class TestConjugation:

    def test_hadamard_flips_y_sign(self):
        assert hadamard()(P("-Y")) == P("+Y")

    def test_s_maps_x_to_y(self):
        s = default_registry().tableau("S")
        assert s(P("X")) == P("+Y")
        assert s(P("Y")) == P("-X")

    def test_cx_spreads_x(self):
        cx = default_registry().tableau("CX")
        assert cx(P("XI")) == P("+XX")
        assert cx(P("IZ")) == P("+ZZ")
        assert cx(P("ZI")) == P("+ZI")
        assert cx(P("YY")) == P("-XZ")

    def test_length_mismatch(self):
        with pytest.raises(ValueError, match="expected"):
            Tableau(2)(P("X"))


# ═══════════════════════════════════════════════════════════════════
# Composition & inversion
# ═══════════════════════════════════════════════════════════════════


class TestComposition:

    def test_then_matches_circuit(self):
        h = circuit_to_tableau(Circuit().h(0))
        s = circuit_to_tableau(Circuit().s(0))
        assert h.then(s) == circuit_to_tableau(Circuit().h(0).s(0))

    def test_h_then_s(self):
        t = circuit_to_tableau(Circuit().h(0).s(0))
        assert t.x_output(0) == P("+Z")
        assert t.z_output(0) == P("+Y")

    @pytest.mark.parametrize("seed", range(5))
    def test_inverse_undoes(self, seed, random_circuit):
        n = 1 + seed % 4
        t = circuit_to_tableau(random_circuit(n, 30, np.random.default_rng(seed)))
        assert t.is_valid()
        assert t.then(t.inverse()) == Tableau(n)
        assert t.inverse().then(t) == Tableau(n)

    def test_then_size_mismatch(self):
        with pytest.raises(ValueError, match="Cannot compose"):
            Tableau(1).then(Tableau(2))

    def test_copy_is_independent(self):
        t = Tableau(1)
        c = t.copy()
        c.inplace_scatter_append(default_registry().tableau("H"), [0])
        assert t == Tableau(1)
        assert c != t


# ═══════════════════════════════════════════════════════════════════
# In-place gate application
# ═══════════════════════════════════════════════════════════════════


class TestScatter:

    def test_append_onto_identity(self):
        t = Tableau(3)
        t.inplace_scatter_append(default_registry().tableau("CX"), [2, 0])
        assert t.x_output(2) == P("+XIX")
        assert t.z_output(0) == P("+ZIZ")

    def test_prepend_applies_first(self):
        registry = default_registry()
        t = circuit_to_tableau(Circuit().cx(0, 1))
        t.inplace_scatter_prepend(registry.tableau("H"), [0])
        assert t == circuit_to_tableau(Circuit().h(0).cx(0, 1))

    def test_append_applies_last(self):
        t = circuit_to_tableau(Circuit(2).h(0))
        t.inplace_scatter_append(default_registry().tableau("CX"), [0, 1])
        assert t == circuit_to_tableau(Circuit().h(0).cx(0, 1))

    def test_wrong_target_count(self):
        with pytest.raises(ValueError, match="targets"):
            Tableau(2).inplace_scatter_append(default_registry().tableau("CX"), [0])

    def test_duplicate_targets(self):
        with pytest.raises(ValueError, match="Duplicate"):
            Tableau(2).inplace_scatter_append(default_registry().tableau("CX"), [1, 1])
