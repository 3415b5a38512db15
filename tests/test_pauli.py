"""
Tests for PauliString and FlexPauliString.

Covers:
- Parsing and printing
- Multiplication phases and commutation
- Dense application in both endian orders
"""

import numpy as np
import pytest

from tiny_clifford import FlexPauliString, PauliString


X = np.array([[0, 1], [1, 0]], dtype=complex)
Y = np.array([[0, -1j], [1j, 0]], dtype=complex)
Z = np.array([[1, 0], [0, -1]], dtype=complex)


# ═══════════════════════════════════════════════════════════════════
# Text
# ═══════════════════════════════════════════════════════════════════


class TestParsing:

    def test_round_trip(self):
        p = PauliString.from_str("-X_YZ")
        assert str(p) == "-XIYZ"
        assert len(p) == 4
        assert p.sign

    def test_identity_letters(self):
        assert PauliString.from_str("I_") == PauliString.identity(2)

    def test_lower_case(self):
        assert PauliString.from_str("xyz") == PauliString.from_str("+XYZ")

    def test_invalid_character(self):
        with pytest.raises(ValueError, match="Invalid Pauli character"):
            PauliString.from_str("XQ")

    def test_from_letters(self):
        p = PauliString.from_letters({0: "X", 2: "Z"}, 3, sign=True)
        assert str(p) == "-XIZ"

    def test_from_letters_out_of_range(self):
        with pytest.raises(ValueError, match="out of range"):
            PauliString.from_letters({3: "X"}, 2)

    def test_letters_and_support(self):
        p = PauliString.from_str("Y_Z")
        assert p.letter(0) == "Y"
        assert p.letter(1) == "I"
        assert p.weight == 2
        assert p.support() == [0, 2]
        assert not p.is_identity()

    def test_flex_text(self):
        f = FlexPauliString.from_str("-iXZ")
        assert str(f) == "-iXZ"
        assert f.phase == -1j
        assert f.log_i == 3


# ═══════════════════════════════════════════════════════════════════
# Algebra
# ═══════════════════════════════════════════════════════════════════


class TestAlgebra:

    def test_xy_is_iz(self):
        product = PauliString.from_str("X") * PauliString.from_str("Y")
        assert str(product) == "+iZ"

    def test_yx_is_minus_iz(self):
        product = PauliString.from_str("Y") * PauliString.from_str("X")
        assert str(product) == "-iZ"

    def test_commuting_product_is_real(self):
        product = PauliString.from_str("XX") * PauliString.from_str("ZZ")
        assert not product.imag
        assert product == PauliString.from_str("-YY")

    def test_signs_multiply(self):
        product = PauliString.from_str("-X") * PauliString.from_str("-X")
        assert product == FlexPauliString.from_str("+I")

    def test_commutes(self):
        assert PauliString.from_str("XX").commutes(PauliString.from_str("ZZ"))
        assert not PauliString.from_str("XI").commutes(PauliString.from_str("ZI"))

    def test_commutes_length_mismatch(self):
        with pytest.raises(ValueError, match="different lengths"):
            PauliString.from_str("X").commutes(PauliString.from_str("XX"))

    def test_negation(self):
        p = PauliString.from_str("XZ")
        assert -p == PauliString.from_str("-XZ")
        assert not p.sign

    def test_copy_is_independent(self):
        p = PauliString.from_str("XZ")
        q = p.copy()
        q.set_letter(0, "Y")
        assert str(p) == "+XZ"
        assert str(q) == "+YZ"

    def test_flex_product(self):
        a = FlexPauliString.from_str("+iX")
        b = FlexPauliString.from_str("+iX")
        assert a * b == FlexPauliString.from_str("-I")


# ═══════════════════════════════════════════════════════════════════
# Dense representations
# ═══════════════════════════════════════════════════════════════════


class TestDense:

    @pytest.mark.parametrize("letter,matrix", [("X", X), ("Y", Y), ("Z", Z)])
    def test_single_qubit_matrices(self, letter, matrix):
        np.testing.assert_allclose(
            PauliString.from_str(letter).to_unitary_matrix(), matrix, atol=1e-12
        )

    def test_sign_in_matrix(self):
        np.testing.assert_allclose(
            PauliString.from_str("-Z").to_unitary_matrix(), -Z, atol=1e-12
        )

    def test_endianness(self):
        p = PauliString.from_str("XZ")
        np.testing.assert_allclose(p.to_unitary_matrix(little_endian=False), np.kron(X, Z))
        np.testing.assert_allclose(p.to_unitary_matrix(little_endian=True), np.kron(Z, X))

    def test_apply_to_state(self):
        state = np.array([1, 0, 0, 0], dtype=complex)
        out = PauliString.from_str("X_").apply_to(state)
        np.testing.assert_allclose(out, [0, 1, 0, 0])

    def test_apply_to_wrong_size(self):
        with pytest.raises(ValueError, match="leading dimension"):
            PauliString.from_str("XX").apply_to(np.ones(2))
