"""
Tests for the Circuit container, its targets and its text format.
"""

import pytest

from tiny_clifford import Circuit, CircuitParseError, GateTarget
from tiny_clifford.circuit import (
    target_combined_paulis,
    target_groups,
    target_inv,
    target_rec,
    target_x,
    target_z,
)


class TestTargets:

    def test_rec_target(self):
        t = target_rec(-3)
        assert t.is_measurement_record_target
        assert t.qubit_value is None
        assert str(t) == "rec[-3]"

    def test_rec_lookback_must_be_negative(self):
        with pytest.raises(ValueError, match="negative"):
            target_rec(0)

    def test_inverted_qubit(self):
        assert str(target_inv(4)) == "!4"

    def test_pauli_target(self):
        t = target_x(2, invert=True)
        assert t.is_pauli_target
        assert t.qubit_value == 2
        assert str(t) == "!X2"

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="Unknown target kind"):
            GateTarget(0, "W")

    def test_negative_qubit(self):
        with pytest.raises(ValueError):
            GateTarget(-1)

    def test_combined_paulis(self):
        targets = target_combined_paulis("-X_Z")
        assert [str(t) for t in targets] == ["!X0", "*", "Z2"]

    def test_combined_identity_rejected(self):
        with pytest.raises(ValueError, match="identity"):
            target_combined_paulis("II")


class TestBuilder:

    def test_fluent_api(self):
        c = Circuit().h(0).cx(0, 1).m(0, 1)
        assert len(c) == 3
        assert c.num_qubits == 2
        assert c[1].name == "CX"
        assert c[1].qubits == (0, 1)

    def test_declared_qubits(self):
        assert Circuit(5).h(0).num_qubits == 5

    def test_alias_is_canonicalized(self):
        c = Circuit().append("cnot", [0, 1])
        assert c[0].name == "CX"

    def test_counts(self):
        c = Circuit().m(0).tick().mpp("XX", "ZZ").tick().detector(-1, -2).observable_include(2, -3)
        assert c.num_measurements == 3
        assert c.num_ticks == 2
        assert c.num_detectors == 1
        assert c.num_observables == 3

    def test_pairs_required(self):
        with pytest.raises(ValueError, match="pairs"):
            Circuit().cx(0, 1, 2)

    def test_duplicate_pair(self):
        with pytest.raises(ValueError, match="Duplicate"):
            Circuit().cz(1, 1)

    def test_rec_only_on_feedback_gates(self):
        with pytest.raises(ValueError, match="rec"):
            Circuit().append("H", [target_rec(-1)])

    def test_rec_must_control(self):
        with pytest.raises(ValueError, match="Classical control"):
            Circuit().append("CX", [0, target_rec(-1)])

    def test_arg_count(self):
        with pytest.raises(ValueError, match="argument"):
            Circuit().append("X_ERROR", [0])

    def test_inverted_target_only_on_measurement(self):
        Circuit().append("M", [target_inv(0)])
        with pytest.raises(ValueError, match="inverted"):
            Circuit().append("H", [target_inv(0)])

    def test_mpp_rejects_qubit_targets(self):
        with pytest.raises(ValueError, match="Pauli targets"):
            Circuit().append("MPP", [0])

    def test_unknown_gate(self):
        with pytest.raises(KeyError):
            Circuit().append("T", [0])

    def test_iadd(self):
        c = Circuit().h(0)
        c += Circuit().cx(0, 1)
        assert [inst.name for inst in c] == ["H", "CX"]

    def test_reversed(self):
        c = Circuit().h(0).s(0)
        assert [inst.name for inst in reversed(c)] == ["S", "H"]

    def test_copy(self):
        c = Circuit().h(0)
        d = c.copy()
        d.s(0)
        assert len(c) == 1
        assert len(d) == 2


class TestTargetGroups:

    def test_pairs(self):
        c = Circuit().cx(0, 1, 2, 3)
        groups = target_groups(c[0], c.registry["CX"])
        assert [[t.value for t in g] for g in groups] == [[0, 1], [2, 3]]

    def test_products(self):
        c = Circuit().mpp("XYZ", "Z")
        groups = target_groups(c[0], c.registry["MPP"])
        assert [len(g) for g in groups] == [3, 1]


class TestText:

    def test_print(self):
        c = Circuit().h(0).depolarize1(0.1, 0).m(0).detector(-1).observable_include(0, -1)
        assert str(c) == "H 0\nDEPOLARIZE1(0.1) 0\nM 0\nDETECTOR rec[-1]\nOBSERVABLE_INCLUDE(0) rec[-1]"

    def test_mpp_print(self):
        c = Circuit().append("MPP", [target_x(0, invert=True), GateTarget(0, "combiner"), target_z(1)])
        assert str(c) == "MPP !X0*Z1"

    def test_parse_round_trip(self):
        text = "\n".join([
            "R 0 1",
            "TICK",
            "H 0",
            "CX 0 1",
            "DEPOLARIZE2(0.01) 0 1",
            "MPP !X0*X1 Z0*Z1",
            "M !0",
            "CZ rec[-1] 1",
            "DETECTOR(1, 2) rec[-2]",
        ])
        c = Circuit.from_text(text)
        assert str(c) == text
        assert Circuit.from_text(str(c)) == c

    def test_parse_comments_and_case(self):
        c = Circuit.from_text("# prep\nh 0  # hadamard\n\ncnot 0 1\n")
        assert str(c) == "H 0\nCX 0 1"

    def test_parse_unknown_gate(self):
        with pytest.raises(CircuitParseError, match="Line 2"):
            Circuit.from_text("H 0\nFOO 1")

    def test_parse_bad_target(self):
        with pytest.raises(CircuitParseError, match="Invalid target"):
            Circuit.from_text("H q0")

    def test_parse_bad_args(self):
        with pytest.raises(CircuitParseError, match="Invalid arguments"):
            Circuit.from_text("X_ERROR(abc) 0")

    def test_equality_ignores_declared_size(self):
        assert Circuit(3).h(0) == Circuit().h(0)
        assert Circuit().h(0) != Circuit().h(1)
