"""
Gate definitions and the gate metadata registry.

Unitary gates are represented as numpy matrices in big-endian order over
their targets (the first target is the most significant index bit). Each
unitary gate's tableau is derived from its matrix when the registry is
built, so the two can never disagree.

Gate categories:
    - Single-qubit Clifford: I, X, Y, Z, H, H_XY, H_YZ, S, S_DAG, SQRT_X,
      SQRT_X_DAG, SQRT_Y, SQRT_Y_DAG, C_XYZ, C_ZYX
    - Two-qubit Clifford: CX, CY, CZ, SWAP, ISWAP, ISWAP_DAG, SQRT_XX, SQRT_YY,
      SQRT_ZZ (and daggers), XCX, XCY, XCZ, YCX, YCY, YCZ
    - Noise channels: X_ERROR, Y_ERROR, Z_ERROR, DEPOLARIZE1, DEPOLARIZE2,
      PAULI_CHANNEL_1, PAULI_CHANNEL_2
    - Collapsing: M, MX, MY, MPP, R, RX, RY, MR, MRX, MRY
    - Annotations: TICK, DETECTOR, OBSERVABLE_INCLUDE
"""

from __future__ import annotations

import enum
import functools
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Iterable, Iterator, Optional, Tuple

import numpy as np
from numpy import ndarray

from .tableau import Tableau

# Type alias
Matrix = ndarray

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
_SQRT2_INV = 1.0 / np.sqrt(2.0)

# ---------------------------------------------------------------------------
# Single-qubit Clifford gates
# ---------------------------------------------------------------------------

I = np.eye(2, dtype=np.complex128)
"""Identity gate."""

X = np.array([[0, 1], [1, 0]], dtype=np.complex128)
"""Pauli-X (NOT) gate."""

Y = np.array([[0, -1j], [1j, 0]], dtype=np.complex128)
"""Pauli-Y gate."""

Z = np.array([[1, 0], [0, -1]], dtype=np.complex128)
"""Pauli-Z gate."""

H = np.array([[1, 1], [1, -1]], dtype=np.complex128) * _SQRT2_INV
"""Hadamard gate: swaps X and Z."""

H_XY = np.array([[0, 1 - 1j], [1 + 1j, 0]], dtype=np.complex128) * _SQRT2_INV
"""Hadamard variant swapping X and Y (Z → -Z)."""

H_YZ = np.array([[1, -1j], [1j, -1]], dtype=np.complex128) * _SQRT2_INV
"""Hadamard variant swapping Y and Z (X → -X)."""

S = np.array([[1, 0], [0, 1j]], dtype=np.complex128)
"""S (phase) gate: sqrt(Z)."""

S_DAG = np.array([[1, 0], [0, -1j]], dtype=np.complex128)
"""S-dagger gate."""

SQRT_X = np.array([[1 + 1j, 1 - 1j], [1 - 1j, 1 + 1j]], dtype=np.complex128) * 0.5
"""sqrt(X) gate."""

SQRT_X_DAG = np.array([[1 - 1j, 1 + 1j], [1 + 1j, 1 - 1j]], dtype=np.complex128) * 0.5
"""Inverse of sqrt(X)."""

SQRT_Y = np.array([[1 + 1j, -1 - 1j], [1 + 1j, 1 + 1j]], dtype=np.complex128) * 0.5
"""sqrt(Y) gate."""

SQRT_Y_DAG = np.array([[1 - 1j, 1 - 1j], [-1 + 1j, 1 - 1j]], dtype=np.complex128) * 0.5
"""Inverse of sqrt(Y)."""

C_XYZ = np.array([[1 - 1j, -1 - 1j], [1 - 1j, 1 + 1j]], dtype=np.complex128) * 0.5
"""Axis cycle X → Y → Z → X."""

C_ZYX = np.array([[1 + 1j, 1 + 1j], [-1 + 1j, 1 - 1j]], dtype=np.complex128) * 0.5
"""Axis cycle Z → Y → X → Z (inverse of C_XYZ)."""

_PAULIS = {"X": X, "Y": Y, "Z": Z}

# ---------------------------------------------------------------------------
# Two-qubit Clifford gates (4x4 matrices)
# ---------------------------------------------------------------------------


def _controlled(control_basis: str, target_pauli: str) -> Matrix:
    """
    Pauli-controlled Pauli gate: apply ``target_pauli`` to the second qubit
    when the first qubit is in the -1 eigenstate of ``control_basis``.
    """
    p = _PAULIS[control_basis]
    q = _PAULIS[target_pauli]
    return np.kron((I + p) / 2, I) + np.kron((I - p) / 2, q)


def _sqrt_pauli_product(pauli: str, dagger: bool = False) -> Matrix:
    """``e^{±iπ/4} (I ∓ i P⊗P) / √2``, the square root of ``P⊗P``."""
    pp = np.kron(_PAULIS[pauli], _PAULIS[pauli])
    if dagger:
        return (1 - 1j) / 2 * (np.eye(4) + 1j * pp)
    return (1 + 1j) / 2 * (np.eye(4) - 1j * pp)


CX = _controlled("Z", "X")
"""Controlled-NOT (CX) gate."""

CY = _controlled("Z", "Y")
"""Controlled-Y gate."""

CZ = np.diag([1, 1, 1, -1]).astype(np.complex128)
"""Controlled-Z gate."""

SWAP = np.array(
    [[1, 0, 0, 0], [0, 0, 1, 0], [0, 1, 0, 0], [0, 0, 0, 1]],
    dtype=np.complex128,
)
"""SWAP gate."""

ISWAP = np.array(
    [[1, 0, 0, 0], [0, 0, 1j, 0], [0, 1j, 0, 0], [0, 0, 0, 1]],
    dtype=np.complex128,
)
"""iSWAP gate."""

ISWAP_DAG = ISWAP.conj().T
"""Inverse of iSWAP."""

SQRT_XX = _sqrt_pauli_product("X")
SQRT_XX_DAG = _sqrt_pauli_product("X", dagger=True)
SQRT_YY = _sqrt_pauli_product("Y")
SQRT_YY_DAG = _sqrt_pauli_product("Y", dagger=True)
SQRT_ZZ = _sqrt_pauli_product("Z")
SQRT_ZZ_DAG = _sqrt_pauli_product("Z", dagger=True)

XCX = _controlled("X", "X")
XCY = _controlled("X", "Y")
XCZ = _controlled("X", "Z")
YCX = _controlled("Y", "X")
YCY = _controlled("Y", "Y")
YCZ = _controlled("Y", "Z")


# ---------------------------------------------------------------------------
# Gate metadata
# ---------------------------------------------------------------------------


class GateFlags(enum.Flag):
    """Properties of a gate that decide how conversions treat it."""

    NONE = 0
    UNITARY = enum.auto()
    TARGETS_PAIRS = enum.auto()
    NOISY = enum.auto()
    PRODUCES_RESULTS = enum.auto()
    IS_RESET = enum.auto()
    ANNOTATION = enum.auto()
    TARGETS_PAULI_STRING = enum.auto()
    CAN_TARGET_BITS = enum.auto()


@dataclass(frozen=True)
class GateInfo:
    """
    Static description of one gate.

    Attributes
    ----------
    name : str
        Canonical upper-case name.
    flags : GateFlags
        Behaviour flags.
    inverse_name : str, optional
        Canonical name of the inverse gate (unitary gates only).
    arg_counts : tuple of int, optional
        Accepted numbers of parens arguments; ``None`` means any number.
    aliases : tuple of str
        Alternative names resolving to this gate.
    basis : str, optional
        Collapse basis (``"X"``, ``"Y"`` or ``"Z"``) of single-qubit
        measurements and resets.
    matrix : ndarray, optional
        Unitary matrix (big-endian over targets).
    tableau : Tableau, optional
        Conjugation tableau derived from ``matrix``.
    """

    name: str
    flags: GateFlags
    inverse_name: Optional[str] = None
    arg_counts: Optional[Tuple[int, ...]] = (0,)
    aliases: Tuple[str, ...] = ()
    basis: Optional[str] = None
    matrix: Optional[Matrix] = field(default=None, compare=False, repr=False)
    tableau: Optional[Tableau] = field(default=None, compare=False, repr=False)

    @property
    def is_unitary(self) -> bool:
        return bool(self.flags & GateFlags.UNITARY)

    @property
    def targets_pairs(self) -> bool:
        return bool(self.flags & GateFlags.TARGETS_PAIRS)

    @property
    def is_noisy(self) -> bool:
        return bool(self.flags & GateFlags.NOISY)

    @property
    def produces_results(self) -> bool:
        return bool(self.flags & GateFlags.PRODUCES_RESULTS)

    @property
    def is_reset(self) -> bool:
        return bool(self.flags & GateFlags.IS_RESET)

    @property
    def is_annotation(self) -> bool:
        return bool(self.flags & GateFlags.ANNOTATION)

    @property
    def targets_pauli_string(self) -> bool:
        return bool(self.flags & GateFlags.TARGETS_PAULI_STRING)

    @property
    def can_target_bits(self) -> bool:
        return bool(self.flags & GateFlags.CAN_TARGET_BITS)

    @property
    def num_qubits(self) -> int:
        """Qubits per target group (2 for pair gates, else 1)."""
        return 2 if self.targets_pairs else 1

    def accepts_arg_count(self, count: int) -> bool:
        return self.arg_counts is None or count in self.arg_counts


_U = GateFlags.UNITARY
_U2 = GateFlags.UNITARY | GateFlags.TARGETS_PAIRS
_FEEDBACK = _U2 | GateFlags.CAN_TARGET_BITS
_NOISE = GateFlags.NOISY
_MEASURE = GateFlags.PRODUCES_RESULTS
_RESET = GateFlags.IS_RESET
_MEASURE_RESET = _MEASURE | _RESET

_GATES: Tuple[GateInfo, ...] = (
    # Single-qubit Clifford
    GateInfo("I", _U, "I", matrix=I),
    GateInfo("X", _U, "X", matrix=X),
    GateInfo("Y", _U, "Y", matrix=Y),
    GateInfo("Z", _U, "Z", matrix=Z),
    GateInfo("H", _U, "H", aliases=("H_XZ",), matrix=H),
    GateInfo("H_XY", _U, "H_XY", matrix=H_XY),
    GateInfo("H_YZ", _U, "H_YZ", matrix=H_YZ),
    GateInfo("S", _U, "S_DAG", aliases=("SQRT_Z",), matrix=S),
    GateInfo("S_DAG", _U, "S", aliases=("SQRT_Z_DAG",), matrix=S_DAG),
    GateInfo("SQRT_X", _U, "SQRT_X_DAG", matrix=SQRT_X),
    GateInfo("SQRT_X_DAG", _U, "SQRT_X", matrix=SQRT_X_DAG),
    GateInfo("SQRT_Y", _U, "SQRT_Y_DAG", matrix=SQRT_Y),
    GateInfo("SQRT_Y_DAG", _U, "SQRT_Y", matrix=SQRT_Y_DAG),
    GateInfo("C_XYZ", _U, "C_ZYX", matrix=C_XYZ),
    GateInfo("C_ZYX", _U, "C_XYZ", matrix=C_ZYX),
    # Two-qubit Clifford
    GateInfo("CX", _FEEDBACK, "CX", aliases=("CNOT", "ZCX"), matrix=CX),
    GateInfo("CY", _FEEDBACK, "CY", aliases=("ZCY",), matrix=CY),
    GateInfo("CZ", _FEEDBACK, "CZ", aliases=("ZCZ",), matrix=CZ),
    GateInfo("SWAP", _U2, "SWAP", matrix=SWAP),
    GateInfo("ISWAP", _U2, "ISWAP_DAG", matrix=ISWAP),
    GateInfo("ISWAP_DAG", _U2, "ISWAP", matrix=ISWAP_DAG),
    GateInfo("SQRT_XX", _U2, "SQRT_XX_DAG", matrix=SQRT_XX),
    GateInfo("SQRT_XX_DAG", _U2, "SQRT_XX", matrix=SQRT_XX_DAG),
    GateInfo("SQRT_YY", _U2, "SQRT_YY_DAG", matrix=SQRT_YY),
    GateInfo("SQRT_YY_DAG", _U2, "SQRT_YY", matrix=SQRT_YY_DAG),
    GateInfo("SQRT_ZZ", _U2, "SQRT_ZZ_DAG", matrix=SQRT_ZZ),
    GateInfo("SQRT_ZZ_DAG", _U2, "SQRT_ZZ", matrix=SQRT_ZZ_DAG),
    GateInfo("XCX", _U2, "XCX", matrix=XCX),
    GateInfo("XCY", _U2, "XCY", matrix=XCY),
    GateInfo("XCZ", _U2, "XCZ", matrix=XCZ),
    GateInfo("YCX", _U2, "YCX", matrix=YCX),
    GateInfo("YCY", _U2, "YCY", matrix=YCY),
    GateInfo("YCZ", _U2, "YCZ", matrix=YCZ),
    # Noise channels
    GateInfo("X_ERROR", _NOISE, arg_counts=(1,)),
    GateInfo("Y_ERROR", _NOISE, arg_counts=(1,)),
    GateInfo("Z_ERROR", _NOISE, arg_counts=(1,)),
    GateInfo("DEPOLARIZE1", _NOISE, arg_counts=(1,)),
    GateInfo("DEPOLARIZE2", _NOISE | GateFlags.TARGETS_PAIRS, arg_counts=(1,)),
    GateInfo("PAULI_CHANNEL_1", _NOISE, arg_counts=(3,)),
    GateInfo("PAULI_CHANNEL_2", _NOISE | GateFlags.TARGETS_PAIRS, arg_counts=(15,)),
    # Measurements and resets (the optional arg is a result flip probability)
    GateInfo("M", _MEASURE, arg_counts=(0, 1), aliases=("MZ",), basis="Z"),
    GateInfo("MX", _MEASURE, arg_counts=(0, 1), basis="X"),
    GateInfo("MY", _MEASURE, arg_counts=(0, 1), basis="Y"),
    GateInfo("MPP", _MEASURE | GateFlags.TARGETS_PAULI_STRING, arg_counts=(0, 1)),
    GateInfo("R", _RESET, aliases=("RZ",), basis="Z"),
    GateInfo("RX", _RESET, basis="X"),
    GateInfo("RY", _RESET, basis="Y"),
    GateInfo("MR", _MEASURE_RESET, arg_counts=(0, 1), aliases=("MRZ",), basis="Z"),
    GateInfo("MRX", _MEASURE_RESET, arg_counts=(0, 1), basis="X"),
    GateInfo("MRY", _MEASURE_RESET, arg_counts=(0, 1), basis="Y"),
    # Annotations
    GateInfo("TICK", GateFlags.ANNOTATION),
    GateInfo("DETECTOR", GateFlags.ANNOTATION, arg_counts=None),
    GateInfo("OBSERVABLE_INCLUDE", GateFlags.ANNOTATION, arg_counts=(1,)),
)


class GateRegistry:
    """
    Immutable lookup from gate name or alias to :class:`GateInfo`.

    Names are case-insensitive.

    Parameters
    ----------
    gates : iterable of GateInfo
        Gate descriptions. Names and aliases must be unique.
    """

    def __init__(self, gates: Iterable[GateInfo]):
        by_name = {}
        canonical = []
        for gate in gates:
            for key in (gate.name,) + tuple(gate.aliases):
                if key in by_name:
                    raise ValueError(f"Duplicate gate name: '{key}'")
                by_name[key] = gate
            canonical.append(gate)
        self._by_name = MappingProxyType(by_name)
        self._canonical = tuple(canonical)

    def __getitem__(self, name: str) -> GateInfo:
        key = name.upper()
        if key not in self._by_name:
            raise KeyError(f"Unknown gate: '{name}'. Available: {sorted(self._by_name.keys())}")
        return self._by_name[key]

    def __contains__(self, name) -> bool:
        return isinstance(name, str) and name.upper() in self._by_name

    def __iter__(self) -> Iterator[GateInfo]:
        return iter(self._canonical)

    def __len__(self) -> int:
        return len(self._canonical)

    def inverse(self, name: str) -> GateInfo:
        """
        Look up the inverse of a unitary gate.

        Raises
        ------
        ValueError
            If the gate is not unitary.
        """
        gate = self[name]
        if gate.inverse_name is None:
            raise ValueError(f"Gate '{gate.name}' is not unitary and has no inverse")
        return self[gate.inverse_name]

    def tableau(self, name: str) -> Tableau:
        """Conjugation tableau of a unitary gate."""
        gate = self[name]
        if gate.tableau is None:
            raise ValueError(f"Gate '{gate.name}' is not unitary and has no tableau")
        return gate.tableau


@functools.lru_cache(maxsize=None)
def default_registry() -> GateRegistry:
    """
    The registry of all built-in gates, built once on first use.

    Gate tableaus are computed here from the matrices. The matrices and
    tableaus are shared by every caller, so their arrays are read-only;
    copy them before modifying.
    """
    from .conversions.unitary import unitary_to_tableau

    gates = []
    for gate in _GATES:
        if gate.matrix is not None:
            tableau = unitary_to_tableau(gate.matrix, little_endian=False)
            for arr in (gate.matrix, tableau.x, tableau.z, tableau.r):
                arr.flags.writeable = False
            gate = replace(gate, tableau=tableau)
        gates.append(gate)
    return GateRegistry(gates)


def get_matrix(name: str) -> Matrix:
    """
    Look up a unitary gate matrix by name.

    Raises
    ------
    KeyError
        If gate name is not found.
    ValueError
        If the gate has no matrix (noise, collapse or annotation).
    """
    gate = default_registry()[name]
    if gate.matrix is None:
        raise ValueError(f"Gate '{gate.name}' is not unitary and has no matrix")
    return gate.matrix
