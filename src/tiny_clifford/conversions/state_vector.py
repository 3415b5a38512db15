"""
Conversion between stabilizer state vectors and circuits.

A stabilizer state has the form ``a · Σ_{v ∈ A} i^{l(v)} (-1)^{q(v)} |v⟩``
over an affine subspace A of basis states, with l linear and q quadratic.
The reduction below undoes each ingredient in turn:

  1. X gates move a support element to |0…0⟩ (A becomes linear).
  2. CX gates map a basis of A onto single pivot qubits.
  3. S / S_DAG / Z gates cancel the linear phases, CZ gates the quadratic ones.
  4. H gates on the pivots leave |0…0⟩.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

import numpy as np

from ..backends.statevector import VectorSimulator
from ..circuit import Circuit
from ..config import DEFAULT_CONFIG, ConversionConfig
from ..errors import InvalidArgument, UnsupportedOperation
from ..gates import GateRegistry, default_registry
from .synthesis import unitary_circuit_inverse

logger = logging.getLogger(__name__)

_PHASE_FIXES = {1: "S_DAG", 2: "Z", 3: "S"}  # ratio i^k → gate restoring ratio 1


def _support_basis(support: np.ndarray) -> List[Tuple[int, int]]:
    """
    Reduced GF(2) basis of the span of ``support`` as ``(vector, pivot_bit)``.

    Each pivot bit is set in its own basis vector and clear in all others.
    """
    basis: List[Tuple[int, int]] = []
    for value in support:
        v = int(value)
        for b, p in basis:
            if (v >> p) & 1:
                v ^= b
        if not v:
            continue
        pivot = (v & -v).bit_length() - 1
        basis = [((b ^ v) if (b >> pivot) & 1 else b, p) for b, p in basis]
        basis.append((v, pivot))
    return basis


def stabilizer_state_vector_to_circuit(
    state_vector,
    little_endian: bool = True,
    inverted: bool = False,
    *,
    registry: Optional[GateRegistry] = None,
    config: Optional[ConversionConfig] = None,
) -> Circuit:
    """
    Synthesize a circuit preparing a stabilizer state from |0…0⟩.

    Parameters
    ----------
    state_vector : array-like
        Amplitudes of length ``2**n``; normalized internally.
    little_endian : bool
        Index bit order of ``state_vector``.
    inverted : bool
        Return the circuit mapping the state to |0…0⟩ instead.
    registry : GateRegistry, optional
        Gate metadata; defaults to the built-in registry.
    config : ConversionConfig, optional
        Tolerances and size limit.

    Returns
    -------
    Circuit
        Circuit on n qubits made of X, CX, S, S_DAG, Z, CZ and H gates.

    Raises
    ------
    InvalidArgument
        If the vector has a bad shape, is zero, is too large, or is not a
        stabilizer state within tolerance.
    """
    config = config or DEFAULT_CONFIG
    registry = registry if registry is not None else default_registry()
    sim = VectorSimulator.from_vector(state_vector, little_endian, registry)
    n = sim.num_qubits
    if n > config.max_dense_qubits:
        raise InvalidArgument(
            f"Refusing to process a {n}-qubit state vector "
            f"(max_dense_qubits={config.max_dense_qubits})"
        )
    recorded = Circuit(n, registry)

    def apply(name: str, *qubits: int) -> None:
        sim.apply(name, *qubits)
        recorded.append(name, qubits)

    def amplitudes() -> np.ndarray:
        return sim.state_vector(little_endian=True)

    # Move the largest amplitude to |0…0⟩
    start = int(np.argmax(np.abs(amplitudes())))
    flips = [q for q in range(n) if (start >> q) & 1]
    if flips:
        apply("X", *flips)

    # Map the support onto pivot qubits
    v = amplitudes()
    magnitudes = np.abs(v)
    support = np.flatnonzero(magnitudes > 0.5 * magnitudes[0])
    basis = _support_basis(support)
    for vector, pivot in basis:
        for q in range(n):
            if q != pivot and (vector >> q) & 1:
                apply("CX", pivot, q)
    pivots = sorted(p for _, p in basis)

    # Cancel linear phases on each pivot
    v = amplitudes()
    for p in pivots:
        ratio = v[1 << p] / v[0]
        quarter_turns = int(np.round(np.angle(ratio) / (np.pi / 2))) % 4
        if quarter_turns:
            apply(_PHASE_FIXES[quarter_turns], p)

    # Cancel quadratic phases on each pair of pivots
    v = amplitudes()
    for j, a in enumerate(pivots):
        for b in pivots[j + 1:]:
            ratio = v[(1 << a) | (1 << b)] / v[0]
            if ratio.real < 0:
                apply("CZ", a, b)

    if pivots:
        apply("H", *pivots)

    v = amplitudes()
    if abs(abs(v[0]) - 1) > config.atol:
        raise InvalidArgument(
            f"The given state vector is not a stabilizer state "
            f"(overlap with reduced |0…0⟩ is {abs(v[0]):.6f})"
        )
    logger.debug("Reduced %d-qubit stabilizer state with %d instructions", n, len(recorded))
    if inverted:
        return recorded
    return unitary_circuit_inverse(recorded, registry=registry)


def circuit_to_output_state_vector(
    circuit: Circuit,
    little_endian: bool = True,
    *,
    registry: Optional[GateRegistry] = None,
    config: Optional[ConversionConfig] = None,
) -> np.ndarray:
    """
    State produced by running a unitary circuit on |0…0⟩.

    Annotations are skipped.

    Raises
    ------
    UnsupportedOperation
        If the circuit contains noise, measurement, reset or classically
        controlled instructions.
    InvalidArgument
        If the circuit is too large for a dense state vector.
    """
    config = config or DEFAULT_CONFIG
    registry = registry if registry is not None else default_registry()
    n = circuit.num_qubits
    if n > config.max_dense_qubits:
        raise InvalidArgument(
            f"Refusing to simulate {n} qubits densely "
            f"(max_dense_qubits={config.max_dense_qubits})"
        )
    sim = VectorSimulator(n, registry)
    for inst in circuit:
        gate = registry[inst.name]
        if gate.is_annotation:
            continue
        if not gate.is_unitary:
            raise UnsupportedOperation(
                f"Cannot compute a state vector for non-unitary instruction '{inst}'"
            )
        if any(not t.is_qubit_target for t in inst.targets):
            raise UnsupportedOperation(
                f"Cannot compute a state vector for classically controlled instruction '{inst}'"
            )
        sim.apply(gate.name, *(t.value for t in inst.targets))
    return sim.state_vector(little_endian)
