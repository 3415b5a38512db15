"""
Conversion between tableaus and dense unitary matrices.

A Clifford unitary is fixed up to global phase by its tableau, so:

  - ``tableau_to_unitary`` picks the phase making the first significant
    entry of column 0 real and positive;
  - ``unitary_to_tableau`` reads each generator image off ``U P U†`` and
    then checks that the rebuilt unitary matches the input up to phase.

Endianness: with ``little_endian=True`` qubit q is bit q of the basis index;
otherwise qubit 0 is the most significant bit.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import numpy as np

from ..config import DEFAULT_CONFIG, ConversionConfig
from ..errors import InvalidArgument
from ..pauli import PauliString
from ..tableau import Tableau

logger = logging.getLogger(__name__)


def _bit_position(qubit: int, num_qubits: int, little_endian: bool) -> int:
    return qubit if little_endian else num_qubits - 1 - qubit


def tableau_to_unitary(
    tableau: Tableau,
    little_endian: bool = True,
    *,
    config: Optional[ConversionConfig] = None,
) -> np.ndarray:
    """
    Dense unitary matrix of a tableau's Clifford operation.

    Column 0 is ``U|0…0⟩``, found by projecting |0…0⟩ onto the +1
    eigenspace of every Z image in turn (flipping with the matching X image
    when the +1 part is the smaller one). Column ``b`` is then the product of
    the X images selected by the bits of ``b`` applied to column 0.

    Parameters
    ----------
    tableau : Tableau
        Clifford operation on n qubits.
    little_endian : bool
        Index bit order of the result.
    config : ConversionConfig, optional
        Tolerances and size limit.

    Returns
    -------
    numpy.ndarray
        Complex ``2^n x 2^n`` unitary.

    Raises
    ------
    InvalidArgument
        If the tableau is too large for a dense matrix.
    """
    config = config or DEFAULT_CONFIG
    n = tableau.num_qubits
    if n > config.max_dense_qubits:
        raise InvalidArgument(
            f"Refusing to build a dense unitary for {n} qubits "
            f"(max_dense_qubits={config.max_dense_qubits})"
        )
    dim = 1 << n
    x_images = [tableau.x_output(k) for k in range(n)]

    psi = np.zeros(dim, dtype=np.complex128)
    psi[0] = 1.0
    for k in range(n):
        stabilized = tableau.z_output(k).apply_to(psi, little_endian)
        plus = (psi + stabilized) / 2
        minus = (psi - stabilized) / 2
        if np.linalg.norm(plus) >= np.linalg.norm(minus):
            psi = plus
        else:
            psi = x_images[k].apply_to(minus, little_endian)
    psi /= np.linalg.norm(psi)

    # Global phase: first significant amplitude real and positive
    magnitudes = np.abs(psi)
    first = int(np.flatnonzero(magnitudes > 0.5 * magnitudes.max())[0])
    psi *= magnitudes[first] / psi[first]

    result = np.empty((dim, dim), dtype=np.complex128)
    result[:, 0] = psi
    for column in range(1, dim):
        low = column & -column
        position = low.bit_length() - 1
        qubit = position if little_endian else n - 1 - position
        result[:, column] = x_images[qubit].apply_to(result[:, column ^ low], little_endian)
    return result


def _decode_pauli(
    conjugated: np.ndarray, n: int, little_endian: bool, atol: float
) -> Optional[PauliString]:
    """Recognize a dense matrix as a signed Pauli string, or return None."""
    row = conjugated[0]
    flip = int(np.argmax(np.abs(row)))
    pivot = row[flip]
    if abs(pivot) < 0.5:
        return None

    pauli = PauliString.identity(n)
    for q in range(n):
        bit = 1 << _bit_position(q, n, little_endian)
        pauli.xs[q] = 1 if flip & bit else 0
        ratio = conjugated[bit, bit ^ flip] / pivot
        if abs(ratio - 1) < atol:
            pauli.zs[q] = 0
        elif abs(ratio + 1) < atol:
            pauli.zs[q] = 1
        else:
            return None

    reference = pauli.to_unitary_matrix(little_endian)
    phase = pivot / reference[0, flip]
    if abs(phase - 1) < atol:
        pauli.sign = False
    elif abs(phase + 1) < atol:
        pauli.sign = True
        reference = -reference
    else:
        return None
    if not np.allclose(conjugated, reference, atol=atol):
        return None
    return pauli


def unitary_to_tableau(
    matrix,
    little_endian: bool = True,
    *,
    config: Optional[ConversionConfig] = None,
) -> Tableau:
    """
    Tableau of a Clifford unitary matrix.

    Parameters
    ----------
    matrix : array-like
        Square complex matrix whose size is a power of two.
    little_endian : bool
        Index bit order of ``matrix``.
    config : ConversionConfig, optional
        ``atol`` bounds every entry-wise comparison.

    Returns
    -------
    Tableau
        The operation's tableau (global phase is discarded).

    Raises
    ------
    InvalidArgument
        If the matrix is not square with power-of-two size, or is not a
        Clifford unitary within tolerance.
    """
    config = config or DEFAULT_CONFIG
    u = np.asarray(matrix, dtype=np.complex128)
    if u.ndim != 2 or u.shape[0] != u.shape[1]:
        raise InvalidArgument(f"Expected a square matrix, got shape {u.shape}")
    size = u.shape[0]
    if size == 0 or size & (size - 1):
        raise InvalidArgument(f"Matrix size must be a power of two, got {size}")
    n = size.bit_length() - 1
    if n > config.max_dense_qubits:
        raise InvalidArgument(
            f"Refusing to convert a dense unitary on {n} qubits "
            f"(max_dense_qubits={config.max_dense_qubits})"
        )

    u_dag = u.conj().T
    images: List[PauliString] = []
    for letter in ("X", "Z"):
        for k in range(n):
            generator = PauliString.identity(n)
            generator.set_letter(k, letter)
            conjugated = u @ generator.apply_to(u_dag, little_endian)
            image = _decode_pauli(conjugated, n, little_endian, config.atol)
            if image is None:
                raise InvalidArgument(
                    f"Matrix is not a Clifford unitary: U {letter}{k} U† is not a Pauli product"
                )
            images.append(image)

    tableau = Tableau.from_conjugated_generators(images[:n], images[n:])
    if not tableau.is_valid():
        raise InvalidArgument("Matrix is not unitary: generator images do not commute correctly")

    rebuilt = tableau_to_unitary(tableau, little_endian, config=config)
    anchor = np.unravel_index(int(np.argmax(np.abs(rebuilt))), rebuilt.shape)
    phase = u[anchor] / rebuilt[anchor]
    if abs(abs(phase) - 1) > config.atol or not np.allclose(u, phase * rebuilt, atol=config.atol):
        raise InvalidArgument("Matrix is not a Clifford unitary up to global phase")
    logger.debug("Recovered %d-qubit tableau from dense unitary", n)
    return tableau
