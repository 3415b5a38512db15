"""
Numerical tolerances and size limits used by the conversion routines.

The values are plain data; every public conversion accepts an optional
``config`` keyword and falls back to :data:`DEFAULT_CONFIG`.

Example
-------
>>> import numpy as np
>>> from tiny_clifford import unitary_to_tableau
>>> from tiny_clifford.config import ConversionConfig
>>> strict = ConversionConfig(atol=1e-9)
>>> matrix = np.array([[0, 1], [1, 0]])
>>> print(unitary_to_tableau(matrix, config=strict))
Tableau(1 qubits)
  X0 -> +X
  Z0 -> -Z
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ConversionConfig:
    """
    Container for the conversion knobs. Pure data, no logic.

    Attributes
    ----------
    atol : float
        Absolute tolerance when comparing amplitudes, matrix entries and
        phases. Loose enough for single precision input.
    max_dense_qubits : int
        Largest qubit count for which a dense state vector or unitary is
        built. Memory grows as 16 * 4**n bytes for unitaries.
    approx_max_steps : int
        Default iteration cap of the disjoint-to-independent solver.
    approx_tolerance : float
        Residual below which the solver is considered converged.
    """

    atol: float = 1e-4
    max_dense_qubits: int = 16
    approx_max_steps: int = 50
    approx_tolerance: float = 1e-12

    def __post_init__(self) -> None:
        if self.atol <= 0:
            raise ValueError(f"atol must be positive, got {self.atol}")
        if self.max_dense_qubits < 0:
            raise ValueError(f"max_dense_qubits must be >= 0, got {self.max_dense_qubits}")
        if self.approx_max_steps < 1:
            raise ValueError(f"approx_max_steps must be >= 1, got {self.approx_max_steps}")


DEFAULT_CONFIG = ConversionConfig()
