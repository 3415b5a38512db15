"""
tiny-clifford: conversions between equivalent forms of Clifford operations.

Features:
- Tableaus, circuits, dense unitaries and stabilizer state vectors
- Three circuit synthesis methods (elimination, graph state, MPP)
- Stabilizer list completion into a full tableau
- Pauli error model conversions (independent, disjoint, depolarizing)
- Detecting regions of detectors and observables

Quick Start:
    >>> from tiny_clifford import Circuit, circuit_to_tableau, tableau_to_unitary
    >>> t = circuit_to_tableau(Circuit(2).h(0).cx(0, 1))
    >>> print(t)
    >>> u = tableau_to_unitary(t, little_endian=True)

Synthesis:
    >>> from tiny_clifford import stabilizers_to_tableau, tableau_to_circuit
    >>> t = stabilizers_to_tableau(["+XX", "+ZZ"])
    >>> print(tableau_to_circuit(t, "graph_state"))
"""
__version__ = "1.0.0"

# Core components
from .errors import InvalidArgument, TinyCliffordError, UnsupportedOperation
from .config import DEFAULT_CONFIG, ConversionConfig
from .pauli import FlexPauliString, PauliString
from .tableau import Tableau
from .gates import GateFlags, GateInfo, GateRegistry, default_registry
from .circuit import Circuit, CircuitParseError, GateTarget, Instruction

# Conversions
from .conversions import (
    circuit_to_output_state_vector,
    circuit_to_tableau,
    stabilizer_state_vector_to_circuit,
    stabilizers_to_tableau,
    tableau_to_circuit,
    tableau_to_unitary,
    unitary_circuit_inverse,
    unitary_to_tableau,
)

# Noise and error correction
from .noise import (
    XYZProbabilities,
    depolarize1_probability_to_independent_per_channel_probability,
    depolarize2_probability_to_independent_per_channel_probability,
    independent_per_channel_probability_to_depolarize1_probability,
    independent_per_channel_probability_to_depolarize2_probability,
    independent_to_disjoint_xyz_errors,
    try_disjoint_to_independent_xyz_errors_approx,
)
from .error_correction import DemTarget, circuit_to_detecting_regions

__all__ = [
    # Core
    'TinyCliffordError',
    'InvalidArgument',
    'UnsupportedOperation',
    'ConversionConfig',
    'DEFAULT_CONFIG',
    'PauliString',
    'FlexPauliString',
    'Tableau',
    'GateFlags',
    'GateInfo',
    'GateRegistry',
    'default_registry',
    'Circuit',
    'CircuitParseError',
    'GateTarget',
    'Instruction',
    # Conversions
    'circuit_to_output_state_vector',
    'circuit_to_tableau',
    'stabilizer_state_vector_to_circuit',
    'stabilizers_to_tableau',
    'tableau_to_circuit',
    'tableau_to_unitary',
    'unitary_circuit_inverse',
    'unitary_to_tableau',
    # Noise
    'XYZProbabilities',
    'independent_to_disjoint_xyz_errors',
    'try_disjoint_to_independent_xyz_errors_approx',
    'depolarize1_probability_to_independent_per_channel_probability',
    'depolarize2_probability_to_independent_per_channel_probability',
    'independent_per_channel_probability_to_depolarize1_probability',
    'independent_per_channel_probability_to_depolarize2_probability',
    # Error correction
    'DemTarget',
    'circuit_to_detecting_regions',
]
