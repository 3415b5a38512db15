"""
Conversions between tableaus, circuits, unitaries, state vectors and
stabilizer lists.
"""

from .unitary import tableau_to_unitary, unitary_to_tableau
from .synthesis import (
    circuit_to_tableau,
    tableau_to_circuit,
    tableau_to_circuit_elimination_method,
    tableau_to_circuit_graph_method,
    tableau_to_circuit_mpp_method,
    unitary_circuit_inverse,
)
from .state_vector import circuit_to_output_state_vector, stabilizer_state_vector_to_circuit
from .stabilizers import stabilizers_to_tableau

__all__ = [
    "tableau_to_unitary",
    "unitary_to_tableau",
    "circuit_to_tableau",
    "tableau_to_circuit",
    "tableau_to_circuit_elimination_method",
    "tableau_to_circuit_graph_method",
    "tableau_to_circuit_mpp_method",
    "unitary_circuit_inverse",
    "circuit_to_output_state_vector",
    "stabilizer_state_vector_to_circuit",
    "stabilizers_to_tableau",
]
