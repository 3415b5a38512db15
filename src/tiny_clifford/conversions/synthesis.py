"""
Conversion between circuits and tableaus.

``circuit_to_tableau`` composes gate tableaus instruction by instruction.
``tableau_to_circuit`` synthesizes a circuit for a tableau by one of three
methods:

  - ``"elimination"``: H, S and CX gates from Gaussian elimination of the
    inverse tableau. Reproduces the whole tableau.
  - ``"graph_state"``: RX resets, a layer of CZ gates on a graph, then
    single-qubit Z, S, H layers, with TICK between them. Reproduces only
    the state ``T|0…0⟩``.
  - ``"mpp"``: measures each stabilizer with MPP, then applies destabilizer
    feedback so every outcome lands on the +1 eigenstate. Reproduces only
    the state ``T|0…0⟩``.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from ..circuit import Circuit, target_groups, target_pauli, target_combiner, target_rec
from ..errors import InvalidArgument, UnsupportedOperation
from ..gates import GateRegistry, default_registry
from ..pauli import PauliString
from ..tableau import Tableau

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Circuit → tableau
# ---------------------------------------------------------------------------

def circuit_to_tableau(
    circuit: Circuit,
    ignore_noise: bool = False,
    ignore_measurement: bool = False,
    ignore_reset: bool = False,
    *,
    registry: Optional[GateRegistry] = None,
) -> Tableau:
    """
    Tableau of the Clifford operation a circuit applies.

    Parameters
    ----------
    circuit : Circuit
        Circuit to convert.
    ignore_noise : bool
        Skip noise channels instead of raising.
    ignore_measurement : bool
        Skip measurements and classically controlled gates instead of
        raising.
    ignore_reset : bool
        Skip resets instead of raising. Measure-reset instructions need both
        ``ignore_measurement`` and ``ignore_reset``.
    registry : GateRegistry, optional
        Gate metadata; defaults to the built-in registry.

    Raises
    ------
    UnsupportedOperation
        If the circuit contains an instruction that is not ignored and has
        no tableau.
    """
    registry = registry if registry is not None else default_registry()
    result = Tableau(circuit.num_qubits)
    for inst in circuit:
        gate = registry[inst.name]
        if gate.is_annotation:
            continue
        if gate.produces_results and not ignore_measurement:
            raise UnsupportedOperation(
                f"The circuit has no well-defined tableau because it contains "
                f"measurement operations: '{inst}'. Pass ignore_measurement=True to skip them."
            )
        if gate.is_reset and not ignore_reset:
            raise UnsupportedOperation(
                f"The circuit has no well-defined tableau because it contains "
                f"reset operations: '{inst}'. Pass ignore_reset=True to skip them."
            )
        if gate.is_noisy and not ignore_noise:
            raise UnsupportedOperation(
                f"The circuit has no well-defined tableau because it contains "
                f"noisy operations: '{inst}'. Pass ignore_noise=True to skip them."
            )
        if gate.tableau is None:
            continue
        for group in target_groups(inst, gate):
            if any(t.is_measurement_record_target for t in group):
                if not ignore_measurement:
                    raise UnsupportedOperation(
                        f"The circuit has no well-defined tableau because it contains "
                        f"classically controlled operations: '{inst}'. "
                        f"Pass ignore_measurement=True to skip them."
                    )
                continue
            result.inplace_scatter_append(gate.tableau, [t.value for t in group])
    return result


# ---------------------------------------------------------------------------
# Tableau → circuit
# ---------------------------------------------------------------------------

class _Recorder:
    """Applies gates to a working tableau while recording them in a circuit."""

    def __init__(self, remaining: Tableau, registry: GateRegistry):
        self.remaining = remaining
        self.registry = registry
        self.circuit = Circuit(remaining.num_qubits, registry)

    def do(self, name: str, *qubits: int) -> None:
        self.remaining.inplace_scatter_append(self.registry.tableau(name), qubits)
        self.circuit.append(name, qubits)


def tableau_to_circuit_elimination_method(
    tableau: Tableau, *, registry: Optional[GateRegistry] = None
) -> Circuit:
    """
    Synthesize an H/S/CX circuit implementing ``tableau`` exactly.

    Gaussian elimination reduces the inverse tableau to the identity one
    column at a time; the gates doing so form a circuit for the tableau.
    """
    registry = registry if registry is not None else default_registry()
    n = tableau.num_qubits
    rec = _Recorder(tableau.inverse(), registry)
    t = rec.remaining

    def x_out(inp: int, out: int) -> int:
        return int(t.x[inp, out]) + 2 * int(t.z[inp, out])

    def z_out(inp: int, out: int) -> int:
        return int(t.x[n + inp, out]) + 2 * int(t.z[n + inp, out])

    for col in range(n):
        # Find a qubit where the X and Z images of this column anticommute
        pivot = None
        for row in range(col, n):
            px = x_out(col, row)
            pz = z_out(col, row)
            if px and pz and px != pz:
                pivot = row
                break
        if pivot is None:
            raise InvalidArgument("Tableau is not a valid Clifford operation")

        # Move the pivot to the diagonal
        if pivot != col:
            rec.do("CX", pivot, col)
            rec.do("CX", col, pivot)
            rec.do("CX", pivot, col)

        # Transform the pivot so X(col) → X, Z(col) → Z on the diagonal
        if z_out(col, col) == 3:
            rec.do("S", col)
        if z_out(col, col) != 2:
            rec.do("H", col)
        if x_out(col, col) != 1:
            rec.do("S", col)

        # Clear the other X terms of X(col)
        for row in range(col + 1, n):
            if x_out(col, row) == 3:
                rec.do("S", row)
        for row in range(col + 1, n):
            if x_out(col, row) == 2:
                rec.do("H", row)
        for row in range(col + 1, n):
            if x_out(col, row):
                rec.do("CX", col, row)

        # Clear the other Z terms of Z(col)
        for row in range(col + 1, n):
            if z_out(col, row) == 3:
                rec.do("S", row)
        for row in range(col + 1, n):
            if z_out(col, row) == 1:
                rec.do("H", row)
        for row in range(col + 1, n):
            if z_out(col, row):
                rec.do("CX", row, col)

    # Fix signs
    for q in range(n):
        if t.r[n + q]:
            rec.do("H", q)
            rec.do("S", q)
            rec.do("S", q)
            rec.do("H", q)
        if t.r[q]:
            rec.do("S", q)
            rec.do("S", q)

    logger.debug("Elimination synthesis of %d qubits used %d gates", n, len(rec.circuit))
    return rec.circuit


def _times(a: PauliString, b: PauliString) -> PauliString:
    """Product of two commuting Pauli strings."""
    product = a * b
    if product.imag:
        raise InvalidArgument(f"Stabilizers {a} and {b} anticommute")
    return product.value


def _conjugate_by_h(pauli: PauliString, q: int) -> None:
    if pauli.xs[q] and pauli.zs[q]:
        pauli.sign = not pauli.sign
    pauli.xs[q], pauli.zs[q] = pauli.zs[q], pauli.xs[q]


def tableau_to_circuit_graph_method(
    tableau: Tableau, *, registry: Optional[GateRegistry] = None
) -> Circuit:
    """
    Synthesize a graph-state circuit preparing ``tableau`` applied to |0…0⟩.

    The stabilizer group is brought to the form ``±X_q Z^{Γ_q}`` (Γ the
    adjacency matrix of a graph) by row reduction plus local Hadamards,
    Y-to-X phase fixes and sign flips. The circuit prepares the graph state
    and undoes those local operations.

    Layers are separated by TICK. The first resets every qubit with RX and
    the second applies the CZ edges of the graph; the last holds the
    single-qubit corrections. Empty layers are omitted.
    """
    registry = registry if registry is not None else default_registry()
    n = tableau.num_qubits
    rows = [tableau.z_output(k) for k in range(n)]

    # Row-echelon form of the X block
    rank = 0
    x_pivots = set()
    for q in range(n):
        pivot = next((k for k in range(rank, n) if rows[k].xs[q]), None)
        if pivot is None:
            continue
        rows[rank], rows[pivot] = rows[pivot], rows[rank]
        for k in range(n):
            if k != rank and rows[k].xs[q]:
                rows[k] = _times(rows[rank], rows[k])
        x_pivots.add(q)
        rank += 1

    # Remaining rows are Z-only and independent on the non-pivot qubits;
    # Hadamard those qubits
    hadamards: List[int] = []
    z_rank = rank
    for q in range(n):
        if q in x_pivots:
            continue
        pivot = next((k for k in range(z_rank, n) if rows[k].zs[q]), None)
        if pivot is None:
            continue
        rows[z_rank], rows[pivot] = rows[pivot], rows[z_rank]
        for k in range(rank, n):
            if k != z_rank and rows[k].zs[q]:
                rows[k] = _times(rows[z_rank], rows[k])
        hadamards.append(q)
        z_rank += 1
    for row in rows:
        for q in hadamards:
            _conjugate_by_h(row, q)

    # X block is now invertible; reduce it to the identity
    for q in range(n):
        pivot = next((k for k in range(q, n) if rows[k].xs[q]), None)
        if pivot is None:
            raise InvalidArgument("Tableau stabilizers are not independent")
        rows[q], rows[pivot] = rows[pivot], rows[q]
        for k in range(n):
            if k != q and rows[k].xs[q]:
                rows[k] = _times(rows[q], rows[k])

    edges = [
        (a, b)
        for a in range(n)
        for b in range(a + 1, n)
        if rows[a].zs[b]
    ]
    phase_qubits = [q for q in range(n) if rows[q].zs[q]]
    sign_qubits = [q for q in range(n) if rows[q].sign]

    layers = [
        [("RX", list(range(n)))],
        [("CZ", [q for edge in edges for q in edge])],
        [("Z", sign_qubits), ("S", phase_qubits), ("H", hadamards)],
    ]
    circuit = Circuit(n, registry)
    for layer in layers:
        layer = [(name, qubits) for name, qubits in layer if qubits]
        if not layer:
            continue
        if len(circuit):
            circuit.tick()
        for name, qubits in layer:
            circuit.append(name, qubits)
    logger.debug("Graph state synthesis: %d qubits, %d edges", n, len(edges))
    return circuit


def tableau_to_circuit_mpp_method(
    tableau: Tableau,
    skip_sign: bool = False,
    *,
    registry: Optional[GateRegistry] = None,
) -> Circuit:
    """
    Synthesize a measurement-based circuit preparing ``tableau`` applied to |0…0⟩.

    One MPP per stabilizer, then for each stabilizer k a classically
    controlled destabilizer ``D_k`` conditioned on its result, which flips a
    -1 outcome back to +1 without disturbing the other stabilizers.

    Parameters
    ----------
    skip_sign : bool
        Omit the feedback, so the circuit prepares the state only up to the
        signs of its stabilizers.
    """
    registry = registry if registry is not None else default_registry()
    n = tableau.num_qubits
    circuit = Circuit(n, registry)
    if not n:
        return circuit

    targets = []
    for k in range(n):
        stabilizer = tableau.z_output(k)
        for j, q in enumerate(stabilizer.support()):
            if j:
                targets.append(target_combiner())
            targets.append(target_pauli(q, stabilizer.letter(q), invert=stabilizer.sign and j == 0))
    circuit.append("MPP", targets)

    if not skip_sign:
        feedback = {"X": "CX", "Y": "CY", "Z": "CZ"}
        for k in range(n):
            destabilizer = tableau.x_output(k)
            for q in destabilizer.support():
                name = feedback[destabilizer.letter(q)]
                circuit.append(name, [target_rec(-(n - k)), q])
    return circuit


_METHODS: Dict[str, Callable[..., Circuit]] = {
    "elimination": tableau_to_circuit_elimination_method,
    "graph_state": tableau_to_circuit_graph_method,
    "mpp": tableau_to_circuit_mpp_method,
}


def tableau_to_circuit(
    tableau: Tableau,
    method: str = "elimination",
    skip_sign: bool = False,
    *,
    registry: Optional[GateRegistry] = None,
) -> Circuit:
    """
    Synthesize a circuit for a tableau.

    Parameters
    ----------
    tableau : Tableau
        Operation to synthesize.
    method : str
        ``"elimination"``, ``"graph_state"`` or ``"mpp"``.
    skip_sign : bool
        Only used by ``"mpp"``: omit the sign-fixing feedback.
    registry : GateRegistry, optional
        Gate metadata; defaults to the built-in registry.

    Raises
    ------
    InvalidArgument
        If the method is unknown.
    """
    if method not in _METHODS:
        raise InvalidArgument(
            f"Unknown synthesis method: '{method}'. Available: {sorted(_METHODS)}"
        )
    logger.debug("Synthesizing %d-qubit tableau with method %s", tableau.num_qubits, method)
    if method == "mpp":
        return tableau_to_circuit_mpp_method(tableau, skip_sign, registry=registry)
    return _METHODS[method](tableau, registry=registry)


# ---------------------------------------------------------------------------
# Circuit inversion
# ---------------------------------------------------------------------------

def unitary_circuit_inverse(
    circuit: Circuit, *, registry: Optional[GateRegistry] = None
) -> Circuit:
    """
    Inverse of a circuit made only of unitary gates.

    Instructions are reversed, each gate is replaced by its inverse, and the
    target groups within each instruction are reversed. Arguments are kept.

    Raises
    ------
    InvalidArgument
        If the circuit contains a non-unitary instruction (including
        annotations such as TICK).
    """
    registry = registry if registry is not None else default_registry()
    inverted = Circuit(circuit.num_qubits, registry)
    for inst in reversed(circuit):
        gate = registry[inst.name]
        if not gate.is_unitary:
            raise InvalidArgument(f"Not a unitary instruction: '{inst}'")
        groups = target_groups(inst, gate)
        targets = [t for group in reversed(groups) for t in group]
        inverted.append(gate.inverse_name, targets, inst.args)
    return inverted
