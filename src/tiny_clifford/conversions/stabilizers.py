"""
Completion of a list of stabilizers into a full tableau.

Elimination builds a Clifford V with ``V(s_k) = Z_k`` for every independent
stabilizer s_k; ``V^{-1}`` then has the stabilizers as its Z outputs and
supplies matching destabilizers as its X outputs.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Union

from ..errors import InvalidArgument
from ..gates import GateRegistry, default_registry
from ..pauli import PauliString, pauli_strings
from ..tableau import Tableau

logger = logging.getLogger(__name__)

# Pauli-controlled gate that cancels a letter on a qubit given a Z pivot
_CANCEL_GATES = {1: "XCX", 2: "XCZ", 3: "XCY"}


def stabilizers_to_tableau(
    stabilizers: Iterable[Union[PauliString, str]],
    allow_redundant: bool = False,
    allow_underconstrained: bool = False,
    invert: bool = False,
    *,
    registry: Optional[GateRegistry] = None,
) -> Tableau:
    """
    Tableau whose Z outputs are the given stabilizers.

    Parameters
    ----------
    stabilizers : iterable of PauliString or str
        Commuting Pauli strings of equal length.
    allow_redundant : bool
        Drop stabilizers that are products of earlier ones instead of
        raising.
    allow_underconstrained : bool
        Accept fewer independent stabilizers than qubits; the remaining Z
        outputs are filled with stabilizers that commute with the given ones.
    invert : bool
        Return the inverse tableau (mapping each stabilizer to Z_k).
    registry : GateRegistry, optional
        Source of the gate tableaus used during elimination.

    Returns
    -------
    Tableau
        With ``z_output(k)`` equal to the k-th independent stabilizer.

    Raises
    ------
    InvalidArgument
        If the stabilizers differ in length, anticommute, contradict each
        other, are redundant (unless allowed) or do not fix a single state
        (unless allowed).
    """
    registry = registry if registry is not None else default_registry()
    stabilizers = pauli_strings(stabilizers)
    n = max((len(s) for s in stabilizers), default=0)
    for s in stabilizers:
        if len(s) != n:
            raise InvalidArgument(
                f"Stabilizers must all have the same length; got {len(s)} and {n}"
            )
    for j, a in enumerate(stabilizers):
        for b in stabilizers[j + 1:]:
            if not a.commutes(b):
                raise InvalidArgument(f"Stabilizers anticommute: {a} and {b}")

    inverted = Tableau(n)
    used = 0
    for k, stabilizer in enumerate(stabilizers):
        cur = inverted(stabilizer)
        pivot = next((q for q in range(used, n) if cur.xs[q] or cur.zs[q]), None)
        if pivot is None:
            if cur.xs.any():
                raise InvalidArgument(f"Stabilizer {stabilizer} anticommutes with an earlier stabilizer")
            if cur.sign:
                raise InvalidArgument(
                    f"Stabilizer {stabilizer} contradicts the earlier stabilizers "
                    f"(it is the negation of their product)"
                )
            if not allow_redundant:
                raise InvalidArgument(
                    f"Stabilizer {stabilizer} (index {k}) is redundant: it is a product "
                    f"of earlier stabilizers. Pass allow_redundant=True to drop it."
                )
            logger.debug("Dropping redundant stabilizer %s", stabilizer)
            continue

        # Rotate the pivot onto the Z axis
        if cur.xs[pivot]:
            name = "H_YZ" if cur.zs[pivot] else "H"
            inverted.inplace_scatter_append(registry.tableau(name), [pivot])

        # Cancel every other letter against the pivot
        for q in range(n):
            p = int(cur.xs[q]) + 2 * int(cur.zs[q])
            if p and q != pivot:
                inverted.inplace_scatter_append(registry.tableau(_CANCEL_GATES[p]), [pivot, q])

        if pivot != used:
            inverted.inplace_scatter_append(registry.tableau("SWAP"), [pivot, used])

        if inverted(stabilizer).sign:
            inverted.inplace_scatter_append(registry.tableau("X"), [used])
        used += 1

    if used < n and not allow_underconstrained:
        raise InvalidArgument(
            f"There are {n} qubits but only {used} independent stabilizers, so the "
            f"state is underconstrained. Pass allow_underconstrained=True to fill in "
            f"the rest."
        )
    if invert:
        return inverted
    return inverted.inverse()
