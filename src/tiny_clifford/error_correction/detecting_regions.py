"""
Detecting regions of detectors and logical observables.

A detector (or observable) is the parity of some measurement results. Walking
the circuit backwards, each measurement it depends on adds that measurement's
observable to the Pauli product the detector is sensitive to; gates conjugate
that product, resets and the start of the circuit absorb it. The product at a
TICK is the set of Pauli errors that would flip the detector if inserted
there.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set, Tuple

from ..circuit import Circuit, GateTarget, Instruction, target_groups
from ..errors import InvalidArgument
from ..gates import GateInfo, GateRegistry
from ..pauli import FlexPauliString, PauliString

logger = logging.getLogger(__name__)

# (x, z) bits of each single-qubit basis / Pauli target kind
_BASIS_BITS = {"X": (1, 0), "Y": (1, 1), "Z": (0, 1)}

# Pauli applied on the qubit by a measurement-controlled gate
_FEEDBACK_PAULI = {"CX": "X", "CY": "Y", "CZ": "Z"}


@dataclass(frozen=True, order=True)
class DemTarget:
    """
    A detector (``D5``) or logical observable (``L0``).

    Detectors sort before observables, each group by index.
    """

    is_observable: bool
    index: int

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError(f"Index must be ≥ 0, got {self.index}")

    @classmethod
    def relative_detector_id(cls, index: int) -> "DemTarget":
        return cls(False, index)

    @classmethod
    def observable_id(cls, index: int) -> "DemTarget":
        return cls(True, index)

    @classmethod
    def from_str(cls, text: str) -> "DemTarget":
        """Parse ``"D3"`` or ``"L1"``."""
        text = text.strip()
        if len(text) < 2 or text[0] not in "DL" or not text[1:].isdigit():
            raise ValueError(f"Expected a target like 'D3' or 'L1', got '{text}'")
        return cls(text[0] == "L", int(text[1:]))

    @property
    def is_relative_detector_id(self) -> bool:
        return not self.is_observable

    def __str__(self) -> str:
        return f"{'L' if self.is_observable else 'D'}{self.index}"

    def __repr__(self) -> str:
        return f'DemTarget("{self}")'


class _SensitivityTracker:
    """Per-target Pauli sensitivity, propagated backwards through a circuit."""

    def __init__(self, num_qubits: int, registry: GateRegistry, fail_on_anticommute: bool):
        self.num_qubits = num_qubits
        self.registry = registry
        self.fail_on_anticommute = fail_on_anticommute
        self.sensitivity: Dict[DemTarget, PauliString] = {}
        self.rec_bits: Dict[int, Set[DemTarget]] = {}

    def _pauli(self, target: DemTarget) -> PauliString:
        if target not in self.sensitivity:
            self.sensitivity[target] = PauliString.identity(self.num_qubits)
        return self.sensitivity[target]

    def toggle_rec(self, measurement: int, target: DemTarget, inst: Instruction) -> None:
        if measurement < 0:
            raise InvalidArgument(f"'{inst}' looks back further than the first measurement")
        self.rec_bits.setdefault(measurement, set()).symmetric_difference_update({target})

    # -- Collapse -----------------------------------------------------------

    def _check(self, terms: List[Tuple[int, int, int]], where: str) -> None:
        for target, pauli in self.sensitivity.items():
            anticommutes = 0
            for q, bx, bz in terms:
                anticommutes ^= (int(pauli.xs[q]) & bz) ^ (int(pauli.zs[q]) & bx)
            if not anticommutes:
                continue
            if self.fail_on_anticommute:
                raise InvalidArgument(
                    f"The detecting region of {target} anticommutes with {where}; "
                    f"the detector is not deterministic. "
                    f"Pass ignore_anticommutation_errors=True to ignore this."
                )
            logger.debug("Ignoring anticommutation of %s with %s", target, where)

    def undo_measurement(self, measurement: int, terms: List[Tuple[int, int, int]], inst: Instruction) -> None:
        for target in self.rec_bits.pop(measurement, ()):
            pauli = self._pauli(target)
            for q, bx, bz in terms:
                pauli.xs[q] ^= bx
                pauli.zs[q] ^= bz
        self._check(terms, f"'{inst}'")

    def undo_reset(self, terms: List[Tuple[int, int, int]], inst: Instruction) -> None:
        self._check(terms, f"'{inst}'")
        for pauli in self.sensitivity.values():
            for q, _, _ in terms:
                pauli.xs[q] = 0
                pauli.zs[q] = 0

    def undo_implicit_resets(self) -> None:
        terms = [(q, 0, 1) for q in range(self.num_qubits)]
        self._check(terms, "the implicit |0> initialization at the start of the circuit")

    # -- Unitary ------------------------------------------------------------

    def undo_gate(self, gate: GateInfo, qubits: List[int]) -> None:
        inverse = self.registry.tableau(gate.inverse_name)
        for pauli in self.sensitivity.values():
            sub = PauliString(pauli.xs[qubits], pauli.zs[qubits])
            if sub.is_identity():
                continue
            image = inverse(sub)
            pauli.xs[qubits] = image.xs
            pauli.zs[qubits] = image.zs

    def undo_feedback(self, pauli_name: str, qubit: int, measurement: int, inst: Instruction) -> None:
        bx, bz = _BASIS_BITS[pauli_name]
        for target, pauli in self.sensitivity.items():
            if (int(pauli.xs[qubit]) & bz) ^ (int(pauli.zs[qubit]) & bx):
                self.toggle_rec(measurement, target, inst)

    def snapshot(self, included: Iterable[DemTarget]) -> Dict[DemTarget, FlexPauliString]:
        return {
            t: FlexPauliString(self.sensitivity[t])
            for t in included
            if t in self.sensitivity and not self.sensitivity[t].is_identity()
        }


def _collapse_terms(group: Tuple[GateTarget, ...], gate: GateInfo) -> List[Tuple[int, int, int]]:
    """``(qubit, x, z)`` for each qubit of the observable a collapse acts on."""
    if gate.targets_pauli_string:
        return [(t.value,) + _BASIS_BITS[t.kind] for t in group]
    return [(t.value,) + _BASIS_BITS[gate.basis] for t in group]


def circuit_to_detecting_regions(
    circuit: Circuit,
    included_targets: Optional[Iterable[DemTarget]] = None,
    included_ticks: Optional[Iterable[int]] = None,
    ignore_anticommutation_errors: bool = False,
    *,
    registry: Optional[GateRegistry] = None,
) -> Dict[DemTarget, Dict[int, FlexPauliString]]:
    """
    Pauli sensitivity of each detector and observable at each TICK.

    Parameters
    ----------
    circuit : Circuit
        Circuit with DETECTOR / OBSERVABLE_INCLUDE annotations.
    included_targets : iterable of DemTarget, optional
        Targets to report; all detectors and observables when empty or None.
    included_ticks : iterable of int, optional
        0-based TICK indices to report; every TICK when empty or None.
    ignore_anticommutation_errors : bool
        Keep going when a region anticommutes with a reset or measurement
        (the measurement still contributes its observable, the reset still
        clears its qubit) instead of raising.
    registry : GateRegistry, optional
        Gate metadata; defaults to the circuit's registry.

    Returns
    -------
    dict
        ``{target: {tick: FlexPauliString}}`` sorted by target then tick.
        Ticks where the region is empty are omitted.

    Raises
    ------
    InvalidArgument
        If a region anticommutes with a collapse (and errors are not
        ignored), or a record lookback reaches before the first
        measurement.
    """
    registry = registry if registry is not None else circuit.registry
    targets = set(included_targets or ())
    if not targets:
        targets = {DemTarget(False, d) for d in range(circuit.num_detectors)}
        targets |= {DemTarget(True, o) for o in range(circuit.num_observables)}
    ticks = set(included_ticks or ())
    all_ticks = not ticks

    tracker = _SensitivityTracker(circuit.num_qubits, registry, not ignore_anticommutation_errors)
    measure_index = circuit.num_measurements
    detector_index = circuit.num_detectors
    tick_index = circuit.num_ticks
    regions: Dict[DemTarget, Dict[int, FlexPauliString]] = {}

    for inst in reversed(circuit):
        gate = registry[inst.name]
        if inst.name == "TICK":
            tick_index -= 1
            if all_ticks or tick_index in ticks:
                for target, pauli in tracker.snapshot(targets).items():
                    regions.setdefault(target, {})[tick_index] = pauli
        elif inst.name == "DETECTOR":
            detector_index -= 1
            target = DemTarget(False, detector_index)
            if target in targets:
                for t in inst.targets:
                    tracker.toggle_rec(measure_index - t.value, target, inst)
        elif inst.name == "OBSERVABLE_INCLUDE":
            target = DemTarget(True, int(inst.args[0]))
            if target in targets:
                for t in inst.targets:
                    tracker.toggle_rec(measure_index - t.value, target, inst)
        elif gate.is_noisy:
            continue
        elif gate.produces_results or gate.is_reset:
            for group in reversed(target_groups(inst, gate)):
                terms = _collapse_terms(group, gate)
                if gate.is_reset:
                    tracker.undo_reset(terms, inst)
                if gate.produces_results:
                    measure_index -= 1
                    tracker.undo_measurement(measure_index, terms, inst)
        elif gate.is_unitary:
            for group in reversed(target_groups(inst, gate)):
                recs = [t for t in group if t.is_measurement_record_target]
                if not recs:
                    tracker.undo_gate(gate, [t.value for t in group])
                elif len(recs) == 1:
                    qubit = next(t.value for t in group if t.is_qubit_target)
                    tracker.undo_feedback(
                        _FEEDBACK_PAULI[gate.name], qubit, measure_index - recs[0].value, inst
                    )

    tracker.undo_implicit_resets()
    logger.debug(
        "Computed detecting regions for %d targets over %d ticks", len(regions), circuit.num_ticks
    )
    return {
        target: dict(sorted(regions[target].items()))
        for target in sorted(regions)
    }
