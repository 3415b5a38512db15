"""
Stabilizer circuit representation.

Provides a builder-style API for constructing Clifford circuits with noise
channels, measurements, resets and detector annotations, plus a parser and
printer for a line-oriented text format.

Example
-------
>>> from tiny_clifford import Circuit
>>> c = Circuit()
>>> c.h(0).cx(0, 1).m(0, 1).detector(-1, -2)
>>> print(c)
H 0
CX 0 1
M 0 1
DETECTOR rec[-1] rec[-2]
>>> Circuit.from_text(str(c)) == c
True
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from .gates import GateInfo, GateRegistry, default_registry
from .pauli import PauliString


# ---------------------------------------------------------------------------
# GateTarget: one operand of an instruction
# ---------------------------------------------------------------------------

_PAULI_KINDS = ("X", "Y", "Z")


@dataclass(frozen=True)
class GateTarget:
    """
    A qubit, Pauli, combiner or measurement-record operand.

    Attributes
    ----------
    value : int
        Qubit index, or the (positive) lookback distance for ``rec[-k]``.
    kind : str
        ``"qubit"``, ``"rec"``, ``"X"``, ``"Y"``, ``"Z"`` or ``"combiner"``.
    inverted : bool
        Result inversion marker (``!``) on qubit and Pauli targets.
    """

    value: int
    kind: str = "qubit"
    inverted: bool = False

    def __post_init__(self) -> None:
        if self.kind not in ("qubit", "rec", "combiner") + _PAULI_KINDS:
            raise ValueError(f"Unknown target kind: '{self.kind}'")
        if self.kind == "rec" and self.value < 1:
            raise ValueError(f"Record lookback must be ≥ 1, got {self.value}")
        if self.kind != "rec" and self.value < 0:
            raise ValueError(f"Qubit index must be ≥ 0, got {self.value}")

    @property
    def is_qubit_target(self) -> bool:
        return self.kind == "qubit"

    @property
    def is_measurement_record_target(self) -> bool:
        return self.kind == "rec"

    @property
    def is_pauli_target(self) -> bool:
        return self.kind in _PAULI_KINDS

    @property
    def is_combiner(self) -> bool:
        return self.kind == "combiner"

    @property
    def qubit_value(self) -> Optional[int]:
        """The qubit this target acts on, or None for rec/combiner targets."""
        if self.kind in ("rec", "combiner"):
            return None
        return self.value

    def __str__(self) -> str:
        if self.kind == "rec":
            return f"rec[-{self.value}]"
        if self.kind == "combiner":
            return "*"
        prefix = "!" if self.inverted else ""
        if self.kind == "qubit":
            return f"{prefix}{self.value}"
        return f"{prefix}{self.kind}{self.value}"


def target_rec(lookback: int) -> GateTarget:
    """Measurement record target ``rec[lookback]`` (lookback is negative)."""
    if lookback >= 0:
        raise ValueError(f"Record lookback must be negative, got {lookback}")
    return GateTarget(-lookback, "rec")


def target_inv(qubit: int) -> GateTarget:
    """Qubit target whose measurement result is inverted."""
    return GateTarget(qubit, "qubit", inverted=True)


def target_pauli(qubit: int, pauli: str, invert: bool = False) -> GateTarget:
    letter = pauli.upper()
    if letter not in _PAULI_KINDS:
        raise ValueError(f"Expected X, Y or Z, got {pauli!r}")
    return GateTarget(qubit, letter, invert)


def target_x(qubit: int, invert: bool = False) -> GateTarget:
    return target_pauli(qubit, "X", invert)


def target_y(qubit: int, invert: bool = False) -> GateTarget:
    return target_pauli(qubit, "Y", invert)


def target_z(qubit: int, invert: bool = False) -> GateTarget:
    return target_pauli(qubit, "Z", invert)


def target_combiner() -> GateTarget:
    return GateTarget(0, "combiner")


def target_combined_paulis(pauli: Union[PauliString, str], invert: bool = False) -> List[GateTarget]:
    """
    MPP targets measuring the product ``pauli``.

    A negative sign (or ``invert``) inverts the first Pauli target.

    Raises
    ------
    ValueError
        If the Pauli string is the identity.
    """
    if isinstance(pauli, str):
        pauli = PauliString.from_str(pauli)
    support = pauli.support()
    if not support:
        raise ValueError("Cannot measure the identity Pauli product")
    flip = pauli.sign != bool(invert)
    targets: List[GateTarget] = []
    for k, q in enumerate(support):
        if k:
            targets.append(target_combiner())
        targets.append(target_pauli(q, pauli.letter(q), invert=flip and k == 0))
    return targets


_TargetLike = Union[int, GateTarget]


def _as_target(value: _TargetLike) -> GateTarget:
    if isinstance(value, GateTarget):
        return value
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Expected int or GateTarget, got {type(value).__name__}")
    return GateTarget(value)


# ---------------------------------------------------------------------------
# Instruction: a single operation in the circuit
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Instruction:
    """A single gate, noise channel, collapse or annotation with its operands."""
    name: str
    targets: Tuple[GateTarget, ...]
    args: Tuple[float, ...] = ()

    @property
    def qubits(self) -> Tuple[int, ...]:
        """Qubits touched by the instruction, in target order."""
        return tuple(t.value for t in self.targets if t.qubit_value is not None)

    def __str__(self) -> str:
        text = self.name
        if self.args:
            text += "(" + ", ".join(_format_arg(a) for a in self.args) + ")"
        if self.targets:
            text += " " + _join_targets(self.targets)
        return text


def _format_arg(value: float) -> str:
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _join_targets(targets: Sequence[GateTarget]) -> str:
    words: List[str] = []
    joined = False
    for t in targets:
        if t.is_combiner:
            words[-1] += "*"
            joined = True
        elif joined:
            words[-1] += str(t)
            joined = False
        else:
            words.append(str(t))
    return " ".join(words)


def target_groups(instruction: Instruction, gate: GateInfo) -> List[Tuple[GateTarget, ...]]:
    """
    Split an instruction's targets into the groups the gate acts on.

    Pair gates act on consecutive pairs, MPP on combiner-joined products,
    everything else on single targets.
    """
    targets = instruction.targets
    if gate.targets_pauli_string:
        groups: List[Tuple[GateTarget, ...]] = []
        current: List[GateTarget] = []
        expect_combined = False
        for t in targets:
            if t.is_combiner:
                expect_combined = True
                continue
            if current and not expect_combined:
                groups.append(tuple(current))
                current = []
            current.append(t)
            expect_combined = False
        if current:
            groups.append(tuple(current))
        return groups
    if gate.targets_pairs:
        return [tuple(targets[k:k + 2]) for k in range(0, len(targets), 2)]
    return [(t,) for t in targets]


# ---------------------------------------------------------------------------
# Text parsing
# ---------------------------------------------------------------------------

class CircuitParseError(ValueError):
    """Error while parsing circuit text."""
    def __init__(self, message: str, line: int = 0) -> None:
        super().__init__(f"Line {line}: {message}" if line else message)
        self.line = line


_LINE_RE = re.compile(
    r"^\s*(?P<name>[A-Za-z_][A-Za-z0-9_]*)"
    r"\s*(?:\((?P<args>[^)]*)\))?"
    r"(?P<targets>.*)$"
)
_REC_RE = re.compile(r"^rec\[-(\d+)\]$")
_QUBIT_RE = re.compile(r"^(!?)(\d+)$")
_PAULI_RE = re.compile(r"^(!?)([XYZxyz])(\d+)$")


def _parse_target_token(token: str, line: int) -> List[GateTarget]:
    targets: List[GateTarget] = []
    pieces = token.split("*")
    for k, piece in enumerate(pieces):
        if k:
            targets.append(target_combiner())
        m = _REC_RE.match(piece)
        if m:
            targets.append(GateTarget(int(m.group(1)), "rec"))
            continue
        m = _QUBIT_RE.match(piece)
        if m:
            targets.append(GateTarget(int(m.group(2)), "qubit", bool(m.group(1))))
            continue
        m = _PAULI_RE.match(piece)
        if m:
            targets.append(GateTarget(int(m.group(3)), m.group(2).upper(), bool(m.group(1))))
            continue
        raise CircuitParseError(f"Invalid target '{piece}'", line)
    return targets


# ---------------------------------------------------------------------------
# Circuit
# ---------------------------------------------------------------------------

class Circuit:
    """
    Ordered list of instructions acting on a growing set of qubits.

    Parameters
    ----------
    num_qubits : int, optional
        Declared qubit count. The effective count is the larger of this and
        one past the highest qubit any instruction touches.
    registry : GateRegistry, optional
        Gate metadata used to validate instructions. Defaults to the
        built-in registry.
    """

    def __init__(self, num_qubits: int = 0, registry: Optional[GateRegistry] = None) -> None:
        if num_qubits < 0:
            raise ValueError(f"num_qubits must be ≥ 0, got {num_qubits}")
        self._declared_qubits = num_qubits
        self._registry = registry
        self._instructions: List[Instruction] = []

    @classmethod
    def from_text(cls, text: str, registry: Optional[GateRegistry] = None) -> Circuit:
        """
        Parse circuit text: one instruction per line, ``#`` comments.

        Example: ``"H 0\\nCX 0 1\\nMPP X0*Z1 !Y2\\nDETECTOR rec[-1]"``.

        Raises
        ------
        CircuitParseError
            On malformed lines, unknown gates or invalid operands.
        """
        circuit = cls(registry=registry)
        for line_no, raw in enumerate(text.splitlines(), start=1):
            line = raw.split("#", 1)[0].strip()
            if not line:
                continue
            m = _LINE_RE.match(line)
            if m is None:
                raise CircuitParseError(f"Cannot parse '{line}'", line_no)
            args: Tuple[float, ...] = ()
            if m.group("args") is not None and m.group("args").strip():
                try:
                    args = tuple(float(a) for a in m.group("args").split(","))
                except ValueError:
                    raise CircuitParseError(f"Invalid arguments in '{line}'", line_no) from None
            targets: List[GateTarget] = []
            for token in m.group("targets").split():
                targets.extend(_parse_target_token(token, line_no))
            try:
                circuit.append(m.group("name"), targets, args)
            except (KeyError, ValueError) as e:
                raise CircuitParseError(str(e), line_no) from e
        return circuit

    # -- Properties ---------------------------------------------------------

    @property
    def registry(self) -> GateRegistry:
        if self._registry is None:
            return default_registry()
        return self._registry

    @property
    def num_qubits(self) -> int:
        used = [q for inst in self._instructions for q in inst.qubits]
        return max([self._declared_qubits] + [q + 1 for q in used])

    @property
    def instructions(self) -> List[Instruction]:
        """List of instructions in the circuit."""
        return list(self._instructions)

    @property
    def num_measurements(self) -> int:
        """Number of measurement results the circuit produces."""
        total = 0
        for inst in self._instructions:
            gate = self.registry[inst.name]
            if gate.produces_results:
                total += len(target_groups(inst, gate))
        return total

    @property
    def num_ticks(self) -> int:
        return sum(1 for inst in self._instructions if inst.name == "TICK")

    @property
    def num_detectors(self) -> int:
        return sum(1 for inst in self._instructions if inst.name == "DETECTOR")

    @property
    def num_observables(self) -> int:
        indices = [int(inst.args[0]) for inst in self._instructions if inst.name == "OBSERVABLE_INCLUDE"]
        return max(indices) + 1 if indices else 0

    # -- Internal helpers ---------------------------------------------------

    def _validate(self, gate: GateInfo, targets: Sequence[GateTarget], args: Sequence[float]) -> None:
        if not gate.accepts_arg_count(len(args)):
            raise ValueError(
                f"Gate '{gate.name}' takes {gate.arg_counts} argument(s), got {len(args)}"
            )
        if gate.name in ("DETECTOR", "OBSERVABLE_INCLUDE"):
            for t in targets:
                if not t.is_measurement_record_target:
                    raise ValueError(f"{gate.name} only takes rec[-k] targets, got {t}")
            if gate.name == "OBSERVABLE_INCLUDE" and (args[0] < 0 or not float(args[0]).is_integer()):
                raise ValueError(f"Observable index must be a non-negative integer, got {args[0]}")
            return
        if gate.name == "TICK":
            if targets:
                raise ValueError("TICK takes no targets")
            return
        if gate.targets_pauli_string:
            self._validate_pauli_products(targets)
            return
        for t in targets:
            if t.is_pauli_target or t.is_combiner:
                raise ValueError(f"Gate '{gate.name}' does not take Pauli targets, got {t}")
            if t.is_measurement_record_target and not gate.can_target_bits:
                raise ValueError(f"Gate '{gate.name}' does not take rec targets, got {t}")
            if t.inverted and not gate.produces_results:
                raise ValueError(f"Gate '{gate.name}' does not take inverted targets, got {t}")
        if gate.targets_pairs:
            if len(targets) % 2:
                raise ValueError(f"Gate '{gate.name}' takes pairs of targets, got {len(targets)}")
            for a, b in zip(targets[::2], targets[1::2]):
                if b.is_measurement_record_target:
                    raise ValueError(f"Classical control must be the first target of '{gate.name}'")
                if a.is_qubit_target and a.value == b.value:
                    raise ValueError(f"Duplicate qubits in pair ({a}, {b}) of '{gate.name}'")

    @staticmethod
    def _validate_pauli_products(targets: Sequence[GateTarget]) -> None:
        expect_operand = True
        for t in targets:
            if t.is_combiner:
                if expect_operand:
                    raise ValueError("Misplaced combiner in MPP targets")
                expect_operand = True
            elif t.is_pauli_target:
                expect_operand = False
            else:
                raise ValueError(f"MPP only takes Pauli targets, got {t}")
        if targets and expect_operand:
            raise ValueError("MPP targets end with a combiner")

    def append(
        self,
        name: str,
        targets: Union[_TargetLike, Iterable[_TargetLike]] = (),
        args: Union[float, Iterable[float]] = (),
    ) -> Circuit:
        """
        Append an instruction and return self for chaining.

        Parameters
        ----------
        name : str
            Gate name or alias (case-insensitive); stored canonically.
        targets : int, GateTarget or iterable of them
            Operands. Plain ints are qubit targets.
        args : float or iterable of float
            Parens arguments (probabilities, observable index, coordinates).

        Raises
        ------
        KeyError
            If the gate name is unknown.
        ValueError
            If the operands or arguments do not fit the gate.
        """
        gate = self.registry[name]
        if isinstance(targets, (int, GateTarget)):
            targets = [targets]
        if isinstance(args, (int, float)):
            args = [args]
        target_tuple = tuple(_as_target(t) for t in targets)
        arg_tuple = tuple(float(a) for a in args)
        self._validate(gate, target_tuple, arg_tuple)
        self._instructions.append(Instruction(gate.name, target_tuple, arg_tuple))
        return self

    def __iadd__(self, other: Circuit) -> Circuit:
        self._declared_qubits = max(self._declared_qubits, other.num_qubits)
        self._instructions.extend(other._instructions)
        return self

    # -- Single-qubit gates -------------------------------------------------

    def i(self, *qubits: int) -> Circuit:
        """Identity gate."""
        return self.append("I", qubits)

    def x(self, *qubits: int) -> Circuit:
        """Pauli-X gate."""
        return self.append("X", qubits)

    def y(self, *qubits: int) -> Circuit:
        """Pauli-Y gate."""
        return self.append("Y", qubits)

    def z(self, *qubits: int) -> Circuit:
        """Pauli-Z gate."""
        return self.append("Z", qubits)

    def h(self, *qubits: int) -> Circuit:
        """Hadamard gate."""
        return self.append("H", qubits)

    def s(self, *qubits: int) -> Circuit:
        """S gate."""
        return self.append("S", qubits)

    def s_dag(self, *qubits: int) -> Circuit:
        """S-dagger gate."""
        return self.append("S_DAG", qubits)

    sdg = s_dag

    def sqrt_x(self, *qubits: int) -> Circuit:
        """sqrt(X) gate."""
        return self.append("SQRT_X", qubits)

    def sqrt_x_dag(self, *qubits: int) -> Circuit:
        return self.append("SQRT_X_DAG", qubits)

    def sqrt_y(self, *qubits: int) -> Circuit:
        return self.append("SQRT_Y", qubits)

    def sqrt_y_dag(self, *qubits: int) -> Circuit:
        return self.append("SQRT_Y_DAG", qubits)

    # -- Two-qubit gates ----------------------------------------------------

    def cx(self, *targets: _TargetLike) -> Circuit:
        """Controlled-NOT on consecutive (control, target) pairs."""
        return self.append("CX", targets)

    cnot = cx

    def cy(self, *targets: _TargetLike) -> Circuit:
        """Controlled-Y on consecutive (control, target) pairs."""
        return self.append("CY", targets)

    def cz(self, *targets: _TargetLike) -> Circuit:
        """Controlled-Z on consecutive pairs."""
        return self.append("CZ", targets)

    def swap(self, *qubits: int) -> Circuit:
        """SWAP gate."""
        return self.append("SWAP", qubits)

    def iswap(self, *qubits: int) -> Circuit:
        """iSWAP gate."""
        return self.append("ISWAP", qubits)

    # -- Collapsing operations ----------------------------------------------

    def m(self, *qubits: _TargetLike) -> Circuit:
        """Z-basis measurement."""
        return self.append("M", qubits)

    measure = m

    def mx(self, *qubits: _TargetLike) -> Circuit:
        return self.append("MX", qubits)

    def my(self, *qubits: _TargetLike) -> Circuit:
        return self.append("MY", qubits)

    def mr(self, *qubits: _TargetLike) -> Circuit:
        """Z-basis measurement followed by reset to |0⟩."""
        return self.append("MR", qubits)

    def mpp(self, *products: Union[PauliString, str]) -> Circuit:
        """Measure each Pauli product, e.g. ``c.mpp("XX", "-ZZ")``."""
        targets: List[GateTarget] = []
        for p in products:
            targets.extend(target_combined_paulis(p))
        return self.append("MPP", targets)

    def r(self, *qubits: int) -> Circuit:
        """Reset to |0⟩."""
        return self.append("R", qubits)

    reset = r

    def rx(self, *qubits: int) -> Circuit:
        """Reset to |+⟩."""
        return self.append("RX", qubits)

    def ry(self, *qubits: int) -> Circuit:
        """Reset to |i⟩."""
        return self.append("RY", qubits)

    # -- Noise --------------------------------------------------------------

    def x_error(self, p: float, *qubits: int) -> Circuit:
        return self.append("X_ERROR", qubits, p)

    def z_error(self, p: float, *qubits: int) -> Circuit:
        return self.append("Z_ERROR", qubits, p)

    def depolarize1(self, p: float, *qubits: int) -> Circuit:
        """Single-qubit depolarizing channel."""
        return self.append("DEPOLARIZE1", qubits, p)

    def depolarize2(self, p: float, *qubits: int) -> Circuit:
        """Two-qubit depolarizing channel on consecutive pairs."""
        return self.append("DEPOLARIZE2", qubits, p)

    # -- Annotations --------------------------------------------------------

    def tick(self) -> Circuit:
        return self.append("TICK")

    def detector(self, *lookbacks: int) -> Circuit:
        """Declare a detector over the given (negative) record lookbacks."""
        return self.append("DETECTOR", [target_rec(k) for k in lookbacks])

    def observable_include(self, index: int, *lookbacks: int) -> Circuit:
        """Add the given record lookbacks to logical observable ``index``."""
        return self.append("OBSERVABLE_INCLUDE", [target_rec(k) for k in lookbacks], index)

    # -- Iteration & comparison ---------------------------------------------

    def __len__(self) -> int:
        return len(self._instructions)

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self._instructions)

    def __reversed__(self) -> Iterator[Instruction]:
        return reversed(self._instructions)

    def __getitem__(self, index: int) -> Instruction:
        return self._instructions[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, Circuit):
            return NotImplemented
        return self._instructions == other._instructions

    __hash__ = None

    def copy(self) -> Circuit:
        """Return a copy of this circuit (instructions are immutable)."""
        new = Circuit(self._declared_qubits, self._registry)
        new._instructions = list(self._instructions)
        return new

    # -- Display ------------------------------------------------------------

    def __str__(self) -> str:
        return "\n".join(str(inst) for inst in self._instructions)

    def __repr__(self) -> str:
        return (
            f"Circuit(num_qubits={self.num_qubits}, "
            f"instructions={len(self._instructions)})"
        )
