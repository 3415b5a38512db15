"""
Pauli strings over GF(2).

A Pauli string on n qubits is stored as two binary vectors plus a sign bit:

  xs[q]=0, zs[q]=0 → I on qubit q
  xs[q]=1, zs[q]=0 → X on qubit q
  xs[q]=1, zs[q]=1 → Y on qubit q
  xs[q]=0, zs[q]=1 → Z on qubit q
  sign             → overall factor -1 when True

As an operator, ``P = (-1)^sign · i^{|xs ∧ zs|} · X^xs · Z^zs``, so every
letter is the usual Hermitian Pauli matrix.

Usage:
    >>> p = PauliString.from_str("+XZ_")
    >>> q = PauliString.from_str("-ZZY")
    >>> p.commutes(q)
    False
    >>> str(p * q)
    '+iYIY'
"""

from __future__ import annotations

from typing import Iterable, Sequence, Union

import numpy as np

_LETTERS = ("I", "X", "Z", "Y")  # indexed by x + 2*z
_I_POWERS = (1, 1j, -1, -1j)


def _bits(values, n: int, name: str) -> np.ndarray:
    arr = np.asarray(values, dtype=np.uint8).reshape(-1)
    if arr.shape[0] != n:
        raise ValueError(f"{name} has length {arr.shape[0]}, expected {n}")
    if np.any(arr > 1):
        raise ValueError(f"{name} must contain only 0s and 1s")
    return arr.copy()


def product_log_i(x1: np.ndarray, z1: np.ndarray, x2: np.ndarray, z2: np.ndarray) -> int:
    """
    Exponent of ``i`` picked up when multiplying two unsigned Pauli strings.

    For single-qubit letters ``P1 · P2 = i^g · P3``; the result is the sum of
    ``g`` over all qubits, mod 4.
    """
    x1 = x1.astype(np.int32)
    z1 = z1.astype(np.int32)
    x2 = x2.astype(np.int32)
    z2 = z2.astype(np.int32)
    g = np.zeros(x1.shape[0], dtype=np.int32)

    # X · P:  X*Y → i, X*Z → -i
    mask_x = (x1 == 1) & (z1 == 0)
    g[mask_x] = z2[mask_x] * (2 * x2[mask_x] - 1)

    # Z · P:  Z*X → i, Z*Y → -i
    mask_z = (x1 == 0) & (z1 == 1)
    g[mask_z] = x2[mask_z] * (1 - 2 * z2[mask_z])

    # Y · P:  Y*Z → i, Y*X → -i
    mask_y = (x1 == 1) & (z1 == 1)
    g[mask_y] = z2[mask_y] - x2[mask_y]

    return int(np.sum(g)) % 4


class PauliString:
    """
    A signed, Hermitian Pauli product.

    Parameters
    ----------
    xs, zs : array-like of 0/1
        X and Z components for each qubit.
    sign : bool
        True for a leading minus sign.
    """

    __slots__ = ("xs", "zs", "sign")

    def __init__(self, xs: Sequence[int], zs: Sequence[int], sign: bool = False):
        n = len(xs)
        self.xs = _bits(xs, n, "xs")
        self.zs = _bits(zs, n, "zs")
        self.sign = bool(sign)

    # ─── Construction ────────────────────────────────────────────────

    @classmethod
    def identity(cls, num_qubits: int) -> "PauliString":
        """The all-identity string on ``num_qubits`` qubits."""
        if num_qubits < 0:
            raise ValueError(f"num_qubits must be ≥ 0, got {num_qubits}")
        zeros = np.zeros(num_qubits, dtype=np.uint8)
        return cls(zeros, zeros)

    @classmethod
    def from_str(cls, text: str) -> "PauliString":
        """
        Parse text such as ``"+XYZ"``, ``"-X_Z"`` or ``"IZZ"``.

        ``I`` and ``_`` both denote identity. Letters are case-insensitive.

        Raises
        ------
        ValueError
            If the text contains anything besides an optional sign and
            Pauli letters.
        """
        body = text.strip()
        sign = False
        if body[:1] in ("+", "-"):
            sign = body[0] == "-"
            body = body[1:]
        xs = []
        zs = []
        for ch in body.upper():
            if ch in ("I", "_"):
                xs.append(0)
                zs.append(0)
            elif ch == "X":
                xs.append(1)
                zs.append(0)
            elif ch == "Y":
                xs.append(1)
                zs.append(1)
            elif ch == "Z":
                xs.append(0)
                zs.append(1)
            else:
                raise ValueError(f"Invalid Pauli character {ch!r} in {text!r}")
        return cls(xs, zs, sign)

    @classmethod
    def from_letters(cls, letters: dict, num_qubits: int, sign: bool = False) -> "PauliString":
        """Build a string from a ``{qubit: "X"|"Y"|"Z"}`` mapping."""
        result = cls.identity(num_qubits)
        for q, letter in letters.items():
            if not (0 <= q < num_qubits):
                raise ValueError(f"qubit {q} out of range [0, {num_qubits})")
            result.set_letter(q, letter)
        result.sign = bool(sign)
        return result

    def copy(self) -> "PauliString":
        p = PauliString.__new__(PauliString)
        p.xs = self.xs.copy()
        p.zs = self.zs.copy()
        p.sign = self.sign
        return p

    # ─── Per-qubit access ────────────────────────────────────────────

    def __len__(self) -> int:
        return int(self.xs.shape[0])

    def letter(self, q: int) -> str:
        """Letter (``"I"``, ``"X"``, ``"Y"``, ``"Z"``) acting on qubit q."""
        return _LETTERS[int(self.xs[q]) + 2 * int(self.zs[q])]

    def set_letter(self, q: int, letter: str) -> None:
        letter = letter.upper()
        if letter in ("I", "_"):
            self.xs[q], self.zs[q] = 0, 0
        elif letter == "X":
            self.xs[q], self.zs[q] = 1, 0
        elif letter == "Y":
            self.xs[q], self.zs[q] = 1, 1
        elif letter == "Z":
            self.xs[q], self.zs[q] = 0, 1
        else:
            raise ValueError(f"Invalid Pauli letter {letter!r}")

    @property
    def weight(self) -> int:
        """Number of non-identity letters."""
        return int(np.count_nonzero(self.xs | self.zs))

    def is_identity(self) -> bool:
        return not (self.xs.any() or self.zs.any())

    def support(self) -> list:
        """Qubits on which the string acts non-trivially."""
        return [int(q) for q in np.flatnonzero(self.xs | self.zs)]

    # ─── Algebra ─────────────────────────────────────────────────────

    def commutes(self, other: "PauliString") -> bool:
        """True iff the two strings commute (symplectic product is even)."""
        if len(other) != len(self):
            raise ValueError(
                f"Pauli strings have different lengths: {len(self)} vs {len(other)}"
            )
        anti = np.sum((self.xs & other.zs) ^ (self.zs & other.xs))
        return int(anti) % 2 == 0

    def __mul__(self, other: "PauliString") -> "FlexPauliString":
        if not isinstance(other, PauliString):
            return NotImplemented
        if len(other) != len(self):
            raise ValueError(
                f"Pauli strings have different lengths: {len(self)} vs {len(other)}"
            )
        log_i = product_log_i(self.xs, self.zs, other.xs, other.zs)
        log_i += 2 * (int(self.sign) + int(other.sign))
        unsigned = PauliString.__new__(PauliString)
        unsigned.xs = self.xs ^ other.xs
        unsigned.zs = self.zs ^ other.zs
        unsigned.sign = False
        return FlexPauliString.from_log_i(unsigned, log_i)

    def __neg__(self) -> "PauliString":
        p = self.copy()
        p.sign = not p.sign
        return p

    def __eq__(self, other) -> bool:
        if not isinstance(other, PauliString):
            return NotImplemented
        return (
            self.sign == other.sign
            and np.array_equal(self.xs, other.xs)
            and np.array_equal(self.zs, other.zs)
        )

    __hash__ = None

    # ─── Dense representations ───────────────────────────────────────

    def apply_to(self, amplitudes, little_endian: bool = True) -> np.ndarray:
        """
        Apply the Pauli operator to a state vector (or to each column of a matrix).

        Uses ``P|j⟩ = (-1)^sign · i^{|x∧z|} · (-1)^{|j∧z|} · |j ⊕ x⟩``
        without building the dense operator.

        Parameters
        ----------
        amplitudes : array-like
            Array whose first axis has length ``2**len(self)``.
        little_endian : bool
            If True, qubit q is bit q of the basis index; otherwise qubit 0
            is the most significant bit.
        """
        amps = np.asarray(amplitudes, dtype=np.complex128)
        n = len(self)
        dim = 1 << n
        if amps.shape[0] != dim:
            raise ValueError(
                f"Expected leading dimension {dim} for {n} qubits, got {amps.shape[0]}"
            )
        indices = np.arange(dim)
        flip = 0
        parity = np.zeros(dim, dtype=np.int64)
        for q in range(n):
            bit = q if little_endian else n - 1 - q
            if self.xs[q]:
                flip |= 1 << bit
            if self.zs[q]:
                parity ^= (indices >> bit) & 1
        phase = _I_POWERS[int(np.sum(self.xs & self.zs)) % 4]
        if self.sign:
            phase = -phase
        factors = phase * (1 - 2 * parity)
        factors = factors.reshape((dim,) + (1,) * (amps.ndim - 1))
        out = np.empty_like(amps)
        out[indices ^ flip] = factors * amps
        return out

    def to_unitary_matrix(self, little_endian: bool = True) -> np.ndarray:
        """Dense ``2^n x 2^n`` matrix of the operator."""
        return self.apply_to(np.eye(1 << len(self), dtype=np.complex128), little_endian)

    # ─── Text ────────────────────────────────────────────────────────

    def __str__(self) -> str:
        letters = "".join(self.letter(q) for q in range(len(self)))
        return ("-" if self.sign else "+") + letters

    def __repr__(self) -> str:
        return f'PauliString("{self}")'


class FlexPauliString:
    """
    A Pauli string whose phase may be any of ``+1, -1, +i, -i``.

    Stored as an unsigned-or-negated :class:`PauliString` (``value``) plus an
    ``imag`` flag contributing a factor of ``i``.
    """

    __slots__ = ("value", "imag")

    def __init__(self, value: Union[PauliString, str], imag: bool = False):
        if isinstance(value, str):
            value = PauliString.from_str(value)
        self.value = value.copy()
        self.imag = bool(imag)

    @classmethod
    def from_log_i(cls, pauli: PauliString, log_i: int) -> "FlexPauliString":
        """Attach the phase ``i^log_i`` to an unsigned Pauli string."""
        log_i %= 4
        value = pauli.copy()
        value.sign = log_i >= 2
        return cls(value, imag=bool(log_i & 1))

    @classmethod
    def from_str(cls, text: str) -> "FlexPauliString":
        """Parse text such as ``"+iXZ"``, ``"-iY"`` or ``"-Z_"``."""
        body = text.strip()
        sign = False
        if body[:1] in ("+", "-"):
            sign = body[0] == "-"
            body = body[1:]
        imag = body[:1] == "i"
        if imag:
            body = body[1:]
        value = PauliString.from_str(body)
        value.sign = sign
        return cls(value, imag)

    @property
    def phase(self) -> complex:
        p = 1j if self.imag else 1
        return -p if self.value.sign else p

    @property
    def log_i(self) -> int:
        return 2 * int(self.value.sign) + int(self.imag)

    def __len__(self) -> int:
        return len(self.value)

    def __mul__(self, other) -> "FlexPauliString":
        if isinstance(other, PauliString):
            other = FlexPauliString(other)
        if not isinstance(other, FlexPauliString):
            return NotImplemented
        left = self.value.copy()
        right = other.value.copy()
        left.sign = right.sign = False
        product = left * right
        log_i = product.log_i + self.log_i + other.log_i
        unsigned = product.value
        unsigned.sign = False
        return FlexPauliString.from_log_i(unsigned, log_i)

    def __eq__(self, other) -> bool:
        if isinstance(other, PauliString):
            other = FlexPauliString(other)
        if not isinstance(other, FlexPauliString):
            return NotImplemented
        return self.imag == other.imag and self.value == other.value

    __hash__ = None

    def __str__(self) -> str:
        text = str(self.value)
        return text[0] + ("i" if self.imag else "") + text[1:]

    def __repr__(self) -> str:
        return f'FlexPauliString("{self}")'


def as_pauli_string(value: Union[PauliString, str]) -> PauliString:
    """Accept either a PauliString or its text form."""
    if isinstance(value, PauliString):
        return value
    if isinstance(value, str):
        return PauliString.from_str(value)
    raise TypeError(f"Expected PauliString or str, got {type(value).__name__}")


def pauli_strings(values: Iterable[Union[PauliString, str]]) -> list:
    return [as_pauli_string(v) for v in values]
