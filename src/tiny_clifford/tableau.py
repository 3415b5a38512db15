"""
Stabilizer tableau of a Clifford operation.

A Clifford operation C on n qubits is determined (up to global phase) by how
it conjugates the 2n generators X₀…Xₙ₋₁, Z₀…Zₙ₋₁. The tableau stores those
images as binary vectors over GF(2):

Tableau layout (2n rows):
  Row k (0 ≤ k < n):   C Xₖ C†   (destabilizer k)
  Row k (n ≤ k < 2n):  C Zₖ₋ₙ C† (stabilizer k-n)
  Each row: [x₀ ... xₙ₋₁ | z₀ ... zₙ₋₁ | r]

Applied to the state |0…0⟩, rows n..2n-1 are the stabilizers of C|0…0⟩.

Reference:
    Aaronson, Gottesman, "Improved simulation of stabilizer circuits",
    PRA 70, 052328 (2004). arXiv:quant-ph/0406196

Usage:
    >>> from tiny_clifford import PauliString, Tableau
    >>> h = Tableau.from_conjugated_generators(
    ...     xs=[PauliString.from_str("Z")], zs=[PauliString.from_str("X")])
    >>> h(PauliString.from_str("-Y"))
    PauliString("+Y")
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from .pauli import PauliString, product_log_i


class Tableau:
    """
    Binary symplectic tableau of a Clifford operation.

    Parameters
    ----------
    num_qubits : int
        Number of qubits. The tableau starts as the identity.
    """

    __slots__ = ("n", "x", "z", "r")

    def __init__(self, num_qubits: int):
        if num_qubits < 0:
            raise ValueError(f"num_qubits must be ≥ 0, got {num_qubits}")
        self.n = num_qubits
        self.x = np.zeros((2 * num_qubits, num_qubits), dtype=np.uint8)
        self.z = np.zeros((2 * num_qubits, num_qubits), dtype=np.uint8)
        self.r = np.zeros(2 * num_qubits, dtype=np.uint8)
        for k in range(num_qubits):
            self.x[k, k] = 1
            self.z[num_qubits + k, k] = 1

    @classmethod
    def from_conjugated_generators(
        cls, xs: Sequence[PauliString], zs: Sequence[PauliString]
    ) -> "Tableau":
        """
        Build a tableau from the images of each X and Z generator.

        The result is not checked for validity; call :meth:`is_valid`.

        Raises
        ------
        ValueError
            If the number of images or their lengths do not match.
        """
        n = len(xs)
        if len(zs) != n:
            raise ValueError(f"Got {n} X images but {len(zs)} Z images")
        t = cls(n)
        for k, p in enumerate(list(xs) + list(zs)):
            if len(p) != n:
                raise ValueError(f"Generator image {p} has length {len(p)}, expected {n}")
            t._set_row(k, p)
        return t

    def copy(self) -> "Tableau":
        """Return a deep copy of the tableau."""
        t = Tableau.__new__(Tableau)
        t.n = self.n
        t.x = self.x.copy()
        t.z = self.z.copy()
        t.r = self.r.copy()
        return t

    @property
    def num_qubits(self) -> int:
        return self.n

    def __len__(self) -> int:
        return self.n

    # ─── Rows ────────────────────────────────────────────────────────

    def _row(self, row: int) -> PauliString:
        p = PauliString.__new__(PauliString)
        p.xs = self.x[row].copy()
        p.zs = self.z[row].copy()
        p.sign = bool(self.r[row])
        return p

    def _set_row(self, row: int, pauli: PauliString) -> None:
        self.x[row] = pauli.xs
        self.z[row] = pauli.zs
        self.r[row] = int(pauli.sign)

    def x_output(self, k: int) -> PauliString:
        """Image of X_k."""
        if not (0 <= k < self.n):
            raise IndexError(f"qubit {k} out of range [0, {self.n})")
        return self._row(k)

    def z_output(self, k: int) -> PauliString:
        """Image of Z_k."""
        if not (0 <= k < self.n):
            raise IndexError(f"qubit {k} out of range [0, {self.n})")
        return self._row(self.n + k)

    def stabilizers(self) -> List[str]:
        """Return list of stabilizer generator strings (the Z images)."""
        return [str(self._row(self.n + k)) for k in range(self.n)]

    def destabilizers(self) -> List[str]:
        """Return list of destabilizer generator strings (the X images)."""
        return [str(self._row(k)) for k in range(self.n)]

    # ─── Conjugation ─────────────────────────────────────────────────

    def __call__(self, pauli: PauliString) -> PauliString:
        """
        Conjugate a Pauli string by the operation: returns ``C P C†``.

        ``P = (-1)^s i^{x·z} ∏ X_k^{x_k} ∏ Z_k^{z_k}``, so the image is the
        ordered product of the corresponding rows with the same prefactor.
        """
        if len(pauli) != self.n:
            raise ValueError(f"Pauli string has length {len(pauli)}, expected {self.n}")
        n = self.n
        acc_x = np.zeros(n, dtype=np.uint8)
        acc_z = np.zeros(n, dtype=np.uint8)
        log_i = int(np.sum(pauli.xs & pauli.zs)) + 2 * int(pauli.sign)
        rows = [k for k in range(n) if pauli.xs[k]] + [n + k for k in range(n) if pauli.zs[k]]
        for row in rows:
            log_i += 2 * int(self.r[row])
            log_i += product_log_i(acc_x, acc_z, self.x[row], self.z[row])
            acc_x ^= self.x[row]
            acc_z ^= self.z[row]
        log_i %= 4
        if log_i & 1:
            raise ValueError("Tableau does not map Hermitian Paulis to Hermitian Paulis")
        result = PauliString.__new__(PauliString)
        result.xs = acc_x
        result.zs = acc_z
        result.sign = log_i == 2
        return result

    def then(self, second: "Tableau") -> "Tableau":
        """Tableau of applying ``self`` first and ``second`` afterwards."""
        if second.n != self.n:
            raise ValueError(f"Cannot compose tableaus of {self.n} and {second.n} qubits")
        result = Tableau(self.n)
        for row in range(2 * self.n):
            result._set_row(row, second(self._row(row)))
        return result

    def inverse(self) -> "Tableau":
        """
        Tableau of the inverse operation.

        The unsigned part is the symplectic inverse ``Ω Mᵀ Ω``; each sign is
        then chosen so that conjugating the candidate gives back the
        positive generator.
        """
        n = self.n
        m = np.concatenate([self.x, self.z], axis=1).astype(np.int64)
        omega = np.zeros((2 * n, 2 * n), dtype=np.int64)
        omega[:n, n:] = np.eye(n, dtype=np.int64)
        omega[n:, :n] = np.eye(n, dtype=np.int64)
        inv = (omega @ m.T @ omega) % 2

        result = Tableau(n)
        result.x = inv[:, :n].astype(np.uint8)
        result.z = inv[:, n:].astype(np.uint8)
        result.r = np.zeros(2 * n, dtype=np.uint8)
        for row in range(2 * n):
            if self(result._row(row)).sign:
                result.r[row] = 1
        return result

    def is_valid(self) -> bool:
        """
        True iff the images satisfy the canonical commutation relations.

        X images commute among themselves, Z images commute among
        themselves, and X_j anticommutes with Z_k exactly when j == k.
        """
        n = self.n
        m = np.concatenate([self.x, self.z], axis=1).astype(np.int64)
        omega = np.zeros((2 * n, 2 * n), dtype=np.int64)
        omega[:n, n:] = np.eye(n, dtype=np.int64)
        omega[n:, :n] = np.eye(n, dtype=np.int64)
        return bool(np.array_equal((m @ omega @ m.T) % 2, omega))

    # ─── In-place gate application ───────────────────────────────────

    def _conjugation_table(self):
        """Images of all 4^n Pauli strings, indexed by Σ (x_j + 2 z_j) 4^j."""
        n = self.n
        size = 4 ** n
        xs = np.zeros((size, n), dtype=np.uint8)
        zs = np.zeros((size, n), dtype=np.uint8)
        rs = np.zeros(size, dtype=np.uint8)
        for code in range(size):
            p = PauliString.identity(n)
            for j in range(n):
                p.xs[j] = (code >> (2 * j)) & 1
                p.zs[j] = (code >> (2 * j + 1)) & 1
            image = self(p)
            xs[code] = image.xs
            zs[code] = image.zs
            rs[code] = int(image.sign)
        return xs, zs, rs

    def _check_targets(self, gate: "Tableau", targets: Sequence[int]) -> List[int]:
        targets = [int(t) for t in targets]
        if len(targets) != gate.n:
            raise ValueError(f"Gate acts on {gate.n} qubits but got {len(targets)} targets")
        if len(set(targets)) != len(targets):
            raise ValueError(f"Duplicate targets: {targets}")
        for t in targets:
            if not (0 <= t < self.n):
                raise ValueError(f"target {t} out of range [0, {self.n})")
        return targets

    def inplace_scatter_append(self, gate: "Tableau", targets: Sequence[int]) -> None:
        """
        Apply ``gate`` to ``targets`` after the current operation.

        Every row is conjugated by the gate on the target qubits; rows are
        processed together through a lookup table of the gate's action.
        """
        targets = self._check_targets(gate, targets)
        table_x, table_z, table_r = gate._conjugation_table()
        codes = np.zeros(2 * self.n, dtype=np.int64)
        for j, t in enumerate(targets):
            codes |= self.x[:, t].astype(np.int64) << (2 * j)
            codes |= self.z[:, t].astype(np.int64) << (2 * j + 1)
        self.x[:, targets] = table_x[codes]
        self.z[:, targets] = table_z[codes]
        self.r ^= table_r[codes]

    def inplace_scatter_prepend(self, gate: "Tableau", targets: Sequence[int]) -> None:
        """Apply ``gate`` to ``targets`` before the current operation."""
        targets = self._check_targets(gate, targets)
        n = self.n
        new_rows = {}
        for j, t in enumerate(targets):
            for local, row in ((gate.x_output(j), t), (gate.z_output(j), n + t)):
                full = PauliString.identity(n)
                full.xs[targets] = local.xs
                full.zs[targets] = local.zs
                full.sign = local.sign
                new_rows[row] = self(full)
        for row, pauli in new_rows.items():
            self._set_row(row, pauli)

    # ─── Comparison & display ────────────────────────────────────────

    def __eq__(self, other) -> bool:
        if not isinstance(other, Tableau):
            return NotImplemented
        return (
            self.n == other.n
            and np.array_equal(self.x, other.x)
            and np.array_equal(self.z, other.z)
            and np.array_equal(self.r, other.r)
        )

    __hash__ = None

    def __repr__(self) -> str:
        xs = ", ".join(f'"{s}"' for s in self.destabilizers())
        zs = ", ".join(f'"{s}"' for s in self.stabilizers())
        return f"Tableau.from_conjugated_generators(xs=[{xs}], zs=[{zs}])"

    def __str__(self) -> str:
        lines = [f"Tableau({self.n} qubits)"]
        for k in range(self.n):
            lines.append(f"  X{k} -> {self._row(k)}")
        for k in range(self.n):
            lines.append(f"  Z{k} -> {self._row(self.n + k)}")
        return "\n".join(lines)
