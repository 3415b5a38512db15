"""
Pauli Error Model Conversions
=============================
Converts between parameterizations of one- and two-qubit Pauli channels.

Models:
- Independent: X, Y and Z errors each fire on their own coin flip
- Disjoint: exactly one of X, Y, Z (or nothing) happens
- Depolarizing: a single total probability spread uniformly over the
  non-identity Paulis

Usage:
    from tiny_clifford.noise import independent_to_disjoint_xyz_errors

    disjoint = independent_to_disjoint_xyz_errors(0.1, 0.1, 0.1)
    ok, independent = try_disjoint_to_independent_xyz_errors_approx(*disjoint)
"""

from __future__ import annotations

import logging
from typing import NamedTuple, Optional, Tuple

import numpy as np

from ..config import DEFAULT_CONFIG, ConversionConfig
from ..errors import InvalidArgument

logger = logging.getLogger(__name__)

__all__ = [
    "XYZProbabilities",
    "independent_to_disjoint_xyz_errors",
    "try_disjoint_to_independent_xyz_errors_approx",
    "depolarize1_probability_to_independent_per_channel_probability",
    "depolarize2_probability_to_independent_per_channel_probability",
    "independent_per_channel_probability_to_depolarize1_probability",
    "independent_per_channel_probability_to_depolarize2_probability",
]


class XYZProbabilities(NamedTuple):
    """Probabilities of X, Y and Z errors."""

    x: float
    y: float
    z: float


def _check_probability(name: str, p: float, upper: float = 1.0) -> None:
    if not 0 <= p <= upper:
        raise InvalidArgument(f"{name} must be in [0, {upper:g}], got {p}")


# =============================================================================
# Independent <-> disjoint single-qubit errors
# =============================================================================

def _combine_independent(x: float, y: float, z: float) -> Tuple[float, float, float]:
    ix, iy, iz = 1 - x, 1 - y, 1 - z
    return (
        x * iy * iz + ix * y * z,
        ix * y * iz + x * iy * z,
        ix * iy * z + x * y * iz,
    )


def independent_to_disjoint_xyz_errors(x: float, y: float, z: float) -> XYZProbabilities:
    """
    Disjoint X/Y/Z probabilities equivalent to independent X, Y, Z errors.

    Two independent errors combine into the third Pauli (XY ~ Z) and all
    three cancel to the identity, so e.g. the net X probability is
    ``x(1-y)(1-z) + (1-x)yz``.

    Raises
    ------
    InvalidArgument
        If any probability is outside [0, 1].
    """
    for name, p in (("x", x), ("y", y), ("z", z)):
        _check_probability(name, p)
    return XYZProbabilities(*_combine_independent(x, y, z))


def _disjoint_jacobian(x: float, y: float, z: float) -> np.ndarray:
    ix, iy, iz = 1 - x, 1 - y, 1 - z
    return np.array([
        [iy * iz - y * z, ix * z - x * iz, ix * y - x * iy],
        [iy * z - y * iz, ix * iz - x * z, x * iy - ix * y],
        [y * iz - iy * z, x * iz - ix * z, ix * iy - x * y],
    ])


def try_disjoint_to_independent_xyz_errors_approx(
    x: float,
    y: float,
    z: float,
    max_steps: Optional[int] = None,
    *,
    config: Optional[ConversionConfig] = None,
) -> Tuple[bool, XYZProbabilities]:
    """
    Independent X/Y/Z probabilities reproducing the given disjoint ones.

    There is no closed form, so Newton's method is run on
    :func:`independent_to_disjoint_xyz_errors` starting from the disjoint
    values themselves.

    Parameters
    ----------
    x, y, z : float
        Disjoint error probabilities.
    max_steps : int, optional
        Iteration cap; defaults to ``config.approx_max_steps``.
    config : ConversionConfig, optional
        Supplies the step cap and the convergence tolerance.

    Returns
    -------
    (bool, XYZProbabilities)
        ``success`` is False when the iteration did not converge, hit a
        singular Jacobian or left [0, 1] by more than
        ``config.approx_tolerance``; the best estimate is returned either
        way. Successful results are clipped into [0, 1].
    """
    config = config or DEFAULT_CONFIG
    steps = config.approx_max_steps if max_steps is None else max_steps
    target = np.array([x, y, z], dtype=np.float64)
    guess = target.copy()
    if not np.all(np.isfinite(target)):
        return False, XYZProbabilities(*map(float, guess))

    for step in range(steps + 1):
        residual = np.array(_combine_independent(*guess)) - target
        if np.max(np.abs(residual)) <= config.approx_tolerance:
            # Roots on the boundary can land a rounding error outside [0, 1]
            slack = config.approx_tolerance
            in_range = bool(np.all((guess >= -slack) & (guess <= 1 + slack)))
            logger.debug("Disjoint->independent converged in %d steps (in range: %s)", step, in_range)
            if in_range:
                guess = np.clip(guess, 0, 1)
            return in_range, XYZProbabilities(*map(float, guess))
        if step == steps:
            break
        try:
            guess = guess - np.linalg.solve(_disjoint_jacobian(*guess), residual)
        except np.linalg.LinAlgError:
            logger.debug("Disjoint->independent hit a singular Jacobian at step %d", step)
            return False, XYZProbabilities(*map(float, guess))
        if not np.all(np.isfinite(guess)):
            return False, XYZProbabilities(*map(float, guess))

    logger.debug("Disjoint->independent did not converge in %d steps", steps)
    return False, XYZProbabilities(*map(float, guess))


# =============================================================================
# Depolarizing <-> independent per-channel
# =============================================================================

def depolarize1_probability_to_independent_per_channel_probability(p: float) -> float:
    """
    Per-channel probability q such that independent X, Y, Z errors of
    probability q compose to DEPOLARIZE1(p).

    Only ``p <= 3/4`` is reachable: that is the fully mixing channel.
    """
    _check_probability("depolarize1 probability", p, 0.75)
    return float(0.5 - 0.5 * np.sqrt(1 - (4 * p) / 3))


def depolarize2_probability_to_independent_per_channel_probability(p: float) -> float:
    """
    Per-channel probability q such that the 15 independent two-qubit Pauli
    errors of probability q compose to DEPOLARIZE2(p). Requires ``p <= 15/16``.
    """
    _check_probability("depolarize2 probability", p, 15 / 16)
    return 0.5 - 0.5 * (1 - (16 * p) / 15) ** 0.125


def independent_per_channel_probability_to_depolarize1_probability(p: float) -> float:
    """Inverse of :func:`depolarize1_probability_to_independent_per_channel_probability`."""
    _check_probability("per-channel probability", p)
    q = (1 - 2 * p) ** 2
    return 0.75 * (1 - q)


def independent_per_channel_probability_to_depolarize2_probability(p: float) -> float:
    """Inverse of :func:`depolarize2_probability_to_independent_per_channel_probability`."""
    _check_probability("per-channel probability", p)
    q = (1 - 2 * p) ** 8
    return 15 / 16 * (1 - q)
