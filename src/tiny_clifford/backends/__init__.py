"""Simulation backends for tiny-clifford."""

from tiny_clifford.backends.statevector import VectorSimulator

__all__ = ["VectorSimulator"]
