"""
Error-correction analysis: detector / observable targets and their
detecting regions.

Usage:
    from tiny_clifford.error_correction import circuit_to_detecting_regions

    circuit = Circuit.from_text('''
        R 0
        TICK
        H 0
        TICK
        M 0
        DETECTOR rec[-1]
    ''')
    regions = circuit_to_detecting_regions(circuit)
"""

from .detecting_regions import DemTarget, circuit_to_detecting_regions

__all__ = ["DemTarget", "circuit_to_detecting_regions"]
