"""
Command-line interface for tiny-clifford.

Usage:
    tiny-clifford synth +XX +ZZ --method graph_state
    tiny-clifford unitary +XX +ZZ
    tiny-clifford depolarize 1 0.1
    tiny-clifford disjoint 0.1 0.1 0.1 --inverse
"""
import argparse
import logging
import sys

import numpy as np


def _completed_tableau(args):
    from ..conversions import stabilizers_to_tableau

    return stabilizers_to_tableau(
        args.stabilizers,
        allow_redundant=args.allow_redundant,
        allow_underconstrained=args.allow_underconstrained,
    )


def cmd_synth(args):
    """Synthesize a circuit preparing the state fixed by the stabilizers."""
    from ..conversions import tableau_to_circuit

    tableau = _completed_tableau(args)
    circuit = tableau_to_circuit(tableau, method=args.method)
    print(circuit)


def cmd_unitary(args):
    """Print the unitary of the tableau completed from the stabilizers."""
    from ..conversions import tableau_to_unitary

    tableau = _completed_tableau(args)
    matrix = tableau_to_unitary(tableau, little_endian=not args.big_endian)
    with np.printoptions(precision=args.precision, suppress=True, linewidth=120):
        print(matrix)


def cmd_depolarize(args):
    """Convert between depolarizing and per-channel probabilities."""
    from .. import noise

    if args.qubits == 1:
        forward = noise.depolarize1_probability_to_independent_per_channel_probability
        backward = noise.independent_per_channel_probability_to_depolarize1_probability
    else:
        forward = noise.depolarize2_probability_to_independent_per_channel_probability
        backward = noise.independent_per_channel_probability_to_depolarize2_probability

    if args.inverse:
        print(f"DEPOLARIZE{args.qubits} probability: {backward(args.p):.12g}")
    else:
        print(f"Independent per-channel probability: {forward(args.p):.12g}")


def cmd_disjoint(args):
    """Convert between independent and disjoint X/Y/Z error probabilities."""
    from .. import noise

    if args.inverse:
        ok, result = noise.try_disjoint_to_independent_xyz_errors_approx(
            args.x, args.y, args.z, max_steps=args.max_steps
        )
        if not ok:
            print("Did not converge to valid independent probabilities", file=sys.stderr)
            return 1
        label = "Independent"
    else:
        result = noise.independent_to_disjoint_xyz_errors(args.x, args.y, args.z)
        label = "Disjoint"
    print(f"{label}: x={result.x:.12g} y={result.y:.12g} z={result.z:.12g}")
    return 0


def cmd_info(args):
    """Show tiny-clifford information."""
    from .. import __version__
    from ..gates import default_registry

    registry = default_registry()
    unitary = [g.name for g in registry if g.is_unitary]
    other = [g.name for g in registry if not g.is_unitary]
    print(f"""
tiny-clifford v{__version__}
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

Conversions between stabilizer tableaus, circuits, unitaries and
state vectors.

Unitary gates ({len(unitary)}):
  {' '.join(unitary)}

Other instructions ({len(other)}):
  {' '.join(other)}

Usage:
  tiny-clifford synth +XX +ZZ
  tiny-clifford unitary +X -Z --big-endian
  tiny-clifford depolarize 2 0.01
  tiny-clifford disjoint 0.1 0.1 0.1
""")


def build_parser():
    parser = argparse.ArgumentParser(
        prog='tiny-clifford',
        description='Stabilizer tableau and circuit conversions'
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    subparsers = parser.add_subparsers(dest='command', help='Commands')

    def add_stabilizer_args(sub):
        sub.add_argument('stabilizers', nargs='+', metavar='STAB',
                         help='Pauli strings such as +XX or -Z_Z')
        sub.add_argument('--allow-redundant', action='store_true',
                         help='Drop stabilizers implied by earlier ones')
        sub.add_argument('--allow-underconstrained', action='store_true',
                         help='Accept fewer stabilizers than qubits')

    # Synth command
    synth_parser = subparsers.add_parser('synth', help='Stabilizers to circuit')
    add_stabilizer_args(synth_parser)
    synth_parser.add_argument('--method', default='elimination',
                              choices=['elimination', 'graph_state', 'mpp'],
                              help='Synthesis method')
    synth_parser.set_defaults(func=cmd_synth)

    # Unitary command
    unitary_parser = subparsers.add_parser('unitary', help='Stabilizers to unitary matrix')
    add_stabilizer_args(unitary_parser)
    unitary_parser.add_argument('--big-endian', action='store_true',
                                help='Qubit 0 is the most significant index bit')
    unitary_parser.add_argument('--precision', type=int, default=3, help='Printed decimals')
    unitary_parser.set_defaults(func=cmd_unitary)

    # Depolarize command
    depolarize_parser = subparsers.add_parser('depolarize', help='Depolarizing channel conversions')
    depolarize_parser.add_argument('qubits', type=int, choices=[1, 2], help='Channel width')
    depolarize_parser.add_argument('p', type=float, help='Probability to convert')
    depolarize_parser.add_argument('--inverse', action='store_true',
                                   help='Per-channel probability to depolarizing probability')
    depolarize_parser.set_defaults(func=cmd_depolarize)

    # Disjoint command
    disjoint_parser = subparsers.add_parser('disjoint', help='Independent/disjoint X Y Z errors')
    disjoint_parser.add_argument('x', type=float)
    disjoint_parser.add_argument('y', type=float)
    disjoint_parser.add_argument('z', type=float)
    disjoint_parser.add_argument('--inverse', action='store_true',
                                 help='Disjoint to independent (approximate)')
    disjoint_parser.add_argument('--max-steps', type=int, default=None,
                                 help='Iteration cap for --inverse')
    disjoint_parser.set_defaults(func=cmd_disjoint)

    # Info command
    info_parser = subparsers.add_parser('info', help='Show tiny-clifford info')
    info_parser.set_defaults(func=cmd_info)
    return parser


def main(argv=None):
    """Main CLI entry point."""
    from ..errors import TinyCliffordError

    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    if args.command is None:
        parser.print_help()
        return 0

    try:
        return args.func(args) or 0
    except (TinyCliffordError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
