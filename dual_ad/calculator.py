"""
Derivative calculator for

    f(x) = 5 + x^3 - ln((x^2 - 5)(4 - 3x)) / (x - 4)

Evaluates f and f' at a point with forward mode and reverse mode and prints
a tab-separated report. Exits with status 1 on a domain error.
"""

import argparse
import logging
import sys

from dual_ad.aad import (
    ADConfig, DEFAULT_CONFIG, DomainError, Constant, Power, Log, Division,
    evaluate, central_difference,
    input_node, constant_node, run_forward, run_backward, read_grad, read_value,
)
from dual_ad.aad.core.tape import use_tape
from dual_ad.aad.core.graph_utils import print_graph_summary
from dual_ad.aad.ops import log, pow
from dual_ad.aad.validate import check_log_argument, check_not_singular

logger = logging.getLogger(__name__)

SINGULAR_POINTS = (4.0,)
HEADER = "x0\tf(x0)\tForward f'(x0)\tBackward f'(x0)"


def inner_log_argument():
    """g(x) = (x^2 - 5)(4 - 3x), the argument of the logarithm."""
    return (Power(2) - Constant(5)) * (Constant(4) - Constant(3) * Power(1))


def build_forward_example(x0=None):
    """
    Forward-mode tree for f.

    When x0 is given, g(x0) > 0 and x0 != 4 are checked before the Log and
    the Division are wired in.
    """
    g = inner_log_argument()
    if x0 is not None:
        check_log_argument(g.eval(x0), f"ln({g})")
    log_g_over_x_minus_4 = Division(Log(g), Power(1) - Constant(4))
    if x0 is not None:
        check_not_singular(x0, SINGULAR_POINTS, str(log_g_over_x_minus_4))
    return (Constant(5) + Power(3)) - log_g_over_x_minus_4


def build_reverse_example(x0):
    """
    Reverse-mode graph for f at x0. Returns (tape, x, f).

    x feeds four parents (x^2, 3x, x - 4, x^3), so its grad is a sum over paths.
    """
    with use_tape() as tape:
        five = constant_node(5.0, name="5")
        four = constant_node(4.0, name="4")
        three = constant_node(3.0, name="3")

        x = input_node(x0, name="x")
        x2_minus_5 = pow(x, 2) - five
        four_minus_3x = four - three * x
        g = x2_minus_5 * four_minus_3x
        log_g = log(g, name="ln g")
        x_minus_4 = x - four
        f = (five + pow(x, 3)) - log_g / x_minus_4
        tape.output = f.handle
    return tape, x, f


def differentiate(x0, config=None, check=False, show_graph=False):
    """
    f(x0) with forward- and reverse-mode derivatives.

    Returns a dict with keys x0, value, forward, backward and, with
    check=True, finite_difference.
    """
    config = config or DEFAULT_CONFIG
    tree = build_forward_example(x0)
    value, forward = evaluate(tree, x0)
    logger.info("forward mode: f=%r f'=%r", value, forward)

    tape, x, f = build_reverse_example(x0)
    run_forward(tape)
    run_backward(tape, seed=config.seed, reset=config.reset_grads)
    backward = read_grad(tape, x)
    logger.info("reverse mode: f=%r f'=%r", read_value(tape, f), backward)
    if show_graph:
        print_graph_summary(tape, detailed=True)

    result = {'x0': float(x0), 'value': value, 'forward': forward, 'backward': backward}
    if check:
        result['finite_difference'] = central_difference(tree.eval, x0, config.fd_eps)
    return result


def format_report(result) -> str:
    row = f"{result['x0']:g}\t{result['value']:g}\t{result['forward']:g}\t{result['backward']:g}"
    return f"{HEADER}\n{row}"


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Forward- and reverse-mode derivative of "
                    "f(x) = 5 + x^3 - ln((x^2-5)(4-3x))/(x-4)",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument('--x0', type=float, default=1.5,
                        help='Evaluation point')
    parser.add_argument('--check', action='store_true',
                        help='Also compare against a central finite difference')
    parser.add_argument('--fd-eps', type=float, default=1e-5,
                        help='Finite-difference step used by --check')
    parser.add_argument('--show-graph', action='store_true',
                        help='Print the reverse-mode graph')
    parser.add_argument('--verbose', action='store_true',
                        help='Log intermediate results')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    config = ADConfig(fd_eps=args.fd_eps, verbose=args.verbose)
    logging.basicConfig(
        level=logging.INFO if config.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    try:
        result = differentiate(args.x0, config, args.check, args.show_graph)
    except DomainError as e:
        print(f"Domain Error: {e}", file=sys.stderr)
        return 1

    print(format_report(result))
    if args.check:
        fd = result['finite_difference']
        gap = max(abs(result['forward'] - fd), abs(result['backward'] - fd))
        agree = abs(result['forward'] - result['backward']) <= config.agreement_tol and gap <= config.fd_tol
        print(f"Finite difference f'(x0)\t{fd:g}")
        print(f"Agreement\t{'OK' if agree else 'MISMATCH'}")
        if not agree:
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
