#!/usr/bin/env python3
"""
satplan.py - CLI entry point for SATplan (STRIPS -> SAT).

Usage:
    python -m satplan -o <domain.pddl> -f <problem.pddl> [options]
"""

from __future__ import annotations
import argparse
import sys
import time as time_mod

from satplan.data_structures import (
    PlannerConfig, SolverSpec, PrintLit, PrintCNF, PrintModel,
    DEFAULT_MIN_HORIZON, DEFAULT_MAX_HORIZON, DEFAULT_SOLVER,
)
from satplan.errors import SATPlanError
from satplan.pddl_loader import load_problem
from satplan.planner import SATPlanner, print_plan
from satplan.sat_interface import SOLVER_CLASSES
from satplan.validate import validate_plan


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='satplan',
        description='SATplan - STRIPS planning as satisfiability',
    )
    parser.add_argument('-o', '--domain', required=True,
                        help='Domain PDDL file')
    parser.add_argument('-f', '--problem', required=True,
                        help='Problem PDDL file')
    parser.add_argument('-g', '--output', default=None,
                        help='Output plan file')
    parser.add_argument('-mintime', type=int, default=DEFAULT_MIN_HORIZON,
                        help=f'First horizon tried (default: {DEFAULT_MIN_HORIZON})')
    parser.add_argument('-maxauto', type=int, default=DEFAULT_MAX_HORIZON,
                        help=f'Max auto horizon (default: {DEFAULT_MAX_HORIZON})')
    parser.add_argument('-solver', default=DEFAULT_SOLVER,
                        choices=sorted(SOLVER_CLASSES),
                        help=f'PySAT solver (default: {DEFAULT_SOLVER})')
    parser.add_argument('-maxsec', type=float, default=0,
                        help='Time limit per solver call in seconds (0 = none)')
    parser.add_argument('-cnf', default=None,
                        help='Exchange each instance through this DIMACS file')
    parser.add_argument('-i', '--info', type=int, default=0,
                        help='Debug info level (0-2)')
    parser.add_argument('-printlit', action='store_true',
                        help='Print variable map')
    parser.add_argument('-printcnf', action='store_true',
                        help='Print DIMACS CNF')
    parser.add_argument('-printmodel', action='store_true',
                        help='Print the true variables of the SAT solution')
    parser.add_argument('-validate', action='store_true',
                        help='Simulate the plan and check it reaches the goal')
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    debug = args.info

    printflag = 0
    if args.printlit:
        printflag |= PrintLit
    if args.printcnf:
        printflag |= PrintCNF
    if args.printmodel:
        printflag |= PrintModel

    global_start = time_mod.time()

    print("SATplan (Python) - STRIPS to SAT")
    print(f"  Domain:  {args.domain}")
    print(f"  Problem: {args.problem}")
    print()

    try:
        config = PlannerConfig(
            min_horizon=args.mintime,
            max_horizon=args.maxauto,
            solver=SolverSpec(solver_name=args.solver, maxsec=args.maxsec),
            cnf_file=args.cnf,
            debug=debug,
            printflag=printflag,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        problem = load_problem(args.domain, args.problem, debug=debug)
    except SATPlanError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        print(f"Error loading PDDL files: {e}", file=sys.stderr)
        return 2

    planner = SATPlanner(config)
    try:
        result = planner.search(problem)
    except SATPlanError as e:
        print(f"Fatal: {e}", file=sys.stderr)
        return 2

    if result.found:
        print(f"Plan found at horizon {result.horizon}")
        try:
            print_plan(result.plan, args.output)
        except OSError as e:
            print(f"Cannot write plan file {args.output}: {e}", file=sys.stderr)
            return 2
        if args.validate:
            ok = validate_plan(problem, result.plan)
            print(f"Plan validation: {'OK' if ok else 'FAILED'}")
            if not ok:
                return 2
    else:
        print(f"No plan found up to horizon {config.max_horizon}")

    elapsed = time_mod.time() - global_start
    if debug >= 1:
        timing = planner.get_timing_stats()
        print()
        print(f"Total time: {elapsed:.2f} seconds")
        print("Timing breakdown:")
        print(f"  CNF generation: {timing['sat_encode_sec']:.3f}s")
        print(f"  SAT solve:      {timing['sat_solve_sec']:.3f}s "
              f"({timing['sat_calls']} calls)")

    return 0 if result.found else 1


if __name__ == '__main__':
    sys.exit(main())
