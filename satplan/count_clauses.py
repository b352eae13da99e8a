"""
count_clauses.py - Print per-category CNF clause counts at each horizon,
                   solving each one, until a plan is found.

Usage:
    python -m satplan.count_clauses -o <domain.pddl> -f <problem.pddl> [-maxtime <n>]

Every horizon block ends with an ``<n> actions`` line (0 when the horizon
is unsatisfiable); ``run_sat_experiments.py`` relies on that layout.
"""
from __future__ import annotations
import argparse
import sys

from satplan.data_structures import (
    Problem, SolverSpec, Sat, STATUS_NAMES, DEFAULT_MIN_HORIZON, DEFAULT_SOLVER,
)
from satplan.decoder import decode
from satplan.dimacs import CNFInstance, to_dimacs
from satplan.indexer import VariableIndexer
from satplan.pddl_loader import load_problem
from satplan.sat_interface import solve_cnf_text
from satplan.strips2wff import STRIPSEncoder


def count_horizons(problem: Problem, mintime: int, maxtime: int,
                   spec: SolverSpec, keep_going: bool = False) -> int:
    """Print one statistics block per horizon.  Returns the solved horizon or 0."""
    solved = 0
    for horizon in range(mintime, maxtime + 1):
        indexer = VariableIndexer.for_problem(problem, horizon)
        enc = STRIPSEncoder(problem, indexer)
        enc.encode()
        st = enc.stats

        print(f"Horizon t: {horizon}")
        print(f"  Vars:          {indexer.num_vars:>6,}")
        print(f"  Total Clauses: {st.total:>6,}")
        print(f"  Init:          {st.init:>6,}")
        print(f"  Goal:          {st.goal:>6,}")
        print(f"  Precond:       {st.precond:>6,}")
        print(f"  Effects:       {st.effect:>6,}")
        print(f"  Frame:         {st.frame:>6,}")
        print(f"  Mutex AMO:     {st.mutex:>6,}")

        result = solve_cnf_text(to_dimacs(CNFInstance.from_encoder(enc)), spec)
        if result.status == Sat:
            _, plan = decode(result.model, indexer, problem)
            for step, action in plan:
                print(f"    {step + 1}: {action.name}")
            print(f"  {len(plan)} actions")
            print()
            if not solved:
                solved = horizon
            if not keep_going:
                break
        else:
            print(f"  {STATUS_NAMES[result.status]} at this horizon")
            print(f"  0 actions")
            print()
    return solved


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description='Count CNF clauses per category at each horizon, then solve'
    )
    parser.add_argument('-o', '--domain', required=True)
    parser.add_argument('-f', '--problem', required=True)
    parser.add_argument('-mintime', type=int, default=DEFAULT_MIN_HORIZON)
    parser.add_argument('-maxtime', type=int, default=10)
    parser.add_argument('-solver', default=DEFAULT_SOLVER)
    parser.add_argument('-all', action='store_true',
                        help='Keep going after the first satisfiable horizon')
    args = parser.parse_args(argv)

    problem = load_problem(args.domain, args.problem)
    print(f"Ground actions: {problem.num_actions}")
    print(f"Fluents:        {problem.num_fluents}")
    print()

    solved = count_horizons(problem, args.mintime, args.maxtime,
                            SolverSpec(solver_name=args.solver),
                            keep_going=args.all)
    return 0 if solved else 1


if __name__ == '__main__':
    sys.exit(main())
