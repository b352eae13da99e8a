"""
planner.py - Horizon search orchestration.

Tries horizons ``min_horizon, min_horizon + 1, ...`` in turn.  Every
attempt builds its own indexer, clause set and solver, runs them, and throws
them away; the first satisfiable horizon is decoded into the plan.
"""

from __future__ import annotations
import time as time_mod
from typing import Optional

from satplan.data_structures import (
    Problem, Plan, PlannerConfig, SatResult, SearchResult, AttemptRecord,
    Sat, Found, Exhausted, STATUS_NAMES,
    PrintLit, PrintCNF, PrintModel,
)
from satplan.decoder import decode, format_trace
from satplan.dimacs import CNFInstance, to_dimacs, write_dimacs
from satplan.errors import CNFExchangeError
from satplan.indexer import VariableIndexer
from satplan.sat_interface import solve_cnf_text
from satplan.strips2wff import STRIPSEncoder


class SATPlanner:
    """Orchestrates the STRIPS -> SAT planning search."""

    def __init__(self, config: Optional[PlannerConfig] = None):
        self.config = config or PlannerConfig()

        # Timing
        self._sat_encode_sec: float = 0.0
        self._sat_solve_sec: float = 0.0
        self._sat_calls: int = 0

    @property
    def debug(self) -> int:
        return self.config.debug

    @property
    def printflag(self) -> int:
        return self.config.printflag

    # ── Main search call ──────────────────────────────────────────────────

    def search(self, problem: Problem) -> SearchResult:
        """Find a plan of minimal horizon within the configured bounds.

        Returns a ``Found`` result with the plan, or an ``Exhausted`` result
        when no horizon up to ``max_horizon`` is satisfiable.  Format errors,
        solver timeouts and CNF file failures propagate.
        """
        cfg = self.config
        attempts: list[AttemptRecord] = []

        for horizon in range(cfg.min_horizon, cfg.max_horizon + 1):
            if self.debug >= 1:
                print(f"Attempting to find a plan of max length {horizon}...")

            record, result, indexer = self.do_plan(problem, horizon)
            attempts.append(record)

            if result.status == Sat:
                trace, plan = decode(result.model, indexer, problem)
                if self.debug >= 1:
                    print(f"Plan found at horizon {horizon}: "
                          f"{len(plan)} actions")
                if self.debug >= 2:
                    print(format_trace(trace, plan, problem))
                return SearchResult(Found, plan=plan, horizon=horizon,
                                    trace=trace, attempts=attempts)

            if self.debug >= 1:
                print(f"  No plan at horizon {horizon} "
                      f"({STATUS_NAMES[result.status]})")

        if self.debug >= 1:
            print(f"Could not find a valid plan within horizon {cfg.max_horizon}.")
        return SearchResult(Exhausted, attempts=attempts)

    def do_plan(self, problem: Problem,
                horizon: int) -> tuple[AttemptRecord, SatResult, VariableIndexer]:
        """Encode and solve a single horizon."""
        t0 = time_mod.time()
        indexer = VariableIndexer.for_problem(problem, horizon)
        encoder = STRIPSEncoder(problem, indexer)
        encoder.encode()
        instance = CNFInstance.from_encoder(encoder)
        cnf_text = self._exchange(instance)
        encode_sec = time_mod.time() - t0
        self._sat_encode_sec += encode_sec

        if self.debug >= 1:
            print(f"  CNF: {instance.numvar} vars, {instance.numclause} clauses")
        self._print_debug(encoder, cnf_text)

        t1 = time_mod.time()
        result = solve_cnf_text(cnf_text, self.config.solver, debug=self.debug)
        solve_sec = time_mod.time() - t1
        self._sat_solve_sec += solve_sec
        self._sat_calls += 1

        if self.debug >= 1:
            print(f"  SAT: encode={encode_sec:.3f}s solve={solve_sec:.3f}s")
        if result.status == Sat:
            self._print_model(result.model, encoder, horizon)

        record = AttemptRecord(horizon=horizon, numvar=instance.numvar,
                               stats=encoder.stats, status=result.status,
                               encode_sec=encode_sec, solve_sec=solve_sec)
        return record, result, indexer

    def _exchange(self, instance: CNFInstance) -> str:
        """DIMACS text handed to the solver, through ``cnf_file`` if set."""
        path = self.config.cnf_file
        if path is None:
            return to_dimacs(instance)
        write_dimacs(instance, path)
        try:
            with open(path, 'r') as fh:
                return fh.read()
        except OSError as e:
            raise CNFExchangeError(f"Cannot read CNF file {path}: {e}") from e

    def get_timing_stats(self) -> dict:
        return {
            'sat_encode_sec': self._sat_encode_sec,
            'sat_solve_sec': self._sat_solve_sec,
            'sat_calls': self._sat_calls,
        }

    # ── Debug helpers ─────────────────────────────────────────────────────

    def _print_debug(self, encoder: STRIPSEncoder, cnf_text: str):
        if self.printflag & PrintLit:
            print("\n=== Variable Map ===")
            encoder.print_variable_map()
        if self.printflag & PrintCNF:
            print("\n=== DIMACS CNF ===")
            print(cnf_text)

    def _print_model(self, model: list[int], encoder: STRIPSEncoder,
                     horizon: int):
        if not (self.printflag & PrintModel):
            return
        print(f"\n=== SAT Solution (horizon {horizon}) ===")
        for lit in model:
            if lit > 0:
                print(f"  {lit}: {encoder.var_name(lit)} = TRUE")


def plan_problem(problem: Problem,
                 config: Optional[PlannerConfig] = None) -> SearchResult:
    """Run the horizon search on *problem* with a fresh planner."""
    return SATPlanner(config).search(problem)


# ── Output ───────────────────────────────────────────────────────────────────

def format_plan(plan: Plan) -> str:
    lines = ["", "Begin plan"]
    for step, action in plan:
        lines.append(f"{step + 1}: {_pretty_action(action.name)}")
    lines.append("End plan")
    lines.append(f"{len(plan)} actions in plan")
    lines.append("")
    return '\n'.join(lines)


def print_plan(plan: Plan, output_file: Optional[str] = None):
    """Print the found plan, and write it to *output_file* if given."""
    output = format_plan(plan)
    print(output)

    if output_file:
        with open(output_file, 'w') as fh:
            fh.write(output + '\n')


def _pretty_action(name: str) -> str:
    """Convert ``move(a, b)`` to ``(move a b)``."""
    if name.startswith('('):
        return name
    tokens = name.replace('(', ' ').replace(')', ' ').replace(',', ' ').split()
    return '(' + ' '.join(tokens) + ')'
