"""
sat_interface.py - Interface to SAT solvers via PySAT.

Uses the python-sat (PySAT) library for SAT solving. No C++ compilation
or external binaries required.

Available solvers:
  - cadical  (CaDiCaL 1.9.5) - default, top SAT competition performer
  - glucose  (Glucose 4.2)   - strong on industrial benchmarks
  - maple    (MapleChrono)   - SAT competition 2018 winner
  - minisat  (MiniSat 2.2)

Install: pip install python-sat
"""

from __future__ import annotations
import sys
import threading
from dataclasses import dataclass
from typing import Optional

from pysat.solvers import Cadical195, Glucose42, MapleChrono, Minisat22

from satplan.data_structures import (
    Sat, Unsat, Contradiction, SatResult, SolverSpec, DEFAULT_SOLVER,
)
from satplan.dimacs import from_dimacs
from satplan.errors import TrivialContradictionError, SolverTimeoutError, SolverError


# ── Solver dispatch ──────────────────────────────────────────────────────────

SOLVER_CLASSES = {
    'cadical': Cadical195,
    'cd195': Cadical195,
    'glucose': Glucose42,
    'g42': Glucose42,
    'maple': MapleChrono,
    'mcb': MapleChrono,
    'minisat': Minisat22,
    'm22': Minisat22,
}


@dataclass
class ParsedInstance:
    """A CNF instance read for solving, plus the verdict once solved."""
    numvar: int
    clauses: list[list[int]]
    satisfiable: Optional[bool] = None
    assignment: Optional[list[int]] = None


# ── Parsing ──────────────────────────────────────────────────────────────────

def parse(cnf_text: str) -> ParsedInstance:
    """Read DIMACS text into a solvable instance.

    Raises ``FormatError`` for malformed text and
    ``TrivialContradictionError`` when two unit clauses contradict.
    """
    instance = from_dimacs(cnf_text)
    units: dict[int, int] = {}
    for lineno, clause in enumerate(instance.clauses, 1):
        if len(clause) != 1:
            continue
        lit = clause[0]
        if -lit in units:
            raise TrivialContradictionError(
                f"unit clauses {units[-lit]} and {lineno} fix variable "
                f"{abs(lit)} both ways")
        units.setdefault(lit, lineno)
    return ParsedInstance(numvar=instance.numvar, clauses=instance.clauses)


# ── Solving ──────────────────────────────────────────────────────────────────

class PySATSolver:
    """One-shot PySAT solving of a parsed instance."""

    def __init__(self, spec: Optional[SolverSpec] = None, debug: int = 0):
        self.spec = spec or SolverSpec()
        key = (self.spec.solver_name or DEFAULT_SOLVER).lower()
        solver_cls = SOLVER_CLASSES.get(key)
        if solver_cls is None:
            raise SolverError(f"Unknown solver '{self.spec.solver_name}'")
        self.solver_name = key
        self.solver_cls = solver_cls
        self.debug = debug

    def is_satisfiable(self, parsed: ParsedInstance) -> bool:
        """Decide *parsed*.  Raises ``SolverTimeoutError`` past ``maxsec``."""
        if self.debug >= 2:
            print(f"  [{self.solver_name}] {parsed.numvar} vars, "
                  f"{len(parsed.clauses)} clauses")

        with self.solver_cls(bootstrap_with=parsed.clauses) as solver:
            before = solver.accum_stats().copy() if hasattr(solver, 'accum_stats') else None

            if self.spec.maxsec > 0:
                timer = threading.Timer(self.spec.maxsec, solver.interrupt)
                timer.start()
                try:
                    result = solver.solve_limited(expect_interrupt=True)
                finally:
                    timer.cancel()
            else:
                result = solver.solve()

            if self.debug >= 1 and before is not None:
                after = solver.accum_stats().copy()
                delta = {k: int(after.get(k, 0)) - int(before.get(k, 0))
                         for k in after.keys()}
                print("  SAT search: "
                      f"decisions={delta.get('decisions', 0)} "
                      f"conflicts={delta.get('conflicts', 0)} "
                      f"propagations={delta.get('propagations', 0)}")

            if result is None:
                raise SolverTimeoutError(
                    f"{self.solver_name} reached no decision within "
                    f"{self.spec.maxsec}s")

            parsed.satisfiable = bool(result)
            if result:
                parsed.assignment = _full_model(solver.get_model(), parsed.numvar)
            return parsed.satisfiable

    def model(self, parsed: ParsedInstance) -> list[int]:
        """Signed literal per variable id: ``model[i - 1]`` is ``i`` or ``-i``."""
        if not parsed.satisfiable or parsed.assignment is None:
            raise SolverError("model requested before a satisfiable result")
        return list(parsed.assignment)


def _full_model(raw: Optional[list[int]], numvar: int) -> list[int]:
    """One literal per variable; variables the solver never saw are false."""
    true_vars = {lit for lit in (raw or []) if lit > 0}
    return [v if v in true_vars else -v for v in range(1, numvar + 1)]


def solve_cnf_text(cnf_text: str, spec: Optional[SolverSpec] = None,
                   debug: int = 0) -> SatResult:
    """Parse and solve DIMACS text, folding the outcome into a ``SatResult``.

    A trivial contradiction is an ordinary ``Contradiction`` result; format
    errors and timeouts propagate.
    """
    try:
        parsed = parse(cnf_text)
    except TrivialContradictionError as e:
        if debug >= 1:
            print(f"  Trivially unsatisfiable: {e}", file=sys.stderr)
        return SatResult(Contradiction, reason=str(e))

    solver = PySATSolver(spec, debug=debug)
    if solver.is_satisfiable(parsed):
        return SatResult(Sat, model=solver.model(parsed))
    return SatResult(Unsat)
