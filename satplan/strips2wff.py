"""
strips2wff.py - SAT encoding of a grounded STRIPS problem.

Converts the problem, unrolled over a fixed horizon, into a CNF formula in
clause-list form.  Variable numbering comes from ``VariableIndexer``.

Clauses, in emission order:
  1. Initial state (closed world): [+f_0] or [-f_0] for every fluent
  2. Goal: [+f_h] or [-f_h] for each goal literal
  3. Action implication:  -a_t v p_t  (precondition)
                          -a_t v e_{t+1}  (effect)
  4. Explanatory frame axioms:
         f_t v -f_{t+1} v (v adders_t)      (f becomes true)
        -f_t v  f_{t+1} v (v deleters_t)    (f becomes false)
  5. Mutex: -a_t v -b_t for every pair of distinct actions at step t
"""

from __future__ import annotations

from satplan.data_structures import Problem, ClauseStats
from satplan.indexer import VariableIndexer


class STRIPSEncoder:
    """Encodes a grounded STRIPS problem as a CNF formula for one horizon."""

    def __init__(self, problem: Problem, indexer: VariableIndexer):
        if (indexer.num_fluents != problem.num_fluents
                or indexer.num_actions != problem.num_actions):
            raise ValueError(f"{indexer!r} does not match the problem size")
        self.problem = problem
        self.indexer = indexer

        self.clauses: list[list[int]] = []
        self.stats = ClauseStats()

        # For each fluent, the actions that add / delete it
        self._adders: list[list[int]] = [[] for _ in range(problem.num_fluents)]
        self._deleters: list[list[int]] = [[] for _ in range(problem.num_fluents)]
        for ai, act in enumerate(problem.actions):
            for fi in sorted(act.effect.positive):
                self._adders[fi].append(ai)
            for fi in sorted(act.effect.negative):
                self._deleters[fi].append(ai)

    @property
    def numvar(self) -> int:
        return self.indexer.num_vars

    @property
    def numclause(self) -> int:
        return len(self.clauses)

    # ── Main entry point ─────────────────────────────────────────────────

    def encode(self) -> list[list[int]]:
        """Build the full clause set.  Calling it again rebuilds from scratch."""
        self.clauses = []
        self.stats = ClauseStats()

        self.stats.init = self._generate_initial_state()
        self.stats.goal = self._generate_goal_state()
        for t in range(self.indexer.horizon):
            self._generate_action_axioms(t)
        self.stats.frame = self._generate_frame()
        self.stats.mutex = self._generate_op_mutex()
        return self.clauses

    # ── Axiom generators ─────────────────────────────────────────────────

    def _generate_initial_state(self) -> int:
        """Unit clause fixing every fluent at step 0."""
        before = len(self.clauses)
        for fi in range(self.problem.num_fluents):
            v = self.indexer.fluent_var(fi, 0)
            self.clauses.append([v] if fi in self.problem.initial else [-v])
        return len(self.clauses) - before

    def _generate_goal_state(self) -> int:
        """Unit clause per goal literal at the final step."""
        before = len(self.clauses)
        last = self.indexer.horizon
        for lit in self.problem.goal.literals():
            v = self.indexer.fluent_var(abs(lit) - 1, last)
            self.clauses.append([v] if lit > 0 else [-v])
        return len(self.clauses) - before

    def _generate_action_axioms(self, t: int):
        """action -> preconditions at t, action -> effects at t+1."""
        idx = self.indexer
        for ai, act in enumerate(self.problem.actions):
            av = idx.action_var(ai, t)
            pre = act.precondition
            eff = act.effect
            # Each fluent is visited once; its precondition literal comes
            # before its effect literal.
            for fi in sorted(pre.fluents() | eff.fluents()):
                if fi in pre.positive:
                    self.clauses.append([-av, idx.fluent_var(fi, t)])
                    self.stats.precond += 1
                if fi in pre.negative:
                    self.clauses.append([-av, -idx.fluent_var(fi, t)])
                    self.stats.precond += 1
                if fi in eff.positive:
                    self.clauses.append([-av, idx.fluent_var(fi, t + 1)])
                    self.stats.effect += 1
                if fi in eff.negative:
                    self.clauses.append([-av, -idx.fluent_var(fi, t + 1)])
                    self.stats.effect += 1

    def _generate_frame(self) -> int:
        """Explanatory frame axioms: a change needs an action that causes it."""
        before = len(self.clauses)
        idx = self.indexer
        for fi in range(self.problem.num_fluents):
            adders = self._adders[fi]
            deleters = self._deleters[fi]
            for t in range(idx.horizon):
                cur = idx.fluent_var(fi, t)
                nxt = idx.fluent_var(fi, t + 1)
                self.clauses.append(
                    [cur, -nxt] + [idx.action_var(ai, t) for ai in adders])
                self.clauses.append(
                    [-cur, nxt] + [idx.action_var(ai, t) for ai in deleters])
        return len(self.clauses) - before

    def _generate_op_mutex(self) -> int:
        """Pairwise at-most-one action per step."""
        before = len(self.clauses)
        for t in range(self.indexer.horizon):
            ops = self.indexer.action_vars_at(t)
            for i in range(len(ops)):
                for j in range(i + 1, len(ops)):
                    self.clauses.append([-ops[i], -ops[j]])
        return len(self.clauses) - before

    # ── Debug output ─────────────────────────────────────────────────────

    def var_name(self, var: int) -> str:
        kind, index, step = self.indexer.describe(var)
        if kind == "fluent":
            return f"{self.problem.fluents[index]}@{step}"
        return f"{self.problem.actions[index].name}@{step}"

    def print_variable_map(self):
        """Print the mapping from variable numbers to fluent/action names."""
        for i in range(1, self.numvar + 1):
            print(f"  {i}: {self.var_name(i)}")


def encode(problem: Problem, indexer: VariableIndexer) -> list[list[int]]:
    """Encode *problem* for the horizon of *indexer* and return the clauses."""
    return STRIPSEncoder(problem, indexer).encode()
