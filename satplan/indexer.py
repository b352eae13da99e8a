"""
indexer.py - Propositional variable numbering for one horizon.

Variables are laid out step by step, fluents before actions inside a step:

    step 0:  fluent_0 .. fluent_{F-1}  action_0 .. action_{A-1}
    step 1:  fluent_0 .. fluent_{F-1}  action_0 .. action_{A-1}
    ...
    step h:  fluent_0 .. fluent_{F-1}

so the id of an entity at step s is ``s * (F + A) + offset + 1`` and all
ids congruent modulo ``F + A`` belong to the same fluent or action.  The
last step has no actions since there is no transition out of it.
"""

from __future__ import annotations


class VariableIndexer:
    """Dense 1-based variable ids for every (fluent, step) and (action, step)."""

    def __init__(self, num_fluents: int, num_actions: int, horizon: int):
        if horizon < 1:
            raise ValueError(f"horizon must be >= 1, got {horizon}")
        self.num_fluents = num_fluents
        self.num_actions = num_actions
        self.horizon = horizon

    @classmethod
    def for_problem(cls, problem, horizon: int) -> 'VariableIndexer':
        return cls(problem.num_fluents, problem.num_actions, horizon)

    @property
    def variables_per_step(self) -> int:
        return self.num_fluents + self.num_actions

    @property
    def num_vars(self) -> int:
        return self.variables_per_step * self.horizon + self.num_fluents

    # ── Lookups ──────────────────────────────────────────────────────────

    def fluent_var(self, fi: int, step: int) -> int:
        if not 0 <= fi < self.num_fluents:
            raise IndexError(f"fluent {fi} out of range")
        if not 0 <= step <= self.horizon:
            raise IndexError(f"fluent step {step} out of range 0..{self.horizon}")
        return step * self.variables_per_step + fi + 1

    def action_var(self, ai: int, step: int) -> int:
        if not 0 <= ai < self.num_actions:
            raise IndexError(f"action {ai} out of range")
        if not 0 <= step < self.horizon:
            raise IndexError(f"action step {step} out of range 0..{self.horizon - 1}")
        return step * self.variables_per_step + self.num_fluents + ai + 1

    def fluent_vars_at(self, step: int) -> list[int]:
        return [self.fluent_var(fi, step) for fi in range(self.num_fluents)]

    def action_vars_at(self, step: int) -> list[int]:
        return [self.action_var(ai, step) for ai in range(self.num_actions)]

    def describe(self, var: int) -> tuple[str, int, int]:
        """Inverse mapping: ``var -> ("fluent" | "action", index, step)``."""
        if not 1 <= var <= self.num_vars:
            raise IndexError(f"variable {var} out of range 1..{self.num_vars}")
        step, offset = divmod(var - 1, self.variables_per_step)
        if offset < self.num_fluents:
            return "fluent", offset, step
        return "action", offset - self.num_fluents, step

    def __iter__(self):
        """Yield ``(kind, index, step, var)`` in id order."""
        for step in range(self.horizon + 1):
            for fi in range(self.num_fluents):
                yield "fluent", fi, step, self.fluent_var(fi, step)
            if step < self.horizon:
                for ai in range(self.num_actions):
                    yield "action", ai, step, self.action_var(ai, step)

    def __repr__(self):
        return (f"VariableIndexer(fluents={self.num_fluents}, "
                f"actions={self.num_actions}, horizon={self.horizon})")
