"""
decoder.py - Map a SAT model back to a state trace and a plan.
"""

from __future__ import annotations
import sys

from satplan.data_structures import Problem, Plan, FluentSet
from satplan.indexer import VariableIndexer


def _is_true(model: list[int], var: int) -> bool:
    return model[var - 1] > 0


def decode(model: list[int], indexer: VariableIndexer,
           problem: Problem) -> tuple[list[tuple[bool, ...]], Plan]:
    """Project *model* onto the fluent and action variables of *indexer*.

    Returns ``(trace, plan)``: ``trace[s][f]`` is the value of fluent ``f``
    at step ``s``; the plan holds, for each step, the first action (in index
    order) whose variable is true.  Steps with no true action are no-ops.
    """
    trace: list[tuple[bool, ...]] = []
    plan = Plan()

    for s in range(indexer.horizon + 1):
        trace.append(tuple(_is_true(model, v) for v in indexer.fluent_vars_at(s)))
        if s == indexer.horizon:
            break

        chosen = [ai for ai, v in enumerate(indexer.action_vars_at(s))
                  if _is_true(model, v)]
        if not chosen:
            continue
        if len(chosen) > 1:
            names = ', '.join(problem.actions[ai].name for ai in chosen)
            print(f"Warning: {len(chosen)} actions true at step {s} ({names}); "
                  f"keeping the first", file=sys.stderr)
        plan.add(s, problem.actions[chosen[0]])

    return trace, plan


def true_fluents(state: tuple[bool, ...]) -> frozenset[int]:
    return frozenset(fi for fi, val in enumerate(state) if val)


# ── Debug printout ───────────────────────────────────────────────────────────

def _mask(fs: FluentSet, num_fluents: int) -> str:
    """``1`` must hold, ``0`` must not hold, ``_`` unconstrained."""
    out = []
    for fi in range(num_fluents):
        if fi in fs.positive:
            out.append("1")
        elif fi in fs.negative:
            out.append("0")
        else:
            out.append("_")
    return ' '.join(out)


def format_trace(trace: list[tuple[bool, ...]], plan: Plan,
                 problem: Problem) -> str:
    """Step-by-step rendering of states, the objective and the actions taken."""
    n = problem.num_fluents
    by_step = dict(plan.steps)
    goal = _mask(problem.goal, n) + " (objective)"
    lines: list[str] = []

    for s, state in enumerate(trace):
        lines.append(' '.join("1" if v else "0" for v in state) + f" (state {s})")
        lines.append(goal)
        lines.append("")
        if s == len(trace) - 1:
            break
        act = by_step.get(s)
        if act is None:
            lines.append("Taking action: none")
            lines.append("")
            continue
        lines.append(f"Taking action: {act.name}")
        lines.append(_mask(act.precondition, n) + " (preconditions)")
        lines.append(_mask(act.effect, n) + " (effects)")
        lines.append("")

    return '\n'.join(lines)
