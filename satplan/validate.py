"""
validate.py - Plan validation by forward simulation.

Executes a plan from the initial state, checking each action's
precondition and applying its effect, then checks the goal.
"""

from __future__ import annotations

from satplan.data_structures import Problem, Plan, ActionSchema
from satplan.errors import PlanValidationError


def apply_action(state: frozenset[int], action: ActionSchema) -> frozenset[int]:
    """Successor state: delete effects removed, add effects added."""
    return (state - action.effect.negative) | action.effect.positive


def simulate(problem: Problem, plan: Plan) -> list[frozenset[int]]:
    """Return the sequence of states visited by *plan*, initial state first.

    Raises ``PlanValidationError`` if an action is applied in a state that
    violates its precondition.
    """
    state = problem.initial
    states = [state]
    for step, action in plan:
        if not action.precondition.holds_in(state):
            missing = sorted(problem.fluents[fi]
                             for fi in action.precondition.positive - state)
            forbidden = sorted(problem.fluents[fi]
                               for fi in action.precondition.negative & state)
            raise PlanValidationError(
                f"step {step}: {action.name} not applicable "
                f"(missing {missing}, forbidden {forbidden})")
        state = apply_action(state, action)
        states.append(state)
    return states


def validate_plan(problem: Problem, plan: Plan) -> bool:
    """True if *plan* is executable and reaches the goal."""
    try:
        states = simulate(problem, plan)
    except PlanValidationError:
        return False
    return problem.goal.holds_in(states[-1])
