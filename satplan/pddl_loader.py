"""
pddl_loader.py - PDDL -> grounded STRIPS Problem.

Reads a domain/problem pair with unified_planning, grounds it with the
unified_planning grounder, and numbers the resulting ground atoms so the
encoder can address them by index.

Only conjunctions of (possibly negated) boolean atoms are accepted in
preconditions and goals, and only unconditional boolean assignments in
effects.
"""

from __future__ import annotations
from typing import Optional

from unified_planning.engines import CompilationKind
from unified_planning.engines.compilers import Grounder
from unified_planning.io import PDDLReader
from unified_planning.plans import ActionInstance

from satplan.data_structures import Problem, ActionSchema, FluentSet
from satplan.errors import UnsupportedFeatureError


class _AtomTable:
    """Collects ground atoms; indices are assigned once all are known."""

    def __init__(self):
        self._names: dict = {}   # FNode -> display name

    def add(self, node) -> None:
        self._names.setdefault(node, str(node))

    def freeze(self) -> tuple[list[str], dict]:
        ordered = sorted(self._names.items(), key=lambda kv: kv[1])
        names = [name for _, name in ordered]
        index = {node: i for i, (node, _) in enumerate(ordered)}
        return names, index


def _check_atom(node, where: str):
    if not node.fluent().type.is_bool_type():
        raise UnsupportedFeatureError(f"non-boolean fluent {node} in {where}")


def _literals(node, where: str) -> Optional[tuple[list, list]]:
    """Split a conjunction into positive / negative atoms.

    Returns ``None`` if the formula is the constant false.
    """
    if node.is_true():
        return [], []
    if node.is_false():
        return None
    if node.is_fluent_exp():
        _check_atom(node, where)
        return [node], []
    if node.is_not() and node.arg(0).is_fluent_exp():
        _check_atom(node.arg(0), where)
        return [], [node.arg(0)]
    if node.is_and():
        pos, neg = [], []
        for arg in node.args:
            sub = _literals(arg, where)
            if sub is None:
                return None
            pos.extend(sub[0])
            neg.extend(sub[1])
        return pos, neg
    raise UnsupportedFeatureError(f"unsupported formula {node} in {where}")


def _effect_literals(action, where: str) -> tuple[list, list]:
    add, delete = [], []
    for eff in action.effects:
        if eff.is_conditional():
            raise UnsupportedFeatureError(f"conditional effect {eff} in {where}")
        if not eff.is_assignment():
            raise UnsupportedFeatureError(f"numeric effect {eff} in {where}")
        _check_atom(eff.fluent, where)
        if eff.value.is_true():
            add.append(eff.fluent)
        elif eff.value.is_false():
            delete.append(eff.fluent)
        else:
            raise UnsupportedFeatureError(f"non-constant effect {eff} in {where}")
    return add, delete


def ground_problem(up_problem, debug: int = 0) -> Problem:
    """Ground a unified_planning problem and convert it to a ``Problem``."""
    for fluent in up_problem.fluents:
        if not fluent.type.is_bool_type():
            raise UnsupportedFeatureError(f"non-boolean fluent {fluent.name}")
    for act in up_problem.actions:
        for eff in act.effects:
            if eff.is_conditional():
                raise UnsupportedFeatureError(
                    f"conditional effect {eff} in {act.name}")

    result = Grounder().compile(up_problem, CompilationKind.GROUNDING)
    grounded = result.problem

    atoms = _AtomTable()
    raw_actions = []
    for act in grounded.actions:
        label = str(result.map_back_action_instance(ActionInstance(act)))
        pos, neg = [], []
        feasible = True
        for prec in act.preconditions:
            lits = _literals(prec, label)
            if lits is None:
                feasible = False
                break
            pos.extend(lits[0])
            neg.extend(lits[1])
        if not feasible:
            continue
        add, delete = _effect_literals(act, label)
        for node in pos + neg + add + delete:
            atoms.add(node)
        raw_actions.append((label, pos, neg, add, delete))

    goal_pos, goal_neg = [], []
    for goal in grounded.goals:
        lits = _literals(goal, "goal")
        if lits is None:
            raise UnsupportedFeatureError("goal is the constant false")
        goal_pos.extend(lits[0])
        goal_neg.extend(lits[1])
    for node in goal_pos + goal_neg:
        atoms.add(node)

    names, index = atoms.freeze()

    def ids(nodes):
        return [index[n] for n in nodes]

    actions = [
        ActionSchema(label,
                     precondition=FluentSet.of(ids(pos), ids(neg)),
                     effect=FluentSet.of(ids(add), ids(delete)))
        for label, pos, neg, add, delete in raw_actions
    ]
    initial = frozenset(
        index[node] for node, value in grounded.initial_values.items()
        if node in index and value.is_true()
    )
    problem = Problem(fluents=names, actions=actions, initial=initial,
                      goal=FluentSet.of(ids(goal_pos), ids(goal_neg)),
                      name=up_problem.name or "")

    if debug >= 1:
        print(f"  Ground actions: {problem.num_actions}")
        print(f"  Fluents: {problem.num_fluents}")
        print(f"  Initial state: {len(problem.initial)} true facts")
        print(f"  Goals: {len(problem.goal)}")
    return problem


def load_problem(domain_file: str, problem_file: str, debug: int = 0) -> Problem:
    """Parse and ground a PDDL domain/problem pair."""
    reader = PDDLReader()
    up_problem = reader.parse_problem(domain_file, problem_file)
    return ground_problem(up_problem, debug=debug)


def problem_from_strings(domain_str: str, problem_str: str,
                         debug: int = 0) -> Problem:
    """Same as ``load_problem`` for in-memory PDDL text."""
    reader = PDDLReader()
    up_problem = reader.parse_problem_string(domain_str, problem_str)
    return ground_problem(up_problem, debug=debug)
