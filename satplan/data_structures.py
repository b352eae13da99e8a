"""
data_structures.py - Core data types for SATplan.

Problem model consumed by the encoder (fluents, ground actions, initial
state, goal), solver status codes, print masks, and the configuration
dataclasses shared by the planner and the command line.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# SAT solver return values
Unsat = 0
Sat = 1
Contradiction = 5   # instance found unsatisfiable while it was being read

STATUS_NAMES = {
    Unsat: "UNSAT",
    Sat: "SAT",
    Contradiction: "CONTRADICTION",
}

# Search outcomes
Found = "found"
Exhausted = "exhausted"

# Print masks
PrintLit = 1
PrintCNF = 2
PrintModel = 16

DEFAULT_MIN_HORIZON = 2
DEFAULT_MAX_HORIZON = 30
DEFAULT_SOLVER = 'cadical'


# ---------------------------------------------------------------------------
# FluentSet - conjunction of fluent literals
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FluentSet:
    """Positive and negative fluent indices of a conjunction of literals.

    Fluents are referenced by their 0-based position in ``Problem.fluents``.
    """
    positive: frozenset[int] = frozenset()
    negative: frozenset[int] = frozenset()

    @classmethod
    def of(cls, positive: Iterable[int] = (),
           negative: Iterable[int] = ()) -> 'FluentSet':
        return cls(frozenset(positive), frozenset(negative))

    def literals(self) -> list[int]:
        """Signed 1-based literals, ordered by fluent index.

        Fluent ``i`` is written ``i + 1`` when it must hold and ``-(i + 1)``
        when it must not.
        """
        lits = [i + 1 for i in self.positive] + [-(i + 1) for i in self.negative]
        return sorted(lits, key=lambda lit: (abs(lit), lit < 0))

    def fluents(self) -> frozenset[int]:
        return self.positive | self.negative

    def holds_in(self, state: frozenset[int]) -> bool:
        """True if every literal is satisfied by the set of true fluents."""
        return self.positive <= state and not (self.negative & state)

    def __len__(self) -> int:
        return len(self.positive) + len(self.negative)

    def __bool__(self) -> bool:
        return bool(self.positive or self.negative)


# ---------------------------------------------------------------------------
# ActionSchema - a ground action
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ActionSchema:
    """A ground action with a precondition and an unconditional effect."""
    name: str
    precondition: FluentSet = field(default_factory=FluentSet)
    effect: FluentSet = field(default_factory=FluentSet)

    def __str__(self):
        return self.name


# ---------------------------------------------------------------------------
# Problem - the grounded planning problem
# ---------------------------------------------------------------------------

@dataclass
class Problem:
    """A grounded STRIPS problem.

    ``initial`` lists the fluents true at step 0; every other fluent is
    false there (closed world).
    """
    fluents: list[str]
    actions: list[ActionSchema]
    initial: frozenset[int] = frozenset()
    goal: FluentSet = field(default_factory=FluentSet)
    name: str = ""

    def __post_init__(self):
        self.initial = frozenset(self.initial)
        n = len(self.fluents)
        referenced = set(self.initial) | self.goal.fluents()
        for act in self.actions:
            referenced |= act.precondition.fluents() | act.effect.fluents()
        bad = sorted(i for i in referenced if not 0 <= i < n)
        if bad:
            raise ValueError(f"Fluent indices out of range: {bad}")

    @property
    def num_fluents(self) -> int:
        return len(self.fluents)

    @property
    def num_actions(self) -> int:
        return len(self.actions)

    def fluent_index(self, name: str) -> int:
        return self.fluents.index(name)

    def action_index(self, name: str) -> int:
        for i, act in enumerate(self.actions):
            if act.name == name:
                return i
        raise KeyError(name)


# ---------------------------------------------------------------------------
# Plan
# ---------------------------------------------------------------------------

class Plan:
    """Ordered ``(step, action)`` pairs; insertion order is execution order."""

    def __init__(self, steps: Optional[Iterable[tuple[int, ActionSchema]]] = None):
        self._steps: list[tuple[int, ActionSchema]] = list(steps or [])

    def add(self, step: int, action: ActionSchema):
        self._steps.append((step, action))

    @property
    def steps(self) -> list[tuple[int, ActionSchema]]:
        return list(self._steps)

    @property
    def actions(self) -> list[ActionSchema]:
        return [act for _, act in self._steps]

    def action_names(self) -> list[str]:
        return [act.name for _, act in self._steps]

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[tuple[int, ActionSchema]]:
        return iter(self._steps)

    def __eq__(self, other):
        if not isinstance(other, Plan):
            return NotImplemented
        return self._steps == other._steps

    def __repr__(self):
        return f"Plan({self.action_names()!r})"


# ---------------------------------------------------------------------------
# Solver / search results
# ---------------------------------------------------------------------------

@dataclass
class SatResult:
    """Outcome of one solver call.

    ``model[i - 1]`` is ``i`` or ``-i`` according to the value of variable
    ``i``; it is only set when ``status == Sat``.
    """
    status: int
    model: Optional[list[int]] = None
    reason: str = ""

    @property
    def satisfiable(self) -> bool:
        return self.status == Sat


@dataclass
class ClauseStats:
    """Number of clauses emitted per axiom family."""
    init: int = 0
    goal: int = 0
    precond: int = 0
    effect: int = 0
    frame: int = 0
    mutex: int = 0

    @property
    def total(self) -> int:
        return (self.init + self.goal + self.precond + self.effect
                + self.frame + self.mutex)


@dataclass
class AttemptRecord:
    """Bookkeeping for one horizon attempt."""
    horizon: int
    numvar: int
    stats: ClauseStats
    status: int
    encode_sec: float = 0.0
    solve_sec: float = 0.0


@dataclass
class SearchResult:
    """Final outcome of the horizon search."""
    status: str
    plan: Optional[Plan] = None
    horizon: Optional[int] = None
    trace: list[tuple[bool, ...]] = field(default_factory=list)
    attempts: list[AttemptRecord] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.status == Found


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass
class SolverSpec:
    """Which PySAT back end to run and its per-call time budget."""
    solver_name: str = DEFAULT_SOLVER     # "cadical", "glucose", "maple", "minisat"
    maxsec: float = 0                     # 0 = no limit


@dataclass
class PlannerConfig:
    min_horizon: int = DEFAULT_MIN_HORIZON
    max_horizon: int = DEFAULT_MAX_HORIZON
    solver: SolverSpec = field(default_factory=SolverSpec)
    cnf_file: Optional[str] = None        # exchange the instance through this file
    debug: int = 0
    printflag: int = 0

    def __post_init__(self):
        if self.min_horizon < 1:
            raise ValueError(f"min_horizon must be >= 1, got {self.min_horizon}")
        if self.max_horizon < self.min_horizon:
            raise ValueError(
                f"max_horizon ({self.max_horizon}) is below "
                f"min_horizon ({self.min_horizon})")
