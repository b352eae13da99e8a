"""SATplan - STRIPS planning as satisfiability, solved with PySAT."""

from satplan.data_structures import (
    ActionSchema, FluentSet, Plan, PlannerConfig, Problem, SearchResult,
    SolverSpec,
)
from satplan.planner import SATPlanner, plan_problem

__version__ = "0.1.0"
