import pytest

from satplan import planner as planner_mod
from satplan import sat_interface
from satplan.data_structures import (
    FluentSet, PlannerConfig, Problem, SolverSpec,
    Sat, Unsat, Contradiction, Found, Exhausted, PrintLit, PrintCNF, PrintModel,
)
from satplan.decoder import true_fluents
from satplan.errors import CNFExchangeError, FormatError, SolverTimeoutError
from satplan.planner import SATPlanner, plan_problem, format_plan, print_plan
from satplan.validate import validate_plan

from conftest import make_action


def test_single_action_scenario(single_action_problem):
    result = plan_problem(single_action_problem)
    assert result.status == Found
    assert result.horizon == 2
    # A@1 is unconstrained once F holds, so only step 0 is pinned
    assert result.plan.steps[0] == (0, single_action_problem.actions[0])
    assert result.trace == [(False,), (True,), (True,)]
    assert [a.horizon for a in result.attempts] == [2]


def test_unreachable_goal_exhausts(unreachable_problem):
    result = plan_problem(unreachable_problem, PlannerConfig(max_horizon=6))
    assert result.status == Exhausted
    assert not result.found
    assert result.plan is None
    assert [a.horizon for a in result.attempts] == [2, 3, 4, 5, 6]
    assert all(a.status == Unsat for a in result.attempts)


def test_minimal_horizon_is_returned(chain_problem):
    result = plan_problem(chain_problem, PlannerConfig(max_horizon=8))
    assert result.found
    assert result.horizon == 3
    assert [a.status for a in result.attempts] == [Unsat, Sat]
    assert result.plan.action_names() == ["move_a_b", "move_b_c", "move_c_d"]


@pytest.mark.parametrize("name", ["cadical", "glucose", "minisat"])
def test_plan_reaches_goal(lock_problem, name):
    cfg = PlannerConfig(solver=SolverSpec(solver_name=name))
    result = plan_problem(lock_problem, cfg)
    assert result.found and result.horizon == 3
    assert validate_plan(lock_problem, result.plan)


def test_trace_properties(lock_problem):
    result = plan_problem(lock_problem, PlannerConfig(min_horizon=5, max_horizon=5))
    assert result.found
    # initial state fidelity
    assert true_fluents(result.trace[0]) == lock_problem.initial
    # goal holds at the last step
    assert lock_problem.goal.holds_in(true_fluents(result.trace[-1]))
    # one action at most per step
    assert len({s for s, _ in result.plan}) == len(result.plan)
    assert validate_plan(lock_problem, result.plan)


def test_min_horizon_one(single_action_problem):
    result = plan_problem(single_action_problem, PlannerConfig(min_horizon=1))
    assert result.horizon == 1
    assert result.plan.action_names() == ["A"]


def test_goal_already_true_gives_empty_plan():
    problem = Problem(fluents=["F"], actions=[make_action("A", delete=[0])],
                      initial=frozenset([0]), goal=FluentSet.of([0]))
    result = plan_problem(problem)
    assert result.found and result.horizon == 2
    assert len(result.plan) == 0


def test_contradictory_goal_continues_search():
    problem = Problem(fluents=["F"], actions=[make_action("A", add=[0])],
                      goal=FluentSet.of([0], [0]))
    result = plan_problem(problem, PlannerConfig(max_horizon=4))
    assert result.status == Exhausted
    assert [a.status for a in result.attempts] == [Contradiction] * 3


def test_attempts_record_sizes(single_action_problem):
    result = plan_problem(single_action_problem)
    attempt = result.attempts[0]
    assert attempt.numvar == 5
    assert attempt.stats.total == 8
    assert attempt.status == Sat


def test_cnf_file_exchange(tmp_path, single_action_problem):
    path = tmp_path / "problem.cnf"
    result = plan_problem(single_action_problem, PlannerConfig(cnf_file=str(path)))
    assert result.found
    assert "p cnf 5 8" in path.read_text()


def test_cnf_file_failure_is_fatal(tmp_path, unreachable_problem):
    cfg = PlannerConfig(cnf_file=str(tmp_path / "no" / "such" / "dir.cnf"))
    with pytest.raises(CNFExchangeError):
        plan_problem(unreachable_problem, cfg)


def test_format_error_is_fatal(monkeypatch, unreachable_problem):
    monkeypatch.setattr(planner_mod, "to_dimacs", lambda instance: "p cnf 1 1\n1\n")
    planner = SATPlanner(PlannerConfig(max_horizon=10))
    with pytest.raises(FormatError):
        planner.search(unreachable_problem)
    assert planner.get_timing_stats()['sat_calls'] == 0


class _NeverDecides:
    def __init__(self, bootstrap_with=None):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def interrupt(self):
        pass

    def solve_limited(self, expect_interrupt=False):
        return None


def test_timeout_is_fatal(monkeypatch, chain_problem):
    monkeypatch.setitem(sat_interface.SOLVER_CLASSES, "stuck", _NeverDecides)
    cfg = PlannerConfig(solver=SolverSpec(solver_name="stuck", maxsec=0.01))
    with pytest.raises(SolverTimeoutError):
        plan_problem(chain_problem, cfg)


def test_config_validation():
    with pytest.raises(ValueError):
        PlannerConfig(min_horizon=0)
    with pytest.raises(ValueError):
        PlannerConfig(min_horizon=5, max_horizon=4)


def test_debug_output(single_action_problem, capsys):
    cfg = PlannerConfig(debug=2, printflag=PrintLit | PrintCNF | PrintModel)
    plan_problem(single_action_problem, cfg)
    out = capsys.readouterr().out
    assert "Attempting to find a plan of max length 2" in out
    assert "=== Variable Map ===" in out
    assert "  2: A@0" in out
    assert "p cnf 5 8" in out
    assert "2: A@0 = TRUE" in out
    assert "Taking action: A" in out


def test_print_plan(tmp_path, chain_problem, capsys):
    result = plan_problem(chain_problem)
    out_file = tmp_path / "plan.txt"
    print_plan(result.plan, str(out_file))
    text = out_file.read_text()
    assert "Begin plan" in text and "End plan" in text
    assert "1: (move_a_b)" in text
    assert "3 actions in plan" in text
    assert "Begin plan" in capsys.readouterr().out
    assert format_plan(result.plan) in text
