import pytest

from satplan import count_clauses
from satplan.satplan import main

from test_pddl_loader import LIGHTS_DOMAIN, LIGHTS_PROBLEM


UNREACHABLE_PROBLEM = """
(define (problem no-power)
  (:domain lights)
  (:objects l1 - light)
  (:init (powered))
  (:goal (not (powered))))
"""


@pytest.fixture
def pddl_files(tmp_path):
    domain = tmp_path / "domain.pddl"
    problem = tmp_path / "problem.pddl"
    domain.write_text(LIGHTS_DOMAIN)
    problem.write_text(LIGHTS_PROBLEM)
    return str(domain), str(problem)


def test_cli_finds_plan(pddl_files, tmp_path, capsys):
    domain, problem = pddl_files
    out_file = tmp_path / "plan.txt"
    rc = main(["-o", domain, "-f", problem, "-g", str(out_file), "-validate"])
    out = capsys.readouterr().out
    assert rc == 0
    assert "Plan found at horizon 3" in out
    assert "Plan validation: OK" in out
    assert "3 actions in plan" in out_file.read_text()


def test_cli_no_plan(tmp_path, capsys):
    domain = tmp_path / "domain.pddl"
    problem = tmp_path / "problem.pddl"
    domain.write_text(LIGHTS_DOMAIN)
    problem.write_text(UNREACHABLE_PROBLEM)
    rc = main(["-o", str(domain), "-f", str(problem), "-maxauto", "3"])
    assert rc == 1
    assert "No plan found up to horizon 3" in capsys.readouterr().out


def test_cli_bad_horizon_bounds(pddl_files, capsys):
    domain, problem = pddl_files
    rc = main(["-o", domain, "-f", problem, "-mintime", "5", "-maxauto", "4"])
    assert rc == 2
    assert "max_horizon" in capsys.readouterr().err


def test_cli_missing_file(tmp_path, capsys):
    rc = main(["-o", str(tmp_path / "none.pddl"), "-f", str(tmp_path / "none2.pddl")])
    assert rc == 2
    assert "Error loading PDDL files" in capsys.readouterr().err


def test_cli_fatal_cnf_exchange(pddl_files, tmp_path, capsys):
    domain, problem = pddl_files
    rc = main(["-o", domain, "-f", problem, "-cnf", str(tmp_path / "x" / "y.cnf")])
    assert rc == 2
    assert "Fatal" in capsys.readouterr().err


def test_count_clauses_output(pddl_files, capsys):
    domain, problem = pddl_files
    rc = count_clauses.main(["-o", domain, "-f", problem, "-maxtime", "4"])
    out = capsys.readouterr().out
    assert rc == 0
    assert "Horizon t: 2" in out and "Horizon t: 3" in out
    assert "Horizon t: 4" not in out
    assert "Mutex AMO:" in out
    assert "  3 actions" in out


def test_experiment_parser_reads_count_clauses(pddl_files, capsys):
    pytest.importorskip("matplotlib")
    from run_sat_experiments import parse_count_clauses_output

    domain, problem = pddl_files
    count_clauses.main(["-o", domain, "-f", problem, "-maxtime", "4", "-all"])
    data = parse_count_clauses_output(capsys.readouterr().out)
    assert data["t"] == [2, 3, 4]
    assert data["actions"][0] == 0
    assert data["actions"][1] == 3
    # 5 actions: 10 mutex pairs per step
    assert data["mutex"] == [20, 30, 40]
    assert all(total > 0 for total in data["total"])
