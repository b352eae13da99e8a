import pytest

from satplan.dimacs import CNFInstance, to_dimacs, from_dimacs, write_dimacs, read_dimacs
from satplan.errors import FormatError, CNFExchangeError
from satplan.indexer import VariableIndexer
from satplan.strips2wff import STRIPSEncoder


def _instance(problem, horizon):
    enc = STRIPSEncoder(problem, VariableIndexer.for_problem(problem, horizon))
    enc.encode()
    return CNFInstance.from_encoder(enc)


def _body(text):
    lines = text.splitlines()
    p = next(i for i, line in enumerate(lines) if line.startswith("p "))
    return lines[p], lines[p + 1:]


def test_header_matches_body(lock_problem):
    inst = _instance(lock_problem, 3)
    header, body = _body(to_dimacs(inst))
    _, _, nv, nc = header.split()
    assert int(nc) == len(body) == inst.numclause
    assert int(nv) == 3 * (3 + 4) + 3
    assert max(abs(int(tok)) for line in body for tok in line.split()) <= int(nv)
    assert all(line.endswith(" 0") for line in body)


def test_comment_header_describes_layout(single_action_problem):
    text = to_dimacs(_instance(single_action_problem, 2))
    comments = [line for line in text.splitlines() if line.startswith("c ")]
    assert len(comments) == 3
    assert "2 variables (1 fluents, 1 actions)" in comments[0]
    assert "over 2 steps" in comments[1]
    assert "modulo 2" in comments[2]
    assert text.index("p cnf 5 8") > text.index(comments[-1])


def test_round_trip(chain_problem):
    inst = _instance(chain_problem, 3)
    back = from_dimacs(to_dimacs(inst))
    assert back.numvar == inst.numvar
    assert back.clauses == inst.clauses


def test_clause_spanning_lines():
    inst = from_dimacs("p cnf 3 2\n1 -2\n3 0 -1 0\n")
    assert inst.clauses == [[1, -2, 3], [-1]]


@pytest.mark.parametrize("text,match", [
    ("1 2 0\n", "clause before problem line"),
    ("c only comments\n", "missing problem line"),
    ("p cnf x 1\n1 0\n", "malformed problem line"),
    ("p dnf 2 1\n1 0\n", "malformed problem line"),
    ("p cnf 2 1\n1 2\n", "missing terminating 0"),
    ("p cnf 2 1\n0\n", "empty clause"),
    ("p cnf 2 1\n1 a 0\n", "invalid literal"),
    ("p cnf 2 1\n1 3 0\n", "exceeds 2 variables"),
    ("p cnf 2 2\n1 2 0\n", "declares 2 clauses but 1"),
    ("p cnf 2 1\np cnf 2 1\n1 0\n", "duplicate problem line"),
])
def test_malformed_text_raises(text, match):
    with pytest.raises(FormatError, match=match):
        from_dimacs(text)


def test_file_exchange(tmp_path, single_action_problem):
    inst = _instance(single_action_problem, 2)
    path = tmp_path / "problem.cnf"
    text = write_dimacs(inst, str(path))
    assert path.read_text() == text
    assert read_dimacs(str(path)).clauses == inst.clauses


def test_file_errors_are_wrapped(tmp_path, single_action_problem):
    inst = _instance(single_action_problem, 2)
    with pytest.raises(CNFExchangeError):
        write_dimacs(inst, str(tmp_path / "missing" / "problem.cnf"))
    with pytest.raises(CNFExchangeError):
        read_dimacs(str(tmp_path / "nope.cnf"))
