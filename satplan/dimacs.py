"""
dimacs.py - DIMACS CNF text exchange.

Writes an encoded horizon as DIMACS text (with the descriptive comment
header that lets a reader map variables back to fluents and actions) and
reads such text back strictly, so that a malformed instance is reported
instead of silently repaired.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional

from satplan.errors import FormatError, CNFExchangeError


@dataclass
class CNFInstance:
    """A CNF formula plus the layout data written into its header."""
    numvar: int
    clauses: list[list[int]] = field(default_factory=list)
    num_fluents: Optional[int] = None
    num_actions: Optional[int] = None
    horizon: Optional[int] = None
    comments: list[str] = field(default_factory=list)

    @property
    def numclause(self) -> int:
        return len(self.clauses)

    @classmethod
    def from_encoder(cls, encoder) -> 'CNFInstance':
        idx = encoder.indexer
        return cls(numvar=idx.num_vars, clauses=encoder.clauses,
                   num_fluents=idx.num_fluents, num_actions=idx.num_actions,
                   horizon=idx.horizon)


# ── Writing ──────────────────────────────────────────────────────────────────

def header_comments(instance: CNFInstance) -> list[str]:
    if instance.num_fluents is None or instance.num_actions is None:
        return list(instance.comments)
    per_step = instance.num_fluents + instance.num_actions
    return [
        f"The problem described by this file contains {per_step} variables "
        f"({instance.num_fluents} fluents, {instance.num_actions} actions).",
        f"These variables were described over {instance.horizon} steps in order "
        f"to find a plan that satisfies all the formulae listed below.",
        f"All variables that are equal with a modulo {per_step} represent the "
        f"same action or fluent at different steps.",
    ] + list(instance.comments)


def to_dimacs(instance: CNFInstance) -> str:
    """Return the CNF formula as a DIMACS-format string."""
    lines = [f"c {c}" for c in header_comments(instance)]
    lines.append(f"p cnf {instance.numvar} {instance.numclause}")
    for clause in instance.clauses:
        lines.append(' '.join(str(lit) for lit in clause) + ' 0')
    return '\n'.join(lines) + '\n'


def write_dimacs(instance: CNFInstance, path: str) -> str:
    text = to_dimacs(instance)
    try:
        with open(path, 'w') as fh:
            fh.write(text)
    except OSError as e:
        raise CNFExchangeError(f"Cannot write CNF file {path}: {e}") from e
    return text


# ── Reading ──────────────────────────────────────────────────────────────────

def from_dimacs(text: str) -> CNFInstance:
    """Parse DIMACS text.

    Raises ``FormatError`` when the header is missing or malformed, a token
    is not an integer, a clause is empty or unterminated, a literal exceeds
    the declared variable count, or the clause count differs from the header.
    """
    numvar: Optional[int] = None
    declared: Optional[int] = None
    comments: list[str] = []
    clauses: list[list[int]] = []
    current: list[int] = []

    for lineno, raw in enumerate(text.splitlines(), 1):
        line = raw.strip()
        if not line:
            continue
        if line.startswith('c'):
            comments.append(line[1:].strip())
            continue
        if line.startswith('p'):
            if numvar is not None:
                raise FormatError(f"line {lineno}: duplicate problem line")
            parts = line.split()
            if len(parts) != 4 or parts[1] != 'cnf':
                raise FormatError(f"line {lineno}: malformed problem line {line!r}")
            try:
                numvar, declared = int(parts[2]), int(parts[3])
            except ValueError:
                raise FormatError(f"line {lineno}: malformed problem line {line!r}") from None
            if numvar < 0 or declared < 0:
                raise FormatError(f"line {lineno}: negative counts in {line!r}")
            continue
        if numvar is None:
            raise FormatError(f"line {lineno}: clause before problem line")
        for tok in line.split():
            try:
                lit = int(tok)
            except ValueError:
                raise FormatError(f"line {lineno}: invalid literal {tok!r}") from None
            if lit == 0:
                if not current:
                    raise FormatError(f"line {lineno}: empty clause")
                clauses.append(current)
                current = []
            elif abs(lit) > numvar:
                raise FormatError(
                    f"line {lineno}: literal {lit} exceeds {numvar} variables")
            else:
                current.append(lit)

    if numvar is None:
        raise FormatError("missing problem line 'p cnf <vars> <clauses>'")
    if current:
        raise FormatError("missing terminating 0 on last clause")
    if len(clauses) != declared:
        raise FormatError(
            f"header declares {declared} clauses but {len(clauses)} were found")
    return CNFInstance(numvar=numvar, clauses=clauses, comments=comments)


def read_dimacs(path: str) -> CNFInstance:
    try:
        with open(path, 'r') as fh:
            text = fh.read()
    except OSError as e:
        raise CNFExchangeError(f"Cannot read CNF file {path}: {e}") from e
    return from_dimacs(text)
