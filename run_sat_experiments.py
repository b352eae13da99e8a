#!/usr/bin/env python3
"""
run_sat_experiments.py

Run the SATplan clause counter across PDDL test suites, parse the printed
per-horizon statistics, and plot how each axiom family grows with the
horizon, together with the length of the plan found.

Expected directory layout:
  pddl/
    <suite_name>/
      domain.pddl
      problem*.pddl
    ...

Example:
  python run_sat_experiments.py --root pddl --maxtime 12
"""

from __future__ import annotations

import argparse
import glob
import os
import re
import subprocess
import sys
from dataclasses import dataclass
from typing import Dict, List, Tuple, Optional

import matplotlib.pyplot as plt


ParsedSeries = Tuple[List[int], List[int]]
GroupedSeries = Dict[str, List[ParsedSeries]]

SERIES_KEYS = ("vars", "total", "init", "goal", "precond", "effects", "frame", "mutex")

PATTERNS = {
    "t": re.compile(r"Horizon t:\s*(\d+)"),
    "vars": re.compile(r"Vars:\s*([\d,]+)"),
    "total": re.compile(r"Total Clauses:\s*([\d,]+)"),
    "init": re.compile(r"Init:\s*([\d,]+)"),
    "goal": re.compile(r"Goal:\s*([\d,]+)"),
    "precond": re.compile(r"Precond:\s*([\d,]+)"),
    "effects": re.compile(r"Effects:\s*([\d,]+)"),
    "frame": re.compile(r"Frame:\s*([\d,]+)"),
    "mutex": re.compile(r"Mutex AMO:\s*([\d,]+)"),
    "actions": re.compile(r"^(\d+)\s+actions$"),
}


def parse_count_clauses_output(text: str) -> Dict[str, List[int]]:
    """
    Parse count_clauses stdout into per-horizon numeric series.

    A horizon block starts at 'Horizon t: N' and is complete once its
    '<N> actions' line is seen (0 actions for an unsatisfiable horizon).
    Numbers may include thousands separators.
    """
    data: Dict[str, List[int]] = {k: [] for k in ("t",) + SERIES_KEYS + ("actions",)}
    current: Dict[str, int] = {}

    for raw in text.splitlines():
        line = raw.strip()

        m = PATTERNS["t"].search(line)
        if m:
            current = {"t": int(m.group(1))}
            continue

        for key in SERIES_KEYS:
            m = PATTERNS[key].search(line)
            if m:
                current[key] = int(m.group(1).replace(",", ""))
                break
        else:
            m = PATTERNS["actions"].match(line)
            if m and current:
                current["actions"] = int(m.group(1))
                missing = [k for k in data if k not in current]
                if missing:
                    raise ValueError(f"Malformed horizon block (missing {missing}): {current}")
                for k in data:
                    data[k].append(current[k])
                current = {}

    return data


@dataclass(frozen=True)
class ExperimentCase:
    suite: str
    domain_pddl: str
    problem_pddl: str


def run_count_clauses(case: ExperimentCase, maxtime: int, solver: str) -> str:
    """Run the clause counter on one case and return its stdout."""
    cmd = [
        sys.executable, "-m", "satplan.count_clauses",
        "-o", case.domain_pddl,
        "-f", case.problem_pddl,
        "-maxtime", str(maxtime),
        "-solver", solver,
        "-all",
    ]
    res = subprocess.run(cmd, capture_output=True, text=True)
    # exit status 1 only means no horizon was satisfiable
    if res.returncode not in (0, 1):
        raise RuntimeError(
            "count_clauses failed\n"
            f"cmd: {' '.join(cmd)}\n\n"
            f"stdout:\n{res.stdout}\n\n"
            f"stderr:\n{res.stderr}\n"
        )
    return res.stdout


def discover_cases(root: str, pattern: str = "problem*.pddl") -> List[ExperimentCase]:
    """Discover (domain, problem) pairs under ROOT/<suite>/."""
    cases: List[ExperimentCase] = []
    for suite_dir in sorted(glob.glob(os.path.join(root, "*"))):
        domain_pddl = os.path.join(suite_dir, "domain.pddl")
        if not os.path.isdir(suite_dir) or not os.path.exists(domain_pddl):
            continue
        suite = os.path.basename(suite_dir)
        for prob in sorted(glob.glob(os.path.join(suite_dir, pattern))):
            cases.append(ExperimentCase(suite=suite, domain_pddl=domain_pddl, problem_pddl=prob))
    return cases


def plot_grouped_series(grouped: GroupedSeries, title: str, ylabel: str,
                        outpath: Optional[str], show: bool = False) -> None:
    """One line per run, one legend entry per suite."""
    fig, ax = plt.subplots()

    labelled = set()
    for label, runs in grouped.items():
        for t, y in runs:
            ax.plot(t, y, marker="o", label=None if label in labelled else label)
            labelled.add(label)

    ax.set_xlabel("Horizon t")
    ax.set_ylabel(ylabel)
    ax.set_title(title)
    if labelled:
        ax.legend(loc="best")

    fig.tight_layout()
    if outpath:
        fig.savefig(outpath, dpi=200)
    if show:
        plt.show()
    plt.close(fig)


def main() -> None:
    ap = argparse.ArgumentParser(description="Run SATplan clause-count experiments and plot trends.")
    ap.add_argument("--root", required=True, help="Root folder containing suite subfolders.")
    ap.add_argument("--problem_glob", default="problem*.pddl", help="Problem filename glob within each suite.")
    ap.add_argument("--maxtime", type=int, default=10)
    ap.add_argument("--solver", default="cadical")
    ap.add_argument("--outdir", default="plots")
    ap.add_argument("--show", action="store_true", help="Also open the figures interactively.")
    args = ap.parse_args()

    os.makedirs(args.outdir, exist_ok=True)

    cases = discover_cases(args.root, pattern=args.problem_glob)
    if not cases:
        raise SystemExit(
            f"No cases found under {args.root}. "
            f"Expected {args.root}/<suite>/domain.pddl and {args.problem_glob}."
        )

    grouped: Dict[str, GroupedSeries] = {k: {} for k in ("mutex", "frame", "actions")}

    for case in cases:
        stdout = run_count_clauses(case, args.maxtime, args.solver)
        parsed = parse_count_clauses_output(stdout)
        t = parsed["t"]
        for key, series in grouped.items():
            series.setdefault(case.suite, []).append((t, parsed[key]))

        prob_base = os.path.splitext(os.path.basename(case.problem_pddl))[0]
        print(f"[OK] {case.suite}/{prob_base}: horizons={t[0] if t else 'none'}..{t[-1] if t else 'none'}")

    plot_grouped_series(grouped["mutex"], "Mutex clauses vs horizon (by suite)",
                        "Mutex clauses", os.path.join(args.outdir, "mutex_by_suite.png"), args.show)
    plot_grouped_series(grouped["frame"], "Frame axiom clauses vs horizon (by suite)",
                        "Frame clauses", os.path.join(args.outdir, "frame_by_suite.png"), args.show)
    plot_grouped_series(grouped["actions"], "# Actions in plan vs horizon (by suite)",
                        "# actions", os.path.join(args.outdir, "actions_by_suite.png"), args.show)


if __name__ == "__main__":
    main()
