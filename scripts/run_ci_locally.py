#!/usr/bin/env python3
"""
Run the CI checks locally using the ACTIVE virtual environment.

Order:
  1) uv sync --all-extras --dev [--frozen if uv.lock exists]
  2) bundled data sanity check (every JSON source parses and loads)
  3) black --check on qiming/, tests/ and scripts/
  4) mypy on qiming/ and scripts/
  5) pytest tests/ with coverage

Pass --skip-sync to reuse an already populated environment.
"""

import argparse
import json
import os
import shutil
import subprocess
import sys
from pathlib import Path

BLACK_VERSION = "24.8.0"
LINE_LENGTH = "120"
COVERAGE_FLOOR = "70"


def repo_root() -> Path:
    here = Path(__file__).resolve().parent
    for d in [here] + list(here.parents):
        if (d / "pyproject.toml").exists():
            return d
    return here


REPO = repo_root()


def uv_exe() -> list[str]:
    uv_path = shutil.which("uv")
    if uv_path:
        return [uv_path]
    print("ERROR: 'uv' not found. Install uv first.", file=sys.stderr)
    sys.exit(2)


def run(cmd: list[str], *, env: dict[str, str] | None = None) -> None:
    print(">>>", " ".join(cmd))
    subprocess.run(cmd, check=True, cwd=str(REPO), env=env)


def check_bundled_data() -> None:
    """Fail fast on malformed JSON before the slower steps run."""
    data_dir = REPO / "qiming" / "data"
    for path in sorted(data_dir.glob("*.json")):
        with path.open(encoding="utf-8") as f:
            json.load(f)
        print(f"    ok  {path.relative_to(REPO)}")

    rules = json.loads((data_dir / "sancai_rules.json").read_text(encoding="utf-8"))
    if len(rules) != 125:
        raise SystemExit(f"sancai_rules.json must cover all 125 element triples, found {len(rules)}")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--skip-sync", action="store_true", help="do not run uv sync first")
    args = parser.parse_args()

    uv = uv_exe()
    if not args.skip_sync:
        sync_args = ["sync", "--active", "--all-extras", "--dev"]
        if (REPO / "uv.lock").exists():
            sync_args.append("--frozen")
        run(uv + sync_args)

    print(">>> bundled data check")
    check_bundled_data()

    script_paths = [str(p.relative_to(REPO)) for p in sorted((REPO / "scripts").glob("*.py"))]
    black_targets = ["qiming", "tests", *script_paths]
    run(uv + ["run", "--active", "black", *black_targets, "--check", "--line-length", LINE_LENGTH])

    run(uv + ["run", "--active", "mypy", "qiming", *script_paths, "--ignore-missing-imports"])

    env = os.environ.copy()
    env["PYTHONPATH"] = str(REPO)
    run(
        uv
        + [
            "run",
            "--active",
            "pytest",
            "tests/",
            "--cov=qiming",
            "--cov-report=term-missing",
            f"--cov-fail-under={COVERAGE_FLOOR}",
        ],
        env=env,
    )

    print("\nALL CHECKS PASSED")


if __name__ == "__main__":
    try:
        main()
    except subprocess.CalledProcessError as e:
        print(f"\nCommand failed with exit code {e.returncode}", file=sys.stderr)
        sys.exit(e.returncode)
