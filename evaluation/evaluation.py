#!/usr/bin/env python3
"""
Evaluation runner for the Huffman prefix-code engine.

This evaluation script:
- Runs the pytest suite in tests/ in a subprocess
- Collects individual test results with pass/fail status
- Writes a JSON report with environment metadata

Run with:
    python evaluation/evaluation.py [--output report.json] [--tests-dir tests]
"""
import argparse
import json
import platform
import subprocess
import sys
import uuid
from datetime import datetime
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
STATUS_WORDS = {
    " PASSED": "passed",
    " FAILED": "failed",
    " ERROR": "error",
    " SKIPPED": "skipped",
}


def generate_run_id():
    """Generate a short unique run ID."""
    return uuid.uuid4().hex[:8]


def _git(*args):
    try:
        result = subprocess.run(
            ["git", *args],
            capture_output=True,
            text=True,
            cwd=str(PROJECT_ROOT),
            timeout=5,
        )
    except (OSError, subprocess.TimeoutExpired):
        return "unknown"
    return result.stdout.strip() if result.returncode == 0 else "unknown"


def get_environment_info():
    """Collect environment information for the report."""
    return {
        "python_version": platform.python_version(),
        "platform": platform.platform(),
        "architecture": platform.machine(),
        "git_commit": _git("rev-parse", "HEAD")[:8],
        "git_branch": _git("rev-parse", "--abbrev-ref", "HEAD"),
    }


def parse_pytest_verbose_output(output):
    """Parse `pytest -v` output into a list of {nodeid, name, outcome} dicts."""
    tests = []
    for line in output.splitlines():
        line = line.strip()
        if "::" not in line:
            continue
        for status_word, outcome in STATUS_WORDS.items():
            if status_word in line:
                nodeid = line.split(status_word)[0].strip()
                tests.append({
                    "nodeid": nodeid,
                    "name": nodeid.split("::")[-1],
                    "outcome": outcome,
                })
                break
    return tests


def summarize(tests):
    summary = {outcome: 0 for outcome in STATUS_WORDS.values()}
    for test in tests:
        summary[test["outcome"]] += 1
    summary["total"] = len(tests)
    return summary


def run_pytest(tests_dir, timeout=300):
    """Run pytest on `tests_dir` and return a result dict."""
    print(f"\n{'=' * 60}")
    print(f"RUNNING TESTS: {tests_dir}")
    print(f"{'=' * 60}")

    cmd = [sys.executable, "-m", "pytest", str(tests_dir), "-v", "--tb=short"]
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            cwd=str(PROJECT_ROOT),
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        print("❌ Test execution timed out")
        return {"success": False, "exit_code": -1, "tests": [],
                "summary": {"error": "Test execution timed out"}, "stdout": "", "stderr": ""}

    tests = parse_pytest_verbose_output(result.stdout)
    summary = summarize(tests)
    print(f"\nResults: {summary['passed']} passed, {summary['failed']} failed, "
          f"{summary['error']} errors, {summary['skipped']} skipped (total: {summary['total']})")
    for test in tests:
        print(f"  {test['outcome'].upper():8} {test['nodeid']}")

    return {
        "success": result.returncode == 0,
        "exit_code": result.returncode,
        "tests": tests,
        "summary": summary,
        "stdout": result.stdout[-3000:],
        "stderr": result.stderr[-1000:],
    }


def generate_output_path(now):
    """Generate output path in format: evaluation/YYYY-MM-DD/HH-MM-SS/report.json"""
    output_dir = PROJECT_ROOT / "evaluation" / now.strftime("%Y-%m-%d") / now.strftime("%H-%M-%S")
    return output_dir / "report.json"


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run the Huffman engine test suite and write a report")
    parser.add_argument("--output", type=str, default=None,
                        help="Output JSON file path (default: evaluation/YYYY-MM-DD/HH-MM-SS/report.json)")
    parser.add_argument("--tests-dir", type=str, default=str(PROJECT_ROOT / "tests"),
                        help="Directory holding the pytest suite")
    args = parser.parse_args(argv)

    run_id = generate_run_id()
    started_at = datetime.now()
    print(f"Run ID: {run_id}")
    print(f"Started at: {started_at.isoformat()}")

    results = run_pytest(args.tests_dir)
    finished_at = datetime.now()
    success = results["success"]

    report = {
        "run_id": run_id,
        "started_at": started_at.isoformat(),
        "finished_at": finished_at.isoformat(),
        "duration_seconds": round((finished_at - started_at).total_seconds(), 6),
        "success": success,
        "error": None if success else "test suite failed",
        "environment": get_environment_info(),
        "results": results,
    }

    output_path = Path(args.output) if args.output else generate_output_path(started_at)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(report, f, indent=2)
    print(f"\n✅ Report saved to: {output_path}")
    print(f"Success: {'✅ YES' if success else '❌ NO'}")

    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
