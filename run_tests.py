"""Test runner script for the voice tally application.

Runs the test suite, optionally with a coverage report for the application
packages.
"""
import sys
import subprocess

PACKAGES = ("tally_parser", "app", "config", "core", "logger")


def _run(cmd):
    try:
        return subprocess.run(cmd, check=False).returncode
    except FileNotFoundError:
        print("ERROR: pytest not found. Install it with: pip install -e .[test]")
        return 1


def run_tests():
    """Run all tests with pytest."""
    print("=" * 70)
    print("Running Voice Tally Tests")
    print("=" * 70)
    print()

    return _run([sys.executable, "-m", "pytest", "tests/", "-v", "--tb=short", "--color=yes"])


def run_tests_with_coverage():
    """Run tests with coverage reporting."""
    print("=" * 70)
    print("Running Tests with Coverage Report")
    print("=" * 70)
    print()

    cmd = [sys.executable, "-m", "pytest", "tests/"]
    cmd += [f"--cov={pkg}" for pkg in PACKAGES]
    cmd += ["--cov-report=term-missing", "--cov-report=html", "-v"]

    code = _run(cmd)
    if code == 0:
        print()
        print("=" * 70)
        print("Coverage report generated in htmlcov/index.html")
        print("=" * 70)
    return code


if __name__ == "__main__":
    if "--coverage" in sys.argv or "-c" in sys.argv:
        exit_code = run_tests_with_coverage()
    else:
        exit_code = run_tests()

    sys.exit(exit_code)
