"""Test runner commands."""

import subprocess
import sys


def _pytest(*args: str) -> int:
    return subprocess.run(
        [sys.executable, "-m", "pytest", *args, "-v", "--tb=short"],
        check=False,
    ).returncode


def main() -> None:
    """Run unit tests."""
    sys.exit(_pytest("tests/unit"))


def test_smoke() -> None:
    """Run smoke tests against the in-process app."""
    sys.exit(_pytest("tests/smoke"))


def test_all() -> None:
    """Run all tests."""
    sys.exit(_pytest("tests/"))
