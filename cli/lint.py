"""Code quality commands."""

import subprocess
import sys

SOURCES = ["recaptcha_validator/", "cli/", "tests/"]


def main() -> None:
    """Run ruff linter."""
    sys.exit(
        subprocess.run(
            [sys.executable, "-m", "ruff", "check", *SOURCES],
            check=False,
        ).returncode
    )


def format_code() -> None:
    """Run ruff formatter."""
    sys.exit(
        subprocess.run(
            [sys.executable, "-m", "ruff", "format", *SOURCES],
            check=False,
        ).returncode
    )
