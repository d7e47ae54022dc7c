"""Nox sessions orchestrating http_logging unit suites."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

import nox


PYTHON_VERSIONS = ["3.11"]
PROJECT_ROOT = Path(__file__).parent

nox.options.sessions = ["tests(unit_http_logging)"]


def _install_test_requirements(session: nox.Session) -> None:
    """Install the package and core testing toolchain inside the session environment."""

    session.install("-e", ".[test]")


def _run_suite(session: nox.Session, targets: Iterable[str]) -> None:
    _install_test_requirements(session)

    session.run("coverage", "run", "--source=http_logging", "-m", "pytest", *targets, *session.posargs)
    session.run("coverage", "report", "--show-missing")


@nox.session(python=PYTHON_VERSIONS, reuse_venv=True, name="tests(unit_http_logging)")
def tests_unit_http_logging(session: nox.Session) -> None:
    """Execute http_logging unit suites with coverage."""

    _run_suite(session, ["tests/unit/http_logging"])
