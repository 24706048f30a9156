from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.repo_builder import RepoBuilder

MATH_TS = """
export interface Result {
  value: number;
}

export function add(a: number, b: number): number {
  return a + b;
}
"""

APP_TS = """
import { add } from './math';

export function run() {
  return add(1, 2);
}
"""


@pytest.fixture(autouse=True)
def _reset_tsarchitect_logger() -> Iterator[None]:
    """Undo configure_logging so handlers never outlive a test's captured streams."""
    yield
    logger = logging.getLogger("tsarchitect")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """Provide a throwaway TypeScript project rooted at the pytest tmp_path."""
    return RepoBuilder(tmp_path)


@pytest.fixture
def math_project(repo_builder: RepoBuilder) -> RepoBuilder:
    """Two-file project: ``math.ts`` exports ``Result``/``add``, ``app.ts`` imports it."""
    repo_builder.write({"math.ts": MATH_TS, "app.ts": APP_TS})
    return repo_builder
