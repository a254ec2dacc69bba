from __future__ import annotations

import logging
import shutil
import sys
from pathlib import Path

import pytest

# pytest may run without installing the project; ensure repo root is importable.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from consensus.core.config import Config  # noqa: E402
from consensus.core.types import Observation, Outcome, ResolutionStatus  # noqa: E402


@pytest.fixture()
def temp_dir(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture()
def test_config(temp_dir: Path) -> Config:
    """Config loaded from a copy of the shipped default.yaml, seeded."""

    cfg_src = REPO_ROOT / "config" / "default.yaml"
    cfg_dst_dir = temp_dir / "config"
    cfg_dst_dir.mkdir(parents=True, exist_ok=True)
    shutil.copy2(cfg_src, cfg_dst_dir / "default.yaml")

    c = Config.from_yaml(cfg_dst_dir / "default.yaml")
    return c.model_copy(update={"seed": 7})


def _make_history(numbers: list[int], *, statuses: list[ResolutionStatus] | None = None) -> list[Observation]:
    """Newest-first observations from newest-first numbers."""

    out: list[Observation] = []
    for i, n in enumerate(numbers):
        status = statuses[i] if statuses is not None and i < len(statuses) else ResolutionStatus.PENDING
        out.append(
            Observation(
                period=str(100000 + len(numbers) - i),
                number=float(n),
                outcome=Outcome.from_number(n),
                status=status,
            )
        )
    return out


@pytest.fixture()
def make_history():
    return _make_history


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """configure_logging() detaches the package logger from root; undo that between tests."""

    yield
    logger = logging.getLogger("consensus")
    for h in list(logger.handlers):
        if getattr(h, "_consensus_handler", False):
            logger.removeHandler(h)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
