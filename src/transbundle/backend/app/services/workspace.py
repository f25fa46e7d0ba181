"""Per-request scratch directories and run deadlines."""

from __future__ import annotations

import logging
import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from time import monotonic
from typing import Callable, Iterator

from .errors import PipelineTimeout

logger = logging.getLogger(__name__)

ARCHIVE_NAME = "archive.zip"


@dataclass(frozen=True)
class Workspace:
    """Private staging area for one pipeline run."""

    request_id: str
    root: Path

    @property
    def archive_path(self) -> Path:
        return self.root / ARCHIVE_NAME

    @property
    def translations_dir(self) -> Path:
        return self.root / "translations"


@contextmanager
def scratch_workspace(request_id: str, *, base_dir: Path | None = None) -> Iterator[Workspace]:
    """Yield a fresh workspace and remove it on every exit path."""

    if base_dir is not None:
        base_dir.mkdir(parents=True, exist_ok=True)
    root = Path(tempfile.mkdtemp(prefix=f"transbundle-{request_id}-", dir=base_dir))
    workspace = Workspace(request_id=request_id, root=root)
    workspace.translations_dir.mkdir()
    logger.debug("Created workspace %s for request %s", root, request_id)
    try:
        yield workspace
    finally:
        shutil.rmtree(root, ignore_errors=True)
        logger.debug("Removed workspace %s for request %s", root, request_id)


@dataclass
class Deadline:
    """Wall-clock budget shared by every stage of a run."""

    seconds: float
    clock: Callable[[], float] = monotonic
    started_at: float = field(init=False)

    def __post_init__(self) -> None:
        self.started_at = self.clock()

    def remaining(self) -> float:
        return self.seconds - (self.clock() - self.started_at)

    def check(self, stage: str) -> None:
        """Raise :class:`PipelineTimeout` when the budget is spent."""

        if self.remaining() <= 0:
            raise PipelineTimeout(
                f"Deadline of {self.seconds:g}s exceeded during {stage}"
            )

    def timeout(self, ceiling: float) -> float:
        """Return a per-call timeout capped by ``ceiling`` and the remaining budget."""

        return max(min(ceiling, self.remaining()), 0.001)


__all__ = ["ARCHIVE_NAME", "Deadline", "Workspace", "scratch_workspace"]
