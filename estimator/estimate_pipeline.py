from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from estimator.config import EstimatorConfig, default_config
from estimator.errors import MissingFeedRateError
from estimator.gcode_model import TimeBreakdown
from estimator.interpreter import estimate_text


logger = logging.getLogger(__name__)


@dataclass
class FileEstimate:
    """
    Outcome for one input file.

    Exactly one of the three situations holds:
    - ``breakdown`` is set: the estimate is complete,
    - ``missing_feed`` is set: the pass stopped, see its ``partial``,
    - ``read_error`` is set: the file could not be read at all.
    """

    path: Path
    breakdown: Optional[TimeBreakdown] = None
    missing_feed: Optional[MissingFeedRateError] = None
    read_error: Optional[str] = None

    @property
    def name(self) -> str:
        return str(self.path)

    @property
    def ok(self) -> bool:
        return self.breakdown is not None


def estimate_source(
    path: Path, source: str, config: Optional[EstimatorConfig] = None
) -> FileEstimate:
    """Estimate already loaded text; ``path`` only identifies the file."""
    try:
        breakdown = estimate_text(source, config)
    except MissingFeedRateError as exc:
        logger.warning("%s: estimate stopped, %s", path, exc)
        return FileEstimate(path=path, missing_feed=exc)

    if breakdown.diagnostics:
        logger.info("%s: %d lines ignored", path, len(breakdown.diagnostics))
    return FileEstimate(path=path, breakdown=breakdown)


def estimate_file(path: Path, config: Optional[EstimatorConfig] = None) -> FileEstimate:
    """Read a gcode file and estimate it."""
    logger.info("Reading %s", path)
    try:
        source = path.read_text(encoding="utf-8", errors="ignore")
    except OSError as exc:
        logger.error("Could not read %s: %s", path, exc)
        return FileEstimate(path=path, read_error=exc.strerror or str(exc))
    return estimate_source(path, source, config)


def estimate_files(
    paths: Iterable[Path],
    config: Optional[EstimatorConfig] = None,
    jobs: int = 1,
) -> List[FileEstimate]:
    """
    Estimate every path and return the results in input order.

    Files share nothing, so with ``jobs > 1`` they are spread over a thread
    pool; ``Executor.map`` keeps the ordering.
    """
    config = config or default_config()
    paths = [Path(p) for p in paths]

    if jobs <= 1 or len(paths) <= 1:
        return [estimate_file(path, config) for path in paths]

    with ThreadPoolExecutor(max_workers=jobs) as pool:
        return list(pool.map(lambda path: estimate_file(path, config), paths))
