from __future__ import annotations

from typing import Optional

from estimator.gcode_model import TimeBreakdown


class EstimationError(Exception):
    """Base class for failures that stop the estimate of one file."""


class MissingFeedRateError(EstimationError):
    """A move with non-zero travel came before any feed rate was set.

    ``partial`` holds what was accumulated up to the failing line; it is
    marked ``complete=False`` and must never be shown as a final total.
    """

    def __init__(
        self,
        line_number: Optional[int] = None,
        raw_line: str = "",
        partial: Optional[TimeBreakdown] = None,
    ) -> None:
        self.line_number = line_number
        self.raw_line = raw_line
        self.partial = partial
        if line_number is None:
            message = "missing feed rate"
        else:
            message = f"missing feed rate at line {line_number}"
        super().__init__(message)


class MoveOutOfRangeError(ValueError):
    """A move whose duration is not a finite number of seconds."""
