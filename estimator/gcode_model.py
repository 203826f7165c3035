from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Tuple, Union


Point3D = Tuple[float, float, float]

ORIGIN: Point3D = (0.0, 0.0, 0.0)

# Layer index used for moves that happen before the first ;LAYER: marker.
PREAMBLE_LAYER = -1


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Move:
    """Linear move to absolute coordinates.

    Axes left as None keep their previous value. A Move without any axis is
    a pure feed-rate update (``F600`` / ``FEEDRATE 600``).
    """

    x: Optional[float] = None
    y: Optional[float] = None
    z: Optional[float] = None
    feed_rate: Optional[float] = None  # mm/min, already converted

    def has_axes(self) -> bool:
        return self.x is not None or self.y is not None or self.z is not None


@dataclass(frozen=True)
class LaserOn:
    pass


@dataclass(frozen=True)
class LaserOff:
    pass


@dataclass(frozen=True)
class Comment:
    text: str = ""


@dataclass(frozen=True)
class NoOp:
    code: str


@dataclass(frozen=True)
class Unrecognized:
    raw_line: str
    reason: str = "unknown command"


Command = Union[Move, LaserOn, LaserOff, Comment, NoOp, Unrecognized]


# ---------------------------------------------------------------------------
# Machine state
# ---------------------------------------------------------------------------


class InterpreterState(Enum):
    IDLE = auto()
    EXPOSING = auto()
    NOT_EXPOSING = auto()


@dataclass
class MachineState:
    """Mutable machine registers for one file.

    feed_rate is in mm/min and stays None until the first F word is seen.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    feed_rate: Optional[float] = None
    laser_on: bool = False

    @property
    def position(self) -> Point3D:
        return self.x, self.y, self.z

    def move_to(self, position: Point3D) -> None:
        self.x, self.y, self.z = position


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LineDiagnostic:
    """A line that was kept out of the estimate."""

    line_number: int
    raw_text: str
    reason: str


@dataclass(frozen=True)
class LayerStats:
    index: int
    distance_mm: float = 0.0
    laser_seconds: float = 0.0
    layer_change_seconds: float = 0.0
    move_count: int = 0

    @property
    def total_seconds(self) -> float:
        return self.laser_seconds + self.layer_change_seconds


@dataclass(frozen=True)
class TimeBreakdown:
    """Estimated time for a single file.

    Only the two buckets are stored; total_seconds is always derived from
    them. ``complete`` is False when the pass stopped early.
    """

    laser_seconds: float = 0.0
    layer_change_seconds: float = 0.0
    diagnostics: Tuple[LineDiagnostic, ...] = ()
    layers: Tuple[LayerStats, ...] = ()
    slicer_estimate_seconds: Optional[int] = None
    move_count: int = 0
    line_count: int = 0
    complete: bool = True

    @property
    def total_seconds(self) -> float:
        return self.laser_seconds + self.layer_change_seconds

    @property
    def ignored_line_count(self) -> int:
        return len(self.diagnostics)

    @property
    def layer_count(self) -> int:
        """Number of real layers (the preamble does not count)."""
        return sum(1 for layer in self.layers if layer.index != PREAMBLE_LAYER)
