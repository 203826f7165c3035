from __future__ import annotations

import math
from typing import Tuple

from estimator.errors import MissingFeedRateError, MoveOutOfRangeError
from estimator.gcode_model import MachineState, Move, Point3D


SECONDS_PER_MINUTE = 60.0


def target_position(state: MachineState, move: Move) -> Point3D:
    """Absolute target of ``move``; axes it leaves out keep their value."""
    tx = state.x if move.x is None else move.x
    ty = state.y if move.y is None else move.y
    tz = state.z if move.z is None else move.z
    return tx, ty, tz


def travel_distance(start: Point3D, end: Point3D) -> float:
    return math.dist(start, end)


def time_for_move(state_before: MachineState, move: Move) -> Tuple[float, Point3D]:
    """
    Duration in seconds of a single linear move, plus where it ends.

    Constant speed model: no acceleration, no jerk. The move's own feed
    rate wins over the remembered one. ``state_before`` is not modified;
    keeping the feed register up to date is the interpreter's job.

    Raises MissingFeedRateError if the move travels but no feed rate is
    known. The error carries no line number; the caller adds it.
    Raises MoveOutOfRangeError when distance and feed rate overflow the
    duration.
    """
    start = state_before.position
    end = target_position(state_before, move)
    distance = travel_distance(start, end)

    if distance == 0.0:
        return 0.0, end

    feed_rate = move.feed_rate if move.feed_rate is not None else state_before.feed_rate
    if feed_rate is None:
        raise MissingFeedRateError()

    # feed rates are mm/min
    seconds = distance * SECONDS_PER_MINUTE / feed_rate
    if not math.isfinite(seconds):
        raise MoveOutOfRangeError("move duration out of range")
    return seconds, end
