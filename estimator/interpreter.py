"""
Single pass timing accumulator.

The interpreter walks the classified commands of one file in order and keeps
three things up to date:

- the MachineState (position, feed rate register, laser flag),
- a small explicit state machine (IDLE -> EXPOSING / NOT_EXPOSING),
- the two time buckets.

A move is charged to the laser bucket when the laser was on *before* the
move started, otherwise to the layer change bucket.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional

from estimator.config import EstimatorConfig, default_config
from estimator.errors import MissingFeedRateError, MoveOutOfRangeError
from estimator.gcode_model import (
    PREAMBLE_LAYER,
    Command,
    Comment,
    InterpreterState,
    LaserOff,
    LaserOn,
    LayerStats,
    LineDiagnostic,
    MachineState,
    Move,
    NoOp,
    TimeBreakdown,
    Unrecognized,
)
from estimator.gcode_parser import classify_lines
from estimator.motion import time_for_move, travel_distance


logger = logging.getLogger(__name__)


@dataclass
class _LayerTotals:
    index: int
    distance_mm: float = 0.0
    laser_seconds: float = 0.0
    layer_change_seconds: float = 0.0
    move_count: int = 0

    def freeze(self) -> LayerStats:
        return LayerStats(
            index=self.index,
            distance_mm=self.distance_mm,
            laser_seconds=self.laser_seconds,
            layer_change_seconds=self.layer_change_seconds,
            move_count=self.move_count,
        )


class TimingInterpreter:
    def __init__(self, config: Optional[EstimatorConfig] = None) -> None:
        self.config = config or default_config()
        self.machine = MachineState()
        self.state = InterpreterState.IDLE

        self._laser_seconds = 0.0
        self._layer_change_seconds = 0.0
        self._diagnostics: List[LineDiagnostic] = []
        self._layers: Dict[int, _LayerTotals] = {}
        self._current_layer = PREAMBLE_LAYER
        self._slicer_estimate: Optional[int] = None
        self._move_count = 0
        self._line_count = 0

    # ------------------------------------------------------------------ steps

    def step(self, line_number: int, raw_line: str, command: Command) -> None:
        """Apply one command. Raises MissingFeedRateError with line info."""
        self._line_count = line_number

        if isinstance(command, Move):
            self._apply_move(line_number, raw_line, command)
        elif isinstance(command, LaserOn):
            self.machine.laser_on = True
            self.state = InterpreterState.EXPOSING
        elif isinstance(command, LaserOff):
            self.machine.laser_on = False
            self.state = InterpreterState.NOT_EXPOSING
        elif isinstance(command, Comment):
            self._read_metadata(line_number, raw_line, command.text)
        elif isinstance(command, NoOp):
            pass
        elif isinstance(command, Unrecognized):
            self._add_diagnostic(line_number, command.raw_line, command.reason)
        else:
            raise TypeError(f"not a command: {command!r}")

    def _apply_move(self, line_number: int, raw_line: str, move: Move) -> None:
        start = self.machine.position
        try:
            seconds, end = time_for_move(self.machine, move)
        except MissingFeedRateError:
            raise MissingFeedRateError(
                line_number=line_number,
                raw_line=raw_line,
                partial=self.result(complete=False),
            ) from None
        except MoveOutOfRangeError as exc:
            self._add_diagnostic(line_number, raw_line, str(exc))
            return

        # Attribution uses the laser flag as it was before the move.
        laser_seconds = self._laser_seconds
        layer_change_seconds = self._layer_change_seconds
        if self.machine.laser_on:
            laser_seconds += seconds
        else:
            layer_change_seconds += seconds
        if not math.isfinite(laser_seconds + layer_change_seconds):
            self._add_diagnostic(line_number, raw_line, "total duration out of range")
            return

        if move.feed_rate is not None:
            self.machine.feed_rate = move.feed_rate

        if not move.has_axes():
            return

        layer = self._layer(self._current_layer)
        distance = travel_distance(start, end)

        self._laser_seconds = laser_seconds
        self._layer_change_seconds = layer_change_seconds
        if self.machine.laser_on:
            layer.laser_seconds += seconds
        else:
            layer.layer_change_seconds += seconds

        layer.distance_mm += distance
        layer.move_count += 1
        self._move_count += 1
        self.machine.move_to(end)

        if self.state is InterpreterState.IDLE:
            self.state = InterpreterState.NOT_EXPOSING

    # --------------------------------------------------------------- metadata

    def _read_metadata(self, line_number: int, raw_line: str, text: str) -> None:
        if text.startswith("LAYER:"):
            try:
                index = int(text[len("LAYER:"):])
            except ValueError:
                self._add_diagnostic(line_number, raw_line, "invalid layer number")
                return
            self._current_layer = index
            self._layer(index)
            if index > 0 and index % 100 == 0:
                logger.debug("Processed %d layers", index)

        elif text.startswith("TIME:"):
            try:
                seconds = int(text[len("TIME:"):])
            except ValueError:
                seconds = -1
            if seconds < 0:
                self._add_diagnostic(line_number, raw_line, "invalid slicer time")
                return
            # The placeholder means the slicer did not estimate anything.
            if seconds != self.config.placeholder_slicer_time:
                self._slicer_estimate = seconds

    def _layer(self, index: int) -> _LayerTotals:
        layer = self._layers.get(index)
        if layer is None:
            layer = _LayerTotals(index=index)
            self._layers[index] = layer
        return layer

    def _add_diagnostic(self, line_number: int, raw_line: str, reason: str) -> None:
        logger.debug("Line %d ignored (%s): %s", line_number, reason, raw_line)
        self._diagnostics.append(LineDiagnostic(line_number, raw_line, reason))

    # ----------------------------------------------------------------- result

    def result(self, complete: bool = True) -> TimeBreakdown:
        return TimeBreakdown(
            laser_seconds=self._laser_seconds,
            layer_change_seconds=self._layer_change_seconds,
            diagnostics=tuple(self._diagnostics),
            layers=tuple(layer.freeze() for layer in self._layers.values()),
            slicer_estimate_seconds=self._slicer_estimate,
            move_count=self._move_count,
            line_count=self._line_count,
            complete=complete,
        )


def estimate_text(source: str, config: Optional[EstimatorConfig] = None) -> TimeBreakdown:
    """
    Estimate the print time of one file's text.

    Unrecognized lines end up in ``diagnostics``. A move that needs a feed
    rate before one was set raises MissingFeedRateError, whose ``partial``
    holds the incomplete breakdown.
    """
    interpreter = TimingInterpreter(config)
    for line_number, raw_line, command in classify_lines(source, interpreter.config):
        interpreter.step(line_number, raw_line, command)
    return interpreter.result()
