from __future__ import annotations

from typing import List

from estimator.estimate_pipeline import FileEstimate
from estimator.gcode_model import TimeBreakdown
from reporting.pretty_duration import format_duration


GREEN = "\x1b[32m"
RESET = "\x1b[0m"


def _highlight(text: str, color: bool) -> str:
    return f"{GREEN}{text}{RESET}" if color else text


def _ignored_summary(breakdown: TimeBreakdown) -> str:
    count = breakdown.ignored_line_count
    noun = "line" if count == 1 else "lines"
    return f"{count} {noun} ignored as unrecognized"


def render_breakdown(breakdown: TimeBreakdown, color: bool = False) -> List[str]:
    lines: List[str] = []
    if breakdown.slicer_estimate_seconds is not None:
        lines.append(
            "\tSlicer estimated print time: "
            + format_duration(breakdown.slicer_estimate_seconds)
        )
    lines.append(
        "\tEstimated print time: "
        + _highlight(format_duration(breakdown.total_seconds), color)
    )
    lines.append(f"\t\t       Laser: {format_duration(breakdown.laser_seconds)}")
    lines.append(f"\t\tLayer change: {format_duration(breakdown.layer_change_seconds)}")
    lines.append(f"\tLayers: {breakdown.layer_count}, moves: {breakdown.move_count}")
    if breakdown.diagnostics:
        lines.append("\t" + _ignored_summary(breakdown))
    return lines


def render_estimate(
    estimate: FileEstimate, show_ignored: bool = False, color: bool = False
) -> str:
    """Text section printed for one input file."""
    lines = [f"For {estimate.name}:"]

    if estimate.read_error is not None:
        lines.append(f"\tCould not read file: {estimate.read_error}")
        return "\n".join(lines)

    if estimate.missing_feed is not None:
        exc = estimate.missing_feed
        lines.append(f"\tEstimate could not be completed: {exc}")
        if exc.raw_line:
            lines.append(f"\t\t{exc.raw_line.strip()}")
        # partial durations are never printed
        if exc.partial is not None and show_ignored:
            lines.extend(_render_diagnostics(exc.partial))
        return "\n".join(lines)

    breakdown = estimate.breakdown
    if breakdown is None:
        lines.append("\tNo estimate available")
        return "\n".join(lines)

    lines.extend(render_breakdown(breakdown, color=color))
    if show_ignored:
        lines.extend(_render_diagnostics(breakdown))
    return "\n".join(lines)


def _render_diagnostics(breakdown: TimeBreakdown) -> List[str]:
    return [
        f"\t\tline {diag.line_number}: {diag.raw_text.strip()} ({diag.reason})"
        for diag in breakdown.diagnostics
    ]
