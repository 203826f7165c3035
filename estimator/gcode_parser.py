from __future__ import annotations

import math
from typing import Dict, Iterator, List, Optional, Tuple

from estimator.config import EstimatorConfig, default_config
from estimator.gcode_model import (
    Command,
    Comment,
    LaserOff,
    LaserOn,
    Move,
    NoOp,
    Unrecognized,
)


MOVE_WORDS = ("X", "Y", "Z", "F")


def classify(line: str, config: Optional[EstimatorConfig] = None) -> Command:
    """
    Turn one line of printer code into a Command.

    - Never raises: anything that cannot be understood becomes Unrecognized.
    - Accepts plain gcode (``G1 X10 F600``, ``M3``, ``F600``) and the
      mnemonic form (``MOVE X 10``, ``LASER ON``, ``FEEDRATE 600``).
    - Words may be written glued (``X10``) or spaced (``X 10``).
    - Everything after ``;`` or ``(`` is a comment.
    """
    if config is None:
        config = default_config()
    codes = config.codes

    raw = line.rstrip("\r\n")
    stripped = raw.strip()

    if not stripped:
        return Comment()

    code_part = _strip_inline_comments(stripped, codes.comment_markers).strip()

    if not code_part:
        text = stripped[1:]
        if stripped[0] == "(":
            text = text.rstrip(")")
        return Comment(text=text.strip())

    tokens = code_part.split()
    head = tokens[0].upper()

    # ---- mnemonic dialect
    if head == "LASER":
        state = tokens[1].upper() if len(tokens) == 2 else ""
        if state == "ON":
            return LaserOn()
        if state == "OFF":
            return LaserOff()
        return Unrecognized(raw, "LASER expects ON or OFF")

    if head == "FEEDRATE":
        if len(tokens) != 2:
            return Unrecognized(raw, "FEEDRATE expects a single value")
        return _build_move(raw, ["F", tokens[1]], config)

    if head == "MOVE":
        return _build_move(raw, tokens[1:], config)

    # ---- gcode dialect
    if head.startswith("F"):
        return _build_move(raw, tokens, config)

    code = _normalize_code(head)
    if code is None:
        return Unrecognized(raw, f"malformed command {tokens[0]!r}")

    if codes.is_move(code):
        return _build_move(raw, tokens[1:], config)

    if codes.is_laser_on(code):
        # Marlin style boards switch the light off with M106 S0.
        if code == "M106" and _s_word(tokens[1:]) == 0.0:
            return LaserOff()
        return LaserOn()

    if codes.is_laser_off(code):
        return LaserOff()

    if codes.is_noop(code):
        return NoOp(code)

    return Unrecognized(raw, f"unsupported code {code}")


def classify_lines(
    source: str, config: Optional[EstimatorConfig] = None
) -> Iterator[Tuple[int, str, Command]]:
    """Yield ``(line_number, raw_line, command)`` for every line, numbered from 1."""
    if config is None:
        config = default_config()
    for line_number, line in enumerate(source.splitlines(), start=1):
        yield line_number, line, classify(line, config)


def _normalize_code(word: str) -> Optional[str]:
    """``G01`` -> ``G1``, ``m05`` -> ``M5``; None if the word is not a code."""
    letter = word[0].upper()
    digits = word[1:]
    if letter not in ("G", "M") or not digits.isdecimal():
        return None
    return f"{letter}{int(digits)}"


def _strip_inline_comments(text: str, markers: str) -> str:
    """Drop ``( ... )`` comments and everything after any other marker."""
    kept: List[str] = []
    in_paren = False
    for ch in text:
        if in_paren:
            if ch == ")":
                in_paren = False
                kept.append(" ")
            continue
        if ch == "(" and "(" in markers:
            in_paren = True
            continue
        if ch in markers:
            break
        kept.append(ch)
    return "".join(kept)


def _build_move(raw: str, tokens: List[str], config: EstimatorConfig) -> Command:
    try:
        words = _parse_words(tokens, MOVE_WORDS)
    except ValueError as exc:
        return Unrecognized(raw, str(exc))

    if not words:
        return Unrecognized(raw, "move without coordinates or feed rate")

    feed_rate: Optional[float] = None
    if "F" in words:
        feed_rate = words["F"] * config.feed_unit.to_mm_per_min
        if feed_rate <= 0.0:
            return Unrecognized(raw, "feed rate must be positive")

    return Move(
        x=words.get("X"),
        y=words.get("Y"),
        z=words.get("Z"),
        feed_rate=feed_rate,
    )


def _parse_words(tokens: List[str], allowed: Tuple[str, ...]) -> Dict[str, float]:
    words: Dict[str, float] = {}
    pending: Optional[str] = None

    for tok in tokens:
        if pending is not None:
            words[pending] = _parse_number(pending, tok)
            pending = None
            continue

        letter = tok[0].upper()
        rest = tok[1:]

        if letter not in allowed:
            raise ValueError(f"unexpected word {tok!r}")
        if letter in words:
            raise ValueError(f"duplicate {letter} word")

        if rest:
            words[letter] = _parse_number(letter, rest)
        else:
            # spaced form: "X 10"
            pending = letter

    if pending is not None:
        raise ValueError(f"missing value for {pending}")

    return words


def _parse_number(letter: str, text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise ValueError(f"invalid number {text!r} for {letter}") from None
    if not math.isfinite(value):
        raise ValueError(f"invalid number {text!r} for {letter}")
    return value


def _s_word(tokens: List[str]) -> Optional[float]:
    for tok in tokens:
        if tok[0].upper() == "S" and len(tok) > 1:
            try:
                return float(tok[1:])
            except ValueError:
                return None
    return None
