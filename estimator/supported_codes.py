from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet


@dataclass(frozen=True)
class SupportedCodeConfig:
    """Which command codes the line classifier understands.

    Codes are stored upper-case in their canonical form (``G1``, not
    ``G01``); the classifier normalises leading zeros before looking them
    up. Mnemonic keywords (``MOVE``, ``LASER``, ``FEEDRATE``) are matched
    separately and do not live in these tables.
    """

    move_codes: FrozenSet[str]
    laser_on_codes: FrozenSet[str]
    laser_off_codes: FrozenSet[str]
    noop_codes: FrozenSet[str]
    comment_markers: str = ";("

    def is_move(self, code: str) -> bool:
        return code.upper() in self.move_codes

    def is_laser_on(self, code: str) -> bool:
        return code.upper() in self.laser_on_codes

    def is_laser_off(self, code: str) -> bool:
        return code.upper() in self.laser_off_codes

    def is_noop(self, code: str) -> bool:
        return code.upper() in self.noop_codes


def default_supported_config() -> SupportedCodeConfig:
    # Linear moves only; arcs (G2/G3) are not part of the resin dialect.
    move_codes = frozenset({"G0", "G1"})

    # Laser / light source on and off. M106/M107 are what Marlin based
    # resin boards use for the UV source.
    laser_on_codes = frozenset({"M3", "M4", "M106"})
    laser_off_codes = frozenset({"M5", "M107"})

    # Codes with no influence on the timing model. G21/G90 only confirm the
    # mm/absolute mode that is assumed anyway; G20, G91, G92 and G4 change
    # the outcome and are left unrecognized.
    noop_codes = frozenset({
        "G21",
        "G90",
        "M17", "M18",
        "M84",
        "M104", "M105",
        "M114", "M115",
        "M117",
        "M119",
        "M400",
    })

    return SupportedCodeConfig(
        move_codes=move_codes,
        laser_on_codes=laser_on_codes,
        laser_off_codes=laser_off_codes,
        noop_codes=noop_codes,
    )
