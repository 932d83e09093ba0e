"""Length unit conversion.

Input sources disagree on units (the database stores millimetres, the
measurement form uses the user's preferred unit, fabric widths arrive in
centimetres or inches). Everything is converted to metres once, at the
boundary, before any calculation.
"""

import logging
from typing import Dict, Optional, Union

from ..models.measurement import LengthUnit
from .service_factory import service_factory

logger = logging.getLogger(__name__)


METRES_PER_UNIT: Dict[LengthUnit, float] = {
    LengthUnit.MILLIMETRE: 0.001,
    LengthUnit.CENTIMETRE: 0.01,
    LengthUnit.METRE: 1.0,
    LengthUnit.INCH: 0.0254,
    LengthUnit.FOOT: 0.3048,
    LengthUnit.YARD: 0.9144,
}

UNIT_ALIASES: Dict[str, LengthUnit] = {
    "mm": LengthUnit.MILLIMETRE,
    "millimetre": LengthUnit.MILLIMETRE,
    "millimeter": LengthUnit.MILLIMETRE,
    "millimetres": LengthUnit.MILLIMETRE,
    "millimeters": LengthUnit.MILLIMETRE,
    "cm": LengthUnit.CENTIMETRE,
    "centimetre": LengthUnit.CENTIMETRE,
    "centimeter": LengthUnit.CENTIMETRE,
    "centimetres": LengthUnit.CENTIMETRE,
    "centimeters": LengthUnit.CENTIMETRE,
    "m": LengthUnit.METRE,
    "metre": LengthUnit.METRE,
    "meter": LengthUnit.METRE,
    "metres": LengthUnit.METRE,
    "meters": LengthUnit.METRE,
    "in": LengthUnit.INCH,
    "inch": LengthUnit.INCH,
    "inches": LengthUnit.INCH,
    '"': LengthUnit.INCH,
    "ft": LengthUnit.FOOT,
    "foot": LengthUnit.FOOT,
    "feet": LengthUnit.FOOT,
    "'": LengthUnit.FOOT,
    "yd": LengthUnit.YARD,
    "yard": LengthUnit.YARD,
    "yards": LengthUnit.YARD,
}

UnitLike = Union[LengthUnit, str, None]


class UnitConverterService:
    """Stateless length converter."""

    def parse_unit(self, unit: UnitLike) -> Optional[LengthUnit]:
        """
        Resolve a unit name or alias.

        Args:
            unit: LengthUnit, alias string ("cm", "inches", '"'...) or None

        Returns:
            LengthUnit, or None when the unit is not recognised
        """
        if isinstance(unit, LengthUnit):
            return unit
        if not unit:
            return None
        return UNIT_ALIASES.get(str(unit).strip().lower())

    def to_metres(self, value: float, unit: UnitLike) -> float:
        """
        Convert a length to metres.

        Unknown units pass the value through unchanged and log a warning.
        """
        parsed = self.parse_unit(unit)
        if parsed is None:
            logger.warning(f"Unknown length unit {unit!r}; value {value} passed through as metres")
            return float(value)
        return float(value) * METRES_PER_UNIT[parsed]

    def from_metres(self, value: float, unit: UnitLike) -> float:
        """
        Convert a length in metres to the given unit.

        Unknown units pass the value through unchanged and log a warning.
        """
        parsed = self.parse_unit(unit)
        if parsed is None:
            logger.warning(f"Unknown length unit {unit!r}; value {value} passed through as metres")
            return float(value)
        return float(value) / METRES_PER_UNIT[parsed]

    def convert(self, value: float, from_unit: UnitLike, to_unit: UnitLike) -> float:
        """Convert between any two supported units."""
        return self.from_metres(self.to_metres(value, from_unit), to_unit)


@service_factory
def get_unit_converter() -> UnitConverterService:
    """Get UnitConverterService singleton instance."""
    return UnitConverterService()


def to_metres(value: float, unit: UnitLike) -> float:
    """Module-level shortcut for UnitConverterService.to_metres."""
    return get_unit_converter().to_metres(value, unit)


def from_metres(value: float, unit: UnitLike) -> float:
    """Module-level shortcut for UnitConverterService.from_metres."""
    return get_unit_converter().from_metres(value, unit)
