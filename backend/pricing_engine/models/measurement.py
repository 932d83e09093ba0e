"""Window measurement data model.

All lengths are metres. Conversion from whatever unit the surrounding
application stores happens once, in the record mapper, before a Measurement
is built.
"""

from enum import Enum
from typing import Optional, Literal

from pydantic import BaseModel, Field


class LengthUnit(str, Enum):
    """Length units accepted at the system boundary."""

    MILLIMETRE = "mm"
    CENTIMETRE = "cm"
    METRE = "m"
    INCH = "in"
    FOOT = "ft"
    YARD = "yd"


class Measurement(BaseModel):
    """One window's measurements and make-up allowances (metres)."""

    rail_width: float = Field(0.0, description="Track/rod width")
    drop: float = Field(0.0, description="Finished drop")
    pooling: float = Field(0.0, ge=0, description="Extra length left on the floor")

    # None means "use the pricing profile default"
    header_allowance: Optional[float] = Field(None, ge=0, description="Header/top hem allowance")
    bottom_hem: Optional[float] = Field(None, ge=0, description="Bottom hem allowance")
    side_hem: Optional[float] = Field(None, ge=0, description="Side hem allowance per side")
    seam_hem: Optional[float] = Field(None, ge=0, description="Total allowance per seam join")
    return_left: Optional[float] = Field(None, ge=0, description="Left return")
    return_right: Optional[float] = Field(None, ge=0, description="Right return")
    overlap: Optional[float] = Field(None, ge=0, description="Centre overlap (pairs only)")
    waste_percent: Optional[float] = Field(None, ge=0, description="Waste percentage, e.g. 5 = 5%")
    fullness_ratio: Optional[float] = Field(None, ge=1, description="Fullness multiplier")

    panel_configuration: Literal["single", "pair"] = Field(
        "pair", description="Single curtain or a pair"
    )
    orientation: Literal["vertical", "railroaded"] = Field(
        "vertical", description="Fabric roll direction"
    )

    @property
    def curtain_count(self) -> int:
        """Number of curtains made for this window."""
        return 2 if self.panel_configuration == "pair" else 1

    @property
    def is_complete(self) -> bool:
        """Rail width and drop must both be positive before anything is priced."""
        return self.rail_width > 0 and self.drop > 0

    class Config:
        """Pydantic configuration."""
        json_schema_extra = {
            "example": {
                "rail_width": 2.0,
                "drop": 2.5,
                "header_allowance": 0.08,
                "bottom_hem": 0.15,
                "seam_hem": 0.015,
                "waste_percent": 5,
                "fullness_ratio": 2.0,
                "panel_configuration": "pair",
            }
        }
