"""Fabric, lining, heading and option selection models."""

from enum import Enum
from typing import Optional, Literal

from pydantic import BaseModel, Field

from .grid import PricingGrid


class FabricItem(BaseModel):
    """A fabric as priced for calculation (widths and repeats in metres)."""

    id: Optional[str] = Field(None, description="Inventory item id")
    name: str = Field("Fabric", description="Display name")
    price_per_metre: float = Field(0.0, ge=0, description="Cost price per linear metre (or per sqm)")
    width: float = Field(..., description="Fabric roll width")
    vertical_repeat: float = Field(0.0, ge=0, description="Vertical pattern repeat")
    horizontal_repeat: float = Field(0.0, ge=0, description="Horizontal pattern repeat")
    subcategory: Optional[str] = Field(None, description="Inventory subcategory, used for markup rules")
    pricing_grid_markup: Optional[float] = Field(
        None, ge=0, description="Markup tied to the pricing grid this fabric uses"
    )
    pricing_grid: Optional[PricingGrid] = Field(None, description="Width x drop price table, used by grid pricing")

    model_config = {"frozen": True}


class FabricSource(BaseModel):
    """Tagged fabric: what the user picked, or the configured fallback."""

    kind: Literal["selected", "fallback"]
    fabric: FabricItem

    model_config = {"frozen": True}

    @classmethod
    def selected(cls, fabric: FabricItem) -> "FabricSource":
        return cls(kind="selected", fabric=fabric)

    @classmethod
    def fallback(cls, fabric: FabricItem) -> "FabricSource":
        return cls(kind="fallback", fabric=fabric)

    @property
    def is_fallback(self) -> bool:
        return self.kind == "fallback"


class LiningSelection(BaseModel):
    """Selected lining."""

    type: str = Field(..., description="Lining type, e.g. blackout")
    price_per_metre: float = Field(0.0, ge=0)
    labour_per_curtain: float = Field(0.0, ge=0)

    model_config = {"frozen": True}


class HeadingSelection(BaseModel):
    """Selected heading style."""

    name: str = Field(..., description="Heading name, e.g. pinch pleat")
    fullness_ratio: Optional[float] = Field(None, ge=1, description="Overrides measurement fullness")
    extra_fabric: float = Field(0.0, ge=0, description="Extra length added to each drop")
    upcharge_per_metre: float = Field(0.0, ge=0, description="Charged per metre of rail")
    upcharge_per_curtain: float = Field(0.0, ge=0)

    model_config = {"frozen": True}


class ManufacturingType(str, Enum):
    """How the treatment is made up."""

    MACHINE = "machine"
    HAND = "hand"


class OptionPricingMethod(str, Enum):
    """How an option's price scales with the window."""

    FIXED = "fixed"
    PER_UNIT = "per-unit"
    PER_METRE = "per-metre"
    PER_SQM = "per-sqm"
    PER_DROP = "per-drop"
    PER_PANEL = "per-panel"
    PER_WIDTH = "per-width"
    PERCENTAGE = "percentage"
    PRICING_GRID = "pricing-grid"


class TreatmentOption(BaseModel):
    """An extra (tie-backs, motorisation, trims...)."""

    name: str
    price: float = Field(0.0, ge=0)
    pricing_method: OptionPricingMethod = OptionPricingMethod.FIXED
    description: Optional[str] = None
    pricing_grid: Optional[PricingGrid] = Field(None, description="Price table for grid-priced options")

    model_config = {"frozen": True}
