"""Per-window pricing input and result models."""

from typing import Generic, List, Literal, Optional, Tuple, TypeVar

from pydantic import BaseModel, Field

from .breakdown import CostBreakdownLine
from .measurement import Measurement
from .selection import (
    FabricItem,
    HeadingSelection,
    LiningSelection,
    ManufacturingType,
    TreatmentOption,
)


T = TypeVar("T")


class PricingWarning(BaseModel):
    """Non-fatal condition reported alongside a result."""

    code: str = Field(..., description="ErrorCode value")
    message: str
    item_id: Optional[str] = Field(None, description="Window or line item the warning refers to")

    model_config = {"frozen": True}


class WindowTreatmentInput(BaseModel):
    """Canonical per-window record: everything needed to price one treatment."""

    id: str = Field(..., description="Window/treatment id")
    name: str = Field("Window treatment", description="Display name, e.g. 'Lounge bay - curtains'")
    category: Optional[str] = Field("curtains", description="Treatment category for markup rules")
    subcategory: Optional[str] = None
    measurement: Measurement = Field(default_factory=Measurement)
    fabric: Optional[FabricItem] = None
    lining: Optional[LiningSelection] = None
    heading: Optional[HeadingSelection] = None
    options: List[TreatmentOption] = Field(default_factory=list)
    manufacturing_type: ManufacturingType = ManufacturingType.MACHINE
    pricing_method: Literal["per_metre", "per_sqm", "pricing_grid"] = Field(
        "per_metre",
        description="Fabric sold by linear metre, by area for blinds, or from the fabric's pricing grid",
    )
    markup_override: Optional[float] = Field(
        None, ge=0, description="Explicit per-item/per-job markup percentage"
    )


class FabricRequirement(BaseModel):
    """Fabric quantities for one window (metres)."""

    required_width: float
    widths_required: int
    total_drop_per_width: float
    seam_allowance_total: float
    linear_metres_base: float
    linear_metres: float
    fabric_width: float
    fullness_ratio: float
    leftover_width: float = Field(0.0, description="Unused fabric width across all widths")

    model_config = {"frozen": True}

    @classmethod
    def empty(cls, fabric_width: float, fullness_ratio: float) -> "FabricRequirement":
        """Zero requirement for an incomplete measurement."""
        return cls(
            required_width=0.0,
            widths_required=0,
            total_drop_per_width=0.0,
            seam_allowance_total=0.0,
            linear_metres_base=0.0,
            linear_metres=0.0,
            fabric_width=fabric_width,
            fullness_ratio=fullness_ratio,
        )


class TreatmentPricingResult(BaseModel):
    """Priced window treatment. Safe to hand to several renderers."""

    treatment_id: str
    status: Literal["complete", "incomplete"] = "complete"
    linear_metres: float
    widths_required: int
    price_per_metre: float
    fabric_cost: float
    lining_cost: float
    manufacturing_cost: float
    heading_cost: float
    options_cost: float
    total_cost: float
    currency: str
    fabric_source: Literal["selected", "fallback"]
    requirement: FabricRequirement
    breakdown: Tuple[CostBreakdownLine, ...] = ()
    warnings: Tuple[PricingWarning, ...] = ()

    model_config = {"frozen": True}


class CalculationOutcome(BaseModel, Generic[T]):
    """Typed success/failure result for callers that must not raise."""

    success: bool
    data: Optional[T] = None
    error_code: Optional[str] = None
    message: Optional[str] = None
    details: Optional[dict] = None
