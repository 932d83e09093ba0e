"""Models package."""

from .measurement import LengthUnit, Measurement
from .grid import GridDropRow, PricingGrid
from .selection import (
    FabricItem,
    FabricSource,
    HeadingSelection,
    LiningSelection,
    ManufacturingType,
    OptionPricingMethod,
    TreatmentOption,
)
from .breakdown import CostBreakdownLine, CostCategory
from .profile import AllowanceDefaults, ManufacturingRate, PricingProfile, ProfileInfo
from .pricing import (
    CalculationOutcome,
    FabricRequirement,
    PricingWarning,
    TreatmentPricingResult,
    WindowTreatmentInput,
)
from .markup import MarkupResult, MarkupSettings, MarkupSource
from .quote import (
    AppliedDiscount,
    DiscountScope,
    DiscountSpec,
    DiscountType,
    PaymentSummary,
    QuoteLineItem,
    QuoteRequest,
    QuoteSettings,
    QuoteSnapshot,
    QuoteTotals,
    RoomProduct,
)
from .responses import APIResponse, ErrorResponse

__all__ = [
    "LengthUnit",
    "Measurement",
    "GridDropRow",
    "PricingGrid",
    "FabricItem",
    "FabricSource",
    "HeadingSelection",
    "LiningSelection",
    "ManufacturingType",
    "OptionPricingMethod",
    "TreatmentOption",
    "CostBreakdownLine",
    "CostCategory",
    "AllowanceDefaults",
    "ManufacturingRate",
    "PricingProfile",
    "ProfileInfo",
    "CalculationOutcome",
    "FabricRequirement",
    "PricingWarning",
    "TreatmentPricingResult",
    "WindowTreatmentInput",
    "MarkupResult",
    "MarkupSettings",
    "MarkupSource",
    "AppliedDiscount",
    "DiscountScope",
    "DiscountSpec",
    "DiscountType",
    "PaymentSummary",
    "QuoteLineItem",
    "QuoteRequest",
    "QuoteSettings",
    "QuoteSnapshot",
    "QuoteTotals",
    "RoomProduct",
    "APIResponse",
    "ErrorResponse",
]
