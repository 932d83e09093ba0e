"""Quote-level data models: line items, discounts, totals, payments."""

from enum import Enum
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field, model_validator

from ..config import settings as app_settings
from ..utils.money import round_money, to_decimal
from .markup import MarkupSettings, MarkupSource
from .pricing import PricingWarning, TreatmentPricingResult, WindowTreatmentInput


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class DiscountScope(str, Enum):
    ALL = "all"
    FABRIC_ONLY = "fabric_only"
    SELECTED_ITEMS = "selected_items"


class RoomProduct(BaseModel):
    """Flat-priced product attached to a room (poles, tracks, fitting...)."""

    id: str
    name: str
    room_id: Optional[str] = None
    category: Optional[str] = Field(None, description="Inventory category, e.g. hardware, fabric")
    subcategory: Optional[str] = None
    quantity: float = Field(1.0, ge=0)
    unit_cost: float = Field(0.0, ge=0, description="Cost price per unit")
    unit_selling_price: Optional[float] = Field(
        None, ge=0, description="Selling price per unit; markup is applied to cost when absent"
    )
    markup_override: Optional[float] = Field(None, ge=0)


class QuoteSettings(BaseModel):
    """Quote-level settings snapshot."""

    tax_rate: float = Field(
        default_factory=lambda: app_settings.default_tax_rate,
        ge=0,
        description="Fraction, e.g. 0.20 for 20%",
    )
    tax_inclusive: bool = Field(False, description="Stored selling prices already include tax")
    currency: str = Field(default_factory=lambda: app_settings.default_currency)
    markup: MarkupSettings = Field(default_factory=MarkupSettings)


class DiscountSpec(BaseModel):
    """Requested discount."""

    type: DiscountType
    value: float = Field(..., ge=0)
    scope: DiscountScope = DiscountScope.ALL
    selected_item_ids: List[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _percentage_within_range(self) -> "DiscountSpec":
        if self.type == DiscountType.PERCENTAGE and self.value > 100:
            raise ValueError("Percentage discount cannot exceed 100")
        return self


class QuoteLineItem(BaseModel):
    """One priced quote line (a window treatment or a room product).

    `total` is the net selling figure: for tax-inclusive quotes tax has already
    been extracted, exactly once, by the aggregator.
    """

    id: str
    name: str
    kind: Literal["window", "room_product"]
    room_id: Optional[str] = None
    cost_total: float
    gross_selling_total: float
    total: float
    markup_percentage: float
    markup_source: MarkupSource
    category_totals: Dict[str, float] = Field(
        default_factory=dict, description="Net selling amount per breakdown category"
    )
    gross_margin_percent: float = 0.0

    model_config = {"frozen": True}


class AppliedDiscount(BaseModel):
    """Discount as applied to a set of totals."""

    type: DiscountType
    value: float
    scope: DiscountScope
    scoped_base: float
    amount: float
    clamped: bool = False

    model_config = {"frozen": True}


class QuoteTotals(BaseModel):
    """Derived quote totals. Never edited directly; recomputed from inputs."""

    subtotal: float = Field(..., description="Net subtotal before discount")
    tax_rate: float
    tax_amount: float
    total: float
    tax_inclusive: bool = False
    currency: str = "GBP"
    discount: Optional[AppliedDiscount] = None
    cost_total: float = 0.0
    selling_total: float = 0.0
    profit_total: float = 0.0
    gross_margin_percent: float = 0.0
    warnings: Tuple[PricingWarning, ...] = ()

    model_config = {"frozen": True}

    @property
    def discounted_subtotal(self) -> float:
        """Net subtotal after discount (equals subtotal when no discount)."""
        if self.discount is None:
            return self.subtotal
        return round_money(to_decimal(self.subtotal) - to_decimal(self.discount.amount))


class PaymentSummary(BaseModel):
    """Deposit / balance figures derived from final totals."""

    total: float
    deposit_percentage: float
    deposit_amount: float
    amount_paid: float
    balance_due: float
    status: Literal["unpaid", "deposit_paid", "partially_paid", "paid"]

    model_config = {"frozen": True}


class QuoteRequest(BaseModel):
    """Everything needed to build one quote."""

    windows: List[WindowTreatmentInput] = Field(default_factory=list)
    room_products: List[RoomProduct] = Field(default_factory=list)
    settings: QuoteSettings = Field(default_factory=QuoteSettings)
    discount: Optional[DiscountSpec] = None
    amount_paid: float = Field(0.0, ge=0)
    deposit_percentage: float = Field(0.0, ge=0, le=100)


class QuoteSnapshot(BaseModel):
    """Immutable quote output consumed by preview, PDF and export alike."""

    windows: Tuple[TreatmentPricingResult, ...] = ()
    line_items: Tuple[QuoteLineItem, ...] = ()
    totals: QuoteTotals
    payment: Optional[PaymentSummary] = None

    model_config = {"frozen": True}
