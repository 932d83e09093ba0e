"""Cost breakdown line model."""

from enum import Enum
from typing import Optional, Literal

from pydantic import BaseModel, Field


class CostCategory(str, Enum):
    """Breakdown line categories."""

    FABRIC = "fabric"
    LINING = "lining"
    MANUFACTURING = "manufacturing"
    HEADING = "heading"
    OPTION = "option"


class CostBreakdownLine(BaseModel):
    """One itemised cost component. Created once, never mutated."""

    id: str = Field(..., description="Stable line id, e.g. 'fabric', 'option-0'")
    category: CostCategory
    name: str
    description: Optional[str] = None
    quantity: float = Field(..., description="Quantity in `unit`")
    unit: str = Field(..., description="m, sqm, panel, width, item")
    unit_price: float
    total: float = Field(..., description="Rounded to cents")
    source: Optional[Literal["selected", "fallback"]] = Field(
        None, description="Fabric lines only: whether the fabric was a fallback"
    )

    model_config = {"frozen": True}
