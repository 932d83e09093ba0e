"""Width x drop pricing grid model."""

from typing import List

from pydantic import BaseModel, Field, model_validator

from .measurement import LengthUnit


class GridDropRow(BaseModel):
    """One drop band and its price for every width column."""

    drop: float = Field(..., gt=0, description="Upper bound of the drop band, in the grid unit")
    prices: List[float] = Field(..., description="Price per width column")

    model_config = {"frozen": True}


class PricingGrid(BaseModel):
    """
    Supplier price table looked up by width and drop.

    A size is priced at the first width column and the first drop row at or
    above it; sizes beyond the table use the last column or row.
    """

    width_columns: List[float] = Field(..., min_length=1, description="Width band upper bounds, ascending")
    drop_rows: List[GridDropRow] = Field(..., min_length=1, description="Drop bands, ascending")
    unit: LengthUnit = Field(LengthUnit.CENTIMETRE, description="Unit of the width and drop bands")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _bands_ascending(self) -> "PricingGrid":
        if self.width_columns != sorted(self.width_columns):
            raise ValueError("width_columns must be in ascending order")
        drops = [row.drop for row in self.drop_rows]
        if drops != sorted(drops):
            raise ValueError("drop_rows must be in ascending order of drop")
        return self
