"""Markup settings and resolution result models."""

from enum import Enum
from typing import Dict

from pydantic import BaseModel, Field


class MarkupSource(str, Enum):
    """Where an effective markup percentage came from, in priority order."""

    ITEM_OVERRIDE = "item_override"
    PRICING_GRID = "pricing_grid"
    SUBCATEGORY = "subcategory"
    CATEGORY = "category"
    DEFAULT = "default"


class MarkupSettings(BaseModel):
    """Business markup settings snapshot.

    Category and subcategory keys are matched case-insensitively. A value of 0
    means "no rule", matching how the settings screen stores untouched rows.
    """

    default_markup_percentage: float = Field(0.0, ge=0)
    category_markups: Dict[str, float] = Field(default_factory=dict)
    subcategory_markups: Dict[str, Dict[str, float]] = Field(default_factory=dict)
    minimum_markup_percentage: float = Field(0.0, ge=0)

    model_config = {"frozen": True}


class MarkupResult(BaseModel):
    """Effective markup for one item."""

    percentage: float
    source: MarkupSource
    source_name: str
    minimum_applied: bool = False

    model_config = {"frozen": True}

    @property
    def is_unresolved(self) -> bool:
        """True when no rule matched and no global default is configured (0%)."""
        return self.source == MarkupSource.DEFAULT and self.percentage == 0
