"""Pricing profile model.

A profile is the external configuration the calculators read: the
manufacturing cost table, the fallback fabric and default make-up allowances.
Profiles are loaded from YAML by the profile loader and passed explicitly to
every calculation.
"""

from typing import Dict

from pydantic import BaseModel, Field

from .selection import FabricItem, ManufacturingType


class ManufacturingRate(BaseModel):
    """Labour cost for one manufacturing method."""

    flat: float = Field(0.0, ge=0, description="Flat charge per treatment")
    per_metre: float = Field(0.0, ge=0, description="Charge per linear metre of fabric")
    per_curtain: float = Field(0.0, ge=0, description="Charge per curtain made")

    model_config = {"frozen": True}


class AllowanceDefaults(BaseModel):
    """Defaults applied when a measurement omits an allowance (metres)."""

    header_allowance: float = Field(0.08, ge=0)
    bottom_hem: float = Field(0.08, ge=0)
    side_hem: float = Field(0.0, ge=0)
    seam_hem: float = Field(0.0, ge=0)
    return_left: float = Field(0.0, ge=0)
    return_right: float = Field(0.0, ge=0)
    overlap: float = Field(0.0, ge=0)
    waste_percent: float = Field(0.0, ge=0)
    fullness_ratio: float = Field(2.0, ge=1)

    model_config = {"frozen": True}


class ProfileInfo(BaseModel):
    """Profile identification."""

    name: str = Field(..., description="Profile name")
    identifier: str = Field(..., description="Profile identifier")
    version: str = Field("1.0.0", description="Profile version")


class PricingProfile(BaseModel):
    """Immutable pricing configuration snapshot."""

    profile: ProfileInfo = Field(
        default_factory=lambda: ProfileInfo(name="Built-in default", identifier="builtin")
    )
    currency: str = Field("GBP")
    manufacturing: Dict[ManufacturingType, ManufacturingRate] = Field(
        default_factory=lambda: {
            ManufacturingType.MACHINE: ManufacturingRate(flat=50.0),
            ManufacturingType.HAND: ManufacturingRate(flat=90.0),
        }
    )
    fallback_fabric: FabricItem = Field(
        default_factory=lambda: FabricItem(
            id=None, name="Fallback fabric", price_per_metre=0.0, width=1.37
        )
    )
    allowances: AllowanceDefaults = Field(default_factory=AllowanceDefaults)

    model_config = {"frozen": True}

    @property
    def identifier(self) -> str:
        return self.profile.identifier

    def manufacturing_rate(self, manufacturing_type: ManufacturingType) -> ManufacturingRate:
        """Look up the labour rate; methods missing from the table cost nothing."""
        return self.manufacturing.get(manufacturing_type, ManufacturingRate())
