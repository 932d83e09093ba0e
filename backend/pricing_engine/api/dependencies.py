"""API dependencies and injection."""

from typing import Annotated, Optional
from fastapi import Depends, Query
import logging

from ..models import PricingProfile
from ..services.pricing_pipeline import PricingPipelineService, get_pricing_pipeline
from ..services.profile_loader import ProfileLoaderService, get_profile_loader


logger = logging.getLogger(__name__)


def get_profile_loader_dependency() -> ProfileLoaderService:
    """
    Dependency to get the pricing profile loader.

    Returns:
        ProfileLoaderService instance
    """
    return get_profile_loader()


def get_pipeline_dependency() -> PricingPipelineService:
    """
    Dependency to get the pricing pipeline.

    Returns:
        PricingPipelineService instance
    """
    return get_pricing_pipeline()


def get_profile(
    loader: Annotated[ProfileLoaderService, Depends(get_profile_loader_dependency)],
    profile_id: Optional[str] = Query(None, description="Pricing profile id, defaults to the configured profile"),
) -> PricingProfile:
    """
    Resolve the pricing profile for a request.

    An explicitly requested profile must exist (404 otherwise); without one
    the configured default is used, falling back to the built-in profile.

    Raises:
        ProfileNotFoundError: The requested profile does not exist
        ProfileParseError: The requested profile is invalid
    """
    if profile_id:
        return loader.load_profile(profile_id)
    return loader.load_profile_or_default()


# Type aliases for common dependencies
ProfileLoaderDep = Annotated[ProfileLoaderService, Depends(get_profile_loader_dependency)]
PipelineDep = Annotated[PricingPipelineService, Depends(get_pipeline_dependency)]
ProfileDep = Annotated[PricingProfile, Depends(get_profile)]
