"""Pricing profile loader.

Loads pricing profiles (manufacturing cost table, fallback fabric, default
allowances) from YAML files in the profiles directory and caches them per id.

    loader = get_profile_loader()
    profile = loader.load_profile("default")
    rate = profile.manufacturing_rate(ManufacturingType.HAND)
"""

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from ..config import settings
from ..models.profile import PricingProfile
from ..utils.errors import APIError, ErrorCode

logger = logging.getLogger(__name__)


class ProfileNotFoundError(APIError):
    """Profile file does not exist."""

    def __init__(self, profile_id: str, path: Path):
        super().__init__(
            error_code=ErrorCode.PROFILE_NOT_FOUND,
            message=f"Pricing profile not found: {profile_id}",
            status_code=404,
            details={"profile_id": profile_id, "path": str(path)},
        )


class ProfileParseError(APIError):
    """Profile file could not be parsed or validated."""

    def __init__(self, profile_id: str, reason: str):
        super().__init__(
            error_code=ErrorCode.PROFILE_PARSE_ERROR,
            message=f"Pricing profile {profile_id} could not be parsed: {reason}",
            status_code=500,
            details={"profile_id": profile_id},
        )


class ProfileLoaderService:
    """Pricing profile loader with a per-id cache."""

    def __init__(self, profiles_dir: Optional[Path] = None, cache_enabled: bool = True):
        """
        Initialize the loader.

        Args:
            profiles_dir: Directory holding <id>.yaml files, defaults to settings.profiles_dir_path
            cache_enabled: Keep parsed profiles in memory
        """
        self.profiles_dir = profiles_dir or settings.profiles_dir_path
        self.cache_enabled = cache_enabled
        self._cache: dict[str, PricingProfile] = {}

    def load_profile(self, profile_id: str) -> PricingProfile:
        """
        Load a pricing profile.

        Args:
            profile_id: Profile identifier (file name without .yaml)

        Returns:
            PricingProfile

        Raises:
            ProfileNotFoundError: No such profile file
            ProfileParseError: YAML or validation failure
        """
        if self.cache_enabled and profile_id in self._cache:
            logger.debug(f"Pricing profile served from cache: {profile_id}")
            return self._cache[profile_id]

        path = self.profiles_dir / f"{profile_id}.yaml"
        if not path.exists():
            raise ProfileNotFoundError(profile_id, path)

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ProfileParseError(profile_id, f"YAML error: {e}")

        if not isinstance(data, dict):
            raise ProfileParseError(profile_id, "profile must be a mapping")

        try:
            profile = PricingProfile(**data)
        except ValidationError as e:
            raise ProfileParseError(profile_id, f"validation failed: {e}")

        if self.cache_enabled:
            self._cache[profile_id] = profile
            logger.info(f"Loaded and cached pricing profile: {profile_id}")
        else:
            logger.info(f"Loaded pricing profile (no cache): {profile_id}")

        return profile

    def load_profile_or_default(self, profile_id: Optional[str] = None) -> PricingProfile:
        """
        Load a profile, falling back to the built-in default on failure.

        Args:
            profile_id: Profile identifier, defaults to settings.default_profile

        Returns:
            The requested profile, or the built-in PricingProfile()
        """
        profile_id = profile_id or settings.default_profile
        try:
            return self.load_profile(profile_id)
        except (ProfileNotFoundError, ProfileParseError) as e:
            logger.warning(f"Failed to load pricing profile, using built-in default: {e}")
            return PricingProfile()

    def list_profiles(self) -> list[str]:
        """
        List available profile ids.

        Returns:
            Profile identifiers, files starting with "_" excluded
        """
        if not self.profiles_dir.exists():
            return []
        return sorted(p.stem for p in self.profiles_dir.glob("*.yaml") if not p.stem.startswith("_"))

    def clear_cache(self) -> None:
        """Clear the profile cache."""
        self._cache.clear()
        logger.info("Pricing profile cache cleared")


_profile_loader_instance: Optional[ProfileLoaderService] = None


def get_profile_loader() -> ProfileLoaderService:
    """
    Get the ProfileLoaderService singleton.

    Returns:
        ProfileLoaderService instance
    """
    global _profile_loader_instance
    if _profile_loader_instance is None:
        _profile_loader_instance = ProfileLoaderService()
    return _profile_loader_instance
