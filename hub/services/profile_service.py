"""Volunteer profile use cases."""

from __future__ import annotations

from collections import Counter
from typing import Any, Mapping, Optional

from hub.domain.profiles import DEFAULT_PHOTO, matches_any, profile_errors
from hub.repositories.json_storage import JsonStorage, utc_now_iso
from hub.repositories.layout import storage_for

PROFILES = "profiles"


class ProfileError(Exception):
    """Base exception for the profile workflow."""


class ProfileValidationError(ProfileError):
    def __init__(self, errors: list[str]):
        super().__init__(f"Validation failed: {', '.join(errors)}")
        self.errors = errors


class ProfileExistsError(ProfileError):
    """Raised when the user already owns an active profile."""


class ProfileNotFoundError(ProfileError):
    """Raised when no active profile exists for the user."""


class ProfileService:
    """CRUD, search and statistics over volunteer profiles."""

    def __init__(self, storage: JsonStorage | None = None) -> None:
        self.storage = storage or storage_for(PROFILES)

    def _validate(self, data: Mapping[str, Any]) -> None:
        errors = profile_errors(data)
        if errors:
            raise ProfileValidationError(errors)

    def _active(self) -> list[dict]:
        return [p for p in self.storage.find_records(PROFILES) if p.get("isActive")]

    def _require(self, user_id: str) -> dict:
        profile = self.get_profile(user_id)
        if not profile:
            raise ProfileNotFoundError("Profile not found")
        return profile

    def create_profile(self, user_id: str, data: Mapping[str, Any]) -> dict:
        self._validate(data)
        if self.storage.find_one(PROFILES, {"userId": user_id}):
            raise ProfileExistsError("Profile already exists for this user")
        return self.storage.add_record(
            PROFILES,
            {
                **data,
                "userId": user_id,
                "profilePhoto": data.get("profilePhoto") or DEFAULT_PHOTO,
                "isActive": True,
            },
        )

    def get_profile(self, user_id: str) -> Optional[dict]:
        return self.storage.find_one(PROFILES, {"userId": user_id, "isActive": True})

    def get_profile_by_id(self, profile_id: str) -> Optional[dict]:
        return self.storage.find_one(PROFILES, {"id": profile_id, "isActive": True})

    def update_profile(self, user_id: str, data: Mapping[str, Any]) -> dict:
        self._validate(data)
        profile = self._require(user_id)
        patch = {k: v for k, v in data.items() if k not in {"id", "userId"}}
        return self.storage.update_record(PROFILES, profile["id"], patch)

    def update_profile_photo(self, user_id: str, photo_url: str) -> dict:
        profile = self._require(user_id)
        return self.storage.update_record(PROFILES, profile["id"], {"profilePhoto": photo_url})

    def delete_profile(self, user_id: str) -> bool:
        """Soft delete: the record stays on disk flagged inactive."""
        profile = self._require(user_id)
        self.storage.update_record(PROFILES, profile["id"], {"isActive": False, "deletedAt": utc_now_iso()})
        return True

    def list_profiles(self) -> list[dict]:
        return self._active()

    def search_profiles(
        self,
        *,
        specialization: str | None = None,
        region: str | None = None,
        language: str | None = None,
        experience_min: float | None = None,
        experience_max: float | None = None,
        availability: str | None = None,
    ) -> list[dict]:
        profiles = self._active()
        if specialization:
            profiles = [p for p in profiles if matches_any(p.get("specializations"), specialization)]
        if region:
            profiles = [p for p in profiles if matches_any(p.get("regions"), region)]
        if language:
            profiles = [p for p in profiles if matches_any(p.get("languages"), language)]
        if experience_min is not None:
            profiles = [p for p in profiles if (p.get("experienceYears") or 0) >= experience_min]
        if experience_max is not None:
            profiles = [p for p in profiles if p.get("experienceYears") is not None and p["experienceYears"] <= experience_max]
        if availability:
            profiles = [
                p for p in profiles if availability in ((p.get("availabilityPreferences") or {}).get("daysOfWeek") or [])
            ]
        return profiles

    def profile_stats(self) -> dict:
        profiles = self._active()
        specializations: Counter = Counter()
        regions: Counter = Counter()
        languages: Counter = Counter()
        years = []
        for profile in profiles:
            specializations.update(profile.get("specializations") or [])
            regions.update(profile.get("regions") or [])
            languages.update(profile.get("languages") or [])
            if profile.get("experienceYears") is not None:
                years.append(profile["experienceYears"])
        return {
            "totalProfiles": len(profiles),
            "bySpecialization": dict(specializations),
            "byRegion": dict(regions),
            "byLanguage": dict(languages),
            "averageExperience": round(sum(years) / len(years), 1) if years else 0,
        }
