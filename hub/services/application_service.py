"""
Workshop application use cases.

Applications and workshops live in different files, so submitting an
application is two independent writes: the application record first, then the
workshop's applicationsCount. A crash between them leaves the counter behind.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from hub.repositories.errors import RecordNotFoundError
from hub.repositories.json_storage import JsonStorage, utc_now_iso
from hub.repositories.layout import storage_for

logger = logging.getLogger(__name__)

APPLICATIONS = "applications"
WORKSHOPS = "workshops"
AVAILABILITY_OPTIONS = ("confirmed", "tentative")
REVIEW_STATUSES = ("approved", "declined", "pending")


class ApplicationError(Exception):
    """Base exception for the application workflow."""


class ApplicationValidationError(ApplicationError):
    def __init__(self, errors: list[str]):
        super().__init__(f"Validation error: {', '.join(errors)}")
        self.errors = errors


class WorkshopUnavailableError(ApplicationError):
    """Workshop is cancelled or already full."""


class DuplicateApplicationError(ApplicationError):
    pass


class ApplicationNotFoundError(ApplicationError):
    pass


class WorkshopMissingError(ApplicationError):
    pass


def _parse_ts(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def application_errors(body: Mapping[str, Any]) -> list[str]:
    errors = []
    if not body.get("message"):
        errors.append("Message is required")
    availability = body.get("availabilityConfirmation")
    if not availability:
        errors.append("Availability confirmation is required")
    elif availability not in AVAILABILITY_OPTIONS:
        errors.append("Invalid availability confirmation")
    return errors


class ApplicationService:
    def __init__(self, applications: JsonStorage | None = None, workshops: JsonStorage | None = None) -> None:
        self.applications = applications or storage_for(APPLICATIONS)
        self.workshops = workshops or storage_for(WORKSHOPS)

    def apply(self, workshop_id: str, volunteer_id: str, body: Mapping[str, Any]) -> dict:
        errors = application_errors(body)
        if errors:
            raise ApplicationValidationError(errors)

        workshop = self.workshops.find_one(WORKSHOPS, {"id": workshop_id})
        if not workshop:
            raise WorkshopMissingError("Workshop not found")
        if workshop.get("status") == "cancelled":
            raise WorkshopUnavailableError("Workshop cannot accept applications")
        count = workshop.get("applicationsCount")
        limit = workshop.get("maxVolunteers")
        if isinstance(count, int) and isinstance(limit, int) and count >= limit:
            raise WorkshopUnavailableError("This workshop is full")

        if self.applications.find_one(APPLICATIONS, {"workshopId": workshop_id, "volunteerId": volunteer_id}):
            raise DuplicateApplicationError("You have already applied to this workshop")

        saved = self.applications.add_record(
            APPLICATIONS,
            {
                "workshopId": workshop_id,
                "volunteerId": volunteer_id,
                "message": body["message"],
                "availabilityConfirmation": body["availabilityConfirmation"],
                "additionalNotes": body.get("additionalNotes") or "",
                "status": "pending",
                "appliedAt": utc_now_iso(),
            },
        )
        if isinstance(count, int):
            self.workshops.update_record(WORKSHOPS, workshop_id, {"applicationsCount": count + 1})
        logger.info("Volunteer %s applied to workshop %s", volunteer_id, workshop_id)
        return saved

    def list_for_workshop(self, workshop_id: str) -> list[dict]:
        return self.applications.find_records(APPLICATIONS, {"workshopId": workshop_id})

    def update_status(self, application_id: str, status: str, reviewer_id: str, review_notes: str | None = None) -> dict:
        if status not in REVIEW_STATUSES:
            raise ApplicationValidationError(["Invalid status"])
        try:
            return self.applications.update_record(
                APPLICATIONS,
                application_id,
                {"status": status, "reviewNotes": review_notes, "reviewedBy": reviewer_id, "reviewedAt": utc_now_iso()},
            )
        except RecordNotFoundError:
            raise ApplicationNotFoundError("Application not found") from None

    def list_all(self, status: str | None = None) -> list[dict]:
        return self.applications.find_records(APPLICATIONS, {"status": status} if status else None)

    def list_for_volunteer(
        self,
        volunteer_id: str,
        status: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[dict]:
        filters = {"volunteerId": volunteer_id}
        if status:
            filters["status"] = status
        mine = self.applications.find_records(APPLICATIONS, filters)
        if start or end:
            kept = []
            for application in mine:
                applied = _parse_ts(application.get("appliedAt"))
                if applied is None:
                    continue
                if start and applied < start:
                    continue
                if end and applied > end:
                    continue
                kept.append(application)
            mine = kept
        return mine

    def statistics(self) -> dict:
        apps = self.applications.find_records(APPLICATIONS)
        total = len(apps)
        counts = {s: sum(1 for a in apps if a.get("status") == s) for s in REVIEW_STATUSES}
        return {
            "total": total,
            "pending": counts["pending"],
            "approved": counts["approved"],
            "declined": counts["declined"],
            "approvalRate": round(counts["approved"] / total * 100, 2) if total else 0,
        }

    def workshop_statistics(self, workshop_id: str) -> dict:
        apps = self.list_for_workshop(workshop_id)
        return {
            "workshopId": workshop_id,
            "totalApplications": len(apps),
            "pendingApplications": sum(1 for a in apps if a.get("status") == "pending"),
            "approvedApplications": sum(1 for a in apps if a.get("status") == "approved"),
        }
