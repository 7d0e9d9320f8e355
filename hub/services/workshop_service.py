"""Workshop use cases (creation, listing, status changes, statistics)."""

from __future__ import annotations

from datetime import date
from typing import Any, Callable, Mapping, Optional

from hub.domain.profiles import matches_any
from hub.domain.workshops import STATUSES, location_matches, parse_date, workshop_errors
from hub.repositories.errors import RecordNotFoundError
from hub.repositories.json_storage import JsonStorage
from hub.repositories.layout import storage_for

WORKSHOPS = "workshops"


class WorkshopError(Exception):
    """Base exception for the workshop workflow."""


class WorkshopValidationError(WorkshopError):
    def __init__(self, errors: list[str]):
        super().__init__("Workshop validation error")
        self.errors = errors


class WorkshopNotFoundError(WorkshopError):
    def __init__(self, workshop_id: str):
        super().__init__(f"Workshop {workshop_id} not found")
        self.workshop_id = workshop_id


def _by_date(workshop: Mapping[str, Any]) -> date:
    return parse_date(workshop.get("date")) or date.max


def _is_upcoming(workshop: Mapping[str, Any], today: date) -> bool:
    when = parse_date(workshop.get("date"))
    return workshop.get("status") == "published" and when is not None and when > today


class WorkshopService:
    def __init__(self, storage: JsonStorage | None = None, today: Callable[[], date] | None = None) -> None:
        self.storage = storage or storage_for(WORKSHOPS)
        self._today = today or date.today

    def _validate(self, data: Mapping[str, Any], *, is_update: bool = False) -> None:
        errors = workshop_errors(data, is_update=is_update, today=self._today())
        if errors:
            raise WorkshopValidationError(errors)

    def _all(self) -> list[dict]:
        return self.storage.find_records(WORKSHOPS)

    def _filter(
        self,
        workshops: list[dict],
        *,
        region: str | None = None,
        specialization: str | None = None,
        status: str | None = None,
        search: str | None = None,
        on_date: str | None = None,
    ) -> list[dict]:
        if region:
            workshops = [w for w in workshops if location_matches(w, region)]
        if specialization:
            workshops = [w for w in workshops if matches_any(w.get("requiredSpecializations"), specialization)]
        if status:
            workshops = [w for w in workshops if w.get("status") == status]
        if search:
            term = search.lower()
            workshops = [
                w
                for w in workshops
                if term in str(w.get("title") or "").lower() or term in str(w.get("description") or "").lower()
            ]
        if on_date:
            workshops = [w for w in workshops if w.get("date") == on_date]
        return sorted(workshops, key=_by_date)

    def create_workshop(self, data: Mapping[str, Any], created_by: str | None = None) -> dict:
        self._validate(data)
        record = {
            **{k: v for k, v in data.items() if k != "id"},
            "status": data.get("status") or "draft",
            "applicationsCount": 0,
        }
        if created_by:
            record["createdBy"] = created_by
        return self.storage.add_record(WORKSHOPS, record)

    def list_workshops(self, role: str = "volunteer", *, include_all_statuses: bool = False, **filters: Any) -> list[dict]:
        """Volunteers only ever see published workshops."""
        workshops = self._all()
        if role != "coordinator" or not include_all_statuses:
            workshops = [w for w in workshops if w.get("status") == "published"]
        return self._filter(workshops, **filters)

    def get_workshop(self, workshop_id: str, role: str = "volunteer") -> Optional[dict]:
        workshop = self.storage.find_one(WORKSHOPS, {"id": workshop_id})
        if workshop and role == "volunteer" and workshop.get("status") != "published":
            return None
        return workshop

    def update_workshop(self, workshop_id: str, data: Mapping[str, Any]) -> dict:
        self._validate(data, is_update=True)
        try:
            return self.storage.update_record(WORKSHOPS, workshop_id, dict(data))
        except RecordNotFoundError:
            raise WorkshopNotFoundError(workshop_id) from None

    def update_status(self, workshop_id: str, status: str, cancellation_reason: str | None = None) -> dict:
        if status not in STATUSES:
            raise WorkshopValidationError(["Invalid status. Must be: draft, published, cancelled, or completed"])
        patch: dict[str, Any] = {"status": status}
        if status == "cancelled" and cancellation_reason:
            patch["cancellationReason"] = cancellation_reason
        try:
            return self.storage.update_record(WORKSHOPS, workshop_id, patch)
        except RecordNotFoundError:
            raise WorkshopNotFoundError(workshop_id) from None

    def delete_workshop(self, workshop_id: str) -> bool:
        try:
            return self.storage.delete_record(WORKSHOPS, workshop_id)
        except RecordNotFoundError:
            raise WorkshopNotFoundError(workshop_id) from None

    def workshops_by_coordinator(self, coordinator_id: str) -> list[dict]:
        mine = self.storage.find_records(WORKSHOPS, {"createdBy": coordinator_id})
        return sorted(mine, key=lambda w: w.get("createdAt") or "", reverse=True)

    def available_for_volunteer(self, **filters: Any) -> list[dict]:
        today = self._today()
        upcoming = [w for w in self._all() if _is_upcoming(w, today)]
        return self._filter(upcoming, **filters)

    def statistics(self, coordinator_id: str | None = None) -> dict:
        workshops = self._all()
        if coordinator_id:
            workshops = [w for w in workshops if w.get("createdBy") == coordinator_id]
        today = self._today()
        stats = {"total": len(workshops)}
        for status in STATUSES:
            stats[status] = sum(1 for w in workshops if w.get("status") == status)
        stats["upcoming"] = sum(1 for w in workshops if _is_upcoming(w, today))
        stats["past"] = sum(1 for w in workshops if _by_date(w) < today)
        return stats
