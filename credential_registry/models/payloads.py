"""Domain-specific record payloads.

The four domains share one workflow and differ only here: each payload
type carries its own fields and a ``validate(today)`` that raises
InvalidPayloadError naming the offending field.  Payloads are immutable;
a correction is a new record.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from enum import StrEnum
from typing import Any, ClassVar

from credential_registry.core.errors import InvalidPayloadError
from credential_registry.models.domain import Domain


def _require_text(field: str, value: str) -> None:
    if not value or not value.strip():
        raise InvalidPayloadError(field, "must be non-empty")


def _not_in_future(field: str, value: date, today: date) -> None:
    if value > today:
        raise InvalidPayloadError(field, "cannot be in the future")


class EducationLevel(StrEnum):
    KINDERGARTEN = "kindergarten"
    PRIMARY = "primary"
    SECONDARY = "secondary"
    HIGH_SCHOOL = "high_school"
    UNDERGRADUATE = "undergraduate"
    GRADUATE = "graduate"
    MASTERS = "masters"
    PHD = "phd"
    POSTDOC = "postdoc"
    OTHER = "other"


class AchievementCategory(StrEnum):
    PROJECT = "project"
    AWARD = "award"
    COMPETITION = "competition"
    PUBLICATION = "publication"
    VOLUNTEER = "volunteer"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class EducationPayload:
    _DATE_FIELDS: ClassVar[tuple[str, ...]] = ("start_date", "end_date")

    degree: str
    start_date: date
    end_date: date
    field_of_study: str = ""
    level: EducationLevel | None = None
    credential_id: str | None = None

    def validate(self, today: date) -> None:
        _require_text("degree", self.degree)
        if self.level is not None and not isinstance(self.level, EducationLevel):
            raise InvalidPayloadError("level", "unknown education level")
        _not_in_future("start_date", self.start_date, today)
        if self.end_date < self.start_date:
            raise InvalidPayloadError("end_date", "must be on or after start_date")
        _not_in_future("end_date", self.end_date, today)


@dataclass(frozen=True, slots=True)
class CertificationPayload:
    _DATE_FIELDS: ClassVar[tuple[str, ...]] = ("issue_date", "expiration_date")

    name: str
    issue_date: date
    expiration_date: date | None = None  # None = never expires
    credential_id: str | None = None
    credential_url: str | None = None

    def validate(self, today: date) -> None:
        _require_text("name", self.name)
        _not_in_future("issue_date", self.issue_date, today)
        if self.expiration_date is not None and self.expiration_date <= self.issue_date:
            raise InvalidPayloadError(
                "expiration_date", "must be after issue_date"
            )

    def is_expired(self, today: date) -> bool:
        return self.expiration_date is not None and self.expiration_date < today


@dataclass(frozen=True, slots=True)
class EmploymentPayload:
    _DATE_FIELDS: ClassVar[tuple[str, ...]] = ("start_date", "end_date")

    position: str
    start_date: date
    end_date: date | None = None  # None = current position
    location: str = ""
    description: str = ""

    @property
    def is_current(self) -> bool:
        return self.end_date is None

    def validate(self, today: date) -> None:
        _require_text("position", self.position)
        _not_in_future("start_date", self.start_date, today)
        if self.end_date is not None:
            if self.end_date < self.start_date:
                raise InvalidPayloadError(
                    "end_date", "must be on or after start_date"
                )
            _not_in_future("end_date", self.end_date, today)


@dataclass(frozen=True, slots=True)
class AchievementPayload:
    _DATE_FIELDS: ClassVar[tuple[str, ...]] = ("event_date",)

    title: str
    category: AchievementCategory
    event_date: date
    description: str = ""
    proof_url: str | None = None

    def validate(self, today: date) -> None:
        _require_text("title", self.title)
        if not isinstance(self.category, AchievementCategory):
            raise InvalidPayloadError("category", "unknown achievement category")
        _not_in_future("event_date", self.event_date, today)


Payload = EducationPayload | CertificationPayload | EmploymentPayload | AchievementPayload

PAYLOAD_TYPES: dict[Domain, type] = {
    Domain.EDUCATION: EducationPayload,
    Domain.CERTIFICATION: CertificationPayload,
    Domain.EMPLOYMENT: EmploymentPayload,
    Domain.ACHIEVEMENT: AchievementPayload,
}


def payload_to_dict(payload: Payload) -> dict[str, Any]:
    """JSON-safe dict: dates as ISO strings, enums as their values."""
    data = asdict(payload)
    for key, value in data.items():
        if isinstance(value, date):
            data[key] = value.isoformat()
        elif isinstance(value, StrEnum):
            data[key] = value.value
    return data


def payload_from_dict(domain: Domain, data: dict[str, Any]) -> Payload:
    cls = PAYLOAD_TYPES[domain]
    kwargs = dict(data)
    for name in cls._DATE_FIELDS:  # type: ignore[attr-defined]
        value = kwargs.get(name)
        if isinstance(value, str):
            kwargs[name] = date.fromisoformat(value)
    if cls is AchievementPayload:
        kwargs["category"] = AchievementCategory(kwargs["category"])
    if cls is EducationPayload and kwargs.get("level") is not None:
        kwargs["level"] = EducationLevel(kwargs["level"])
    return cls(**kwargs)
