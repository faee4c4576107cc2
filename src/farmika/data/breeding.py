"""Breeding record helpers for the hosted backend."""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime

from farmika.core.client import select_rows

BREEDING_TABLE = "breeding_records"

# Status values that imply a confirmed pregnancy
PREGNANT_STATUSES = frozenset({"pregnant", "confirmed", "birth_completed", "born"})

# Columns checked, in order, for the date of the breeding
_DATE_COLUMNS = ("breeding_date", "event_date", "created_at")


def _parse_date(value) -> date | None:
    """Parse an ISO date or datetime string (or pass through a date)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


@dataclass
class BreedingEvent:
    """A logged mating and what came of it."""

    mother_id: str | None
    event_date: date | None
    pregnancy_confirmed: bool = False
    status: str | None = None
    birth_completed: bool = False
    father_id: str | None = None
    id: str | None = None

    @classmethod
    def from_row(cls, row: Mapping) -> "BreedingEvent":
        event_date = None
        for column in _DATE_COLUMNS:
            if row.get(column):
                event_date = _parse_date(row[column])
                break

        return cls(
            id=row.get("id"),
            mother_id=row.get("mother_id"),
            father_id=row.get("father_id"),
            event_date=event_date,
            pregnancy_confirmed=bool(row.get("pregnancy_confirmed")),
            status=row.get("status"),
            birth_completed=bool(row.get("birth_completed")),
        )

    @property
    def is_pregnancy(self) -> bool:
        """True if the breeding resulted in a confirmed pregnancy."""
        if self.pregnancy_confirmed or self.birth_completed:
            return True
        return (self.status or "").strip().lower() in PREGNANT_STATUSES


async def fetch_breeding_events() -> list[BreedingEvent]:
    """
    Fetch every breeding record.

    Returns:
        List of BreedingEvent records (undated rows included, with event_date None)
    """
    rows = await select_rows(BREEDING_TABLE)
    return [BreedingEvent.from_row(row) for row in rows]
