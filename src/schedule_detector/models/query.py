from pydantic import BaseModel

from .availability import AvailabilityGrid
from .geometry import NavSnapshot


class TimeRange(BaseModel):
    start: str
    end: str


class DayWindow(BaseModel):
    """Free ranges of one grid inside a requested day window."""

    day: str
    start: str
    end: str
    free_ranges: list[TimeRange]
    covers_range: bool
    slots_detected: int
    last_mapped_time: str | None


class PersonAvailability(BaseModel):
    person: str
    free_ranges: list[TimeRange]
    covers_range: bool = True
    last_mapped_time: str | None = None


class SkippedPerson(BaseModel):
    person: str
    reason: str


class QueryResult(BaseModel):
    day: str
    start: str
    end: str
    available: list[PersonAvailability] = []
    skipped: list[SkippedPerson] = []


class ScheduleRecord(BaseModel):
    person: str
    file_name: str = ""
    nav: NavSnapshot
    availability: AvailabilityGrid
    saved_at: float


class ScheduleStore(BaseModel):
    version: int
    records: list[ScheduleRecord] = []
