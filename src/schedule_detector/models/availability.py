from enum import Enum
from typing import Any

from pydantic import BaseModel, model_validator

from schedule_detector import config


class ProcessingStage(str, Enum):
    INPUT = "input"
    PRECOMPUTE = "precompute"
    TICK_LANE = "tick_lane"
    TICK_VALIDATE = "tick_validate"
    DIVIDERS = "dividers"
    LADDER = "ladder"
    SLOT_BANDS = "slot_bands"
    BACKGROUND = "background"
    SNAPSHOT = "snapshot"
    FINALIZE = "finalize"
    CLASSIFY = "classify"
    QUERY = "query"
    STORE = "store"


class ErrorKind(str, Enum):
    INSUFFICIENT_EVIDENCE = "insufficient_evidence"
    GEOMETRY_INCONSISTENT = "geometry_inconsistent"
    INPUT_INVALID = "input_invalid"


class ProcessingError(BaseModel):
    stage: ProcessingStage
    error_type: ErrorKind
    recoverable: bool = False
    message: str
    details: dict[str, Any] = {}


class AvailabilityGrid(BaseModel):
    """Per-slot free/work flags for the five weekdays of one schedule image."""

    version: int = config.AVAILABILITY_VERSION
    anchorStartTime: str
    slots: int
    days: dict[str, list[bool]]
    workDays: dict[str, list[bool]]

    @model_validator(mode="after")
    def _check_shape(self) -> "AvailabilityGrid":
        for field_name in ("days", "workDays"):
            grid = getattr(self, field_name)
            missing = [d for d in config.WEEKDAYS if d not in grid]
            if missing:
                raise ValueError(f"{field_name} missing weekdays: {missing}")
            for day, flags in grid.items():
                if len(flags) != self.slots:
                    raise ValueError(
                        f"{field_name}[{day}] has {len(flags)} slots, expected {self.slots}"
                    )
        return self

    def is_free(self, day: str, slot: int) -> bool:
        return bool(self.days[day][slot])

    def is_work(self, day: str, slot: int) -> bool:
        return bool(self.workDays[day][slot])
