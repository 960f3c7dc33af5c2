from .availability import AvailabilityGrid, ErrorKind, ProcessingError, ProcessingStage
from .geometry import BackgroundColor, DayRegion, NavSnapshot, SlotBand
from .query import (
    DayWindow,
    PersonAvailability,
    QueryResult,
    ScheduleRecord,
    ScheduleStore,
    SkippedPerson,
    TimeRange,
)
from .raster import (
    DividerLayout,
    LadderExtension,
    LaneScan,
    PixelBuffer,
    Precompute,
    TickLadder,
    TickLane,
)
from .state import DetectorConfig, PipelineState

__all__ = [
    "AvailabilityGrid",
    "BackgroundColor",
    "DayRegion",
    "DayWindow",
    "DetectorConfig",
    "DividerLayout",
    "ErrorKind",
    "LadderExtension",
    "LaneScan",
    "NavSnapshot",
    "PersonAvailability",
    "PipelineState",
    "PixelBuffer",
    "Precompute",
    "ProcessingError",
    "ProcessingStage",
    "QueryResult",
    "ScheduleRecord",
    "ScheduleStore",
    "SkippedPerson",
    "SlotBand",
    "TickLadder",
    "TickLane",
    "TimeRange",
]
