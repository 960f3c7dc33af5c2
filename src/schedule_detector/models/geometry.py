from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from schedule_detector import config


class DayRegion(BaseModel):
    model_config = ConfigDict(frozen=True)

    x0: int
    x1: int

    @property
    def width(self) -> int:
        return self.x1 - self.x0


class SlotBand(BaseModel):
    model_config = ConfigDict(frozen=True)

    yStart: int
    yEnd: int

    @property
    def height(self) -> int:
        return self.yEnd - self.yStart


class BackgroundColor(BaseModel):
    model_config = ConfigDict(frozen=True)

    r: int
    g: int
    b: int
    tol: int

    def rgb(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)


class NavSnapshot(BaseModel):
    """Frozen geometry and background calibration for one schedule image."""

    model_config = ConfigDict(frozen=True)

    dayRegions: dict[str, DayRegion]
    slotBands: list[SlotBand]
    ticksForMap: list[int]
    dividerXs: list[int]
    bgWhite: BackgroundColor
    anchorStartTime: str = config.DEFAULT_START_TIME

    @field_validator("dividerXs")
    @classmethod
    def _six_sorted_dividers(cls, value: list[int]) -> list[int]:
        if len(value) != len(config.WEEKDAYS) + 1:
            raise ValueError(f"expected {len(config.WEEKDAYS) + 1} dividers, got {len(value)}")
        if any(b <= a for a, b in zip(value, value[1:])):
            raise ValueError("dividers must be strictly increasing")
        return value

    @field_validator("ticksForMap")
    @classmethod
    def _increasing_ticks(cls, value: list[int]) -> list[int]:
        if any(b <= a for a, b in zip(value, value[1:])):
            raise ValueError("ticks must be strictly increasing")
        return value

    @model_validator(mode="after")
    def _check_regions(self) -> "NavSnapshot":
        if list(self.dayRegions) != list(config.WEEKDAYS):
            raise ValueError("dayRegions must list Monday through Friday in order")
        prev_end = None
        for region in self.dayRegions.values():
            if region.x1 <= region.x0:
                raise ValueError("empty day region")
            if prev_end is not None and region.x0 != prev_end:
                raise ValueError("day regions must be contiguous")
            prev_end = region.x1
        return self

    @property
    def slot_count(self) -> int:
        return len(self.slotBands)
