from typing import Literal

from pydantic import BaseModel, ConfigDict, InstanceOf

from schedule_detector import config

from .availability import AvailabilityGrid, ProcessingError
from .geometry import BackgroundColor, NavSnapshot, SlotBand
from .raster import (
    DividerLayout,
    LadderExtension,
    LaneScan,
    PixelBuffer,
    Precompute,
    TickLadder,
)


class DetectorConfig(BaseModel):
    """Every tunable threshold of the detector, passed by value to each stage."""

    model_config = ConfigDict(frozen=True)

    near_white_thresh: int = config.NEAR_WHITE_THRESH
    dark_luma_thresh: float = config.DARK_LUMA_THRESH

    lane_starts: tuple[float, ...] = config.LANE_STARTS
    lane_width_frac: float = config.LANE_WIDTH_FRAC
    lane_pad_px: int = config.LANE_PAD_PX
    lane_band_rows: int = config.LANE_BAND_ROWS
    lane_black_frac: float = config.LANE_BLACK_FRAC
    lane_min_run: int = config.LANE_MIN_RUN
    lane_dedupe_px: int = config.LANE_DEDUPE_PX
    lane_win_ticks: int = config.LANE_WIN_TICKS

    dy_min: float = config.DY_MIN
    dy_max: float = config.DY_MAX
    snap_frac: float = config.SNAP_FRAC
    snap_min: int = config.SNAP_MIN
    snap_max: int = config.SNAP_MAX
    chain_start_top_frac: float = config.CHAIN_START_TOP_FRAC
    chain_start_max: int = config.CHAIN_START_MAX
    min_chain_ticks: int = config.MIN_CHAIN_TICKS

    ladder_max_steps: int = config.LADDER_MAX_STEPS
    ladder_bottom_margin: int = config.LADDER_BOTTOM_MARGIN
    ladder_span_insets: tuple[float, ...] = config.LADDER_SPAN_INSETS
    ladder_peak_band: int = config.LADDER_PEAK_BAND
    ladder_peak_dark_min: float = config.LADDER_PEAK_DARK_MIN
    ladder_divider_research_px: int = config.LADDER_DIVIDER_RESEARCH_PX
    ladder_stripe_height: int = config.LADDER_STRIPE_HEIGHT
    ladder_stripe_width: int = config.LADDER_STRIPE_WIDTH
    ladder_stripe_nonwhite_min: float = config.LADDER_STRIPE_NONWHITE_MIN
    ladder_stripe_dark_min: float = config.LADDER_STRIPE_DARK_MIN
    ladder_min_dividers: int = config.LADDER_MIN_DIVIDERS
    ladder_relaxed_min_dividers: int = config.LADDER_RELAXED_MIN_DIVIDERS
    ladder_relax_after_streak: int = config.LADDER_RELAX_AFTER_STREAK
    ladder_gate_nonwhite_min: float = config.LADDER_GATE_NONWHITE_MIN
    ladder_gate_dark_max: float = config.LADDER_GATE_DARK_MAX
    ladder_gate_min_days: int = config.LADDER_GATE_MIN_DAYS
    ladder_gate_trim_px: int = config.LADDER_GATE_TRIM_PX
    ladder_terminal_frac: float = config.LADDER_TERMINAL_FRAC
    ladder_terminal_min: int = config.LADDER_TERMINAL_MIN
    ladder_terminal_max: int = config.LADDER_TERMINAL_MAX

    divider_stripe_height: int = config.DIVIDER_STRIPE_HEIGHT
    divider_stripe_width: int = config.DIVIDER_STRIPE_WIDTH
    divider_anchor_nonwhite_min: float = config.DIVIDER_ANCHOR_NONWHITE_MIN
    divider_min_anchor_gap: int = config.DIVIDER_MIN_ANCHOR_GAP
    divider_search_radius: int = config.DIVIDER_SEARCH_RADIUS
    divider_search_step: int = config.DIVIDER_SEARCH_STEP
    divider_nonwhite_min: float = config.DIVIDER_NONWHITE_MIN
    divider_dark_weight: float = config.DIVIDER_DARK_WEIGHT
    divider_max_line_width: int = config.DIVIDER_MAX_LINE_WIDTH
    divider_merge_px: int = config.DIVIDER_MERGE_PX
    divider_band_center_frac: float = config.DIVIDER_BAND_CENTER_FRAC
    divider_frame_gap_frac: float = config.DIVIDER_FRAME_GAP_FRAC

    slot_line_dark_frac: float = config.SLOT_LINE_DARK_FRAC
    slot_line_max_grow: int = config.SLOT_LINE_MAX_GROW
    slot_min_height: int = config.SLOT_MIN_HEIGHT

    bg_friday_bottom_slots: int = config.BG_FRIDAY_BOTTOM_SLOTS
    bg_top_slots: int = config.BG_TOP_SLOTS
    bg_inset_x: int = config.BG_INSET_X
    bg_inset_y: int = config.BG_INSET_Y
    bg_min_white: float = config.BG_MIN_WHITE
    bg_samples_per_slot: int = config.BG_SAMPLES_PER_SLOT
    bg_tol_base: float = config.BG_TOL_BASE
    bg_tol_mad_gain: float = config.BG_TOL_MAD_GAIN
    bg_tol_min: int = config.BG_TOL_MIN
    bg_tol_max: int = config.BG_TOL_MAX
    bg_global_tol_bump: int = config.BG_GLOBAL_TOL_BUMP

    cell_day_trim: int = config.CELL_DAY_TRIM
    cell_inset_x: int = config.CELL_INSET_X
    cell_inset_y: int = config.CELL_INSET_Y
    work_color: tuple[int, int, int] = config.WORK_COLOR
    work_color_tol: int = config.WORK_COLOR_TOL
    work_samples: int = config.WORK_SAMPLES
    work_min_frac: float = config.WORK_MIN_FRAC
    cell_samples: int = config.CELL_SAMPLES
    occupied_busy_frac: float = config.OCCUPIED_BUSY_FRAC
    bg_free_frac: float = config.BG_FREE_FRAC
    bg_soft_free_frac: float = config.BG_SOFT_FREE_FRAC
    ink_soft_free_max: float = config.INK_SOFT_FREE_MAX

    spill_policy: Literal["soft_free", "strict"] = "soft_free"
    spill_center_frac: float = config.SPILL_CENTER_FRAC
    spill_center_nonwhite_max: float = config.SPILL_CENTER_NONWHITE_MAX
    spill_edge_px: int = config.SPILL_EDGE_PX
    spill_edge_nonwhite_min: float = config.SPILL_EDGE_NONWHITE_MIN
    spill_stripe_nonwhite_min: float = config.SPILL_STRIPE_NONWHITE_MIN

    # Sampling: None seeds from OS entropy; exhaustive counts every pixel.
    sample_seed: int | None = None
    exhaustive_sampling: bool = False

    default_start_time: str = config.DEFAULT_START_TIME


class PipelineState(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    pixels: InstanceOf[PixelBuffer]
    config: DetectorConfig = DetectorConfig()
    anchor_start_time: str | None = None
    source_name: str | None = None

    precompute: InstanceOf[Precompute] | None = None
    lane_scan: InstanceOf[LaneScan] | None = None
    tick_ladder: InstanceOf[TickLadder] | None = None
    dividers: InstanceOf[DividerLayout] | None = None
    ladder: InstanceOf[LadderExtension] | None = None
    slot_bands: list[SlotBand] | None = None
    background: BackgroundColor | None = None

    nav: NavSnapshot | None = None
    availability: AvailabilityGrid | None = None

    warnings: list[str] = []
    errors: list[ProcessingError] = []
