# Weekday layout
WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")
SLOT_MINUTES = 30
DEFAULT_START_TIME = "8:00 AM"

# Selectable start times (inclusive first, exclusive last), minutes after midnight
TIME_OPTIONS_FIRST_MINUTE = 6 * 60
TIME_OPTIONS_END_MINUTE = 18 * 60

# Precompute masks
NEAR_WHITE_THRESH = 240
DARK_LUMA_THRESH = 215

# Tick lane selection
LANE_STARTS = (0.015, 0.030, 0.045, 0.060, 0.075)
LANE_WIDTH_FRAC = 0.04
LANE_PAD_PX = 6
LANE_BAND_ROWS = 3
LANE_BLACK_FRAC = 0.22
LANE_MIN_RUN = 2
LANE_DEDUPE_PX = 10
LANE_WIN_TICKS = 8

# Tick validation
DY_MIN = 10
DY_MAX = 90
SNAP_FRAC = 0.10
SNAP_MIN = 4
SNAP_MAX = 18
CHAIN_START_TOP_FRAC = 0.20
CHAIN_START_MAX = 8
MIN_CHAIN_TICKS = 6

# Global ladder extension
LADDER_MAX_STEPS = 120
LADDER_BOTTOM_MARGIN = 2
LADDER_SPAN_INSETS = (0.08, 0.13, 0.18)
LADDER_PEAK_BAND = 3
LADDER_PEAK_DARK_MIN = 0.14
LADDER_DIVIDER_RESEARCH_PX = 14
LADDER_STRIPE_HEIGHT = 22
LADDER_STRIPE_WIDTH = 9
LADDER_STRIPE_NONWHITE_MIN = 0.22
LADDER_STRIPE_DARK_MIN = 0.06
LADDER_MIN_DIVIDERS = 3
LADDER_RELAXED_MIN_DIVIDERS = 2
LADDER_RELAX_AFTER_STREAK = 5
LADDER_GATE_NONWHITE_MIN = 0.06
LADDER_GATE_DARK_MAX = 0.22
LADDER_GATE_MIN_DAYS = 3
LADDER_GATE_TRIM_PX = 10
LADDER_TERMINAL_FRAC = 0.7
LADDER_TERMINAL_MIN = 10
LADDER_TERMINAL_MAX = 28

# Day divider detection
DIVIDER_STRIPE_HEIGHT = 160
DIVIDER_STRIPE_WIDTH = 5
DIVIDER_ANCHOR_NONWHITE_MIN = 0.22
DIVIDER_MIN_ANCHOR_GAP = 50
DIVIDER_SEARCH_RADIUS = 40
DIVIDER_SEARCH_STEP = 2
DIVIDER_NONWHITE_MIN = 0.18
DIVIDER_DARK_WEIGHT = 0.25
DIVIDER_MAX_LINE_WIDTH = 8
DIVIDER_MERGE_PX = 4
DIVIDER_BAND_CENTER_FRAC = 0.40
DIVIDER_FRAME_GAP_FRAC = 0.5

# Slot bands
SLOT_LINE_DARK_FRAC = 0.12
SLOT_LINE_MAX_GROW = 6
SLOT_MIN_HEIGHT = 8

# Background calibration
BG_FRIDAY_BOTTOM_SLOTS = 8
BG_TOP_SLOTS = 3
BG_INSET_X = 8
BG_INSET_Y = 2
BG_MIN_WHITE = 0.70
BG_SAMPLES_PER_SLOT = 60
BG_TOL_BASE = 34
BG_TOL_MAD_GAIN = 2.5
BG_TOL_MIN = 34
BG_TOL_MAX = 60
BG_GLOBAL_TOL_BUMP = 10

# Cell classification
CELL_DAY_TRIM = 6
CELL_INSET_X = 8
CELL_INSET_Y = 2
WORK_COLOR = (213, 43, 255)
WORK_COLOR_TOL = 55
WORK_SAMPLES = 160
WORK_MIN_FRAC = 0.18
CELL_SAMPLES = 140
OCCUPIED_BUSY_FRAC = 0.50
BG_FREE_FRAC = 0.82
BG_SOFT_FREE_FRAC = 0.55
INK_SOFT_FREE_MAX = 0.12

# Spill recovery
SPILL_CENTER_FRAC = 0.5
SPILL_CENTER_NONWHITE_MAX = 0.10
SPILL_EDGE_PX = 4
SPILL_EDGE_NONWHITE_MIN = 0.25
SPILL_STRIPE_NONWHITE_MIN = 0.22

# Output
AVAILABILITY_VERSION = 1
STORE_VERSION = 1

# Concurrency
DEFAULT_MAX_CONCURRENCY = 4

# Debug artifacts
DEBUG_ENV = "SCHEDULE_DETECTOR_DEBUG"
DEBUG_DIR_ENV = "SCHEDULE_DETECTOR_DEBUG_DIR"
DEFAULT_DEBUG_DIR = "/tmp/schedule_detector"
