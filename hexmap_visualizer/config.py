"""Configuration for the Hexmap Visualizer."""

# Window settings
WINDOW_WIDTH = 1280
WINDOW_HEIGHT = 800
WINDOW_TITLE = "Harmonic Hexmap"
FPS = 60

# Hex layout
HEX_SIZE = 30  # Center-to-corner distance in pixels
HEX_SIZE_MIN = 10
HEX_SIZE_MAX = 150
ZOOM_IN_FACTOR = 1.05
ZOOM_OUT_FACTOR = 0.95
CLICK_MOVE_TOLERANCE = 10  # Pixels a press may move and still count as a click

# Colors (RGB)
COLOR_BACKGROUND = (15, 15, 25)
COLOR_CELL_ACTIVE = (255, 255, 255)
COLOR_CELL_WHITE_KEY = (100, 100, 120)
COLOR_CELL_BLACK_KEY = (50, 50, 60)
COLOR_CELL_STROKE = (85, 85, 85)
COLOR_HOVER = (52, 152, 219)
HOVER_MIX = 0.5
COLOR_TEXT_ACTIVE = (255, 51, 51)
COLOR_TEXT_DARK = (34, 34, 34)
COLOR_TEXT_LIGHT = (204, 204, 204)
COLOR_TEXT_MUTED = (136, 136, 136)
COLOR_ROOT_MARK = (231, 76, 60)
COLOR_TEXT = (200, 200, 210)
COLOR_PANEL = (25, 25, 35)

# Heatmap colors brighter than this get dark text
TEXT_BRIGHTNESS_THRESHOLD = 100

# Linear cents view
LINEAR_VIEW_HEIGHT = 140
LINEAR_VIEW_MARGIN = 30
REFERENCE_MAX_LIMIT = 13
REFERENCE_MAX_DENOMINATOR = 32
COLOR_AXIS = (85, 85, 85)
COLOR_EDO_TICK = (68, 68, 68)
COLOR_ERROR_LARGE = (231, 76, 60)
COLOR_ERROR_SMALL = (170, 170, 170)
LARGE_ERROR_CENTS = 15.0

# Status bar
STATUS_BAR_HEIGHT = 30

# Legend labels per filter limit
LEGEND_LABELS = {
    1: "Octave",
    3: "3 (5th)",
    5: "5 (3rd)",
    7: "7 (Harm)",
    11: "11 (Neutral)",
    13: "13",
    17: ">13",
}

# Keyboard steps
COMPLEXITY_STEP = 1.0
SENSITIVITY_STEP = 5
BANDWIDTH_STEP = 0.1
