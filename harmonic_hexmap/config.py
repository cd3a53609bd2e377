"""Configuration constants for Harmonic Hexmap."""

# =============================================================================
# Pitch Reference
# =============================================================================

# Frequency of pitch step 0 (the lattice origin) in Hz
# 261.63 Hz is middle C (C4)
BASE_FREQ = 261.63

# =============================================================================
# Tuning Presets
# =============================================================================

# EDO presets: (name, q_step, r_step, white keys)
# q_step / r_step are the pitch steps gained by one move along each axial
# direction of the hex lattice.
EDO_PRESETS = {
    12: ("12 TET", 2, 1, (0, 2, 4, 5, 7, 9, 11)),
    19: ("19 TET", 3, 2, (0, 3, 6, 8, 11, 14, 17)),
    31: ("31 TET", 5, 3, (0, 5, 10, 13, 18, 23, 28)),
    53: ("53 TET", 9, 4, (0, 9, 18, 22, 31, 40, 49)),
    72: ("72 TET", 12, 5, (0, 12, 24, 30, 42, 54, 66)),
}

DEFAULT_EDO = 12

# Lattice radius (cells from the center along any axis)
DEFAULT_RADIUS = 10

# =============================================================================
# Harmonic Analysis
# =============================================================================

# Complexity weight for the rational approximator (UI range 1-20)
DEFAULT_COMPLEXITY_WEIGHT = 10.0
COMPLEXITY_WEIGHT_MIN = 1.0
COMPLEXITY_WEIGHT_MAX = 20.0

# Complexity weight used by the linear chord view
ANNOTATION_COMPLEXITY_WEIGHT = 2.5

# Sensitivity slider (gain = sensitivity / 10)
DEFAULT_SENSITIVITY = 80
SENSITIVITY_MIN = 1
SENSITIVITY_MAX = 100

# Critical bandwidth scale (1.0 = Plomp-Levelt default)
DEFAULT_BANDWIDTH = 1.0
BANDWIDTH_MIN = 0.5
BANDWIDTH_MAX = 2.0

# Octaves covered by the harmonic lookup table
LUT_OCTAVE_SPAN = 4

# Largest denominator explored by the continued-fraction search
MAX_DENOMINATOR = 2000

# Convergents with n*d above this are noise and never considered
MAX_CANDIDATE_PRODUCT = 50000

# Cost added to ratios whose prime limit exceeds PENALTY_PRIME_LIMIT.
# The limit is taken over numerator and denominator both, so 32/23 is
# penalized even though 32 alone is 2-limit.
PENALTY_PRIME_LIMIT = 19
LIMIT_PENALTY = 15.0

# Match threshold = MATCH_THRESHOLD_BASE + weight * MATCH_THRESHOLD_SLOPE
MATCH_THRESHOLD_BASE = 40.0
MATCH_THRESHOLD_SLOPE = 10.0

# Sentinel values stored for intervals with no acceptable ratio
UNMATCHED_COMPLEXITY = 10.0
UNMATCHED_ERROR_CENTS = 100.0

# =============================================================================
# Roughness Model
# =============================================================================

# Reference fundamental for the roughness model (Hz)
ROUGHNESS_REFERENCE_FREQ = 261.63

# Number of partials per tone
ROUGHNESS_PARTIALS = 10

# Partial amplitude decay exponent (a_i = i^-ROLLOFF)
PARTIAL_ROLLOFF = 1.1

# =============================================================================
# Harmonic Strength Blend
# =============================================================================

# Weights for the log-domain "harmonic strength" blend
WEIGHT_CONSONANCE = 0.55  # Physical smoothness (Plomp-Levelt)
WEIGHT_CLARITY = 0.30     # Mathematical simplicity
WEIGHT_TUNING = 0.15      # Tuning accuracy

# Guard against ln(0)
BLEND_EPSILON = 1e-6

# clarity = exp(-CLARITY_DECAY * complexity)
CLARITY_DECAY = 0.15

# tuning = 1 - |error| / TUNING_TOLERANCE_CENTS
TUNING_TOLERANCE_CENTS = 20.0

# consonance = 1 / (1 + roughness * (CONSONANCE_SCALE / gain))
CONSONANCE_SCALE = 6.0

# =============================================================================
# Colors (RGB)
# =============================================================================

# Prime limit colors
LIMIT_COLORS = {
    1: (255, 255, 255),   # Octave (White)
    3: (120, 220, 120),   # Fifths (Green)
    5: (255, 200, 90),    # Major thirds (Yellow)
    7: (255, 120, 90),    # Harmonic seventh (Coral)
    11: (180, 100, 255),  # Undecimal (Purple)
    13: (90, 150, 255),   # Tridecimal (Blue)
    17: (120, 120, 120),  # Complex / noise (Gray)
}

# Limits above this collapse to COMPLEX_LIMIT_COLOR
MAX_COLORED_LIMIT = 13
COMPLEX_LIMIT_COLOR = (180, 180, 180)

# Fallback for limits missing from LIMIT_COLORS
UNKNOWN_LIMIT_COLOR = (150, 150, 150)

# Fallback tint for unmatched or filtered intervals
NOISE_COLOR = (60, 60, 60)

# Heatmap background
BLACK = (0, 0, 0)

# Limit buckets offered as filters (17 stands for "above 13")
FILTER_LIMITS = (1, 3, 5, 7, 11, 13, 17)

# =============================================================================
# Chord Slots
# =============================================================================

# Number of independent chord memories
CHORD_SLOTS = 10

# =============================================================================
# Playback
# =============================================================================

# Delay between notes of a strummed chord (seconds)
STRUM_SPACING = 0.03

# Delay between arpeggio notes (seconds)
ARPEGGIO_STEP = 0.25

# Length of a plucked note before it is released (seconds)
PLUCK_DURATION = 4.0

# Velocity for plucks triggered from the lattice (0.0-1.0)
PLUCK_VELOCITY = 0.5

# Maximum simultaneous voices
MAX_VOICES = 64

# =============================================================================
# MIDI Configuration
# =============================================================================

# Pattern to match MIDI input port name (case-insensitive substring match)
# Set to None to use every available port
MIDI_PORT_PATTERN = None

# MPE pitch bend range in semitones
PITCH_BEND_RANGE = 48

# CC for complexity weight (maps 0-127 to COMPLEXITY_WEIGHT_MIN-MAX)
COMPLEXITY_CC = 74

# CC for sensitivity (maps 0-127 to SENSITIVITY_MIN-MAX)
SENSITIVITY_CC = 71

# CC for bandwidth scale (maps 0-127 to BANDWIDTH_MIN-MAX)
BANDWIDTH_CC = 72

# CC that clears the current chord slot (value >= 64)
CLEAR_SLOT_CC = 123

# Program change selects chord slot (program % CHORD_SLOTS + 1)

# =============================================================================
# OSC Configuration (Surge XT)
# =============================================================================

OSC_HOST = "127.0.0.1"
OSC_PORT = 53280

# =============================================================================
# Performance
# =============================================================================

# MIDI polling interval (seconds)
MIDI_POLL_INTERVAL = 0.001
