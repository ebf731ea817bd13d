"""
ErgoReach Configuration Management.
===================================

This module defines the tunable parameter space for the ErgoReach core.
The parameters are organized into an architectural "Layer Cake" model,
from the raw tracking input up to the ergonomic scoring rules.

! WARNING !
Changing the RULA layer changes the meaning of every logged score.
Changing the Amplification layer affects the "feel" of the virtual hand immediately.
"""

# --- CURVE PRESETS ---
# Each preset is an ordered list of (input, output) control points over
# input = fraction of max reach. Index order is the experiment condition order.
CURVE_PRESETS = [
    [(0.0, 0.0), (1.0, 1.0)],                     # 0 - Identity (no amplification)
    [(0.0, 0.0), (0.7, 0.7), (1.0, 1.0)],         # 1 - RNL baseline (knee at base key)
    [(0.0, 0.0), (0.6, 0.7), (1.0, 1.033)],       # 2 - RNL mild
    [(0.0, 0.0), (0.5, 0.7), (1.0, 1.067)],       # 3 - RNL medium
    [(0.0, 0.0), (0.4, 0.7), (1.0, 1.1)],         # 4 - RNL strong
    [(0.0, 0.0), (1.0, 1.5)],                     # 5 - Linear gain x1.5
]

# --- MASTER CONFIGURATION ---
CONFIG = {
    # =========================================================
    # LAYER 0: DIAGNOSTICS (Host Loop Logging)
    # =========================================================
    "LOG_LEVEL": "INFO",            # Name or number; DEBUG adds per-tick curve / RULA detail
    "LOG_FORMAT": "%(asctime)s.%(msecs)03d %(levelname)-7s [%(name)s] %(message)s",
    "LOG_DATEFMT": "%H:%M:%S",      # Millisecond stamps come from the format (one tick is ~11 ms)
    "LOG_FILE": None,               # Optional session log path, overwritten per run

    # =========================================================
    # LAYER 1: INPUT SIGNAL (Host Loop)
    # =========================================================
    "TARGET_HZ": 90,                # VR comfort cadence, one tick per rendered frame

    # =========================================================
    # LAYER 2: CALIBRATION (Comfort Point & Reach Boundary)
    # =========================================================
    "DEFAULT_MAX_REACH": 0.75,      # Metres, reported before any max-reach capture
    "REACH_RADIUS_SCALE": 1.0,      # Boundary radius = measured reach * scale
    "PROMPTS": {
        "inactive": "Begin calibration\nto amplify",
        "calibrate_comfort": "Confirm at\ncomfortable position",
        "calibrate_max": "Confirm at\nmax reach",
        "active": "",
    },

    # =========================================================
    # LAYER 3: AMPLIFICATION (Curve Physics)
    # =========================================================
    "GEOMETRY_EPSILON": 1e-9,       # Below this a length counts as zero
    "CURVE_SHAPE": "smooth",        # "linear" | "smooth" (Hermite, auto tangents)
    "CURVE_EXTRAPOLATION": "clamp", # "clamp" holds end values | "linear" follows end slope
    "CURVE_DEFAULT_PRESET": 1,      # Index into CURVE_PRESETS used at boot
    "CURVE_PRESETS": CURVE_PRESETS,
    "CURVE_BASE_KEY_TIME": 0.7,     # Knee position of the RNL curve at intensity 0
    "CURVE_KNEE_INDEX": 1,          # Control point moved by intensity changes
    "CURVE_INTENSITY_LIFT": 0.1 / 0.3,  # End-point lift per unit of intensity

    # =========================================================
    # LAYER 4: POSTURE SAMPLER (Joint Angles)
    # =========================================================
    "JOINT_SOURCE": "ik_model",     # "ik_model" | "skeletal" | "none"
    "CONTROLLER_ANGLE_OFFSET": 30.0,  # Neutral grip angle of the controller (deg)
    "CONTROLLER_OFFSETS": {
        "vive": 30.0,
        "oculus": 0.0,
    },
    "BODY_FLUSH_DROP": 1.0,         # Metres below the shoulder for the vertical reference

    # =========================================================
    # LAYER 5: RULA RULES (The Referee)
    # =========================================================
    "SHOULDER_LIMITS": (20.0, 45.0, 90.0),  # <20 -> 1, <45 -> 2, <90 -> 3, else 4
    "ELBOW_NEUTRAL_RANGE": (60.0, 100.0),   # Inclusive range for lower-arm bin 1
    "WRIST_LIMITS": {
        "left": (5.0, 15.0),        # <5 -> 1, <15 -> 2, else 3
        "right": (10.0, 15.0),      # <10 -> 1, <15 -> 2, else 3
    },
    "TRUNK_LIMITS": (0.0, 20.0, 60.0),  # <=0 -> 1, <=20 -> 2, <=60 -> 3, else 4
    "NECK_LIMITS": (10.0, 20.0),    # <0 -> 4, <10 -> 1, <20 -> 2, else 3
    "TRUNK_TWIST_LIMIT": 10.0,      # deg, +1 to trunk
    "TRUNK_SIDE_BEND_LIMIT": 10.0,  # deg, +1 to trunk
    "NECK_TWIST_LIMIT": 45.0,       # deg, +1 to neck
    "NECK_ROLL_LIMIT": 45.0,        # deg, +1 to neck
    "WRIST_TWIST_BIN": 1,           # Twist tracking not modeled
}
