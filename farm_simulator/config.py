# farm_simulator/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the farm
simulator. These values are used if they are not explicitly provided by the
user's configuration.

DO NOT MODIFY THIS FILE FOR A SPECIFIC DATASET.
Instead, pass a configuration dictionary to the FarmSimulation instance.
================================================================================
"""

# --- Geographic Domain ---
# Farmland in the O'Higgins Region, Chile. [min_lng, min_lat, max_lng, max_lat]
DEFAULT_BBOX = (-71.089, -34.665, -70.93, -34.56)
DEFAULT_CENTER = {"lat": -34.610, "lng": -71.01}
DEFAULT_ZOOM = 14

# --- Grid Resolution ---
# Moderate on purpose; every field tests every cell centroid.
DEFAULT_GRID_ROWS = 40
DEFAULT_GRID_COLS = 50

# --- Layers ---
LAYER_NAMES = ("acidity", "nitrogen", "stoniness", "weeds")

# One seed per surface so the layers do not look alike.
DEFAULT_LAYER_SEEDS = {
    "acidity": 12345,
    "nitrogen": 424242,
    "stoniness": 888888,
    "weeds": 987654,
}

# Physical ranges produced by the unit mappers (inclusive).
LAYER_RANGES = {
    "acidity": (4.5, 8.5),
    "nitrogen": (0, 240),
    "stoniness": (0, 30),
    "weeds": (0, 100),
}

# --- Surface Synthesis ---
# Lattice shapes are (width, height) in lattice points.
COARSE_LATTICE_SHAPE = (8, 6)
FINE_LATTICE_SHAPE = (16, 12)
COARSE_WEIGHT = 0.65
FINE_WEIGHT = 0.35
# Strength of the west-east / south-north gradient that mimics a slope.
TREND_STRENGTH = 0.1

# Linear-congruential constants used to derive the fine lattice seed.
LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223

# xorshift32 cannot leave the all-zero state.
ZERO_SEED_REPLACEMENT = 0x9E3779B9

# --- Fields (Voronoi paddocks) ---
DEFAULT_FIELD_COUNT = 22
DEFAULT_FIELD_SEED = 2024
# Polygons smaller than ~2 ha are boundary slivers.
MIN_FIELD_AREA_M2 = 20000.0
AREA_ELLIPSOID = "WGS84"
